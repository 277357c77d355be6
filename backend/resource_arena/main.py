"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from resource_arena.config import settings
from resource_arena.database import engine, get_db
from resource_arena.models import Base

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed defaults on startup."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.SEED_DEFAULTS:
        from resource_arena.services.seed_defaults import seed_all_defaults
        from resource_arena.database import async_session
        async with async_session() as session:
            await seed_all_defaults(session)

    yield

    # Cleanup
    await engine.dispose()


app = FastAPI(
    title="Resource Arena API",
    version="1.0.0",
    description="Find the best learning resources for a challenge; an AI judge scores them.",
    lifespan=lifespan,
)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Errors are rendered as {"error": message} for every endpoint
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        {"error": f"{location}: {message}" if location else message},
        status_code=400,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


@app.get("/api/health")
async def health_check():
    """Verify API and database connectivity."""
    try:
        async for db in get_db():
            await db.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        return {"status": "error", "database": str(e)}


# Register routers
from resource_arena.routes.evaluate import router as evaluate_router
from resource_arena.routes.leaderboard import router as leaderboard_router
from resource_arena.routes.matches import router as matches_router
from resource_arena.routes.prompts import router as prompts_router
from resource_arena.routes.pages import router as pages_router
app.include_router(evaluate_router)
app.include_router(leaderboard_router)
app.include_router(matches_router)
app.include_router(prompts_router)
app.include_router(pages_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("resource_arena.main:app", host="0.0.0.0", port=settings.API_PORT)
