"""Seed the model catalog, active-model config and starter prompts on startup.

Idempotent: checks for existing rows before inserting.
"""
import logging
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.models.ai_model import AiModel, AppConfig
from resource_arena.models.prompt import Prompt
from resource_arena.services.evaluation import DEFAULT_MODEL_KEY

logger = logging.getLogger(__name__)

DEFAULT_AI_MODELS = [
    {"provider": "openai", "name": "gpt-4o-mini"},
    {"provider": "anthropic", "name": "claude-3-5-haiku-latest"},
    {"provider": "gemini", "name": "gemini-2.0-flash"},
    {"provider": "deepseek", "name": "deepseek-chat"},
    {"provider": "grok", "name": "grok-2-latest"},
]

# The first catalog entry becomes default_ai_model on a fresh database
DEFAULT_ACTIVE_PROVIDER = "openai"

DEFAULT_PROMPTS = [
    {
        "level": 1,
        "title": "First steps with Git",
        "description": (
            "A friend has never used version control. Find resources that take them from "
            "zero to committing, branching and opening their first pull request."
        ),
    },
    {
        "level": 2,
        "title": "Understanding HTTP",
        "description": (
            "You need to explain how a browser talks to a web server: requests, responses, "
            "status codes, headers and caching. Find the clearest references."
        ),
    },
    {
        "level": 3,
        "title": "SQL beyond SELECT *",
        "description": (
            "A junior analyst writes every query as SELECT * with filters in a spreadsheet. "
            "Find resources that teach joins, aggregation, window functions and indexes."
        ),
    },
    {
        "level": 4,
        "title": "Concurrency without tears",
        "description": (
            "Your team keeps shipping race conditions. Find resources that explain threads, "
            "async I/O, locks and common concurrency bugs with practical examples."
        ),
    },
    {
        "level": 5,
        "title": "Designing for failure",
        "description": (
            "You are about to run a service across several machines. Find resources on "
            "timeouts, retries, idempotency, consistency models and graceful degradation."
        ),
    },
]


async def seed_ai_models(db: AsyncSession) -> None:
    count = (await db.execute(select(func.count(AiModel.id)))).scalar() or 0
    if count:
        logger.info("AI model catalog already seeded (%d rows)", count)
        return
    db.add_all([AiModel(**row) for row in DEFAULT_AI_MODELS])
    await db.flush()
    logger.info("Seeded %d AI models", len(DEFAULT_AI_MODELS))


async def seed_active_model(db: AsyncSession) -> None:
    existing = await db.get(AppConfig, DEFAULT_MODEL_KEY)
    if existing:
        return
    result = await db.execute(
        select(AiModel).where(AiModel.provider == DEFAULT_ACTIVE_PROVIDER).order_by(AiModel.id).limit(1)
    )
    model = result.scalar_one_or_none()
    if not model:
        logger.warning("No %s model in catalog; %s left unset", DEFAULT_ACTIVE_PROVIDER, DEFAULT_MODEL_KEY)
        return
    db.add(AppConfig(key=DEFAULT_MODEL_KEY, value=str(model.id)))
    logger.info("Set %s to model %s (%s)", DEFAULT_MODEL_KEY, model.id, model.name)


async def seed_prompts(db: AsyncSession) -> None:
    count = (await db.execute(select(func.count(Prompt.id)))).scalar() or 0
    if count:
        logger.info("Prompts already seeded (%d rows)", count)
        return
    db.add_all([Prompt(**row) for row in DEFAULT_PROMPTS])
    logger.info("Seeded %d prompts", len(DEFAULT_PROMPTS))


async def seed_all_defaults(db: AsyncSession) -> None:
    await seed_ai_models(db)
    await seed_active_model(db)
    await seed_prompts(db)
    await db.commit()
