"""Evaluation endpoint: run the AI judge over a match's resources."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.database import get_db
from resource_arena.schemas.evaluation import EvaluateRequest, EvaluateResponse
from resource_arena.services.errors import ArenaError
from resource_arena.services.evaluation import evaluate_match
from resource_arena.services.llm import LLMError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/evaluate", tags=["evaluate"])


@router.post("", response_model=EvaluateResponse)
async def evaluate(
    body: EvaluateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Score every resource of a match once and return the total."""
    if not body.match_id:
        raise HTTPException(status_code=400, detail="matchId required")

    try:
        total = await evaluate_match(db, body.match_id)
    except ArenaError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except LLMError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Unexpected error evaluating match %s", body.match_id)
        raise HTTPException(status_code=500, detail="Failed to evaluate resources")

    return EvaluateResponse(total=total)
