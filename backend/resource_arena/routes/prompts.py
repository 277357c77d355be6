"""Prompt selection API route."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.auth import CallerIdentity, get_caller
from resource_arena.database import get_db
from resource_arena.models import Match, Prompt
from resource_arena.schemas.prompt import NextPromptResponse

router = APIRouter(prefix="/api/prompts", tags=["prompts"])

ALL_DONE_MESSAGE = "You have completed all the challenges!"


@router.get("/next", response_model=NextPromptResponse, response_model_exclude_none=True)
async def next_prompt(
    caller: Optional[CallerIdentity] = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Lowest-level prompt the caller has not played yet.

    Anonymous callers always get the lowest-level prompt.
    """
    query = select(Prompt).order_by(Prompt.level, Prompt.id).limit(1)
    if caller is not None:
        played = select(Match.prompt_id).where(Match.user_id == caller.user_id)
        query = query.where(Prompt.id.not_in(played))

    result = await db.execute(query)
    prompt = result.scalar_one_or_none()
    if prompt:
        return {"prompt": _to_response(prompt)}

    if caller is not None:
        has_any = (await db.execute(select(Prompt.id).limit(1))).first()
        if has_any:
            return {"done": True, "message": ALL_DONE_MESSAGE}
    raise HTTPException(status_code=404, detail="No prompts available")


def _to_response(prompt: Prompt) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": prompt.id,
        "title": prompt.title,
        "description": prompt.description,
        "level": prompt.level,
    }
