"""Match lifecycle API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.auth import CallerIdentity, get_caller, require_caller
from resource_arena.database import get_db
from resource_arena.schemas.match import (
    MatchCreatedResponse,
    MatchDetailResponse,
    MatchHistoryResponse,
    MatchRequest,
    OkResponse,
)
from resource_arena.services import matches as match_service
from resource_arena.services.errors import ArenaError

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.post("", response_model=MatchCreatedResponse | OkResponse)
async def create_or_associate_match(
    body: MatchRequest,
    caller: Optional[CallerIdentity] = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Create a match, or attribute an anonymous one when associateUserId is sent."""
    try:
        if body.associate_user_id:
            await match_service.associate_match(db, body.match_id, body.associate_user_id)
            return OkResponse(ok=True)

        match = await match_service.create_match(db, body.prompt_id, body.resources, caller)
    except ArenaError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return MatchCreatedResponse(match_id=match.id)


@router.get("", response_model=MatchHistoryResponse)
async def list_my_matches(
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    """The caller's match history, newest first."""
    return {"matches": await match_service.list_user_matches(db, caller.user_id)}


@router.get("/{match_id}", response_model=MatchDetailResponse)
async def get_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Match detail with per-resource evaluations for the result page."""
    try:
        return await match_service.get_match_detail(db, match_id)
    except ArenaError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
