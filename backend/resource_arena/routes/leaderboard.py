"""Leaderboard API route."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.database import get_db
from resource_arena.schemas.leaderboard import LeaderboardResponse
from resource_arena.services.leaderboard import build_leaderboard

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    include_match_id: Optional[int] = Query(None, alias="includeMatchId"),
    db: AsyncSession = Depends(get_db),
):
    """Total score per user, highest first."""
    return {"leaderboard": await build_leaderboard(db, include_match_id)}
