"""Global leaderboard: total score_ai per user across attributed matches."""
from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.models import Match, User

ANONYMOUS_NAME = "Anonymous"


async def build_leaderboard(db: AsyncSession, include_match_id: Optional[int] = None) -> list[dict]:
    """Sum scores per user id, highest first.

    include_match_id lets a just-played anonymous match show up with its
    own rank; it is keyed by match so it never merges into another user.
    """
    qualifies = and_(Match.user_id.isnot(None), Match.is_anonymous.is_(False))
    if include_match_id is not None:
        qualifies = or_(qualifies, Match.id == include_match_id)

    result = await db.execute(
        select(Match.id, Match.user_id, Match.score_ai, User.username)
        .outerjoin(User, User.id == Match.user_id)
        .where(qualifies)
    )

    totals: dict[str, dict] = {}
    for match_id, user_id, score_ai, username in result.all():
        key = user_id if user_id is not None else f"match:{match_id}"
        entry = totals.setdefault(key, {"username": username or ANONYMOUS_NAME, "score": 0})
        entry["score"] += score_ai or 0

    return sorted(totals.values(), key=lambda e: (-e["score"], e["username"]))
