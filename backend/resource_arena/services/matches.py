"""Match lifecycle: create a play session, claim an anonymous one, read history."""
import logging
from typing import Optional, Sequence

from sqlalchemy import desc, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.auth import CallerIdentity
from resource_arena.models import AiEvaluation, Match, Prompt, SubmittedResource, User
from resource_arena.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_RESOURCES = 4


def clean_resource_urls(urls: Optional[Sequence[str]]) -> list[str]:
    """Drop blank entries and enforce the 1..4 URL rule."""
    cleaned = [u.strip() for u in (urls or []) if isinstance(u, str) and u.strip()]
    if not cleaned:
        raise ValidationError("Missing promptId or resources")
    if len(cleaned) > MAX_RESOURCES:
        raise ValidationError(f"At most {MAX_RESOURCES} resources may be submitted")
    return cleaned


async def _sync_user(db: AsyncSession, caller: CallerIdentity) -> None:
    """Insert or rename the caller's user row in one statement."""
    if not caller.username:
        return
    insert = pg_insert if db.get_bind().dialect.name == "postgresql" else sqlite_insert
    stmt = insert(User).values(id=caller.user_id, username=caller.username)
    stmt = stmt.on_conflict_do_update(
        index_elements=[User.id],
        set_={"username": stmt.excluded.username},
    )
    await db.execute(stmt)


async def create_match(
    db: AsyncSession, prompt_id: Optional[int], urls: Optional[Sequence[str]],
    caller: Optional[CallerIdentity],
) -> Match:
    if not prompt_id:
        raise ValidationError("Missing promptId or resources")
    cleaned = clean_resource_urls(urls)

    prompt = await db.get(Prompt, prompt_id)
    if not prompt:
        raise NotFoundError("Prompt not found")

    if caller is not None:
        await _sync_user(db, caller)

    match = Match(
        user_id=caller.user_id if caller else None,
        prompt_id=prompt_id,
        is_anonymous=caller is None,
        resources=[SubmittedResource(url=url) for url in cleaned],
    )
    db.add(match)
    await db.commit()
    await db.refresh(match)
    logger.info(
        "Created match %s for prompt %s (%d resources, anonymous=%s)",
        match.id, prompt_id, len(cleaned), match.is_anonymous,
    )
    return match


async def associate_match(db: AsyncSession, match_id: Optional[int], user_id: Optional[str]) -> Match:
    """Attribute a match to a user. Ids are trusted as given by the caller."""
    if not match_id or not user_id:
        raise ValidationError("Missing matchId or associateUserId")
    match = await db.get(Match, match_id)
    if not match:
        raise NotFoundError("Match not found")
    match.user_id = user_id
    match.is_anonymous = False
    await db.commit()
    logger.info("Match %s associated with user %s", match_id, user_id)
    return match


async def list_user_matches(db: AsyncSession, user_id: str) -> list[dict]:
    result = await db.execute(
        select(Match, Prompt)
        .join(Prompt, Match.prompt_id == Prompt.id)
        .where(Match.user_id == user_id)
        .order_by(desc(Match.started_at), desc(Match.id))
    )
    return [
        {
            "match_id": match.id,
            "started_at": match.started_at,
            "score_ai": match.score_ai,
            "prompt": {"level": prompt.level, "title": prompt.title},
        }
        for match, prompt in result.all()
    ]


async def get_match_detail(db: AsyncSession, match_id: int) -> dict:
    match = await db.get(Match, match_id)
    if not match:
        raise NotFoundError("Match not found")
    prompt = await db.get(Prompt, match.prompt_id)

    resources = (await db.execute(
        select(SubmittedResource)
        .where(SubmittedResource.match_id == match_id)
        .order_by(SubmittedResource.id)
    )).scalars().all()
    rows = (await db.execute(
        select(AiEvaluation, SubmittedResource.url)
        .join(SubmittedResource, AiEvaluation.resource_id == SubmittedResource.id)
        .where(AiEvaluation.match_id == match_id)
        .order_by(AiEvaluation.id)
    )).all()

    evaluations = [
        {"id": ev.id, "url": url, "score": ev.score, "explanation": ev.explanation}
        for ev, url in rows
    ]
    total = match.score_ai
    if total is None and evaluations:
        total = sum(e["score"] for e in evaluations)

    return {
        "match_id": match.id,
        "is_anonymous": match.is_anonymous,
        "started_at": match.started_at,
        "prompt": {
            "id": prompt.id, "title": prompt.title,
            "description": prompt.description, "level": prompt.level,
        } if prompt else None,
        "resources": [{"id": r.id, "url": r.url} for r in resources],
        "evaluations": evaluations,
        "total": total,
    }
