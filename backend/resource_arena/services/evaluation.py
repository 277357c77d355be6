"""Evaluation orchestrator: score every resource of a match exactly once.

Flow: existence check -> resolve active model -> load prompt + resources ->
one LLM call -> parse per-resource verdicts -> second existence check ->
insert rows and write matches.score_ai in a single transaction.

The pre-checks only narrow the duplicate race; the unique constraint on
ai_evaluations(match_id, resource_id) is what closes it.
"""
import json
import math
import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from resource_arena.models import AiEvaluation, AiModel, AppConfig, Match, Prompt, SubmittedResource
from resource_arena.services.errors import (
    AlreadyEvaluatedError,
    EvaluationError,
    EvaluationParseError,
    NotFoundError,
)
from resource_arena.services import llm

logger = logging.getLogger(__name__)

COMMUNITY_WINNER_KEY = "community_winner_model"
DEFAULT_MODEL_KEY = "default_ai_model"


@dataclass
class ResourceVerdict:
    resource_id: int
    score: int
    explanation: str


def build_evaluation_prompt(description: str, resources: Sequence[SubmittedResource]) -> str:
    urls = ", ".join(r.url for r in resources)
    ids = ", ".join(str(r.id) for r in resources)
    return (
        "Evaluate the resources, assigning each a score from 1 to 10 and an explanation "
        "of at most 200 characters, based on technical accuracy, complexity, level of detail, "
        "practical usefulness, source quality, clarity of exposition and how well they "
        "complement each other. Repeated resources are not allowed. "
        f"Problem: {description}. "
        f"Resources: {urls}. "
        f"Resource IDs: {ids}. "
        "Return **only a valid JSON object on a single line**, with no extra formatting, "
        "no explanations, no line breaks and no code blocks. "
        'Example: {"<resource_id>": {"score": x, "explanation": "y"}}'
    )


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_evaluation_response(text: str, resources: Sequence[SubmittedResource]) -> list[ResourceVerdict]:
    """Map model output to one verdict per resource, in resource order.

    Every resource id must be present; extra keys are ignored.
    """
    try:
        data = json.loads(_strip_code_fence(text))
    except (json.JSONDecodeError, TypeError) as e:
        logger.error("Model returned invalid JSON: %s", (text or "")[:500])
        raise EvaluationParseError(f"Invalid JSON in model response: {e}") from e

    if not isinstance(data, dict):
        raise EvaluationParseError("Model response is not a JSON object")

    verdicts = []
    for resource in resources:
        entry = data.get(str(resource.id))
        if not isinstance(entry, dict):
            raise EvaluationParseError(f"Model response has no entry for resource {resource.id}")

        score = entry.get("score")
        if (
            isinstance(score, bool)
            or not isinstance(score, (int, float))
            or (isinstance(score, float) and not math.isfinite(score))
            or int(score) != score
        ):
            raise EvaluationParseError(f"Invalid score for resource {resource.id}: {score!r}")
        explanation = entry.get("explanation")
        if not isinstance(explanation, str):
            raise EvaluationParseError(f"Invalid explanation for resource {resource.id}")

        verdicts.append(ResourceVerdict(resource_id=resource.id, score=int(score), explanation=explanation))
    return verdicts


async def has_evaluations(db: AsyncSession, match_id: int) -> bool:
    result = await db.execute(
        select(AiEvaluation.id).where(AiEvaluation.match_id == match_id).limit(1)
    )
    return result.first() is not None


async def resolve_active_model(db: AsyncSession) -> AiModel:
    """community_winner_model wins over default_ai_model."""
    result = await db.execute(
        select(AppConfig).where(AppConfig.key.in_([COMMUNITY_WINNER_KEY, DEFAULT_MODEL_KEY]))
    )
    config = {row.key: row.value for row in result.scalars().all()}
    model_id = config.get(COMMUNITY_WINNER_KEY) or config.get(DEFAULT_MODEL_KEY)
    if not model_id:
        raise EvaluationError("No active AI model configured")

    try:
        model = await db.get(AiModel, int(model_id))
    except ValueError:
        raise EvaluationError(f"Invalid AI model id in config: {model_id}")
    if not model:
        raise EvaluationError(f"Configured AI model {model_id} not found")
    return model


async def evaluate_match(db: AsyncSession, match_id: int) -> int:
    """Score all resources of a match and persist the result. Returns the total."""
    if await has_evaluations(db, match_id):
        raise AlreadyEvaluatedError(match_id)

    model = await resolve_active_model(db)

    match = await db.get(Match, match_id)
    if not match:
        raise NotFoundError("Match not found")
    prompt = await db.get(Prompt, match.prompt_id)
    result = await db.execute(
        select(SubmittedResource)
        .where(SubmittedResource.match_id == match_id)
        .order_by(SubmittedResource.id)
    )
    resources = result.scalars().all()
    if not prompt or not resources:
        raise NotFoundError("Incomplete match data: prompt or resources missing")

    logger.info(
        "Evaluating match %s (%d resources) with %s/%s",
        match_id, len(resources), model.provider, model.name,
    )
    response_text = await llm.generate_with_model(
        model, build_evaluation_prompt(prompt.description, resources)
    )
    verdicts = parse_evaluation_response(response_text, resources)

    if await has_evaluations(db, match_id):
        raise AlreadyEvaluatedError(match_id)

    total = sum(v.score for v in verdicts)
    db.add_all([
        AiEvaluation(
            match_id=match_id,
            resource_id=v.resource_id,
            model_id=model.id,
            score=v.score,
            explanation=v.explanation,
        )
        for v in verdicts
    ])
    match.score_ai = total
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Concurrent evaluation detected for match %s; rolled back", match_id)
        raise AlreadyEvaluatedError(match_id)

    logger.info("Match %s evaluated: total=%d", match_id, total)
    return total
