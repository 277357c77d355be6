"""Tests for startup seeding of the model catalog and prompt ladder."""
from sqlalchemy import func, select

from resource_arena.models import AiModel, AppConfig, Prompt
from resource_arena.services.evaluation import DEFAULT_MODEL_KEY
from resource_arena.services.seed_defaults import (
    DEFAULT_AI_MODELS,
    DEFAULT_PROMPTS,
    seed_all_defaults,
)


async def _count(db, column):
    return (await db.execute(select(func.count(column)))).scalar()


async def test_seeding_populates_catalog_prompts_and_active_model(db):
    await seed_all_defaults(db)

    assert await _count(db, AiModel.id) == len(DEFAULT_AI_MODELS)
    assert await _count(db, Prompt.id) == len(DEFAULT_PROMPTS)
    config = await db.get(AppConfig, DEFAULT_MODEL_KEY)
    active = await db.get(AiModel, int(config.value))
    assert active.provider == "openai"


async def test_seeding_twice_inserts_nothing_new(db):
    await seed_all_defaults(db)
    await seed_all_defaults(db)

    assert await _count(db, AiModel.id) == len(DEFAULT_AI_MODELS)
    assert await _count(db, Prompt.id) == len(DEFAULT_PROMPTS)
    assert await _count(db, AppConfig.key) == 1


async def test_existing_active_model_is_kept(db, game):
    await seed_all_defaults(db)

    config = await db.get(AppConfig, DEFAULT_MODEL_KEY)
    assert config.value == str(game["default_model"].id)
    # Catalog and prompts already had rows
    assert await _count(db, AiModel.id) == 2
    assert await _count(db, Prompt.id) == 3
