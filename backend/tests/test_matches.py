"""Tests for the match lifecycle endpoints."""
import asyncio

from sqlalchemy import func, select

from conftest import auth_header, create_match
from resource_arena.models import AiEvaluation, Match, SubmittedResource, User


async def _load_match(session_factory, match_id):
    async with session_factory() as s:
        match = await s.get(Match, match_id)
        urls = (await s.execute(
            select(SubmittedResource.url)
            .where(SubmittedResource.match_id == match_id)
            .order_by(SubmittedResource.id)
        )).scalars().all()
        return match, urls


async def test_anonymous_create_records_prompt_and_urls(client, session_factory, game):
    prompt_id = game["prompts"][1].id

    res = await client.post("/api/matches", json={
        "promptId": prompt_id,
        "resources": ["http://a", "  http://b  ", ""],
    })

    assert res.status_code == 200
    match_id = res.json()["matchId"]
    match, urls = await _load_match(session_factory, match_id)
    assert match.prompt_id == prompt_id
    assert match.is_anonymous is True
    assert match.user_id is None
    assert match.score_ai is None
    assert urls == ["http://a", "http://b"]


async def test_authenticated_create_is_attributed_and_syncs_username(client, session_factory, game):
    res = await client.post(
        "/api/matches",
        json={"promptId": game["prompts"][1].id, "resources": ["http://a"]},
        headers=auth_header("user_1", "ada"),
    )

    assert res.status_code == 200
    match, _ = await _load_match(session_factory, res.json()["matchId"])
    assert match.user_id == "user_1"
    assert match.is_anonymous is False
    async with session_factory() as s:
        assert (await s.get(User, "user_1")).username == "ada"


async def test_returning_user_is_renamed_not_duplicated(client, db, session_factory, game):
    db.add(User(id="user_1", username="old-name"))
    await db.commit()

    res = await client.post(
        "/api/matches",
        json={"promptId": game["prompts"][1].id, "resources": ["http://a"]},
        headers=auth_header("user_1", "new-name"),
    )

    assert res.status_code == 200
    async with session_factory() as s:
        assert (await s.execute(select(func.count(User.id)))).scalar() == 1
        assert (await s.get(User, "user_1")).username == "new-name"


async def test_concurrent_first_matches_from_new_user(client, session_factory, game):
    payload = {"promptId": game["prompts"][1].id, "resources": ["http://a"]}
    headers = auth_header("user_new", "grace")

    first, second = await asyncio.gather(
        client.post("/api/matches", json=payload, headers=headers),
        client.post("/api/matches", json=payload, headers=headers),
    )

    assert (first.status_code, second.status_code) == (200, 200)
    async with session_factory() as s:
        assert (await s.execute(select(func.count(User.id)))).scalar() == 1
        assert (await s.execute(
            select(func.count(Match.id)).where(Match.user_id == "user_new")
        )).scalar() == 2


async def test_create_validates_resource_count(client, game):
    prompt_id = game["prompts"][1].id

    too_many = await client.post("/api/matches", json={
        "promptId": prompt_id, "resources": [f"http://{i}" for i in range(5)],
    })
    empty = await client.post("/api/matches", json={"promptId": prompt_id, "resources": []})
    blank = await client.post("/api/matches", json={"promptId": prompt_id, "resources": ["  ", ""]})
    no_prompt = await client.post("/api/matches", json={"resources": ["http://a"]})

    assert too_many.status_code == 400
    assert empty.status_code == 400
    assert blank.status_code == 400
    assert no_prompt.status_code == 400
    assert "error" in empty.json()


async def test_create_with_unknown_prompt_is_not_found(client, game):
    res = await client.post("/api/matches", json={"promptId": 4242, "resources": ["http://a"]})

    assert res.status_code == 404


async def test_invalid_token_is_rejected(client, game):
    res = await client.post(
        "/api/matches",
        json={"promptId": game["prompts"][1].id, "resources": ["http://a"]},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert res.status_code == 401


async def test_associate_flips_only_owner_fields(client, db, session_factory, game):
    match = await create_match(db, game["prompts"][2].id, ["http://a"], score_ai=11)
    before, _ = await _load_match(session_factory, match.id)

    res = await client.post("/api/matches", json={"associateUserId": "user_9", "matchId": match.id})

    assert res.status_code == 200
    assert res.json() == {"ok": True}
    after, urls = await _load_match(session_factory, match.id)
    assert after.user_id == "user_9"
    assert after.is_anonymous is False
    assert after.prompt_id == before.prompt_id
    assert after.score_ai == before.score_ai == 11
    assert after.started_at == before.started_at
    assert after.score_community == before.score_community
    assert urls == ["http://a"]


async def test_associate_unknown_match_is_not_found(client, game):
    res = await client.post("/api/matches", json={"associateUserId": "user_9", "matchId": 777})

    assert res.status_code == 404


async def test_history_requires_authentication(client, game):
    res = await client.get("/api/matches")

    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}


async def test_history_lists_only_callers_matches(client, db, game):
    await create_match(db, game["prompts"][1].id, ["http://a"], user_id="user_1", score_ai=9)
    await create_match(db, game["prompts"][2].id, ["http://b"], user_id="user_1")
    await create_match(db, game["prompts"][1].id, ["http://c"], user_id="user_2", score_ai=3)

    res = await client.get("/api/matches", headers=auth_header("user_1"))

    assert res.status_code == 200
    matches = res.json()["matches"]
    assert len(matches) == 2
    assert {m["prompt"]["title"] for m in matches} == {"Level one", "Level two"}
    assert {m["scoreAi"] for m in matches} == {9, None}


async def test_match_detail_includes_evaluations_with_urls(client, db, game):
    match = await create_match(db, game["prompts"][1].id, ["http://a", "http://b"])
    r1, r2 = [r.id for r in match.resources]
    db.add_all([
        AiEvaluation(match_id=match.id, resource_id=r1, model_id=game["default_model"].id, score=4, explanation="x"),
        AiEvaluation(match_id=match.id, resource_id=r2, model_id=game["default_model"].id, score=6, explanation="y"),
    ])
    await db.commit()

    res = await client.get(f"/api/matches/{match.id}")

    assert res.status_code == 200
    body = res.json()
    assert body["isAnonymous"] is True
    assert body["prompt"]["level"] == 1
    assert [r["url"] for r in body["resources"]] == ["http://a", "http://b"]
    assert [(e["url"], e["score"]) for e in body["evaluations"]] == [("http://a", 4), ("http://b", 6)]
    # score_ai not written yet, so the total falls back to the evaluation sum
    assert body["total"] == 10


async def test_match_detail_unknown_match(client, game):
    res = await client.get("/api/matches/31337")

    assert res.status_code == 404
