"""Tests for GET /api/leaderboard."""
from conftest import create_match
from resource_arena.models import User


async def test_totals_per_user_ordered_by_score(client, db, game):
    db.add_all([User(id="u1", username="ada"), User(id="u2", username="linus")])
    await db.commit()
    p1, p2 = game["prompts"][1].id, game["prompts"][2].id
    await create_match(db, p1, ["http://a"], user_id="u1", score_ai=5)
    await create_match(db, p2, ["http://a"], user_id="u2", score_ai=12)
    await create_match(db, p2, ["http://a"], user_id="u1", score_ai=9)
    # Not yet evaluated: counts as zero
    await create_match(db, p1, ["http://a"], user_id="u2")

    res = await client.get("/api/leaderboard")

    assert res.status_code == 200
    assert res.json() == {"leaderboard": [
        {"username": "ada", "score": 14},
        {"username": "linus", "score": 12},
    ]}


async def test_anonymous_matches_are_excluded_by_default(client, db, game):
    await create_match(db, game["prompts"][1].id, ["http://a"], score_ai=40)
    await create_match(db, game["prompts"][1].id, ["http://a"], user_id="u1", score_ai=3)

    res = await client.get("/api/leaderboard")

    assert res.json()["leaderboard"] == [{"username": "Anonymous", "score": 3}]


async def test_include_match_id_adds_one_anonymous_match(client, db, game):
    db.add(User(id="u1", username="ada"))
    await db.commit()
    await create_match(db, game["prompts"][1].id, ["http://a"], user_id="u1", score_ai=10)
    mine = await create_match(db, game["prompts"][1].id, ["http://a"], score_ai=15)
    await create_match(db, game["prompts"][1].id, ["http://a"], score_ai=30)

    res = await client.get(f"/api/leaderboard?includeMatchId={mine.id}")

    assert res.json()["leaderboard"] == [
        {"username": "Anonymous", "score": 15},
        {"username": "ada", "score": 10},
    ]


async def test_users_sharing_a_username_are_not_merged(client, db, game):
    db.add_all([User(id="u1", username="sam"), User(id="u2", username="sam")])
    await db.commit()
    await create_match(db, game["prompts"][1].id, ["http://a"], user_id="u1", score_ai=4)
    await create_match(db, game["prompts"][1].id, ["http://a"], user_id="u2", score_ai=6)

    res = await client.get("/api/leaderboard")

    assert [e["score"] for e in res.json()["leaderboard"]] == [6, 4]


async def test_empty_leaderboard(client, game):
    res = await client.get("/api/leaderboard")

    assert res.json() == {"leaderboard": []}


async def test_unexpected_failure_is_rendered_as_json_error(session_factory, monkeypatch):
    import httpx

    from resource_arena.database import get_db
    from resource_arena.main import app
    from resource_arena.routes import leaderboard as leaderboard_route

    async def broken(db, include_match_id=None):
        raise RuntimeError("database went away")

    async def _get_db():
        async with session_factory() as session:
            yield session

    monkeypatch.setattr(leaderboard_route, "build_leaderboard", broken)
    monkeypatch.setitem(app.dependency_overrides, get_db, _get_db)
    # Starlette re-raises after responding; keep the response instead
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        res = await ac.get("/api/leaderboard")

    assert res.status_code == 500
    assert res.headers["content-type"].startswith("application/json")
    assert res.json() == {"error": "Internal server error"}
