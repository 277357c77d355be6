"""Leaderboard response schemas."""
from resource_arena.schemas.base import CamelORMModel


class LeaderboardEntry(CamelORMModel):
    username: str
    score: int


class LeaderboardResponse(CamelORMModel):
    leaderboard: list[LeaderboardEntry]
