"""Match request/response schemas."""
from datetime import datetime
from typing import Optional
from resource_arena.schemas.base import CamelModel, CamelORMModel


class MatchRequest(CamelModel):
    """Either a new match (promptId + resources) or an association (associateUserId + matchId)."""
    prompt_id: Optional[int] = None
    resources: Optional[list[str]] = None
    associate_user_id: Optional[str] = None
    match_id: Optional[int] = None


class MatchCreatedResponse(CamelORMModel):
    match_id: int


class OkResponse(CamelORMModel):
    ok: bool


class MatchPromptSummary(CamelORMModel):
    level: int
    title: str


class MatchHistoryItem(CamelORMModel):
    match_id: int
    started_at: Optional[datetime] = None
    score_ai: Optional[int] = None
    prompt: MatchPromptSummary


class MatchHistoryResponse(CamelORMModel):
    matches: list[MatchHistoryItem]


class ResourceItem(CamelORMModel):
    id: int
    url: str


class EvaluationItem(CamelORMModel):
    id: int
    url: str
    score: int
    explanation: str


class MatchPromptDetail(CamelORMModel):
    id: int
    title: str
    description: str
    level: int


class MatchDetailResponse(CamelORMModel):
    match_id: int
    is_anonymous: bool
    started_at: Optional[datetime] = None
    prompt: Optional[MatchPromptDetail] = None
    resources: list[ResourceItem]
    evaluations: list[EvaluationItem]
    total: Optional[int] = None
