"""Evaluation request/response schemas."""
from typing import Optional
from resource_arena.schemas.base import CamelModel, CamelORMModel


class EvaluateRequest(CamelModel):
    match_id: Optional[int] = None


class EvaluateResponse(CamelORMModel):
    total: int
