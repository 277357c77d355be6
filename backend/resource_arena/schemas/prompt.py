"""Prompt response schemas."""
from typing import Optional
from resource_arena.schemas.base import CamelORMModel


class PromptResponse(CamelORMModel):
    id: int
    title: str
    description: str
    level: int


class NextPromptResponse(CamelORMModel):
    prompt: Optional[PromptResponse] = None
    done: Optional[bool] = None
    message: Optional[str] = None
