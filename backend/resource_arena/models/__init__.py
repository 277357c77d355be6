"""Import all models so SQLAlchemy metadata knows about them."""
from resource_arena.models.base import Base
from resource_arena.models.prompt import Prompt
from resource_arena.models.match import Match, SubmittedResource
from resource_arena.models.ai_model import AiModel, AppConfig
from resource_arena.models.evaluation import AiEvaluation
from resource_arena.models.user import User

__all__ = [
    "Base",
    "Prompt", "Match", "SubmittedResource",
    "AiModel", "AppConfig", "AiEvaluation", "User",
]
