"""AI model catalog and the key/value config that selects the active judge."""
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from resource_arena.models.base import Base


class AiModel(Base):
    __tablename__ = "ai_models"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    # 'openai' | 'anthropic' | 'gemini' | 'deepseek' | 'grok'
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class AppConfig(Base):
    __tablename__ = "app_config"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str | None] = mapped_column(String(200), nullable=True)
