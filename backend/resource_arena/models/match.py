"""Match models - one play session and the URLs submitted in it."""
from datetime import datetime
from sqlalchemy import String, Text, Integer, Boolean, ForeignKey, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from resource_arena.models.base import Base


class Match(Base):
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Identity-provider subject; NULL until an anonymous match is claimed
    user_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    prompt_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("prompts.id", ondelete="RESTRICT"), nullable=False
    )
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    score_ai: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Reserved for community voting; not written by the evaluation flow
    score_community: Mapped[int | None] = mapped_column(Integer, nullable=True)

    prompt = relationship("Prompt")
    resources: Mapped[list["SubmittedResource"]] = relationship(
        back_populates="match", cascade="all, delete-orphan", order_by="SubmittedResource.id"
    )
    evaluations: Mapped[list["AiEvaluation"]] = relationship(
        back_populates="match", cascade="all, delete-orphan", order_by="AiEvaluation.id"
    )

    __table_args__ = (
        Index("idx_matches_leaderboard", "is_anonymous", "user_id"),
    )


class SubmittedResource(Base):
    __tablename__ = "submitted_resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)

    match: Mapped["Match"] = relationship(back_populates="resources")
