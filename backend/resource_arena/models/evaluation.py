"""AI evaluation model - one judged score per submitted resource."""
from sqlalchemy import Text, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from resource_arena.models.base import Base, CreatedAtMixin


class AiEvaluation(Base, CreatedAtMixin):
    __tablename__ = "ai_evaluations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    resource_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("submitted_resources.id", ondelete="CASCADE"), nullable=False
    )
    model_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ai_models.id", ondelete="RESTRICT"), nullable=False
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False, default="")

    match = relationship("Match", back_populates="evaluations")
    resource = relationship("SubmittedResource")
    model = relationship("AiModel")

    __table_args__ = (
        # A second evaluation batch for the same match fails here and rolls back
        UniqueConstraint("match_id", "resource_id", name="uq_evaluation_resource"),
    )
