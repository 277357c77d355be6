"""User model - mirror of the identity provider's account (username only)."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from resource_arena.models.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
