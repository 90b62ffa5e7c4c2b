"""SQLAlchemy ORM models for coin-oracle."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from coin_oracle.models.flip import (
    DEFAULT_COIN_STYLE,
    DEFAULT_HEADS_LABEL,
    DEFAULT_TAILS_LABEL,
    LABEL_MAX_LENGTH,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)

    def __str__(self) -> str:
        return f"{self.username} ({self.id})"


class FlipHistory(Base):
    """One saved coin flip. Rows are only ever inserted or bulk-deleted."""

    __tablename__ = "flip_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    outcome: Mapped[str] = mapped_column(Text, nullable=False)  # "heads" | "tails"
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    context: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_suggestion: Mapped[str | None] = mapped_column(Text, nullable=True)
    heads_label: Mapped[str] = mapped_column(
        String(LABEL_MAX_LENGTH), nullable=False,
        default=DEFAULT_HEADS_LABEL, server_default=DEFAULT_HEADS_LABEL,
    )
    tails_label: Mapped[str] = mapped_column(
        String(LABEL_MAX_LENGTH), nullable=False,
        default=DEFAULT_TAILS_LABEL, server_default=DEFAULT_TAILS_LABEL,
    )
    coin_style: Mapped[str] = mapped_column(
        String(20), nullable=False,
        default=DEFAULT_COIN_STYLE, server_default=DEFAULT_COIN_STYLE,
    )

    __table_args__ = (
        Index("ix_flip_history_timestamp", "timestamp"),
    )


class CoinSettings(Base):
    """Coin customization. Exactly one row is expected."""

    __tablename__ = "coin_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    heads_label: Mapped[str] = mapped_column(
        String(LABEL_MAX_LENGTH), nullable=False,
        default=DEFAULT_HEADS_LABEL, server_default=DEFAULT_HEADS_LABEL,
    )
    tails_label: Mapped[str] = mapped_column(
        String(LABEL_MAX_LENGTH), nullable=False,
        default=DEFAULT_TAILS_LABEL, server_default=DEFAULT_TAILS_LABEL,
    )
    coin_style: Mapped[str] = mapped_column(
        String(20), nullable=False,
        default=DEFAULT_COIN_STYLE, server_default=DEFAULT_COIN_STYLE,
    )
