"""Flip, coin settings and user schemas shared by both storage backends."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Outcome = Literal["heads", "tails"]
CoinStyle = Literal["copper", "gold", "silver"]

DEFAULT_HEADS_LABEL = "HEADS"
DEFAULT_TAILS_LABEL = "TAILS"
DEFAULT_COIN_STYLE = "copper"
LABEL_MAX_LENGTH = 10


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FlipCreate(CamelModel):
    outcome: Outcome
    context: str | None = None
    ai_suggestion: str | None = None
    heads_label: str = Field(default=DEFAULT_HEADS_LABEL, max_length=LABEL_MAX_LENGTH)
    tails_label: str = Field(default=DEFAULT_TAILS_LABEL, max_length=LABEL_MAX_LENGTH)
    coin_style: CoinStyle = DEFAULT_COIN_STYLE


class FlipRecord(CamelModel):
    id: int
    outcome: Outcome
    timestamp: datetime
    context: str | None = None
    ai_suggestion: str | None = None
    heads_label: str = DEFAULT_HEADS_LABEL
    tails_label: str = DEFAULT_TAILS_LABEL
    coin_style: str = DEFAULT_COIN_STYLE


class FlipStats(CamelModel):
    heads_count: int = 0
    tails_count: int = 0
    total_count: int = 0


class CoinSettings(CamelModel):
    id: int
    heads_label: str = DEFAULT_HEADS_LABEL
    tails_label: str = DEFAULT_TAILS_LABEL
    coin_style: str = DEFAULT_COIN_STYLE


class CoinSettingsUpdate(CamelModel):
    """Partial settings update; only fields that were explicitly set are merged."""

    heads_label: str | None = Field(default=None, max_length=LABEL_MAX_LENGTH)
    tails_label: str | None = Field(default=None, max_length=LABEL_MAX_LENGTH)
    coin_style: CoinStyle | None = None

    def changes(self) -> dict[str, str]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class UserCreate(BaseModel):
    username: str
    password: str


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    password: str
