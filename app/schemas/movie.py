from __future__ import annotations

"""
Admin catalog input models.

Raw form/JSON values arrive as strings; these models coerce and validate them
(lax Pydantic mode turns `"2020"` into `2020`). The catalog service maps any
`ValidationError` to `InvalidInput` so the HTTP layer answers 400.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.enums import VideoQuality


def _strip_required(v: object) -> object:
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
    return v


class MovieCreateIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    release_year: int = Field(..., ge=1870, le=2100)
    duration_minutes: int = Field(..., ge=0)
    subscription_type: str = Field(..., min_length=1, max_length=32)

    @field_validator("title", "subscription_type", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return _strip_required(v)


class MovieUpdateIn(BaseModel):
    """Partial update; unknown fields are rejected rather than silently dropped.

    Only fields present in the payload are applied (`exclude_unset`), so an
    explicit `null` clears `description`; the other columns are NOT NULL and
    refuse it.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    release_year: Optional[int] = Field(None, ge=1870, le=2100)
    duration_minutes: Optional[int] = Field(None, ge=0)
    subscription_type: Optional[str] = Field(None, min_length=1, max_length=32)
    rating: Optional[float] = Field(None, ge=0, le=10)

    @field_validator("title", "subscription_type", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return _strip_required(v)

    @field_validator("title", "release_year", "duration_minutes", "subscription_type", "rating", mode="before")
    @classmethod
    def not_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("must not be null")
        return v


class MovieFileIn(BaseModel):
    quality: VideoQuality
    language: str = Field(..., min_length=1, max_length=16)

    @field_validator("quality", mode="before")
    @classmethod
    def map_quality(cls, v: object) -> VideoQuality:
        if isinstance(v, VideoQuality):
            return v
        mapped = VideoQuality.from_label(v if isinstance(v, str) else None)
        if mapped is None:
            raise ValueError("unsupported video quality; use 240p, 360p, 480p, 720p, 1080p or 4k")
        return mapped

    @field_validator("language", mode="before")
    @classmethod
    def strip_language(cls, v: object) -> object:
        return _strip_required(v)


__all__ = ["MovieCreateIn", "MovieUpdateIn", "MovieFileIn"]
