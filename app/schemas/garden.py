"""
Garden Schemas
==============

Request schemas for areas, categories, plants, growth log entries and
garden events.
"""

import json
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.enums.garden import EventType


def _strip_required(v: Any) -> Any:
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
    return v


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class CreateAreaRequest(BaseModel):
    """Request schema for creating a garden area."""

    name: str = Field(..., min_length=1, max_length=100, description="Area name")
    emoji: str | None = Field(default=None, max_length=16, description="Display emoji")
    description: str | None = Field(default=None, max_length=1000)
    cover_color: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cover_color", "coverColor"),
        pattern=r"^#[0-9A-Fa-f]{6}$",
    )
    cover_image: str | None = Field(default=None, validation_alias=AliasChoices("cover_image", "coverImage"))

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_required(v)

    @field_validator("emoji", "cover_color", "cover_image", mode="before")
    @classmethod
    def blank_is_default(cls, v):
        return _blank_to_none(v)


class UpdateAreaRequest(BaseModel):
    """Request schema for partially updating a garden area."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    emoji: str | None = Field(default=None, max_length=16)
    description: str | None = Field(default=None, max_length=1000)
    cover_color: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cover_color", "coverColor"),
        pattern=r"^#[0-9A-Fa-f]{6}$",
    )
    cover_image: str | None = Field(default=None, validation_alias=AliasChoices("cover_image", "coverImage"))

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_required(v) if v is not None else v


class CreateCategoryRequest(BaseModel):
    """Request schema for adding a plant category."""

    name: str = Field(..., min_length=1, max_length=60)
    emoji: str | None = Field(default=None, max_length=16)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_required(v)

    @field_validator("emoji", mode="before")
    @classmethod
    def blank_emoji(cls, v):
        return _blank_to_none(v)


class CreatePlantRequest(BaseModel):
    """Request schema for adding a plant (JSON body or multipart form fields)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=120)
    category_id: int = Field(..., gt=0, validation_alias=AliasChoices("category_id", "categoryId", "category"))
    area_id: int = Field(..., gt=0, validation_alias=AliasChoices("area_id", "areaId", "area"))
    description: str | None = Field(default=None, max_length=2000)
    variety: str | None = Field(default=None, max_length=120)
    date_planted: str | None = Field(
        default=None,
        validation_alias=AliasChoices("date_planted", "datePlanted"),
        pattern=r"^\d{4}-\d{2}-\d{2}",
    )
    initial_note: str | None = Field(default=None, validation_alias=AliasChoices("initial_note", "initialNote"))

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_required(v)

    @field_validator("variety", "date_planted", "description", "initial_note", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)


class UpdatePlantRequest(BaseModel):
    """Request schema for partially updating a plant."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    category_id: int | None = Field(default=None, gt=0, validation_alias=AliasChoices("category_id", "categoryId"))
    area_id: int | None = Field(default=None, gt=0, validation_alias=AliasChoices("area_id", "areaId"))
    description: str | None = Field(default=None, max_length=2000)
    variety: str | None = Field(default=None, max_length=120)
    date_planted: str | None = Field(
        default=None,
        validation_alias=AliasChoices("date_planted", "datePlanted"),
        pattern=r"^\d{4}-\d{2}-\d{2}",
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_required(v) if v is not None else v


class AddGrowthLogRequest(BaseModel):
    """Form fields accompanying a growth log upload."""

    date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}")
    note: str | None = Field(default=None, max_length=2000)

    @field_validator("date", "note", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)


class CreateEventRequest(BaseModel):
    """Request schema for logging a garden event."""

    type: EventType = Field(..., validation_alias=AliasChoices("type", "event_type"))
    title: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    area_id: int | None = Field(default=None, gt=0, validation_alias=AliasChoices("area_id", "areaId"))
    plant_ids: list[int] = Field(default_factory=list, validation_alias=AliasChoices("plant_ids", "plantIds"))

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("title", "description", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("plant_ids", mode="before")
    @classmethod
    def parse_plant_ids(cls, v):
        """Accept a list, a JSON list string or a comma-separated string."""
        if v is None or v == "":
            return []
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [s.strip() for s in v.split(",") if s.strip()]
        return v
