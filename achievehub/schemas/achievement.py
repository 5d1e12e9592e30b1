from datetime import date
from typing import Optional

from fastapi import Form
from pydantic import BaseModel, ValidationError, field_validator

from achievehub.models import CATEGORIES, AchievementCategory


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma-separated tag string, dropping blanks and case-insensitive repeats."""
    tags: list[str] = []
    seen: set[str] = set()
    for tag in (raw or "").split(","):
        tag = tag.strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(tag)
    return tags


def first_error(exc: ValidationError) -> str:
    """Return the first human-readable message from a pydantic ValidationError."""
    errors = exc.errors()
    if not errors:
        return "Invalid submission"
    err = errors[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return err.get("msg", "Invalid submission")


def check_length(value: str, label: str, min_len: int, max_len: int) -> str:
    value = (value or "").strip()
    if len(value) < min_len:
        raise ValueError(f"{label} must be at least {min_len} characters")
    if len(value) > max_len:
        raise ValueError(f"{label} is too long")
    return value


class AchievementForm(BaseModel):
    title: str
    short_description: str
    description: str
    category: AchievementCategory
    tags: list[str] = []
    achievement_date: date
    how_it_started: Optional[str] = None
    how_we_built_it: Optional[str] = None
    what_we_achieved: Optional[str] = None
    what_we_learned: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return check_length(v, "Title", 3, 200)

    @field_validator("short_description")
    @classmethod
    def validate_short_description(cls, v):
        return check_length(v, "Short description", 3, 100)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return check_length(v, "Description", 10, 2000)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        if v not in CATEGORIES and not isinstance(v, AchievementCategory):
            raise ValueError("Please choose an achievement type")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return parse_tags(v)
        return v

    @field_validator("achievement_date", mode="before")
    @classmethod
    def date_required(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Achievement date is required")
        return v

    @field_validator("how_it_started", "how_we_built_it", "what_we_achieved", "what_we_learned", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @classmethod
    def as_form(
        cls,
        title: str = Form(""),
        short_description: str = Form(""),
        description: str = Form(""),
        category: str = Form(""),
        tags: str = Form(""),
        achievement_date: str = Form(""),
        how_it_started: str = Form(""),
        how_we_built_it: str = Form(""),
        what_we_achieved: str = Form(""),
        what_we_learned: str = Form(""),
    ) -> dict:
        # Raw values; the submission service validates so the first error can be flashed
        return dict(
            title=title,
            short_description=short_description,
            description=description,
            category=category,
            tags=tags,
            achievement_date=achievement_date,
            how_it_started=how_it_started,
            how_we_built_it=how_we_built_it,
            what_we_achieved=what_we_achieved,
            what_we_learned=what_we_learned,
        )
