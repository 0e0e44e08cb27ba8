"""Portfolio content DTOs shared by the API and persistence layers."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def normalize_detailed_content(value: Any) -> dict[str, Any] | None:
    """Coerce module ``detailed_content`` into a JSON object.

    Strings holding a JSON object are parsed; any other non-empty string is
    wrapped as ``{"content": value}``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return {"content": value}
        if isinstance(parsed, dict):
            return parsed
        return {"content": value}
    return value


class Module(BaseModel):
    id: UUID
    education_id: UUID
    name: str
    code: str | None = None
    grade: str | None = None
    credits: int | None = None
    semester: str | None = None
    description: str | None = None
    detailed_content: dict[str, Any] | None = None
    display_order: int = 0
    created_at: datetime
    updated_at: datetime


class Education(BaseModel):
    id: UUID
    degree: str
    institution: str
    field_of_study: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    grade: str | None = None
    description: str | None = None
    slug: str
    display_order: int = 0
    created_at: datetime
    updated_at: datetime
    modules: list[Module] = Field(default_factory=list)


class SkillSummary(BaseModel):
    """Skill projection embedded in project payloads."""

    id: UUID
    name: str
    category: str | None = None
    proficiency_level: int | None = None
    icon: str | None = None


class Skill(BaseModel):
    id: UUID
    name: str
    category: str | None = None
    proficiency_level: int | None = None
    years_experience: float | None = None
    status: str = "active"
    first_learned_date: date | None = None
    last_used_date: date | None = None
    description: str | None = None
    icon: str | None = None
    display_order: int = 0
    created_at: datetime
    updated_at: datetime


class Project(BaseModel):
    id: UUID
    name: str
    slug: str
    short_description: str | None = None
    full_description: str | None = None
    status: str = "active"
    start_date: date | None = None
    end_date: date | None = None
    github_url: str | None = None
    live_url: str | None = None
    featured: bool = False
    difficulty_level: str | None = None
    image_url: str | None = None
    demo_video_url: str | None = None
    display_order: int = 0
    view_count: int = 0
    created_at: datetime
    updated_at: datetime
    skills: list[SkillSummary] = Field(default_factory=list)


class BlogPost(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    content: str
    status: str = "draft"
    published_at: datetime | None = None
    reading_time_minutes: int | None = None
    view_count: int = 0
    featured: bool = False
    series: str | None = None
    series_order: int | None = None
    cover_image_url: str | None = None
    created_at: datetime
    updated_at: datetime


# Write payloads. ``*Update`` models are partial: only fields present in the
# request body are applied.


class EducationCreate(BaseModel):
    degree: str = Field(..., min_length=1)
    institution: str = Field(..., min_length=1)
    field_of_study: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    grade: str | None = None
    description: str | None = None
    slug: str = Field(..., min_length=1)
    display_order: int = 0


class EducationUpdate(BaseModel):
    degree: str | None = None
    institution: str | None = None
    field_of_study: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    grade: str | None = None
    description: str | None = None
    display_order: int | None = None


class ModuleCreate(BaseModel):
    education_id: UUID
    name: str = Field(..., min_length=1)
    code: str | None = None
    grade: str | None = None
    credits: int | None = None
    semester: str | None = None
    description: str | None = None
    detailed_content: dict[str, Any] | None = None
    display_order: int = 0

    @field_validator("detailed_content", mode="before")
    @classmethod
    def coerce_detailed_content(cls, value: Any) -> dict[str, Any] | None:
        return normalize_detailed_content(value)


class ModuleUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    grade: str | None = None
    credits: int | None = None
    semester: str | None = None
    description: str | None = None
    detailed_content: dict[str, Any] | None = None
    display_order: int | None = None

    @field_validator("detailed_content", mode="before")
    @classmethod
    def coerce_detailed_content(cls, value: Any) -> dict[str, Any] | None:
        return normalize_detailed_content(value)


class SkillCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str | None = None
    proficiency_level: int | None = None
    years_experience: float | None = None
    status: str = "active"
    first_learned_date: date | None = None
    last_used_date: date | None = None
    description: str | None = None
    icon: str | None = None
    display_order: int = 0


class SkillUpdate(BaseModel):
    name: str | None = None
    category: str | None = None
    proficiency_level: int | None = None
    years_experience: float | None = None
    status: str | None = None
    first_learned_date: date | None = None
    last_used_date: date | None = None
    description: str | None = None
    icon: str | None = None
    display_order: int | None = None


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    short_description: str | None = None
    full_description: str | None = None
    status: str = "active"
    start_date: date | None = None
    end_date: date | None = None
    github_url: str | None = None
    live_url: str | None = None
    featured: bool = False
    difficulty_level: str | None = None
    image_url: str | None = None
    display_order: int = 0
    skill_ids: list[UUID] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    name: str | None = None
    slug: str | None = None
    short_description: str | None = None
    full_description: str | None = None
    status: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    github_url: str | None = None
    live_url: str | None = None
    featured: bool | None = None
    difficulty_level: str | None = None
    image_url: str | None = None
    demo_video_url: str | None = None
    display_order: int | None = None
    skill_ids: list[UUID] | None = None


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    slug: str | None = None
    excerpt: str | None = None
    status: str = "draft"
    published_at: datetime | None = None
    reading_time_minutes: int | None = None
    featured: bool = False
    series: str | None = None
    series_order: int | None = None
    cover_image_url: str | None = None


class BlogPostUpdate(BaseModel):
    title: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    content: str | None = None
    status: str | None = None
    published_at: datetime | None = None
    reading_time_minutes: int | None = None
    featured: bool | None = None
    series: str | None = None
    series_order: int | None = None
    cover_image_url: str | None = None
