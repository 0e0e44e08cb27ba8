"""Shared schema exports."""

from .account import UserSummary
from .content import (
    BlogPost,
    BlogPostCreate,
    BlogPostUpdate,
    Education,
    EducationCreate,
    EducationUpdate,
    Module,
    ModuleCreate,
    ModuleUpdate,
    Project,
    ProjectCreate,
    ProjectUpdate,
    Skill,
    SkillCreate,
    SkillSummary,
    SkillUpdate,
    normalize_detailed_content,
)

__all__ = [
    "BlogPost",
    "BlogPostCreate",
    "BlogPostUpdate",
    "Education",
    "EducationCreate",
    "EducationUpdate",
    "Module",
    "ModuleCreate",
    "ModuleUpdate",
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "Skill",
    "SkillCreate",
    "SkillSummary",
    "SkillUpdate",
    "UserSummary",
    "normalize_detailed_content",
]
