"""Content workflows for education, skills, projects and blog posts."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from uuid import UUID

from schemas import (
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
    SkillUpdate,
)

from ..errors import NotFoundError
from ..repository import PortfolioRepository

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^a-z0-9-]+")


def generate_slug(title: str) -> str:
    """Lowercase ``title``, turn spaces into hyphens and drop everything else."""
    return _SLUG_STRIP.sub("", title.lower().replace(" ", "-"))


def group_skills_by_category(skills: list[Skill]) -> dict[str, list[Skill]]:
    """Group skills by category; uncategorised skills land under ``Other``."""
    grouped: dict[str, list[Skill]] = defaultdict(list)
    for skill in skills:
        grouped[skill.category or "Other"].append(skill)
    return dict(grouped)


class ContentService:
    """Read and write operations over portfolio content."""

    def __init__(self, repository: PortfolioRepository) -> None:
        self._repository = repository

    # Public reads

    def list_education(self) -> list[Education]:
        return self._repository.list_education()

    def get_education(self, slug: str) -> Education:
        education = self._repository.get_education_by_slug(slug)
        if education is None:
            raise NotFoundError("Education not found")
        return education

    def list_skills(self, category: str | None = None) -> list[Skill]:
        return self._repository.list_skills(category or None)

    def list_projects(self, featured_only: bool = False) -> list[Project]:
        return self._repository.list_projects(featured_only)

    def get_project(self, slug: str) -> Project:
        """Return an active project by slug and count the view."""
        project = self._repository.get_active_project_by_slug(slug)
        if project is None:
            raise NotFoundError("Project not found")
        self._repository.increment_project_views(project.id)
        return project

    def list_published_posts(self) -> list[BlogPost]:
        return self._repository.list_published_posts(datetime.now(timezone.utc))

    def get_published_post(self, slug: str) -> BlogPost:
        """Return a published post by slug and count the view."""
        post = self._repository.get_published_post_by_slug(slug)
        if post is None:
            raise NotFoundError("Blog post not found")
        self._repository.increment_post_views(post.id)
        return post

    # Admin writes

    def create_education(self, payload: EducationCreate) -> Education:
        education = self._repository.create_education(payload)
        logger.info("created education %s", education.id)
        return education

    def update_education(self, education_id: UUID, payload: EducationUpdate) -> Education:
        education = self._repository.update_education(education_id, payload.model_dump(exclude_unset=True))
        if education is None:
            raise NotFoundError("Education not found")
        return education

    def delete_education(self, education_id: UUID) -> None:
        if not self._repository.delete_education(education_id):
            raise NotFoundError("Education not found")

    def create_module(self, payload: ModuleCreate) -> Module:
        if not self._repository.education_exists(payload.education_id):
            raise NotFoundError("Education not found")
        return self._repository.create_module(payload)

    def update_module(self, module_id: UUID, payload: ModuleUpdate) -> Module:
        module = self._repository.update_module(module_id, payload.model_dump(exclude_unset=True))
        if module is None:
            raise NotFoundError("Module not found")
        return module

    def delete_module(self, module_id: UUID) -> None:
        if not self._repository.delete_module(module_id):
            raise NotFoundError("Module not found")

    def create_skill(self, payload: SkillCreate) -> Skill:
        return self._repository.create_skill(payload)

    def update_skill(self, skill_id: UUID, payload: SkillUpdate) -> Skill:
        skill = self._repository.update_skill(skill_id, payload.model_dump(exclude_unset=True))
        if skill is None:
            raise NotFoundError("Skill not found")
        return skill

    def delete_skill(self, skill_id: UUID) -> None:
        if not self._repository.delete_skill(skill_id):
            raise NotFoundError("Skill not found")

    def create_project(self, payload: ProjectCreate) -> Project:
        project = self._repository.create_project(payload)
        logger.info("created project %s", project.slug)
        return project

    def update_project(self, project_id: UUID, payload: ProjectUpdate) -> Project:
        changes = payload.model_dump(exclude_unset=True)
        skill_ids = changes.pop("skill_ids", None)
        project = self._repository.update_project(project_id, changes, skill_ids)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def delete_project(self, project_id: UUID) -> None:
        if not self._repository.delete_project(project_id):
            raise NotFoundError("Project not found")

    def list_all_posts(self) -> list[BlogPost]:
        return self._repository.list_all_posts()

    def create_post(self, payload: BlogPostCreate) -> BlogPost:
        """Create a post, deriving the slug and publish time when omitted."""
        updates: dict[str, object] = {}
        if not payload.slug:
            updates["slug"] = generate_slug(payload.title)
        if payload.status == "published" and payload.published_at is None:
            updates["published_at"] = datetime.now(timezone.utc)
        post = self._repository.create_post(payload.model_copy(update=updates))
        logger.info("created blog post %s", post.slug)
        return post

    def update_post(self, post_id: UUID, payload: BlogPostUpdate) -> BlogPost:
        post = self._repository.update_post(post_id, payload.model_dump(exclude_unset=True))
        if post is None:
            raise NotFoundError("Blog post not found")
        return post

    def delete_post(self, post_id: UUID) -> None:
        if not self._repository.delete_post(post_id):
            raise NotFoundError("Blog post not found")
