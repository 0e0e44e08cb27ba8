from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.admin import router as admin_router
from app.api.auth import router as auth_router
from app.api.public import router as public_router
from app.domain.account import UserAccount
from app.domain.content import ContentService
from app.domain.service import AuthService
from app.errors import register_error_handlers
from app.security.passwords import hash_password
from app.security.rate_limiter import RateLimitConfig, VisitorRateLimiter
from app.security.tokens import issue_access_token
from schemas import (
    BlogPost,
    BlogPostCreate,
    Education,
    EducationCreate,
    Module,
    ModuleCreate,
    Project,
    ProjectCreate,
    Skill,
    SkillCreate,
    SkillSummary,
)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Correct-Horse-9!"
EDITOR_EMAIL = "editor@example.com"
EDITOR_PASSWORD = "Editor-Pass-42!"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviours."""

    def __init__(self) -> None:
        self.users: dict[str, UserAccount] = {}
        self.logins: list[tuple[UUID, datetime]] = []
        self.education: dict[UUID, dict[str, Any]] = {}
        self.modules: dict[UUID, dict[str, Any]] = {}
        self.skills: dict[UUID, dict[str, Any]] = {}
        self.projects: dict[UUID, dict[str, Any]] = {}
        self.project_skills: dict[UUID, list[UUID]] = {}
        self.posts: dict[UUID, dict[str, Any]] = {}

    # users

    def add_user(self, *, username: str, email: str, password: str, is_admin: bool) -> UserAccount:
        user = UserAccount(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=4),
            is_admin=is_admin,
            created_at=_now(),
        )
        self.users[email] = user
        return user

    def get_user_by_email(self, email: str) -> UserAccount | None:
        return self.users.get(email)

    def record_login(self, user_id: UUID, at: datetime) -> None:
        self.logins.append((user_id, at))

    # helpers

    def _insert(self, store: dict[UUID, dict[str, Any]], values: dict[str, Any]) -> dict[str, Any]:
        now = _now()
        row = {"id": uuid.uuid4(), **values, "created_at": now, "updated_at": now}
        store[row["id"]] = row
        return row

    def _update(self, store: dict[UUID, dict[str, Any]], row_id: UUID, changes: dict[str, Any]):
        row = store.get(row_id)
        if row is None:
            return None
        row.update(changes)
        row["updated_at"] = _now()
        return row

    # education and modules

    def _education(self, row: dict[str, Any]) -> Education:
        modules = sorted(
            (m for m in self.modules.values() if m["education_id"] == row["id"]),
            key=lambda m: m["display_order"],
        )
        return Education.model_validate({**row, "modules": modules})

    def list_education(self) -> list[Education]:
        rows = sorted(self.education.values(), key=lambda r: r["display_order"])
        return [self._education(row) for row in rows]

    def get_education_by_slug(self, slug: str) -> Education | None:
        for row in self.education.values():
            if row["slug"] == slug:
                return self._education(row)
        return None

    def education_exists(self, education_id: UUID) -> bool:
        return education_id in self.education

    def create_education(self, payload: EducationCreate) -> Education:
        return Education.model_validate(self._insert(self.education, payload.model_dump()))

    def update_education(self, education_id: UUID, changes: dict[str, Any]) -> Education | None:
        row = self._update(self.education, education_id, changes)
        return Education.model_validate(row) if row else None

    def delete_education(self, education_id: UUID) -> bool:
        return self.education.pop(education_id, None) is not None

    def create_module(self, payload: ModuleCreate) -> Module:
        return Module.model_validate(self._insert(self.modules, payload.model_dump()))

    def update_module(self, module_id: UUID, changes: dict[str, Any]) -> Module | None:
        row = self._update(self.modules, module_id, changes)
        return Module.model_validate(row) if row else None

    def delete_module(self, module_id: UUID) -> bool:
        return self.modules.pop(module_id, None) is not None

    # skills

    def list_skills(self, category: str | None = None) -> list[Skill]:
        rows = [
            row
            for row in self.skills.values()
            if row["status"] == "active" and (not category or row["category"] == category)
        ]
        rows.sort(key=lambda r: (r["display_order"], -(r["proficiency_level"] or 0)))
        return [Skill.model_validate(row) for row in rows]

    def create_skill(self, payload: SkillCreate) -> Skill:
        return Skill.model_validate(self._insert(self.skills, payload.model_dump()))

    def update_skill(self, skill_id: UUID, changes: dict[str, Any]) -> Skill | None:
        row = self._update(self.skills, skill_id, changes)
        return Skill.model_validate(row) if row else None

    def delete_skill(self, skill_id: UUID) -> bool:
        for linked in self.project_skills.values():
            if skill_id in linked:
                linked.remove(skill_id)
        return self.skills.pop(skill_id, None) is not None

    # projects

    def _project(self, row: dict[str, Any]) -> Project:
        summaries = [
            SkillSummary.model_validate(self.skills[skill_id])
            for skill_id in self.project_skills.get(row["id"], [])
        ]
        return Project.model_validate({**row, "skills": summaries})

    def list_projects(self, featured_only: bool = False) -> list[Project]:
        rows = [
            row
            for row in self.projects.values()
            if (row["status"] == "active" or (row["status"] == "archived" and row["featured"]))
            and (not featured_only or row["featured"])
        ]
        rows.sort(key=lambda r: r["display_order"])
        return [self._project(row) for row in rows]

    def get_active_project_by_slug(self, slug: str) -> Project | None:
        for row in self.projects.values():
            if row["slug"] == slug and row["status"] == "active":
                return self._project(row)
        return None

    def increment_project_views(self, project_id: UUID) -> None:
        self.projects[project_id]["view_count"] += 1

    def _link_skills(self, project_id: UUID, skill_ids: list[UUID]) -> None:
        self.project_skills[project_id] = [skill_id for skill_id in skill_ids if skill_id in self.skills]

    def create_project(self, payload: ProjectCreate) -> Project:
        values = payload.model_dump(exclude={"skill_ids"})
        row = self._insert(self.projects, {**values, "demo_video_url": None, "view_count": 0})
        self._link_skills(row["id"], payload.skill_ids)
        return self._project(row)

    def update_project(self, project_id: UUID, changes: dict[str, Any], skill_ids: list[UUID] | None = None):
        row = self._update(self.projects, project_id, changes)
        if row is None:
            return None
        if skill_ids is not None:
            self._link_skills(project_id, skill_ids)
        return self._project(row)

    def delete_project(self, project_id: UUID) -> bool:
        self.project_skills.pop(project_id, None)
        return self.projects.pop(project_id, None) is not None

    # blog

    def list_published_posts(self, now: datetime) -> list[BlogPost]:
        rows = [
            row
            for row in self.posts.values()
            if row["status"] == "published" and row["published_at"] and row["published_at"] <= now
        ]
        rows.sort(key=lambda r: r["published_at"], reverse=True)
        return [BlogPost.model_validate(row) for row in rows]

    def list_all_posts(self) -> list[BlogPost]:
        rows = sorted(self.posts.values(), key=lambda r: r["created_at"], reverse=True)
        return [BlogPost.model_validate(row) for row in rows]

    def get_published_post_by_slug(self, slug: str) -> BlogPost | None:
        for row in self.posts.values():
            if row["slug"] == slug and row["status"] == "published":
                return BlogPost.model_validate(row)
        return None

    def increment_post_views(self, post_id: UUID) -> None:
        self.posts[post_id]["view_count"] += 1

    def create_post(self, payload: BlogPostCreate) -> BlogPost:
        return BlogPost.model_validate(self._insert(self.posts, {**payload.model_dump(), "view_count": 0}))

    def update_post(self, post_id: UUID, changes: dict[str, Any]) -> BlogPost | None:
        row = self._update(self.posts, post_id, changes)
        return BlogPost.model_validate(row) if row else None

    def delete_post(self, post_id: UUID) -> bool:
        return self.posts.pop(post_id, None) is not None


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> FakeRepository:
    repo = FakeRepository()
    repo.add_user(username="admin", email=ADMIN_EMAIL, password=ADMIN_PASSWORD, is_admin=True)
    repo.add_user(username="editor", email=EDITOR_EMAIL, password=EDITOR_PASSWORD, is_admin=False)
    return repo


@pytest.fixture
def login_limiter(clock: FakeClock) -> VisitorRateLimiter:
    limiter = VisitorRateLimiter(
        RateLimitConfig(max_requests=5, window_seconds=900, block_seconds=900),
        clock=clock,
        sweep_interval=None,
    )
    yield limiter
    limiter.close()


@pytest.fixture
def api_client(repository: FakeRepository, login_limiter: VisitorRateLimiter):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(public_router)
    app.include_router(admin_router)
    register_error_handlers(app)
    app.state.login_rate_limiter = login_limiter
    app.state.auth_service = AuthService(repository)
    app.state.content_service = ContentService(repository)

    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_token(repository: FakeRepository) -> str:
    user = repository.users[ADMIN_EMAIL]
    return issue_access_token(user_id=str(user.id), username=user.username, email=user.email, is_admin=True)


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}
