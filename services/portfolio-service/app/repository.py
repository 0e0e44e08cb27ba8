"""Database repository for portfolio content and admin users."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Any, Iterable
from uuid import UUID

import psycopg
from psycopg import sql
from psycopg.rows import dict_row, tuple_row
from psycopg.types.json import Json
from psycopg_pool import ConnectionPool

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

from .domain.account import UserAccount

EDUCATION_COLUMNS = (
    "id, degree, institution, field_of_study, start_date, end_date, grade, "
    "description, slug, display_order, created_at, updated_at"
)
MODULE_COLUMNS = (
    "id, education_id, name, code, grade, credits, semester, description, "
    "detailed_content, display_order, created_at, updated_at"
)
SKILL_COLUMNS = (
    "id, name, category, proficiency_level, years_experience, status, "
    "first_learned_date, last_used_date, description, icon, display_order, "
    "created_at, updated_at"
)
PROJECT_COLUMNS = (
    "id, name, slug, short_description, full_description, status, start_date, "
    "end_date, github_url, live_url, featured, difficulty_level, image_url, "
    "demo_video_url, display_order, view_count, created_at, updated_at"
)
BLOG_COLUMNS = (
    "id, title, slug, excerpt, content, status, published_at, reading_time_minutes, "
    "view_count, featured, series, series_order, cover_image_url, created_at, updated_at"
)


def _adapt(value: Any) -> Any:
    return Json(value) if isinstance(value, (dict, list)) else value


class PortfolioRepository:
    """Postgres-backed persistence for users, education, skills, projects and blog posts."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    # -- health -----------------------------------------------------------

    def ping(self) -> bool:
        """Return ``True`` when a connection can run a trivial query."""
        try:
            with self._pool.connection() as conn:
                conn.execute("SELECT 1")
        except psycopg.Error:
            return False
        return True

    def pool_stats(self) -> dict[str, int]:
        return dict(self._pool.get_stats())

    # -- users ------------------------------------------------------------

    def get_user_by_email(self, email: str) -> UserAccount | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    SELECT id, username, email, password_hash, is_admin, created_at, last_login
                    FROM users
                    WHERE email = %s
                    """,
                    (email,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return UserAccount(*row)

    def record_login(self, user_id: UUID, at: datetime) -> None:
        with self._pool.connection() as conn:
            conn.execute("UPDATE users SET last_login = %s WHERE id = %s", (at, user_id))
            conn.commit()

    # -- generic helpers --------------------------------------------------

    def _fetch_all(self, query: str, params: Iterable[Any] = ()) -> list[dict[str, Any]]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, tuple(params))
                return cur.fetchall()

    def _fetch_one(self, query: str, params: Iterable[Any] = ()) -> dict[str, Any] | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, tuple(params))
                return cur.fetchone()

    @staticmethod
    def _insert_row(cur: psycopg.Cursor, table: str, values: dict[str, Any], returning: str) -> dict[str, Any]:
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING {}").format(
            sql.Identifier(table),
            sql.SQL(", ").join(sql.Identifier(column) for column in values),
            sql.SQL(", ").join(sql.Placeholder() for _ in values),
            sql.SQL(returning),
        )
        cur.execute(query, [_adapt(value) for value in values.values()])
        return cur.fetchone()

    def _insert(self, table: str, values: dict[str, Any], returning: str) -> dict[str, Any]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                row = self._insert_row(cur, table, values, returning)
                conn.commit()
        return row

    @staticmethod
    def _update_row(
        cur: psycopg.Cursor, table: str, row_id: UUID, changes: dict[str, Any], returning: str
    ) -> dict[str, Any] | None:
        """Apply ``changes`` to one row, always bumping ``updated_at``."""
        assignments = [sql.SQL("updated_at = CURRENT_TIMESTAMP")]
        params: list[Any] = []
        for column, value in changes.items():
            assignments.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
            params.append(_adapt(value))
        params.append(row_id)
        query = sql.SQL("UPDATE {} SET {} WHERE id = %s RETURNING {}").format(
            sql.Identifier(table),
            sql.SQL(", ").join(assignments),
            sql.SQL(returning),
        )
        cur.execute(query, params)
        return cur.fetchone()

    def _update(
        self, table: str, row_id: UUID, changes: dict[str, Any], returning: str
    ) -> dict[str, Any] | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                row = self._update_row(cur, table, row_id, changes, returning)
                conn.commit()
        return row

    def _delete(self, table: str, row_id: UUID) -> bool:
        query = sql.SQL("DELETE FROM {} WHERE id = %s").format(sql.Identifier(table))
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (row_id,))
                deleted = cur.rowcount > 0
                conn.commit()
        return deleted

    def _exists(self, table: str, row_id: UUID) -> bool:
        query = sql.SQL("SELECT EXISTS (SELECT 1 FROM {} WHERE id = %s)").format(sql.Identifier(table))
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, (row_id,))
                return bool(cur.fetchone()[0])

    # -- education and modules --------------------------------------------

    def _modules_for(self, education_ids: list[UUID]) -> dict[UUID, list[Module]]:
        grouped: dict[UUID, list[Module]] = defaultdict(list)
        if not education_ids:
            return grouped
        rows = self._fetch_all(
            f"""
            SELECT {MODULE_COLUMNS}
            FROM modules
            WHERE education_id = ANY(%s)
            ORDER BY display_order ASC
            """,
            (education_ids,),
        )
        for row in rows:
            grouped[row["education_id"]].append(Module.model_validate(row))
        return grouped

    def list_education(self) -> list[Education]:
        rows = self._fetch_all(f"SELECT {EDUCATION_COLUMNS} FROM education ORDER BY display_order ASC")
        modules = self._modules_for([row["id"] for row in rows])
        return [Education.model_validate({**row, "modules": modules.get(row["id"], [])}) for row in rows]

    def get_education_by_slug(self, slug: str) -> Education | None:
        row = self._fetch_one(f"SELECT {EDUCATION_COLUMNS} FROM education WHERE slug = %s", (slug,))
        if row is None:
            return None
        modules = self._modules_for([row["id"]])
        return Education.model_validate({**row, "modules": modules.get(row["id"], [])})

    def education_exists(self, education_id: UUID) -> bool:
        return self._exists("education", education_id)

    def create_education(self, payload: EducationCreate) -> Education:
        row = self._insert("education", payload.model_dump(), EDUCATION_COLUMNS)
        return Education.model_validate(row)

    def update_education(self, education_id: UUID, changes: dict[str, Any]) -> Education | None:
        row = self._update("education", education_id, changes, EDUCATION_COLUMNS)
        return Education.model_validate(row) if row else None

    def delete_education(self, education_id: UUID) -> bool:
        return self._delete("education", education_id)

    def create_module(self, payload: ModuleCreate) -> Module:
        row = self._insert("modules", payload.model_dump(), MODULE_COLUMNS)
        return Module.model_validate(row)

    def update_module(self, module_id: UUID, changes: dict[str, Any]) -> Module | None:
        row = self._update("modules", module_id, changes, MODULE_COLUMNS)
        return Module.model_validate(row) if row else None

    def delete_module(self, module_id: UUID) -> bool:
        return self._delete("modules", module_id)

    # -- skills -----------------------------------------------------------

    def list_skills(self, category: str | None = None) -> list[Skill]:
        query = f"SELECT {SKILL_COLUMNS} FROM skills WHERE status = 'active'"
        params: list[Any] = []
        if category:
            query += " AND category = %s"
            params.append(category)
        query += " ORDER BY display_order ASC, proficiency_level DESC"
        return [Skill.model_validate(row) for row in self._fetch_all(query, params)]

    def create_skill(self, payload: SkillCreate) -> Skill:
        return Skill.model_validate(self._insert("skills", payload.model_dump(), SKILL_COLUMNS))

    def update_skill(self, skill_id: UUID, changes: dict[str, Any]) -> Skill | None:
        row = self._update("skills", skill_id, changes, SKILL_COLUMNS)
        return Skill.model_validate(row) if row else None

    def delete_skill(self, skill_id: UUID) -> bool:
        return self._delete("skills", skill_id)

    # -- projects ---------------------------------------------------------

    def _skills_for(self, project_ids: list[UUID]) -> dict[UUID, list[SkillSummary]]:
        grouped: dict[UUID, list[SkillSummary]] = defaultdict(list)
        if not project_ids:
            return grouped
        rows = self._fetch_all(
            """
            SELECT ps.project_id, s.id, s.name, s.category, s.proficiency_level, s.icon
            FROM skills s
            JOIN project_skills ps ON ps.skill_id = s.id
            WHERE ps.project_id = ANY(%s)
            ORDER BY ps.is_primary DESC, s.name ASC
            """,
            (project_ids,),
        )
        for row in rows:
            grouped[row.pop("project_id")].append(SkillSummary.model_validate(row))
        return grouped

    def _with_skills(self, rows: list[dict[str, Any]]) -> list[Project]:
        skills = self._skills_for([row["id"] for row in rows])
        return [Project.model_validate({**row, "skills": skills.get(row["id"], [])}) for row in rows]

    def list_projects(self, featured_only: bool = False) -> list[Project]:
        query = (
            f"SELECT {PROJECT_COLUMNS} FROM projects "
            "WHERE (status = 'active' OR (status = 'archived' AND featured = true))"
        )
        if featured_only:
            query += " AND featured = true"
        query += " ORDER BY display_order ASC, created_at DESC"
        return self._with_skills(self._fetch_all(query))

    def get_active_project_by_slug(self, slug: str) -> Project | None:
        row = self._fetch_one(
            f"SELECT {PROJECT_COLUMNS} FROM projects WHERE slug = %s AND status = 'active'",
            (slug,),
        )
        return self._with_skills([row])[0] if row else None

    def increment_project_views(self, project_id: UUID) -> None:
        with self._pool.connection() as conn:
            conn.execute("UPDATE projects SET view_count = view_count + 1 WHERE id = %s", (project_id,))
            conn.commit()

    @staticmethod
    def _link_project_skills(cur: psycopg.Cursor, project_id: UUID, skill_ids: list[UUID]) -> None:
        """Replace a project's skill links; ids with no matching skill are skipped."""
        cur.execute("DELETE FROM project_skills WHERE project_id = %s", (project_id,))
        if skill_ids:
            cur.execute(
                """
                INSERT INTO project_skills (project_id, skill_id, is_primary)
                SELECT %s, s.id, false FROM skills s WHERE s.id = ANY(%s)
                ON CONFLICT DO NOTHING
                """,
                (project_id, list(skill_ids)),
            )

    def create_project(self, payload: ProjectCreate) -> Project:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                row = self._insert_row(cur, "projects", payload.model_dump(exclude={"skill_ids"}), PROJECT_COLUMNS)
                self._link_project_skills(cur, row["id"], payload.skill_ids)
                conn.commit()
        return self._with_skills([row])[0]

    def update_project(
        self, project_id: UUID, changes: dict[str, Any], skill_ids: list[UUID] | None = None
    ) -> Project | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                row = self._update_row(cur, "projects", project_id, changes, PROJECT_COLUMNS)
                if row is not None and skill_ids is not None:
                    self._link_project_skills(cur, project_id, skill_ids)
                conn.commit()
        if row is None:
            return None
        return self._with_skills([row])[0]

    def delete_project(self, project_id: UUID) -> bool:
        return self._delete("projects", project_id)

    # -- blog -------------------------------------------------------------

    def list_published_posts(self, now: datetime) -> list[BlogPost]:
        rows = self._fetch_all(
            f"""
            SELECT {BLOG_COLUMNS}
            FROM blog_posts
            WHERE status = 'published' AND published_at <= %s
            ORDER BY published_at DESC
            """,
            (now,),
        )
        return [BlogPost.model_validate(row) for row in rows]

    def list_all_posts(self) -> list[BlogPost]:
        rows = self._fetch_all(f"SELECT {BLOG_COLUMNS} FROM blog_posts ORDER BY created_at DESC")
        return [BlogPost.model_validate(row) for row in rows]

    def get_published_post_by_slug(self, slug: str) -> BlogPost | None:
        row = self._fetch_one(
            f"SELECT {BLOG_COLUMNS} FROM blog_posts WHERE slug = %s AND status = 'published'",
            (slug,),
        )
        return BlogPost.model_validate(row) if row else None

    def increment_post_views(self, post_id: UUID) -> None:
        with self._pool.connection() as conn:
            conn.execute("UPDATE blog_posts SET view_count = view_count + 1 WHERE id = %s", (post_id,))
            conn.commit()

    def create_post(self, payload: BlogPostCreate) -> BlogPost:
        return BlogPost.model_validate(self._insert("blog_posts", payload.model_dump(), BLOG_COLUMNS))

    def update_post(self, post_id: UUID, changes: dict[str, Any]) -> BlogPost | None:
        row = self._update("blog_posts", post_id, changes, BLOG_COLUMNS)
        return BlogPost.model_validate(row) if row else None

    def delete_post(self, post_id: UUID) -> bool:
        return self._delete("blog_posts", post_id)
