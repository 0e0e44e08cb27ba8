from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

import psycopg
import pytest

from app.repository import PortfolioRepository
from schemas import ProjectCreate


class RecordingCursor:
    def __init__(self, conn: "RecordingConnection") -> None:
        self._conn = conn

    def __enter__(self) -> "RecordingCursor":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def execute(self, query, params=None) -> None:
        text = str(query)
        self._conn.statements.append((" ".join(text.split()), params))
        failure = self._conn.pool.fail_on
        if failure is not None and failure in text:
            raise psycopg.errors.ForeignKeyViolation("skill does not exist")

    def fetchone(self):
        return self._conn.pool.rows.pop(0) if self._conn.pool.rows else None

    def fetchall(self):
        return []


class RecordingConnection:
    def __init__(self, pool: "RecordingPool") -> None:
        self.pool = pool
        self.statements: list[tuple[str, object]] = []
        self.commits = 0

    def cursor(self, row_factory=None) -> RecordingCursor:
        return RecordingCursor(self)

    def commit(self) -> None:
        self.commits += 1


class RecordingPool:
    """Stands in for ``ConnectionPool`` and keeps every connection handed out."""

    def __init__(self, rows=None, fail_on: str | None = None) -> None:
        self.rows = list(rows or [])
        self.fail_on = fail_on
        self.connections: list[RecordingConnection] = []

    @contextmanager
    def connection(self):
        conn = RecordingConnection(self)
        self.connections.append(conn)
        yield conn


def verbs(conn: RecordingConnection) -> list[str]:
    """Leading SQL verb of each statement; composed queries are matched on their repr."""
    found = []
    for statement, _ in conn.statements:
        hits = [(statement.find(verb), verb) for verb in ("INSERT", "UPDATE", "DELETE", "SELECT") if verb in statement]
        found.append(min(hits)[1])
    return found


def project_row(**overrides):
    now = datetime.now(timezone.utc)
    row = {"id": uuid.uuid4(), "name": "API", "slug": "api", "created_at": now, "updated_at": now}
    row.update(overrides)
    return row


def test_create_project_writes_row_and_links_in_one_transaction():
    row = project_row()
    pool = RecordingPool(rows=[row])
    skill_ids = [uuid.uuid4(), uuid.uuid4()]

    project = PortfolioRepository(pool).create_project(
        ProjectCreate(name="API", slug="api", skill_ids=skill_ids)
    )

    assert project.id == row["id"]
    write = pool.connections[0]
    assert verbs(write) == ["INSERT", "DELETE", "INSERT"]
    link_sql, link_params = write.statements[2]
    # only ids that match an existing skill are linked
    assert "FROM skills s WHERE s.id = ANY(%s)" in link_sql
    assert link_params == (row["id"], skill_ids)
    assert write.commits == 1


def test_failed_skill_link_leaves_project_uncommitted():
    pool = RecordingPool(rows=[project_row()], fail_on="project_skills (project_id")

    with pytest.raises(psycopg.errors.ForeignKeyViolation):
        PortfolioRepository(pool).create_project(
            ProjectCreate(name="API", slug="api", skill_ids=[uuid.uuid4()])
        )

    assert len(pool.connections) == 1
    assert pool.connections[0].commits == 0


def test_update_project_replaces_links_on_the_same_connection():
    row = project_row()
    pool = RecordingPool(rows=[row])
    skill_id = uuid.uuid4()

    PortfolioRepository(pool).update_project(row["id"], {"featured": True}, [skill_id])

    write = pool.connections[0]
    assert verbs(write) == ["UPDATE", "DELETE", "INSERT"]
    assert write.commits == 1


def test_update_missing_project_skips_skill_links():
    pool = RecordingPool(rows=[])

    assert PortfolioRepository(pool).update_project(uuid.uuid4(), {}, [uuid.uuid4()]) is None
    assert verbs(pool.connections[0]) == ["UPDATE"]
