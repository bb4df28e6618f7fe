import copy
import os
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Force SQLite for tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from hookbridge.models import Base  # noqa: E402

PROJECT = {
    "id": 1001,
    "name": "demo",
    "namespace": "acme",
    "homepage": "https://gitee.com/acme/demo",
    "url": "https://gitee.com/acme/demo",
    "ssh_url": "git@gitee.com:acme/demo.git",
    "git_http_url": "https://gitee.com/acme/demo.git",
    "path_with_namespace": "acme/demo",
}

FORK = {
    "id": 2002,
    "name": "demo",
    "namespace": "octo",
    "homepage": "https://gitee.com/octo/demo",
    "url": "https://gitee.com/octo/demo",
    "ssh_url": "git@gitee.com:octo/demo.git",
    "git_http_url": "https://gitee.com/octo/demo.git",
    "path_with_namespace": "octo/demo",
}

COMMENTER = {
    "id": 7,
    "name": "Reviewer",
    "username": "reviewer",
    "email": "reviewer@example.com",
}

AUTHOR = {
    "id": 8,
    "name": "Author",
    "username": "author",
    "email": "author@example.com",
}

PULL_REQUEST = {
    "id": 5555,
    "number": 12,
    "title": "Add feature",
    "body": "Implements the feature",
    "state": "open",
    "head": {
        "label": "octo:feature-1",
        "ref": "feature-1",
        "sha": "1111111111111111111111111111111111111111",
        "user": AUTHOR,
        "repo": FORK,
    },
    "base": {
        "label": "acme:master",
        "ref": "master",
        "sha": "2222222222222222222222222222222222222222",
        "user": COMMENTER,
        "repo": PROJECT,
    },
    "merge_commit_sha": "cafef00d",
    "merge_reference_name": "refs/pull/12/MERGE",
    "mergeable": True,
    "need_test": True,
    "labels": [{"id": 1, "name": "ready"}],
}

TRIGGER_PHRASE = "Jenkins please retry a build"


def make_pull_request_note_payload(
    body: str = TRIGGER_PHRASE, /, **pull_request: Any
) -> dict[str, Any]:
    pr = copy.deepcopy(PULL_REQUEST)
    pr.update(pull_request)
    return {
        "action": "comment",
        "hook_name": "note_hooks",
        "noteable_type": "PullRequest",
        "comment": {"id": 1, "body": body, "user": COMMENTER},
        "project": copy.deepcopy(PROJECT),
        "repository": copy.deepcopy(PROJECT),
        "pull_request": pr,
    }


def make_commit_note_payload(
    body: str = TRIGGER_PHRASE, commit_id: str | None = "deadbeef"
) -> dict[str, Any]:
    return {
        "action": "comment",
        "hook_name": "note_hooks",
        "noteable_type": "Commit",
        "comment": {
            "id": 2,
            "body": body,
            "user": COMMENTER,
            "commit_id": commit_id,
        },
        "project": copy.deepcopy(PROJECT),
        "repository": copy.deepcopy(PROJECT),
    }


def create_mock_get_db(session):
    @asynccontextmanager
    async def mock_get_db(*args, **kwargs):
        yield session

    return mock_get_db


async def create_test_get_db():
    """In-memory database bound to the running event loop."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    @asynccontextmanager
    async def test_get_db(*args, **kwargs):
        async with session_factory() as session:
            async with session.begin():
                yield session

    return engine, test_get_db


@pytest.fixture
def mock_db_session():
    """Create a mock database session."""
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.commit = AsyncMock()
    mock_session.refresh = AsyncMock()
    mock_session.flush = AsyncMock()
    return mock_session
