import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select

from hookbridge.config import Settings
from hookbridge.models import Build, BuildStatus
from hookbridge.schemas.builds import BuildCallback
from hookbridge.schemas.cause import BuildStatusUpdate
from hookbridge.schemas.filters import BranchFilterType
from hookbridge.schemas.hooks import NoteHook
from hookbridge.services.trigger import TriggerService
from hookbridge.triggers.note import TriggerOutcome
from tests.conftest import (
    create_test_get_db,
    make_commit_note_payload,
    make_pull_request_note_payload,
)


@pytest.fixture
async def test_db():
    engine, test_get_db = await create_test_get_db()
    with (
        patch("hookbridge.jobs.database.get_db", test_get_db),
        patch("hookbridge.services.trigger.get_db", test_get_db),
    ):
        yield test_get_db
    await engine.dispose()


@pytest.fixture
def test_settings():
    test_settings = Settings(base_url="https://ci.example.com")
    with patch("hookbridge.services.trigger.settings", test_settings):
        yield test_settings


@pytest.fixture
def status_reporter():
    reporter = MagicMock()
    reporter.report = AsyncMock(return_value=True)
    return reporter


@pytest.fixture
def publisher():
    publisher = MagicMock()
    publisher.notify_build_result = AsyncMock()
    with patch(
        "hookbridge.services.trigger.MessagePublisher.get_from_job",
        return_value=publisher,
    ):
        yield publisher


@pytest.fixture
def service(status_reporter):
    return TriggerService(status_reporter=status_reporter)


async def all_builds(test_db) -> list[Build]:
    async with test_db() as db:
        result = await db.execute(select(Build).order_by(Build.started_at))
        return list(result.scalars())


@pytest.mark.asyncio
async def test_pull_request_note_schedules_build(
    test_db, test_settings, service, status_reporter
):
    hook = NoteHook.model_validate(make_pull_request_note_payload())
    event_id = uuid.uuid4()

    result = await service.handle_note_hook("demo-job", hook, event_id)

    assert result.outcome is TriggerOutcome.TRIGGERED
    builds = await all_builds(test_db)
    assert len(builds) == 1
    assert str(builds[0].id) == result.build_id
    assert builds[0].revision == "cafef00d"
    assert builds[0].status == BuildStatus.RUNNING

    status_reporter.report.assert_awaited_once_with(
        BuildStatusUpdate(project_id=2002, sha="cafef00d", ref="master"),
        "pending",
        target_url=f"https://ci.example.com/api/builds/{result.build_id}",
        description="Build enqueued",
    )


@pytest.mark.asyncio
async def test_commit_note_does_not_report_status(
    test_db, test_settings, service, status_reporter
):
    hook = NoteHook.model_validate(make_commit_note_payload())

    result = await service.handle_note_hook("demo-job", hook)

    assert result.triggered
    assert result.revision == "deadbeef"
    status_reporter.report.assert_not_called()


@pytest.mark.asyncio
async def test_skipped_note_creates_no_build(
    test_db, test_settings, service, status_reporter
):
    hook = NoteHook.model_validate(make_pull_request_note_payload("looks good"))

    result = await service.handle_note_hook("demo-job", hook)

    assert result.outcome is TriggerOutcome.INVALID_TRIGGER
    assert await all_builds(test_db) == []
    status_reporter.report.assert_not_called()


@pytest.mark.asyncio
async def test_settings_configure_filters(test_db, test_settings, service):
    test_settings.branch_filter_type = BranchFilterType.NAME_BASED
    test_settings.include_branches_spec = "release/*"
    hook = NoteHook.model_validate(make_pull_request_note_payload())

    result = await service.handle_note_hook("demo-job", hook)

    assert result.outcome is TriggerOutcome.BRANCH_FILTERED


@pytest.mark.asyncio
async def test_retrigger_cancels_incomplete_build(test_db, test_settings, service):
    test_settings.cancel_incomplete_build_on_same_pull_request = True
    hook = NoteHook.model_validate(
        make_pull_request_note_payload(merge_commit_sha=None)
    )

    first = await service.handle_note_hook("demo-job", hook)
    second = await service.handle_note_hook("demo-job", hook)

    assert first.triggered and second.triggered
    statuses = {str(b.id): b.status for b in await all_builds(test_db)}
    assert statuses == {
        first.build_id: BuildStatus.CANCELLED,
        second.build_id: BuildStatus.RUNNING,
    }


@pytest.mark.asyncio
async def test_retrigger_keeps_builds_of_other_jobs(test_db, test_settings, service):
    test_settings.cancel_incomplete_build_on_same_pull_request = True
    hook = NoteHook.model_validate(
        make_pull_request_note_payload(merge_commit_sha=None)
    )

    other = await service.handle_note_hook("other-job", hook)
    await service.handle_note_hook("demo-job", hook)

    statuses = {str(b.id): b.status for b in await all_builds(test_db)}
    assert statuses[other.build_id] == BuildStatus.RUNNING


@pytest.mark.asyncio
async def test_callback_finishes_build(
    test_db, test_settings, service, status_reporter, publisher
):
    hook = NoteHook.model_validate(make_pull_request_note_payload())
    result = await service.handle_note_hook("demo-job", hook)
    status_reporter.report.reset_mock()

    build = await service.handle_callback(
        uuid.UUID(result.build_id),
        BuildCallback(status="failure", log_url="https://ci.example.com/log/1"),
    )

    assert build.status == BuildStatus.FAILED
    assert build.finished_at is not None
    assert build.finished_at.tzinfo is not None
    assert build.log_url == "https://ci.example.com/log/1"
    status_reporter.report.assert_awaited_once_with(
        BuildStatusUpdate(project_id=2002, sha="cafef00d", ref="master"),
        "failed",
        target_url="https://ci.example.com/log/1",
        description="Build failed",
    )
    publisher.notify_build_result.assert_awaited_once_with(build, "failure")


@pytest.mark.asyncio
async def test_callback_publisher_errors_are_logged(
    test_db, test_settings, service, publisher
):
    publisher.notify_build_result.side_effect = RuntimeError("gitee down")
    hook = NoteHook.model_validate(make_pull_request_note_payload())
    result = await service.handle_note_hook("demo-job", hook)

    build = await service.handle_callback(
        uuid.UUID(result.build_id), BuildCallback(status="success")
    )

    assert build.status == BuildStatus.SUCCEEDED


@pytest.mark.asyncio
async def test_callback_for_finished_build(test_db, test_settings, service, publisher):
    hook = NoteHook.model_validate(make_pull_request_note_payload())
    result = await service.handle_note_hook("demo-job", hook)
    build_id = uuid.UUID(result.build_id)
    await service.handle_callback(build_id, BuildCallback(status="cancelled"))

    with pytest.raises(ValueError, match="already finalized"):
        await service.handle_callback(build_id, BuildCallback(status="success"))


@pytest.mark.asyncio
async def test_callback_for_unknown_build(test_db, service):
    with pytest.raises(LookupError):
        await service.handle_callback(uuid.uuid4(), BuildCallback(status="success"))
