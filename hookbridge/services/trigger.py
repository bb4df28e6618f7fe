import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog

from hookbridge.config import settings
from hookbridge.database import get_db
from hookbridge.jobs.database import DatabaseJob
from hookbridge.models import ACTIVE_BUILD_STATUSES, Build, BuildStatus
from hookbridge.schemas.builds import BuildCallback
from hookbridge.schemas.cause import BuildStatusUpdate
from hookbridge.schemas.hooks import NoteHook
from hookbridge.services.publisher import MessagePublisher
from hookbridge.services.status_reporter import StatusReporter
from hookbridge.triggers.filters import (
    BranchFilterFactory,
    BuildInstructionFilterFactory,
    PullRequestLabelFilterFactory,
)
from hookbridge.triggers.note import NoteHookTriggerHandler, TriggerResult
from hookbridge.utils.gitee import get_client

logger = structlog.get_logger(__name__)

CALLBACK_STATES = {
    "success": (BuildStatus.SUCCEEDED, "success", "Build succeeded"),
    "failure": (BuildStatus.FAILED, "failed", "Build failed"),
    "cancelled": (BuildStatus.CANCELLED, "canceled", "Build cancelled"),
}


class TriggerService:
    """Runs note hooks through the trigger handler configured from settings."""

    def __init__(self, status_reporter: Optional[StatusReporter] = None):
        self.status_reporter = status_reporter or StatusReporter()

    def create_handler(self) -> NoteHookTriggerHandler:
        return NoteHookTriggerHandler(
            note_regex=settings.note_regex,
            ci_skip_for_test_not_required=settings.ci_skip_for_test_not_required,
            cancel_incomplete_build_on_same_pull_request=(
                settings.cancel_incomplete_build_on_same_pull_request
            ),
            logger=logger,
            publisher_factory=MessagePublisher.get_from_job,
            client_factory=get_client,
        )

    async def handle_note_hook(
        self,
        job_name: str,
        hook: NoteHook,
        webhook_event_id: uuid.UUID | None = None,
    ) -> TriggerResult:
        job = await DatabaseJob(job_name, webhook_event_id=webhook_event_id).load()

        result = await self.create_handler().handle(
            job,
            hook.to_event(),
            BuildInstructionFilterFactory.from_settings(settings),
            settings.skip_last_commit_has_been_build,
            BranchFilterFactory.from_settings(settings),
            PullRequestLabelFilterFactory.from_settings(settings),
        )

        if result.triggered and result.status_update is not None:
            await self.status_reporter.report(
                result.status_update,
                "pending",
                target_url=f"{settings.base_url}/api/builds/{result.build_id}",
                description="Build enqueued",
            )

        return result

    async def handle_callback(self, build_id: uuid.UUID, data: BuildCallback) -> Build:
        async with get_db() as db:
            build = await db.get(Build, build_id)
            if not build:
                raise LookupError(f"Build {build_id} not found")

            if build.status not in ACTIVE_BUILD_STATUSES:
                raise ValueError("Build status already finalized")

            status, state, description = CALLBACK_STATES[data.status]
            build.status = status
            build.finished_at = datetime.now(timezone.utc)
            if data.log_url:
                build.log_url = data.log_url

        logger.info(
            "Build finished",
            build_id=str(build_id),
            job_name=build.job_name,
            status=status.value,
        )

        if build.status_update:
            await self.status_reporter.report(
                BuildStatusUpdate.model_validate(build.status_update),
                state,
                target_url=build.log_url,
                description=description,
            )

        publisher = MessagePublisher.get_from_job(DatabaseJob(build.job_name))
        if publisher is not None:
            try:
                await publisher.notify_build_result(build, data.status)
            except Exception as e:
                logger.error(
                    "Error creating build result note",
                    build_id=str(build_id),
                    error=str(e),
                )

        return build
