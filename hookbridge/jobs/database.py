import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select

from hookbridge.database import get_db
from hookbridge.jobs.base import Build, Job, RevisionMarker
from hookbridge.models import ACTIVE_BUILD_STATUSES, BuildStatus
from hookbridge.models import Build as BuildRecord
from hookbridge.schemas.cause import BuildStatusUpdate, CauseData

logger = structlog.get_logger(__name__)


class DatabaseBuild(Build):
    def __init__(self, record: BuildRecord):
        self.record = record

    @property
    def id(self) -> uuid.UUID:
        return self.record.id

    def is_building(self) -> bool:
        return self.record.status in ACTIVE_BUILD_STATUSES

    def get_revision_marker(self) -> RevisionMarker | None:
        if not self.record.revision:
            return None
        return RevisionMarker(
            commit=self.record.revision, repo_url=self.record.remote_url
        )

    async def stop(self) -> None:
        async with get_db() as db:
            build = await db.get(BuildRecord, self.record.id)
            if not build:
                raise ValueError(f"Build {self.record.id} not found")

            if build.status not in ACTIVE_BUILD_STATUSES:
                logger.info(
                    "Build already finished, nothing to stop",
                    build_id=str(build.id),
                    status=build.status.value,
                )
                return

            build.status = BuildStatus.CANCELLED
            build.finished_at = datetime.now(timezone.utc)

        self.record.status = BuildStatus.CANCELLED
        self.record.finished_at = build.finished_at
        logger.info("Stopped build", build_id=str(self.record.id))


class DatabaseJob(Job):
    """A job whose build list is the ``build`` table, filtered by job name.

    ``load()`` must be awaited before the synchronous accessors are used.
    """

    def __init__(self, name: str, webhook_event_id: uuid.UUID | None = None):
        self.name = name
        self.webhook_event_id = webhook_event_id
        self._builds: list[DatabaseBuild] = []

    async def load(self) -> "DatabaseJob":
        async with get_db() as db:
            result = await db.execute(
                select(BuildRecord)
                .where(BuildRecord.job_name == self.name)
                .where(BuildRecord.status.in_(ACTIVE_BUILD_STATUSES))
                .order_by(BuildRecord.created_at.desc())
            )
            self._builds = [DatabaseBuild(record) for record in result.scalars()]
        return self

    def get_builds(self) -> list[DatabaseBuild]:
        return list(self._builds)

    def is_building(self) -> bool:
        return any(build.is_building() for build in self._builds)

    async def schedule_build(
        self,
        revision: RevisionMarker,
        cause: CauseData,
        status_update: BuildStatusUpdate | None = None,
    ) -> str:
        async with get_db() as db:
            record = BuildRecord(
                job_name=self.name,
                status=BuildStatus.RUNNING,
                revision=revision.commit,
                remote_name=cause.target_repo_name,
                remote_url=revision.repo_url,
                cause=cause.model_dump(mode="json"),
                status_update=(
                    status_update.model_dump(mode="json") if status_update else None
                ),
                webhook_event_id=self.webhook_event_id,
                started_at=datetime.now(timezone.utc),
            )
            db.add(record)
            await db.flush()
            build_id = record.id

        self._builds.insert(0, DatabaseBuild(record))
        logger.info(
            "Scheduled build",
            job_name=self.name,
            build_id=str(build_id),
            revision=revision.commit,
        )
        return str(build_id)
