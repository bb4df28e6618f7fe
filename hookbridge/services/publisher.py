from typing import TYPE_CHECKING, Optional

import structlog

from hookbridge.config import settings
from hookbridge.models import Build
from hookbridge.schemas.cause import ActionType, CauseData
from hookbridge.schemas.hooks import BranchData, Project, PullRequestAttributes
from hookbridge.utils.gitee import GiteeClient, get_client

if TYPE_CHECKING:
    from hookbridge.jobs.base import Job

logger = structlog.get_logger(__name__)


class MessagePublisher:
    """Posts build results back to the pull request that triggered them."""

    def __init__(self, client: Optional[GiteeClient] = None):
        self.client = client

    @classmethod
    def get_from_job(cls, job: "Job | None") -> Optional["MessagePublisher"]:
        if not settings.publish_pull_request_notes:
            return None
        return cls(client=get_client(job))

    async def notify_build_result(self, build: Build, status: str) -> None:
        cause = CauseData.model_validate(build.cause)
        if cause.action_type is not ActionType.NOTE or not cause.pull_request_iid:
            logger.info(
                "Build was not triggered from a pull request, skipping note",
                build_id=str(build.id),
            )
            return

        client = self.client or get_client()
        if client is None:
            logger.warning(
                "No Gitee client available, skipping note", build_id=str(build.id)
            )
            return

        match status:
            case "success":
                summary = ":white_check_mark: Build succeeded."
            case "failure":
                summary = ":x: Build failed."
            case "cancelled":
                summary = ":no_entry_sign: Build cancelled."
            case _:
                summary = f"Build finished with status: {status}."

        if build.log_url:
            summary = f"{summary} [View log]({build.log_url})"

        pull_request = PullRequestAttributes(
            id=cause.pull_request_id,
            number=cause.pull_request_iid,
            base=BranchData(
                ref=cause.target_branch,
                repo=Project(
                    id=cause.target_project_id,
                    path_with_namespace=cause.path_with_namespace,
                ),
            ),
        )
        await client.create_pull_request_note(pull_request, summary)
