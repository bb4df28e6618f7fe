from typing import Optional

import structlog

from hookbridge.config import settings
from hookbridge.schemas.cause import BuildStatusUpdate
from hookbridge.utils.gitee import BUILD_STATES, GiteeClient, get_client

logger = structlog.get_logger(__name__)


class StatusReporter:
    def __init__(self, client: Optional[GiteeClient] = None):
        self.client = client

    async def report(
        self,
        status_update: BuildStatusUpdate,
        state: str,
        target_url: str | None = None,
        description: str | None = None,
    ) -> bool:
        if status_update.project_id is None:
            logger.error("Missing project id. Skipping status update.")
            return False

        if not status_update.sha:
            logger.error("Missing commit SHA. Skipping status update.")
            return False

        if state not in BUILD_STATES:
            logger.error(f"Invalid state '{state}'. Skipping status update.")
            return False

        client = self.client or get_client()
        if client is None:
            logger.warning(
                "No Gitee client available. Skipping status update.",
                project_id=status_update.project_id,
                commit=status_update.sha,
            )
            return False

        return await client.update_build_status(
            project_id=status_update.project_id,
            sha=status_update.sha,
            state=state,
            ref=status_update.ref,
            target_url=target_url,
            description=description,
            name=settings.status_context,
        )
