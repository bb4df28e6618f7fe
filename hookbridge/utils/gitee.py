from typing import TYPE_CHECKING

import httpx
import structlog

from hookbridge.config import settings
from hookbridge.schemas.hooks import PullRequestAttributes

if TYPE_CHECKING:
    from hookbridge.jobs.base import Job

logger = structlog.get_logger(__name__)

BUILD_STATES = ("pending", "running", "success", "failed", "canceled")


class GiteeClient:
    """Async client for the Gitee REST API."""

    DEFAULT_TIMEOUT = 10.0

    def __init__(self, token: str, base_url: str = "https://gitee.com/api/v5"):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Accept": "application/json",
            "Authorization": f"token {token}",
        }

    async def request(
        self,
        method: str,
        url: str,
        context: dict | None = None,
        **kwargs,
    ) -> httpx.Response | None:
        """Execute request with standard error handling."""
        context = context or {}
        kwargs.setdefault("timeout", self.DEFAULT_TIMEOUT)

        try:
            async with httpx.AsyncClient() as client:
                response = await getattr(client, method)(
                    url, headers=self.headers, **kwargs
                )
                response.raise_for_status()
                return response
        except httpx.RequestError as e:
            logger.error("Request error", url=url, error=str(e), **context)
        except httpx.HTTPStatusError as e:
            logger.error(
                "HTTP error",
                url=url,
                status_code=e.response.status_code,
                response_text=e.response.text,
                **context,
            )
        except Exception as e:
            logger.error("Unexpected error", url=url, error=str(e), **context)
        return None

    async def create_pull_request_note(
        self, pull_request: PullRequestAttributes, text: str
    ) -> bool:
        repo_path = pull_request.base.repo.path_with_namespace
        if not repo_path:
            logger.error(
                "Missing repository path for pull request note. Skipping note."
            )
            return False

        if not pull_request.number:
            logger.error("Missing pull request number. Skipping note.")
            return False

        url = f"{self.base_url}/repos/{repo_path}/pulls/{pull_request.number}/comments"
        response = await self.request(
            "post",
            url,
            json={"body": text},
            context={"repo": repo_path, "pr_number": pull_request.number},
        )
        if response:
            logger.info(
                "Successfully created pull request note",
                repo=repo_path,
                pr_number=pull_request.number,
            )
            return True
        return False

    async def update_build_status(
        self,
        project_id: int,
        sha: str,
        state: str,
        ref: str | None = None,
        target_url: str | None = None,
        description: str | None = None,
        name: str = "hookbridge",
    ) -> bool:
        url = f"{self.base_url}/projects/{project_id}/statuses/{sha}"
        payload = {"state": state, "name": name}
        if ref:
            payload["ref"] = ref
        if target_url:
            payload["target_url"] = target_url
        if description:
            payload["description"] = description

        response = await self.request(
            "post",
            url,
            json=payload,
            context={"project_id": project_id, "sha": sha},
        )
        if response:
            logger.info(
                "Successfully updated build status",
                project_id=project_id,
                commit=sha,
                state=state,
            )
            return True
        return False


_gitee_client: GiteeClient | None = None


def get_client(job: "Job | None" = None) -> GiteeClient | None:
    """Get the Gitee client for a job, or None when no connection is configured."""
    global _gitee_client
    if not settings.gitee_token:
        logger.debug(
            "No Gitee token configured",
            job_name=getattr(job, "name", None),
        )
        return None
    if _gitee_client is None:
        _gitee_client = GiteeClient(settings.gitee_token, settings.gitee_api_url)
    return _gitee_client
