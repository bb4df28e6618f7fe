from enum import Enum

from pydantic import BaseModel, ConfigDict


class ActionType(Enum):
    PUSH = "push"
    TAG_PUSH = "tag_push"
    MERGE = "merge"
    NOTE = "note"
    COMMIT_COMMENT = "commit_comment"


class CauseData(BaseModel):
    """Provenance of a build: who triggered it, from where, and on which revision."""

    model_config = ConfigDict(frozen=True)

    action_type: ActionType
    user_name: str | None = None
    user_email: str | None = None
    triggered_by_user: str | None = None
    trigger_phrase: str | None = None

    branch: str | None = None
    source_branch: str | None = None
    target_branch: str | None = None

    source_project_id: int | None = None
    source_repo_homepage: str | None = None
    source_repo_name: str | None = None
    source_namespace: str | None = None
    source_repo_url: str | None = None
    source_repo_ssh_url: str | None = None
    source_repo_http_url: str | None = None

    target_project_id: int | None = None
    target_repo_name: str | None = None
    target_namespace: str | None = None
    target_repo_ssh_url: str | None = None
    target_repo_http_url: str | None = None
    target_project_url: str | None = None

    pull_request_title: str | None = None
    pull_request_description: str | None = None
    pull_request_id: int | None = None
    pull_request_iid: int | None = None
    pull_request_target_project_id: int | None = None

    last_commit: str | None = None
    sha: str | None = None
    after: str | None = None
    ref: str | None = None
    path_with_namespace: str | None = None

    def short_description(self) -> str:
        match self.action_type:
            case ActionType.NOTE:
                return (
                    f"Triggered by {self.triggered_by_user} comment on pull request "
                    f"!{self.pull_request_iid} in {self.path_with_namespace}"
                )
            case ActionType.COMMIT_COMMENT:
                return (
                    f"Triggered by {self.triggered_by_user} comment on commit "
                    f"{self.sha} in {self.path_with_namespace}"
                )
            case _:
                return f"Triggered by {self.action_type.value} event"


class BuildStatusUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: int | None = None
    sha: str | None = None
    ref: str | None = None
