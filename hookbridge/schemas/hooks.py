from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NoteAction(str, Enum):
    COMMENT = "comment"
    EDITED = "edited"
    DELETED = "deleted"


class HookModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class User(HookModel):
    id: int | None = None
    name: str | None = None
    username: str | None = None
    email: str | None = None


class Project(HookModel):
    """Repository snapshot as embedded in Gitee hook payloads."""

    id: int | None = None
    name: str | None = None
    namespace: str | None = None
    homepage: str | None = None
    url: str | None = None
    ssh_url: str | None = None
    git_http_url: str | None = None
    path_with_namespace: str | None = None


class BranchData(HookModel):
    label: str | None = None
    ref: str | None = None
    sha: str | None = None
    user: User = Field(default_factory=User)
    repo: Project = Field(default_factory=Project)


class Label(HookModel):
    id: int | None = None
    name: str


class PullRequestAttributes(HookModel):
    id: int | None = None
    number: int | None = None
    title: str | None = None
    body: str | None = None
    state: str | None = None
    head: BranchData = Field(default_factory=BranchData)
    base: BranchData = Field(default_factory=BranchData)
    merge_commit_sha: str | None = None
    merge_reference_name: str | None = None
    mergeable: bool = True
    need_test: bool = True
    labels: list[Label] = Field(default_factory=list)

    @property
    def source_branch(self) -> str | None:
        return self.head.ref

    @property
    def target_branch(self) -> str | None:
        return self.base.ref

    @property
    def source_project_id(self) -> int | None:
        return self.head.repo.id

    @property
    def target_project_id(self) -> int | None:
        return self.base.repo.id

    @property
    def source(self) -> Project:
        return self.head.repo

    @property
    def target(self) -> Project:
        return self.base.repo

    @property
    def label_names(self) -> set[str]:
        return {label.name for label in self.labels}


class Comment(HookModel):
    id: int | None = None
    body: str = ""
    user: User = Field(default_factory=User)
    commit_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def coerce_null_body(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("body") is None:
            return {**data, "body": ""}
        return data


class CommitCommentEvent(HookModel):
    kind: Literal["commit_comment"] = "commit_comment"
    action: str
    comment: Comment
    project: Project


class PullRequestCommentEvent(HookModel):
    kind: Literal["pull_request_comment"] = "pull_request_comment"
    action: str
    comment: Comment
    project: Project
    repository: Project
    pull_request: PullRequestAttributes


class NoteHook(HookModel):
    """Raw Gitee "Note Hook" payload."""

    action: str
    comment: Comment
    project: Project
    repository: Project
    pull_request: PullRequestAttributes | None = None
    noteable_type: str | None = None

    @model_validator(mode="before")
    @classmethod
    def fill_project_from_repository(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        project = data.get("project") or data.get("repository")
        repository = data.get("repository") or data.get("project")
        if project is None:
            return data
        return {**data, "project": project, "repository": repository}

    def to_event(self) -> PullRequestCommentEvent | CommitCommentEvent:
        if self.pull_request is not None:
            return PullRequestCommentEvent(
                action=self.action,
                comment=self.comment,
                project=self.project,
                repository=self.repository,
                pull_request=self.pull_request,
            )
        return CommitCommentEvent(
            action=self.action,
            comment=self.comment,
            project=self.project,
        )
