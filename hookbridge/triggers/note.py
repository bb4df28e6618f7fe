import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from hookbridge.exceptions import InvalidRemoteUrl, NoRevisionToBuild
from hookbridge.jobs.base import Job, RemoteConfig, RevisionMarker
from hookbridge.schemas.cause import BuildStatusUpdate, CauseData
from hookbridge.schemas.hooks import (
    CommitCommentEvent,
    NoteAction,
    PullRequestAttributes,
    PullRequestCommentEvent,
)
from hookbridge.triggers.cause import build_cause_data, build_status_update
from hookbridge.triggers.filters import (
    BranchFilter,
    BuildInstructionFilter,
    PullRequestLabelFilter,
)
from hookbridge.triggers.revision import resolve_revision

CANNOT_MERGE_NOTE = (
    ":bangbang: This pull request can not be merge! The build will not be "
    "triggered. Please manual merge conflict."
)


class TriggerOutcome(Enum):
    TRIGGERED = "triggered"
    INVALID_TRIGGER = "invalid_trigger"
    NOT_MERGEABLE = "not_mergeable"
    TEST_NOT_REQUIRED = "test_not_required"
    CI_SKIP = "ci_skip"
    COMMIT_SKIP = "commit_skip"
    BRANCH_FILTERED = "branch_filtered"
    LABEL_FILTERED = "label_filtered"
    NO_REVISION = "no_revision"


@dataclass(frozen=True)
class TriggerResult:
    outcome: TriggerOutcome
    build_id: str | None = None
    revision: str | None = None
    cause: CauseData | None = None
    status_update: BuildStatusUpdate | None = None

    @property
    def triggered(self) -> bool:
        return self.outcome is TriggerOutcome.TRIGGERED


class NoteHookTriggerHandler:
    """Decides whether a comment event starts a build, and starts it.

    Gates run in order and the first negative one ends handling:
    trigger phrase, mergeability, test-required, ci-skip, commit-skip,
    superseded-build cancellation, branch and label filters, revision
    resolution. Only then is a build scheduled on the job.
    """

    trigger_type = "note"

    def __init__(
        self,
        note_regex: str | None,
        ci_skip_for_test_not_required: bool = False,
        cancel_incomplete_build_on_same_pull_request: bool = False,
        logger: Any = None,
        publisher_factory: Callable[[Job], Any] | None = None,
        client_factory: Callable[[Job], Any] | None = None,
    ):
        self.note_regex = note_regex
        self.ci_skip_for_test_not_required = ci_skip_for_test_not_required
        self.cancel_incomplete_build_on_same_pull_request = (
            cancel_incomplete_build_on_same_pull_request
        )
        self.logger = logger or structlog.get_logger(__name__)
        self.publisher_factory = publisher_factory or (lambda job: None)
        self.client_factory = client_factory or (lambda job: None)

    async def handle(
        self,
        job: Job,
        event: PullRequestCommentEvent | CommitCommentEvent,
        build_instruction_filter: BuildInstructionFilter,
        skip_last_commit_has_been_build: bool,
        branch_filter: BranchFilter,
        label_filter: PullRequestLabelFilter,
    ) -> TriggerResult:
        log = self.logger.bind(job_name=job.name, trigger_type=self.trigger_type)

        if not self.is_valid_trigger(event):
            log.debug("Comment is not a valid trigger", action=event.action)
            return TriggerResult(TriggerOutcome.INVALID_TRIGGER)

        if isinstance(event, PullRequestCommentEvent):
            pull_request = event.pull_request
            if not pull_request.mergeable:
                log.info(
                    "This pull request can not be merged",
                    pr_number=pull_request.number,
                )
                await self._notify_not_mergeable(job, pull_request)
                return TriggerResult(TriggerOutcome.NOT_MERGEABLE)

            if self.ci_skip_for_test_not_required and not pull_request.need_test:
                log.info(
                    "Skipping because this pull request does not need tests",
                    pr_number=pull_request.number,
                )
                return TriggerResult(TriggerOutcome.TEST_NOT_REQUIRED)

        if self.is_ci_skip(event, build_instruction_filter):
            log.info("Skipping due to ci-skip")
            return TriggerResult(TriggerOutcome.CI_SKIP)

        if self.is_commit_skip(job, event, skip_last_commit_has_been_build):
            log.info("Skipping because the last commit has already been built")
            return TriggerResult(TriggerOutcome.COMMIT_SKIP)

        await self.cancel_incomplete_build_if_necessary(job, event)

        target_branch = self.get_target_branch(event)
        if not branch_filter.is_branch_allowed(target_branch):
            log.info("Branch is not allowed", target_branch=target_branch)
            return TriggerResult(TriggerOutcome.BRANCH_FILTERED)

        labels = self.get_labels(event)
        if labels is not None and not label_filter.is_allowed(labels):
            log.info("Pull request labels are not allowed", labels=sorted(labels))
            return TriggerResult(TriggerOutcome.LABEL_FILTERED)

        try:
            revision = resolve_revision(event)
        except NoRevisionToBuild:
            log.error("Failed to find a revision to build", kind=event.kind)
            return TriggerResult(TriggerOutcome.NO_REVISION)

        cause = build_cause_data(event)
        status_update = (
            build_status_update(event)
            if isinstance(event, PullRequestCommentEvent)
            else None
        )
        marker = RevisionMarker(commit=revision, repo_url=self.get_repo_url(event))

        build_id = await job.schedule_build(marker, cause, status_update)
        log.info(
            "Build scheduled",
            build_id=build_id,
            revision=revision,
            description=cause.short_description(),
        )
        return TriggerResult(
            TriggerOutcome.TRIGGERED,
            build_id=build_id,
            revision=revision,
            cause=cause,
            status_update=status_update,
        )

    def is_valid_trigger(
        self, event: PullRequestCommentEvent | CommitCommentEvent
    ) -> bool:
        return self.is_valid_trigger_action(
            event.action
        ) and self.is_valid_trigger_phrase(event.comment.body)

    @staticmethod
    def is_valid_trigger_action(action: str) -> bool:
        return action == NoteAction.COMMENT.value

    def is_valid_trigger_phrase(self, note: str | None) -> bool:
        if not self.note_regex or not self.note_regex.strip():
            return False
        try:
            pattern = re.compile(self.note_regex)
        except re.error as e:
            self.logger.warning(
                "Invalid trigger phrase regex", regex=self.note_regex, error=str(e)
            )
            return False
        return pattern.fullmatch(note or "") is not None

    def is_ci_skip(
        self,
        event: PullRequestCommentEvent | CommitCommentEvent,
        build_instruction_filter: BuildInstructionFilter,
    ) -> bool:
        match event:
            case PullRequestCommentEvent(pull_request=pull_request):
                return not build_instruction_filter.is_build_allow(pull_request.body)
            case _:
                return False

    def is_commit_skip(
        self,
        job: Job,
        event: PullRequestCommentEvent | CommitCommentEvent,
        skip_last_commit_has_been_build: bool,
    ) -> bool:
        # An explicit comment always asks for a new build.
        return False

    async def cancel_incomplete_build_if_necessary(
        self, job: Job, event: PullRequestCommentEvent | CommitCommentEvent
    ) -> None:
        if not self.cancel_incomplete_build_on_same_pull_request:
            return
        if not isinstance(event, PullRequestCommentEvent):
            return

        merge_reference_name = event.pull_request.merge_reference_name
        try:
            remotes = [
                RemoteConfig.from_url(
                    event.repository.name, event.repository.git_http_url
                )
            ]
        except InvalidRemoteUrl as e:
            self.logger.warning(
                "Parsing repo url error", url=e.url, job_name=job.name
            )
            return

        for build in job.get_builds():
            if not job.is_building():
                break

            if not build.is_building():
                continue

            marker = build.get_revision_marker()
            if marker is None:
                continue

            if (
                marker.can_originate_from(remotes)
                and marker.commit == merge_reference_name
            ):
                try:
                    await build.stop()
                    self.logger.warning(
                        "Abort incomplete build",
                        job_name=job.name,
                        revision=marker.commit,
                    )
                except Exception as e:
                    self.logger.warning(
                        "Unable to abort incomplete build",
                        job_name=job.name,
                        revision=marker.commit,
                        error=str(e),
                    )

    @staticmethod
    def get_target_branch(
        event: PullRequestCommentEvent | CommitCommentEvent,
    ) -> str | None:
        match event:
            case PullRequestCommentEvent(pull_request=pull_request):
                return pull_request.target_branch
            case _:
                return None

    @staticmethod
    def get_labels(
        event: PullRequestCommentEvent | CommitCommentEvent,
    ) -> set[str] | None:
        match event:
            case PullRequestCommentEvent(pull_request=pull_request):
                return pull_request.label_names
            case _:
                return None

    @staticmethod
    def get_repo_url(
        event: PullRequestCommentEvent | CommitCommentEvent,
    ) -> str | None:
        match event:
            case PullRequestCommentEvent(repository=repository):
                return repository.git_http_url
            case CommitCommentEvent(project=project):
                return project.git_http_url
        return None

    async def _notify_not_mergeable(
        self, job: Job, pull_request: PullRequestAttributes
    ) -> None:
        publisher = self.publisher_factory(job)
        client = self.client_factory(job)
        if publisher is None or client is None:
            return

        self.logger.info(
            "Sending not mergeable note to Gitee", pr_number=pull_request.number
        )
        try:
            await client.create_pull_request_note(pull_request, CANNOT_MERGE_NOTE)
        except Exception as e:
            self.logger.warning(
                "Failed to send not mergeable note",
                pr_number=pull_request.number,
                error=str(e),
            )
