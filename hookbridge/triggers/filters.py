import re
from collections.abc import Iterable

import structlog

from hookbridge.config import Settings
from hookbridge.schemas.filters import BranchFilterType, BuildInstructionFilterType

logger = structlog.get_logger(__name__)

CI_SKIP_MARKER = "[ci-skip]"


def split_spec(spec: str | None) -> list[str]:
    if not spec:
        return []
    return [item.strip() for item in spec.split(",") if item.strip()]


class BuildInstructionFilter:
    def __init__(self, filter_type: BuildInstructionFilterType):
        self.filter_type = filter_type

    def is_build_allow(self, text: str | None) -> bool:
        if self.filter_type is BuildInstructionFilterType.NONE or not text:
            return True
        return CI_SKIP_MARKER not in text.lower()


class BranchFilter:
    def is_branch_allowed(self, branch: str | None) -> bool:
        return True


class NameBasedBranchFilter(BranchFilter):
    """Include/exclude lists of branch names; ``*`` and ``**`` are wildcards."""

    def __init__(self, include_spec: str | None, exclude_spec: str | None):
        self.include = split_spec(include_spec)
        self.exclude = split_spec(exclude_spec)

    def is_branch_allowed(self, branch: str | None) -> bool:
        if branch is None:
            return True
        return self._is_included(branch) and not self._is_excluded(branch)

    def _is_included(self, branch: str) -> bool:
        return not self.include or any(
            _match_branch(pattern, branch) for pattern in self.include
        )

    def _is_excluded(self, branch: str) -> bool:
        return any(_match_branch(pattern, branch) for pattern in self.exclude)


class RegexBasedBranchFilter(BranchFilter):
    def __init__(self, target_branch_regex: str | None):
        self.pattern: re.Pattern[str] | None = None
        if target_branch_regex:
            try:
                self.pattern = re.compile(target_branch_regex)
            except re.error as e:
                logger.warning(
                    "Invalid target branch regex, allowing all branches",
                    regex=target_branch_regex,
                    error=str(e),
                )

    def is_branch_allowed(self, branch: str | None) -> bool:
        if branch is None or self.pattern is None:
            return True
        return self.pattern.fullmatch(branch) is not None


def _branch_pattern_regex(pattern: str) -> str:
    # "**" crosses path separators, a single "*" stays within one segment.
    parts = []
    for segment in re.split(r"(\*\*|\*)", pattern):
        if segment == "**":
            parts.append(".*")
        elif segment == "*":
            parts.append("[^/]*")
        else:
            parts.append(re.escape(segment))
    return "".join(parts)


def _match_branch(pattern: str, branch: str) -> bool:
    if pattern == branch:
        return True
    return re.fullmatch(_branch_pattern_regex(pattern), branch) is not None


class PullRequestLabelFilter:
    def __init__(
        self,
        include_labels: Iterable[str] = (),
        exclude_labels: Iterable[str] = (),
    ):
        self.include = set(include_labels)
        self.exclude = set(exclude_labels)

    def is_allowed(self, labels: Iterable[str] | None) -> bool:
        present = set(labels or ())
        if self.include and not present & self.include:
            return False
        return not present & self.exclude


class BranchFilterFactory:
    @staticmethod
    def from_settings(settings: Settings) -> BranchFilter:
        match settings.branch_filter_type:
            case BranchFilterType.NAME_BASED:
                return NameBasedBranchFilter(
                    settings.include_branches_spec, settings.exclude_branches_spec
                )
            case BranchFilterType.REGEX_BASED:
                return RegexBasedBranchFilter(settings.target_branch_regex)
            case _:
                return BranchFilter()


class PullRequestLabelFilterFactory:
    @staticmethod
    def from_settings(settings: Settings) -> PullRequestLabelFilter:
        return PullRequestLabelFilter(
            split_spec(settings.include_pull_request_labels),
            split_spec(settings.exclude_pull_request_labels),
        )


class BuildInstructionFilterFactory:
    @staticmethod
    def from_settings(settings: Settings) -> BuildInstructionFilter:
        return BuildInstructionFilter(settings.build_instruction_filter_type)
