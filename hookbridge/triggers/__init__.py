from hookbridge.triggers.cause import build_cause_data, build_status_update
from hookbridge.triggers.filters import (
    BranchFilter,
    BranchFilterFactory,
    BuildInstructionFilter,
    BuildInstructionFilterFactory,
    PullRequestLabelFilter,
    PullRequestLabelFilterFactory,
)
from hookbridge.triggers.note import (
    NoteHookTriggerHandler,
    TriggerOutcome,
    TriggerResult,
)
from hookbridge.triggers.revision import resolve_revision

__all__ = [
    "BranchFilter",
    "BranchFilterFactory",
    "BuildInstructionFilter",
    "BuildInstructionFilterFactory",
    "NoteHookTriggerHandler",
    "PullRequestLabelFilter",
    "PullRequestLabelFilterFactory",
    "TriggerOutcome",
    "TriggerResult",
    "build_cause_data",
    "build_status_update",
    "resolve_revision",
]
