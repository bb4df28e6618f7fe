from enum import Enum


class BuildInstructionFilterType(Enum):
    NONE = "none"
    CI_SKIP = "ci_skip"


class BranchFilterType(Enum):
    ALL = "all"
    NAME_BASED = "name_based"
    REGEX_BASED = "regex_based"
