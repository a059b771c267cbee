from enum import Enum


class BuildStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED_CACHED = "skipped-cached"
    # Not executed because a producer of one of its inputs failed
    BLOCKED = "blocked"


class ToolchainCapability(str, Enum):
    COMPILE = "compile"
    PACKAGE = "package"


def is_success(status: BuildStatus) -> bool:
    return status in (BuildStatus.SUCCEEDED, BuildStatus.SKIPPED_CACHED)
