from .compare import compare_versions
from .differ import diff_configs, diff_tool, is_breaking_detail
from .models import (
    Change,
    ChangeDetail,
    ChangeKind,
    ChangeSeverity,
    DiffStats,
    VersionDiff,
    VersionUpdateResult,
)

__all__ = [
    "Change",
    "ChangeDetail",
    "ChangeKind",
    "ChangeSeverity",
    "DiffStats",
    "VersionDiff",
    "VersionUpdateResult",
    "compare_versions",
    "diff_configs",
    "diff_tool",
    "is_breaking_detail",
]
