"""Types for comparing two versions of an MCP server config."""

from enum import Enum

from mcp_forge.mapper.models import MCPServerConfig
from mcp_forge.parser.base import CamelModel


class ChangeKind(str, Enum):
    TOOL_ADDED = "tool_added"
    TOOL_REMOVED = "tool_removed"
    TOOL_MODIFIED = "tool_modified"
    ENV_ADDED = "env_added"
    ENV_REMOVED = "env_removed"
    SERVER_META_CHANGED = "server_meta_changed"


class ChangeSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    BREAKING = "breaking"


class ChangeDetail(CamelModel):
    field: str
    old_value: str | None = None
    new_value: str | None = None


class Change(CamelModel):
    kind: ChangeKind
    severity: ChangeSeverity
    tool_name: str | None = None
    description: str
    details: list[ChangeDetail] | None = None


class DiffStats(CamelModel):
    tools_added: int = 0
    tools_removed: int = 0
    tools_modified: int = 0
    tools_unchanged: int = 0
    env_vars_added: int = 0
    env_vars_removed: int = 0


class VersionDiff(CamelModel):
    summary: str
    changes: list[Change] = []
    is_backwards_compatible: bool
    migration_notes: list[str] = []
    stats: DiffStats

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VersionUpdateResult(CamelModel):
    diff: VersionDiff
    new_config: MCPServerConfig
    old_config: MCPServerConfig
