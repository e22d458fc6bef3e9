"""Structural diff between two MCP server configs.

Tools are matched by name. Removed tools are breaking; a modified tool is
a warning when any of its details could break an existing caller (a
parameter removed, a required parameter added, a type or HTTP method
change) and info otherwise.
"""

import json

from mcp_forge.mapper.models import MCPInputSchema, MCPServerConfig, MCPTool

from .models import (
    Change,
    ChangeDetail,
    ChangeKind,
    ChangeSeverity,
    DiffStats,
    VersionDiff,
)


def diff_configs(old: MCPServerConfig, new: MCPServerConfig) -> VersionDiff:
    """Compare two configs and produce a VersionDiff."""
    changes: list[Change] = []
    migration_notes: list[str] = []

    old_tools = {t.name: t for t in old.tools}
    new_tools = {t.name: t for t in new.tools}
    old_envs = {e.name: e for e in old.env_vars}
    new_envs = {e.name: e for e in new.env_vars}

    meta = _diff_server_meta(old, new)
    if meta:
        changes.append(
            Change(
                kind=ChangeKind.SERVER_META_CHANGED,
                severity=ChangeSeverity.INFO,
                description="Server metadata updated",
                details=meta,
            )
        )

    for name, tool in new_tools.items():
        if name not in old_tools:
            changes.append(
                Change(
                    kind=ChangeKind.TOOL_ADDED,
                    severity=ChangeSeverity.INFO,
                    tool_name=name,
                    description=f"New tool: {name} - {_truncate(tool.description, 80)}",
                )
            )

    for name, tool in old_tools.items():
        if name not in new_tools:
            changes.append(
                Change(
                    kind=ChangeKind.TOOL_REMOVED,
                    severity=ChangeSeverity.BREAKING,
                    tool_name=name,
                    description=f"Removed tool: {name} - {_truncate(tool.description, 80)}",
                )
            )
            migration_notes.append(
                f'Tool "{name}" was removed. Any automation referencing this tool will break.'
            )

    modified: set[str] = set()
    for name, new_tool in new_tools.items():
        old_tool = old_tools.get(name)
        if old_tool is None:
            continue
        details = diff_tool(old_tool, new_tool)
        if not details:
            continue
        modified.add(name)
        breaking = any(is_breaking_detail(d) for d in details)
        plural = "" if len(details) == 1 else "s"
        changes.append(
            Change(
                kind=ChangeKind.TOOL_MODIFIED,
                severity=ChangeSeverity.WARNING if breaking else ChangeSeverity.INFO,
                tool_name=name,
                description=f"Modified tool: {name} ({len(details)} change{plural})",
                details=details,
            )
        )
        if breaking:
            migration_notes.append(
                f'Tool "{name}" has breaking parameter changes - verify automation compatibility.'
            )

    for name, env_var in new_envs.items():
        if name not in old_envs:
            changes.append(
                Change(
                    kind=ChangeKind.ENV_ADDED,
                    severity=ChangeSeverity.INFO,
                    description=f"New env var: {name} - {env_var.description}",
                )
            )
            if env_var.required:
                migration_notes.append(
                    f'New required env var "{name}" must be set before running the updated server.'
                )

    for name in old_envs:
        if name not in new_envs:
            changes.append(
                Change(
                    kind=ChangeKind.ENV_REMOVED,
                    severity=ChangeSeverity.INFO,
                    description=f"Removed env var: {name}",
                )
            )

    def count(kind: ChangeKind) -> int:
        return sum(1 for c in changes if c.kind is kind)

    stats = DiffStats(
        tools_added=count(ChangeKind.TOOL_ADDED),
        tools_removed=count(ChangeKind.TOOL_REMOVED),
        tools_modified=count(ChangeKind.TOOL_MODIFIED),
        tools_unchanged=sum(1 for n in new_tools if n in old_tools and n not in modified),
        env_vars_added=count(ChangeKind.ENV_ADDED),
        env_vars_removed=count(ChangeKind.ENV_REMOVED),
    )
    is_compatible = not any(c.severity is ChangeSeverity.BREAKING for c in changes)

    return VersionDiff(
        summary=_summarize(stats, is_compatible),
        changes=changes,
        is_backwards_compatible=is_compatible,
        migration_notes=migration_notes,
        stats=stats,
    )


def diff_tool(old: MCPTool, new: MCPTool) -> list[ChangeDetail]:
    """Field-level differences between two versions of one tool."""
    details: list[ChangeDetail] = []

    if old.description != new.description:
        details.append(
            ChangeDetail(
                field="description",
                old_value=_truncate(old.description, 60),
                new_value=_truncate(new.description, 60),
            )
        )
    if old.handler.method.upper() != new.handler.method.upper():
        details.append(
            ChangeDetail(
                field="handler.method",
                old_value=old.handler.method.upper(),
                new_value=new.handler.method.upper(),
            )
        )
    if old.handler.path != new.handler.path:
        details.append(
            ChangeDetail(field="handler.path", old_value=old.handler.path, new_value=new.handler.path)
        )
    if old.handler.base_url != new.handler.base_url:
        details.append(
            ChangeDetail(
                field="handler.baseUrl",
                old_value=old.handler.base_url,
                new_value=new.handler.base_url,
            )
        )

    details.extend(diff_input_schema(old.input_schema, new.input_schema))
    return details


def diff_input_schema(old: MCPInputSchema, new: MCPInputSchema) -> list[ChangeDetail]:
    details: list[ChangeDetail] = []
    old_required = set(old.required)
    new_required = set(new.required)

    for name, prop in new.properties.items():
        if name not in old.properties:
            status = "required" if name in new_required else "optional"
            details.append(
                ChangeDetail(
                    field=f"param.{name}",
                    new_value=f"added ({status}, type: {prop.type})",
                )
            )

    for name, prop in old.properties.items():
        if name not in new.properties:
            details.append(
                ChangeDetail(
                    field=f"param.{name}",
                    old_value=f"existed (type: {prop.type})",
                    new_value="removed",
                )
            )

    for name, new_prop in new.properties.items():
        old_prop = old.properties.get(name)
        if old_prop is None:
            continue

        if old_prop.type != new_prop.type:
            details.append(
                ChangeDetail(field=f"param.{name}.type", old_value=old_prop.type, new_value=new_prop.type)
            )

        was_required = name in old_required
        is_required = name in new_required
        if was_required != is_required:
            details.append(
                ChangeDetail(
                    field=f"param.{name}.required",
                    old_value=str(was_required).lower(),
                    new_value=str(is_required).lower(),
                )
            )

        if (old_prop.enum or new_prop.enum) and old_prop.enum != new_prop.enum:
            details.append(
                ChangeDetail(
                    field=f"param.{name}.enum",
                    old_value=json.dumps(old_prop.enum or []),
                    new_value=json.dumps(new_prop.enum or []),
                )
            )

    return details


def is_breaking_detail(detail: ChangeDetail) -> bool:
    """Whether a detail can break existing callers of the tool."""
    if detail.field.startswith("param.") and detail.new_value == "removed":
        return True
    if detail.field.count(".") == 1 and detail.field.startswith("param.") and (
        detail.new_value or ""
    ).startswith("added (required"):
        return True
    if detail.field.endswith(".type"):
        return True
    return detail.field == "handler.method"


def _diff_server_meta(old: MCPServerConfig, new: MCPServerConfig) -> list[ChangeDetail]:
    details = []
    if old.name != new.name:
        details.append(ChangeDetail(field="name", old_value=old.name, new_value=new.name))
    if old.version != new.version:
        details.append(ChangeDetail(field="version", old_value=old.version, new_value=new.version))
    if old.description != new.description:
        details.append(
            ChangeDetail(
                field="description",
                old_value=_truncate(old.description, 60),
                new_value=_truncate(new.description, 60),
            )
        )
    return details


def _summarize(stats: DiffStats, is_compatible: bool) -> str:
    parts = []
    if stats.tools_added:
        parts.append(f"{stats.tools_added} added")
    if stats.tools_removed:
        parts.append(f"{stats.tools_removed} removed")
    if stats.tools_modified:
        parts.append(f"{stats.tools_modified} modified")
    if stats.tools_unchanged:
        parts.append(f"{stats.tools_unchanged} unchanged")
    tool_summary = f"Tools: {', '.join(parts)}." if parts else "No tool changes."
    if is_compatible:
        return f"{tool_summary} This update is backwards-compatible."
    return f"{tool_summary} This update contains breaking changes."


def _truncate(s: str, limit: int) -> str:
    return s if len(s) <= limit else s[: limit - 3] + "..."
