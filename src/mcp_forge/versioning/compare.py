"""Compare two versions of an OpenAPI spec at the MCP tool level."""

import logging

from mcp_forge.errors import VersionError
from mcp_forge.mapper.tool_mapper import map_spec_to_server
from mcp_forge.parser.base import ParseResult
from mcp_forge.parser.openapi import parse_openapi

from .differ import diff_configs
from .models import VersionUpdateResult

logger = logging.getLogger(__name__)


def compare_versions(
    old_text: str,
    new_text: str,
    disabled_tools: list[str] | None = None,
) -> VersionUpdateResult:
    """Parse and map both specs, then diff the resulting configs.

    Tools named in ``disabled_tools`` keep their place in the new config
    but are marked disabled. Raises VersionError if either spec fails to
    parse.
    """
    old_result = parse_openapi(old_text)
    _require_success(old_result, "Failed to parse old spec")
    new_result = parse_openapi(new_text)
    _require_success(new_result, "Failed to parse new spec")

    old_config = map_spec_to_server(old_result.spec)
    new_config = map_spec_to_server(new_result.spec)

    disabled = set(disabled_tools or [])
    for tool in new_config.tools:
        if tool.name in disabled:
            tool.enabled = False

    diff = diff_configs(old_config, new_config)
    logger.debug("Version diff: %s", diff.summary)
    return VersionUpdateResult(diff=diff, new_config=new_config, old_config=old_config)


def _require_success(result: ParseResult, message: str) -> None:
    if not result.success or result.spec is None:
        raise VersionError(message, [f"{e.path}: {e.message}" for e in result.errors])
