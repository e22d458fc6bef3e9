import json
from pathlib import Path

import pytest
import yaml

from mcp_forge.errors import VersionError
from mcp_forge.versioning import ChangeKind, ChangeSeverity, compare_versions

FIXTURES = Path(__file__).parent / "fixtures"


def _load(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class TestComparePetstoreVersions:
    def setup_method(self):
        self.result = compare_versions(_load("petstore.yaml"), _load("petstore_v2.yaml"))
        self.diff = self.result.diff

    def test_stats(self):
        stats = self.diff.stats
        assert stats.tools_added == 1
        assert stats.tools_removed == 1
        assert stats.tools_modified == 2
        assert stats.tools_unchanged == 1

    def test_summary(self):
        assert self.diff.summary == (
            "Tools: 1 added, 1 removed, 2 modified, 1 unchanged. "
            "This update contains breaking changes."
        )
        assert self.diff.is_backwards_compatible is False

    def test_change_order(self):
        assert [(c.kind, c.tool_name) for c in self.diff.changes] == [
            (ChangeKind.SERVER_META_CHANGED, None),
            (ChangeKind.TOOL_ADDED, "updatepet"),
            (ChangeKind.TOOL_REMOVED, "deletepet"),
            (ChangeKind.TOOL_MODIFIED, "listpets"),
            (ChangeKind.TOOL_MODIFIED, "createpet"),
        ]

    def test_modified_severities(self):
        modified = {c.tool_name: c for c in self.diff.changes if c.kind is ChangeKind.TOOL_MODIFIED}
        assert modified["listpets"].severity is ChangeSeverity.INFO
        assert modified["createpet"].severity is ChangeSeverity.WARNING
        assert modified["createpet"].details[0].field == "param.species"

    def test_migration_notes(self):
        assert self.diff.migration_notes == [
            'Tool "deletepet" was removed. Any automation referencing this tool will break.',
            'Tool "createpet" has breaking parameter changes - verify automation compatibility.',
        ]

    def test_configs_returned(self):
        assert self.result.old_config.version == "1.0.0"
        assert self.result.new_config.version == "2.0.0"


class TestCompareOptions:
    def test_identical_specs(self):
        text = _load("petstore.yaml")
        diff = compare_versions(text, text).diff
        assert diff.changes == []
        assert diff.is_backwards_compatible is True

    def test_disabled_tools_marked_in_new_config(self):
        text = _load("petstore.yaml")
        result = compare_versions(text, text, disabled_tools=["getpet"])
        enabled = {t.name: t.enabled for t in result.new_config.tools}
        assert enabled["getpet"] is False
        assert enabled["listpets"] is True
        assert all(t.enabled for t in result.old_config.tools)

    def test_compatible_update(self):
        doc = yaml.safe_load(_load("petstore.yaml"))
        doc["paths"]["/pets"]["get"]["parameters"].append({"name": "page", "in": "query", "schema": {"type": "integer"}})
        diff = compare_versions(_load("petstore.yaml"), json.dumps(doc)).diff
        assert diff.is_backwards_compatible is True
        assert diff.stats.tools_modified == 1


class TestCompareErrors:
    def test_old_spec_invalid(self):
        with pytest.raises(VersionError) as exc_info:
            compare_versions('{"swagger": "2.0"}', _load("petstore.yaml"))
        assert str(exc_info.value).startswith("Failed to parse old spec")
        assert exc_info.value.details[0].startswith("openapi: ")

    def test_new_spec_invalid(self):
        with pytest.raises(VersionError, match="Failed to parse new spec"):
            compare_versions(_load("petstore.yaml"), "openapi: 3.0.0\n")
