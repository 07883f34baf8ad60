"""Tests for the MCP server tools and session metrics."""

import asyncio
import json
import os
import shutil
import time

import pytest

FIXTURE = os.path.join(os.path.dirname(__file__), "fixtures", "sample_index.json")


@pytest.fixture(autouse=True)
def _reset_server_state():
    """Reset server module-level state before each test."""
    import scip_finder.server as srv

    srv._session_start = time.time()
    srv._tool_call_counts.clear()
    srv._total_chars_returned = 0
    srv._index_path = None
    srv._index_mtime = None
    srv._tool_name = ""
    srv._indexer = None
    srv._engine = None
    yield
    srv._tool_call_counts.clear()
    srv._total_chars_returned = 0


@pytest.fixture
def index_file(tmp_path, monkeypatch):
    path = tmp_path / "index.scip"
    shutil.copy(FIXTURE, path)
    monkeypatch.setenv("PROJECT_ROOT", str(tmp_path))
    monkeypatch.delenv("SCIP_INDEX", raising=False)
    return path


def _call(name, arguments=None):
    import scip_finder.server as srv

    result = asyncio.run(srv.call_tool(name, arguments or {}))
    return result[0].text


class TestFormatDuration:
    def test_seconds(self):
        from scip_finder.server import _format_duration

        assert _format_duration(45) == "45s"

    def test_minutes(self):
        from scip_finder.server import _format_duration

        assert _format_duration(125) == "2m 5s"

    def test_hours(self):
        from scip_finder.server import _format_duration

        assert _format_duration(3725) == "1h 2m"


class TestFormatUsageStats:
    def test_empty_session(self):
        from scip_finder.server import _format_usage_stats

        result = _format_usage_stats()
        assert "Total queries: 0" in result
        assert "Total chars returned: 0" in result

    def test_usage_stats_call_excluded_from_query_count(self):
        import scip_finder.server as srv

        srv._tool_call_counts["find_symbol"] = 3
        srv._tool_call_counts["get_usage_stats"] = 2
        srv._total_chars_returned = 1234

        result = srv._format_usage_stats()
        assert "Total queries: 3" in result
        assert "find_symbol: 3" in result
        assert "get_usage_stats" not in result
        assert "Total chars returned: 1,234" in result

    def test_with_index(self, index_file):
        import scip_finder.server as srv

        srv._build_index()
        result = srv._format_usage_stats()
        assert "Index: 5 symbols, 10 occurrences" in result


class TestBuildIndex:
    def test_discovers_from_project_root(self, index_file):
        import scip_finder.server as srv

        srv._build_index()
        assert srv._index_path == str(index_file)
        assert srv._tool_name == "scip-typescript 0.3.14"
        assert srv._engine is not None

    def test_explicit_index_env(self, tmp_path, monkeypatch):
        import scip_finder.server as srv

        monkeypatch.setenv("PROJECT_ROOT", str(tmp_path))
        monkeypatch.setenv("SCIP_INDEX", FIXTURE)
        srv._build_index()
        assert srv._index_path == FIXTURE

    def test_missing_index(self, tmp_path, monkeypatch):
        import scip_finder.server as srv
        from scip_finder.scip_loader import ScipLoadError

        monkeypatch.setenv("SCIP_INDEX", str(tmp_path / "missing.scip"))
        with pytest.raises(ScipLoadError):
            srv._build_index()


class TestTools:
    def test_list_tools(self):
        import scip_finder.server as srv

        tools = asyncio.run(srv.list_tools())
        assert [t.name for t in tools] == [
            "find_symbol",
            "get_index_summary",
            "reindex",
            "get_usage_stats",
        ]

    def test_not_indexed(self):
        assert _call("find_symbol", {"name": "Ticket"}).startswith("Error: index not built yet")

    def test_reindex_then_find(self, index_file):
        assert _call("reindex") == "SCIP index reloaded successfully."

        text = _call("find_symbol", {"name": "ProjectService.getAllProjects()"})
        assert text.splitlines() == [
            "services/ProjectService.ts:5:2: Definition",
            "src/cli/main.ts:10:4: Reference",
        ]

    def test_find_symbol_ignores_call_arguments(self, index_file):
        _call("reindex")
        text = _call("find_symbol", {"name": "ProjectService.getAllProjects(a, b)"})
        assert text.splitlines() == [
            "services/ProjectService.ts:5:2: Definition",
            "src/cli/main.ts:10:4: Reference",
        ]

    def test_find_symbol_json(self, index_file):
        _call("reindex")
        payload = json.loads(_call("find_symbol", {"name": "Ticket", "folder": "src/", "format": "json"}))
        assert payload["count"] == 2
        assert [o["file"] for o in payload["occurrences"]] == [
            "src/cli/main.ts",
            "src/types/ticket.ts",
        ]

    def test_find_symbol_fallback_warning(self, index_file):
        _call("reindex")
        text = _call("find_symbol", {"name": "Ticket", "from": "nowhere.ts"})
        assert text.startswith("Warning: Symbol 'Ticket' is not defined in 'nowhere.ts'.")

    def test_find_symbol_not_found(self, index_file):
        _call("reindex")
        assert _call("find_symbol", {"name": "Missing"}) == "symbol not found: Missing"

    def test_index_summary(self, index_file):
        _call("reindex")
        text = _call("get_index_summary")
        assert "Documents: 6" in text
        assert "Skipped: 1" in text
        assert "Indexer: scip-typescript 0.3.14" in text
        assert "Packages: @mdt/shared, markdown-ticket" in text

    def test_unknown_tool(self, index_file):
        _call("reindex")
        assert _call("nope") == "Error: unknown tool 'nope'"

    def test_reindex_failure_reported(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SCIP_INDEX", str(tmp_path / "missing.scip"))
        assert _call("reindex").startswith("Error: No SCIP file found")

    def test_chars_and_calls_tracked(self, index_file):
        import scip_finder.server as srv

        _call("reindex")
        text = _call("find_symbol", {"name": "Ticket"})
        assert srv._tool_call_counts == {"reindex": 1, "find_symbol": 1}
        assert srv._total_chars_returned == len(text)

    def test_rebuilds_when_index_changes(self, index_file):
        _call("reindex")
        assert "Documents: 6" in _call("get_index_summary")

        with open(FIXTURE) as f:
            data = json.load(f)
        data["documents"] = data["documents"][:2]
        index_file.write_text(json.dumps(data))
        later = os.path.getmtime(index_file) + 10
        os.utime(index_file, (later, later))

        assert "Documents: 2" in _call("get_index_summary")
