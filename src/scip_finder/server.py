# scip-finder - SCIP symbol search with MCP server
# Copyright (C) 2026 The scip-finder Authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""MCP server for SCIP symbol search.

Exposes the symbol query engine as MCP tools so an assistant can find
definitions and references through a pre-built SCIP index instead of
grepping the source tree.

Usage:
    PROJECT_ROOT=/path/to/project python -m scip_finder.server
    SCIP_INDEX=/path/to/index.scip python -m scip_finder.server
"""

from __future__ import annotations

import os
import sys
import time
import traceback

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent
import mcp.types as types

from scip_finder.formatter import format_results
from scip_finder.models import QueryOptions, SymbolKind
from scip_finder.query_engine import QueryEngine, find_with_fallback
from scip_finder.query_syntax import detect_query_syntax, normalize_query
from scip_finder.scip_loader import ScipLoadError, find_scip_file, load_scip_index
from scip_finder.symbol_indexer import SymbolIndexer

# ---------------------------------------------------------------------------
# Module-level state
# ---------------------------------------------------------------------------

server = Server("scip-finder")

_index_path: str | None = None
_index_mtime: float | None = None
_tool_name: str = ""
_indexer: SymbolIndexer | None = None
_engine: QueryEngine | None = None

# Session usage stats
_session_start: float = time.time()
_tool_call_counts: dict[str, int] = {}
_total_chars_returned: int = 0


def _log(message: str) -> None:
    print(f"[scip-finder] {message}", file=sys.stderr)


def _format_duration(seconds: float) -> str:
    """Format seconds into a human-readable duration."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours = minutes // 60
    mins = minutes % 60
    return f"{hours}h {mins}m"


def _format_usage_stats() -> str:
    """Format session usage statistics."""
    elapsed = time.time() - _session_start
    total_calls = sum(_tool_call_counts.values())
    query_calls = total_calls - _tool_call_counts.get("get_usage_stats", 0)

    lines = [
        f"Session duration: {_format_duration(elapsed)}",
        f"Total queries: {query_calls}",
    ]

    if _tool_call_counts:
        lines.append("")
        lines.append("Queries by tool:")
        for tool_name, count in sorted(_tool_call_counts.items(), key=lambda x: -x[1]):
            if tool_name == "get_usage_stats":
                continue
            lines.append(f"  {tool_name}: {count}")

    lines.append("")
    lines.append(f"Total chars returned: {_total_chars_returned:,}")

    if _indexer is not None and _indexer.symbol_index is not None:
        idx = _indexer.symbol_index
        lines.append(
            f"Index: {len(idx):,} symbols, {idx.total_occurrences:,} occurrences"
        )

    return "\n".join(lines)


def _format_index_summary() -> str:
    """Overview of the loaded index."""
    if _indexer is None or _indexer.symbol_index is None:
        return "Error: index not built yet. Call reindex first."

    idx = _indexer.symbol_index
    packages = sorted({key.package_name for key in idx.entries if key.package_name})
    files = {occ.file_path for occs in idx.entries.values() for occ in occs}

    parts = [
        f"Index: {_index_path}",
        f"Documents: {idx.total_documents}, Files with occurrences: {len(files)}",
        f"Symbols: {len(idx)}, Occurrences: {idx.total_occurrences}, "
        f"Skipped: {idx.skipped_occurrences}",
        f"Build time: {idx.index_build_time_seconds:.2f}s",
    ]
    if _tool_name:
        parts.append(f"Indexer: {_tool_name}")
    if packages:
        parts.append(f"Packages: {', '.join(packages[:20])}")
        if len(packages) > 20:
            parts.append(f"  ... and {len(packages) - 20} more")
    return "\n".join(parts)


def _build_index() -> None:
    """Locate, load and index the SCIP file (full rebuild)."""
    global _index_path, _index_mtime, _tool_name, _indexer, _engine

    project_root = os.environ.get("PROJECT_ROOT", os.getcwd())
    _index_path = find_scip_file(os.environ.get("SCIP_INDEX"), start_dir=project_root)
    if _index_path is None:
        raise ScipLoadError(
            f"No SCIP file found from {project_root}. Set SCIP_INDEX or run "
            f"'scip-typescript index' in the project first."
        )

    _log(f"Loading index: {_index_path}")
    scip_index = load_scip_index(_index_path)
    _index_mtime = os.path.getmtime(_index_path)
    _tool_name = " ".join(p for p in (scip_index.tool_name, scip_index.tool_version) if p)

    _indexer = SymbolIndexer()
    symbol_index = _indexer.index(scip_index)
    _engine = QueryEngine(symbol_index)

    _log(
        f"Indexed {symbol_index.total_documents} documents, "
        f"{len(symbol_index)} symbols, "
        f"{symbol_index.total_occurrences} occurrences "
        f"in {symbol_index.index_build_time_seconds:.2f}s"
    )


def _maybe_reload() -> None:
    """Rebuild the whole index if the index file changed on disk."""
    if _index_path is None or _index_mtime is None:
        return
    try:
        mtime = os.path.getmtime(_index_path)
    except OSError:
        return
    if mtime != _index_mtime:
        _log(f"{_index_path} changed on disk, rebuilding")
        _build_index()


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

TOOLS = [
    Tool(
        name="find_symbol",
        description=(
            "Find every occurrence (definitions, references, imports, exports) of a symbol "
            "in the SCIP index. Accepts a plain name ('Ticket', 'getAllProjects()') or a "
            "qualified name ('ProjectService.getAllProjects()', 'Ticket.title')."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Symbol name, case-sensitive exact match.",
                },
                "from": {
                    "type": "string",
                    "description": "Only symbols defined in this file (e.g. 'src/models/ticket.ts').",
                },
                "folder": {
                    "type": "string",
                    "description": "Only occurrences in files under this folder (e.g. 'src/').",
                },
                "kind": {
                    "type": "string",
                    "enum": [k.value for k in SymbolKind],
                    "description": "Only this symbol kind. Inferred from the name when omitted.",
                },
                "format": {
                    "type": "string",
                    "enum": ["text", "json"],
                    "description": "Output format (default text).",
                },
            },
            "required": ["name"],
        },
    ),
    Tool(
        name="get_index_summary",
        description="Overview of the loaded SCIP index: documents, symbols, occurrences, packages.",
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
    Tool(
        name="reindex",
        description="Reload the SCIP index file and rebuild the symbol index.",
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
    Tool(
        name="get_usage_stats",
        description="Session stats: tool calls and characters returned.",
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
]


def _find_symbol(arguments: dict) -> str:
    name = arguments["name"]
    query = normalize_query(name)
    output_format = arguments.get("format") or "text"
    kind_arg = arguments.get("kind")
    kind = SymbolKind(kind_arg) if kind_arg else detect_query_syntax(query)
    options = QueryOptions(
        defining_file=arguments.get("from"),
        folder=arguments.get("folder"),
        kind=kind,
    )
    results, warning = find_with_fallback(_engine, query, options, output_format)
    formatted = format_results(name, results, output_format)
    if warning:
        formatted = f"{warning}\n\n{formatted}"
    return formatted


# ---------------------------------------------------------------------------
# MCP handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def list_tools() -> list[Tool]:
    return TOOLS


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
    global _total_chars_returned

    _tool_call_counts[name] = _tool_call_counts.get(name, 0) + 1

    try:
        if name == "reindex":
            _build_index()
            return [TextContent(type="text", text="SCIP index reloaded successfully.")]

        if name == "get_usage_stats":
            return [TextContent(type="text", text=_format_usage_stats())]

        _maybe_reload()

        if _engine is None:
            return [TextContent(type="text", text="Error: index not built yet. Call reindex first.")]

        if name == "find_symbol":
            result = _find_symbol(arguments)
        elif name == "get_index_summary":
            result = _format_index_summary()
        else:
            return [TextContent(type="text", text=f"Error: unknown tool '{name}'")]

        _total_chars_returned += len(result)
        return [TextContent(type="text", text=result)]

    except Exception as e:
        tb = traceback.format_exc()
        _log(f"Error in {name}: {tb}")
        return [TextContent(type="text", text=f"Error: {e}")]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def main():
    try:
        _build_index()
    except ScipLoadError as e:
        # Keep serving; the reindex tool can load the index once it exists
        _log(str(e))
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main_sync():
    """Synchronous entry point for console_scripts."""
    import asyncio

    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
