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

"""Symbol query engine.

Resolves plain names (``getAllProjects()``) and qualified names
(``ProjectService.getAllProjects()``) against a SymbolIndex, with optional
defining-file, folder and kind filters. Matching is exact and case-sensitive;
every query scans the full key set.
"""

from __future__ import annotations

import logging

from scip_finder.descriptor_parser import full_qualifier_of
from scip_finder.models import (
    Occurrence,
    QueryOptions,
    QueryResult,
    SymbolIndex,
    SymbolKind,
)
from scip_finder.roles import is_definition

logger = logging.getLogger(__name__)


class QueryEngine:
    """Symbol lookup over a built SymbolIndex."""

    def __init__(self, symbol_index: SymbolIndex):
        self.symbol_index = symbol_index

    def find(self, query: str, options: QueryOptions | None = None) -> list[QueryResult]:
        """Find all occurrences of ``query``.

        A query containing ``.`` or ``#`` is matched against full descriptor
        chains; anything else against display names. Returns an empty list
        when nothing matches.
        """
        if not query:
            return []

        options = options or QueryOptions()
        folder = normalize_folder_path(options.folder)

        qualified = is_qualified_query(query)
        pattern = convert_to_descriptor_pattern(query) if qualified else query

        results: list[QueryResult] = []
        for key, occurrences in self.symbol_index.entries.items():
            if qualified:
                if not _matches_qualified(pattern, occurrences):
                    continue
            elif key.display_name != query:
                continue
            if not matches_defining_file(occurrences, options.defining_file):
                continue

            selected = filter_by_folder(occurrences, folder)
            selected = filter_by_kind(selected, options.kind)
            results.extend(to_query_result(occ) for occ in selected)

        logger.debug("Query %r matched %d occurrences", query, len(results))
        return results


def find_with_fallback(
    engine: QueryEngine,
    query: str,
    options: QueryOptions | None = None,
    output_format: str = "text",
) -> tuple[list[QueryResult], str | None]:
    """Run a query, widening it when the defining-file filter found nothing.

    In ``text`` output the query is re-run with only the folder filter, so
    the defining-file and kind filters are both dropped, and a warning is
    returned alongside the broader results. Machine-readable formats never
    fall back.
    """
    options = options or QueryOptions()
    results = engine.find(query, options)
    if results or not options.defining_file or output_format != "text":
        return results, None

    broader = engine.find(query, QueryOptions(folder=options.folder))
    if not broader:
        return results, None

    warning = (
        f"Warning: Symbol '{query}' is not defined in '{options.defining_file}'. "
        f"Showing all occurrences."
    )
    logger.info(warning)
    return broader, warning


# ---------------------------------------------------------------------------
# Qualified names
# ---------------------------------------------------------------------------


def is_qualified_query(query: str) -> bool:
    return "." in query or "#" in query


def convert_to_descriptor_pattern(query: str) -> str:
    """Convert dot notation to a SCIP descriptor chain.

    - ``ProjectService.getAllProjects()`` -> ``ProjectService#getAllProjects().``
    - ``ProjectService.projects`` -> ``ProjectService#projects.``
    - ``ProjectService#getAllProjects()`` -> ``ProjectService#getAllProjects().``

    A query that cannot be split into scope and member is returned unchanged.
    """
    if "#" in query:
        if query.endswith("()"):
            return query + "."
        if query[-1] not in ".#/":
            return query + "."
        return query

    parts = query.split(".")
    if len(parts) < 2:
        return query

    last = parts[-1]
    is_method = last.endswith("()")
    if is_method:
        last = last[:-2]

    pattern = "#".join(parts[:-1]) + "#" + last
    return pattern + ("()." if is_method else ".")


def _matches_qualified(pattern: str, occurrences: list[Occurrence]) -> bool:
    # Tail matches may cross unrelated hierarchies sharing the same suffix
    for occ in occurrences:
        qualifier = full_qualifier_of(occ.symbol)
        if qualifier == pattern or qualifier.endswith("/" + pattern):
            return True
    return False


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def normalize_folder_path(folder: str | None) -> str | None:
    """Ensure a folder filter ends with ``/``; empty means no filter."""
    if not folder:
        return None
    return folder if folder.endswith("/") else folder + "/"


def matches_defining_file(occurrences: list[Occurrence], defining_file: str | None) -> bool:
    """Key-level gate: some definition occurrence lives in ``defining_file``."""
    if not defining_file:
        return True
    return any(
        is_definition(occ.roles) and occ.file_path == defining_file
        for occ in occurrences
    )


def filter_by_folder(occurrences: list[Occurrence], folder: str | None) -> list[Occurrence]:
    if not folder:
        return occurrences
    return [occ for occ in occurrences if occ.file_path.startswith(folder)]


def filter_by_kind(occurrences: list[Occurrence], kind: SymbolKind | None) -> list[Occurrence]:
    """Keep occurrences of ``kind``; no filter keeps everything, kind-less ones included."""
    if kind is None:
        return occurrences
    return [occ for occ in occurrences if occ.kind == kind]


def to_query_result(occ: Occurrence) -> QueryResult:
    return QueryResult(
        symbol=occ.symbol,
        file_path=occ.file_path,
        line=occ.line,
        column=occ.column,
        end_line=occ.end_line,
        end_column=occ.end_column,
        roles=occ.roles,
        kind=occ.kind,
        is_definition=is_definition(occ.roles),
    )
