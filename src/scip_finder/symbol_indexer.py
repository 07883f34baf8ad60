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

"""Symbol index builder.

Turns the documents of a loaded SCIP index into a SymbolIndex: a mapping
from (package, file, display name) keys to the occurrences of that symbol.
Occurrences coming from declaration files (``.d.ts``) share a key with the
implementation file and are merged behind the implementation occurrences.
"""

import logging
import time
from typing import Iterable

from scip_finder.descriptor_parser import (
    is_declaration_file,
    normalize_symbol_path,
    parse,
)
from scip_finder.models import (
    IndexKey,
    Occurrence,
    ParsedDescriptor,
    ScipDocument,
    ScipIndex,
    ScipOccurrence,
    SymbolIndex,
    SymbolKind,
)

logger = logging.getLogger(__name__)


def normalize_occurrence(
    file_path: str,
    raw: ScipOccurrence,
    parsed: ParsedDescriptor | None = None,
) -> Occurrence | None:
    """Build an Occurrence from a raw record, or None if it is unusable.

    Ranges are ``[startLine, startCol, endCol]`` (single line) or
    ``[startLine, startCol, endLine, endCol]``. Records without a string
    symbol id or with fewer than three integer range elements are dropped.
    """
    if not raw.symbol or not isinstance(raw.symbol, str):
        return None

    rng = raw.range if isinstance(raw.range, list) else []
    if len(rng) < 3 or not all(isinstance(v, int) for v in rng[:4]):
        return None

    start_line, start_col = rng[0], rng[1]
    if len(rng) == 3:
        end_line, end_col = start_line, rng[2]
    else:
        end_line, end_col = rng[2], rng[3]

    if parsed is None:
        parsed = parse(raw.symbol)

    return Occurrence(
        symbol=raw.symbol,
        file_path=file_path,
        line=start_line,
        column=start_col,
        end_line=end_line,
        end_column=end_col,
        roles=raw.symbol_roles if isinstance(raw.symbol_roles, int) else 0,
        kind=_kind_from_hint(raw.kind) or parsed.kind,
    )


def merge_symbol_variants(
    implementation: list[Occurrence],
    declaration: list[Occurrence],
) -> list[Occurrence]:
    """Merge implementation and declaration occurrences of one symbol.

    Implementation occurrences come first; an occurrence whose
    (file, line, column) position was already seen is dropped.
    """
    seen: set[tuple[str, int, int]] = set()
    merged: list[Occurrence] = []
    for occ in [*implementation, *declaration]:
        position = (occ.file_path, occ.line, occ.column)
        if position in seen:
            continue
        seen.add(position)
        merged.append(occ)
    return merged


def build_symbol_index(documents: Iterable[ScipDocument]) -> SymbolIndex:
    """Build a SymbolIndex from SCIP documents. Never raises."""
    return SymbolIndexer().build(documents)


class SymbolIndexer:
    """Builds the in-memory symbol lookup index from SCIP documents."""

    def __init__(self) -> None:
        self._symbol_index: SymbolIndex | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def index(self, scip_index: ScipIndex) -> SymbolIndex:
        """Index every document of a loaded SCIP index."""
        return self.build(scip_index.documents)

    def build(self, documents: Iterable[ScipDocument]) -> SymbolIndex:
        """Bucket, then merge, every well-formed occurrence.

        Steps:
        1. Normalize each occurrence record, skipping malformed ones
        2. Compute its key from the parsed symbol id
        3. Bucket it as implementation- or declaration-origin by document path
        4. Merge each key's buckets, implementation first, deduplicating
           by position
        """
        start_time = time.monotonic()

        variants: dict[IndexKey, tuple[list[Occurrence], list[Occurrence]]] = {}
        total_documents = 0
        total_occurrences = 0
        skipped = 0

        for doc in documents:
            total_documents += 1
            doc_path = doc.relative_path or ""
            from_declaration = is_declaration_file(doc_path)

            for raw in doc.occurrences:
                parsed = parse(raw.symbol) if isinstance(raw.symbol, str) and raw.symbol else None
                occ = normalize_occurrence(doc_path, raw, parsed)
                if occ is None:
                    skipped += 1
                    logger.debug(
                        "Skipping occurrence in %s: symbol=%r range=%r",
                        doc_path,
                        raw.symbol,
                        raw.range,
                    )
                    continue

                key = IndexKey(
                    package_name=parsed.package_name,
                    file_path=normalize_symbol_path(parsed.file_path),
                    display_name=parsed.display_name,
                )
                implementation, declaration = variants.setdefault(key, ([], []))
                if from_declaration:
                    declaration.append(occ)
                else:
                    implementation.append(occ)
                total_occurrences += 1

        entries = {
            key: merge_symbol_variants(implementation, declaration)
            for key, (implementation, declaration) in variants.items()
        }

        elapsed = time.monotonic() - start_time
        self._symbol_index = SymbolIndex(
            entries=entries,
            total_documents=total_documents,
            total_occurrences=total_occurrences,
            skipped_occurrences=skipped,
            index_build_time_seconds=elapsed,
        )

        logger.info(
            "Indexed %d documents (%d occurrences, %d symbols, %d skipped) in %.2fs",
            total_documents,
            total_occurrences,
            len(entries),
            skipped,
            elapsed,
        )

        return self._symbol_index

    @property
    def symbol_index(self) -> SymbolIndex | None:
        """The most recently built index, if any."""
        return self._symbol_index


def _kind_from_hint(hint: str | None) -> SymbolKind | None:
    if not hint or not isinstance(hint, str):
        return None
    try:
        return SymbolKind(hint.lower())
    except ValueError:
        return None
