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

"""Locating and loading SCIP index files.

Two encodings are accepted. Content whose first non-blank character is ``{``
is read as the JSON rendition (``scip print --json`` output or hand-written
fixtures); anything else is decoded as a binary protobuf index, which is what
``scip-typescript index`` and the other indexers write to ``index.scip``.

JSON fixture variants are normalized on the way in:

- ``uri`` (``file:///src/a.ts``) instead of ``relativePath``
- ``role`` instead of ``symbolRoles``
- LSP-style object ranges ``{"start": {...}, "end": {...}}``

Records of the wrong shape (a ``null`` document, a numeric symbol) are
dropped or blanked here, so index building only ever sees well-typed data.
"""

import json
import logging
import os

from google.protobuf.message import DecodeError

from scip_finder import scip_pb2
from scip_finder.models import ScipDocument, ScipIndex, ScipOccurrence

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "index.scip"
MAX_PARENT_SEARCH = 10


class ScipLoadError(Exception):
    """The SCIP index file is missing or cannot be read."""


def find_scip_file(scip_path: str | None = None, start_dir: str | None = None) -> str | None:
    """Locate the index file.

    An explicit ``scip_path`` is returned if it exists. Otherwise look for
    ``index.scip`` in ``start_dir`` (default: cwd) and up to
    MAX_PARENT_SEARCH - 1 of its parents.
    """
    if scip_path:
        return scip_path if os.path.exists(scip_path) else None

    current = os.path.abspath(start_dir or os.getcwd())
    for _ in range(MAX_PARENT_SEARCH):
        candidate = os.path.join(current, INDEX_FILE_NAME)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_scip_index(scip_path: str) -> ScipIndex:
    """Load a SCIP index file, JSON or binary.

    Raises:
        ScipLoadError: if the file is missing, unreadable, or cannot be
            decoded as either encoding.
    """
    if not os.path.exists(scip_path):
        raise ScipLoadError(f"SCIP file not found: {scip_path}")

    try:
        with open(scip_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ScipLoadError(f"Failed to read SCIP file: {e}") from e

    if not data:
        return ScipIndex()

    if _looks_like_json(data):
        index = parse_json_index(data.decode("utf-8"))
        if index is None:
            raise ScipLoadError(f"Failed to parse SCIP file: {scip_path} contains invalid JSON")
        encoding = "JSON"
    else:
        try:
            index = parse_binary_index(data)
        except DecodeError as e:
            raise ScipLoadError(
                f"Failed to parse SCIP file: {scip_path} is neither JSON nor a "
                f"SCIP protobuf index ({e})"
            ) from e
        encoding = "protobuf"

    logger.info(
        "Loaded %s (%s): %d documents", scip_path, encoding, len(index.documents)
    )
    return index


def _looks_like_json(data: bytes) -> bool:
    try:
        return data.decode("utf-8").lstrip().startswith("{")
    except UnicodeDecodeError:
        return False


# ---------------------------------------------------------------------------
# Binary (protobuf) indexes
# ---------------------------------------------------------------------------


def parse_binary_index(data: bytes) -> ScipIndex:
    """Decode a binary SCIP index.

    Raises:
        DecodeError: if ``data`` is not a valid ``scip.Index`` message.
    """
    message = scip_pb2.Index()
    message.ParseFromString(data)

    tool_info = message.metadata.tool_info
    return ScipIndex(
        documents=[
            ScipDocument(
                relative_path=doc.relative_path,
                language=doc.language,
                occurrences=[
                    ScipOccurrence(
                        symbol=occ.symbol,
                        symbol_roles=occ.symbol_roles,
                        range=list(occ.range),
                    )
                    for occ in doc.occurrences
                ],
            )
            for doc in message.documents
        ],
        tool_name=tool_info.name,
        tool_version=tool_info.version,
        project_root=message.metadata.project_root,
    )


# ---------------------------------------------------------------------------
# JSON indexes
# ---------------------------------------------------------------------------


def parse_json_index(content: str) -> ScipIndex | None:
    """Parse the JSON rendition of a SCIP index, or None if it is not JSON."""
    trimmed = content.strip()
    if not trimmed.startswith("{"):
        return None

    try:
        raw = json.loads(trimmed)
    except json.JSONDecodeError as e:
        logger.debug("Invalid SCIP JSON: %s", e)
        return None
    if not isinstance(raw, dict):
        return None

    metadata = _as_dict(raw.get("metadata"))
    tool_info = _as_dict(metadata.get("toolInfo") or metadata.get("tool_info"))

    documents = []
    for doc in _as_list(raw.get("documents")):
        if not isinstance(doc, dict):
            logger.debug("Skipping malformed document record: %r", doc)
            continue
        documents.append(_normalize_document(doc))

    return ScipIndex(
        documents=documents,
        tool_name=_as_str(tool_info.get("name")),
        tool_version=_as_str(tool_info.get("version")),
        project_root=_as_str(metadata.get("projectRoot") or metadata.get("project_root")),
    )


def _normalize_document(doc: dict) -> ScipDocument:
    occurrences = []
    for occ in _as_list(doc.get("occurrences")):
        if not isinstance(occ, dict):
            logger.debug("Skipping malformed occurrence record: %r", occ)
            continue
        occurrences.append(_normalize_occurrence(occ))

    return ScipDocument(
        relative_path=_document_path(doc),
        language=_as_str(doc.get("language")),
        occurrences=occurrences,
    )


def _document_path(doc: dict) -> str:
    path = _as_str(doc.get("relativePath") or doc.get("relative_path"))
    if path:
        return path
    return _as_str(doc.get("uri")).replace("file:///", "")


def _normalize_occurrence(occ: dict) -> ScipOccurrence:
    roles = occ.get("symbolRoles")
    if roles is None:
        roles = occ.get("symbol_roles", occ.get("role", 0))

    rng = occ.get("range")
    if isinstance(rng, dict):
        rng = _object_range_to_list(rng)
    elif not isinstance(rng, list):
        rng = []

    kind = occ.get("kind")
    return ScipOccurrence(
        symbol=_as_str(occ.get("symbol")),
        symbol_roles=roles if isinstance(roles, int) else 0,
        range=rng,
        kind=kind if isinstance(kind, str) else None,
    )


def _object_range_to_list(rng: dict) -> list[int]:
    """``{start: {line, character}, end: {...}}`` -> ``[sl, sc, el, ec]``.

    A missing end falls back to the start position.
    """
    start = _as_dict(rng.get("start"))
    end = _as_dict(rng.get("end"))
    start_line = start.get("line", 0)
    start_char = start.get("character", 0)
    return [
        start_line,
        start_char,
        end.get("line", start_line),
        end.get("character", start_char),
    ]


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _as_str(value) -> str:
    return value if isinstance(value, str) else ""
