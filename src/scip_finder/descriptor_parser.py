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

"""Parser for SCIP symbol ids.

A SCIP symbol id looks like::

    scip-typescript npm @mdt/shared 1.0.0 models/`Ticket.ts`/Ticket#

i.e. ``<tool> <manager> <package> <version> <descriptors>``. The descriptor
field is a ``/``-separated path whose file segment is wrapped in backticks,
followed by a chain of names joined by ``#`` (type members) or ``.`` (terms)
and terminated by a suffix that encodes the symbol kind.

The parser never raises. Anything it cannot recognise comes back as an empty
string so that one odd symbol id cannot abort building an index.
"""

from scip_finder.models import IndexKey, ParsedDescriptor, SymbolKind

# Declaration-only extension -> matching implementation extension. Longest
# suffixes first so ".d.mts" is not mistaken for ".ts".
DECLARATION_EXTENSIONS: dict[str, str] = {
    ".d.mts": ".mts",
    ".d.cts": ".cts",
    ".d.ts": ".ts",
}

_BACKTICK = "`"
_BACKSLASH = "\\"
_SUFFIX_CHARS = "#./"


def parse(raw: str) -> ParsedDescriptor:
    """Decode a raw SCIP symbol id into its semantic parts."""
    package_name, descriptor = _split_fields(raw)
    full_qualifier = _extract_full_qualifier(descriptor)
    return ParsedDescriptor(
        package_name=package_name,
        file_path=_extract_file_path(descriptor),
        display_name=_extract_display_name(full_qualifier),
        full_qualifier=full_qualifier,
        kind=detect_kind(full_qualifier),
    )


def detect_kind(full_qualifier: str) -> SymbolKind:
    """Kind of a descriptor chain, from its suffix.

    The method suffix is checked before the bare term suffix, and the
    parameter / type parameter markers only when no trailing suffix matched.
    """
    if full_qualifier.endswith("()."):
        return SymbolKind.METHOD
    if full_qualifier.endswith("#"):
        return SymbolKind.TYPE
    if full_qualifier.endswith("."):
        return SymbolKind.TERM
    if full_qualifier.endswith("/"):
        return SymbolKind.NAMESPACE
    if "#(" in full_qualifier or ".(" in full_qualifier:
        return SymbolKind.PARAMETER
    if "[" in full_qualifier and "]" in full_qualifier:
        return SymbolKind.TYPE_PARAMETER
    return SymbolKind.NAMESPACE


def full_qualifier_of(raw: str) -> str:
    """Descriptor chain of a raw symbol id, without package or file path."""
    return _extract_full_qualifier(_split_fields(raw)[1])


# ---------------------------------------------------------------------------
# Declaration files
# ---------------------------------------------------------------------------


def is_declaration_file(path: str) -> bool:
    """True for type-only declaration files such as ``foo.d.ts``."""
    return any(path.endswith(ext) for ext in DECLARATION_EXTENSIONS)


def normalize_symbol_path(path: str) -> str:
    """Map a declaration file path onto its implementation file path."""
    for decl_ext, impl_ext in DECLARATION_EXTENSIONS.items():
        if path.endswith(decl_ext):
            return path[: -len(decl_ext)] + impl_ext
    return path


def get_symbol_key(symbol: str) -> IndexKey:
    """Index key for a raw symbol id: (package, normalized file, display name)."""
    parsed = parse(symbol)
    return IndexKey(
        package_name=parsed.package_name,
        file_path=normalize_symbol_path(parsed.file_path),
        display_name=parsed.display_name,
    )


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _split_fields(raw: str) -> tuple[str, str]:
    """Split a symbol id into (package_name, descriptor field).

    Only a full five-field preamble yields a package name. Shorter ids still
    get their last space-separated field treated as the descriptor.
    """
    fields = raw.split(" ", 4)
    if len(fields) == 5:
        return fields[2], fields[4]
    space = raw.rfind(" ")
    if space == -1:
        return "", ""
    return "", raw[space + 1 :]


def _top_level_positions(text: str, chars: str) -> list[int]:
    """Indices of ``chars`` in ``text`` that are outside backtick escapes."""
    positions: list[int] = []
    escaped = False
    for i, ch in enumerate(text):
        if ch == _BACKTICK:
            escaped = not escaped
        elif not escaped and ch in chars:
            positions.append(i)
    return positions


def _extract_file_path(descriptor: str) -> str:
    """Path of the file segment: ``models/`Ticket.ts`/X#`` -> ``models/Ticket.ts``."""
    i = 0
    while True:
        start = descriptor.find(_BACKTICK, i)
        if start == -1:
            return ""
        end = descriptor.find(_BACKTICK, start + 1)
        if end == -1:
            return ""

        # Backslash escapes may sit right before either backtick
        slash = start - 1
        while slash >= 0 and descriptor[slash] == _BACKSLASH:
            slash -= 1
        name = descriptor[start + 1 : end].rstrip(_BACKSLASH)

        if slash >= 0 and descriptor[slash] == "/" and name and _BACKSLASH not in name:
            prefix_start = descriptor.rfind(" ", 0, slash) + 1
            return descriptor[prefix_start : slash + 1] + name

        i = end + 1


def _extract_full_qualifier(descriptor: str) -> str:
    """Everything after the last top-level ``/`` of the descriptor field."""
    slashes = _top_level_positions(descriptor, "/")
    if not slashes:
        return ""
    return descriptor[slashes[-1] + 1 :]


def _extract_display_name(full_qualifier: str) -> str:
    """Leaf name of a descriptor chain with one suffix character removed.

    ``Outer#Inner.`` -> ``Inner``, ``Ticket#`` -> ``Ticket``,
    ``Svc#getAll().`` -> ``getAll()``.
    """
    if not full_qualifier:
        return ""

    separators = _top_level_positions(full_qualifier, "#/")
    leaf = full_qualifier
    if separators and separators[-1] < len(full_qualifier) - 1:
        leaf = full_qualifier[separators[-1] + 1 :]

    if leaf and leaf[-1] in _SUFFIX_CHARS:
        leaf = leaf[:-1]
    return leaf
