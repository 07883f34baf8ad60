"""Data models for SCIP symbol indexing and search."""

from dataclasses import dataclass, field
from enum import Enum


class SymbolKind(str, Enum):
    """Semantic category of a symbol, derived from its descriptor suffix."""

    NAMESPACE = "namespace"  # trailing "/"
    TYPE = "type"  # trailing "#"
    TERM = "term"  # trailing "."
    METHOD = "method"  # trailing "()."
    PARAMETER = "parameter"  # contains "#(" or ".("
    TYPE_PARAMETER = "typeparameter"  # contains "[...]"


# ---------------------------------------------------------------------------
# Raw index data (as produced by the loader)
# ---------------------------------------------------------------------------


@dataclass
class ScipOccurrence:
    """One occurrence record as it appears in a SCIP document."""

    symbol: str = ""
    symbol_roles: int = 0
    range: list[int] = field(default_factory=list)  # 3 or 4 zero-based ints
    kind: str | None = None  # Optional kind hint, e.g. "method"


@dataclass
class ScipDocument:
    """A single indexed source file and its occurrences."""

    relative_path: str = ""
    language: str = ""
    occurrences: list[ScipOccurrence] = field(default_factory=list)


@dataclass
class ScipIndex:
    """A loaded SCIP index: tool metadata plus documents."""

    documents: list[ScipDocument] = field(default_factory=list)
    tool_name: str = ""
    tool_version: str = ""
    project_root: str = ""


# ---------------------------------------------------------------------------
# Parsed / indexed data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedDescriptor:
    """Structured view of a raw SCIP symbol id."""

    package_name: str
    file_path: str  # e.g. "models/Ticket.ts"
    display_name: str  # leaf name, suffix stripped, e.g. "Ticket"
    full_qualifier: str  # e.g. "ProjectService#getAllProjects()."
    kind: SymbolKind


@dataclass(frozen=True)
class IndexKey:
    """Lookup granularity of the symbol index.

    Kind is not part of the key: a plain-name search finds every kind of
    symbol sharing a name within the same package and file.
    """

    package_name: str
    file_path: str  # declaration paths already normalized (.d.ts -> .ts)
    display_name: str

    def __str__(self) -> str:
        return f"{self.package_name}:{self.file_path}:{self.display_name}"


@dataclass(frozen=True)
class Occurrence:
    """A symbol occurrence with location and role information."""

    symbol: str
    file_path: str
    line: int
    column: int
    end_line: int
    end_column: int
    roles: int
    kind: SymbolKind | None = None  # None for indexes without kind tracking


@dataclass(frozen=True)
class QueryOptions:
    """Filters applied by QueryEngine.find."""

    defining_file: str | None = None  # keep keys defined in this exact file
    folder: str | None = None  # keep occurrences under this folder
    kind: SymbolKind | None = None  # keep occurrences of this kind


@dataclass(frozen=True)
class QueryResult:
    """An occurrence projected for output, with a derived definition flag."""

    symbol: str
    file_path: str
    line: int
    column: int
    end_line: int
    end_column: int
    roles: int
    kind: SymbolKind | None
    is_definition: bool


@dataclass
class SymbolIndex:
    """In-memory lookup structure built from a SCIP index."""

    entries: dict[IndexKey, list[Occurrence]] = field(default_factory=dict)

    # Stats
    total_documents: int = 0
    total_occurrences: int = 0
    skipped_occurrences: int = 0
    index_build_time_seconds: float = 0.0

    def __len__(self) -> int:
        return len(self.entries)
