"""Symbol search over SCIP code intelligence indexes."""

__version__ = "0.1.0"

from scip_finder.descriptor_parser import get_symbol_key, parse  # noqa: E402
from scip_finder.models import (  # noqa: E402
    IndexKey,
    Occurrence,
    ParsedDescriptor,
    QueryOptions,
    QueryResult,
    SymbolIndex,
    SymbolKind,
)
from scip_finder.query_engine import QueryEngine, find_with_fallback  # noqa: E402
from scip_finder.symbol_indexer import (  # noqa: E402
    SymbolIndexer,
    build_symbol_index,
    merge_symbol_variants,
)

__all__ = [
    "IndexKey",
    "Occurrence",
    "ParsedDescriptor",
    "QueryEngine",
    "QueryOptions",
    "QueryResult",
    "SymbolIndex",
    "SymbolIndexer",
    "SymbolKind",
    "build_symbol_index",
    "find_with_fallback",
    "get_symbol_key",
    "merge_symbol_variants",
    "parse",
]
