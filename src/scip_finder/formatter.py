"""Text and JSON rendering of query results."""

import json

from scip_finder.models import QueryResult
from scip_finder.roles import (
    get_role_names,
    is_definition,
    is_export,
    is_import,
    is_reference,
)

OUTPUT_FORMATS = ("text", "json")


def format_as_text(symbol_name: str, results: list[QueryResult]) -> str:
    """grep-like ``file:line:column: Role, Role`` lines."""
    if not results:
        return f"symbol not found: {symbol_name}"
    return "\n".join(
        f"{r.file_path}:{r.line}:{r.column}: {', '.join(get_role_names(r.roles))}"
        for r in results
    )


def format_as_json(symbol_name: str, results: list[QueryResult]) -> str:
    occurrences = [
        {
            "file": r.file_path,
            "line": r.line,
            "column": r.column,
            "endLine": r.end_line,
            "endColumn": r.end_column,
            "role": ", ".join(get_role_names(r.roles)),
            "kind": r.kind.value if r.kind is not None else None,
            "isDefinition": is_definition(r.roles),
            "isReference": is_reference(r.roles),
            "isImport": is_import(r.roles),
            "isExport": is_export(r.roles),
        }
        for r in results
    ]
    return json.dumps(
        {"symbol": symbol_name, "occurrences": occurrences, "count": len(occurrences)},
        indent=2,
    )


def format_results(symbol_name: str, results: list[QueryResult], output_format: str = "text") -> str:
    if output_format == "json":
        return format_as_json(symbol_name, results)
    return format_as_text(symbol_name, results)
