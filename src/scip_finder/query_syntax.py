"""Query syntax detection for the command line and MCP tools.

``Thing.prop`` searches properties, ``Thing.method()`` searches methods and a
bare ``Thing`` searches every kind.
"""

from scip_finder.models import SymbolKind


def detect_query_syntax(query: str) -> SymbolKind | None:
    """Infer a kind filter from the shape of a query.

    - ``(`` present -> METHOD
    - ``.`` without ``(`` -> TERM
    - otherwise -> None (all kinds)
    """
    if not query:
        return None
    if "(" in query:
        return SymbolKind.METHOD
    if "." in query:
        return SymbolKind.TERM
    return None


def strip_method_parameters(query: str) -> str:
    """Drop a balanced ``(...)`` group and everything after it.

    ``Svc.getAll(a, (b))`` -> ``Svc.getAll``. Unbalanced input is returned
    unchanged.
    """
    open_index = query.find("(")
    if open_index == -1:
        return query

    depth = 0
    for i in range(open_index, len(query)):
        if query[i] == "(":
            depth += 1
        elif query[i] == ")":
            depth -= 1
            if depth == 0:
                return query[:open_index]
    return query


def normalize_query(query: str) -> str:
    """Reduce ``Svc.get(a, b)`` to ``Svc.get()`` so it matches the descriptor."""
    stripped = strip_method_parameters(query)
    if stripped != query:
        return stripped + "()"
    return query
