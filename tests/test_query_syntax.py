"""Tests for query syntax detection."""

import pytest

from scip_finder.models import SymbolKind
from scip_finder.query_syntax import (
    detect_query_syntax,
    normalize_query,
    strip_method_parameters,
)


@pytest.mark.parametrize(
    "query, expected",
    [
        ("ProjectService", None),
        ("getAllProjects", None),
        ("ProjectService.getAllProjects", SymbolKind.TERM),
        ("ProjectService.getAllProjects()", SymbolKind.METHOD),
        ("getAllProjects()", SymbolKind.METHOD),
        ("ProjectService#", None),
        ("", None),
    ],
)
def test_detect_query_syntax(query, expected):
    assert detect_query_syntax(query) == expected


@pytest.mark.parametrize(
    "query, expected",
    [
        ("ProjectService.getAllProjects()", "ProjectService.getAllProjects"),
        ("getAllProjects(a, b)", "getAllProjects"),
        ("run(fn(x), y)", "run"),
        ("ProjectService", "ProjectService"),
        ("broken(a", "broken(a"),
    ],
)
def test_strip_method_parameters(query, expected):
    assert strip_method_parameters(query) == expected


@pytest.mark.parametrize(
    "query, expected",
    [
        ("Svc.get(a, b)", "Svc.get()"),
        ("getAllProjects()", "getAllProjects()"),
        ("Ticket", "Ticket"),
    ],
)
def test_normalize_query(query, expected):
    assert normalize_query(query) == expected
