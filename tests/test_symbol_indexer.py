"""Tests for occurrence normalization and symbol index building."""

import pytest

from scip_finder.models import (
    IndexKey,
    Occurrence,
    ScipDocument,
    ScipIndex,
    ScipOccurrence,
    SymbolKind,
)
from scip_finder.roles import DEFINITION, EXPORT, IMPORT, REFERENCE
from scip_finder.symbol_indexer import (
    SymbolIndexer,
    build_symbol_index,
    merge_symbol_variants,
    normalize_occurrence,
)


def _sym(descriptor: str, file: str = "a.ts", folder: str = "lib", package: str = "pkg") -> str:
    return f"scip-typescript npm {package} 1.0.0 {folder}/`{file}`/{descriptor}"


def _occ(file_path: str, line: int, column: int, roles: int = REFERENCE) -> Occurrence:
    return Occurrence(
        symbol=_sym("Foo#"),
        file_path=file_path,
        line=line,
        column=column,
        end_line=line,
        end_column=column + 3,
        roles=roles,
        kind=SymbolKind.TYPE,
    )


def _doc(path: str, *occurrences: ScipOccurrence) -> ScipDocument:
    return ScipDocument(relative_path=path, occurrences=list(occurrences))


# ---------------------------------------------------------------------------
# normalize_occurrence
# ---------------------------------------------------------------------------


class TestNormalizeOccurrence:
    def test_three_element_range_is_single_line(self):
        occ = normalize_occurrence("lib/a.ts", ScipOccurrence(_sym("Foo#"), DEFINITION, [4, 2, 9]))
        assert (occ.line, occ.column, occ.end_line, occ.end_column) == (4, 2, 4, 9)
        assert occ.file_path == "lib/a.ts"
        assert occ.roles == DEFINITION
        assert occ.kind == SymbolKind.TYPE

    def test_four_element_range(self):
        occ = normalize_occurrence("lib/a.ts", ScipOccurrence(_sym("run()."), 0, [4, 2, 7, 1]))
        assert (occ.line, occ.column, occ.end_line, occ.end_column) == (4, 2, 7, 1)
        assert occ.kind == SymbolKind.METHOD

    @pytest.mark.parametrize("rng", [[], [1], [1, 2], None, [1, "2", 3]])
    def test_unusable_range_is_skipped(self, rng):
        assert normalize_occurrence("lib/a.ts", ScipOccurrence(_sym("Foo#"), 0, rng)) is None

    def test_missing_symbol_is_skipped(self):
        assert normalize_occurrence("lib/a.ts", ScipOccurrence("", 1, [0, 0, 3])) is None

    def test_non_string_symbol_is_skipped(self):
        assert normalize_occurrence("lib/a.ts", ScipOccurrence(5, 1, [0, 0, 3])) is None

    def test_non_integer_roles_become_zero(self):
        occ = normalize_occurrence("lib/a.ts", ScipOccurrence(_sym("Foo#"), "1", [0, 0, 3]))
        assert occ.roles == 0

    def test_kind_hint_wins_over_descriptor(self):
        raw = ScipOccurrence(_sym("Foo#"), 0, [0, 0, 3], kind="Term")
        assert normalize_occurrence("lib/a.ts", raw).kind == SymbolKind.TERM

    def test_unknown_kind_hint_falls_back_to_descriptor(self):
        raw = ScipOccurrence(_sym("Foo#"), 0, [0, 0, 3], kind="widget")
        assert normalize_occurrence("lib/a.ts", raw).kind == SymbolKind.TYPE


# ---------------------------------------------------------------------------
# merge_symbol_variants
# ---------------------------------------------------------------------------


class TestMergeSymbolVariants:
    def test_same_position_keeps_implementation_occurrence(self):
        impl = _occ("lib/a.ts", 1, 4, roles=DEFINITION | EXPORT)
        decl = _occ("lib/a.ts", 1, 4, roles=DEFINITION)
        merged = merge_symbol_variants([impl], [decl])
        assert merged == [impl]
        assert merged[0].roles == DEFINITION | EXPORT

    def test_order_is_implementation_then_declaration(self):
        impl_a = _occ("lib/a.ts", 1, 4)
        impl_b = _occ("src/b.ts", 7, 0)
        decl = _occ("lib/a.d.ts", 1, 4, roles=DEFINITION)
        assert merge_symbol_variants([impl_a, impl_b], [decl]) == [impl_a, impl_b, decl]

    def test_duplicates_within_one_list_are_dropped(self):
        first = _occ("lib/a.ts", 2, 2, roles=IMPORT)
        again = _occ("lib/a.ts", 2, 2, roles=REFERENCE)
        assert merge_symbol_variants([first, again], []) == [first]

    def test_empty(self):
        assert merge_symbol_variants([], []) == []


# ---------------------------------------------------------------------------
# build_symbol_index
# ---------------------------------------------------------------------------


class TestBuildSymbolIndex:
    def test_wrongly_typed_records_are_skipped(self):
        index = build_symbol_index([
            _doc(
                "lib/a.ts",
                ScipOccurrence(5, DEFINITION, [0, 0, 1]),
                ScipOccurrence(_sym("Foo#"), DEFINITION, [0, 13, 16]),
            ),
        ])
        assert index.skipped_occurrences == 1
        assert list(index.entries) == [IndexKey("pkg", "lib/a.ts", "Foo")]

    def test_declaration_and_implementation_merge_under_one_key(self):
        decl_sym = _sym("Foo#", file="a.d.ts")
        impl_sym = _sym("Foo#", file="a.ts")
        index = build_symbol_index([
            _doc("lib/a.d.ts", ScipOccurrence(decl_sym, DEFINITION, [0, 17, 20])),
            _doc("lib/a.ts", ScipOccurrence(impl_sym, DEFINITION, [0, 13, 16])),
            _doc("src/use.ts", ScipOccurrence(impl_sym, REFERENCE, [5, 0, 3])),
        ])

        key = IndexKey("pkg", "lib/a.ts", "Foo")
        assert list(index.entries) == [key]
        paths = [occ.file_path for occ in index.entries[key]]
        # Implementation documents first, even though the .d.ts was scanned first
        assert paths == ["lib/a.ts", "src/use.ts", "lib/a.d.ts"]

    def test_repeated_position_in_document_is_deduplicated(self):
        sym = _sym("Foo#")
        index = build_symbol_index([
            _doc(
                "lib/a.ts",
                ScipOccurrence(sym, DEFINITION, [0, 13, 16]),
                ScipOccurrence(sym, REFERENCE, [0, 13, 16]),
            ),
        ])
        occs = index.entries[IndexKey("pkg", "lib/a.ts", "Foo")]
        assert len(occs) == 1
        assert occs[0].roles == DEFINITION

    def test_same_name_in_different_packages_gets_separate_keys(self):
        index = build_symbol_index([
            _doc("lib/a.ts", ScipOccurrence(_sym("Foo#", package="one"), DEFINITION, [0, 0, 3])),
            _doc("lib/a.ts", ScipOccurrence(_sym("Foo#", package="two"), DEFINITION, [9, 0, 3])),
        ])
        assert set(index.entries) == {
            IndexKey("one", "lib/a.ts", "Foo"),
            IndexKey("two", "lib/a.ts", "Foo"),
        }

    def test_type_and_term_with_same_name_share_a_key(self):
        index = build_symbol_index([
            _doc(
                "lib/a.ts",
                ScipOccurrence(_sym("Foo#"), DEFINITION, [0, 0, 3]),
                ScipOccurrence(_sym("Foo."), DEFINITION, [4, 6, 9]),
            ),
        ])
        occs = index.entries[IndexKey("pkg", "lib/a.ts", "Foo")]
        assert [occ.kind for occ in occs] == [SymbolKind.TYPE, SymbolKind.TERM]

    def test_malformed_records_are_dropped_and_counted(self):
        index = build_symbol_index([
            _doc(
                "lib/a.ts",
                ScipOccurrence(_sym("Foo#"), DEFINITION, [0, 0, 3]),
                ScipOccurrence(_sym("Foo#"), REFERENCE, [1, 0]),
                ScipOccurrence("", REFERENCE, [2, 0, 3]),
            ),
        ])
        assert index.total_documents == 1
        assert index.total_occurrences == 1
        assert index.skipped_occurrences == 2

    def test_unparseable_symbol_is_indexed_under_empty_key(self):
        index = build_symbol_index([
            _doc("lib/a.ts", ScipOccurrence("local 12", REFERENCE, [0, 0, 3])),
        ])
        assert list(index.entries) == [IndexKey("", "", "")]

    def test_empty_documents(self):
        index = build_symbol_index([])
        assert len(index) == 0
        assert index.total_documents == 0


class TestSymbolIndexer:
    def test_index_keeps_last_build(self):
        indexer = SymbolIndexer()
        assert indexer.symbol_index is None

        scip_index = ScipIndex(documents=[
            _doc("lib/a.ts", ScipOccurrence(_sym("Foo#"), DEFINITION, [0, 0, 3])),
        ])
        built = indexer.index(scip_index)

        assert indexer.symbol_index is built
        assert len(built) == 1
        assert built.index_build_time_seconds >= 0
