#!/usr/bin/env python3
"""Benchmark scip-finder index builds and symbol queries.

Usage:
    # Benchmark the bundled test fixture:
    python benchmarks/benchmark.py

    # Benchmark one or more real indexes (binary or JSON):
    python benchmarks/benchmark.py /path/to/index.scip /path/to/other.json

The script picks symbols to query from each index automatically.
"""

import os
import sys
import time
import tracemalloc

from scip_finder.descriptor_parser import full_qualifier_of
from scip_finder.formatter import format_results
from scip_finder.models import QueryOptions, SymbolKind
from scip_finder.query_engine import QueryEngine
from scip_finder.scip_loader import load_scip_index
from scip_finder.symbol_indexer import SymbolIndexer

DEFAULT_INDEX = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "..", "tests", "fixtures", "sample_index.json"
)


def discover_symbols(symbol_index):
    """Pick interesting queries: the busiest name, a method, a qualified member."""
    symbols = {}
    entries = symbol_index.entries
    if not entries:
        return symbols

    busiest = max(entries, key=lambda k: len(entries[k]))
    symbols["plain"] = busiest.display_name

    for key, occurrences in entries.items():
        kinds = {occ.kind for occ in occurrences}
        if SymbolKind.METHOD in kinds and "method" not in symbols:
            symbols["method"] = key.display_name
            qualifier = full_qualifier_of(occurrences[0].symbol)
            owner, _, member = qualifier.rpartition("#")
            if owner:
                symbols["qualified"] = f"{owner.replace('#', '.')}.{member[:-1]}"
    return symbols


def measure_index(name, path):
    """Load and index a SCIP file and return timing + stats."""
    print(f"\n{'='*60}")
    print(f"  Benchmarking: {name}")
    print(f"  Path: {path}")
    print(f"{'='*60}")

    tracemalloc.start()
    start = time.perf_counter()
    scip_index = load_scip_index(path)
    load_elapsed = time.perf_counter() - start

    start = time.perf_counter()
    symbol_index = SymbolIndexer().index(scip_index)
    build_elapsed = time.perf_counter() - start
    _, peak_mem = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    stats = {
        "name": name,
        "documents": symbol_index.total_documents,
        "symbols": len(symbol_index),
        "occurrences": symbol_index.total_occurrences,
        "load_time_s": round(load_elapsed, 3),
        "index_time_s": round(build_elapsed, 3),
        "peak_memory_mb": round(peak_mem / 1024 / 1024, 2),
    }

    print(f"\n  Documents: {stats['documents']:,}")
    print(f"  Symbols: {stats['symbols']:,}")
    print(f"  Occurrences: {stats['occurrences']:,}")
    print(f"  Load time: {stats['load_time_s']}s")
    print(f"  Index time: {stats['index_time_s']}s")
    print(f"  Peak memory: {stats['peak_memory_mb']} MB")

    return symbol_index, stats


def measure_queries(symbol_index, symbols):
    """Run the discovered queries and measure response sizes and times."""
    engine = QueryEngine(symbol_index)
    results = {}

    for label, query in symbols.items():
        kind = SymbolKind.METHOD if label == "method" else None
        start = time.perf_counter()
        found = engine.find(query, QueryOptions(kind=kind))
        elapsed = time.perf_counter() - start
        results[label] = {
            "symbol": query,
            "time_ms": round(elapsed * 1000, 2),
            "response_chars": len(format_results(query, found)),
            "count": len(found),
        }

    print("\n  Query Results:")
    print(f"  {'Query':<12} {'Time':>8} {'Response':>10} {'Detail'}")
    print(f"  {'-'*60}")
    for label, data in results.items():
        print(
            f"  {label:<12} {data['time_ms']:>6.1f}ms {data['response_chars']:>8,} chars  "
            f"({data['symbol']}) [{data['count']} items]"
        )
    return results


def print_summary(all_stats, all_results):
    """Print markdown-formatted summary tables."""
    print(f"\n\n{'='*80}")
    print("  BENCHMARK RESULTS")
    print(f"{'='*80}\n")

    print("### Index Build Performance\n")
    print("| Index | Documents | Symbols | Occurrences | Load Time | Index Time | Peak Memory |")
    print("|-------|----------:|--------:|------------:|----------:|-----------:|------------:|")
    for s in all_stats:
        print(
            f"| {s['name']} | {s['documents']:,} | {s['symbols']:,} | {s['occurrences']:,} "
            f"| {s['load_time_s']}s | {s['index_time_s']}s | {s['peak_memory_mb']} MB |"
        )

    print("\n### Query Response Time\n")
    header = "| Query | " + " | ".join(s["name"] for s in all_stats) + " |"
    sep = "|-------|" + "|".join("---:" for _ in all_stats) + "|"
    print(header)
    print(sep)
    for query in ("plain", "method", "qualified"):
        row = f"| `{query}` |"
        for results in all_results:
            t = results.get(query, {}).get("time_ms")
            row += f" {t}ms |" if t is not None else " - |"
        print(row)


def main():
    paths = [os.path.abspath(p) for p in sys.argv[1:]] or [os.path.abspath(DEFAULT_INDEX)]

    all_stats = []
    all_results = []
    for path in paths:
        name = os.path.basename(path)
        if not os.path.exists(path):
            print(f"\nSkipping {name}: path not found: {path}")
            continue

        try:
            symbol_index, stats = measure_index(name, path)
            symbols = discover_symbols(symbol_index)
            print(f"\n  Auto-discovered symbols: {symbols}")
            results = measure_queries(symbol_index, symbols)
            all_stats.append(stats)
            all_results.append(results)
        except Exception as e:
            print(f"\nError benchmarking {name}: {e}")
            import traceback
            traceback.print_exc()

    if all_stats:
        print_summary(all_stats, all_results)


if __name__ == "__main__":
    main()
