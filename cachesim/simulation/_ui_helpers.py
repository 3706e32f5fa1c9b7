"""Small text helpers for the menu.

This module turns dumps, statistics and traces into printable lines so the
menu loop itself stays focused on reading choices.
"""
from typing import Dict, List, Tuple


def clamp01(x: float) -> float:
    if x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return float(x)


def format_memory(dump: List[Tuple[int, int]], per_row: int) -> List[str]:
    rows = []
    for start in range(0, len(dump), per_row):
        rows.append(" ".join(f"[{i}]={v}" for i, v in dump[start:start + per_row]))
    return rows


def format_cache(dump) -> List[str]:
    lines = []
    current_set = None
    for set_index, way, valid, tag, block in dump:
        if set_index != current_set:
            lines.append(f"Set {set_index}:")
            current_set = set_index
        data = " ".join(str(w) for w in block)
        if valid:
            lines.append(f"  Way {way} | Tag: {tag} , Data: {data}")
        else:
            lines.append(f"  Way {way} | Empty line, Data: {data}")
    return lines


def format_stats(stats: Dict[str, float]) -> List[str]:
    lines = [
        f"  Total accesses: {stats['accesses']}",
        f"  Hits: {stats['hits']} ({100.0 * clamp01(stats['hit_rate']):.2f}%)",
        f"  Misses: {stats['misses']} ({100.0 * clamp01(stats['miss_rate']):.2f}%)",
        f"  Filled cache lines: {stats['filled_lines']} out of {stats['total_lines']}",
    ]
    if stats['filled_lines']:
        lines.append(f"  Average value in cache: {stats['avg_cached_value']:.2f}")
    return lines


def format_trace(trace) -> List[str]:
    p = trace.parts
    if trace.operation == 'read':
        lines = [
            f"Reading from address {trace.address}:",
            f"  Block number: {p.block_number}, offset: {p.offset}, "
            f"set index: {p.set_index}, tag: {p.tag}",
        ]
        if trace.hit:
            lines.append(f"  CACHE HIT (set {p.set_index}, way {trace.way})")
        else:
            lines.append(f"  CACHE MISS (set {p.set_index}). Loading block from RAM.")
            if trace.evicted_tag is not None:
                lines.append(f"  Evicted tag {trace.evicted_tag} (block {trace.evicted_block})")
            lines.append(f"  Loaded block stored in set {p.set_index}, way {trace.way}")
        return lines
    if trace.allocated:
        return [
            "  CACHE MISS on write. Loading block in cache (write-allocate).",
            f"  Write to cache after allocation in set {p.set_index}, way {trace.way}",
        ]
    return [f"  Write to cache (HIT) in set {p.set_index}, way {trace.way}"]
