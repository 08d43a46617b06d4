# ═══════════════════════════════════════════════════════════════════════════════
# PART 3: BOUNDED MAPS
# Design: I1 (Systems Architect) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
I1: "Every map the field grows has a cap. When the cap would be breached we
keep the best entries and drop the rest, in one synchronous step."

I2: "'Best' is an explicit sort key with a stable tie-break on the map key,
so eviction never depends on dict iteration order."
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, Mapping, Tuple

Rank = Callable[[Tuple[Hashable, Any]], Tuple]


def association_rank(entry: Tuple[str, Mapping[str, float]]) -> Tuple[int, str]:
    """Most-connected root words first; ties broken by word."""
    word, neighbours = entry
    return (-len(neighbours), word)


def collocation_rank(entry: Tuple[str, float]) -> Tuple[float, str]:
    """Strongest collocations first; ties broken by key."""
    key, strength = entry
    return (-strength, key)


def keep_count(cap: int, fraction: float) -> int:
    return max(0, int(cap * fraction))


def keep_top(mapping: Dict[Hashable, Any], keep: int, rank: Rank) -> int:
    """
    Shrink mapping in place to its `keep` best entries under rank.

    Surviving entries keep their original insertion order. Returns the
    number of entries evicted.
    """
    if len(mapping) <= keep:
        return 0

    survivors = set(k for k, _ in sorted(mapping.items(), key=rank)[:max(0, keep)])
    evicted = [k for k in mapping if k not in survivors]
    for key in evicted:
        del mapping[key]
    return len(evicted)
