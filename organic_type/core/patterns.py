# ═══════════════════════════════════════════════════════════════════════════════
# PART 5: EMERGENT PATTERNS
# Design: H4 (Semiotics) + G1 (Layout Geometry)
# Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
H4: "Patterns are observations, not causes. Growth never reads them back; they
exist so a renderer or a reflection step can say what the layout became."

G1: "Four lenses on the same graph: clusters of similar characters, bridges
across a large but not extreme semantic gap, spirals in the reading path and
density self-similarity across scales."

I2: "Each detector is a pure function over plain inputs, so it can be tested
without an engine."
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from organic_type.core.geometry import Point, is_point
from organic_type.core.graph import Connection, Node

CellKey = Tuple[int, int]
DistanceFn = Callable[[str, str], float]


@dataclass(frozen=True)
class SpiralPattern:
    """A reading-history window whose path turns by more than half a circle."""
    node_ids: Tuple[str, ...]
    positions: Tuple[Point, ...]
    total_turn: float


@dataclass
class FractalPattern:
    """Occupancy grid at one scale with its density self-similarity."""
    scale: float
    self_similarity: float
    grid_pattern: Dict[CellKey, List[str]] = field(default_factory=dict)


@dataclass
class EmergentPatterns:
    clusters: List[List[str]] = field(default_factory=list)
    bridges: List[Connection] = field(default_factory=list)
    spirals: List[SpiralPattern] = field(default_factory=list)
    fractals: List[FractalPattern] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.clusters or self.bridges or self.spirals or self.fractals)

    def counts(self) -> Dict[str, int]:
        return {
            "clusters": len(self.clusters),
            "bridges": len(self.bridges),
            "spirals": len(self.spirals),
            "fractals": len(self.fractals),
        }


# ── Clusters ────────────────────────────────────────────────────────────────


def find_clusters(
    nodes: Sequence[Node],
    associations: Mapping[str, Mapping[str, float]],
    threshold: float = 0.7,
    min_size: int = 3,
) -> List[List[str]]:
    """
    Greedy clustering of nodes by character similarity.

    Walks nodes in order; each unvisited node seeds a cluster and absorbs
    every unvisited node whose character has similarity > threshold with
    the seed's character in the association graph. Clusters smaller than
    min_size are discarded, but their members stay visited.
    """
    by_char: Dict[str, List[int]] = defaultdict(list)
    valid = [n for n in nodes if n is not None and n.id and n.char]
    for order, node in enumerate(valid):
        by_char[node.char].append(order)

    visited = set()
    clusters = []
    for order, seed in enumerate(valid):
        if order in visited:
            continue
        visited.add(order)

        neighbours = associations.get(seed.char, {})
        members = []
        for char, similarity in neighbours.items():
            if similarity > threshold:
                members.extend(i for i in by_char.get(char, ()) if i not in visited)
        members = sorted(set(members))
        visited.update(members)

        if len(members) + 1 >= min_size:
            clusters.append([seed.id] + [valid[i].id for i in members])

    return clusters


def cluster_overlap(a: Iterable[str], b: Iterable[str]) -> float:
    """Jaccard overlap of two id sets."""
    a, b = set(a), set(b)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


# ── Bridges ─────────────────────────────────────────────────────────────────


def find_bridges(
    connections: Sequence[Connection],
    chars: Mapping[str, str],
    semantic_distance: DistanceFn,
    gap: Tuple[float, float] = (0.8, 0.95),
) -> List[Connection]:
    """Connections whose endpoint characters sit strictly inside the gap band."""
    low, high = gap
    bridges = []
    for conn in connections:
        source = chars.get(conn.from_id)
        target = chars.get(conn.to_id)
        if not source or not target:
            continue
        d = semantic_distance(source, target)
        if low < d < high:
            bridges.append(conn)
    return bridges


# ── Spirals ─────────────────────────────────────────────────────────────────


def wrap_angle(angle: float) -> float:
    """Map angle into [-pi, pi]."""
    return math.atan2(math.sin(angle), math.cos(angle))


def total_turning(positions: Sequence[Point], min_step: float = 0.001) -> float:
    """Sum of unsigned heading changes along a polyline, skipping null steps."""
    total = 0.0
    for i in range(1, len(positions) - 1):
        a, b, c = positions[i - 1], positions[i], positions[i + 1]
        dx1, dy1 = b.x - a.x, b.y - a.y
        dx2, dy2 = c.x - b.x, c.y - b.y
        if abs(dx1) < min_step and abs(dy1) < min_step:
            continue
        if abs(dx2) < min_step and abs(dy2) < min_step:
            continue
        total += abs(wrap_angle(math.atan2(dy2, dx2) - math.atan2(dy1, dx1)))
    return total


def find_spirals(
    trace: Sequence[Tuple[str, Point]],
    window: int = 5,
) -> List[SpiralPattern]:
    """
    Sliding windows over a reading trace of (node id, eye position).

    A window is a spiral when the cumulative turning of its path exceeds pi.
    """
    spirals = []
    if len(trace) < window:
        return spirals

    for start in range(len(trace) - window + 1):
        chunk = [(nid, p) for nid, p in trace[start:start + window] if is_point(p)]
        if len(chunk) < 3:
            continue
        positions = tuple(p for _, p in chunk)
        turn = total_turning(positions)
        if turn > math.pi:
            spirals.append(SpiralPattern(
                node_ids=tuple(nid for nid, _ in chunk),
                positions=positions,
                total_turn=turn,
            ))
    return spirals


# ── Fractals ────────────────────────────────────────────────────────────────


def density_self_similarity(densities: Sequence[int]) -> float:
    """
    Mean pairwise similarity 1 - |di - dj| / max(di, dj, 1) over occupied cells.

    Zero when fewer than four cells are occupied.
    """
    d = np.asarray(densities, dtype=float)
    if len(d) < 4:
        return 0.0

    diff = np.abs(d[:, np.newaxis] - d[np.newaxis, :])
    top = np.maximum(np.maximum(d[:, np.newaxis], d[np.newaxis, :]), 1.0)
    sims = 1.0 - diff / top
    upper = np.triu_indices(len(d), k=1)
    return float(np.clip(sims[upper].mean(), 0.0, 1.0))


def grid_at_scale(nodes: Sequence[Node], scale: float) -> Dict[CellKey, List[str]]:
    grid: Dict[CellKey, List[str]] = {}
    for node in nodes:
        if node is None or not is_point(node.position):
            continue
        key = (int(math.floor(node.position.x / scale)), int(math.floor(node.position.y / scale)))
        grid.setdefault(key, []).append(node.id)
    return grid


def find_fractals(
    nodes: Sequence[Node],
    scales: Sequence[float] = (10, 30, 90, 270),
    threshold: float = 0.6,
) -> List[FractalPattern]:
    if len(nodes) < 4:
        return []

    patterns = []
    for scale in scales:
        if not scale or scale <= 0:
            continue
        grid = grid_at_scale(nodes, scale)
        similarity = density_self_similarity([len(ids) for ids in grid.values()])
        if similarity > threshold:
            patterns.append(FractalPattern(scale=scale, self_similarity=similarity, grid_pattern=grid))
    return patterns


def recognize(
    nodes: Sequence[Node],
    connections: Sequence[Connection],
    associations: Mapping[str, Mapping[str, float]],
    semantic_distance: DistanceFn,
    trace: Sequence[Tuple[str, Point]],
    cluster_similarity: float = 0.7,
    bridge_gap: Tuple[float, float] = (0.8, 0.95),
    spiral_window: int = 5,
    fractal_scales: Sequence[float] = (10, 30, 90, 270),
    fractal_threshold: float = 0.6,
    chars: Optional[Mapping[str, str]] = None,
) -> EmergentPatterns:
    """Run all four detectors."""
    if chars is None:
        chars = {n.id: n.char for n in nodes if n is not None}

    return EmergentPatterns(
        clusters=find_clusters(nodes, associations, cluster_similarity),
        bridges=find_bridges(connections, chars, semantic_distance, bridge_gap),
        spirals=find_spirals(trace, spiral_window),
        fractals=find_fractals(nodes, fractal_scales, fractal_threshold),
    )
