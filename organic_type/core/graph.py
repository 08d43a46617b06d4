# ═══════════════════════════════════════════════════════════════════════════════
# PART 4: NODE GRAPH
# Design: I1 (Systems Architect) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
I1: "The graph is an arena. Nodes are owned by one id -> Node map, a parent is
just an id, children are a list of ids. Nothing is deleted one at a time;
cleanup rebuilds the arena from the survivors."

I2: "Connections are unique per (from, to). A duplicate is rejected, never
merged."
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

from organic_type.core.geometry import Direction, Point


# ── Node ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ReadingDepth:
    """How deep into the reading a node was grown."""
    temporal: float = 0.0
    semantic: float = 0.0
    cognitive: float = 0.0
    cultural: float = 0.0

    def as_dict(self) -> dict:
        return {
            "temporal": self.temporal,
            "semantic": self.semantic,
            "cognitive": self.cognitive,
            "cultural": self.cultural,
        }


@dataclass(frozen=True)
class TemporalLayer:
    """Snapshot of engine time when the node was created."""
    generation: int = 0
    timestamp: float = 0.0
    reading_phase: str = "initiation"
    contextual_depth: int = 0


@dataclass
class Node:
    """
    One grown character.

    Everything except `children` is fixed at creation. `parent` is a weak
    id reference; the parent may already have been purged.
    """
    id: str
    char: str
    position: Point
    velocity: Direction
    energy: float
    generation: int
    text_index: int
    parent: Optional[str] = None
    children: List[str] = field(default_factory=list)
    curvature: float = 0.0
    semantic_resonance: float = 0.0
    collocation_strength: float = 0.0
    reading_depth: ReadingDepth = field(default_factory=ReadingDepth)
    temporal_layer: TemporalLayer = field(default_factory=TemporalLayer)
    branch_type: Optional[str] = None

    @property
    def timestamp(self) -> float:
        return self.temporal_layer.timestamp

    def snapshot(self) -> "NodeSnapshot":
        return NodeSnapshot(
            id=self.id,
            char=self.char,
            position=self.position,
            energy=self.energy,
            generation=self.generation,
        )


@dataclass(frozen=True)
class NodeSnapshot:
    """Detached view of a node for trajectory records."""
    id: str
    char: str
    position: Point
    energy: float
    generation: int


# ── Connection ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Interference:
    amplitude: float = 0.0
    frequency: float = 0.0
    phase: float = 0.0


@dataclass(frozen=True)
class Connection:
    """
    Directed parent -> child edge.

    visual_tier: primary / secondary / tertiary / semantic_branch /
    exploration / avoidance. semantic_tier: collocation / similarity /
    contrast / neutral.
    """
    from_id: str
    to_id: str
    visual_tier: str
    semantic_tier: str
    interference: Interference = field(default_factory=Interference)
    curvature: float = 0.0
    resonance: float = 0.0

    @property
    def key(self) -> Tuple[str, str]:
        return (self.from_id, self.to_id)


# ── Trajectory ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TrajectoryPoint:
    """One step of the reading trajectory: parent -> child."""
    source: NodeSnapshot
    target: NodeSnapshot
    direction: Direction
    timestamp: float
    semantic_context: dict
    cognitive_state: dict
    accepted: bool = True


# ── Containers ──────────────────────────────────────────────────────────────


class NodeArena:
    """Insertion-ordered id -> Node map. Oldest nodes come first."""

    def __init__(self) -> None:
        self._nodes: "OrderedDict[str, Node]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def add(self, node: Node) -> None:
        self._nodes[node.id] = node

    def values(self) -> List[Node]:
        return list(self._nodes.values())

    def ids(self) -> Set[str]:
        return set(self._nodes)

    def clear(self) -> None:
        self._nodes.clear()

    def purge_oldest(self, keep: int) -> Set[str]:
        """Rebuild the arena from its newest `keep` nodes. Returns dropped ids."""
        if len(self._nodes) <= keep:
            return set()

        items = list(self._nodes.items())
        cut = len(items) - max(0, keep)
        dropped = set(node_id for node_id, _ in items[:cut])
        self._nodes = OrderedDict(items[cut:])
        return dropped


class ConnectionSet:
    """Ordered connection list with (from, to) uniqueness."""

    def __init__(self) -> None:
        self._connections: List[Connection] = []
        self._keys: Set[Tuple[str, str]] = set()

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(self._connections)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def add(self, connection: Connection) -> bool:
        """Append connection. False if its (from, to) pair already exists."""
        if connection.key in self._keys:
            return False
        self._connections.append(connection)
        self._keys.add(connection.key)
        return True

    def values(self) -> List[Connection]:
        return list(self._connections)

    def clear(self) -> None:
        self._connections.clear()
        self._keys.clear()

    def drop_touching(self, node_ids: Set[str]) -> int:
        """Remove every connection with an endpoint in node_ids."""
        if not node_ids:
            return 0
        kept = [c for c in self._connections
                if c.from_id not in node_ids and c.to_id not in node_ids]
        removed = len(self._connections) - len(kept)
        self._replace(kept)
        return removed

    def keep_newest(self, keep: int) -> int:
        if len(self._connections) <= keep:
            return 0
        removed = len(self._connections) - max(0, keep)
        self._replace(self._connections[removed:])
        return removed

    def _replace(self, connections: List[Connection]) -> None:
        self._connections = connections
        self._keys = set(c.key for c in connections)
