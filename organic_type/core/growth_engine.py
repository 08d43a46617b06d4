# ═══════════════════════════════════════════════════════════════════════════════
# PART 8: GROWTH ENGINE
# Design: G1 (Layout Geometry) + H4 (Semiotics) + I1 (Systems Architect)
# Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
G1: "Text grows like a plant. A few seeds sit on a ring around the centre;
every tick each living tip takes one more character and steps forward,
pushed away from crowding, pulled by meaning, bent by fatigue."

H4: "The force field decides which characters belong together. The engine
only asks it questions: how far apart in meaning, how strongly collocated,
which way would a reading body lean."

I1: "One tick, one generation, synchronous. Caps everywhere. A tip that
cannot grow simply drops out of the queue and stays in the graph as a leaf.
Randomness and time are injected so a seeded run is reproducible."
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from organic_type.core.force_field import CollocationField, ForceField, SemanticSource
from organic_type.core.geometry import (
    EAST,
    Direction,
    Point,
    clamp,
    direction_between,
    distance,
    dot,
    is_point,
    normalize,
)
from organic_type.core.graph import (
    Connection,
    ConnectionSet,
    Interference,
    Node,
    NodeArena,
    ReadingDepth,
    TemporalLayer,
    TrajectoryPoint,
)
from organic_type.core.patterns import SpiralPattern, cluster_overlap
from organic_type.core.reflection import (
    Insight,
    ReflectionMetrics,
    SelfReflection,
    SystemState,
    adapt_parameters,
    derive_insights,
    semantic_density,
    visual_complexity,
)
from organic_type.core.spatial_index import SpatialIndex, SpatialIndexer, coerce_dimension

logger = logging.getLogger(__name__)

DEFAULT_TEXT = "organic typography"


@dataclass
class GrowthParams:
    """Global growth tunables. Mutable between ticks."""
    initial_energy: float = 100.0
    energy_decay: float = 0.3
    straight_preference: float = 0.9
    branch_probability: float = 0.15
    intersection_penalty: float = 50.0
    coiling_threshold: float = 30.0
    character_spacing: float = 18.0
    line_spacing: float = 20.0

    # Semantic
    semantic_gravity: float = 0.6
    collocation_resonance: float = 0.8
    interference_amplitude: float = 0.4
    embodiment_factor: float = 0.7
    temporal_decay: float = 0.95
    reflexivity_depth: float = 0.5


@dataclass
class EngineConfig:
    """Caps and geometric thresholds of the engine."""
    # Caps
    max_nodes: int = 1000
    max_connections: int = 2000
    max_trajectory: int = 500
    max_collocation_fields: int = 200
    max_emergent_patterns: int = 100
    max_reflection_history: int = 50
    cleanup_keep_fraction: float = 0.8

    # Neighbourhood
    neighbor_radius: float = 50.0
    repulsion_radius: float = 30.0
    repulsion_strength: float = 0.3

    # Conflicts
    collision_distance: float = 15.0
    semantic_collision_distance: float = 25.0
    semantic_collision_threshold: float = 0.3

    # Cadence
    reflection_interval: int = 10
    min_nodes_for_patterns: int = 10
    cluster_overlap: float = 0.7

    # Branching
    branch_energy_floor: float = 50.0
    max_branch_probability: float = 0.8
    avoidance_angles: int = 16
    branch_angles: int = 24
    avoidance_freedom_threshold: float = 0.3


@dataclass
class EmergentPattern:
    """A recorded observation: semantic_cluster, semantic_bridge or reading_spiral."""
    type: str
    generation: int
    strength: float
    elements: Tuple[str, ...] = ()
    connection: Optional[Connection] = None
    spiral: Optional[SpiralPattern] = None


class GrowthEngine:
    """
    Grows a graph of character nodes across a bounded canvas.

    Lifecycle: construct (analyses the text), initialize() places seeds,
    start() arms the engine, each grow() call advances one generation.
    pause() takes effect at the next grow(); reset() starts over with a
    fresh semantic source.

    Args:
        source_text: Text to grow. Invalid or empty text falls back to a
            default with a warning.
        canvas_width, canvas_height: Canvas size, at least 100 each.
        cell_size: Spatial index cell size.
        rng: numpy RandomState for seeding, curvature and branching.
        clock: Zero-argument callable returning seconds.
        spatial_index: SpatialIndexer to use (default: a SpatialIndex over
            the canvas).
        semantic_factory: Zero-argument callable building the
            SemanticSource (default: a ForceField sharing the clock).
    """

    def __init__(
        self,
        source_text: str,
        canvas_width: float = 800,
        canvas_height: float = 600,
        cell_size: float = 50,
        params: Optional[GrowthParams] = None,
        config: Optional[EngineConfig] = None,
        rng: Optional[np.random.RandomState] = None,
        clock: Optional[Callable[[], float]] = None,
        spatial_index: Optional[SpatialIndexer] = None,
        semantic_factory: Optional[Callable[[], SemanticSource]] = None,
    ) -> None:
        self.params = params or GrowthParams()
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else np.random.RandomState()
        self.clock = clock or time.time

        if not source_text or not isinstance(source_text, str):
            logger.warning(f"Invalid source text {source_text!r}, using default")
            source_text = DEFAULT_TEXT
        self.text = source_text

        self.canvas_width = coerce_dimension(canvas_width, 800.0, minimum=100.0)
        self.canvas_height = coerce_dimension(canvas_height, 600.0, minimum=100.0)

        if spatial_index is None:
            spatial_index = SpatialIndex(self.canvas_width, self.canvas_height, cell_size)
        self.spatial_index = spatial_index

        self._semantic_factory = semantic_factory or (lambda: ForceField(clock=self.clock))
        self.semantic = self._semantic_factory()

        self.nodes = NodeArena()
        self.connections = ConnectionSet()
        self.growth_queue: List[Node] = []
        self.generation = 0
        self.is_growing = False
        self._next_id = 0

        self.collocation_fields: List[CollocationField] = []
        self.reading_trajectory: List[TrajectoryPoint] = []
        self.emergent_patterns: List[EmergentPattern] = []
        self.self_reflection_history: List[SelfReflection] = []

        self.semantic.analyze_semantic_structure(self.text)

    # ── Properties ──────────────────────────────────────────────────────────

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def center(self) -> Point:
        return Point(self.canvas_width / 2.0, self.canvas_height / 2.0)

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def initialize(self) -> None:
        """
        Place seeds evenly on a ring around the canvas centre.

        seed_count = clamp(floor(sqrt(len(text)) / 5), 1, 10). Each seed sits
        at radius 100-150 and heads outwards with up to 0.25 rad of jitter.
        """
        if not self.text:
            logger.warning("No text to initialize")
            return

        length = len(self.text)
        seed_count = int(clamp(math.floor(math.sqrt(length) / 5), 1, 10))
        stride = length // seed_count
        centre = self.center

        for i in range(seed_count):
            angle = i / seed_count * 2 * math.pi
            radius = 100 + self.rng.random_sample() * 50
            text_index = min(i * stride, length - 1)
            heading = angle + (self.rng.random_sample() - 0.5) * 0.5

            seed = Node(
                id=self._new_id(),
                char=self.text[text_index],
                position=Point(centre.x + math.cos(angle) * radius, centre.y + math.sin(angle) * radius),
                velocity=Direction.from_angle(heading),
                energy=self.params.initial_energy,
                generation=0,
                text_index=text_index,
                temporal_layer=self.current_temporal_layer(),
            )
            self.nodes.add(seed)
            self.spatial_index.insert(seed)
            self.growth_queue.append(seed)

        logger.info(f"Initialized {seed_count} seeds for {length} characters")

    def start(self) -> None:
        self.is_growing = True

    def pause(self) -> None:
        self.is_growing = False

    def reset(self) -> None:
        """Drop all state, rebuild the semantic source and re-seed."""
        self.nodes.clear()
        self.connections.clear()
        self.growth_queue = []
        self.generation = 0
        self.is_growing = False
        self._next_id = 0
        self.spatial_index.clear()

        self.collocation_fields = []
        self.reading_trajectory = []
        self.emergent_patterns = []
        self.self_reflection_history = []

        self.semantic = self._semantic_factory()
        self.semantic.analyze_semantic_structure(self.text)

        logger.info("Engine reset")
        self.initialize()

    def grow(self) -> None:
        """Advance one generation. No-op when paused or nothing is growing."""
        if not self.is_growing or not self.growth_queue:
            return

        if len(self.nodes) >= self.config.max_nodes:
            self.perform_memory_cleanup()

        last_index = len(self.text) - 1
        next_queue: List[Node] = []

        for node in self.growth_queue:
            if node is None or not is_point(node.position):
                continue
            if node.energy <= 0 or node.text_index >= last_index:
                continue
            next_queue.extend(self._grow_node(node))

        self._update_emergent_patterns()

        if self.generation % self.config.reflection_interval == 0:
            self._perform_self_reflection()

        self.growth_queue = next_queue
        self.generation += 1

    # ── Per-node Growth ─────────────────────────────────────────────────────

    def _grow_node(self, node: Node) -> List[Node]:
        nearby = self.neighbours(node)

        semantic_dir = self.semantic_growth_direction(node, nearby)
        embodied_dir = self.semantic.simulate_reading_body(node, self._attention_pool(node))
        combined = self.apply_interference(semantic_dir, embodied_dir, node)

        curvature = self.semantic_curvature(node, nearby)
        heading = self.apply_curvature(combined, curvature)

        next_index = min(node.text_index + 1, len(self.text) - 1)
        spacing = self.params.character_spacing
        candidate = Node(
            id=self._new_id(),
            char=self.text[next_index],
            position=Point(node.position.x + heading.dx * spacing, node.position.y + heading.dy * spacing),
            velocity=heading,
            energy=max(0.0, node.energy - self.energy_decay(node, nearby)),
            generation=node.generation + 1,
            text_index=next_index,
            parent=node.id,
            curvature=curvature,
            semantic_resonance=self.semantic_resonance(node, nearby),
            collocation_strength=self.max_collocation_strength(node, nearby),
            reading_depth=self.reading_depth(node),
            temporal_layer=self.current_temporal_layer(),
        )

        try:
            self._add_collocation_fields(self.semantic.visualize_collocation_sensation(node, nearby))
        except Exception:
            logger.warning("Error generating collocation field", exc_info=True)

        grown: List[Node] = []
        accepted = not self.check_conflict(candidate, exclude=node.id)

        if accepted:
            self._attach(node, candidate, self.classify_connection(node, candidate, curvature))
            grown.append(candidate)

            probability = self.branch_probability(node, nearby)
            if self.rng.random_sample() < probability and node.energy > self.config.branch_energy_floor:
                branch = self.create_semantic_branch(node, nearby)
                if branch is not None:
                    grown.append(branch)
        else:
            branch = self.create_avoidance_branch(node, nearby)
            if branch is not None:
                grown.append(branch)

        self._record_trajectory(node, candidate, heading, accepted)
        return grown

    def neighbours(self, node: Node) -> List[Node]:
        """Indexed nodes within neighbor_radius of node, excluding itself."""
        found = self.spatial_index.query(node.position, self.config.neighbor_radius)
        return [n for n in found if n.id != node.id and is_point(n.position)]

    def _attention_pool(self, node: Node) -> List[Node]:
        radius = self.semantic.attention_radius
        if radius <= 0:
            return []
        return list(self.spatial_index.query(node.position, radius))

    # ── Directions ──────────────────────────────────────────────────────────

    def physical_direction(self, node: Node, nearby: Sequence[Node]) -> Direction:
        """Velocity plus repulsion from neighbours closer than repulsion_radius."""
        c = self.config
        dx, dy = node.velocity.dx, node.velocity.dy

        for other in nearby:
            ox = node.position.x - other.position.x
            oy = node.position.y - other.position.y
            d = math.hypot(ox, oy)
            if 0 < d < c.repulsion_radius:
                force = (c.repulsion_radius - d) / c.repulsion_radius
                dx += ox / d * force * c.repulsion_strength
                dy += oy / d * force * c.repulsion_strength

        result = normalize(Direction(dx, dy))
        return result if result.magnitude > 0 else EAST

    def semantic_growth_direction(self, node: Node, nearby: Sequence[Node]) -> Direction:
        """physical * (1 - gravity) + semantic pull/push and lateral swirl."""
        physical = self.physical_direction(node, nearby)
        gravity = self.params.semantic_gravity

        sx = sy = 0.0
        for other in nearby:
            force = self.semantic.calculate_semantic_force(
                node.char, other.char, distance(node.position, other.position)
            )
            towards = direction_between(node.position, other.position)
            pull = (force.attraction - force.repulsion) * gravity
            sx += towards.dx * pull - towards.dy * force.lateral
            sy += towards.dy * pull + towards.dx * force.lateral

        return normalize(Direction(
            physical.dx * (1 - gravity) + sx,
            physical.dy * (1 - gravity) + sy,
        ))

    def apply_interference(self, visual: Direction, embodied: Direction, node: Node) -> Direction:
        amplitude = self.params.interference_amplitude
        embodiment = self.params.embodiment_factor
        phase = node.generation * 0.1 + node.text_index * 0.05

        return normalize(Direction(
            visual.dx * (1 - embodiment) + embodied.dx * embodiment + math.sin(phase) * amplitude,
            visual.dy * (1 - embodiment) + embodied.dy * embodiment + math.cos(phase * 1.3) * amplitude,
        ))

    def apply_curvature(self, direction: Direction, curvature: float) -> Direction:
        """Turn direction by a random angle in [-curvature*pi/2, curvature*pi/2]."""
        c = clamp(curvature, 0.0, 1.0)
        angle = direction.angle + (self.rng.random_sample() - 0.5) * c * math.pi
        return Direction.from_angle(angle)

    # ── Node Signals ────────────────────────────────────────────────────────

    def semantic_curvature(self, node: Node, nearby: Sequence[Node]) -> float:
        e0 = self.params.initial_energy
        base = max(0.0, (e0 - node.energy) / e0)
        collocation = self.max_collocation_strength(node, nearby)
        complexity = min(1.0, self.semantic.semantic_complexity(node.char) / 10.0)
        return clamp(base + collocation * 0.3 + complexity * 0.2, 0.0, 1.0)

    def energy_decay(self, node: Node, nearby: Sequence[Node]) -> float:
        load_penalty = max(0.0, self.semantic.cognitive_load(node.char) * 0.1)
        bonus = sum(
            max(0.0, self.semantic.collocation_strength(node.char, other.char) * 0.05)
            for other in nearby
        )
        return clamp(self.params.energy_decay + load_penalty - bonus, 0.1, 1.0)

    def semantic_resonance(self, node: Node, nearby: Sequence[Node]) -> float:
        if not nearby:
            return 0.0
        total = 0.0
        for other in nearby:
            similarity = max(0.0, 1.0 - self.semantic.semantic_distance(node.char, other.char))
            proximity = max(0.0, 1.0 - distance(node.position, other.position) / 100.0)
            total += similarity * proximity
        return min(1.0, total / len(nearby))

    def max_collocation_strength(self, node: Node, nearby: Sequence[Node]) -> float:
        return max(
            (self.semantic.collocation_strength(node.char, other.char) for other in nearby),
            default=0.0,
        )

    def reading_depth(self, node: Node) -> ReadingDepth:
        return ReadingDepth(
            temporal=float(self.semantic.reading_history_length),
            semantic=float(node.generation),
            cognitive=math.log(node.generation + 1) * node.energy / self.params.initial_energy,
            cultural=self.semantic.cultural_depth(node.char),
        )

    def reading_phase(self) -> str:
        progress = self.generation / (len(self.text) * 2)
        if progress < 0.3:
            return "initiation"
        if progress < 0.7:
            return "development"
        return "culmination"

    def current_temporal_layer(self) -> TemporalLayer:
        return TemporalLayer(
            generation=self.generation,
            timestamp=self.clock(),
            reading_phase=self.reading_phase(),
            contextual_depth=self.semantic.reading_history_length,
        )

    # ── Conflicts & Connections ─────────────────────────────────────────────

    def check_conflict(self, candidate: Node, exclude: Optional[str] = None) -> bool:
        """
        True if candidate may not be placed.

        Conflicts are a node closer than collision_distance, or a node closer
        than semantic_collision_distance whose character is semantically
        closer than semantic_collision_threshold. The growing parent is
        excluded.
        """
        if candidate is None or not is_point(candidate.position):
            return True

        c = self.config
        window = max(c.collision_distance, c.semantic_collision_distance)
        for other in self.spatial_index.query(candidate.position, window):
            if other.id == candidate.id or other.id == exclude:
                continue
            d = distance(candidate.position, other.position)
            if d < c.collision_distance:
                return True
            if (d < c.semantic_collision_distance
                    and self.semantic.semantic_distance(candidate.char, other.char) < c.semantic_collision_threshold):
                return True
        return False

    def classify_connection(self, parent: Node, child: Node, curvature: float) -> Connection:
        p = self.params
        energy = parent.energy
        semantic_dist = self.semantic.semantic_distance(parent.char, child.char)
        collocation = self.semantic.collocation_strength(parent.char, child.char)

        if energy > p.coiling_threshold:
            visual = "primary"
        elif energy > p.coiling_threshold * 0.5:
            visual = "secondary"
        else:
            visual = "tertiary"

        if collocation > 0.7:
            semantic = "collocation"
        elif semantic_dist < 0.4:
            semantic = "similarity"
        elif semantic_dist > 0.8:
            semantic = "contrast"
        else:
            semantic = "neutral"

        ratio = (1 - semantic_dist) / max(0.1, energy / p.initial_energy)
        interference = Interference(
            amplitude=clamp(ratio * p.interference_amplitude, 0.0, 1.0),
            frequency=max(0.0, collocation * 2 * math.pi),
            phase=math.fmod(parent.generation + child.generation, 2 * math.pi),
        )

        return Connection(
            from_id=parent.id,
            to_id=child.id,
            visual_tier=visual,
            semantic_tier=semantic,
            interference=interference,
            curvature=curvature,
            resonance=child.semantic_resonance,
        )

    # ── Branching ───────────────────────────────────────────────────────────

    def branch_probability(self, node: Node, nearby: Sequence[Node]) -> float:
        complexity_bonus = min(0.3, self.semantic.semantic_complexity(node.char) / 10.0)
        collocation_bonus = 0.1 * sum(
            1 for other in nearby
            if self.semantic.collocation_strength(node.char, other.char) > 0.5
        )
        depth = min(1.0, self.semantic.reading_history_length / 100.0)
        return clamp(
            self.params.branch_probability + complexity_bonus + collocation_bonus * depth,
            0.0,
            self.config.max_branch_probability,
        )

    def semantic_interest(self, node: Node, direction: Direction, nearby: Sequence[Node]) -> float:
        """Waviness of the heading plus alignment with similar neighbours."""
        interest = math.sin(direction.angle * 3) * 0.3
        for other in nearby:
            if dot(direction, direction_between(node.position, other.position)) > 0.7:
                interest += (1 - self.semantic.semantic_distance(node.char, other.char)) * 0.4
        return max(0.0, interest)

    def semantic_freedom(self, position: Point, char: str, nearby: Sequence[Node]) -> float:
        """Mean of spatial and semantic freedom products over neighbours."""
        spatial = 1.0
        semantic = 1.0
        for other in nearby:
            spatial *= min(1.0, distance(position, other.position) / self.config.repulsion_radius)
            semantic *= min(1.0, self.semantic.semantic_distance(char, other.char))
        return (spatial + semantic) / 2.0

    def create_semantic_branch(self, parent: Node, nearby: Sequence[Node]) -> Optional[Node]:
        """Branch towards the most interesting of branch_angles headings."""
        best_dir = None
        best_interest = 0.0
        steps = self.config.branch_angles
        for k in range(steps):
            heading = Direction.from_angle(2 * math.pi * k / steps)
            interest = self.semantic_interest(parent, heading, nearby)
            if interest > best_interest:
                best_interest = interest
                best_dir = heading

        if best_dir is None:
            return None
        return self._spawn_branch(parent, best_dir, best_interest, "semantic", "semantic_branch")

    def create_avoidance_branch(self, parent: Node, nearby: Sequence[Node]) -> Optional[Node]:
        """After a conflict, branch towards the freest of avoidance_angles headings."""
        best_dir = None
        best_freedom = 0.0
        steps = self.config.avoidance_angles
        spacing = self.params.character_spacing
        for k in range(steps):
            heading = Direction.from_angle(2 * math.pi * k / steps)
            probe = Point(parent.position.x + heading.dx * spacing, parent.position.y + heading.dy * spacing)
            freedom = self.semantic_freedom(probe, parent.char, nearby)
            if freedom > best_freedom:
                best_freedom = freedom
                best_dir = heading

        if best_dir is None or best_freedom <= self.config.avoidance_freedom_threshold:
            return None
        return self._spawn_branch(parent, best_dir, best_freedom, "avoidance", "avoidance")

    def _spawn_branch(
        self,
        parent: Node,
        heading: Direction,
        resonance: float,
        branch_type: str,
        visual_tier: str,
    ) -> Optional[Node]:
        next_index = min(parent.text_index + 1, len(self.text) - 1)
        spacing = self.params.character_spacing
        branch = Node(
            id=self._new_id(),
            char=self.text[next_index],
            position=Point(parent.position.x + heading.dx * spacing, parent.position.y + heading.dy * spacing),
            velocity=heading,
            energy=max(0.0, parent.energy * 0.8),
            generation=parent.generation + 1,
            text_index=next_index,
            parent=parent.id,
            semantic_resonance=resonance,
            reading_depth=self.reading_depth(parent),
            temporal_layer=self.current_temporal_layer(),
            branch_type=branch_type,
        )

        if self.check_conflict(branch, exclude=parent.id):
            return None

        self._attach(parent, branch, Connection(
            from_id=parent.id,
            to_id=branch.id,
            visual_tier=visual_tier,
            semantic_tier="exploration",
            curvature=0.3,
            resonance=resonance,
        ))
        return branch

    def _attach(self, parent: Node, child: Node, connection: Connection) -> None:
        self.nodes.add(child)
        self.spatial_index.insert(child)
        parent.children.append(child.id)
        self.connections.add(connection)

    # ── Records ─────────────────────────────────────────────────────────────

    def _add_collocation_fields(self, fields: Sequence[CollocationField]) -> None:
        if not fields:
            return
        self.collocation_fields.extend(f for f in fields if f is not None and f.geometry)
        _trim_oldest(self.collocation_fields, self.config.max_collocation_fields)

    def _record_trajectory(self, source: Node, target: Node, heading: Direction, accepted: bool) -> None:
        self.reading_trajectory.append(TrajectoryPoint(
            source=source.snapshot(),
            target=target.snapshot(),
            direction=heading,
            timestamp=self.clock(),
            semantic_context={
                "resonance": source.semantic_resonance,
                "collocation_strength": source.collocation_strength,
                "reading_depth": source.reading_depth.as_dict(),
            },
            cognitive_state={
                "energy": source.energy,
                "generation": source.generation,
                "curvature": source.curvature,
            },
            accepted=accepted,
        ))
        _trim_oldest(self.reading_trajectory, self.config.max_trajectory)

    # ── Emergent Patterns ───────────────────────────────────────────────────

    def _update_emergent_patterns(self) -> None:
        if len(self.nodes) < self.config.min_nodes_for_patterns:
            return

        try:
            found = self.semantic.recognize_emergent_patterns(self.nodes.values(), self.connections.values())
            node_count = len(self.nodes)
            chars = {n.id: n.char for n in self.nodes}

            for cluster in found.clusters:
                if not self._has_similar_cluster(cluster):
                    self.emergent_patterns.append(EmergentPattern(
                        type="semantic_cluster",
                        generation=self.generation,
                        strength=len(cluster) / node_count,
                        elements=tuple(cluster),
                    ))

            for bridge in found.bridges:
                if not self._has_pattern("semantic_bridge", bridge.key):
                    self.emergent_patterns.append(EmergentPattern(
                        type="semantic_bridge",
                        generation=self.generation,
                        strength=self.semantic.semantic_distance(chars.get(bridge.from_id), chars.get(bridge.to_id)),
                        elements=bridge.key,
                        connection=bridge,
                    ))

            for spiral in found.spirals:
                if not self._has_pattern("reading_spiral", spiral.node_ids):
                    self.emergent_patterns.append(EmergentPattern(
                        type="reading_spiral",
                        generation=self.generation,
                        strength=float(len(spiral.node_ids)),
                        elements=spiral.node_ids,
                        spiral=spiral,
                    ))
        except Exception:
            logger.warning("Error updating emergent patterns", exc_info=True)

        _trim_oldest(self.emergent_patterns, self.config.max_emergent_patterns)

    def _has_similar_cluster(self, cluster: Sequence[str]) -> bool:
        return any(
            p.type == "semantic_cluster" and cluster_overlap(p.elements, cluster) >= self.config.cluster_overlap
            for p in self.emergent_patterns
        )

    def _has_pattern(self, kind: str, elements: Tuple[str, ...]) -> bool:
        return any(p.type == kind and p.elements == elements for p in self.emergent_patterns)

    # ── Self-Reflection ─────────────────────────────────────────────────────

    def _perform_self_reflection(self) -> None:
        try:
            nodes = self.nodes.values()
            connections = self.connections.values()

            reflection = SelfReflection(
                timestamp=self.clock(),
                generation=self.generation,
                metrics=ReflectionMetrics(
                    total_nodes=len(nodes),
                    total_connections=len(connections),
                    average_semantic_resonance=self.average_semantic_resonance(),
                    emergent_pattern_count=len(self.emergent_patterns),
                    collocation_field_count=len(self.collocation_fields),
                    reading_trajectory_length=len(self.reading_trajectory),
                ),
                reflexive_elements=self.semantic.generate_self_reflective_pattern(nodes, connections),
                system_state=self.capture_system_state(),
                insights=self._generate_insights(),
            )
        except Exception:
            logger.warning("Error in self reflection", exc_info=True)
            return

        self.self_reflection_history.append(reflection)
        _trim_oldest(self.self_reflection_history, self.config.max_reflection_history)

        try:
            reflection.adjustments = adapt_parameters(self.params, reflection.system_state)
        except Exception:
            logger.warning("Error adapting parameters", exc_info=True)

    def _generate_insights(self) -> List[Insight]:
        try:
            return derive_insights(
                cluster_count=sum(1 for p in self.emergent_patterns if p.type == "semantic_cluster"),
                spiral_count=sum(1 for p in self.emergent_patterns if p.type == "reading_spiral"),
                node_count=len(self.nodes),
                connections=self.connections.values(),
            )
        except Exception:
            logger.warning("Error generating insights", exc_info=True)
            return []

    def capture_system_state(self) -> SystemState:
        connections = self.connections.values()
        return SystemState(
            growth_phase=self.reading_phase(),
            semantic_density=semantic_density(connections, len(self.nodes)),
            visual_complexity=visual_complexity(connections),
            temporal_depth=self.semantic.reading_history_length,
            cognitive_load=self.semantic.average_cognitive_load(),
        )

    def average_semantic_resonance(self) -> float:
        if not self.nodes:
            return 0.0
        return sum(n.semantic_resonance for n in self.nodes) / len(self.nodes)

    # ── Memory ──────────────────────────────────────────────────────────────

    def perform_memory_cleanup(self) -> None:
        """
        Purge the oldest nodes down to cleanup_keep_fraction of max_nodes.

        Connections touching a purged node go with it, purged nodes leave the
        growth queue and the spatial index is rebuilt from the survivors.
        Every other bounded collection at its cap is cut to the same fraction.
        """
        c = self.config
        f = c.cleanup_keep_fraction

        if len(self.nodes) >= c.max_nodes:
            dropped = self.nodes.purge_oldest(int(c.max_nodes * f))
            self.connections.drop_touching(dropped)
            self.growth_queue = [n for n in self.growth_queue if n.id not in dropped]

            self.spatial_index.clear()
            for node in self.nodes:
                self.spatial_index.insert(node)
            logger.info(f"Memory cleanup purged {len(dropped)} nodes")

        if len(self.connections) >= c.max_connections:
            self.connections.keep_newest(int(c.max_connections * f))

        for items, limit in (
            (self.reading_trajectory, c.max_trajectory),
            (self.collocation_fields, c.max_collocation_fields),
            (self.emergent_patterns, c.max_emergent_patterns),
            (self.self_reflection_history, c.max_reflection_history),
        ):
            if len(items) >= limit:
                _trim_oldest(items, int(limit * f))

    def get_memory_usage(self) -> Dict[str, int]:
        usage = {
            "nodes": len(self.nodes) * 200,
            "connections": len(self.connections) * 100,
            "trajectory": len(self.reading_trajectory) * 150,
            "collocation_fields": len(self.collocation_fields) * 80,
            "emergent_patterns": len(self.emergent_patterns) * 120,
        }
        usage["total"] = sum(usage.values())
        return usage

    # ── Accessors ───────────────────────────────────────────────────────────

    def get_nodes(self) -> List[Node]:
        return self.nodes.values()

    def get_connections(self) -> List[Connection]:
        return self.connections.values()

    def get_semantic_structure(self) -> dict:
        return self.semantic.get_semantic_structure()

    def get_collocation_fields(self) -> List[CollocationField]:
        return list(self.collocation_fields)

    def get_reading_trajectory(self) -> List[TrajectoryPoint]:
        return list(self.reading_trajectory)

    def get_emergent_patterns(self) -> List[EmergentPattern]:
        return list(self.emergent_patterns)

    def get_self_reflection_history(self) -> List[SelfReflection]:
        return list(self.self_reflection_history)

    def get_system_report(self) -> dict:
        return {
            "basic_metrics": {
                "nodes": len(self.nodes),
                "connections": len(self.connections),
                "generation": self.generation,
                "text_length": len(self.text),
            },
            "semantic_metrics": {
                "semantic_density": semantic_density(self.connections.values(), len(self.nodes)),
                "average_resonance": self.average_semantic_resonance(),
                "collocation_fields": len(self.collocation_fields),
            },
            "emergent_metrics": {
                "patterns": len(self.emergent_patterns),
                "trajectory_points": len(self.reading_trajectory),
                "reflections": len(self.self_reflection_history),
            },
            "system_parameters": asdict(self.params),
            "current_state": self.capture_system_state().as_dict(),
            "memory_usage": self.get_memory_usage(),
        }

    # ── Internal ────────────────────────────────────────────────────────────

    def _new_id(self) -> str:
        node_id = f"node_{self._next_id}"
        self._next_id += 1
        return node_id


def _trim_oldest(items: list, limit: int) -> None:
    excess = len(items) - max(0, limit)
    if excess > 0:
        del items[:excess]
