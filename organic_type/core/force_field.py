# ═══════════════════════════════════════════════════════════════════════════════
# PART 6: FORCE FIELD
# Design: H4 (Semiotics) + A3 (ML Integration)
# Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
H4: "Characters pull on each other. Words that co-occur attract, words that
are far apart in meaning but close on the page push away, and the mismatch
between the two distances bends the stroke sideways."

A3: "None of this is linguistics. The association graph is built from hashed
pseudo-embeddings, the collocation table from adjacent tokens. What matters
is that every signal is deterministic and bounded."

I2: "The field also keeps a simulated 'reading body': where the eye is, what
it attends to, how loaded it is. That log is bounded, and so is every map
the field grows."
"""

from __future__ import annotations

import logging
import math
import re
import time
from abc import ABC, abstractmethod
from collections import Counter, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple

import numpy as np

from organic_type.core import patterns
from organic_type.core.embedding import Embedding, HashEmbedding, cosine_similarity, similarity_matrix, string_hash
from organic_type.core.eviction import association_rank, collocation_rank, keep_count, keep_top
from organic_type.core.geometry import ZERO, Direction, Point, clamp, distance, is_number, is_point
from organic_type.core.graph import Connection, Node
from organic_type.core.patterns import EmergentPatterns

logger = logging.getLogger(__name__)

TOKEN_SPLIT = re.compile(r"[\s、。，．！？,.!?]+")


@dataclass
class ForceFieldConfig:
    """Configuration for the semantic force field."""
    # Reading body
    attention_span: int = 7              # nearest nodes held in focus
    semantic_radius: float = 120.0       # focus radius
    sensation_threshold: float = 0.5     # collocation needed for a ring
    memory_decay: float = 0.95           # per-event decay in temporal folding

    # Association graph
    embedding_dim: int = 50
    similarity_threshold: float = 0.3
    collocation_step: float = 0.1

    # Bounds
    max_history_size: int = 500
    max_association_size: int = 1000
    max_collocation_size: int = 2000
    cleanup_interval: int = 100          # analyze calls between cleanups
    eviction_keep_fraction: float = 0.8

    # Pattern detection
    cluster_similarity: float = 0.7
    bridge_gap: Tuple[float, float] = (0.8, 0.95)
    spiral_window: int = 5
    fractal_scales: Tuple[float, ...] = (10.0, 30.0, 90.0, 270.0)
    fractal_threshold: float = 0.6


# ── Value types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SemanticForce:
    """attraction, repulsion in [0, 1]; lateral in [-1, 1]."""
    attraction: float = 0.0
    repulsion: float = 0.0
    lateral: float = 0.0


NEUTRAL_FORCE = SemanticForce()


@dataclass(frozen=True)
class BodyMemory:
    gesture: Direction = ZERO
    visual_pattern: Tuple[int, ...] = ()
    valence: float = 0.0


@dataclass(frozen=True)
class ReadingState:
    eye_position: Point
    attention_focus: Tuple[str, ...]
    cognitive_load: float
    temporal_context: dict
    body_memory: BodyMemory


@dataclass(frozen=True)
class ReadingEvent:
    timestamp: float
    node_id: str
    char: str
    reading_state: ReadingState
    context: dict


@dataclass(frozen=True)
class Resonance:
    frequency: float = 0.0
    amplitude: float = 0.0
    phase: float = 0.0


@dataclass(frozen=True)
class CollocationField:
    """Ring of points around the midpoint of a strongly collocated pair."""
    intensity: float
    geometry: Tuple[Point, ...]
    resonance: Resonance
    type: str = "collocation_field"


# ── Interface ───────────────────────────────────────────────────────────────


class SemanticSource(ABC):
    """What the growth engine asks of a semantic field."""

    @property
    @abstractmethod
    def attention_radius(self) -> float:
        """Radius within which the reading body attends to nodes."""

    @abstractmethod
    def analyze_semantic_structure(self, text: str) -> Dict[str, Dict[str, float]]:
        """Fold text into the association graph and collocation table."""

    @abstractmethod
    def semantic_distance(self, word1: str, word2: str) -> float:
        """1 - similarity, 1 when unknown."""

    @abstractmethod
    def collocation_strength(self, word1: str, word2: str) -> float:
        """Strength of the ordered bigram, 0 when unknown."""

    @abstractmethod
    def semantic_complexity(self, word: str) -> float:
        """Connectivity of word, capped at 10."""

    @abstractmethod
    def cognitive_load(self, word: str) -> float:
        """Load of reading word now, in [0, 1]."""

    @abstractmethod
    def cultural_depth(self, word: str) -> float:
        """Registered cultural depth of word, 0 when unknown."""

    @property
    @abstractmethod
    def reading_history_length(self) -> int:
        """Number of recorded reading events."""

    @abstractmethod
    def calculate_semantic_force(self, char1: str, char2: str, spatial_distance: float) -> SemanticForce:
        """Force triple between two characters at a spatial distance."""

    @abstractmethod
    def simulate_reading_body(self, node: Node, nodes: Sequence[Node]) -> Direction:
        """Record a reading event at node and return the embodied direction."""

    @abstractmethod
    def visualize_collocation_sensation(self, node: Node, nearby: Sequence[Node]) -> List[CollocationField]:
        """Rings for strongly collocated neighbours."""

    @abstractmethod
    def recognize_emergent_patterns(self, nodes: Sequence[Node], connections: Sequence[Connection]) -> EmergentPatterns:
        """Clusters, bridges, spirals and fractals over the graph."""

    @abstractmethod
    def generate_self_reflective_pattern(self, nodes: Sequence[Node], connections: Sequence[Connection]) -> dict:
        """Fully populated self-description."""

    @abstractmethod
    def average_cognitive_load(self) -> float:
        """Mean load over the reading history."""

    @abstractmethod
    def get_semantic_structure(self) -> dict:
        """Detached copies of the associations, collocations and history."""

    @abstractmethod
    def get_system_report(self) -> dict:
        """Sizes and memory estimate."""


# ── Force Field ─────────────────────────────────────────────────────────────


class ForceField(SemanticSource):
    """
    Deterministic semantic signals over the characters of a text.

    State:
    - associations: word -> {word -> similarity}, at most
      max_association_size root words
    - collocations: "w1_w2" -> strength in [0, 1], at most
      max_collocation_size keys
    - reading_history: the last max_history_size reading events

    Eviction runs synchronously before an insert would breach a cap and
    keeps the top eviction_keep_fraction by connectivity or strength.
    """

    def __init__(
        self,
        config: Optional[ForceFieldConfig] = None,
        embedding: Optional[Embedding] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.config = config or ForceFieldConfig()
        self.embedding = embedding or HashEmbedding(self.config.embedding_dim)
        self.clock = clock or time.time

        self.associations: Dict[str, Dict[str, float]] = {}
        self.collocations: Dict[str, float] = {}
        self.reading_history: Deque[ReadingEvent] = deque(maxlen=max(1, self.config.max_history_size))
        self.contextual_layers: Dict[str, Dict[str, dict]] = {
            "temporal": {},   # char -> visits, last_seen
            "cultural": {},   # word -> depth, resonance
            "personal": {},   # char -> last load, valence
        }

        self._cleanup_counter = 0

        # Running totals over reading_history
        self._load_total = 0.0
        self._focus_total = 0

    # ── Properties ──────────────────────────────────────────────────────────

    @property
    def attention_radius(self) -> float:
        return self.config.semantic_radius

    @property
    def reading_history_length(self) -> int:
        return len(self.reading_history)

    # ── Analysis ────────────────────────────────────────────────────────────

    def tokenize(self, text: str) -> List[str]:
        if not text or not isinstance(text, str):
            return []
        return [t for t in TOKEN_SPLIT.split(text) if t]

    def analyze_semantic_structure(self, text: str) -> Dict[str, Dict[str, float]]:
        """
        Add similarity edges and bigram collocations for text.

        An edge word_i -> word_j is recorded for every ordered token pair
        i < j whose embeddings have similarity above the threshold. Only
        unique tokens are embedded: u -> v exists iff the first occurrence
        of u precedes the last occurrence of v, which includes u -> u for a
        repeated token.
        """
        if not text or not isinstance(text, str):
            logger.warning(f"Invalid text for semantic analysis: {text!r}")
            return self.associations

        words = self.tokenize(text)
        if not words:
            return self.associations

        first: Dict[str, int] = {}
        last: Dict[str, int] = {}
        for i, word in enumerate(words):
            first.setdefault(word, i)
            last[word] = i

        embedded = [(w, self.embedding.embed(w)) for w in first]
        embedded = [(w, v) for w, v in embedded if v is not None]
        if embedded:
            unique = [w for w, _ in embedded]
            sims = similarity_matrix(np.vstack([v for _, v in embedded]))
            firsts = np.array([first[w] for w in unique])
            lasts = np.array([last[w] for w in unique])
            mask = (firsts[:, np.newaxis] < lasts[np.newaxis, :]) & (sims > self.config.similarity_threshold)

            for i, j in np.argwhere(mask):
                self.add_association(unique[i], unique[j], float(sims[i, j]))

        self._add_collocations(words)
        self._cleanup_if_needed()
        return self.associations

    def add_association(self, word1: str, word2: str, strength: float) -> None:
        if not word1 or not word2 or not is_number(strength):
            return

        if word1 not in self.associations and len(self.associations) >= self.config.max_association_size:
            self._evict_associations()

        self.associations.setdefault(word1, {})[word2] = clamp(float(strength), 0.0, 1.0)

    # ── Lookups ─────────────────────────────────────────────────────────────

    def semantic_distance(self, word1: str, word2: str) -> float:
        if not word1 or not word2:
            return 1.0
        neighbours = self.associations.get(word1)
        if neighbours is not None and word2 in neighbours:
            return max(0.0, 1.0 - neighbours[word2])
        return 1.0

    def semantic_similarity(self, word1: str, word2: str) -> float:
        """Cosine similarity of the two words' embeddings."""
        return cosine_similarity(self.embedding.embed(word1), self.embedding.embed(word2))

    def collocation_strength(self, word1: str, word2: str) -> float:
        if not word1 or not word2:
            return 0.0
        return self.collocations.get(f"{word1}_{word2}", 0.0)

    def semantic_complexity(self, word: str) -> float:
        if not word or not isinstance(word, str):
            return 1.0
        neighbours = self.associations.get(word)
        if neighbours is None:
            return 1.0
        return float(min(10, len(neighbours)))

    def cognitive_load(self, word: str) -> float:
        if not word or not isinstance(word, str):
            return 0.5
        contextual = min(1.0, len(self.reading_history) * 0.01)
        return clamp((len(word) + self.semantic_complexity(word) + contextual) / 3.0, 0.0, 1.0)

    def register_cultural_context(self, word: str, depth: float, resonance: float = 0.0) -> bool:
        if not word or not isinstance(word, str) or not is_number(depth) or not is_number(resonance):
            logger.warning(f"Invalid cultural context for {word!r}")
            return False
        self.contextual_layers["cultural"][word] = {"depth": float(depth), "resonance": float(resonance)}
        return True

    def cultural_depth(self, word: str) -> float:
        context = self.contextual_layers["cultural"].get(word) if word else None
        return context["depth"] if context else 0.0

    # ── Forces ──────────────────────────────────────────────────────────────

    def calculate_semantic_force(self, char1: str, char2: str, spatial_distance: float) -> SemanticForce:
        """
        Force between two characters at a given spatial distance.

        ratio = spatial / semantic with both floored at 0.1:
            attraction = clamp(collocation - 0.3 * ratio)
            repulsion  = clamp(0.5 * (ratio - 1))
            lateral    = clamp(0.2 * sin(pi * ratio), -1, 1)
        """
        if not char1 or not char2 or not is_number(spatial_distance):
            return NEUTRAL_FORCE

        semantic = clamp(self.semantic_distance(char1, char2), 0.1, 1.0)
        spatial = max(0.1, float(spatial_distance))
        collocation = clamp(self.collocation_strength(char1, char2), 0.0, 1.0)
        ratio = spatial / semantic

        return SemanticForce(
            attraction=clamp(collocation - ratio * 0.3, 0.0, 1.0),
            repulsion=clamp((ratio - 1.0) * 0.5, 0.0, 1.0),
            lateral=clamp(math.sin(ratio * math.pi) * 0.2, -1.0, 1.0),
        )

    # ── Reading Body ────────────────────────────────────────────────────────

    def simulate_reading_body(self, node: Node, nodes: Sequence[Node]) -> Direction:
        """
        Simulate reading node and return the embodied growth direction.

        The direction blends the attention vector (offset from the eye to
        the centroid of the focus, scaled by 0.01) with the gesture of the
        character's body memory, 0.6 / 0.4, damped by cognitive load.
        """
        if node is None or not node.char or not is_point(getattr(node, "position", None)):
            return ZERO

        now = self.clock()
        focus = self.attention_focus(node, nodes or ())
        load = self.cognitive_load(node.char)
        memory = self.body_memory(node.char)

        state = ReadingState(
            eye_position=node.position,
            attention_focus=tuple(n.id for n in focus),
            cognitive_load=load,
            temporal_context=self._temporal_context(node, now),
            body_memory=memory,
        )

        attention = self._attention_vector(node.position, focus)
        load_factor = clamp(1.0 - load * 0.5, 0.1, 1.0)
        direction = Direction(
            clamp((attention.dx * 0.6 + memory.gesture.dx * 0.4) * load_factor, -1.0, 1.0),
            clamp((attention.dy * 0.6 + memory.gesture.dy * 0.4) * load_factor, -1.0, 1.0),
        )

        self._record(ReadingEvent(
            timestamp=now,
            node_id=node.id,
            char=node.char,
            reading_state=state,
            context=self.capture_context(now),
        ))

        visits = self.contextual_layers["temporal"].get(node.char, {}).get("visits", 0)
        self.contextual_layers["temporal"][node.char] = {"visits": visits + 1, "last_seen": now}
        self.contextual_layers["personal"][node.char] = {"load": load, "valence": memory.valence}

        return direction

    def attention_focus(self, node: Node, nodes: Sequence[Node]) -> List[Node]:
        """Up to attention_span nodes strictly within semantic_radius, nearest first."""
        scored = []
        for other in nodes:
            if other is None:
                continue
            d = distance(other.position, node.position)
            if d < self.config.semantic_radius:
                scored.append((d, other))
        scored.sort(key=lambda pair: pair[0])
        return [other for _, other in scored[:self.config.attention_span]]

    def body_memory(self, word: str) -> BodyMemory:
        if not word or not isinstance(word, str):
            return BodyMemory()
        return BodyMemory(
            gesture=self.gesture_vector(word),
            visual_pattern=tuple(ord(c) % 10 for c in word),
            valence=self.emotional_valence(word),
        )

    def gesture_vector(self, word: str) -> Direction:
        if not word:
            return ZERO
        h = string_hash(word)
        return Direction(
            clamp(math.cos(h) * 0.3, -1.0, 1.0),
            clamp(math.sin(h) * 0.3, -1.0, 1.0),
        )

    def emotional_valence(self, word: str) -> float:
        if not word:
            return 0.0
        return clamp((math.fmod(string_hash(word), 200) - 100) / 100.0, -1.0, 1.0)

    def word_frequency(self, word: str) -> float:
        """Pseudo-frequency in (-1, 1), sign following the hash."""
        if not word:
            return 0.0
        return math.fmod(string_hash(word), 100) / 100.0

    # ── Collocation Sensation ───────────────────────────────────────────────

    def visualize_collocation_sensation(self, node: Node, nearby: Sequence[Node]) -> List[CollocationField]:
        if node is None or not node.char or not is_point(getattr(node, "position", None)):
            return []

        fields = []
        for other in nearby or ():
            if other is None or not other.char or not is_point(other.position):
                continue
            strength = self.collocation_strength(node.char, other.char)
            if strength <= self.config.sensation_threshold:
                continue

            fields.append(CollocationField(
                intensity=strength,
                geometry=self.sensation_ring(node.position, other.position, strength),
                resonance=self.resonance(node.char, other.char),
            ))
        return fields

    def sensation_ring(self, a: Point, b: Point, intensity: float, points: int = 12) -> Tuple[Point, ...]:
        mid_x = (a.x + b.x) / 2.0
        mid_y = (a.y + b.y) / 2.0
        radius = clamp(intensity, 0.0, 1.0) * 30.0

        ring = []
        for k in range(points):
            angle = 2.0 * math.pi * k / points
            r = radius * (0.8 + 0.2 * math.sin(angle * 3))
            ring.append(Point(mid_x + math.cos(angle) * r, mid_y + math.sin(angle) * r))
        return tuple(ring)

    def resonance(self, word1: str, word2: str) -> Resonance:
        if not word1 or not word2:
            return Resonance()
        f1 = self.word_frequency(word1)
        f2 = self.word_frequency(word2)
        return Resonance(
            frequency=abs(f1 - f2),
            amplitude=min(f1, f2),
            phase=math.fmod(f1 + f2, 2 * math.pi),
        )

    # ── Patterns ────────────────────────────────────────────────────────────

    def recognize_emergent_patterns(self, nodes: Sequence[Node], connections: Sequence[Connection]) -> EmergentPatterns:
        if nodes is None or connections is None:
            return EmergentPatterns()

        c = self.config
        return patterns.recognize(
            nodes=nodes,
            connections=connections,
            associations=self.associations,
            semantic_distance=self.semantic_distance,
            trace=[(e.node_id, e.reading_state.eye_position) for e in self.reading_history],
            cluster_similarity=c.cluster_similarity,
            bridge_gap=c.bridge_gap,
            spiral_window=c.spiral_window,
            fractal_scales=c.fractal_scales,
            fractal_threshold=c.fractal_threshold,
        )

    def generate_self_reflective_pattern(self, nodes: Sequence[Node], connections: Sequence[Connection]) -> dict:
        if nodes is None or connections is None:
            return empty_reflective_pattern()

        found = self.recognize_emergent_patterns(nodes, connections)
        chars = {n.id: n.char for n in nodes if n is not None}
        now = self.clock()

        moments = [
            {
                "type": "cluster_formation",
                "timestamp": now,
                "elements": list(cluster),
                "significance": min(1.0, len(cluster) / 10.0),
            }
            for cluster in found.clusters
        ]
        for bridge in found.bridges:
            moments.append({
                "type": "semantic_leap",
                "timestamp": now,
                "connection": bridge,
                "significance": self.semantic_distance(chars.get(bridge.from_id), chars.get(bridge.to_id)),
            })

        return {
            "reading_trace": self.reading_trace(),
            "emergent_moments": moments,
            "language_cognition_interface": self.language_cognition_interface(),
            "temporal_folding": self.temporal_folding(),
            "reading_metrics": self.reading_metrics(),
        }

    def reading_trace(self) -> List[dict]:
        return [
            {
                "position": e.reading_state.eye_position,
                "timestamp": e.timestamp,
                "cognitive_load": e.reading_state.cognitive_load,
                "attention": len(e.reading_state.attention_focus),
            }
            for e in self.reading_history
        ]

    def language_cognition_interface(self) -> dict:
        return {
            "semantic": {
                "semantic_activation": len(self.associations),
                "conceptual_connections": sum(len(n) for n in self.associations.values()),
            },
            "pragmatic": {"contextual_inferences": len(self.reading_history)},
        }

    def temporal_folding(self) -> dict:
        total = len(self.reading_history)
        personal = [
            {
                "depth": i,
                "node_id": e.node_id,
                "timestamp": e.timestamp,
                "decay": self.config.memory_decay ** (total - i),
            }
            for i, e in enumerate(self.reading_history)
        ]
        cultural = [
            {
                "word": word,
                "historical_depth": context.get("depth", 0.0),
                "cultural_resonance": context.get("resonance", 0.0),
            }
            for word, context in self.contextual_layers["cultural"].items()
        ]
        return {"personal_time": personal, "cultural_time": cultural}

    # ── Reading Metrics ─────────────────────────────────────────────────────

    def reading_metrics(self) -> dict:
        return {
            "average_reading_speed": self.reading_speed(),
            "attention_distribution": self.attention_distribution(),
            "semantic_cohesion": self.semantic_cohesion(),
        }

    def reading_speed(self) -> float:
        """Events per second over the last ten events."""
        recent = list(self.reading_history)[-10:]
        if len(recent) < 2:
            return 0.0
        span = recent[-1].timestamp - recent[0].timestamp
        return len(recent) / span if span > 0 else 0.0

    def attention_distribution(self) -> Dict[str, int]:
        counts: Counter = Counter()
        for e in self.reading_history:
            counts.update(e.reading_state.attention_focus)
        return dict(counts)

    def semantic_cohesion(self) -> float:
        """Mean similarity between consecutively read characters."""
        events = list(self.reading_history)
        if len(events) < 2:
            return 0.0
        total = sum(
            1.0 - self.semantic_distance(a.char, b.char)
            for a, b in zip(events, events[1:])
        )
        return clamp(total / (len(events) - 1), 0.0, 1.0)

    # ── Aggregates ──────────────────────────────────────────────────────────

    def average_cognitive_load(self) -> float:
        if not self.reading_history:
            return 0.0
        return clamp(self._load_total / len(self.reading_history), 0.0, 1.0)

    def attention_spread(self) -> float:
        if not self.reading_history:
            return 0.0
        return self._focus_total / len(self.reading_history)

    def semantic_activation(self) -> float:
        return min(1.0, len(self.associations) / max(1, len(self.reading_history)))

    def capture_context(self, now: Optional[float] = None) -> dict:
        return {
            "timestamp": self.clock() if now is None else now,
            "system_state": {
                "association_count": len(self.associations),
                "collocation_count": len(self.collocations),
                "reading_depth": len(self.reading_history),
            },
            "cognitive_state": {
                "average_load": self.average_cognitive_load(),
                "attention_spread": self.attention_spread(),
                "semantic_activation": self.semantic_activation(),
            },
        }

    def get_semantic_structure(self) -> dict:
        return {
            "associations": {w: dict(n) for w, n in self.associations.items()},
            "collocations": dict(self.collocations),
            "reading_history": list(self.reading_history),
        }

    def get_system_report(self) -> dict:
        return {
            "association_graph_size": len(self.associations),
            "collocation_table_size": len(self.collocations),
            "reading_history_length": len(self.reading_history),
            "memory_usage": self.estimate_memory_usage(),
        }

    def estimate_memory_usage(self) -> dict:
        graph = len(self.associations) * 100
        collocations = len(self.collocations) * 50
        history = len(self.reading_history) * 200
        return {
            "association_graph": graph,
            "collocation_table": collocations,
            "reading_history": history,
            "total": graph + collocations + history,
        }

    # ── Housekeeping ────────────────────────────────────────────────────────

    def cleanup(self) -> None:
        """Trim every bounded collection that is over its cap."""
        while len(self.reading_history) > self.config.max_history_size:
            self._drop_oldest_event()
        if len(self.associations) > self.config.max_association_size:
            self._evict_associations()
        if len(self.collocations) > self.config.max_collocation_size:
            self._evict_collocations()

    # ── Internal ────────────────────────────────────────────────────────────

    def _add_collocations(self, words: List[str]) -> None:
        step = self.config.collocation_step
        for a, b in zip(words, words[1:]):
            key = f"{a}_{b}"
            if key not in self.collocations and len(self.collocations) >= self.config.max_collocation_size:
                self._evict_collocations()
            self.collocations[key] = min(1.0, round(self.collocations.get(key, 0.0) + step, 10))

    def _evict_associations(self) -> None:
        keep = keep_count(self.config.max_association_size, self.config.eviction_keep_fraction)
        evicted = keep_top(self.associations, keep, association_rank)
        logger.debug(f"Evicted {evicted} association roots")

    def _evict_collocations(self) -> None:
        keep = keep_count(self.config.max_collocation_size, self.config.eviction_keep_fraction)
        evicted = keep_top(self.collocations, keep, collocation_rank)
        logger.debug(f"Evicted {evicted} collocations")

    def _cleanup_if_needed(self) -> None:
        self._cleanup_counter += 1
        if self._cleanup_counter >= self.config.cleanup_interval:
            self.cleanup()
            self._cleanup_counter = 0

    def _record(self, event: ReadingEvent) -> None:
        if len(self.reading_history) == self.reading_history.maxlen:
            self._drop_oldest_event()
        self.reading_history.append(event)
        self._load_total += event.reading_state.cognitive_load
        self._focus_total += len(event.reading_state.attention_focus)

    def _drop_oldest_event(self) -> None:
        old = self.reading_history.popleft()
        self._load_total -= old.reading_state.cognitive_load
        self._focus_total -= len(old.reading_state.attention_focus)

    def _temporal_context(self, node: Node, now: float) -> dict:
        recent = list(self.reading_history)[-10:]
        created = getattr(node, "timestamp", None)
        return {
            "recent_nodes": tuple(e.node_id for e in recent),
            "global_context": dict(self.contextual_layers["temporal"].get(node.char, {})),
            "temporal_distance": now - created if is_number(created) else 0.0,
        }

    @staticmethod
    def _attention_vector(eye: Point, focus: Sequence[Node]) -> Direction:
        if not focus:
            return ZERO
        cx = sum(n.position.x for n in focus) / len(focus)
        cy = sum(n.position.y for n in focus) / len(focus)
        return Direction(
            clamp((cx - eye.x) * 0.01, -1.0, 1.0),
            clamp((cy - eye.y) * 0.01, -1.0, 1.0),
        )


def empty_reflective_pattern() -> dict:
    return {
        "reading_trace": [],
        "emergent_moments": [],
        "language_cognition_interface": {
            "semantic": {"semantic_activation": 0, "conceptual_connections": 0},
            "pragmatic": {"contextual_inferences": 0},
        },
        "temporal_folding": {"personal_time": [], "cultural_time": []},
        "reading_metrics": {
            "average_reading_speed": 0.0,
            "attention_distribution": {},
            "semantic_cohesion": 0.0,
        },
    }


# ── Null Source ─────────────────────────────────────────────────────────────


class NullSemanticSource(SemanticSource):
    """Neutral field: nothing is related, nothing pulls, nothing is remembered."""

    @property
    def attention_radius(self) -> float:
        return 0.0

    @property
    def reading_history_length(self) -> int:
        return 0

    def analyze_semantic_structure(self, text: str) -> Dict[str, Dict[str, float]]:
        return {}

    def semantic_distance(self, word1: str, word2: str) -> float:
        return 1.0

    def collocation_strength(self, word1: str, word2: str) -> float:
        return 0.0

    def semantic_complexity(self, word: str) -> float:
        return 1.0

    def cognitive_load(self, word: str) -> float:
        return 0.5

    def cultural_depth(self, word: str) -> float:
        return 0.0

    def calculate_semantic_force(self, char1: str, char2: str, spatial_distance: float) -> SemanticForce:
        return NEUTRAL_FORCE

    def simulate_reading_body(self, node: Node, nodes: Sequence[Node]) -> Direction:
        return ZERO

    def visualize_collocation_sensation(self, node: Node, nearby: Sequence[Node]) -> List[CollocationField]:
        return []

    def recognize_emergent_patterns(self, nodes: Sequence[Node], connections: Sequence[Connection]) -> EmergentPatterns:
        return EmergentPatterns()

    def generate_self_reflective_pattern(self, nodes: Sequence[Node], connections: Sequence[Connection]) -> dict:
        return empty_reflective_pattern()

    def average_cognitive_load(self) -> float:
        return 0.5

    def get_semantic_structure(self) -> dict:
        return {"associations": {}, "collocations": {}, "reading_history": []}

    def get_system_report(self) -> dict:
        return {
            "association_graph_size": 0,
            "collocation_table_size": 0,
            "reading_history_length": 0,
            "memory_usage": {
                "association_graph": 0,
                "collocation_table": 0,
                "reading_history": 0,
                "total": 0,
            },
        }
