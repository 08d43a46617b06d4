# ═══════════════════════════════════════════════════════════════════════════════
# PART 7: SELF-REFLECTION
# Design: H4 (Semiotics) + I1 (Systems Architect)
# Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
H4: "Every few generations the layout looks at itself: how dense are the
meaningful links, how bent are the strokes, how loaded is the reader."

I1: "Three dials respond. Semantic gravity, interference amplitude and energy
decay each move by a few percent and stay inside [0.1, 1]. Nothing else is
touched."
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Sequence

from organic_type.core.geometry import clamp
from organic_type.core.graph import Connection

logger = logging.getLogger(__name__)

PARAM_FLOOR = 0.1
PARAM_CEILING = 1.0


@dataclass(frozen=True)
class SystemState:
    growth_phase: str
    semantic_density: float      # typed connections per node
    visual_complexity: float     # mean connection curvature
    temporal_depth: int
    cognitive_load: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ReflectionMetrics:
    total_nodes: int
    total_connections: int
    average_semantic_resonance: float
    emergent_pattern_count: int
    collocation_field_count: int
    reading_trajectory_length: int


@dataclass(frozen=True)
class Insight:
    type: str
    description: str
    significance: float


@dataclass
class SelfReflection:
    timestamp: float
    generation: int
    metrics: ReflectionMetrics
    reflexive_elements: dict
    system_state: SystemState
    insights: List[Insight] = field(default_factory=list)
    adjustments: Dict[str, float] = field(default_factory=dict)


def semantic_density(connections: Sequence[Connection], node_count: int) -> float:
    if node_count <= 0:
        return 0.0
    typed = sum(1 for c in connections if c.semantic_tier and c.semantic_tier != "neutral")
    return typed / node_count


def visual_complexity(connections: Sequence[Connection]) -> float:
    if not connections:
        return 0.0
    return sum(c.curvature for c in connections) / len(connections)


def derive_insights(
    cluster_count: int,
    spiral_count: int,
    node_count: int,
    connections: Sequence[Connection],
    amplitude_threshold: float = 0.3,
) -> List[Insight]:
    """Qualitative notes on what has emerged so far."""
    insights = []

    if cluster_count > 0:
        insights.append(Insight(
            type="semantic_clustering",
            description=f"{cluster_count} semantic clusters emerged",
            significance=cluster_count / max(1, node_count),
        ))

    if spiral_count > 0:
        insights.append(Insight(
            type="spiral_emergence",
            description=f"{spiral_count} reading spirals appeared",
            significance=spiral_count / 10.0,
        ))

    interfering = sum(1 for c in connections if c.interference.amplitude > amplitude_threshold)
    if interfering > 0:
        insights.append(Insight(
            type="visual_semantic_interference",
            description=f"{interfering} visual-semantic interference patterns active",
            significance=interfering / len(connections),
        ))

    return insights


def adapt_parameters(params, state: SystemState) -> Dict[str, float]:
    """
    Nudge semantic_gravity, interference_amplitude and energy_decay on params.

    density > 0.8  -> gravity x0.95     density < 0.3  -> gravity x1.05
    complexity > 0.7 -> amplitude x0.9  complexity < 0.3 -> amplitude x1.1
    load > 0.8     -> decay x1.1        load < 0.3     -> decay x0.9

    All three are clamped to [0.1, 1] afterwards. Returns the new values of
    the parameters that changed.
    """
    before = {
        "semantic_gravity": params.semantic_gravity,
        "interference_amplitude": params.interference_amplitude,
        "energy_decay": params.energy_decay,
    }

    gravity = params.semantic_gravity
    if state.semantic_density > 0.8:
        gravity *= 0.95
    elif state.semantic_density < 0.3:
        gravity *= 1.05

    amplitude = params.interference_amplitude
    if state.visual_complexity > 0.7:
        amplitude *= 0.9
    elif state.visual_complexity < 0.3:
        amplitude *= 1.1

    decay = params.energy_decay
    if state.cognitive_load > 0.8:
        decay *= 1.1
    elif state.cognitive_load < 0.3:
        decay *= 0.9

    params.semantic_gravity = clamp(gravity, PARAM_FLOOR, PARAM_CEILING)
    params.interference_amplitude = clamp(amplitude, PARAM_FLOOR, PARAM_CEILING)
    params.energy_decay = clamp(decay, PARAM_FLOOR, PARAM_CEILING)

    changed = {}
    for name, old in before.items():
        new = getattr(params, name)
        if new != old:
            changed[name] = new

    if changed:
        logger.debug(f"Adapted parameters: {changed}")
    return changed
