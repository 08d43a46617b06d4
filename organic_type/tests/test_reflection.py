"""Tests for self-reflection metrics and parameter adaptation."""

import pytest

from organic_type.core.graph import Connection, Interference
from organic_type.core.growth_engine import GrowthParams
from organic_type.core.reflection import (
    SystemState,
    adapt_parameters,
    derive_insights,
    semantic_density,
    visual_complexity,
)


def state(density=0.5, complexity=0.5, load=0.5):
    return SystemState(
        growth_phase="development",
        semantic_density=density,
        visual_complexity=complexity,
        temporal_depth=0,
        cognitive_load=load,
    )


# ── Metrics ─────────────────────────────────────────────────────────────────


def test_semantic_density_counts_typed_connections():
    connections = [
        Connection("a", "b", "primary", "collocation"),
        Connection("b", "c", "primary", "neutral"),
        Connection("c", "d", "primary", "contrast"),
    ]
    assert semantic_density(connections, 4) == pytest.approx(0.5)
    assert semantic_density(connections, 0) == 0.0


def test_visual_complexity_is_mean_curvature():
    connections = [
        Connection("a", "b", "primary", "neutral", curvature=0.2),
        Connection("b", "c", "primary", "neutral", curvature=0.6),
    ]
    assert visual_complexity(connections) == pytest.approx(0.4)
    assert visual_complexity([]) == 0.0


# ── Adaptation ──────────────────────────────────────────────────────────────


def test_low_readings_raise_gravity_and_amplitude():
    params = GrowthParams()
    changed = adapt_parameters(params, state(density=0.1, complexity=0.1, load=0.1))

    assert params.semantic_gravity == pytest.approx(0.6 * 1.05)
    assert params.interference_amplitude == pytest.approx(0.4 * 1.1)
    assert params.energy_decay == pytest.approx(0.3 * 0.9)
    assert set(changed) == {"semantic_gravity", "interference_amplitude", "energy_decay"}


def test_high_readings_lower_gravity_and_amplitude():
    params = GrowthParams()
    adapt_parameters(params, state(density=0.9, complexity=0.9, load=0.9))

    assert params.semantic_gravity == pytest.approx(0.6 * 0.95)
    assert params.interference_amplitude == pytest.approx(0.4 * 0.9)
    assert params.energy_decay == pytest.approx(0.3 * 1.1)


def test_middle_readings_change_nothing():
    params = GrowthParams()
    assert adapt_parameters(params, state()) == {}
    assert params.semantic_gravity == 0.6


def test_adapted_values_stay_in_bounds():
    params = GrowthParams(semantic_gravity=1.0, interference_amplitude=0.1, energy_decay=0.1)
    adapt_parameters(params, state(density=0.1, complexity=0.9, load=0.1))

    assert params.semantic_gravity == 1.0
    assert params.interference_amplitude == 0.1
    assert params.energy_decay == 0.1


def test_out_of_range_values_are_clamped():
    params = GrowthParams(energy_decay=5.0)
    changed = adapt_parameters(params, state())
    assert params.energy_decay == 1.0
    assert changed == {"energy_decay": 1.0}


# ── Insights ────────────────────────────────────────────────────────────────


def test_insights():
    connections = [
        Connection("a", "b", "primary", "neutral", interference=Interference(amplitude=0.5)),
        Connection("b", "c", "primary", "neutral", interference=Interference(amplitude=0.1)),
    ]
    insights = derive_insights(cluster_count=2, spiral_count=1, node_count=20, connections=connections)

    by_type = {i.type: i for i in insights}
    assert by_type["semantic_clustering"].significance == pytest.approx(0.1)
    assert by_type["spiral_emergence"].significance == pytest.approx(0.1)
    assert by_type["visual_semantic_interference"].significance == pytest.approx(0.5)


def test_no_insights_from_nothing():
    assert derive_insights(0, 0, 0, []) == []
