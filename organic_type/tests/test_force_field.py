"""Tests for the semantic force field and the reading body."""

import math

import numpy as np
import pytest

from organic_type.core.force_field import (
    NEUTRAL_FORCE,
    ForceField,
    ForceFieldConfig,
    NullSemanticSource,
    empty_reflective_pattern,
)
from organic_type.core.geometry import ZERO, Point, distance


@pytest.fixture
def field(clock):
    return ForceField(clock=clock)


# ── Analysis ────────────────────────────────────────────────────────────────


def test_tokenize(field):
    assert field.tokenize("cat  dog, bird.") == ["cat", "dog", "bird"]
    assert field.tokenize("今日は、良い天気。") == ["今日は", "良い天気"]
    assert field.tokenize("") == []
    assert field.tokenize(None) == []


def test_repeated_word_relates_to_itself(field):
    """A word seen twice gets a self edge; a word seen once does not."""
    field.analyze_semantic_structure("cat dog cat")

    assert field.associations["cat"]["cat"] == pytest.approx(1.0)
    assert "dog" not in field.associations.get("dog", {})
    assert field.semantic_distance("cat", "cat") == pytest.approx(0.0)


def test_bigram_collocations(field):
    field.analyze_semantic_structure("cat dog cat")
    assert field.collocations == {"cat_dog": pytest.approx(0.1), "dog_cat": pytest.approx(0.1)}
    assert field.collocation_strength("cat", "dog") == pytest.approx(0.1)
    assert field.collocation_strength("dog", "dog") == 0.0


def test_collocation_saturates(field):
    for _ in range(15):
        field.analyze_semantic_structure("a b")
    assert field.collocation_strength("a", "b") == 1.0


def test_association_strengths_bounded(field):
    field.analyze_semantic_structure("the quick brown fox jumps over the lazy dog the end")
    for neighbours in field.associations.values():
        for strength in neighbours.values():
            assert 0.3 < strength <= 1.0


def test_invalid_text_leaves_state_alone(field):
    assert field.analyze_semantic_structure("") == {}
    assert field.analyze_semantic_structure(None) == {}
    assert field.collocations == {}


def test_caps_hold_under_burst(clock):
    """Eviction keeps every map within its cap."""
    config = ForceFieldConfig(max_association_size=10, max_collocation_size=10)
    field = ForceField(config, clock=clock)

    words = " ".join(f"w{i} w{i}" for i in range(40))
    field.analyze_semantic_structure(words)

    assert 0 < len(field.associations) <= 10
    assert 0 < len(field.collocations) <= 10


def test_collocation_eviction_keeps_strongest(clock):
    config = ForceFieldConfig(max_collocation_size=5)
    field = ForceField(config, clock=clock)
    for _ in range(3):
        field.analyze_semantic_structure("a b")
    field.analyze_semantic_structure("c d e f g h i")

    assert len(field.collocations) <= 5
    assert field.collocation_strength("a", "b") == pytest.approx(0.3)


# ── Lookups ─────────────────────────────────────────────────────────────────


def test_unknown_words(field):
    assert field.semantic_distance("x", "y") == 1.0
    assert field.semantic_distance("", "y") == 1.0
    assert field.semantic_complexity("x") == 1.0
    assert field.collocation_strength(None, "y") == 0.0


def test_identical_characters_have_full_similarity(field):
    assert field.semantic_similarity("字", "字") == pytest.approx(1.0)


def test_cognitive_load(field):
    """(length + complexity + context) / 3, capped at 1."""
    assert field.cognitive_load("a") == pytest.approx(2 / 3)
    assert field.cognitive_load("abc") == 1.0
    assert field.cognitive_load("") == 0.5


def test_cultural_context(field):
    assert field.register_cultural_context("桜", 0.9, 0.4)
    assert field.cultural_depth("桜") == 0.9
    assert field.cultural_depth("梅") == 0.0
    assert not field.register_cultural_context("", 0.5)
    assert not field.register_cultural_context("梅", float("nan"))

    cultural = field.temporal_folding()["cultural_time"]
    assert cultural == [{"word": "桜", "historical_depth": 0.9, "cultural_resonance": 0.4}]


# ── Forces ──────────────────────────────────────────────────────────────────


def test_force_components_bounded(field):
    field.analyze_semantic_structure("a b a b c")
    for a, b in (("a", "b"), ("a", "a"), ("c", "z")):
        for d in (0, 0.5, 3, 17, 80, 400):
            force = field.calculate_semantic_force(a, b, d)
            assert 0.0 <= force.attraction <= 1.0
            assert 0.0 <= force.repulsion <= 1.0
            assert -1.0 <= force.lateral <= 1.0


def test_force_at_zero_distance(field):
    """Spatial distance is floored at 0.1 against an unknown pair."""
    force = field.calculate_semantic_force("x", "y", 0)
    assert force.attraction == 0.0
    assert force.repulsion == 0.0
    assert force.lateral == pytest.approx(math.sin(0.1 * math.pi) * 0.2)


def test_force_invalid_input(field):
    assert field.calculate_semantic_force("", "y", 5) is NEUTRAL_FORCE
    assert field.calculate_semantic_force("x", "y", float("nan")) is NEUTRAL_FORCE


# ── Reading Body ────────────────────────────────────────────────────────────


def test_attention_focus_nearest_first(field, make_node):
    eye = make_node("eye", "a", 100, 100)
    others = [make_node(f"n{i}", "a", 100 + i * 10, 100) for i in range(10)]
    others.append(make_node("far", "a", 300, 100))

    focus = field.attention_focus(eye, list(reversed(others)))
    assert [n.id for n in focus] == [f"n{i}" for i in range(7)]


def test_attention_radius_is_strict(field, make_node):
    eye = make_node("eye", "a", 0, 0)
    edge = make_node("edge", "a", 120, 0)
    assert field.attention_focus(eye, [edge]) == []


def test_isolated_node_follows_gesture(field, make_node):
    """With nothing in focus the body memory alone steers, damped by load."""
    node = make_node("n0", "a", 50, 50)
    gesture = field.gesture_vector("a")
    load_factor = 1.0 - field.cognitive_load("a") * 0.5

    direction = field.simulate_reading_body(node, [])
    assert direction.dx == pytest.approx(gesture.dx * 0.4 * load_factor)
    assert direction.dy == pytest.approx(gesture.dy * 0.4 * load_factor)


def test_reading_records_events(field, make_node):
    node = make_node("n0", "a", 50, 50)
    neighbour = make_node("n1", "b", 60, 50)
    field.simulate_reading_body(node, [node, neighbour])

    assert field.reading_history_length == 1
    event = field.reading_history[0]
    assert event.node_id == "n0"
    assert event.reading_state.attention_focus == ("n0", "n1")
    assert field.contextual_layers["temporal"]["a"]["visits"] == 1
    assert field.attention_distribution() == {"n0": 1, "n1": 1}


def test_reading_invalid_node(field, make_node):
    assert field.simulate_reading_body(None, []) == ZERO
    assert field.simulate_reading_body(make_node("n0", "", 0, 0), []) == ZERO
    assert field.reading_history_length == 0


def test_history_capped_with_consistent_average(clock, make_node):
    field = ForceField(ForceFieldConfig(max_history_size=5), clock=clock)
    for i in range(8):
        field.simulate_reading_body(make_node(f"n{i}", "abc"[i % 3] * (i % 2 + 1), i, 0), [])

    assert field.reading_history_length == 5
    assert [e.node_id for e in field.reading_history] == ["n3", "n4", "n5", "n6", "n7"]
    expected = np.mean([e.reading_state.cognitive_load for e in field.reading_history])
    assert field.average_cognitive_load() == pytest.approx(expected)


# ── Collocation Sensation ───────────────────────────────────────────────────


def test_collocation_ring(field, make_node):
    for _ in range(6):
        field.analyze_semantic_structure("a b")

    a = make_node("n0", "a", 0, 0)
    b = make_node("n1", "b", 20, 0)
    fields = field.visualize_collocation_sensation(a, [b])

    assert len(fields) == 1
    ring = fields[0]
    assert ring.intensity == pytest.approx(0.6)
    assert len(ring.geometry) == 12
    centre = Point(10, 0)
    for p in ring.geometry:
        assert 0.6 * 18 - 1e-9 <= distance(p, centre) <= 18 + 1e-9


def test_weak_collocation_has_no_ring(field, make_node):
    field.analyze_semantic_structure("a b")
    a = make_node("n0", "a", 0, 0)
    b = make_node("n1", "b", 20, 0)
    assert field.visualize_collocation_sensation(a, [b]) == []


def test_sensation_threshold_is_configurable(clock, make_node):
    """A lower threshold lets a single co-occurrence draw a ring."""
    field = ForceField(ForceFieldConfig(sensation_threshold=0.05), clock=clock)
    field.analyze_semantic_structure("a b")
    a = make_node("n0", "a", 0, 0)
    b = make_node("n1", "b", 20, 0)

    fields = field.visualize_collocation_sensation(a, [b])
    assert len(fields) == 1
    assert fields[0].intensity == pytest.approx(0.1)


def test_resonance_phase_wraps(field):
    r = field.resonance("x", "y")
    assert abs(r.phase) < 2 * math.pi
    assert r.frequency >= 0


# ── Patterns & Metrics ──────────────────────────────────────────────────────


def test_recognizes_clusters(field, make_node):
    field.analyze_semantic_structure("x x")
    nodes = [make_node(f"n{i}", "x", i * 40, 0) for i in range(4)]

    found = field.recognize_emergent_patterns(nodes, [])
    assert found.clusters == [["n0", "n1", "n2", "n3"]]


def test_reading_speed(field, clock, make_node):
    """Ten events half a second apart: 10 events over 4.5 s."""
    clock.step = 0.5
    for i in range(12):
        field.simulate_reading_body(make_node(f"n{i}", "a", i, 0), [])

    assert field.reading_speed() == pytest.approx(10 / 4.5)


def test_semantic_cohesion(field, make_node):
    field.analyze_semantic_structure("x x")
    for i in range(3):
        field.simulate_reading_body(make_node(f"n{i}", "x", i * 20, 0), [])
    assert field.semantic_cohesion() == pytest.approx(1.0)


def test_self_reflective_pattern(field, make_node):
    field.analyze_semantic_structure("x x")
    nodes = [make_node(f"n{i}", "x", i * 40, 0) for i in range(3)]
    field.simulate_reading_body(nodes[0], nodes)

    pattern = field.generate_self_reflective_pattern(nodes, [])
    assert set(pattern) == set(empty_reflective_pattern())
    assert len(pattern["reading_trace"]) == 1
    assert pattern["emergent_moments"][0]["type"] == "cluster_formation"
    assert pattern["temporal_folding"]["personal_time"][0]["decay"] == pytest.approx(0.95)


def test_self_reflective_pattern_invalid_input(field):
    assert field.generate_self_reflective_pattern(None, []) == empty_reflective_pattern()


def test_semantic_structure_is_detached(field):
    field.analyze_semantic_structure("cat dog cat")
    structure = field.get_semantic_structure()
    structure["associations"]["cat"]["cat"] = 0.0
    structure["collocations"].clear()

    assert field.associations["cat"]["cat"] == pytest.approx(1.0)
    assert field.collocations


def test_system_report(field):
    field.analyze_semantic_structure("cat dog cat")
    report = field.get_system_report()
    assert report["collocation_table_size"] == 2
    assert report["memory_usage"]["total"] == (
        report["association_graph_size"] * 100 + 2 * 50
    )


# ── Null Source ─────────────────────────────────────────────────────────────


def test_null_source_is_neutral(make_node):
    source = NullSemanticSource()
    node = make_node("n0", "a", 0, 0)

    assert source.semantic_distance("a", "a") == 1.0
    assert source.collocation_strength("a", "b") == 0.0
    assert source.cognitive_load("a") == 0.5
    assert source.calculate_semantic_force("a", "b", 5) == NEUTRAL_FORCE
    assert source.simulate_reading_body(node, [node]) == ZERO
    assert source.recognize_emergent_patterns([node], []).is_empty()
    assert source.generate_self_reflective_pattern([node], []) == empty_reflective_pattern()
    assert source.reading_history_length == 0
