"""Tests for the node arena and connection set."""

from organic_type.core.graph import (
    Connection,
    ConnectionSet,
    NodeArena,
    TemporalLayer,
)


def test_connection_set_rejects_duplicates():
    connections = ConnectionSet()
    assert connections.add(Connection("a", "b", "primary", "neutral"))
    assert not connections.add(Connection("a", "b", "secondary", "contrast"))
    # Reverse direction is a different edge
    assert connections.add(Connection("b", "a", "primary", "neutral"))

    assert len(connections) == 2
    assert ("a", "b") in connections
    assert connections.values()[0].visual_tier == "primary"


def test_drop_touching():
    connections = ConnectionSet()
    for src, dst in (("a", "b"), ("b", "c"), ("c", "d")):
        connections.add(Connection(src, dst, "primary", "neutral"))

    assert connections.drop_touching({"b"}) == 2
    assert [c.key for c in connections] == [("c", "d")]
    assert ("a", "b") not in connections
    # A dropped pair may be added again
    assert connections.add(Connection("a", "b", "primary", "neutral"))


def test_keep_newest():
    connections = ConnectionSet()
    for i in range(5):
        connections.add(Connection(str(i), str(i + 1), "primary", "neutral"))

    assert connections.keep_newest(2) == 3
    assert [c.key for c in connections] == [("3", "4"), ("4", "5")]
    assert connections.keep_newest(10) == 0


def test_arena_purge_oldest(make_node):
    arena = NodeArena()
    for i in range(5):
        arena.add(make_node(f"n{i}", "a", i, 0))

    dropped = arena.purge_oldest(3)
    assert dropped == {"n0", "n1"}
    assert [n.id for n in arena] == ["n2", "n3", "n4"]
    assert "n0" not in arena
    assert arena.purge_oldest(3) == set()


def test_arena_lookup(make_node):
    arena = NodeArena()
    node = make_node("n0", "a", 1, 2)
    arena.add(node)

    assert arena.get("n0") is node
    assert arena.get(None) is None
    assert arena.get("missing") is None
    assert arena.ids() == {"n0"}

    arena.clear()
    assert len(arena) == 0


def test_node_snapshot_and_timestamp(make_node):
    node = make_node("n0", "a", 1, 2, temporal_layer=TemporalLayer(timestamp=12.5))
    snap = node.snapshot()

    assert node.timestamp == 12.5
    assert snap.id == "n0"
    assert snap.position == node.position
    # Snapshots are detached from later growth
    node.children.append("n1")
    assert not hasattr(snap, "children")
