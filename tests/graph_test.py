import threading

import pytest
from pydantic import ValidationError
from maproute.algo_funcs import RoutingEngine
from maproute.graph import GraphStore, build_graph, build_seed_graph
from maproute.models import *

# -----------------------------
# Test Fixtures
# -----------------------------

@pytest.fixture
def store():
    s = GraphStore()
    s.add_point("A", 1.0, 2.0)
    s.add_point("B", 3.0, 4.0)
    return s

# -----------------------------
# Points
# -----------------------------

def test_add_point_and_lookup(store):
    point = store.get_point("A")
    assert point == Waypoint(id="A", lat=1.0, lng=2.0)
    assert "A" in store
    assert len(store) == 2

def test_add_point_existing_is_noop(store):
    assert store.add_point("A", 9.0, 9.0) is False
    # original coordinates are kept
    assert store.get_point("A").lat == 1.0
    assert len(store) == 2

def test_get_point_unknown(store):
    assert store.get_point("Z") is None
    assert "Z" not in store

def test_list_points_insertion_order(store):
    store.add_point("C", 0.0, 0.0)
    assert [p.id for p in store.list_points()] == ["A", "B", "C"]

def test_waypoint_is_immutable(store):
    with pytest.raises(ValidationError):
        store.get_point("A").lat = 5.0

# -----------------------------
# Connections
# -----------------------------

def test_add_connection_is_symmetric(store):
    assert store.add_connection("A", "B", 2.5) is True
    assert store.neighbors("A") == [Neighbor("B", 2.5)]
    assert store.neighbors("B") == [Neighbor("A", 2.5)]

def test_add_connection_unknown_endpoint_leaves_store_unchanged(store):
    assert store.add_connection("A", "Z", 1.0) is False
    assert store.add_connection("Z", "A", 1.0) is False
    assert store.neighbors("A") == []
    assert store.neighbors("Z") == []
    assert store.connections() == []

def test_add_connection_rejects_self_loop(store):
    assert store.add_connection("A", "A", 1.0) is False
    assert store.neighbors("A") == []

@pytest.mark.parametrize("distance", [0, -1.5])
def test_add_connection_rejects_non_positive_distance(store, distance):
    assert store.add_connection("A", "B", distance) is False
    assert store.connections() == []

def test_neighbors_of_unknown_or_isolated_point(store):
    assert store.neighbors("A") == []
    assert store.neighbors("missing") == []

def test_neighbors_returns_copy(store):
    store.add_connection("A", "B", 1.0)
    store.neighbors("A").append(Neighbor("X", 1.0))
    assert store.neighbors("A") == [Neighbor("B", 1.0)]

def test_parallel_connections_are_both_kept(store):
    store.add_connection("A", "B", 2.0)
    store.add_connection("B", "A", 1.0)
    assert store.neighbors("A") == [Neighbor("B", 2.0), Neighbor("B", 1.0)]
    assert len(store.connections()) == 2

# -----------------------------
# Seeding
# -----------------------------

def test_seed_graph_contents():
    g = build_seed_graph()
    assert [p.id for p in g.list_points()] == ["A", "B", "C", "D", "E"]
    assert g.get_point("A") == Waypoint(id="A", lat=37.7749, lng=-122.4194)
    assert len(g.connections()) == 7
    assert [n.id for n in g.neighbors("D")] == ["A", "B", "C", "E"]
    assert g.neighbors("E") == [Neighbor("B", 3.5), Neighbor("D", 3.8)]

def test_build_graph_rejects_dangling_connection():
    points = [Waypoint(id="A", lat=0.0, lng=0.0)]
    connections = [Connection(**{"from": "A", "to": "B", "distance": 1.0})]
    with pytest.raises(InvalidConnection):
        build_graph(points, connections)

# -----------------------------
# Concurrency
# -----------------------------

def test_snapshot_is_detached_from_later_changes(store):
    snap = store.snapshot()
    store.add_point("C", 5.0, 6.0)
    store.add_connection("A", "B", 1.0)
    assert snap == {"A": [], "B": []}

def test_concurrent_mutation_and_routing():
    """Writers add points and connections while readers route; adjacency stays symmetric."""
    g = build_seed_graph()
    engine = RoutingEngine(g)
    added = []
    failures = []

    def writer(t):
        for i in range(50):
            pid = f"W{t}_{i}"
            g.add_point(pid, float(i % 90), float(t))
            if g.add_connection(pid, "A", 1.0 + i):
                added.append(pid)
            # rejected: self-loop and unknown endpoint
            if g.add_connection(pid, pid, 1.0) or g.add_connection(pid, "missing", 1.0):
                failures.append(AssertionError(f"{pid}: invalid connection accepted"))

    def reader():
        for _ in range(100):
            for point in g.list_points()[-3:]:
                try:
                    engine.find_shortest_path("E", point.id)
                except RoutingError:
                    pass
                except Exception as e:
                    failures.append(e)

    threads = [threading.Thread(target=writer, args=(t,)) for t in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert failures == []
    assert len(added) == 200
    assert len(g.connections()) == 7 + len(added)
    for point in g.list_points():
        for nbr in g.neighbors(point.id):
            assert Neighbor(point.id, nbr.distance) in g.neighbors(nbr.id)
    route = engine.find_shortest_path("E", "W3_49")
    assert [p.id for p in route.path] == ["E", "B", "A", "W3_49"]
