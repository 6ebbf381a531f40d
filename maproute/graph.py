from typing import List, Dict, Optional, Iterable
import threading

from maproute.models import (
    Waypoint, Neighbor, Connection, InvalidConnection, SEED_POINTS, SEED_CONNECTIONS,
)

# -----------------------------
# Graph Store
# -----------------------------

class GraphStore:
    """
    Waypoints plus a symmetric adjacency list.

    - points keep insertion order so listings are stable
    - every connection is stored on both endpoints
    - mutations hold the lock; readers get copies
    """

    def __init__(self) -> None:
        self._points: Dict[str, Waypoint] = {}
        self._adj: Dict[str, List[Neighbor]] = {}
        self._connections: List[Connection] = []
        self._lock = threading.RLock()

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._points

    def __len__(self) -> int:
        return len(self._points)

    def add_point(self, point_id: str, lat: float, lng: float) -> bool:
        with self._lock:
            if point_id in self._points:
                return False
            self._points[point_id] = Waypoint(id=point_id, lat=lat, lng=lng)
            self._adj[point_id] = []
            return True

    def add_connection(self, id1: str, id2: str, distance: float) -> bool:
        with self._lock:
            if id1 not in self._points or id2 not in self._points:
                return False
            # self-loops and non-positive weights are misconfigurations
            if id1 == id2 or not distance > 0:
                return False
            self._adj[id1].append(Neighbor(id2, float(distance)))
            self._adj[id2].append(Neighbor(id1, float(distance)))
            self._connections.append(Connection(**{"from": id1, "to": id2, "distance": float(distance)}))
            return True

    def get_point(self, point_id: str) -> Optional[Waypoint]:
        return self._points.get(point_id)

    def list_points(self) -> List[Waypoint]:
        with self._lock:
            return list(self._points.values())

    def neighbors(self, point_id: str) -> List[Neighbor]:
        with self._lock:
            return list(self._adj.get(point_id, []))

    def connections(self) -> List[Connection]:
        with self._lock:
            return list(self._connections)

    def snapshot(self) -> Dict[str, List[Neighbor]]:
        """Copy of the full adjacency, consistent with a single point in time."""
        with self._lock:
            return {pid: list(nbrs) for pid, nbrs in self._adj.items()}


def build_graph(points: Iterable[Waypoint], connections: Iterable[Connection]) -> GraphStore:
    store = GraphStore()
    for p in points:
        store.add_point(p.id, p.lat, p.lng)
    for c in connections:
        if not store.add_connection(c.from_, c.to, c.distance):
            raise InvalidConnection(f"Cannot connect {c.from_} and {c.to} ({c.distance} km)")
    return store


def build_seed_graph() -> GraphStore:
    return build_graph(SEED_POINTS, SEED_CONNECTIONS)
