from typing import List, Dict, Optional, Tuple
import heapq
import itertools
import math

from maproute.graph import GraphStore
from maproute.models import RouteResult, UnknownPoint, NoRouteFound

AVERAGE_SPEED_KMH = 40.0

# -----------------------------
# Derived metrics
# -----------------------------

def estimate_minutes(distance_km: float, speed_kmh: float = AVERAGE_SPEED_KMH) -> int:
    # halves round up
    return int(math.floor((distance_km / speed_kmh) * 60.0 + 0.5))

def format_distance(distance_km: float) -> str:
    return f"{distance_km:.2f}"

# -----------------------------
# Pathfinding
# -----------------------------

class RoutingEngine:
    def __init__(self, store: GraphStore, average_speed_kmh: float = AVERAGE_SPEED_KMH):
        self.store = store
        self.average_speed_kmh = average_speed_kmh

    def _search(self, start: str, goal: str) -> Tuple[Dict[str, float], Dict[str, Optional[str]]]:
        adj = self.store.snapshot()
        distances = {pid: math.inf for pid in adj}
        previous: Dict[str, Optional[str]] = {pid: None for pid in adj}
        distances[start] = 0.0

        # (priority, insertion seq, node): equal priorities pop in insertion order
        seq = itertools.count()
        heap = [(0.0, next(seq), start)]
        visited = set()

        while heap:
            _, _, node = heapq.heappop(heap)
            if node in visited:
                continue
            if node == goal:
                break
            visited.add(node)
            for nbr, w in adj.get(node, []):
                if nbr in visited:
                    continue
                candidate = distances[node] + w
                if candidate < distances[nbr]:
                    distances[nbr] = candidate
                    previous[nbr] = node
                    heapq.heappush(heap, (candidate, next(seq), nbr))

        return distances, previous

    def find_shortest_path(self, start_id: str, end_id: str) -> RouteResult:
        start = self.store.get_point(start_id)
        if start is None:
            raise UnknownPoint(start_id)
        end = self.store.get_point(end_id)
        if end is None:
            raise UnknownPoint(end_id)

        distances, previous = self._search(start_id, end_id)
        if previous.get(end_id) is None and start_id != end_id:
            raise NoRouteFound(start_id, end_id)

        ids: List[str] = []
        current: Optional[str] = end_id
        while current is not None:
            ids.append(current)
            current = previous[current]
        ids.reverse()

        total = distances[end_id]
        return RouteResult(
            path=[self.store.get_point(pid) for pid in ids],
            total_distance=total,
            estimated_time=estimate_minutes(total, self.average_speed_kmh),
            start_point=start,
            end_point=end,
        )
