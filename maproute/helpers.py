from typing import List, Dict, Optional, Any
from collections import deque
from datetime import datetime, timezone

from maproute.algo_funcs import format_distance
from maproute.models import RouteResult, Waypoint, Event, AREA_NAMES

ROUTE_COLOR = "#007bff"
START_COLOR = "#28a745"
END_COLOR = "#dc3545"
ROUTE_WIDTH = 3

# -----------------------------
# Visualization / summary
# -----------------------------

def _lng_lat(point: Waypoint) -> List[float]:
    return [point.lng, point.lat]

def _marker(point: Waypoint, title: str, color: str, marker: str) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": _lng_lat(point)},
        "properties": {"title": title, "color": color, "marker": marker},
    }

def route_geojson(result: RouteResult) -> Dict[str, Any]:
    """
    GeoJSON FeatureCollection for a route:
    - LineString along the path, coordinates in [lng, lat] order
    - Start and End point markers
    """
    line = {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": [_lng_lat(p) for p in result.path],
        },
        "properties": {
            "distance": format_distance(result.total_distance),
            "time": result.estimated_time,
            "color": ROUTE_COLOR,
            "width": ROUTE_WIDTH,
        },
    }
    return {
        "type": "FeatureCollection",
        "features": [
            line,
            _marker(result.start_point, "Start", START_COLOR, "start"),
            _marker(result.end_point, "End", END_COLOR, "end"),
        ],
    }

def route_summary(result: RouteResult) -> Dict[str, str]:
    return {
        "from": result.start_point.id,
        "to": result.end_point.id,
        "distance": f"{format_distance(result.total_distance)} km",
        "time": f"{result.estimated_time} minutes",
    }

def route_payload(result: RouteResult) -> Dict[str, Any]:
    return {
        "path": [p.model_dump() for p in result.path],
        "totalDistance": format_distance(result.total_distance),
        "estimatedTime": result.estimated_time,
        "startPoint": result.start_point.model_dump(),
        "endPoint": result.end_point.model_dump(),
        "visualRepresentation": route_geojson(result),
        "summary": route_summary(result),
    }

def _label(point: Waypoint) -> str:
    area = AREA_NAMES.get(point.id)
    return f"{point.id} ({area})" if area else point.id

def fixture_route_payload(result: RouteResult) -> Dict[str, Any]:
    return {
        "from": _label(result.start_point),
        "to": _label(result.end_point),
        "path": [p.id for p in result.path],
        "distance": f"{format_distance(result.total_distance)} km",
        "estimatedTime": f"{result.estimated_time} minutes",
        "waypoints": [
            {"id": p.id, "coordinates": {"lat": p.lat, "lng": p.lng}}
            for p in result.path
        ],
    }

# -----------------------------
# Event log
# -----------------------------

def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

class EventLog:
    """Bounded in-memory log of service events, oldest first."""

    def __init__(self, limit: int = 1000):
        self._events: deque = deque(maxlen=limit)

    def __len__(self) -> int:
        return len(self._events)

    def log_event(self, type_: str, detail: dict) -> Event:
        event = Event(time=utc_timestamp(), type=type_, detail=detail)
        self._events.append(event)
        return event

    def query(self, limit: Optional[int] = None, since: Optional[datetime] = None) -> List[Event]:
        """Most recent first, optionally only events after `since`."""
        events = list(self._events)
        if since is not None:
            events = [e for e in events if parse_timestamp(e.time) > since]
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events[::-1]
