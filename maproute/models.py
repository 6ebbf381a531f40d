from typing import List, Dict, Optional, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

# -----------------------------
# Errors
# -----------------------------

class RoutingError(ValueError):
    """Base class for recoverable routing failures."""

class UnknownPoint(RoutingError):
    def __init__(self, point_id: str):
        super().__init__(f"Unknown point: {point_id}")
        self.point_id = point_id

class NoRouteFound(RoutingError):
    def __init__(self, start_id: str, end_id: str):
        super().__init__(f"No path from {start_id} to {end_id}")
        self.start_id = start_id
        self.end_id = end_id

class InvalidConnection(RoutingError):
    pass

# -----------------------------
# Domain Models (Pydantic)
# -----------------------------

class Waypoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    lat: float
    lng: float

class Neighbor(NamedTuple):
    id: str
    distance: float

class Connection(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    distance: float

class RouteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: List[Waypoint]  # start..end inclusive
    total_distance: float  # km, unrounded
    estimated_time: int  # minutes
    start_point: Waypoint
    end_point: Waypoint

class Event(BaseModel):
    time: str
    type: str
    detail: dict

# -----------------------------
# API Schemas
# -----------------------------

class RouteRequest(BaseModel):
    startId: Optional[str] = None
    endId: Optional[str] = None

class AddPointRequest(BaseModel):
    id: str = Field(min_length=1)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

class AddConnectionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    distance: float

class PointsResponse(BaseModel):
    success: bool = True
    points: List[Waypoint]
    count: int

class ErrorResponse(BaseModel):
    success: bool = False
    error: str

# -----------------------------
# Seed dataset
# -----------------------------

SEED_POINTS: List[Waypoint] = [
    Waypoint(id="A", lat=37.7749, lng=-122.4194),  # Downtown
    Waypoint(id="B", lat=37.7849, lng=-122.4094),  # North Area
    Waypoint(id="C", lat=37.7649, lng=-122.4294),  # South Area
    Waypoint(id="D", lat=37.7749, lng=-122.3994),  # East Area
    Waypoint(id="E", lat=37.7949, lng=-122.4194),  # West Area
]

SEED_CONNECTIONS: List[Connection] = [
    Connection(**{"from": "A", "to": "B", "distance": 2.5}),
    Connection(**{"from": "A", "to": "C", "distance": 3.2}),
    Connection(**{"from": "A", "to": "D", "distance": 4.1}),
    Connection(**{"from": "B", "to": "D", "distance": 2.8}),
    Connection(**{"from": "B", "to": "E", "distance": 3.5}),
    Connection(**{"from": "C", "to": "D", "distance": 2.1}),
    Connection(**{"from": "D", "to": "E", "distance": 3.8}),
]

AREA_NAMES: Dict[str, str] = {
    "A": "Downtown",
    "B": "North Area",
    "C": "South Area",
    "D": "East Area",
    "E": "West Area",
}
