import json
from typing import List, Optional
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from maproute.algo_funcs import RoutingEngine
from maproute.config import Settings
from maproute.graph import GraphStore, build_seed_graph
from maproute.helpers import EventLog, route_payload, fixture_route_payload, parse_timestamp
from maproute.models import *
# -----------------------------
# App Setup
# -----------------------------

def create_app(settings: Optional[Settings] = None, store: Optional[GraphStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Map Routing API",
        version="0.1.0",
        description=(
            "Shortest-path routing between named map waypoints.\n\n"
            "Endpoints provided: /api/points, /api/route, /api/test-route.\n"
            "The graph is in-memory and resets on restart."
        ),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    events = EventLog(limit=settings.event_limit)
    if store is None:
        store = build_seed_graph()
        events.log_event("graph_seeded", {"points": len(store), "connections": len(store.connections())})

    app.state.settings = settings
    app.state.store = store
    app.state.engine = RoutingEngine(store, average_speed_kmh=settings.average_speed_kmh)
    app.state.events = events

    _register_routes(app)
    return app

# -----------------------------
# Helpers
# -----------------------------

async def _read_route_request(request: Request) -> Optional[RouteRequest]:
    """Route body from JSON or a urlencoded form; None when it is missing or malformed."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/x-www-form-urlencoded"):
            data = dict(await request.form())
        else:
            body = await request.body()
            data = json.loads(body) if body else {}
        return RouteRequest.model_validate(data)
    except (ValueError, ValidationError):
        return None

def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(error="No route found between the specified points").model_dump(),
    )

# -----------------------------
# Endpoints
# -----------------------------

def _register_routes(app: FastAPI) -> None:

    @app.get("/", tags=["meta"])
    async def index():
        return {
            "service": "Map Routing API",
            "description": "Uber-style routing between points",
            "endpoints": [
                "POST /api/route - Calculate route between points",
                "GET /api/points - Get all available points",
            ],
        }

    @app.get("/healthz", tags=["meta"])
    async def healthz():
        return {"ok": True}

    @app.get("/events", response_model=List[Event], tags=["meta"])
    async def get_events(request: Request, limit: Optional[int] = None, since: Optional[str] = None):
        """
        Service event log, newest first: graph_seeded, route_computed, route_not_found,
        point_added, connection_added, connection_rejected.
        `since` keeps only events after that UTC time; `limit` keeps the newest N.
        """
        since_dt = None
        if since is not None:
            try:
                since_dt = parse_timestamp(since)
            except ValueError:
                raise HTTPException(status_code=400, detail="since must be an ISO 8601 time, e.g. 2024-01-01T00:00:00Z")
        if limit is not None and limit < 0:
            raise HTTPException(status_code=400, detail="'limit' must not be negative")
        return request.app.state.events.query(limit=limit, since=since_dt)

    @app.get("/api/points", response_model=PointsResponse, tags=["points"])
    async def get_points(request: Request) -> PointsResponse:
        points = request.app.state.store.list_points()
        return PointsResponse(points=points, count=len(points))

    @app.post("/api/points", response_model=Waypoint, status_code=201, tags=["points"])
    async def add_point(req: AddPointRequest, request: Request) -> Waypoint:
        store: GraphStore = request.app.state.store
        if not store.add_point(req.id, req.lat, req.lng):
            raise HTTPException(status_code=409, detail="Point with this id already exists")
        request.app.state.events.log_event("point_added", {"id": req.id, "lat": req.lat, "lng": req.lng})
        return store.get_point(req.id)

    @app.post("/api/connections", response_model=Connection, status_code=201, tags=["points"])
    async def add_connection(req: AddConnectionRequest, request: Request) -> Connection:
        store: GraphStore = request.app.state.store
        detail = {"from": req.from_, "to": req.to, "distance": req.distance}
        if not store.add_connection(req.from_, req.to, req.distance):
            request.app.state.events.log_event("connection_rejected", detail)
            raise HTTPException(
                status_code=400,
                detail=str(InvalidConnection("connection endpoints must be two distinct known points and distance must be positive")),
            )
        request.app.state.events.log_event("connection_added", detail)
        return Connection(**{"from": req.from_, "to": req.to, "distance": req.distance})

    @app.post("/api/route", tags=["routing"])
    async def compute_route(request: Request):
        req = await _read_route_request(request)
        if req is None or not req.startId or not req.endId:
            return JSONResponse(
                status_code=400,
                content=ErrorResponse(error="Both startId and endId are required").model_dump(),
            )

        events: EventLog = request.app.state.events
        try:
            result = request.app.state.engine.find_shortest_path(req.startId, req.endId)
        except RoutingError as e:
            events.log_event("route_not_found", {"start": req.startId, "end": req.endId, "reason": str(e)})
            return _not_found()

        events.log_event("route_computed", {
            "start": req.startId,
            "end": req.endId,
            "path": [p.id for p in result.path],
            "distance": result.total_distance,
        })
        return {"success": True, "route": route_payload(result)}

    @app.get("/api/test-route", tags=["routing"])
    async def test_route(request: Request):
        try:
            result = request.app.state.engine.find_shortest_path("A", "E")
        except RoutingError:
            return {"error": "Test route not found"}
        return {"testRoute": fixture_route_payload(result)}


app = create_app()

# -----------------------------
# Run (if executed directly)
# -----------------------------

# Use: python -m maproute.main  // or uvicorn maproute.main:app --reload
if __name__ == "__main__":
    import uvicorn

    settings = app.state.settings
    uvicorn.run(
        "maproute.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
