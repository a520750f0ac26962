# api/main.py
"""
FastAPI backend for the rigging engine - exposes one in-memory Rig session as a REST API.
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any

import numpy as np

from mini_rig import Rig, RecomputeResult
from mini_rig.errors import InvalidInputError, RoleError, UnknownPointError
from mini_rig.model import PointRole
from mini_rig.report import format_readout, ropes_csv


app = FastAPI(
    title="Mini-Rig API",
    description="Truss rigging constraint and rope load engine",
    version="0.1.0"
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Session
# =============================================================================

_session: Dict[str, Rig] = {}


def get_rig() -> Rig:
    """Get the current rig, creating the default configuration on first use."""
    if 'rig' not in _session:
        _session['rig'] = Rig()
    return _session['rig']


def set_rig(rig: Rig) -> None:
    _session['rig'] = rig


# =============================================================================
# Request/Response Models
# =============================================================================

class Vec3(BaseModel):
    x: float
    y: float
    z: float


class AddPointRequest(BaseModel):
    """New point. `x` is along the truss (or world X for anchors); `position` is a world position."""
    role: PointRole
    x: Optional[float] = Field(None, description="Local X along the truss / anchor world X (m)")
    position: Optional[Vec3] = Field(None, description="World position (m), projected onto the truss")
    chord: Optional[int] = Field(None, ge=0, le=3, description="Chord index for attach points")
    anchor_id: Optional[int] = Field(None, description="Ceiling anchor for explicit routing")


class ChordRequest(BaseModel):
    chord: int = Field(..., ge=0, le=3)


class AnchorRequest(BaseModel):
    anchor_id: Optional[int] = None


class LoadRequest(BaseModel):
    mass: Any = Field(..., description="Payload mass (kg); invalid input keeps the previous mass")


class PointData(BaseModel):
    id: int
    role: str
    name: str
    x: float
    y: float
    z: float
    chord: Optional[int] = None
    anchor_id: Optional[int] = None
    local_x: Optional[float] = None
    line_state: Optional[str] = None


class RopeData(BaseModel):
    attach_id: int
    anchor_id: Optional[int] = None
    connected: bool
    tension: Optional[float] = None
    unbounded: bool = False
    angle_deg: Optional[float] = None
    severity: Optional[str] = None
    length: Optional[float] = None


class WarningData(BaseModel):
    kind: str
    message: str
    point_id: Optional[int] = None


class PoseData(BaseModel):
    position: List[float]
    rotation: List[List[float]]


class StateResult(BaseModel):
    """Complete recompute result."""
    truss_pose: PoseData
    points: List[PointData]
    ropes: List[RopeData]
    total_load: float
    load_mass: float
    status: str
    warnings: List[WarningData]
    readout: List[str]


class AddPointResult(BaseModel):
    id: int
    state: StateResult


class BridleData(BaseModel):
    length_a: float
    length_b: float
    inclination_a_deg: float
    inclination_b_deg: float
    opening_angle_deg: float


# =============================================================================
# Conversion
# =============================================================================

def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not np.isfinite(value):
        return None
    return round(float(value), 4)


def to_state(rig: Rig, result: RecomputeResult) -> StateResult:
    """Convert a recompute result to the response model (inf tension -> null + unbounded)."""
    points = [
        PointData(
            id=p.id,
            role=p.role.value,
            name=p.name,
            x=round(p.position[0], 4),
            y=round(p.position[1], 4),
            z=round(p.position[2], 4),
            chord=p.chord,
            anchor_id=p.anchor_id,
            local_x=_finite_or_none(p.local_x),
            line_state=p.line_state.value if p.line_state is not None else None,
        )
        for p in result.points
    ]
    ropes = [
        RopeData(
            attach_id=r.attach_id,
            anchor_id=r.anchor_id,
            connected=r.connected,
            tension=_finite_or_none(r.tension),
            unbounded=r.unbounded,
            angle_deg=_finite_or_none(r.angle_deg),
            severity=r.severity.value if r.severity is not None else None,
            length=_finite_or_none(r.length),
        )
        for r in result.ropes
    ]
    return StateResult(
        truss_pose=PoseData(**result.truss_pose.as_dict()),
        points=points,
        ropes=ropes,
        total_load=round(result.total_load, 4),
        load_mass=rig.load_mass,
        status=result.status.value,
        warnings=[WarningData(**w.as_dict()) for w in result.warnings],
        readout=format_readout(result),
    )


def _run(fn, *args):
    """Call a rig operation, mapping engine errors to HTTP errors."""
    try:
        return fn(*args)
    except UnknownPointError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (RoleError, InvalidInputError) as e:
        raise HTTPException(status_code=400, detail=str(e))


# =============================================================================
# API Endpoints
# =============================================================================

@app.get("/")
async def root():
    """Health check."""
    return {"status": "ok", "service": "Mini-Rig API"}


@app.get("/api/state", response_model=StateResult)
async def get_state():
    rig = get_rig()
    return to_state(rig, rig.recompute())


@app.post("/api/points", response_model=AddPointResult)
async def add_point(request: AddPointRequest):
    rig = get_rig()
    if request.position is not None:
        position = [request.position.x, request.position.y, request.position.z]
    else:
        position = request.x
    point_id = _run(rig.add_point, request.role, position, request.chord, request.anchor_id)
    return AddPointResult(id=point_id, state=to_state(rig, rig.last_result))


@app.delete("/api/points/last/{role}", response_model=StateResult)
async def remove_last(role: PointRole):
    rig = get_rig()
    rig.remove_last(role)
    return to_state(rig, rig.last_result)


@app.delete("/api/points/{point_id}", response_model=StateResult)
async def remove_point(point_id: int):
    rig = get_rig()
    _run(rig.remove_point, point_id)
    return to_state(rig, rig.last_result)


@app.put("/api/points/{point_id}/position", response_model=StateResult)
async def set_position(point_id: int, position: Vec3):
    rig = get_rig()
    _run(rig.set_position, point_id, [position.x, position.y, position.z])
    return to_state(rig, rig.last_result)


@app.put("/api/points/{point_id}/chord", response_model=StateResult)
async def set_chord(point_id: int, request: ChordRequest):
    rig = get_rig()
    _run(rig.set_chord, point_id, request.chord)
    return to_state(rig, rig.last_result)


@app.put("/api/points/{point_id}/anchor", response_model=StateResult)
async def set_anchor(point_id: int, request: AnchorRequest):
    rig = get_rig()
    _run(rig.set_connected_anchor, point_id, request.anchor_id)
    return to_state(rig, rig.last_result)


@app.put("/api/load", response_model=StateResult)
async def set_load(request: LoadRequest):
    rig = get_rig()
    rig.set_load_mass(request.mass)
    return to_state(rig, rig.last_result)


@app.post("/api/reset", response_model=StateResult)
async def reset():
    rig = get_rig()
    return to_state(rig, rig.reset())


@app.get("/api/bridle", response_model=BridleData)
async def bridle(anchor_a: int, anchor_b: int, point: int):
    """Two-leg bridle readout for a point hung from two anchors."""
    rig = get_rig()
    geometry = _run(rig.bridle, anchor_a, anchor_b, point)
    return BridleData(**geometry.as_dict())


@app.get("/api/export/csv")
async def export_csv():
    """Export the rope readout as CSV."""
    rig = get_rig()
    content = ropes_csv(rig.recompute())
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=rig_ropes.csv"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
