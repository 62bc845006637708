import asyncio
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from src.config import DATA_DIR, load_config
from src.step_01_download_roster import RosterImportError
from src.step_02_assign_teams import build_engine, run_assignment
from src.step_03_export_xlsx import export_teams_xlsx
from src.teams.keys import participant_key
from src.teams.partitioner import gender_breakdown
from src.teams.search import find_participant

logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(title="Team Divider API")

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for local dev
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

RESULTS_DIR = DATA_DIR / "results"


# --- Models ---
class ReloadRequest(BaseModel):
    source: Optional[str] = None

class AttendanceToggle(BaseModel):
    key: str


# --- State ---
# One editor per process: a single engine holds the in-memory state.
class AppState:
    config = None
    engine = None

state = AppState()


def get_config():
    if state.config is None:
        state.config = load_config()
    return state.config


def get_engine():
    if state.engine is None:
        state.engine = build_engine(get_config())
    return state.engine


def reset_state(config=None, engine=None):
    state.config = config
    state.engine = engine


# --- Helpers ---
def serialize_teams(engine):
    teams = {}
    for name, members in engine.teams.items():
        rows = []
        for member in members:
            key = participant_key(member, engine.columns)
            rows.append({
                "key": key,
                "present": bool(engine.attendance.get(key)),
                "record": member,
            })
        teams[name] = rows
    return teams


def require_teams(engine):
    if engine.teams is None:
        raise HTTPException(status_code=409, detail="Roster not loaded yet. POST /api/reload first.")


# --- Endpoints ---

@app.get("/api/config")
def read_config():
    config = get_config()
    payload = config.model_dump(exclude={"remote_api_key"})
    payload["remote_enabled"] = config.remote_enabled
    return payload

@app.post("/api/reload")
async def reload_roster(request: Optional[ReloadRequest] = None):
    source = request.source if request else None
    try:
        outcome, columns, config = await run_assignment(source, config=get_config(), engine=get_engine())
    except RosterImportError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "participants": len(outcome.records),
        "genders": gender_breakdown(outcome.records, columns),
        "columns": columns,
        "remote_enabled": outcome.remote_enabled,
        "team_sizes": {name: len(outcome.teams[name]) for name in config.team_names},
    }

@app.get("/api/teams")
def read_teams():
    engine = get_engine()
    require_teams(engine)
    return {
        "columns": engine.columns,
        "colors": get_config().team_colors,
        "teams": serialize_teams(engine),
    }

@app.post("/api/attendance/toggle")
async def toggle_attendance(toggle: AttendanceToggle):
    engine = get_engine()
    require_teams(engine)
    if toggle.key not in engine.assignments:
        raise HTTPException(status_code=404, detail=f"Unknown participant: {toggle.key}")
    present = await engine.toggle_attendance(toggle.key)
    return {"key": toggle.key, "present": present}

@app.get("/api/search")
def search(q: str = ""):
    engine = get_engine()
    require_teams(engine)
    result = find_participant(engine.records, engine.columns, q, engine.assignments, get_config().team_colors)
    if result is None:
        return {"query": q, "result": None}
    return {"query": q, "result": result}

@app.post("/api/export")
async def export():
    engine = get_engine()
    require_teams(engine)
    path = await asyncio.to_thread(
        export_teams_xlsx,
        engine.teams, engine.attendance, engine.columns, get_config().team_names, RESULTS_DIR,
    )
    return {"status": "success", "path": str(Path(path))}

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
