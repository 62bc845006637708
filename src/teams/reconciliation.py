import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List

from src.teams.overrides import resolve_overrides
from src.teams.partitioner import assign_teams, exclude_staff

logger = logging.getLogger(__name__)


@dataclass
class SyncState:
    """Everything read from the two stores before a run."""
    local_assignments: Dict[str, str] = field(default_factory=dict)
    local_attendance: Dict[str, bool] = field(default_factory=dict)
    remote_assignments: Dict[str, str] = field(default_factory=dict)
    remote_attendance: Dict[str, bool] = field(default_factory=dict)
    remote_available: bool = False


@dataclass
class AssignmentOutcome:
    teams: Dict[str, List[Dict[str, Any]]]
    assignments: Dict[str, str]
    attendance: Dict[str, bool]
    remote_enabled: bool
    records: List[Dict[str, Any]] = field(default_factory=list)


def sync(local_assignments, local_attendance, remote_assignments, remote_attendance, fresh_assignments):
    """
    Merge both stores with the freshly computed assignments.

    Assignments: the fresh map wins outright. It was computed on top of the
    remote map, and the local cache never contributes assignment data here.
    Attendance: remote and local are unioned, local marks win on collision.

    Pure function: same inputs, same output.
    """
    merged_assignments = dict(fresh_assignments)
    merged_attendance = dict(remote_attendance)
    merged_attendance.update(local_attendance)
    return merged_assignments, merged_attendance


def clean_assignments(raw, team_names):
    if not isinstance(raw, dict):
        return {}
    cleaned = {}
    for key, team in raw.items():
        if isinstance(team, str) and team in team_names:
            cleaned[str(key)] = team
        else:
            logger.warning("Dropping stored assignment %r -> %r (unknown team)", key, team)
    return cleaned


def clean_attendance(raw):
    if not isinstance(raw, dict):
        return {}
    return {str(k): v for k, v in raw.items() if isinstance(v, bool)}


class ReconciliationEngine:
    """
    Owns the in-memory assignment/attendance state of one client and keeps
    the local cache and the remote document in line with it.

    remote: object with async get()/put(document) returning GatewayResult
        and an `enabled` property (see src.teams.persistence).
    cache: object with async get(name)/put(name, value) returning GatewayResult.
    """

    def __init__(self, remote, cache, team_names, fixed_overrides=None,
                 assignments_key="team_assignments_v13", attendance_key="team_attendance_v1",
                 rng=None):
        self.remote = remote
        self.cache = cache
        self.team_names = list(team_names)
        self.fixed_overrides = dict(fixed_overrides or {})
        self.assignments_key = assignments_key
        self.attendance_key = attendance_key
        self.rng = rng if rng is not None else random.Random()

        self.records = []
        self.columns = []
        self.teams = None
        self.assignments = {}
        self.attendance = {}
        # Remote writes only after the remote document was read successfully
        self.remote_synced = False

    @property
    def remote_enabled(self):
        return bool(getattr(self.remote, "enabled", False))

    async def load_state(self) -> SyncState:
        state = SyncState()

        result = await self.cache.get(self.assignments_key)
        if result.ok:
            state.local_assignments = clean_assignments(result.value, self.team_names)

        result = await self.cache.get(self.attendance_key)
        if result.ok:
            state.local_attendance = clean_attendance(result.value)

        result = await self.remote.get()
        if result.ok and isinstance(result.value, dict):
            state.remote_assignments = clean_assignments(result.value.get("assignments", {}), self.team_names)
            state.remote_attendance = clean_attendance(result.value.get("attendance", {}))
            state.remote_available = True
        elif self.remote_enabled:
            logger.warning("Treating remote state as empty: %s", result.reason or "malformed document")
        else:
            logger.info("Remote store disabled: %s", result.reason)

        return state

    async def persist(self, assignments, attendance, write_remote=True):
        """
        Write the merged state back. The remote gets one full document, the
        local cache gets each map under its own key. Failures are logged and
        absorbed; returns True only if every write succeeded.

        write_remote=False leaves the remote document alone, used when it
        could not be read this session so a blind write cannot clobber it.
        """
        ok = True

        if write_remote:
            document = {"assignments": assignments, "attendance": attendance}
            result = await self.remote.put(document)
            if not result.ok:
                ok = False
                if self.remote_enabled:
                    logger.warning("Remote write skipped: %s", result.reason)

        for name, value in ((self.attendance_key, attendance), (self.assignments_key, assignments)):
            result = await self.cache.put(name, value)
            if not result.ok:
                ok = False
                logger.warning("Local cache write failed: %s", result.reason)

        return ok

    async def run(self, records, columns) -> AssignmentOutcome:
        """One full pass: load both stores, assign, merge, write back."""
        state = await self.load_state()

        # Offline, the local copy is the only memory of earlier runs (DESIGN.md, decision 4)
        if state.remote_available:
            baseline = state.remote_assignments
        else:
            baseline = state.local_assignments

        participants = exclude_staff(records, columns)
        working = dict(baseline)
        fixed, _ = resolve_overrides(participants, columns, self.fixed_overrides, working, self.team_names)
        if fixed:
            logger.info("Pinned %d participant(s) through fixed overrides", len(fixed))

        teams, fresh = assign_teams(
            participants, columns, working, self.team_names,
            rng=self.rng, initial_split=not baseline,
        )

        assignments, attendance = sync(
            state.local_assignments, state.local_attendance,
            state.remote_assignments, state.remote_attendance,
            fresh,
        )
        await self.persist(assignments, attendance, write_remote=state.remote_available)

        self.remote_synced = state.remote_available
        self.records = list(records)
        self.columns = list(columns)
        self.teams = teams
        self.assignments = assignments
        self.attendance = attendance

        return AssignmentOutcome(
            teams=teams,
            assignments=assignments,
            attendance=attendance,
            remote_enabled=state.remote_available,
            records=list(records),
        )

    async def toggle_attendance(self, key):
        """
        Flip one attendance mark. The in-memory value changes first and stays
        changed even if flushing it to the stores fails.
        """
        new_status = not self.attendance.get(key, False)
        self.attendance = {**self.attendance, key: new_status}
        await self.flush_attendance()
        return new_status

    async def flush_attendance(self):
        result = await self.cache.put(self.attendance_key, self.attendance)
        if not result.ok:
            logger.warning("Local cache write failed: %s", result.reason)

        if not self.remote_synced:
            return
        document = {"assignments": self.assignments, "attendance": self.attendance}
        result = await self.remote.put(document)
        if not result.ok:
            logger.warning("Remote attendance flush abandoned: %s", result.reason)
