import asyncio
import pathlib
import sys

# Add project root to sys.path to allow running as script
root_dir = str(pathlib.Path(__file__).parent.parent)
if root_dir not in sys.path:
    sys.path.append(root_dir)

from src.config import load_config
from src.step_01_download_roster import RosterImportError, download_roster
from src.teams.partitioner import gender_breakdown
from src.teams.persistence import JsonBinStore, JsonFileCache
from src.teams.reconciliation import ReconciliationEngine


def build_engine(config, rng=None):
    remote = JsonBinStore(
        bin_id=config.remote_bin_id,
        api_key=config.remote_api_key,
        base_url=config.remote_base_url,
        timeout_seconds=config.timeout_seconds,
    )
    cache = JsonFileCache(config.cache_dir)
    return ReconciliationEngine(
        remote,
        cache,
        config.team_names,
        fixed_overrides=config.fixed_overrides,
        assignments_key=config.assignments_key,
        attendance_key=config.attendance_key,
        rng=rng,
    )


async def run_assignment(source=None, config=None, engine=None):
    """
    Import the roster and run one assignment + sync pass.

    Returns (outcome, columns, config). RosterImportError propagates: without
    a roster there is nothing to show.
    """
    if config is None:
        config = load_config()
    if engine is None:
        engine = build_engine(config)

    source = source or config.sheet_url
    if not source:
        raise RosterImportError("No roster source configured (set TEAMS_SHEET_URL).")

    print(f"Loading roster from {source}...")
    records, columns = await asyncio.to_thread(download_roster, source)
    print(f"{len(records)} participantes cargados.")

    outcome = await engine.run(records, columns)
    return outcome, columns, config


def print_summary(outcome, columns, team_names):
    print(f"Total registrados: {len(outcome.records)}")
    for gender, count in gender_breakdown(outcome.records, columns).items():
        print(f"  {gender}: {count}")
    if not outcome.remote_enabled:
        print("Note: remote store unavailable, state saved on this device only.")
    for name in team_names:
        members = outcome.teams.get(name, [])
        print(f"{name}: {len(members)}")


if __name__ == "__main__":
    source = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        outcome, columns, config = asyncio.run(run_assignment(source))
    except RosterImportError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print_summary(outcome, columns, config.team_names)
