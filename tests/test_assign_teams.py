import asyncio
import random
from unittest.mock import patch

from src.config import TeamConfig
from src.step_02_assign_teams import print_summary, run_assignment
from src.teams.persistence import InMemoryCache, InMemoryStore
from src.teams.reconciliation import ReconciliationEngine
from tests.utils import COLUMNS, TEAM_NAMES, make_record


def test_run_and_summary(capsys):
    roster = [
        make_record("Ana Lopez", "Femenino"),
        make_record("Juan Perez", "Masculino"),
        make_record("Alex Diaz", ""),
    ]
    config = TeamConfig(sheet_url="https://example.com/roster.csv")
    engine = ReconciliationEngine(InMemoryStore(enabled=False), InMemoryCache(), TEAM_NAMES, rng=random.Random(2))

    with patch("src.step_02_assign_teams.download_roster", return_value=(roster, list(COLUMNS))):
        outcome, columns, _ = asyncio.run(run_assignment(config=config, engine=engine))
    print_summary(outcome, columns, config.team_names)

    out = capsys.readouterr().out
    assert "Total registrados: 3" in out
    assert "  Femenino: 1" in out
    assert "  No especificado: 1" in out
    assert "remote store unavailable" in out
    assert "Rojo: 1" in out
