import pathlib
import sys
from pathlib import Path

import pandas as pd

# Add project root to sys.path to allow running as script
root_dir = str(pathlib.Path(__file__).parent.parent)
if root_dir not in sys.path:
    sys.path.append(root_dir)

from src.teams.keys import participant_key

EXPORT_FILENAME = "equipos_divididos.xlsx"
SHEET_NAME = "Equipos"
PRESENT_LABEL = "Presente"
ABSENT_LABEL = "Ausente"


def build_export_rows(teams, attendance, columns, team_names):
    """Header row, then one row per member per team, attendance as a label."""
    rows = [["EQUIPO", *columns, "ASISTENCIA"]]
    for team_name in team_names:
        for member in teams.get(team_name, []):
            key = participant_key(member, columns)
            label = PRESENT_LABEL if attendance.get(key) else ABSENT_LABEL
            rows.append([team_name, *[member.get(c) or "" for c in columns], label])
    return rows


def export_teams_xlsx(teams, attendance, columns, team_names, output_dir="."):
    rows = build_export_rows(teams, attendance, columns, team_names)
    df = pd.DataFrame(rows[1:], columns=rows[0])

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / EXPORT_FILENAME

    df.to_excel(output_path, sheet_name=SHEET_NAME, index=False, engine='openpyxl')
    print(f"Exported {len(rows) - 1} rows to {output_path}")
    return output_path


if __name__ == "__main__":
    import asyncio
    from src.step_02_assign_teams import run_assignment

    source = sys.argv[1] if len(sys.argv) > 1 else None
    outcome, columns, config = asyncio.run(run_assignment(source))
    export_teams_xlsx(outcome.teams, outcome.attendance, columns, config.team_names,
                      output_dir=Path("data") / "results")
