from src.teams.keys import find_name_column, find_phone_column, participant_key

UNASSIGNED_LABEL = "Sin asignar"


def find_participant(records, columns, query, assignments, team_colors=None):
    """
    Look a participant up by (part of) their name or phone number.

    Returns None for a blank query, {"not_found": True} when nobody matches,
    otherwise the record with its team and the team's display colors.
    """
    query = (query or "").strip().lower()
    if not query:
        return None

    name_col = find_name_column(columns)
    phone_col = find_phone_column(columns)

    for record in records:
        name = str(record.get(name_col) or "").lower() if name_col else ""
        phone = str(record.get(phone_col) or "").lower() if phone_col else ""
        if query in name or query in phone:
            team = assignments.get(participant_key(record, columns)) or UNASSIGNED_LABEL
            return {
                "participant": record,
                "team": team,
                "color": (team_colors or {}).get(team),
            }

    return {"not_found": True}
