import logging

from src.teams.keys import display_name, participant_key

logger = logging.getLogger(__name__)


def match_override(name, override_table):
    """Return the team pinned for `name`, or None. First matching fragment wins."""
    lowered = (name or "").lower()
    if not lowered:
        return None
    for fragment, team in override_table.items():
        fragment = str(fragment).strip().lower()
        if fragment and fragment in lowered:
            return team
    return None


def resolve_overrides(records, columns, override_table, assignments, team_names=None):
    """
    Pin participants whose name contains an override fragment.

    Writes the pinned team straight into `assignments` (replacing whatever was
    there) and returns (fixed_records, remaining_records). Only the remaining
    records go on to balancing.
    """
    fixed = []
    remaining = []

    if not override_table:
        return fixed, list(records)

    for record in records:
        team = match_override(display_name(record, columns), override_table)
        if team is None:
            remaining.append(record)
            continue

        if team_names is not None and team not in team_names:
            logger.warning("Ignoring override to unknown team %r", team)
            remaining.append(record)
            continue

        key = participant_key(record, columns)
        previous = assignments.get(key)
        if previous and previous != team:
            logger.info("Override moves %r from %s to %s", key, previous, team)
        assignments[key] = team
        fixed.append(record)

    return fixed, remaining
