import random

from src.teams.keys import find_gender_column, find_payment_column, participant_key

UNSPECIFIED_GENDER = "No especificado"

STAFF_MARKER = "staff"

MALE_VALUES = ("masculino", "hombre")
FEMALE_VALUES = ("femenino", "mujer")


def exclude_staff(records, columns):
    """Drop staff rows, detected through the payment column. No column, no filtering."""
    payment_col = find_payment_column(columns)
    if payment_col is None:
        return list(records)
    return [
        r for r in records
        if STAFF_MARKER not in str(r.get(payment_col) or "").lower()
    ]


def gender_cohort(value):
    """0 = men, 1 = women, 2 = anything else."""
    g = str(value or "").strip().lower()
    if any(v in g for v in MALE_VALUES) or g == "m":
        return 0
    if any(v in g for v in FEMALE_VALUES) or g == "f":
        return 1
    return 2


def gender_breakdown(records, columns):
    """Registrations per gender value as typed in the sheet, blanks under UNSPECIFIED_GENDER."""
    gender_col = find_gender_column(columns)
    counts = {}
    for record in records:
        value = str(record.get(gender_col) or "").strip() if gender_col is not None else ""
        label = value or UNSPECIFIED_GENDER
        counts[label] = counts.get(label, 0) + 1
    return counts


def team_counts(assignments, team_names):
    counts = {name: 0 for name in team_names}
    for team in assignments.values():
        if team in counts:
            counts[team] += 1
    return counts


def smallest_team(counts, team_names):
    # Strict comparison keeps the first team in declared order on ties
    best = None
    for name in team_names:
        if best is None or counts[name] < counts[best]:
            best = name
    return best


def balanced_split(unassigned, columns, team_names, rng):
    """
    First-time split: shuffle men, women and others separately, then deal the
    concatenation round-robin over the teams. Returns {key: team}.
    """
    if not team_names:
        return {}

    gender_col = find_gender_column(columns)
    cohorts = ([], [], [])
    for record in unassigned:
        value = record.get(gender_col) if gender_col is not None else ""
        cohorts[gender_cohort(value)].append(record)

    dealt = []
    for cohort in cohorts:
        shuffled = list(cohort)
        rng.shuffle(shuffled)
        dealt.extend(shuffled)

    result = {}
    for i, record in enumerate(dealt):
        result[participant_key(record, columns)] = team_names[i % len(team_names)]
    return result


def top_up(unassigned, columns, assignments, team_names):
    """Newcomers go one by one to whichever team is currently smallest."""
    if not team_names:
        return {}

    counts = team_counts(assignments, team_names)
    result = {}
    for record in unassigned:
        team = smallest_team(counts, team_names)
        result[participant_key(record, columns)] = team
        counts[team] += 1
    return result


def build_rosters(records, columns, assignments, team_names):
    teams = {name: [] for name in team_names}
    for record in records:
        team = assignments.get(participant_key(record, columns))
        if team in teams:
            teams[team].append(record)
    return teams


def assign_teams(records, columns, existing_assignments, team_names, rng=None, initial_split=None):
    """
    Assign every non-staff record to a team, keeping previous assignments.

    existing_assignments: {key: team} from earlier runs (overrides already
        folded in). Never modified; a new map is returned.
    initial_split: force the policy. By default the balanced split is used
        only when existing_assignments is empty, otherwise newcomers are
        topped up into the smallest teams.

    Returns (teams, assignments) where teams is {team: [records]}.
    """
    if rng is None:
        rng = random.Random()
    if initial_split is None:
        initial_split = not existing_assignments

    participants = exclude_staff(records, columns)
    assignments = dict(existing_assignments)

    # Duplicate keys collapse onto the first occurrence
    unassigned = []
    seen = set()
    for record in participants:
        key = participant_key(record, columns)
        if key in assignments or key in seen:
            continue
        seen.add(key)
        unassigned.append(record)

    if initial_split:
        assignments.update(balanced_split(unassigned, columns, team_names, rng))
    else:
        assignments.update(top_up(unassigned, columns, assignments, team_names))

    teams = build_rosters(participants, columns, assignments, team_names)
    return teams, assignments
