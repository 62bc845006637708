"""Shared roster helpers for the team assignment tests."""

COLUMNS = [
    "Marca temporal",
    "NOMBRE Y APELLIDO",
    "ESCRIBE TU NUMERO DE CELULAR",
    "SELECCIONA TU GENERO",
    "METODO DE PAGO",
]

TEAM_NAMES = ["Rojo", "Azul", "Verde", "Amarillo"]


def make_record(name, gender="", phone="", pago="Transferencia", stamp="2025-01-10 10:00"):
    return {
        "Marca temporal": stamp,
        "NOMBRE Y APELLIDO": name,
        "ESCRIBE TU NUMERO DE CELULAR": phone,
        "SELECCIONA TU GENERO": gender,
        "METODO DE PAGO": pago,
    }


def make_roster(n, start=0, gender_cycle=("Masculino", "Femenino", "Otro")):
    return [
        make_record(f"Persona {i:03d}", gender_cycle[i % len(gender_cycle)], f"555{i:04d}")
        for i in range(start, start + n)
    ]


def team_sizes(teams):
    return {name: len(members) for name, members in teams.items()}


class IdentityShuffle:
    """Random source that leaves every cohort in input order."""

    def __init__(self):
        self.calls = 0

    def shuffle(self, items):
        self.calls += 1
