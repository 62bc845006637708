
import random

import pytest

from tests.utils import COLUMNS, TEAM_NAMES, IdentityShuffle, make_record


@pytest.fixture
def columns():
    return list(COLUMNS)


@pytest.fixture
def team_names():
    return list(TEAM_NAMES)


@pytest.fixture
def five_records():
    # Genders M, F, M, F, other
    return [
        make_record("Juan Perez", "Masculino", "5550001"),
        make_record("Ana Lopez", "Femenino", "5550002"),
        make_record("Luis Gomez", "Hombre", "5550003"),
        make_record("Maria Ruiz", "Mujer", "5550004"),
        make_record("Alex Diaz", "Prefiero no decir", "5550005"),
    ]


@pytest.fixture
def staff_record():
    return make_record("Pedro Staff", "Masculino", "5559999", pago="STAFF - no paga")


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def identity_rng():
    return IdentityShuffle()
