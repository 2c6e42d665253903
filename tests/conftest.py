from datetime import datetime

import pytest

from hallpass.core.config import Settings
from hallpass.schemas.student import StudentInput
from hallpass.services.quota import QuotaPolicy
from hallpass.services.roster import RosterManager
from hallpass.services.signout import SignoutMachine
from hallpass.services.store import init_store

# Middle of Q1 of the 2025-26 school year
NOW = datetime(2025, 9, 10, 10, 0, 0)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'hallpass.db'}",
        MONITORED_DESTINATION="Bathroom",
        QUOTA_THRESHOLD=2,
        TEACHER_OVERRIDE_PIN="2468",
        ADMIN_PASSWORD="secret",
        ADMIN_MODE=False,
        SCANNER_MODE="select",
        SCANNER_DEFAULT_DESTINATION="Bathroom",
    )


@pytest.fixture
def store(settings):
    store = init_store(settings.DATABASE_URL)
    yield store
    store.engine.dispose()


@pytest.fixture
def quota(store, settings):
    return QuotaPolicy(store, settings)


@pytest.fixture
def machine(store, quota, settings):
    return SignoutMachine(store, quota, settings, clock=lambda: NOW)


@pytest.fixture
def roster(store):
    return RosterManager(store)


@pytest.fixture
def student(roster):
    return roster.create_or_update(
        StudentInput(name="Ada Lovelace", student_id="1001", grade="10", course="Math - P1"),
        now=NOW,
    )


@pytest.fixture
def other_student(roster):
    return roster.create_or_update(
        StudentInput(name="Bob Babbage", student_id="1002", grade="11"),
        now=NOW,
    )
