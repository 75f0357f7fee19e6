"""Shared pytest fixtures."""

from datetime import date

import pytest

from clinic_scheduler.scheduling.database.store import DataStore
from clinic_scheduler.scheduling.notifier import Notifier
from clinic_scheduler.scheduling.service import SchedulingService

TODAY = date(2026, 10, 19)


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point every test at its own empty data directory."""
    path = tmp_path / "data"
    monkeypatch.setenv("CLINIC_DATA_DIR", str(path))
    return path


@pytest.fixture
def outbox():
    """Lines delivered through any notification channel."""
    return []


@pytest.fixture
def store(data_dir):
    """A store seeded with the sample doctors and slots."""
    return DataStore(data_dir, today=TODAY)


@pytest.fixture
def empty_store(data_dir):
    """A store without sample data."""
    return DataStore(data_dir, seed=False)


@pytest.fixture
def notifier(store, outbox):
    return Notifier(store, sink=outbox.append)


@pytest.fixture
def service(store, notifier):
    return SchedulingService(store, notifier, today=lambda: TODAY)


@pytest.fixture
def patient(service):
    """A registered patient, P001."""
    return service.register_patient("Rina Wijaya", "rina@example.com", "555-0101", "Jl. Merdeka 1")
