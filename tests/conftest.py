"""Shared fixtures: an in-memory settings backend and a store wired to it."""

from datetime import date

import pytest

from taskblocks.persistence import PersistenceGateway
from taskblocks.store import Store

from fakes import MemorySettingsStore


@pytest.fixture
def today():
    return date(2024, 1, 2)


@pytest.fixture
def backend():
    return MemorySettingsStore()


@pytest.fixture
def gateway(backend):
    gw = PersistenceGateway(backend)
    yield gw
    gw.close()


@pytest.fixture
def store(gateway):
    return Store.open(gateway)


@pytest.fixture
def events(store):
    """Documents passed to the change listener, one per notification."""
    received = []
    store.subscribe(received.append)
    return received
