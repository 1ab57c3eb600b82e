"""
Shared fixtures
"""

import pytest

from chat_agent.infra.database import Database
from chat_agent.infra.message_store import SqlMessageStore
from chat_agent.utils.metrics import reset_metrics


@pytest.fixture(autouse=True)
def clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.engine.dispose()


@pytest.fixture
def message_store(database):
    return SqlMessageStore(database)
