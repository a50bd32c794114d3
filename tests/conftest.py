import os

os.environ.setdefault("JOBSIEVE_NO_FILE_LOG", "1")

import pytest

from jobsieve import database, retry
from jobsieve.sources.base import JobSourceBase


@pytest.fixture(autouse=True)
def memory_db():
    """Fresh in-memory database for every test."""
    engine = database.configure_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Record backoff delays instead of waiting them out."""
    delays = []

    async def fake_async_sleep(seconds):
        delays.append(seconds)

    async def fake_pause(self, seconds):
        return None

    monkeypatch.setattr(retry, "_async_sleep", fake_async_sleep)
    monkeypatch.setattr(retry, "_sleep", delays.append)
    monkeypatch.setattr(JobSourceBase, "_pause", fake_pause)
    return delays
