"""Shared fixtures: every test gets a fresh, manually drained default scheduler."""
import pytest

from futura import QueueScheduler, reset_all, set_scheduler


@pytest.fixture
def scheduler():
    return QueueScheduler()


@pytest.fixture(autouse=True)
def default_scheduler(scheduler):
    set_scheduler(scheduler)
    yield scheduler
    reset_all()
