import pytest

from icestore import set_scheduler


@pytest.fixture(autouse=True)
def _clear_scheduler():
    """The scheduler is process-wide; never let one test leak it into the next."""
    yield
    set_scheduler(None)
