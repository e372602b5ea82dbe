import pytest

from calcsheet import definitions


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, dt):
        self.now += dt


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def fresh_definitions():
    """Each test loads definition files from scratch."""
    definitions.clear_cache()
    yield
    definitions.clear_cache()
