import pytest

from config import INITIAL_VALUES
from finance.factory import create_buying_calculator, create_renting_calculator


class CountingCalculator:
    """Stand-in cost model: total cost is ``fn(values)``; counts evaluations."""

    def __init__(self, fn):
        self.fn = fn
        self.calls = 0

    def get_total_cost(self, values=None):
        self.calls += 1
        return self.fn(values)


@pytest.fixture
def values():
    return INITIAL_VALUES


@pytest.fixture
def buying():
    return create_buying_calculator("US")


@pytest.fixture
def renting():
    return create_renting_calculator("US")
