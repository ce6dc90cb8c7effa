import math

import pytest

from analytics.analysis import (
    breakeven_value,
    classify_outcome,
    find_intersection_point,
    find_intersection_points,
    probe_value,
    renting_is_better,
    with_parameter,
)
from conftest import CountingCalculator
from models import InvalidArgument, PriceOutcome


def _price_models(rent_cost=300_000):
    """Buying costs the home price; renting costs a flat amount."""
    return CountingCalculator(lambda v: v.home_price), CountingCalculator(lambda v: rent_cost)


def test_probe_value_stays_in_range():
    assert probe_value(0, 95, 10, 3) == 30
    assert probe_value(0, 95, 10, 10) == 95
    assert probe_value(100, 0, 10, 3) == 70
    assert probe_value(100, 0, 30, 4) == 0


def test_ties_favor_buying(values):
    buying, renting = _price_models(rent_cost=values.home_price)
    assert not renting_is_better(values, buying, renting)


@pytest.mark.parametrize(
    "rent_cost, expected",
    [
        (50_000, PriceOutcome.RENT),
        (5_000_000, PriceOutcome.BUY),
        (300_000, PriceOutcome.START_BUY_END_RENT),
    ],
)
def test_classify_outcome(values, rent_cost, expected):
    buying, renting = _price_models(rent_cost)
    assert classify_outcome(values, "home_price", 100_000, 1_000_000, buying, renting) is expected
    assert buying.calls == 2
    assert renting.calls == 2


def test_swapping_ends_swaps_the_crossing(values):
    buying, renting = _price_models()
    assert classify_outcome(values, "home_price", 1_000_000, 100_000, buying, renting) is PriceOutcome.START_RENT_END_BUY


def test_finds_first_segment_past_the_crossing(values):
    buying, renting = _price_models()
    index = find_intersection_point(values, "home_price", 100_000, 1_000_000, 90, 10_000, buying, renting)
    # 300k is a tie (buy); 310k is the first price where renting wins
    assert index == 21


def test_descending_sweep(values):
    buying, renting = _price_models()
    index = find_intersection_point(values, "home_price", 1_000_000, 100_000, 90, 10_000, buying, renting)
    assert index == 70


def test_search_uses_logarithmic_probes(values):
    """A crossing over 1000 segments must not evaluate every segment."""
    buying, renting = _price_models()
    segments = 1000
    find_intersection_point(values, "home_price", 0, 10_000_000, segments, 10_000, buying, renting)
    assert buying.calls <= math.ceil(math.log2(segments)) + 1
    assert renting.calls == buying.calls


def test_returns_a_single_crossing(values):
    buying, renting = _price_models()
    points = find_intersection_points(values, "home_price", 100_000, 1_000_000, 90, 10_000, buying, renting)
    assert points == [21]


def test_crossing_with_real_models(values, buying, renting):
    """Low rent favors renting, high rent favors buying; the index sits on the flip."""
    lo, hi, step = 500, 10_000, 100
    segments = math.ceil((hi - lo) / step)
    assert classify_outcome(values, "monthly_rent", lo, hi, buying, renting) is PriceOutcome.START_RENT_END_BUY

    index = find_intersection_point(values, "monthly_rent", lo, hi, segments, step, buying, renting)
    assert 0 < index < segments
    before = with_parameter(values, "monthly_rent", probe_value(lo, hi, step, index - 1))
    after = with_parameter(values, "monthly_rent", probe_value(lo, hi, step, index))
    assert renting_is_better(before, buying, renting)
    assert not renting_is_better(after, buying, renting)
    # Same inputs, same answer
    assert find_intersection_point(values, "monthly_rent", lo, hi, segments, step, buying, renting) == index


@pytest.mark.parametrize(
    "parameter, segments, step",
    [
        ("is_joint_return", 10, 1),
        ("not_a_field", 10, 1),
        ("home_price", 10, 0),
        ("home_price", 10, -5),
        ("home_price", 0, 1),
        ("home_price", 2.5, 1),
    ],
)
def test_rejects_bad_search_arguments(values, parameter, segments, step):
    buying, renting = _price_models()
    with pytest.raises(InvalidArgument):
        find_intersection_points(values, parameter, 0, 10, segments, step, buying, renting)


def test_breakeven_value_converges(values):
    buying, renting = _price_models()
    assert breakeven_value(values, "home_price", 100_000, 1_000_000, buying, renting) == pytest.approx(300_000, abs=1)


def test_flip_inside_last_segment_marks_last_segment(values):
    """Renting only wins at the very end of the range; the last segment must show it."""
    buying, renting = _price_models(rent_cost=995_000)
    index = find_intersection_point(values, "home_price", 100_000, 1_000_000, 90, 10_000, buying, renting)
    assert index == 89


def test_single_segment_crossing(values):
    buying, renting = _price_models()
    assert find_intersection_point(values, "home_price", 250_000, 350_000, 1, 100_000, buying, renting) == 1


def _years_models(rent_cost=155_000):
    """Buying costs 10k per year of stay; refuses fractional stays like the real models."""

    def buy_cost(v):
        if not float(v.years_to_stay).is_integer():
            raise InvalidArgument("years_to_stay must be a whole number of years.")
        return v.years_to_stay * 10_000

    return CountingCalculator(buy_cost), CountingCalculator(lambda v: rent_cost)


def test_breakeven_value_over_whole_years(values):
    buying, renting = _years_models()
    # Renting wins from 16 years on
    assert breakeven_value(values, "years_to_stay", 1, 40, buying, renting) == 16
    assert breakeven_value(values, "years_to_stay", 40, 1, buying, renting) == 15


def test_breakeven_value_over_whole_years_with_real_models(values, buying, renting):
    v = with_parameter(values, "monthly_rent", 3750)
    years = breakeven_value(v, "years_to_stay", 1, 40, buying, renting)
    assert isinstance(years, int)
    assert 1 <= years <= 40
