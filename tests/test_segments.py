import numpy as np
import pytest

from analytics.trajectories import (
    SENSITIVITY_PARAMETERS,
    build_segment_values,
    cost_breakdown,
    equity_vs_portfolio,
    segment_count,
    segments_dataframe,
    sensitivity_table,
    sweep_values,
    yearly_comparison,
)
from analytics.analysis import with_parameter
from conftest import CountingCalculator
from finance.opportunity import purchase_capital
from models import InvalidArgument, PriceOutcome


def test_segment_count():
    assert segment_count(100, 1000, 10) == 90
    assert segment_count(0, 95, 10) == 10
    assert segment_count(1000, 100, 10) == 90
    assert segment_count(-0.05, 0.1, 0.001) == 150
    assert segment_count(0, 0.15, 0.01) == 15
    with pytest.raises(InvalidArgument):
        segment_count(0, 10, 0)


def test_sweep_values_match_segments():
    xs = sweep_values(0, 95, 10)
    assert len(xs) == 10
    assert xs[0] == 0
    assert xs[-1] == 90


def test_uniform_outcome_skips_search(values):
    """Renting wins everywhere, so only the two endpoints are evaluated."""
    buying = CountingCalculator(lambda v: v.home_price)
    renting = CountingCalculator(lambda v: 0.0)
    segments = build_segment_values(values, "home_price", 100_000, 1_000_000, 10_000, buying, renting)
    assert segments.outcome is PriceOutcome.RENT
    assert segments.renting_is_better.all()
    assert segments.intersection_index is None
    assert buying.calls == 2


def test_segments_flip_at_crossing(values):
    buying = CountingCalculator(lambda v: v.home_price)
    renting = CountingCalculator(lambda v: 300_000)
    segments = build_segment_values(values, "home_price", 1_000_000, 100_000, 10_000, buying, renting)
    assert segments.outcome is PriceOutcome.START_RENT_END_BUY
    assert len(segments) == 90
    assert segments.renting_is_better.sum() == 70
    assert segments.renting_is_better[:70].all()


def test_segments_dataframe_covers_the_range(values):
    buying = CountingCalculator(lambda v: v.home_price)
    renting = CountingCalculator(lambda v: 300_000)
    segments = build_segment_values(values, "home_price", 100_000, 1_000_000, 10_000, buying, renting)
    df = segments_dataframe(segments, 1_000_000)
    assert df["start"].iloc[0] == 100_000
    assert df["end"].iloc[-1] == 1_000_000
    assert set(df["winner"]) == {"Buy", "Rent"}
    assert (df.loc[df["start"] >= 310_000, "winner"] == "Rent").all()


def test_cost_breakdown_lists_line_items(buying, values):
    result = buying.calculate(values)
    df = cost_breakdown(result)
    assert list(df["Category"]) == list(result.line_items)
    assert df["Amount"].tolist() == list(result.line_items.values())


def test_yearly_comparison_cumulates(buying, renting, values):
    b, r = buying.calculate(values), renting.calculate(values)
    df = yearly_comparison(b, r)
    assert len(df) == values.years_to_stay
    assert df["Buy_Cumulative"].iloc[-1] == pytest.approx(b.total_cost)
    assert df["Rent_Cumulative"].iloc[-1] == pytest.approx(r.total_cost)


def test_equity_vs_portfolio(values):
    df = equity_vs_portfolio(values)
    assert list(df["Year"]) == list(range(1, values.years_to_stay + 1))
    assert np.all(np.diff(df["Home_Equity"]) > 0)


def test_portfolio_without_reinvesting(values):
    v = with_parameter(values, "will_reinvest", False)
    df = equity_vs_portfolio(v)
    assert df["Portfolio"].iloc[0] == pytest.approx(purchase_capital(v) * (1 + v.investment_return))
    assert (df["Portfolio"] <= equity_vs_portfolio(values)["Portfolio"]).all()


def test_sensitivity_table(values):
    df = sensitivity_table(values, "US")
    assert len(df) == len(SENSITIVITY_PARAMETERS)
    assert list(df.columns) == ["Parameter", "Key", "Low", "High", "Low_Impact", "High_Impact"]
    row = df.set_index("Key").loc["years_to_stay"]
    assert row["Low"] == values.years_to_stay - 2


def test_float_ranges_keep_one_start_per_segment():
    xs = sweep_values(-0.05, 0.1, 0.001)
    assert len(xs) == segment_count(-0.05, 0.1, 0.001)
    assert xs[-1] < 0.1
