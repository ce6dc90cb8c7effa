import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from analytics.analysis import classify_outcome, find_intersection_point, probe_value, with_parameter
from finance.factory import create_buying_calculator, create_renting_calculator
from finance.mortgage import calculate_amortization_schedule, monthly_payment
from finance.opportunity import purchase_capital
from finance.validation import validate_values
from models import CalculatorValues, CostCalculationResult, InvalidArgument, PriceOutcome


@dataclass
class SegmentValues:
    values: np.ndarray
    renting_is_better: np.ndarray
    outcome: PriceOutcome
    intersection_index: Optional[int] = None

    def __len__(self) -> int:
        return len(self.values)


def segment_count(min_value: float, max_value: float, step: float) -> int:
    if not step > 0:
        raise InvalidArgument("step must be positive.")
    # Rounded first so float noise in the quotient does not add an empty segment
    return math.ceil(round(abs(max_value - min_value) / step, 9))


# --- Flame graph segments ---


def build_segment_values(
    values: CalculatorValues,
    parameter: str,
    min_value: float,
    max_value: float,
    step: float,
    buying_calculator,
    renting_calculator,
) -> SegmentValues:
    """
    Which option wins in each segment of a sweep of ``parameter``.

    Uniform outcomes cost two evaluations per model; crossings add a
    bisection of O(log segments) evaluations, never one per segment.
    """
    segments = segment_count(min_value, max_value, step)
    outcome = classify_outcome(values, parameter, min_value, max_value, buying_calculator, renting_calculator)

    indices = np.arange(segments)
    xs = sweep_values(min_value, max_value, step)

    index = None
    if outcome is PriceOutcome.RENT:
        flags = np.ones(segments, dtype=bool)
    elif outcome is PriceOutcome.BUY:
        flags = np.zeros(segments, dtype=bool)
    else:
        index = find_intersection_point(
            values, parameter, min_value, max_value, segments, step, buying_calculator, renting_calculator
        )
        if outcome is PriceOutcome.START_RENT_END_BUY:
            flags = indices < index
        else:
            flags = indices >= index

    return SegmentValues(values=xs, renting_is_better=flags, outcome=outcome, intersection_index=index)


def segments_dataframe(segment_values: SegmentValues, max_value: float) -> pd.DataFrame:
    """One row per segment with its start and end, for rendering as rectangles."""
    starts = segment_values.values
    ends = np.append(starts[1:], max_value)
    return pd.DataFrame(
        {
            "start": starts,
            "end": ends,
            "winner": np.where(segment_values.renting_is_better, "Rent", "Buy"),
        }
    )


# --- Cost breakdowns ---


def cost_breakdown(result: CostCalculationResult) -> pd.DataFrame:
    """Return DataFrame with categories and amounts for the itemized table."""
    items = result.line_items
    return pd.DataFrame({"Category": list(items.keys()), "Amount": list(items.values())})


def yearly_comparison(buying: CostCalculationResult, renting: CostCalculationResult) -> pd.DataFrame:
    years = range(1, len(buying.yearly_breakdown) + 1)
    df = pd.DataFrame(
        {"Year": list(years), "Buy": list(buying.yearly_breakdown), "Rent": list(renting.yearly_breakdown)}
    )
    df["Buy_Cumulative"] = df["Buy"].cumsum()
    df["Rent_Cumulative"] = df["Rent"].cumsum()
    return df


# --- Wealth paths ---


def equity_vs_portfolio(values: CalculatorValues) -> pd.DataFrame:
    """
    Home equity vs. the renter's investment portfolio, year by year.

    Home equity = home value - remaining loan balance.
    Portfolio starts with the down payment and closing costs, grows at
    ``investment_return`` and, when ``will_reinvest`` is set, receives each
    year's surplus of owning costs over rent.
    """
    validate_values(values)
    schedule = calculate_amortization_schedule(
        values.loan_amount, values.mortgage_rate, values.mortgage_term, values.extra_payments
    )
    payment = monthly_payment(values.loan_amount, values.mortgage_rate, values.mortgage_term)
    portfolio = purchase_capital(values)

    years, equity, portfolios = [], [], []
    for year in range(1, int(values.years_to_stay) + 1):
        home_value = values.home_price * (1 + values.home_price_growth) ** year
        paid_months = min(year * 12, len(schedule))
        balance = schedule[paid_months - 1].remaining_balance if paid_months else 0.0
        # Payments stop once the loan is repaid
        months_paying = max(0, min(12, len(schedule) - (year - 1) * 12))

        rent_cost = values.monthly_rent * 12 * (1 + values.rent_growth) ** (year - 1)
        buy_cost = (payment + values.extra_payments) * months_paying + home_value * (
            values.property_tax_rate + values.home_insurance_rate + values.maintenance_rate
        )
        surplus = max(0.0, buy_cost - rent_cost) if values.will_reinvest else 0.0
        portfolio = portfolio * (1 + values.investment_return) + surplus

        years.append(year)
        equity.append(home_value - balance)
        portfolios.append(portfolio)

    return pd.DataFrame({"Year": years, "Home_Equity": equity, "Portfolio": portfolios})


SENSITIVITY_PARAMETERS = (
    ("mortgage_rate", "Mortgage Rate", 0.01),
    ("home_price_growth", "Home Price Growth", 0.01),
    ("investment_return", "Investment Return", 0.01),
    ("years_to_stay", "Years to Stay", 2),
)


def sensitivity_table(values: CalculatorValues, country) -> pd.DataFrame:
    """
    How (buy - rent) moves when key inputs are shifted down and up.

    Positive impact favors buying, negative favors renting.
    """
    buying = create_buying_calculator(country)
    renting = create_renting_calculator(country)

    def diff(v):
        return buying.get_total_cost(v) - renting.get_total_cost(v)

    base_diff = diff(values)
    rows = []
    for key, label, delta in SENSITIVITY_PARAMETERS:
        current = getattr(values, key)
        low = current - delta
        if key == "years_to_stay":
            low = max(1, low)
        elif key == "mortgage_rate":
            low = max(0.0, low)
        high = current + delta
        rows.append(
            {
                "Parameter": label,
                "Key": key,
                "Low": low,
                "High": high,
                "Low_Impact": base_diff - diff(with_parameter(values, key, low)),
                "High_Impact": base_diff - diff(with_parameter(values, key, high)),
            }
        )
    return pd.DataFrame(rows)


def sweep_values(min_value: float, max_value: float, step: float) -> np.ndarray:
    """Segment start values, the same grid the crossover search probes."""
    segments = segment_count(min_value, max_value, step)
    return np.array([probe_value(min_value, max_value, step, i) for i in range(segments)])
