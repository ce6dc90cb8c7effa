import math

import pytest

from analytics.analysis import with_parameter
from config import US_RULES
from finance.buying import BuyingCostsCalculator
from models import InvalidArgument


def test_defaults_give_finite_positive_total(buying, values):
    result = buying.calculate(values)
    assert math.isfinite(result.total_cost)
    assert result.total_cost > 0
    assert result.years == values.years_to_stay


def test_calculation_is_deterministic(buying, values):
    assert buying.calculate(values) == buying.calculate(values)


def test_total_is_sum_of_components(buying, values):
    r = buying.calculate(values)
    expected = r.initial_cost + r.recurring_cost - r.tax_savings + r.opportunity_cost - r.net_proceeds
    assert r.total_cost == pytest.approx(expected)


def test_yearly_breakdown_sums_to_total(buying, values):
    r = buying.calculate(values)
    assert sum(r.yearly_breakdown) == pytest.approx(r.total_cost)


def test_snapshot_given_at_construction_is_used(values):
    calculator = BuyingCostsCalculator(US_RULES, values)
    assert calculator.get_total_cost() == pytest.approx(BuyingCostsCalculator(US_RULES).get_total_cost(values))


def test_no_values_is_an_error():
    with pytest.raises(InvalidArgument):
        BuyingCostsCalculator(US_RULES).calculate()


def test_cost_rises_with_home_price(buying, values):
    totals = [buying.get_total_cost(with_parameter(values, "home_price", p)) for p in range(200_000, 1_000_001, 100_000)]
    assert totals == sorted(totals)


def test_pmi_charged_only_with_small_down_payment(buying, values):
    low = buying.calculate(with_parameter(with_parameter(values, "down_payment", 0.05), "pmi", 0.005))
    high = buying.calculate(with_parameter(with_parameter(values, "down_payment", 0.25), "pmi", 0.005))
    assert low.line_items["pmi"] > 0
    assert high.line_items["pmi"] == 0.0


def test_pmi_stops_once_equity_passes_threshold(buying, values):
    v = with_parameter(with_parameter(values, "down_payment", 0.15), "pmi", 0.005)
    v = with_parameter(v, "home_price_growth", 0.15)
    r = buying.calculate(v)
    # Appreciation drops the loan under 80% of value after the first year
    assert 0 < r.line_items["pmi"] <= v.pmi * v.loan_amount


def test_cash_purchase_has_no_interest(buying, values):
    r = buying.calculate(with_parameter(values, "down_payment", 1.0))
    assert r.line_items["interest"] == 0.0
    assert r.line_items["remaining_balance"] == 0.0
    assert math.isfinite(r.total_cost)


def test_stay_longer_than_loan_term(buying, values):
    v = with_parameter(with_parameter(values, "years_to_stay", 20), "mortgage_term", 15)
    r = buying.calculate(v)
    assert r.line_items["remaining_balance"] == 0.0
    assert r.line_items["principal"] == pytest.approx(v.loan_amount)


def test_common_charges_are_counted(buying, values):
    base = buying.calculate(values)
    with_hoa = buying.calculate(with_parameter(values, "common_charge_per_month", 300))
    assert with_hoa.line_items["common_charges"] > 300 * 12 * values.years_to_stay
    assert with_hoa.total_cost > base.total_cost


def test_opportunity_cost_is_growth_on_cash_invested(buying, values):
    r = buying.calculate(values)
    capital = values.down_payment_amount + values.home_price * values.buying_costs
    growth = capital * ((1 + values.investment_return) ** values.years_to_stay - 1)
    assert r.opportunity_cost == pytest.approx(growth)


@pytest.mark.parametrize(
    "field, bad",
    [
        ("years_to_stay", 0),
        ("years_to_stay", 2.5),
        ("down_payment", 1.5),
        ("home_price", -1),
        ("home_price_growth", -1.0),
        ("monthly_rent", float("nan")),
        ("marginal_tax_rate", 1.0),
        ("selling_costs", 1.5),
        ("buying_costs", 1.2),
        ("pmi", 2.0),
        ("common_charge_deduction_rate", 1.1),
    ],
)
def test_rejects_invalid_values(buying, values, field, bad):
    with pytest.raises(InvalidArgument):
        buying.calculate(with_parameter(values, field, bad))
