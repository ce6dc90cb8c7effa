import math

from models import CalculatorValues, InvalidArgument

NON_NEGATIVE_FIELDS = (
    "monthly_rent",
    "mortgage_rate",
    "pmi",
    "property_tax_rate",
    "marginal_tax_rate",
    "other_deductions",
    "buying_costs",
    "selling_costs",
    "maintenance_rate",
    "home_insurance_rate",
    "extra_payments",
    "common_charge_per_month",
    "common_charge_deduction_rate",
    "security_deposit",
    "broker_fee",
    "monthly_renters_insurance",
)

# Shares of a price, balance or rent: at most 100%
FRACTION_FIELDS = ("buying_costs", "selling_costs", "broker_fee", "pmi", "common_charge_deduction_rate")

# Growth and return rates may be negative (deflation, depreciation) but not -100% or worse.
GROWTH_FIELDS = ("home_price_growth", "rent_growth", "investment_return", "inflation_rate")


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidArgument(message)


def require_finite(name: str, value: float) -> None:
    _require(isinstance(value, (int, float)) and math.isfinite(value), f"{name} must be a finite number, got {value!r}.")


def require_non_negative(name: str, value: float) -> None:
    require_finite(name, value)
    _require(value >= 0, f"{name} cannot be negative.")


def require_positive_whole(name: str, value: float) -> None:
    require_finite(name, value)
    _require(value > 0, f"{name} must be positive.")
    _require(float(value).is_integer(), f"{name} must be a whole number of years.")


def validate_loan(loan_amount: float, annual_rate: float, term_years: float, extra_monthly_payment: float) -> None:
    require_non_negative("Loan amount", loan_amount)
    require_non_negative("Interest rate", annual_rate)
    require_positive_whole("Loan term", term_years)
    require_non_negative("Extra monthly payment", extra_monthly_payment)


def validate_values(values: CalculatorValues) -> None:
    """Reject any snapshot a projection cannot run on, before any loop starts."""
    require_non_negative("home_price", values.home_price)
    require_positive_whole("years_to_stay", values.years_to_stay)
    require_positive_whole("mortgage_term", values.mortgage_term)
    require_finite("down_payment", values.down_payment)
    _require(0 <= values.down_payment <= 1, "down_payment must be between 0 and 1.")
    for name in NON_NEGATIVE_FIELDS:
        require_non_negative(name, getattr(values, name))
    for name in FRACTION_FIELDS:
        _require(getattr(values, name) <= 1, f"{name} cannot exceed 100%.")
    for name in GROWTH_FIELDS:
        value = getattr(values, name)
        require_finite(name, value)
        _require(value > -1, f"{name} must be greater than -100%.")
    _require(values.marginal_tax_rate < 1, "marginal_tax_rate must be below 100%.")
