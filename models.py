from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class InvalidArgument(ValueError):
    """Raised when an input is outside the domain a calculation accepts."""


@dataclass(frozen=True)
class CalculatorValues:
    # Basic inputs
    home_price: float
    monthly_rent: float
    mortgage_rate: float  # annual, decimal
    mortgage_term: int  # years
    down_payment: float  # fraction of price
    years_to_stay: int
    pmi: float = 0.0  # annual, fraction of outstanding balance

    # Future projections
    home_price_growth: float = 0.03
    rent_growth: float = 0.03
    investment_return: float = 0.045
    inflation_rate: float = 0.03

    # Tax details
    is_joint_return: bool = True
    property_tax_rate: float = 0.0135
    marginal_tax_rate: float = 0.2
    other_deductions: float = 0.0
    tax_cuts_expire: bool = True

    # Closing costs
    buying_costs: float = 0.04  # fraction of price
    selling_costs: float = 0.06  # fraction of sale price

    # Maintenance and fees
    maintenance_rate: float = 0.01
    home_insurance_rate: float = 0.0055
    extra_payments: float = 0.0  # monthly extra principal
    common_charge_per_month: float = 0.0
    common_charge_deduction_rate: float = 0.0

    # Renting costs
    security_deposit: float = 1.0  # months of rent
    broker_fee: float = 0.0  # fraction of annual rent
    monthly_renters_insurance: float = 0.0

    # Country-specific toggles
    is_new_build: bool = False
    is_first_time_buyer: bool = False
    is_primary_residence: bool = True
    will_reinvest: bool = True

    @property
    def down_payment_amount(self) -> float:
        return self.home_price * self.down_payment

    @property
    def loan_amount(self) -> float:
        return self.home_price - self.down_payment_amount


@dataclass(frozen=True)
class AmortizationRow:
    payment_number: int
    payment_amount: float
    principal_payment: float
    interest_payment: float
    remaining_balance: float
    cumulative_interest: float
    cumulative_principal: float


@dataclass(frozen=True)
class CostCalculationResult:
    initial_cost: float
    recurring_cost: float
    tax_savings: float
    opportunity_cost: float
    net_proceeds: float  # credit at the end of the horizon
    total_cost: float
    yearly_breakdown: Tuple[float, ...] = ()
    line_items: Dict[str, float] = field(default_factory=dict, compare=False, hash=False)

    @property
    def years(self) -> int:
        return len(self.yearly_breakdown)


class PriceOutcome(str, Enum):
    RENT = "rent"
    BUY = "buy"
    START_RENT_END_BUY = "start-rent-end-buy"
    START_BUY_END_RENT = "start-buy-end-rent"

    @property
    def is_crossing(self) -> bool:
        return self in (PriceOutcome.START_RENT_END_BUY, PriceOutcome.START_BUY_END_RENT)

    @classmethod
    def from_endpoints(cls, renting_better_at_start: bool, renting_better_at_end: bool) -> "PriceOutcome":
        if renting_better_at_start and renting_better_at_end:
            return cls.RENT
        if not renting_better_at_start and not renting_better_at_end:
            return cls.BUY
        if renting_better_at_start:
            return cls.START_RENT_END_BUY
        return cls.START_BUY_END_RENT
