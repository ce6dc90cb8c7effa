import logging
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from models import CalculatorValues, InvalidArgument

logger = logging.getLogger(__name__)


class Country(str, Enum):
    US = "US"
    CA = "CA"
    MX = "MX"


@dataclass(frozen=True)
class InputRange:
    min: float
    max: float
    step: float

    def clamp(self, value: float) -> float:
        return min(max(value, self.min), self.max)


# (single, joint) pairs are indexed by is_joint_return
FilingPair = Tuple[float, float]


@dataclass(frozen=True)
class TaxRules:
    mortgage_interest_deductible: bool
    property_tax_deductible: bool
    itemizes_against_standard: bool
    standard_deduction: FilingPair  # while the 2017 tax cuts are in force
    standard_deduction_expired: FilingPair  # pre-2018 rules
    loan_cap: FilingPair = (math.inf, math.inf)
    loan_cap_expired: FilingPair = (math.inf, math.inf)
    salt_cap: Optional[float] = None  # only while the tax cuts are in force
    max_deductible_interest: Optional[float] = None
    capital_gains_rate: float = 0.0
    capital_gains_exclusion: FilingPair = (0.0, 0.0)
    exclusion_min_years: int = 0


@dataclass(frozen=True)
class MortgageRules:
    typical_term: int
    available_terms: Tuple[int, ...]
    min_down_payment: float
    typical_down_payment: float
    has_mortgage_insurance: bool
    mortgage_insurance_threshold: float  # LTV above which PMI is charged


@dataclass(frozen=True)
class RentingRules:
    typical_security_deposit: float  # months of rent
    brokers_common: bool
    typical_broker_fee: float  # fraction of annual rent
    max_security_deposit: Optional[float] = None  # months of rent


@dataclass(frozen=True)
class CountryDefaults:
    home_price: float
    monthly_rent: float
    mortgage_rate: float
    extra_payments: float
    monthly_renters_insurance: float
    marginal_tax_rate: float
    property_tax_rate: float
    home_insurance_rate: float
    maintenance_rate: float
    inflation_rate: float
    home_price_growth: float
    investment_return: float
    buying_costs: float
    selling_costs: float
    pmi: float


@dataclass(frozen=True)
class CountryRules:
    country: Country
    name: str
    currency: str
    supported: bool
    tax: TaxRules
    mortgage: MortgageRules
    renting: RentingRules
    defaults: CountryDefaults


# ------------------------- Default values -------------------------

INITIAL_VALUES = CalculatorValues(
    home_price=500000.0,
    monthly_rent=2000.0,
    mortgage_rate=0.0725,
    mortgage_term=30,
    down_payment=0.2,
    years_to_stay=10,
    pmi=0.0,
    home_price_growth=0.03,
    rent_growth=0.03,
    investment_return=0.045,
    inflation_rate=0.03,
    is_joint_return=True,
    property_tax_rate=0.0135,
    marginal_tax_rate=0.2,
    other_deductions=0.0,
    tax_cuts_expire=True,
    buying_costs=0.04,
    selling_costs=0.06,
    maintenance_rate=0.01,
    home_insurance_rate=0.0055,
    extra_payments=100.0,
    security_deposit=1.0,
    broker_fee=0.0,
    monthly_renters_insurance=100.0,
    is_new_build=False,
    is_first_time_buyer=False,
    is_primary_residence=True,
    will_reinvest=True,
)

# ------------------------- Country rules -------------------------

US_RULES = CountryRules(
    country=Country.US,
    name="United States",
    currency="USD",
    supported=True,
    tax=TaxRules(
        mortgage_interest_deductible=True,
        property_tax_deductible=True,
        itemizes_against_standard=True,
        standard_deduction=(14600.0, 29200.0),
        standard_deduction_expired=(8126.0, 16253.0),
        loan_cap=(375000.0, 750000.0),
        loan_cap_expired=(500000.0, 1000000.0),
        salt_cap=10000.0,
        capital_gains_rate=0.15,
        capital_gains_exclusion=(250000.0, 500000.0),
        exclusion_min_years=2,
    ),
    mortgage=MortgageRules(
        typical_term=30,
        available_terms=(15, 20, 30),
        min_down_payment=0.03,
        typical_down_payment=0.20,
        has_mortgage_insurance=True,
        mortgage_insurance_threshold=0.80,
    ),
    renting=RentingRules(
        typical_security_deposit=1.0,
        brokers_common=True,
        typical_broker_fee=0.0833,  # about one month
    ),
    defaults=CountryDefaults(
        home_price=500000.0,
        monthly_rent=2000.0,
        mortgage_rate=0.0725,
        extra_payments=100.0,
        monthly_renters_insurance=100.0,
        marginal_tax_rate=0.22,
        property_tax_rate=0.012,
        home_insurance_rate=0.0035,
        maintenance_rate=0.01,
        inflation_rate=0.025,
        home_price_growth=0.03,
        investment_return=0.07,
        buying_costs=0.012,
        selling_costs=0.05,
        pmi=0.005,
    ),
)

CA_RULES = CountryRules(
    country=Country.CA,
    name="Canada",
    currency="CAD",
    supported=False,
    tax=TaxRules(
        mortgage_interest_deductible=False,
        property_tax_deductible=False,
        itemizes_against_standard=False,
        standard_deduction=(15705.0, 15705.0),
        standard_deduction_expired=(15705.0, 15705.0),
        capital_gains_rate=0.25,
        capital_gains_exclusion=(math.inf, math.inf),  # principal residence
    ),
    mortgage=MortgageRules(
        typical_term=25,
        available_terms=(15, 20, 25, 30),
        min_down_payment=0.05,
        typical_down_payment=0.20,
        has_mortgage_insurance=True,
        mortgage_insurance_threshold=0.80,
    ),
    renting=RentingRules(
        typical_security_deposit=0.5,
        brokers_common=False,
        typical_broker_fee=0.0,
        max_security_deposit=1.0,
    ),
    defaults=CountryDefaults(
        home_price=700000.0,
        monthly_rent=2200.0,
        mortgage_rate=0.055,
        extra_payments=100.0,
        monthly_renters_insurance=50.0,
        marginal_tax_rate=0.29,
        property_tax_rate=0.01,
        home_insurance_rate=0.003,
        maintenance_rate=0.01,
        inflation_rate=0.02,
        home_price_growth=0.04,
        investment_return=0.06,
        buying_costs=0.021,
        selling_costs=0.05,
        pmi=0.005,
    ),
)

MX_RULES = CountryRules(
    country=Country.MX,
    name="Mexico",
    currency="MXN",
    supported=False,
    tax=TaxRules(
        mortgage_interest_deductible=True,
        property_tax_deductible=False,
        itemizes_against_standard=False,
        standard_deduction=(0.0, 0.0),
        standard_deduction_expired=(0.0, 0.0),
        max_deductible_interest=3500000.0,
        capital_gains_rate=0.35,  # ISR
        capital_gains_exclusion=(700000.0, 700000.0),
    ),
    mortgage=MortgageRules(
        typical_term=20,
        available_terms=(10, 15, 20),
        min_down_payment=0.10,
        typical_down_payment=0.20,
        has_mortgage_insurance=True,
        mortgage_insurance_threshold=0.80,
    ),
    renting=RentingRules(
        typical_security_deposit=1.0,
        brokers_common=True,
        typical_broker_fee=0.0833,
        max_security_deposit=1.0,
    ),
    defaults=CountryDefaults(
        home_price=4000000.0,
        monthly_rent=15000.0,
        mortgage_rate=0.12,
        extra_payments=500.0,
        monthly_renters_insurance=200.0,
        marginal_tax_rate=0.30,
        property_tax_rate=0.001,  # predial
        home_insurance_rate=0.005,
        maintenance_rate=0.015,
        inflation_rate=0.04,
        home_price_growth=0.05,
        investment_return=0.08,
        buying_costs=0.07,
        selling_costs=0.05,
        pmi=0.005,
    ),
)

COUNTRY_RULES: Mapping[Country, CountryRules] = MappingProxyType(
    {Country.US: US_RULES, Country.CA: CA_RULES, Country.MX: MX_RULES}
)

# ------------------------- Input ranges -------------------------


def _ranges(**ranges: Tuple[float, float, float]) -> Mapping[str, InputRange]:
    return MappingProxyType({name: InputRange(*bounds) for name, bounds in ranges.items()})


INPUT_RANGES: Mapping[Country, Mapping[str, InputRange]] = MappingProxyType(
    {
        Country.US: _ranges(
            home_price=(100000, 2000000, 10000),
            monthly_rent=(500, 10000, 100),
            mortgage_rate=(0, 0.15, 0.001),
            down_payment=(0, 1, 0.01),
            years_to_stay=(1, 40, 1),
            mortgage_term=(1, 30, 1),
            pmi=(0, 0.1, 0.01),
            home_price_growth=(-0.05, 0.15, 0.001),
            rent_growth=(-0.05, 0.15, 0.01),
            investment_return=(-0.2, 0.2, 0.01),
            inflation_rate=(-0.05, 0.1, 0.001),
            property_tax_rate=(0, 0.04, 0.001),
            marginal_tax_rate=(0, 0.5, 0.01),
            other_deductions=(0, 50000, 1000),
            buying_costs=(0, 0.06, 0.001),
            selling_costs=(0, 0.1, 0.001),
            maintenance_rate=(0, 0.05, 0.001),
            home_insurance_rate=(0, 0.015, 0.001),
            extra_payments=(0, 2000, 50),
            security_deposit=(0, 3, 1),
            broker_fee=(0, 0.15, 0.01),
            monthly_renters_insurance=(0, 100, 5),
            common_charge_deduction_rate=(0, 0.1, 0.01),
            common_charge_per_month=(0, 1000, 10),
        ),
        Country.MX: _ranges(
            home_price=(500000, 20000000, 100000),
            monthly_rent=(3000, 50000, 500),
            mortgage_rate=(0, 0.2, 0.001),
            down_payment=(0.1, 1, 0.01),
            years_to_stay=(1, 40, 1),
            mortgage_term=(1, 20, 1),
            pmi=(0, 0.1, 0.01),
            home_price_growth=(-0.05, 0.2, 0.001),
            rent_growth=(-0.05, 0.2, 0.01),
            investment_return=(-0.2, 0.25, 0.01),
            inflation_rate=(0, 0.15, 0.001),
            property_tax_rate=(0, 0.03, 0.001),
            marginal_tax_rate=(0, 0.35, 0.01),
            other_deductions=(0, 500000, 5000),
            buying_costs=(0, 0.08, 0.001),
            selling_costs=(0, 0.1, 0.001),
            maintenance_rate=(0, 0.03, 0.001),
            home_insurance_rate=(0, 0.02, 0.001),
            extra_payments=(0, 10000, 250),
            security_deposit=(1, 2, 1),
            broker_fee=(0, 0.1, 0.01),
            monthly_renters_insurance=(0, 500, 25),
            common_charge_deduction_rate=(0, 0.1, 0.01),
            common_charge_per_month=(0, 1000, 10),
        ),
        Country.CA: _ranges(
            home_price=(200000, 3000000, 10000),
            monthly_rent=(800, 15000, 100),
            mortgage_rate=(0, 0.12, 0.001),
            down_payment=(0.05, 1, 0.01),
            years_to_stay=(1, 40, 1),
            mortgage_term=(1, 30, 1),
            pmi=(0, 0.04, 0.001),
            home_price_growth=(-0.05, 0.15, 0.001),
            rent_growth=(-0.05, 0.15, 0.01),
            investment_return=(-0.2, 0.2, 0.01),
            inflation_rate=(-0.05, 0.1, 0.001),
            property_tax_rate=(0, 0.025, 0.001),
            marginal_tax_rate=(0, 0.5, 0.01),
            other_deductions=(0, 75000, 1000),
            buying_costs=(0, 0.05, 0.001),
            selling_costs=(0, 0.1, 0.001),
            maintenance_rate=(0, 0.02, 0.001),
            home_insurance_rate=(0, 0.015, 0.001),
            extra_payments=(0, 2500, 50),
            security_deposit=(0, 2, 1),
            broker_fee=(0, 0.1, 0.01),
            monthly_renters_insurance=(0, 150, 5),
            common_charge_deduction_rate=(0, 0.1, 0.01),
            common_charge_per_month=(0, 1000, 10),
        ),
    }
)

# Whole-number fields keep their integer type after clamping
INTEGER_FIELDS = frozenset({"mortgage_term", "years_to_stay"})


def get_country(country) -> Country:
    """Resolve a Country or its two-letter code."""
    if isinstance(country, Country):
        return country
    try:
        return Country(str(country).upper())
    except ValueError:
        raise InvalidArgument(f"Unsupported country: {country!r}") from None


def get_country_rules(country) -> CountryRules:
    return COUNTRY_RULES[get_country(country)]


def get_input_range(country, parameter: str) -> InputRange:
    return INPUT_RANGES[get_country(country)][parameter]


def clamp_values(country, values: CalculatorValues) -> CalculatorValues:
    """Clamp every ranged field into the country's bounds, as the UI does before computing."""
    ranges = INPUT_RANGES[get_country(country)]
    changes = {}
    for name, bounds in ranges.items():
        current = getattr(values, name)
        clamped = bounds.clamp(current)
        if clamped != current:
            logger.info("Clamping %s from %s to %s", name, current, clamped)
            changes[name] = int(clamped) if name in INTEGER_FIELDS else clamped
    if not changes:
        return values
    return CalculatorValues(**{**values.__dict__, **changes})
