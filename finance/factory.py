"""Country-aware construction of the buying and renting cost models."""

import logging
from typing import List, Optional

from config import INITIAL_VALUES, Country, get_country_rules
from finance.buying import BuyingCostsCalculator
from finance.renting import RentingCostsCalculator
from models import CalculatorValues

logger = logging.getLogger(__name__)


def create_buying_calculator(country, values: Optional[CalculatorValues] = None) -> BuyingCostsCalculator:
    rules = get_country_rules(country)
    logger.debug("Creating buying calculator for %s", rules.country.value)
    return BuyingCostsCalculator(rules, values)


def create_renting_calculator(country, values: Optional[CalculatorValues] = None) -> RentingCostsCalculator:
    rules = get_country_rules(country)
    logger.debug("Creating renting calculator for %s", rules.country.value)
    return RentingCostsCalculator(rules, values)


def country_defaults(country) -> dict:
    """Field values a country overrides on top of the base defaults."""
    rules = get_country_rules(country)
    d = rules.defaults
    return {
        "home_price": d.home_price,
        "monthly_rent": d.monthly_rent,
        "mortgage_rate": d.mortgage_rate,
        "extra_payments": d.extra_payments,
        "monthly_renters_insurance": d.monthly_renters_insurance,
        "marginal_tax_rate": d.marginal_tax_rate,
        "property_tax_rate": d.property_tax_rate,
        "home_insurance_rate": d.home_insurance_rate,
        "maintenance_rate": d.maintenance_rate,
        "inflation_rate": d.inflation_rate,
        "home_price_growth": d.home_price_growth,
        "investment_return": d.investment_return,
        "mortgage_term": rules.mortgage.typical_term,
        "down_payment": rules.mortgage.typical_down_payment,
        "buying_costs": d.buying_costs,
        "selling_costs": d.selling_costs,
        "security_deposit": rules.renting.typical_security_deposit,
        "broker_fee": rules.renting.typical_broker_fee if rules.renting.brokers_common else 0.0,
        "pmi": d.pmi if rules.mortgage.has_mortgage_insurance else 0.0,
    }


def apply_country_defaults(country, **overrides) -> CalculatorValues:
    """Base defaults, then the country's defaults, then explicit overrides."""
    return CalculatorValues(**{**INITIAL_VALUES.__dict__, **country_defaults(country), **overrides})


def check_values(country, values: CalculatorValues) -> List[str]:
    """Warnings for inputs that are legal but unusual in the given country."""
    rules = get_country_rules(country)
    warnings = []
    if values.down_payment < rules.mortgage.min_down_payment:
        warnings.append(
            f"Down payment ({values.down_payment * 100:.1f}%) is below typical minimum "
            f"({rules.mortgage.min_down_payment * 100:.1f}%) for {rules.name}"
        )
    if values.mortgage_term not in rules.mortgage.available_terms:
        terms = ", ".join(str(t) for t in rules.mortgage.available_terms)
        warnings.append(f"{values.mortgage_term}-year mortgage is uncommon in {rules.name}. Typical terms: {terms} years")
    for message in warnings:
        logger.warning("%s", message)
    return warnings


def supported_countries() -> List[Country]:
    return [country for country in Country if get_country_rules(country).supported]
