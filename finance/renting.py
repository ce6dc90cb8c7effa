from typing import Optional

from config import CountryRules
from finance.opportunity import investment_growth, purchase_capital
from finance.validation import validate_values
from models import CalculatorValues, CostCalculationResult, InvalidArgument


class RentingCostsCalculator:
    """
    Total cost of renting over ``years_to_stay`` years.

    total = security deposit + broker fee
          + rent and renter's insurance
          + opportunity cost of the deposit and broker fee
          - deposit returned at the end
          - growth on the down payment and closing costs the renter keeps invested
    """

    def __init__(self, rules: CountryRules, values: Optional[CalculatorValues] = None):
        self.rules = rules
        self.values = values

    def get_total_cost(self, values: Optional[CalculatorValues] = None) -> float:
        return self.calculate(values).total_cost

    def security_deposit(self, values: CalculatorValues) -> float:
        months = values.security_deposit
        legal_max = self.rules.renting.max_security_deposit
        if legal_max is not None:
            months = min(months, legal_max)
        return values.monthly_rent * months

    def calculate(self, values: Optional[CalculatorValues] = None) -> CostCalculationResult:
        v = values if values is not None else self.values
        if v is None:
            raise InvalidArgument("No calculator values given.")
        validate_values(v)

        years = int(v.years_to_stay)
        deposit = self.security_deposit(v)
        broker_fee = v.broker_fee * v.monthly_rent * 12
        initial_cost = deposit + broker_fee

        rent_total = 0.0
        insurance_total = 0.0
        yearly_costs = []
        for year in range(1, years + 1):
            annual_rent = v.monthly_rent * 12 * (1 + v.rent_growth) ** (year - 1)
            annual_insurance = v.monthly_renters_insurance * 12 * (1 + v.inflation_rate) ** (year - 1)
            rent_total += annual_rent
            insurance_total += annual_insurance
            yearly_costs.append(annual_rent + annual_insurance)
        recurring_cost = rent_total + insurance_total

        upfront_opportunity = investment_growth(initial_cost, v.investment_return, years)
        growth_credit = investment_growth(purchase_capital(v), v.investment_return, years)
        opportunity_cost = upfront_opportunity - growth_credit
        net_proceeds = deposit

        total_cost = initial_cost + recurring_cost + opportunity_cost - net_proceeds

        yearly_opportunity = opportunity_cost / years
        yearly_breakdown = [cost + yearly_opportunity for cost in yearly_costs]
        yearly_breakdown[0] += initial_cost
        yearly_breakdown[-1] -= net_proceeds

        line_items = {
            "security_deposit": deposit,
            "broker_fee": broker_fee,
            "rent": rent_total,
            "renters_insurance": insurance_total,
            "upfront_opportunity_cost": upfront_opportunity,
            "investment_growth_credit": growth_credit,
            "deposit_returned": deposit,
        }

        return CostCalculationResult(
            initial_cost=initial_cost,
            recurring_cost=recurring_cost,
            tax_savings=0.0,
            opportunity_cost=opportunity_cost,
            net_proceeds=net_proceeds,
            total_cost=total_cost,
            yearly_breakdown=tuple(yearly_breakdown),
            line_items=line_items,
        )
