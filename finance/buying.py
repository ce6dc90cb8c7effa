from typing import Optional

from config import CountryRules
from finance.mortgage import calculate_amortization_schedule
from finance.opportunity import closing_costs, investment_growth
from finance.taxes import annual_deduction_benefits, capital_gains_tax
from finance.validation import validate_values
from models import CalculatorValues, CostCalculationResult, InvalidArgument


class BuyingCostsCalculator:
    """
    Total cost of owning over ``years_to_stay`` years.

    total = down payment + closing costs
          + recurring costs (P&I, PMI, property tax, insurance, maintenance, common charges)
          - tax savings
          + opportunity cost of the down payment and closing costs
          - net sale proceeds

    The calculator holds only the country's rules and an optional default
    snapshot; every call computes a fresh result from the values it is given.
    """

    def __init__(self, rules: CountryRules, values: Optional[CalculatorValues] = None):
        self.rules = rules
        self.values = values

    def get_total_cost(self, values: Optional[CalculatorValues] = None) -> float:
        return self.calculate(values).total_cost

    def calculate(self, values: Optional[CalculatorValues] = None) -> CostCalculationResult:
        v = values if values is not None else self.values
        if v is None:
            raise InvalidArgument("No calculator values given.")
        validate_values(v)

        years = int(v.years_to_stay)
        down_payment = v.down_payment_amount
        closing = closing_costs(v)
        initial_cost = down_payment + closing

        schedule = calculate_amortization_schedule(
            v.loan_amount, v.mortgage_rate, v.mortgage_term, v.extra_payments
        )

        growth = 1 + v.home_price_growth
        inflation = 1 + v.inflation_rate
        balance = v.loan_amount
        totals = dict.fromkeys(
            ("principal", "interest", "pmi", "property_tax", "home_insurance", "maintenance", "common_charges"),
            0.0,
        )
        yearly_costs = []
        tax_savings = 0.0

        for year in range(1, years + 1):
            # Home value and fees are re-based once a year
            home_value = v.home_price * growth ** (year - 1)
            inflation_factor = inflation ** (year - 1)
            balance_at_start = balance

            interest = principal = pmi = 0.0
            for month in range((year - 1) * 12, year * 12):
                if month >= len(schedule):
                    break
                if self._charges_pmi(balance, home_value):
                    pmi += v.pmi * balance / 12.0
                row = schedule[month]
                interest += row.interest_payment
                principal += row.principal_payment
                balance = row.remaining_balance

            property_tax = home_value * v.property_tax_rate
            insurance = home_value * v.home_insurance_rate
            maintenance = home_value * v.maintenance_rate
            common_charges = v.common_charge_per_month * 12 * inflation_factor

            benefits = annual_deduction_benefits(
                self.rules.tax,
                loan_balance=balance_at_start,
                interest_paid=interest,
                property_tax_paid=property_tax,
                other_deductions=v.other_deductions,
                marginal_tax_rate=v.marginal_tax_rate,
                is_joint_return=v.is_joint_return,
                tax_cuts_expire=v.tax_cuts_expire,
                inflation_factor=inflation_factor,
                deductible_common_charges=common_charges * v.common_charge_deduction_rate,
            )

            totals["principal"] += principal
            totals["interest"] += interest
            totals["pmi"] += pmi
            totals["property_tax"] += property_tax
            totals["home_insurance"] += insurance
            totals["maintenance"] += maintenance
            totals["common_charges"] += common_charges
            tax_savings += benefits.deduction_savings

            year_cost = (
                principal + interest + pmi + property_tax + insurance + maintenance + common_charges
                - benefits.deduction_savings
            )
            yearly_costs.append(year_cost)

        recurring_cost = sum(totals.values())
        opportunity_cost = investment_growth(initial_cost, v.investment_return, years)

        # --- Sale at the end of the horizon ---
        sale_price = v.home_price * growth ** years
        selling = sale_price * v.selling_costs
        gains = capital_gains_tax(
            self.rules.tax,
            purchase_price=v.home_price,
            sale_price=sale_price,
            years_owned=years,
            is_joint_return=v.is_joint_return,
            is_primary_residence=v.is_primary_residence,
        )
        net_proceeds = sale_price - balance - selling - gains.tax_amount

        total_cost = initial_cost + recurring_cost - tax_savings + opportunity_cost - net_proceeds

        yearly_opportunity = opportunity_cost / years
        yearly_breakdown = [cost + yearly_opportunity for cost in yearly_costs]
        yearly_breakdown[0] += initial_cost
        yearly_breakdown[-1] -= net_proceeds

        line_items = {
            "down_payment": down_payment,
            "closing_costs": closing,
            **totals,
            "tax_savings": tax_savings,
            "opportunity_cost": opportunity_cost,
            "sale_price": sale_price,
            "selling_costs": selling,
            "capital_gains_tax": gains.tax_amount,
            "remaining_balance": balance,
        }

        return CostCalculationResult(
            initial_cost=initial_cost,
            recurring_cost=recurring_cost,
            tax_savings=tax_savings,
            opportunity_cost=opportunity_cost,
            net_proceeds=net_proceeds,
            total_cost=total_cost,
            yearly_breakdown=tuple(yearly_breakdown),
            line_items=line_items,
        )

    def _charges_pmi(self, balance: float, home_value: float) -> bool:
        mortgage = self.rules.mortgage
        if not mortgage.has_mortgage_insurance or balance <= 0 or home_value <= 0:
            return False
        return balance / home_value > mortgage.mortgage_insurance_threshold
