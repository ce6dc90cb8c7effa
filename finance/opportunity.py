from models import CalculatorValues


def closing_costs(values: CalculatorValues) -> float:
    return values.home_price * values.buying_costs


def purchase_capital(values: CalculatorValues) -> float:
    """Cash a buyer sinks into the home at time 0: down payment plus closing costs.

    Both cost models use this same baseline, so whichever scenario does not
    spend it gets the investment growth.
    """
    return values.down_payment_amount + closing_costs(values)


def investment_growth(amount: float, annual_rate: float, years: int) -> float:
    """Growth (future value minus principal) of a lump sum compounded annually."""
    return amount * ((1 + annual_rate) ** years - 1)
