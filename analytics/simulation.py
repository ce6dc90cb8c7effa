from dataclasses import dataclass
from typing import Optional, Sequence

from finance.factory import create_buying_calculator, create_renting_calculator
from models import CalculatorValues, CostCalculationResult


@dataclass(frozen=True)
class Comparison:
    buying: CostCalculationResult
    renting: CostCalculationResult

    @property
    def difference(self) -> float:
        """Buy total minus rent total; positive means renting is cheaper."""
        return self.buying.total_cost - self.renting.total_cost

    @property
    def renting_is_better(self) -> bool:
        return self.renting.total_cost < self.buying.total_cost

    @property
    def favored(self) -> str:
        return "rent" if self.renting_is_better else "buy"

    @property
    def break_even_year(self) -> Optional[int]:
        return find_break_even_year(self.buying.yearly_breakdown, self.renting.yearly_breakdown)


def compare(values: CalculatorValues, country) -> Comparison:
    """Run both cost models on the same snapshot."""
    buying = create_buying_calculator(country).calculate(values)
    renting = create_renting_calculator(country).calculate(values)
    return Comparison(buying=buying, renting=renting)


def find_break_even_year(buy_yearly: Sequence[float], rent_yearly: Sequence[float]) -> Optional[int]:
    """First year (1-based) where cumulative buying cost is at or below renting's, else None."""
    buy_cumulative = 0.0
    rent_cumulative = 0.0
    for year, (buy, rent) in enumerate(zip(buy_yearly, rent_yearly), start=1):
        buy_cumulative += buy
        rent_cumulative += rent
        if buy_cumulative <= rent_cumulative:
            return year
    return None
