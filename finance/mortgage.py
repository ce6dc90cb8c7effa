from typing import List, Sequence

import pandas as pd

from finance.validation import validate_loan
from models import AmortizationRow

# Balances below a hundredth of a cent are treated as paid off
BALANCE_EPSILON = 1e-4


def monthly_payment(principal: float, annual_rate: float, years: int) -> float:
    n = int(years * 12)
    if n <= 0:
        raise ValueError("years must be > 0")
    r = annual_rate / 12.0
    if abs(r) < 1e-12:
        return principal / n
    return principal * r / (1 - (1 + r) ** -n)


def calculate_amortization_schedule(
    loan_amount: float,
    annual_rate: float,
    term_years: int,
    extra_monthly_payment: float = 0.0,
) -> List[AmortizationRow]:
    """Month-by-month principal/interest split of a fixed-rate loan.

    Extra principal is added to every scheduled payment, so the schedule can
    end before ``term_years * 12`` payments. The final row pays off exactly the
    remaining balance and may be smaller than the regular payment.
    """
    validate_loan(loan_amount, annual_rate, term_years, extra_monthly_payment)
    if loan_amount == 0:
        return []

    total_payments = int(term_years) * 12
    r = annual_rate / 12.0
    payment = monthly_payment(loan_amount, annual_rate, term_years)

    schedule = []
    balance = float(loan_amount)
    cumulative_interest = 0.0
    cumulative_principal = 0.0
    for payment_number in range(1, total_payments + 1):
        interest = balance * r
        principal = min(payment - interest + extra_monthly_payment, balance)
        balance -= principal
        if balance < BALANCE_EPSILON:
            principal += balance
            balance = 0.0

        cumulative_interest += interest
        cumulative_principal += principal
        schedule.append(
            AmortizationRow(
                payment_number=payment_number,
                payment_amount=principal + interest,
                principal_payment=principal,
                interest_payment=interest,
                remaining_balance=balance,
                cumulative_interest=cumulative_interest,
                cumulative_principal=cumulative_principal,
            )
        )
        if balance == 0.0:
            break

    return schedule


def schedule_dataframe(rows: Sequence[AmortizationRow]) -> pd.DataFrame:
    """Amortization table indexed by payment number."""
    columns = [
        "payment_number",
        "payment_amount",
        "principal_payment",
        "interest_payment",
        "remaining_balance",
        "cumulative_interest",
        "cumulative_principal",
    ]
    records = [row.__dict__ for row in rows]
    return pd.DataFrame.from_records(records, columns=columns).set_index("payment_number")


def yearly_summary(rows: Sequence[AmortizationRow]) -> pd.DataFrame:
    """Totals per loan year, with the balance left at the end of each year."""
    df = schedule_dataframe(rows)
    if df.empty:
        return pd.DataFrame(columns=["payment_amount", "principal_payment", "interest_payment", "remaining_balance"])
    df["year"] = (df.index - 1) // 12 + 1
    grouped = df.groupby("year")
    summary = grouped[["payment_amount", "principal_payment", "interest_payment"]].sum()
    summary["remaining_balance"] = grouped["remaining_balance"].last()
    return summary
