from dataclasses import dataclass

from config import TaxRules


@dataclass(frozen=True)
class TaxBenefits:
    deduction_savings: float
    deductible_interest: float
    deductible_property_tax: float


@dataclass(frozen=True)
class CapitalGainsTax:
    taxable_gain: float
    tax_amount: float
    qualifies_for_exemption: bool


def _pick(pair, is_joint_return: bool) -> float:
    return pair[1] if is_joint_return else pair[0]


def standard_deduction(rules: TaxRules, is_joint_return: bool, tax_cuts_expire: bool) -> float:
    """
    Standard deduction used as the itemization floor.

    The 2017 Tax Cuts and Jobs Act raised the standard deduction; if its
    provisions are assumed to expire, the pre-2018 amounts apply again.
    """
    pair = rules.standard_deduction_expired if tax_cuts_expire else rules.standard_deduction
    return _pick(pair, is_joint_return)


def loan_cap(rules: TaxRules, is_joint_return: bool, tax_cuts_expire: bool) -> float:
    """Largest loan balance whose interest is fully deductible."""
    pair = rules.loan_cap_expired if tax_cuts_expire else rules.loan_cap
    return _pick(pair, is_joint_return)


def salt_cap(rules: TaxRules, tax_cuts_expire: bool) -> float:
    if rules.salt_cap is None or tax_cuts_expire:
        return float("inf")
    return rules.salt_cap


def annual_deduction_benefits(
    rules: TaxRules,
    loan_balance: float,
    interest_paid: float,
    property_tax_paid: float,
    other_deductions: float,
    marginal_tax_rate: float,
    is_joint_return: bool,
    tax_cuts_expire: bool,
    inflation_factor: float = 1.0,
    deductible_common_charges: float = 0.0,
) -> TaxBenefits:
    """
    Yearly tax saving from owning, relative to not owning.

    Where the rules itemize against a standard deduction (US), the saving is
      marginal_tax_rate * max(0, itemized - standard_deduction)
    with itemized = deductible interest + capped property tax and common
    charges + other deductions. Interest on the part of the balance above the
    loan cap is not deductible. The standard deduction and other deductions
    are indexed by ``inflation_factor``.

    Otherwise, deductible interest (up to ``max_deductible_interest``) is
    credited directly at the marginal rate.
    """
    if not rules.mortgage_interest_deductible:
        deductible_interest = 0.0
    elif rules.itemizes_against_standard:
        cap = loan_cap(rules, is_joint_return, tax_cuts_expire)
        fraction = min(1.0, cap / loan_balance) if loan_balance > 0 else 1.0
        deductible_interest = interest_paid * fraction
    else:
        limit = rules.max_deductible_interest
        deductible_interest = interest_paid if limit is None else min(interest_paid, limit)

    if not rules.itemizes_against_standard:
        savings = deductible_interest * marginal_tax_rate
        return TaxBenefits(savings, deductible_interest, 0.0)

    local_taxes = property_tax_paid if rules.property_tax_deductible else 0.0
    deductible_property_tax = min(local_taxes + deductible_common_charges, salt_cap(rules, tax_cuts_expire))
    other = other_deductions * inflation_factor
    itemized = deductible_interest + deductible_property_tax + other
    floor = standard_deduction(rules, is_joint_return, tax_cuts_expire) * inflation_factor
    savings = max(0.0, itemized - floor) * marginal_tax_rate
    return TaxBenefits(savings, deductible_interest, deductible_property_tax)


def capital_gains_tax(
    rules: TaxRules,
    purchase_price: float,
    sale_price: float,
    years_owned: int,
    is_joint_return: bool,
    is_primary_residence: bool,
) -> CapitalGainsTax:
    """Tax due on the gain when the home is sold at the end of the horizon."""
    gain = sale_price - purchase_price
    qualifies = is_primary_residence and years_owned >= rules.exclusion_min_years
    exclusion = _pick(rules.capital_gains_exclusion, is_joint_return) if qualifies else 0.0
    taxable_gain = max(0.0, gain - exclusion)
    return CapitalGainsTax(
        taxable_gain=taxable_gain,
        tax_amount=taxable_gain * rules.capital_gains_rate,
        qualifies_for_exemption=qualifies and gain <= exclusion,
    )
