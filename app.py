import logging

import altair as alt
import pandas as pd
import streamlit as st

from analytics.analysis import breakeven_value
from analytics.simulation import compare
from analytics.trajectories import (
    build_segment_values,
    cost_breakdown,
    equity_vs_portfolio,
    segments_dataframe,
    sensitivity_table,
    yearly_comparison,
)
from config import INTEGER_FIELDS, clamp_values, get_country_rules, get_input_range
from finance.factory import (
    apply_country_defaults,
    check_values,
    create_buying_calculator,
    create_renting_calculator,
    supported_countries,
)
from finance.mortgage import calculate_amortization_schedule, yearly_summary
from models import InvalidArgument, PriceOutcome

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Rent vs Buy", page_icon="🏠", layout="wide")

# Parameters offered in the crossover chart, with their labels and axis formats
FLAME_PARAMETERS = {
    "home_price": ("Home price", ",.0f"),
    "monthly_rent": ("Monthly rent", ",.0f"),
    "mortgage_rate": ("Mortgage rate", ".1%"),
    "down_payment": ("Down payment", ".0%"),
    "years_to_stay": ("Years to stay", "d"),
    "home_price_growth": ("Home price growth", ".1%"),
    "rent_growth": ("Rent growth", ".0%"),
    "investment_return": ("Investment return", ".0%"),
}


def _pct_slider(label, country, name, value, help=None):
    """Slider shown in percent, returned as a decimal."""
    r = get_input_range(country, name)
    shown = st.slider(
        label,
        float(r.min * 100),
        float(r.max * 100),
        float(r.clamp(value) * 100),
        float(r.step * 100),
        help=help,
    )
    return shown / 100.0


def _number(label, country, name, value, help=None):
    r = get_input_range(country, name)
    return st.number_input(
        label,
        min_value=float(r.min),
        max_value=float(r.max),
        value=float(r.clamp(value)),
        step=float(r.step),
        format="%.0f",
        help=help,
    )


# ------------------------- UI LAYOUT -------------------------

st.title("🏠 Rent vs Buy")

left, right = st.columns([1, 3], gap="large")

with left:
    st.markdown("### Inputs")
    country = st.radio("Country", [c.value for c in supported_countries()], horizontal=True)
    rules = get_country_rules(country)
    defaults = apply_country_defaults(country)
    cur = rules.currency + " "

    home_price = _number("Home price", country, "home_price", defaults.home_price)
    monthly_rent = _number("Monthly rent", country, "monthly_rent", defaults.monthly_rent,
                           help="Rent for a comparable home")
    down_payment = _pct_slider("Down payment (%)", country, "down_payment", defaults.down_payment)
    mortgage_rate = _pct_slider("Mortgage rate (annual %)", country, "mortgage_rate", defaults.mortgage_rate)
    mortgage_term = st.select_slider("Mortgage term (years)", options=list(rules.mortgage.available_terms),
                                     value=rules.mortgage.typical_term)
    r = get_input_range(country, "years_to_stay")
    years_to_stay = st.slider("Years to stay", int(r.min), int(r.max), int(defaults.years_to_stay), int(r.step),
                              help="How long you plan to live in the home before selling")

    st.markdown("#### Future projections")
    home_price_growth = _pct_slider("Home price growth (%)", country, "home_price_growth", defaults.home_price_growth)
    rent_growth = _pct_slider("Rent growth (%)", country, "rent_growth", defaults.rent_growth)
    investment_return = _pct_slider("Investment return (%)", country, "investment_return", defaults.investment_return,
                                    help="Return you could earn by investing money elsewhere")
    inflation_rate = _pct_slider("Inflation (%)", country, "inflation_rate", defaults.inflation_rate)

    st.markdown("#### Taxes")
    is_joint_return = st.checkbox("Filing jointly", value=defaults.is_joint_return)
    tax_cuts_expire = st.checkbox("2017 tax cuts expire", value=defaults.tax_cuts_expire,
                                  help="Use pre-2018 standard deduction and loan limits")
    marginal_tax_rate = _pct_slider("Marginal tax rate (%)", country, "marginal_tax_rate", defaults.marginal_tax_rate)
    property_tax_rate = _pct_slider("Property tax (annual %)", country, "property_tax_rate", defaults.property_tax_rate)
    other_deductions = _number("Other itemized deductions", country, "other_deductions", defaults.other_deductions)

    st.markdown("#### Owner costs")
    buying_costs = _pct_slider("Buying costs (% of price)", country, "buying_costs", defaults.buying_costs)
    selling_costs = _pct_slider("Selling costs (% of sale price)", country, "selling_costs", defaults.selling_costs)
    maintenance_rate = _pct_slider("Maintenance (annual %)", country, "maintenance_rate", defaults.maintenance_rate)
    home_insurance_rate = _pct_slider("Home insurance (annual %)", country, "home_insurance_rate",
                                      defaults.home_insurance_rate)
    pmi = _pct_slider("PMI (annual % of balance)", country, "pmi", defaults.pmi,
                      help=f"Charged while the loan is above {rules.mortgage.mortgage_insurance_threshold:.0%} of the home value")
    extra_payments = _number("Extra principal (monthly)", country, "extra_payments", defaults.extra_payments)
    common_charge_per_month = _number("Common charges / HOA (monthly)", country, "common_charge_per_month",
                                      defaults.common_charge_per_month)

    st.markdown("#### Renter costs")
    security_deposit = _number("Security deposit (months)", country, "security_deposit", defaults.security_deposit)
    broker_fee = _pct_slider("Broker fee (% of annual rent)", country, "broker_fee", defaults.broker_fee)
    monthly_renters_insurance = _number("Renter's insurance (monthly)", country, "monthly_renters_insurance",
                                        defaults.monthly_renters_insurance)
    will_reinvest = st.checkbox("Invest monthly savings", value=defaults.will_reinvest,
                                help="Renter invests any month where renting is cheaper than owning")

    values = clamp_values(country, apply_country_defaults(
        country,
        home_price=home_price,
        monthly_rent=monthly_rent,
        down_payment=down_payment,
        mortgage_rate=mortgage_rate,
        mortgage_term=int(mortgage_term),
        years_to_stay=int(years_to_stay),
        home_price_growth=home_price_growth,
        rent_growth=rent_growth,
        investment_return=investment_return,
        inflation_rate=inflation_rate,
        is_joint_return=is_joint_return,
        tax_cuts_expire=tax_cuts_expire,
        marginal_tax_rate=marginal_tax_rate,
        property_tax_rate=property_tax_rate,
        other_deductions=other_deductions,
        buying_costs=buying_costs,
        selling_costs=selling_costs,
        maintenance_rate=maintenance_rate,
        home_insurance_rate=home_insurance_rate,
        pmi=pmi,
        extra_payments=extra_payments,
        common_charge_per_month=common_charge_per_month,
        security_deposit=security_deposit,
        broker_fee=broker_fee,
        monthly_renters_insurance=monthly_renters_insurance,
        will_reinvest=will_reinvest,
    ))
    for message in check_values(country, values):
        st.warning(message)

with right:
    try:
        result = compare(values, country)
    except InvalidArgument as exc:
        logger.warning("Rejected inputs: %s", exc)
        st.error(str(exc))
        st.stop()

    # ---- Summary verdict box ----
    st.markdown("### Summary verdict")
    if result.renting_is_better:
        st.success(f"**Renting is cheaper** by {cur}{result.difference:,.0f} over {values.years_to_stay} years")
    else:
        st.error(f"**Buying is cheaper** by {cur}{-result.difference:,.0f} over {values.years_to_stay} years")

    m1, m2, m3 = st.columns(3)
    m1.metric("Total cost of buying", f"{cur}{result.buying.total_cost:,.0f}", border=True)
    m2.metric("Total cost of renting", f"{cur}{result.renting.total_cost:,.0f}", border=True)
    year = result.break_even_year
    m3.metric("Break-even year", "never" if year is None else str(year), border=True,
              help="First year where the running total of buying costs drops to renting's")

    # ---- Crossover (flame) chart ----
    st.markdown("### Where the answer flips")
    parameter = st.selectbox("Vary", list(FLAME_PARAMETERS), format_func=lambda k: FLAME_PARAMETERS[k][0])
    label, axis_format = FLAME_PARAMETERS[parameter]
    bounds = get_input_range(country, parameter)
    buying_calculator = create_buying_calculator(country)
    renting_calculator = create_renting_calculator(country)
    segment_values = build_segment_values(
        values, parameter, bounds.min, bounds.max, bounds.step, buying_calculator, renting_calculator
    )
    flame = segments_dataframe(segment_values, bounds.max)
    flame["parameter"] = label
    flame_chart = alt.Chart(flame).mark_rect().encode(
        x=alt.X("start:Q", title=label, axis=alt.Axis(format=axis_format), scale=alt.Scale(zero=False)),
        x2="end:Q",
        y=alt.Y("parameter:N", title=None),
        color=alt.Color("winner:N", scale=alt.Scale(domain=["Buy", "Rent"], range=["#FF6B6B", "#4ECDC4"]),
                        legend=alt.Legend(orient="left", title=None)),
        tooltip=[alt.Tooltip("start:Q", format=axis_format), alt.Tooltip("end:Q", format=axis_format), "winner:N"],
    ).properties(height=90)
    rule = alt.Chart(pd.DataFrame({"current": [getattr(values, parameter)]})).mark_rule(color="black").encode(
        x="current:Q"
    )
    st.altair_chart(flame_chart + rule, use_container_width=True)
    if segment_values.outcome.is_crossing:
        exact = breakeven_value(values, parameter, bounds.min, bounds.max, buying_calculator, renting_calculator)
        if parameter in INTEGER_FIELDS:
            st.caption(f"The cheaper option changes at {label.lower()} = {exact}.")
        else:
            st.caption(f"Buying and renting cost the same at {label.lower()} ≈ {exact:,.4g}.")
    else:
        st.caption(f"{'Renting' if segment_values.outcome is PriceOutcome.RENT else 'Buying'} wins across the whole range.")

    chart_left, chart_right = st.columns([2, 1], gap="medium")

    with chart_left:
        st.markdown("### Home equity vs. invested portfolio")
        wdf = equity_vs_portfolio(values)
        melted = pd.melt(wdf, id_vars=["Year"], value_vars=["Home_Equity", "Portfolio"],
                         var_name="Scenario", value_name="Wealth")
        bar_chart = alt.Chart(melted).mark_bar().encode(
            x=alt.X("Year:O", title="Year", axis=alt.Axis(labelAngle=0)),
            y=alt.Y("Wealth:Q", title="Wealth", axis=alt.Axis(format=",.0f")),
            color=alt.Color("Scenario:N", scale=alt.Scale(range=["#FF6B6B", "#4ECDC4"]),
                            legend=alt.Legend(orient="left", titleLimit=0)),
            xOffset="Scenario:N",
            tooltip=[alt.Tooltip("Year:O"), alt.Tooltip("Scenario:N"), alt.Tooltip("Wealth:Q", format=",.0f")],
        ).properties(height=400)
        st.altair_chart(bar_chart, use_container_width=True)

    with chart_right:
        st.markdown("### Cumulative cost")
        ydf = yearly_comparison(result.buying, result.renting)
        lines = pd.melt(ydf, id_vars=["Year"], value_vars=["Buy_Cumulative", "Rent_Cumulative"],
                        var_name="Scenario", value_name="Cost")
        line_chart = alt.Chart(lines).mark_line(point=True).encode(
            x=alt.X("Year:O", axis=alt.Axis(labelAngle=0)),
            y=alt.Y("Cost:Q", axis=alt.Axis(format=",.0f")),
            color=alt.Color("Scenario:N", scale=alt.Scale(range=["#FF6B6B", "#4ECDC4"]),
                            legend=alt.Legend(orient="bottom", title=None)),
            tooltip=["Year:O", "Scenario:N", alt.Tooltip("Cost:Q", format=",.0f")],
        ).properties(height=400)
        st.altair_chart(line_chart, use_container_width=True)

    # ---- Breakdown ----
    st.markdown("### Breakdown")
    buy_col, rent_col = st.columns(2)
    with buy_col:
        st.markdown("**Buying**")
        st.dataframe(cost_breakdown(result.buying).style.format({"Amount": "{:,.0f}"}), hide_index=True)
    with rent_col:
        st.markdown("**Renting**")
        st.dataframe(cost_breakdown(result.renting).style.format({"Amount": "{:,.0f}"}), hide_index=True)

    # ---- Sensitivity ----
    st.markdown("### Sensitivity")
    sdf = sensitivity_table(values, country)
    bars = pd.melt(sdf, id_vars=["Parameter"], value_vars=["Low_Impact", "High_Impact"],
                   var_name="Shift", value_name="Impact")
    sens_chart = alt.Chart(bars).mark_bar().encode(
        y=alt.Y("Parameter:N", title=None),
        x=alt.X("Impact:Q", title="Change in (buy - rent)", axis=alt.Axis(format=",.0f")),
        color=alt.Color("Shift:N", scale=alt.Scale(range=["#708dff", "#ffd900"])),
        yOffset="Shift:N",
        tooltip=["Parameter:N", "Shift:N", alt.Tooltip("Impact:Q", format=",.0f")],
    ).properties(height=300)
    st.altair_chart(sens_chart, use_container_width=True)
    st.caption("Positive impact favors buying, negative favors renting.")

    with st.expander("Amortization by year"):
        schedule = calculate_amortization_schedule(
            values.loan_amount, values.mortgage_rate, values.mortgage_term, values.extra_payments
        )
        st.dataframe(yearly_summary(schedule).style.format("{:,.0f}"))

# ---- FAQ Section ----
st.markdown("---")
st.markdown("## ❓ FAQ")

with st.expander("📐 How are the calculations performed?"):
    st.markdown("""
    **Buying** = down payment + closing costs + mortgage payments, PMI, property tax, insurance,
    maintenance and common charges − tax savings + investment growth given up on the cash put in
    − what you keep when you sell (sale price − loan balance − selling costs − capital gains tax).

    **Renting** = deposit + broker fee + rent + renter's insurance + growth given up on the deposit and fee
    − deposit returned − growth earned by investing the down payment and closing costs instead.

    The same growth figure appears on both sides: added to buying as growth given up and subtracted
    from renting as growth earned. The gap between the two totals therefore moves by twice that growth
    when the investment return changes.
    """)

with st.expander("📊 What does the crossover chart show?"):
    st.markdown("""
    The chosen input is swept across its allowed range while everything else stays fixed.
    Each band shows which option is cheaper there; the black line marks your current value.
    """)
