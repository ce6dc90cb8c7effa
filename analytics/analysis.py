import logging
import math
from dataclasses import fields
from typing import List

from config import INTEGER_FIELDS
from finance.validation import require_finite
from models import CalculatorValues, InvalidArgument, PriceOutcome

logger = logging.getLogger(__name__)

# Parameters a sweep may vary; booleans are toggles, not ranges
SWEEPABLE_PARAMETERS = frozenset(f.name for f in fields(CalculatorValues) if f.type in (int, float))


def with_parameter(values: CalculatorValues, parameter: str, value: float) -> CalculatorValues:
    """Copy of ``values`` with one field replaced."""
    return CalculatorValues(**{**values.__dict__, parameter: value})


def renting_is_better(values: CalculatorValues, buying_calculator, renting_calculator) -> bool:
    """Ties favor buying."""
    return renting_calculator.get_total_cost(values) < buying_calculator.get_total_cost(values)


def _check_parameter(parameter: str) -> None:
    if parameter not in SWEEPABLE_PARAMETERS:
        raise InvalidArgument(f"{parameter!r} is not a numeric calculator value.")


def probe_value(min_value: float, max_value: float, step: float, index: int) -> float:
    """Value of segment ``index``; indices past the end land on ``max_value``."""
    offset = index * step
    if max_value >= min_value:
        return min(min_value + offset, max_value)
    return max(min_value - offset, max_value)


def classify_outcome(
    values: CalculatorValues,
    parameter: str,
    min_value: float,
    max_value: float,
    buying_calculator,
    renting_calculator,
) -> PriceOutcome:
    """Which option wins at each end of the sweep. Two evaluations per model."""
    _check_parameter(parameter)
    require_finite("min_value", min_value)
    require_finite("max_value", max_value)
    at_start = renting_is_better(with_parameter(values, parameter, min_value), buying_calculator, renting_calculator)
    at_end = renting_is_better(with_parameter(values, parameter, max_value), buying_calculator, renting_calculator)
    return PriceOutcome.from_endpoints(at_start, at_end)


def find_intersection_points(
    values: CalculatorValues,
    parameter: str,
    min_value: float,
    max_value: float,
    segments: int,
    step: float,
    buying_calculator,
    renting_calculator,
) -> List[int]:
    """
    Segment index where the favored option flips, found by bisection.

    The caller guarantees that the two ends of the sweep favor different
    options (a crossing PriceOutcome); this is not re-checked. The search
    keeps ``lo`` on the starting side and ``hi`` on the far side, so it
    returns the first index on the far side of whichever crossing the
    bisection path converges on. With several crossings in range, which
    one is found depends on the path, not on economics.

    A flip inside the last segment is reported at ``segments - 1`` so that
    segment shows the far-side winner; the result stays in
    ``[1, segments - 1]`` (``1`` when there is a single segment).

    Costs O(log segments) evaluations of each model. Returned as a
    one-element list for callers that accept several crossings.
    """
    _check_parameter(parameter)
    require_finite("step", step)
    if step <= 0:
        raise InvalidArgument("step must be positive.")
    if segments < 1 or int(segments) != segments:
        raise InvalidArgument("segments must be a positive whole number.")

    probes = 0

    def favors_renting(index: int) -> bool:
        nonlocal probes
        probes += 1
        value = probe_value(min_value, max_value, step, index)
        return renting_is_better(with_parameter(values, parameter, value), buying_calculator, renting_calculator)

    lo, hi = 0, int(segments)
    at_start = favors_renting(lo)
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if favors_renting(mid) == at_start:
            lo = mid
        else:
            hi = mid

    index = min(hi, max(1, int(segments) - 1))
    logger.debug("Crossover for %s found at segment %d of %d after %d probes", parameter, index, segments, probes)
    return [index]


def find_intersection_point(
    values: CalculatorValues,
    parameter: str,
    min_value: float,
    max_value: float,
    segments: int,
    step: float,
    buying_calculator,
    renting_calculator,
) -> int:
    return find_intersection_points(
        values, parameter, min_value, max_value, segments, step, buying_calculator, renting_calculator
    )[0]


def breakeven_value(
    values: CalculatorValues,
    parameter: str,
    min_value: float,
    max_value: float,
    buying_calculator,
    renting_calculator,
    tol=1e-6,
    iters=60,
) -> float:
    """Solve for the parameter value where owning and renting cost the same.

    Same precondition as ``find_intersection_points``: the ends of the range
    must favor different options. Whole-number fields are searched over
    whole numbers only and return the first value on the far side.
    """
    _check_parameter(parameter)

    def diff_at(x):
        tmp = with_parameter(values, parameter, x)
        return buying_calculator.get_total_cost(tmp) - renting_calculator.get_total_cost(tmp)

    if parameter in INTEGER_FIELDS:
        a, b = int(round(min_value)), int(round(max_value))
        start_favors_renting = diff_at(a) > 0
        while abs(b - a) > 1:
            m = (a + b) // 2
            if (diff_at(m) > 0) == start_favors_renting:
                a = m
            else:
                b = m
        return b

    a, b = min_value, max_value
    fa = diff_at(a)
    for _ in range(iters):
        m = 0.5 * (a + b)
        fm = diff_at(m)
        if abs(fm) < tol or math.isclose(a, b, rel_tol=0.0, abs_tol=tol):
            return m
        if (fa <= 0) == (fm <= 0):
            a, fa = m, fm
        else:
            b = m
    return 0.5 * (a + b)
