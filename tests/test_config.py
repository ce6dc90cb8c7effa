from dataclasses import fields

import pytest

from config import (
    INITIAL_VALUES,
    INPUT_RANGES,
    Country,
    InputRange,
    clamp_values,
    get_country,
    get_input_range,
)
from analytics.analysis import with_parameter
from models import CalculatorValues, InvalidArgument

FIELD_NAMES = {f.name for f in fields(CalculatorValues)}


def test_country_codes_are_case_insensitive():
    assert get_country("us") is Country.US
    assert get_country(Country.MX) is Country.MX


def test_unknown_country_is_rejected():
    with pytest.raises(InvalidArgument):
        get_country("ZZ")


@pytest.mark.parametrize("country", list(Country))
def test_input_ranges_are_well_formed(country):
    for name, bounds in INPUT_RANGES[country].items():
        assert name in FIELD_NAMES
        assert bounds.min <= bounds.max
        assert bounds.step > 0


def test_input_range_clamp():
    r = InputRange(0, 10, 1)
    assert r.clamp(-5) == 0
    assert r.clamp(50) == 10
    assert r.clamp(3) == 3
    assert get_input_range("US", "home_price").max == 2_000_000


def test_defaults_already_within_us_ranges():
    assert clamp_values("US", INITIAL_VALUES) is INITIAL_VALUES


def test_clamping_pulls_values_into_range(caplog):
    v = with_parameter(with_parameter(INITIAL_VALUES, "home_price", 5_000_000), "years_to_stay", 50)
    with caplog.at_level("INFO", logger="config"):
        clamped = clamp_values("US", v)
    assert clamped.home_price == 2_000_000
    assert clamped.years_to_stay == 40
    assert isinstance(clamped.years_to_stay, int)
    assert "home_price" in caplog.text
