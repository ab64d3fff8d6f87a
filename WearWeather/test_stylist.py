"""Tests for the outfit decision engine."""
import math

import pytest

from stylist import BRACKETS, Stylist, bracket_for, recommend
from weather_data import Condition

ALL_CONDITIONS = list(Condition)
SAMPLE_TEMPERATURES = [-20.0, -0.5, 4.99, 5.0, 9.9, 10.0, 14.5, 15.0, 19.99, 20.0, 23.5, 24.0, 27.9, 28.0, 40.0]


def test_recommend_is_deterministic():
    """Test identical inputs give identical outfits."""
    for temp in SAMPLE_TEMPERATURES:
        for condition in ALL_CONDITIONS:
            assert recommend(temp, condition, False) == recommend(temp, condition, False)


def test_bracket_boundary_belongs_to_upper_bracket():
    """Test 4.99 and 5.0 land in different brackets."""
    colder = recommend(4.99, Condition.CLEAR, False)
    warmer = recommend(5.0, Condition.CLEAR, False)
    assert colder.top != warmer.top
    assert colder.top == "sweatshirt"
    assert warmer.top == "heattech"


@pytest.mark.parametrize("temp,top", [
    (-10, "sweatshirt"),
    (5, "heattech"),
    (10, "knit"),
    (15, "hoodie"),
    (20, "long-sleeve-tshirt"),
    (24, "short-sleeve-tshirt"),
    (28, "sleeveless"),
    (35, "sleeveless"),
])
def test_bracket_lower_bounds(temp, top):
    """Test each bracket starts at its inclusive lower bound."""
    assert bracket_for(temp).top == top
    assert recommend(temp, Condition.CLEAR, False).top == top


def test_brackets_are_ordered():
    """Test brackets are listed coldest first."""
    lowers = [b.lower for b in BRACKETS]
    assert lowers == sorted(lowers)
    assert len(BRACKETS) == 7


def test_coldest_bracket_fills_outer_and_accessory():
    """Test the < 5 bracket adds padding, muffler and winter boots."""
    outfit = recommend(0, Condition.CLEAR, False)
    assert outfit.outer == "padding"
    assert outfit.accessory == "muffler"
    assert outfit.shoes == "winter-boots"


def test_hot_bracket_adds_cap_and_sandals():
    """Test the >= 28 bracket adds a cap and sandals."""
    outfit = recommend(31, Condition.CLEAR, False)
    assert outfit.accessory == "cap"
    assert outfit.shoes == "sandals"
    assert outfit.outer is None


def test_mild_bracket_shoes():
    """Test mild brackets default to sneakers."""
    for temp in (5, 10, 15, 20):
        assert recommend(temp, Condition.CLOUDY, False).shoes == "sneakers"


def test_rain_umbrella_regardless_of_temperature():
    """Test rain always brings an umbrella, even in hot brackets."""
    for temp in SAMPLE_TEMPERATURES:
        outfit = recommend(temp, Condition.RAIN, False)
        assert outfit.accessory == "umbrella"
        assert outfit.shoes == "rain-boots"
    assert recommend(25, Condition.RAIN, False).accessory == "umbrella"


def test_rain_light_jacket_below_18():
    """Test rain adds a light jacket only below 18°C."""
    assert recommend(17.9, Condition.RAIN, False).outer == "light-jacket"
    # At 18 the [15, 20) bracket fills the still-empty outer slot
    assert recommend(18.0, Condition.RAIN, False).outer == "cardigan"
    assert recommend(25.0, Condition.RAIN, False).outer is None


def test_condition_override_is_not_replaced_by_bracket():
    """Test a bracket never overrides slots the condition already set."""
    outfit = recommend(0, Condition.RAIN, False)
    # < 5 bracket would want padding and muffler
    assert outfit.outer == "light-jacket"
    assert outfit.accessory == "umbrella"
    assert outfit.shoes == "rain-boots"
    assert outfit.top == "sweatshirt"


def test_snow_gear():
    """Test snow brings gloves, winter boots and padding below 5°C."""
    cold = recommend(-1, Condition.SNOW, False)
    assert cold.accessory == "gloves"
    assert cold.shoes == "winter-boots"
    assert cold.outer == "padding"

    mild = recommend(6, Condition.SNOW, False)
    assert mild.accessory == "gloves"
    # Outer left unset by snow, so the [5, 10) bracket fills it
    assert mild.outer == "wool-coat"


def test_storm_gear():
    """Test storms bring umbrella, rain boots and padding below 10°C."""
    cold = recommend(8, Condition.STORM, False)
    assert cold.accessory == "umbrella"
    assert cold.shoes == "rain-boots"
    assert cold.outer == "padding"

    mild = recommend(12, Condition.STORM, False)
    assert mild.outer == "trench-coat"


def test_clear_and_cloudy_have_no_override():
    """Test clear and cloudy outfits come from the bracket alone."""
    assert recommend(22, Condition.CLEAR, False) == recommend(22, Condition.CLOUDY, False)


def test_bad_air_only_adds_mask():
    """Test air quality sets the mask and nothing else."""
    for temp in SAMPLE_TEMPERATURES:
        for condition in ALL_CONDITIONS:
            clean = recommend(temp, condition, False)
            dirty = recommend(temp, condition, True)
            assert clean.has_mask is False
            assert dirty.has_mask is True
            assert (dirty.top, dirty.bottom, dirty.shoes, dirty.outer, dirty.accessory) == \
                (clean.top, clean.bottom, clean.shoes, clean.outer, clean.accessory)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_temperature_fails_fast(bad):
    """Test NaN and infinities are rejected."""
    with pytest.raises(ValueError):
        Stylist().recommend(bad, Condition.CLEAR, False)
