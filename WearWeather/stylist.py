"""Outfit decision engine - maps a weather reading to clothing, pure and deterministic."""
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from weather_data import ClothingOutfit, Condition


@dataclass(frozen=True)
class _Bracket:
    """One temperature band: base items plus fills for still-empty slots."""
    lower: float  # inclusive
    top: str
    bottom: str
    shoes: str
    outer: Optional[str] = None
    accessory: Optional[str] = None


# Half-open bands, coldest first; a reading belongs to the last band whose
# lower bound it reaches, so 5.0 lands in [5, 10).
BRACKETS: List[_Bracket] = [
    _Bracket(-math.inf, "sweatshirt", "padded-pants", "winter-boots", outer="padding", accessory="muffler"),
    _Bracket(5, "heattech", "thick-pants", "sneakers", outer="wool-coat"),
    _Bracket(10, "knit", "warm-pants", "sneakers", outer="trench-coat"),
    _Bracket(15, "hoodie", "denim-pants", "sneakers", outer="cardigan"),
    _Bracket(20, "long-sleeve-tshirt", "denim-pants", "sneakers"),
    _Bracket(24, "short-sleeve-tshirt", "cotton-pants", "sandals"),
    _Bracket(28, "sleeveless", "short-shorts", "sandals", accessory="cap"),
]

# condition -> (accessory, shoes, outer, outer below this temperature)
CONDITION_OVERRIDES: Dict[Condition, Tuple[str, str, str, float]] = {
    Condition.RAIN: ("umbrella", "rain-boots", "light-jacket", 18),
    Condition.SNOW: ("gloves", "winter-boots", "padding", 5),
    Condition.STORM: ("umbrella", "rain-boots", "padding", 10),
}


def bracket_for(temperature: float) -> _Bracket:
    """Return the temperature band a reading falls into."""
    chosen = BRACKETS[0]
    for bracket in BRACKETS:
        if temperature >= bracket.lower:
            chosen = bracket
    return chosen


class Stylist:
    """
    Picks today's outfit.

    Stateless; construct one and pass it to whoever needs recommendations.
    Priority is condition first, then temperature band, then air quality:
    a later step only fills slots an earlier step left empty.
    """

    def recommend(self, temperature: float, condition: Condition, is_bad_air: bool) -> ClothingOutfit:
        """
        Recommend an outfit.

        Args:
            temperature: Current temperature in °C, must be finite
            condition: Current weather condition
            is_bad_air: Whether the air quality calls for a mask

        Returns:
            ClothingOutfit: The recommendation

        Raises:
            ValueError: If temperature is NaN or infinite
        """
        if not math.isfinite(temperature):
            raise ValueError(f"Cannot recommend an outfit for temperature {temperature!r}")

        outer: Optional[str] = None
        accessory: Optional[str] = None
        shoes: Optional[str] = None

        # 1. Weather condition sets rain/snow gear first
        override = CONDITION_OVERRIDES.get(condition)
        if override is not None:
            accessory, shoes, cold_outer, outer_below = override
            if temperature < outer_below:
                outer = cold_outer

        # 2. Temperature band picks the base layer and fills what is left
        bracket = bracket_for(temperature)
        if outer is None:
            outer = bracket.outer
        if accessory is None:
            accessory = bracket.accessory
        if shoes is None:
            shoes = bracket.shoes

        # 3. Air quality only ever adds the mask
        return ClothingOutfit(
            top=bracket.top,
            bottom=bracket.bottom,
            shoes=shoes,
            outer=outer,
            accessory=accessory,
            has_mask=is_bad_air,
        )


def recommend(temperature: float, condition: Condition, is_bad_air: bool) -> ClothingOutfit:
    """Module-level shortcut for Stylist().recommend()."""
    return Stylist().recommend(temperature, condition, is_bad_air)
