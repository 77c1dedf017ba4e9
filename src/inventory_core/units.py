"""
Unit and serving normalization for poured items.

POS systems ring spirits up by the serving (a 30 ml shot) while stock is
counted by the bottle. To express sold quantities in the catalog's base unit,
spirit sales are converted to bottle fractions using a container size read
from the item name ("Absolut Vodka 70cl" -> 700 ml).

Which items are poured is decided by a keyword table rather than hardcoded
checks, so venues can extend it without touching the engine.
"""

from dataclasses import dataclass, field
from enum import Enum
import re

from . import settings


class KeywordClass(Enum):
    """How a keyword classifies an item."""

    SPIRIT = "spirit"  # Sold by the serving, stocked by the bottle
    NON_SPIRIT = "non_spirit"  # Always sold 1:1, overrides SPIRIT


# Default keyword table. Deny keywords (NON_SPIRIT) always win.
DEFAULT_KEYWORDS: dict[str, KeywordClass] = {
    # Spirit categories
    "whisky": KeywordClass.SPIRIT,
    "whiskey": KeywordClass.SPIRIT,
    "bourbon": KeywordClass.SPIRIT,
    "scotch": KeywordClass.SPIRIT,
    "vodka": KeywordClass.SPIRIT,
    "rum": KeywordClass.SPIRIT,
    "tequila": KeywordClass.SPIRIT,
    "mezcal": KeywordClass.SPIRIT,
    "gin": KeywordClass.SPIRIT,
    "brandy": KeywordClass.SPIRIT,
    "cognac": KeywordClass.SPIRIT,
    "liqueur": KeywordClass.SPIRIT,
    "vermouth": KeywordClass.SPIRIT,
    "spirit": KeywordClass.SPIRIT,
    # Liqueur and aperitif brands that rarely carry their category in the name
    "campari": KeywordClass.SPIRIT,
    "aperol": KeywordClass.SPIRIT,
    "baileys": KeywordClass.SPIRIT,
    "kahlua": KeywordClass.SPIRIT,
    "cointreau": KeywordClass.SPIRIT,
    "jagermeister": KeywordClass.SPIRIT,
    "jägermeister": KeywordClass.SPIRIT,
    "amaretto": KeywordClass.SPIRIT,
    "sambuca": KeywordClass.SPIRIT,
    "triple sec": KeywordClass.SPIRIT,
    "absinthe": KeywordClass.SPIRIT,
    # Non-spirits
    "soft drink": KeywordClass.NON_SPIRIT,
    "mixer": KeywordClass.NON_SPIRIT,
    "juice": KeywordClass.NON_SPIRIT,
    "water": KeywordClass.NON_SPIRIT,
    "soda": KeywordClass.NON_SPIRIT,
    "tonic": KeywordClass.NON_SPIRIT,
    "cola": KeywordClass.NON_SPIRIT,
    "lemonade": KeywordClass.NON_SPIRIT,
    "ginger ale": KeywordClass.NON_SPIRIT,
    "ginger beer": KeywordClass.NON_SPIRIT,
    "syrup": KeywordClass.NON_SPIRIT,
    "red bull": KeywordClass.NON_SPIRIT,
    "energy drink": KeywordClass.NON_SPIRIT,
}

# Checked in this order; the first hit wins
_VOLUME_PATTERNS = [
    (re.compile(r"(\d+(?:\.\d+)?)\s*ml\b", re.IGNORECASE), 1),
    (re.compile(r"(\d+(?:\.\d+)?)\s*cl\b", re.IGNORECASE), 10),
    (re.compile(r"(\d+(?:\.\d+)?)\s*l\b", re.IGNORECASE), 1000),
]


def infer_container_ml(
    name: str | None, default_ml: float = settings.DEFAULT_CONTAINER_ML
) -> float:
    """
    Read a container size from an item name.

    "750ml" -> 750, "70CL" -> 700, "1.5 L" -> 1500. Falls back to default_ml.
    """
    if not name:
        return default_ml

    for pattern, factor in _VOLUME_PATTERNS:
        match = pattern.search(name)
        if match:
            ml = round(float(match.group(1)) * factor)
            if ml > 0:
                return float(ml)
    return default_ml


def servings_to_containers(
    raw_qty: float,
    container_ml: float,
    serving_ml: float = settings.STANDARD_SERVING_ML,
) -> float:
    """Convert a count of servings into container fractions."""
    return raw_qty * (serving_ml / container_ml)


@dataclass
class ServingRules:
    """Keyword table used to classify items as poured (fractional) or not."""

    keywords: dict[str, KeywordClass] = field(
        default_factory=lambda: dict(DEFAULT_KEYWORDS)
    )

    def __post_init__(self):
        self.keywords = {k.lower(): v for k, v in self.keywords.items()}

    @property
    def allow(self) -> list[str]:
        return [k for k, c in self.keywords.items() if c is KeywordClass.SPIRIT]

    @property
    def deny(self) -> list[str]:
        return [k for k, c in self.keywords.items() if c is KeywordClass.NON_SPIRIT]

    def extend(self, keywords: dict[str, KeywordClass]) -> "ServingRules":
        """Add or override keywords. Returns self for chaining."""
        self.keywords.update({k.lower(): v for k, v in keywords.items()})
        return self


class ServingNormalizer:
    """
    Decides, per item, whether POS quantities are servings that must be
    converted into container fractions, and performs the conversion.

    Usage:
        normalizer = ServingNormalizer()
        normalizer.sold_in_base_units(3, "Absolut Vodka 70cl", "Vodka")  # 0.1286
        normalizer.sold_in_base_units(5, "Coca-Cola", "Soft Drinks")     # 5
    """

    def __init__(
        self,
        rules: ServingRules | None = None,
        serving_ml: float = settings.STANDARD_SERVING_ML,
        default_container_ml: float = settings.DEFAULT_CONTAINER_ML,
    ):
        self.rules = rules or ServingRules()
        self.serving_ml = serving_ml
        self.default_container_ml = default_container_ml

    def is_fractional(self, name: str | None, category: str | None = None) -> bool:
        """True if the item is sold by the serving and tracked by the container."""
        haystacks = [(name or "").lower(), (category or "").lower()]

        if any(k in h for k in self.rules.deny for h in haystacks):
            return False
        return any(k in h for k in self.rules.allow for h in haystacks)

    def container_ml(self, name: str | None) -> float:
        return infer_container_ml(name, self.default_container_ml)

    def sold_in_base_units(
        self, raw_qty: float, name: str | None, category: str | None = None
    ) -> float:
        """Express a raw POS quantity in the catalog's base unit."""
        if not self.is_fractional(name, category):
            return raw_qty
        return servings_to_containers(
            raw_qty, self.container_ml(name), self.serving_ml
        )
