"""Probabilistic → categorical conversion tables.

Each hazard has its own table keyed by the probability literal. A trailing
'#' marks a significant-severe area ("10#" = 10% with hatched significant
threat). Literals not listed for a hazard are rejected rather than mapped to
a default tier.

Pure lookups. No state.
"""

from collections.abc import Iterable

from outlook.errors import InvalidProbability
from outlook.models.tiers import CategoricalTier, Hazard

SIGNIFICANT_SUFFIX = "#"
PERCENT_SUFFIX = "%"

_T = CategoricalTier

TORNADO_TABLE: dict[str, CategoricalTier] = {
    "2%": _T.MRGL,
    "5%": _T.SLGT,
    "10%": _T.ENH,
    "10#": _T.ENH,
    "15%": _T.ENH,
    "15#": _T.MDT,
    "30%": _T.MDT,
    "30#": _T.HIGH,
    "45%": _T.HIGH,
    "45#": _T.HIGH,
    "60%": _T.HIGH,
    "60#": _T.HIGH,
}

WIND_TABLE: dict[str, CategoricalTier] = {
    "5%": _T.MRGL,
    "15%": _T.SLGT,
    "15#": _T.SLGT,
    "30%": _T.ENH,
    "30#": _T.ENH,
    "45%": _T.ENH,
    "45#": _T.MDT,
    "60%": _T.MDT,
    "60#": _T.HIGH,
}

# Hail tops out at MDT even for significant 60%
HAIL_TABLE: dict[str, CategoricalTier] = {
    "5%": _T.MRGL,
    "15%": _T.SLGT,
    "15#": _T.SLGT,
    "30%": _T.ENH,
    "30#": _T.ENH,
    "45%": _T.ENH,
    "45#": _T.MDT,
    "60%": _T.MDT,
    "60#": _T.MDT,
}

TABLES: dict[Hazard, dict[str, CategoricalTier]] = {
    Hazard.TORNADO: TORNADO_TABLE,
    Hazard.WIND: WIND_TABLE,
    Hazard.HAIL: HAIL_TABLE,
}


def parse_probability(probability: str, significant: bool = False) -> tuple[str, bool]:
    """Split a literal into its percent label and significance flag.

    "10#" -> ("10%", True); "10%" with significant=True -> ("10%", True);
    a bare "10" is read as "10%".
    """
    text = str(probability).strip()
    if text.endswith(SIGNIFICANT_SUFFIX):
        return text[:-1] + PERCENT_SUFFIX, True
    if not text.endswith(PERCENT_SUFFIX):
        text += PERCENT_SUFFIX
    return text, bool(significant)


def to_literal(percent_label: str, significant: bool) -> str:
    if significant:
        return percent_label[:-1] + SIGNIFICANT_SUFFIX
    return percent_label


def percent_value(percent_label: str) -> int:
    return int(percent_label.rstrip(PERCENT_SUFFIX + SIGNIFICANT_SUFFIX))


def classify(hazard: Hazard | str, probability: str, significant: bool = False) -> CategoricalTier:
    """Categorical tier for one hazard probability.

    Raises InvalidProbability when the literal is not in the hazard's table.
    """
    hazard = Hazard.parse(hazard)
    label, sig = parse_probability(probability, significant)
    literal = to_literal(label, sig)
    tier = TABLES[hazard].get(literal)
    if tier is None:
        raise InvalidProbability(hazard, literal)
    return tier


def is_defined(hazard: Hazard | str, probability: str, significant: bool = False) -> bool:
    try:
        classify(hazard, probability, significant)
    except ValueError:
        return False
    return True


def probabilities(hazard: Hazard | str) -> list[str]:
    """Literals accepted for a hazard, lowest first."""
    return list(TABLES[Hazard.parse(hazard)])


def tier_order(a: CategoricalTier, b: CategoricalTier) -> int:
    """-1, 0 or 1 as a ranks below, equal to, or above b."""
    return (a > b) - (a < b)


def max_tier(tiers: Iterable[CategoricalTier]) -> CategoricalTier:
    return max(tiers, default=CategoricalTier.NONE)
