"""
Centralized soil property groupings and name-based default scoring rules.

- SOIL_PROPERTY_SETS maps a set name to the properties it groups.
- DEFAULT_RULE_PATTERNS assigns a default ScoringRule from a property name.
  Patterns are checked top to bottom and the first match wins, so the more
  specific ones come first.

The patterns match on names, not meaning: "cation_exchange_capacity" does not
hit the CEC pattern and falls through to the default (higher is better).
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Callable, Sequence, Union

from .errors import ValidationError
from .scoring import HigherBetter, LowerBetter, OptimumRange, ScoringRule

SOIL_PROPERTY_SETS = MappingProxyType({
    "basic": ("pH", "OM", "P", "K"),
    "standard": ("Sand", "Silt", "Clay", "pH", "OM", "N", "P", "K", "CEC"),
    "comprehensive": ("Sand", "Silt", "Clay", "pH", "OM", "N", "P", "K",
                      "CEC", "BD", "EC", "Ca", "Mg", "Na", "S"),
    "physical": ("Sand", "Silt", "Clay", "BD"),
    "chemical": ("pH", "EC", "CEC", "Ca", "Mg", "K", "Na"),
    "fertility": ("OM", "N", "P", "K", "Ca", "Mg", "S", "CEC"),
})

# (pattern on the lower-cased name, rule factory)
DEFAULT_RULE_PATTERNS: tuple[tuple[re.Pattern, Callable[[], ScoringRule]], ...] = (
    # pH, pH_water, soil_pH; not phosphorus
    (re.compile(r"^ph$|^ph_|_ph$|\bph\b"), lambda: OptimumRange(optimum=7, tolerance=1)),
    # electrical conductivity
    (re.compile(r"^ec$|^ec_|_ec$|electrical"), LowerBetter),
    # bulk density
    (re.compile(r"^bd$|^bd_|_bd$|bulk"), LowerBetter),
    # organic matter / carbon
    (re.compile(r"\bom\b|soc|organic"), HigherBetter),
    # N, P, K
    (re.compile(r"\bn\b|nitrogen|\bp\b|phosph|\bk\b|potass"), HigherBetter),
    # CEC and base cations
    (re.compile(r"\bcec\b|\bca\b|calcium|\bmg\b|magnesium"), HigherBetter),
)


def default_rule_for(name: str) -> ScoringRule:
    """Default ScoringRule for a property name; HigherBetter when no pattern matches."""
    lowered = name.lower()
    for pattern, factory in DEFAULT_RULE_PATTERNS:
        if pattern.search(lowered):
            return factory()
    return HigherBetter()


def standard_scoring_rules(properties: Union[str, Sequence[str]]) -> dict[str, ScoringRule]:
    """
    Build default scoring rules for a property set name or a list of property names.

    Usage examples:
    - standard_scoring_rules("basic")
    - standard_scoring_rules(["pH_water", "EC", "SOC"])
    """
    if isinstance(properties, str):
        if properties in SOIL_PROPERTY_SETS:
            properties = SOIL_PROPERTY_SETS[properties]
        else:
            properties = [properties]
    msg = "properties must be a character vector or a property set name"
    try:
        properties = list(properties)
    except TypeError as e:
        raise ValidationError(msg) from e
    if not properties or not all(isinstance(p, str) for p in properties):
        raise ValidationError(msg)
    return {prop: default_rule_for(prop) for prop in properties}
