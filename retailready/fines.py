# retailready/fines.py
# Fine-text interpreter: free-form fine descriptions -> dollar estimate.
# - Rules are independent and additive ("$2/carton + $250" hits two rules)
# - Each dollar amount is claimed by the first rule that matches it, so a
#   later, broader rule never counts it again
# - Fallback only runs when no rule contributed anything

import math
import re
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

# "$7.50", "$1,000", "$ 250"
AMOUNT = r"\$\s?(\d[\d,]*(?:\.\d+)?)"
_PER = r"\s*(?:/\s*|per\s+)"


@dataclass(frozen=True)
class FineRule:
    name: str
    pattern: re.Pattern[str]
    per_unit: bool


@dataclass(frozen=True)
class FineConfig:
    rules: Tuple[FineRule, ...]
    fallback_amount: re.Pattern[str]
    # fallback amount is multiplied by units when this matches
    fallback_per_unit: re.Pattern[str]


class FineComponent(NamedTuple):
    rule: str
    amount: float
    per_unit: bool
    subtotal: float


def _rule(name: str, pattern: str, per_unit: bool) -> FineRule:
    return FineRule(name=name, pattern=re.compile(pattern), per_unit=per_unit)


DEFAULT_FINE_CONFIG = FineConfig(
    rules=(
        _rule("per_carton", AMOUNT + _PER + r"cartons?\b", per_unit=True),
        _rule("per_item", AMOUNT + _PER + r"(?:items?|units?)\b", per_unit=True),
        _rule("per_occurrence", AMOUNT + _PER + r"occurrences?\b", per_unit=False),
        _rule("per_hour", AMOUNT + _PER + r"(?:hour|hr)\b", per_unit=False),
        _rule("per_missing", AMOUNT + r"\s*per\s+(?:missing|incorrect|non-compliant)\b", per_unit=True),
        _rule("per_violation", AMOUNT + _PER + r"(?:violations?|incidents?)\b", per_unit=False),
        _rule("processing_fee", AMOUNT + r"\s+(?:processing|inspection)\s+fee\b", per_unit=False),
        _rule("fee", AMOUNT + r"(?:\s+[a-z][a-z\-]*){0,2}\s+fees?\b", per_unit=False),
        _rule("fee_of", r"\bfees?\s+of\s+" + AMOUNT, per_unit=False),
        _rule("surcharge", r"(?:\+|\bplus)\s*" + AMOUNT, per_unit=False),
    ),
    fallback_amount=re.compile(AMOUNT),
    fallback_per_unit=re.compile(r"\b(?:per|missing|incorrect)\b"),
)


def _to_amount(s: str) -> Optional[float]:
    try:
        return float(s.replace(",", ""))
    except ValueError:
        return None


def _valid_units(units) -> bool:
    if isinstance(units, bool) or not isinstance(units, (int, float)):
        return False
    return math.isfinite(units) and units > 0


def _overlaps(span: Tuple[int, int], claimed: List[Tuple[int, int]]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in claimed)


def fine_components(fine_text: str, units, config: FineConfig = DEFAULT_FINE_CONFIG) -> List[FineComponent]:
    """
    Every amount that contributes to the estimate, in rule order.
    Empty for empty/non-string text or non-positive/non-numeric units.
    """
    if not isinstance(fine_text, str) or not fine_text.strip():
        return []
    if not _valid_units(units):
        return []

    text = fine_text.lower()
    claimed: List[Tuple[int, int]] = []
    parts: List[FineComponent] = []

    for rule in config.rules:
        for m in rule.pattern.finditer(text):
            span = m.span(1)
            if _overlaps(span, claimed):
                continue
            amount = _to_amount(m.group(1))
            if amount is None:
                continue
            claimed.append(span)
            subtotal = amount * units if rule.per_unit else amount
            parts.append(FineComponent(rule.name, amount, rule.per_unit, subtotal))

    if sum(p.subtotal for p in parts) == 0:
        m = config.fallback_amount.search(text)
        amount = _to_amount(m.group(1)) if m else None
        if amount:
            per_unit = bool(config.fallback_per_unit.search(text))
            subtotal = amount * units if per_unit else amount
            parts = [FineComponent("fallback", amount, per_unit, subtotal)]

    return parts


def estimate_fine(fine_text: str, units, config: FineConfig = DEFAULT_FINE_CONFIG) -> float:
    """
    Estimated dollar fine for `units` affected units.

    >>> estimate_fine("$2/carton + $250", 100)
    450.0
    >>> estimate_fine("$500 per occurrence", 40)
    500.0
    """
    total = sum(p.subtotal for p in fine_components(fine_text, units, config))
    return round(total, 2)
