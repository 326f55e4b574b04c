# retailready/normalizer.py
# Boundary validator for the extraction model's JSON output.
# - All input is untrusted; nothing here mutates it
# - One bad requirement rejects the whole batch
# - Invalid severity is the single repair we make (-> "Medium")

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from .errors import InvalidRequirementError, SchemaError
from .schemas import SEVERITIES, ExtractionResult, Requirement

logger = logging.getLogger(__name__)

MANDATORY_FIELDS = ("requirement", "violation", "fine", "category")
LIST_SECTIONS = ("order_types", "label_placement", "timing_requirements", "product_requirements")

DEFAULT_SEVERITY = "Medium"
DEFAULT_PREVENTION_METHOD = "Manual verification"
DEFAULT_RESPONSIBLE_PARTY = "Warehouse Worker"


def _is_blank(x: Any) -> bool:
    return x is None or (isinstance(x, str) and not x.strip())


def _safe_float(x: Any) -> Optional[float]:
    # fine_amount arrives as 7.5, "7.50", "$7.50" or "n/a"
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        return float(x)
    if isinstance(x, str):
        s = re.sub(r"[^\d.\-]", "", x)
        try:
            return float(s)
        except ValueError:
            return None
    return None


def _optional_str(x: Any) -> Optional[str]:
    if _is_blank(x):
        return None
    return x.strip() if isinstance(x, str) else str(x)


def _canonical_severity(raw: Any, index: int) -> str:
    if isinstance(raw, str):
        for sev in SEVERITIES:
            if raw.strip().lower() == sev.lower():
                return sev
    logger.warning("Invalid severity %r at requirement index %d, using %s", raw, index, DEFAULT_SEVERITY)
    return DEFAULT_SEVERITY


def normalize_requirement(raw: Any, index: int) -> Requirement:
    if not isinstance(raw, Mapping):
        raise InvalidRequirementError(index, "requirement", f"Requirement at index {index} is not an object")

    for field in MANDATORY_FIELDS:
        val = raw.get(field)
        if not isinstance(val, str) or not val.strip():
            raise InvalidRequirementError(index, field)

    # absent severity rejects, present-but-invalid severity is repaired
    if _is_blank(raw.get("severity")):
        raise InvalidRequirementError(index, "severity")

    return Requirement(
        requirement=raw["requirement"].strip(),
        violation=raw["violation"].strip(),
        fine=raw["fine"].strip(),
        category=raw["category"].strip(),
        severity=_canonical_severity(raw["severity"], index),
        fine_amount=_safe_float(raw.get("fine_amount")),
        fine_unit=_optional_str(raw.get("fine_unit")),
        additional_fees=_optional_str(raw.get("additional_fees")),
        prevention_method=_optional_str(raw.get("prevention_method")) or DEFAULT_PREVENTION_METHOD,
        responsible_party=_optional_str(raw.get("responsible_party")) or DEFAULT_RESPONSIBLE_PARTY,
        violation_code=_optional_str(raw.get("violation_code")),
    )


def normalize(raw: Any) -> List[Requirement]:
    """
    Validate the `requirements` array of an extraction payload.

    Raises SchemaError if the payload has no `requirements` list and
    InvalidRequirementError (with the index) for the first bad element.
    An empty list is a valid, empty result.
    """
    if not isinstance(raw, Mapping):
        raise SchemaError("Extraction payload must be a JSON object")
    items = raw.get("requirements")
    if not isinstance(items, list):
        raise SchemaError("Extraction payload has no 'requirements' array")

    if not items:
        logger.warning("Extraction payload contains no requirements")
        return []

    return [normalize_requirement(item, i) for i, item in enumerate(items)]


def normalize_extraction(raw: Any, retailer: str) -> ExtractionResult:
    """normalize() plus shape checks for the auxiliary routing-guide sections."""
    requirements = normalize(raw)

    sections: Dict[str, Any] = {}
    for name in LIST_SECTIONS:
        val = raw.get(name)
        if val is None:
            sections[name] = []
        elif isinstance(val, list):
            sections[name] = list(val)
        else:
            raise SchemaError(f"'{name}' must be an array")

    carton_specs = raw.get("carton_specs")
    if carton_specs is None:
        carton_specs = {}
    elif not isinstance(carton_specs, Mapping):
        raise SchemaError("'carton_specs' must be an object")

    logger.info(
        "Normalized %d requirements for %s (%d order types, %d label rules, %d timing requirements)",
        len(requirements),
        retailer,
        len(sections["order_types"]),
        len(sections["label_placement"]),
        len(sections["timing_requirements"]),
    )

    return ExtractionResult(
        retailer=retailer,
        requirements=requirements,
        carton_specs=dict(carton_specs),
        **sections,
    )
