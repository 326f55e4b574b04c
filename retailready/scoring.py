import logging
import math
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from .errors import InvalidInputError
from .fines import DEFAULT_FINE_CONFIG, FineConfig, estimate_fine
from .schemas import Requirement, RiskAssessment, RiskTier

logger = logging.getLogger(__name__)


class RiskConfig(BaseModel):
    # tier is a function of the estimated fine only
    high_threshold: float = 1000
    medium_threshold: float = 500

    severity_multipliers: Mapping[str, float] = Field(
        default={"High": 1.5, "Medium": 1.0, "Low": 0.5},
        validate_default=True,
    )
    default_multiplier: float = 1.0

    # Placeholder: with no real shipment value, assume it is 10x the fine.
    # Makes every non-zero percentage 10%; kept for compatibility.
    shipment_value_factor: float = 10

    large_quantity: int = 100
    moderate_quantity: int = 50
    high_impact: float = 1000
    moderate_impact: float = 500

    category_factors: Mapping[str, str] = Field(
        default={
            "labeling": "Labeling violations can affect entire shipments",
            "delivery": "Delivery violations can disrupt supply chain",
            "packaging": "Packaging violations can cause product damage",
        },
        validate_default=True,
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("severity_multipliers", "category_factors", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        # frozen=True only guards attributes, not the tables behind them
        return MappingProxyType(dict(value))

    @field_serializer("severity_multipliers", "category_factors")
    def _as_dict(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(value)


DEFAULT_RISK_CONFIG = RiskConfig()


def round_half_up(x: float, ndigits: int = 0) -> float:
    scale = 10 ** ndigits
    return math.floor(x * scale + 0.5) / scale


def risk_tier(estimated_fine: float, config: RiskConfig = DEFAULT_RISK_CONFIG) -> RiskTier:
    if estimated_fine >= config.high_threshold:
        return "High"
    if estimated_fine >= config.medium_threshold:
        return "Medium"
    return "Low"


def risk_percentage(
    estimated_fine: float,
    shipment_value: Optional[float] = None,
    config: RiskConfig = DEFAULT_RISK_CONFIG,
) -> float:
    """Fine as a share of shipment value, 0-100 with two decimals."""
    if estimated_fine == 0:
        return 0
    if not shipment_value:
        shipment_value = estimated_fine * config.shipment_value_factor
    pct = estimated_fine / shipment_value * 100
    return min(round_half_up(pct, 2), 100)


def risk_factors(
    requirement: Requirement,
    units: int,
    estimated_fine: float,
    config: RiskConfig = DEFAULT_RISK_CONFIG,
) -> List[str]:
    factors: List[str] = []

    if requirement.severity == "High":
        factors.append("High severity violation")

    if units > config.large_quantity:
        factors.append("Large quantity affected")
    elif units > config.moderate_quantity:
        factors.append("Moderate quantity affected")

    if estimated_fine > config.high_impact:
        factors.append("High financial impact")
    elif estimated_fine > config.moderate_impact:
        factors.append("Moderate financial impact")

    category_factor = config.category_factors.get(requirement.category.strip().lower())
    if category_factor:
        factors.append(category_factor)

    return factors


def _as_requirement(requirement: Union[Requirement, Mapping[str, Any], None]) -> Requirement:
    if requirement is None:
        raise InvalidInputError("Requirement and units are required for risk calculation")
    if isinstance(requirement, Requirement):
        return requirement
    try:
        return Requirement.model_validate(requirement)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid requirement: {exc}") from exc


def assess(
    requirement: Union[Requirement, Mapping[str, Any]],
    units: int,
    shipment_value: Optional[float] = None,
    config: RiskConfig = DEFAULT_RISK_CONFIG,
    fine_config: FineConfig = DEFAULT_FINE_CONFIG,
) -> RiskAssessment:
    """
    Risk assessment of one requirement for `units` affected units.

    Raises InvalidInputError when the requirement is missing or units is
    not a positive integer.
    """
    req = _as_requirement(requirement)
    if isinstance(units, bool) or not isinstance(units, int) or units <= 0:
        raise InvalidInputError(f"units must be a positive integer, got {units!r}")
    if shipment_value is not None and shipment_value <= 0:
        raise InvalidInputError(f"shipment_value must be positive, got {shipment_value!r}")

    base_fine = estimate_fine(req.fine, units, fine_config)
    multiplier = config.severity_multipliers.get(req.severity, config.default_multiplier)
    estimated_fine = int(round_half_up(base_fine * multiplier))

    assessment = RiskAssessment(
        requirement=req,
        units=units,
        estimated_fine=estimated_fine,
        severity=req.severity,
        risk_tier=risk_tier(estimated_fine, config),
        risk_percentage=risk_percentage(estimated_fine, shipment_value, config),
        risk_factors=risk_factors(req, units, estimated_fine, config),
        base_fine=base_fine,
        severity_multiplier=multiplier,
    )
    logger.debug(
        "Assessed %r x%d: fine=%d tier=%s",
        req.violation,
        units,
        assessment.estimated_fine,
        assessment.risk_tier,
    )
    return assessment
