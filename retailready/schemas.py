from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal, Dict, Any, Tuple, FrozenSet

Severity = Literal["High", "Medium", "Low"]
RiskTier = Literal["High", "Medium", "Low"]

SEVERITIES: Tuple[str, ...] = ("High", "Medium", "Low")


class RetailerProfile(BaseModel):
    name: str
    keywords: FrozenSet[str] = frozenset()
    violation_codes: Tuple[str, ...] = ()
    violation_focus: str = ""
    fine_structure: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def is_generic(self) -> bool:
        return not self.keywords


class Requirement(BaseModel):
    requirement: str = Field(min_length=1)
    violation: str = Field(min_length=1)
    fine: str = Field(min_length=1)
    category: str = Field(min_length=1)
    severity: Severity = "Medium"
    fine_amount: Optional[float] = None
    fine_unit: Optional[str] = None
    additional_fees: Optional[str] = None
    prevention_method: str = "Manual verification"
    responsible_party: str = "Warehouse Worker"
    violation_code: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ExtractionResult(BaseModel):
    retailer: str
    requirements: List[Requirement]
    order_types: List[Any] = Field(default_factory=list)
    carton_specs: Dict[str, Any] = Field(default_factory=dict)
    label_placement: List[Any] = Field(default_factory=list)
    timing_requirements: List[Any] = Field(default_factory=list)
    product_requirements: List[Any] = Field(default_factory=list)


class RiskAssessment(BaseModel):
    requirement: Requirement
    units: int
    estimated_fine: int = Field(ge=0)
    severity: str
    risk_tier: RiskTier
    risk_percentage: float = Field(ge=0, le=100)
    risk_factors: List[str] = Field(default_factory=list)

    # calculation details
    base_fine: float = 0
    severity_multiplier: float = 1.0


class RiskStats(BaseModel):
    count: int = 0
    total_estimated_fine: int = 0
    average_fine: int = 0
    distribution: Dict[RiskTier, int] = Field(
        default_factory=lambda: {"High": 0, "Medium": 0, "Low": 0}
    )
    highest_risk: Optional[RiskAssessment] = None
    assessments: List[RiskAssessment] = Field(default_factory=list)


# ---------------------------
# HTTP request bodies
# ---------------------------

class DetectRequest(BaseModel):
    text: str


class ScoreRequest(BaseModel):
    requirement: Requirement
    units: int
    shipment_value: Optional[float] = Field(default=None, gt=0)


class EstimateRequest(BaseModel):
    fine: str
    units: int


class BatchRequest(BaseModel):
    requirements: List[Requirement]
    units: int
