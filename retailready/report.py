from typing import Any, List, Mapping, Sequence, Union

from .schemas import Requirement, RiskAssessment, RiskStats
from .scoring import DEFAULT_RISK_CONFIG, RiskConfig, round_half_up, assess

RequirementLike = Union[Requirement, Mapping[str, Any]]


def assess_batch(
    requirements: Sequence[RequirementLike],
    units: int,
    config: RiskConfig = DEFAULT_RISK_CONFIG,
) -> List[RiskAssessment]:
    # no partial-failure suppression: a bad element raises
    return [assess(req, units, config=config) for req in requirements]


def summarize(
    requirements: Sequence[RequirementLike],
    units: int,
    config: RiskConfig = DEFAULT_RISK_CONFIG,
) -> RiskStats:
    """
    Distribution statistics for a set of requirements at the same unit count.
    Empty input gives zeroed stats with no highest-risk entry.
    """
    if not requirements:
        return RiskStats()

    assessments = assess_batch(requirements, units, config)

    total = sum(a.estimated_fine for a in assessments)
    distribution = {"High": 0, "Medium": 0, "Low": 0}
    for a in assessments:
        distribution[a.risk_tier] += 1

    # strict ">" keeps the first of equal fines
    highest = assessments[0]
    for a in assessments[1:]:
        if a.estimated_fine > highest.estimated_fine:
            highest = a

    return RiskStats(
        count=len(assessments),
        total_estimated_fine=total,
        average_fine=int(round_half_up(total / len(assessments))),
        distribution=distribution,
        highest_risk=highest,
        assessments=assessments,
    )
