import pytest

from conftest import make_requirement
from retailready.errors import InvalidInputError
from retailready.report import assess_batch, summarize


def test_empty_input_is_zeroed():
    stats = summarize([], 10)
    assert stats.count == 0
    assert stats.total_estimated_fine == 0
    assert stats.average_fine == 0
    assert stats.distribution == {"High": 0, "Medium": 0, "Low": 0}
    assert stats.highest_risk is None
    assert stats.assessments == []


def test_statistics():
    reqs = [
        make_requirement(fine="$1200 per occurrence", severity="Medium"),
        make_requirement(fine="$600 per occurrence", severity="Medium"),
        make_requirement(fine="$101 per occurrence", severity="Medium"),
    ]
    stats = summarize(reqs, 5)
    assert stats.count == 3
    assert stats.total_estimated_fine == 1901
    assert stats.average_fine == 634  # 633.67
    assert stats.distribution == {"High": 1, "Medium": 1, "Low": 1}
    assert stats.highest_risk.estimated_fine == 1200
    assert len(stats.assessments) == 3


def test_highest_risk_ties_keep_first():
    first = make_requirement(fine="$700 per occurrence", violation="first")
    second = make_requirement(fine="$700 per occurrence", violation="second")
    stats = summarize([make_requirement(fine="$5 per occurrence"), first, second], 1)
    assert stats.highest_risk.requirement.violation == "first"


def test_invalid_element_propagates():
    with pytest.raises(InvalidInputError):
        summarize([make_requirement(), None], 10)


def test_invalid_units_propagate():
    with pytest.raises(InvalidInputError):
        summarize([make_requirement()], 0)


def test_assess_batch_keeps_order():
    reqs = [make_requirement(fine=f"${n} per occurrence") for n in (3, 1, 2)]
    assert [a.estimated_fine for a in assess_batch(reqs, 1)] == [3, 1, 2]
