import copy

import pytest
from hypothesis import given, strategies as st

from retailready.errors import InvalidRequirementError, SchemaError
from retailready.normalizer import normalize, normalize_extraction
from retailready.schemas import SEVERITIES

BASE = {"requirement": "x", "violation": "y", "fine": "z", "category": "c"}


class TestSchema:
    @pytest.mark.parametrize("raw", [None, [], "requirements", {}, {"requirements": None}, {"requirements": {}}])
    def test_missing_requirements_array(self, raw):
        with pytest.raises(SchemaError):
            normalize(raw)

    def test_empty_batch_is_valid(self):
        assert normalize({"requirements": []}) == []


class TestMandatoryFields:
    @pytest.mark.parametrize("field", ["requirement", "violation", "fine", "category"])
    def test_missing_string_field_rejects(self, field):
        item = dict(BASE, severity="High")
        del item[field]
        with pytest.raises(InvalidRequirementError) as exc_info:
            normalize({"requirements": [item]})
        assert exc_info.value.field == field
        assert exc_info.value.index == 0

    @pytest.mark.parametrize("value", ["", "   ", 5, None, ["x"]])
    def test_blank_or_non_string_field_rejects(self, value):
        item = dict(BASE, severity="Low", fine=value)
        with pytest.raises(InvalidRequirementError):
            normalize({"requirements": [item]})

    def test_missing_severity_rejects(self):
        with pytest.raises(InvalidRequirementError) as exc_info:
            normalize({"requirements": [dict(BASE)]})
        assert exc_info.value.field == "severity"

    @pytest.mark.parametrize("severity", [None, "", "  "])
    def test_blank_severity_rejects(self, severity):
        with pytest.raises(InvalidRequirementError):
            normalize({"requirements": [dict(BASE, severity=severity)]})

    def test_bad_element_rejects_whole_batch_with_index(self):
        good = dict(BASE, severity="High")
        bad = dict(BASE, severity="High", violation="")
        with pytest.raises(InvalidRequirementError) as exc_info:
            normalize({"requirements": [good, good, bad, good]})
        assert exc_info.value.index == 2

    def test_non_object_element_rejects(self):
        with pytest.raises(InvalidRequirementError) as exc_info:
            normalize({"requirements": [dict(BASE, severity="High"), "oops"]})
        assert exc_info.value.index == 1


class TestSeverity:
    @pytest.mark.parametrize("severity", ["Critical", "urgent", 3, True, ["High"]])
    def test_invalid_severity_repaired_to_medium(self, severity):
        [req] = normalize({"requirements": [dict(BASE, severity=severity)]})
        assert req.severity == "Medium"

    @pytest.mark.parametrize("raw, expected", [("high", "High"), (" LOW ", "Low"), ("Medium", "Medium")])
    def test_case_insensitive_match_is_canonicalized(self, raw, expected):
        [req] = normalize({"requirements": [dict(BASE, severity=raw)]})
        assert req.severity == expected

    @given(severity=st.one_of(st.text(min_size=1).filter(str.strip), st.integers(), st.floats(allow_nan=False)))
    def test_severity_is_always_canonical(self, severity):
        [req] = normalize({"requirements": [dict(BASE, severity=severity)]})
        assert req.severity in SEVERITIES


class TestDefaults:
    def test_optional_fields_default(self):
        [req] = normalize({"requirements": [dict(BASE, severity="Low")]})
        assert req.fine_amount is None
        assert req.fine_unit is None
        assert req.additional_fees is None
        assert req.violation_code is None
        assert req.prevention_method == "Manual verification"
        assert req.responsible_party == "Warehouse Worker"

    @pytest.mark.parametrize("value, expected", [(7.5, 7.5), ("7.50", 7.5), ("$250", 250.0), ("n/a", None), (True, None)])
    def test_fine_amount_parsing(self, value, expected):
        [req] = normalize({"requirements": [dict(BASE, severity="Low", fine_amount=value)]})
        assert req.fine_amount == expected

    def test_provided_optional_fields_are_kept(self):
        item = dict(
            BASE,
            severity="High",
            fine_unit="per carton",
            additional_fees="$250 service fee",
            prevention_method="Scan every carton",
            responsible_party="Shipping Lead",
            violation_code="NL",
        )
        [req] = normalize({"requirements": [item]})
        assert req.fine_unit == "per carton"
        assert req.additional_fees == "$250 service fee"
        assert req.prevention_method == "Scan every carton"
        assert req.responsible_party == "Shipping Lead"
        assert req.violation_code == "NL"


def test_input_is_not_mutated(raw_payload):
    before = copy.deepcopy(raw_payload)
    normalize(raw_payload)
    normalize_extraction(raw_payload, retailer="Generic")
    assert raw_payload == before


def test_requirements_are_immutable():
    [req] = normalize({"requirements": [dict(BASE, severity="High")]})
    with pytest.raises(Exception):
        req.severity = "Low"


class TestExtractionSections:
    def test_sections_pass_through(self, raw_payload):
        result = normalize_extraction(raw_payload, retailer="Dick's Sporting Goods")
        assert result.retailer == "Dick's Sporting Goods"
        assert len(result.requirements) == 2
        assert result.requirements[1].severity == "Medium"
        assert result.order_types == [{"type": "Bulk Orders"}]
        assert result.carton_specs == {"conveyable": {"weight_max": "50"}}
        assert result.label_placement == []
        assert result.timing_requirements == []
        assert result.product_requirements == []

    def test_non_list_section_rejects(self, raw_payload):
        raw = dict(raw_payload, timing_requirements="ASN within 1 hour")
        with pytest.raises(SchemaError):
            normalize_extraction(raw, retailer="Generic")

    def test_non_object_carton_specs_rejects(self, raw_payload):
        raw = dict(raw_payload, carton_specs=["18x12x10"])
        with pytest.raises(SchemaError):
            normalize_extraction(raw, retailer="Generic")
