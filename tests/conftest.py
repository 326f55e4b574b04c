import json
from types import SimpleNamespace

import pytest

from retailready.schemas import Requirement


def make_requirement(**overrides) -> Requirement:
    fields = {
        "requirement": "UCC-128 label must be on every carton",
        "violation": "Carton shipped without UCC-128 label",
        "fine": "$1000 per occurrence",
        "category": "Pre-Shipment",
        "severity": "Medium",
    }
    fields.update(overrides)
    return Requirement(**fields)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    """Stands in for openai.OpenAI: only chat.completions.create is used."""

    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def requirement():
    return make_requirement()


@pytest.fixture
def raw_payload():
    return {
        "requirements": [
            {
                "requirement": "UCC-128 label must be placed on each carton",
                "violation": "Label not on carton",
                "fine": "$7.50 per carton + $250 service fee",
                "category": "Labeling",
                "severity": "High",
                "fine_amount": "7.50",
                "violation_code": "NL",
            },
            {
                "requirement": "Do not mix UPCs in one carton",
                "violation": "Multiple UPCs in one carton",
                "fine": "$50 per occurrence",
                "category": "Packaging",
                "severity": "urgent",
            },
        ],
        "order_types": [{"type": "Bulk Orders"}],
        "carton_specs": {"conveyable": {"weight_max": "50"}},
    }


@pytest.fixture
def fake_client(raw_payload):
    return FakeClient(content="```json\n" + json.dumps(raw_payload) + "\n```")
