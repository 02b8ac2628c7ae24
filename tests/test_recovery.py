import json

import pytest

from medlist.schemas.models import MedicationList
from medlist.services.errors import ExtractionError, SchemaValidationError
from medlist.services.llm import recovery
from medlist.services.llm.recovery import recover, recover_json

LISINOPRIL = {
    "medication_name": "Lisinopril 10 MG Oral Tablet",
    "frequency": "daily",
    "instructions": "Take 1 tablet by mouth daily",
    "is_prn": False,
    "indication": "Hypertension",
}
ALBUTEROL = {
    "medication_name": "Albuterol 90 MCG/ACTUATION Inhaler",
    "frequency": "every 4 hours",
    "instructions": "Inhale 2 puffs every 4 hours as needed for wheezing",
    "is_prn": True,
    "indication": "",
}


def _stages_tried(monkeypatch):
    tried = []
    wrapped = []
    for name, fn in recovery.STAGES:
        def stage(text, _name=name, _fn=fn):
            tried.append(_name)
            return _fn(text)
        wrapped.append((name, stage))
    monkeypatch.setattr(recovery, "STAGES", wrapped)
    return tried


def test_direct_json(monkeypatch):
    tried = _stages_tried(monkeypatch)
    assert recover_json('{"medications":[]}') == {"medications": []}
    assert tried == ["direct"]


def test_fenced_block(monkeypatch):
    tried = _stages_tried(monkeypatch)
    assert recover_json('```json\n{"medications":[]}\n```') == {"medications": []}
    assert tried == ["direct", "fenced"]


def test_untagged_fence():
    text = 'Result:\n```\n{"medications": []}\n```\nDone.'
    assert recover_json(text) == {"medications": []}


def test_only_first_fence_is_used():
    text = '```json\n{"medications": [1]}\n```\n```json\n{"medications": [2]}\n```'
    assert recover_json(text) == {"medications": [1]}


def test_brace_span_in_prose(monkeypatch):
    tried = _stages_tried(monkeypatch)
    text = 'Here you go: {"medications":[]} — hope that helps'
    assert recover_json(text) == {"medications": []}
    assert tried == ["direct", "fenced", "brace_span"]


def test_brace_scan_when_prose_has_braces():
    # greedy first-{ to last-} span is not JSON here
    text = 'Sure {see below}: {"medications": []} (done}'
    assert recover_json(text) == {"medications": []}


def test_broken_fence_falls_through_to_brace_span():
    text = '```json\n{"medications": [}\n```\nCorrected: {"medications": []}'
    assert recover_json(text) == {"medications": []}


def test_no_json_anywhere():
    with pytest.raises(ExtractionError, match="Could not parse response as JSON"):
        recover_json("I cannot read this image")


@pytest.mark.parametrize("text", [None, "", "   ", "} backwards {"])
def test_empty_or_unusable(text):
    with pytest.raises(ExtractionError):
        recover_json(text)


def test_recover_keeps_order_and_duplicates():
    raw = json.dumps({"medications": [ALBUTEROL, LISINOPRIL, ALBUTEROL]})
    result = recover(raw)
    names = [m.medication_name for m in result.medications]
    assert names == [ALBUTEROL["medication_name"], LISINOPRIL["medication_name"], ALBUTEROL["medication_name"]]


def test_missing_indication_defaults_to_empty():
    med = {k: v for k, v in LISINOPRIL.items() if k != "indication"}
    nulled = {**ALBUTEROL, "indication": None}
    result = recover(json.dumps({"medications": [med, nulled]}))
    assert [m.indication for m in result.medications] == ["", ""]


def test_strings_are_stripped():
    med = {**LISINOPRIL, "medication_name": "  Lisinopril 10 MG Oral Tablet \n"}
    result = recover(json.dumps({"medications": [med]}))
    assert result.medications[0].medication_name == "Lisinopril 10 MG Oral Tablet"


@pytest.mark.parametrize(
    "value",
    [
        {"foo": 1},
        {"medications": "none"},
        {"medications": [{"medication_name": "Aspirin"}]},
        [LISINOPRIL],
    ],
)
def test_schema_mismatch(value):
    with pytest.raises(SchemaValidationError):
        recover(json.dumps(value))


def test_schema_error_is_an_extraction_error():
    with pytest.raises(ExtractionError):
        recover('{"medications": [{"is_prn": "maybe"}]}')


def test_serialization_is_idempotent():
    text = "```json\n" + json.dumps({"medications": [LISINOPRIL, ALBUTEROL]}) + "\n```"
    first = recover(text)
    again = recover(first.model_dump_json())
    assert again == first
    assert MedicationList.model_validate_json(first.model_dump_json()) == first


def test_deeply_nested_reply_is_extraction_error():
    depth = 100_000
    text = '{"medications": ' + "[" * depth + "]" * depth + "}"

    with pytest.raises(ExtractionError, match="Could not parse response as JSON"):
        recover(text)


def test_deeply_nested_block_in_prose_is_skipped():
    depth = 100_000
    text = 'Nested: {"a": ' + "[" * depth + ' then {"medications": []}'
    assert recover_json(text) == {"medications": []}
