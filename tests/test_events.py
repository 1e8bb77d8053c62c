from __future__ import annotations

import pytest

from calls.errors import InvalidWebhookPayload
from calls.events import EventClass, EventClassifier, lookup_path, parse_event
from config.settings import Settings

PATHS = ("monitor.controlUrl", "controlUrl")


def _classifier() -> EventClassifier:
    return EventClassifier.from_settings(Settings(_env_file=None))


@pytest.mark.parametrize(
    "tag",
    ["assistant.started", "assistant-started", "call-start", "call.started"],
)
def test_start_spellings_classify_as_start(tag):
    assert _classifier().classify(tag) is EventClass.START


@pytest.mark.parametrize("tag", ["end-of-call-report", "call.ended", "call-ended"])
def test_end_spellings_classify_as_end(tag):
    assert _classifier().classify(tag) is EventClass.END


def test_unknown_and_empty_tags_fall_back_to_other():
    classifier = _classifier()
    assert classifier.classify("transcript") is EventClass.OTHER
    assert classifier.classify("") is EventClass.OTHER


def test_status_update_in_progress_counts_as_start():
    classifier = _classifier()
    assert classifier.classify("status-update", "in-progress") is EventClass.START
    assert classifier.classify("status-update", "ringing") is EventClass.OTHER
    assert classifier.classify("status-update") is EventClass.OTHER


def test_classifier_can_be_extended_without_dispatch_changes():
    classifier = _classifier()
    classifier.register("hang", EventClass.END)
    assert classifier.classify("HANG") is EventClass.END


def test_parse_event_reads_monitor_control_url():
    event = parse_event(
        {
            "message": {
                "type": "call.started",
                "call": {"id": "A", "monitor": {"controlUrl": "https://ex/ctrl"}},
            }
        },
        PATHS,
    )
    assert event.call_id == "A"
    assert event.event_type == "call.started"
    assert event.control_url == "https://ex/ctrl"


def test_parse_event_falls_back_to_flat_control_url():
    event = parse_event(
        {"message": {"type": "call-start", "call": {"id": "A", "controlUrl": "https://ex/flat"}}},
        PATHS,
    )
    assert event.control_url == "https://ex/flat"


def test_parse_event_tolerates_missing_call():
    event = parse_event({"message": {"type": "transcript"}}, PATHS)
    assert event.call_id is None
    assert event.control_url is None


@pytest.mark.parametrize("payload", [[], "text", {}, {"message": "nope"}])
def test_parse_event_rejects_unusable_bodies(payload):
    with pytest.raises(InvalidWebhookPayload):
        parse_event(payload, PATHS)


def test_lookup_path_stops_at_non_mapping():
    assert lookup_path({"monitor": "x"}, "monitor.controlUrl") is None
    assert lookup_path({"a": {"b": 1}}, "a.b") == 1
