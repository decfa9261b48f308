from allure_commons.types import AttachmentType

from harness_tools.report_tools import allure_utils
from harness_tools.report_tools.allure_utils import AllureEvidenceSink, attach_bytes
from loginsuite.ui_testing.framework.evidence import EvidenceCapture

from .fakes import PNG_BYTES


def _capture_attach(monkeypatch):
    calls = []

    def fake_attach(body, name=None, attachment_type=None, extension=None):
        calls.append({"body": body, "name": name, "type": attachment_type, "extension": extension})

    monkeypatch.setattr(allure_utils.allure, "attach", fake_attach)
    return calls


def test_known_mime_types_map_to_allure_types(monkeypatch):
    calls = _capture_attach(monkeypatch)

    attach_bytes(PNG_BYTES, "screenshot", "image/png", "png")
    attach_bytes(b"<html/>", "page_source", "text/html", "html")
    attach_bytes(b"{}", "cookies", "application/json", "json")

    assert [c["type"] for c in calls] == [AttachmentType.PNG, AttachmentType.HTML, AttachmentType.JSON]


def test_unknown_mime_type_keeps_extension(monkeypatch):
    calls = _capture_attach(monkeypatch)

    attach_bytes(b"trace", "har", "application/x-har", "har")

    assert calls[0]["type"] is AttachmentType.TEXT
    assert calls[0]["extension"] == "har"


def test_sink_attaches_log_snapshot_as_text(monkeypatch):
    calls = _capture_attach(monkeypatch)

    AllureEvidenceSink().add_attachment("Failure logs - test_x", "text/plain", b"line 1\nline 2", "log")

    assert calls == [{
        "body": b"line 1\nline 2",
        "name": "Failure logs - test_x",
        "type": AttachmentType.TEXT,
        "extension": None,
    }]


def test_allure_sink_receives_evidence_bundle(monkeypatch, session):
    calls = _capture_attach(monkeypatch)

    EvidenceCapture(AllureEvidenceSink()).capture_failure(session, "test_valid_login")

    names = [c["name"] for c in calls]
    assert "screenshot - test_valid_login" in names
    assert "metadata - test_valid_login" in names
