import logging

import pytest

from src.api import feedback
from src.api.errors import ProviderError
from src.api.schemas import FeedbackRequest


def _fb(**extra):
    data = {"type": "bug", "subject": "Player <stuck>", "description": "Preview never starts"}
    data.update(extra)
    return FeedbackRequest(**data)


def test_subject_line():
    assert feedback.subject_line(_fb()) == "[ThisSongThatTime] Bug: Player <stuck>"


def test_render_feedback_escapes_html():
    html_body, text_body = feedback.render_feedback(_fb(email="a@b.com", device="iPhone"))
    assert "Player &lt;stuck&gt;" in html_body
    assert "<stuck>" not in html_body
    assert "Subject: Player <stuck>" in text_body
    assert "Device: iPhone" in text_body
    assert "User Email: a@b.com" in text_body


def test_render_feedback_without_email():
    html_body, text_body = feedback.render_feedback(_fb())
    assert "No email provided" in html_body
    assert "Technical Details" not in text_body


def test_send_feedback_logs_without_api_key(caplog):
    with caplog.at_level(logging.INFO, logger="src.api.feedback"):
        assert feedback.send_feedback(_fb()) == "log"
    assert "=== NEW FEEDBACK ===" in caplog.text
    assert "Preview never starts" in caplog.text


def test_send_feedback_emails_with_api_key(monkeypatch):
    sent = []

    class FakeClient:
        def __init__(self, api_key):
            assert api_key == "SG.test"

        def send(self, message):
            sent.append(message)
            return type("Response", (), {"status_code": 202})()

    monkeypatch.setenv("SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(feedback, "SendGridAPIClient", FakeClient)

    assert feedback.send_feedback(_fb(email="reply@example.com")) == "email"
    assert len(sent) == 1
    assert sent[0].reply_to.email == "reply@example.com"


def test_send_failure_is_a_provider_error(monkeypatch):
    class BrokenClient:
        def __init__(self, api_key):
            pass

        def send(self, message):
            raise RuntimeError("403 Forbidden")

    monkeypatch.setenv("SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(feedback, "SendGridAPIClient", BrokenClient)
    with pytest.raises(ProviderError):
        feedback.send_feedback(_fb())


def test_feedback_endpoint(client):
    r = client.post(
        "/api/feedback",
        json={"type": "feature", "subject": "Dark mode", "description": "Please", "priority": "low"},
    )
    assert r.status_code == 200
    assert r.json() == {"message": "Feedback sent successfully"}


def test_feedback_endpoint_validation(client):
    r = client.post("/api/feedback", json={"type": "bug", "subject": ""})
    assert r.status_code == 400
    assert {tuple(e["loc"])[-1] for e in r.json()["errors"]} >= {"subject", "description"}


def test_feedback_endpoint_send_failure(client, monkeypatch):
    def broken(fb):
        raise ProviderError("sendgrid", "send failed")

    monkeypatch.setattr("src.api.routes_feedback.send_feedback", broken)
    r = client.post("/api/feedback", json={"type": "bug", "subject": "S", "description": "D"})
    assert r.status_code == 500
    assert r.json()["message"] == "Failed to send feedback"
