"""
Feedback delivery: email through SendGrid when configured, otherwise the server log.
"""

from __future__ import annotations

import html
import logging
from typing import Tuple

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, ReplyTo

from src.api import settings
from src.api.errors import ProviderError
from src.api.schemas import FeedbackRequest

logger = logging.getLogger(__name__)

APP_NAME = "ThisSongThatTime"


def _title(value: str) -> str:
    return value[:1].upper() + value[1:]


# PUBLIC_INTERFACE
def subject_line(fb: FeedbackRequest) -> str:
    return f"[{APP_NAME}] {_title(fb.type)}: {fb.subject}"


# PUBLIC_INTERFACE
def render_feedback(fb: FeedbackRequest) -> Tuple[str, str]:
    """Return (html, text) bodies for a feedback email."""
    e = html.escape
    parts = [
        f"<h2>New Feedback from {APP_NAME}</h2>",
        f"<p><strong>Type:</strong> {e(_title(fb.type))}</p>",
        f"<p><strong>Subject:</strong> {e(fb.subject)}</p>",
    ]
    lines = [f"New Feedback from {APP_NAME}", "", f"Type: {_title(fb.type)}", f"Subject: {fb.subject}"]
    if fb.priority:
        parts.append(f"<p><strong>Priority:</strong> {e(_title(fb.priority))}</p>")
        lines.append(f"Priority: {_title(fb.priority)}")

    parts += ["<h3>Description:</h3>", f'<p style="white-space: pre-wrap;">{e(fb.description)}</p>']
    lines += ["", "Description:", fb.description]

    if fb.device or fb.browser:
        parts.append("<h3>Technical Details:</h3>")
        lines += ["", "Technical Details:"]
    if fb.device:
        parts.append(f"<p><strong>Device:</strong> {e(fb.device)}</p>")
        lines.append(f"Device: {fb.device}")
    if fb.browser:
        parts.append(f"<p><strong>Browser:</strong> {e(fb.browser)}</p>")
        lines.append(f"Browser: {fb.browser}")

    if fb.email:
        parts.append(f"<p><strong>User Email:</strong> {e(fb.email)}</p>")
        lines += ["", f"User Email: {fb.email}"]
    else:
        parts.append("<p><em>No email provided</em></p>")
        lines += ["", "No email provided"]

    parts += ["<hr>", f"<p><small>Sent from {APP_NAME} Feedback Form</small></p>"]
    lines += ["", "---", f"Sent from {APP_NAME} Feedback Form"]
    return "\n".join(parts), "\n".join(lines)


def _log_feedback(fb: FeedbackRequest) -> None:
    logger.info(
        "=== NEW FEEDBACK ===\nType: %s\nSubject: %s\nDescription: %s\nEmail: %s\nPriority: %s\n"
        "Device: %s\nBrowser: %s\n===================",
        fb.type,
        fb.subject,
        fb.description,
        fb.email or "Not provided",
        fb.priority or "Not specified",
        fb.device or "Not specified",
        fb.browser or "Not specified",
    )


# PUBLIC_INTERFACE
def send_feedback(fb: FeedbackRequest) -> str:
    """Deliver feedback; returns "email" or "log" depending on the channel used."""
    api_key = settings.sendgrid_api_key()
    if not api_key:
        _log_feedback(fb)
        return "log"

    html_body, text_body = render_feedback(fb)
    message = Mail(
        from_email=settings.feedback_from_email(),
        to_emails=settings.feedback_to_email(),
        subject=subject_line(fb),
        html_content=html_body,
        plain_text_content=text_body,
    )
    if fb.email:
        message.reply_to = ReplyTo(fb.email)

    try:
        response = SendGridAPIClient(api_key).send(message)
    except Exception as exc:
        # sendgrid raises python_http_client errors for non-2xx responses
        raise ProviderError("sendgrid", f"send failed: {exc}") from exc
    logger.info("feedback_emailed: type=%s status=%s", fb.type, getattr(response, "status_code", None))
    return "email"
