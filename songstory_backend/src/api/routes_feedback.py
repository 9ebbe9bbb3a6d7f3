"""
Feedback endpoint:
- POST /api/feedback

Sends the message by email when SendGrid is configured, otherwise writes it
to the application log.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from src.api.errors import ProviderError
from src.api.feedback import send_feedback
from src.api.schemas import FeedbackRequest, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Feedback"])


@router.post(
    "/feedback",
    response_model=MessageResponse,
    summary="Send feedback",
    operation_id="send_feedback",
)
def post_feedback(req: FeedbackRequest) -> MessageResponse:
    try:
        channel = send_feedback(req)
    except ProviderError as exc:
        logger.error("feedback_failed: error=%s", exc)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send feedback")
    logger.info("feedback_sent: type=%s channel=%s", req.type, channel)
    return MessageResponse(message="Feedback sent successfully")
