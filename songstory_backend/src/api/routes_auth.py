"""
Admin endpoints:
- POST /api/admin/login

Returns { token, tokenType } for use as `Authorization: Bearer <token>` on
admin-only routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from src.api.auth import create_access_token, verify_admin_password
from src.api.schemas import AdminLoginRequest, AdminTokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.post(
    "/login",
    response_model=AdminTokenResponse,
    summary="Admin login",
    description="Validates the admin password and returns a JWT token.",
    operation_id="admin_login",
)
def login(req: AdminLoginRequest) -> AdminTokenResponse:
    """Exchange the admin password for a token."""
    if not verify_admin_password(req.password):
        logger.warning("admin_login_failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin password.")

    token = create_access_token(subject="admin")
    logger.info("admin_login_succeeded")
    return AdminTokenResponse(token=token, token_type="bearer")
