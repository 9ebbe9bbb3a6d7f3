"""
User endpoints:
- POST /api/users
- GET|PATCH /api/users/{id}
- GET /api/users/{id}/stats
- GET /api/users/{id}/analytics
- POST /api/users/{id}/follow (toggle)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from src.api.schemas import (
    FollowRequest,
    FollowToggleResponse,
    UserAnalytics,
    UserCreate,
    UserResponse,
    UserStats,
    UserUpdate,
)
from src.api.storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def _require_user(storage: Storage, user_id: int):
    user = storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found.")
    return user


@router.post(
    "",
    response_model=UserResponse,
    summary="Create a user",
    description="Creates a user. Username and email must both be unused.",
    operation_id="create_user",
)
def create_user(req: UserCreate, storage: Storage = Depends(get_storage)) -> UserResponse:
    email = req.email.lower().strip()
    username = req.username.strip()

    if storage.get_user_by_email(email) or storage.get_user_by_username(username):
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="User already exists")

    try:
        user = storage.create_user(
            {"username": username, "email": email, "display_name": req.display_name, "avatar": req.avatar}
        )
    except IntegrityError:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="User already exists")

    logger.info("user_created: id=%s username=%s", user.id, user.username)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user", operation_id="get_user")
def get_user(user_id: int, storage: Storage = Depends(get_storage)) -> UserResponse:
    return UserResponse.model_validate(_require_user(storage, user_id))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user profile",
    operation_id="update_user",
)
def update_user(user_id: int, req: UserUpdate, storage: Storage = Depends(get_storage)) -> UserResponse:
    _require_user(storage, user_id)
    changes = {k: v for k, v in req.model_dump(exclude_unset=True).items() if v is not None or k == "avatar"}

    if "email" in changes:
        changes["email"] = changes["email"].lower().strip()
        other = storage.get_user_by_email(changes["email"])
        if other is not None and other.id != user_id:
            raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Email is already in use")
    if "username" in changes:
        other = storage.get_user_by_username(changes["username"])
        if other is not None and other.id != user_id:
            raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Username is already in use")

    try:
        user = storage.update_user(user_id, changes)
    except IntegrityError:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Username or email is already in use")
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}/stats",
    response_model=UserStats,
    summary="Dashboard counters",
    description="Story count, likes received, followers and following.",
    operation_id="get_user_stats",
)
def get_user_stats(user_id: int, storage: Storage = Depends(get_storage)) -> UserStats:
    return storage.get_user_stats(user_id)


@router.get(
    "/{user_id}/analytics",
    response_model=UserAnalytics,
    summary="Story analytics",
    description="Genre, decade and life-stage distributions of the user's stories.",
    operation_id="get_user_analytics",
)
def get_user_analytics(user_id: int, storage: Storage = Depends(get_storage)) -> UserAnalytics:
    return UserAnalytics(
        genres=storage.get_user_genre_stats(user_id),
        decades=storage.get_user_decade_stats(user_id),
        ages=storage.get_user_age_stats(user_id),
    )


@router.post(
    "/{user_id}/follow",
    response_model=FollowToggleResponse,
    summary="Follow or unfollow a user",
    description="Toggles whether `followerId` follows the user in the path.",
    operation_id="toggle_follow",
)
def toggle_follow(user_id: int, req: FollowRequest, storage: Storage = Depends(get_storage)) -> FollowToggleResponse:
    if req.follower_id == user_id:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Users cannot follow themselves")
    _require_user(storage, user_id)
    _require_user(storage, req.follower_id)
    return FollowToggleResponse(following=storage.toggle_follow(req.follower_id, user_id))
