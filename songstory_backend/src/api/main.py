"""
FastAPI application entrypoint for the ThisSongThatTime backend.

Users pick a song, answer guided memory prompts and publish a short story
about it; others read, like, comment on and share those stories.

Authentication: none for regular users (the acting user id travels with each
request). Admin-only routes take a bearer token from POST /api/admin/login.

CORS is enabled for local development (http://localhost:3000 and :5173) and
can be extended via CORS_ALLOW_ORIGINS / ALLOWED_ORIGINS.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from src.api import settings
from src.api.db import init_db
from src.api.routes_auth import router as admin_router
from src.api.routes_feedback import router as feedback_router
from src.api.routes_songs import router as songs_router
from src.api.routes_stories import router as stories_router
from src.api.routes_users import router as users_router

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Users", "description": "Profiles, follows and listening analytics."},
    {"name": "Songs", "description": "Search providers, resolve links and store songs."},
    {"name": "Stories", "description": "Story drafts, publishing, likes, comments and AI help."},
    {"name": "Feedback", "description": "Send product feedback."},
    {"name": "Admin", "description": "Admin login for moderation routes."},
    {"name": "Health", "description": "Service health and basic runtime info."},
]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    try:
        init_db()
    except (RuntimeError, SQLAlchemyError) as exc:
        # The API still starts; requests needing the database answer 503.
        logger.warning("DB: schema setup skipped: %s", exc)
    yield


app = FastAPI(
    title="ThisSongThatTime Backend API",
    description=(
        "Backend for sharing personal stories about songs.\n\n"
        "Authentication: none for users; admin routes need a bearer token."
    ),
    version="1.0.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# credentials=true requires explicit origins (not '*') in browsers.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Every error body carries "message"; structured details keep their extra keys.
    if isinstance(exc.detail, dict):
        content = {"message": exc.detail.get("message", ""), **exc.detail}
    else:
        content = {"message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    message = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in errors)
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"message": message or "Invalid request", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error: method=%s path=%s", request.method, request.url.path)
    return JSONResponse(status_code=HTTP_500_INTERNAL_SERVER_ERROR, content={"message": "Internal Server Error"})


app.include_router(users_router)
app.include_router(songs_router)
app.include_router(stories_router)
app.include_router(feedback_router)
app.include_router(admin_router)


@app.get(
    "/",
    summary="Health check",
    description="Simple health check endpoint.",
    tags=["Health"],
)
def health_check():
    """Return basic service health information."""
    return {"status": "ok"}
