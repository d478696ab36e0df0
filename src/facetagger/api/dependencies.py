"""Request dependencies: app state accessors and API key check."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

if TYPE_CHECKING:
    from facetagger.config import Settings
    from facetagger.ml.inference import InferencePool
    from facetagger.session import TaggingSession
    from facetagger.tagger import Tagger

_bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_session(request: Request) -> TaggingSession:
    session: TaggingSession = request.app.state.session
    return session


def get_pool(request: Request) -> InferencePool:
    pool: InferencePool = request.app.state.pool
    return pool


def get_tagger(request: Request) -> Tagger:
    """Return the pipeline driver, or 503 when no detector is configured."""
    tagger: Tagger | None = request.app.state.tagger
    if tagger is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No face detector configured (set FACETAGGER_DETECTOR)",
        )
    return tagger


async def verify_api_key(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> None:
    """Require 'Authorization: Bearer <key>' when FACETAGGER_API_KEY is set."""
    settings = get_settings(request)
    if settings.api_key is None:
        return

    if credentials is None or not secrets.compare_digest(credentials.credentials.encode(), settings.api_key.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )
