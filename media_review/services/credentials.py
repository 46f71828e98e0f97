"""Access tokens for Vertex AI from application default credentials."""

from __future__ import annotations

import asyncio
import logging

import google.auth
from google.auth.credentials import Credentials
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.auth.transport.requests import Request

from media_review.exceptions import ModelServiceError

logger = logging.getLogger(__name__)


class CredentialsProvider:
    """Lazily resolves ambient Google credentials and keeps the token fresh."""

    _scopes = ("https://www.googleapis.com/auth/cloud-platform",)

    def __init__(self, credentials: Credentials | None = None) -> None:
        self._credentials = credentials
        self._lock = asyncio.Lock()

    async def token(self) -> str:
        """Return a valid OAuth2 access token, refreshing it when needed."""

        async with self._lock:
            try:
                if self._credentials is None:
                    self._credentials, project = await asyncio.to_thread(
                        google.auth.default, scopes=self._scopes
                    )
                    logger.info(
                        "Loaded application default credentials",
                        extra={"credentials_project": project},
                    )
                if not self._credentials.valid:
                    await asyncio.to_thread(self._credentials.refresh, Request())
            except DefaultCredentialsError as exc:
                logger.error("No Google credentials available", exc_info=exc)
                raise ModelServiceError("Google credentials are not configured") from exc
            except GoogleAuthError as exc:
                # RefreshError, TransportError when the token endpoint is unreachable.
                logger.error("Google credentials refresh failed", exc_info=exc)
                raise ModelServiceError("Could not refresh Google credentials") from exc

            return self._credentials.token
