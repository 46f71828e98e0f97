"""Dependency providers for the FastAPI application."""

import httpx
from fastapi import Depends
from starlette.requests import HTTPConnection

from media_review.config import Settings, get_settings
from media_review.services.credentials import CredentialsProvider
from media_review.services.gateway import ModelGateway


async def get_http_client(connection: HTTPConnection) -> httpx.AsyncClient:
    """Retrieve the shared AsyncClient from application state."""

    return connection.app.state.http_client  # type: ignore[return-value]


async def get_credentials(connection: HTTPConnection) -> CredentialsProvider:
    """Retrieve the shared credentials provider from application state."""

    return connection.app.state.credentials  # type: ignore[return-value]


async def get_gateway(
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
    credentials: CredentialsProvider = Depends(get_credentials),
) -> ModelGateway:
    """Dependency provider for ModelGateway."""

    return ModelGateway(client=client, settings=settings, credentials=credentials)
