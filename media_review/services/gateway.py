"""Adapter for Gemini chat on Vertex AI."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

import httpx

from media_review.config import Settings
from media_review.exceptions import (
    InvalidMessageError,
    ModelServiceError,
    NoCandidatesError,
)
from media_review.models import MessageData

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You're a food critic who loves to review food and beverage products. "
    "If you see ingredients and other things then comment on them and help "
    "people understand their choices."
)

GENERATION_CONFIG: dict[str, Any] = {
    "maxOutputTokens": 8192,
    "temperature": 1,
    "topP": 0.95,
}


class TokenSource(Protocol):
    async def token(self) -> str: ...


def aggregate_chunks(chunks: list[dict[str, Any]]) -> dict[str, Any]:
    """Fold streamed ``GenerateContentResponse`` chunks into one response.

    Text parts of the same candidate are concatenated in arrival order. For
    every other field the latest chunk wins.
    """

    merged: dict[int, dict[str, Any]] = {}
    aggregated: dict[str, Any] = {}

    for chunk in chunks:
        for candidate in chunk.get("candidates") or []:
            index = candidate.get("index", 0)
            target = merged.setdefault(
                index, {"index": index, "content": {"role": "model", "parts": []}}
            )
            content = candidate.get("content") or {}
            if "role" in content:
                target["content"]["role"] = content["role"]
            for part in content.get("parts") or []:
                _merge_part(target["content"]["parts"], part)
            for key, value in candidate.items():
                if key not in ("index", "content"):
                    target[key] = value

        for key in ("usageMetadata", "promptFeedback", "modelVersion"):
            if key in chunk:
                aggregated[key] = chunk[key]

    aggregated["candidates"] = [merged[index] for index in sorted(merged)]
    return aggregated


def _merge_part(parts: list[dict[str, Any]], part: dict[str, Any]) -> None:
    if "text" in part and parts and "text" in parts[-1]:
        parts[-1] = {**parts[-1], "text": parts[-1]["text"] + part["text"]}
    else:
        parts.append(dict(part))


class ChatSession:
    """One conversation with the model.

    Sessions are opened per request so no turn history is shared between
    unrelated users.
    """

    def __init__(
        self, client: httpx.AsyncClient, settings: Settings, token: str
    ) -> None:
        self._client = client
        self._settings = settings
        self._token = token
        self.history: list[dict[str, Any]] = []

    @property
    def stream_url(self) -> str:
        return f"{self._settings.vertex_endpoint}:streamGenerateContent"

    def _build_payload(self, parts: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "contents": [*self.history, {"role": "user", "parts": parts}],
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "generationConfig": GENERATION_CONFIG,
        }

    async def send_message_stream(
        self, parts: list[dict[str, Any]]
    ) -> AsyncIterator[dict[str, Any]]:
        """Send one user turn and yield decoded response chunks."""

        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

        try:
            async with self._client.stream(
                "POST",
                self.stream_url,
                params={"alt": "sse"},
                headers=headers,
                json=self._build_payload(parts),
                timeout=self._settings.model_timeout,
            ) as response:
                if not response.is_success:
                    await response.aread()
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    try:
                        yield json.loads(line[len("data:") :])
                    except json.JSONDecodeError as exc:
                        logger.error("Malformed model stream chunk", extra={"line": line})
                        raise ModelServiceError("Invalid model response payload") from exc
        except httpx.TimeoutException as exc:
            logger.warning("Model call timed out", exc_info=exc)
            raise ModelServiceError("Model service timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Model call failed",
                extra={
                    "status_code": exc.response.status_code,
                    "response_text": exc.response.text,
                },
            )
            raise ModelServiceError(
                "Model service returned an error",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.exception("Unexpected model HTTP error")
            raise ModelServiceError("Model service request failed") from exc

    async def send_message(self, parts: list[dict[str, Any]]) -> dict[str, Any]:
        """Send one user turn and wait for the complete aggregated response."""

        chunks = [chunk async for chunk in self.send_message_stream(parts)]
        response = aggregate_chunks(chunks)

        self.history.append({"role": "user", "parts": parts})
        if response["candidates"]:
            self.history.append(response["candidates"][0]["content"])
        return response


class ModelGateway:
    """Forwards an uploaded file and question to Gemini and returns its answer."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        credentials: TokenSource,
    ) -> None:
        self._client = client
        self._settings = settings
        self._credentials = credentials

    async def start_chat(self) -> ChatSession:
        token = await self._credentials.token()
        return ChatSession(self._client, self._settings, token)

    async def send_message(self, message: MessageData) -> str:
        """Send media plus prompt to the model.

        Returns the first candidate's text, which the system instruction asks
        to be markdown.
        """

        upload = message.file
        if not message.prompt:
            raise InvalidMessageError("No user prompt")
        if upload is None:
            raise InvalidMessageError("No file")

        parts = [
            {"inlineData": {"data": upload.contents, "mimeType": upload.type}},
            {"text": message.prompt},
        ]
        logger.info(
            "Sending media to model",
            extra={
                "model": self._settings.vertex_model,
                "mime_type": upload.type,
                "payload_chars": len(upload.contents),
            },
        )

        chat = await self.start_chat()
        response = await chat.send_message(parts)

        candidates = response["candidates"]
        if not candidates:
            logger.warning(
                "Model returned no candidates",
                extra={"prompt_feedback": response.get("promptFeedback")},
            )
            raise NoCandidatesError("No candidates found")

        first = candidates[0]
        try:
            text = first["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("Malformed model response", extra={"raw_response": response})
            raise ModelServiceError("Invalid model response payload") from exc

        logger.info(
            "Model answered",
            extra={
                "candidates": len(candidates),
                "finish_reason": first.get("finishReason"),
                "usage": response.get("usageMetadata"),
            },
        )
        return text
