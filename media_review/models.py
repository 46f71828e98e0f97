"""Pydantic models shared across application layers."""

from pydantic import BaseModel, Field


class UploadFile(BaseModel):
    """A file as it crosses the client to gateway boundary."""

    contents: str = Field(description="Base64 encoded file bytes.")
    type: str = Field(description="MIME type reported by the browser.")


class MessageData(BaseModel):
    """Payload sent to the model gateway."""

    file: UploadFile | None = None
    prompt: str = ""


class MessageReply(BaseModel):
    """Successful gateway answer."""

    text: str = Field(description="Markdown formatted model answer.")


class ErrorResponse(BaseModel):
    """Error body returned to API clients."""

    error: str
    detail: str | None = None
