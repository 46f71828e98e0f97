"""HTTP handlers for the upload form and the message API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from media_review.dependencies import get_gateway
from media_review.exceptions import InvalidMessageError, ServiceError
from media_review.form import SelectedFile, UploadForm
from media_review.models import ErrorResponse, MessageData, MessageReply
from media_review.services.gateway import ModelGateway

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def show_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html", {"form": UploadForm()})


@router.post("/", response_class=HTMLResponse)
async def submit_form(
    request: Request,
    gateway: Annotated[ModelGateway, Depends(get_gateway)],
    prompt: Annotated[str, Form()] = "",
    file: Annotated[UploadFile | None, File()] = None,
) -> HTMLResponse:
    """Process the form by sending its contents to the model."""

    form = UploadForm()
    form.set_prompt(prompt)
    if file is not None and file.filename:
        data = await file.read()
        form.set_file(
            [
                SelectedFile(
                    data=data,
                    type=file.content_type or "application/octet-stream",
                    name=file.filename,
                )
            ]
        )

    await form.submit(gateway.send_message)
    logger.info(
        "Form processed",
        extra={"status": form.status.value, "client": _client_repr(request)},
    )
    return templates.TemplateResponse(request, "index.html", {"form": form})


@router.post(
    "/api/messages",
    response_model=MessageReply,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
    },
)
async def send_message(
    message: MessageData,
    gateway: Annotated[ModelGateway, Depends(get_gateway)],
) -> MessageReply | JSONResponse:
    """Function-style entry point: message in, markdown text out."""

    try:
        text = await gateway.send_message(message)
    except ServiceError as exc:
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if isinstance(exc, InvalidMessageError)
            else status.HTTP_502_BAD_GATEWAY
        )
        error = ErrorResponse(error=exc.code, detail=exc.message)
        return JSONResponse(status_code=status_code, content=error.model_dump())

    return MessageReply(text=text)


def _client_repr(request: Request) -> str:
    """Render the remote client for logging purposes."""

    client = request.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"
