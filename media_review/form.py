"""State of the upload form shown to the user."""

from __future__ import annotations

import base64
import enum
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace

import markdown

from media_review.models import MessageData, UploadFile

logger = logging.getLogger(__name__)

# Extensions offered by the file picker.
ACCEPTED_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png", ".mp4", ".wav", ".m4v")

Sender = Callable[[MessageData], Awaitable[str]]


class FormStatus(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SHOWING_RESPONSE = "showing_response"
    SHOWING_ERROR = "showing_error"


@dataclass(frozen=True)
class SelectedFile:
    """A file picked in the browser."""

    data: bytes
    type: str
    name: str = ""


@dataclass(frozen=True)
class FormData:
    file: SelectedFile | None = None
    prompt: str = ""


def render_markdown(text: str) -> str:
    """Render model output as HTML, escaping any raw HTML it contains."""

    md = markdown.Markdown(extensions=["fenced_code", "tables"])
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md.convert(text)


@dataclass
class UploadForm:
    """Question and file inputs plus the outcome of the last submission.

    While a submission is in flight the inputs are disabled and further
    submits are refused, so at most one gateway call runs per form.
    """

    form_data: FormData = field(default_factory=FormData)
    loading: bool = False
    error: str | None = None
    response: str | None = None
    status: FormStatus = FormStatus.IDLE

    @property
    def disabled(self) -> bool:
        return self.loading

    @property
    def accept(self) -> str:
        return ",".join(ACCEPTED_EXTENSIONS)

    @property
    def rendered_response(self) -> str | None:
        if not self.response:
            return None
        return render_markdown(self.response)

    def set_prompt(self, value: str) -> None:
        self._touch()
        self.form_data = replace(self.form_data, prompt=value)

    def set_file(self, files: Sequence[SelectedFile] | None) -> None:
        """Select the first of the picked files; an empty pick changes nothing."""

        self._touch()
        if files:
            self.form_data = replace(self.form_data, file=files[0])

    def _touch(self) -> None:
        if self.status in (FormStatus.SHOWING_RESPONSE, FormStatus.SHOWING_ERROR):
            self.status = FormStatus.IDLE

    async def submit(self, send: Sender) -> None:
        """Send the form contents through ``send`` and record the outcome."""

        if self.loading:
            logger.debug("Submission ignored while another is in flight")
            return

        self.loading = True
        self.status = FormStatus.SUBMITTING
        failed = True
        try:
            self.error = None
            selected = self.form_data.file
            if selected is None:
                self.error = "No file specified"
                return

            message = MessageData(
                file=UploadFile(
                    contents=base64.b64encode(selected.data).decode("ascii"),
                    type=selected.type,
                ),
                prompt=self.form_data.prompt,
            )
            self.response = await send(message)
            failed = False
        except Exception as exc:  # every failure ends up in the error banner
            # Some exceptions, e.g. asyncio.TimeoutError(), stringify to "".
            self.error = str(exc) or type(exc).__name__
            logger.warning("Submission failed", extra={"error": self.error})
        finally:
            self.loading = False
            self.status = (
                FormStatus.SHOWING_ERROR if failed else FormStatus.SHOWING_RESPONSE
            )
