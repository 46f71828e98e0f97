import asyncio
import base64

import pytest

from media_review.exceptions import InvalidMessageError, NoCandidatesError
from media_review.form import FormStatus, SelectedFile, UploadForm, render_markdown
from media_review.models import MessageData

LABEL = SelectedFile(data=b"\xff\xd8\xff\xe0 jpeg bytes", type="image/jpeg", name="label.jpg")


class RecordingSender:
    def __init__(self, form: UploadForm, reply: str = "**bold**", error: Exception | None = None) -> None:
        self.form = form
        self.reply = reply
        self.error = error
        self.messages: list[MessageData] = []
        self.loading_seen: list[bool] = []

    async def __call__(self, message: MessageData) -> str:
        self.messages.append(message)
        self.loading_seen.append(self.form.loading)
        if self.error is not None:
            raise self.error
        return self.reply


def filled_form(prompt: str = "Is this good for me?") -> UploadForm:
    form = UploadForm()
    form.set_prompt(prompt)
    form.set_file([LABEL])
    return form


@pytest.mark.asyncio
async def test_submit_without_file_never_calls_gateway() -> None:
    form = UploadForm()
    form.set_prompt("hello")
    send = RecordingSender(form)

    await form.submit(send)

    assert send.messages == []
    assert form.error == "No file specified"
    assert form.loading is False
    assert form.status is FormStatus.SHOWING_ERROR


@pytest.mark.asyncio
async def test_submit_success_encodes_file_and_renders_markdown() -> None:
    form = filled_form()
    send = RecordingSender(form)

    await form.submit(send)

    [message] = send.messages
    assert message.prompt == "Is this good for me?"
    assert message.file is not None
    assert message.file.type == "image/jpeg"
    assert base64.b64decode(message.file.contents) == LABEL.data
    assert send.loading_seen == [True]

    assert form.response == "**bold**"
    assert "<strong>bold</strong>" in form.rendered_response
    assert form.error is None
    assert form.loading is False
    assert form.status is FormStatus.SHOWING_RESPONSE


@pytest.mark.asyncio
async def test_gateway_errors_become_banner() -> None:
    form = filled_form(prompt="")
    send = RecordingSender(form, error=InvalidMessageError("No user prompt"))

    await form.submit(send)

    assert form.error == "No user prompt"
    assert form.response is None
    assert form.rendered_response is None
    assert form.loading is False
    assert form.status is FormStatus.SHOWING_ERROR


@pytest.mark.asyncio
async def test_unexpected_errors_are_stringified() -> None:
    form = filled_form()

    await form.submit(RecordingSender(form, error=RuntimeError("network down")))

    assert form.error == "network down"
    assert form.loading is False


@pytest.mark.asyncio
async def test_new_submission_clears_previous_error() -> None:
    form = filled_form()
    await form.submit(RecordingSender(form, error=NoCandidatesError("No candidates found")))
    assert form.error == "No candidates found"

    await form.submit(RecordingSender(form, reply="fine"))

    assert form.error is None
    assert form.response == "fine"


@pytest.mark.asyncio
async def test_resubmit_while_pending_is_refused() -> None:
    form = filled_form()
    release = asyncio.Event()
    calls = 0

    async def slow_send(_: MessageData) -> str:
        nonlocal calls
        calls += 1
        await release.wait()
        return "done"

    pending = asyncio.create_task(form.submit(slow_send))
    await asyncio.sleep(0)
    assert form.loading is True
    assert form.disabled is True
    assert form.status is FormStatus.SUBMITTING

    await form.submit(slow_send)
    assert calls == 1

    release.set()
    await pending

    assert calls == 1
    assert form.loading is False
    assert form.response == "done"


@pytest.mark.asyncio
async def test_input_change_returns_to_idle() -> None:
    form = filled_form()
    await form.submit(RecordingSender(form))
    assert form.status is FormStatus.SHOWING_RESPONSE

    form.set_prompt("Another question")

    assert form.status is FormStatus.IDLE


def test_set_file_keeps_first_and_ignores_empty_selection() -> None:
    other = SelectedFile(data=b"%PDF", type="application/pdf", name="menu.pdf")
    form = UploadForm()

    form.set_file([LABEL, other])
    form.set_file([])
    form.set_file(None)

    assert form.form_data.file == LABEL


def test_accept_lists_picker_extensions() -> None:
    assert UploadForm().accept == ".pdf,.jpg,.jpeg,.png,.mp4,.wav,.m4v"


def test_render_markdown_escapes_raw_html() -> None:
    html = render_markdown("Nice <script>alert(1)</script> **label**")

    assert "<script>" not in html
    assert "<strong>label</strong>" in html


@pytest.mark.asyncio
async def test_message_less_errors_still_show_banner() -> None:
    form = filled_form()

    await form.submit(RecordingSender(form, error=RuntimeError()))

    assert form.error == "RuntimeError"
    assert form.status is FormStatus.SHOWING_ERROR
    assert form.loading is False
