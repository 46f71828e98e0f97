import base64
import json

import httpx
import pytest

from client.send_file import send_file


def test_send_file_posts_base64_payload(tmp_path) -> None:
    path = tmp_path / "label.png"
    path.write_bytes(b"\x89PNG")

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content.decode())
        assert payload["prompt"] == "Is this good?"
        assert payload["file"]["type"] == "image/png"
        assert base64.b64decode(payload["file"]["contents"]) == b"\x89PNG"
        return httpx.Response(200, json={"text": "**yes**"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        text = send_file(client, "http://test/api/messages", path, "Is this good?", 5.0)

    assert text == "**yes**"


def test_send_file_exits_on_error(tmp_path) -> None:
    path = tmp_path / "menu.pdf"
    path.write_bytes(b"%PDF")

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"error": "model_error"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SystemExit):
            send_file(client, "http://test/api/messages", path, "Menu?", 5.0)
