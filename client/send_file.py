"""Simple command-line client for manual testing."""

from __future__ import annotations

import argparse
import base64
import logging
import mimetypes
import pathlib
import sys
import time

import httpx

DEFAULT_URL = "http://127.0.0.1:8000/api/messages"


def send_file(
    client: httpx.Client, url: str, path: pathlib.Path, prompt: str, timeout: float
) -> str:
    """Post a local file and question to the service and return the answer."""

    logger = logging.getLogger("send_file")
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    payload = {
        "file": {
            "contents": base64.b64encode(path.read_bytes()).decode("ascii"),
            "type": mime_type,
        },
        "prompt": prompt,
    }

    start = time.perf_counter()
    response = client.post(url, json=payload, timeout=timeout)
    elapsed = time.perf_counter() - start

    if response.is_error:
        logger.error("Received error %d: %s", response.status_code, response.text)
        raise SystemExit(1)

    logger.info("Received answer in %.2fs", elapsed)
    return response.json()["text"]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask the media review service about a file.")
    parser.add_argument("file", type=pathlib.Path, help="File to upload.")
    parser.add_argument("--prompt", required=True, help="Question about the file.")
    parser.add_argument("--url", default=DEFAULT_URL, help="API URL (default: %(default)s)")
    parser.add_argument(
        "--timeout", type=float, default=180.0, help="Seconds to wait for the answer."
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    with httpx.Client() as client:
        text = send_file(client, args.url, args.file, args.prompt, args.timeout)
    sys.stdout.write(text + "\n")


if __name__ == "__main__":  # pragma: no cover
    main()
