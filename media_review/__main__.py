"""Run the service with uvicorn: ``python -m media_review``."""

import uvicorn

from media_review.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "media_review.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
