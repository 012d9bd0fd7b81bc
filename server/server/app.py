"""Application entry point for the WebAuthn decoding service."""
from __future__ import annotations

import logging
import os

from .config import app

# Import the route modules so their decorators register endpoints with Flask.
from .routes import decode, general  # noqa: F401


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if app.config.get("WEBAUTHN_CODEC_DEBUG") else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def main() -> None:
    _configure_logging()
    app.run(
        host=os.environ.get("WEBAUTHN_CODEC_HOST", "127.0.0.1"),
        port=int(os.environ.get("WEBAUTHN_CODEC_PORT", "5000")),
        debug=bool(app.config.get("WEBAUTHN_CODEC_DEBUG")),
    )


__all__ = ["app", "main"]


if __name__ == "__main__":  # pragma: no cover - convenience script entry point.
    main()
