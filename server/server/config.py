"""Configuration and application setup for the WebAuthn decoding service."""
from __future__ import annotations

import os
from typing import Optional

from flask import Flask

app = Flask(__name__)

DEFAULT_MAX_PAYLOAD_BYTES = 64 * 1024


def _env_flag(name: str) -> Optional[bool]:
    """Return ``True`` or ``False`` when the named env var is explicitly set."""

    raw_value = os.environ.get(name)
    if raw_value is None:
        return None

    normalised = raw_value.strip().lower()
    if normalised in {"", "0", "false", "off", "no"}:
        return False
    return True


def _env_positive_int(name: str, default: int) -> int:
    """Return a positive integer from the environment, or ``default``."""

    raw_value = os.environ.get(name)
    if raw_value is None:
        return default
    try:
        value = int(raw_value.strip())
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


def _env_str(name: str) -> Optional[str]:
    raw_value = os.environ.get(name)
    if raw_value is None or not raw_value.strip():
        return None
    return raw_value.strip()


app.config.setdefault("WEBAUTHN_CODEC_RP_ID", _env_str("WEBAUTHN_CODEC_RP_ID"))
app.config.setdefault(
    "WEBAUTHN_CODEC_MAX_PAYLOAD_BYTES",
    _env_positive_int("WEBAUTHN_CODEC_MAX_PAYLOAD_BYTES", DEFAULT_MAX_PAYLOAD_BYTES),
)

_debug_flag = _env_flag("WEBAUTHN_CODEC_DEBUG")
app.config.setdefault("WEBAUTHN_CODEC_DEBUG", bool(_debug_flag))


def configured_rp_id() -> Optional[str]:
    """Return the relying party identifier configured for hash comparisons."""

    rp_id = app.config.get("WEBAUTHN_CODEC_RP_ID")
    if isinstance(rp_id, str) and rp_id.strip():
        return rp_id.strip()
    return None


def max_payload_bytes() -> int:
    """Return the largest decoded payload the service accepts."""

    value = app.config.get("WEBAUTHN_CODEC_MAX_PAYLOAD_BYTES")
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return DEFAULT_MAX_PAYLOAD_BYTES
