"""Routes decoding authenticator output submitted as hex or base64 text."""
from __future__ import annotations

from typing import Any, Callable, Dict, Tuple

from flask import jsonify, request

from webauthn_codec import (
    DecodeError,
    decode_attestation_object,
    decode_cose_key,
    decode_signature,
    parse_authenticator_data,
)

from ..codec import (
    decode_binary_input,
    serialize_attestation_object,
    serialize_authenticator_data,
    serialize_cose_key,
    serialize_signature,
)
from ..config import app, configured_rp_id, max_payload_bytes


class _PayloadError(Exception):
    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


def _read_payload() -> Tuple[bytes, str]:
    if not request.is_json:
        raise _PayloadError("Expected JSON payload.", 400)

    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        raise _PayloadError("Expected a JSON object.", 400)

    value = payload.get("payload")
    if not isinstance(value, str) or not value.strip():
        raise _PayloadError("Decoder payload must be a non-empty string.", 400)

    try:
        data, encoding = decode_binary_input(value)
    except ValueError as exc:
        raise _PayloadError(str(exc), 400) from exc

    limit = max_payload_bytes()
    if len(data) > limit:
        raise _PayloadError(f"Decoded payload exceeds {limit} bytes.", 413)
    return data, encoding


def _perform_decode(kind: str, decoder: Callable[[bytes], Dict[str, Any]]):
    try:
        data, encoding = _read_payload()
    except _PayloadError as exc:
        return jsonify({"error": str(exc)}), exc.status

    try:
        decoded = decoder(data)
        response = jsonify({"format": kind, "inputEncoding": encoding, "decoded": decoded})
    except DecodeError as exc:
        app.logger.warning("Rejected %s payload: %s", kind, exc)
        return jsonify({"error": str(exc), "errorType": type(exc).__name__}), 422
    except Exception as exc:  # pylint: disable=broad-except
        app.logger.exception("Failed to decode %s payload: %s", kind, exc)
        return jsonify({"error": "Unable to decode payload."}), 500

    return response, 200


@app.route("/api/decode/attestation-object", methods=["POST"])
def api_decode_attestation_object():
    return _perform_decode(
        "attestationObject",
        lambda data: serialize_attestation_object(
            decode_attestation_object(data), configured_rp_id()
        ),
    )


@app.route("/api/decode/authenticator-data", methods=["POST"])
def api_decode_authenticator_data():
    return _perform_decode(
        "authenticatorData",
        lambda data: serialize_authenticator_data(
            parse_authenticator_data(data), configured_rp_id()
        ),
    )


@app.route("/api/decode/cose-key", methods=["POST"])
def api_decode_cose_key():
    return _perform_decode(
        "coseKey", lambda data: serialize_cose_key(decode_cose_key(data))
    )


@app.route("/api/decode/signature", methods=["POST"])
def api_decode_signature():
    return _perform_decode(
        "signature", lambda data: serialize_signature(decode_signature(data))
    )
