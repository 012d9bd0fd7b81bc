"""Text payload decoding and JSON rendering of decoded records."""
from __future__ import annotations

import base64
import binascii
import string
from typing import Any, Dict, Mapping, Optional, Tuple

from cbor2 import CBORSimpleValue, CBORTag
from fido2.utils import sha256

from webauthn_codec import (
    AttestationObject,
    AuthenticatorData,
    EC2Key,
    Signature,
)

__all__ = [
    "decode_binary_input",
    "encode_base64url",
    "make_json_safe",
    "serialize_attestation_object",
    "serialize_authenticator_data",
    "serialize_cose_key",
    "serialize_signature",
]


def encode_base64url(data: bytes) -> str:
    """Encode bytes as unpadded base64url."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def make_json_safe(value: Any) -> Any:
    """Recursively convert bytes-like and CBOR values into JSON-friendly data."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return encode_base64url(bytes(value))
    if isinstance(value, CBORTag):
        return {"tag": value.tag, "value": make_json_safe(value.value)}
    if isinstance(value, CBORSimpleValue):
        return {"simple": value.value}
    if isinstance(value, Mapping):
        return {str(key): make_json_safe(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [make_json_safe(item) for item in value]
    return repr(value)


def decode_binary_input(value: str) -> Tuple[bytes, str]:
    """Decode hex, base64 or base64url text, returning (data, encoding)."""
    cleaned = "".join(value.split())
    if not cleaned:
        raise ValueError("No binary data present.")

    hex_candidate = cleaned[2:] if cleaned[:2].lower() == "0x" else cleaned
    hex_candidate = hex_candidate.replace(":", "")
    if hex_candidate and all(char in string.hexdigits for char in hex_candidate):
        if len(hex_candidate) % 2:
            raise ValueError("Hexadecimal input must have an even number of digits.")
        return bytes.fromhex(hex_candidate), "hex"

    has_url_chars = any(char in "-_" for char in cleaned)
    base64_candidate = cleaned.replace("-", "+").replace("_", "/")
    padding = (-len(base64_candidate)) % 4
    if padding:
        base64_candidate += "=" * padding
    try:
        decoded = base64.b64decode(base64_candidate, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise ValueError(
            "Input does not appear to be valid base64, base64url, or hexadecimal data."
        ) from exc
    return decoded, "base64url" if has_url_chars else "base64"


def _binary_summary(data: bytes) -> Dict[str, Any]:
    return {
        "length": len(data),
        "hex": data.hex(),
        "base64url": encode_base64url(data),
    }


def serialize_cose_key(key: EC2Key) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "kty": int(key.kty),
        "ktyName": key.kty.name,
        "alg": int(key.alg),
        "algName": key.alg.name,
        "crv": int(key.crv),
        "crvName": key.crv.name,
        "x": _binary_summary(key.x),
    }
    if key.y is not None:
        payload["y"] = _binary_summary(key.y)
    return payload


def serialize_authenticator_data(
    auth_data: AuthenticatorData, rp_id: Optional[str] = None
) -> Dict[str, Any]:
    flags = auth_data.flags
    details: Dict[str, Any] = {
        "rpIdHash": _binary_summary(auth_data.rp_id_hash),
        "flags": {
            "userPresent": flags.up,
            "userVerified": flags.uv,
            "attestedCredentialDataIncluded": flags.at,
            "extensionDataIncluded": flags.ed,
        },
        "signCount": auth_data.sign_count,
    }

    if rp_id is not None:
        details["rpId"] = rp_id
        details["rpIdHashMatches"] = sha256(rp_id.encode("utf-8")) == auth_data.rp_id_hash

    attested = auth_data.attested
    if attested is not None:
        details["attestedCredentialData"] = {
            "aaguid": str(attested.aaguid),
            "aaguidHex": attested.aaguid.hex(),
            "credentialId": _binary_summary(attested.credential_id),
            "publicKey": serialize_cose_key(attested.credential_public_key),
        }

    return details


def serialize_attestation_object(
    attestation: AttestationObject, rp_id: Optional[str] = None
) -> Dict[str, Any]:
    return {
        "attestationFormat": getattr(attestation.fmt, "value", attestation.fmt),
        "attestationStatement": make_json_safe(attestation.att_stmt),
        "authData": _binary_summary(attestation.auth_data),
        "authenticatorData": serialize_authenticator_data(
            attestation.authenticator_data, rp_id
        ),
    }


def serialize_signature(signature: Signature) -> Dict[str, Any]:
    # Decimal strings, the values exceed the 53-bit range of JSON numbers.
    return {
        "r": str(signature.r),
        "s": str(signature.s),
        "rHex": format(signature.r, "x"),
        "sHex": format(signature.s, "x"),
    }
