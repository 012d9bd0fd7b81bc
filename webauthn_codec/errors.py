"""Exceptions raised while decoding authenticator output."""
from __future__ import annotations

from functools import wraps
from typing import Any, Optional

import cbor2


class WebAuthnCodecError(Exception):
    """Base exception for all errors raised by this package."""


class DecodeError(WebAuthnCodecError, ValueError):
    """Base exception for inputs that do not decode to a supported record."""


class MalformedInput(DecodeError):
    """The buffer is not valid CBOR/ASN.1 at the expected position."""


class TooShort(DecodeError):
    """Authenticator data is shorter than the fixed 37 byte header."""

    def __init__(self, length: int):
        super().__init__(
            f"Authenticator data was {length} bytes, expected at least 37 bytes"
        )
        self.length = length


class UnsupportedKeyType(DecodeError):
    """The COSE key type is not elliptic-curve (kty=2)."""

    def __init__(self, kty: Any):
        super().__init__(f"Unsupported COSE key type: {kty!r}")
        self.kty = kty


class UnsupportedAlgorithm(DecodeError):
    """The COSE (alg, crv) pair is not one of the supported combinations."""

    def __init__(self, alg: Any, crv: Any):
        super().__init__(f"Unsupported COSE algorithm {alg!r} with curve {crv!r}")
        self.alg = alg
        self.crv = crv


class ExtensionsUnsupported(DecodeError):
    """Authenticator data announces extension data, which is never decoded."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Authenticator extension data is not supported")


class InvalidSignatureEncoding(DecodeError):
    """The signature is not a DER SEQUENCE of exactly two INTEGERs."""


class NoCredentialReturned(WebAuthnCodecError):
    """The credential provider completed without returning a credential."""


def catch_cbor_errors(f):
    """Utility decorator turning CBOR and buffer underrun errors into MalformedInput.

    Errors that are already part of the taxonomy pass through untouched.
    """

    @wraps(f)
    def inner(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except DecodeError:
            raise
        except (cbor2.CBORDecodeError, ValueError, KeyError, IndexError) as e:
            raise MalformedInput(str(e) or type(e).__name__) from e

    return inner
