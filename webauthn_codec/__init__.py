"""Strict decoders for WebAuthn authenticator output."""
from __future__ import annotations

from .cose import (
    COSEAlgorithm,
    COSECurve,
    COSEKeyType,
    COSEPublicKey,
    EC2Key,
    decode_cose_key,
    parse_cose_key,
)
from .errors import (
    DecodeError,
    ExtensionsUnsupported,
    InvalidSignatureEncoding,
    MalformedInput,
    NoCredentialReturned,
    TooShort,
    UnsupportedAlgorithm,
    UnsupportedKeyType,
    WebAuthnCodecError,
)
from .signature import Signature, decode_signature
from .webauthn import (
    AttestationFormat,
    AttestationObject,
    AttestedCredentialData,
    AuthenticatorData,
    AuthenticatorFlags,
    decode_attestation,
    decode_attestation_object,
    parse_authenticator_data,
)

__version__ = "0.1.0"

__all__ = [
    "AttestationFormat",
    "AttestationObject",
    "AttestedCredentialData",
    "AuthenticatorData",
    "AuthenticatorFlags",
    "COSEAlgorithm",
    "COSECurve",
    "COSEKeyType",
    "COSEPublicKey",
    "DecodeError",
    "EC2Key",
    "ExtensionsUnsupported",
    "InvalidSignatureEncoding",
    "MalformedInput",
    "NoCredentialReturned",
    "Signature",
    "TooShort",
    "UnsupportedAlgorithm",
    "UnsupportedKeyType",
    "WebAuthnCodecError",
    "decode_attestation",
    "decode_attestation_object",
    "decode_cose_key",
    "decode_signature",
    "parse_authenticator_data",
    "parse_cose_key",
]
