"""Authenticator data and attestation object decoding."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, unique
from io import BytesIO
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import cbor2
from fido2.utils import ByteBuffer
from fido2.webauthn import Aaguid
from fido2.webauthn import AuthenticatorData as _Fido2AuthenticatorData

from .cose import COSEPublicKey, read_cose_key
from .errors import (
    ExtensionsUnsupported,
    MalformedInput,
    TooShort,
    catch_cbor_errors,
)

logger = logging.getLogger(__name__)

__all__ = [
    "AttestationFormat",
    "AttestationObject",
    "AttestedCredentialData",
    "AuthenticatorData",
    "AuthenticatorFlags",
    "decode_attestation",
    "decode_attestation_object",
    "parse_authenticator_data",
]

FLAG = _Fido2AuthenticatorData.FLAG

# rpIdHash (32) + flags (1) + signCount (4)
AUTHENTICATOR_DATA_MIN_LENGTH = 37
# aaguid (16) + credentialIdLength (2)
_ATTESTED_HEADER_LENGTH = 18


@dataclass(frozen=True)
class AuthenticatorFlags:
    """The bits of the authenticator data flags byte this package reads.

    Reserved bits are ignored.
    """

    up: bool
    uv: bool
    at: bool
    ed: bool

    @classmethod
    def from_byte(cls, value: int) -> AuthenticatorFlags:
        return cls(
            up=bool(value & FLAG.UP),
            uv=bool(value & FLAG.UV),
            at=bool(value & FLAG.AT),
            ed=bool(value & FLAG.ED),
        )


@dataclass(frozen=True)
class AttestedCredentialData:
    """Credential data following the fixed authenticator data header."""

    aaguid: Aaguid
    credential_id: bytes
    credential_public_key: COSEPublicKey


@dataclass(frozen=True)
class AuthenticatorData:
    """Decoded authenticator data.

    ``attested`` is present exactly when ``flags.at`` is set.
    """

    rp_id_hash: bytes
    flags: AuthenticatorFlags
    sign_count: int
    attested: Optional[AttestedCredentialData] = None


def _parse_attested_credential_data(reader: ByteBuffer) -> AttestedCredentialData:
    remaining = len(reader.getbuffer()) - reader.tell()
    if remaining < _ATTESTED_HEADER_LENGTH:
        raise MalformedInput(
            f"Attested credential data needs at least {_ATTESTED_HEADER_LENGTH} "
            f"bytes, {remaining} available"
        )
    aaguid = Aaguid(reader.read(16))
    credential_id_length = reader.unpack(">H")
    try:
        credential_id = reader.read(credential_id_length)
    except ValueError as e:
        raise MalformedInput(
            f"Credential ID length {credential_id_length} exceeds authenticator data"
        ) from e

    # The public key is followed by nothing we decode, so its length is only
    # known once the CBOR item has been read.
    public_key, _ = read_cose_key(reader.read())
    return AttestedCredentialData(
        aaguid=aaguid,
        credential_id=credential_id,
        credential_public_key=public_key,
    )


def parse_authenticator_data(data: bytes) -> AuthenticatorData:
    """Turn authenticator data bytes into an AuthenticatorData record.

    For the layout, refer to https://www.w3.org/TR/webauthn-2/#sctn-authenticator-data

    :param data: The authenticator data, as bytes or a buffer view.
    :return: The decoded authenticator data.
    """
    data = bytes(data)
    if len(data) < AUTHENTICATOR_DATA_MIN_LENGTH:
        logger.debug("Rejecting authenticator data of %d bytes", len(data))
        raise TooShort(len(data))

    reader = ByteBuffer(data)
    rp_id_hash = reader.read(32)
    flags_byte = reader.unpack(">B")
    sign_count = reader.unpack(">I")
    flags = AuthenticatorFlags.from_byte(flags_byte)

    if flags.ed:
        logger.debug("Rejecting authenticator data with the ED flag set")
        raise ExtensionsUnsupported()

    attested = None
    if flags.at:
        attested = _parse_attested_credential_data(reader)

    return AuthenticatorData(
        rp_id_hash=rp_id_hash,
        flags=flags,
        sign_count=sign_count,
        attested=attested,
    )


@unique
class AttestationFormat(str, Enum):
    """Registered attestation statement format identifiers."""

    PACKED = "packed"
    TPM = "tpm"
    ANDROID_KEY = "android-key"
    ANDROID_SAFETYNET = "android-safetynet"
    FIDO_U2F = "fido-u2f"
    APPLE = "apple"
    NONE = "none"


_KNOWN_FORMATS = {member.value: member for member in AttestationFormat}


@dataclass(frozen=True)
class AttestationObject:
    """A decoded attestation object.

    ``fmt`` and ``att_stmt`` are passed through without interpretation.
    ``fmt`` is an AttestationFormat for registered tags and the plain tag
    text otherwise. ``auth_data`` keeps the raw bytes that
    ``authenticator_data`` was decoded from.
    """

    fmt: Union[AttestationFormat, str]
    att_stmt: Mapping[str, Any]
    auth_data: bytes
    authenticator_data: AuthenticatorData


@catch_cbor_errors
def _load_attestation_map(data: bytes) -> Any:
    with BytesIO(data) as fp:
        value = cbor2.CBORDecoder(fp).decode()
        if fp.tell() != len(data):
            raise MalformedInput(
                f"{len(data) - fp.tell()} unexpected bytes after attestation object"
            )
    return value


def decode_attestation_object(data: bytes) -> AttestationObject:
    """Decode a CBOR attestation object and its authenticator data.

    For the layout, refer to https://www.w3.org/TR/webauthn-2/#attestation-object

    :param data: The attestation object as returned by the authenticator.
    :return: The decoded attestation object.
    """
    value = _load_attestation_map(bytes(data))
    if not isinstance(value, Mapping):
        raise MalformedInput("Attestation object must be a CBOR map")

    fmt = value.get("fmt")
    att_stmt = value.get("attStmt")
    auth_data = value.get("authData")
    if not isinstance(fmt, str):
        raise MalformedInput("Attestation object fmt must be a text string")
    if not isinstance(att_stmt, Mapping):
        raise MalformedInput("Attestation object attStmt must be a map")
    if not isinstance(auth_data, bytes):
        raise MalformedInput("Attestation object authData must be a byte string")

    if fmt not in _KNOWN_FORMATS:
        logger.debug("Passing through unregistered attestation format %r", fmt)

    return AttestationObject(
        fmt=_KNOWN_FORMATS.get(fmt, fmt),
        att_stmt=MappingProxyType(dict(att_stmt)),
        auth_data=auth_data,
        authenticator_data=parse_authenticator_data(auth_data),
    )


def decode_attestation(data: bytes) -> AuthenticatorData:
    """Decode an attestation object, returning only its authenticator data."""
    return decode_attestation_object(data).authenticator_data
