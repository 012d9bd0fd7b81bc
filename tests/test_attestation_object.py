import cbor2
import pytest

from builders import build_attestation_object, build_authenticator_data
from webauthn_codec import (
    AttestationFormat,
    ExtensionsUnsupported,
    MalformedInput,
    TooShort,
    UnsupportedKeyType,
    decode_attestation,
    decode_attestation_object,
    parse_authenticator_data,
)


def test_decode_attestation_returns_authenticator_data(attested_auth_data):
    auth_data, credential_id, _ = attested_auth_data

    result = decode_attestation(build_attestation_object(auth_data))

    assert result == parse_authenticator_data(auth_data)
    assert result.attested.credential_id == credential_id


def test_fmt_and_att_stmt_are_passed_through(attested_auth_data):
    auth_data, _, _ = attested_auth_data
    att_stmt = {"alg": -7, "sig": b"\x30\x06\x02\x01\x01\x02\x01\x01", "x5c": [b"cert"]}

    attestation = decode_attestation_object(
        build_attestation_object(auth_data, fmt="packed", att_stmt=att_stmt)
    )

    assert attestation.fmt is AttestationFormat.PACKED
    assert attestation.fmt == "packed"
    assert dict(attestation.att_stmt) == att_stmt
    assert attestation.auth_data == auth_data
    assert attestation.authenticator_data.sign_count == 1


@pytest.mark.parametrize(
    "fmt",
    ["packed", "tpm", "android-key", "android-safetynet", "fido-u2f", "apple", "none"],
)
def test_known_formats(fmt):
    auth_data = build_authenticator_data()

    assert decode_attestation_object(build_attestation_object(auth_data, fmt=fmt)).fmt == fmt


@pytest.mark.parametrize("fmt", ["compound", "nadroid-safetynet", ""])
def test_unregistered_format_is_passed_through(fmt):
    auth_data = build_authenticator_data(flags=0x01, sign_count=9)

    attestation = decode_attestation_object(build_attestation_object(auth_data, fmt=fmt))

    assert attestation.fmt == fmt
    assert not isinstance(attestation.fmt, AttestationFormat)
    assert attestation.authenticator_data.sign_count == 9


@pytest.mark.parametrize(
    "value",
    [
        [1, 2, 3],
        {"attStmt": {}, "authData": b"\x00" * 37},
        {"fmt": "none", "authData": b"\x00" * 37},
        {"fmt": "none", "attStmt": {}},
        {"fmt": 1, "attStmt": {}, "authData": b"\x00" * 37},
        {"fmt": "none", "attStmt": [], "authData": b"\x00" * 37},
        {"fmt": "none", "attStmt": {}, "authData": "00" * 37},
    ],
)
def test_structurally_invalid_objects_are_malformed(value):
    with pytest.raises(MalformedInput):
        decode_attestation_object(cbor2.dumps(value))


@pytest.mark.parametrize("data", [b"", b"\xa3\x63fmt", b"\xff\x00"])
def test_invalid_cbor_is_malformed(data):
    with pytest.raises(MalformedInput):
        decode_attestation_object(data)


def test_trailing_bytes_after_envelope_are_malformed():
    data = build_attestation_object(build_authenticator_data()) + b"\x00"

    with pytest.raises(MalformedInput):
        decode_attestation_object(data)


def test_inner_errors_propagate(es256_cose):
    with pytest.raises(TooShort):
        decode_attestation(build_attestation_object(b"\x00" * 36))

    with pytest.raises(ExtensionsUnsupported):
        decode_attestation(build_attestation_object(build_authenticator_data(flags=0x81)))

    es256_cose[1] = 3
    auth_data = build_authenticator_data(
        flags=0x41, credential_id=b"\x01", public_key=cbor2.dumps(es256_cose)
    )
    with pytest.raises(UnsupportedKeyType):
        decode_attestation(build_attestation_object(auth_data))
