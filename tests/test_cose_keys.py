import itertools

import cbor2
import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from webauthn_codec import (
    COSEAlgorithm,
    COSECurve,
    COSEKeyType,
    EC2Key,
    MalformedInput,
    UnsupportedAlgorithm,
    UnsupportedKeyType,
    decode_cose_key,
    parse_cose_key,
)
from webauthn_codec.cose import read_cose_key


def test_decode_es256_key(es256_cose):
    key = decode_cose_key(cbor2.dumps(es256_cose))

    assert isinstance(key, EC2Key)
    assert key.kty == COSEKeyType.EC2
    assert key.alg == -7
    assert key.alg is COSEAlgorithm.ES256
    assert key.crv == 1
    assert key.crv is COSECurve.P256
    assert key.x == es256_cose[-2]
    assert key.y == es256_cose[-3]


def test_decode_eddsa_key_without_y(eddsa_cose):
    key = decode_cose_key(cbor2.dumps(eddsa_cose))

    assert key.alg == -8
    assert key.crv == 6
    assert key.x == eddsa_cose[-2]
    assert key.y is None


_ALGS = [-7, -8, -35, -36, -257, -47, 1, 0]
_CRVS = [1, 2, 3, 4, 5, 6, 7, 8]


@pytest.mark.parametrize(
    "alg,crv",
    [
        pair
        for pair in itertools.product(_ALGS, _CRVS)
        if pair not in {(-7, 1), (-8, 6)}
    ],
)
def test_unsupported_algorithm_curve_pairs_are_rejected(es256_cose, alg, crv):
    es256_cose[3] = alg
    es256_cose[-1] = crv

    with pytest.raises(UnsupportedAlgorithm) as excinfo:
        decode_cose_key(cbor2.dumps(es256_cose))

    assert excinfo.value.alg == alg
    assert excinfo.value.crv == crv


@pytest.mark.parametrize("kty", [0, 1, 3, 4, -2, "EC2", b"\x02"])
def test_unsupported_key_types_are_rejected(es256_cose, kty):
    es256_cose[1] = kty

    with pytest.raises(UnsupportedKeyType) as excinfo:
        decode_cose_key(cbor2.dumps(es256_cose))

    assert excinfo.value.kty == kty


def test_rsa_key_is_rejected_as_key_type():
    rsa_cose = {1: 3, 3: -257, -1: b"\x01" * 256, -2: b"\x01\x00\x01"}

    with pytest.raises(UnsupportedKeyType):
        decode_cose_key(cbor2.dumps(rsa_cose))


def test_boolean_labels_are_not_integers(es256_cose):
    es256_cose[-1] = True

    with pytest.raises(UnsupportedAlgorithm):
        decode_cose_key(cbor2.dumps(es256_cose))


def test_boolean_key_type_is_rejected(es256_cose):
    es256_cose[1] = True

    with pytest.raises(UnsupportedKeyType):
        decode_cose_key(cbor2.dumps(es256_cose))


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"\xa5",  # map header without entries
        b"\xff",
        cbor2.dumps([1, 2, 3]),
        cbor2.dumps(b"not a map"),
        cbor2.dumps(2),
    ],
)
def test_malformed_cbor_is_rejected(data):
    with pytest.raises(MalformedInput):
        decode_cose_key(data)


def test_missing_key_type_is_malformed(es256_cose):
    del es256_cose[1]

    with pytest.raises(MalformedInput):
        decode_cose_key(cbor2.dumps(es256_cose))


@pytest.mark.parametrize("label", [3, -1, -2, -3])
def test_missing_es256_labels_are_rejected(es256_cose, label):
    del es256_cose[label]

    with pytest.raises((MalformedInput, UnsupportedAlgorithm)):
        decode_cose_key(cbor2.dumps(es256_cose))


@pytest.mark.parametrize("label,value", [(-2, b"\x01" * 31), (-3, b"\x01" * 33), (-2, "x")])
def test_wrong_coordinates_are_malformed(es256_cose, label, value):
    es256_cose[label] = value

    with pytest.raises(MalformedInput):
        decode_cose_key(cbor2.dumps(es256_cose))


def test_trailing_bytes_are_not_consumed(es256_cose):
    encoded = cbor2.dumps(es256_cose)

    key, consumed = read_cose_key(encoded + b"\xde\xad")

    assert consumed == len(encoded)
    assert key == decode_cose_key(encoded)


def test_parse_cose_key_matches_decode(eddsa_cose):
    assert parse_cose_key(eddsa_cose) == decode_cose_key(cbor2.dumps(eddsa_cose))


def test_invalid_key_cannot_be_constructed():
    with pytest.raises(UnsupportedAlgorithm):
        EC2Key(alg=-7, crv=6, x=b"\x00" * 32, y=b"\x00" * 32)


def test_to_cbor_round_trips(es256_cose):
    key = decode_cose_key(cbor2.dumps(es256_cose))

    assert cbor2.loads(key.to_cbor()) == es256_cose
    assert decode_cose_key(key.to_cbor()) == key


def test_es256_key_converts_to_cryptography_key():
    private_key = ec.generate_private_key(ec.SECP256R1())
    numbers = private_key.public_key().public_numbers()
    key = EC2Key(
        alg=-7,
        crv=1,
        x=numbers.x.to_bytes(32, "big"),
        y=numbers.y.to_bytes(32, "big"),
    )

    message = b"ecdsa-message"
    signature = private_key.sign(message, ec.ECDSA(hashes.SHA256()))
    key.to_cryptography_key().verify(signature, message, ec.ECDSA(hashes.SHA256()))


def test_eddsa_key_converts_to_cryptography_key(eddsa_cose):
    public_key = decode_cose_key(cbor2.dumps(eddsa_cose)).to_cryptography_key()

    assert isinstance(public_key, ed25519.Ed25519PublicKey)


def test_p256_conversion_without_y_is_malformed(es256_cose):
    key = decode_cose_key(cbor2.dumps(es256_cose))
    object.__setattr__(key, "y", None)

    with pytest.raises(MalformedInput):
        key.to_cryptography_key()
