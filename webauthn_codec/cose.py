"""COSE public key decoding.

Only the elliptic-curve key type (kty=2) is representable, and only with one of
two algorithm/curve pairs: ES256 on P-256 and EdDSA on Ed25519. Anything else
is rejected before a key record is constructed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum, unique
from io import BytesIO
from typing import Any, ClassVar, FrozenSet, Mapping, Optional, Tuple, Union

import cbor2
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from .errors import (
    MalformedInput,
    UnsupportedAlgorithm,
    UnsupportedKeyType,
    catch_cbor_errors,
)

logger = logging.getLogger(__name__)

__all__ = [
    "COSEAlgorithm",
    "COSECurve",
    "COSEKeyType",
    "COSEPublicKey",
    "EC2Key",
    "decode_cose_key",
    "parse_cose_key",
    "read_cose_key",
]


@unique
class COSEKeyType(IntEnum):
    """COSE key types (RFC 9052 section 7)."""

    OKP = 1
    EC2 = 2
    RSA = 3


@unique
class COSEAlgorithm(IntEnum):
    """COSE algorithm identifiers known to this package."""

    ES256 = -7
    EDDSA = -8
    RS256 = -257


@unique
class COSECurve(IntEnum):
    """COSE elliptic curve identifiers known to this package."""

    P256 = 1
    ED25519 = 6


# COSE map labels
KTY = 1
ALG = 3
CRV = -1
X = -2
Y = -3

# Supported (alg, crv) pairs mapped to the coordinate length in bytes.
SUPPORTED_ALGORITHMS: Mapping[Tuple[int, int], int] = {
    (COSEAlgorithm.ES256, COSECurve.P256): 32,
    (COSEAlgorithm.EDDSA, COSECurve.ED25519): 32,
}


def _is_int(value: Any) -> bool:
    # CBOR true/false decode to bool, which must not pass for 1/0.
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class EC2Key:
    """An elliptic-curve COSE public key.

    :param alg: The COSE algorithm, ES256 or EdDSA.
    :param crv: The COSE curve matching ``alg``.
    :param x: The raw x coordinate (or the Ed25519 public key).
    :param y: The raw y coordinate, absent for Ed25519 keys.
    """

    KTY: ClassVar[COSEKeyType] = COSEKeyType.EC2

    alg: COSEAlgorithm
    crv: COSECurve
    x: bytes
    y: Optional[bytes] = None

    def __post_init__(self):
        alg, crv = self.alg, self.crv
        if not (_is_int(alg) and _is_int(crv)) or (alg, crv) not in SUPPORTED_ALGORITHMS:
            raise UnsupportedAlgorithm(alg, crv)
        object.__setattr__(self, "alg", COSEAlgorithm(alg))
        object.__setattr__(self, "crv", COSECurve(crv))

        size = SUPPORTED_ALGORITHMS[(alg, crv)]
        if not isinstance(self.x, bytes) or len(self.x) != size:
            raise MalformedInput(f"COSE x coordinate must be {size} bytes")
        if self.y is None:
            if self.crv == COSECurve.P256:
                raise MalformedInput("COSE y coordinate is required for P-256 keys")
        elif not isinstance(self.y, bytes) or len(self.y) != size:
            raise MalformedInput(f"COSE y coordinate must be {size} bytes")

    @property
    def kty(self) -> COSEKeyType:
        return self.KTY

    def to_cose(self) -> dict:
        """Return the key as a COSE map keyed by integer labels."""
        cose = {KTY: int(self.kty), ALG: int(self.alg), CRV: int(self.crv), X: self.x}
        if self.y is not None:
            cose[Y] = self.y
        return cose

    def to_cbor(self) -> bytes:
        """Encode the key as a CBOR COSE map."""
        return cbor2.dumps(self.to_cose())

    def to_cryptography_key(
        self,
    ) -> Union[ec.EllipticCurvePublicKey, ed25519.Ed25519PublicKey]:
        """Convert the key into a public key object from Cryptography.

        :return: An EllipticCurvePublicKey for ES256, an Ed25519PublicKey for
            EdDSA.
        """
        if self.crv == COSECurve.ED25519:
            return ed25519.Ed25519PublicKey.from_public_bytes(self.x)
        if self.y is None:
            raise MalformedInput("COSE y coordinate is required for P-256 keys")
        return ec.EllipticCurvePublicNumbers(
            int.from_bytes(self.x, "big"), int.from_bytes(self.y, "big"), ec.SECP256R1()
        ).public_key()


# Closed set of key variants. New key types get a variant of their own.
COSEPublicKey = EC2Key

_SUPPORTED_KEY_TYPES: FrozenSet[int] = frozenset({COSEKeyType.EC2})


def parse_cose_key(cose: Mapping[Any, Any]) -> COSEPublicKey:
    """Create a COSE public key from an already decoded CBOR map.

    :param cose: The decoded COSE map.
    :return: The validated key.
    """
    if not isinstance(cose, Mapping):
        raise MalformedInput("COSE key must be a CBOR map")
    if KTY not in cose:
        raise MalformedInput("COSE key type (label 1) is missing")

    kty = cose[KTY]
    if not _is_int(kty) or kty not in _SUPPORTED_KEY_TYPES:
        logger.debug("Rejecting COSE key with kty=%r", kty)
        raise UnsupportedKeyType(kty)

    for label in (ALG, CRV, X):
        if label not in cose:
            raise MalformedInput(f"COSE EC2 key is missing label {label}")

    alg, crv = cose[ALG], cose[CRV]
    if not (_is_int(alg) and _is_int(crv)) or (alg, crv) not in SUPPORTED_ALGORITHMS:
        logger.debug("Rejecting COSE key with alg=%r crv=%r", alg, crv)
        raise UnsupportedAlgorithm(alg, crv)

    return EC2Key(alg=alg, crv=crv, x=cose[X], y=cose.get(Y))


@catch_cbor_errors
def read_cose_key(data: bytes) -> Tuple[COSEPublicKey, int]:
    """Decode the first CBOR item of ``data`` as a COSE key.

    Bytes after the first item are neither consumed nor validated.

    :param data: Bytes starting with a CBOR encoded COSE key.
    :return: The key and the number of bytes its encoding occupied.
    """
    with BytesIO(bytes(data)) as fp:
        cose = cbor2.CBORDecoder(fp).decode()
        consumed = fp.tell()
    return parse_cose_key(cose), consumed


def decode_cose_key(data: bytes) -> COSEPublicKey:
    """Decode a CBOR encoded COSE public key.

    :param data: The CBOR encoded COSE map.
    :return: The validated key.
    """
    return read_cose_key(data)[0]
