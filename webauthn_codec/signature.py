"""DER encoded ECDSA signature decoding."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidSignatureEncoding

logger = logging.getLogger(__name__)

__all__ = ["Signature", "decode_signature"]

_SEQUENCE = 0x30
_INTEGER = 0x02

# Ecdsa-Sig-Value ::= SEQUENCE { r INTEGER, s INTEGER }
_SIGNATURE_SCHEMA: Tuple[int, ...] = (_INTEGER, _INTEGER)


@dataclass(frozen=True)
class Signature:
    """The two integers of an ECDSA signature."""

    r: int
    s: int

    def to_raw(self, length: int = 32) -> bytes:
        """Return ``r || s`` with each integer padded to ``length`` bytes."""
        return self.r.to_bytes(length, "big") + self.s.to_bytes(length, "big")


def _parse_der_length(data: memoryview, idx: int) -> Tuple[int, int]:
    """Parse a DER length field and return (length, new_index)."""

    if idx >= len(data):
        raise InvalidSignatureEncoding("Invalid DER length: truncated data")
    first = data[idx]
    idx += 1
    if first & 0x80 == 0:
        return first, idx
    num_bytes = first & 0x7F
    if num_bytes == 0:
        raise InvalidSignatureEncoding(
            "Indefinite length DER encodings are not supported"
        )
    if idx + num_bytes > len(data):
        raise InvalidSignatureEncoding("Invalid DER length: truncated data")
    length = int.from_bytes(data[idx : idx + num_bytes], "big")
    if data[idx] == 0 or length < 0x80:
        raise InvalidSignatureEncoding("DER length is not minimally encoded")
    idx += num_bytes
    return length, idx


def _read_element(data: memoryview, idx: int, tag: int) -> Tuple[memoryview, int]:
    """Read one element with the expected tag, returning (content, end_index)."""

    if idx >= len(data):
        raise InvalidSignatureEncoding(f"Missing DER element with tag 0x{tag:02x}")
    if data[idx] != tag:
        raise InvalidSignatureEncoding(
            f"Expected DER tag 0x{tag:02x}, found 0x{data[idx]:02x}"
        )
    length, idx = _parse_der_length(data, idx + 1)
    end = idx + length
    if end > len(data):
        raise InvalidSignatureEncoding("DER element overruns buffer")
    return data[idx:end], end


def _integer_from_content(content: memoryview) -> int:
    """Interpret INTEGER content octets as an unsigned big integer."""

    if len(content) == 0:
        raise InvalidSignatureEncoding("DER INTEGER has no content")
    if len(content) > 1 and content[0] == 0x00:
        if content[1] & 0x80 == 0:
            raise InvalidSignatureEncoding("DER INTEGER is not minimally encoded")
        # Padding that only keeps the value positive.
        content = content[1:]
    return int.from_bytes(content, "big")


def decode_signature(data: bytes) -> Signature:
    """Decode a DER ``SEQUENCE { INTEGER r, INTEGER s }`` signature.

    :param data: The DER encoded signature.
    :return: The signature integers, both read as unsigned values.
    """
    view = memoryview(bytes(data))
    try:
        body, end = _read_element(view, 0, _SEQUENCE)
        if end != len(view):
            raise InvalidSignatureEncoding(
                f"{len(view) - end} unexpected bytes after signature SEQUENCE"
            )

        values = []
        idx = 0
        for tag in _SIGNATURE_SCHEMA:
            content, idx = _read_element(body, idx, tag)
            values.append(_integer_from_content(content))
        if idx != len(body):
            raise InvalidSignatureEncoding("Signature SEQUENCE has extra elements")
    except InvalidSignatureEncoding as e:
        logger.debug("Rejecting DER signature: %s", e)
        raise

    r, s = values
    return Signature(r=r, s=s)
