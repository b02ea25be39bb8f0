"""
BN254 Field Element Codec
=========================

Canonical conversion between integers and the fixed-width encodings used by
verifier contracts.

A field element is an integer ``0 <= v < BN254_SCALAR_FIELD``. Its canonical
form is 32 bytes, big-endian, zero-padded. Decimal strings, Python ints and
``0x`` hex strings holding the same number all normalize to the same
encoding.

Version: 0.1.0
"""

import re

from zkbridge.errors import EncodingError


# BN254 scalar field order
BN254_SCALAR_FIELD = 21888242871839275222246405745257275088548364400416034343698204186575808495617

FIELD_BYTES = 32
FIELD_HEX_CHARS = FIELD_BYTES * 2

FieldLike = int | str

_DECIMAL_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")


def _check_range(value: int, source: object) -> int:
    if value < 0:
        raise EncodingError(f"Negative value is not a field element: {source!r}")
    if value >= BN254_SCALAR_FIELD:
        raise EncodingError(f"Value exceeds BN254 scalar field: {source!r}")
    return value


def decode_hex(value: str) -> int:
    """
    Parse a hex string into a field element.

    Accepts an optional ``0x``/``0X`` prefix, any letter case, and at most 64
    hex digits.

    Raises:
        EncodingError: On empty, non-hex, oversized or out-of-field input
    """
    if not isinstance(value, str):
        raise EncodingError(f"Expected hex string, got {type(value).__name__}")

    digits = value[2:] if value[:2] in ("0x", "0X") else value
    if not digits:
        raise EncodingError("Empty hex string")
    if len(digits) > FIELD_HEX_CHARS:
        raise EncodingError(
            f"Hex string has {len(digits)} digits, maximum is {FIELD_HEX_CHARS}: {value!r}"
        )
    if not _HEX_RE.fullmatch(digits):
        raise EncodingError(f"Malformed hex string: {value!r}")

    return _check_range(int(digits, 16), value)


def to_field_int(value: FieldLike) -> int:
    """
    Normalize a decimal string, int or ``0x`` hex string to a field element.

    Raises:
        EncodingError: If the value is not a representable field element
    """
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool):
        raise EncodingError(f"Boolean is not a field element: {value!r}")

    if isinstance(value, int):
        return _check_range(value, value)

    if isinstance(value, str):
        text = value.strip()
        if text[:2] in ("0x", "0X"):
            return decode_hex(text)
        if text.startswith("-") and _DECIMAL_RE.fullmatch(text[1:]):
            raise EncodingError(f"Negative value is not a field element: {value!r}")
        if not _DECIMAL_RE.fullmatch(text):
            raise EncodingError(f"Malformed decimal string: {value!r}")
        return _check_range(int(text), value)

    raise EncodingError(f"Unsupported field element type: {type(value).__name__}")


def encode(value: FieldLike) -> bytes:
    """Encode a field element as 32 big-endian bytes."""
    return to_field_int(value).to_bytes(FIELD_BYTES, "big")


def decode(data: bytes) -> int:
    """Decode 32 big-endian bytes into a field element."""
    if len(data) != FIELD_BYTES:
        raise EncodingError(f"Expected {FIELD_BYTES} bytes, got {len(data)}")
    return _check_range(int.from_bytes(data, "big"), data.hex())


def to_hex(value: FieldLike) -> str:
    """Encode a field element as ``0x`` followed by 64 lowercase hex digits."""
    return "0x" + encode(value).hex()


def to_decimal(value: FieldLike) -> str:
    """Encode a field element as a decimal string."""
    return str(to_field_int(value))


def reduce(value: int) -> int:
    """Reduce an arbitrary non-negative integer into the field."""
    return value % BN254_SCALAR_FIELD
