"""
Claim Commitment Hashing
========================

Deterministic commitments over credential claim fields.

The default ``placeholder`` hash is NOT claim-hiding: it is a rolling string
hash kept bit-compatible with existing circuit fixtures. A real deployment
must switch to a circuit-compatible arithmetic hash over the BN254 scalar
field, and circuits and converters must then be versioned together.

Version: 0.1.0
"""

import hashlib
from enum import Enum

from zkbridge.zk.field import reduce


class HashAlgorithm(str, Enum):
    """Commitment hash used for credential claims."""

    PLACEHOLDER = "placeholder"
    SHA256 = "sha256"


_PLACEHOLDER_MASK = (1 << 253) - 1


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return ""
    return str(value)


def _join(inputs: tuple[object, ...]) -> str:
    return "|".join(_stringify(v) for v in inputs)


def placeholder_hash(*inputs: object) -> int:
    """
    Rolling ``h = 31*h + c`` hash over the UTF-16 code units of the joined inputs.

    Inputs are joined with ``|``; the accumulator is truncated to 253 bits so
    the result is always a field element.
    """
    data = _join(inputs).encode("utf-16-be")
    h = 0
    for i in range(0, len(data), 2):
        code = int.from_bytes(data[i : i + 2], "big")
        h = ((h << 5) - h + code) & _PLACEHOLDER_MASK
    return h


def sha256_field_hash(*inputs: object) -> int:
    """SHA-256 of the joined inputs, reduced mod the scalar field order."""
    digest = hashlib.sha256(_join(inputs).encode()).digest()
    return reduce(int.from_bytes(digest, "big"))


def commitment_hash(*inputs: object, algorithm: HashAlgorithm = HashAlgorithm.PLACEHOLDER) -> str:
    """Commit to the inputs and return the field element as a decimal string."""
    if algorithm == HashAlgorithm.SHA256:
        return str(sha256_field_hash(*inputs))
    return str(placeholder_hash(*inputs))
