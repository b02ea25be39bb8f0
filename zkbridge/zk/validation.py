"""
Circuit Input Validation
========================

Advisory domain check run before circuit inputs are handed to the external
prover. Passing does not guarantee the circuit is satisfiable.

Version: 0.1.0
"""

import math
import re
from collections.abc import Mapping
from typing import Any


_NUMERIC_STRING_RE = re.compile(r"[0-9]+|0[xX][0-9a-fA-F]+")


def _is_valid_scalar(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer() and value >= 0
    if isinstance(value, str):
        return _NUMERIC_STRING_RE.fullmatch(value.strip()) is not None
    return False


def _is_valid_value(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return all(_is_valid_value(v) for v in value)
    return _is_valid_scalar(value)


def find_invalid_input(inputs: Any) -> str | None:
    """
    Return the name of the first invalid input field, or None if all pass.

    A non-mapping ``inputs`` is reported as ``"<inputs>"``.
    """
    if not isinstance(inputs, Mapping):
        return "<inputs>"
    for name, value in inputs.items():
        if not _is_valid_value(value):
            return str(name)
    return None


def validate_inputs(inputs: Any) -> bool:
    """
    Check that every circuit input is a non-negative integer.

    Accepts ints, integral floats, decimal or ``0x`` hex strings, and
    lists of those (nested lists included). Never raises.

    Example:
        >>> validate_inputs({"age": 25, "balance": "1000000"})
        True
        >>> validate_inputs({"age": 25.5})
        False
    """
    return find_invalid_input(inputs) is None
