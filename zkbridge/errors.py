"""
Error Taxonomy
==============

Every public entry point either returns a complete result or raises exactly
one of these errors, naming the offending field or value.

Version: 0.1.0
"""

from collections.abc import Iterable


class ZKBridgeError(Exception):
    """Base class for all zkbridge errors."""


class ConfigurationError(ZKBridgeError):
    """A required path, key, client or contract identifier is missing."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} not configured")


class ShapeError(ZKBridgeError, ValueError):
    """Calldata or input has a malformed or ambiguous shape."""


class EncodingError(ZKBridgeError, ValueError):
    """A value cannot be represented as a field element or parsed."""


class MissingClaimError(ZKBridgeError):
    """A credential lacks a claim its converter requires."""

    def __init__(self, claim: str) -> None:
        self.claim = claim
        super().__init__(f"credential is missing required claim: {claim}")


class UnsupportedCredentialTypeError(ZKBridgeError):
    """No converter (or more than one) matches a credential's type list."""

    def __init__(self, types: Iterable[str], reason: str = "Unsupported credential type") -> None:
        self.types = list(types)
        super().__init__(f"{reason}: {', '.join(self.types) or '<none>'}")


class UnsupportedChainError(ZKBridgeError):
    """The chain target variant is not known."""

    def __init__(self, chain: object) -> None:
        self.chain = chain
        super().__init__(f"Unsupported chain: {chain}")


class ChainClientError(ZKBridgeError):
    """An external chain client failed; the original exception is the cause."""

    def __init__(self, chain: str, message: str) -> None:
        self.chain = chain
        super().__init__(f"{chain} client error: {message}")


class ProverError(ZKBridgeError):
    """The external prover process failed."""

    def __init__(self, circuit: str, stderr: str) -> None:
        self.circuit = circuit
        self.stderr = stderr
        super().__init__(f"Proof generation failed for {circuit}: {stderr}")
