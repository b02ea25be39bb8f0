"""
Credential Models
=================

W3C Verifiable Credential (Data Model 1.1) and the request/response models
of the credential converter.

Version: 0.1.0
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from zkbridge.errors import ShapeError


W3C_CREDENTIALS_V1 = "https://www.w3.org/2018/credentials/v1"

BASE_CREDENTIAL_TYPE = "VerifiableCredential"


class IssuerRef(BaseModel):
    """Issuer given as an object instead of a bare DID."""

    id: str
    name: str | None = None


class VerifiableCredential(BaseModel):
    """
    W3C Verifiable Credential.

    Only structure is modeled; signatures in ``proof`` are not checked.
    Missing top-level fields are tolerated here and reported by
    ``CredentialConverter.validate_credential``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: list[str] = Field(default_factory=lambda: [W3C_CREDENTIALS_V1], alias="@context")
    id: str | None = None
    type: list[str] = Field(default_factory=lambda: [BASE_CREDENTIAL_TYPE])
    issuer: str | IssuerRef = ""
    issuance_date: str = Field(default="", alias="issuanceDate")
    expiration_date: str | None = Field(default=None, alias="expirationDate")
    credential_subject: dict[str, Any] = Field(default_factory=dict, alias="credentialSubject")
    proof: dict[str, Any] | None = None

    @property
    def issuer_did(self) -> str:
        """Issuer DID whether the issuer is a string or an object."""
        if isinstance(self.issuer, IssuerRef):
            return self.issuer.id
        return self.issuer

    @classmethod
    def parse(cls, value: "VerifiableCredential | Mapping[str, Any]") -> "VerifiableCredential":
        """
        Accept a model or a JSON-LD mapping.

        Raises:
            ShapeError: If the mapping does not have the credential structure
        """
        if isinstance(value, VerifiableCredential):
            return value
        if not isinstance(value, Mapping):
            raise ShapeError(f"Credential must be a JSON object, got {type(value).__name__}")
        try:
            return cls.model_validate(dict(value))
        except ValidationError as e:
            raise ShapeError(f"Malformed credential: {e}") from e


class TrustedIssuer(BaseModel):
    """An issuer whose credentials a verifier accepts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    did: str
    name: str
    public_key: str | None = Field(default=None, alias="publicKey")
    credential_types: tuple[str, ...] = Field(default=(), alias="credentialTypes")
    trust_level: Literal["high", "medium", "low"] = Field(default="medium", alias="trustLevel")


class CredentialValidation(BaseModel):
    """Result of a structural credential check."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


class ClaimPredicate(BaseModel):
    """A comparison the holder proves about a claim without revealing it."""

    operator: Literal["gt", "lt", "eq", "gte", "lte"]
    value: Any


class SelectiveDisclosureRequest(BaseModel):
    """Verifier request naming the claims to prove."""

    model_config = ConfigDict(populate_by_name=True)

    required_claims: list[str] = Field(..., alias="requiredClaims")
    predicates: dict[str, ClaimPredicate] | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
