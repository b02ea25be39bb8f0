"""
Credentials Module
==================

Conversion of W3C verifiable credentials into circuit inputs.

Supports:
- AgeCredential (birth date)
- IdentityCredential (nationality, document type)
- EmploymentCredential (employer, salary, tenure, industry)

Usage:
    from zkbridge.credentials import CredentialConverter

    converter = CredentialConverter()
    inputs = converter.convert(credential)
"""

from zkbridge.credentials.claims import (
    AgeClaims,
    CalendarDate,
    CredentialClaimSet,
    EmploymentClaims,
    IdentityClaims,
    decode_claim_set,
    parse_date,
)
from zkbridge.credentials.codes import Country, DocumentType, EmploymentStatus, Industry
from zkbridge.credentials.converter import ConversionConfig, CredentialConverter, calculate_age
from zkbridge.credentials.hashing import HashAlgorithm, commitment_hash
from zkbridge.credentials.models import (
    CredentialValidation,
    IssuerRef,
    SelectiveDisclosureRequest,
    TrustedIssuer,
    VerifiableCredential,
)

__all__ = [
    # Converter
    "ConversionConfig",
    "CredentialConverter",
    "calculate_age",
    # Claims
    "AgeClaims",
    "CalendarDate",
    "CredentialClaimSet",
    "EmploymentClaims",
    "IdentityClaims",
    "decode_claim_set",
    "parse_date",
    # Codes
    "Country",
    "DocumentType",
    "EmploymentStatus",
    "Industry",
    # Hashing
    "HashAlgorithm",
    "commitment_hash",
    # Models
    "CredentialValidation",
    "IssuerRef",
    "SelectiveDisclosureRequest",
    "TrustedIssuer",
    "VerifiableCredential",
]
