"""
Credential Claim Sets
=====================

Typed claim sets decoded from a credential's subject, one per supported
credential type.

Dates are decomposed by splitting the ISO string (on ``T``, then ``-``).
They are never converted through a timezone-aware calendar object, which
would move the derived day near midnight in non-UTC contexts.

Version: 0.1.0
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any, NamedTuple

from zkbridge.credentials.codes import Country, DocumentType, EmploymentStatus, Industry
from zkbridge.credentials.models import VerifiableCredential
from zkbridge.errors import EncodingError, MissingClaimError, UnsupportedCredentialTypeError


AGE_CREDENTIAL = "AgeCredential"
IDENTITY_CREDENTIAL = "IdentityCredential"
EMPLOYMENT_CREDENTIAL = "EmploymentCredential"

SUPPORTED_CREDENTIAL_TYPES = (AGE_CREDENTIAL, IDENTITY_CREDENTIAL, EMPLOYMENT_CREDENTIAL)


class CalendarDate(NamedTuple):
    """A timezone-free calendar date."""

    year: int
    month: int
    day: int


def parse_date(value: Any, name: str = "date") -> CalendarDate:
    """
    Split ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM:SS...`` into its date parts.

    The time part and any UTC offset are ignored.

    Raises:
        EncodingError: If the value is not a valid calendar date string
    """
    if not isinstance(value, str):
        raise EncodingError(f"{name} must be an ISO date string, got {value!r}")

    parts = value.strip().split("T")[0].split("-")
    if len(parts) != 3 or not all(p.isdecimal() for p in parts):
        raise EncodingError(f"Malformed {name}: {value!r}")

    year, month, day = (int(p) for p in parts)
    try:
        date(year, month, day)
    except ValueError as e:
        raise EncodingError(f"Malformed {name}: {value!r} ({e})") from e
    return CalendarDate(year, month, day)


def resolve_reference_date(reference_date: date | datetime | str | None = None) -> CalendarDate:
    """
    Normalize a reference date.

    ``None`` means today in UTC. A ``datetime`` contributes its own calendar
    fields, without timezone conversion.
    """
    if reference_date is None:
        today = datetime.now(UTC).date()
        return CalendarDate(today.year, today.month, today.day)
    if isinstance(reference_date, datetime):
        return CalendarDate(reference_date.year, reference_date.month, reference_date.day)
    if isinstance(reference_date, date):
        return CalendarDate(reference_date.year, reference_date.month, reference_date.day)
    return parse_date(reference_date, "reference date")


def _text(subject: Mapping[str, Any], key: str) -> str:
    value = subject.get(key)
    return "" if value is None else str(value)


def _salary(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise EncodingError(f"annualSalary must be a number, got {value!r}")
    if isinstance(value, float):
        if not (math.isfinite(value) and value.is_integer()):
            raise EncodingError(f"annualSalary must be a whole number, got {value!r}")
        value = int(value)
    if isinstance(value, str):
        if not value.strip().isdecimal():
            raise EncodingError(f"annualSalary must be a whole number, got {value!r}")
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise EncodingError(f"annualSalary must be a non-negative whole number, got {value!r}")
    return value


def _issuer(vc: VerifiableCredential) -> tuple[str, str]:
    if not vc.issuer_did:
        raise MissingClaimError("issuer")
    if not vc.issuance_date:
        raise MissingClaimError("issuanceDate")
    return vc.issuer_did, vc.issuance_date


@dataclass(frozen=True)
class AgeClaims:
    """Claims of an ``AgeCredential``."""

    issuer: str
    issuance_date: str
    birth_date: CalendarDate

    @classmethod
    def from_credential(cls, vc: VerifiableCredential) -> "AgeClaims":
        issuer, issuance_date = _issuer(vc)
        birth_date = vc.credential_subject.get("birthDate")
        if not birth_date:
            raise MissingClaimError("birthDate")
        return cls(
            issuer=issuer,
            issuance_date=issuance_date,
            birth_date=parse_date(birth_date, "birthDate"),
        )


@dataclass(frozen=True)
class IdentityClaims:
    """Claims of an ``IdentityCredential``."""

    issuer: str
    issuance_date: str
    given_name: str
    family_name: str
    nationality: Country
    document_type: DocumentType
    document_number: str
    subject_id: str

    @classmethod
    def from_credential(cls, vc: VerifiableCredential) -> "IdentityClaims":
        issuer, issuance_date = _issuer(vc)
        subject = vc.credential_subject
        return cls(
            issuer=issuer,
            issuance_date=issuance_date,
            given_name=_text(subject, "givenName"),
            family_name=_text(subject, "familyName"),
            nationality=Country.from_claim(subject.get("nationality")),
            document_type=DocumentType.from_claim(subject.get("documentType")),
            document_number=_text(subject, "documentNumber"),
            subject_id=_text(subject, "id"),
        )


@dataclass(frozen=True)
class EmploymentClaims:
    """Claims of an ``EmploymentCredential``."""

    issuer: str
    issuance_date: str
    employer_name: str
    employer_did: str
    job_title: str
    start_date: CalendarDate
    annual_salary: int
    employment_status: EmploymentStatus
    industry: Industry

    @classmethod
    def from_credential(cls, vc: VerifiableCredential) -> "EmploymentClaims":
        issuer, issuance_date = _issuer(vc)
        subject = vc.credential_subject
        start_date = subject.get("startDate")
        if not start_date:
            raise MissingClaimError("startDate")
        return cls(
            issuer=issuer,
            issuance_date=issuance_date,
            employer_name=_text(subject, "employerName"),
            employer_did=_text(subject, "employerDID"),
            job_title=_text(subject, "jobTitle"),
            start_date=parse_date(start_date, "startDate"),
            annual_salary=_salary(subject.get("annualSalary")),
            employment_status=EmploymentStatus.from_claim(subject.get("employmentStatus")),
            industry=Industry.from_claim(subject.get("industryCode")),
        )


CredentialClaimSet = AgeClaims | IdentityClaims | EmploymentClaims

_CLAIM_SETS: dict[str, type[AgeClaims] | type[IdentityClaims] | type[EmploymentClaims]] = {
    AGE_CREDENTIAL: AgeClaims,
    IDENTITY_CREDENTIAL: IdentityClaims,
    EMPLOYMENT_CREDENTIAL: EmploymentClaims,
}


def detect_credential_type(vc: VerifiableCredential) -> str:
    """
    Return the single supported type a credential declares.

    Raises:
        UnsupportedCredentialTypeError: If no supported type, or more than one,
            is declared
    """
    matched = [t for t in SUPPORTED_CREDENTIAL_TYPES if t in vc.type]
    if not matched:
        offending = [t for t in vc.type if t != "VerifiableCredential"] or list(vc.type)
        raise UnsupportedCredentialTypeError(offending)
    if len(matched) > 1:
        raise UnsupportedCredentialTypeError(matched, reason="Ambiguous credential type")
    return matched[0]


def decode_claim_set(vc: VerifiableCredential | Mapping[str, Any]) -> CredentialClaimSet:
    """Decode the claim set matching the credential's declared type."""
    vc = VerifiableCredential.parse(vc)
    return _CLAIM_SETS[detect_credential_type(vc)].from_credential(vc)
