"""
Credential to Circuit Input Converter
=====================================

Derives circuit inputs from verifiable credentials, and the public
parameters a verifier sets for the matching circuits.

Every private input set carries a deterministic ``credentialHash`` and
``issuerCommitment``. Private fields depend only on the credential; only the
``current*`` fields depend on the reference date.

Version: 0.1.0
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, date, datetime, time
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from zkbridge.credentials.claims import (
    AgeClaims,
    CalendarDate,
    EmploymentClaims,
    IdentityClaims,
    decode_claim_set,
    parse_date,
    resolve_reference_date,
)
from zkbridge.credentials.codes import Country, DocumentType, EmploymentStatus, Industry
from zkbridge.credentials.hashing import HashAlgorithm, commitment_hash
from zkbridge.credentials.models import (
    BASE_CREDENTIAL_TYPE,
    CredentialValidation,
    SelectiveDisclosureRequest,
    TrustedIssuer,
    VerifiableCredential,
)
from zkbridge.errors import EncodingError, ShapeError
from zkbridge.logging import get_logger


logger = get_logger(__name__)

# Fixed widths of the circuits' public input vectors
NATIONALITY_VECTOR_WIDTH = 20
INDUSTRY_VECTOR_WIDTH = 10

CircuitInputs = dict[str, int | str | list[int]]

ReferenceDate = date | datetime | str | None


class ConversionConfig(BaseModel):
    """Immutable converter configuration."""

    model_config = ConfigDict(frozen=True)

    hash_algorithm: HashAlgorithm = HashAlgorithm.PLACEHOLDER


def _padded(codes: list[int], width: int, name: str) -> list[int]:
    if len(codes) > width:
        raise ShapeError(f"{name} accepts at most {width} entries, got {len(codes)}")
    return codes + [0] * (width - len(codes))


def calculate_age(birth_date: str, reference_date: ReferenceDate = None) -> int:
    """
    Whole years between a birth date and the reference date.

    Example:
        >>> calculate_age("1990-05-15", "2024-03-01")
        33
    """
    birth = parse_date(birth_date, "birthDate")
    ref = resolve_reference_date(reference_date)
    age = ref.year - birth.year
    if (ref.month, ref.day) < (birth.month, birth.day):
        age -= 1
    return age


def _reference_moment(reference_date: ReferenceDate) -> datetime:
    if reference_date is None:
        return datetime.now(UTC)
    if isinstance(reference_date, datetime):
        return reference_date if reference_date.tzinfo else reference_date.replace(tzinfo=UTC)
    day = resolve_reference_date(reference_date)
    return datetime.combine(date(*day), time.min, UTC)


def _parse_timestamp(value: str) -> datetime:
    try:
        moment = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise EncodingError(f"Malformed expirationDate: {value!r}") from e
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


class CredentialConverter:
    """
    Converts verifiable credentials to circuit inputs.

    Instances are immutable; ``with_trusted_issuer`` returns a new converter.

    Usage:
        converter = CredentialConverter()

        inputs = converter.convert(credential, reference_date="2024-03-01")
        public = converter.age_public_inputs(18, ["did:example:issuer"])
    """

    def __init__(
        self,
        config: ConversionConfig | None = None,
        trusted_issuers: Iterable[TrustedIssuer] = (),
    ) -> None:
        self._config = config or ConversionConfig()
        self._trusted_issuers: dict[str, TrustedIssuer] = {i.did: i for i in trusted_issuers}

    @property
    def config(self) -> ConversionConfig:
        return self._config

    def _hash(self, *inputs: object) -> str:
        return commitment_hash(*inputs, algorithm=self._config.hash_algorithm)

    # =========================================================================
    # Trusted issuers
    # =========================================================================

    @property
    def trusted_issuers(self) -> list[TrustedIssuer]:
        return list(self._trusted_issuers.values())

    def with_trusted_issuer(self, issuer: TrustedIssuer) -> "CredentialConverter":
        """Return a converter that also trusts ``issuer``."""
        return CredentialConverter(self._config, [*self._trusted_issuers.values(), issuer])

    def is_trusted_issuer(self, issuer_did: str) -> bool:
        return issuer_did in self._trusted_issuers

    # =========================================================================
    # Private circuit inputs
    # =========================================================================

    def convert_age(
        self,
        vc: VerifiableCredential | Mapping[str, Any],
        reference_date: ReferenceDate = None,
    ) -> CircuitInputs:
        """
        Convert an age credential.

        Raises:
            MissingClaimError: If the subject has no ``birthDate``
            EncodingError: If a date is malformed
        """
        claims = AgeClaims.from_credential(VerifiableCredential.parse(vc))
        return self._age_inputs(claims, resolve_reference_date(reference_date))

    def _age_inputs(self, claims: AgeClaims, today: CalendarDate) -> CircuitInputs:
        birth = claims.birth_date
        return {
            # Private inputs
            "birthYear": birth.year,
            "birthMonth": birth.month,
            "birthDay": birth.day,
            "credentialHash": self._hash(birth.year, birth.month, birth.day, claims.issuer),
            "issuerCommitment": self._hash(claims.issuer, claims.issuance_date),
            # Public inputs set by the verifier
            "currentYear": today.year,
            "currentMonth": today.month,
            "currentDay": today.day,
        }

    def convert_identity(self, vc: VerifiableCredential | Mapping[str, Any]) -> CircuitInputs:
        """Convert an identity credential."""
        claims = IdentityClaims.from_credential(VerifiableCredential.parse(vc))
        return self._identity_inputs(claims)

    def _identity_inputs(self, claims: IdentityClaims) -> CircuitInputs:
        name_hash = self._hash(claims.given_name, claims.family_name)
        nationality = int(claims.nationality)
        document_type = int(claims.document_type)
        document_hash = self._hash(claims.document_number)
        issuer_signature = self._hash(claims.issuer, claims.issuance_date, name_hash)

        return {
            "nameHash": name_hash,
            "nationality": nationality,
            "documentType": document_type,
            "documentHash": document_hash,
            "issuerSignature": issuer_signature,
            "subjectDID": self._hash(claims.subject_id),
            "credentialHash": self._hash(name_hash, nationality, document_type, document_hash),
            "issuerCommitment": issuer_signature,
        }

    def convert_employment(
        self,
        vc: VerifiableCredential | Mapping[str, Any],
        reference_date: ReferenceDate = None,
    ) -> CircuitInputs:
        """
        Convert an employment credential.

        A missing or unrecognized ``employmentStatus`` encodes as 0 (UNKNOWN),
        not as active, so such a credential never satisfies a
        ``requiredStatus`` of active.

        Raises:
            MissingClaimError: If the subject has no ``startDate``
            EncodingError: If a date or the salary is malformed
        """
        claims = EmploymentClaims.from_credential(VerifiableCredential.parse(vc))
        return self._employment_inputs(claims, resolve_reference_date(reference_date))

    def _employment_inputs(self, claims: EmploymentClaims, today: CalendarDate) -> CircuitInputs:
        employer_hash = self._hash(claims.employer_name, claims.employer_did)
        job_title_hash = self._hash(claims.job_title)
        start = claims.start_date
        salary = claims.annual_salary
        credential_signature = self._hash(employer_hash, start.year, start.month, salary, claims.issuer)

        return {
            "employerHash": employer_hash,
            "jobTitleHash": job_title_hash,
            "startYear": start.year,
            "startMonth": start.month,
            "annualSalary": salary,
            "employmentStatus": int(claims.employment_status),
            "industryCode": int(claims.industry),
            "credentialSignature": credential_signature,
            "currentYear": today.year,
            "currentMonth": today.month,
            "credentialHash": self._hash(employer_hash, job_title_hash, salary),
            "issuerCommitment": credential_signature,
        }

    def convert(
        self,
        vc: VerifiableCredential | Mapping[str, Any],
        reference_date: ReferenceDate = None,
    ) -> CircuitInputs:
        """
        Detect the credential type and convert.

        Raises:
            UnsupportedCredentialTypeError: If the type list matches no
                converter, or more than one
        """
        claims = decode_claim_set(vc)

        if isinstance(claims, AgeClaims):
            inputs = self._age_inputs(claims, resolve_reference_date(reference_date))
        elif isinstance(claims, IdentityClaims):
            inputs = self._identity_inputs(claims)
        else:
            inputs = self._employment_inputs(claims, resolve_reference_date(reference_date))

        logger.debug(
            "credential_converted",
            claim_set=type(claims).__name__,
            issuer=claims.issuer,
            trusted=self.is_trusted_issuer(claims.issuer),
        )
        return inputs

    # =========================================================================
    # Public inputs
    # =========================================================================

    def age_public_inputs(
        self,
        min_age: int,
        trusted_issuers: Sequence[str] | None = None,
        reference_date: ReferenceDate = None,
    ) -> CircuitInputs:
        """
        Public inputs of the age circuit.

        ``trusted_issuers`` defaults to the DIDs registered on this converter.
        """
        if trusted_issuers is None:
            trusted_issuers = list(self._trusted_issuers)
        today = resolve_reference_date(reference_date)

        return {
            "currentYear": today.year,
            "currentMonth": today.month,
            "currentDay": today.day,
            "minAge": min_age,
            "trustedIssuerRoot": self._hash(*trusted_issuers) if trusted_issuers else "0",
        }

    def identity_public_inputs(
        self,
        allowed_nationalities: Sequence[str],
        allowed_document_types: Sequence[str],
        issuer_did: str,
    ) -> CircuitInputs:
        """
        Public inputs of the identity circuit.

        Nationalities become a zero-padded vector of width 20. Document types
        become a bitmask with bit ``code - 1`` set; unrecognized types are
        skipped.

        Raises:
            ShapeError: If more than 20 nationalities are allowed
        """
        nationalities = [int(Country.from_claim(n)) for n in allowed_nationalities]

        bitmask = 0
        for name in allowed_document_types:
            doc_type = DocumentType.lookup(name)
            if doc_type is not None:
                bitmask |= 1 << (int(doc_type) - 1)

        return {
            "allowedNationalities": _padded(
                nationalities, NATIONALITY_VECTOR_WIDTH, "allowedNationalities"
            ),
            "allowedDocTypes": bitmask,
            "credentialSchemaHash": self._hash("IdentityCredential", "v1"),
            "issuerDID": self._hash(issuer_did),
        }

    def employment_public_inputs(
        self,
        min_salary: int,
        min_tenure_months: int,
        required_status: str = "active",
        allowed_industries: Sequence[str] = (),
        reference_date: ReferenceDate = None,
    ) -> CircuitInputs:
        """
        Public inputs of the employment circuit.

        Raises:
            ShapeError: If more than 10 industries are allowed
        """
        today = resolve_reference_date(reference_date)
        industries = [int(Industry.from_claim(i)) for i in allowed_industries]

        return {
            "currentYear": today.year,
            "currentMonth": today.month,
            "minSalary": min_salary,
            "minTenureMonths": min_tenure_months,
            "requiredStatus": int(EmploymentStatus.from_claim(required_status)),
            "allowedIndustries": _padded(industries, INDUSTRY_VECTOR_WIDTH, "allowedIndustries"),
        }

    # =========================================================================
    # Credential checks
    # =========================================================================

    def validate_credential(
        self,
        vc: VerifiableCredential | Mapping[str, Any],
        reference_date: ReferenceDate = None,
    ) -> CredentialValidation:
        """
        Check the credential structure and expiry.

        Problems are collected, not raised. Signatures are not checked.
        """
        vc = VerifiableCredential.parse(vc)
        errors: list[str] = []

        if not vc.context:
            errors.append("Missing @context")
        if not vc.type:
            errors.append("Missing type")
        if BASE_CREDENTIAL_TYPE not in vc.type:
            errors.append('Must include "VerifiableCredential" type')
        if not vc.issuer_did:
            errors.append("Missing issuer")
        if not vc.issuance_date:
            errors.append("Missing issuanceDate")
        if not vc.credential_subject:
            errors.append("Missing credentialSubject")

        if vc.expiration_date:
            try:
                if _parse_timestamp(vc.expiration_date) < _reference_moment(reference_date):
                    errors.append("Credential has expired")
            except EncodingError as e:
                errors.append(str(e))

        return CredentialValidation(valid=not errors, errors=errors)

    def selective_disclosure_request(
        self,
        required_claims: Sequence[str],
        predicates: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> SelectiveDisclosureRequest:
        """
        Build a request naming the claims to prove without revealing.

        Raises:
            ShapeError: If a predicate has an unknown operator
        """
        try:
            return SelectiveDisclosureRequest(
                required_claims=list(required_claims),
                predicates={k: dict(v) for k, v in predicates.items()} if predicates else None,
            )
        except ValidationError as e:
            raise ShapeError(f"Invalid selective disclosure request: {e}") from e
