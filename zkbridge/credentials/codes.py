"""
Claim Code Tables
=================

Closed lookup tables mapping free-text credential claims to the numeric
codes circuits consume. Every table has an explicit ``UNKNOWN`` member that
unrecognized claims map to.

Version: 0.1.0
"""

import re
from enum import IntEnum
from typing import Any


def _normalize(name: str) -> str:
    return re.sub(r"[^0-9a-z]", "", name.lower())


class ClaimCode(IntEnum):
    """Base for claim lookup tables; subclasses define ``UNKNOWN``."""

    @classmethod
    def lookup(cls, value: Any) -> "ClaimCode | None":
        """
        Find the member for a claim, or None if it is not in the table.

        Names match case-insensitively ignoring separators, so ``"nationalID"``
        finds ``NATIONAL_ID``. Ints and numeric strings match by code.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int) or (isinstance(value, str) and value.strip().isdecimal()):
            try:
                member = cls(int(value))
            except ValueError:
                return None
            return None if member.name == "UNKNOWN" else member
        if not isinstance(value, str):
            return None

        key = _normalize(value)
        for name, member in cls.__members__.items():
            if name != "UNKNOWN" and _normalize(name) == key:
                return member
        return None

    @classmethod
    def from_claim(cls, value: Any) -> "ClaimCode":
        """Map a claim to its member, falling back to ``UNKNOWN``."""
        member = cls.lookup(value)
        return cls.UNKNOWN if member is None else member


class Country(ClaimCode):
    """ISO 3166-1 numeric codes, keyed by alpha-2."""

    UNKNOWN = 0
    US = 840
    CA = 124
    GB = 826
    DE = 276
    FR = 250
    IT = 380
    JP = 392
    AU = 36
    NZ = 554
    CH = 756
    NL = 528
    BE = 56
    AT = 40
    PT = 620
    ES = 724
    NO = 578
    SE = 752
    DK = 208
    IE = 372
    LU = 442
    AR = 32
    BR = 76
    MX = 484
    SG = 702
    HK = 344
    KR = 410


class DocumentType(ClaimCode):
    """Identity document types. ``UNKNOWN`` shares the code of ``OTHER``."""

    PASSPORT = 1
    NATIONAL_ID = 2
    DRIVER_LICENSE = 3
    RESIDENCE_PERMIT = 4
    WORK_PERMIT = 5
    OTHER = 6
    UNKNOWN = 6


class Industry(ClaimCode):
    """Simplified NAICS sector codes."""

    UNKNOWN = 0
    AGRICULTURE = 11
    MINING = 21
    UTILITIES = 22
    CONSTRUCTION = 23
    MANUFACTURING = 31
    WHOLESALE = 42
    RETAIL = 44
    TRANSPORTATION = 48
    INFORMATION = 51
    FINANCE = 52
    REAL_ESTATE = 53
    PROFESSIONAL = 54
    TECHNOLOGY = 54
    MANAGEMENT = 55
    ADMINISTRATIVE = 56
    EDUCATION = 61
    HEALTHCARE = 62
    ARTS = 71
    ACCOMMODATION = 72
    OTHER = 81
    PUBLIC_ADMIN = 92


class EmploymentStatus(ClaimCode):
    """Employment status codes."""

    UNKNOWN = 0
    ACTIVE = 1
    TERMINATED = 2
    LEAVE = 3
    RETIRED = 4
    CONTRACTOR = 5
