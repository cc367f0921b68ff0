"""IBAN structure, parsing, and checksum validation (ISO 13616).

Three collaborator entry points are used by the validation pipeline:

- :func:`is_parseable` — cheap structural check, returns a :class:`ParserResult`.
- :func:`parse` — normalize into an :class:`Iban` value.
- :meth:`Iban.validate` — country length and mod-97 checksum verdict.

INVARIANT: Functions here are pure. No I/O, no registry access.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ibanctl.domain.results import ParserResult, ValidationResult

MIN_LENGTH = 5
MAX_LENGTH = 34

# Total IBAN length per country (SWIFT IBAN registry).
COUNTRY_LENGTHS: dict[str, int] = {
    "AD": 24, "AE": 23, "AL": 28, "AT": 20, "AZ": 28, "BA": 20, "BE": 16,
    "BG": 22, "BH": 22, "BR": 29, "BY": 28, "CH": 21, "CR": 22, "CY": 28,
    "CZ": 24, "DE": 22, "DK": 18, "DO": 28, "EE": 20, "EG": 29, "ES": 24,
    "FI": 18, "FO": 18, "FR": 27, "GB": 22, "GE": 22, "GI": 23, "GL": 18,
    "GR": 27, "GT": 28, "HR": 21, "HU": 28, "IE": 22, "IL": 23, "IQ": 23,
    "IS": 26, "IT": 27, "JO": 30, "KW": 30, "KZ": 20, "LB": 28, "LC": 32,
    "LI": 21, "LT": 20, "LU": 20, "LV": 21, "MC": 27, "MD": 24, "ME": 22,
    "MK": 19, "MR": 27, "MT": 31, "MU": 30, "NL": 18, "NO": 15, "PK": 24,
    "PL": 28, "PS": 29, "PT": 25, "QA": 29, "RO": 24, "RS": 22, "SA": 24,
    "SC": 31, "SE": 24, "SI": 19, "SK": 24, "SM": 27, "ST": 25, "SV": 28,
    "TL": 23, "TN": 24, "TR": 26, "UA": 29, "VA": 22, "VG": 24, "XK": 20,
}  # fmt: skip

# Position of the bank code inside the BBAN, for countries with registry data.
BANK_CODE_SPANS: dict[str, tuple[int, int]] = {
    "AT": (0, 5),
    "BE": (0, 3),
    "CH": (0, 5),
    "DE": (0, 8),
    "LI": (0, 5),
    "LU": (0, 3),
    "NL": (0, 4),
}

_IBAN_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]+$")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(value: str) -> str:
    """Strip all whitespace and uppercase *value*."""
    return _WHITESPACE_RE.sub("", value).upper()


def is_parseable(value: str) -> ParserResult:
    """Check whether *value* has the structure of an IBAN.

    Length, character set, country code, and check-digit shape are checked
    here. The checksum itself is left to :meth:`Iban.validate`.
    """
    candidate = normalize(value)
    if len(candidate) < MIN_LENGTH:
        return ParserResult(valid=False, message="IBAN is too short.")
    if len(candidate) > MAX_LENGTH:
        return ParserResult(valid=False, message="IBAN is too long.")
    if not _IBAN_RE.match(candidate):
        return ParserResult(
            valid=False,
            message="IBAN must start with a country code and two check digits "
            "followed by letters and digits only.",
        )
    country = candidate[:2]
    if country not in COUNTRY_LENGTHS:
        return ParserResult(valid=False, message=f"Unknown country code {country}.")
    return ParserResult(valid=True)


def mod97(value: str) -> int:
    """ISO 7064 MOD 97-10 remainder of an alphanumeric string.

    Letters expand to two digits (A=10 ... Z=35). The remainder is folded
    in chunks so arbitrarily long inputs never build one huge integer.
    """
    digits = "".join(str(int(ch, 36)) for ch in value)
    remainder = 0
    for start in range(0, len(digits), 9):
        remainder = int(f"{remainder}{digits[start : start + 9]}") % 97
    return remainder


@dataclass(frozen=True)
class Iban:
    """A structurally parsed IBAN.

    Attributes:
        raw: The identifier as submitted (echoed back in results).
        country_code: ISO 3166 alpha-2 country code.
        check_digits: The two check digits.
        bban: The country-specific basic bank account number.
    """

    raw: str
    country_code: str
    check_digits: str
    bban: str

    @property
    def normalized(self) -> str:
        return f"{self.country_code}{self.check_digits}{self.bban}"

    @property
    def bank_code(self) -> str | None:
        """The bank code segment, or None if the country has no known layout."""
        span = BANK_CODE_SPANS.get(self.country_code)
        if span is None:
            return None
        start, end = span
        return self.bban[start:end]

    def validate(self) -> ValidationResult:
        """Check country length and the mod-97 checksum."""
        expected = COUNTRY_LENGTHS.get(self.country_code)
        actual = len(self.normalized)
        if expected is not None and actual != expected:
            return ValidationResult.create(
                False,
                f"Invalid length for country {self.country_code}: "
                f"expected {expected}, got {actual}.",
                self.raw,
            )
        rearranged = f"{self.bban}{self.country_code}{self.check_digits}"
        if mod97(rearranged) != 1:
            return ValidationResult.create(False, "Invalid IBAN checksum.", self.raw)
        return ValidationResult.create(True, "", self.raw)


def parse(value: str) -> Iban:
    """Split *value* into its IBAN parts.

    Callers are expected to have checked :func:`is_parseable` first;
    a ValueError is raised for inputs that are too short to split.
    """
    candidate = normalize(value)
    if len(candidate) < MIN_LENGTH:
        msg = f"Cannot parse {value!r} as IBAN"
        raise ValueError(msg)
    return Iban(
        raw=value,
        country_code=candidate[:2],
        check_digits=candidate[2:4],
        bban=candidate[4:],
    )
