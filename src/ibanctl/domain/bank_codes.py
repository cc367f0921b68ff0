"""Bank-code validation and BIC resolution against a bank registry.

The registry itself lives in infrastructure; this module only defines the
read-only contract it has to satisfy (:class:`BankDataRepository`) and the
two enrichment steps that consult it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ibanctl.domain.iban import Iban
from ibanctl.domain.results import ValidationResult

BANK_CODE_CHECK = "bankCode"


@dataclass(frozen=True)
class BankEntry:
    """One registry record for a bank code."""

    country: str
    bank_code: str
    name: str
    zip: str = ""
    city: str = ""
    bic: str = ""


class BankDataRepository(Protocol):
    """Read-only lookup store for bank registry data.

    Implementations must be safe for concurrent ``find`` calls.
    """

    def find(self, country: str, bank_code: str) -> BankEntry | None: ...


def validate_bank_code(
    iban: Iban, result: ValidationResult, repo: BankDataRepository
) -> ValidationResult:
    """Check the IBAN's bank code against the registry.

    Unknown bank codes mark the result invalid and record a failed
    ``bankCode`` check. Countries without a known bank code layout are
    reported but leave validity untouched.
    """
    bank_code = iban.bank_code
    if bank_code is None:
        return result.with_message(
            f"Bank code validation is not supported for {iban.country_code}."
        )

    entry = repo.find(iban.country_code, bank_code)
    if entry is None:
        return result.with_check(BANK_CODE_CHECK, False).with_message(
            f"Bank code not found: {bank_code}", valid=False
        )
    return result.with_check(BANK_CODE_CHECK, True).with_message(f"Bank code valid: {bank_code}")


def get_bic(iban: Iban, result: ValidationResult, repo: BankDataRepository) -> ValidationResult:
    """Attach registry data, including the BIC, for the IBAN's bank.

    A missing registry entry is reported as a message only; a bank without
    a BIC is not an invalid IBAN.
    """
    bank_code = iban.bank_code
    if bank_code is None:
        return result.with_message(f"BIC lookup is not supported for {iban.country_code}.")

    entry = repo.find(iban.country_code, bank_code)
    if entry is None:
        return result.with_message(f"No BIC found for bank code: {bank_code}")
    return result.with_bank_data(
        bank_code=entry.bank_code,
        name=entry.name,
        zip=entry.zip,
        city=entry.city,
        bic=entry.bic,
    )
