"""Validation requests, flag parsing, and cache key derivation.

INVARIANT: ``derive_cache_key`` is pure and total. Equal requests always
map to the same key, distinct requests never collide.
"""

from __future__ import annotations

from dataclasses import dataclass

_TRUTHY = frozenset({"1", "true"})


def to_boolean(value: str | None) -> bool:
    """Interpret a query flag.

    Only ``"1"`` and ``"true"`` are true. Anything else, including
    ``"True"``, ``"yes"`` or a missing value, is false. Never raises.
    """
    return value in _TRUTHY


def _flag_text(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True)
class ValidationRequest:
    """A single validation request with its enrichment flags."""

    iban: str
    validate_bank_code: bool = False
    get_bic: bool = False

    @classmethod
    def from_query(
        cls,
        iban: str,
        validate_bank_code: str | None = None,
        get_bic: str | None = None,
    ) -> ValidationRequest:
        """Build a request from raw path/query values."""
        return cls(
            iban=iban,
            validate_bank_code=to_boolean(validate_bank_code),
            get_bic=to_boolean(get_bic),
        )


def derive_cache_key(request: ValidationRequest) -> str:
    """Compose the cache key for *request*.

    Layout is ``<iban><getBIC><validateBankCode>`` with lowercase
    ``true``/``false``. Each flag word is recognisable from its last three
    letters, so a key decodes uniquely from the right and distinct
    requests never collide.
    """
    return f"{request.iban}{_flag_text(request.get_bic)}{_flag_text(request.validate_bank_code)}"
