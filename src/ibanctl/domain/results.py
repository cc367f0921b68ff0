"""Validation result models — the JSON verdict returned to callers.

The wire shape is kept stable for existing clients::

    {"valid": ..., "messages": [...], "iban": ..., "bankData": {...}, "checkResults": {...}}

INVARIANT: Results are immutable. Enrichment steps return a new result via
``model_copy`` and never drop data an earlier stage already produced.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ParserResult(BaseModel):
    """Outcome of the structural format check."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    message: str = ""


class BankData(BaseModel):
    """Registry data attached to a result when enrichment was requested."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bank_code: str = Field(default="", alias="bankCode")
    name: str = ""
    zip: str = ""
    city: str = ""
    bic: str = ""


class ValidationResult(BaseModel):
    """Verdict for a single IBAN.

    Attributes:
        valid: Overall validity after all stages that ran.
        messages: Human-readable diagnostics, in the order they were produced.
        iban: The identifier exactly as submitted.
        bank_data: Registry data; fields stay empty unless enrichment filled them.
        check_results: Per-check verdicts (``bankCode`` when bank-code validation ran).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    valid: bool
    messages: list[str] = Field(default_factory=list)
    iban: str = ""
    bank_data: BankData = Field(default_factory=BankData, alias="bankData")
    check_results: dict[str, bool] = Field(default_factory=dict, alias="checkResults")

    @classmethod
    def create(cls, valid: bool, message: str, iban: str) -> ValidationResult:
        """Build a result with a single message (empty messages are dropped)."""
        return cls(valid=valid, messages=[message] if message else [], iban=iban)

    def with_message(self, message: str, *, valid: bool | None = None) -> ValidationResult:
        """Return a copy with *message* appended and, optionally, validity overridden."""
        update: dict[str, object] = {"messages": [*self.messages, message]}
        if valid is not None:
            update["valid"] = valid
        return self.model_copy(update=update)

    def with_check(self, name: str, passed: bool) -> ValidationResult:
        """Return a copy recording the verdict of check *name*."""
        return self.model_copy(update={"check_results": {**self.check_results, name: passed}})

    def with_bank_data(self, **fields: str) -> ValidationResult:
        """Return a copy with the given bank data fields set."""
        return self.model_copy(update={"bank_data": self.bank_data.model_copy(update=fields)})

    def to_json(self) -> str:
        """Serialize to the indented wire format."""
        return self.model_dump_json(indent=2, by_alias=True)
