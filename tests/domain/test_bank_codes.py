"""Tests for bank-code validation and BIC resolution."""

from __future__ import annotations

from ibanctl.domain.bank_codes import get_bic, validate_bank_code
from ibanctl.domain.iban import parse
from ibanctl.infrastructure.bank_data import InMemoryBankStore
from tests.conftest import VALID_DE_IBAN, VALID_GB_IBAN


def _base(value: str):
    parsed = parse(value)
    return parsed, parsed.validate()


class TestValidateBankCode:
    def test_known_bank_code(self, bank_store: InMemoryBankStore) -> None:
        parsed, base = _base(VALID_DE_IBAN)
        result = validate_bank_code(parsed, base, bank_store)
        assert result.valid is True
        assert result.check_results == {"bankCode": True}
        assert result.messages == ["Bank code valid: 37040044"]

    def test_unknown_bank_code_marks_invalid(self) -> None:
        parsed, base = _base(VALID_DE_IBAN)
        result = validate_bank_code(parsed, base, InMemoryBankStore())
        assert result.valid is False
        assert result.check_results == {"bankCode": False}
        assert result.iban == VALID_DE_IBAN
        assert result.messages == ["Bank code not found: 37040044"]

    def test_unsupported_country_keeps_validity(self, bank_store: InMemoryBankStore) -> None:
        parsed, base = _base(VALID_GB_IBAN)
        result = validate_bank_code(parsed, base, bank_store)
        assert result.valid is True
        assert result.check_results == {}
        assert "not supported for GB" in result.messages[0]

    def test_input_result_untouched(self, bank_store: InMemoryBankStore) -> None:
        parsed, base = _base(VALID_DE_IBAN)
        validate_bank_code(parsed, base, InMemoryBankStore())
        assert base.valid is True
        assert base.messages == []


class TestGetBic:
    def test_attaches_bank_data(self, bank_store: InMemoryBankStore) -> None:
        parsed, base = _base(VALID_DE_IBAN)
        result = get_bic(parsed, base, bank_store)
        assert result.valid is True
        assert result.bank_data.bic == "COBADEFFXXX"
        assert result.bank_data.name == "Commerzbank"
        assert result.bank_data.bank_code == "37040044"
        assert result.bank_data.city == "Köln"

    def test_missing_entry_is_only_a_message(self) -> None:
        parsed, base = _base(VALID_DE_IBAN)
        result = get_bic(parsed, base, InMemoryBankStore())
        assert result.valid is True
        assert result.bank_data.bic == ""
        assert result.messages == ["No BIC found for bank code: 37040044"]

    def test_keeps_earlier_verdicts(self) -> None:
        parsed, base = _base(VALID_DE_IBAN)
        store = InMemoryBankStore()
        result = get_bic(parsed, validate_bank_code(parsed, base, store), store)
        assert result.valid is False
        assert result.check_results == {"bankCode": False}
        assert len(result.messages) == 2
