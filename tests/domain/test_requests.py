"""Tests for flag parsing and cache key derivation."""

from __future__ import annotations

import itertools

import pytest

from ibanctl.domain.requests import ValidationRequest, derive_cache_key, to_boolean


class TestToBoolean:
    @pytest.mark.parametrize("value", ["1", "true"])
    def test_truthy(self, value: str) -> None:
        assert to_boolean(value) is True

    @pytest.mark.parametrize(
        "value", [None, "", "0", "false", "True", "TRUE", "yes", "on", " 1", "true "]
    )
    def test_everything_else_is_false(self, value: str | None) -> None:
        assert to_boolean(value) is False


class TestValidationRequest:
    def test_from_query(self) -> None:
        request = ValidationRequest.from_query("DE89", "1", "nope")
        assert request == ValidationRequest("DE89", validate_bank_code=True, get_bic=False)

    def test_defaults(self) -> None:
        request = ValidationRequest.from_query("DE89")
        assert request.validate_bank_code is False
        assert request.get_bic is False


class TestDeriveCacheKey:
    def test_layout(self) -> None:
        request = ValidationRequest("DE89", validate_bank_code=True, get_bic=False)
        assert derive_cache_key(request) == "DE89falsetrue"

    def test_empty_identifier_has_a_key(self) -> None:
        assert derive_cache_key(ValidationRequest("")) == "falsefalse"

    def test_deterministic(self) -> None:
        first = ValidationRequest.from_query("GB82WEST12345698765432", "true", "1")
        second = ValidationRequest.from_query("GB82WEST12345698765432", "1", "true")
        assert derive_cache_key(first) == derive_cache_key(second)

    def test_injective_over_tricky_identifiers(self) -> None:
        identifiers = ["", "A", "Atrue", "Afalse", "Atruefalse", "true", "false", "truetrue"]
        requests = [
            ValidationRequest(iban, validate_bank_code=vbc, get_bic=bic)
            for iban, vbc, bic in itertools.product(identifiers, (False, True), (False, True))
        ]
        keys = [derive_cache_key(request) for request in requests]
        assert len(set(keys)) == len(requests)
