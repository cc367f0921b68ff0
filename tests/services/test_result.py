"""Tests for the ServiceResult envelope."""

from __future__ import annotations

import pydantic
import pytest

from ibanctl.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_defaults(self) -> None:
        result = ServiceResult(ok=True, op="validate")
        assert result.data == {}
        assert result.warnings == []
        assert result.error is None

    def test_with_error(self) -> None:
        result = ServiceResult(
            ok=False,
            op="validate",
            error=ServiceError(code="BANK_DATA", message="bad file", detail={"path": "x"}),
        )
        assert result.error is not None
        assert result.error.code == "BANK_DATA"
        assert result.error.detail == {"path": "x"}

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="validate")
        with pytest.raises(pydantic.ValidationError):
            result.ok = False  # type: ignore[misc]
