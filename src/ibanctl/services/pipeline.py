"""ValidationPipeline — parse, validate, and optionally enrich one IBAN.

Stages run in a fixed order and short-circuit on failure:

1. emptiness check (client error, 400, never cached)
2. structural parse (unparseable is a cacheable 200 answer)
3. checksum validation
4. enrichment: bank-code validation, then BIC resolution

Collaborators are injected so the pipeline can be exercised with doubles.
Any exception a collaborator raises is converted into an invalid result;
callers never see a raw exception from here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus

from ibanctl.domain import bank_codes, iban
from ibanctl.domain.bank_codes import BankDataRepository
from ibanctl.domain.iban import Iban
from ibanctl.domain.requests import ValidationRequest
from ibanctl.domain.results import ParserResult, ValidationResult

logger = logging.getLogger(__name__)

EMPTY_REQUEST_MESSAGE = "Empty request."
PARSE_FAILURE_PREFIX = "Cannot parse as IBAN: "
INTERNAL_FAILURE_MESSAGE = "Validation could not be completed, please retry."

FormatChecker = Callable[[str], ParserResult]
Parser = Callable[[str], Iban]
Enricher = Callable[[Iban, ValidationResult, BankDataRepository], ValidationResult]


@dataclass(frozen=True)
class PipelineOutcome:
    """A result plus how the transport should treat it.

    Attributes:
        result: The verdict to serialize.
        status_code: HTTP status for the response.
        cacheable: Whether the serialized response may be cached.
    """

    result: ValidationResult
    status_code: int = HTTPStatus.OK
    cacheable: bool = True


class ValidationPipeline:
    """Orchestrates the validation stages for a :class:`ValidationRequest`."""

    def __init__(
        self,
        repository: BankDataRepository,
        *,
        is_parseable: FormatChecker = iban.is_parseable,
        parse: Parser = iban.parse,
        validate_bank_code: Enricher = bank_codes.validate_bank_code,
        get_bic: Enricher = bank_codes.get_bic,
    ) -> None:
        self._repository = repository
        self._is_parseable = is_parseable
        self._parse = parse
        self._validate_bank_code = validate_bank_code
        self._get_bic = get_bic

    def run(self, request: ValidationRequest) -> PipelineOutcome:
        if not request.iban:
            return PipelineOutcome(
                result=ValidationResult.create(False, EMPTY_REQUEST_MESSAGE, request.iban),
                status_code=HTTPStatus.BAD_REQUEST,
                cacheable=False,
            )

        try:
            return self._run_stages(request)
        except Exception:
            logger.exception("Validation pipeline failed for %r", request.iban)
            return PipelineOutcome(
                result=ValidationResult.create(False, INTERNAL_FAILURE_MESSAGE, request.iban),
                cacheable=False,
            )

    def _run_stages(self, request: ValidationRequest) -> PipelineOutcome:
        parser_result = self._is_parseable(request.iban)
        if not parser_result.valid:
            return PipelineOutcome(
                result=ValidationResult.create(
                    False, PARSE_FAILURE_PREFIX + parser_result.message, request.iban
                )
            )

        parsed = self._parse(request.iban)
        result = parsed.validate()

        # Bank code first: BIC resolution assumes a known bank code.
        if request.validate_bank_code:
            result = self._validate_bank_code(parsed, result, self._repository)
        if request.get_bic:
            result = self._get_bic(parsed, result, self._repository)

        return PipelineOutcome(result=result)
