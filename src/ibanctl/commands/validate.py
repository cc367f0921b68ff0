"""validate — check a single IBAN from the command line."""

from __future__ import annotations

from pathlib import Path

import click

from ibanctl.commands._base import IbanCommand
from ibanctl.commands._context import AppContext
from ibanctl.domain.requests import ValidationRequest
from ibanctl.infrastructure.bank_data import InMemoryBankStore
from ibanctl.infrastructure.loaders import load_data_dir
from ibanctl.services.pipeline import ValidationPipeline
from ibanctl.services.result import ServiceResult


@click.command(
    cls=IbanCommand,
    examples="""\
  # Structure and checksum only (spaces are allowed when quoted)
  ibanctl validate "GB82 WEST 1234 5698 7654 32"

  # Machine-readable output
  ibanctl --json validate DE89370400440532013000

  # Also check the bank code and resolve the BIC
  ibanctl validate DE89370400440532013000 --bank-code --bic""",
)
@click.argument("iban")
@click.option("--bank-code", "validate_bank_code", is_flag=True, help="Validate the bank code.")
@click.option("--bic", "get_bic", is_flag=True, help="Resolve the bank's BIC.")
@click.option(
    "--data-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding bank registry files.",
)
@click.pass_obj
def validate(
    app: AppContext,
    iban: str,
    validate_bank_code: bool,
    get_bic: bool,
    data_path: Path | None,
) -> None:
    """Validate IBAN and print the verdict (exit code 1 if invalid)."""
    settings = app.settings.with_overrides(data_path=data_path)
    store = InMemoryBankStore()
    warnings: list[str] = []
    if validate_bank_code or get_bic:
        reports = load_data_dir(settings.data.path, store)
        warnings = [f"Skipped {r.path.name}: {r.error}" for r in reports if r.error is not None]

    request = ValidationRequest(iban=iban, validate_bank_code=validate_bank_code, get_bic=get_bic)
    outcome = ValidationPipeline(store).run(request)
    app.emit(
        ServiceResult(
            ok=outcome.result.valid,
            op="validate",
            data=outcome.result.model_dump(by_alias=True),
            warnings=warnings,
        )
    )
