"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Configures logging and centralizes result emission
(stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ibanctl.config.logging import configure_logging
from ibanctl.output.formatters import format_result

if TYPE_CHECKING:
    from ibanctl.config.settings import IbanSettings
    from ibanctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: IbanSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    def emit(self, result: ServiceResult) -> None:
        """Print a ServiceResult and exit 1 unless it is ok.

        Verdicts go to stdout either way so ``--json`` output can be piped;
        operational errors go to stderr.
        """
        output = format_result(result, json_output=self.settings.json_output)
        click.echo(output, err=result.error is not None)
        if not result.ok:
            raise SystemExit(1)
