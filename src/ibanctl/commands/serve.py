"""serve — run the IBAN validation HTTP service."""

from __future__ import annotations

from pathlib import Path

import click
import structlog

from ibanctl import __version__
from ibanctl.commands._base import IbanCommand
from ibanctl.commands._context import AppContext
from ibanctl.errors import BindError, PidFileError
from ibanctl.infrastructure.bank_data import InMemoryBankStore
from ibanctl.infrastructure.loaders import load_data_dir
from ibanctl.infrastructure.pidfile import ProcessGuard
from ibanctl.web.lifecycle import ServiceLifecycle, parse_listen_address
from ibanctl.web.wiring import wire_service

log = structlog.get_logger(__name__)


@click.command(
    cls=IbanCommand,
    examples="""\
  # Listen on all interfaces, port 8080 (default)
  ibanctl serve

  # Bind to localhost only, with a pid file guard
  ibanctl serve --port 127.0.0.1:9000 --pid-file /run/ibanctl/ibanctl.pid

  # Load bank registry files from a custom directory
  ibanctl serve --data-path /srv/bank-data""",
)
@click.option(
    "-p",
    "--port",
    "listen",
    default=None,
    help="HTTP port or host:port to listen on.",
)
@click.option(
    "--pid-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="PID file guarding against a second instance.",
)
@click.option(
    "--data-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding bank registry files.",
)
@click.pass_obj
def serve(
    app: AppContext,
    listen: str | None,
    pid_file: Path | None,
    data_path: Path | None,
) -> None:
    """Run the validation service until interrupted."""
    settings = app.settings.with_overrides(listen=listen, pid_file=pid_file, data_path=data_path)

    try:
        address = parse_listen_address(settings.server.listen)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--port'") from exc

    # The guard runs before anything binds the port.
    if settings.server.pid_file is not None:
        try:
            ProcessGuard(settings.server.pid_file).acquire()
        except PidFileError as exc:
            log.error("startup.pidfile_failed", error=str(exc))
            raise SystemExit(1) from exc

    store = InMemoryBankStore()
    load_data_dir(settings.data.path, store)
    log.info("bank_data.loaded", entries=len(store), countries=store.countries())

    service = wire_service(settings, store)
    lifecycle = ServiceLifecycle(
        service.app,
        address,
        graceful_timeout=settings.server.graceful_timeout or None,
        access_log=settings.server.access_log,
    )

    log.info("ibanctl.start", version=__version__, listen=str(address))
    service.cache.start_janitor(settings.cache.cleanup_interval)
    try:
        lifecycle.run()
    except BindError as exc:
        log.error("startup.bind_failed", error=str(exc))
        raise SystemExit(1) from exc
    finally:
        service.cache.stop_janitor()
    log.info("ibanctl.stopped", **service.handler.stats())
