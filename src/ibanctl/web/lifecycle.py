"""ServiceLifecycle — listener startup and graceful shutdown.

States move strictly forward::

    STARTING -> LISTENING -> SHUTTING_DOWN -> STOPPED

Shutdown is message passing: an interrupt signal (handled by uvicorn in the
main thread) or :meth:`ServiceLifecycle.request_shutdown` from any thread
only raises a flag. The serving loop notices it, stops accepting, waits for
in-flight requests (bounded by ``graceful_timeout``), then stops.
"""

from __future__ import annotations

import errno
import socket
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog
import uvicorn

from ibanctl.errors import BindError

log = structlog.get_logger(__name__)


class LifecycleState(StrEnum):
    STARTING = "starting"
    LISTENING = "listening"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


_ORDER = list(LifecycleState)


@dataclass(frozen=True)
class ListenAddress:
    """Interface and port to listen on; an empty host means all interfaces."""

    host: str
    port: int

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"


def parse_listen_address(value: str) -> ListenAddress:
    """Parse a bare port (``"8080"``) or ``host:port`` (``"[::1]:8080"``)."""
    text = value.strip()
    if text.startswith("["):
        host, sep, port_text = text[1:].partition("]:")
        if not sep:
            msg = f"Invalid listen address: {value!r}"
            raise ValueError(msg)
    elif ":" in text:
        host, _, port_text = text.rpartition(":")
    else:
        host, port_text = "", text

    try:
        port = int(port_text)
    except ValueError:
        msg = f"Invalid port in listen address: {value!r}"
        raise ValueError(msg) from None
    if not 0 <= port <= 65535:
        msg = f"Port out of range in listen address: {value!r}"
        raise ValueError(msg)
    return ListenAddress(host=host, port=port)


def bind_socket(address: ListenAddress) -> socket.socket:
    """Bind and listen on *address*. Raises BindError on failure.

    An empty host listens on all interfaces, IPv4 and IPv6 alike where the
    platform supports a dual-stack socket.
    """
    target = (address.host, address.port)
    try:
        if ":" in address.host:
            return socket.create_server(target, family=socket.AF_INET6)
        if not address.host and socket.has_dualstack_ipv6():
            try:
                return socket.create_server(
                    target, family=socket.AF_INET6, dualstack_ipv6=True
                )
            except OSError as exc:
                if exc.errno == errno.EADDRINUSE:
                    raise
                # IPv6 present but unusable (e.g. disabled by sysctl).
                log.debug("server.dualstack_unavailable", address=str(address))
        return socket.create_server(target, family=socket.AF_INET)
    except OSError as exc:
        msg = f"Cannot listen on {address}: {exc}"
        raise BindError(msg) from exc


class _LifecycleServer(uvicorn.Server):
    """uvicorn server reporting its phase changes to the lifecycle."""

    def __init__(self, config: uvicorn.Config, lifecycle: ServiceLifecycle) -> None:
        super().__init__(config)
        self._lifecycle = lifecycle

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            self._lifecycle._transition(LifecycleState.LISTENING)

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        self._lifecycle._transition(LifecycleState.SHUTTING_DOWN)
        log.info("server.draining", detail="Waiting for connections to close...")
        try:
            await super().shutdown(sockets=sockets)
        except Exception:
            log.exception("server.shutdown_failed")


class ServiceLifecycle:
    """Runs an ASGI app on a listener and coordinates its shutdown.

    Args:
        app: The ASGI application to serve.
        address: Where to listen.
        graceful_timeout: Seconds to wait for in-flight requests on
            shutdown; None waits until they finish.
        access_log: Emit uvicorn access log lines.
    """

    def __init__(
        self,
        app: Any,
        address: ListenAddress,
        *,
        graceful_timeout: float | None = None,
        access_log: bool = False,
    ) -> None:
        self.address = address
        self.server_address: tuple[str, int] | None = None
        self._state = LifecycleState.STARTING
        self._state_lock = threading.Lock()
        self._listening = threading.Event()
        self._stopped = threading.Event()
        config = uvicorn.Config(
            app,
            log_config=None,
            access_log=access_log,
            timeout_graceful_shutdown=graceful_timeout,
        )
        self._server = _LifecycleServer(config, self)

    @property
    def state(self) -> LifecycleState:
        return self._state

    def run(self) -> None:
        """Bind, serve until shutdown, and return once STOPPED.

        Raises:
            BindError: The listener could not be bound. Nothing was served.
        """
        try:
            sock = bind_socket(self.address)
        except BindError:
            self._transition(LifecycleState.STOPPED)
            raise

        self.server_address = sock.getsockname()[:2]
        log.info("server.listening", address=str(self.address))
        try:
            self._server.run(sockets=[sock])
        except KeyboardInterrupt:
            # uvicorn re-raises the captured SIGINT once shutdown has finished.
            pass
        finally:
            sock.close()
            self._transition(LifecycleState.STOPPED)

    def request_shutdown(self) -> None:
        """Ask the server to stop. Non-blocking, safe from any thread."""
        self._server.should_exit = True

    def wait_until_listening(self, timeout: float | None = None) -> bool:
        return self._listening.wait(timeout)

    def wait_until_stopped(self, timeout: float | None = None) -> bool:
        return self._stopped.wait(timeout)

    def _transition(self, state: LifecycleState) -> None:
        with self._state_lock:
            if _ORDER.index(state) <= _ORDER.index(self._state):
                return
            self._state = state
        log.debug("lifecycle.state", state=str(state))
        if state is LifecycleState.LISTENING:
            self._listening.set()
        elif state is LifecycleState.STOPPED:
            self._stopped.set()
