"""PID file guard — one service instance per guard file.

State machine over the file:

- absent or empty: write our pid.
- holds a pid of a process that no longer exists: overwrite with our pid.
- holds a pid of a live process: refuse to start.

Liveness is checked with signal 0. A check denied with EPERM means the pid
belongs to another user's live process, so it counts as alive and the
guard refuses to start. ESRCH (no such process) marks a pid stale, but
treating every signal error as "not running" would let a second instance
overwrite the file of one that still holds the port.

Any I/O failure along the way is fatal. The guard must run before the
listener binds so a conflict never occupies the port.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ibanctl.errors import PidFileError, ProcessAlreadyRunningError

logger = logging.getLogger(__name__)


def process_alive(pid: int) -> bool:
    """Check *pid* with signal 0.

    A process owned by another user still exists, so a permission error
    counts as alive.
    """
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False
    return True


class ProcessGuard:
    """Claims a pid file for the current process."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def acquire(self) -> int:
        """Record the current pid in the guard file and return it.

        Raises:
            ProcessAlreadyRunningError: The recorded pid belongs to a live process.
            PidFileError: The file could not be created, read, or written,
                or does not contain a valid pid.
        """
        try:
            self.path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Could not create path to pidfile {self.path}: {exc}"
            raise PidFileError(msg) from exc

        try:
            fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o644)
        except OSError as exc:
            msg = f"Failed to open pidfile {self.path}: {exc}"
            raise PidFileError(msg) from exc

        with os.fdopen(fd, "r+", encoding="ascii") as handle:
            try:
                content = handle.read().strip()
            except (OSError, UnicodeDecodeError) as exc:
                msg = f"Failed to read from pidfile {self.path}: {exc}"
                raise PidFileError(msg) from exc

            if content:
                try:
                    recorded = int(content)
                except ValueError as exc:
                    msg = f"Invalid pid {content!r} in {self.path}"
                    raise PidFileError(msg) from exc
                if process_alive(recorded):
                    raise ProcessAlreadyRunningError(recorded, str(self.path))
                logger.info("Replacing stale pid %d in %s", recorded, self.path)

            pid = os.getpid()
            try:
                handle.seek(0)
                handle.truncate(0)
                handle.write(str(pid))
                handle.flush()
            except OSError as exc:
                msg = f"Failed to write pidfile {self.path}: {exc}"
                raise PidFileError(msg) from exc

        return pid
