"""Exception hierarchy for fatal startup faults and data errors.

Validation failures are never exceptions; they are ordinary
:class:`~ibanctl.domain.results.ValidationResult` values.
"""

from __future__ import annotations


class IbanctlError(Exception):
    """Base class for ibanctl errors."""


class PidFileError(IbanctlError):
    """The guard file could not be created, read, or written."""


class ProcessAlreadyRunningError(PidFileError):
    """Another live process holds the guard file."""

    def __init__(self, pid: int, path: str) -> None:
        super().__init__(
            f"Process {pid} still running, please stop the process "
            f"and delete the pid file {path} manually"
        )
        self.pid = pid
        self.path = path


class BindError(IbanctlError):
    """The listener socket could not be bound."""


class BankDataError(IbanctlError):
    """A bank data file could not be read."""
