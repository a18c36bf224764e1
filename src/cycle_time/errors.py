"""Exceptions raised by the cycle time tool."""

from typing import Optional, Sequence


class CycleTimeError(Exception):
    """Base class for every failure that aborts a cycle time run."""


class InputError(CycleTimeError, ValueError):
    """Invalid caller input: repository path, dates, release pattern."""


class ExternalCommandError(CycleTimeError):
    """A git command failed or produced output that cannot be used."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        status: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = list(command) if command else []
        self.status = status
        self.stderr = stderr
