"""Process runner port.

Narrow interface over process spawning so probes can be tested with a fake
runner instead of patching subprocess globally.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol


class ProcessError(Exception):
    """Base exception for process runner failures."""

    pass


class ProcessSpawnError(ProcessError):
    """Raised when a process cannot be started (missing binary, permissions)."""

    pass


class ProcessTimeoutError(ProcessError):
    """Raised when a process does not finish within its timeout."""

    pass


@dataclass(frozen=True)
class ProcessResult:
    """Completed process outcome.

    Attributes:
        exit_code: Process exit code (0 = success)
        stdout: Decoded standard output
        stderr: Decoded standard error
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessRunner(Protocol):
    """Protocol for running and spawning OS processes."""

    def run(
        self,
        args: Sequence[str],
        timeout: float,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult:
        """Run a command to completion and capture its output.

        Args:
            args: Command and arguments
            timeout: Seconds to wait before giving up
            env: Extra environment variables (merged over the current env)

        Returns:
            ProcessResult with exit code and output. A non-zero exit is
            returned, not raised.

        Raises:
            ProcessSpawnError: If the command cannot be started
            ProcessTimeoutError: If the command exceeds timeout
        """
        ...

    def spawn_detached(
        self,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Start a command detached from the current process.

        Args:
            args: Command and arguments
            env: Extra environment variables (merged over the current env)

        Returns:
            PID of the spawned process

        Raises:
            ProcessSpawnError: If the command cannot be started
        """
        ...
