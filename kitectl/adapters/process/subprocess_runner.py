"""Subprocess-backed process runner.

Runs short commands with captured output and spawns the daemon detached
from the calling process.
"""

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence

from kitectl.ports.process import (
    ProcessResult,
    ProcessSpawnError,
    ProcessTimeoutError,
)

logger = logging.getLogger(__name__)

# Windows-only creation flags; zero elsewhere
_DETACHED_FLAGS = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
    subprocess, "CREATE_NEW_PROCESS_GROUP", 0
)


class SubprocessRunner:
    """Process runner using the subprocess module."""

    def _build_env(self, env: Mapping[str, str] | None) -> dict[str, str] | None:
        if not env:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

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
            env: Extra environment variables

        Returns:
            ProcessResult with exit code, stdout and stderr

        Raises:
            ProcessSpawnError: If the command cannot be started
            ProcessTimeoutError: If the command exceeds timeout
        """
        logger.debug(f"Running: {' '.join(args)}")
        try:
            completed = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                env=self._build_env(env),
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as e:
            raise ProcessTimeoutError(
                f"Command timed out after {timeout}s: {args[0]}"
            ) from e
        except OSError as e:
            # Binary missing, permission denied, etc.
            raise ProcessSpawnError(f"Failed to run {args[0]}: {e}") from e

        return ProcessResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=(completed.stderr or "").strip(),
        )

    def spawn_detached(
        self,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Start a command detached from the current process.

        Args:
            args: Command and arguments
            env: Extra environment variables

        Returns:
            PID of the spawned process

        Raises:
            ProcessSpawnError: If the command cannot be started
        """
        logger.debug(f"Spawning detached: {' '.join(args)}")
        kwargs: dict = {
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
            "stdin": subprocess.DEVNULL,
            "env": self._build_env(env),
        }
        if os.name == "nt":
            kwargs["creationflags"] = _DETACHED_FLAGS
        else:
            kwargs["start_new_session"] = True  # Detach from parent

        try:
            process = subprocess.Popen(list(args), **kwargs)
        except OSError as e:
            raise ProcessSpawnError(f"Failed to start {args[0]}: {e}") from e

        logger.info(f"Started {args[0]} with PID {process.pid}")
        return process.pid
