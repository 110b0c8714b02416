"""Shared behavior for platform probes.

Install detection, process-list matching, installer download and installer
step execution are the same shape on every OS; subclasses supply the
platform-specific commands.
"""

import logging
import tempfile
from collections.abc import Sequence
from pathlib import Path

from kitectl.domain.config import TimeoutConfig
from kitectl.domain.entities import InstallOptions, PlatformCapability, ProbeResult
from kitectl.domain.exceptions import InstallFailedError, LaunchFailedError
from kitectl.domain.states import Stage
from kitectl.ports.http import HttpClient, TransportError
from kitectl.ports.process import ProcessError, ProcessResult, ProcessRunner

logger = logging.getLogger(__name__)


class BaseProbe:
    """Base class for supported-platform probes.

    Args:
        capability: Platform capability (install paths, commands, URLs)
        runner: Process runner used for listing, installing and launching
        http: HTTP client used to download the installer
        timeouts: Timeouts for process and download steps
        download_dir: Directory for downloaded installers (default: temp dir)
    """

    supported = True

    def __init__(
        self,
        capability: PlatformCapability,
        runner: ProcessRunner,
        http: HttpClient,
        timeouts: TimeoutConfig | None = None,
        download_dir: Path | None = None,
    ):
        self.capability = capability
        self.runner = runner
        self.http = http
        self.timeouts = timeouts or TimeoutConfig()
        self.download_dir = download_dir or Path(tempfile.gettempdir())

    @property
    def name(self) -> str:
        return self.capability.name

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def installed_path(self) -> Path | None:
        """Get the first install location holding the daemon.

        Returns:
            Install path, or None if not installed anywhere
        """
        for install_path in self.capability.install_paths:
            try:
                if self.capability.executable_path(install_path).exists():
                    return install_path
            except OSError:
                # Unreadable location counts as absent
                continue
        return None

    def is_installed(self) -> bool:
        installed = self.installed_path() is not None
        logger.debug(f"Kite installed on {self.name}: {installed}")
        return installed

    def is_running(self) -> bool:
        """Check the process listing for the daemon.

        Returns:
            True if the process is listed. Listing failures (non-zero exit,
            spawn error, timeout) are reported as not running.
        """
        try:
            result = self.runner.run(
                self.capability.process_list_command, timeout=self.timeouts.process
            )
        except ProcessError as e:
            logger.warning(f"Process listing failed: {e}")
            return False

        if not result.ok:
            logger.debug(
                f"Process listing exited with {result.exit_code}, "
                "treating Kite as not running"
            )
            return False

        return self._matches_process(result.stdout)

    def _matches_process(self, stdout: str) -> bool:
        """Match the process name against one process per line.

        A line matches when it is the process name or a path ending in it.
        """
        name = self.capability.process_name
        for line in stdout.splitlines():
            line = line.strip()
            if line == name or line.endswith("/" + name):
                return True
        return False

    def requires_admin(self) -> bool:
        return False

    # ------------------------------------------------------------------
    # Install helpers
    # ------------------------------------------------------------------

    def _installer_file(self) -> Path:
        return self.download_dir / self.capability.installer_filename

    def _download_installer(self, options: InstallOptions) -> Path:
        """Download the installer package.

        Raises:
            InstallFailedError: If the download fails
        """
        options.report("Downloading Kite installer")
        try:
            return self.http.download(
                self.capability.installer_url,
                self._installer_file(),
                timeout=self.timeouts.download,
            )
        except TransportError as e:
            raise InstallFailedError(
                f"Failed to download installer: {e}",
                hint="Check your network connection and try again",
            ) from e

    def _remove_installer(self, installer: Path, options: InstallOptions) -> None:
        options.report("Removing installer")
        try:
            installer.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove installer {installer}: {e}")

    def _run_install_step(
        self, args: Sequence[str], description: str
    ) -> ProcessResult:
        """Run one installer command, failing the install on non-zero exit.

        Raises:
            InstallFailedError: If the command cannot run or exits non-zero
        """
        try:
            result = self.runner.run(args, timeout=self.timeouts.install)
        except ProcessError as e:
            raise InstallFailedError(f"{description} failed: {e}") from e

        if not result.ok:
            raise InstallFailedError(
                f"{description} failed",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result

    def _verify_installed(self) -> ProbeResult:
        """Confirm the installer left the daemon in place.

        Raises:
            InstallFailedError: If no install artifact exists
        """
        installed_path = self.installed_path()
        if installed_path is None:
            raise InstallFailedError(
                "Installer finished but Kite was not found afterwards",
                exit_code=0,
            )
        logger.info(f"Kite installed at {installed_path}")
        return ProbeResult.success(
            Stage.INSTALL, exit_code=0, detail=str(installed_path)
        )

    # ------------------------------------------------------------------
    # Launch helpers
    # ------------------------------------------------------------------

    def _spawn_executable(self) -> ProbeResult:
        """Spawn the installed executable detached.

        Raises:
            LaunchFailedError: If not installed or the spawn fails
        """
        installed_path = self.installed_path()
        if installed_path is None:
            raise LaunchFailedError("Kite executable not found")

        executable = self.capability.executable_path(installed_path)
        args = [str(executable), *self.capability.launch_args]
        try:
            pid = self.runner.spawn_detached(args, env=dict(self.capability.launch_env))
        except ProcessError as e:
            raise LaunchFailedError(f"Failed to start Kite: {e}") from e

        return ProbeResult.success(Stage.PROCESS, detail=f"pid {pid}")
