"""Windows probe: kited.exe installed by KiteSetup.exe."""

import logging
import os

from kitectl.adapters.probes.base import BaseProbe
from kitectl.domain.entities import InstallOptions, ProbeResult
from kitectl.domain.exceptions import InstallFailedError

logger = logging.getLogger(__name__)


class WindowsProbe(BaseProbe):
    """Probe for Kite on Windows."""

    def requires_admin(self) -> bool:
        """Whether the Program Files install location is not writable."""
        system_dir = self.capability.install_paths[0].parent
        return not os.access(system_dir, os.W_OK)

    def _matches_process(self, stdout: str) -> bool:
        # tasklist prints an INFO line when nothing matches the filter
        return self.capability.process_name.lower() in stdout.lower()

    def install(self, options: InstallOptions) -> ProbeResult:
        """Download and run KiteSetup.exe.

        The installer asks for elevation itself; when admin rights are
        required and elevation is not allowed, nothing is run.

        Raises:
            InstallFailedError: If elevation is refused, a step fails, or
                Kite is missing afterwards
        """
        if self.requires_admin() and not options.allow_elevation:
            raise InstallFailedError(
                "Installing Kite requires administrator privileges",
                hint="Re-run without --no-elevation, or install Kite manually",
            )

        logger.info("Running KiteSetup.exe")
        installer = self._download_installer(options)
        try:
            options.report("Running Kite installer")
            self._run_install_step(
                [str(installer), *self.capability.installer_args],
                "Kite installer",
            )
        finally:
            self._remove_installer(installer, options)

        return self._verify_installed()

    def launch(self) -> ProbeResult:
        """Spawn kited.exe detached.

        Raises:
            LaunchFailedError: If Kite is not installed or cannot be started
        """
        return self._spawn_executable()
