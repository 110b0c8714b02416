"""Linux probe: user-level kited install from the shell installer."""

import logging

from kitectl.adapters.probes.base import BaseProbe
from kitectl.domain.entities import InstallOptions, ProbeResult

logger = logging.getLogger(__name__)


class LinuxProbe(BaseProbe):
    """Probe for Kite on Linux.

    The Linux installer writes into the user's data directory, so install
    never needs administrator rights.
    """

    def install(self, options: InstallOptions) -> ProbeResult:
        """Download the installer script and run it with bash.

        Raises:
            InstallFailedError: If a step fails or Kite is missing afterwards
        """
        logger.info(f"Installing Kite into {self.capability.install_paths[0]}")
        installer = self._download_installer(options)
        try:
            options.report("Running Kite installer")
            self._run_install_step(
                ["/bin/bash", str(installer), *self.capability.installer_args],
                "Kite installer",
            )
        finally:
            self._remove_installer(installer, options)

        return self._verify_installed()

    def launch(self) -> ProbeResult:
        """Spawn kited detached.

        Raises:
            LaunchFailedError: If Kite is not installed or cannot be started
        """
        return self._spawn_executable()
