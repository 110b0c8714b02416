"""macOS probe: Kite.app bundle installed from a disk image."""

import logging
import os
from pathlib import Path

from kitectl.adapters.probes.base import BaseProbe
from kitectl.domain.entities import InstallOptions, ProbeResult
from kitectl.domain.exceptions import InstallFailedError, LaunchFailedError
from kitectl.domain.states import Stage
from kitectl.ports.process import ProcessError

logger = logging.getLogger(__name__)

DEFAULT_MOUNT_POINT = Path("/Volumes/Kite")


class MacOSProbe(BaseProbe):
    """Probe for Kite on macOS.

    install_paths[0] is the system location (/Applications), install_paths[1]
    the per-user fallback (~/Applications) used when /Applications is not
    writable.
    """

    def _install_target(self) -> Path:
        paths = self.capability.install_paths
        if self.requires_admin() and len(paths) > 1:
            return paths[1]
        return paths[0]

    def requires_admin(self) -> bool:
        """Whether the system install location is not writable."""
        system_dir = self.capability.install_paths[0].parent
        return not os.access(system_dir, os.W_OK)

    def _parse_mount_point(self, stdout: str) -> Path:
        """Extract the mount point from `hdiutil attach` output.

        The last line is tab-separated with the mount point in the last column.
        """
        for line in reversed(stdout.strip().splitlines()):
            columns = [c.strip() for c in line.split("\t") if c.strip()]
            if columns and columns[-1].startswith("/Volumes/"):
                return Path(columns[-1])
        return DEFAULT_MOUNT_POINT

    def install(self, options: InstallOptions) -> ProbeResult:
        """Download the dmg, copy the bundle out of it, and clean up.

        Raises:
            InstallFailedError: If any step fails or Kite is missing afterwards
        """
        target = self._install_target()
        logger.info(f"Installing Kite to {target}")

        installer = self._download_installer(options)
        try:
            options.report("Mounting disk image")
            attached = self._run_install_step(
                ["hdiutil", "attach", "-nobrowse", str(installer)],
                "Mounting Kite disk image",
            )
            mount_point = self._parse_mount_point(attached.stdout)
            try:
                options.report("Copying Kite.app")
                target.parent.mkdir(parents=True, exist_ok=True)
                self._run_install_step(
                    ["cp", "-R", str(mount_point / target.name), str(target.parent)],
                    "Copying Kite.app",
                )
            finally:
                options.report("Unmounting disk image")
                try:
                    self.runner.run(
                        ["hdiutil", "detach", str(mount_point)],
                        timeout=self.timeouts.process,
                    )
                except ProcessError as e:
                    logger.warning(f"Failed to detach {mount_point}: {e}")
        except OSError as e:
            raise InstallFailedError(f"Failed to prepare {target.parent}: {e}") from e
        finally:
            self._remove_installer(installer, options)

        return self._verify_installed()

    def launch(self) -> ProbeResult:
        """Open the bundle with `open -a`.

        Raises:
            LaunchFailedError: If Kite is not installed or `open` fails
        """
        installed_path = self.installed_path()
        if installed_path is None:
            raise LaunchFailedError("Kite.app not found")

        if self.capability.bundle_id:
            # Keep the sidebar closed when launched from a plugin; best effort
            try:
                self.runner.run(
                    [
                        "defaults",
                        "write",
                        self.capability.bundle_id,
                        "shouldReopenSidebar",
                        "0",
                    ],
                    timeout=self.timeouts.process,
                )
            except ProcessError as e:
                logger.debug(f"Could not write launch defaults: {e}")

        args = ["open", "-a", str(installed_path)]
        if self.capability.launch_args:
            args += ["--args", *self.capability.launch_args]

        try:
            result = self.runner.run(args, timeout=self.timeouts.process)
        except ProcessError as e:
            raise LaunchFailedError(f"Failed to open Kite.app: {e}") from e

        if not result.ok:
            raise LaunchFailedError(
                "Failed to open Kite.app",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        return ProbeResult.success(Stage.PROCESS, exit_code=0)
