"""Port interface for platform probes.

One implementation per supported OS plus a sentinel for unsupported hosts,
selected once at startup.
"""

from typing import Protocol

from kitectl.domain.entities import InstallOptions, ProbeResult


class PlatformProbe(Protocol):
    """Protocol for answering install/run questions on one platform.

    Query methods (is_installed, is_running) never raise. Action methods
    (install, launch) raise a KiteError subclass on failure.
    """

    name: str
    supported: bool

    def is_installed(self) -> bool:
        """Check for the daemon's install artifact.

        Returns:
            True if any configured install location exists
        """
        ...

    def is_running(self) -> bool:
        """Check the OS process list for the daemon.

        Returns:
            True if the daemon process is listed. Listing failures count
            as not running.
        """
        ...

    def install(self, options: InstallOptions) -> ProbeResult:
        """Run the platform installer.

        Args:
            options: Install options (elevation, progress hook)

        Returns:
            Successful install stage result

        Raises:
            InstallFailedError: If any installer step fails or the daemon is
                still not installed afterwards
            UnsupportedPlatformError: On the sentinel probe
        """
        ...

    def launch(self) -> ProbeResult:
        """Start the daemon as a detached background process.

        Returns:
            Successful process stage result

        Raises:
            LaunchFailedError: If the daemon could not be started
            UnsupportedPlatformError: On the sentinel probe
        """
        ...

    def requires_admin(self) -> bool:
        """Whether install needs elevated privileges on this host."""
        ...
