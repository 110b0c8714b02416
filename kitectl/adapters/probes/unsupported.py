"""Sentinel probe for hosts Kite does not run on."""

from kitectl.domain.entities import InstallOptions, ProbeResult
from kitectl.domain.exceptions import UnsupportedPlatformError


class UnsupportedProbe:
    """Probe for unsupported platforms.

    Queries answer False; actions raise UnsupportedPlatformError.
    """

    supported = False

    def __init__(self, platform_name: str):
        self.name = platform_name

    def is_installed(self) -> bool:
        return False

    def is_running(self) -> bool:
        return False

    def requires_admin(self) -> bool:
        return False

    def install(self, options: InstallOptions) -> ProbeResult:
        raise UnsupportedPlatformError(self.name)

    def launch(self) -> ProbeResult:
        raise UnsupportedPlatformError(self.name)
