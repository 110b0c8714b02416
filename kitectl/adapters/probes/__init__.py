"""Platform probes for the Kite daemon."""

from kitectl.adapters.probes.linux import LinuxProbe
from kitectl.adapters.probes.macos import MacOSProbe
from kitectl.adapters.probes.unsupported import UnsupportedProbe
from kitectl.adapters.probes.windows import WindowsProbe

__all__ = ["LinuxProbe", "MacOSProbe", "UnsupportedProbe", "WindowsProbe"]
