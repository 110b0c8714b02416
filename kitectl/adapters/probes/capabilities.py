"""Default platform capabilities for the Kite daemon.

Each supported OS gets one PlatformCapability describing where Kite is
installed, how its process shows up in the process list, and where its
installer comes from. Config overrides are applied on top.
"""

import os
from dataclasses import replace
from pathlib import Path

from kitectl.domain.config import PlatformOverrides
from kitectl.domain.entities import PlatformCapability

DARWIN = "darwin"
WINDOWS = "windows"
LINUX = "linux"

SUPPORTED_PLATFORMS = (DARWIN, WINDOWS, LINUX)

MAC_BUNDLE_ID = "com.kite.Kite"
SKIP_ONBOARDING_ENV = (("KITE_SKIP_ONBOARDING", "1"),)


def darwin_capability() -> PlatformCapability:
    """Capability for macOS: the Kite.app bundle."""
    return PlatformCapability(
        name=DARWIN,
        install_paths=(
            Path("/Applications/Kite.app"),
            Path.home() / "Applications" / "Kite.app",
        ),
        process_name="Kite",
        process_list_command=("/bin/ps", "-axo", "comm"),
        installer_url="https://alpha.kite.com/release/dls/mac/current",
        installer_filename="Kite.dmg",
        launch_args=("--plugin-launch",),
        bundle_id=MAC_BUNDLE_ID,
    )


def windows_capability() -> PlatformCapability:
    """Capability for Windows: kited.exe under Program Files."""
    program_files = os.environ.get("ProgramW6432") or os.environ.get(
        "ProgramFiles", "C:\\Program Files"
    )
    local_app_data = os.environ.get("LOCALAPPDATA") or str(
        Path.home() / "AppData" / "Local"
    )
    return PlatformCapability(
        name=WINDOWS,
        install_paths=(
            Path(program_files) / "Kite",
            Path(local_app_data) / "Kite",
        ),
        executable="kited.exe",
        process_name="kited.exe",
        process_list_command=("tasklist", "/FI", "IMAGENAME eq kited.exe", "/NH"),
        installer_url="https://alpha.kite.com/release/dls/windows/current",
        installer_filename="KiteSetup.exe",
        installer_args=("--skip-onboarding", "--plugin-launch"),
        launch_env=SKIP_ONBOARDING_ENV,
    )


def linux_capability() -> PlatformCapability:
    """Capability for Linux: user-level install under ~/.local/share/kite."""
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return PlatformCapability(
        name=LINUX,
        install_paths=(Path(data_home) / "kite",),
        executable="kited",
        process_name="kited",
        process_list_command=("/bin/ps", "-axo", "comm"),
        installer_url="https://linux.kite.com/dls/linux/current",
        installer_filename="kite-installer.sh",
        installer_args=("--install",),
        launch_env=SKIP_ONBOARDING_ENV,
    )


_DEFAULTS = {
    DARWIN: darwin_capability,
    WINDOWS: windows_capability,
    LINUX: linux_capability,
}


def default_capability(platform_name: str) -> PlatformCapability | None:
    """Get the default capability for a platform.

    Args:
        platform_name: Normalized platform name ("darwin", "windows", "linux")

    Returns:
        PlatformCapability, or None if the platform is unsupported
    """
    builder = _DEFAULTS.get(platform_name)
    return builder() if builder else None


def apply_overrides(
    capability: PlatformCapability, overrides: PlatformOverrides
) -> PlatformCapability:
    """Apply config overrides to a capability.

    Args:
        capability: Platform default capability
        overrides: Values from the [platform] config section

    Returns:
        New capability with non-empty overrides applied
    """
    changes: dict = {}
    if overrides.install_paths:
        changes["install_paths"] = tuple(
            Path(p).expanduser() for p in overrides.install_paths
        )
    if overrides.executable is not None:
        changes["executable"] = overrides.executable
    if overrides.installer_url:
        changes["installer_url"] = overrides.installer_url

    return replace(capability, **changes)
