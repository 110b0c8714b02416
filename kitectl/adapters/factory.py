"""Factory classes for adapter and orchestrator instantiation.

This module centralizes OS detection and wiring, keeping the CLI layer free
from direct adapter imports. The platform probe is selected here, once;
no other module branches on the host OS.
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import TYPE_CHECKING

from kitectl.adapters.probes.capabilities import (
    DARWIN,
    LINUX,
    WINDOWS,
    apply_overrides,
    default_capability,
)

if TYPE_CHECKING:
    from kitectl.core.lifecycle.orchestrator import LifecycleOrchestrator
    from kitectl.domain.config import KitectlConfig
    from kitectl.ports.config import ConfigProvider
    from kitectl.domain.entities import PlatformCapability
    from kitectl.ports.http import HttpClient
    from kitectl.ports.probe import PlatformProbe
    from kitectl.ports.process import ProcessRunner

logger = logging.getLogger(__name__)

_SYSTEM_NAMES = {
    "Darwin": DARWIN,
    "Windows": WINDOWS,
    "Linux": LINUX,
}


def detect_platform() -> str:
    """Normalize platform.system() to a probe platform name.

    Returns:
        "darwin", "windows", "linux", or the lowercased system name for
        anything else
    """
    system = platform.system()
    return _SYSTEM_NAMES.get(system, system.lower() or "unknown")


class ConfigFactory:
    """Factory for creating configuration providers."""

    def create_config_provider(self) -> ConfigProvider:
        """Create the TOML config provider."""
        from kitectl.adapters.config.toml_config_provider import TomlConfigProvider

        return TomlConfigProvider()


class ProbeFactory:
    """Factory for creating the platform probe for a host.

    Args:
        config: KitectlConfig with timeouts and platform overrides.
        runner: Process runner (default: SubprocessRunner).
        http: HTTP client (default: RequestsHttpClient on the daemon URL).
    """

    def __init__(
        self,
        config: KitectlConfig,
        runner: ProcessRunner | None = None,
        http: HttpClient | None = None,
    ) -> None:
        from kitectl.adapters.http.requests_client import RequestsHttpClient
        from kitectl.adapters.process.subprocess_runner import SubprocessRunner

        self._config = config
        self._runner = runner or SubprocessRunner()
        self._http = http or RequestsHttpClient(config.daemon.base_url)

    def create_capability(self, platform_name: str) -> PlatformCapability | None:
        """Build the capability for a platform with config overrides applied.

        Returns:
            PlatformCapability, or None if the platform is unsupported
        """
        capability = default_capability(platform_name)
        if capability is None:
            return None
        return apply_overrides(capability, self._config.platform)

    def create_probe(
        self,
        platform_name: str | None = None,
        download_dir: Path | None = None,
    ) -> PlatformProbe:
        """Create the probe for a platform.

        Args:
            platform_name: Platform to build for (default: detected host)
            download_dir: Directory for downloaded installers

        Returns:
            Platform probe, or the unsupported sentinel
        """
        from kitectl.adapters.probes import (
            LinuxProbe,
            MacOSProbe,
            UnsupportedProbe,
            WindowsProbe,
        )

        platform_name = platform_name or detect_platform()
        capability = self.create_capability(platform_name)
        if capability is None:
            logger.debug(f"No Kite support for platform {platform_name}")
            return UnsupportedProbe(platform_name)

        probe_classes = {
            DARWIN: MacOSProbe,
            WINDOWS: WindowsProbe,
            LINUX: LinuxProbe,
        }
        probe_class = probe_classes[platform_name]
        return probe_class(
            capability,
            self._runner,
            self._http,
            timeouts=self._config.timeouts,
            download_dir=download_dir,
        )


class OrchestratorFactory:
    """Factory for creating a fully wired LifecycleOrchestrator.

    Args:
        config: KitectlConfig with daemon, timeout and poll settings.
    """

    def __init__(self, config: KitectlConfig) -> None:
        self._config = config

    def create_orchestrator(
        self,
        platform_name: str | None = None,
        runner: ProcessRunner | None = None,
        http: HttpClient | None = None,
    ) -> LifecycleOrchestrator:
        """Create the orchestrator with probe and API clients.

        Args:
            platform_name: Platform override (default: detected host)
            runner: Process runner override
            http: HTTP client override

        Returns:
            LifecycleOrchestrator
        """
        from kitectl.adapters.http.requests_client import RequestsHttpClient
        from kitectl.core.auth import AuthClient
        from kitectl.core.lifecycle.orchestrator import LifecycleOrchestrator
        from kitectl.core.reachability import ReachabilityClient
        from kitectl.core.whitelist import WhitelistClient

        config = self._config
        http = http or RequestsHttpClient(config.daemon.base_url)
        probe = ProbeFactory(config, runner=runner, http=http).create_probe(
            platform_name
        )

        return LifecycleOrchestrator(
            probe=probe,
            reachability=ReachabilityClient(http, timeout=config.timeouts.reachable),
            auth=AuthClient(http, timeout=config.timeouts.request),
            whitelist=WhitelistClient(http, timeout=config.timeouts.request),
            poll=config.poll,
        )
