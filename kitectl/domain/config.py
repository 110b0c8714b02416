"""Config domain models for kitectl.

Configuration is read from ~/.config/kitectl/config.toml (plus an optional
explicit file) and describes where the daemon listens, how long checks may
take, how launch polling behaves, and per-platform install overrides.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DaemonConfig:
    """Where the daemon's local API listens.

    Attributes:
        host: Loopback host of the daemon API
        port: TCP port of the daemon API (default: 46624)
        scheme: URL scheme, "http" or "https"

    Raises:
        ValueError: If port is out of range or scheme is unknown.
    """

    host: str = "127.0.0.1"
    port: int = 46624
    scheme: str = "http"

    def __post_init__(self) -> None:
        """Validate daemon config after initialization."""
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.scheme not in ("http", "https"):
            raise ValueError(f"scheme must be 'http' or 'https', got {self.scheme!r}")
        if not self.host:
            raise ValueError("host must not be empty")

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


@dataclass(frozen=True)
class TimeoutConfig:
    """Timeouts for probes and actions, in seconds.

    Attributes:
        reachable: Liveness check (GET /system)
        request: Other API requests (auth, whitelist)
        process: Process listing and short commands
        install: Each installer step
        download: Installer download

    Raises:
        ValueError: If any timeout is not positive.
    """

    reachable: float = 2.0
    request: float = 5.0
    process: float = 10.0
    install: float = 600.0
    download: float = 120.0

    def __post_init__(self) -> None:
        """Validate timeouts after initialization."""
        for name in ("reachable", "request", "process", "install", "download"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} timeout must be positive, got {value}")


@dataclass(frozen=True)
class PollConfig:
    """Polling policy used after launch while waiting for the API to answer.

    Attributes:
        attempts: Number of reachability checks
        interval: Seconds between checks

    Raises:
        ValueError: If attempts is not positive or interval is negative.
    """

    attempts: int = 30
    interval: float = 2.5

    def __post_init__(self) -> None:
        """Validate poll config after initialization."""
        if self.attempts <= 0:
            raise ValueError(f"attempts must be positive, got {self.attempts}")
        if self.interval < 0:
            raise ValueError(f"interval cannot be negative, got {self.interval}")


@dataclass(frozen=True)
class PlatformOverrides:
    """Per-platform overrides for the detected capability.

    Empty values mean "use the platform default". Used to point at a
    non-standard install location (e.g., a user-level install).

    Attributes:
        install_paths: Install locations to check, in priority order
        executable: Executable path relative to an install location
        installer_url: URL to download the installer from

    Raises:
        ValueError: If install_paths is not a list of non-empty strings, or
            executable or installer_url is not a string.
    """

    install_paths: list[str] = field(default_factory=list)
    executable: str | None = None
    installer_url: str | None = None

    def __post_init__(self) -> None:
        """Validate overrides after initialization."""
        if not isinstance(self.install_paths, (list, tuple)):
            raise ValueError(
                "install_paths must be a list of paths, "
                f"got {type(self.install_paths).__name__}"
            )
        for path in self.install_paths:
            if not isinstance(path, str) or not path:
                raise ValueError(f"install_paths entries must be non-empty strings, got {path!r}")
        for name in ("executable", "installer_url"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {type(value).__name__}")


@dataclass(frozen=True)
class KitectlConfig:
    """Complete kitectl configuration.

    Attributes:
        daemon: Daemon API location
        timeouts: Probe and action timeouts
        poll: Launch polling policy
        platform: Install location overrides
    """

    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    platform: PlatformOverrides = field(default_factory=PlatformOverrides)

    @staticmethod
    def default() -> "KitectlConfig":
        """Create a config with all default values."""
        return KitectlConfig(
            daemon=DaemonConfig(),
            timeouts=TimeoutConfig(),
            poll=PollConfig(),
            platform=PlatformOverrides(),
        )
