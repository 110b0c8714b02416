"""Domain entities and value objects.

Pure dataclasses describing platform capabilities, probe outcomes, and
resolved lifecycle state. No dependencies on infrastructure.
"""

from __future__ import annotations

import ntpath
import posixpath
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from kitectl.domain.states import FailureReason, LifecycleState, Stage

_SEPARATORS = ("/", "\\")


@dataclass(frozen=True)
class PlatformCapability:
    """Everything a platform probe needs to know about the daemon on one OS.

    Built once at startup from OS detection (plus config overrides). Tests
    construct their own instances instead of mutating a shared one.

    Attributes:
        name: Platform name ("darwin", "windows", "linux").
        install_paths: Candidate install locations, system location first,
            user location after. The daemon counts as installed if any exists.
        executable: Path of the daemon executable relative to an install path
            (empty when the install path is the executable itself).
        process_name: Process name matched against the process listing.
        process_list_command: Command whose stdout lists running processes.
        installer_url: URL the installer package is downloaded from.
        installer_filename: File name used for the downloaded installer.
        installer_args: Extra arguments passed to the installer.
        launch_args: Extra arguments passed when launching the daemon.
        bundle_id: macOS bundle identifier (empty elsewhere).
        launch_env: Environment variables added when launching.
    """

    name: str
    install_paths: tuple[Path, ...]
    process_name: str
    process_list_command: tuple[str, ...]
    installer_url: str
    installer_filename: str
    executable: str = ""
    installer_args: tuple[str, ...] = ()
    launch_args: tuple[str, ...] = ()
    bundle_id: str = ""
    launch_env: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        """Validate capability after initialization."""
        if not self.install_paths:
            raise ValueError("install_paths must not be empty")
        if not self.process_list_command:
            raise ValueError("process_list_command must not be empty")
        if not self.process_name:
            raise ValueError("process_name must not be empty")

    def executable_path(self, install_path: Path) -> Path:
        """Resolve the daemon executable inside an install location."""
        if not self.executable:
            return install_path
        return install_path / self.executable


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single stage check.

    Carries enough context (exit code, HTTP status, timeout flag) for the
    orchestrator to classify the next lifecycle state.
    """

    stage: Stage
    ok: bool
    reason: FailureReason | None = None
    exit_code: int | None = None
    status_code: int | None = None
    timed_out: bool = False
    detail: str = ""

    @classmethod
    def success(
        cls,
        stage: Stage,
        *,
        status_code: int | None = None,
        exit_code: int | None = None,
        detail: str = "",
    ) -> ProbeResult:
        return cls(
            stage=stage,
            ok=True,
            status_code=status_code,
            exit_code=exit_code,
            detail=detail,
        )

    @classmethod
    def failure(
        cls,
        stage: Stage,
        reason: FailureReason,
        *,
        exit_code: int | None = None,
        status_code: int | None = None,
        detail: str = "",
    ) -> ProbeResult:
        return cls(
            stage=stage,
            ok=False,
            reason=reason,
            exit_code=exit_code,
            status_code=status_code,
            timed_out=reason is FailureReason.TIMEOUT,
            detail=detail,
        )

    @property
    def state(self) -> LifecycleState:
        """Lifecycle state this result places the daemon in."""
        return self.stage.passed_state if self.ok else self.stage.failed_state


@dataclass(frozen=True)
class WhitelistSet:
    """Ordered path prefixes the daemon has enabled features for."""

    paths: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def contains(self, path: str) -> bool:
        """Check whether a path falls under any whitelisted prefix.

        Matching is case-sensitive and boundary-aware: "/a/b" covers
        "/a/b" and "/a/b/c" but not "/a/bc". Both sides are normalized
        first, so "/a/b/../../etc" is checked as "/etc".

        Args:
            path: Filesystem path to check.

        Returns:
            True if the path is under at least one entry.
        """
        return any(_is_under(path, prefix) for prefix in self.paths)


def _normalize(path: str) -> str:
    # Drive letters or backslashes mark a Windows path
    if "\\" in path or path[1:2] == ":":
        return ntpath.normpath(path)
    return posixpath.normpath(path)


def _is_under(path: str, prefix: str) -> bool:
    if not prefix or not path:
        return False
    path = _normalize(path)
    prefix = _normalize(prefix)
    trimmed = prefix.rstrip("/\\")
    if not trimmed:
        # Filesystem root
        return path.startswith(prefix)
    if not path.startswith(trimmed):
        return False
    rest = path[len(trimmed) :]
    return rest == "" or rest[0] in _SEPARATORS


@dataclass
class InstallOptions:
    """Options for an explicit install.

    Attributes:
        launch: Launch the daemon once the install succeeds.
        allow_elevation: Allow installers that need administrator rights.
            When False and the probe reports admin is required, the install
            fails before running anything.
        on_step: Optional callback receiving a short description of each
            install step (download, mount, copy, cleanup).
    """

    launch: bool = False
    allow_elevation: bool = True
    on_step: Callable[[str], None] | None = None

    def report(self, step: str) -> None:
        if self.on_step is not None:
            self.on_step(step)


@dataclass(frozen=True)
class ActionResult:
    """Result of an explicit install or launch action.

    Attributes:
        performed: False when the action was an idempotent no-op
            (already installed / already running).
        state: Lifecycle state reached after the action.
    """

    performed: bool
    state: LifecycleState


@dataclass(frozen=True)
class StateReport:
    """Resolved lifecycle state plus the stage results that produced it.

    Attributes:
        state: Current lifecycle state.
        results: Result of each stage walked, in ladder order.
        path: Project path checked against the whitelist, if any.
        whitelisted: Whitelist verdict for path; None when not evaluated.
    """

    state: LifecycleState
    results: tuple[ProbeResult, ...] = field(default_factory=tuple)
    path: str | None = None
    whitelisted: bool | None = None

    @property
    def failure(self) -> ProbeResult | None:
        """The failing stage result, or None if every walked stage passed."""
        for result in self.results:
            if not result.ok:
                return result
        return None

    @property
    def timed_out(self) -> bool:
        failure = self.failure
        return failure is not None and failure.timed_out

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        failure = self.failure
        return {
            "state": self.state.value,
            "reason": failure.reason.value if failure and failure.reason else None,
            "timed_out": self.timed_out,
            "path": self.path,
            "whitelisted": self.whitelisted,
            "stages": [
                {
                    "stage": r.stage.value,
                    "ok": r.ok,
                    "reason": r.reason.value if r.reason else None,
                    "status_code": r.status_code,
                    "exit_code": r.exit_code,
                    "detail": r.detail,
                }
                for r in self.results
            ],
        }
