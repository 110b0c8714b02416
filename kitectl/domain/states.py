"""Lifecycle states and stage classification.

The daemon's state is read off a fixed ladder. Each rung is guarded by one
stage (support, install, process, reachability, auth); a stage either passes
and the walk moves up, or fails and the walk stops at that stage's failing
state.
"""

from enum import Enum


class LifecycleState(str, Enum):
    """Position of the daemon on the lifecycle ladder.

    Values are ordered from least to most available. A state is always
    derived by re-probing; it is never stored.
    """

    UNSUPPORTED = "unsupported"
    NOT_INSTALLED = "not_installed"
    INSTALLED = "installed"
    NOT_RUNNING = "not_running"
    RUNNING = "running"
    NOT_REACHABLE = "not_reachable"
    REACHABLE = "reachable"
    NOT_AUTHENTICATED = "not_authenticated"
    AUTHENTICATED = "authenticated"

    @property
    def rank(self) -> int:
        """Position of this state on the ladder (0 = unsupported)."""
        return _LADDER.index(self)

    def is_at_least(self, other: "LifecycleState") -> bool:
        """Check whether this state is at or above another on the ladder."""
        return self.rank >= other.rank

    @property
    def label(self) -> str:
        """Human-readable label (e.g., "not running")."""
        return self.value.replace("_", " ")


_LADDER: tuple[LifecycleState, ...] = tuple(LifecycleState)


class Stage(str, Enum):
    """A single check on the ladder.

    Each stage maps to the state reported when it fails and the state
    reached when it passes.
    """

    SUPPORT = "support"
    INSTALL = "install"
    PROCESS = "process"
    REACHABILITY = "reachability"
    AUTH = "auth"
    WHITELIST = "whitelist"

    @property
    def failed_state(self) -> LifecycleState:
        return _STAGE_STATES[self][0]

    @property
    def passed_state(self) -> LifecycleState:
        return _STAGE_STATES[self][1]


_STAGE_STATES: dict[Stage, tuple[LifecycleState, LifecycleState]] = {
    Stage.SUPPORT: (LifecycleState.UNSUPPORTED, LifecycleState.NOT_INSTALLED),
    Stage.INSTALL: (LifecycleState.NOT_INSTALLED, LifecycleState.INSTALLED),
    Stage.PROCESS: (LifecycleState.NOT_RUNNING, LifecycleState.RUNNING),
    Stage.REACHABILITY: (LifecycleState.NOT_REACHABLE, LifecycleState.REACHABLE),
    Stage.AUTH: (LifecycleState.NOT_AUTHENTICATED, LifecycleState.AUTHENTICATED),
    # Whitelisting sits beside the ladder, not on it
    Stage.WHITELIST: (LifecycleState.AUTHENTICATED, LifecycleState.AUTHENTICATED),
}

# Stages walked by a full resolution, in order
LADDER_STAGES: tuple[Stage, ...] = (
    Stage.SUPPORT,
    Stage.INSTALL,
    Stage.PROCESS,
    Stage.REACHABILITY,
    Stage.AUTH,
)


class FailureReason(str, Enum):
    """Why a stage failed.

    Several of these (unauthorized, not_found) describe valid steady states
    rather than errors.
    """

    UNSUPPORTED = "unsupported"
    NOT_FOUND = "not_found"
    PROCESS_LIST_FAILED = "process_list_failed"
    CONNECTION_REFUSED = "connection_refused"
    TIMEOUT = "timeout"
    UNAUTHORIZED = "unauthorized"
    UNEXPECTED_STATUS = "unexpected_status"
    INSTALL_FAILED = "install_failed"
    LAUNCH_FAILED = "launch_failed"
