"""Domain exceptions for explicit lifecycle actions.

State resolution never raises; these are raised only by install and launch,
which the caller chose to invoke and needs to know failed. They should be
caught at the application boundary (CLI, host integration) and converted to
user-facing messages.
"""

from kitectl.domain.states import LifecycleState


class KiteError(Exception):
    """Base exception for all lifecycle errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
        state: Lifecycle state the failure leaves the daemon in, if known.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        state: LifecycleState | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.state = state


class UnsupportedPlatformError(KiteError):
    """Raised when the host OS has no probe implementation. Not retryable."""

    def __init__(self, platform_name: str) -> None:
        super().__init__(
            f"Kite is not supported on this platform ({platform_name})",
            hint="Kite runs on macOS, Windows and Linux",
            state=LifecycleState.UNSUPPORTED,
        )
        self.platform_name = platform_name


class InstallFailedError(KiteError):
    """Raised when an explicit install attempt fails.

    Attributes:
        exit_code: Exit code of the failing installer step, if any.
        stderr: Captured stderr of the failing step.
    """

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        stderr: str = "",
        hint: str | None = None,
    ) -> None:
        if exit_code is not None:
            message = f"{message} (exit code: {exit_code})"
        if stderr:
            message += f"\nStderr: {stderr}"
        super().__init__(message, hint=hint, state=LifecycleState.NOT_INSTALLED)
        self.exit_code = exit_code
        self.stderr = stderr


class LaunchFailedError(KiteError):
    """Raised when an explicit launch attempt fails."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        if exit_code is not None:
            message = f"{message} (exit code: {exit_code})"
        if stderr:
            message += f"\nStderr: {stderr}"
        super().__init__(
            message,
            hint="Try starting Kite manually, then run 'kitectl status'",
            state=LifecycleState.NOT_RUNNING,
        )
        self.exit_code = exit_code
        self.stderr = stderr


class BadStateError(KiteError):
    """Raised when an action is invoked against an incompatible state.

    Example: launch() while the daemon is not installed.
    """

    def __init__(self, state: LifecycleState, action: str) -> None:
        hint = None
        if state is LifecycleState.NOT_INSTALLED:
            hint = "Run 'kitectl install' first"
        super().__init__(
            f"Cannot {action} Kite while it is {state.label}",
            hint=hint,
            state=state,
        )
        self.action = action
