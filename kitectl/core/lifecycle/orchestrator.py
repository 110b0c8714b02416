"""Lifecycle orchestrator: the daemon's state ladder and explicit actions.

State resolution walks the ladder top to bottom:

    supported -> installed -> running -> reachable -> authenticated

and stops at the first failing stage, reporting that stage's state. It is
read-only and safe to call on a polling timer. Install and launch are
separate, explicit actions; resolution never performs them.
"""

import logging
import time
from collections.abc import Callable

from kitectl.core.auth import AuthClient
from kitectl.core.reachability import ReachabilityClient
from kitectl.core.whitelist import WhitelistClient, is_path_whitelisted
from kitectl.domain.config import PollConfig
from kitectl.domain.entities import (
    ActionResult,
    InstallOptions,
    ProbeResult,
    StateReport,
)
from kitectl.domain.exceptions import BadStateError, UnsupportedPlatformError
from kitectl.domain.states import (
    LADDER_STAGES,
    FailureReason,
    LifecycleState,
    Stage,
)
from kitectl.ports.probe import PlatformProbe

logger = logging.getLogger(__name__)


class LifecycleOrchestrator:
    """Composes the platform probe and API clients into the state ladder.

    No internal locking: callers must not run install() or launch()
    concurrently with themselves. resolve() may run alongside either.
    """

    def __init__(
        self,
        probe: PlatformProbe,
        reachability: ReachabilityClient,
        auth: AuthClient,
        whitelist: WhitelistClient,
        poll: PollConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize orchestrator.

        Args:
            probe: Platform probe selected for this host
            reachability: Liveness client for the daemon API
            auth: Authentication client
            whitelist: Whitelist client
            poll: Polling policy for launch_and_wait
            sleep: Sleep function (injected for tests)
        """
        self.probe = probe
        self.reachability = reachability
        self.auth = auth
        self.whitelist = whitelist
        self.poll = poll or PollConfig()
        self.sleep = sleep

    # ------------------------------------------------------------------
    # State resolution (read-only)
    # ------------------------------------------------------------------

    def _run_stage(self, stage: Stage) -> ProbeResult:
        if stage is Stage.SUPPORT:
            if self.probe.supported:
                return ProbeResult.success(stage, detail=self.probe.name)
            return ProbeResult.failure(
                stage, FailureReason.UNSUPPORTED, detail=self.probe.name
            )

        if stage is Stage.INSTALL:
            if self.probe.is_installed():
                return ProbeResult.success(stage)
            return ProbeResult.failure(stage, FailureReason.NOT_FOUND)

        if stage is Stage.PROCESS:
            if self.probe.is_running():
                return ProbeResult.success(stage)
            return ProbeResult.failure(stage, FailureReason.NOT_FOUND)

        if stage is Stage.REACHABILITY:
            return self.reachability.check_reachable()

        return self.auth.check_authenticated()

    def _check(self, stage: Stage) -> ProbeResult:
        """Run one stage, folding unexpected errors into a failed stage."""
        try:
            return self._run_stage(stage)
        except Exception as e:
            logger.exception(f"Unexpected error during {stage.value} check")
            reason = (
                FailureReason.CONNECTION_REFUSED
                if stage in (Stage.REACHABILITY, Stage.AUTH)
                else FailureReason.NOT_FOUND
            )
            # Auth can only be judged once the API answers
            failed_stage = Stage.REACHABILITY if stage is Stage.AUTH else stage
            return ProbeResult.failure(failed_stage, reason, detail=str(e))

    def resolve(
        self,
        until: LifecycleState = LifecycleState.AUTHENTICATED,
        path: str | None = None,
    ) -> StateReport:
        """Walk the ladder and report the current state.

        Args:
            until: Stop once this state is reached (e.g., RUNNING to skip
                the network checks)
            path: Project path to check against the whitelist once
                authenticated

        Returns:
            StateReport with the current state and each stage's result.
            Never raises.
        """
        results: list[ProbeResult] = []
        for stage in LADDER_STAGES:
            result = self._check(stage)
            results.append(result)
            if not result.ok:
                logger.debug(f"Kite state: {result.state.value} ({stage.value} failed)")
                return StateReport(state=result.state, results=tuple(results), path=path)
            if stage is not Stage.SUPPORT and result.state.is_at_least(until):
                break

        state = results[-1].state
        whitelisted = None
        if path is not None and state is LifecycleState.AUTHENTICATED:
            whitelisted = is_path_whitelisted(
                path, self.whitelist.fetch_whitelisted_paths()
            )

        logger.debug(f"Kite state: {state.value}")
        return StateReport(
            state=state,
            results=tuple(results),
            path=path,
            whitelisted=whitelisted,
        )

    def resolve_state(
        self, until: LifecycleState = LifecycleState.AUTHENTICATED
    ) -> LifecycleState:
        """Get the current lifecycle state.

        Args:
            until: Stop once this state is reached

        Returns:
            Current LifecycleState
        """
        return self.resolve(until=until).state

    def is_path_whitelisted(self, path: str) -> bool:
        """Check whether features are enabled for a project path.

        Returns:
            True only if the daemon is authenticated and the path is under a
            whitelisted prefix
        """
        return self.resolve(path=path).whitelisted is True

    # ------------------------------------------------------------------
    # Explicit actions
    # ------------------------------------------------------------------

    def _require_supported(self) -> None:
        if not self.probe.supported:
            raise UnsupportedPlatformError(self.probe.name)

    def install(self, options: InstallOptions | None = None) -> ActionResult:
        """Install the daemon if it is not installed.

        Idempotent: when already installed the installer is not invoked.

        Args:
            options: Install options; options.launch chains launch()

        Returns:
            ActionResult (performed=False when already installed)

        Raises:
            UnsupportedPlatformError: On unsupported platforms
            InstallFailedError: If the installer fails
            LaunchFailedError: If options.launch is set and launch fails
        """
        options = options or InstallOptions()
        self._require_supported()

        if self.probe.is_installed():
            logger.info("Kite already installed")
            performed = False
        else:
            if self.probe.requires_admin():
                logger.info("Kite install requires administrator privileges")
            logger.info(f"Installing Kite on {self.probe.name}...")
            self.probe.install(options)
            performed = True

        state = LifecycleState.INSTALLED
        if options.launch:
            state = self.launch().state

        return ActionResult(performed=performed, state=state)

    def launch(self) -> ActionResult:
        """Start the daemon if it is not running.

        Idempotent: when already running nothing is spawned.

        Returns:
            ActionResult (performed=False when already running)

        Raises:
            UnsupportedPlatformError: On unsupported platforms
            BadStateError: If the daemon is not installed
            LaunchFailedError: If the daemon could not be started
        """
        self._require_supported()

        if not self.probe.is_installed():
            raise BadStateError(LifecycleState.NOT_INSTALLED, "launch")

        if self.probe.is_running():
            logger.info("Kite already running")
            return ActionResult(performed=False, state=LifecycleState.RUNNING)

        logger.info("Launching Kite...")
        self.probe.launch()
        return ActionResult(performed=True, state=LifecycleState.RUNNING)

    def launch_and_wait(
        self,
        attempts: int | None = None,
        interval: float | None = None,
    ) -> StateReport:
        """Launch the daemon and poll until its API answers.

        Args:
            attempts: Reachability checks (default: poll config)
            interval: Seconds between checks (default: poll config)

        Returns:
            StateReport resolved after polling

        Raises:
            UnsupportedPlatformError, BadStateError, LaunchFailedError: As launch()
        """
        self.launch()
        self.reachability.wait_until_reachable(
            attempts if attempts is not None else self.poll.attempts,
            interval if interval is not None else self.poll.interval,
            sleep=self.sleep,
        )
        return self.resolve()
