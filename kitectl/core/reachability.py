"""Reachability client: is the daemon's local API answering?"""

import logging
import time
from collections.abc import Callable

from kitectl.domain.entities import ProbeResult
from kitectl.domain.states import FailureReason, Stage
from kitectl.ports.http import HttpClient, TransportError, TransportTimeout

logger = logging.getLogger(__name__)

SYSTEM_PATH = "/system"


class ReachabilityClient:
    """Liveness check against GET /system.

    Any HTTP response counts as reachable; the status code is recorded but
    not checked. A timeout is reported distinctly from a refused connection
    so callers can decide whether to retry.
    """

    def __init__(self, http: HttpClient, timeout: float = 2.0):
        """Initialize reachability client.

        Args:
            http: HTTP client bound to the daemon's base URL
            timeout: Default request timeout in seconds
        """
        self.http = http
        self.timeout = timeout

    def check_reachable(self, timeout: float | None = None) -> ProbeResult:
        """Check whether the daemon answers on its status path.

        Args:
            timeout: Request timeout in seconds (default: client timeout)

        Returns:
            Success with the status code, or a failure with reason
            TIMEOUT or CONNECTION_REFUSED. Never raises.
        """
        timeout = timeout if timeout is not None else self.timeout
        try:
            response = self.http.get(SYSTEM_PATH, timeout=timeout)
        except TransportTimeout as e:
            logger.debug(f"Reachability check timed out: {e}")
            return ProbeResult.failure(
                Stage.REACHABILITY, FailureReason.TIMEOUT, detail=str(e)
            )
        except TransportError as e:
            logger.debug(f"Reachability check failed: {e}")
            return ProbeResult.failure(
                Stage.REACHABILITY, FailureReason.CONNECTION_REFUSED, detail=str(e)
            )

        return ProbeResult.success(
            Stage.REACHABILITY, status_code=response.status_code
        )

    def wait_until_reachable(
        self,
        attempts: int,
        interval: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> ProbeResult:
        """Poll the daemon until it answers or attempts run out.

        Args:
            attempts: Maximum number of checks
            interval: Seconds to sleep between checks
            sleep: Sleep function (injected for tests)

        Returns:
            The first successful result, or the last failure
        """
        result = self.check_reachable()
        for attempt in range(1, attempts):
            if result.ok:
                break
            sleep(interval)
            logger.debug(f"Waiting for Kite API (attempt {attempt + 1}/{attempts})")
            result = self.check_reachable()

        if result.ok:
            logger.info("Kite API is reachable")
        else:
            logger.warning(f"Kite API not reachable after {attempts} attempts")
        return result
