"""Auth client: is the current user session authenticated with the daemon?"""

import logging

from kitectl.domain.entities import ProbeResult
from kitectl.domain.states import FailureReason, Stage
from kitectl.ports.http import HttpClient, TransportError, TransportTimeout

logger = logging.getLogger(__name__)

AUTHENTICATED_PATH = "/clientapi/account/authenticated"


class AuthClient:
    """Checks GET /clientapi/account/authenticated.

    200 means authenticated and 401 means not authenticated, a valid
    steady state rather than an error. Any other status is classified as not
    authenticated. Network failures are reported against the reachability
    stage: authentication can only be judged once the API is answering.
    """

    def __init__(self, http: HttpClient, timeout: float = 5.0):
        self.http = http
        self.timeout = timeout

    def check_authenticated(self) -> ProbeResult:
        """Check the session's authentication status.

        Returns:
            AUTH success, AUTH failure (UNAUTHORIZED / UNEXPECTED_STATUS),
            or REACHABILITY failure on network errors. Never raises.
        """
        try:
            response = self.http.get(AUTHENTICATED_PATH, timeout=self.timeout)
        except TransportTimeout as e:
            logger.debug(f"Auth check timed out: {e}")
            return ProbeResult.failure(
                Stage.REACHABILITY, FailureReason.TIMEOUT, detail=str(e)
            )
        except TransportError as e:
            logger.debug(f"Auth check failed to connect: {e}")
            return ProbeResult.failure(
                Stage.REACHABILITY, FailureReason.CONNECTION_REFUSED, detail=str(e)
            )

        if response.status_code == 200:
            return ProbeResult.success(Stage.AUTH, status_code=200)

        if response.status_code == 401:
            return ProbeResult.failure(
                Stage.AUTH, FailureReason.UNAUTHORIZED, status_code=401
            )

        logger.warning(f"Unexpected auth status {response.status_code}")
        return ProbeResult.failure(
            Stage.AUTH,
            FailureReason.UNEXPECTED_STATUS,
            status_code=response.status_code,
        )
