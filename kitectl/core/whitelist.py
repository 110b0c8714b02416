"""Whitelist client: which project paths has the daemon enabled?"""

import json
import logging

from kitectl.domain.entities import WhitelistSet
from kitectl.ports.http import HttpClient, TransportError

logger = logging.getLogger(__name__)

INCLUSIONS_PATH = "/clientapi/settings/inclusions"


def is_path_whitelisted(path: str, whitelist: WhitelistSet) -> bool:
    """Check a path against whitelisted prefixes.

    Case-sensitive and boundary-aware: "/a/b" covers "/a/b" and "/a/b/c"
    but not "/a/bc".

    Args:
        path: Filesystem path to check
        whitelist: Whitelisted path prefixes

    Returns:
        True if the path falls under any entry
    """
    return whitelist.contains(path)


def parse_whitelist(body: str) -> WhitelistSet:
    """Parse a JSON array of path strings.

    Args:
        body: Response body

    Returns:
        WhitelistSet, empty if the body is not a JSON array of strings
        (including bodies nested too deeply to decode)
    """
    try:
        data = json.loads(body)
    except (ValueError, RecursionError):
        logger.warning("Malformed whitelist response, treating as empty")
        return WhitelistSet()

    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        logger.warning("Whitelist response is not a list of paths, treating as empty")
        return WhitelistSet()

    return WhitelistSet(tuple(data))


class WhitelistClient:
    """Reads the daemon's path inclusion settings.

    Fails closed: any failure yields an empty set (no path authorized),
    never an error.
    """

    def __init__(self, http: HttpClient, timeout: float = 5.0):
        self.http = http
        self.timeout = timeout

    def fetch_whitelisted_paths(self) -> WhitelistSet:
        """Fetch whitelisted path prefixes.

        Returns:
            WhitelistSet (empty on any failure)
        """
        try:
            response = self.http.get(INCLUSIONS_PATH, timeout=self.timeout)
        except TransportError as e:
            logger.warning(f"Failed to fetch whitelist: {e}")
            return WhitelistSet()

        if response.status_code != 200:
            logger.debug(f"Whitelist request returned {response.status_code}")
            return WhitelistSet()

        return parse_whitelist(response.text)
