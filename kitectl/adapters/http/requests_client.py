"""requests-backed HTTP client for the daemon's local API.

Each call opens and closes its own session, so no connection outlives a
single check, including on timeout and error paths.
"""

import logging
from pathlib import Path

import requests

from kitectl.ports.http import (
    HttpResponse,
    TransportConnectionError,
    TransportTimeout,
)

logger = logging.getLogger(__name__)

USER_AGENT = "kitectl"
DOWNLOAD_CHUNK_BYTES = 64 * 1024


class RequestsHttpClient:
    """HTTP client using requests."""

    def __init__(self, base_url: str):
        """Initialize client.

        Args:
            base_url: Daemon base URL (e.g., "http://127.0.0.1:46624")
        """
        self.base_url = base_url.rstrip("/")

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": USER_AGENT})
        return session

    def get(self, path: str, timeout: float) -> HttpResponse:
        """Issue a GET request against the daemon API.

        Args:
            path: Absolute path on the daemon
            timeout: Seconds before the request is abandoned

        Returns:
            HttpResponse for any status code

        Raises:
            TransportTimeout: If the request timed out
            TransportConnectionError: If no response was received
        """
        url = f"{self.base_url}{path}"
        try:
            with self._new_session() as session:
                response = session.get(url, timeout=timeout)
                return HttpResponse(status_code=response.status_code, text=response.text)
        except requests.exceptions.Timeout as e:
            raise TransportTimeout(f"GET {path} timed out after {timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise TransportConnectionError(f"GET {path} failed: {e}") from e

    def download(self, url: str, destination: Path, timeout: float) -> Path:
        """Stream a URL to a local file.

        A partially written file is removed on failure.

        Args:
            url: Absolute URL to fetch
            destination: File to write
            timeout: Seconds before the download is abandoned

        Returns:
            The destination path

        Raises:
            TransportTimeout: If the download timed out
            TransportConnectionError: If the download failed, returned
                a non-success status, or could not be written locally
        """
        logger.info(f"Downloading {url} to {destination}")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with self._new_session() as session:
                with session.get(url, timeout=timeout, stream=True) as response:
                    response.raise_for_status()
                    with destination.open("wb") as f:
                        for chunk in response.iter_content(DOWNLOAD_CHUNK_BYTES):
                            f.write(chunk)
        except requests.exceptions.Timeout as e:
            _remove_partial(destination)
            raise TransportTimeout(f"Download of {url} timed out") from e
        except (requests.exceptions.RequestException, OSError) as e:
            _remove_partial(destination)
            raise TransportConnectionError(f"Download of {url} failed: {e}") from e

        return destination


def _remove_partial(destination: Path) -> None:
    # is_file() is False when a parent component is not a directory
    if destination.is_file():
        destination.unlink()
