"""HTTP client port.

Request/response semantics only; transport details stay in the adapter.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class TransportError(Exception):
    """Base exception for failures that produced no HTTP response."""

    pass


class TransportTimeout(TransportError):
    """Raised when a request exceeds its timeout."""

    pass


class TransportConnectionError(TransportError):
    """Raised when the connection is refused, reset, or otherwise fails."""

    pass


@dataclass(frozen=True)
class HttpResponse:
    """HTTP response as seen by the core.

    Attributes:
        status_code: HTTP status code
        text: Decoded response body
    """

    status_code: int
    text: str = ""


class HttpClient(Protocol):
    """Protocol for talking to the daemon's local API."""

    def get(self, path: str, timeout: float) -> HttpResponse:
        """Issue a GET request against the daemon API.

        Args:
            path: Absolute path on the daemon (e.g., "/system")
            timeout: Seconds before the request is abandoned

        Returns:
            HttpResponse for any status code.

        Raises:
            TransportTimeout: If the request timed out
            TransportConnectionError: If no response was received
        """
        ...

    def download(self, url: str, destination: Path, timeout: float) -> Path:
        """Download a URL to a local file.

        Args:
            url: Absolute URL to fetch
            destination: File to write
            timeout: Seconds before the download is abandoned

        Returns:
            The destination path.

        Raises:
            TransportTimeout: If the download timed out
            TransportConnectionError: If the download failed or returned
                a non-success status
        """
        ...
