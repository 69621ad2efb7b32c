"""
HTTP probe - fetch a host's page to confirm its vhost answers.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from vhost.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ProbeResponse:
    """Status line and body of a probe."""
    status_code: int
    http_version: str
    reason: str
    body: str

    @property
    def status_line(self) -> str:
        return f"{self.http_version} {self.status_code} {self.reason}".strip()

    @property
    def first_line(self) -> str:
        lines = self.body.splitlines()
        return lines[0].strip() if lines else ""


class Prober:
    """
    Issues GET requests with httpx.

    A client can be injected (for example one built on
    httpx.MockTransport); otherwise one is created per probe.
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.client = client
        self.timeout = timeout

    def get(self, host_name: str) -> ProbeResponse:
        """
        GET http://<host_name>/ without following redirects.

        Raises:
            httpx.HTTPError: On connection failures and timeouts
        """
        url = f"http://{host_name}/"
        logger.debug("GET %s", url)

        if self.client is not None:
            response = self.client.get(url)
        else:
            with httpx.Client(timeout=self.timeout, follow_redirects=False) as client:
                response = client.get(url)

        return ProbeResponse(
            status_code=response.status_code,
            http_version=response.http_version,
            reason=response.reason_phrase,
            body=response.text,
        )
