"""Base for synchronous service-to-service RPC clients.

Every remote call carries an explicit timeout. Remote failures are translated
into the shared error taxonomy so command handlers never see httpx types:

    404                         -> the client's ``not_found`` error
    5xx, timeout, network error -> the client's ``unavailable`` error
    any other non-2xx           -> the client's ``unavailable`` error
"""

import os

import httpx
import structlog

from shared.errors import NotFound, UpstreamUnavailable
from shared.identity import RequestIdentity

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


def default_timeout() -> float:
    return float(os.environ.get("HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))


class ServiceClient:
    """Thin wrapper around an ``httpx.Client`` bound to one remote service.

    Subclasses set ``service_name`` and ``unavailable`` and implement typed
    lookups on top of ``_get_json``.
    """

    service_name = "service"
    unavailable: type[UpstreamUnavailable] = UpstreamUnavailable

    def __init__(self, base_url: str | None = None, http: httpx.Client | None = None, timeout: float | None = None):
        if http is None:
            http = httpx.Client(base_url=base_url or "", timeout=timeout or default_timeout())
        self._http = http

    def close(self) -> None:
        self._http.close()

    def _get_json(self, path: str, not_found: NotFound, identity: RequestIdentity | None = None) -> dict:
        headers = identity.to_headers() if identity else {}
        try:
            response = self._http.get(path, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("Remote call timed out", service=self.service_name, path=path)
            raise self.unavailable(f"{self.service_name} timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("Remote call failed", service=self.service_name, path=path, error=str(exc))
            raise self.unavailable(f"{self.service_name} is unavailable") from exc

        if response.status_code == 404:
            raise not_found
        if response.status_code >= 500:
            logger.error(
                "Remote service error",
                service=self.service_name,
                path=path,
                status_code=response.status_code,
            )
            raise self.unavailable(f"{self.service_name} is unavailable")
        if response.status_code >= 400:
            logger.error(
                "Remote call rejected",
                service=self.service_name,
                path=path,
                status_code=response.status_code,
            )
            raise self.unavailable(f"{self.service_name} rejected the request ({response.status_code})")

        try:
            return response.json()
        except ValueError as exc:
            raise self.unavailable(f"{self.service_name} returned a malformed response") from exc
