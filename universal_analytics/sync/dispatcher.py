"""
Dispatcher for delivering planned hit batches to the collector endpoint.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Sequence
from urllib.parse import urlencode

import httpx

from universal_analytics.exceptions import DispatchError
from universal_analytics.sync.queue import DispatchUnit

if TYPE_CHECKING:
    from universal_analytics.config import TrackerConfig

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    """
    Outcome of one send.

    `count` is the number of dispatch units processed, failed ones included.
    Every unit runs to completion even when others fail; each failure is kept
    in `failures`, ordered by unit index.
    """

    planned: int = 0
    count: int = 0
    failures: list[DispatchError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def error(self) -> Optional[str]:
        """Message of the first failed unit, or None if every unit was delivered."""
        return str(self.failures[0]) if self.failures else None

    @property
    def succeeded(self) -> int:
        return self.count - len(self.failures)

    @property
    def failed_units(self) -> list[tuple[int, str]]:
        return [(failure.unit_index, str(failure)) for failure in self.failures]


def get_body(unit: DispatchUnit) -> str:
    """Encode every hit of a unit as a query string, one hit per line."""
    return "\n".join(urlencode(hit) for hit in unit)


class Dispatcher:
    """POSTs dispatch units to the collector concurrently."""

    def __init__(self, config: "TrackerConfig", client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the dispatcher.

        Args:
            config: Tracker configuration (endpoint, headers, request options)
            client: HTTP client to use; when omitted one is created on first
                send and closed by `close()`
        """
        self.config = config
        self.client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.config.request_timeout)
            self._owns_client = True
            logger.debug(f"Created HTTP client with {self.config.request_timeout}s timeout")
        return self.client

    def _get_headers(self) -> dict[str, str]:
        """Custom headers attached to every request."""
        return dict(self.config.headers)

    def _get_request_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"timeout": self.config.request_timeout}
        options.update(self.config.request_options)
        return options

    async def _post_unit(
        self,
        client: httpx.AsyncClient,
        url: str,
        index: int,
        unit: DispatchUnit,
    ) -> Optional[DispatchError]:
        """
        POST a single dispatch unit.

        Returns:
            None on success, the recorded DispatchError on transport failure

        Raises:
            Any exception that is not an httpx.HTTPError
        """
        options = self._get_request_options()
        # Body and configured headers win over the same keys in request_options
        options["headers"] = {**options.get("headers", {}), **self._get_headers()}
        options["content"] = get_body(unit)

        try:
            response = await client.post(url, **options)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Collector rejected unit {index}: status={e.response.status_code}")
            return DispatchError(
                f"Collector responded with status {e.response.status_code}",
                unit_index=index,
                status_code=e.response.status_code,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout sending unit {index}: {e}")
            return DispatchError(
                f"Request timed out after {self.config.request_timeout} seconds",
                unit_index=index,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Transport error sending unit {index}: {e}")
            return DispatchError(str(e) or type(e).__name__, unit_index=index)
        return None

    async def send(self, units: Sequence[DispatchUnit]) -> SendResult:
        """
        Send every unit in its own POST request, all of them concurrently.

        Args:
            units: Planned dispatch units

        Returns:
            Aggregated result once every request has finished

        Raises:
            ConfigurationError: If the collector hostname is invalid
        """
        logger.debug("Sending %d tracking call(s)", len(units))
        result = SendResult(planned=len(units))

        if not units:
            return result

        url = self.config.endpoint
        client = self._get_client()

        async def run(index: int, unit: DispatchUnit) -> None:
            error = await self._post_unit(client, url, index, unit)
            result.count += 1
            if error is not None:
                result.failures.append(error)
            logger.debug("%d: %s", result.count, unit)

        outcomes = await asyncio.gather(
            *(run(index, unit) for index, unit in enumerate(units)),
            return_exceptions=True,
        )
        # Every unit has finished at this point, re-raise the first unexpected error
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        result.failures.sort(key=lambda failure: failure.unit_index)

        logger.debug("Finished sending tracking calls")
        return result

    async def close(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None
