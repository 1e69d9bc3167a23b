"""
Visitor: records hits for one tracked user and sends them to the collector.
"""

import logging
import uuid
from typing import Any, Callable, Mapping, Optional

import httpx

from universal_analytics.config import TrackerConfig
from universal_analytics.exceptions import ConfigurationError
from universal_analytics.logging_config import debug_enabled, enable_debug
from universal_analytics.parameters import (
    check_parameters,
    format_value,
    tidy_parameters,
    translate_params,
)
from universal_analytics.sync.dispatcher import Dispatcher, SendResult
from universal_analytics.sync.queue import Hit, HitQueue

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[str], int], Any]

HIT_TYPES = frozenset(
    {
        "pageview",
        "screenview",
        "event",
        "transaction",
        "item",
        "social",
        "exception",
        "timing",
    }
)


class Visitor:
    """
    Tracks one visitor and owns the queue of hits recorded for it.

    Every hit-recording call works through a short-lived view of the visitor
    whose context holds the call's parameters. Views share the root's queue,
    persistent parameters and dispatcher, so hits recorded through any view
    are sent by `send()` on any other.
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        *,
        tid: Optional[str] = None,
        cid: Optional[str] = None,
        uid: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize a visitor.

        Args:
            config: Tracker configuration; defaults and UA_* environment
                variables are used when omitted
            tid: Tracking (property) id
            cid: Client id; a random UUID4 is generated when empty
            uid: User id
            client: HTTP client used for sending, created lazily when omitted

        Raises:
            ConfigurationError: If the collector hostname cannot be parsed
        """
        self.config = config if config is not None else TrackerConfig()
        # Raises ConfigurationError for a hostname without a host
        self.config.resolved_hostname

        if self.config.debug:
            enable_debug()

        self.tid = tid
        self.cid = cid or str(uuid.uuid4())
        self.uid = uid

        self.context: dict[str, Any] = {}
        self.persistent_params: dict[str, Any] = {}
        self.queue = HitQueue()
        self.dispatcher = Dispatcher(self.config, client)

    def __repr__(self) -> str:
        return f"Visitor(tid={self.tid!r}, cid={self.cid!r}, queued={len(self.queue)})"

    async def __aenter__(self) -> "Visitor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def queue_size(self) -> int:
        return len(self.queue)

    def debug(self, enabled: bool = True) -> "Visitor":
        """Toggle debug logging (and parameter checks) for the package."""
        enable_debug(enabled)
        if enabled:
            logger.debug("Logging enabled")
        return self

    def reset(self) -> "Visitor":
        """Forget the current context. Queued hits and identity are kept."""
        self.context = {}
        return self

    def set(self, key: str, value: Any) -> None:
        """Set a parameter that is added to every hit recorded from now on."""
        self.persistent_params[key] = value

    def _context_value(self, key: str) -> Optional[Any]:
        return translate_params(self.context).get(key)

    async def pageview(
        self,
        path: Optional[str] = None,
        hostname: Optional[str] = None,
        title: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> "Visitor":
        """
        Record a pageview.

        Args:
            path: Document path, should begin with '/'
            hostname: Document host name
            title: Document title
            params: Extra parameters, readable or wire names
            callback: If given, the queue is sent right away and the callback
                receives (error, count)

        Returns:
            A view of this visitor carrying `params` as context
        """
        call_params = dict(params or {})
        call_params["dp"] = path or self._context_value("dp")
        call_params["dh"] = hostname or self._context_value("dh")
        call_params["dt"] = title or self._context_value("dt")
        call_params = tidy_parameters(call_params)

        pageview_params = tidy_parameters({**self.persistent_params, **call_params})
        return await self._with_context(call_params)._enqueue("pageview", pageview_params, callback)

    async def event(
        self,
        category: Optional[str] = None,
        action: Optional[str] = None,
        label: Optional[str] = None,
        value: Optional[int] = None,
        params: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> "Visitor":
        """
        Record an event.

        The event page (p) defaults to the path of the pageview this view was
        derived from.
        """
        call_params = dict(params or {})
        call_params["ec"] = category or self._context_value("ec")
        call_params["ea"] = action or self._context_value("ea")
        call_params["el"] = label or self._context_value("el")
        call_params["ev"] = value if value is not None else self._context_value("ev")
        if translate_params(call_params).get("p") is None:
            call_params["p"] = self._context_value("dp")
        call_params = tidy_parameters(call_params)

        event_params = tidy_parameters({**self.persistent_params, **call_params})
        return await self._with_context(call_params)._enqueue("event", event_params, callback)

    async def track(
        self,
        hit_type: str,
        params: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> "Visitor":
        """
        Record a hit of any Measurement Protocol type.

        Raises:
            ConfigurationError: If `hit_type` is not a known hit type
        """
        if hit_type not in HIT_TYPES:
            raise ConfigurationError(f"Unknown hit type: {hit_type!r}")

        hit_params = tidy_parameters({**self.persistent_params, **(params or {})})
        return await self._with_context(params)._enqueue(hit_type, hit_params, callback)

    async def send(self, callback: Optional[Callback] = None) -> SendResult:
        """
        Send every queued hit.

        The queue is emptied before the first request starts, hits recorded
        while the requests are in flight wait for the next send.

        Args:
            callback: Called with (error, count) once all requests finished

        Returns:
            Aggregated send result
        """
        units = self.queue.drain_units(self.config.batching_policy)
        result = await self.dispatcher.send(units)

        if callback is not None:
            callback(result.error, result.count)

        return result

    async def aclose(self) -> None:
        """Release the HTTP client. Hits still queued are discarded with the visitor."""
        if len(self.queue):
            logger.debug(f"Closing visitor with {len(self.queue)} unsent hit(s)")
        await self.dispatcher.close()

    async def _enqueue(
        self,
        hit_type: str,
        params: Mapping[str, Any],
        callback: Optional[Callback] = None,
    ) -> "Visitor":
        hit: Hit = {key: format_value(value) for key, value in translate_params(params).items()}
        defaults = tidy_parameters(
            {
                "v": self.config.protocol_version,
                "tid": self.tid,
                "cid": self.cid,
                "uid": self.uid,
                "t": hit_type,
            }
        )
        hit.update(defaults)
        self.queue.append(hit)

        if debug_enabled():
            check_parameters(hit)

        logger.debug("Enqueued %s (%s)", hit_type, hit)

        if callback is not None:
            await self.send(callback)

        return self

    def _with_context(self, context: Optional[Mapping[str, Any]]) -> "Visitor":
        """Derive a view sharing identity, queue, persistent params and dispatcher."""
        view = object.__new__(type(self))
        view.__dict__.update(self.__dict__)
        view.context = dict(context or {})
        return view


def init(
    tid: Optional[str] = None,
    cid: Optional[str] = None,
    uid: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
    **options: Any,
) -> Visitor:
    """
    Create a root visitor.

    Args:
        tid: Tracking (property) id
        cid: Client id, generated when omitted
        uid: User id
        client: HTTP client used for sending
        **options: TrackerConfig fields (hostname, path, https,
            enable_batching, batch_size, headers, request_options, ...)
    """
    return Visitor(TrackerConfig(**options), tid=tid, cid=cid, uid=uid, client=client)
