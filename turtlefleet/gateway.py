"""LifecycleGateway — guarded create/destroy/teleport/pen requests.

Every request first waits for the host's service with a fixed timeout.
If the service does not come up in time the request is abandoned: the
caller's continuation never fires and :attr:`GatewayResult.SERVICE_UNAVAILABLE`
is returned.  There is no retry.  No gateway operation raises.

Config (``gateway`` section)::

    gateway:
      service_timeout_s: 2.0
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .hosts.base import SERVICE_KILL, SERVICE_SPAWN, AgentHost, HostServiceError, agent_service
from .types import (
    KillRequest,
    SetPenRequest,
    SpawnRequest,
    TeleportAbsoluteRequest,
    TeleportRelativeRequest,
)

logger = logging.getLogger("TurtleFleet.Gateway")

DEFAULT_SERVICE_TIMEOUT_S: float = 2.0

Continuation = Callable[[Any], None]


class GatewayResult(Enum):
    """Outcome of one lifecycle request."""

    OK = "ok"
    SERVICE_UNAVAILABLE = "service_unavailable"
    REJECTED = "rejected"

    @property
    def ok(self) -> bool:
        return self is GatewayResult.OK


class LifecycleGateway:
    """Issues agent lifecycle requests to an :class:`~turtlefleet.hosts.base.AgentHost`.

    Each operation accepts an optional ``on_done`` continuation, called with
    the host's response only when the request completes.

    Example::

        gateway = LifecycleGateway(host)
        result = await gateway.create("turtle3", 1.0, 2.0, 0.0)
        if result is GatewayResult.SERVICE_UNAVAILABLE:
            ...  # nothing was spawned, nothing was raised
    """

    def __init__(self, host: AgentHost, config: Optional[Dict[str, Any]] = None) -> None:
        cfg = (config or {}).get("gateway", {}) or {}
        self.host = host
        self.timeout_s: float = float(cfg.get("service_timeout_s", DEFAULT_SERVICE_TIMEOUT_S))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(
        self, name: str, x: float, y: float, theta: float = 0.0,
        on_done: Optional[Continuation] = None,
    ) -> GatewayResult:
        """Spawn agent *name* at ``(x, y, theta)``."""
        return await self._call(SERVICE_SPAWN, SpawnRequest(name, x, y, theta), on_done)

    async def destroy(self, name: str, on_done: Optional[Continuation] = None) -> GatewayResult:
        """Kill agent *name*."""
        return await self._call(SERVICE_KILL, KillRequest(name), on_done)

    async def teleport_absolute(
        self, name: str, x: float, y: float, theta: float,
        on_done: Optional[Continuation] = None,
    ) -> GatewayResult:
        """Move agent *name* to ``(x, y, theta)`` instantly."""
        return await self._call(
            agent_service(name, "teleport_absolute"),
            TeleportAbsoluteRequest(x, y, theta),
            on_done,
        )

    async def teleport_relative(
        self, name: str, linear: float, angular: float,
        on_done: Optional[Continuation] = None,
    ) -> GatewayResult:
        """Turn agent *name* by *angular*, then move it *linear* units forward."""
        return await self._call(
            agent_service(name, "teleport_relative"),
            TeleportRelativeRequest(linear, angular),
            on_done,
        )

    async def set_pen(
        self, name: str, r: int, g: int, b: int, width: int, off: bool,
        on_done: Optional[Continuation] = None,
    ) -> GatewayResult:
        """Set the pen colour/width of agent *name*, or lift it with ``off=True``."""
        return await self._call(
            agent_service(name, "set_pen"),
            SetPenRequest(r, g, b, width, off),
            on_done,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _call(
        self, service: str, request: Any, on_done: Optional[Continuation]
    ) -> GatewayResult:
        try:
            await asyncio.wait_for(self.host.wait_for_service(service), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"Service not available: {service} (waited {self.timeout_s}s)")
            return GatewayResult.SERVICE_UNAVAILABLE

        try:
            response = await self.host.call(service, request)
        except HostServiceError as exc:
            logger.warning(f"Request rejected by host: {exc}")
            return GatewayResult.REJECTED

        logger.debug(f"{service} ok: {request}")
        if on_done is not None:
            try:
                on_done(response)
            except Exception as exc:
                logger.warning(f"Continuation for {service} failed: {exc}")
        return GatewayResult.OK
