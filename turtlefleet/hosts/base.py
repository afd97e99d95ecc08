from abc import ABC, abstractmethod
from typing import Any, Dict

from ..types import VelocityCommand

__all__ = ["AgentHost", "HostServiceError", "SERVICE_SPAWN", "SERVICE_KILL", "agent_service"]

SERVICE_SPAWN = "/spawn"
SERVICE_KILL = "/kill"


def agent_service(name: str, service: str) -> str:
    """Per-agent service path, e.g. ``/turtle3/set_pen``."""
    return f"/{name}/{service}"


class HostServiceError(Exception):
    """Raised by a host when it rejects a service request (unknown agent, duplicate name)."""

    def __init__(self, service: str, message: str):
        self.service = service
        self.message = message
        super().__init__(f"{service}: {message}")


class AgentHost(ABC):
    """Abstract base class for agent-hosting services.

    A host owns the simulated (or real) agents.  It advertises named
    request/response services, accepts velocity commands per agent, and
    reports pose samples through a :class:`~turtlefleet.feed.PoseFeedBus`.

    Service names follow the turtlesim layout: ``/spawn`` and ``/kill`` are
    global, the teleport and pen services live under ``/<agent name>/``.
    """

    def health_check(self) -> Dict:
        """Report whether the host is reachable.

        Returns a dict with keys:
            ``ok``     — True if services can currently be reached.
            ``agents`` — Number of hosted agents.
            ``error``  — Error message string, or None on success.
        """
        return {"ok": True, "agents": 0, "error": None}

    @abstractmethod
    async def wait_for_service(self, service: str) -> None:
        """Return once *service* is available.

        May wait forever; callers bound it with a timeout.
        """

    @abstractmethod
    async def call(self, service: str, request: Any) -> Any:
        """Issue one request and return the host's response.

        Raises:
            HostServiceError: If the host rejects the request.
        """

    @abstractmethod
    def publish_velocity(self, name: str, command: VelocityCommand) -> None:
        """Send a velocity command to agent *name* (``cmd_vel``)."""

    @abstractmethod
    def close(self) -> None:
        """Release host resources."""
