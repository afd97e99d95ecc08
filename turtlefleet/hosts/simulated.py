"""In-process turtlesim-style host.

Simulates unicycle kinematics for every hosted agent and publishes their
poses to a :class:`~turtlefleet.feed.PoseFeedBus`.  Starts with one
default agent (``turtle1``) at the arena centre, as turtlesim does.

Config (``simulation`` section)::

    simulation:
      publish_interval_s: 0.01   # wall-clock seconds between pose samples
      time_scale: 1.0            # simulated seconds per wall-clock second
      arena_size: 11.088889      # square arena edge length
      default_agent: turtle1     # set to null to start empty
      record_requests: false     # keep every (service, request) in .requests

Availability can be switched off for tests with :meth:`SimulatedHost.set_available`;
``wait_for_service`` then never returns and callers time out.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from ..control.pid import wrap_angle
from ..feed import PoseFeedBus
from ..types import (
    KillRequest,
    PoseSample,
    SetPenRequest,
    SpawnRequest,
    TeleportAbsoluteRequest,
    TeleportRelativeRequest,
    VelocityCommand,
)
from .base import SERVICE_KILL, SERVICE_SPAWN, AgentHost, HostServiceError

logger = logging.getLogger("TurtleFleet.SimulatedHost")

DEFAULT_PUBLISH_INTERVAL_S: float = 0.01
DEFAULT_ARENA_SIZE: float = 11.088889
DEFAULT_AGENT_NAME: str = "turtle1"
_POLL_S: float = 0.01

_PER_AGENT_SERVICES = ("teleport_absolute", "teleport_relative", "set_pen")


def _split_service(service: str):
    """Split ``/<name>/<op>`` into ``(name, op)``; ``(None, None)`` otherwise."""
    parts = service.split("/")
    if len(parts) != 3 or parts[0]:
        return None, None
    return parts[1], parts[2]


@dataclass
class _SimAgent:
    """Kinematic state of one hosted agent."""

    x: float
    y: float
    theta: float
    linear: float = 0.0
    angular: float = 0.0
    pen: Dict[str, Any] = field(
        default_factory=lambda: {"r": 179, "g": 184, "b": 255, "width": 3, "off": False}
    )

    def pose(self) -> PoseSample:
        return PoseSample(
            x=self.x,
            y=self.y,
            theta=self.theta,
            angular_velocity=self.angular,
            linear_velocity=self.linear,
        )


class SimulatedHost(AgentHost):
    """Turtlesim analogue driven by an asyncio ticker.

    Args:
        bus: Pose feed the host publishes samples to.
        config: Full config dict; reads the ``simulation`` sub-block.
    """

    def __init__(self, bus: PoseFeedBus, config: Optional[Dict[str, Any]] = None) -> None:
        sim = (config or {}).get("simulation", {}) or {}
        self.bus = bus
        self.publish_interval_s = float(sim.get("publish_interval_s", DEFAULT_PUBLISH_INTERVAL_S))
        self.time_scale = float(sim.get("time_scale", 1.0))
        self.arena_size = float(sim.get("arena_size", DEFAULT_ARENA_SIZE))

        self._agents: Dict[str, _SimAgent] = {}
        self._available = True
        self._down_services: Set[str] = set()
        self._task: Optional[asyncio.Task] = None  # type: ignore[type-arg]
        self.record_requests = bool(sim.get("record_requests", False))
        self.requests: list = []

        default_name = sim.get("default_agent", DEFAULT_AGENT_NAME)
        if default_name:
            centre = self.arena_size / 2.0
            self._agents[default_name] = _SimAgent(x=centre, y=centre, theta=0.0)

        logger.info(
            "SimulatedHost ready: interval=%.3fs time_scale=%.2f arena=%.2f",
            self.publish_interval_s, self.time_scale, self.arena_size,
        )

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def set_available(self, available: bool, service: Optional[str] = None) -> None:
        """Switch the whole host, or a single *service*, on or off."""
        if service is None:
            self._available = available
        elif available:
            self._down_services.discard(service)
        else:
            self._down_services.add(service)

    def _is_available(self, service: str) -> bool:
        if not self._available or service in self._down_services:
            return False
        if service in (SERVICE_SPAWN, SERVICE_KILL):
            return True
        # per-agent services exist only while the agent does
        name, _ = _split_service(service)
        return name in self._agents

    async def wait_for_service(self, service: str) -> None:
        while not self._is_available(service):
            await asyncio.sleep(_POLL_S)

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    async def call(self, service: str, request: Any) -> Any:
        if self.record_requests:
            self.requests.append((service, request))
        if service == SERVICE_SPAWN:
            return self._spawn(request)
        if service == SERVICE_KILL:
            return self._kill(request)

        name, op = _split_service(service)
        agent = self._agents.get(name)
        if agent is None or op not in _PER_AGENT_SERVICES:
            raise HostServiceError(service, "no such service")
        if op == "teleport_absolute":
            return self._teleport_absolute(agent, request)
        if op == "teleport_relative":
            return self._teleport_relative(agent, request)
        return self._set_pen(agent, request)

    def _spawn(self, req: SpawnRequest) -> Dict[str, str]:
        if req.name in self._agents:
            raise HostServiceError(SERVICE_SPAWN, f"agent '{req.name}' already exists")
        self._agents[req.name] = _SimAgent(x=req.x, y=req.y, theta=wrap_angle(req.theta))
        logger.info("Spawned %s at (%.3f, %.3f)", req.name, req.x, req.y)
        return {"name": req.name}

    def _kill(self, req: KillRequest) -> Dict[str, str]:
        if self._agents.pop(req.name, None) is None:
            raise HostServiceError(SERVICE_KILL, f"no agent named '{req.name}'")
        logger.info("Killed %s", req.name)
        return {}

    def _teleport_absolute(self, agent: _SimAgent, req: TeleportAbsoluteRequest) -> Dict:
        agent.x, agent.y = self._clamp(req.x), self._clamp(req.y)
        agent.theta = wrap_angle(req.theta)
        return {}

    def _teleport_relative(self, agent: _SimAgent, req: TeleportRelativeRequest) -> Dict:
        agent.theta = wrap_angle(agent.theta + req.angular)
        agent.x = self._clamp(agent.x + req.linear * math.cos(agent.theta))
        agent.y = self._clamp(agent.y + req.linear * math.sin(agent.theta))
        return {}

    def _set_pen(self, agent: _SimAgent, req: SetPenRequest) -> Dict:
        agent.pen = {"r": req.r, "g": req.g, "b": req.b, "width": req.width, "off": bool(req.off)}
        return {}

    # ------------------------------------------------------------------
    # Kinematics
    # ------------------------------------------------------------------

    def publish_velocity(self, name: str, command: VelocityCommand) -> None:
        agent = self._agents.get(name)
        if agent is None:
            logger.debug("cmd_vel for unknown agent '%s' dropped", name)
            return
        agent.linear = float(command.linear)
        agent.angular = float(command.angular)

    def step(self, dt: Optional[float] = None) -> None:
        """Advance every agent by *dt* simulated seconds and publish poses."""
        if dt is None:
            dt = self.publish_interval_s * self.time_scale
        for name, agent in list(self._agents.items()):
            agent.theta = wrap_angle(agent.theta + agent.angular * dt)
            agent.x = self._clamp(agent.x + agent.linear * math.cos(agent.theta) * dt)
            agent.y = self._clamp(agent.y + agent.linear * math.sin(agent.theta) * dt)
            self.bus.publish(name, agent.pose())

    def _clamp(self, value: float) -> float:
        return max(0.0, min(self.arena_size, value))

    # ------------------------------------------------------------------
    # Ticker
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Begin publishing poses every ``publish_interval_s``. Idempotent."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def _run_loop(self) -> None:
        while True:
            self.step()
            await asyncio.sleep(self.publish_interval_s)

    def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def has_agent(self, name: str) -> bool:
        return name in self._agents

    def agent_names(self) -> list:
        return list(self._agents)

    def pose_of(self, name: str) -> Optional[PoseSample]:
        agent = self._agents.get(name)
        return agent.pose() if agent is not None else None

    def pen_of(self, name: str) -> Optional[Dict[str, Any]]:
        agent = self._agents.get(name)
        return dict(agent.pen) if agent is not None else None

    def health_check(self) -> Dict[str, Any]:
        return {
            "ok": self._available,
            "agents": len(self._agents),
            "running": self._task is not None and not self._task.done(),
            "error": None if self._available else "services unavailable",
        }
