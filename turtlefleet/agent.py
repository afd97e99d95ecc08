"""Agent — one hosted turtle with its own independently-ticking control loop.

The agent owns its kinematic state, its (immutable) path and its liveness
flag.  Pose samples from the :class:`~turtlefleet.feed.PoseFeedBus` update
the state; the control loop (a :class:`WaypointSequencer` run as an
asyncio task) reads it and publishes velocity commands to the host.

Once discarded an agent is terminal: ``alive`` never returns to True and
its control task is cancelled.  A new assignment always builds a new Agent.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from .control.heading import DEFAULT_THETA_TOLERANCE, DEFAULT_TICK_S, HeadingController
from .control.position import DEFAULT_DISTANCE_TOLERANCE, PositionController
from .control.sequencer import WaypointSequencer
from .feed import PoseFeedBus
from .hosts.base import AgentHost
from .types import AgentStatus, Path, PoseSample, VelocityCommand, Waypoint

__all__ = ["Agent"]


def _freeze_path(path: Iterable[Iterable[float]]) -> Path:
    frozen = []
    for point in path:
        x, y = point
        frozen.append((float(x), float(y)))
    return tuple(frozen)


class Agent:
    """A simulated point robot following one path.

    Args:
        name: Unique name among live agents (also the host/bus topic).
        path: Ordered waypoints; copied into an immutable tuple.
        host: Host that receives this agent's velocity commands.
        bus: Pose feed this agent subscribes to for feedback.
        config: Full config dict; reads the ``agent``, ``heading`` and
            ``position`` sections.
        x, y, theta: Initial pose, used until the first sample arrives.
            Defaults to the first waypoint facing along +x.

    Configuration keys (``agent`` section, all optional):

    * ``tick_interval_s`` — control period (default ``0.01``).
    * ``theta_tolerance`` — heading tolerance in rad (default ``0.00005``).
    * ``distance_tolerance`` — position tolerance (default ``0.005``).
    """

    def __init__(
        self,
        name: str,
        path: Iterable[Waypoint],
        host: AgentHost,
        bus: PoseFeedBus,
        config: Optional[Dict[str, Any]] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        theta: float = 0.0,
    ) -> None:
        cfg = config or {}
        agent_cfg = cfg.get("agent", {}) or {}

        self.name = name
        self.path: Path = _freeze_path(path)
        start = self.path[0] if self.path else (0.0, 0.0)
        self.x: float = float(start[0] if x is None else x)
        self.y: float = float(start[1] if y is None else y)
        self.theta: float = float(theta)
        self.angular_velocity: float = 0.0
        self.linear_velocity: float = 0.0

        self.tick_interval: float = float(agent_cfg.get("tick_interval_s", DEFAULT_TICK_S))
        self.theta_tolerance: float = float(
            agent_cfg.get("theta_tolerance", DEFAULT_THETA_TOLERANCE)
        )
        self.distance_tolerance: float = float(
            agent_cfg.get("distance_tolerance", DEFAULT_DISTANCE_TOLERANCE)
        )

        self.host = host
        self.bus = bus
        self.sequencer = WaypointSequencer(
            self,
            HeadingController(cfg.get("heading"), self.tick_interval, self.theta_tolerance),
            PositionController(cfg.get("position"), self.tick_interval, self.distance_tolerance),
        )

        self._alive = True
        self._status = AgentStatus.IDLE
        self._task: Optional[asyncio.Task] = None  # type: ignore[type-arg]
        self._feedback_sub: Optional[str] = None
        self.completed = False
        self._logger = logging.getLogger(f"TurtleFleet.Agent.{name}")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def alive(self) -> bool:
        """Liveness flag. Once False, stays False."""
        return self._alive

    @property
    def status(self) -> AgentStatus:
        return self._status

    @status.setter
    def status(self, value: AgentStatus) -> None:
        if self._status is AgentStatus.DISCARDED:
            return
        self._status = value

    def set_current_pose(self, sample: PoseSample) -> None:
        """Apply one pose report to the kinematic state."""
        self.x = sample.x
        self.y = sample.y
        self.theta = sample.theta
        self.angular_velocity = sample.angular_velocity
        self.linear_velocity = sample.linear_velocity

    def _on_pose(self, name: str, sample: PoseSample) -> None:
        self.set_current_pose(sample)

    def publish_velocity(self, command: VelocityCommand) -> None:
        """Send *command* to the host. Dropped once the agent is discarded."""
        if not self._alive:
            return
        self.host.publish_velocity(self.name, command)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach(self) -> None:
        """Subscribe to this agent's pose topic. Idempotent."""
        if self._feedback_sub is None:
            self._feedback_sub = self.bus.subscribe(self.name, self._on_pose)

    def detach(self) -> None:
        if self._feedback_sub is not None:
            self.bus.unsubscribe(self._feedback_sub)
            self._feedback_sub = None

    async def start(self, on_complete: Optional[Callable[["Agent"], None]] = None) -> None:
        """Attach feedback and begin following the path in a background task.

        Idempotent; a discarded agent cannot be started.
        """
        if not self._alive or self._task is not None:
            return
        self.attach()
        self._task = asyncio.create_task(self._run_loop(on_complete), name=f"agent-{self.name}")
        self._logger.info(f"Agent '{self.name}' started ({len(self.path)} waypoints)")

    async def _run_loop(self, on_complete: Optional[Callable[["Agent"], None]]) -> None:
        def _finished() -> None:
            self.completed = True
            self._logger.info(f"Agent '{self.name}' finished its path")
            if on_complete is not None:
                on_complete(self)

        try:
            await self.sequencer.draw_path(self.path, _finished)
        except asyncio.CancelledError:
            self._logger.debug(f"Agent '{self.name}' control loop cancelled")
            raise

    def discard(self) -> None:
        """Mark the agent dead and cancel its control loop.

        Sets ``alive`` to False first, so any sample that is already in
        flight is caught by the liveness check at the forwarding boundary.
        """
        if not self._alive:
            return
        self._alive = False
        self._status = AgentStatus.DISCARDED
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.detach()
        self._logger.info(f"Agent '{self.name}' discarded")

    async def wait(self) -> None:
        """Wait for the control loop to finish (or be cancelled)."""
        if self._task is None:
            return
        await asyncio.wait({self._task})

    @property
    def task(self) -> Optional[asyncio.Task]:  # type: ignore[type-arg]
        return self._task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the agent for status output."""
        return {
            "name": self.name,
            "status": self._status.value,
            "alive": self._alive,
            "x": round(self.x, 4),
            "y": round(self.y, 4),
            "theta": round(self.theta, 4),
            "waypoints": len(self.path),
            "completed": self.completed,
        }
