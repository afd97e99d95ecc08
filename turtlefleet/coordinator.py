"""FleetCoordinator — replace the whole fleet on every PathSet assignment.

Per assignment::

    1. discard every registered agent (alive := False), clear the registry,
       then ask the host to destroy each of them
    2. wait ``settle_delay_s`` and emit one "fleet cleared" signal
    3. spawn one new agent per path at its first waypoint, register it,
       attach a liveness-gated pose forwarder and start its control loop

Assignments are serialized; the coordinator's registry is the only state
shared between agents.  Pose samples reach external observers only while
the sending agent is alive, which also covers samples already in flight
when the agent was discarded.

Config (``fleet`` section)::

    fleet:
      settle_delay_s: 0.1
      name_prefix: turtle
      first_index: 3           # first assigned agent is turtle3
      default_agent: turtle1   # destroyed by bootstrap(); null to skip
      home_name: turtle2
      home: [5.5, 5.5]         # bootstrap() spawns the home agent here
"""

import asyncio
import itertools
import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from .agent import Agent
from .feed import PoseFeedBus
from .gateway import GatewayResult, LifecycleGateway
from .observers import FleetObserver
from .paths import normalize_path_set
from .types import Path, PoseSample

logger = logging.getLogger("TurtleFleet.Coordinator")

DEFAULT_SETTLE_DELAY_S: float = 0.1
DEFAULT_NAME_PREFIX: str = "turtle"
DEFAULT_FIRST_INDEX: int = 3
DEFAULT_HOME_NAME: str = "turtle2"
DEFAULT_HOME = (5.5, 5.5)


class FleetState(Enum):
    """Coordinator lifecycle."""

    IDLE = "idle"
    REPLACING = "replacing"
    ACTIVE = "active"


class FleetCoordinator:
    """Owns the name → :class:`Agent` registry and the fleet lifecycle.

    Example::

        bus = PoseFeedBus()
        host = SimulatedHost(bus)
        coordinator = FleetCoordinator(LifecycleGateway(host), bus)
        coordinator.add_observer(PoseTable())

        await host.start()
        await coordinator.assign([[(1.0, 1.0), (2.0, 1.0)], [(5.0, 5.0), (5.0, 6.0)]])
        await coordinator.wait_all()
        await coordinator.shutdown()
    """

    def __init__(
        self,
        gateway: LifecycleGateway,
        bus: PoseFeedBus,
        config: Optional[Dict[str, Any]] = None,
        observers: Optional[Iterable[FleetObserver]] = None,
    ) -> None:
        self.config: Dict[str, Any] = config or {}
        fleet_cfg = self.config.get("fleet", {}) or {}
        self.gateway = gateway
        self.bus = bus
        self.settle_delay_s: float = float(fleet_cfg.get("settle_delay_s", DEFAULT_SETTLE_DELAY_S))
        self.name_prefix: str = str(fleet_cfg.get("name_prefix", DEFAULT_NAME_PREFIX))
        self.default_agent: Optional[str] = fleet_cfg.get("default_agent", "turtle1")
        self.home_name: str = str(fleet_cfg.get("home_name", DEFAULT_HOME_NAME))
        home = fleet_cfg.get("home", DEFAULT_HOME)
        self.home = (float(home[0]), float(home[1]))

        self._counter = itertools.count(int(fleet_cfg.get("first_index", DEFAULT_FIRST_INDEX)))
        self._agents: Dict[str, Agent] = {}
        self._forwarders: Dict[str, str] = {}  # agent name → bus subscription id
        self._observers: List[FleetObserver] = list(observers or [])
        self._lock = asyncio.Lock()
        self.state = FleetState.IDLE
        self.on_path_complete: Optional[Callable[[Agent], None]] = None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_observer(self, observer: FleetObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: FleetObserver) -> None:
        """Detach *observer*. Unknown observers are ignored."""
        if observer in self._observers:
            self._observers.remove(observer)

    def _forward(self, agent: Agent, name: str, sample: PoseSample) -> None:
        if not agent.alive:
            logger.debug(f"Dropped stale pose for discarded agent '{name}'")
            return
        for observer in list(self._observers):
            try:
                observer.on_pose(name, sample)
            except Exception as exc:
                logger.warning(f"Observer error on pose for '{name}': {exc}")

    def _emit_fleet_cleared(self) -> None:
        for observer in list(self._observers):
            try:
                observer.on_fleet_cleared()
            except Exception as exc:
                logger.warning(f"Observer error on fleet-cleared: {exc}")

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[Agent]:
        return self._agents.get(name)

    @property
    def agents(self) -> List[Agent]:
        return list(self._agents.values())

    def names(self) -> List[str]:
        return list(self._agents)

    def _next_name(self) -> str:
        while True:
            name = f"{self.name_prefix}{next(self._counter)}"
            if name not in self._agents:
                return name

    def _register(self, agent: Agent) -> None:
        self._agents[agent.name] = agent
        agent.attach()
        self._forwarders[agent.name] = self.bus.subscribe(
            agent.name, lambda name, sample: self._forward(agent, name, sample)
        )

    def _retire_all(self) -> List[Agent]:
        """Discard every registered agent and empty the registry in one step."""
        retired = list(self._agents.values())
        for agent in retired:
            agent.discard()
        self._agents.clear()
        return retired

    # ------------------------------------------------------------------
    # Teardown / spawn
    # ------------------------------------------------------------------

    async def _destroy(self, agent: Agent) -> GatewayResult:
        result = await self.gateway.destroy(agent.name)
        sub_id = self._forwarders.pop(agent.name, None)
        if sub_id is not None:
            self.bus.unsubscribe(sub_id)
        self.bus.forget(agent.name)
        if not result.ok:
            logger.warning(f"Destroy of '{agent.name}' ended with {result.value}")
        return result

    async def _teardown(self) -> Dict[str, GatewayResult]:
        retired = self._retire_all()
        if not retired:
            return {}
        logger.info(f"Tearing down {len(retired)} agent(s)")
        results = await asyncio.gather(*(self._destroy(agent) for agent in retired))
        return {agent.name: result for agent, result in zip(retired, results)}

    async def _spawn(
        self, name: str, path: Path, x: float, y: float, theta: float = 0.0, start: bool = True
    ) -> Optional[Agent]:
        agent = Agent(name, path, self.gateway.host, self.bus, self.config, x=x, y=y, theta=theta)
        result = await self.gateway.create(name, x, y, theta, on_done=lambda _resp: self._register(agent))
        if not result.ok:
            logger.warning(f"Spawn of '{name}' ended with {result.value}; path skipped")
            return None
        if start:
            await agent.start(on_complete=self._path_done)
        return agent

    def _path_done(self, agent: Agent) -> None:
        logger.info(f"'{agent.name}' completed its path")
        if self.on_path_complete is not None:
            try:
                self.on_path_complete(agent)
            except Exception as exc:
                logger.warning(f"on_path_complete error for '{agent.name}': {exc}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def assign(self, path_set: Iterable[Iterable[Iterable[float]]]) -> List[Agent]:
        """Replace the current fleet with one agent per path.

        Args:
            path_set: Ordered paths, each an ordered sequence of ``[x, y]``
                pairs already in arena coordinates.  Empty paths are skipped.

        Returns:
            The agents that were spawned, in path order.  Paths whose spawn
            request did not complete are absent.
        """
        paths = normalize_path_set(path_set)
        async with self._lock:
            self.state = FleetState.REPLACING
            await self._teardown()
            await asyncio.sleep(self.settle_delay_s)
            self._emit_fleet_cleared()

            spawned: List[Agent] = []
            for path in paths:
                if not path:
                    logger.warning("Skipping empty path")
                    continue
                x, y = path[0]
                agent = await self._spawn(self._next_name(), path, x, y, 0.0)
                if agent is not None:
                    spawned.append(agent)
            self.state = FleetState.ACTIVE if self._agents else FleetState.IDLE
        logger.info(f"Fleet active: {[a.name for a in spawned]}")
        return spawned

    async def bootstrap(self) -> Optional[Agent]:
        """Remove the host's default agent and park a home agent at the centre.

        The home agent has no path; it is registered like any other agent
        and is torn down by the first assignment.
        """
        async with self._lock:
            if self.default_agent:
                await self.gateway.destroy(self.default_agent)
            agent = await self._spawn(self.home_name, (), *self.home, 0.0, start=False)
            if agent is not None:
                self.state = FleetState.ACTIVE
            return agent

    async def shutdown(self) -> Dict[str, GatewayResult]:
        """Discard and destroy every registered agent."""
        async with self._lock:
            results = await self._teardown()
            self.state = FleetState.IDLE
        logger.info("Fleet shut down")
        return results

    async def wait_all(self, timeout: Optional[float] = None) -> bool:
        """Wait until every registered agent's control loop has ended.

        Returns:
            True if all loops ended, False on timeout.
        """
        tasks = {agent.task for agent in self._agents.values() if agent.task is not None}
        if not tasks:
            return True
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        return not pending

    def status(self) -> List[Dict[str, Any]]:
        """Snapshot of every registered agent."""
        return [agent.snapshot() for agent in self._agents.values()]
