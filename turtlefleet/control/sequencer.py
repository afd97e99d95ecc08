"""WaypointSequencer — turn-then-drive through an ordered list of waypoints.

Each waypoint is visited in two phases: the :class:`HeadingController`
turns the agent toward it, then the :class:`PositionController` closes the
distance.  Only one phase runs at a time and waypoints are never skipped
or reordered.

The sequencer reads pose from, and publishes velocity to, any object with
the agent surface::

    x, y, theta        current pose (updated by pose feedback)
    tick_interval      seconds between control steps
    status             an AgentStatus, written by the sequencer
    publish_velocity(VelocityCommand)
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional

from ..types import AgentStatus, Waypoint
from .heading import HeadingController
from .position import PositionController, bearing_to

logger = logging.getLogger("TurtleFleet.Sequencer")

__all__ = ["WaypointSequencer"]


class WaypointSequencer:
    """Compose heading alignment and distance closing per waypoint.

    Args:
        agent: The controlled agent (see module docstring for the surface used).
        heading: Controller for the alignment phase.
        position: Controller for the approach phase.
    """

    def __init__(self, agent, heading: HeadingController, position: PositionController) -> None:
        self.agent = agent
        self.heading = heading
        self.position = position

    async def go_to_theta(self, goal_theta: float) -> None:
        """Rotate in place until the heading error is within tolerance."""
        self.heading.reset()
        self.agent.status = AgentStatus.ALIGNING_HEADING
        while True:
            step = self.heading.step(self.agent.theta, goal_theta)
            self.agent.publish_velocity(step.command)
            if step.done:
                return
            await asyncio.sleep(self.agent.tick_interval)

    async def go_in_line(self, goal_x: float, goal_y: float) -> None:
        """Drive until the agent is within the distance tolerance of the goal."""
        self.position.reset()
        self.agent.status = AgentStatus.APPROACHING_GOAL
        while True:
            step = self.position.step(
                self.agent.x, self.agent.y, self.agent.theta, goal_x, goal_y
            )
            self.agent.publish_velocity(step.command)
            if step.done:
                return
            await asyncio.sleep(self.agent.tick_interval)

    async def go_to_coordinates(self, goal_x: float, goal_y: float) -> None:
        """Face the goal, then drive to it."""
        await self.go_to_theta(bearing_to(self.agent.x, self.agent.y, goal_x, goal_y))
        await self.go_in_line(goal_x, goal_y)

    async def draw_path(
        self,
        waypoints: Iterable[Waypoint],
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        """Visit every waypoint in order, then call *on_complete* once.

        An empty sequence calls *on_complete* before the first suspension
        point and publishes no velocity command.
        """
        for index, (goal_x, goal_y) in enumerate(waypoints):
            logger.debug(
                "%s: waypoint %d -> (%.3f, %.3f)",
                getattr(self.agent, "name", "?"), index, goal_x, goal_y,
            )
            await self.go_to_coordinates(goal_x, goal_y)
        self.agent.status = AgentStatus.IDLE
        if on_complete is not None:
            on_complete()
