"""PositionController — drive an agent's distance-to-goal to zero."""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from ..types import STOP, VelocityCommand
from .heading import DEFAULT_TICK_S, ControlStep
from .pid import PIDController, heading_error

__all__ = ["PositionController", "bearing_to"]

# ---- Tuning defaults ----
POSITION_KP: float = 2.0
POSITION_KI: float = 0.0
POSITION_KD: float = 0.0
MAX_LINEAR_VELOCITY: float = 1.5  # units/s
DEFAULT_DISTANCE_TOLERANCE: float = 0.005
BEHIND_THRESHOLD: float = math.pi / 2


def bearing_to(x: float, y: float, goal_x: float, goal_y: float) -> float:
    """Heading (radians) that points from ``(x, y)`` toward the goal."""
    return math.atan2(goal_y - y, goal_x - x)


class PositionController:
    """PID loop on Euclidean distance with an overshoot correction rule.

    The angular command steers by the raw bearing error.  When the goal is
    more than 90° off the nose it is treated as already passed: the turn
    command is dropped to zero and the distance error is negated, so the
    agent backs up instead of spinning round.

    Only positive output is clamped (to ``max_linear_velocity``); reverse
    output is passed through unclamped.

    Configuration keys (all optional, read from the ``position`` section):

    * ``kp`` / ``ki`` / ``kd`` — PID gains (default ``2.0 / 0.0 / 0.0``).
    * ``max_linear_velocity`` — forward clamp (default ``1.5``).
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        tick: float = DEFAULT_TICK_S,
        tolerance: float = DEFAULT_DISTANCE_TOLERANCE,
    ) -> None:
        cfg = config or {}
        self.tolerance = float(tolerance)
        self.max_linear_velocity = float(cfg.get("max_linear_velocity", MAX_LINEAR_VELOCITY))
        self.pid = PIDController(
            kp=cfg.get("kp", POSITION_KP),
            ki=cfg.get("ki", POSITION_KI),
            kd=cfg.get("kd", POSITION_KD),
            tick=tick,
        )

    def reset(self) -> None:
        self.pid.reset()

    def step(self, x: float, y: float, theta: float, goal_x: float, goal_y: float) -> ControlStep:
        """Evaluate one tick from the pose ``(x, y, theta)`` toward the goal."""
        error = math.hypot(goal_x - x, goal_y - y)
        if error < self.tolerance:
            return ControlStep(command=STOP, error=error, done=True)

        angular = heading_error(bearing_to(x, y, goal_x, goal_y), theta)
        if abs(angular) > BEHIND_THRESHOLD:
            angular = 0.0
            error = -error

        linear = self.pid.update(error)
        if linear > self.max_linear_velocity:
            linear = self.max_linear_velocity
        return ControlStep(command=VelocityCommand(linear, angular), error=error, done=False)
