"""HeadingController — rotate an agent in place to face a goal heading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..types import STOP, VelocityCommand
from .pid import PIDController, clamp, heading_error

__all__ = ["ControlStep", "HeadingController"]

# ---- Tuning defaults ----
HEADING_KP: float = 10.0
HEADING_KI: float = 0.0
HEADING_KD: float = 0.0
MAX_ANGULAR_VELOCITY: float = 3.14  # rad/s
DEFAULT_THETA_TOLERANCE: float = 0.00005  # rad
DEFAULT_TICK_S: float = 0.01


@dataclass(frozen=True)
class ControlStep:
    """Result of evaluating a controller once.

    Attributes:
        command: Velocity to publish for this tick.
        error: Error value the PID law saw (signed).
        done: True once the goal is within tolerance; ``command`` is then zero.
    """

    command: VelocityCommand
    error: float
    done: bool


class HeadingController:
    """Single-axis PID loop on heading with wraparound handling.

    Linear velocity is always zero while this controller is active.  The
    angular output is clamped symmetrically to ``±max_angular_velocity``.

    Configuration keys (all optional, read from the ``heading`` section):

    * ``kp`` / ``ki`` / ``kd`` — PID gains (default ``10.0 / 0.0 / 0.0``).
    * ``max_angular_velocity`` — clamp in rad/s (default ``3.14``).
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        tick: float = DEFAULT_TICK_S,
        tolerance: float = DEFAULT_THETA_TOLERANCE,
    ) -> None:
        cfg = config or {}
        self.tolerance = float(tolerance)
        self.max_angular_velocity = float(cfg.get("max_angular_velocity", MAX_ANGULAR_VELOCITY))
        self.pid = PIDController(
            kp=cfg.get("kp", HEADING_KP),
            ki=cfg.get("ki", HEADING_KI),
            kd=cfg.get("kd", HEADING_KD),
            tick=tick,
        )

    def reset(self) -> None:
        """Forget carried error/integral before a new goal."""
        self.pid.reset()

    def step(self, current: float, goal: float) -> ControlStep:
        """Evaluate one tick.

        Args:
            current: Current heading in radians.
            goal: Desired heading in radians.

        Returns:
            :class:`ControlStep` with the angular command for this tick.
        """
        error = heading_error(goal, current)
        if abs(error) < self.tolerance:
            return ControlStep(command=STOP, error=error, done=True)

        output = self.pid.update(error)
        angular = clamp(output, -self.max_angular_velocity, self.max_angular_velocity)
        return ControlStep(command=VelocityCommand(0.0, angular), error=error, done=False)
