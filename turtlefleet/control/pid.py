"""PID law and angle helpers shared by the heading and position loops."""

import math

__all__ = ["PIDController", "clamp", "heading_error", "wrap_angle"]

TWO_PI = 2.0 * math.pi


def wrap_angle(delta: float) -> float:
    """Map a signed angle difference into ``(-pi, pi]``.

    Naive subtraction of two headings can pick the long way around the
    circle; this folds the result back by whole turns.
    """
    if not math.isfinite(delta):
        return delta
    if abs(delta) > TWO_PI:
        delta = math.fmod(delta, TWO_PI)
    while delta > math.pi:
        delta -= TWO_PI
    while delta <= -math.pi:
        delta += TWO_PI
    return delta


def heading_error(desired: float, current: float) -> float:
    """Signed rotation (radians) that takes *current* onto *desired*."""
    return wrap_angle(desired - current)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class PIDController:
    """Discrete PID law evaluated once per control tick.

    Carries ``(previous_error, integral)`` between calls to :meth:`update`.

    Args:
        kp: Proportional gain.
        ki: Integral gain.
        kd: Derivative gain.
        tick: Control period in seconds; scales the integral and derivative.
    """

    def __init__(self, kp: float, ki: float = 0.0, kd: float = 0.0, tick: float = 0.01) -> None:
        if tick <= 0:
            raise ValueError(f"tick must be positive, got {tick}")
        self.kp = float(kp)
        self.ki = float(ki)
        self.kd = float(kd)
        self.tick = float(tick)
        self.previous_error = 0.0
        self.integral = 0.0

    def update(self, error: float) -> float:
        """Feed one error sample and return the raw (unclamped) output."""
        self.integral += error * self.tick
        derivative = (error - self.previous_error) / self.tick
        self.previous_error = error
        return self.kp * error + self.ki * self.integral + self.kd * derivative

    def reset(self) -> None:
        self.previous_error = 0.0
        self.integral = 0.0
