"""Message types shared by the controllers, hosts and observers.

Pose samples and velocity commands mirror the turtlesim ``Pose`` and
``Twist`` messages (only one translational and one rotational axis are
used).  Lifecycle request records mirror the turtlesim services.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Tuple

Waypoint = Tuple[float, float]
Path = Tuple[Waypoint, ...]
PathSet = Tuple[Path, ...]


class _Record:
    """Plain-dict conversion for the service request records."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls, d: Dict[str, Any]):
        """Build a record from a mapping; unknown keys are ignored.

        Raises:
            TypeError: If a required field is missing.
        """
        return cls(**{f.name: d[f.name] for f in fields(cls) if f.name in d})  # type: ignore[arg-type]


@dataclass(frozen=True)
class PoseSample:
    """One pose report for a hosted agent."""

    x: float
    y: float
    theta: float
    angular_velocity: float = 0.0
    linear_velocity: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> PoseSample:
        return cls(
            x=float(d["x"]),
            y=float(d["y"]),
            theta=float(d.get("theta", 0.0)),
            angular_velocity=float(d.get("angular_velocity", 0.0)),
            linear_velocity=float(d.get("linear_velocity", 0.0)),
        )


@dataclass(frozen=True)
class VelocityCommand:
    """Controller output: forward speed and turn rate."""

    linear: float = 0.0
    angular: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> VelocityCommand:
        return cls(linear=float(d.get("linear", 0.0)), angular=float(d.get("angular", 0.0)))

    @property
    def is_zero(self) -> bool:
        return self.linear == 0.0 and self.angular == 0.0


STOP = VelocityCommand(0.0, 0.0)


@dataclass(frozen=True)
class SpawnRequest(_Record):
    name: str
    x: float
    y: float
    theta: float = 0.0


@dataclass(frozen=True)
class KillRequest(_Record):
    name: str


@dataclass(frozen=True)
class TeleportAbsoluteRequest(_Record):
    x: float
    y: float
    theta: float


@dataclass(frozen=True)
class TeleportRelativeRequest(_Record):
    linear: float
    angular: float


@dataclass(frozen=True)
class SetPenRequest(_Record):
    r: int
    g: int
    b: int
    width: int
    off: bool


class AgentStatus(Enum):
    """Control-loop states for an Agent."""

    IDLE = "idle"
    ALIGNING_HEADING = "aligning_heading"
    APPROACHING_GOAL = "approaching_goal"
    DISCARDED = "discarded"
