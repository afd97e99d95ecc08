"""Closed-loop motion control: PID law, heading and position loops, sequencing."""

from .heading import ControlStep, HeadingController
from .pid import PIDController, clamp, heading_error, wrap_angle
from .position import PositionController, bearing_to
from .sequencer import WaypointSequencer

__all__ = [
    "ControlStep",
    "HeadingController",
    "PIDController",
    "PositionController",
    "WaypointSequencer",
    "bearing_to",
    "clamp",
    "heading_error",
    "wrap_angle",
]
