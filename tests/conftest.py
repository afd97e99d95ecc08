"""Shared fixtures for the TurtleFleet test-suite."""

import math

import pytest

from turtlefleet.control.pid import wrap_angle
from turtlefleet.feed import PoseFeedBus
from turtlefleet.hosts.simulated import SimulatedHost
from turtlefleet.observers import FleetObserver
from turtlefleet.types import AgentStatus


# Fast but stable: 1 ms wall ticks, 20 ms of simulated motion per host tick,
# tolerances loose enough that a waypoint takes ~150 ticks.
FAST_CONFIG = {
    "agent": {"tick_interval_s": 0.001, "theta_tolerance": 0.001, "distance_tolerance": 0.01},
    "gateway": {"service_timeout_s": 0.05},
    "fleet": {"settle_delay_s": 0.0},
    "simulation": {
        "publish_interval_s": 0.001,
        "time_scale": 20.0,
        "default_agent": None,
        "record_requests": True,
    },
}


class KinematicAgent:
    """Stand-in agent whose pose integrates each command immediately."""

    name = "kinematic"

    def __init__(self, x=0.0, y=0.0, theta=0.0, dt=0.01):
        self.x = x
        self.y = y
        self.theta = theta
        self.dt = dt
        self.tick_interval = 0.0
        self.status = AgentStatus.IDLE
        self.commands = []
        self.statuses = []

    def publish_velocity(self, command):
        self.commands.append(command)
        self.statuses.append(self.status)
        self.theta = wrap_angle(self.theta + command.angular * self.dt)
        self.x += command.linear * math.cos(self.theta) * self.dt
        self.y += command.linear * math.sin(self.theta) * self.dt


class RecordingObserver(FleetObserver):
    """Keeps every forwarded event in arrival order."""

    def __init__(self):
        self.events = []

    def on_pose(self, name, sample):
        self.events.append(("pose", name, sample))

    def on_fleet_cleared(self):
        self.events.append(("cleared",))

    def poses_for(self, name):
        return [e[2] for e in self.events if e[0] == "pose" and e[1] == name]

    @property
    def clear_events(self):
        return sum(1 for e in self.events if e[0] == "cleared")


@pytest.fixture
def fast_config():
    return {section: dict(values) for section, values in FAST_CONFIG.items()}


@pytest.fixture
def bus():
    return PoseFeedBus()


@pytest.fixture
def host(bus, fast_config):
    h = SimulatedHost(bus, fast_config)
    yield h
    h.close()


@pytest.fixture
def make_kinematic_agent():
    return KinematicAgent


@pytest.fixture
def recorder():
    return RecordingObserver()
