"""Agent-hosting services the gateway and agents talk to."""

from .base import AgentHost, HostServiceError
from .simulated import SimulatedHost

__all__ = ["AgentHost", "HostServiceError", "SimulatedHost"]
