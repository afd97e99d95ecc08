"""External observers of the fleet.

Observers receive forwarded pose samples for live agents and a single
"fleet cleared" signal each time the fleet is replaced.  Transports
(websockets, map renderers, databases) implement :class:`FleetObserver`.
"""

import threading
from typing import Dict, List, Optional

from .types import PoseSample

__all__ = ["FleetObserver", "PoseTable"]


class FleetObserver:
    """Base class for external observers. Override what you need."""

    def on_pose(self, name: str, sample: PoseSample) -> None:
        """Called with each forwarded sample of a live agent."""

    def on_fleet_cleared(self) -> None:
        """Called once after the previous fleet has been torn down."""


class PoseTable(FleetObserver):
    """Latest pose per live agent, cleared whenever the fleet is replaced.

    Thread-safe; :meth:`snapshot` returns plain dicts suitable for JSON.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._poses: Dict[str, PoseSample] = {}
        self.clear_count = 0

    def on_pose(self, name: str, sample: PoseSample) -> None:
        with self._lock:
            self._poses[name] = sample

    def on_fleet_cleared(self) -> None:
        with self._lock:
            self._poses.clear()
            self.clear_count += 1

    def get(self, name: str) -> Optional[PoseSample]:
        with self._lock:
            return self._poses.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._poses)

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return {name: pose.to_dict() for name, pose in self._poses.items()}

