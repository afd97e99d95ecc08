"""Thread-safe per-agent pose pub/sub.

Hosts publish one :class:`~turtlefleet.types.PoseSample` per agent per
publish interval.  Each agent subscribes to its own topic to close the
control loop; the coordinator adds a second, liveness-gated subscription
that forwards samples to external observers.

Subscriptions are explicit: :meth:`PoseFeedBus.subscribe` returns an ID
that must be handed back to :meth:`PoseFeedBus.unsubscribe`.
"""

import logging
import threading
import uuid
from typing import Callable, Dict, List, Optional

from .types import PoseSample

logger = logging.getLogger("TurtleFleet.PoseFeed")

PoseCallback = Callable[[str, PoseSample], None]


class PoseFeedBus:
    """Pose samples keyed by agent name, delivered to explicit subscribers.

    All methods are safe to call from multiple threads simultaneously.
    Callbacks run synchronously in subscription order, outside the lock.

    Example::

        bus = PoseFeedBus()
        sub_id = bus.subscribe("turtle3", lambda name, pose: print(name, pose.x))
        bus.publish("turtle3", PoseSample(x=1.0, y=2.0, theta=0.0))
        bus.unsubscribe(sub_id)
    """

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        # name → {sub_id → callback}
        self._subscribers: Dict[str, Dict[str, PoseCallback]] = {}
        self._latest: Dict[str, PoseSample] = {}

    # ------------------------------------------------------------------
    # Pub/sub
    # ------------------------------------------------------------------

    def subscribe(self, name: str, callback: PoseCallback) -> str:
        """Register *callback* for pose samples of agent *name*.

        Args:
            name: Agent name (topic).
            callback: Callable with signature ``(name: str, sample: PoseSample) -> None``.

        Returns:
            Subscription ID string — pass to :meth:`unsubscribe` to remove.
        """
        sub_id = str(uuid.uuid4())
        with self._lock:
            self._subscribers.setdefault(name, {})[sub_id] = callback
        logger.debug(f"Subscribed {sub_id[:8]} to '{name}'")
        return sub_id

    def unsubscribe(self, sub_id: str) -> None:
        """Remove a subscription by its ID.

        Safe to call with an unknown ID (no-op).
        """
        with self._lock:
            for name, subs in list(self._subscribers.items()):
                if sub_id in subs:
                    del subs[sub_id]
                    if not subs:
                        del self._subscribers[name]
                    return

    def publish(self, name: str, sample: PoseSample) -> int:
        """Deliver *sample* to every subscriber of *name*.

        A subscriber that raises is logged and skipped; the others still
        receive the sample.

        Returns:
            Number of callbacks invoked.
        """
        with self._lock:
            self._latest[name] = sample
            callbacks = list(self._subscribers.get(name, {}).values())

        for cb in callbacks:
            try:
                cb(name, sample)
            except Exception as exc:
                logger.warning(f"Pose subscriber error for '{name}': {exc}")
        return len(callbacks)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def latest(self, name: str) -> Optional[PoseSample]:
        """Most recent sample published for *name*, or ``None``."""
        with self._lock:
            return self._latest.get(name)

    def forget(self, name: str) -> None:
        """Drop the cached latest sample for *name* (subscriptions are untouched)."""
        with self._lock:
            self._latest.pop(name, None)

    def topics(self) -> List[str]:
        """Names that currently have at least one subscriber."""
        with self._lock:
            return list(self._subscribers.keys())

    def subscriber_count(self, name: str) -> int:
        with self._lock:
            return len(self._subscribers.get(name, {}))
