"""Tests for PoseFeedBus — pub/sub, latest cache, thread safety."""

import threading

from turtlefleet.feed import PoseFeedBus
from turtlefleet.types import PoseSample


SAMPLE = PoseSample(x=1.0, y=2.0, theta=0.5)


class TestPoseFeedBus:
    def test_subscriber_receives_sample(self):
        bus = PoseFeedBus()
        got = []
        bus.subscribe("turtle3", lambda name, s: got.append((name, s)))
        assert bus.publish("turtle3", SAMPLE) == 1
        assert got == [("turtle3", SAMPLE)]

    def test_other_topics_not_delivered(self):
        bus = PoseFeedBus()
        got = []
        bus.subscribe("turtle3", lambda name, s: got.append(name))
        bus.publish("turtle4", SAMPLE)
        assert got == []

    def test_unsubscribe_stops_delivery(self):
        bus = PoseFeedBus()
        got = []
        sub_id = bus.subscribe("turtle3", lambda name, s: got.append(name))
        bus.unsubscribe(sub_id)
        bus.publish("turtle3", SAMPLE)
        assert got == []
        assert bus.topics() == []

    def test_unsubscribe_unknown_is_noop(self):
        bus = PoseFeedBus()
        bus.unsubscribe("does-not-exist")

    def test_failing_subscriber_does_not_block_others(self):
        bus = PoseFeedBus()
        got = []

        def boom(name, sample):
            raise RuntimeError("boom")

        bus.subscribe("t", boom)
        bus.subscribe("t", lambda name, s: got.append(s))
        assert bus.publish("t", SAMPLE) == 2
        assert got == [SAMPLE]

    def test_latest_and_forget(self):
        bus = PoseFeedBus()
        bus.publish("t", SAMPLE)
        assert bus.latest("t") == SAMPLE
        bus.forget("t")
        assert bus.latest("t") is None

    def test_subscriber_count(self):
        bus = PoseFeedBus()
        bus.subscribe("t", lambda n, s: None)
        bus.subscribe("t", lambda n, s: None)
        assert bus.subscriber_count("t") == 2
        assert bus.subscriber_count("other") == 0

    def test_concurrent_publish(self):
        bus = PoseFeedBus()
        count = []
        lock = threading.Lock()

        def cb(name, sample):
            with lock:
                count.append(1)

        bus.subscribe("t", cb)
        threads = [
            threading.Thread(target=lambda: [bus.publish("t", SAMPLE) for _ in range(100)])
            for _ in range(5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(count) == 500
