"""Tests for FleetObserver and PoseTable."""

from turtlefleet.observers import FleetObserver, PoseTable
from turtlefleet.types import PoseSample


class TestFleetObserver:
    def test_base_methods_are_noops(self):
        observer = FleetObserver()
        observer.on_pose("turtle3", PoseSample(1.0, 1.0, 0.0))
        observer.on_fleet_cleared()


class TestPoseTable:
    def test_keeps_latest_pose(self):
        table = PoseTable()
        table.on_pose("turtle3", PoseSample(1.0, 1.0, 0.0))
        table.on_pose("turtle3", PoseSample(2.0, 1.0, 0.0))
        assert table.get("turtle3").x == 2.0

    def test_names_sorted(self):
        table = PoseTable()
        table.on_pose("turtle4", PoseSample(1.0, 1.0, 0.0))
        table.on_pose("turtle3", PoseSample(1.0, 1.0, 0.0))
        assert table.names() == ["turtle3", "turtle4"]

    def test_cleared_on_fleet_cleared(self):
        table = PoseTable()
        table.on_pose("turtle3", PoseSample(1.0, 1.0, 0.0))
        table.on_fleet_cleared()
        assert table.get("turtle3") is None
        assert table.clear_count == 1

    def test_snapshot_is_plain_dicts(self):
        table = PoseTable()
        table.on_pose("turtle3", PoseSample(1.0, 2.0, 0.5))
        assert table.snapshot() == {
            "turtle3": {
                "x": 1.0,
                "y": 2.0,
                "theta": 0.5,
                "angular_velocity": 0.0,
                "linear_velocity": 0.0,
            }
        }
