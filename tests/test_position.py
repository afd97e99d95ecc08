"""Tests for PositionController and its overshoot rule."""

import math

import pytest

from turtlefleet.control.position import MAX_LINEAR_VELOCITY, PositionController, bearing_to
from turtlefleet.types import STOP


class TestBearing:
    def test_bearing_east(self):
        assert bearing_to(0, 0, 1, 0) == pytest.approx(0.0)

    def test_bearing_north(self):
        assert bearing_to(1, 1, 1, 3) == pytest.approx(math.pi / 2)


class TestPositionStep:
    def test_within_tolerance_is_done(self):
        ctrl = PositionController()
        step = ctrl.step(1.0, 1.0, 0.0, 1.001, 1.0)
        assert step.done is True
        assert step.command == STOP

    def test_goal_ahead_drives_forward(self):
        ctrl = PositionController()
        step = ctrl.step(0.0, 0.0, 0.0, 0.5, 0.0)
        assert step.command.linear == pytest.approx(1.0)
        assert step.command.angular == pytest.approx(0.0)

    def test_forward_output_clamped(self):
        ctrl = PositionController()
        step = ctrl.step(0.0, 0.0, 0.0, 5.0, 0.0)
        assert step.command.linear == pytest.approx(MAX_LINEAR_VELOCITY)

    def test_goal_behind_reverses_without_turning(self):
        ctrl = PositionController()
        step = ctrl.step(1.0, 0.0, 0.0, 0.0, 0.0)
        assert step.command.angular == 0.0
        assert step.error == pytest.approx(-1.0)
        assert step.command.linear == pytest.approx(-2.0)

    def test_reverse_output_not_clamped(self):
        ctrl = PositionController()
        step = ctrl.step(5.0, 0.0, 0.0, 0.0, 0.0)
        assert step.command.linear == pytest.approx(-10.0)
        assert step.command.linear < -MAX_LINEAR_VELOCITY

    def test_steers_by_bearing_error(self):
        ctrl = PositionController()
        step = ctrl.step(0.0, 0.0, 0.0, 1.0, 0.5)
        assert step.command.angular == pytest.approx(math.atan2(0.5, 1.0))

    def test_exactly_right_angle_still_steers(self):
        ctrl = PositionController()
        step = ctrl.step(0.0, 0.0, 0.0, 0.0, 1.0)
        assert step.command.angular == pytest.approx(math.pi / 2)
        assert step.error > 0


class TestPositionConvergence:
    def test_reaches_goal_straight_ahead(self):
        ctrl = PositionController(tick=0.01)
        x, y, theta = 0.0, 0.0, 0.0
        for _ in range(5000):
            step = ctrl.step(x, y, theta, 3.0, 0.0)
            if step.done:
                break
            theta += step.command.angular * 0.01
            x += step.command.linear * math.cos(theta) * 0.01
            y += step.command.linear * math.sin(theta) * 0.01
        assert step.done
        assert math.hypot(3.0 - x, y) < ctrl.tolerance
