"""Tests for LifecycleGateway — guarded requests, timeouts, continuations."""

import logging

import pytest

from turtlefleet.gateway import GatewayResult, LifecycleGateway
from turtlefleet.types import KillRequest, SpawnRequest


# ---------------------------------------------------------------------------
# Available host
# ---------------------------------------------------------------------------


class TestGatewayOk:
    @pytest.mark.asyncio
    async def test_create_spawns_and_calls_continuation(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        responses = []
        result = await gateway.create("turtle3", 1.0, 2.0, 0.0, on_done=responses.append)
        assert result is GatewayResult.OK
        assert result.ok
        assert responses == [{"name": "turtle3"}]
        assert host.has_agent("turtle3")
        assert host.requests[-1] == ("/spawn", SpawnRequest("turtle3", 1.0, 2.0, 0.0))

    @pytest.mark.asyncio
    async def test_destroy(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        await gateway.create("turtle3", 1.0, 1.0)
        assert await gateway.destroy("turtle3") is GatewayResult.OK
        assert not host.has_agent("turtle3")
        assert host.requests[-1] == ("/kill", KillRequest("turtle3"))

    @pytest.mark.asyncio
    async def test_teleport_absolute(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        await gateway.create("turtle3", 1.0, 1.0)
        assert await gateway.teleport_absolute("turtle3", 4.0, 5.0, 1.0) is GatewayResult.OK
        pose = host.pose_of("turtle3")
        assert (pose.x, pose.y, pose.theta) == pytest.approx((4.0, 5.0, 1.0))

    @pytest.mark.asyncio
    async def test_teleport_relative(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        await gateway.create("turtle3", 1.0, 1.0, 0.0)
        assert await gateway.teleport_relative("turtle3", 2.0, 0.0) is GatewayResult.OK
        assert host.pose_of("turtle3").x == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_set_pen(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        await gateway.create("turtle3", 1.0, 1.0)
        assert await gateway.set_pen("turtle3", 255, 0, 0, 2, False) is GatewayResult.OK
        assert host.pen_of("turtle3") == {"r": 255, "g": 0, "b": 0, "width": 2, "off": False}

    def test_default_timeout(self, host):
        assert LifecycleGateway(host).timeout_s == 2.0


# ---------------------------------------------------------------------------
# Unavailable / rejecting host
# ---------------------------------------------------------------------------


class TestGatewayFailures:
    @pytest.mark.asyncio
    async def test_unavailable_service_returns_result_without_raising(
        self, host, fast_config, caplog
    ):
        host.set_available(False)
        gateway = LifecycleGateway(host, fast_config)
        called = []
        with caplog.at_level(logging.WARNING, logger="TurtleFleet.Gateway"):
            result = await gateway.create("turtle3", 1.0, 1.0, on_done=called.append)
        assert result is GatewayResult.SERVICE_UNAVAILABLE
        assert not result.ok
        assert called == []
        assert not host.has_agent("turtle3")
        assert "Service not available: /spawn" in caplog.text

    @pytest.mark.asyncio
    async def test_single_service_down(self, host, fast_config):
        host.set_available(False, service="/kill")
        gateway = LifecycleGateway(host, fast_config)
        assert await gateway.create("turtle3", 1.0, 1.0) is GatewayResult.OK
        assert await gateway.destroy("turtle3") is GatewayResult.SERVICE_UNAVAILABLE
        assert host.has_agent("turtle3")

    @pytest.mark.asyncio
    async def test_per_agent_service_missing_for_unknown_agent(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        result = await gateway.set_pen("ghost", 0, 0, 0, 1, True)
        assert result is GatewayResult.SERVICE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_duplicate_spawn_rejected(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        await gateway.create("turtle3", 1.0, 1.0)
        called = []
        result = await gateway.create("turtle3", 2.0, 2.0, on_done=called.append)
        assert result is GatewayResult.REJECTED
        assert called == []

    @pytest.mark.asyncio
    async def test_raising_continuation_is_logged_not_raised(self, host, fast_config, caplog):
        gateway = LifecycleGateway(host, fast_config)

        def boom(_response):
            raise ZeroDivisionError("division by zero")

        with caplog.at_level(logging.WARNING, logger="TurtleFleet.Gateway"):
            result = await gateway.create("turtle9", 1.0, 1.0, 0.0, on_done=boom)
        assert result is GatewayResult.OK
        assert host.has_agent("turtle9")
        assert "Continuation for /spawn failed" in caplog.text

    @pytest.mark.asyncio
    async def test_kill_unknown_rejected(self, host, fast_config):
        gateway = LifecycleGateway(host, fast_config)
        assert await gateway.destroy("ghost") is GatewayResult.REJECTED
