import asyncio

import pytest

from fuxagents.health_monitor import HealthMonitor, HealthSummary
from fuxagents.types import AgentConfig, AgentStatus, StatusKind


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def monitor(clock):
    return HealthMonitor(AgentConfig(), clock=clock)


def test_register_starts_in_starting(monitor):
    monitor.register_agent("a")
    assert monitor.agent_status("a") == AgentStatus(StatusKind.STARTING)


def test_unknown_agent_status_is_none(monitor):
    assert monitor.agent_status("ghost") is None


def test_update_heartbeat_changes_status(monitor):
    monitor.register_agent("a")
    monitor.update_heartbeat("a", AgentStatus(StatusKind.BUSY))
    assert monitor.all_agent_statuses() == {"a": AgentStatus(StatusKind.BUSY)}


def test_update_heartbeat_ignores_unknown(monitor):
    monitor.update_heartbeat("ghost", AgentStatus(StatusKind.BUSY))
    assert monitor.all_agent_statuses() == {}


def test_unregister_removes(monitor):
    monitor.register_agent("a")
    monitor.unregister_agent("a")
    assert monitor.agent_status("a") is None


def test_default_timeout_applies(monitor, clock):
    monitor.register_agent("a")
    clock.now += monitor.config.default_timeout_seconds
    assert monitor.check_timeouts() == []
    clock.now += 1
    assert monitor.check_timeouts() == ["a"]


def test_timeout_marks_error_and_queues(monitor, clock):
    monitor.register_agent("a", timeout=5)
    monitor.register_agent("b", timeout=50)
    clock.now += 10
    assert monitor.check_timeouts() == ["a"]
    assert monitor.agent_status("a").is_timeout
    assert monitor.agent_status("b") == AgentStatus(StatusKind.STARTING)
    assert monitor.timeouts.get_nowait() == "a"
    assert monitor.timeouts.empty()


def test_heartbeat_resets_timeout(monitor, clock):
    monitor.register_agent("a", timeout=5)
    clock.now += 4
    monitor.update_heartbeat("a", AgentStatus(StatusKind.RUNNING))
    clock.now += 4
    assert monitor.check_timeouts() == []


def test_health_summary(monitor, clock):
    monitor.register_agent("run", timeout=100)
    monitor.register_agent("idle", timeout=100)
    monitor.register_agent("start", timeout=100)
    monitor.register_agent("late", timeout=1)
    monitor.update_heartbeat("run", AgentStatus(StatusKind.RUNNING))
    monitor.update_heartbeat("run", AgentStatus(StatusKind.RUNNING))
    monitor.update_heartbeat("idle", AgentStatus(StatusKind.IDLE))
    clock.now += 2
    monitor.check_timeouts()
    summary = monitor.health_summary()
    assert summary == HealthSummary(
        total_agents=4,
        healthy_agents=2,
        unhealthy_agents=1,
        timed_out_agents=1,
        total_messages=3,
    )


def test_summary_counts_partition_agents(monitor):
    monitor.register_agent("a")
    monitor.update_heartbeat("a", AgentStatus.error("crash"))
    monitor.register_agent("b")
    summary = monitor.health_summary()
    assert (
        summary.healthy_agents + summary.unhealthy_agents + summary.timed_out_agents
        == summary.total_agents
    )
    assert summary.unhealthy_agents == summary.total_agents


@pytest.mark.asyncio
async def test_monitor_reports_timeouts(clock):
    monitor = HealthMonitor(AgentConfig(health_check_interval_seconds=0.01), clock=clock)
    monitor.register_agent("a", timeout=1)
    clock.now += 2
    task = asyncio.create_task(monitor.monitor())
    try:
        agent_id = await asyncio.wait_for(monitor.timeouts.get(), 1)
    finally:
        task.cancel()
    assert agent_id == "a"