"""Heartbeat tracking and timeout detection for agents."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from .types import AgentConfig, AgentStatus, StatusKind

log = logging.getLogger(__name__)

_HEALTHY = {StatusKind.RUNNING, StatusKind.IDLE, StatusKind.BUSY}


@dataclass
class HealthSummary:
    """Counts of agents by health, plus total heartbeat messages."""

    total_agents: int = 0
    healthy_agents: int = 0
    unhealthy_agents: int = 0
    timed_out_agents: int = 0
    total_messages: int = 0


@dataclass
class _AgentHealth:
    last_heartbeat: float
    timeout: float
    status: AgentStatus
    message_count: int = 0


class HealthMonitor:
    """Tracks agent heartbeats; timed-out agent ids are put on ``timeouts``."""

    def __init__(
        self,
        config: AgentConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or AgentConfig()
        self.timeouts: asyncio.Queue[str] = asyncio.Queue()
        self._clock = clock
        self._health: dict[str, _AgentHealth] = {}

    def register_agent(self, agent_id: str, timeout: float | None = None) -> None:
        seconds = self.config.default_timeout_seconds if timeout is None else timeout
        self._health[agent_id] = _AgentHealth(
            last_heartbeat=self._clock(),
            timeout=seconds,
            status=AgentStatus(StatusKind.STARTING),
        )

    def unregister_agent(self, agent_id: str) -> None:
        self._health.pop(agent_id, None)

    def update_heartbeat(self, agent_id: str, status: AgentStatus) -> None:
        health = self._health.get(agent_id)
        if health is not None:
            health.last_heartbeat = self._clock()
            health.status = status
            health.message_count += 1

    def agent_status(self, agent_id: str) -> AgentStatus | None:
        health = self._health.get(agent_id)
        return None if health is None else health.status

    def all_agent_statuses(self) -> dict[str, AgentStatus]:
        return {agent_id: health.status for agent_id, health in self._health.items()}

    def check_timeouts(self) -> list[str]:
        """Mark agents whose heartbeat is overdue and report them; returns their ids."""
        now = self._clock()
        timed_out = [
            agent_id
            for agent_id, health in self._health.items()
            if now - health.last_heartbeat > health.timeout
        ]
        for agent_id in timed_out:
            log.warning("Agent %s timed out", agent_id)
            self._health[agent_id].status = AgentStatus.error("Timeout")
            self.timeouts.put_nowait(agent_id)
        return timed_out

    async def monitor(self) -> None:
        """Check for timeouts forever at the configured interval."""
        while True:
            self.check_timeouts()
            await asyncio.sleep(self.config.health_check_interval_seconds)

    def health_summary(self) -> HealthSummary:
        summary = HealthSummary(total_agents=len(self._health))
        for health in self._health.values():
            summary.total_messages += health.message_count
            if health.status.kind in _HEALTHY:
                summary.healthy_agents += 1
            elif health.status.is_timeout:
                summary.timed_out_agents += 1
            else:
                summary.unhealthy_agents += 1
        return summary