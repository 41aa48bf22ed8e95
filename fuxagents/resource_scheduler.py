"""Admission control for new agents based on slots and host load."""

from __future__ import annotations

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path

from .types import AgentConfig, AgentError, SystemStatus

_DEFAULT_MEMORY_PERCENT = 50.0
_DEFAULT_CPU_PERCENT = 25.0


def read_memory_usage(meminfo_path: str | Path = "/proc/meminfo") -> float:
    """Percentage of memory in use per a meminfo file, or 50.0 if unavailable."""
    try:
        content = Path(meminfo_path).read_text()
    except OSError:
        return _DEFAULT_MEMORY_PERCENT

    def _value(line: str) -> int:
        fields = line.split()
        try:
            return int(fields[1])
        except (IndexError, ValueError):
            return 0

    total_kb = available_kb = 0
    for line in content.splitlines():
        if line.startswith("MemTotal:"):
            total_kb = _value(line)
        elif line.startswith("MemAvailable:"):
            available_kb = _value(line)
    if total_kb > 0:
        used_kb = max(total_kb - available_kb, 0)
        return used_kb / total_kb * 100.0
    return _DEFAULT_MEMORY_PERCENT


def read_cpu_usage(loadavg_path: str | Path = "/proc/loadavg") -> float:
    """One-minute load per CPU as a percentage, or 25.0 if unavailable."""
    try:
        fields = Path(loadavg_path).read_text().split()
        load = float(fields[0])
    except (OSError, IndexError, ValueError):
        return _DEFAULT_CPU_PERCENT
    cpu_count = os.cpu_count() or 1
    return load / cpu_count * 100.0


class ResourceScheduler:
    """Counts agent slots and refuses new agents when limits are exceeded."""

    def __init__(
        self,
        config: AgentConfig | None = None,
        meminfo_path: str | Path = "/proc/meminfo",
        loadavg_path: str | Path = "/proc/loadavg",
    ) -> None:
        self.config = config or AgentConfig()
        self._meminfo_path = meminfo_path
        self._loadavg_path = loadavg_path
        self._active_agents = 0
        self._memory_usage_percent = 0.0
        self._cpu_usage_percent = 0.0
        self.start_time = datetime.now(timezone.utc)

    def can_create_agent(self) -> bool:
        if self._active_agents >= self.config.max_agents:
            return False
        return (
            self._memory_usage_percent < self.config.memory_limit_percent
            and self._cpu_usage_percent < self.config.cpu_limit_percent
        )

    def reserve_agent_slot(self) -> None:
        if not self.can_create_agent():
            raise AgentError("Resource limits exceeded, cannot create new agent")
        self._active_agents += 1

    def release_agent_slot(self) -> None:
        if self._active_agents > 0:
            self._active_agents -= 1

    def active_agent_count(self) -> int:
        return self._active_agents

    def update_system_stats(self) -> None:
        self._memory_usage_percent = read_memory_usage(self._meminfo_path)
        self._cpu_usage_percent = read_cpu_usage(self._loadavg_path)

    def system_status(self, message_count: int) -> SystemStatus:
        uptime = datetime.now(timezone.utc) - self.start_time
        return SystemStatus(
            active_agents=self._active_agents,
            max_agents=self.config.max_agents,
            memory_usage_percent=self._memory_usage_percent,
            cpu_usage_percent=self._cpu_usage_percent,
            uptime_seconds=int(uptime.total_seconds()),
            messages_processed=message_count,
        )

    async def monitor(self) -> None:
        """Refresh system statistics forever at the configured interval."""
        while True:
            self.update_system_stats()
            await asyncio.sleep(self.config.health_check_interval_seconds)