"""Coordination of the agent pool with health, routing and resource tracking."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path

from .agent_pool import AgentPool
from .agent_runtime import ChatSender, GooseRunner, ProgressNotifier, WebSearcher
from .health_monitor import HealthMonitor, HealthSummary
from .message_bus import MessageBus
from .resource_scheduler import ResourceScheduler
from .types import (
    Agent,
    AgentConfig,
    AgentError,
    AgentMessage,
    AgentStatus,
    CreateAgentRequest,
    MessageType,
    StatusKind,
    SystemStatus,
)

log = logging.getLogger(__name__)

_COMPLETION_IDLE_SECONDS = 10
_WORKING = {StatusKind.RUNNING, StatusKind.BUSY}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AgentManager:
    """Creates, tracks and retires agents, keeping every registry in step.

    Use as an async context manager, or call :meth:`start` and :meth:`close`,
    to run the background monitors and the timeout and broadcast handlers.
    """

    def __init__(
        self,
        chat: ChatSender,
        notifier: ProgressNotifier | None = None,
        goose: GooseRunner | None = None,
        searcher: WebSearcher | None = None,
        config: AgentConfig | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
        meminfo_path: str | Path = "/proc/meminfo",
        loadavg_path: str | Path = "/proc/loadavg",
    ) -> None:
        self.config = config or AgentConfig()
        self.pool = AgentPool(
            chat,
            notifier=notifier,
            goose=goose,
            searcher=searcher,
            rng=rng,
            sleep=sleep,
        )
        self.health_monitor = HealthMonitor(self.config, clock=clock)
        self.message_bus = MessageBus()
        self.resource_scheduler = ResourceScheduler(
            self.config, meminfo_path=meminfo_path, loadavg_path=loadavg_path
        )
        self._now = now
        self._background: list[asyncio.Task[None]] = []

    async def __aenter__(self) -> AgentManager:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def start(self) -> None:
        """Launch monitoring and the handlers for timeouts and broadcasts."""
        if self._background:
            return
        self._background = [
            asyncio.create_task(self.health_monitor.monitor(), name="health-monitor"),
            asyncio.create_task(self.resource_scheduler.monitor(), name="resource-monitor"),
            asyncio.create_task(self._handle_timeouts(), name="timeout-handler"),
            asyncio.create_task(self._handle_broadcasts(), name="broadcast-handler"),
        ]

    async def close(self) -> None:
        """Stop every agent and the background tasks."""
        for agent in self.pool.list_agents():
            self.stop_agent(agent.id)
        tasks, self._background = self._background, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await asyncio.sleep(0)

    async def _handle_timeouts(self) -> None:
        while True:
            agent_id = await self.health_monitor.timeouts.get()
            log.warning("Agent %s timed out, attempting cleanup", agent_id)
            if self.pool.stop_agent(agent_id):
                self._forget(agent_id)
                log.info("Cleaned up timed out agent: %s", agent_id)

    async def _handle_broadcasts(self) -> None:
        while True:
            message = await self.message_bus.broadcasts.get()
            log.debug("Processing broadcast message: %s", message)
            with contextlib.suppress(AgentError):
                self.message_bus.send_to_all_agents(message)

    def _forget(self, agent_id: str) -> None:
        self.health_monitor.unregister_agent(agent_id)
        self.message_bus.unregister_agent(agent_id)
        self.resource_scheduler.release_agent_slot()

    async def create_agent(self, request: CreateAgentRequest) -> str:
        """Reserve a slot and start an agent; returns its id."""
        self.resource_scheduler.reserve_agent_slot()
        try:
            agent_id = await self.pool.create_agent(request)
        except BaseException:
            self.resource_scheduler.release_agent_slot()
            raise

        queue = self.pool.agent_queue(agent_id)
        if queue is not None:
            self.message_bus.register_agent(agent_id, queue)
        self.health_monitor.register_agent(agent_id, request.timeout_seconds)
        self.health_monitor.update_heartbeat(agent_id, AgentStatus(StatusKind.RUNNING))
        log.info("Successfully created agent: %s", agent_id)
        return agent_id

    def stop_agent(self, agent_id: str) -> bool:
        """Stop an agent and drop its registrations; returns whether it existed."""
        stopped = self.pool.stop_agent(agent_id)
        if stopped:
            self._forget(agent_id)
            log.info("Successfully stopped agent: %s", agent_id)
        return stopped

    async def send_message_to_agent(self, agent_id: str, message: str) -> str:
        """Give an agent a task and return its response."""
        response = await self.pool.send_message_to_agent(agent_id, message)
        self.health_monitor.update_heartbeat(agent_id, AgentStatus(StatusKind.BUSY))
        return response

    def list_agents(self) -> list[Agent]:
        return self.pool.list_agents()

    async def detect_and_mark_completed_agents(self) -> int:
        """Mark working agents idle for over ten seconds as stopped; returns how many."""
        completed = 0
        for agent in self.pool.list_agents():
            if agent.status.kind not in _WORKING:
                continue
            idle = int((self._now() - agent.last_active).total_seconds())
            if idle > _COMPLETION_IDLE_SECONDS:
                log.info(
                    "Agent %s appears to have completed its task (idle for %ss), "
                    "marking as stopped",
                    agent.name,
                    idle,
                )
                await self.pool.update_agent_status(agent.id, AgentStatus(StatusKind.STOPPED))
                completed += 1
        return completed

    def cleanup_stopped_agents(self) -> int:
        return self.pool.cleanup_stopped_agents()

    def system_status(self) -> SystemStatus:
        return self.resource_scheduler.system_status(self.message_bus.message_count())

    def broadcast_message(self, message: str) -> None:
        """Send a task to every registered agent."""
        self.message_bus.send_to_all_agents(AgentMessage(MessageType.TASK, message))

    def health_summary(self) -> HealthSummary:
        return self.health_monitor.health_summary()

    def force_cleanup_timed_out_agents(self) -> list[str]:
        """Stop every agent whose health status is a timeout; returns their ids."""
        return [
            agent_id
            for agent_id, status in self.health_monitor.all_agent_statuses().items()
            if status.is_timeout and self.stop_agent(agent_id)
        ]

    def active_agent_count(self) -> int:
        return self.resource_scheduler.active_agent_count()

    def can_create_agent(self) -> bool:
        return self.resource_scheduler.can_create_agent()