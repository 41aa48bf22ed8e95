"""Routing of messages to registered agent inboxes."""

from __future__ import annotations

import asyncio
import dataclasses

from .types import AgentError, AgentMessage


class MessageBus:
    """Delivers messages to agent queues and counts successful deliveries."""

    def __init__(self) -> None:
        self._agents: dict[str, asyncio.Queue[AgentMessage]] = {}
        self.broadcasts: asyncio.Queue[AgentMessage] = asyncio.Queue()
        self._message_count = 0

    def register_agent(self, agent_id: str, queue: asyncio.Queue[AgentMessage]) -> None:
        self._agents[agent_id] = queue

    def unregister_agent(self, agent_id: str) -> None:
        self._agents.pop(agent_id, None)

    def send_to_agent(self, agent_id: str, message: AgentMessage) -> None:
        queue = self._agents.get(agent_id)
        if queue is None:
            raise AgentError(f"Agent {agent_id} not found")
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull as exc:
            raise AgentError(
                f"Failed to send message to agent {agent_id}: queue is full"
            ) from exc
        self._message_count += 1

    def broadcast(self, message: AgentMessage) -> None:
        """Queue a message for later delivery to every agent."""
        try:
            self.broadcasts.put_nowait(message)
        except asyncio.QueueFull as exc:
            raise AgentError("Failed to broadcast message: queue is full") from exc
        self._message_count += 1

    def send_to_all_agents(self, message: AgentMessage) -> None:
        errors = []
        for agent_id, queue in self._agents.items():
            copy = dataclasses.replace(message, id=f"{message.id}-{agent_id}")
            try:
                queue.put_nowait(copy)
            except asyncio.QueueFull:
                errors.append(f"Failed to send to {agent_id}: queue is full")
        if errors:
            raise AgentError(f"Failed to send to some agents: {', '.join(errors)}")
        self._message_count += 1

    def active_agents(self) -> list[str]:
        return list(self._agents)

    def message_count(self) -> int:
        return self._message_count