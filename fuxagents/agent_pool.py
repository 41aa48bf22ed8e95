"""The pool of running agents: creation, messaging, status and shutdown."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import random
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from .agent_runtime import (
    AgentContext,
    ChatSender,
    GooseRunner,
    ProgressNotifier,
    WebSearcher,
    run_initial_task,
)
from .agent_tasks import handle_follow_up
from .agent_text import default_capabilities, generate_agent_name, tool_instructions
from .types import (
    Agent,
    AgentError,
    AgentMessage,
    AgentStatus,
    CreateAgentRequest,
    MessageType,
    StatusKind,
)

log = logging.getLogger(__name__)

_STOP = "STOP"
_HEARTBEAT_SECONDS = 15.0
_RESPONSE_TIMEOUT_SECONDS = 10.0


def _stop_message(agent_id: str) -> AgentMessage:
    return AgentMessage(MessageType.STATUS, _STOP, to_agent=agent_id)


async def run_agent(
    context: AgentContext,
    task: str,
    instructions: str,
    inbox: asyncio.Queue[AgentMessage],
) -> None:
    """Run an agent: do its initial task, then serve its inbox until told to stop."""
    name, agent_id = context.agent_name, context.agent_id
    if instructions:
        context.instructions = instructions
    log.info("Starting agent %s (%s) of type %s", name, agent_id, context.agent_type)
    log.info("Agent %s (%s) tool instructions: %s", name, agent_id, context.instructions)

    await run_initial_task(context, task)

    while True:
        try:
            message = await asyncio.wait_for(inbox.get(), _HEARTBEAT_SECONDS)
        except asyncio.TimeoutError:
            log.debug("Agent %s heartbeat", agent_id)
            continue

        if message.message_type is MessageType.TASK:
            response = await handle_follow_up(context, message.content)
            if message.reply is not None and not message.reply.done():
                message.reply.set_result(response)
        elif message.message_type is MessageType.STATUS and message.content == _STOP:
            log.info("Agent %s (%s) received stop signal", name, agent_id)
            break
        else:
            log.debug(
                "Agent %s (%s) ignoring message type: %s",
                name,
                agent_id,
                message.message_type,
            )

    log.info("Agent %s (%s) shutting down", name, agent_id)


@dataclass
class _AgentInstance:
    agent: Agent
    inbox: asyncio.Queue[AgentMessage]
    task: asyncio.Task[None]


def _snapshot(agent: Agent) -> Agent:
    return dataclasses.replace(
        agent,
        capabilities=list(agent.capabilities),
        metadata=dict(agent.metadata),
    )


class AgentPool:
    """Creates agents as background tasks and keeps track of them."""

    def __init__(
        self,
        chat: ChatSender,
        notifier: ProgressNotifier | None = None,
        goose: GooseRunner | None = None,
        searcher: WebSearcher | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        response_timeout: float = _RESPONSE_TIMEOUT_SECONDS,
    ) -> None:
        self._chat = chat
        self._notifier = notifier
        self._goose = goose
        self._searcher = searcher
        self._rng = rng
        self._sleep = sleep
        self._response_timeout = response_timeout
        self._agents: dict[str, _AgentInstance] = {}

    def active_agent_count(self) -> int:
        """Number of agents that are not stopped."""
        return sum(
            1 for inst in self._agents.values() if inst.agent.status.kind is not StatusKind.STOPPED
        )

    def all_agents_completed(self) -> bool:
        """True when every agent is stopped, or there are none."""
        return all(inst.agent.status.kind is StatusKind.STOPPED for inst in self._agents.values())

    def cleanup_stopped_agents(self) -> int:
        """Remove stopped agents, closing their inboxes; returns how many were removed."""
        stopped = [
            agent_id
            for agent_id, inst in self._agents.items()
            if inst.agent.status.kind is StatusKind.STOPPED
        ]
        for agent_id in stopped:
            instance = self._agents.pop(agent_id)
            instance.inbox.put_nowait(_stop_message(agent_id))
        if stopped:
            log.info("Cleaned up %d stopped agents", len(stopped))
        return len(stopped)

    async def create_agent(self, request: CreateAgentRequest) -> str:
        """Start a new agent working on the request's task; returns its id."""
        agent_id = str(uuid.uuid4())
        name = generate_agent_name(request.agent_type, self._rng)
        capabilities = (
            default_capabilities(request.agent_type)
            if request.capabilities is None
            else list(request.capabilities)
        )
        agent = Agent(
            id=agent_id,
            name=name,
            agent_type=request.agent_type,
            task=request.task,
            status=AgentStatus(StatusKind.STARTING),
            capabilities=capabilities,
            metadata=dict(request.metadata or {}),
        )
        instructions = tool_instructions(request.agent_type, capabilities)
        context = AgentContext(
            agent_id=agent_id,
            agent_name=name,
            agent_type=request.agent_type,
            chat=self._chat,
            notifier=self._notifier,
            goose=self._goose,
            searcher=self._searcher,
            instructions=instructions,
            sleep=self._sleep,
        )
        inbox: asyncio.Queue[AgentMessage] = asyncio.Queue()
        task = asyncio.create_task(
            run_agent(context, request.task, instructions, inbox),
            name=f"agent-{agent_id}",
        )
        agent.status = AgentStatus(StatusKind.RUNNING)
        self._agents[agent_id] = _AgentInstance(agent, inbox, task)
        return agent_id

    def stop_agent(self, agent_id: str) -> bool:
        """Stop and forget an agent; returns whether it existed."""
        instance = self._agents.pop(agent_id, None)
        if instance is None:
            return False
        instance.task.cancel()
        instance.inbox.put_nowait(_stop_message(agent_id))
        return True

    async def send_message_to_agent(self, agent_id: str, content: str) -> str:
        """Give a running agent a task and wait for its short response."""
        instance = self._agents.get(agent_id)
        if instance is None:
            raise AgentError(f"Agent {agent_id} not found")
        reply: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        instance.inbox.put_nowait(
            AgentMessage(MessageType.TASK, content, to_agent=agent_id, reply=reply)
        )
        try:
            return await asyncio.wait_for(reply, self._response_timeout)
        except asyncio.TimeoutError as exc:
            raise AgentError("Timeout waiting for agent response") from exc

    def list_agents(self) -> list[Agent]:
        return [_snapshot(inst.agent) for inst in self._agents.values()]

    def get_agent(self, agent_id: str) -> Agent | None:
        instance = self._agents.get(agent_id)
        return None if instance is None else _snapshot(instance.agent)

    async def update_agent_status(self, agent_id: str, status: AgentStatus) -> None:
        """Set an agent's status; a stopped agent is announced on the progress channel."""
        instance = self._agents.get(agent_id)
        if instance is None:
            return
        instance.agent.status = status
        instance.agent.last_active = datetime.now(timezone.utc)
        if status.kind is not StatusKind.STOPPED:
            return
        name = instance.agent.name
        log.info("Agent %s (%s) marked as completed and stopped", name, agent_id)
        if self._notifier is not None:
            try:
                await self._notifier.notify(
                    f"✅ Agent {name} has completed its task and stopped"
                )
            except Exception as exc:  # noqa: BLE001 - notification is best effort
                log.debug("Completion notice for %s failed: %s", name, exc)

    def agent_queue(self, agent_id: str) -> asyncio.Queue[AgentMessage] | None:
        """The inbox of an agent, for routing messages to it."""
        instance = self._agents.get(agent_id)
        return None if instance is None else instance.inbox