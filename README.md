# fuxagents

An asyncio runtime for running many small agents side by side. Each agent gets
an inbox, a generated name, a set of capabilities and a background task. The
runtime keeps track of agents, routes messages to them, watches their
heartbeats for timeouts and limits how many may run by configured limits and by
host memory and CPU load.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `fuxagents.types`: `Agent` (with `to_dict` / `from_dict`), `AgentStatus` and
  `StatusKind`, `AgentMessage`, `MessageType`, `CreateAgentRequest` (with
  `from_dict`), `AgentConfig`, `SystemStatus`, and the `AgentError` exception
  raised wherever an agent operation fails.
- `fuxagents.message_bus.MessageBus`: registers agent inboxes
  (`asyncio.Queue`s), sends to one agent (`send_to_agent`) or to all
  (`send_to_all_agents`), queues broadcasts on its `broadcasts` queue and counts
  delivered messages (`message_count`).
- `fuxagents.health_monitor.HealthMonitor`: records heartbeats; `check_timeouts`
  marks agents whose last heartbeat is older than their timeout as
  `Error: Timeout` and puts their ids on the `timeouts` queue;
  `health_summary` returns a `HealthSummary`.
- `fuxagents.resource_scheduler.ResourceScheduler`: reserves and releases agent
  slots against `AgentConfig.max_agents` and the memory and CPU limits. Load is
  read with `read_memory_usage` (a meminfo file, 50.0 if unreadable) and
  `read_cpu_usage` (a loadavg file, 25.0 if unreadable).
- `fuxagents.agent_text`: `default_capabilities`, `tool_instructions` and
  `generate_agent_name` for each agent type (`search`, `goose`, `enhanced`,
  `combined`, `chat`, anything else is general), and the clean-up of raw task
  output with `extract_task_results` and `extract_error_message`.
- `fuxagents.agent_runtime`: `AgentContext`, which holds an agent's identity
  and the services it reports through, the service protocols
  `ChatSender`, `ProgressNotifier`, `GooseRunner` and `WebSearcher`,
  `CommandOutcome`, and `run_initial_task`, which works on an agent's first task
  and sends the result to the user.
- `fuxagents.agent_tasks.handle_follow_up`: what a running agent does with a
  task sent to it later.
- `fuxagents.agent_pool`: `AgentPool` creates agents as background tasks running
  `run_agent`, stops them, lists them, updates their status and sends them
  tasks, waiting up to ten seconds (by default) for the reply.
- `fuxagents.agent_manager.AgentManager`: ties the pool, message bus, health
  monitor and resource scheduler together. Used as an async context manager (or
  with `start` and `close`) it runs the monitors and the timeout and broadcast
  handlers in the background.

## Example

```python
import asyncio

from fuxagents.agent_manager import AgentManager
from fuxagents.types import CreateAgentRequest


class PrintChat:
    async def send(self, message: str) -> None:
        print(message)


async def main() -> None:
    async with AgentManager(PrintChat()) as manager:
        agent_id = await manager.create_agent(
            CreateAgentRequest(agent_type="chat", task="say hello")
        )
        reply = await manager.send_message_to_agent(agent_id, "status please")
        print(reply)
        print(manager.health_summary())
        manager.stop_agent(agent_id)


asyncio.run(main())
```

`AgentManager` also takes an optional `ProgressNotifier`, `GooseRunner`,
`WebSearcher` and `AgentConfig`, and, for tests, a random generator, a sleep
function, a clock and the paths of the meminfo and loadavg files.

Agents that are running or busy and whose last activity is more than ten
seconds old are marked stopped by `detect_and_mark_completed_agents`, and
`cleanup_stopped_agents` removes them from the pool. `can_create_agent` is
false, and `create_agent` raises `AgentError`, once the slot limit is reached or
the measured memory or CPU use is at or above its limit.

## What this package does not do

It provides no command-line program, no tool server and no network transport.
Delivering chat and progress messages, running development sessions and
performing web searches are left to the objects you pass in as `ChatSender`,
`ProgressNotifier`, `GooseRunner` and `WebSearcher`; without a `GooseRunner` or
`WebSearcher`, those steps report that the service is not configured.