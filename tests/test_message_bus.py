import asyncio

import pytest

from fuxagents.message_bus import MessageBus
from fuxagents.types import AgentError, AgentMessage, MessageType


def _message(content="hello", message_id="m1"):
    return AgentMessage(MessageType.TASK, content, id=message_id)


def test_register_and_list():
    bus = MessageBus()
    bus.register_agent("a", asyncio.Queue())
    bus.register_agent("b", asyncio.Queue())
    assert sorted(bus.active_agents()) == ["a", "b"]
    bus.unregister_agent("a")
    assert bus.active_agents() == ["b"]


def test_unregister_unknown_is_harmless():
    bus = MessageBus()
    bus.unregister_agent("ghost")
    assert bus.active_agents() == []


def test_send_to_agent_delivers_and_counts():
    bus = MessageBus()
    queue = asyncio.Queue()
    bus.register_agent("a", queue)
    message = _message()
    bus.send_to_agent("a", message)
    assert queue.get_nowait() is message
    assert bus.message_count() == 1


def test_send_to_unknown_agent():
    bus = MessageBus()
    with pytest.raises(AgentError, match="Agent ghost not found"):
        bus.send_to_agent("ghost", _message())
    assert bus.message_count() == 0


def test_send_to_full_queue_fails():
    bus = MessageBus()
    queue = asyncio.Queue(maxsize=1)
    queue.put_nowait(_message())
    bus.register_agent("a", queue)
    with pytest.raises(AgentError):
        bus.send_to_agent("a", _message())
    assert bus.message_count() == 0


def test_broadcast_goes_to_broadcast_queue():
    bus = MessageBus()
    message = _message()
    bus.broadcast(message)
    assert bus.broadcasts.get_nowait() is message
    assert bus.message_count() == 1


def test_send_to_all_agents_suffixes_ids():
    bus = MessageBus()
    queues = {name: asyncio.Queue() for name in ("a", "b")}
    for name, queue in queues.items():
        bus.register_agent(name, queue)
    bus.send_to_all_agents(_message("hi", "m1"))
    for name, queue in queues.items():
        received = queue.get_nowait()
        assert received.id == f"m1-{name}"
        assert received.content == "hi"
    assert bus.message_count() == 1


def test_send_to_all_agents_reports_failures():
    bus = MessageBus()
    good = asyncio.Queue()
    full = asyncio.Queue(maxsize=1)
    full.put_nowait(_message())
    bus.register_agent("good", good)
    bus.register_agent("full", full)
    with pytest.raises(AgentError, match="Failed to send to some agents"):
        bus.send_to_all_agents(_message("x", "m2"))
    assert good.get_nowait().id == "m2-good"
    assert bus.message_count() == 0