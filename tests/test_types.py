from datetime import datetime, timezone

import pytest

from fuxagents.types import (
    Agent,
    AgentConfig,
    AgentError,
    AgentMessage,
    AgentStatus,
    CreateAgentRequest,
    MessageType,
    StatusKind,
)


def test_status_display_plain():
    assert str(AgentStatus(StatusKind.RUNNING)) == "Running"
    assert str(AgentStatus(StatusKind.STOPPED)) == "Stopped"


def test_status_display_error():
    assert str(AgentStatus.error("boom")) == "Error: boom"


def test_status_timeout_flag():
    assert AgentStatus.error("Timeout").is_timeout
    assert not AgentStatus.error("other").is_timeout
    assert not AgentStatus(StatusKind.BUSY).is_timeout


@pytest.mark.parametrize("kind", list(StatusKind))
def test_status_json_round_trip(kind):
    status = AgentStatus.error("bad") if kind is StatusKind.ERROR else AgentStatus(kind)
    assert AgentStatus.from_json(status.to_json()) == status


def test_status_json_error_shape():
    assert AgentStatus.error("Timeout").to_json() == {"Error": "Timeout"}


def test_status_from_json_rejects_garbage():
    with pytest.raises(ValueError):
        AgentStatus.from_json({"Nope": 1})
    with pytest.raises(ValueError):
        AgentStatus.from_json("Error")


def test_agent_round_trip():
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    agent = Agent(
        id="id-1",
        name="FuxAgent-Alpha",
        agent_type="chat",
        task="say hi",
        status=AgentStatus.error("Timeout"),
        created_at=created,
        last_active=created,
        capabilities=["send", "wait"],
        metadata={"k": "v"},
    )
    assert Agent.from_dict(agent.to_dict()) == agent


def test_agent_from_dict_accepts_z_suffix():
    data = {
        "id": "x",
        "name": "n",
        "agent_type": "search",
        "task": "t",
        "status": "Idle",
        "created_at": "2024-01-02T03:04:05Z",
        "last_active": "2024-01-02T03:04:05Z",
        "capabilities": [],
        "metadata": {},
    }
    agent = Agent.from_dict(data)
    assert agent.created_at.tzinfo is not None
    assert agent.status == AgentStatus(StatusKind.IDLE)


def test_message_ids_are_unique():
    first = AgentMessage(MessageType.TASK, "a")
    second = AgentMessage(MessageType.TASK, "a")
    assert first.id != second.id
    assert first.reply is None and first.to_agent is None


def test_create_request_from_dict_defaults():
    request = CreateAgentRequest.from_dict({"agent_type": "goose", "task": "build"})
    assert request == CreateAgentRequest(agent_type="goose", task="build")
    assert request.capabilities is None and request.metadata is None


def test_create_request_missing_field():
    with pytest.raises(AgentError, match="task"):
        CreateAgentRequest.from_dict({"agent_type": "goose"})


def test_config_defaults():
    config = AgentConfig()
    assert config.max_agents == 10
    assert config.default_timeout_seconds == 300
    assert config.health_check_interval_seconds == 60
    assert config.message_queue_size == 1000
    assert config.memory_limit_percent == 80.0
    assert config.cpu_limit_percent == 80.0