"""Core data types shared by the multi-agent runtime."""

from __future__ import annotations

import asyncio
import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_time(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class AgentError(Exception):
    """Raised when an agent operation cannot be carried out."""


class StatusKind(enum.Enum):
    """The lifecycle stage of an agent."""

    STARTING = "Starting"
    RUNNING = "Running"
    IDLE = "Idle"
    BUSY = "Busy"
    ERROR = "Error"
    STOPPING = "Stopping"
    STOPPED = "Stopped"


@dataclass(frozen=True)
class AgentStatus:
    """An agent's status; error statuses carry a message."""

    kind: StatusKind
    message: str = ""

    @classmethod
    def error(cls, message: str) -> AgentStatus:
        return cls(StatusKind.ERROR, message)

    @property
    def is_timeout(self) -> bool:
        return self.kind is StatusKind.ERROR and self.message == "Timeout"

    def __str__(self) -> str:
        if self.kind is StatusKind.ERROR:
            return f"Error: {self.message}"
        return self.kind.value

    def to_json(self) -> str | dict[str, str]:
        if self.kind is StatusKind.ERROR:
            return {"Error": self.message}
        return self.kind.value

    @classmethod
    def from_json(cls, value: Any) -> AgentStatus:
        if isinstance(value, str):
            kind = StatusKind(value)
            if kind is StatusKind.ERROR:
                raise ValueError("Error status requires a message")
            return cls(kind)
        if isinstance(value, dict) and set(value) == {"Error"} and isinstance(value["Error"], str):
            return cls.error(value["Error"])
        raise ValueError(f"invalid agent status: {value!r}")


@dataclass
class Agent:
    """A running agent as seen from outside."""

    id: str
    name: str
    agent_type: str
    task: str
    status: AgentStatus
    created_at: datetime = field(default_factory=_utcnow)
    last_active: datetime = field(default_factory=_utcnow)
    capabilities: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "agent_type": self.agent_type,
            "task": self.task,
            "status": self.status.to_json(),
            "created_at": self.created_at.isoformat(),
            "last_active": self.last_active.isoformat(),
            "capabilities": list(self.capabilities),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Agent:
        return cls(
            id=data["id"],
            name=data["name"],
            agent_type=data["agent_type"],
            task=data["task"],
            status=AgentStatus.from_json(data["status"]),
            created_at=_parse_time(data["created_at"]),
            last_active=_parse_time(data["last_active"]),
            capabilities=list(data["capabilities"]),
            metadata=dict(data["metadata"]),
        )


class MessageType(enum.Enum):
    """What an agent message is for."""

    TASK = "Task"
    RESPONSE = "Response"
    PROGRESS = "Progress"
    ERROR = "Error"
    STATUS = "Status"
    HEARTBEAT = "Heartbeat"


@dataclass
class AgentMessage:
    """A message delivered to an agent's inbox; ``reply`` receives the answer."""

    message_type: MessageType
    content: str
    id: str = field(default_factory=_new_id)
    from_agent: str | None = None
    to_agent: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    reply: asyncio.Future[str] | None = None


@dataclass
class SystemStatus:
    """A snapshot of resource use and agent load."""

    active_agents: int
    max_agents: int
    memory_usage_percent: float
    cpu_usage_percent: float
    uptime_seconds: int
    messages_processed: int


@dataclass
class CreateAgentRequest:
    """Parameters for creating an agent."""

    agent_type: str
    task: str
    capabilities: list[str] | None = None
    timeout_seconds: float | None = None
    priority: int | None = None
    metadata: dict[str, str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreateAgentRequest:
        for name in ("agent_type", "task"):
            if name not in data:
                raise AgentError(f"missing field `{name}`")
        capabilities = data.get("capabilities")
        metadata = data.get("metadata")
        return cls(
            agent_type=data["agent_type"],
            task=data["task"],
            capabilities=None if capabilities is None else list(capabilities),
            timeout_seconds=data.get("timeout_seconds"),
            priority=data.get("priority"),
            metadata=None if metadata is None else dict(metadata),
        )


@dataclass
class AgentConfig:
    """Limits and intervals for the agent runtime."""

    max_agents: int = 10
    default_timeout_seconds: float = 300
    health_check_interval_seconds: float = 60
    message_queue_size: int = 1000
    memory_limit_percent: float = 80.0
    cpu_limit_percent: float = 80.0