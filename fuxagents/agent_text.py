"""Text helpers for agents: output cleanup, names, capabilities and instructions."""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

_DEFAULT_RESULT = "Task completed successfully. Check your working directory for results."
_DEFAULT_ERROR = "An error occurred during task execution."

_SESSION_NOISE = (
    "starting session",
    "logging to",
    "working directory",
    "goose is running",
    "enter your instructions",
    "context:",
    "press enter to send",
    "( o)>",
    "○○○○○○",
)

_FALLBACK_NOISE = ("press enter", "( o)>", "○○○○○○", "context:")

_RESULT_MARKERS = ("created", "implemented", "added", "modified", "updated", "fixed")

_ERROR_NOISE = ("logging to", "working directory", "session:", "provider:", "model:")

_FALLBACK_LINE_COUNT = 20
_MIN_PROSE_BYTES = 20

_NAMES: dict[str, tuple[str, ...]] = {
    "search": (
        "FuxScout-Alpha", "FuxScout-Prime", "FuxScout-Elite", "FuxScout-Neo",
        "FuxFinder-X", "FuxSeeker-Pro", "FuxHunter-Max", "FuxRadar-Ultra",
        "FuxTracker-Zero", "FuxDetective-One", "FuxExplorer-Apex", "FuxSpy-Omega",
    ),
    "goose": (
        "FuxCoder-Alpha", "FuxForge-Prime", "FuxDev-Elite", "FuxBuilder-Neo",
        "FuxTech-X", "FuxCode-Pro", "FuxCraft-Max", "FuxEngine-Ultra",
        "FuxBot-Zero", "FuxSage-One", "FuxWiz-Apex", "FuxGuru-Omega",
    ),
    "enhanced": (
        "FuxManager-Alpha", "FuxTasker-Prime", "FuxOrganizer-Elite", "FuxPlanner-Neo",
        "FuxCoordinator-X", "FuxSystems-Pro", "FuxWorkflow-Max", "FuxProject-Ultra",
        "FuxGuide-Zero", "FuxMaster-One", "FuxLeader-Apex", "FuxDirector-Omega",
    ),
    "combined": (
        "FuxSpecialist-Alpha", "FuxOmni-Prime", "FuxMulti-Elite", "FuxVersatile-Neo",
        "FuxSuper-X", "FuxMega-Pro", "FuxUltra-Max", "FuxPower-Ultra",
        "FuxAll-Zero", "FuxFusion-One", "FuxHybrid-Apex", "FuxTotal-Omega",
    ),
    "chat": (
        "FuxComm-Alpha", "FuxChat-Prime", "FuxTalk-Elite", "FuxVoice-Neo",
        "FuxSpeak-X", "FuxDialog-Pro", "FuxConvo-Max", "FuxMessage-Ultra",
        "FuxLink-Zero", "FuxConnect-One", "FuxRelay-Apex", "FuxBridge-Omega",
    ),
}

_GENERIC_NAMES = (
    "FuxAgent-Alpha", "FuxBot-Prime", "FuxAI-Elite", "FuxCyber-Neo",
    "FuxDigi-X", "FuxRobo-Pro", "FuxAuto-Max", "FuxSmart-Ultra",
    "FuxCore-Zero", "FuxGhost-One", "FuxPhantom-Apex", "FuxShadow-Omega",
)

_BASE_TOOLS = (
    # Basic communication tools
    "send",
    "progress",
    "wait",
    # Multi-agent management tools
    "create_agent",
    "list_agents",
    "stop_agent",
    "message_agent",
    "system_status",
    # Memory tools
    "store_memory",
    "retrieve_memory",
    "update_memory",
    "delete_memory",
    "memory_stats",
    "cleanup_expired_memories",
)

_EXTRA_TOOLS: dict[str, tuple[str, ...]] = {
    "goose": ("runtask", "startsession"),
    "search": ("searxng_web_search",),
    "combined": ("runtask", "searxng_web_search"),
    "enhanced": ("addnote", "addevent"),
}

_INSTRUCTIONS: dict[str, str] = {
    "search": (
        "SEARCH AGENT - Web Search Only\n\n"
        "Task: Search the web when user asks for online searches\n\n"
        "When to search:\n"
        '- User says "search web", "google", "find online", "current price", "latest news"\n'
        "- User wants real-time data or current information\n\n"
        "When NOT to search:\n"
        '- General questions like "What is Bitcoin?" (just answer directly)\n\n'
        "Steps:\n"
        "1. Check if user wants web search (keywords above)\n"
        "2. If YES: Use searxng_web_search tool\n"
        "3. If NO: Answer directly from knowledge\n"
        "4. Always send results to user\n\n"
        "Tools: searxng_web_search, store_memory, retrieve_memory\n"
    ),
    "goose": (
        "DEVELOPMENT AGENT - Code & Build\n\n"
        "Task: Write code, fix bugs, build software\n\n"
        "Steps:\n"
        "1. Start session: startsession\n"
        "2. Run task: runtask with user's request\n"
        "3. Send results to user\n\n"
        "Tools: startsession, runtask, store_memory, retrieve_memory\n"
    ),
    "enhanced": (
        "PROJECT MANAGER - Organize & Plan\n\n"
        "Task: Create notes, track events, organize projects\n\n"
        "Steps:\n"
        "1. Add notes: addnote\n"
        "2. Track events: addevent\n"
        "3. Send results to user\n\n"
        "Tools: addnote, addevent, send, progress, store_memory, retrieve_memory\n"
    ),
    "combined": (
        "MULTI-TOOL AGENT - General Tasks\n\n"
        "Task: Handle complex requests using multiple tools\n\n"
        "Steps:\n"
        "1. Use appropriate tools from: searxng_web_search, startsession, runtask, send\n"
        "2. Combine results as needed\n"
        "3. Send final answer to user\n\n"
        "Tools: searxng_web_search, runtask, startsession, send, progress, "
        "store_memory, retrieve_memory\n"
    ),
}

_GENERAL_INSTRUCTIONS = (
    "GENERAL AGENT\n\n"
    "Task: Help with various tasks\n\n"
    "Steps:\n"
    "1. Use available tools as needed\n"
    "2. Send results to user\n\n"
    "Tools: send, progress, store_memory, retrieve_memory\n"
)


def _lines(text: str) -> list[str]:
    """Split on newlines, dropping a trailing empty line and carriage returns."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(needle in text for needle in needles)


def _starts_results(line: str, lower: str, still_skipping: bool) -> bool:
    stripped = line.strip()
    if "here" in lower and _contains_any(lower, ("code", "solution", "result")):
        return True
    if _contains_any(lower, _RESULT_MARKERS) or stripped.startswith("```"):
        return True
    return (
        still_skipping
        and bool(stripped)
        and "provider:" not in lower
        and "model:" not in lower
        and len(stripped.encode("utf-8")) > _MIN_PROSE_BYTES
    )


def extract_task_results(raw_output: str) -> str:
    """Pull the user-facing part out of raw task output, dropping session noise."""
    lines = _lines(raw_output)
    results: list[str] = []
    in_results = False
    still_skipping = True

    for line in lines:
        lower = line.lower()
        if _contains_any(lower, _SESSION_NOISE):
            continue
        if _starts_results(line, lower, still_skipping):
            still_skipping = False
            in_results = True
        if in_results and line.strip():
            results.append(line)

    if not results:
        results = [
            line
            for line in lines[-_FALLBACK_LINE_COUNT:]
            if line.strip() and not _contains_any(line.lower(), _FALLBACK_NOISE)
        ]

    if not results:
        return _DEFAULT_RESULT
    return "\n".join(results).strip()


def extract_error_message(raw_error: str) -> str:
    """Keep the meaningful lines of an error report, stripped of session details."""
    kept = [
        line.strip()
        for line in _lines(raw_error)
        if not _contains_any(line.lower(), _ERROR_NOISE) and line.strip()
    ]
    return "\n".join(kept) if kept else _DEFAULT_ERROR


def generate_agent_name(agent_type: str, rng: random.Random | None = None) -> str:
    """Pick a display name suited to the agent type."""
    chooser = rng if rng is not None else random
    return chooser.choice(_NAMES.get(agent_type, _GENERIC_NAMES))


def default_capabilities(agent_type: str) -> list[str]:
    """The tools an agent of this type gets when none are requested."""
    return [*_BASE_TOOLS, *_EXTRA_TOOLS.get(agent_type, ())]


def tool_instructions(agent_type: str, capabilities: Sequence[str]) -> str:
    """Instructions describing how an agent of this type should use its tools."""
    template = _INSTRUCTIONS.get(agent_type, _GENERAL_INSTRUCTIONS)
    return f"{template}Capabilities: {', '.join(capabilities)}"