import pytest

from fuxagents.agent_runtime import AgentContext, CommandOutcome
from fuxagents.agent_tasks import handle_follow_up


class RecordingChat:
    def __init__(self, fail=False):
        self.messages = []
        self.fail = fail

    async def send(self, message):
        if self.fail:
            raise RuntimeError("chat down")
        self.messages.append(message)


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    async def notify(self, message):
        self.messages.append(message)


class FakeGoose:
    def __init__(self, session, task):
        self.session = session
        self.task = task
        self.sessions = []
        self.tasks = []

    async def start_session(self, name, max_turns):
        self.sessions.append((name, max_turns))
        return self.session

    async def run_task(self, instructions, max_turns):
        self.tasks.append((instructions, max_turns))
        return self.task


class FakeSearcher:
    def __init__(self, result="", error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def search(self, query, count, offset):
        self.calls.append((query, count, offset))
        if self.error is not None:
            raise self.error
        return self.result


def make_context(agent_type, chat=None, **kwargs):
    return AgentContext(
        agent_id="id-1",
        agent_name="FuxTest-One",
        agent_type=agent_type,
        chat=chat or RecordingChat(),
        notifier=RecordingNotifier(),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_search_success_sends_results():
    searcher = FakeSearcher(result="result list")
    context = make_context("search", searcher=searcher)
    response = await handle_follow_up(context, "bitcoin price")
    assert response == "Search results delivered to user"
    assert searcher.calls == [("bitcoin price", 5, 0)]
    assert context.chat.messages == [
        "🔍 **Search Results**\n\nresult list",
        "Search results delivered to user",
    ]


@pytest.mark.asyncio
async def test_search_empty_result_uses_placeholder():
    context = make_context("search", searcher=FakeSearcher(result=""))
    await handle_follow_up(context, "anything")
    assert context.chat.messages[0].endswith("Search completed but no results available")


@pytest.mark.asyncio
async def test_search_error_is_reported():
    context = make_context("search", searcher=FakeSearcher(error=RuntimeError("boom")))
    response = await handle_follow_up(context, "q")
    assert response == "Search error delivered to user"
    assert context.chat.messages[0] == "🔍 **Search Error**\n\nSearch failed: boom"


@pytest.mark.asyncio
async def test_search_without_searcher_reports_error():
    context = make_context("search")
    response = await handle_follow_up(context, "q")
    assert response == "Search error delivered to user"
    assert context.chat.messages[0].startswith("🔍 **Search Error**")


@pytest.mark.asyncio
async def test_goose_success_includes_task_output_and_session():
    goose = FakeGoose(CommandOutcome(True, output="sess"), CommandOutcome(True, output="out"))
    context = make_context("goose", goose=goose)
    response = await handle_follow_up(context, "fix the bug")
    assert response == "Development results delivered to user"
    assert goose.sessions[0][0] == "fux_agent_session"
    assert goose.tasks[0][0] == "fix the bug"
    sent = context.chat.messages[0]
    assert "**Task**: fix the bug" in sent
    assert "**Output**: out" in sent
    assert "**Session**: sess" in sent


@pytest.mark.asyncio
async def test_goose_task_failure():
    goose = FakeGoose(CommandOutcome(True), CommandOutcome(False, error="bad"))
    context = make_context("goose", goose=goose)
    response = await handle_follow_up(context, "x")
    assert response == "Development error delivered to user"
    assert context.chat.messages[0] == "🛠️ **Development Error**\n\nTask failed: bad"


@pytest.mark.asyncio
async def test_goose_session_failure_skips_task():
    goose = FakeGoose(CommandOutcome(False), CommandOutcome(True))
    context = make_context("goose", goose=goose)
    response = await handle_follow_up(context, "x")
    assert response == "Session error delivered to user"
    assert goose.tasks == []
    assert context.chat.messages[0] == (
        "🛠️ **Session Error**\n\nFailed to start session: Unknown error"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("agent_type", "expected", "heading"),
    [
        ("enhanced", "Project management results delivered to user",
         "📊 **Project Management Results**"),
        ("combined", "Multi-capability results delivered to user",
         "⚡ **Multi-Capability Analysis**"),
        ("chat", "Communication results delivered to user", "📡 **Communication Results**"),
        ("other", "General results delivered to user", "🤖 **Task Results**"),
    ],
)
async def test_canned_handlers(agent_type, expected, heading):
    context = make_context(agent_type)
    response = await handle_follow_up(context, "plan the launch")
    assert response == expected
    assert context.chat.messages[0].startswith(heading)
    assert "**Task**: plan the launch" in context.chat.messages[0]
    assert context.chat.messages[-1] == expected


@pytest.mark.asyncio
async def test_progress_announces_new_task():
    context = make_context("chat")
    await handle_follow_up(context, "hello")
    assert context.notifier.messages[0] == "🎯 Agent FuxTest-One received new task: hello"
    assert len(context.notifier.messages) == 2


@pytest.mark.asyncio
async def test_chat_failure_does_not_raise():
    context = make_context("enhanced", chat=RecordingChat(fail=True))
    response = await handle_follow_up(context, "y")
    assert response == "Project management results delivered to user"
    assert context.chat.messages == []