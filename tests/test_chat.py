from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from campus_portal.agents import AGENTS, available_agents, get_agent, has_access
from campus_portal.api import models
from campus_portal.client.assistant import (
    CONNECTION_ERROR_TEXT,
    MISSING_KEY_TEXT,
    AgentResponder,
    build_messages,
)
from campus_portal.client.chat import HISTORY_TURNS, ChatSession
from campus_portal.client.errors import NetworkError

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def user(role="STUDENT"):
    return models.User(id="2", email="student@bolashak.kz", name="Иван", role=role, joined_at=NOW)


class FakeModel:
    """Chat model double recording the messages it receives."""

    def __init__(self, reply="Ответ", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return AIMessage(content=self.reply)


@pytest.fixture
def facade():
    facade = MagicMock()
    facade.messages.list_by_user_and_agent = AsyncMock(return_value=[])
    facade.messages.save = AsyncMock()
    facade.messages.clear = AsyncMock(return_value=3)
    facade.docs.list_all = AsyncMock(return_value=[])
    facade.feedback.upsert = AsyncMock()
    facade.audit.log = AsyncMock()
    return facade


class TestAgents:

    def test_catalogue(self):
        assert list(AGENTS) == ["abitur", "kadr", "nav", "career", "room"]
        assert get_agent("room").min_role == "STUDENT"

    def test_role_gating(self):
        nav = get_agent("nav")
        assert has_access("ADMIN", nav)
        assert has_access("STUDENT", nav)
        assert not has_access("GUEST", nav)
        assert has_access("GUEST", get_agent("abitur"))
        assert [a.id for a in available_agents("GUEST")] == ["abitur", "kadr", "career"]


class TestBuildMessages:

    def test_history_and_image(self):
        messages = build_messages("Be kind", [("user", "hi"), ("model", "hello")], "question", "QUJD")
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert isinstance(messages[2], AIMessage)
        parts = messages[-1].content
        assert parts[0] == {"type": "text", "text": "question"}
        assert parts[1]["image_url"]["url"] == "data:image/jpeg;base64,QUJD"

    def test_data_url_kept(self):
        messages = build_messages("x", [], "q", "data:image/png;base64,AAA")
        assert messages[-1].content[1]["image_url"]["url"] == "data:image/png;base64,AAA"


class TestResponder:

    async def test_reply(self):
        responder = AgentResponder(model=FakeModel("  Привет  "))
        assert await responder.respond("sys", [], "hi") == "Привет"

    async def test_missing_key_message(self):
        responder = AgentResponder(api_key="")
        assert await responder.respond("sys", [], "hi", language="en") == MISSING_KEY_TEXT["en"]

    async def test_connection_error_message(self):
        responder = AgentResponder(model=FakeModel(error=TimeoutError("timed out")))
        assert await responder.respond("sys", [], "hi", language="kk") == CONNECTION_ERROR_TEXT["kk"]

    async def test_empty_reply_is_failure(self):
        responder = AgentResponder(model=FakeModel(""))
        assert await responder.respond("sys", [], "hi", language="xx") == CONNECTION_ERROR_TEXT["ru"]


class TestChatSession:

    def test_role_below_minimum_is_refused(self, facade):
        guest = SimpleNamespace(id="9", role="GUEST")
        with pytest.raises(PermissionError):
            ChatSession(facade, AgentResponder(model=FakeModel()), guest, get_agent("room"))

    async def test_send_persists_both_turns_and_audits(self, facade):
        model = FakeModel("Ответ")
        session = ChatSession(facade, AgentResponder(model=model), user(), get_agent("nav"))

        reply = await session.send("Когда сессия?", use_docs=False)

        assert reply.role == "model"
        assert reply.content == "Ответ"
        assert reply.latency_ms >= 0
        assert [m.role for m in session.messages] == ["user", "model"]
        saved = [call.kwargs for call in facade.messages.save.await_args_list]
        assert [s["role"] for s in saved] == ["user", "model"]
        assert saved[1]["latency_ms"] == reply.latency_ms
        facade.docs.list_all.assert_not_called()
        facade.audit.log.assert_awaited_once_with("ai_response", {"agentId": "nav", "latencyMs": reply.latency_ms})

    async def test_send_grounds_prompt_in_documents(self, facade):
        facade.docs.list_all.return_value = [
            SimpleNamespace(title="Admission Deadlines", content="Apply before March 1."),
        ]
        model = FakeModel()
        session = ChatSession(facade, AgentResponder(model=model), user(), get_agent("abitur"))

        await session.send("admission deadline?")

        prompt = model.calls[0][-1].content[0]["text"]
        assert prompt.startswith("admission deadline?\n\n---\n")
        assert "### Admission Deadlines" in prompt
        facade.docs.list_all.assert_awaited_once_with(user_id="2")
        assert facade.audit.log.await_args_list[0].args == ("docs_context_used", {"agentId": "abitur"})

    async def test_unavailable_docs_do_not_abort_the_turn(self, facade):
        facade.docs.list_all.side_effect = NetworkError("unavailable", status=503)
        model = FakeModel()
        session = ChatSession(facade, AgentResponder(model=model), user(), get_agent("abitur"))

        reply = await session.send("hello admission")

        assert reply.content == "Ответ"
        assert model.calls[0][-1].content[0]["text"] == "hello admission"
        assert [m.role for m in session.messages] == ["user", "model"]
        facade.audit.log.assert_awaited_once_with("ai_response", {"agentId": "abitur", "latencyMs": reply.latency_ms})

    async def test_history_is_limited_to_recent_turns(self, facade):
        model = FakeModel()
        session = ChatSession(facade, AgentResponder(model=model), user(), get_agent("kadr"))
        for i in range(6):
            await session.send(f"q{i}", use_docs=False)
        last_call = model.calls[-1]
        # system message + history + current turn
        assert len(last_call) == 1 + HISTORY_TURNS + 1

    async def test_blank_input_does_nothing(self, facade):
        session = ChatSession(facade, AgentResponder(model=FakeModel()), user(), get_agent("kadr"))
        assert await session.send("   ") is None
        facade.messages.save.assert_not_called()

    async def test_failed_save_keeps_turn(self, facade):
        facade.messages.save.side_effect = NetworkError("down")
        session = ChatSession(facade, AgentResponder(model=FakeModel()), user(), get_agent("kadr"))
        reply = await session.send("hello", use_docs=False)
        assert reply.content == "Ответ"
        assert len(session.messages) == 2

    async def test_load_clear_and_rate(self, facade):
        session = ChatSession(facade, AgentResponder(model=FakeModel()), user(), get_agent("career"))
        await session.send("hi", use_docs=False)
        assert await session.clear() == 3
        assert session.messages == []

        await session.rate("m_1", -1, comment="wrong")
        facade.feedback.upsert.assert_awaited_once_with(
            message_id="m_1", user_id="2", agent_id="career", rating=-1, comment="wrong"
        )

        await session.load()
        facade.messages.list_by_user_and_agent.assert_awaited_once_with("2", "career")
