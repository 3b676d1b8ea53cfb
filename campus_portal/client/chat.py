"""
One user's conversation with one agent.

`ChatSession` keeps the loaded thread in memory, persists every turn through
the Data Access Facade, grounds prompts in the user's documents with the
relevance ranker and asks the `AgentResponder` for the reply.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from campus_portal.agents import Agent, has_access
from campus_portal.api import models
from campus_portal.client.assistant import DEFAULT_LANGUAGE, AgentResponder
from campus_portal.client.errors import PortalError
from campus_portal.client.facade import DataAccessFacade
from campus_portal.client.ranker import build_docs_context, compose_prompt
from campus_portal.ids import make_id

logger = logging.getLogger(__name__)

HISTORY_TURNS = 8


class ChatSession:
    """
    Parameters
    ----------
    facade : DataAccessFacade
        Persistence for messages, docs, feedback and audit events.
    responder : AgentResponder
        LLM access.
    user : models.User
        The signed-in user.
    agent : Agent
        Agent being talked to; the user's role must grant access.
    language : str
        UI language (``ru``, ``en`` or ``kk``) for failure texts.

    Raises
    ------
    PermissionError
        The user's role is below the agent's minimum role.
    """

    def __init__(
        self,
        facade: DataAccessFacade,
        responder: AgentResponder,
        user: models.User,
        agent: Agent,
        language: str = DEFAULT_LANGUAGE,
    ):
        if not has_access(user.role, agent):
            raise PermissionError(f"role {user.role} cannot use agent {agent.id}")
        self.facade = facade
        self.responder = responder
        self.user = user
        self.agent = agent
        self.language = language
        self.messages: list[models.Message] = []

    async def load(self) -> list[models.Message]:
        self.messages = await self.facade.messages.list_by_user_and_agent(self.user.id, self.agent.id)
        return self.messages

    async def _persist(self, message: models.Message) -> None:
        # a failed save never loses the turn in the open session
        try:
            await self.facade.messages.save(**message.model_dump(exclude_none=True))
        except PortalError as e:
            logger.warning("Could not save message %s: %s", message.id, e)

    async def _docs_context(self, text: str) -> Optional[str]:
        try:
            docs = await self.facade.docs.list_all(user_id=self.user.id)
        except PortalError as e:
            logger.warning("Docs unavailable, answering without context: %s", e)
            return None
        return build_docs_context(text, docs)

    def _new_message(self, role: str, content: str, **extra) -> models.Message:
        return models.Message(
            id=make_id("m_"),
            user_id=self.user.id,
            agent_id=self.agent.id,
            role=role,
            content=content,
            timestamp=datetime.now(timezone.utc),
            **extra,
        )

    async def send(self, text: str, attachment: Optional[str] = None, use_docs: bool = True) -> Optional[models.Message]:
        """
        Send one user turn and return the saved model reply.

        Returns None without doing anything when both `text` and `attachment` are empty.
        """
        if not text.strip() and not attachment:
            return None

        history = [(m.role, m.content) for m in self.messages[-HISTORY_TURNS:]]
        context = await self._docs_context(text) if use_docs else None
        prompt = compose_prompt(text, context)

        user_message = self._new_message("user", text, attachment=attachment)
        self.messages.append(user_message)
        await self._persist(user_message)
        if context:
            await self.facade.audit.log("docs_context_used", {"agentId": self.agent.id})

        started = time.perf_counter()
        reply = await self.responder.respond(self.agent.instruction, history, prompt, attachment, self.language)
        latency_ms = round((time.perf_counter() - started) * 1000)

        model_message = self._new_message("model", reply, latency_ms=latency_ms)
        self.messages.append(model_message)
        await self._persist(model_message)
        await self.facade.audit.log("ai_response", {"agentId": self.agent.id, "latencyMs": latency_ms})
        return model_message

    async def clear(self) -> int:
        deleted = await self.facade.messages.clear(self.user.id, self.agent.id)
        self.messages = []
        return deleted

    async def rate(self, message_id: str, rating: int, comment: Optional[str] = None) -> models.MessageFeedback:
        return await self.facade.feedback.upsert(
            message_id=message_id,
            user_id=self.user.id,
            agent_id=self.agent.id,
            rating=rating,
            comment=comment,
        )
