"""
LLM responder for the agent chats.

Builds a LangChain message list (system instruction, prior turns, current
turn with an optional inline image) and sends it to the chat model. Failures
never propagate: the caller gets a short apology in the UI language instead.
"""

import logging
from typing import Iterable, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from campus_portal.database.config.config import settings

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "ru"
DEFAULT_IMAGE_MIME = "image/jpeg"

MISSING_KEY_TEXT = {
    "en": "Security: API key is missing. Please contact an administrator.",
    "kk": "Қауіпсіздік: API кілті жоқ. Әкімшіге хабарласыңыз.",
    "ru": "Система безопасности: Отсутствует ключ API. Обратитесь к администратору.",
}
CONNECTION_ERROR_TEXT = {
    "en": "Connection error. Please try again.",
    "kk": "Байланыс қатесі. Қайталап көріңіз.",
    "ru": "Произошла ошибка связи с нейросетью. Попробуйте повторить запрос.",
}


class EmptyResponseError(RuntimeError):
    pass


def to_image_url(attachment: str) -> str:
    """Data URL for an attachment given either as a data URL or as bare base64."""
    if attachment.startswith("data:"):
        return attachment
    return f"data:{DEFAULT_IMAGE_MIME};base64,{attachment}"


def build_messages(
    instruction: str,
    history: Iterable[tuple[str, str]],
    user_text: str,
    attachment: Optional[str] = None,
) -> list[BaseMessage]:
    """
    Build the chat payload.

    Args:
        instruction (str): Agent system instruction.
        history (Iterable[tuple[str, str]]): Prior ``(role, content)`` turns, role ``user`` or ``model``.
        user_text (str): Current prompt (already extended with document context).
        attachment (str | None): Inline image, data URL or bare base64.

    Returns:
        list[BaseMessage]: System message, history, then the current HumanMessage.
    """
    messages: list[BaseMessage] = [SystemMessage(content=instruction)]
    for role, content in history:
        messages.append(AIMessage(content=content) if role == "model" else HumanMessage(content=content))

    parts = [{"type": "text", "text": user_text}]
    if attachment:
        parts.append({"type": "image_url", "image_url": {"url": to_image_url(attachment)}})
    messages.append(HumanMessage(content=parts))
    return messages


def failure_text(error: Exception, language: str) -> str:
    table = MISSING_KEY_TEXT if "API_KEY" in str(error).upper() else CONNECTION_ERROR_TEXT
    return table.get(language, table[DEFAULT_LANGUAGE])


class AgentResponder:
    """
    Wraps a LangChain chat model.

    Args:
        model (BaseChatModel | None): Chat model to use. When omitted a
            `ChatOpenAI` is created on first use from the settings.
        api_key (str | None): Overrides ``settings.OPENAI_API_KEY``.
    """

    def __init__(self, model: BaseChatModel | None = None, api_key: str | None = None):
        self._model = model
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key

    @property
    def model(self) -> BaseChatModel:
        if self._model is None:
            if not self.api_key:
                raise RuntimeError("OPENAI_API_KEY is not configured")
            self._model = ChatOpenAI(
                model=settings.OPENAI_MODEL,
                api_key=self.api_key,
                temperature=settings.LLM_TEMPERATURE,
            )
        return self._model

    async def respond(
        self,
        instruction: str,
        history: Iterable[tuple[str, str]],
        user_text: str,
        attachment: Optional[str] = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> str:
        """Model reply, or a localized apology when the call fails or comes back empty."""
        try:
            response = await self.model.ainvoke(build_messages(instruction, history, user_text, attachment))
            text = str(response.content).strip()
            if not text:
                raise EmptyResponseError("empty model response")
            return text
        except Exception as e:
            logger.error("Error in AgentResponder.respond. Error Message: %s", e)
            return failure_text(e, language)
