"""
University advisor chat, backed by the OpenAI chat-completions API.

The conversation lives with the caller: every request carries the full prior
history, which is replayed verbatim after a fixed system prompt and followed
by the new user message. Nothing is stored server-side.

Failures are raised as ChatError with a machine-readable kind so callers can
tell "not configured" apart from a transient upstream failure without
parsing the message text. There are no retries.
"""

import asyncio
import logging
import os
import time
from enum import Enum
from typing import Any, Literal

from openai import APITimeoutError, AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field

API_KEY_ENV = "OPENAI_API_KEY"

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TIMEOUT_SECONDS = 60.0

FALLBACK_REPLY = "I apologize, but I couldn't generate a response. Please try again."

GREETING = (
    "Hello! I'm your AI university advisor. Ask me anything about universities, or try:\n\n"
    "• 'Which universities are best for Computer Science under $50k?'\n"
    "• 'Compare MIT and Stanford'\n"
    "• 'Show me universities in Canada with scholarships'"
)

SYSTEM_PROMPT = """You are an expert university advisor AI. You help students find the perfect university based on their needs and preferences.

You have access to information about universities worldwide with details about:
- QS Rankings
- Tuition fees (in USD)
- Countries and cities
- Strong majors and programs
- Degree levels (Bachelor, Master, PhD)
- Admission requirements (GPA, test scores, English proficiency)
- Scholarship availability
- International student percentages

When answering questions:
- Be helpful, concise, and friendly
- Provide specific recommendations when asked
- Compare universities objectively using rankings, tuition, programs, and fit
- Suggest considerations like budget, location, program strength, and admission requirements
- If asked about specific universities, provide detailed comparisons
- Keep responses focused and actionable (2-4 paragraphs max)

Examples of what you can help with:
- "Which universities are best for Computer Science under $50k?"
- "Compare MIT and Stanford for engineering"
- "Show me affordable universities in Europe"
- "What are my chances at Harvard with a 3.8 GPA?"
"""

log = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: int = Field(default_factory=_now_ms)


def new_conversation() -> list[ChatMessage]:
    """A fresh conversation, seeded with the assistant greeting."""
    return [ChatMessage(role="assistant", content=GREETING)]


class ChatErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"
    UPSTREAM = "upstream"


class ChatError(Exception):
    def __init__(self, message: str, kind: ChatErrorKind = ChatErrorKind.UPSTREAM):
        super().__init__(message)
        self.message = message
        self.kind = kind


def _turn(m: ChatMessage | dict[str, Any]) -> dict[str, Any]:
    if isinstance(m, ChatMessage):
        return {"role": m.role, "content": m.content}
    return {"role": m.get("role"), "content": m.get("content")}


def build_messages(message: str, history: list[ChatMessage | dict[str, Any]]) -> list[dict[str, Any]]:
    """
    System prompt, then the prior turns in order, then the new message.

    History turns are forwarded as given; only role and content are sent.
    """
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        *(_turn(m) for m in history),
        {"role": "user", "content": message},
    ]


class ChatProxy:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Any = None,
    ):
        self._api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self._resolve_key())

    def _resolve_key(self) -> str | None:
        # Read at call time: a missing key fails the request, not startup.
        return self._api_key or os.getenv(API_KEY_ENV)

    def _get_client(self) -> Any:
        if self._client is None:
            key = self._resolve_key()
            if not key:
                raise ChatError(
                    f"{API_KEY_ENV} environment variable is not set. "
                    "Please configure your API key to use the AI Advisor feature.",
                    ChatErrorKind.CONFIGURATION,
                )
            self._client = AsyncOpenAI(api_key=key, timeout=self.timeout, max_retries=0)
        return self._client

    async def complete(self, message: str, history: list[ChatMessage | dict[str, Any]]) -> str:
        """
        Send `message` plus `history` upstream and return the reply text.

        Raises ChatError (kind CONFIGURATION, TIMEOUT or UPSTREAM).
        """
        client = self._get_client()
        t0 = time.perf_counter()

        try:
            completion = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    messages=build_messages(message, history),
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, APITimeoutError) as exc:
            log.warning("Completion timed out after %.1fs", time.perf_counter() - t0)
            raise ChatError(
                f"AI service error: no response within {self.timeout:g}s", ChatErrorKind.TIMEOUT
            ) from exc
        except OpenAIError as exc:
            log.error("OpenAI API error: %s", exc)
            raise ChatError(f"AI service error: {exc}", ChatErrorKind.UPSTREAM) from exc

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        log.info("Completion: history=%d  %.2fs", len(history), time.perf_counter() - t0)
        return (content or "").strip() or FALLBACK_REPLY
