import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI, RateLimitError

from config import CONFIG
from memory import MODEL, USER, Turn

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "⚠️ Too many requests. Try again in a few minutes."
TEMPORARY_ERROR = "⚠️ Temporary error. Try again later."

# Turn roles -> chat completion roles
_ROLES = {USER: "user", MODEL: "assistant"}


@dataclass(frozen=True)
class GenerationConfig:
    model: str = CONFIG.MODEL
    max_output_tokens: int = CONFIG.MAX_TOKENS
    temperature: float = CONFIG.TEMPERATURE


@dataclass(frozen=True)
class Generation:
    text: str
    failed: bool = False


def _is_rate_limited(err: Exception) -> bool:
    return isinstance(err, RateLimitError) or getattr(err, "status_code", None) == 429


def _to_messages(history: Sequence[Turn], user_message: str) -> List[Dict[str, Any]]:
    messages = [{"role": _ROLES.get(t.role, "user"), "content": t.text} for t in history]
    # the window normally already ends with this message
    if not history or history[-1].role != USER or history[-1].text != user_message:
        messages.append({"role": "user", "content": user_message})
    return messages


class LLMGateway:
    """
    Sends a session window to the chat backend and always hands text back.

    Backend failures never propagate: a rate limit maps to TOO_MANY_REQUESTS,
    everything else to TEMPORARY_ERROR. There are no retries.
    """

    def __init__(self, client: Optional[Any] = None,
                 config: Optional[GenerationConfig] = None):
        self.client = client or AsyncOpenAI(api_key=CONFIG.GEMINI_API_KEY, base_url=CONFIG.GEMINI_API_BASE)
        self.config = config or GenerationConfig()

    async def generate(self, history: Sequence[Turn], user_message: str) -> Generation:
        cfg = self.config
        try:
            completion = await self.client.chat.completions.create(
                model=cfg.model,
                max_tokens=cfg.max_output_tokens,
                temperature=cfg.temperature,
                messages=_to_messages(history, user_message),
            )
            text = completion.choices[0].message.content or ""
        except Exception as e:
            if _is_rate_limited(e):
                logger.warning("Backend rate limited: %s", e)
                return Generation(TOO_MANY_REQUESTS, failed=True)
            logger.error("Backend error: %s", e)
            return Generation(TEMPORARY_ERROR, failed=True)
        return Generation(text)

    async def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()
