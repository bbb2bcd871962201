import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

from cache import ResponseCache
from commands import CommandDispatcher
from config import CONFIG
from memory import SessionStore
from model import LLMGateway
from quota import QuotaGovernor, RequestCounters

logger = logging.getLogger(__name__)

THINKING = "💭 Thinking..."
ELLIPSIS = "..."

ReplyFn = Callable[[str], Awaitable[object]]


@dataclass(frozen=True)
class InboundMessage:
    session_id: str
    text: str
    from_self: bool = False


def truncate_reply(text: str, limit: int = CONFIG.MAX_REPLY_LENGTH) -> str:
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


class MessageHandler:
    """
    Routes one inbound message to a single reply.

    Order: own messages are ignored, then commands, quota checks, the response
    cache, and finally the backend. Messages of the same session are handled
    one at a time; different sessions run concurrently.
    """

    def __init__(self, gateway: LLMGateway,
                 sessions: Optional[SessionStore] = None,
                 cache: Optional[ResponseCache] = None,
                 counters: Optional[RequestCounters] = None,
                 now_fn: Callable[[], float] = time.time):
        self.gateway = gateway
        self.sessions = sessions if sessions is not None else SessionStore()
        self.cache = cache if cache is not None else ResponseCache()
        self.counters = counters if counters is not None else RequestCounters(start_time=now_fn())
        self.quota = QuotaGovernor(self.counters)
        self.commands = CommandDispatcher(self.sessions, self.counters, now_fn=now_fn)
        self._now = now_fn

    async def start(self) -> None:
        self.cache.start()
        logger.info("[startup] cache sweeper running every %ss", self.cache.sweep_seconds)

    async def stop(self) -> None:
        await self.cache.stop()
        await self.gateway.close()
        self.cache.clear()
        self.sessions.clear()
        logger.info("[shutdown] sessions and cache cleared")

    def status(self) -> Dict[str, int]:
        return {
            "requests": self.counters.request_count,
            "uptimeSeconds": int(self.counters.uptime_seconds(self._now())),
        }

    async def handle(self, message: InboundMessage, reply: ReplyFn) -> None:
        if message.from_self:
            return

        session_id = message.session_id
        text = (message.text or "").strip()

        async with self.sessions.lock_for(session_id):
            answer = self.commands.dispatch(session_id, text)
            if answer is not None:
                await reply(answer)
                return

            rejection = self.quota.check(text)
            if rejection is not None:
                await reply(rejection)
                return

            cached = self.cache.lookup(session_id, text)
            if cached is not None:
                await reply(truncate_reply(cached))
                return

            await reply(THINKING)
            answer = await self._ask_model(session_id, text)
            await reply(truncate_reply(answer))

    async def _ask_model(self, session_id: str, text: str) -> str:
        self.sessions.append_user(session_id, text)
        window = self.sessions.window_for(session_id)

        n = self.counters.increment()
        logger.info("📊 Request #%d - %s", n, datetime.now().strftime("%H:%M:%S"))

        result = await self.gateway.generate(window, text)
        if result.failed:
            return result.text

        self.sessions.append_model(session_id, result.text)
        self.cache.store(session_id, text, result.text)
        return result.text
