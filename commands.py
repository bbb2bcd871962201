import time
from typing import Callable, Dict, Optional

from memory import SessionStore
from quota import RequestCounters

PONG = "pong 🏓"
RESET_DONE = "🧹 Context cleared!"
HELP_TEXT = """Commands:
!ping - Test
!reset - Clear history
!stats - Statistics"""


class CommandDispatcher:
    """Fixed literal commands; anything else goes on to the conversation."""

    def __init__(self, sessions: SessionStore, counters: RequestCounters,
                 now_fn: Callable[[], float] = time.time):
        self.sessions = sessions
        self.counters = counters
        self._now = now_fn
        self._commands: Dict[str, Callable[[str], str]] = {
            "!ping": self._ping,
            "!reset": self._reset,
            "!help": self._help,
            "!stats": self._stats,
        }

    def dispatch(self, session_id: str, text: str) -> Optional[str]:
        command = self._commands.get((text or "").strip())
        if command is None:
            return None
        return command(session_id)

    def _ping(self, session_id: str) -> str:
        return PONG

    def _reset(self, session_id: str) -> str:
        self.sessions.reset(session_id)
        return RESET_DONE

    def _help(self, session_id: str) -> str:
        return HELP_TEXT

    def _stats(self, session_id: str) -> str:
        hours = self.counters.uptime_seconds(self._now()) / 3600
        return f"📊 Requests: {self.counters.request_count} | Uptime: {hours:.1f}h"
