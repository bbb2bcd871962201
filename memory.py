import asyncio
import time
from dataclasses import dataclass
from typing import Dict, List, Tuple

from config import CONFIG

USER = "user"
MODEL = "model"


@dataclass(frozen=True)
class Turn:
    role: str   # "user" or "model"
    text: str


# What we keep per conversation
class SessionState:
    def __init__(self):
        self.turns: List[Turn] = []
        self.lock = asyncio.Lock()      # serializes messages of one session
        self.updated_at = time.time()


# In-process only, lost on restart
class SessionStore:
    """Per-session turn log bounded to the most recent ``max_history`` turns."""

    def __init__(self, max_history: int = CONFIG.MAX_HISTORY):
        self.data: Dict[str, SessionState] = {}
        self.max_history = max_history

    def get(self, key: str) -> SessionState:
        st = self.data.get(key)
        if st is None:
            st = SessionState()
            self.data[key] = st
        st.updated_at = time.time()
        return st

    def lock_for(self, key: str) -> asyncio.Lock:
        return self.get(key).lock

    def _append(self, key: str, role: str, text: str) -> None:
        st = self.get(key)
        st.turns.append(Turn(role=role, text=text))
        # drop oldest first
        if len(st.turns) > self.max_history:
            del st.turns[:-self.max_history]

    def append_user(self, key: str, text: str) -> None:
        self._append(key, USER, text)

    def append_model(self, key: str, text: str) -> None:
        self._append(key, MODEL, text)

    def window_for(self, key: str) -> Tuple[Turn, ...]:
        return tuple(self.get(key).turns)

    def reset(self, key: str) -> None:
        self.get(key).turns.clear()

    def clear(self) -> None:
        self.data.clear()

    def __len__(self) -> int:
        return len(self.data)
