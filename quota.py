import time
from dataclasses import dataclass, field
from typing import Optional

from config import CONFIG

MESSAGE_TOO_LONG = "❌ Message too long (max {limit} characters)"
QUOTA_REACHED = "⏳ Daily quota reached. Try again tomorrow."


@dataclass
class RequestCounters:
    request_count: int = 0
    start_time: float = field(default_factory=time.time)

    def increment(self) -> int:
        self.request_count += 1
        return self.request_count

    def uptime_seconds(self, now: Optional[float] = None) -> float:
        return (time.time() if now is None else now) - self.start_time


class QuotaGovernor:
    """Length cap per message plus a cumulative cap on backend requests.

    The request cap never resets while the process lives, despite the
    "daily" wording shown to users.
    """

    def __init__(self, counters: RequestCounters,
                 max_message_length: int = CONFIG.MAX_MESSAGE_LENGTH,
                 max_requests: int = CONFIG.MAX_REQUESTS):
        self.counters = counters
        self.max_message_length = max_message_length
        self.max_requests = max_requests

    def check_length(self, text: str) -> Optional[str]:
        if len((text or "").strip()) > self.max_message_length:
            return MESSAGE_TOO_LONG.format(limit=self.max_message_length)
        return None

    def check_global(self) -> Optional[str]:
        if self.counters.request_count > self.max_requests:
            return QUOTA_REACHED
        return None

    def check(self, text: str) -> Optional[str]:
        return self.check_length(text) or self.check_global()
