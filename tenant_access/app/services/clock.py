from datetime import datetime
from typing import Protocol

from tenant_access.domain.base import utcnow


class Clock(Protocol):
    def now(self) -> datetime:
        """Return current naive UTC time."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return utcnow()
