"""Log record model and connection states."""

import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum

DEFAULT_LEVEL = "INFO"


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LogRecord:
    line_number: int
    timestamp: str
    level: str
    message: str
    is_structured: bool = True
    is_history: bool = False
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return asdict(self)
