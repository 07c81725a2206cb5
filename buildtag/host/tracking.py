"""Build tracking records and the sinks that receive them."""

import logging
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class BuildMessageImportance(str, Enum):
    """Importance of a build message."""

    HIGH = "High"
    NORMAL = "Normal"
    LOW = "Low"


class BuildMessage(BaseModel):
    """Free-text progress message recorded against the build."""

    importance: BuildMessageImportance = Field(
        default=BuildMessageImportance.NORMAL, description="Message importance"
    )
    message: str = Field(..., description="Message text")


class LogSink(Protocol):
    """Host tracking sink."""

    def track(self, record: BuildMessage) -> None: ...


_LEVELS = {
    BuildMessageImportance.HIGH: logging.WARNING,
    BuildMessageImportance.NORMAL: logging.INFO,
    BuildMessageImportance.LOW: logging.DEBUG,
}


class LoggingSink:
    """Sink forwarding build messages to Python logging."""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def track(self, record: BuildMessage) -> None:
        self.log.log(_LEVELS[record.importance], record.message)


def write_to_log(sink: LogSink, message: str) -> None:
    """Record a high-importance message on the host's build log."""
    sink.track(BuildMessage(importance=BuildMessageImportance.HIGH, message=message))
