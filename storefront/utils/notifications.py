"""User-facing notifications raised by cart and wishlist operations."""
from dataclasses import dataclass
from enum import Enum
from typing import List
from storefront.config import settings


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A single message shown to the shopper."""
    message: str
    severity: Severity = Severity.INFO


class NotificationSink:
    """Fire-and-forget channel for user-facing messages."""
    
    def notify(self, message: str, severity: Severity = Severity.INFO):
        raise NotImplementedError
    
    def success(self, message: str):
        self.notify(message, Severity.SUCCESS)
    
    def info(self, message: str):
        self.notify(message, Severity.INFO)
    
    def error(self, message: str):
        self.notify(message, Severity.ERROR)


class ConsoleNotificationSink(NotificationSink):
    """Prints notifications to the console."""
    
    def notify(self, message: str, severity: Severity = Severity.INFO):
        print(f"[NOTIFY] {severity.value}: {message}")


class BufferedNotificationSink(NotificationSink):
    """
    Keeps notifications until they are drained.
    
    Used by the HTTP layer to return the messages raised while handling a
    request alongside its response.
    """
    
    def __init__(self, echo: bool = None):
        """
        Initialize an empty buffer.
        
        Args:
            echo: Also print each notification (defaults to settings.echo_notifications)
        """
        self._pending: List[Notification] = []
        self.echo = settings.echo_notifications if echo is None else echo
    
    def notify(self, message: str, severity: Severity = Severity.INFO):
        self._pending.append(Notification(message=message, severity=severity))
        if self.echo:
            print(f"[NOTIFY] {severity.value}: {message}")
    
    @property
    def pending(self) -> List[Notification]:
        return list(self._pending)
    
    def drain(self) -> List[Notification]:
        """Return and forget all buffered notifications."""
        drained, self._pending = self._pending, []
        return drained
