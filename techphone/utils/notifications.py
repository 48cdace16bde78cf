import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

VARIANTS = ("success", "error", "warning", "info")


class Toast:
    """A user-facing notice that closes itself after ``duration`` seconds.

    ``on_close`` runs exactly once, whether the toast is closed by hand, by
    the timer, or both.
    """

    def __init__(self, message: str, variant: str = "info", duration: float = 3.0,
                 on_close: Optional[Callable[[], None]] = None):
        if variant not in VARIANTS:
            raise ValueError(f"Unknown toast variant: {variant}")
        self.message = message
        self.variant = variant
        self.duration = duration
        self.on_close = on_close
        self.closed = False
        self._timer: Optional[asyncio.TimerHandle] = None

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        loop = loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.duration, self.close)
        return self

    def close(self):
        if self.closed:
            return
        self.closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.on_close is not None:
            self.on_close()

    def to_dict(self) -> dict:
        return {"message": self.message, "type": self.variant, "duration": self.duration}


@dataclass
class ToastQueue:
    toasts: List[Toast] = field(default_factory=list)

    def push(self, message: str, variant: str = "info", duration: float = 3.0) -> Toast:
        toast = Toast(message, variant, duration, on_close=lambda: self._drop(toast))
        self.toasts.append(toast)
        if variant == "error":
            logger.warning(f"[Toast] {message}")
        return toast

    def success(self, message: str, duration: float = 3.0) -> Toast:
        return self.push(message, "success", duration)

    def error(self, message: str, duration: float = 3.0) -> Toast:
        return self.push(message, "error", duration)

    def warning(self, message: str, duration: float = 3.0) -> Toast:
        return self.push(message, "warning", duration)

    def info(self, message: str, duration: float = 3.0) -> Toast:
        return self.push(message, "info", duration)

    def _drop(self, toast: Toast):
        if toast in self.toasts:
            self.toasts.remove(toast)

    def drain(self) -> List[dict]:
        """Serialise and close every pending toast (closing removes it from the queue)."""
        payload = [t.to_dict() for t in self.toasts]
        for t in list(self.toasts):
            t.close()
        return payload
