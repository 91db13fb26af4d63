"""Hook pipeline: named lifecycle events with ordered subscribers."""

import logging
from threading import Lock
from typing import Any, Callable, Dict, List

from appbox.core.errors import AppValidationError, HookVetoError
from appbox.core.models import Phase

logger = logging.getLogger(__name__)


Handler = Callable[[Any], None]


def pre_event(phase: Phase) -> str:
    return f"pre-{phase.value}"


def post_event(phase: Phase) -> str:
    return f"post-{phase.value}"


def pre_component_event(phase: Phase) -> str:
    return f"pre-{phase.value}-component"


def post_component_event(phase: Phase) -> str:
    return f"post-{phase.value}-component"


ALLOWED_EVENTS = {
    name
    for phase in Phase
    for name in (
        pre_event(phase),
        pre_component_event(phase),
        post_component_event(phase),
        post_event(phase),
    )
}


class EventBus:
    """
    Ordered event dispatch for lifecycle hooks.

    One instance is built at process start and passed to everything that
    emits or subscribes. Subscribers run synchronously in registration
    order; the first one to raise aborts the rest and the failure surfaces
    from ``emit`` as a ``HookVetoError``.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}
        self._lock = Lock()

    def subscribe(self, event: str, handler: Handler) -> None:
        """Register ``handler`` to run whenever ``event`` is emitted."""
        if event not in ALLOWED_EVENTS:
            raise AppValidationError(f"Invalid event type: {event}")
        if not callable(handler):
            raise AppValidationError(f"Invalid handler for [{event}]: {handler!r}")

        with self._lock:
            self._subscribers.setdefault(event, []).append(handler)

    def subscribers(self, event: str) -> List[Handler]:
        with self._lock:
            return list(self._subscribers.get(event, []))

    def emit(self, event: str, payload: Any) -> None:
        """Run every subscriber of ``event`` with ``payload``."""
        if event not in ALLOWED_EVENTS:
            raise AppValidationError(f"Invalid event type: {event}")

        for handler in self.subscribers(event):
            try:
                handler(payload)
            except Exception as e:
                logger.error(f"[events] {event} vetoed by {_handler_name(handler)}: {e}")
                raise HookVetoError(event, e) from e


class RecordingEventBus(EventBus):
    """Event bus that remembers the name of every emitted event."""

    def __init__(self):
        super().__init__()
        self.emitted: List[str] = []
        self._record_lock = Lock()

    def emit(self, event: str, payload: Any) -> None:
        with self._record_lock:
            self.emitted.append(event)
        super().emit(event, payload)


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
