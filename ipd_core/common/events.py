# ipd_core/common/events.py
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Any

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

_registry: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("journal.changed")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        _registry[event_name].append(fn)
        return fn
    return _decorator


def add_listener(event_name: str, fn: Handler) -> Callable[[], None]:
    """
    Register a handler at runtime and return a callable that removes it again.
    """
    _registry[event_name].append(fn)

    def _remove() -> None:
        remove_listener(event_name, fn)

    return _remove


def remove_listener(event_name: str, fn: Handler) -> None:
    handlers = _registry.get(event_name, [])
    if fn in handlers:
        handlers.remove(fn)


def publish(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Publish an event to in-process subscribers.
    Keep payloads ID-based to avoid cross-app imports.

    A failing handler is logged and skipped; it never reaches the publisher
    or the handlers after it.
    """
    # copy: handlers may unsubscribe themselves while being notified
    for handler in list(_registry.get(event_name, [])):
        try:
            handler(payload)
        except Exception:
            logger.exception("handler %r for %s failed", handler, event_name)
