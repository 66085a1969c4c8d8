"""Event listener registry for grid notifications.

Events follow the ``namespace:event-name`` pattern (``grid:render``,
``grid:sort-change``). Listeners may subscribe to one event, to a whole
namespace with ``grid:*``, or to everything with ``*``.
"""

from __future__ import annotations

import inspect
import re

from collections.abc import Callable
from typing import Any

from .log import debug, log_callback_error, warn


# Allow namespace:event or namespace:event:id
EVENT_NAMESPACE_PATTERN = re.compile(
    r"^[a-zA-Z][a-zA-Z0-9]*:[a-zA-Z][a-zA-Z0-9_-]*(:[a-zA-Z0-9_-]+)?$"
)

#: Listener receiving ``(data)``, ``(data, event_type)`` or
#: ``(data, event_type, grid_id)``.
Listener = Callable[..., Any]


def validate_event_type(event_type: str) -> bool:
    """Validate event type matches namespace:event-name pattern or is wildcard.

    Parameters
    ----------
    event_type : str
        The event type string to validate.

    Returns
    -------
    bool
        True if valid, False otherwise.
    """
    if event_type == "*":
        return True
    if event_type.endswith(":*"):
        return bool(re.match(r"^[a-zA-Z][a-zA-Z0-9]*:\*$", event_type))
    return bool(EVENT_NAMESPACE_PATTERN.match(event_type))


class EventRegistry:
    """Listeners of one grid instance.

    Listener failures are logged and swallowed so a broken subscriber
    never leaves the grid half-updated.
    """

    def __init__(self, grid_id: str) -> None:
        self.grid_id = grid_id
        self._listeners: dict[str, list[Listener]] = {}

    def register(self, event_type: str, listener: Listener) -> bool:
        """Register a listener.

        Parameters
        ----------
        event_type : str
            The event type (``namespace:event-name``, ``namespace:*`` or ``*``).
        listener : Listener
            The callback.

        Returns
        -------
        bool
            True if registered, False when the event type is invalid.
        """
        if not validate_event_type(event_type):
            warn(
                f"Invalid event type '{event_type}'. "
                "Must match 'namespace:event-name' pattern or '*'."
            )
            return False
        self._listeners.setdefault(event_type, []).append(listener)
        debug(f"Registered listener for '{event_type}' on grid '{self.grid_id}'")
        return True

    def unregister(self, event_type: str | None = None, listener: Listener | None = None) -> bool:
        """Unregister listener(s).

        Parameters
        ----------
        event_type : str or None, optional
            The event type (None to remove every listener).
        listener : Listener or None, optional
            Specific listener to remove (None to remove all for event_type).

        Returns
        -------
        bool
            True if any listener was removed.
        """
        if event_type is None:
            removed = bool(self._listeners)
            self._listeners.clear()
            return removed

        if event_type not in self._listeners:
            return False

        if listener is None:
            del self._listeners[event_type]
            debug(f"Unregistered all listeners for '{event_type}' on grid '{self.grid_id}'")
            return True

        try:
            self._listeners[event_type].remove(listener)
        except ValueError:
            return False
        return True

    def _collect(self, event_type: str) -> list[Listener]:
        listeners = list(self._listeners.get(event_type, []))
        namespace, _, _ = event_type.partition(":")
        listeners.extend(self._listeners.get(f"{namespace}:*", []))
        listeners.extend(self._listeners.get("*", []))
        return listeners

    def _invoke(self, listener: Listener, event_type: str, data: Any) -> bool:
        try:
            sig = inspect.signature(listener)
            num_params = len(
                [p for p in sig.parameters.values() if p.default is inspect.Parameter.empty]
            )
        except (TypeError, ValueError):
            num_params = 1

        try:
            if num_params >= 3:
                listener(data, event_type, self.grid_id)
            elif num_params == 2:
                listener(data, event_type)
            else:
                listener(data)
        except Exception as exc:  # noqa: BLE001
            log_callback_error(event_type, self.grid_id, exc)
            return False
        return True

    def emit(self, event_type: str, data: Any) -> bool:
        """Deliver an event to every matching listener.

        Returns
        -------
        bool
            True if at least one listener ran without raising.
        """
        called = False
        for listener in self._collect(event_type):
            if self._invoke(listener, event_type, data):
                called = True
        return called

    def listener_count(self, event_type: str | None = None) -> int:
        """Number of listeners registered (for one event type, or in total)."""
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(v) for v in self._listeners.values())
