"""mokkun exception hierarchy.

The grid engine itself normalizes bad input instead of raising. These
exceptions belong to the seams around it: loading table definitions
and decoding intents that arrive over a wire.
"""

from __future__ import annotations

from typing import Any


class MokkunException(Exception):
    """Base exception for all mokkun errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize mokkun exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (path, intent type, grid id, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class TableDefinitionError(MokkunException):
    """A data table definition could not be read or validated.

    Raised by the loader when the file is missing, is not valid
    YAML/JSON, or does not describe a ``data_table`` field.
    """

    def __init__(self, message: str, path: str | None = None, **context: Any) -> None:
        """Initialize table definition error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        path : str, optional
            The definition file that failed to load.
        **context : Any
            Additional context.
        """
        super().__init__(message, path=path, **context)
        self.path = path


class IntentError(MokkunException):
    """A wire message could not be decoded into a grid intent.

    Raised when the message has no type, an unknown type, or a
    payload the intent model rejects.
    """

    def __init__(
        self,
        message: str,
        intent_type: str | None = None,
        grid_id: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize intent error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        intent_type : str, optional
            The ``type`` field of the offending message.
        grid_id : str, optional
            The grid the message was addressed to.
        **context : Any
            Additional context.
        """
        super().__init__(message, intent_type=intent_type, grid_id=grid_id, **context)
        self.intent_type = intent_type
        self.grid_id = grid_id
