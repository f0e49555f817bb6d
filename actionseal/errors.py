"""
actionseal error taxonomy.

Everything raised by the mechanism derives from ActionSealError so callers
can catch the whole family at a transport boundary.
"""

from __future__ import annotations


class ActionSealError(Exception):
    """Base class for all actionseal errors."""


class DuplicateActionError(ActionSealError):
    """An action id is already registered to a different implementation."""

    def __init__(self, action_id: str):
        super().__init__(f"Action {action_id!r} is already registered to a different implementation")
        self.action_id = action_id


class UnknownActionError(ActionSealError):
    """No implementation is registered under the action id."""

    def __init__(self, action_id: str):
        super().__init__(f"Unknown action {action_id!r}")
        self.action_id = action_id


class IntegrityError(ActionSealError):
    """Sealed payload failed authentication.

    The message is identical for a bad tag, an altered id and a wrong key.
    """

    def __init__(self) -> None:
        super().__init__("Sealed payload failed integrity check")


class MalformedPayloadError(ActionSealError):
    """Payload authenticated but does not decode to a value sequence."""


class KeyMaterialError(ActionSealError):
    """Sealing key missing or of the wrong size."""


class ActionExecutionError(ActionSealError):
    """Wraps an exception raised by an action implementation."""

    def __init__(self, action_id: str, original: BaseException):
        super().__init__(f"Action {action_id!r} failed: {type(original).__name__}: {original}")
        self.action_id = action_id
        self.original = original
