"""
Action registry.

Maps an opaque action id to the implementation that runs on the trusted side.
Populated once while action-bearing modules load, read-only afterwards.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .binding import ReferenceBuilder
from .config import get_id_salt
from .errors import DuplicateActionError, UnknownActionError

logger = logging.getLogger(__name__)

ActionImplementation = Callable[..., Any]


def derive_action_id(module: str, name: str, salt: str = "") -> str:
    """Stable 40-char hex id for an exported action."""
    material = f"{salt}:{module}:{name}".encode("utf-8")
    return hashlib.sha1(material).hexdigest()


@dataclass(frozen=True)
class ActionDescriptor:
    action_id: str
    implementation: ActionImplementation
    name: str


def _export_name(implementation: ActionImplementation) -> str:
    module = getattr(implementation, "__module__", None) or "<unknown>"
    qualname = getattr(implementation, "__qualname__", None) or repr(implementation)
    return f"{module}:{qualname}"


class ActionRegistry:
    def __init__(self, id_salt: Optional[str] = None) -> None:
        self.id_salt = get_id_salt() if id_salt is None else id_salt
        self._actions: Dict[str, ActionDescriptor] = {}
        self._lock = threading.Lock()

    def register(
        self,
        action_id: str,
        implementation: ActionImplementation,
        name: Optional[str] = None,
    ) -> ActionDescriptor:
        if not isinstance(action_id, str) or not action_id:
            raise ValueError("Action id must be a non-empty string")
        if not callable(implementation):
            raise TypeError(f"Implementation for {action_id!r} is not callable")

        with self._lock:
            existing = self._actions.get(action_id)
            if existing is not None:
                if existing.implementation == implementation:
                    return existing
                logger.warning("Refusing to re-register action %s", action_id)
                raise DuplicateActionError(action_id)
            descriptor = ActionDescriptor(
                action_id=action_id,
                implementation=implementation,
                name=name or _export_name(implementation),
            )
            # Copy-on-write keeps resolve() lock-free.
            actions = dict(self._actions)
            actions[action_id] = descriptor
            self._actions = actions

        logger.debug("Registered action %s -> %s", action_id, descriptor.name)
        return descriptor

    def action(self, action_id: Optional[str] = None, *, name: Optional[str] = None):
        """Decorator form of register(); returns the function unchanged."""
        def decorator(func: ActionImplementation) -> ActionImplementation:
            export_name = name or _export_name(func)
            resolved_id = action_id or derive_action_id(
                func.__module__, func.__qualname__, self.id_salt
            )
            self.register(resolved_id, func, name=export_name)
            func.__action_id__ = resolved_id
            return func
        return decorator

    def descriptor(self, action_id: str) -> ActionDescriptor:
        descriptor = self._actions.get(action_id)
        if descriptor is None:
            raise UnknownActionError(action_id)
        return descriptor

    def resolve(self, action_id: str) -> ActionImplementation:
        return self.descriptor(action_id).implementation

    def create_bindable_reference(self, action_id: str) -> ReferenceBuilder:
        if action_id not in self._actions:
            raise UnknownActionError(action_id)
        return ReferenceBuilder(action_id)

    def ids(self) -> List[str]:
        return sorted(self._actions)

    def manifest(self) -> Dict[str, str]:
        return {action_id: d.name for action_id, d in sorted(self._actions.items())}

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._actions

    def __len__(self) -> int:
        return len(self._actions)


_default_registry = ActionRegistry()


def get_registry() -> ActionRegistry:
    """Process-wide registry used by module-level action declarations."""
    return _default_registry
