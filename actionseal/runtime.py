"""
ActionRuntime: one registry plus the deployment key.

Usage:
    from actionseal import ActionRuntime, get_registry, load_key

    runtime = ActionRuntime(get_registry(), load_key())
    reference = runtime.bind(DELETE_ID, record_id)      # sealed
    wire = reference.to_wire()                          # ship with the UI
    ...
    result = await runtime.invoke_wire(wire, extra_arg)
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from .binding import BoundReference, invoke
from .capture import HoistedBind
from .config import check_key
from .registry import ActionRegistry, get_registry


class ActionRuntime:
    def __init__(self, registry: Optional[ActionRegistry] = None, key: bytes = b""):
        self.registry = registry if registry is not None else get_registry()
        self.key = check_key(key)

    def bind(self, action_id: str, *values: Any) -> BoundReference:
        """Capture values now and return a sealed reference."""
        builder = self.registry.create_bindable_reference(action_id)
        return builder.bind(*values).seal(self.key)

    def hoist(self, action_id: str, values: Callable[[], Sequence[Any]]) -> HoistedBind:
        builder = self.registry.create_bindable_reference(action_id)
        return HoistedBind(builder, values, key=self.key)

    async def invoke(self, reference: BoundReference, *args: Any) -> Any:
        return await invoke(reference, *args, registry=self.registry, key=self.key)

    async def invoke_wire(self, data: Any, *args: Any) -> Any:
        return await self.invoke(BoundReference.from_wire(data), *args)
