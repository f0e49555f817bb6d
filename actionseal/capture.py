"""
Capture points.

A snapshot is taken where the bind expression logically executes and is
frozen there: later mutation of the captured variables never shows through.

Declarations that would be hoisted to the top of a function and assigned at
their use site are written as a HoistedBind. It is declared once with a
zero-argument callable reading the live variables, and called at each place
the UI element referencing the action is built:

    def item(id1, id2):
        delete_item = runtime.hoist(DELETE_ID, lambda: (id1, id2))
        id1 += 1
        return Button(action=delete_item())

Each call evaluates the captured values at that point in executed order,
including mutations made by nested closures that already ran, so two use
sites get two independent snapshots of the same action.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from .binding import BoundReference, ReferenceBuilder

BoundArgumentSnapshot = Tuple[Any, ...]


def capture(*values: Any) -> BoundArgumentSnapshot:
    """Freeze values into an independent snapshot."""
    return tuple(copy.deepcopy(v) for v in values)


class HoistedBind:
    """Bind declared up front, evaluated at each use site."""

    def __init__(
        self,
        builder: "ReferenceBuilder",
        values: Callable[[], Sequence[Any]],
        key: Optional[bytes] = None,
    ):
        self.builder = builder
        self.values = values
        self.key = key

    @property
    def action_id(self) -> str:
        return self.builder.action_id

    def __call__(self) -> "BoundReference":
        reference = self.builder.bind_snapshot(capture(*self.values()))
        if self.key is not None:
            reference = reference.seal(self.key)
        return reference

    def __repr__(self) -> str:
        return f"HoistedBind({self.action_id!r})"
