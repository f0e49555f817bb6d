"""
Bound references and the invocation path.

A ReferenceBuilder comes from ActionRegistry.create_bindable_reference();
binding a snapshot to it yields a BoundReference. A reference is either open
(holding the snapshot, trusted in-process use) or sealed (holding a
SealedPayload, safe to hand to a client). Invoking restores the snapshot and
calls the implementation with it, followed by the caller's arguments.
"""

from __future__ import annotations

import base64
import binascii
import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, Field, ValidationError

from .capture import BoundArgumentSnapshot, capture
from .codec import SealedPayload, seal, unseal
from .observability import invocation_span
from .errors import (
    ActionExecutionError,
    KeyMaterialError,
    MalformedPayloadError,
)

if TYPE_CHECKING:
    from .registry import ActionRegistry

logger = logging.getLogger(__name__)


class WireReference(BaseModel):
    """JSON shape of a sealed reference travelling with a UI description."""
    id: str = Field(..., min_length=1)
    nonce: str = Field(..., min_length=1)
    payload: str = Field(..., min_length=1)


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text + "=" * (-len(text) % 4), altchars=b"-_", validate=True)


@dataclass(frozen=True)
class BoundReference:
    action_id: str
    snapshot: Optional[BoundArgumentSnapshot] = None
    sealed: Optional[SealedPayload] = None

    @property
    def is_sealed(self) -> bool:
        return self.sealed is not None

    def seal(self, key: bytes) -> "BoundReference":
        if self.sealed is not None:
            return self
        return BoundReference(
            action_id=self.action_id,
            sealed=seal(self.action_id, self.snapshot or (), key),
        )

    def restore(self, key: Optional[bytes] = None) -> BoundArgumentSnapshot:
        """Return the bound values, unsealing them when needed."""
        if self.sealed is None:
            # Hand out copies so an action cannot mutate the stored snapshot.
            return capture(*(self.snapshot or ()))
        if key is None:
            raise KeyMaterialError("A sealing key is required to restore a sealed reference")
        # The id travels beside the payload and is authenticated with it.
        payload = SealedPayload(
            action_id=self.action_id,
            nonce=self.sealed.nonce,
            ciphertext=self.sealed.ciphertext,
        )
        return unseal(payload, key)

    def to_wire(self) -> dict:
        if self.sealed is None:
            raise ValueError("Only sealed references can leave the process")
        return {
            "id": self.action_id,
            "nonce": _b64encode(self.sealed.nonce),
            "payload": _b64encode(self.sealed.ciphertext),
        }

    @classmethod
    def from_wire(cls, data: Any) -> "BoundReference":
        try:
            wire = WireReference.model_validate(data)
            nonce = _b64decode(wire.nonce)
            ciphertext = _b64decode(wire.payload)
        except (ValidationError, binascii.Error, ValueError) as exc:
            raise MalformedPayloadError("Malformed action reference") from exc
        return cls(
            action_id=wire.id,
            sealed=SealedPayload(action_id=wire.id, nonce=nonce, ciphertext=ciphertext),
        )

    def __repr__(self) -> str:
        state = "sealed" if self.is_sealed else "open"
        return f"BoundReference({self.action_id!r}, {state})"


@dataclass(frozen=True)
class ReferenceBuilder:
    """Bindable handle for one registered action."""
    action_id: str

    def bind(self, *values: Any) -> BoundReference:
        return BoundReference(action_id=self.action_id, snapshot=capture(*values))

    def bind_snapshot(self, snapshot: BoundArgumentSnapshot) -> BoundReference:
        return BoundReference(action_id=self.action_id, snapshot=snapshot)


async def invoke(
    reference: BoundReference,
    *args: Any,
    registry: "ActionRegistry",
    key: Optional[bytes] = None,
) -> Any:
    """Run the action behind a reference.

    Restored values come first, caller arguments after them. Integrity,
    malformed-payload and unknown-action errors propagate unchanged and are
    all raised before the implementation runs.
    """
    with invocation_span(reference.action_id):
        restored = reference.restore(key)
        implementation = registry.resolve(reference.action_id)

        try:
            result = implementation(*restored, *args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.exception("Action %s raised", reference.action_id)
            raise ActionExecutionError(reference.action_id, exc) from exc
        return result
