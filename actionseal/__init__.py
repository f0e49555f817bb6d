"""
actionseal - sealed remote action references

Turns a locally defined action, with the values it closes over, into a
reference that can cross a client/server boundary and be invoked later by id
with its captured arguments restored exactly.

Components:
- registry.py: action id -> implementation table
- codec.py: XChaCha20-Poly1305 sealing of bound arguments
- binding.py: bound references and the invocation path
- capture.py: snapshot capture points and hoisted binds
- runtime.py: registry + key facade
- api.py: FastAPI invocation endpoint
"""

__version__ = "0.1.0"

from .binding import BoundReference, ReferenceBuilder, invoke
from .capture import BoundArgumentSnapshot, HoistedBind, capture
from .codec import SealedPayload, seal, unseal
from .config import load_key, load_or_create_key
from .errors import (
    ActionExecutionError,
    ActionSealError,
    DuplicateActionError,
    IntegrityError,
    KeyMaterialError,
    MalformedPayloadError,
    UnknownActionError,
)
from .registry import ActionDescriptor, ActionRegistry, derive_action_id, get_registry
from .runtime import ActionRuntime

__all__ = [
    "__version__",
    # Registry
    "ActionDescriptor",
    "ActionRegistry",
    "derive_action_id",
    "get_registry",
    # Codec
    "SealedPayload",
    "seal",
    "unseal",
    # Binding
    "BoundReference",
    "ReferenceBuilder",
    "invoke",
    # Capture
    "BoundArgumentSnapshot",
    "HoistedBind",
    "capture",
    # Runtime
    "ActionRuntime",
    "load_key",
    "load_or_create_key",
    # Errors
    "ActionSealError",
    "DuplicateActionError",
    "UnknownActionError",
    "IntegrityError",
    "MalformedPayloadError",
    "KeyMaterialError",
    "ActionExecutionError",
]
