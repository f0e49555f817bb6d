"""
actionseal HTTP invocation endpoint

FastAPI app exposing sealed action references to a UI runtime.

Run (with a module that registers actions on the default registry):
    ACTIONSEAL_KEY=... uvicorn actionseal.api:app
"""

from __future__ import annotations

import logging
from typing import Any, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .binding import BoundReference, WireReference
from .errors import (
    ActionExecutionError,
    IntegrityError,
    MalformedPayloadError,
    UnknownActionError,
)
from .observability import configure_observability, instrument_app
from .runtime import ActionRuntime

logger = logging.getLogger(__name__)


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class InvokeRequest(BaseModel):
    reference: WireReference
    args: List[Any] = Field(default_factory=list)

class InvokeResponse(BaseModel):
    result: Any = None

class ActionList(BaseModel):
    ids: List[str]


# =============================================================================
# APP
# =============================================================================

def create_app(runtime: ActionRuntime) -> FastAPI:
    app = FastAPI(title="actionseal", version="0.1.0")
    configure_observability(runtime.registry)
    instrument_app(app)

    @app.get("/actions", response_model=ActionList)
    async def list_actions():
        return ActionList(ids=runtime.registry.ids())

    @app.post("/actions/{action_id}", response_model=InvokeResponse)
    async def invoke_action(action_id: str, body: InvokeRequest):
        if body.reference.id != action_id:
            raise HTTPException(status_code=400, detail="Reference does not match action")
        try:
            reference = BoundReference.from_wire(body.reference.model_dump())
            result = await runtime.invoke(reference, *body.args)
        except UnknownActionError:
            raise HTTPException(status_code=404, detail="Unknown action")
        except IntegrityError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except MalformedPayloadError:
            raise HTTPException(status_code=400, detail="Malformed action reference")
        except ActionExecutionError:
            raise HTTPException(status_code=500, detail="action failed")
        return InvokeResponse(result=result)

    return app


_app = None


def __getattr__(name):
    # `uvicorn actionseal.api:app` builds the app from the environment once.
    global _app
    if name == "app":
        if _app is None:
            from .config import load_key
            from .registry import get_registry
            _app = create_app(ActionRuntime(get_registry(), load_key()))
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
