"""Request envelope shared by every action."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ActionPayload(BaseModel):
    """
    Base for per-action payloads. Unknown keys in the envelope are ignored.

    token is left unchecked here; only actions that resolve the caller look at it.
    """

    token: Any = None

    model_config = {"extra": "ignore"}
