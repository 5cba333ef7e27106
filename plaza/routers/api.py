"""
Single action endpoint.

Clients POST {"action": ..., "token"?: ..., ...fields}; the dispatcher picks the
handler and domain errors come back as {"error": message}.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from plaza.auth.identity import IdentityResolver, get_identity_resolver
from plaza.core.dispatcher import dispatch
from plaza.db import get_db
from plaza.exceptions import ValidationError

router = APIRouter(tags=["api"])

NON_POST_METHODS = ["GET", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError("Invalid JSON") from e


@router.post("/api")
async def handle_action(
    request: Request,
    db: Session = Depends(get_db),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Any:
    """Dispatch one action. Handlers are sync and do blocking I/O, so run them off-loop."""
    body = await _read_body(request)
    return await run_in_threadpool(dispatch, db, body, resolver)


@router.api_route("/api", methods=NON_POST_METHODS, include_in_schema=False)
def method_not_allowed() -> JSONResponse:
    return JSONResponse(status_code=405, content={"error": "Method not allowed"})


@router.get("/health", tags=["system"])
def health() -> dict[str, str]:
    return {"status": "ok"}
