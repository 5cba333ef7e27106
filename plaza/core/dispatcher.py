"""Route a parsed request body to its action handler."""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.orm import Session

from plaza.auth.identity import IdentityResolver
from plaza.core.actions import registry
from plaza.core.registry import ActionContext
from plaza.exceptions import PlazaError, UnexpectedError, ValidationError
from plaza.infra.logging_config import get_logger

logger = get_logger("dispatcher")


def dispatch(
    db: Session,
    body: Any,
    resolver: IdentityResolver,
) -> Dict[str, Any]:
    """
    Run the handler named by body["action"].

    Raises:
        PlazaError: domain failures, already carrying their status code.
        UnexpectedError: anything else, e.g. datastore failures, with its message.
    """
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON")
    action = body.get("action")
    handler = registry.get(action)
    if handler is None:
        raise ValidationError("Unknown action")

    logger.info("action=%s", action)
    ctx = ActionContext(db=db, body=body, resolver=resolver)
    try:
        return handler(ctx)
    except PlazaError as e:
        db.rollback()
        logger.warning("action=%s failed (%s): %s", action, e.status_code, e.message)
        raise
    except Exception as e:
        db.rollback()
        logger.exception("action=%s failed unexpectedly", action)
        # Surface the driver message rather than the full SQL statement.
        message = str(getattr(e, "orig", None) or e) or "Server error"
        raise UnexpectedError(message) from e
