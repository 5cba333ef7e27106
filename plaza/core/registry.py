"""Action registry and per-request context for the single API endpoint."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from plaza.auth.identity import Identity, IdentityResolver
from plaza.exceptions import ValidationError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class ActionContext:
    """What a handler sees: the raw body, a db session, and lazy caller identity."""

    def __init__(
        self,
        db: Session,
        body: Dict[str, Any],
        resolver: IdentityResolver,
    ) -> None:
        self.db = db
        self.body = body
        self._resolver = resolver
        self._identity: Optional[Identity] = None

    @property
    def token(self) -> Any:
        return self.body.get("token")

    def identity(self) -> Identity:
        """Resolve the bearer token once per request."""
        if self._identity is None:
            self._identity = self._resolver.resolve(self.token)
        return self._identity

    def payload(self, model: Type[PayloadT]) -> PayloadT:
        """Parse the body into model, reporting shape errors as ValidationError."""
        try:
            return model.model_validate(self.body)
        except PydanticValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(p) for p in err.get("loc", ())) or "body"
            raise ValidationError(f"Invalid {field}: {err.get('msg')}") from e


ActionHandler = Callable[[ActionContext], Dict[str, Any]]


class ActionRegistry:
    def __init__(self) -> None:
        self._handlers: Dict[str, ActionHandler] = {}

    def register(self, name: str) -> Callable[[ActionHandler], ActionHandler]:
        """Decorator registering a handler under an action name."""

        def decorator(handler: ActionHandler) -> ActionHandler:
            if name in self._handlers:
                raise ValueError(f"Action already registered: {name}")
            self._handlers[name] = handler
            return handler

        return decorator

    def get(self, name: Any) -> ActionHandler | None:
        if not isinstance(name, str):
            return None
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return list(self._handlers)
