"""Resolve bearer tokens to identities through the hosted auth provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from plaza.config import get_settings
from plaza.exceptions import AuthenticationError, UnexpectedError
from plaza.infra.logging_config import get_logger

logger = get_logger("auth.identity")

USER_PATH = "/auth/v1/user"


@dataclass
class Identity:
    """Subject returned by the auth provider for a verified token."""

    id: str
    email: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


class IdentityResolver:
    """Exchanges a bearer token for an Identity (GoTrue-compatible API)."""

    def __init__(
        self,
        auth_url: Optional[str],
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.auth_url = (auth_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def resolve(self, token: Optional[str]) -> Identity:
        """
        Verify token with the provider.

        Raises:
            AuthenticationError: token missing or rejected.
            UnexpectedError: provider unreachable or not configured.
        """
        if not isinstance(token, str) or not token.strip():
            raise AuthenticationError("Missing token")
        if not self.auth_url:
            raise UnexpectedError("Auth provider is not configured")

        headers = {"Authorization": f"Bearer {token.strip()}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        try:
            resp = self._session.get(
                f"{self.auth_url}{USER_PATH}",
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Auth provider request failed: %s", e)
            raise UnexpectedError(f"Auth provider unavailable: {e}") from e

        if resp.status_code != 200:
            logger.info("Token rejected by auth provider (status %s)", resp.status_code)
            raise AuthenticationError("Auth failed")
        try:
            body = resp.json()
        except ValueError as e:
            raise AuthenticationError("Auth failed") from e
        user = body.get("user", body) if isinstance(body, dict) else None
        if not isinstance(user, dict) or not user.get("id"):
            raise AuthenticationError("Auth failed")
        return Identity(
            id=str(user["id"]),
            email=user.get("email"),
            metadata=user.get("user_metadata") or {},
        )


_resolver: Optional[IdentityResolver] = None


def get_identity_resolver() -> IdentityResolver:
    """FastAPI dependency returning the process-wide resolver."""
    global _resolver
    if _resolver is None:
        settings = get_settings()
        _resolver = IdentityResolver(
            auth_url=settings.auth_url,
            api_key=settings.auth_api_key,
            timeout=settings.auth_timeout_seconds,
        )
    return _resolver
