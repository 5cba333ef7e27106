"""HTTP client for the action endpoint."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from plaza.client.poller import Deliver, FeedPoller

TIMEOUT_SECONDS = 30


class PlazaAPIError(Exception):
    """Non-2xx answer from the API; message is the server's "error" field."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class PlazaClient:
    """One method per action. token is sent with every call when set."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = TIMEOUT_SECONDS,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/api"
        self.token = token
        self.timeout = timeout
        self._session = session or requests.Session()

    def call(self, action: str, **fields: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"action": action}
        if self.token:
            payload["token"] = self.token
        payload.update({k: v for k, v in fields.items() if v is not None})
        resp = self._session.post(self.url, json=payload, timeout=self.timeout)
        if resp.status_code >= 400:
            try:
                message = resp.json().get("error", resp.text)
            except ValueError:
                message = resp.text
            raise PlazaAPIError(resp.status_code, message)
        return resp.json()

    # --- Profiles ---

    def me(self) -> Dict[str, Any]:
        return self.call("me")

    def set_username(self, username: str) -> Dict[str, Any]:
        return self.call("set-username", username=username)

    def get_profile(self, username: Optional[str] = None) -> Dict[str, Any]:
        return self.call("get-profile", username=username)

    def update_profile(self, **patch: Any) -> Dict[str, Any]:
        return self.call("update-profile", patch=patch)

    # --- Chat ---

    def list_messages(
        self, after_id: Optional[int] = None, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self.call("list-messages", after_id=after_id, limit=limit)["messages"]

    def send_message(self, content: str) -> Dict[str, Any]:
        return self.call("send-message", content=content)["message"]

    # --- Listings ---

    def create_listing(self, **fields: Any) -> Dict[str, Any]:
        return self.call("create-listing", **fields)["listing"]

    def list_my_listings(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.call("list-my-listings", limit=limit)["listings"]

    def list_user_listings(
        self, username: str, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self.call("list-user-listings", username=username, limit=limit)[
            "listings"
        ]

    def list_all_listings(
        self,
        region_code: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return self.call(
            "list-all-listings", region_code=region_code, search=search, limit=limit
        )["listings"]

    def get_listing(self, listing_id: int) -> Dict[str, Any]:
        return self.call("get-listing", id=listing_id)["listing"]

    # --- Direct messages ---

    def start_dm(
        self,
        target_username: Optional[str] = None,
        listing_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        return self.call(
            "start-dm", target_username=target_username, listing_id=listing_id
        )["thread"]

    def get_dm_thread(self, thread_id: int) -> Dict[str, Any]:
        return self.call("get-dm-thread", thread_id=thread_id)["thread"]

    def list_dm_messages(
        self,
        thread_id: int,
        after_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return self.call(
            "list-dm-messages", thread_id=thread_id, after_id=after_id, limit=limit
        )["messages"]

    def send_dm_message(self, thread_id: int, content: str) -> Dict[str, Any]:
        return self.call("send-dm-message", thread_id=thread_id, content=content)[
            "message"
        ]

    def list_dm_threads(
        self, listing_id: Optional[int] = None, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self.call("list-dm-threads", listing_id=listing_id, limit=limit)[
            "threads"
        ]

    # --- Polling ---

    def chat_poller(
        self, on_messages: Deliver, interval: Optional[float] = None
    ) -> FeedPoller:
        """Poller for the chat room; call start() to begin and cancel() to stop."""
        return FeedPoller(
            lambda after_id: self.list_messages(after_id=after_id),
            on_messages,
            interval=interval,
        )

    def dm_poller(
        self, thread_id: int, on_messages: Deliver, interval: Optional[float] = None
    ) -> FeedPoller:
        """Poller for one DM thread, independent of any other poller."""
        return FeedPoller(
            lambda after_id: self.list_dm_messages(thread_id, after_id=after_id),
            on_messages,
            interval=interval,
        )
