"""Handlers for every API action, registered on `registry` by action name."""

from __future__ import annotations

from typing import Any, Dict

from plaza.core.registry import ActionContext, ActionRegistry
from plaza.exceptions import ValidationError
from plaza.schemas.chat import ChatMessageRead, ListMessagesRequest, SendMessageRequest
from plaza.schemas.listing import (
    GetListingRequest,
    ListAllListingsRequest,
    ListingCreate,
    ListingRead,
    ListingSummary,
    ListMyListingsRequest,
    ListUserListingsRequest,
)
from plaza.schemas.profile import (
    GetProfileRequest,
    ProfileRead,
    SetUsernameRequest,
    UpdateProfileRequest,
)
from plaza.schemas.thread import (
    ListDmMessagesRequest,
    ListDmThreadsRequest,
    SendDmMessageRequest,
    StartDmRequest,
    ThreadMessageRead,
    ThreadRead,
    ThreadRequest,
)
from plaza.services.chat_service import ChatService
from plaza.services.dm_service import DirectMessageService
from plaza.services.listing_service import ListingService
from plaza.services.profile_service import ProfileService

registry = ActionRegistry()


def _dump(schema, obj) -> Dict[str, Any]:
    return schema.model_validate(obj).model_dump(mode="json")


def _require_thread_id(data: ThreadRequest) -> int:
    if data.thread_id is None:
        raise ValidationError("Missing thread_id")
    return data.thread_id


# --- Profiles ---


@registry.register("me")
def me(ctx: ActionContext) -> Dict[str, Any]:
    profile = ProfileService(ctx.db).ensure_profile(ctx.identity().id)
    return _dump(ProfileRead, profile)


@registry.register("set-username")
def set_username(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(SetUsernameRequest)
    profile = ProfileService(ctx.db).set_username(user.id, data.username)
    return _dump(ProfileRead, profile)


@registry.register("get-profile")
def get_profile(ctx: ActionContext) -> Dict[str, Any]:
    data = ctx.payload(GetProfileRequest)
    svc = ProfileService(ctx.db)
    if data.username:
        return _dump(ProfileRead, svc.get_profile(username=data.username))
    if not data.token:
        raise ValidationError("Provide username or token")
    return _dump(ProfileRead, svc.get_profile(identity_id=ctx.identity().id))


@registry.register("update-profile")
def update_profile(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(UpdateProfileRequest)
    profile = ProfileService(ctx.db).update_profile(user.id, data.patch)
    return _dump(ProfileRead, profile)


# --- Chat ---


@registry.register("list-messages")
def list_messages(ctx: ActionContext) -> Dict[str, Any]:
    data = ctx.payload(ListMessagesRequest)
    rows = ChatService(ctx.db).list_messages(after_id=data.after_id, limit=data.limit)
    return {"messages": [_dump(ChatMessageRead, r) for r in rows]}


@registry.register("send-message")
def send_message(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(SendMessageRequest)
    msg = ChatService(ctx.db).send_message(user.id, data.content)
    return {"message": _dump(ChatMessageRead, msg)}


# --- Listings ---


@registry.register("create-listing")
def create_listing(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(ListingCreate)
    listing = ListingService(ctx.db).create_listing(user.id, data)
    return {"listing": _dump(ListingRead, listing)}


@registry.register("list-my-listings")
def list_my_listings(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(ListMyListingsRequest)
    rows = ListingService(ctx.db).list_my_listings(user.id, limit=data.limit)
    return {"listings": [_dump(ListingSummary, r) for r in rows]}


@registry.register("list-user-listings")
def list_user_listings(ctx: ActionContext) -> Dict[str, Any]:
    data = ctx.payload(ListUserListingsRequest)
    rows = ListingService(ctx.db).list_user_listings(data.username, limit=data.limit)
    return {"listings": [_dump(ListingSummary, r) for r in rows]}


@registry.register("list-all-listings")
def list_all_listings(ctx: ActionContext) -> Dict[str, Any]:
    data = ctx.payload(ListAllListingsRequest)
    rows = ListingService(ctx.db).list_all_listings(
        limit=data.limit, region_code=data.region_code, search=data.search
    )
    return {"listings": [_dump(ListingSummary, r) for r in rows]}


@registry.register("get-listing")
def get_listing(ctx: ActionContext) -> Dict[str, Any]:
    data = ctx.payload(GetListingRequest)
    if data.id is None:
        raise ValidationError("Missing id")
    listing = ListingService(ctx.db).get_listing(data.id)
    return {"listing": _dump(ListingRead, listing)}


# --- Direct messages ---


@registry.register("start-dm")
def start_dm(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(StartDmRequest)
    target = data.target_username if data.listing_id is None else None
    if data.listing_id is None and not target:
        raise ValidationError("Missing target_username")
    thread = DirectMessageService(ctx.db).start_dm(
        user.id, target_username=target, listing_id=data.listing_id
    )
    return {"thread": ThreadRead.for_viewer(thread, user.id).model_dump(mode="json")}


@registry.register("get-dm-thread")
def get_dm_thread(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    thread_id = _require_thread_id(ctx.payload(ThreadRequest))
    thread = DirectMessageService(ctx.db).get_thread(user.id, thread_id)
    return {"thread": ThreadRead.for_viewer(thread, user.id).model_dump(mode="json")}


@registry.register("list-dm-messages")
def list_dm_messages(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(ListDmMessagesRequest)
    rows = DirectMessageService(ctx.db).list_messages(
        user.id, _require_thread_id(data), after_id=data.after_id, limit=data.limit
    )
    return {"messages": [_dump(ThreadMessageRead, r) for r in rows]}


@registry.register("send-dm-message")
def send_dm_message(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(SendDmMessageRequest)
    msg = DirectMessageService(ctx.db).send_message(
        user.id, _require_thread_id(data), data.content
    )
    return {"message": _dump(ThreadMessageRead, msg)}


@registry.register("list-dm-threads")
def list_dm_threads(ctx: ActionContext) -> Dict[str, Any]:
    user = ctx.identity()
    data = ctx.payload(ListDmThreadsRequest)
    rows = DirectMessageService(ctx.db).list_threads(
        user.id, listing_id=data.listing_id, limit=data.limit
    )
    return {
        "threads": [ThreadRead.for_viewer(r, user.id).model_dump(mode="json") for r in rows]
    }
