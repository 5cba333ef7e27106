"""Tests for ChatService."""

import pytest

from plaza.exceptions import ValidationError
from plaza.services.chat_service import ChatService
from plaza.services.profile_service import ProfileService


@pytest.fixture
def chat_history(db, setup_profile):
    """Twelve chat messages from setup_profile."""
    svc = ChatService(db)
    return [svc.send_message(setup_profile.id, f"hello {i}") for i in range(12)]


def test_send_message_trims_and_snapshots_username(db, setup_profile):
    msg = ChatService(db).send_message(setup_profile.id, "   hi there  ")
    assert msg.id is not None
    assert msg.content == "hi there"
    assert msg.user_id == setup_profile.id
    assert msg.username == setup_profile.username
    assert msg.created_at is not None


def test_send_message_truncates_to_500(db, setup_profile):
    text = "".join(chr(ord("a") + i % 26) for i in range(600))
    msg = ChatService(db).send_message(setup_profile.id, text)
    assert msg.content == text[:500]


@pytest.mark.parametrize("content", ["", "    ", None, 42])
def test_send_message_rejects_empty(db, setup_profile, content):
    with pytest.raises(ValidationError, match="Empty message"):
        ChatService(db).send_message(setup_profile.id, content)


def test_send_message_requires_username(db, make_profile):
    profile = make_profile(username=None)
    with pytest.raises(ValidationError, match="Username not set"):
        ChatService(db).send_message(profile.id, "hello")


def test_send_message_creates_profile_for_new_identity(db, faker):
    identity_id = faker.uuid4()
    with pytest.raises(ValidationError, match="Username not set"):
        ChatService(db).send_message(identity_id, "hello")
    assert ProfileService(db).get_by_id(identity_id) is not None


def test_username_change_does_not_rewrite_history(db, setup_profile):
    svc = ChatService(db)
    old_name = setup_profile.username
    first = svc.send_message(setup_profile.id, "before")
    ProfileService(db).set_username(setup_profile.id, "renamed_user")
    second = svc.send_message(setup_profile.id, "after")
    db.expire_all()
    messages = svc.list_messages()
    assert [m.username for m in messages] == [old_name, "renamed_user"]
    assert [m.id for m in messages] == [first.id, second.id]


def test_list_messages_ascending(db, chat_history):
    messages = ChatService(db).list_messages()
    ids = [m.id for m in messages]
    assert ids == sorted(ids)
    assert len(messages) == 12


def test_list_messages_after_id_is_exclusive(db, chat_history):
    cursor = chat_history[4].id
    messages = ChatService(db).list_messages(after_id=cursor)
    assert all(m.id > cursor for m in messages)
    assert [m.id for m in messages] == [m.id for m in chat_history[5:]]


def test_list_messages_limit(db, chat_history):
    messages = ChatService(db).list_messages(limit=3)
    assert [m.id for m in messages] == [m.id for m in chat_history[:3]]


def test_list_messages_limit_is_capped(db, setup_profile):
    svc = ChatService(db)
    for i in range(105):
        svc.send_message(setup_profile.id, f"m{i}")
    assert len(svc.list_messages(limit=500)) == 100
    assert len(svc.list_messages()) == 50


def test_list_messages_past_end_is_empty(db, chat_history):
    assert ChatService(db).list_messages(after_id=chat_history[-1].id) == []
