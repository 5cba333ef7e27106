"""Tests for DirectMessageService."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from plaza.exceptions import AuthorizationError, NotFoundError, ValidationError
from plaza.models.thread import Thread
from plaza.services.dm_service import DirectMessageService, order_pair
from plaza.services.profile_service import ProfileService


def test_order_pair():
    assert order_pair("b", "a") == ("a", "b")
    assert order_pair("a", "b") == ("a", "b")


def test_start_dm_by_username_creates_thread(db, setup_profile, setup_other_profile):
    thread = DirectMessageService(db).start_dm(
        setup_profile.id, target_username=setup_other_profile.username
    )
    assert thread.id is not None
    assert thread.user_a_id < thread.user_b_id
    assert {thread.user_a_id, thread.user_b_id} == {
        setup_profile.id,
        setup_other_profile.id,
    }
    assert thread.username_for(setup_profile.id) == setup_profile.username
    assert thread.username_for(setup_other_profile.id) == setup_other_profile.username
    assert thread.listing_id is None


def test_start_dm_is_canonical_in_both_directions(db, setup_profile, setup_other_profile):
    svc = DirectMessageService(db)
    ab = svc.start_dm(setup_profile.id, target_username=setup_other_profile.username)
    ba = svc.start_dm(setup_other_profile.id, target_username=setup_profile.username)
    assert ab.id == ba.id
    assert db.query(Thread).count() == 1


def test_start_dm_listing_and_general_threads_are_distinct(
    db, setup_profile, setup_other_profile, setup_listing
):
    svc = DirectMessageService(db)
    about_listing = svc.start_dm(setup_profile.id, listing_id=setup_listing.id)
    general = svc.start_dm(setup_profile.id, target_username=setup_other_profile.username)
    assert about_listing.id != general.id
    assert about_listing.listing_id == setup_listing.id
    assert general.listing_id is None
    # Repeating either call reuses its thread.
    assert svc.start_dm(setup_profile.id, listing_id=setup_listing.id).id == about_listing.id
    assert (
        svc.start_dm(setup_profile.id, target_username=setup_other_profile.username).id
        == general.id
    )


def test_start_dm_per_listing_threads(db, setup_profile, setup_other_profile, make_listing):
    svc = DirectMessageService(db)
    first = make_listing(setup_other_profile)
    second = make_listing(setup_other_profile)
    t1 = svc.start_dm(setup_profile.id, listing_id=first.id)
    t2 = svc.start_dm(setup_profile.id, listing_id=second.id)
    assert t1.id != t2.id


def test_start_dm_listing_uses_owner_current_username(
    db, setup_profile, setup_other_profile, setup_listing
):
    """The owner's profile is the source of truth, not the listing snapshot."""
    ProfileService(db).set_username(setup_other_profile.id, "new_owner_name")
    thread = DirectMessageService(db).start_dm(setup_profile.id, listing_id=setup_listing.id)
    assert thread.username_for(setup_other_profile.id) == "new_owner_name"
    assert setup_listing.username != "new_owner_name"


def test_start_dm_listing_owner_without_profile(db, setup_profile, make_listing, faker):
    """An owner with no profile row gets one; the listing name is the fallback."""

    class Owner:
        id = faker.uuid4()
        username = "ghost_owner"

    listing = make_listing(Owner)
    thread = DirectMessageService(db).start_dm(setup_profile.id, listing_id=listing.id)
    assert thread.username_for(Owner.id) == "ghost_owner"
    assert ProfileService(db).get_by_id(Owner.id) is not None


def test_start_dm_listing_not_found(db, setup_profile):
    with pytest.raises(NotFoundError, match="Listing not found"):
        DirectMessageService(db).start_dm(setup_profile.id, listing_id=12345)


def test_start_dm_user_not_found(db, setup_profile):
    with pytest.raises(NotFoundError, match="User not found"):
        DirectMessageService(db).start_dm(setup_profile.id, target_username="nobody_x")


def test_start_dm_with_self(db, setup_profile):
    with pytest.raises(ValidationError, match="Cannot message yourself"):
        DirectMessageService(db).start_dm(
            setup_profile.id, target_username=setup_profile.username
        )


def test_start_dm_on_own_listing(db, setup_other_profile, setup_listing):
    with pytest.raises(ValidationError, match="Cannot message yourself"):
        DirectMessageService(db).start_dm(setup_other_profile.id, listing_id=setup_listing.id)


def test_start_dm_requires_caller_username(db, make_profile, setup_other_profile):
    caller = make_profile(username=None)
    with pytest.raises(ValidationError, match="Set your username first"):
        DirectMessageService(db).start_dm(
            caller.id, target_username=setup_other_profile.username
        )


@pytest.mark.parametrize("kwargs", [{}, {"target_username": "x", "listing_id": 1}])
def test_start_dm_requires_exactly_one_target(db, setup_profile, kwargs):
    with pytest.raises(ValidationError):
        DirectMessageService(db).start_dm(setup_profile.id, **kwargs)


def test_get_thread_member(db, setup_thread, setup_profile, setup_other_profile):
    svc = DirectMessageService(db)
    assert svc.get_thread(setup_profile.id, setup_thread.id).id == setup_thread.id
    assert svc.get_thread(setup_other_profile.id, setup_thread.id).id == setup_thread.id


def test_get_thread_non_member(db, setup_thread, make_profile):
    outsider = make_profile()
    with pytest.raises(AuthorizationError):
        DirectMessageService(db).get_thread(outsider.id, setup_thread.id)


def test_get_thread_unknown_id_is_forbidden(db, setup_profile):
    with pytest.raises(AuthorizationError):
        DirectMessageService(db).get_thread(setup_profile.id, 424242)


def test_send_message_uses_thread_snapshot_name(
    db, setup_thread, setup_other_profile
):
    """Renaming after thread creation does not change the sender name on new messages."""
    old_name = setup_other_profile.username
    ProfileService(db).set_username(setup_other_profile.id, "renamed_later")
    msg = DirectMessageService(db).send_message(
        setup_other_profile.id, setup_thread.id, "  hi  "
    )
    assert msg.content == "hi"
    assert msg.sender_id == setup_other_profile.id
    assert msg.sender_username == old_name


def test_send_message_truncates_to_1000(db, setup_thread, setup_profile):
    text = "x" * 999 + "yz" + "w" * 199
    msg = DirectMessageService(db).send_message(setup_profile.id, setup_thread.id, text)
    assert len(msg.content) == 1000
    assert msg.content == text[:1000]


@pytest.mark.parametrize("content", ["", "   ", None])
def test_send_message_rejects_empty(db, setup_thread, setup_profile, content):
    with pytest.raises(ValidationError, match="Empty message"):
        DirectMessageService(db).send_message(setup_profile.id, setup_thread.id, content)


def test_send_message_non_member(db, setup_thread, make_profile):
    outsider = make_profile()
    with pytest.raises(AuthorizationError):
        DirectMessageService(db).send_message(outsider.id, setup_thread.id, "let me in")


def test_list_messages_cursor(db, setup_thread, setup_thread_messages, setup_other_profile):
    svc = DirectMessageService(db)
    all_msgs = svc.list_messages(setup_other_profile.id, setup_thread.id)
    assert [m.id for m in all_msgs] == [m.id for m in setup_thread_messages]
    cursor = setup_thread_messages[1].id
    after = svc.list_messages(setup_other_profile.id, setup_thread.id, after_id=cursor)
    assert [m.id for m in after] == [m.id for m in setup_thread_messages[2:]]
    page = svc.list_messages(setup_other_profile.id, setup_thread.id, limit=2)
    assert len(page) == 2


def test_list_messages_scoped_to_thread(
    db, setup_thread, setup_thread_messages, setup_profile, make_profile
):
    svc = DirectMessageService(db)
    third = make_profile()
    other_thread = svc.start_dm(setup_profile.id, target_username=third.username)
    svc.send_message(third.id, other_thread.id, "separate")
    msgs = svc.list_messages(setup_profile.id, setup_thread.id)
    assert all(m.thread_id == setup_thread.id for m in msgs)


def test_list_messages_non_member(db, setup_thread, make_profile):
    with pytest.raises(AuthorizationError):
        DirectMessageService(db).list_messages(make_profile().id, setup_thread.id)


def test_list_threads(db, setup_profile, setup_other_profile, setup_listing, make_profile):
    svc = DirectMessageService(db)
    third = make_profile()
    general = svc.start_dm(setup_profile.id, target_username=setup_other_profile.username)
    about_listing = svc.start_dm(setup_profile.id, listing_id=setup_listing.id)
    with_third = svc.start_dm(third.id, target_username=setup_profile.username)
    svc.start_dm(third.id, target_username=setup_other_profile.username)

    rows = svc.list_threads(setup_profile.id)
    assert [t.id for t in rows] == [with_third.id, about_listing.id, general.id]

    filtered = svc.list_threads(setup_profile.id, listing_id=setup_listing.id)
    assert [t.id for t in filtered] == [about_listing.id]

    assert len(svc.list_threads(setup_profile.id, limit=1)) == 1


def test_start_dm_tolerates_concurrent_insert(
    db, setup_thread, setup_profile, setup_other_profile
):
    """A duplicate-key failure on thread insert returns the thread that won."""
    svc = DirectMessageService(db)
    real_find = svc._find_thread
    misses = [None]

    def racing_find(*args):
        return misses.pop() if misses else real_find(*args)

    with patch.object(svc, "_find_thread", side_effect=racing_find):
        thread = svc.start_dm(
            setup_profile.id, target_username=setup_other_profile.username
        )
    assert thread.id == setup_thread.id
    assert db.query(Thread).count() == 1


def test_start_dm_listing_tolerates_concurrent_insert(
    db, setup_profile, setup_other_profile, setup_listing
):
    svc = DirectMessageService(db)
    existing = svc.start_dm(setup_profile.id, listing_id=setup_listing.id)
    real_find = svc._find_thread
    misses = [None]

    def racing_find(*args):
        return misses.pop() if misses else real_find(*args)

    with patch.object(svc, "_find_thread", side_effect=racing_find):
        thread = svc.start_dm(setup_profile.id, listing_id=setup_listing.id)
    assert thread.id == existing.id
    assert db.query(Thread).count() == 1


def _duplicate(thread, listing_id=None):
    return Thread(
        user_a_id=thread.user_a_id,
        user_b_id=thread.user_b_id,
        user_a_username=thread.user_a_username,
        user_b_username=thread.user_b_username,
        listing_id=listing_id,
    )


def test_general_thread_key_is_unique(db, setup_thread):
    db.add(_duplicate(setup_thread))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_listing_thread_key_is_unique(db, setup_thread, setup_listing):
    db.add(_duplicate(setup_thread, listing_id=setup_listing.id))
    db.commit()
    db.add(_duplicate(setup_thread, listing_id=setup_listing.id))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
    assert db.query(Thread).count() == 2
