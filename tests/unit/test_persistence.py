"""Unit tests for SQLite-backed chat and record persistence."""

import pytest

from healthdesk.errors import NotFound
from healthdesk.persistence.records import Join
from healthdesk.persistence.schema import APPOINTMENTS, DOCTORS, LABS, PRESCRIPTIONS
from healthdesk.persistence.seed import DEMO_DOCTORS, seed_catalog
from healthdesk.persistence.store import ChatRecord, MessageRecord, UserRecord
from tests.fakes import ALICE, BOB


async def _chat(chat_store, chat_id="chat-1", user_id=ALICE, visibility="private"):
    return await chat_store.save_chat(
        ChatRecord(id=chat_id, user_id=user_id, title="Booking", visibility=visibility)
    )


def _message(message_id, chat_id="chat-1", role="user", text="hi"):
    return MessageRecord(
        id=message_id,
        chat_id=chat_id,
        role=role,
        parts=[{"type": "text", "text": text}],
    )


@pytest.mark.asyncio
async def test_get_missing_user(chat_store):
    assert await chat_store.get_user("nobody") is None


@pytest.mark.asyncio
async def test_upsert_user_updates_type(chat_store):
    await chat_store.upsert_user(UserRecord(id="u1", email="u1@example.com", type="guest"))
    await chat_store.upsert_user(UserRecord(id="u1", email="u1@example.com", type="regular"))
    user = await chat_store.get_user("u1")
    assert user is not None
    assert user.type == "regular"


@pytest.mark.asyncio
async def test_save_and_get_chat(seeded, chat_store):
    """A saved chat round-trips with a creation timestamp filled in."""
    await _chat(chat_store, visibility="public")
    chat = await chat_store.get_chat("chat-1")
    assert chat is not None
    assert chat.user_id == ALICE
    assert chat.visibility == "public"
    assert chat.created_at
    assert chat.as_dict()["userId"] == ALICE


@pytest.mark.asyncio
async def test_messages_returned_in_insertion_order(seeded, chat_store):
    await _chat(chat_store)
    await chat_store.save_messages([_message("m1", text="first")])
    await chat_store.save_messages([
        _message("m2", role="assistant", text="second"),
        _message("m3", text="third"),
    ])
    messages = await chat_store.get_messages("chat-1")
    assert [m.id for m in messages] == ["m1", "m2", "m3"]
    assert messages[0].parts == [{"type": "text", "text": "first"}]
    assert messages[1].attachments == []
    assert await chat_store.has_message("chat-1", "m2")
    assert not await chat_store.has_message("chat-1", "m9")
    assert not await chat_store.has_message("chat-2", "m1")


@pytest.mark.asyncio
async def test_count_user_messages_only_counts_own_user_role(seeded, chat_store):
    """Assistant messages and other users' chats don't count toward the limit."""
    await _chat(chat_store, "chat-a", ALICE)
    await _chat(chat_store, "chat-b", BOB)
    await chat_store.save_messages([
        _message("a1", "chat-a"),
        _message("a2", "chat-a", role="assistant"),
        _message("a3", "chat-a"),
        _message("b1", "chat-b"),
    ])
    assert await chat_store.count_user_messages(ALICE) == 2
    assert await chat_store.count_user_messages(BOB) == 1


@pytest.mark.asyncio
async def test_stream_ids_oldest_first(seeded, chat_store):
    await _chat(chat_store)
    await chat_store.create_stream_id("s1", "chat-1")
    await chat_store.create_stream_id("s2", "chat-1")
    assert await chat_store.get_stream_ids("chat-1") == ["s1", "s2"]
    assert await chat_store.get_stream_ids("other") == []


@pytest.mark.asyncio
async def test_vote_upserts(seeded, chat_store):
    await _chat(chat_store)
    await chat_store.save_messages([_message("m1", role="assistant")])
    await chat_store.vote_message("chat-1", "m1", is_upvoted=True)
    await chat_store.vote_message("chat-1", "m1", is_upvoted=False)
    votes = await chat_store.get_votes("chat-1")
    assert len(votes) == 1
    assert votes[0].is_upvoted is False


@pytest.mark.asyncio
async def test_delete_chat_removes_dependents(seeded, chat_store):
    await _chat(chat_store)
    await chat_store.save_messages([_message("m1"), _message("m2", role="assistant")])
    await chat_store.vote_message("chat-1", "m2", is_upvoted=True)
    await chat_store.create_stream_id("s1", "chat-1")

    deleted = await chat_store.delete_chat("chat-1")

    assert deleted is not None
    assert deleted.id == "chat-1"
    assert await chat_store.get_chat("chat-1") is None
    assert await chat_store.get_messages("chat-1") == []
    assert await chat_store.get_votes("chat-1") == []
    assert await chat_store.get_stream_ids("chat-1") == []


@pytest.mark.asyncio
async def test_delete_missing_chat(chat_store):
    assert await chat_store.delete_chat("nope") is None


@pytest.mark.asyncio
async def test_seed_is_idempotent(seeded, chat_store):
    await seed_catalog(seeded, chat_store)
    assert len(await seeded.select(DOCTORS)) == len(DEMO_DOCTORS)


@pytest.mark.asyncio
async def test_json_columns_decoded(seeded):
    labs = await seeded.select(LABS)
    assert labs[0]["time_slots"] == ["09:00", "11:00", "14:00"]


@pytest.mark.asyncio
async def test_bool_columns_decoded(seeded):
    row = await seeded.insert(PRESCRIPTIONS, {
        "user_id": ALICE,
        "doctor_id": 1,
        "medication": "Metformin",
        "dosage": "500mg",
        "issued_at": "2026-09-01",
        "refillable": True,
        "refills_remaining": 2,
    })
    assert row["refillable"] is True
    assert row["status"] == "active"


@pytest.mark.asyncio
async def test_select_with_join_nests_reference(seeded):
    await seeded.insert(APPOINTMENTS, {"doctor_id": 1, "user_id": ALICE, "time": "2026-10-20"})
    join = Join(DOCTORS, "doctor_id", "doctor", ("id", "name"))
    rows = await seeded.list_owned(APPOINTMENTS, ALICE, joins=(join,))
    assert rows[0]["doctor"] == {"id": 1, "name": "Dr. Alice Smith"}


@pytest.mark.asyncio
async def test_get_owned_hides_other_users_records(seeded):
    row = await seeded.insert(
        APPOINTMENTS, {"doctor_id": 1, "user_id": ALICE, "time": "2026-10-20"}
    )
    assert (await seeded.get_owned(APPOINTMENTS, row["id"], ALICE))["id"] == row["id"]
    with pytest.raises(NotFound):
        await seeded.get_owned(APPOINTMENTS, row["id"], BOB)


@pytest.mark.asyncio
async def test_update_owned_rejects_other_user(seeded):
    """An update filtered on another user's id changes nothing."""
    row = await seeded.insert(
        APPOINTMENTS, {"doctor_id": 1, "user_id": ALICE, "time": "2026-10-20"}
    )
    with pytest.raises(NotFound, match="not yours"):
        await seeded.update_owned(APPOINTMENTS, row["id"], BOB, {"status": "cancelled"})
    unchanged = await seeded.get(APPOINTMENTS, row["id"])
    assert unchanged["status"] == "booked"


@pytest.mark.asyncio
async def test_unknown_column_rejected(seeded):
    with pytest.raises(ValueError, match="Unknown column"):
        await seeded.select(DOCTORS, {"nickname": "Al"})


@pytest.mark.asyncio
async def test_owner_operations_need_owner_column(seeded):
    with pytest.raises(ValueError, match="no owner column"):
        await seeded.list_owned(DOCTORS, ALICE)
