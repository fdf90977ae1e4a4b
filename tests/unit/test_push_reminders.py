"""Tests for web push delivery and medication reminder fan-out."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pywebpush import WebPushException

from healthdesk.clients.push import PushClient
from healthdesk.main import app
from healthdesk.notifications.reminders import reminder_payload, send_due_medication_reminders
from healthdesk.persistence.schema import MEDICATION_REMINDERS, MEDICATIONS, PUSH_SUBSCRIPTIONS
from tests.fakes import ALICE, BOB, auth

SUBSCRIPTION = {
    "endpoint": "https://push.example.com/send/abc",
    "keys": {"p256dh": "BNc...", "auth": "tBH..."},
}
NOW = datetime(2026, 10, 19, 8, 0, 30)


async def _medication_with_reminder(
    records, user_id=ALICE, time_of_day="08:00", status="pending"
):
    medication = await records.insert(MEDICATIONS, {
        "user_id": user_id,
        "name": "Metformin",
        "dosage": "500mg",
        "start_date": "2026-10-19",
    })
    await records.insert(MEDICATION_REMINDERS, {
        "medication_id": medication["id"],
        "user_id": user_id,
        "date": "2026-10-19",
        "time_of_day": time_of_day,
        "status": status,
    })
    return medication


def _push(ok=True):
    push = MagicMock()
    push.send = AsyncMock(return_value=ok)
    return push


def test_reminder_payload():
    payload = reminder_payload({"name": "Metformin", "dosage": "500mg"})
    assert payload == {
        "title": "Medication Reminder",
        "body": "Time to take your medication: Metformin (500mg)",
        "icon": "/icon-192.png",
    }


@pytest.mark.asyncio
async def test_push_client_sends_with_vapid():
    client = PushClient("private-key", "mailto:ops@example.com")
    with patch("healthdesk.clients.push.webpush") as webpush:
        assert await client.send(SUBSCRIPTION, {"title": "Hi"}) is True
    kwargs = webpush.call_args.kwargs
    assert kwargs["subscription_info"] == SUBSCRIPTION
    assert kwargs["data"] == '{"title": "Hi"}'
    assert kwargs["vapid_private_key"] == "private-key"
    assert kwargs["vapid_claims"] == {"sub": "mailto:ops@example.com"}


@pytest.mark.asyncio
async def test_push_client_reports_failure():
    client = PushClient("private-key", "mailto:ops@example.com")
    with patch(
        "healthdesk.clients.push.webpush", side_effect=WebPushException("410 Gone")
    ):
        assert await client.send(SUBSCRIPTION, {"title": "Hi"}) is False


@pytest.mark.asyncio
async def test_due_reminders_reach_every_subscription(seeded):
    await _medication_with_reminder(seeded)
    await seeded.insert(PUSH_SUBSCRIPTIONS, {"user_id": ALICE, "subscription": SUBSCRIPTION})
    await seeded.insert(PUSH_SUBSCRIPTIONS, {"user_id": ALICE, "subscription": SUBSCRIPTION})
    push = _push()

    sent = await send_due_medication_reminders(seeded, push, NOW)

    assert sent == 2
    subscription, payload = push.send.call_args.args
    assert subscription == SUBSCRIPTION
    assert payload["body"] == "Time to take your medication: Metformin (500mg)"


@pytest.mark.asyncio
async def test_only_pending_reminders_due_now(seeded):
    await _medication_with_reminder(seeded, time_of_day="09:00")
    await _medication_with_reminder(seeded, status="taken")
    await _medication_with_reminder(seeded, user_id=BOB)
    await seeded.insert(PUSH_SUBSCRIPTIONS, {"user_id": ALICE, "subscription": SUBSCRIPTION})
    push = _push()

    assert await send_due_medication_reminders(seeded, push, NOW) == 0
    push.send.assert_not_called()


@pytest.mark.asyncio
async def test_failed_deliveries_not_counted(seeded):
    await _medication_with_reminder(seeded)
    await seeded.insert(PUSH_SUBSCRIPTIONS, {"user_id": ALICE, "subscription": SUBSCRIPTION})
    assert await send_due_medication_reminders(seeded, _push(ok=False), NOW) == 0


@pytest.mark.asyncio
async def test_subscribe_endpoint(client, tool_store):
    resp = await client.post(
        "/api/push/subscribe", json={"subscription": SUBSCRIPTION}, headers=auth()
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    [row] = await tool_store.select(PUSH_SUBSCRIPTIONS, {"user_id": ALICE})
    assert row["subscription"] == SUBSCRIPTION


@pytest.mark.asyncio
async def test_subscribe_requires_keys(client):
    resp = await client.post(
        "/api/push/subscribe",
        json={"subscription": {"endpoint": "https://push.example.com"}},
        headers=auth(),
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_send_reminders_endpoint(client, tool_store, monkeypatch):
    class FrozenDatetime(datetime):
        @classmethod
        def now(cls, tz=None):
            return NOW

    monkeypatch.setattr("healthdesk.routes.push.datetime", FrozenDatetime)
    await _medication_with_reminder(tool_store)
    await tool_store.insert(PUSH_SUBSCRIPTIONS, {"user_id": ALICE, "subscription": SUBSCRIPTION})
    app.state.push_client = _push()

    resp = await client.post("/api/push/send-reminders", headers=auth())

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "sent": 1}
