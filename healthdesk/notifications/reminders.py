"""Push delivery of medication reminders that are due this minute."""

import logging
from datetime import datetime

from healthdesk.clients.push import PushClient
from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.schema import MEDICATION_REMINDERS, MEDICATIONS, PUSH_SUBSCRIPTIONS

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Medication Reminder"
REMINDER_ICON = "/icon-192.png"


def reminder_payload(medication: dict) -> dict[str, str]:
    return {
        "title": REMINDER_TITLE,
        "body": (
            f"Time to take your medication: {medication['name']} ({medication['dosage']})"
        ),
        "icon": REMINDER_ICON,
    }


async def send_due_medication_reminders(
    records: RecordStore, push: PushClient, now: datetime
) -> int:
    """Notify every subscription of each user with a pending reminder due at ``now``.

    Reminders are matched on the exact date and ``HH:MM``. Returns the number
    of notifications delivered.
    """
    due = await records.select(
        MEDICATION_REMINDERS,
        {
            "status": "pending",
            "date": now.date().isoformat(),
            "time_of_day": now.strftime("%H:%M"),
        },
    )
    sent = 0
    for reminder in due:
        medication = await records.get(MEDICATIONS, reminder["medication_id"])
        if medication is None:
            logger.warning("Reminder %s points at a missing medication", reminder["id"])
            continue
        payload = reminder_payload(medication)
        subscriptions = await records.select(
            PUSH_SUBSCRIPTIONS, {"user_id": reminder["user_id"]}
        )
        for row in subscriptions:
            if await push.send(row["subscription"], payload):
                sent += 1
    logger.info("Sent %d reminder notification(s) for %d due reminder(s)", sent, len(due))
    return sent
