"""Demo reference data: doctors, labs with their tests, and demo users."""

import logging

from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.schema import DOCTORS, LAB_TESTS, LABS
from healthdesk.persistence.store import ChatStore, UserRecord

logger = logging.getLogger(__name__)

DEMO_DOCTORS = [
    {
        "name": "Dr. Alice Smith",
        "specialty": "Cardiology",
        "hospital": "City Hospital",
        "experience": 12,
        "availability": "Mon-Fri 9am-5pm",
        "fees": 150,
        "bio": "Board-certified cardiologist focused on preventive heart care.",
    },
    {
        "name": "Dr. Bob Johnson",
        "specialty": "Dermatology",
        "hospital": "Green Valley Clinic",
        "experience": 8,
        "availability": "Tue-Sat 10am-6pm",
        "fees": 120,
        "bio": "Treats skin conditions in adults and children.",
    },
    {
        "name": "Dr. Carol Lee",
        "specialty": "Pediatrics",
        "hospital": "Sunrise Children's Hospital",
        "experience": 15,
        "availability": "Mon-Thu 8am-4pm",
        "fees": 100,
        "bio": None,
    },
]

DEMO_LABS = [
    {
        "name": "City Lab",
        "address": "123 Main St",
        "time_slots": ["09:00", "11:00", "14:00"],
        "tests": [
            {"name": "Complete Blood Count", "type": "blood", "price": 25},
            {"name": "Lipid Panel", "type": "blood", "price": 40},
        ],
    },
    {
        "name": "Health Diagnostics",
        "address": "456 Oak Ave",
        "time_slots": ["08:00", "12:00", "16:00"],
        "tests": [
            {"name": "Chest X-Ray", "type": "imaging", "price": 90},
            {"name": "Fasting Blood Sugar", "type": "blood", "price": 15},
        ],
    },
]

DEMO_USERS = [
    UserRecord(id="demo-user", email="demo@example.com", type="regular"),
    UserRecord(id="guest-user", email="guest@example.com", type="guest"),
]


async def seed_catalog(records: RecordStore, chat_store: ChatStore) -> None:
    """Insert demo users and, when the catalog is empty, doctors and labs."""
    for user in DEMO_USERS:
        await chat_store.upsert_user(user)

    if await records.select(DOCTORS):
        logger.info("Catalog already seeded, skipping doctors and labs")
        return
    await records.insert_many(DOCTORS, DEMO_DOCTORS)
    for lab in DEMO_LABS:
        tests = lab["tests"]
        row = await records.insert(LABS, {k: v for k, v in lab.items() if k != "tests"})
        await records.insert_many(LAB_TESTS, [{**t, "lab_id": row["id"]} for t in tests])
    logger.info("Seeded %d doctors and %d labs", len(DEMO_DOCTORS), len(DEMO_LABS))
