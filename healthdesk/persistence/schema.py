"""Table definitions for the SQLite store.

``Table`` describes a domain table to the generic record operations in
``healthdesk.persistence.records``: which columns exist, which are JSON or
boolean encoded, and which column holds the owning user id.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Table:
    name: str
    columns: tuple[str, ...]
    json_columns: frozenset[str] = field(default_factory=frozenset)
    bool_columns: frozenset[str] = field(default_factory=frozenset)
    owner_column: str | None = "user_id"

    def has_column(self, column: str) -> bool:
        return column in self.columns


DOCTORS = Table(
    name="doctors",
    columns=(
        "id", "name", "specialty", "hospital", "experience",
        "availability", "fees", "bio",
    ),
    owner_column=None,
)

APPOINTMENTS = Table(
    name="appointments",
    columns=("id", "doctor_id", "user_id", "time", "status"),
)

AMBULANCE_BOOKINGS = Table(
    name="ambulance_bookings",
    columns=("id", "user_id", "pickup_location", "destination", "time", "status"),
)

LABS = Table(
    name="labs",
    columns=("id", "name", "address", "time_slots"),
    json_columns=frozenset({"time_slots"}),
    owner_column=None,
)

LAB_TESTS = Table(
    name="lab_tests",
    columns=("id", "lab_id", "name", "type", "price"),
    owner_column=None,
)

LAB_BOOKINGS = Table(
    name="lab_bookings",
    columns=(
        "id", "user_id", "lab_id", "lab_test_id", "time",
        "location_type", "status",
    ),
)

MEDICATIONS = Table(
    name="medications",
    columns=("id", "user_id", "name", "dosage", "notes", "start_date", "end_date"),
)

MEDICATION_REMINDERS = Table(
    name="medication_reminders",
    columns=("id", "medication_id", "user_id", "date", "time_of_day", "status"),
)

PRESCRIPTIONS = Table(
    name="prescriptions",
    columns=(
        "id", "user_id", "doctor_id", "medication", "dosage", "instructions",
        "issued_at", "expires_at", "refillable", "refills_remaining",
        "file_url", "status",
    ),
    bool_columns=frozenset({"refillable"}),
)

PUSH_SUBSCRIPTIONS = Table(
    name="push_subscriptions",
    columns=("id", "user_id", "subscription"),
    json_columns=frozenset({"subscription"}),
)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'regular'
);

CREATE TABLE IF NOT EXISTS chats (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    title TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users(id),
    visibility TEXT NOT NULL DEFAULT 'private'
        CHECK (visibility IN ('public', 'private'))
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    chat_id TEXT NOT NULL REFERENCES chats(id),
    role TEXT NOT NULL,
    parts TEXT NOT NULL,
    attachments TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_messages_chat ON messages(chat_id, created_at);

CREATE TABLE IF NOT EXISTS votes (
    chat_id TEXT NOT NULL REFERENCES chats(id),
    message_id TEXT NOT NULL REFERENCES messages(id),
    is_upvoted INTEGER NOT NULL,
    PRIMARY KEY (chat_id, message_id)
);

CREATE TABLE IF NOT EXISTS streams (
    id TEXT PRIMARY KEY,
    chat_id TEXT NOT NULL REFERENCES chats(id),
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS doctors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    specialty TEXT NOT NULL,
    hospital TEXT NOT NULL,
    experience INTEGER NOT NULL,
    availability TEXT NOT NULL,
    fees INTEGER NOT NULL,
    bio TEXT
);

CREATE TABLE IF NOT EXISTS appointments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    doctor_id INTEGER NOT NULL REFERENCES doctors(id),
    user_id TEXT NOT NULL,
    time TEXT NOT NULL,
    status TEXT DEFAULT 'booked'
);

CREATE TABLE IF NOT EXISTS ambulance_bookings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    pickup_location TEXT NOT NULL,
    destination TEXT NOT NULL,
    time TEXT NOT NULL,
    status TEXT DEFAULT 'booked'
);

CREATE TABLE IF NOT EXISTS labs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    address TEXT NOT NULL,
    time_slots TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS lab_tests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    lab_id INTEGER NOT NULL REFERENCES labs(id),
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    price INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS lab_bookings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    lab_id INTEGER NOT NULL REFERENCES labs(id),
    lab_test_id INTEGER NOT NULL REFERENCES lab_tests(id),
    time TEXT NOT NULL,
    location_type TEXT NOT NULL,
    status TEXT DEFAULT 'booked'
);

CREATE TABLE IF NOT EXISTS medications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    dosage TEXT NOT NULL,
    notes TEXT,
    start_date TEXT NOT NULL,
    end_date TEXT
);

CREATE TABLE IF NOT EXISTS medication_reminders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    medication_id INTEGER NOT NULL REFERENCES medications(id),
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    time_of_day TEXT NOT NULL,
    status TEXT DEFAULT 'pending'
);

CREATE TABLE IF NOT EXISTS push_subscriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    subscription TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS prescriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    doctor_id INTEGER NOT NULL REFERENCES doctors(id),
    medication TEXT NOT NULL,
    dosage TEXT NOT NULL,
    instructions TEXT,
    issued_at TEXT NOT NULL,
    expires_at TEXT,
    refillable INTEGER DEFAULT 0,
    refills_remaining INTEGER DEFAULT 0,
    file_url TEXT,
    status TEXT DEFAULT 'active'
);
"""
