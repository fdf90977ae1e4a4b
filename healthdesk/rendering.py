"""One-line summaries of tool results, keyed by tool.

Each tool result variant has exactly one renderer. The summaries travel with
``tool-result`` stream events so clients can show a compact status line
without knowing every result shape.
"""

from typing import Any, Callable, Iterable

Renderer = Callable[[Any], str]

_RENDERERS: dict[str, Renderer] = {}


def renders(*tool_names: str) -> Callable[[Renderer], Renderer]:
    """Register the decorated function as the renderer for ``tool_names``."""

    def register(fn: Renderer) -> Renderer:
        for name in tool_names:
            if name in _RENDERERS:
                raise ValueError(f"Renderer for {name} already registered")
            _RENDERERS[name] = fn
        return fn

    return register


def rendered_tools() -> frozenset[str]:
    return frozenset(_RENDERERS)


def missing_renderers(tool_names: Iterable[str]) -> set[str]:
    return set(tool_names) - set(_RENDERERS)


def render_result(tool_name: str, result: dict[str, Any]) -> str:
    if result.get("status") != "success":
        return f"Failed: {result.get('error', 'unknown error')}"
    renderer = _RENDERERS.get(tool_name)
    if renderer is None:
        raise KeyError(f"No renderer registered for tool {tool_name}")
    return renderer(result.get("data"))


def _count(items: list[Any], noun: str) -> str:
    if not items:
        return f"No {noun}s found"
    return f"{len(items)} {noun}{'' if len(items) == 1 else 's'}"


@renders("list_doctors")
def _doctors(data: list[dict[str, Any]]) -> str:
    return _count(data, "doctor")


@renders("doctor_details")
def _doctor(data: dict[str, Any]) -> str:
    return f"{data['name']}, {data['specialty']} at {data['hospital']} (fee {data['fees']})"


@renders("book_appointment")
def _booked_appointment(data: dict[str, Any]) -> str:
    doctor = (data.get("doctor") or {}).get("name", f"doctor #{data['doctor_id']}")
    return f"Appointment #{data['id']} booked with {doctor} at {data['time']}"


@renders("list_appointments")
def _appointments(data: list[dict[str, Any]]) -> str:
    return _count(data, "appointment")


@renders(
    "cancel_appointment",
    "reschedule_appointment",
    "cancel_ambulance_booking",
    "cancel_lab_booking",
)
def _status_change(data: dict[str, Any]) -> str:
    when = f" for {data['time']}" if data.get("time") else ""
    return f"Booking #{data['id']} is now {data['status']}{when}"


@renders("book_ambulance")
def _booked_ambulance(data: dict[str, Any]) -> str:
    return (
        f"Ambulance #{data['id']} booked from {data['pickup_location']} "
        f"to {data['destination']} at {data['time']}"
    )


@renders("list_ambulance_bookings")
def _ambulance_bookings(data: list[dict[str, Any]]) -> str:
    return _count(data, "ambulance booking")


@renders("list_labs")
def _labs(data: list[dict[str, Any]]) -> str:
    return _count(data, "lab")


@renders("book_lab_test")
def _booked_lab_test(data: dict[str, Any]) -> str:
    test = (data.get("test") or {}).get("name", "Lab test")
    lab = (data.get("lab") or {}).get("name", f"lab #{data['lab_id']}")
    return f"{test} booked at {lab} for {data['time']} ({data['location_type']})"


@renders("list_lab_bookings")
def _lab_bookings(data: list[dict[str, Any]]) -> str:
    return _count(data, "lab booking")


@renders("add_medication")
def _added_medication(data: dict[str, Any]) -> str:
    reminders = len(data.get("reminders") or [])
    return f"Added {data['name']} {data['dosage']} with {reminders} reminder(s)"


@renders("list_medications")
def _medications(data: list[dict[str, Any]]) -> str:
    return _count(data, "medication")


@renders("list_medication_reminders")
def _reminders(data: list[dict[str, Any]]) -> str:
    return _count(data, "reminder")


@renders("mark_medication_reminder")
def _marked_reminder(data: dict[str, Any]) -> str:
    return f"Reminder for {data['date']} {data['time_of_day']} marked {data['status']}"


@renders("request_prescription_refill")
def _refill(data: dict[str, Any]) -> str:
    return (
        f"Refill processed for {data['medication']}, "
        f"{data['refills_remaining']} refill(s) remaining"
    )


@renders("list_prescriptions")
def _prescriptions(data: list[dict[str, Any]]) -> str:
    return _count(data, "prescription")


@renders("download_prescription")
def _prescription_file(data: dict[str, Any]) -> str:
    return f"Prescription ready: {data['url']}"
