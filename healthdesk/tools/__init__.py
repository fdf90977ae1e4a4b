"""Healthdesk LangChain tool registry."""

from healthdesk.tools.ambulance import (
    book_ambulance,
    cancel_ambulance_booking,
    list_ambulance_bookings,
)
from healthdesk.tools.appointments import (
    book_appointment,
    cancel_appointment,
    list_appointments,
    reschedule_appointment,
)
from healthdesk.tools.doctors import doctor_details, list_doctors
from healthdesk.tools.labs import book_lab_test, cancel_lab_booking, list_lab_bookings, list_labs
from healthdesk.tools.medications import (
    add_medication,
    list_medication_reminders,
    list_medications,
    mark_medication_reminder,
)
from healthdesk.tools.prescriptions import (
    download_prescription,
    list_prescriptions,
    request_prescription_refill,
)

ALL_TOOLS = [
    list_doctors,
    doctor_details,
    book_appointment,
    list_appointments,
    cancel_appointment,
    reschedule_appointment,
    book_ambulance,
    list_ambulance_bookings,
    cancel_ambulance_booking,
    list_labs,
    book_lab_test,
    list_lab_bookings,
    cancel_lab_booking,
    add_medication,
    list_medications,
    list_medication_reminders,
    mark_medication_reminder,
    request_prescription_refill,
    list_prescriptions,
    download_prescription,
]

TOOLS_BY_NAME = {t.name: t for t in ALL_TOOLS}

__all__ = ["ALL_TOOLS", "TOOLS_BY_NAME"]
