"""Result shapes for domain records.

These are the payloads tools hand back to the model and that clients render,
so field names are part of the wire contract.
"""

from pydantic import BaseModel


class DoctorSummary(BaseModel):
    id: int
    name: str
    specialty: str


class Doctor(DoctorSummary):
    hospital: str
    experience: int
    availability: str
    fees: int
    bio: str | None = None


class Appointment(BaseModel):
    id: int
    doctor_id: int
    user_id: str
    time: str
    status: str | None = None
    doctor: Doctor | DoctorSummary | None = None


class AmbulanceBooking(BaseModel):
    id: int
    user_id: str
    pickup_location: str
    destination: str
    time: str
    status: str | None = None


class LabTestSummary(BaseModel):
    id: int
    name: str
    type: str
    price: int | None = None


class LabSummary(BaseModel):
    id: int
    name: str
    address: str | None = None


class Lab(LabSummary):
    time_slots: list[str] = []
    tests: list[LabTestSummary] = []


class LabBooking(BaseModel):
    id: int
    user_id: str
    lab_id: int
    lab_test_id: int
    time: str
    location_type: str
    status: str | None = None
    lab: LabSummary | None = None
    test: LabTestSummary | None = None


class MedicationReminder(BaseModel):
    id: int
    medication_id: int
    user_id: str
    date: str
    time_of_day: str
    status: str | None = None


class Medication(BaseModel):
    id: int
    user_id: str
    name: str
    dosage: str
    notes: str | None = None
    start_date: str
    end_date: str | None = None


class AddedMedication(Medication):
    reminders: list[MedicationReminder] = []


class Prescription(BaseModel):
    id: int
    user_id: str
    doctor_id: int
    medication: str
    dosage: str
    instructions: str | None = None
    issued_at: str
    expires_at: str | None = None
    refillable: bool | None = False
    refills_remaining: int | None = 0
    file_url: str | None = None
    status: str | None = None


class PrescriptionRefill(Prescription):
    message: str


class PrescriptionFile(BaseModel):
    url: str
