"""Scheduling workflows: registration, booking, slot management, consultations."""

import logging
from dataclasses import dataclass, replace
from datetime import date, time
from enum import Enum
from typing import Any, Callable

from clinic_scheduler.scheduling.channels import NotificationChannel
from clinic_scheduler.scheduling.database.errors import StorageError
from clinic_scheduler.scheduling.database.records import (
    Appointment,
    AppointmentStatus,
    ConsultationRecord,
    Doctor,
    IdKind,
    ObserverRef,
    Patient,
    ScheduleSlot,
    check_encodable,
)
from clinic_scheduler.scheduling.database.store import DataStore
from clinic_scheduler.scheduling.notifier import Notifier

logger = logging.getLogger(__name__)

DISPLAY_DATE_FORMAT = "%d-%m-%Y"


class Failure(Enum):
    """Why a workflow operation was rejected."""
    PATIENT_NOT_FOUND = "Patient not found."
    DOCTOR_NOT_FOUND = "Doctor not found."
    SLOT_NOT_FOUND = "Slot not found."
    SLOT_UNAVAILABLE = "Slot is already booked by another patient."
    SLOT_ALREADY_BOOKED = "Slot cannot be removed because it is already booked."
    NOT_SLOT_OWNER = "Slot belongs to another doctor."
    INVALID_TIME_RANGE = "End time must be after start time."
    APPOINTMENT_NOT_FOUND = "Appointment not found."
    NOT_APPOINTMENT_OWNER = "Appointment belongs to another doctor."
    ALREADY_COMPLETED = "Appointment is already completed."

    @property
    def reason(self) -> str:
        return self.value


@dataclass
class Outcome:
    """Result of a workflow call: a value on success, a Failure otherwise."""
    value: Any = None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def reason(self) -> str | None:
        return self.failure.reason if self.failure else None

    @classmethod
    def rejected(cls, failure: Failure) -> "Outcome":
        return cls(failure=failure)


class SchedulingService:
    """Workflow operations over one store and one notifier."""

    def __init__(self, store: DataStore, notifier: Notifier, today: Callable[[], date] = date.today):
        self.store = store
        self.notifier = notifier
        self.today = today

    # Factory operations

    def register_patient(self, name: str, email: str, phone: str, address: str) -> Patient:
        """Create a patient with a fresh id and store it.

        Text the data files cannot hold raises RecordFormatError before any
        id is issued.
        """
        check_encodable(name, email, phone, address)
        patient = Patient(
            id=self.store.generate_id(IdKind.PATIENT),
            name=name,
            email=email,
            phone=phone,
            address=address,
        )
        self.store.add_patient(patient)
        logger.info("Registered patient %s", patient.id)
        return patient

    def create_doctor(self, name: str, specialization: str) -> Doctor:
        """Create a doctor with a fresh id and store it."""
        check_encodable(name, specialization)
        doctor = Doctor(
            id=self.store.generate_id(IdKind.DOCTOR),
            name=name,
            specialization=specialization,
        )
        self.store.add_doctor(doctor)
        logger.info("Created doctor %s", doctor.id)
        return doctor

    def set_notification_channel(self, kind: IdKind, user_id: str, channel: NotificationChannel) -> Outcome:
        """Select the channel future notifications to this user go through."""
        if kind == IdKind.PATIENT:
            user = self.store.get_patient(user_id)
            missing = Failure.PATIENT_NOT_FOUND
        elif kind == IdKind.DOCTOR:
            user = self.store.get_doctor(user_id)
            missing = Failure.DOCTOR_NOT_FOUND
        else:
            raise ValueError(f"Only patients and doctors receive notifications, not {kind.name}")

        if user is None:
            return Outcome.rejected(missing)
        user.channel = channel
        return Outcome(user)

    # Booking

    def book_slot(self, patient_id: str, slot_id: str) -> Outcome:
        """Book an available slot for a patient and notify both parties."""
        patient = self.store.get_patient(patient_id)
        if patient is None:
            return Outcome.rejected(Failure.PATIENT_NOT_FOUND)

        slot = self.store.get_slot(slot_id)
        if slot is None:
            return Outcome.rejected(Failure.SLOT_NOT_FOUND)
        if not slot.available:
            return Outcome.rejected(Failure.SLOT_UNAVAILABLE)

        doctor = self.store.get_doctor(slot.doctor_id)
        appointment = Appointment(
            id=self.store.generate_id(IdKind.APPOINTMENT),
            patient_id=patient.id,
            slot_id=slot.id,
            booking_date=self.today(),
        )
        appointment.attach(ObserverRef.patient(patient.id))
        if doctor is not None:
            appointment.attach(ObserverRef.doctor(doctor.id))

        # The slot is taken first so a failed appointment write can hand it back
        self.store.update_slot(replace(slot, available=False))
        try:
            self.store.add_appointment(appointment)
        except StorageError:
            self.store.update_slot(slot)
            raise

        doctor_name = doctor.name if doctor else "the doctor"
        appointment.notify_observers(
            f"Booking confirmed! Appointment ID: {appointment.id} with {doctor_name} "
            f"on {slot.date.strftime(DISPLAY_DATE_FORMAT)}",
            self.notifier.notify,
        )
        logger.info("Patient %s booked slot %s as %s", patient.id, slot.id, appointment.id)
        return Outcome(appointment)

    # Slot management

    def add_slot(self, doctor_id: str, slot_date: date, start_time: time, end_time: time) -> Outcome:
        """Publish a new available slot for a doctor."""
        if self.store.get_doctor(doctor_id) is None:
            return Outcome.rejected(Failure.DOCTOR_NOT_FOUND)
        if end_time <= start_time:
            return Outcome.rejected(Failure.INVALID_TIME_RANGE)

        slot = ScheduleSlot(
            id=self.store.generate_id(IdKind.SLOT),
            doctor_id=doctor_id,
            date=slot_date,
            start_time=start_time,
            end_time=end_time,
        )
        self.store.add_slot(slot)
        logger.info("Doctor %s added slot %s", doctor_id, slot.id)
        return Outcome(slot)

    def remove_slot(self, doctor_id: str, slot_id: str) -> Outcome:
        """Withdraw one of the doctor's slots while nobody has booked it."""
        slot = self.store.get_slot(slot_id)
        if slot is None:
            return Outcome.rejected(Failure.SLOT_NOT_FOUND)
        if slot.doctor_id != doctor_id:
            return Outcome.rejected(Failure.NOT_SLOT_OWNER)
        if not slot.available:
            return Outcome.rejected(Failure.SLOT_ALREADY_BOOKED)

        self.store.remove_slot(slot_id)
        logger.info("Doctor %s removed slot %s", doctor_id, slot_id)
        return Outcome(slot)

    # Consultations

    def check_completion(self, doctor_id: str, appointment_id: str) -> Outcome:
        """Whether the doctor may complete this appointment. Changes nothing."""
        appointment = self.store.get_appointment(appointment_id)
        if appointment is None:
            return Outcome.rejected(Failure.APPOINTMENT_NOT_FOUND)

        slot = self.store.get_slot(appointment.slot_id)
        if slot is None or slot.doctor_id != doctor_id:
            return Outcome.rejected(Failure.NOT_APPOINTMENT_OWNER)
        if not appointment.status.can_become(AppointmentStatus.COMPLETED):
            return Outcome.rejected(Failure.ALREADY_COMPLETED)
        return Outcome(appointment)

    def complete_consultation(self, doctor_id: str, appointment_id: str, diagnosis: str, notes: str = "") -> Outcome:
        """Record the consultation outcome and mark the appointment completed.

        Both parties are notified only once the appointment and its record
        are on disk.
        """
        check = self.check_completion(doctor_id, appointment_id)
        if not check.ok:
            return check
        appointment = check.value
        # Rejects unencodable text before an id is issued
        check_encodable(diagnosis, notes)

        record = ConsultationRecord(
            id=self.store.generate_id(IdKind.HISTORY),
            appointment_id=appointment.id,
            record_date=self.today(),
            diagnosis=diagnosis,
            notes=notes,
        )

        completed = replace(appointment, observers=list(appointment.observers))
        if self.store.get_patient(appointment.patient_id) is not None:
            completed.attach(ObserverRef.patient(appointment.patient_id))
        if self.store.get_doctor(doctor_id) is not None:
            completed.attach(ObserverRef.doctor(doctor_id))

        with self.notifier.deferred():
            completed.set_status(AppointmentStatus.COMPLETED, self.notifier.notify)
            self.store.update_appointment(completed)
            try:
                self.store.add_consultation_record(record)
            except StorageError:
                self.store.update_appointment(appointment)
                raise

        logger.info("Doctor %s completed %s with record %s", doctor_id, appointment.id, record.id)
        return Outcome(record)
