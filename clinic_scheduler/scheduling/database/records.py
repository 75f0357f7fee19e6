"""Clinic records and their single-line storage format."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Callable

from clinic_scheduler.scheduling.channels import (
    DEFAULT_DOCTOR_CHANNEL,
    DEFAULT_PATIENT_CHANNEL,
    PATIENT_ADDRESS_FIELDS,
    NotificationChannel,
)

from .errors import RecordFormatError, RecordParseError
from .schema import (
    APPOINTMENT_FIELDS,
    DATE_FORMAT,
    DELIMITER,
    DOCTOR_FIELDS,
    HISTORY_FIELDS,
    PATIENT_FIELDS,
    SLOT_FIELDS,
    TIME_FORMAT,
)


class IdKind(Enum):
    """Record kinds with their id prefix, in counters file order."""
    PATIENT = "P"
    DOCTOR = "D"
    SLOT = "S"
    APPOINTMENT = "A"
    HISTORY = "H"

    @property
    def prefix(self) -> str:
        return self.value


ID_PATTERN = re.compile(r"^([PDSAH])(\d{3,})$")


def format_id(kind: IdKind, sequence: int) -> str:
    """Format an id as prefix plus zero-padded sequence, e.g. P001."""
    return f"{kind.prefix}{sequence:03d}"


def id_sequence(record_id: str) -> int:
    """Numeric part of an id. P1000 sorts after P999."""
    match = ID_PATTERN.match(record_id)
    if not match:
        raise ValueError(f"Not a record id: {record_id!r}")
    return int(match.group(2))


class AppointmentStatus(Enum):
    BOOKED = "Booked"
    COMPLETED = "Completed"

    def can_become(self, status: "AppointmentStatus") -> bool:
        return status in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS = {
    AppointmentStatus.BOOKED: {AppointmentStatus.COMPLETED},
    AppointmentStatus.COMPLETED: set(),
}


@dataclass(frozen=True)
class ObserverRef:
    """An appointment observer, resolved against the store at broadcast time."""
    kind: IdKind
    id: str

    @classmethod
    def patient(cls, patient_id: str) -> "ObserverRef":
        return cls(IdKind.PATIENT, patient_id)

    @classmethod
    def doctor(cls, doctor_id: str) -> "ObserverRef":
        return cls(IdKind.DOCTOR, doctor_id)


@dataclass
class Patient:
    id: str
    name: str
    email: str
    phone: str
    address: str
    channel: NotificationChannel = field(default=DEFAULT_PATIENT_CHANNEL, compare=False)

    def contact_address(self) -> str:
        """Address for the currently selected channel."""
        return getattr(self, PATIENT_ADDRESS_FIELDS[self.channel])

    def to_line(self) -> str:
        return _join([self.id, self.name, self.email, self.phone, self.address])

    @classmethod
    def from_line(cls, line: str) -> "Patient":
        parts = _split(line, "patient", PATIENT_FIELDS)
        return cls(
            id=_parse_id(parts[0], IdKind.PATIENT),
            name=parts[1],
            email=parts[2],
            phone=parts[3],
            address=parts[4],
        )


@dataclass
class Doctor:
    id: str
    name: str
    specialization: str
    channel: NotificationChannel = field(default=DEFAULT_DOCTOR_CHANNEL, compare=False)

    def contact_address(self) -> str:
        return self.name

    def to_line(self) -> str:
        return _join([self.id, self.name, self.specialization])

    @classmethod
    def from_line(cls, line: str) -> "Doctor":
        parts = _split(line, "doctor", DOCTOR_FIELDS)
        return cls(
            id=_parse_id(parts[0], IdKind.DOCTOR),
            name=parts[1],
            specialization=parts[2],
        )


@dataclass
class ScheduleSlot:
    id: str
    doctor_id: str
    date: date
    start_time: time
    end_time: time
    available: bool = True

    def to_line(self) -> str:
        return _join([
            self.id,
            self.doctor_id,
            self.date.strftime(DATE_FORMAT),
            self.start_time.strftime(TIME_FORMAT),
            self.end_time.strftime(TIME_FORMAT),
            "true" if self.available else "false",
        ])

    @classmethod
    def from_line(cls, line: str) -> "ScheduleSlot":
        parts = _split(line, "slot", SLOT_FIELDS)
        return cls(
            id=_parse_id(parts[0], IdKind.SLOT),
            doctor_id=_parse_id(parts[1], IdKind.DOCTOR),
            date=_parse_date(parts[2]),
            start_time=_parse_time(parts[3]),
            end_time=_parse_time(parts[4]),
            available=_parse_bool(parts[5]),
        )


@dataclass
class Appointment:
    """A booking of one slot by one patient.

    Observers are not persisted; they are re-attached whenever the
    appointment is about to broadcast.
    """
    id: str
    patient_id: str
    slot_id: str
    booking_date: date
    status: AppointmentStatus = AppointmentStatus.BOOKED
    observers: list[ObserverRef] = field(default_factory=list, compare=False, repr=False)

    def attach(self, observer: ObserverRef) -> None:
        if observer not in self.observers:
            self.observers.append(observer)

    def detach(self, observer: ObserverRef) -> None:
        if observer in self.observers:
            self.observers.remove(observer)

    def notify_observers(self, message: str, notify: Callable[[ObserverRef, str], None]) -> None:
        """Send a message to every attached observer, in attachment order."""
        for observer in list(self.observers):
            notify(observer, message)

    def set_status(self, status: AppointmentStatus, notify: Callable[[ObserverRef, str], None]) -> None:
        """Move to a new status and broadcast the change."""
        if not self.status.can_become(status):
            raise ValueError(f"Appointment {self.id} cannot go from {self.status.value} to {status.value}")
        self.status = status
        self.notify_observers(f"Appointment status changed to: {status.value}", notify)

    def to_line(self) -> str:
        return _join([
            self.id,
            self.patient_id,
            self.slot_id,
            self.booking_date.strftime(DATE_FORMAT),
            self.status.value,
        ])

    @classmethod
    def from_line(cls, line: str) -> "Appointment":
        parts = _split(line, "appointment", APPOINTMENT_FIELDS)
        try:
            status = AppointmentStatus(parts[4])
        except ValueError:
            raise RecordParseError(f"Unknown appointment status {parts[4]!r}") from None
        return cls(
            id=_parse_id(parts[0], IdKind.APPOINTMENT),
            patient_id=_parse_id(parts[1], IdKind.PATIENT),
            slot_id=_parse_id(parts[2], IdKind.SLOT),
            booking_date=_parse_date(parts[3]),
            status=status,
        )


@dataclass(frozen=True)
class ConsultationRecord:
    id: str
    appointment_id: str
    record_date: date
    diagnosis: str
    notes: str = ""

    def to_line(self) -> str:
        return _join([
            self.id,
            self.appointment_id,
            self.record_date.strftime(DATE_FORMAT),
            self.diagnosis,
            self.notes,
        ])

    @classmethod
    def from_line(cls, line: str) -> "ConsultationRecord":
        parts = _split(line, "consultation record", HISTORY_FIELDS)
        return cls(
            id=_parse_id(parts[0], IdKind.HISTORY),
            appointment_id=_parse_id(parts[1], IdKind.APPOINTMENT),
            record_date=_parse_date(parts[2]),
            diagnosis=parts[3],
            notes=parts[4],
        )


def check_encodable(*values: str) -> None:
    """Raise RecordFormatError if any value cannot be stored as a field."""
    for value in values:
        if DELIMITER in value or "\n" in value or "\r" in value:
            raise RecordFormatError(f"Field value {value!r} contains '{DELIMITER}' or a line break")


# Private helpers

def _join(values: list[str]) -> str:
    check_encodable(*values)
    return DELIMITER.join(values)


def _split(line: str, record_name: str, fields: list[str]) -> list[str]:
    parts = line.split(DELIMITER)
    if len(parts) != len(fields):
        raise RecordParseError(
            f"Expected {len(fields)} fields for a {record_name}, got {len(parts)}"
        )
    return parts


def _parse_id(value: str, kind: IdKind) -> str:
    match = ID_PATTERN.match(value)
    if not match or match.group(1) != kind.prefix:
        raise RecordParseError(f"Invalid {kind.name.lower()} id {value!r}")
    return value


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise RecordParseError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def _parse_time(value: str) -> time:
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except ValueError:
        raise RecordParseError(f"Invalid time {value!r}, expected HH:MM") from None


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise RecordParseError(f"Invalid availability flag {value!r}, expected true or false")
