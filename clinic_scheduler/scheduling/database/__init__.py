from .errors import RecordFormatError, RecordParseError, StorageError
from .records import (
    Appointment,
    AppointmentStatus,
    ConsultationRecord,
    Doctor,
    IdKind,
    ObserverRef,
    Patient,
    ScheduleSlot,
)
from .store import DataStore

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "ConsultationRecord",
    "DataStore",
    "Doctor",
    "IdKind",
    "ObserverRef",
    "Patient",
    "RecordFormatError",
    "RecordParseError",
    "ScheduleSlot",
    "StorageError",
]
