"""Data store owning every clinic collection and its backing files."""

import logging
from datetime import date
from pathlib import Path

from .errors import RecordParseError
from .files import init_data_dir, read_lines, write_lines
from .records import (
    Appointment,
    ConsultationRecord,
    Doctor,
    IdKind,
    Patient,
    ScheduleSlot,
    format_id,
    id_sequence,
)
from .schema import (
    APPOINTMENTS,
    COLLECTIONS,
    COUNTERS,
    DOCTORS,
    FILE_NAMES,
    HISTORIES,
    PATIENTS,
    SLOTS,
)
from .seed import seed_sample_data

logger = logging.getLogger(__name__)

RECORD_TYPES = {
    PATIENTS: Patient,
    DOCTORS: Doctor,
    SLOTS: ScheduleSlot,
    APPOINTMENTS: Appointment,
    HISTORIES: ConsultationRecord,
}

COLLECTION_KINDS = {
    PATIENTS: IdKind.PATIENT,
    DOCTORS: IdKind.DOCTOR,
    SLOTS: IdKind.SLOT,
    APPOINTMENTS: IdKind.APPOINTMENT,
    HISTORIES: IdKind.HISTORY,
}


class DataStore:
    """Single owner of patients, doctors, slots, appointments and histories.

    Every mutating call rewrites the affected backing file before it
    returns. The new collection is written first and only swapped into
    memory once the write succeeded, so a StorageError leaves the store
    exactly as it was.
    """

    def __init__(self, data_dir: Path, seed: bool = True, today: date | None = None):
        self.data_dir = init_data_dir(Path(data_dir))
        self._records: dict[str, dict] = {name: {} for name in COLLECTIONS}
        self._counters: dict[IdKind, int] = {kind: 1 for kind in IdKind}

        self._load_all()

        if seed and not self._records[DOCTORS]:
            seed_sample_data(self, today or date.today())

    # Ids

    def generate_id(self, kind: IdKind) -> str:
        """Issue the next id for a kind and persist the counters."""
        sequence = self._counters[kind]
        candidate = dict(self._counters)
        candidate[kind] = sequence + 1
        self._write_counters(candidate)
        self._counters = candidate
        return format_id(kind, sequence)

    @property
    def counters(self) -> dict[IdKind, int]:
        """Next sequence number per kind."""
        return dict(self._counters)

    # Inserts and updates

    def add_patient(self, patient: Patient) -> None:
        self._put(PATIENTS, patient)

    def add_doctor(self, doctor: Doctor) -> None:
        self._put(DOCTORS, doctor)

    def add_slot(self, slot: ScheduleSlot) -> None:
        self._put(SLOTS, slot)

    def add_appointment(self, appointment: Appointment) -> None:
        self._put(APPOINTMENTS, appointment)

    def add_consultation_record(self, record: ConsultationRecord) -> None:
        self._put(HISTORIES, record)

    def update_slot(self, slot: ScheduleSlot) -> bool:
        """Store a changed slot and persist the slot collection."""
        return self._replace(SLOTS, slot)

    def update_appointment(self, appointment: Appointment) -> bool:
        """Store a changed appointment and persist the appointment collection."""
        return self._replace(APPOINTMENTS, appointment)

    def remove_slot(self, slot_id: str) -> bool:
        """Remove a slot. Unknown ids are a no-op."""
        if slot_id not in self._records[SLOTS]:
            return False
        candidate = dict(self._records[SLOTS])
        del candidate[slot_id]
        self._save(SLOTS, candidate)
        return True

    # Lookups

    def get_patient(self, patient_id: str) -> Patient | None:
        return self._records[PATIENTS].get(patient_id)

    def get_doctor(self, doctor_id: str) -> Doctor | None:
        return self._records[DOCTORS].get(doctor_id)

    def get_slot(self, slot_id: str) -> ScheduleSlot | None:
        return self._records[SLOTS].get(slot_id)

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        return self._records[APPOINTMENTS].get(appointment_id)

    def get_consultation_record(self, record_id: str) -> ConsultationRecord | None:
        return self._records[HISTORIES].get(record_id)

    def get_all_patients(self) -> list[Patient]:
        return list(self._records[PATIENTS].values())

    def get_all_doctors(self) -> list[Doctor]:
        return list(self._records[DOCTORS].values())

    def get_all_slots(self) -> list[ScheduleSlot]:
        return list(self._records[SLOTS].values())

    def get_all_appointments(self) -> list[Appointment]:
        return list(self._records[APPOINTMENTS].values())

    def get_all_consultation_records(self) -> list[ConsultationRecord]:
        return list(self._records[HISTORIES].values())

    # Derived queries, computed by scanning at call time

    def get_appointments_for_patient(self, patient_id: str) -> list[Appointment]:
        return [a for a in self._records[APPOINTMENTS].values() if a.patient_id == patient_id]

    def get_consultation_history_for_patient(self, patient_id: str) -> list[ConsultationRecord]:
        """Consultation records whose appointment belongs to the patient."""
        appointments = self._records[APPOINTMENTS]
        history = []
        for record in self._records[HISTORIES].values():
            appointment = appointments.get(record.appointment_id)
            if appointment is not None and appointment.patient_id == patient_id:
                history.append(record)
        return history

    def get_slots_for_doctor(self, doctor_id: str) -> list[ScheduleSlot]:
        """A doctor's slots, ordered by date and start time."""
        slots = [s for s in self._records[SLOTS].values() if s.doctor_id == doctor_id]
        return sorted(slots, key=lambda s: (s.date, s.start_time, s.id))

    def get_available_slots_for_doctor(self, doctor_id: str) -> list[ScheduleSlot]:
        return [s for s in self.get_slots_for_doctor(doctor_id) if s.available]

    def get_appointments_for_doctor(self, doctor_id: str) -> list[Appointment]:
        """Appointments booked against any of the doctor's slots."""
        slots = self._records[SLOTS]
        result = []
        for appointment in self._records[APPOINTMENTS].values():
            slot = slots.get(appointment.slot_id)
            if slot is not None and slot.doctor_id == doctor_id:
                result.append(appointment)
        return result

    # Private helpers

    def _path(self, name: str) -> Path:
        return self.data_dir / FILE_NAMES[name]

    def _put(self, name: str, record) -> None:
        candidate = dict(self._records[name])
        candidate[record.id] = record
        self._save(name, candidate)

    def _replace(self, name: str, record) -> bool:
        if record.id not in self._records[name]:
            logger.warning("Cannot update unknown %s record %s", name, record.id)
            return False
        self._put(name, record)
        return True

    def _save(self, name: str, candidate: dict) -> None:
        """Rewrite a collection's file, then make the candidate current."""
        # Encoding first means an unencodable record never reaches the disk
        lines = [record.to_line() for record in candidate.values()]
        write_lines(self._path(name), lines)
        self._records[name] = candidate
        logger.debug("Saved %d %s to %s", len(lines), name, self._path(name))

    def _write_counters(self, counters: dict[IdKind, int]) -> None:
        write_lines(self._path(COUNTERS), [str(counters[kind]) for kind in IdKind])

    def _load_all(self) -> None:
        self._load_counters()
        for name in COLLECTIONS:
            self._records[name] = self._load_collection(name)
            logger.info("Loaded %d %s", len(self._records[name]), name)
        self._recover_counters()

    def _load_collection(self, name: str) -> dict:
        path = self._path(name)
        record_type = RECORD_TYPES[name]
        records = {}
        for line_no, line in read_lines(path):
            try:
                record = record_type.from_line(line)
            except RecordParseError as e:
                raise RecordParseError(e.message, source=path.name, line_no=line_no) from e
            records[record.id] = record
        return records

    def _load_counters(self) -> None:
        path = self._path(COUNTERS)
        try:
            values = [int(line) for _, line in read_lines(path)]
        except ValueError:
            logger.warning("Unreadable counters in %s, starting from defaults", path)
            return
        if not values:
            return
        if len(values) != len(IdKind) or any(v < 1 for v in values):
            logger.warning("Unexpected counters in %s, starting from defaults", path)
            return
        self._counters = dict(zip(IdKind, values))

    def _recover_counters(self) -> None:
        """Keep every counter past the highest id already on file."""
        candidate = dict(self._counters)
        for name, kind in COLLECTION_KINDS.items():
            ids = self._records[name]
            if ids:
                highest = max(id_sequence(record_id) for record_id in ids)
                if candidate[kind] <= highest:
                    candidate[kind] = highest + 1
        if candidate != self._counters:
            logger.warning("Counters behind stored ids, advancing to %s", {k.name: v for k, v in candidate.items()})
            self._write_counters(candidate)
            self._counters = candidate
