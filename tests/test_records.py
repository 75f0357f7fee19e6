"""Tests for record encoding, decoding and ids."""

from datetime import date, time

import pytest

from clinic_scheduler.scheduling.channels import NotificationChannel
from clinic_scheduler.scheduling.database.errors import RecordFormatError, RecordParseError
from clinic_scheduler.scheduling.database.records import (
    Appointment,
    AppointmentStatus,
    ConsultationRecord,
    Doctor,
    IdKind,
    ObserverRef,
    Patient,
    ScheduleSlot,
    format_id,
    id_sequence,
)


class TestIds:
    """Tests for id formatting."""

    def test_format_pads_to_three_digits(self):
        assert format_id(IdKind.PATIENT, 1) == "P001"
        assert format_id(IdKind.HISTORY, 42) == "H042"

    def test_format_widens_past_999(self):
        assert format_id(IdKind.SLOT, 999) == "S999"
        assert format_id(IdKind.SLOT, 1000) == "S1000"

    def test_sequence_orders_numerically(self):
        assert id_sequence("S1000") > id_sequence("S999")

    def test_sequence_rejects_non_ids(self):
        with pytest.raises(ValueError):
            id_sequence("patient-1")


class TestPatientLine:
    """Tests for the patient line format."""

    def test_encode(self):
        patient = Patient("P001", "Rina", "rina@example.com", "555-0101", "Jl. Merdeka 1")
        assert patient.to_line() == "P001|Rina|rina@example.com|555-0101|Jl. Merdeka 1"

    def test_decode(self):
        patient = Patient.from_line("P002|Budi|budi@example.com|555-0102|Bandung")
        assert patient == Patient("P002", "Budi", "budi@example.com", "555-0102", "Bandung")
        assert patient.channel == NotificationChannel.EMAIL

    def test_empty_address_round_trips(self):
        patient = Patient("P003", "Ani", "ani@example.com", "", "")
        assert Patient.from_line(patient.to_line()) == patient

    def test_wrong_field_count(self):
        with pytest.raises(RecordParseError, match="Expected 5 fields"):
            Patient.from_line("P001|Rina|rina@example.com")

    def test_wrong_id_prefix(self):
        with pytest.raises(RecordParseError, match="patient id"):
            Patient.from_line("D001|Rina|rina@example.com|555|addr")

    def test_delimiter_in_value_cannot_be_encoded(self):
        patient = Patient("P001", "Rina|Wijaya", "rina@example.com", "555", "addr")
        with pytest.raises(RecordFormatError):
            patient.to_line()

    def test_line_break_in_value_cannot_be_encoded(self):
        patient = Patient("P001", "Rina", "rina@example.com", "555", "line one\nline two")
        with pytest.raises(RecordFormatError):
            patient.to_line()


class TestDoctorLine:
    def test_round_trip(self):
        doctor = Doctor("D001", "Dr. Ahmad Yani", "Cardiology")
        assert doctor.to_line() == "D001|Dr. Ahmad Yani|Cardiology"
        assert Doctor.from_line(doctor.to_line()) == doctor

    def test_default_channel_is_sms(self):
        assert Doctor.from_line("D001|Dr. A|GP").channel == NotificationChannel.SMS


class TestSlotLine:
    """Tests for the slot line format."""

    def test_encode(self):
        slot = ScheduleSlot("S001", "D001", date(2026, 10, 20), time(9, 0), time(10, 0))
        assert slot.to_line() == "S001|D001|2026-10-20|09:00|10:00|true"

    def test_midnight_and_booked_round_trip(self):
        slot = ScheduleSlot("S999", "D001", date(2026, 12, 31), time(0, 0), time(0, 30), available=False)
        line = slot.to_line()
        assert line == "S999|D001|2026-12-31|00:00|00:30|false"
        assert ScheduleSlot.from_line(line) == slot

    def test_wide_id_round_trip(self):
        slot = ScheduleSlot("S1000", "D1000", date(2026, 1, 1), time(23, 0), time(23, 59))
        assert ScheduleSlot.from_line(slot.to_line()) == slot

    def test_available_starts_true(self):
        assert ScheduleSlot("S001", "D001", date(2026, 1, 1), time(9, 0), time(10, 0)).available

    def test_bad_date(self):
        with pytest.raises(RecordParseError, match="Invalid date"):
            ScheduleSlot.from_line("S001|D001|20-10-2026|09:00|10:00|true")

    def test_bad_time(self):
        with pytest.raises(RecordParseError, match="Invalid time"):
            ScheduleSlot.from_line("S001|D001|2026-10-20|9am|10:00|true")

    def test_bad_flag(self):
        with pytest.raises(RecordParseError, match="availability"):
            ScheduleSlot.from_line("S001|D001|2026-10-20|09:00|10:00|yes")


class TestAppointmentLine:
    """Tests for the appointment line format."""

    def test_round_trip(self):
        appointment = Appointment("A001", "P001", "S001", date(2026, 10, 19))
        assert appointment.to_line() == "A001|P001|S001|2026-10-19|Booked"
        assert Appointment.from_line(appointment.to_line()) == appointment

    def test_completed_status_round_trips(self):
        line = "A002|P001|S002|2026-10-19|Completed"
        assert Appointment.from_line(line).status == AppointmentStatus.COMPLETED

    def test_unknown_status(self):
        with pytest.raises(RecordParseError, match="status"):
            Appointment.from_line("A001|P001|S001|2026-10-19|Cancelled")

    def test_observers_are_not_stored(self):
        appointment = Appointment("A001", "P001", "S001", date(2026, 10, 19))
        appointment.attach(ObserverRef.patient("P001"))
        decoded = Appointment.from_line(appointment.to_line())
        assert decoded.observers == []


class TestConsultationRecordLine:
    """Tests for the consultation record line format."""

    def test_round_trip_keeps_stored_date(self):
        record = ConsultationRecord("H001", "A001", date(2025, 3, 1), "Hypertension", "Low salt diet")
        decoded = ConsultationRecord.from_line(record.to_line())
        assert decoded == record
        assert decoded.record_date == date(2025, 3, 1)

    def test_empty_notes_round_trip(self):
        record = ConsultationRecord("H002", "A002", date(2026, 10, 19), "Flu", "")
        assert record.to_line().endswith("|Flu|")
        assert ConsultationRecord.from_line(record.to_line()) == record

    def test_records_are_immutable(self):
        record = ConsultationRecord("H001", "A001", date(2026, 10, 19), "Flu")
        with pytest.raises(AttributeError):
            record.diagnosis = "Cold"


class TestAppointmentObservers:
    """Tests for attach, detach and status broadcasts."""

    def _appointment(self):
        return Appointment("A001", "P001", "S001", date(2026, 10, 19))

    def test_attach_is_idempotent(self):
        appointment = self._appointment()
        appointment.attach(ObserverRef.patient("P001"))
        appointment.attach(ObserverRef.patient("P001"))
        appointment.attach(ObserverRef.doctor("D001"))
        assert appointment.observers == [ObserverRef.patient("P001"), ObserverRef.doctor("D001")]

    def test_detach_unknown_observer_is_noop(self):
        appointment = self._appointment()
        appointment.attach(ObserverRef.patient("P001"))
        appointment.detach(ObserverRef.doctor("D009"))
        assert appointment.observers == [ObserverRef.patient("P001")]

    def test_detach_removes_observer(self):
        appointment = self._appointment()
        appointment.attach(ObserverRef.patient("P001"))
        appointment.detach(ObserverRef.patient("P001"))
        assert appointment.observers == []

    def test_set_status_broadcasts_in_attachment_order(self):
        appointment = self._appointment()
        appointment.attach(ObserverRef.doctor("D001"))
        appointment.attach(ObserverRef.patient("P001"))
        received = []

        appointment.set_status(AppointmentStatus.COMPLETED, lambda ref, msg: received.append((ref.id, msg)))

        assert appointment.status == AppointmentStatus.COMPLETED
        assert received == [
            ("D001", "Appointment status changed to: Completed"),
            ("P001", "Appointment status changed to: Completed"),
        ]

    def test_status_never_goes_back(self):
        appointment = self._appointment()
        appointment.set_status(AppointmentStatus.COMPLETED, lambda ref, msg: None)
        with pytest.raises(ValueError):
            appointment.set_status(AppointmentStatus.BOOKED, lambda ref, msg: None)
        with pytest.raises(ValueError):
            appointment.set_status(AppointmentStatus.COMPLETED, lambda ref, msg: None)
