"""Tests for notification channels and the observer notifier."""

import logging

import pytest

from clinic_scheduler.scheduling.channels import NotificationChannel, deliver, format_notification
from clinic_scheduler.scheduling.database.records import ObserverRef, Patient
from clinic_scheduler.scheduling.notifier import Notifier


class TestChannels:
    """Tests for channel formatting."""

    @pytest.mark.parametrize("channel,label", [
        (NotificationChannel.EMAIL, "EMAIL"),
        (NotificationChannel.SMS, "SMS"),
        (NotificationChannel.WHATSAPP, "WHATSAPP"),
    ])
    def test_format(self, channel, label):
        line = format_notification(channel, "rina@example.com", "Hello")
        assert line == f"[{label}] Sending to rina@example.com: Hello"

    def test_deliver_writes_one_line(self):
        lines = []
        deliver(NotificationChannel.SMS, "555-0101", "Reminder", lines.append)
        assert lines == ["[SMS] Sending to 555-0101: Reminder"]


class TestNotifier:
    """Tests for resolving and addressing observers."""

    @pytest.fixture
    def rina(self, store):
        patient = Patient("P001", "Rina", "rina@example.com", "555-0101", "addr")
        store.add_patient(patient)
        return patient

    def test_patient_defaults_to_email(self, notifier, outbox, rina):
        notifier.notify(ObserverRef.patient("P001"), "Hi")
        assert outbox == ["[EMAIL] Sending to rina@example.com: Hi"]

    @pytest.mark.parametrize("channel,label", [
        (NotificationChannel.SMS, "SMS"),
        (NotificationChannel.WHATSAPP, "WHATSAPP"),
    ])
    def test_patient_phone_channels(self, notifier, outbox, rina, channel, label):
        rina.channel = channel
        notifier.notify(ObserverRef.patient("P001"), "Hi")
        assert outbox == [f"[{label}] Sending to 555-0101: Hi"]

    def test_doctor_defaults_to_sms_by_name(self, notifier, outbox):
        notifier.notify(ObserverRef.doctor("D001"), "New booking")
        assert outbox == ["[SMS] Sending to Dr. Ahmad Yani: New booking"]

    def test_doctor_on_email_still_addressed_by_name(self, store, notifier, outbox):
        store.get_doctor("D002").channel = NotificationChannel.EMAIL
        notifier.notify(ObserverRef.doctor("D002"), "New booking")
        assert outbox == ["[EMAIL] Sending to Dr. Siti Rahma: New booking"]

    def test_unknown_observer_is_dropped(self, notifier, outbox, caplog):
        with caplog.at_level(logging.WARNING):
            notifier.notify(ObserverRef.patient("P404"), "Hi")
        assert outbox == []
        assert "P404" in caplog.text

    def test_broken_sink_does_not_stop_broadcast(self, store, rina, caplog):
        delivered = []

        def flaky(line):
            if "EMAIL" in line:
                raise RuntimeError("mail server down")
            delivered.append(line)

        notifier = Notifier(store, sink=flaky)
        with caplog.at_level(logging.ERROR):
            notifier.notify(ObserverRef.patient("P001"), "Hi")
            notifier.notify(ObserverRef.doctor("D001"), "Hi")

        assert delivered == ["[SMS] Sending to Dr. Ahmad Yani: Hi"]
        assert "Failed to deliver EMAIL notification to rina@example.com" in caplog.text


class TestDeferredDelivery:
    """Tests for holding notifications until an operation succeeds."""

    def test_deliveries_wait_for_the_block(self, notifier, outbox):
        with notifier.deferred():
            notifier.notify(ObserverRef.doctor("D001"), "one")
            notifier.notify(ObserverRef.doctor("D002"), "two")
            assert outbox == []
        assert outbox == [
            "[SMS] Sending to Dr. Ahmad Yani: one",
            "[SMS] Sending to Dr. Siti Rahma: two",
        ]

    def test_failed_block_drops_deliveries(self, notifier, outbox):
        with pytest.raises(RuntimeError):
            with notifier.deferred():
                notifier.notify(ObserverRef.doctor("D001"), "never sent")
                raise RuntimeError("write failed")
        assert outbox == []

        notifier.notify(ObserverRef.doctor("D001"), "after")
        assert outbox == ["[SMS] Sending to Dr. Ahmad Yani: after"]

    def test_nested_blocks_flush_once_at_the_outer_end(self, notifier, outbox):
        with notifier.deferred():
            with notifier.deferred():
                notifier.notify(ObserverRef.doctor("D001"), "inner")
            assert outbox == []
        assert outbox == ["[SMS] Sending to Dr. Ahmad Yani: inner"]
