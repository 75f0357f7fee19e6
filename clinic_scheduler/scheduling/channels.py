"""Notification channels: how a message reaches one recipient."""

from enum import Enum
from typing import Callable


class NotificationChannel(Enum):
    """Delivery mechanisms a patient or doctor can select."""
    EMAIL = "email"
    SMS = "sms"
    WHATSAPP = "whatsapp"

    @property
    def label(self) -> str:
        return CHANNEL_LABELS[self]


CHANNEL_LABELS = {
    NotificationChannel.EMAIL: "EMAIL",
    NotificationChannel.SMS: "SMS",
    NotificationChannel.WHATSAPP: "WHATSAPP",
}

# Which patient field each channel addresses. Doctors carry no contact
# fields in the stored format and are always addressed by name.
PATIENT_ADDRESS_FIELDS = {
    NotificationChannel.EMAIL: "email",
    NotificationChannel.SMS: "phone",
    NotificationChannel.WHATSAPP: "phone",
}

DEFAULT_PATIENT_CHANNEL = NotificationChannel.EMAIL
DEFAULT_DOCTOR_CHANNEL = NotificationChannel.SMS

Sink = Callable[[str], None]


def format_notification(channel: NotificationChannel, recipient: str, message: str) -> str:
    """Render the line a channel emits for one delivery."""
    return f"[{channel.label}] Sending to {recipient}: {message}"


def deliver(channel: NotificationChannel, recipient: str, message: str, sink: Sink) -> None:
    """Emit a message to a recipient through the given channel."""
    sink(format_notification(channel, recipient, message))
