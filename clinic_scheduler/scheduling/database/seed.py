"""Sample doctors and slots for an empty clinic."""

import logging
from datetime import date, time, timedelta

from .records import Doctor, IdKind, ScheduleSlot

logger = logging.getLogger(__name__)


SAMPLE_DOCTORS = [
    ("Dr. Ahmad Yani", "Cardiology"),
    ("Dr. Siti Rahma", "Pediatrics"),
    ("Dr. Budi Santoso", "Orthopedics"),
]

# (doctor index, days from today, start hour, end hour)
SAMPLE_SLOTS = [
    (0, 1, 9, 10),
    (0, 1, 10, 11),
    (1, 2, 14, 15),
    (2, 3, 11, 12),
]


def seed_sample_data(store, today: date) -> None:
    """Add three doctors and four open slots through the regular store calls."""
    doctors = []
    for name, specialization in SAMPLE_DOCTORS:
        doctor = Doctor(store.generate_id(IdKind.DOCTOR), name, specialization)
        store.add_doctor(doctor)
        doctors.append(doctor)

    for doctor_index, days_ahead, start_hour, end_hour in SAMPLE_SLOTS:
        store.add_slot(ScheduleSlot(
            id=store.generate_id(IdKind.SLOT),
            doctor_id=doctors[doctor_index].id,
            date=today + timedelta(days=days_ahead),
            start_time=time(start_hour, 0),
            end_time=time(end_hour, 0),
        ))

    logger.info("Seeded %d sample doctors and %d slots", len(SAMPLE_DOCTORS), len(SAMPLE_SLOTS))
