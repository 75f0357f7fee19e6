"""
Clinic Scheduler Storage Layout
One delimited text file per collection, one record per line, plus a counters file.
"""

DELIMITER = "|"

# Canonical storage forms, independent of what the console displays
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# =============================================================================
# 1. PATIENTS - id|name|email|phone|address
# =============================================================================
PATIENTS = "patients"
PATIENT_FIELDS = ["id", "name", "email", "phone", "address"]

# =============================================================================
# 2. DOCTORS - id|name|specialization
# =============================================================================
DOCTORS = "doctors"
DOCTOR_FIELDS = ["id", "name", "specialization"]

# =============================================================================
# 3. SLOTS - id|doctorId|date|startTime|endTime|available
# =============================================================================
SLOTS = "slots"
SLOT_FIELDS = ["id", "doctor_id", "date", "start_time", "end_time", "available"]

# =============================================================================
# 4. APPOINTMENTS - id|patientId|slotId|bookingDate|status
# =============================================================================
APPOINTMENTS = "appointments"
APPOINTMENT_FIELDS = ["id", "patient_id", "slot_id", "booking_date", "status"]

# =============================================================================
# 5. HISTORIES - id|appointmentId|date|diagnosis|notes
# =============================================================================
HISTORIES = "histories"
HISTORY_FIELDS = ["id", "appointment_id", "record_date", "diagnosis", "notes"]

# =============================================================================
# 6. COUNTERS - five integers, one per line, in IdKind order
# =============================================================================
COUNTERS = "counters"

FILE_NAMES = {
    PATIENTS: "patients.txt",
    DOCTORS: "doctors.txt",
    SLOTS: "schedules.txt",
    APPOINTMENTS: "appointments.txt",
    HISTORIES: "histories.txt",
    COUNTERS: "counters.txt",
}

# Load order matters only for logging; every collection is loaded before seeding
COLLECTIONS = [PATIENTS, DOCTORS, SLOTS, APPOINTMENTS, HISTORIES]
