"""Text for menus, prompts and listings shown by the console."""

from clinic_scheduler.input_parser import DISPLAY_DATE_FORMAT
from clinic_scheduler.scheduling.channels import NotificationChannel
from clinic_scheduler.scheduling.database.store import DataStore
from clinic_scheduler.state_machine import MenuState

DISPLAY_TIME_FORMAT = "%H:%M"


# Field prompts for the multi-line forms
FIELD_PROMPTS = {
    "name": "Name:",
    "email": "Email:",
    "phone": "Phone:",
    "address": "Address:",
    "slot_date": "Date (dd-mm-yyyy):",
    "start_time": "Start time (HH:MM):",
    "end_time": "End time (HH:MM):",
    "appointment_id": "Appointment ID to complete:",
    "diagnosis": "Diagnosis:",
    "notes": "Notes:",
}

# Channel menus keep each role's default channel as option 1
PATIENT_CHANNEL_CHOICES = {
    "1": NotificationChannel.EMAIL,
    "2": NotificationChannel.SMS,
    "3": NotificationChannel.WHATSAPP,
}

DOCTOR_CHANNEL_CHOICES = {
    "1": NotificationChannel.SMS,
    "2": NotificationChannel.EMAIL,
    "3": NotificationChannel.WHATSAPP,
}

CHANNEL_NAMES = {
    NotificationChannel.EMAIL: "Email",
    NotificationChannel.SMS: "SMS",
    NotificationChannel.WHATSAPP: "WhatsApp",
}


def format_date(value) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT)


def format_time(value) -> str:
    return value.strftime(DISPLAY_TIME_FORMAT)


def generate_welcome() -> str:
    return "**Clinic Scheduler**\n\nBook consultations, manage doctor schedules and review consultation history."


def render_menu(state: MenuState, title: str | None = None) -> str:
    """Numbered menu for a menu screen."""
    if state == MenuState.MAIN_MENU:
        heading, options = "Main Menu", [
            "Patient menu", "Doctor login", "Doctor & patient directory", "Exit",
        ]
    elif state == MenuState.PATIENT_MENU:
        heading, options = "Patient Menu", ["Register new account", "Patient login", "Back to main menu"]
    elif state == MenuState.PATIENT_SESSION:
        heading, options = "Patient Menu", [
            "List doctors and open slots", "Book a consultation", "Consultation history",
            "Change notification method", "Logout",
        ]
    elif state == MenuState.DOCTOR_SESSION:
        heading, options = "Doctor Menu", [
            "My slots", "Add a slot", "Remove a slot", "My appointments",
            "Complete a consultation", "Change notification method", "Logout",
        ]
    elif state == MenuState.DIRECTORY:
        heading, options = "Directory", ["All doctors", "All patients", "Back to main menu"]
    else:
        return ""

    if title:
        heading = f"{heading} - {title}"
    lines = [f"**{heading}**", ""]
    lines += [f"{i}. {option}" for i, option in enumerate(options, start=1)]
    return "\n".join(lines)


def render_channel_menu(choices: dict) -> str:
    lines = ["**Choose a notification method**", ""]
    lines += [f"{key}. {CHANNEL_NAMES[channel]}" for key, channel in choices.items()]
    return "\n".join(lines)


def render_prompt(field_name: str) -> str:
    return FIELD_PROMPTS.get(field_name, f"{field_name}:")


def render_doctor_list(store: DataStore) -> str:
    """Every doctor with the slots still open for booking."""
    doctors = store.get_all_doctors()
    if not doctors:
        return "No doctors registered yet."

    sections = []
    for doctor in doctors:
        lines = [f"**{doctor.name}** ({doctor.id}) - {doctor.specialization}", ""]
        slots = store.get_available_slots_for_doctor(doctor.id)
        if slots:
            lines += [
                f"- [{s.id}] {format_date(s.date)} | {format_time(s.start_time)} - {format_time(s.end_time)}"
                for s in slots
            ]
        else:
            lines.append("- No open slots")
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


def render_doctor_schedule(store: DataStore, doctor_id: str) -> str:
    slots = store.get_slots_for_doctor(doctor_id)
    if not slots:
        return "You have no slots yet."
    return "\n".join(
        f"- [{s.id}] {format_date(s.date)} | {format_time(s.start_time)} - {format_time(s.end_time)}"
        f" | {'Available' if s.available else 'Booked'}"
        for s in slots
    )


def render_doctor_appointments(store: DataStore, doctor_id: str) -> str:
    appointments = store.get_appointments_for_doctor(doctor_id)
    if not appointments:
        return "No appointments yet."

    lines = []
    for appointment in appointments:
        patient = store.get_patient(appointment.patient_id)
        slot = store.get_slot(appointment.slot_id)
        when = (
            f"{format_date(slot.date)} {format_time(slot.start_time)} - {format_time(slot.end_time)}"
            if slot else "N/A"
        )
        lines.append(
            f"- **{appointment.id}** {patient.name if patient else 'N/A'} | {when} | {appointment.status.value}"
        )
    return "\n".join(lines)


def render_history(store: DataStore, patient_id: str) -> str:
    """A patient's consultation records with the doctor who saw them."""
    history = store.get_consultation_history_for_patient(patient_id)
    if not history:
        return "No consultation history yet."

    sections = []
    for record in history:
        appointment = store.get_appointment(record.appointment_id)
        slot = store.get_slot(appointment.slot_id) if appointment else None
        doctor = store.get_doctor(slot.doctor_id) if slot else None
        sections.append("\n".join([
            f"**{record.id}** - {format_date(record.record_date)}",
            f"- Doctor: {doctor.name if doctor else 'N/A'}",
            f"- Diagnosis: {record.diagnosis}",
            f"- Notes: {record.notes or '-'}",
        ]))
    return "\n\n".join(sections)


def render_all_doctors(store: DataStore) -> str:
    doctors = store.get_all_doctors()
    if not doctors:
        return "No doctors registered yet."

    lines = []
    for doctor in doctors:
        slots = store.get_slots_for_doctor(doctor.id)
        open_slots = sum(1 for s in slots if s.available)
        lines.append(
            f"- **{doctor.id}** {doctor.name} ({doctor.specialization}) | "
            f"slots: {len(slots)}, open: {open_slots}"
        )
    lines += ["", f"Total doctors: {len(doctors)}"]
    return "\n".join(lines)


def render_all_patients(store: DataStore) -> str:
    patients = store.get_all_patients()
    if not patients:
        return "No patients registered yet."

    lines = []
    for patient in patients:
        appointments = store.get_appointments_for_patient(patient.id)
        history = store.get_consultation_history_for_patient(patient.id)
        lines.append(
            f"- **{patient.id}** {patient.name} | {patient.email} | {patient.phone} | "
            f"appointments: {len(appointments)}, consultations: {len(history)}"
        )
    lines += ["", f"Total patients: {len(patients)}"]
    return "\n".join(lines)
