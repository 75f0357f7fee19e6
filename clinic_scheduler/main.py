"""Clinic scheduling console with a menu state machine."""

import sys
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape

from clinic_scheduler.config import configure_logging, get_data_dir
from clinic_scheduler.input_parser import (
    ConsultationEntry,
    PatientRegistration,
    SlotEntry,
    describe_validation_error,
)
from clinic_scheduler.scheduling.channels import Sink
from clinic_scheduler.scheduling.database.errors import RecordParseError, StorageError
from clinic_scheduler.scheduling.database.records import IdKind
from clinic_scheduler.scheduling.database.store import DataStore
from clinic_scheduler.scheduling.notifier import Notifier
from clinic_scheduler.scheduling.service import SchedulingService
from clinic_scheduler.screens import (
    CHANNEL_NAMES,
    DOCTOR_CHANNEL_CHOICES,
    PATIENT_CHANNEL_CHOICES,
    format_date,
    format_time,
    generate_welcome,
    render_all_doctors,
    render_all_patients,
    render_channel_menu,
    render_doctor_appointments,
    render_doctor_list,
    render_doctor_schedule,
    render_history,
    render_menu,
    render_prompt,
)
from clinic_scheduler.state_machine import FORM_FIELDS, MenuState, Session, get_next_state

console = Console()

INVALID_CHOICE = "Invalid choice!"


@dataclass
class Clinic:
    """The store and workflows one console session works against."""
    store: DataStore
    service: SchedulingService


def create_clinic(data_dir: Path | None = None, sink: Sink | None = None) -> Clinic:
    """Load the data directory and wire the store, notifier and service together."""
    store = DataStore(data_dir or get_data_dir())
    notifier = Notifier(store, sink=sink)
    return Clinic(store=store, service=SchedulingService(store, notifier))


def enter_state(clinic: Clinic, session: Session, state: MenuState) -> str:
    """Move to a screen and return the text it opens with."""
    session.current_state = state

    if state in FORM_FIELDS:
        session.start_form(state)
        prompt = render_prompt(session.next_form_field())
        if state == MenuState.COMPLETE_CONSULTATION:
            return render_doctor_appointments(clinic.store, session.doctor_id) + "\n\n" + prompt
        return prompt

    if state == MenuState.PATIENT_LOGIN:
        return "Enter your patient ID:"
    if state == MenuState.DOCTOR_LOGIN:
        return "Enter your doctor ID:"
    if state == MenuState.PATIENT_CHANNEL:
        return render_channel_menu(PATIENT_CHANNEL_CHOICES)
    if state == MenuState.DOCTOR_CHANNEL:
        return render_channel_menu(DOCTOR_CHANNEL_CHOICES)
    if state == MenuState.BOOK_SLOT:
        return render_doctor_list(clinic.store) + "\n\nEnter the slot ID to book:"
    if state == MenuState.REMOVE_SLOT:
        return render_doctor_schedule(clinic.store, session.doctor_id) + "\n\nEnter the slot ID to remove:"
    if state == MenuState.END:
        return "Thank you for using the clinic scheduler. Goodbye!"

    return render_menu(state, _session_title(clinic, session))


def _session_title(clinic: Clinic, session: Session) -> str | None:
    if session.current_state == MenuState.PATIENT_SESSION:
        patient = clinic.store.get_patient(session.patient_id)
        return patient.name if patient else None
    if session.current_state == MenuState.DOCTOR_SESSION:
        doctor = clinic.store.get_doctor(session.doctor_id)
        return doctor.name if doctor else None
    return None


def _menu_again(clinic: Clinic, session: Session, text: str) -> str:
    return text + "\n\n" + render_menu(session.current_state, _session_title(clinic, session))


# Menu screens

def handle_menu(clinic: Clinic, session: Session, user_input: str) -> str:
    """Main, patient and directory menus: choices that only switch screens or list."""
    choice = user_input.strip()

    if session.current_state == MenuState.DIRECTORY:
        if choice == "1":
            return _menu_again(clinic, session, render_all_doctors(clinic.store))
        if choice == "2":
            return _menu_again(clinic, session, render_all_patients(clinic.store))

    next_state = get_next_state(session.current_state, choice)
    if next_state is None:
        return _menu_again(clinic, session, INVALID_CHOICE)
    return enter_state(clinic, session, next_state)


def handle_patient_session(clinic: Clinic, session: Session, user_input: str) -> str:
    choice = user_input.strip()

    if choice == "1":
        return _menu_again(clinic, session, render_doctor_list(clinic.store))
    if choice == "3":
        return _menu_again(clinic, session, render_history(clinic.store, session.patient_id))
    if choice == "5":
        session.logout()
        return "✓ Logged out.\n\n" + enter_state(clinic, session, MenuState.PATIENT_MENU)

    next_state = get_next_state(session.current_state, choice)
    if next_state is None:
        return _menu_again(clinic, session, INVALID_CHOICE)
    return enter_state(clinic, session, next_state)


def handle_doctor_session(clinic: Clinic, session: Session, user_input: str) -> str:
    choice = user_input.strip()

    if choice == "1":
        return _menu_again(clinic, session, render_doctor_schedule(clinic.store, session.doctor_id))
    if choice == "4":
        return _menu_again(clinic, session, render_doctor_appointments(clinic.store, session.doctor_id))
    if choice == "7":
        session.logout()
        return "✓ Logged out.\n\n" + enter_state(clinic, session, MenuState.MAIN_MENU)

    next_state = get_next_state(session.current_state, choice)
    if next_state is None:
        return _menu_again(clinic, session, INVALID_CHOICE)
    return enter_state(clinic, session, next_state)


# Patient screens

def handle_register_patient(clinic: Clinic, session: Session, user_input: str) -> str:
    """Collect registration details one line at a time, then create the patient."""
    session.fill_form_field(user_input)
    if not session.is_form_complete():
        return render_prompt(session.next_form_field())

    try:
        entry = PatientRegistration(**session.form)
    except ValidationError as e:
        session.start_form(MenuState.REGISTER_PATIENT)
        return f"✗ {describe_validation_error(e)}\n\nLet's start again.\n\n{render_prompt(session.next_form_field())}"

    patient = clinic.service.register_patient(**entry.model_dump())
    return (
        f"✓ Registration complete! Your patient ID is **{patient.id}**. "
        "Use it to log in.\n\n" + enter_state(clinic, session, MenuState.PATIENT_MENU)
    )


def handle_patient_login(clinic: Clinic, session: Session, user_input: str) -> str:
    patient = clinic.store.get_patient(user_input.strip())
    if patient is None:
        return "✗ Patient ID not found!\n\n" + enter_state(clinic, session, MenuState.PATIENT_MENU)

    session.patient_id = patient.id
    return f"✓ Welcome, {patient.name}!\n\n" + enter_state(clinic, session, MenuState.PATIENT_CHANNEL)


def handle_patient_channel(clinic: Clinic, session: Session, user_input: str) -> str:
    # Anything other than a listed option keeps the patient default
    channel = PATIENT_CHANNEL_CHOICES.get(user_input.strip(), PATIENT_CHANNEL_CHOICES["1"])
    outcome = clinic.service.set_notification_channel(IdKind.PATIENT, session.patient_id, channel)
    if not outcome.ok:
        session.logout()
        return f"✗ {outcome.reason}\n\n" + enter_state(clinic, session, MenuState.PATIENT_MENU)
    return (
        f"✓ Notifications will be sent by {CHANNEL_NAMES[channel]}.\n\n"
        + enter_state(clinic, session, MenuState.PATIENT_SESSION)
    )


def handle_book_slot(clinic: Clinic, session: Session, user_input: str) -> str:
    outcome = clinic.service.book_slot(session.patient_id, user_input.strip())
    if not outcome.ok:
        return f"✗ {outcome.reason}\n\n" + enter_state(clinic, session, MenuState.PATIENT_SESSION)

    appointment = outcome.value
    slot = clinic.store.get_slot(appointment.slot_id)
    doctor = clinic.store.get_doctor(slot.doctor_id)
    summary = "\n".join([
        "✓ Booking confirmed!",
        "",
        f"- Appointment ID: {appointment.id}",
        f"- Doctor: {doctor.name if doctor else 'N/A'}",
        f"- Date: {format_date(slot.date)}",
        f"- Time: {format_time(slot.start_time)} - {format_time(slot.end_time)}",
    ])
    return summary + "\n\n" + enter_state(clinic, session, MenuState.PATIENT_SESSION)


# Doctor screens

def handle_doctor_login(clinic: Clinic, session: Session, user_input: str) -> str:
    doctor = clinic.store.get_doctor(user_input.strip())
    if doctor is None:
        return "✗ Doctor ID not found!\n\n" + enter_state(clinic, session, MenuState.MAIN_MENU)

    session.doctor_id = doctor.id
    return f"✓ Welcome, {doctor.name}!\n\n" + enter_state(clinic, session, MenuState.DOCTOR_CHANNEL)


def handle_doctor_channel(clinic: Clinic, session: Session, user_input: str) -> str:
    channel = DOCTOR_CHANNEL_CHOICES.get(user_input.strip(), DOCTOR_CHANNEL_CHOICES["1"])
    outcome = clinic.service.set_notification_channel(IdKind.DOCTOR, session.doctor_id, channel)
    if not outcome.ok:
        session.logout()
        return f"✗ {outcome.reason}\n\n" + enter_state(clinic, session, MenuState.MAIN_MENU)
    return (
        f"✓ Notifications will be sent by {CHANNEL_NAMES[channel]}.\n\n"
        + enter_state(clinic, session, MenuState.DOCTOR_SESSION)
    )


def handle_add_slot(clinic: Clinic, session: Session, user_input: str) -> str:
    """Collect date, start and end; bad input re-prompts without changing anything."""
    session.fill_form_field(user_input)
    if not session.is_form_complete():
        return render_prompt(session.next_form_field())

    try:
        entry = SlotEntry(**session.form)
    except ValidationError as e:
        session.start_form(MenuState.ADD_SLOT)
        return f"✗ {describe_validation_error(e)}\n\n{render_prompt(session.next_form_field())}"

    outcome = clinic.service.add_slot(session.doctor_id, entry.slot_date, entry.start_time, entry.end_time)
    if not outcome.ok:
        return f"✗ {outcome.reason}\n\n" + enter_state(clinic, session, MenuState.DOCTOR_SESSION)
    return (
        f"✓ Slot **{outcome.value.id}** added.\n\n"
        + enter_state(clinic, session, MenuState.DOCTOR_SESSION)
    )


def handle_remove_slot(clinic: Clinic, session: Session, user_input: str) -> str:
    outcome = clinic.service.remove_slot(session.doctor_id, user_input.strip())
    if not outcome.ok:
        return f"✗ {outcome.reason}\n\n" + enter_state(clinic, session, MenuState.DOCTOR_SESSION)
    return (
        f"✓ Slot **{outcome.value.id}** removed.\n\n"
        + enter_state(clinic, session, MenuState.DOCTOR_SESSION)
    )


def handle_complete_consultation(clinic: Clinic, session: Session, user_input: str) -> str:
    """Pick an appointment, then collect diagnosis and notes."""
    filled = session.fill_form_field(user_input)

    if filled == "appointment_id":
        check = clinic.service.check_completion(session.doctor_id, user_input.strip())
        if not check.ok:
            return f"✗ {check.reason}\n\n" + enter_state(clinic, session, MenuState.DOCTOR_SESSION)

    if not session.is_form_complete():
        return render_prompt(session.next_form_field())

    try:
        entry = ConsultationEntry(**session.form)
    except ValidationError as e:
        session.form = {"appointment_id": session.form["appointment_id"]}
        return f"✗ {describe_validation_error(e)}\n\n{render_prompt(session.next_form_field())}"

    outcome = clinic.service.complete_consultation(
        session.doctor_id, entry.appointment_id, entry.diagnosis, entry.notes,
    )
    if not outcome.ok:
        return f"✗ {outcome.reason}\n\n" + enter_state(clinic, session, MenuState.DOCTOR_SESSION)
    return (
        f"✓ Consultation completed. Record ID: **{outcome.value.id}**\n\n"
        + enter_state(clinic, session, MenuState.DOCTOR_SESSION)
    )


# State handlers mapping
STATE_HANDLERS = {
    MenuState.MAIN_MENU: handle_menu,
    MenuState.PATIENT_MENU: handle_menu,
    MenuState.DIRECTORY: handle_menu,
    MenuState.REGISTER_PATIENT: handle_register_patient,
    MenuState.PATIENT_LOGIN: handle_patient_login,
    MenuState.PATIENT_CHANNEL: handle_patient_channel,
    MenuState.PATIENT_SESSION: handle_patient_session,
    MenuState.BOOK_SLOT: handle_book_slot,
    MenuState.DOCTOR_LOGIN: handle_doctor_login,
    MenuState.DOCTOR_CHANNEL: handle_doctor_channel,
    MenuState.DOCTOR_SESSION: handle_doctor_session,
    MenuState.ADD_SLOT: handle_add_slot,
    MenuState.REMOVE_SLOT: handle_remove_slot,
    MenuState.COMPLETE_CONSULTATION: handle_complete_consultation,
}


def process_input(clinic: Clinic, session: Session, user_input: str) -> str:
    """Process one line of user input and return the response.

    A failed save restarts the current screen, so a half-submitted form is
    collected again from its first field.
    """
    handler = STATE_HANDLERS.get(session.current_state)
    if not handler:
        return enter_state(clinic, session, MenuState.MAIN_MENU)
    try:
        return handler(clinic, session, user_input)
    except StorageError as e:
        return f"✗ Could not save: {e}\n\n" + enter_state(clinic, session, session.current_state)


def main():
    """Main console loop."""
    configure_logging()

    try:
        clinic = create_clinic()
    except RecordParseError as e:
        console.print("[bold red]Corrupt data file:[/bold red]", escape(str(e)))
        sys.exit(1)

    session = Session()
    console.print(Markdown(generate_welcome()), "\n")
    console.print(Markdown(enter_state(clinic, session, MenuState.MAIN_MENU)), "\n")

    is_tty = sys.stdin.isatty()

    while session.current_state != MenuState.END:
        try:
            user_input = console.input("[bold green]>[/bold green] ")
            # Echo input when stdin is piped (not interactive)
            if not is_tty and user_input:
                console.print(f"[dim]{escape(user_input)}[/dim]")
        except (EOFError, KeyboardInterrupt):
            console.print("\n[bold blue]Goodbye![/bold blue]")
            break

        response = process_input(clinic, session, user_input)
        console.print(Markdown(response), "\n")


if __name__ == "__main__":
    main()
