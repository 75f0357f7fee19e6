"""Menu state machine for the console session."""

from dataclasses import dataclass, field
from enum import Enum


class MenuState(Enum):
    """Screens the console session moves between."""
    MAIN_MENU = "main_menu"
    PATIENT_MENU = "patient_menu"
    REGISTER_PATIENT = "register_patient"
    PATIENT_LOGIN = "patient_login"
    PATIENT_CHANNEL = "patient_channel"
    PATIENT_SESSION = "patient_session"
    BOOK_SLOT = "book_slot"
    DOCTOR_LOGIN = "doctor_login"
    DOCTOR_CHANNEL = "doctor_channel"
    DOCTOR_SESSION = "doctor_session"
    ADD_SLOT = "add_slot"
    REMOVE_SLOT = "remove_slot"
    COMPLETE_CONSULTATION = "complete_consultation"
    DIRECTORY = "directory"
    END = "end"


# Fields collected one per input line for each form
FORM_FIELDS = {
    MenuState.REGISTER_PATIENT: ["name", "email", "phone", "address"],
    MenuState.ADD_SLOT: ["slot_date", "start_time", "end_time"],
    MenuState.COMPLETE_CONSULTATION: ["appointment_id", "diagnosis", "notes"],
}

# Numbered menu choices leading straight to another screen
MENU_TRANSITIONS = {
    MenuState.MAIN_MENU: {
        "1": MenuState.PATIENT_MENU,
        "2": MenuState.DOCTOR_LOGIN,
        "3": MenuState.DIRECTORY,
        "4": MenuState.END,
    },
    MenuState.PATIENT_MENU: {
        "1": MenuState.REGISTER_PATIENT,
        "2": MenuState.PATIENT_LOGIN,
        "3": MenuState.MAIN_MENU,
    },
    MenuState.PATIENT_SESSION: {
        "2": MenuState.BOOK_SLOT,
        "4": MenuState.PATIENT_CHANNEL,
        "5": MenuState.PATIENT_MENU,
    },
    MenuState.DOCTOR_SESSION: {
        "2": MenuState.ADD_SLOT,
        "3": MenuState.REMOVE_SLOT,
        "5": MenuState.COMPLETE_CONSULTATION,
        "6": MenuState.DOCTOR_CHANNEL,
        "7": MenuState.MAIN_MENU,
    },
    MenuState.DIRECTORY: {
        "3": MenuState.MAIN_MENU,
    },
}


@dataclass
class Session:
    """Tracks who is logged in and any half-filled form."""
    current_state: MenuState = MenuState.MAIN_MENU

    patient_id: str | None = None
    doctor_id: str | None = None

    # Values collected so far for the form of the current state
    form: dict = field(default_factory=dict)

    def start_form(self, state: MenuState) -> None:
        self.current_state = state
        self.form = {}

    def next_form_field(self) -> str | None:
        """First field of the current form that has no value yet."""
        for name in FORM_FIELDS.get(self.current_state, []):
            if name not in self.form:
                return name
        return None

    def fill_form_field(self, value: str) -> str | None:
        """Store input for the next missing field. Returns the field filled."""
        name = self.next_form_field()
        if name is not None:
            self.form[name] = value
        return name

    def is_form_complete(self) -> bool:
        return self.current_state in FORM_FIELDS and self.next_form_field() is None

    def logout(self) -> None:
        self.patient_id = None
        self.doctor_id = None
        self.form = {}


def get_next_state(state: MenuState, choice: str) -> MenuState | None:
    """Screen a numbered menu choice leads to, or None if it isn't a transition."""
    return MENU_TRANSITIONS.get(state, {}).get(choice.strip())
