"""Validation of typed console input using Pydantic models."""

from datetime import date, datetime, time

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

DISPLAY_DATE_FORMAT = "%d-%m-%Y"
ENTRY_DATE_FORMATS = [DISPLAY_DATE_FORMAT, "%Y-%m-%d"]
ENTRY_TIME_FORMAT = "%H:%M"

FORBIDDEN_CHARACTERS = ("|", "\n", "\r")


def clean_text(value):
    """Strip surrounding whitespace and reject characters the data files can't hold."""
    if value is None:
        return ""
    value = str(value).strip()
    if any(ch in value for ch in FORBIDDEN_CHARACTERS):
        raise ValueError("must not contain '|' or line breaks")
    return value


def parse_entry_date(value) -> date:
    """Accept dd-mm-yyyy (as displayed) or YYYY-MM-DD."""
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in ENTRY_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date {text!r}, use dd-mm-yyyy")


def parse_entry_time(value) -> time:
    if isinstance(value, time):
        return value
    text = str(value).strip()
    try:
        return datetime.strptime(text, ENTRY_TIME_FORMAT).time()
    except ValueError:
        raise ValueError(f"invalid time {text!r}, use HH:MM") from None


class PatientRegistration(BaseModel):
    """Details a patient types in to register."""

    name: str = Field(..., min_length=1, description="Patient's full name")
    email: str = Field(..., min_length=1, description="Email address, the default notification address")
    phone: str = Field("", description="Phone number used for SMS and WhatsApp")
    address: str = Field("", description="Home address")

    @field_validator("name", "email", "phone", "address", mode="before")
    @classmethod
    def normalize_text(cls, v):
        return clean_text(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if "@" not in v:
            raise ValueError("email address needs an '@'")
        return v


class SlotEntry(BaseModel):
    """A new consultation slot as typed by a doctor."""

    slot_date: date = Field(..., description="Day of the slot")
    start_time: time = Field(..., description="Start, 24-hour HH:MM")
    end_time: time = Field(..., description="End, 24-hour HH:MM")

    @field_validator("slot_date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return parse_entry_date(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_time(cls, v):
        return parse_entry_time(v)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_time <= self.start_time:
            raise ValueError("end time must be after start time")
        return self


class ConsultationEntry(BaseModel):
    """Outcome of a consultation as typed by the doctor."""

    appointment_id: str = Field(..., min_length=1)
    diagnosis: str = Field(..., min_length=1)
    notes: str = ""

    @field_validator("appointment_id", "diagnosis", "notes", mode="before")
    @classmethod
    def normalize_text(cls, v):
        return clean_text(v)


def describe_validation_error(error: ValidationError) -> str:
    """One-line summary of the first problem in a ValidationError."""
    first = error.errors()[0]
    message = first["msg"].removeprefix("Value error, ")
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location.replace('_', ' ')}: {message}" if location else message
