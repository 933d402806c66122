"""
Request DTOs for the auth endpoints.

Hey future me - these are the payloads the screens hand to SessionManager.
They only check what would make the request meaningless (empty email, empty
password, a date we can't read). Real form validation (password strength,
matching confirmation, etc) belongs to the UI, not here.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from poupadin.domain.exceptions import ValidationError


@dataclass(frozen=True)
class LoginCredentials:
    """Email + password for POST /auth/login."""

    email: str
    password: str

    def __post_init__(self) -> None:
        """Validate essential fields."""
        if not self.email or not self.email.strip():
            raise ValidationError("Email cannot be empty")
        if not self.password:
            raise ValidationError("Password cannot be empty")

    def to_payload(self) -> dict[str, Any]:
        """Request body."""
        return {"email": self.email.strip(), "password": self.password}

    def __repr__(self) -> str:
        return f"LoginCredentials(email={self.email!r}, password=***)"


# Hey future me - the registration screen collects the birth date as DD/MM/YYYY
# (Brazilian format) but the API wants ISO YYYY-MM-DD. We accept a date object,
# ISO, or DD/MM/YYYY and always send ISO.
def parse_date_of_birth(value: date | str) -> date:
    """Parse a birth date from a date, "YYYY-MM-DD" or "DD/MM/YYYY"."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"Invalid date of birth: {value!r} (expected DD/MM/YYYY)")


@dataclass(frozen=True)
class RegistrationDetails:
    """Payload for POST /auth/register."""

    full_name: str
    email: str
    password: str
    date_of_birth: date | str
    mobile_number: str | None = None

    def __post_init__(self) -> None:
        """Validate essential fields and normalize the birth date."""
        if not self.full_name or not self.full_name.strip():
            raise ValidationError("Full name cannot be empty")
        if not self.email or not self.email.strip():
            raise ValidationError("Email cannot be empty")
        if not self.password:
            raise ValidationError("Password cannot be empty")
        # frozen dataclass - object.__setattr__ is the sanctioned way in __post_init__
        object.__setattr__(self, "date_of_birth", parse_date_of_birth(self.date_of_birth))

    def to_payload(self) -> dict[str, Any]:
        """Request body, field names as the API expects them."""
        dob = self.date_of_birth
        return {
            "full_name": self.full_name.strip(),
            "email": self.email.strip(),
            "mobile_number": self.mobile_number,
            "date_of_birth": dob.isoformat() if isinstance(dob, date) else dob,
            "password": self.password,
        }

    def __repr__(self) -> str:
        return (
            f"RegistrationDetails(full_name={self.full_name!r}, email={self.email!r}, "
            f"password=***)"
        )


__all__ = [
    "LoginCredentials",
    "RegistrationDetails",
    "parse_date_of_birth",
]
