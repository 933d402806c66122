"""Wire schemas for the auth endpoints.

Hey future me - the backend has changed its field names over time:
`full_name` vs `fullName` vs `name`, `token` vs `accessToken`, and so on. ALL
of that is absorbed HERE, with every alias declared once via AliasChoices.
Nothing past this module ever sees a raw auth JSON body - it gets a
UserProfile or a TokenPair.
"""

from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from poupadin.domain.entities import TokenPair, UserProfile
from poupadin.domain.exceptions import ServerError


class UserProfilePayload(BaseModel):
    """User object as returned by login/register (either naming convention)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "user_id", "userId"))
    full_name: str = Field(
        default="", validation_alias=AliasChoices("full_name", "fullName", "name")
    )
    email: str = ""
    mobile_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("mobile_number", "mobileNumber", "phone"),
    )
    date_of_birth: date | None = Field(
        default=None, validation_alias=AliasChoices("date_of_birth", "dateOfBirth")
    )
    initial_setup_completed: bool = Field(
        default=False,
        validation_alias=AliasChoices("initial_setup_completed", "initialSetupCompleted"),
    )
    created_at: str | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )

    # Some endpoints send numeric ids.
    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Accept int ids and store them as strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    # "2000-01-31T00:00:00.000Z" comes back from some database drivers.
    @field_validator("date_of_birth", mode="before")
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        """Drop a time component from ISO datetimes."""
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        if v == "":
            return None
        return v

    def to_entity(self) -> UserProfile:
        """Convert to the domain entity."""
        return UserProfile(
            id=self.id,
            full_name=self.full_name,
            email=self.email,
            mobile_number=self.mobile_number,
            date_of_birth=self.date_of_birth,
            initial_setup_completed=self.initial_setup_completed,
            created_at=self.created_at,
        )


class TokenPairPayload(BaseModel):
    """Token fields of a login/register/refresh answer (either naming convention)."""

    model_config = ConfigDict(extra="ignore")

    access_token: str | None = Field(
        default=None, validation_alias=AliasChoices("accessToken", "token", "access_token")
    )
    refresh_token: str | None = Field(
        default=None, validation_alias=AliasChoices("refreshToken", "refresh_token")
    )

    @field_validator("access_token", "refresh_token", mode="before")
    @classmethod
    def non_string_is_missing(cls, v: Any) -> Any:
        """Anything but a non-empty string counts as absent."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @property
    def is_empty(self) -> bool:
        """Neither token present."""
        return self.access_token is None and self.refresh_token is None

    @property
    def is_complete(self) -> bool:
        """Both tokens present."""
        return self.access_token is not None and self.refresh_token is not None


def parse_token_pair(body: dict[str, Any]) -> TokenPairPayload:
    """Read the token fields of a response body."""
    return TokenPairPayload.model_validate(body)


def require_token_pair(body: dict[str, Any], status_code: int = 200) -> TokenPair:
    """Token pair from a response that MUST carry both tokens.

    Raises:
        ServerError: If either token is missing or not a string
    """
    payload = parse_token_pair(body)
    if payload.access_token is None or payload.refresh_token is None:
        raise ServerError(
            "Invalid token response from server", status_code=status_code, body=None
        )
    return TokenPair(payload.access_token, payload.refresh_token)


def parse_user_profile(body: dict[str, Any], status_code: int = 200) -> UserProfile:
    """Profile from a login/register body ({"user": {...}} or the user at top level).

    Raises:
        ServerError: If no usable user object is present
    """
    raw = body.get("user")
    if not isinstance(raw, dict):
        raw = body
    try:
        return UserProfilePayload.model_validate(raw).to_entity()
    except ValidationError as e:
        raise ServerError(
            f"Invalid user data from server: {e.error_count()} error(s)",
            status_code=status_code,
            body=None,
        ) from e


def profile_to_json(profile: UserProfile) -> str:
    """Serialize a profile for the user_data store key."""
    return UserProfilePayload(
        id=profile.id,
        full_name=profile.full_name,
        email=profile.email,
        mobile_number=profile.mobile_number,
        date_of_birth=profile.date_of_birth,
        initial_setup_completed=profile.initial_setup_completed,
        created_at=profile.created_at,
    ).model_dump_json()


def profile_from_json(raw: str) -> UserProfile:
    """Deserialize the user_data store key.

    Raises:
        pydantic.ValidationError: If the stored JSON is not a profile
    """
    return UserProfilePayload.model_validate_json(raw).to_entity()
