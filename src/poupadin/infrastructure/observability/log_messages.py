"""Structured log message templates for session and request events.

Hey future me - the session layer logs are the ones you'll read when a user
says "the app logged me out for no reason". They need to answer: which call
got the 401, did a renewal run, why did it fail, what got cleared. So:

    🔴 Session Renewal Failed
    ├─ Reason: refresh endpoint returned 401
    ├─ Waiters: 3
    └─ 💡 Credentials were cleared, user must log in again

RULE: no token VALUES in any template. Only "present"/"absent".
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class LogTemplate:
    """A reusable log message template with placeholders.

    The format() method replaces {placeholders} with actual values and adds
    the tree structure and the optional hint line.
    """

    icon: str
    title: str
    fields: dict[str, str]
    hint: str | None = None

    def format(self, **kwargs: Any) -> str:
        """Format the template with provided values.

        Args:
            **kwargs: Values to fill into template placeholders

        Returns:
            Formatted multi-line log message with icon, title, fields, and optional hint
        """
        lines = [f"{self.icon} {self.title}"]

        field_items = list(self.fields.items())
        for i, (key, value_template) in enumerate(field_items):
            prefix = "└─" if i == len(field_items) - 1 and not self.hint else "├─"
            try:
                value = value_template.format(**kwargs)
            except KeyError as e:
                value = f"<missing: {e}>"
            lines.append(f"{prefix} {key}: {value}")

        if self.hint:
            try:
                hint_text = self.hint.format(**kwargs)
            except KeyError as e:
                hint_text = f"<missing: {e}>"
            lines.append(f"└─ 💡 {hint_text}")

        return "\n".join(lines)


class LogMessages:
    """Collection of standardized log message templates."""

    # === Requests ===

    @staticmethod
    def request_failed(
        method: str,
        path: str,
        error: str,
        hint: str | None = None,
    ) -> str:
        """Format a transport failure (no response received).

        Example:
            logger.warning(LogMessages.request_failed("GET", "/goals", "ConnectError"))
        """
        template = LogTemplate(
            icon="🔴",
            title="API Request Failed",
            fields={"Request": "{method} {path}", "Reason": "{error}"},
            hint=hint or "Check network connectivity and POUPADIN_API_BASE_URL",
        )
        return template.format(method=method, path=path, error=error)

    @staticmethod
    def unauthorized(method: str, path: str, token_present: bool, replay: bool) -> str:
        """Format a 401 seen by the gateway."""
        template = LogTemplate(
            icon="🔒",
            title="Request Unauthorized (401)",
            fields={
                "Request": "{method} {path}",
                "Token": "present" if token_present else "absent",
                "Replay": "yes" if replay else "no",
            },
        )
        return template.format(method=method, path=path)

    # === Session ===

    @staticmethod
    def renewal_started() -> str:
        """Format the start of a shared token renewal."""
        template = LogTemplate(
            icon="🔄",
            title="Session Renewal Started",
            fields={"Endpoint": "POST /auth/refresh"},
        )
        return template.format()

    @staticmethod
    def renewal_succeeded() -> str:
        """Format a successful renewal."""
        template = LogTemplate(
            icon="✅",
            title="Session Renewed",
            fields={"Stored": "access_token, refresh_token"},
        )
        return template.format()

    @staticmethod
    def renewal_failed(reason: str) -> str:
        """Format a failed renewal."""
        template = LogTemplate(
            icon="🔴",
            title="Session Renewal Failed",
            fields={"Reason": "{reason}"},
            hint="Credentials were cleared, user must log in again",
        )
        return template.format(reason=reason)

    @staticmethod
    def session_expired(reason: str, listeners: int) -> str:
        """Format the forced-logout signal."""
        template = LogTemplate(
            icon="⏰",
            title="Session Expired",
            fields={"Reason": "{reason}", "Listeners": "{listeners}"},
        )
        return template.format(reason=reason, listeners=listeners)

    @staticmethod
    def session_corrupt(access_present: bool, refresh_present: bool) -> str:
        """Format a half-stored token pair found at startup."""
        template = LogTemplate(
            icon="⚠️",
            title="Partial Session In Store",
            fields={
                "access_token": "present" if access_present else "absent",
                "refresh_token": "present" if refresh_present else "absent",
            },
            hint="Store was cleared, user must log in again",
        )
        return template.format()
