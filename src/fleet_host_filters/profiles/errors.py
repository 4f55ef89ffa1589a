"""User-facing messages for configuration profile upload errors.

The API already returns a final error reason; for a few known reasons we
swap in a friendlier message pointing the user at the right settings page
or documentation. Anything else is shown as the API reason.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from rich.markup import escape

from fleet_host_filters.utils.exceptions import ApiError

DEFAULT_ERROR_MESSAGE = "Couldn't add configuration profile. Please try again."

CERTIFICATE_AUTHORITIES_URL = "https://fleetdm.com/learn-more-about/certificate-authorities"
CUSTOM_SCEP_URL = "https://fleetdm.com/learn-more-about/custom-scep-configuration-profile"
NDES_SCEP_URL = "https://fleetdm.com/learn-more-about/ndes-scep-configuration-profile"
USER_CHANNEL_URL = "https://fleetdm.com/learn-more-about/configuration-profiles-user-channel"

EMBEDDED_LEARN_MORE = " Learn more: https://"
FLEET_VARIABLE_PATTERN = re.compile(r"\$[A-Z0-9_]+")


@dataclass(frozen=True)
class ProfileErrorMessage:
    """A flash message for a failed profile upload.

    Attributes:
        text: Plain message text
        emphasis: Part of the text to highlight (a settings page name)
        learn_more_url: Documentation link shown after the text
    """
    text: str
    emphasis: Optional[str] = None
    learn_more_url: Optional[str] = None

    def __str__(self) -> str:
        if self.learn_more_url:
            return f"{self.text} Learn more: {self.learn_more_url}"
        return self.text

    def to_markup(self) -> str:
        """Render with Rich markup: bold emphasis and a hyperlink."""
        text = escape(self.text)
        if self.emphasis:
            text = text.replace(self.emphasis, f"[bold]{self.emphasis}[/bold]", 1)
        if self.learn_more_url:
            text = f"{text} [link={self.learn_more_url}]Learn more[/link]"
        return text

    def to_dict(self) -> dict:
        return {
            'message': str(self),
            'text': self.text,
            'emphasis': self.emphasis,
            'learn_more_url': self.learn_more_url,
        }


def get_error_reason(err: Any) -> str:
    """Extract the first error reason from an API error, response body or string."""
    if err is None:
        return ""
    if isinstance(err, str):
        return err
    if isinstance(err, ApiError):
        return err.reason
    if isinstance(err, dict):
        data = err.get('data', err)
        errors = (data.get('errors') or []) if isinstance(data, dict) else []
        if errors and isinstance(errors[0], dict):
            return errors[0].get('reason') or ""
    return ""


def _disk_encryption_message(setting: str) -> ProfileErrorMessage:
    return ProfileErrorMessage(
        text=(f"Couldn't add. The configuration profile can't include {setting} settings. "
              "To control these settings, go to Disk encryption."),
        emphasis="Disk encryption",
    )


def generate_secret_error_message(reason: str) -> ProfileErrorMessage:
    """Message for a reason about a missing or invalid secret variable."""
    reason = reason.replace("missing from database", "doesn't exist")
    if reason.startswith("Couldn't"):
        return ProfileErrorMessage(text=reason)
    return ProfileErrorMessage(text=f"Couldn't add. {reason}")


def generate_unsupported_variable_error_message(reason: str) -> ProfileErrorMessage:
    """Message naming the Fleet variable the profile may not use."""
    match = FLEET_VARIABLE_PATTERN.search(reason)
    if not match:
        return ProfileErrorMessage(text=DEFAULT_ERROR_MESSAGE)
    return ProfileErrorMessage(text=f'Couldn\'t add. Variable "{match.group(0)}" doesn\'t exist.')


def _scep_message(url: str) -> Callable[[str], ProfileErrorMessage]:
    return lambda reason: ProfileErrorMessage(text=f"Couldn't add. {reason}", learn_more_url=url)


def generate_user_channel_error_message(reason: str) -> ProfileErrorMessage:
    """Message for a profile scope error, with the API's own link replaced."""
    # The reason already says "Couldn't add" or "Couldn't edit" depending on context
    if EMBEDDED_LEARN_MORE in reason:
        reason = reason[:reason.index(EMBEDDED_LEARN_MORE)]
    return ProfileErrorMessage(text=reason, learn_more_url=USER_CHANNEL_URL)


def _windows_update_message(reason: str) -> ProfileErrorMessage:
    return ProfileErrorMessage(text=f"{reason} To control these settings, go to OS updates.",
                               emphasis="OS updates")


# (predicate, message builder) pairs, checked in order
ERROR_MESSAGE_RULES: List[Tuple[Callable[[str], bool], Callable[[str], ProfileErrorMessage]]] = [
    (lambda r: "BitLocker" in r,
     lambda r: _disk_encryption_message("BitLocker")),
    (lambda r: "The configuration profile can't include FileVault settings." in r,
     lambda r: _disk_encryption_message("FileVault")),
    (lambda r: "The configuration profile can't include Windows update settings." in r,
     _windows_update_message),
    (lambda r: "Secret variable" in r,
     generate_secret_error_message),
    (lambda r: "Fleet variable" in r and "not supported in configuration profiles" in r,
     generate_unsupported_variable_error_message),
    (lambda r: "can't be used if variables for SCEP URL and Challenge are not specified" in r,
     _scep_message(CERTIFICATE_AUTHORITIES_URL)),
    (lambda r: "SCEP profile for custom SCEP certificate authority requires" in r,
     _scep_message(CUSTOM_SCEP_URL)),
    (lambda r: "SCEP profile for NDES certificate authority requires: $FLEET_VAR_NDES_SCEP_CHALLENGE" in r,
     _scep_message(NDES_SCEP_URL)),
    (lambda r: '"PayloadScope"' in r,
     generate_user_channel_error_message),
]


def get_error_message(err: Any) -> ProfileErrorMessage:
    """Map a profile upload error to the message shown to the user.

    Args:
        err: ApiError, API response body ({'errors': [{'reason': ...}]}) or reason string

    Returns:
        ProfileErrorMessage; the raw reason when no rule matches, or the
        default message when there is no reason at all
    """
    reason = get_error_reason(err)
    for matches, build in ERROR_MESSAGE_RULES:
        if matches(reason):
            return build(reason)
    return ProfileErrorMessage(text=reason or DEFAULT_ERROR_MESSAGE)
