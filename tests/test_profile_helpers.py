"""
Tests for configuration profile file parsing and upload error messages.
"""

import pytest

from fleet_host_filters.profiles import DEFAULT_ERROR_MESSAGE, get_error_message, get_error_reason, parse_file
from fleet_host_filters.profiles.errors import (
    CERTIFICATE_AUTHORITIES_URL,
    NDES_SCEP_URL,
    USER_CHANNEL_URL,
)
from fleet_host_filters.utils.exceptions import ApiError, InvalidFileTypeError


@pytest.mark.unit
class TestParseFile:
    """Test profile name and platform detection."""

    @pytest.mark.parametrize("file_name,expected", [
        ("Wi-Fi.mobileconfig", ("Wi-Fi", "macOS, iOS, iPadOS")),
        ("declaration.json", ("declaration", "macOS, iOS, iPadOS")),
        ("BitLocker.xml", ("BitLocker", "Windows")),
        ("team.v2.mobileconfig", ("team.v2", "macOS, iOS, iPadOS")),
        ("/tmp/profiles/passcode.xml", ("passcode", "Windows")),
    ])
    def test_supported_extensions(self, file_name, expected):
        assert parse_file(file_name) == expected

    def test_invalid_extension(self):
        with pytest.raises(InvalidFileTypeError, match="Invalid file type: pdf") as exc_info:
            parse_file("readme.pdf")

        assert exc_info.value.extension == "pdf"


@pytest.mark.unit
class TestGetErrorReason:
    """Test extracting the API reason from different error shapes."""

    def test_from_api_error(self):
        err = ApiError("failed", status_code=422, reasons=["Secret variable missing from database"])

        assert get_error_reason(err) == "Secret variable missing from database"

    def test_from_response_body(self):
        body = {'data': {'errors': [{'name': 'base', 'reason': 'Bad profile'}]}}

        assert get_error_reason(body) == "Bad profile"
        assert get_error_reason(body['data']) == "Bad profile"

    def test_nothing_to_extract(self):
        assert get_error_reason(None) == ""
        assert get_error_reason({'errors': []}) == ""


@pytest.mark.unit
class TestGetErrorMessage:
    """Test mapping API reasons to user-facing messages."""

    def test_bitlocker_points_to_disk_encryption(self):
        message = get_error_message("The configuration profile can't include BitLocker settings.")

        assert message.text.count("Disk encryption") == 1
        assert "BitLocker" in message.text
        assert "[bold]Disk encryption[/bold]" in message.to_markup()

    def test_filevault_points_to_disk_encryption(self):
        message = get_error_message("The configuration profile can't include FileVault settings.")

        assert message.text == ("Couldn't add. The configuration profile can't include FileVault settings. "
                                "To control these settings, go to Disk encryption.")

    def test_windows_update(self):
        reason = "The configuration profile can't include Windows update settings."

        assert str(get_error_message(reason)) == f"{reason} To control these settings, go to OS updates."

    def test_unsupported_variable_is_named(self):
        message = get_error_message(
            "Fleet variable $FLEET_VAR_BOGUS_NAME is not supported in configuration profiles.")

        assert message.text == 'Couldn\'t add. Variable "$FLEET_VAR_BOGUS_NAME" doesn\'t exist.'

    def test_secret_variable(self):
        message = get_error_message("Secret variable \"$FLEET_SECRET_X\" missing from database")

        assert message.text == "Couldn't add. Secret variable \"$FLEET_SECRET_X\" doesn't exist"

    def test_scep_messages_link_docs(self):
        ca = get_error_message("Profile can't be used if variables for SCEP URL and Challenge are not specified.")
        ndes = get_error_message(
            "SCEP profile for NDES certificate authority requires: $FLEET_VAR_NDES_SCEP_CHALLENGE, "
            "$FLEET_VAR_NDES_SCEP_PROXY_URL")

        assert ca.learn_more_url == CERTIFICATE_AUTHORITIES_URL
        assert ca.text.startswith("Couldn't add. ")
        assert ndes.learn_more_url == NDES_SCEP_URL

    def test_user_channel_link_replaced(self):
        reason = ("Couldn't add. \"PayloadScope\" must be \"System\". "
                  "Learn more: https://fleetdm.com/some-other-page")

        message = get_error_message(reason)

        assert message.text == "Couldn't add. \"PayloadScope\" must be \"System\"."
        assert message.learn_more_url == USER_CHANNEL_URL
        assert str(message).endswith(f"Learn more: {USER_CHANNEL_URL}")

    def test_unknown_reason_passed_through(self):
        assert get_error_message("Profile name already exists.").text == "Profile name already exists."

    def test_no_reason_uses_default(self):
        assert get_error_message({}).text == DEFAULT_ERROR_MESSAGE

    def test_markup_is_escaped(self):
        message = get_error_message("Invalid key [foo] in profile")

        assert "\\[foo]" in message.to_markup()
