"""Invalid inputs and field boundaries for negative tests."""

from typing import Final

INVALID_EMAILS: Final[tuple[str, ...]] = (
    "plainaddress",
    "@missingusername.com",
    "username@.com",
    "username@domain..com",
    "username@domain,com",
    "username@domain@domain.com",
    "username@domain",
    "",
    "   ",
)

INVALID_PASSWORDS: Final[tuple[str, ...]] = ("123", "7charac", "verylongpassword21cha", "", "     ")

INVALID_USERNAMES: Final[tuple[str, ...]] = ("", "us", "verylongpassword21cha", "   ")

# Field length boundaries (inclusive)
PASSWORD_MIN_LENGTH: Final[int] = 8
PASSWORD_MAX_LENGTH: Final[int] = 20
USERNAME_MIN_LENGTH: Final[int] = 3
USERNAME_MAX_LENGTH: Final[int] = 20
