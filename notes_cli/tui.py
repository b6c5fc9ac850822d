"""Terminal UI utilities for the notekeep CLI."""

import re
import sys
from datetime import date
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OTP_PATTERN = re.compile(r"^\d{6}$")


def prompt(message: str) -> str:
    """Prompt for user input."""
    sys.stdout.write(message)
    sys.stdout.flush()
    return input().strip()


def prompt_name() -> str:
    """Prompt for a display name."""
    while True:
        name = prompt("Enter your name: ")
        if len(name) >= 2:
            return name
        print("Name must be at least 2 characters.")


def prompt_email() -> str:
    """Prompt for email address with basic validation."""
    while True:
        email = prompt("Enter your email: ")
        if EMAIL_PATTERN.match(email):
            return email
        print("Please enter a valid email address.")


def prompt_date_of_birth() -> Optional[date]:
    """Prompt for an optional date of birth (YYYY-MM-DD)."""
    while True:
        value = prompt("Date of birth (YYYY-MM-DD, optional): ")
        if not value:
            return None
        try:
            return date.fromisoformat(value)
        except ValueError:
            print("Please use the YYYY-MM-DD format.")


def prompt_code() -> str:
    """Prompt for the 6-digit passcode."""
    while True:
        code = prompt("Enter code: ")
        if OTP_PATTERN.match(code):
            return code
        print("The code must be 6 digits.")


def print_error(message: str) -> None:
    """Print an error message."""
    print(f"Error: {message}", file=sys.stderr)


def print_success(message: str) -> None:
    """Print a success message."""
    print(message)


def print_info(message: str) -> None:
    """Print an info message."""
    print(message)


def print_note(note: dict) -> None:
    """Print one note."""
    updated = (note.get("updatedAt") or "")[:16].replace("T", " ")
    print(f"[{note['id']}] {note['title']}  ({updated})")
    for line in note.get("content", "").splitlines():
        print(f"    {line}")
