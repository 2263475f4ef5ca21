from gogrind import utils
from gogrind.errors import ValidationError


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 6 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address, rejecting malformed ones."""
    email = email.strip().lower()
    if not utils.is_email(email):
        raise ValidationError(f"Invalid email address: '{email}'")
    return email


def validate_full_name(full_name: str) -> str:
    full_name = full_name.strip()
    if not full_name:
        raise ValidationError("Full name is required")
    return full_name
