import math
import re
from datetime import UTC, datetime

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_email(value: str) -> bool:
    return bool(EMAIL_RE.fullmatch(value))


def now() -> datetime:
    return datetime.now(UTC)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes between two timestamps, halves rounded up."""
    return math.floor((end - start).total_seconds() / 60 + 0.5)
