"""Input validation and small helpers shared by the scraper components."""

import re
from typing import Iterable, List, TypeVar

from ..errors import BatchValidationError, InvalidIdentifierError

DEFAULT_IDENTIFIER_PATTERN = r"^[A-Z]{2}\d{2}[A-Z]\d{5}$"

T = TypeVar("T")


def sanitize_identifier(identifier: str) -> str:
    """Strip whitespace and upper-case a roll number."""
    return identifier.strip().upper()


def is_valid_identifier(identifier: str, pattern: str = DEFAULT_IDENTIFIER_PATTERN) -> bool:
    """Check a roll number such as ``ED18A02166`` against the portal format."""
    return bool(re.fullmatch(pattern, identifier))


def validate_identifier(identifier: str, pattern: str = DEFAULT_IDENTIFIER_PATTERN) -> str:
    """Return the sanitized roll number.

    Raises:
        InvalidIdentifierError: If it is not a string or does not match ``pattern``.
    """
    if not isinstance(identifier, str):
        raise InvalidIdentifierError(repr(identifier))
    cleaned = sanitize_identifier(identifier)
    if not is_valid_identifier(cleaned, pattern):
        raise InvalidIdentifierError(identifier)
    return cleaned


def validate_batch(
    identifiers: Iterable[str],
    max_batch_size: int = 100,
    pattern: str = DEFAULT_IDENTIFIER_PATTERN,
) -> List[str]:
    """Validate a whole batch before any work is scheduled.

    Raises:
        BatchValidationError: On an empty or oversized batch, or any malformed roll number.
    """
    items = list(identifiers)
    if not items:
        raise BatchValidationError("roll_numbers must be a non-empty list")
    if len(items) > max_batch_size:
        raise BatchValidationError(f"Maximum {max_batch_size} roll numbers allowed per batch")

    cleaned: List[str] = []
    invalid: List[str] = []
    for item in items:
        try:
            cleaned.append(validate_identifier(item, pattern))
        except InvalidIdentifierError:
            invalid.append(str(item))

    if invalid:
        raise BatchValidationError(f"Invalid roll number format: {', '.join(invalid)}")
    return cleaned


def chunk_list(items: List[T], chunk_size: int) -> List[List[T]]:
    """Split ``items`` into contiguous chunks of at most ``chunk_size``."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    return [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]


def format_processing_time(milliseconds: float) -> str:
    """Human readable duration: ``850ms``, ``1.5s`` or ``2m 5.0s``."""
    if milliseconds < 1000:
        return f"{int(milliseconds)}ms"
    if milliseconds < 60000:
        return f"{milliseconds / 1000:.1f}s"
    minutes = int(milliseconds // 60000)
    seconds = (milliseconds % 60000) / 1000
    return f"{minutes}m {seconds:.1f}s"
