"""Input sanitization utilities."""
import re
from typing import Optional

from convention_voting.core.constants import MAX_NAME_LENGTH

MAX_DESCRIPTION_LENGTH = 5000


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    HTML tags are stripped and whitespace is normalized. Entities are not
    escaped because the client escapes on output.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Malformed tags survive the strip above
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_name(name: str, label: str = "Name") -> str:
    """Sanitize a meeting, motion or choice name."""
    sanitized = sanitize_text(name, max_length=MAX_NAME_LENGTH)

    if not sanitized:
        raise ValueError(f"{label} cannot be empty")

    return sanitized


def sanitize_description(description: Optional[str]) -> Optional[str]:
    """Sanitize an optional free-text description. Blank becomes None."""
    if description is None:
        return None

    # Descriptions keep their line breaks
    sanitized = description.strip()
    if len(sanitized) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(f"Input exceeds maximum length of {MAX_DESCRIPTION_LENGTH} characters")

    sanitized = re.sub(r'<[^>]*>', '', sanitized)
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    return sanitized or None
