"""Input sanitization utilities."""
import re
from typing import Optional

from inec_poll.core.constants import NIGERIAN_STATES

_TAG_RE = re.compile(r'<[^>]*>')
_ANGLE_RE = re.compile(r'[<>]')
_JS_PROTOCOL_RE = re.compile(r'javascript:', re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r'on\w+=', re.IGNORECASE)


def sanitize_text(text: str, collapse_whitespace: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    Note: This function strips HTML tags and script vectors but does NOT
    escape HTML entities because the frontend escapes output when rendering.
    Double-escaping would cause entities to display literally (e.g., "&lt;" instead of "<").

    Args:
        text: The input text to sanitize
        collapse_whitespace: Replace runs of whitespace with a single space
            (disabled for multi-line fields such as descriptions)

    Returns:
        Sanitized text with tags, stray angle brackets, ``javascript:`` and
        inline event handlers removed

    Raises:
        ValueError: If text is not a string
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    # Remove complete tags first, then any stray brackets left from malformed ones
    sanitized = _TAG_RE.sub('', sanitized)
    sanitized = _ANGLE_RE.sub('', sanitized)
    sanitized = _JS_PROTOCOL_RE.sub('', sanitized)
    sanitized = _EVENT_HANDLER_RE.sub('', sanitized)

    if collapse_whitespace:
        sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized.strip()


def sanitize_optional_text(text: Optional[str], collapse_whitespace: bool = True) -> Optional[str]:
    """Sanitize an optional field; blank input becomes None."""
    if text is None:
        return None
    sanitized = sanitize_text(text, collapse_whitespace=collapse_whitespace)
    return sanitized or None


def is_valid_nigerian_state(state: str) -> bool:
    """Check a state name against the list of Nigerian states (FCT included)."""
    return state in NIGERIAN_STATES
