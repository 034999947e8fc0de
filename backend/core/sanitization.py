"""
Input sanitization for raw workout text.

Shared gate that runs before any reasoning-service call, rejecting empty or
oversized input and text that tries to override the model's instructions.
This module has no dependencies on services to avoid circular imports.
"""

import re

from application.exceptions import ValidationRejection

MAX_WORKOUT_TEXT_LENGTH = 10000

# Prompt-override attempts; chosen to avoid false positives on workout wording
_SUSPICIOUS_PATTERNS = [
    re.compile(r"ignore\s+(all\s+)?previous\s+(instructions|directives|commands)", re.IGNORECASE),
    re.compile(r"disregard\s+(all\s+)?(previous|prior)\s+(instructions|directives)", re.IGNORECASE),
    re.compile(r"new\s+instructions?:", re.IGNORECASE),
    re.compile(r"system\s+prompt", re.IGNORECASE),
    re.compile(r"admin\s+mode", re.IGNORECASE),
    re.compile(r"(you\s+are|your\s+role\s+is)\s+now\s+(a|an)\s+\w+\s+(admin|assistant|helper)", re.IGNORECASE),
    re.compile(r"your\s+job\s+is\s+now\s+to\s+(?!focus|maintain|ensure|complete)", re.IGNORECASE),
    re.compile(r"</(text|workout_text|original_text|parsed_workout|instructions|output|example)>", re.IGNORECASE),
    re.compile(r"</\w+>\s*</\w+>"),
]


def sanitize_workout_text(value: str, max_length: int = MAX_WORKOUT_TEXT_LENGTH) -> str:
    """
    Validate and clean raw workout text before it reaches a prompt.

    Control characters other than newline and tab are removed; line structure
    is preserved because it carries block boundaries.

    Args:
        value: Raw user-provided workout text
        max_length: Maximum allowed length in characters

    Returns:
        Cleaned text safe for prompt inclusion

    Raises:
        ValidationRejection: If the text is empty, too long, or contains
            prompt-injection patterns
    """
    if value is None or not value.strip():
        raise ValidationRejection("Workout text cannot be empty.")

    if len(value) > max_length:
        raise ValidationRejection(f"Workout text too long (max {max_length} characters).")

    for pattern in _SUSPICIOUS_PATTERNS:
        if pattern.search(value):
            raise ValidationRejection("Workout text contains prohibited content.")

    # Remove control characters except \t and \n; normalize Windows line endings
    sanitized = value.replace("\r\n", "\n")
    sanitized = re.sub(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]", "", sanitized)
    return sanitized.strip()
