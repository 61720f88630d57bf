"""Property validators.

A validator takes (subject, value) and returns a ValidationResult.
"""

from __future__ import annotations
import codecs
from ..pipeline.context import ValidationResult


def non_empty(subject: str, value: str) -> ValidationResult:
    if value is None or value == "":
        return ValidationResult(subject, False, f"{subject} must not be empty")
    return ValidationResult(subject, True)


def character_set(subject: str, value: str) -> ValidationResult:
    try:
        codecs.lookup(value)
        # rejects bytes-to-bytes codecs such as hex and base64
        "".encode(value)
        b"".decode(value)
    except (LookupError, TypeError):
        return ValidationResult(subject, False, f"{subject}: unknown character set '{value}'")
    return ValidationResult(subject, True)


NON_EMPTY_VALIDATOR = non_empty
CHARACTER_SET_VALIDATOR = character_set
