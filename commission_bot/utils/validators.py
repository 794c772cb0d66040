"""
Validation utilities module
Contains regex patterns and validation functions for form input
"""

import math
import re
from dataclasses import dataclass

# Regex patterns
WHITESPACE_RGX = r"\s"
EMPLOYEE_ID_RGX = r"^[a-zA-Z0-9]+$"
# Latin and Thai letters plus spaces
NAME_RGX = r"^[a-zA-Zก-๙\s]+$"

EMPLOYEE_ID_MIN_LEN = 3
EMPLOYEE_ID_MAX_LEN = 10
NAME_MIN_LEN = 2


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single field check"""
    is_valid: bool
    error: str = ""


VALID = ValidationResult(True)


def _invalid(error: str) -> ValidationResult:
    return ValidationResult(False, error)


def _is_blank(s: str) -> bool:
    return not s or not s.strip()


def _has_whitespace(s: str) -> bool:
    return bool(re.search(WHITESPACE_RGX, s))


def validate_unit_count(text: str, min_value: int, max_value: int) -> ValidationResult:
    """
    Validate a product quantity

    Args:
        text: Raw user input
        min_value: Smallest accepted quantity
        max_value: Largest accepted quantity

    Returns:
        ValidationResult with the first failing rule's message
    """
    if _is_blank(text):
        return _invalid("quantity required")
    if _has_whitespace(text):
        return _invalid("no spaces allowed")

    # float() accepts digit separators and non-ASCII digits, plain numeric input does not
    if "_" in text or not text.isascii():
        return _invalid("numbers only")
    try:
        value = float(text)
    except ValueError:
        return _invalid("numbers only")
    if math.isnan(value):
        return _invalid("numbers only")
    if not value.is_integer():
        return _invalid("integer only")

    if value < min_value:
        return _invalid(f"value must be between {min_value} and {max_value}")
    if value > max_value:
        return _invalid(f"value must not exceed {max_value}")

    return VALID


def validate_employee_id(text: str) -> ValidationResult:
    """
    Validate employee identifier (ASCII letters and digits, 3-10 characters)

    Args:
        text: Raw user input

    Returns:
        ValidationResult with the first failing rule's message
    """
    if _is_blank(text):
        return _invalid("identifier required")
    if _has_whitespace(text):
        return _invalid("no spaces allowed")
    if not re.match(EMPLOYEE_ID_RGX, text):
        return _invalid("letters/digits only")
    if len(text) < EMPLOYEE_ID_MIN_LEN:
        return _invalid(f"too short ({EMPLOYEE_ID_MIN_LEN}-{EMPLOYEE_ID_MAX_LEN} characters)")
    if len(text) > EMPLOYEE_ID_MAX_LEN:
        return _invalid(f"too long (max {EMPLOYEE_ID_MAX_LEN} characters)")

    return VALID


def validate_name_field(text: str, field_label: str) -> ValidationResult:
    """
    Validate first or last name

    Args:
        text: Raw user input
        field_label: Field name used in the "required" message

    Returns:
        ValidationResult with the first failing rule's message
    """
    if _is_blank(text):
        return _invalid(f"{field_label} required")
    if not re.match(NAME_RGX, text):
        return _invalid("no digits/symbols allowed")
    if len(text.strip()) < NAME_MIN_LEN:
        return _invalid("too short")

    return VALID


def normalize_employee_id(s: str) -> str:
    """Upper-case employee identifier the way it is stored"""
    return s.upper()
