"""
Student Registry Backend: Student Field Validation
====================================================

What:  Turns a decoded request body (plain mapping) into a `StudentInput`.
How:   Presence check on firstname/lastname, type check on text fields,
       integer parsing of age. Every failure raises ValidationError (→ 400).
Who:   Called by StudentService before any statement reaches the store.

Rules:
    - firstname, lastname: required, text, not blank
    - gender: optional text, stored as submitted
    - age: optional; None, "" and whitespace-only mean "no age";
      otherwise an int, or plain ASCII integer text ("23", " 23 ", "-1"),
      within the signed 64-bit range SQLite stores
    - unknown fields are ignored
"""

import re
from typing import Any, Mapping, Optional

from student_registry.exceptions import ValidationError
from student_registry.schemas.student import StudentInput

REQUIRED_NAMES_MESSAGE = "Firstname and Lastname are required"
INVALID_AGE_MESSAGE = "Age must be a valid number"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text_field(fields: Mapping[str, Any], name: str) -> Optional[str]:
    value = fields.get(name)
    if value is None or isinstance(value, str):
        return value
    # UploadFile parts, JSON numbers, lists...
    raise ValidationError(
        message=f"{name.capitalize()} must be a text value",
        field=name,
        context={"received_type": type(value).__name__},
    )


# SQLite INTEGER is a signed 64-bit value
SQLITE_INT_MIN = -(2 ** 63)
SQLITE_INT_MAX = 2 ** 63 - 1

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


def parse_integer_text(text: str) -> Optional[int]:
    """
    Parse plain ASCII integer text that fits a SQLite INTEGER.

    Returns None for anything else: "1_0", "12.5", non-ASCII digits,
    and values outside the signed 64-bit range.
    """
    text = text.strip()
    if not _INTEGER_TEXT.fullmatch(text):
        return None
    value = int(text)
    if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
        return None
    return value


def parse_age(value: Any) -> Optional[int]:
    """
    Parse an optional age value.

    Returns None for absent or blank values. Raises ValidationError for
    anything that is not an integer or integer text within SQLite's range.
    """
    if _is_blank(value):
        return None
    # bool is an int subclass; true/false from JSON is not an age
    if isinstance(value, bool):
        raise ValidationError(message=INVALID_AGE_MESSAGE, field="age")
    if isinstance(value, int):
        if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
            raise ValidationError(
                message=INVALID_AGE_MESSAGE,
                field="age",
                context={"received": str(value)},
            )
        return value
    if isinstance(value, str):
        age = parse_integer_text(value)
        if age is None:
            raise ValidationError(
                message=INVALID_AGE_MESSAGE,
                field="age",
                context={"received": value},
            )
        return age
    raise ValidationError(
        message=INVALID_AGE_MESSAGE,
        field="age",
        context={"received_type": type(value).__name__},
    )


def validate_student_fields(
    fields: Mapping[str, Any],
    required_message: str = REQUIRED_NAMES_MESSAGE,
) -> StudentInput:
    """
    Validate a decoded body and build the typed StudentInput.

    Args:
        fields: Plain mapping from the input decoder
        required_message: Message used when firstname or lastname is missing
            (create and replace word it differently)

    Raises:
        ValidationError: Missing names, non-text values, malformed age
    """
    firstname = _text_field(fields, "firstname")
    lastname = _text_field(fields, "lastname")
    if _is_blank(firstname) or _is_blank(lastname):
        missing = [
            name for name, value in (("firstname", firstname), ("lastname", lastname))
            if _is_blank(value)
        ]
        raise ValidationError(message=required_message, context={"missing": missing})

    gender = _text_field(fields, "gender")
    age = parse_age(fields.get("age"))

    return StudentInput(firstname=firstname, lastname=lastname, gender=gender, age=age)
