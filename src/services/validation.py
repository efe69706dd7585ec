"""
Input validation for customer and address payloads

Pure functions, run before any connection is acquired. Each raises
ValidationError on the first failure found.
"""

import re
from typing import Any, Dict, Iterable

from services.exceptions import ValidationError

PHONE_NUMBER_PATTERN = re.compile(r"[0-9]{10}")
PIN_CODE_PATTERN = re.compile(r"[0-9]{6}")

CUSTOMER_FIELDS = ("first_name", "last_name", "phone_number")
ADDRESS_FIELDS = ("address_details", "city", "state", "pin_code")


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def has_all(data: Dict[str, Any], fields: Iterable[str]) -> bool:
    return all(not is_blank(data.get(name)) for name in fields)


def require_fields(data: Dict[str, Any], fields: Iterable[str], message: str, field: str = "general"):
    if not has_all(data, fields):
        raise ValidationError(message, field=field)


def validate_phone_number(phone_number: Any):
    if not PHONE_NUMBER_PATTERN.fullmatch(str(phone_number)):
        raise ValidationError("Phone number must be 10 digits.", field="phone_number")


def validate_pin_code(pin_code: Any):
    if not PIN_CODE_PATTERN.fullmatch(str(pin_code)):
        raise ValidationError("Pin code must be 6 digits.", field="pin_code")


def has_address(data: Dict[str, Any]) -> bool:
    """True when every address field is present; partial addresses count as absent"""
    return has_all(data, ADDRESS_FIELDS)


def validate_customer_create(data: Dict[str, Any]):
    """Customer plus its initial address: all seven fields are required"""
    require_fields(data, CUSTOMER_FIELDS + ADDRESS_FIELDS, "All fields are required.")
    validate_phone_number(data["phone_number"])
    validate_pin_code(data["pin_code"])


def validate_customer_update(data: Dict[str, Any]) -> bool:
    """
    Validate an update payload.

    Returns True when the payload also carries a complete address, which the
    update inserts as a new row.
    """
    require_fields(
        data,
        CUSTOMER_FIELDS,
        "First name, last name and phone number are required.",
    )
    validate_phone_number(data["phone_number"])

    if has_address(data):
        validate_pin_code(data["pin_code"])
        return True
    return False


def validate_address(data: Dict[str, Any]):
    require_fields(data, ADDRESS_FIELDS, "All address fields are required.")
    validate_pin_code(data["pin_code"])


def validate_new_address(data: Dict[str, Any]):
    """Address created through /addresses, which names its customer in the body"""
    if is_blank(data.get("customer_id")):
        raise ValidationError("customer_id is required.", field="customer_id")
    validate_address(data)
