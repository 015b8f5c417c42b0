# app/services/booking/phone.py
"""Phone normalisation: raw user input -> canonical E.164 string"""
from typing import Optional

import phonenumbers

from app.config.settings import get_settings


class InvalidPhoneNumber(ValueError):
    pass


def normalize_phone(raw: str, region: Optional[str] = None) -> str:
    """
    Parse a phone number as typed by a customer and return it in E.164.

    Numbers without a country prefix are read in the business's default
    region (DEFAULT_PHONE_REGION).
    """
    if not raw or not raw.strip():
        raise InvalidPhoneNumber("Phone number is required")

    region = region or get_settings().DEFAULT_PHONE_REGION
    try:
        parsed = phonenumbers.parse(raw.strip(), region)
    except phonenumbers.NumberParseException as e:
        raise InvalidPhoneNumber(f"Invalid phone number: {raw!r}") from e

    if not phonenumbers.is_valid_number(parsed):
        raise InvalidPhoneNumber(f"Invalid phone number: {raw!r}")

    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
