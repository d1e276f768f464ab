import math
from typing import Optional

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberType

from core.config import setting
from schema import ErrorResponse, SwoshRequest


def is_swish_number(phone: str) -> bool:
    """Swish numbers for businesses are 10 digits starting with 123."""
    return phone.startswith("123") and len(phone) == 10


def validate_phone_number(phone: str, region: str = None) -> Optional[ErrorResponse]:
    if is_swish_number(phone):
        return None

    try:
        parsed_number = phonenumbers.parse(phone, region or setting.PHONE_REGION)
    except NumberParseException:
        return ErrorResponse(reason=f"'{phone}' is not a valid phone number")

    if phonenumbers.number_type(parsed_number) != PhoneNumberType.MOBILE:
        return ErrorResponse(reason=f"'{phone}' is not a mobile number")

    return None


def validate_swosh_request(request: SwoshRequest) -> Optional[ErrorResponse]:
    """
    Check a create request field by field and report the first problem.

    :param request: The parsed request body

    :return: An ErrorResponse describing the first failing check, or None
    """
    if request.amount is None or request.phone is None or not request.phone.strip():
        return ErrorResponse(reason="Missing input parameters. 'phone' and 'amount' is required")

    if isinstance(request.amount, float) and math.isnan(request.amount):
        return ErrorResponse(reason="Amount must be a number. Got NaN")

    if request.amount < setting.MIN_AMOUNT:
        return ErrorResponse(
            reason=f"Minimum allowed amount is {setting.MIN_AMOUNT}. Got {request.amount}"
        )

    # Also catches Infinity, and ints too large for the store or a float
    if request.amount > setting.MAX_AMOUNT:
        return ErrorResponse(reason=f"Maximum allowed amount is {setting.MAX_AMOUNT}")

    if request.message is not None and len(request.message) > setting.MAX_DESCRIPTION_LENGTH:
        return ErrorResponse(
            reason=f"Description is too long. Max {setting.MAX_DESCRIPTION_LENGTH} chars. "
                   f"Got {len(request.message)}"
        )

    phone_error = validate_phone_number(request.phone.strip())
    if phone_error is not None:
        return phone_error

    if request.expire_after_seconds is not None and request.expire_after_seconds < 1:
        return ErrorResponse(
            reason=f"Expiry must be at least 1 second. Got {request.expire_after_seconds}"
        )

    if request.expire_after_seconds is not None and request.expire_after_seconds > setting.MAX_EXPIRE_AFTER_SECONDS:
        return ErrorResponse(
            reason=f"Expiry can be at most {setting.MAX_EXPIRE_AFTER_SECONDS} seconds"
        )

    return None
