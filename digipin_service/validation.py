# digipin_service/validation.py
"""
Request validation for the HTTP layer.

Only presence and shape are checked here. Range and alphabet rules belong to
the codec, whose error messages are relayed to the client unchanged.
"""
import math
import re
from typing import Any, Optional

NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


class RequestValidationFailed(ValueError):
    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__(", ".join(messages))


def _coordinate_error(label: str, value: Any) -> Optional[str]:
    if value is None:
        return f"{label} is required"
    if isinstance(value, str) and not value.strip():
        return f"{label} cannot be empty"
    # bool is an int subclass and would otherwise pass as 0/1
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return f"{label} must be a valid number"
    # float() alone would also take "1_2.5", "nan" and "infinity"
    if isinstance(value, str) and not NUMBER_PATTERN.match(value.strip()):
        return f"{label} must be a valid number"
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return f"{label} must be a valid number"
    if not math.isfinite(number):
        return f"{label} must be a valid number"
    return None


def parse_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    """
    Checks that both coordinates are present and numeric.

    Errors for both fields are collected before raising, so a request missing
    both gets a single message naming both.

    Raises:
        RequestValidationFailed: If either value is missing, empty or not a number.
    """
    errors = [
        error
        for error in (
            _coordinate_error("Latitude", latitude),
            _coordinate_error("Longitude", longitude),
        )
        if error
    ]
    if errors:
        raise RequestValidationFailed(errors)
    return float(latitude), float(longitude)


def parse_digipin(digipin: Any) -> str:
    if digipin is None:
        raise RequestValidationFailed(["DIGIPIN is required"])
    if not isinstance(digipin, str):
        raise RequestValidationFailed(["DIGIPIN must be a string"])
    digipin = digipin.strip()
    if not digipin:
        raise RequestValidationFailed(["DIGIPIN cannot be empty"])
    return digipin
