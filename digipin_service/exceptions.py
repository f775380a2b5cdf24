# digipin_service/exceptions.py


class DigipinError(ValueError):
    """Base class for every failure raised by the DIGIPIN codec."""


class OutOfRangeError(DigipinError):
    def __init__(self, field: str, minimum: float, maximum: float):
        self.field = field
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"{field.capitalize()} out of range: must be between {minimum} and {maximum}")


class InvalidLengthError(DigipinError):
    def __init__(self, length: int):
        self.length = length
        super().__init__(f"Invalid DIGIPIN: must be 10 characters long (excluding hyphens), got {length}")


class InvalidSymbolError(DigipinError):
    def __init__(self, char: str):
        self.char = char
        super().__init__(f"Invalid character in DIGIPIN: '{char}'")


class BatchInputError(ValueError):
    """Raised when an uploaded CSV cannot be processed as a whole."""
