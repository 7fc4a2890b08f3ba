# uhf_gen2/protocols/validation.py

"""Range checks shared by the request encoders. All failures raise InvalidParameterError."""

from uhf_gen2.core.exceptions import InvalidParameterError


def require_range(name: str, value: int, minimum: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError(f"{name} must be an int, got {type(value).__name__}")
    if not (minimum <= value <= maximum):
        raise InvalidParameterError(f"{name} must be {minimum}-{maximum}, got {value}")
    return value


def require_byte(name: str, value: int) -> int:
    return require_range(name, value, 0x00, 0xFF)


def require_word(name: str, value: int) -> int:
    return require_range(name, value, 0x0000, 0xFFFF)


def require_member(name: str, value, enum_cls):
    """Coerces ``value`` to ``enum_cls``; unknown codes are a caller error."""
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidParameterError(f"Invalid {name}: {value!r}") from None
