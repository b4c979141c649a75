import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(number):
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_code(prefix, suffix_length=6):
    """PREFIX-<base36 ms timestamp>-<base36 random suffix>, e.g. SES-LX2K9Q1A-4F7Z0B."""
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(suffix_length))
    return f"{prefix}-{timestamp}-{suffix}"


def generate_unique_code(prefix, model, field, suffix_length=6, attempts=5):
    """
    Generates codes until one is not already stored in `model.field`.
    The unique constraint on the column still catches a race between check and insert.
    """
    for _ in range(attempts):
        code = generate_code(prefix, suffix_length)
        if not model._default_manager.filter(**{field: code}).exists():
            return code
    raise RuntimeError(f"Could not generate a unique {model.__name__}.{field} after {attempts} attempts")
