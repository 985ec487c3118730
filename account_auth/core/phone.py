"""UK phone number format rule.

Lenient for non-UK numbers, strict for UK-shaped ones: once the cleaned
value starts with ``0``, ``44`` or ``+44`` it must be a full UK number.
Length/type limits for the field are enforced by the request schema.
"""

import re

_SEPARATORS = re.compile(r"[\s\-()]")
_UK_PREFIX = re.compile(r"^(0|44|\+44)")
_UK_DOMESTIC = re.compile(r"^0[0-9]{10}$")
_UK_INTERNATIONAL = re.compile(r"^\+?44[0-9]{10}$")


class PhoneNumberFormatError(ValueError):
    """Raised when a UK-prefixed number has the wrong shape."""

    def __init__(self, attribute: str) -> None:
        self.attribute = attribute
        label = attribute.replace("_", " ")
        super().__init__(f"The {label} must be a valid UK phone number format.")


def clean_phone_number(raw: str) -> str:
    """Strip whitespace, hyphens and parentheses."""
    return _SEPARATORS.sub("", raw)


def is_valid_phone_number(raw: str) -> bool:
    """Predicate form of validate_phone_number()."""
    cleaned = clean_phone_number(raw)
    if not _UK_PREFIX.match(cleaned):
        return True
    return bool(_UK_DOMESTIC.match(cleaned) or _UK_INTERNATIONAL.match(cleaned))


def validate_phone_number(raw: str, attribute: str = "contact_number") -> str:
    """Validate a phone number, returning it unchanged when acceptable.

    Args:
        raw: Value as entered by the user.
        attribute: Field name used in the error message.

    Returns:
        ``raw``, untouched. Numbers are stored as entered.

    Raises:
        PhoneNumberFormatError: If a UK-prefixed number is malformed.
    """
    if not is_valid_phone_number(raw):
        raise PhoneNumberFormatError(attribute)
    return raw
