"""
Password Generator — Random passwords for new vault items.
"""
import secrets
from typing import Optional

from pydantic import BaseModel, Field

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
NUMBERS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# characters easily misread for one another
SIMILAR = frozenset("IOl01")


class PasswordOptions(BaseModel):
    """Character classes and length for :func:`generate_password`."""

    length: int = Field(default=16, ge=8, le=32)
    uppercase: bool = True
    lowercase: bool = True
    numbers: bool = True
    symbols: bool = True
    exclude_similar: bool = True

    def alphabet(self) -> str:
        chars = ""
        if self.uppercase:
            chars += UPPERCASE
        if self.lowercase:
            chars += LOWERCASE
        if self.numbers:
            chars += NUMBERS
        if self.symbols:
            chars += SYMBOLS
        if self.exclude_similar:
            chars = "".join(c for c in chars if c not in SIMILAR)
        return chars


def generate_password(options: Optional[PasswordOptions] = None, **overrides) -> str:
    """Generate a random password.

    Args:
        options: Generator options; defaults to 16 characters of every class.
        **overrides: Individual option fields, applied on top of ``options``.

    Raises:
        ValueError: If no character class is selected.
    """
    if options is None:
        options = PasswordOptions(**overrides)
    elif overrides:
        options = PasswordOptions(**{**options.model_dump(), **overrides})
    chars = options.alphabet()
    if not chars:
        raise ValueError("Please select at least one character type")
    return "".join(secrets.choice(chars) for _ in range(options.length))
