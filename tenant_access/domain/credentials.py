"""
Invitation credential generation and format checks.

Short codes are 8 characters: 4 uppercase letters then 4 digits, e.g.
``ABCD1234``. Tokens are long URL-safe random strings. Neither is unique
by construction; the invitation store checks for collisions.
"""

import re
import secrets
import string

SHORT_CODE_LETTERS = string.ascii_uppercase
SHORT_CODE_DIGITS = string.digits
SHORT_CODE_LENGTH = 8

TOKEN_BYTES = 32

_SHORT_CODE_RE = re.compile(r"^[A-Z]{4}[0-9]{4}$")
_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{32,255}$")


def generate_short_code() -> str:
    letters = "".join(secrets.choice(SHORT_CODE_LETTERS) for _ in range(4))
    digits = "".join(secrets.choice(SHORT_CODE_DIGITS) for _ in range(4))
    return letters + digits


def generate_token() -> str:
    # 32 random bytes -> 43 URL-safe characters
    return secrets.token_urlsafe(TOKEN_BYTES)


def is_valid_short_code_format(value: str) -> bool:
    if not isinstance(value, str):
        return False
    return bool(_SHORT_CODE_RE.match(value.upper()))


def is_valid_token_format(value: str) -> bool:
    if not isinstance(value, str):
        return False
    return bool(_TOKEN_RE.match(value))


def is_valid_credential_format(value: str) -> bool:
    return is_valid_short_code_format(value) or is_valid_token_format(value)
