"""
Shareable invite links.

Links look like ``https://<host>/?invite=<CODE>``. Codes may be shown as
``XXXX-XXXX``; separators and case are normalized away before validation.
"""

from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from .credentials import SHORT_CODE_LENGTH, is_valid_short_code_format
from .entities.enums import MemberRole

INVITE_QUERY_PARAM = "invite"


def normalize_credential(raw: Optional[str]) -> str:
    """
    Normalize a credential typed by a user or read from a link.

    Whitespace is always stripped. Short codes additionally lose ``-``
    separators and are upper-cased. Tokens are case-sensitive and may contain
    ``-`` themselves, so they are otherwise returned untouched.
    """
    if raw is None:
        return ""
    value = "".join(raw.split())
    compact = value.replace("-", "")
    if len(compact) == SHORT_CODE_LENGTH and is_valid_short_code_format(compact):
        return compact.upper()
    return value


def format_code_for_display(code: str) -> str:
    code = normalize_credential(code)
    if not is_valid_short_code_format(code):
        return code
    return f"{code[:4]}-{code[4:]}"


def build_invite_url(code: str, base_url: str) -> str:
    base = base_url.rstrip("/")
    return f"{base}/?{urlencode({INVITE_QUERY_PARAM: normalize_credential(code)})}"


def extract_invite_code_from_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    values = parse_qs(parts.query).get(INVITE_QUERY_PARAM)
    if not values or not values[0].strip():
        return None
    return normalize_credential(values[0])


def build_invite_message(
    code: str,
    business_name: str,
    role: MemberRole,
    base_url: str,
    sender_name: Optional[str] = None,
    expiry_days: int = 7,
) -> str:
    """Text an inviter can paste into a chat or email"""
    invite_url = build_invite_url(code, base_url)
    role_text = "manager" if role == MemberRole.manager else "staff member"
    who = f"{sender_name} has" if sender_name else "You've been"
    return (
        f"Hi! {who} invited you to join {business_name} as a {role_text}.\n"
        "\n"
        "Click this link to get started:\n"
        f"{invite_url}\n"
        "\n"
        f"Or enter the invite code {format_code_for_display(code)}.\n"
        "\n"
        f"This invitation will expire in {expiry_days} days."
    )
