from __future__ import annotations

import re
from typing import List

from app.core.config import settings
from app.core.errors import ValidationError

COMMON_WEAK_PASSWORDS = {
    "password",
    "password123",
    "123456",
    "123456789",
    "12345678",
    "qwerty",
    "abc123",
    "letmein",
    "111111",
    "iloveyou",
    "admin",
    "welcome",
    "monkey",
    "dragon",
    "123123",
    "qwerty123",
    "trustno1",
    "passw0rd",
    "sunshine",
    "princess",
    "sewing123",
    "upholstery",
}

_UPPERCASE_RE = re.compile(r"[A-Z]")
_LOWERCASE_RE = re.compile(r"[a-z]")
_NUMBER_RE = re.compile(r"[0-9]")
_SPECIAL_RE = re.compile(r"[^A-Za-z0-9]")


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def evaluate_password(password: str, *, email: str | None = None) -> List[str]:
    """
    Returns a list of violation codes if the password does not meet policy.
    """
    pw = password or ""
    violations: list[str] = []
    min_length = max(int(getattr(settings, "PASSWORD_MIN_LENGTH", 10) or 0), 1)

    if len(pw) < min_length:
        violations.append("min_length")
    if not _UPPERCASE_RE.search(pw):
        violations.append("uppercase")
    if not _LOWERCASE_RE.search(pw):
        violations.append("lowercase")
    if not _NUMBER_RE.search(pw):
        violations.append("number")
    if not _SPECIAL_RE.search(pw):
        violations.append("special_char")

    normalized_pw = pw.lower()

    email_norm = _normalize(email)
    if email_norm and email_norm in normalized_pw:
        violations.append("contains_email")
    else:
        local_part = email_norm.split("@")[0] if email_norm else ""
        if local_part and local_part in normalized_pw:
            violations.append("contains_email")

    if normalized_pw in COMMON_WEAK_PASSWORDS:
        violations.append("denylist_common")

    return violations


def ensure_strong_password(password: str, *, email: str | None = None) -> None:
    violations = evaluate_password(password, email=email)
    if violations:
        raise ValidationError(
            "Password does not meet requirements.",
            details={"code": "WEAK_PASSWORD", "violations": violations},
        )
