"""Shared validation utilities"""

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Optional


def validate_br_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a Brazilian phone number to bare digits.

    Accepts "(11) 99999-9999", "11999999999", "+55 11 99999-9999" etc.
    10 digits is a landline, 11 digits a mobile.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    # Drop the country code
    if digits.startswith("55") and len(digits) in (12, 13):
        digits = digits[2:]

    if len(digits) not in (10, 11):
        raise ValueError("Phone number must have 10 or 11 digits including area code")

    return digits


def is_valid_cpf(cpf: str) -> bool:
    """Validate a Brazilian CPF (tax id) including both check digits"""
    digits = re.sub(r"\D", "", cpf or "")

    if len(digits) != 11:
        return False

    # All-same-digit numbers pass the checksum but are not issued
    if digits == digits[0] * 11:
        return False

    for position in (9, 10):
        total = sum(int(digits[i]) * (position + 1 - i) for i in range(position))
        check_digit = 11 - (total % 11)
        if check_digit >= 10:
            check_digit = 0
        if check_digit != int(digits[position]):
            return False

    return True


def validate_cpf(cpf: Optional[str]) -> Optional[str]:
    """Return the CPF formatted as 000.000.000-00, raising ValueError when invalid"""
    if not cpf:
        return cpf
    if not is_valid_cpf(cpf):
        raise ValueError("Invalid CPF")
    digits = re.sub(r"\D", "", cpf)
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if len(email) > 254 or not re.match(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", email):
        raise ValueError("Invalid email format")

    return email


@dataclass
class PasswordStrength:
    is_valid: bool
    score: int  # 0-4
    feedback: list[str] = field(default_factory=list)


def check_password_strength(password: str) -> PasswordStrength:
    feedback = []
    score = 0

    rules = [
        (len(password) >= 8, "At least 8 characters"),
        (re.search(r"[A-Z]", password) is not None, "Include an uppercase letter"),
        (re.search(r"[a-z]", password) is not None, "Include a lowercase letter"),
        (re.search(r"[0-9]", password) is not None, "Include a number"),
        (re.search(r"[^A-Za-z0-9]", password) is not None, "Include a special character"),
    ]
    for passed, message in rules:
        if passed:
            score += 1
        else:
            feedback.append(message)

    return PasswordStrength(
        is_valid=score >= 3 and len(password) >= 6,
        score=min(score, 4),
        feedback=feedback,
    )


def slugify(value: str) -> str:
    """Lowercase ASCII slug: accents stripped, other characters collapsed to hyphens"""
    normalized = unicodedata.normalize("NFD", value.lower())
    ascii_only = "".join(c for c in normalized if not unicodedata.combining(c))
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_only)
    return slug.strip("-")
