"""CPF / CNPJ tax identifier masking and checksum validation."""

from __future__ import annotations

import re

from .models import IdentifierKind

CPF_LENGTH = 11
CNPJ_LENGTH = 14

_CNPJ_FIRST_WEIGHTS = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_CNPJ_SECOND_WEIGHTS = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def detect_kind(value: str) -> IdentifierKind | None:
    """Guess CPF or CNPJ from the digit count; None when it is neither."""
    length = len(digits_only(value))
    if length == CPF_LENGTH:
        return IdentifierKind.CPF
    if length == CNPJ_LENGTH:
        return IdentifierKind.CNPJ
    return None


def _all_same(digits: str) -> bool:
    return len(set(digits)) == 1


def _cpf_check_digit(digits: str) -> int:
    start = len(digits) + 1
    total = sum(int(d) * w for d, w in zip(digits, range(start, 1, -1)))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def _cnpj_check_digit(digits: str, weights: tuple[int, ...]) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cpf(value: str) -> bool:
    digits = digits_only(value)
    if len(digits) != CPF_LENGTH or _all_same(digits):
        return False
    first = _cpf_check_digit(digits[:9])
    second = _cpf_check_digit(digits[:10])
    return digits[9:] == f"{first}{second}"


def validate_cnpj(value: str) -> bool:
    digits = digits_only(value)
    if len(digits) != CNPJ_LENGTH or _all_same(digits):
        return False
    first = _cnpj_check_digit(digits[:12], _CNPJ_FIRST_WEIGHTS)
    second = _cnpj_check_digit(digits[:13], _CNPJ_SECOND_WEIGHTS)
    return digits[12:] == f"{first}{second}"


def validate_identifier(value: str, kind: IdentifierKind = IdentifierKind.AUTO) -> bool:
    """Validate a CPF or CNPJ, detecting which one from its length when kind is AUTO."""
    if not digits_only(value):
        return False
    if kind is IdentifierKind.AUTO:
        detected = detect_kind(value)
        if detected is None:
            return False
        kind = detected
    if kind is IdentifierKind.CPF:
        return validate_cpf(value)
    return validate_cnpj(value)


def mask_cpf(value: str) -> str:
    d = digits_only(value)[:CPF_LENGTH]
    if len(d) <= 3:
        return d
    if len(d) <= 6:
        return f"{d[:3]}.{d[3:]}"
    if len(d) <= 9:
        return f"{d[:3]}.{d[3:6]}.{d[6:]}"
    return f"{d[:3]}.{d[3:6]}.{d[6:9]}-{d[9:]}"


def mask_cnpj(value: str) -> str:
    d = digits_only(value)[:CNPJ_LENGTH]
    if len(d) <= 2:
        return d
    if len(d) <= 5:
        return f"{d[:2]}.{d[2:]}"
    if len(d) <= 8:
        return f"{d[:2]}.{d[2:5]}.{d[5:]}"
    if len(d) <= 12:
        return f"{d[:2]}.{d[2:5]}.{d[5:8]}/{d[8:]}"
    return f"{d[:2]}.{d[2:5]}.{d[5:8]}/{d[8:12]}-{d[12:]}"


def format_identifier(value: str, kind: IdentifierKind = IdentifierKind.AUTO) -> str:
    """Apply the CPF or CNPJ mask. AUTO masks as CNPJ once past 11 digits."""
    digits = digits_only(value)
    if not digits:
        return ""
    if kind is IdentifierKind.CPF:
        return mask_cpf(digits)
    if kind is IdentifierKind.CNPJ:
        return mask_cnpj(digits)
    if len(digits) > CPF_LENGTH:
        return mask_cnpj(digits)
    return mask_cpf(digits)
