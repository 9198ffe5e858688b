"""
burgerhero.auth.cpf

Brazilian taxpayer id (CPF) helpers used by sign-up and profile bootstrap.
"""

from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")


def normalize_cpf(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def _check_digit(base: str, factor: int) -> int:
    total = sum(int(d) * (factor - i) for i, d in enumerate(base))
    mod = total % 11
    return 0 if mod < 2 else 11 - mod


def is_valid_cpf(value: str | None) -> bool:
    cpf = normalize_cpf(value)
    if len(cpf) != 11:
        return False
    # 000.000.000-00, 111.111.111-11, ... pass the checksum but are invalid
    if cpf == cpf[0] * 11:
        return False
    first = _check_digit(cpf[:9], 10)
    second = _check_digit(cpf[:10], 11)
    return cpf == f"{cpf[:9]}{first}{second}"
