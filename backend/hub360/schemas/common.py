import re
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

_CNPJ_W1 = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_CNPJ_W2 = (6,) + _CNPJ_W1


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int


def _cnpj_digit(digits: str, weights: tuple[int, ...]) -> str:
    r = sum(int(d) * w for d, w in zip(digits, weights)) % 11
    return "0" if r < 2 else str(11 - r)


def cnpj_check_digits(base12: str) -> str:
    d1 = _cnpj_digit(base12, _CNPJ_W1)
    d2 = _cnpj_digit(base12 + d1, _CNPJ_W2)
    return d1 + d2


def normalize_cnpj(value: str) -> str:
    """Aceita com ou sem máscara; devolve só os 14 dígitos ou ValueError."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) != 14:
        raise ValueError("CNPJ deve ter 14 dígitos")
    if digits == digits[0] * 14 or cnpj_check_digits(digits[:12]) != digits[12:]:
        raise ValueError("CNPJ inválido")
    return digits
