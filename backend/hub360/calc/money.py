from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class CalculoInvalido(ValueError):
    """Entrada inválida para uma fórmula (preço negativo, alíquota fora de 0-100...)."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


def D(value, field: str | None = None) -> Decimal:
    """Converte int/str/float/Decimal para Decimal (float via str, sem lixo binário)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise CalculoInvalido("valor booleano não é numérico", field)
    try:
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise CalculoInvalido(f"valor numérico inválido: {value!r}", field)


def money(x) -> Decimal:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)


def pct(x) -> Decimal:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)


def rate(percent) -> Decimal:
    """12.5 -> 0.125"""
    return D(percent) / HUNDRED


def safe_div(a, b) -> Decimal:
    b = D(b)
    if b == ZERO:
        return ZERO
    return D(a) / b


def require_non_negative(value, field: str) -> Decimal:
    v = D(value, field)
    if v < ZERO:
        raise CalculoInvalido(f"{field} não pode ser negativo", field)
    return v


def require_percent(value, field: str, *, upper: Decimal = HUNDRED) -> Decimal:
    v = D(value, field)
    if v < ZERO or v > upper:
        raise CalculoInvalido(f"{field} deve estar entre 0 e {upper}", field)
    return v


# "1.234" / "1.234.567,89": grupo de milhar nunca começa com 0
_BRL_THOUSANDS = re.compile(r"[1-9]\d{0,2}(?:\.\d{3})+(?:,\d+)?")
_BRL_COMMA = re.compile(r"\d+(?:,\d+)?")
_BRL_POINT = re.compile(r"\d+\.\d+")


def parse_brl(raw) -> Decimal:
    """
    "R$ 1.234,56" -> 1234.56
    Aceita também "1234.56", "1.234" (milhar), "0.500" e "1234,5".
    Qualquer outro texto levanta CalculoInvalido.
    """
    if isinstance(raw, (int, Decimal)) and not isinstance(raw, bool):
        return D(raw)
    s = re.sub(r"\s+", "", str(raw or ""))

    negative = s.startswith("-")
    s = s[1:] if negative else s
    if s[:2].upper() == "R$":
        s = s[2:]
        if not negative and s.startswith("-"):
            negative, s = True, s[1:]

    if _BRL_THOUSANDS.fullmatch(s):
        s = s.replace(".", "").replace(",", ".")
    elif _BRL_COMMA.fullmatch(s):
        s = s.replace(",", ".")
    elif not _BRL_POINT.fullmatch(s):
        raise CalculoInvalido(f"valor monetário inválido: {raw!r}", "valor")

    value = D(s, "valor")
    return -value if negative else value


def format_brl(value) -> str:
    v = money(value)
    sign = "-" if v < 0 else ""
    inteiro, frac = f"{abs(v):.2f}".split(".")
    grupos = []
    while len(inteiro) > 3:
        grupos.insert(0, inteiro[-3:])
        inteiro = inteiro[:-3]
    grupos.insert(0, inteiro)
    return f"{sign}R$ {'.'.join(grupos)},{frac}"
