"""Simples Nacional, Anexo I (comércio)."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from hub360.calc.money import ZERO, CalculoInvalido, money, require_non_negative

LIMITE_ANUAL = Decimal("4800000")
SUBLIMITE_ICMS = Decimal("3600000")


@dataclass(frozen=True)
class Faixa:
    numero: int
    ate: Decimal
    aliquota_nominal_pct: Decimal
    deducao: Decimal


ANEXO_I = (
    Faixa(1, Decimal("180000"), Decimal("4.00"), Decimal("0")),
    Faixa(2, Decimal("360000"), Decimal("7.30"), Decimal("5940")),
    Faixa(3, Decimal("720000"), Decimal("9.50"), Decimal("13860")),
    Faixa(4, Decimal("1800000"), Decimal("10.70"), Decimal("22500")),
    Faixa(5, Decimal("3600000"), Decimal("14.30"), Decimal("87300")),
    Faixa(6, Decimal("4800000"), Decimal("19.00"), Decimal("378000")),
)


def rbt12(receitas_mensais: Sequence) -> Decimal:
    """Receita bruta dos últimos 12 meses (lista em ordem cronológica)."""
    valores = [require_non_negative(v, "receitas_12m") for v in receitas_mensais]
    return sum(valores[-12:], ZERO)


def faixa(rbt: Decimal) -> Faixa:
    rbt = require_non_negative(rbt, "rbt12")
    for f in ANEXO_I:
        if rbt <= f.ate:
            return f
    raise CalculoInvalido("RBT12 acima do limite do Simples Nacional (R$ 4.800.000,00)", "rbt12")


def calcular_das(faturamento_mes, rbt) -> dict:
    fat = require_non_negative(faturamento_mes, "faturamento_mes")
    rbt = require_non_negative(rbt, "rbt12")
    f = faixa(rbt)

    nominal = f.aliquota_nominal_pct / 100
    if rbt == ZERO:
        efetiva = nominal
    else:
        efetiva = (rbt * nominal - f.deducao) / rbt

    return {
        "faixa": f.numero,
        "rbt12": str(money(rbt)),
        "faturamento_mes": str(money(fat)),
        "aliquota_nominal_pct": str(f.aliquota_nominal_pct),
        "deducao": str(money(f.deducao)),
        "aliquota_efetiva_pct": str((efetiva * 100).quantize(Decimal("0.0001"))),
        "valor_das": str(money(fat * efetiva)),
        "limite_anual": str(money(LIMITE_ANUAL)),
        "sublimite_icms": str(money(SUBLIMITE_ICMS)),
        "acima_sublimite_icms": rbt > SUBLIMITE_ICMS,
        "disponivel_no_ano": str(money(LIMITE_ANUAL - rbt)),
    }
