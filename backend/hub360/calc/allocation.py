"""Rateio de custos compartilhados (frete, seguro, despesas) entre itens."""
from __future__ import annotations

from decimal import Decimal, ROUND_DOWN
from typing import Sequence

from hub360.calc.money import CENT, ZERO, CalculoInvalido, D, HUNDRED, money

METODOS = ("peso", "valor_fob", "quantidade", "cbm", "personalizado")


def allocate(total, weights: Sequence) -> list[Decimal]:
    """
    Divide `total` proporcionalmente aos pesos, arredondando para centavos
    pelo método do maior resto: a soma das partes é exatamente `total`.

    Pesos todos zero => partes iguais.
    """
    total = D(total)
    ws = [D(w) for w in weights]
    if not ws:
        if total != ZERO:
            raise CalculoInvalido("rateio sem itens para receber o valor", "produtos")
        return []
    if any(w < ZERO for w in ws):
        raise CalculoInvalido("base de rateio negativa", "metodo_rateio")

    soma = sum(ws, ZERO)
    if soma == ZERO:
        ws = [Decimal(1)] * len(ws)
        soma = Decimal(len(ws))

    negative = total < ZERO
    alvo = money(abs(total))

    exatos = [alvo * w / soma for w in ws]
    partes = [e.quantize(CENT, rounding=ROUND_DOWN) for e in exatos]
    sobra = int(((alvo - sum(partes, ZERO)) / CENT).to_integral_value())

    # maior resto primeiro; empate => ordem original
    ordem = sorted(range(len(ws)), key=lambda i: (-(exatos[i] - partes[i]), i))
    for i in ordem[:sobra]:
        partes[i] += CENT

    return [-p for p in partes] if negative else partes


def weights_for(metodo: str, items: Sequence[dict]) -> list[Decimal]:
    """
    Base de rateio por item. Cada item é um dict já calculado com as chaves
    peso_total, valor_fob, quantidade, cbm_total e percentual_rateio.
    """
    m = (metodo or "").strip().lower()
    if m == "peso":
        return [D(i.get("peso_total")) for i in items]
    if m in ("valor_fob", "valor"):
        return [D(i.get("valor_fob")) for i in items]
    if m == "quantidade":
        return [D(i.get("quantidade")) for i in items]
    if m in ("cbm", "volume"):
        return [D(i.get("cbm_total")) for i in items]
    if m == "personalizado":
        ws = [D(i.get("percentual_rateio")) for i in items]
        soma = sum(ws, ZERO)
        if abs(soma - HUNDRED) > CENT:
            raise CalculoInvalido(
                f"percentuais de rateio personalizado somam {soma}, esperado 100",
                "percentual_rateio",
            )
        return ws
    raise CalculoInvalido(f"método de rateio inválido: {metodo!r} (use: {', '.join(METODOS)})", "metodo_rateio")
