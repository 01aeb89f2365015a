"""
Importação simplificada (remessa/courier): II sobre produto + frete e ICMS
"por dentro" sobre produto + frete + II.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Sequence

from hub360.calc.allocation import allocate, weights_for
from hub360.calc.money import (
    HUNDRED,
    ZERO,
    CalculoInvalido,
    D,
    money,
    rate,
    require_non_negative,
    require_percent,
    safe_div,
)

COLUNAS = (
    "valor_fob_usd",
    "custo_produto_brl",
    "frete_brl",
    "ii",
    "icms",
    "despesas_brl",
    "custo_total",
)


@dataclass(frozen=True)
class SimplifiedConfig:
    taxa_cambio: Decimal = Decimal("5.20")
    aliquota_ii_pct: Decimal = Decimal("60")
    aliquota_icms_pct: Decimal = Decimal("17")
    frete_total: Decimal = ZERO
    moeda_frete: str = "USD"
    outras_despesas_brl: Decimal = ZERO
    metodo_rateio_frete: str = "peso"
    metodo_rateio_despesas: str = "quantidade"

    @classmethod
    def from_mapping(cls, data: Mapping | None) -> "SimplifiedConfig":
        data = dict(data or {})
        kw = {}
        for name in ("taxa_cambio", "aliquota_ii_pct", "aliquota_icms_pct", "frete_total", "outras_despesas_brl"):
            if data.get(name) is not None:
                kw[name] = D(data[name], name)
        for name in ("moeda_frete", "metodo_rateio_frete", "metodo_rateio_despesas"):
            if data.get(name):
                kw[name] = str(data[name]).strip()
        return cls(**kw)


@dataclass(frozen=True)
class SimplifiedProduct:
    nome: str
    quantidade: int
    valor_unitario_usd: Decimal
    peso_unitario_kg: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data: Mapping) -> "SimplifiedProduct":
        return cls(
            nome=str(data.get("nome") or "").strip(),
            quantidade=int(data.get("quantidade") or 0),
            valor_unitario_usd=D(data.get("valor_unitario_usd"), "valor_unitario_usd"),
            peso_unitario_kg=D(data.get("peso_unitario_kg"), "peso_unitario_kg"),
        )


@dataclass
class SimplifiedResult:
    produtos: list[dict] = field(default_factory=list)
    totais: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"produtos": self.produtos, "totais": self.totais}


def _validate(cfg: SimplifiedConfig, produtos: Sequence[SimplifiedProduct]) -> None:
    if cfg.taxa_cambio <= ZERO:
        raise CalculoInvalido("taxa de câmbio deve ser maior que zero", "taxa_cambio")
    require_percent(cfg.aliquota_ii_pct, "aliquota_ii_pct")
    require_percent(cfg.aliquota_icms_pct, "aliquota_icms_pct")
    if cfg.aliquota_icms_pct >= HUNDRED:
        raise CalculoInvalido("alíquota de ICMS deve ser menor que 100%", "aliquota_icms_pct")
    require_non_negative(cfg.frete_total, "frete_total")
    require_non_negative(cfg.outras_despesas_brl, "outras_despesas_brl")
    if cfg.moeda_frete.upper() not in ("USD", "BRL"):
        raise CalculoInvalido("moeda do frete deve ser USD ou BRL", "moeda_frete")
    if not produtos:
        raise CalculoInvalido("informe ao menos um produto", "produtos")
    for i, p in enumerate(produtos):
        if not p.nome:
            raise CalculoInvalido(f"produto #{i + 1} sem nome", "nome")
        if p.quantidade < 1:
            raise CalculoInvalido(f"quantidade do produto {p.nome!r} deve ser >= 1", "quantidade")
        require_non_negative(p.valor_unitario_usd, "valor_unitario_usd")
        require_non_negative(p.peso_unitario_kg, "peso_unitario_kg")


def calculate_simplified(config: SimplifiedConfig, produtos: Sequence[SimplifiedProduct]) -> SimplifiedResult:
    _validate(config, produtos)
    cambio = config.taxa_cambio

    if config.moeda_frete.upper() == "USD":
        frete_usd = config.frete_total
        frete_brl_total = money(config.frete_total * cambio)
    else:
        frete_brl_total = money(config.frete_total)
        frete_usd = safe_div(config.frete_total, cambio)

    base = []
    for p in produtos:
        fob_usd = money(p.valor_unitario_usd * p.quantidade)
        base.append({
            "nome": p.nome,
            "quantidade": p.quantidade,
            "peso_total": p.peso_unitario_kg * p.quantidade,
            "valor_fob": fob_usd,
            "valor_fob_usd": fob_usd,
            "custo_produto_brl": money(fob_usd * cambio),
        })

    fretes = allocate(frete_brl_total, weights_for(config.metodo_rateio_frete, base))
    despesas = allocate(config.outras_despesas_brl, weights_for(config.metodo_rateio_despesas, base))

    aliq_ii = rate(config.aliquota_ii_pct)
    aliq_icms = rate(config.aliquota_icms_pct)

    linhas = []
    for item, frete, desp in zip(base, fretes, despesas):
        produto = item["custo_produto_brl"]
        ii = money((produto + frete) * aliq_ii)
        base_icms = (produto + frete + ii) / (1 - aliq_icms)
        icms = money(base_icms * aliq_icms)
        total = produto + frete + ii + icms + desp
        q = item["quantidade"]
        linhas.append({
            "nome": item["nome"],
            "quantidade": q,
            "peso_total_kg": str(item["peso_total"]),
            "valor_fob_usd": str(item["valor_fob_usd"]),
            "custo_produto_brl": str(produto),
            "frete_brl": str(frete),
            "base_ii": str(produto + frete),
            "ii": str(ii),
            "base_icms": str(money(base_icms)),
            "icms": str(icms),
            "despesas_brl": str(desp),
            "custo_total": str(total),
            "custo_unitario": str(money(total / q)),
            "custo_unitario_sem_impostos": str(money((produto + frete + desp) / q)),
        })

    totais = {c: str(sum((D(l[c]) for l in linhas), ZERO)) for c in COLUNAS}
    peso_total = sum((D(l["peso_total_kg"]) for l in linhas), ZERO)
    custo_total = D(totais["custo_total"])
    totais.update({
        "quantidade": sum(l["quantidade"] for l in linhas),
        "peso_total_kg": str(peso_total),
        "frete_usd": str(money(frete_usd)),
        "preco_por_kg_usd": str(money(safe_div(frete_usd, peso_total))),
        "multiplicador_importacao": str(safe_div(custo_total, D(totais["custo_produto_brl"])).quantize(Decimal("0.0001"))),
    })
    return SimplifiedResult(produtos=linhas, totais=totais)
