"""
Importação formal (DI): valor aduaneiro = FOB + frete + seguro; II, PIS e
COFINS sobre o valor aduaneiro, IPI sobre VA + II e ICMS "por dentro"
sobre tudo. Frete e despesas são rateados pelo método escolhido (CBM por
padrão); o seguro segue o valor FOB.
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

TIPOS_IMPOSTO = ("ii", "ipi", "pis", "cofins", "icms", "outro")

COLUNAS = (
    "fob_usd",
    "fob_brl",
    "frete_brl",
    "seguro_brl",
    "valor_aduaneiro",
    "ii",
    "ipi",
    "pis",
    "cofins",
    "outros_impostos",
    "despesas_brl",
    "icms",
    "custo_total",
)

CBM_DIVISOR = Decimal("1000000")  # cm³ -> m³


@dataclass(frozen=True)
class Imposto:
    tipo: str
    aliquota_pct: Decimal
    nome: str = ""


@dataclass(frozen=True)
class Despesa:
    descricao: str
    valor: Decimal
    moeda: str = "BRL"
    metodo_rateio: str | None = None


@dataclass(frozen=True)
class FormalConfig:
    taxa_dolar: Decimal = Decimal("5.50")
    frete_usd: Decimal = ZERO
    seguro_pct: Decimal = ZERO
    metodo_rateio: str = "cbm"
    impostos: tuple[Imposto, ...] = ()
    despesas: tuple[Despesa, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping | None) -> "FormalConfig":
        data = dict(data or {})
        kw = {}
        for name in ("taxa_dolar", "frete_usd", "seguro_pct"):
            if data.get(name) is not None:
                kw[name] = D(data[name], name)
        if data.get("metodo_rateio"):
            kw["metodo_rateio"] = str(data["metodo_rateio"]).strip()
        kw["impostos"] = tuple(
            Imposto(
                tipo=str(i.get("tipo") or "").strip().lower(),
                aliquota_pct=D(i.get("aliquota_pct"), "aliquota_pct"),
                nome=str(i.get("nome") or ""),
            )
            for i in data.get("impostos") or ()
        )
        kw["despesas"] = tuple(
            Despesa(
                descricao=str(d.get("descricao") or ""),
                valor=D(d.get("valor"), "valor"),
                moeda=str(d.get("moeda") or "BRL").upper(),
                metodo_rateio=d.get("metodo_rateio") or None,
            )
            for d in data.get("despesas") or ()
        )
        return cls(**kw)

    def aliquota(self, tipo: str) -> Decimal:
        return sum((i.aliquota_pct for i in self.impostos if i.tipo == tipo), ZERO)


@dataclass(frozen=True)
class FormalProduct:
    nome: str
    quantidade: int
    valor_unitario_usd: Decimal
    ncm: str = ""
    peso_unitario_kg: Decimal = ZERO
    comprimento_cm: Decimal = ZERO
    largura_cm: Decimal = ZERO
    altura_cm: Decimal = ZERO
    percentual_rateio: Decimal = ZERO
    # alíquotas por NCM (sobrescrevem as da config)
    aliquota_ii_pct: Decimal | None = None
    aliquota_ipi_pct: Decimal | None = None

    @classmethod
    def from_mapping(cls, data: Mapping) -> "FormalProduct":
        def opt(name):
            v = data.get(name)
            return None if v is None else D(v, name)

        return cls(
            nome=str(data.get("nome") or "").strip(),
            quantidade=int(data.get("quantidade") or 0),
            valor_unitario_usd=D(data.get("valor_unitario_usd"), "valor_unitario_usd"),
            ncm=str(data.get("ncm") or ""),
            peso_unitario_kg=D(data.get("peso_unitario_kg"), "peso_unitario_kg"),
            comprimento_cm=D(data.get("comprimento_cm"), "comprimento_cm"),
            largura_cm=D(data.get("largura_cm"), "largura_cm"),
            altura_cm=D(data.get("altura_cm"), "altura_cm"),
            percentual_rateio=D(data.get("percentual_rateio"), "percentual_rateio"),
            aliquota_ii_pct=opt("aliquota_ii_pct"),
            aliquota_ipi_pct=opt("aliquota_ipi_pct"),
        )

    @property
    def cbm_unitario(self) -> Decimal:
        return self.comprimento_cm * self.largura_cm * self.altura_cm / CBM_DIVISOR


@dataclass
class FormalResult:
    produtos: list[dict] = field(default_factory=list)
    totais: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"produtos": self.produtos, "totais": self.totais}


def _validate(cfg: FormalConfig, produtos: Sequence[FormalProduct]) -> None:
    if cfg.taxa_dolar <= ZERO:
        raise CalculoInvalido("taxa do dólar deve ser maior que zero", "taxa_dolar")
    require_non_negative(cfg.frete_usd, "frete_usd")
    require_percent(cfg.seguro_pct, "seguro_pct")
    for imp in cfg.impostos:
        if imp.tipo not in TIPOS_IMPOSTO:
            raise CalculoInvalido(f"tipo de imposto inválido: {imp.tipo!r}", "impostos")
        require_percent(imp.aliquota_pct, "aliquota_pct")
    if cfg.aliquota("icms") >= HUNDRED:
        raise CalculoInvalido("alíquota de ICMS deve ser menor que 100%", "impostos")
    for d in cfg.despesas:
        require_non_negative(d.valor, "despesas")
        if d.moeda not in ("USD", "BRL"):
            raise CalculoInvalido("moeda da despesa deve ser USD ou BRL", "despesas")
    if not produtos:
        raise CalculoInvalido("informe ao menos um produto", "produtos")
    for i, p in enumerate(produtos):
        if not p.nome:
            raise CalculoInvalido(f"produto #{i + 1} sem nome", "nome")
        if p.quantidade < 1:
            raise CalculoInvalido(f"quantidade do produto {p.nome!r} deve ser >= 1", "quantidade")
        for name in ("valor_unitario_usd", "peso_unitario_kg", "comprimento_cm", "largura_cm", "altura_cm"):
            require_non_negative(getattr(p, name), name)
        if p.aliquota_ii_pct is not None:
            require_percent(p.aliquota_ii_pct, "aliquota_ii_pct")
        if p.aliquota_ipi_pct is not None:
            require_percent(p.aliquota_ipi_pct, "aliquota_ipi_pct")


def calculate_formal(config: FormalConfig, produtos: Sequence[FormalProduct]) -> FormalResult:
    _validate(config, produtos)
    taxa = config.taxa_dolar

    base = []
    for p in produtos:
        fob_usd = money(p.valor_unitario_usd * p.quantidade)
        base.append({
            "produto": p,
            "quantidade": p.quantidade,
            "peso_total": p.peso_unitario_kg * p.quantidade,
            "cbm_total": p.cbm_unitario * p.quantidade,
            "percentual_rateio": p.percentual_rateio,
            "fob_usd": fob_usd,
            "valor_fob": money(fob_usd * taxa),
        })

    fob_brl_total = sum((b["valor_fob"] for b in base), ZERO)
    fretes = allocate(money(config.frete_usd * taxa), weights_for(config.metodo_rateio, base))
    seguros = allocate(money(fob_brl_total * rate(config.seguro_pct)), weights_for("valor_fob", base))

    despesas = [ZERO] * len(base)
    for d in config.despesas:
        valor = money(d.valor * taxa) if d.moeda == "USD" else money(d.valor)
        partes = allocate(valor, weights_for(d.metodo_rateio or config.metodo_rateio, base))
        despesas = [a + b for a, b in zip(despesas, partes)]

    aliq_icms = rate(config.aliquota("icms"))
    aliq_outros = rate(config.aliquota("outro"))

    linhas = []
    for b, frete, seguro, desp in zip(base, fretes, seguros, despesas):
        p: FormalProduct = b["produto"]
        aliq_ii = rate(p.aliquota_ii_pct if p.aliquota_ii_pct is not None else config.aliquota("ii"))
        aliq_ipi = rate(p.aliquota_ipi_pct if p.aliquota_ipi_pct is not None else config.aliquota("ipi"))

        va = b["valor_fob"] + frete + seguro
        ii = money(va * aliq_ii)
        ipi = money((va + ii) * aliq_ipi)
        pis = money(va * rate(config.aliquota("pis")))
        cofins = money(va * rate(config.aliquota("cofins")))
        outros = money(va * aliq_outros)

        base_icms = (va + ii + ipi + pis + cofins + outros + desp) / (1 - aliq_icms)
        icms = money(base_icms * aliq_icms)
        total = va + ii + ipi + pis + cofins + outros + desp + icms

        linhas.append({
            "nome": p.nome,
            "ncm": p.ncm,
            "quantidade": p.quantidade,
            "peso_total_kg": str(b["peso_total"]),
            "cbm_unitario": str(p.cbm_unitario.quantize(Decimal("0.000001"))),
            "cbm_total": str(b["cbm_total"].quantize(Decimal("0.000001"))),
            "fob_usd": str(b["fob_usd"]),
            "fob_brl": str(b["valor_fob"]),
            "frete_brl": str(frete),
            "seguro_brl": str(seguro),
            "valor_aduaneiro": str(va),
            "ii": str(ii),
            "ipi": str(ipi),
            "pis": str(pis),
            "cofins": str(cofins),
            "outros_impostos": str(outros),
            "despesas_brl": str(desp),
            "base_icms": str(money(base_icms)),
            "icms": str(icms),
            "custo_total": str(total),
            "custo_unitario": str(money(total / p.quantidade)),
        })

    totais = {c: str(sum((D(l[c]) for l in linhas), ZERO)) for c in COLUNAS}
    custo_total = D(totais["custo_total"])
    impostos_total = sum((D(totais[c]) for c in ("ii", "ipi", "pis", "cofins", "outros_impostos", "icms")), ZERO)
    totais.update({
        "quantidade": sum(l["quantidade"] for l in linhas),
        "peso_total_kg": str(sum((b["peso_total"] for b in base), ZERO)),
        "cbm_total": str(sum((b["cbm_total"] for b in base), ZERO).quantize(Decimal("0.000001"))),
        "impostos_total": str(impostos_total),
        "multiplicador": str(safe_div(custo_total, fob_brl_total).quantize(Decimal("0.0001"))),
    })
    return FormalResult(produtos=linhas, totais=totais)
