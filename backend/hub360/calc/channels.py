"""
Motor de precificação por canal de venda.

Custos percentuais incidem sobre o preço de venda; custos unitários são
valores fixos por unidade. Cada canal declara quais custos unitários
usa; os demais são ignorados (e reportados em `ignored_fields`).
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, Mapping

from hub360.calc.money import (
    CENT,
    ZERO,
    CalculoInvalido,
    D,
    money,
    pct,
    rate,
    require_non_negative,
    require_percent,
    safe_div,
)

# custos unitários (R$ por unidade)
_BASE = ("packaging", "other_value")
_DIRECT = _BASE + ("shipping",)
_FULFILLMENT = _BASE + ("inbound_freight", "prep_center", "fixed_fee")
_FULFILLMENT_SHIPPING = _FULFILLMENT + ("shipping",)

PERCENT_COSTS = {
    "tax": "tax_pct",
    "fixed_cost": "fixed_cost_pct",
    "marketing": "marketing_pct",
    "financial": "financial_pct",
    "installment": "installment_pct",
    "other": "other_pct",
}


@dataclass(frozen=True)
class ChannelSpec:
    key: str
    label: str
    default_commission_pct: Decimal
    unit_fields: tuple[str, ...]
    special_cost: bool = False
    flex_revenue: bool = False

    def accepted_fields(self) -> list[str]:
        out = ["price", "product_cost", *self.unit_fields]
        if self.special_cost:
            out.append("special_cost")
        if self.flex_revenue:
            out.append("flex_revenue")
        out += [
            "commission_pct",
            "commission_up_to_value",
            "commission_up_to_pct",
            "commission_above_pct",
            "commission_min",
            "commission_max",
            *PERCENT_COSTS.values(),
            "rebate_pct",
            "rebate_value",
        ]
        return out


CHANNELS: dict[str, ChannelSpec] = {
    s.key: s
    for s in (
        ChannelSpec("site", "Site Próprio", Decimal("0"), _BASE),
        ChannelSpec("amazon_fbm", "Amazon FBM", Decimal("15"), _DIRECT),
        ChannelSpec("amazon_fba_onsite", "Amazon FBA On-Site", Decimal("15"), _FULFILLMENT),
        ChannelSpec("amazon_dba", "Amazon DBA", Decimal("15"), _FULFILLMENT_SHIPPING),
        ChannelSpec("amazon_fba", "Amazon FBA", Decimal("15"), _FULFILLMENT, special_cost=True),
        ChannelSpec("ml_me1", "Mercado Livre ME1", Decimal("18"), _DIRECT),
        ChannelSpec("ml_flex", "Mercado Livre Flex", Decimal("18"), _FULFILLMENT_SHIPPING, flex_revenue=True),
        ChannelSpec("ml_envios", "Mercado Livre Envios", Decimal("18"), _FULFILLMENT),
        ChannelSpec("ml_full", "Mercado Livre Full", Decimal("18"), _FULFILLMENT, special_cost=True),
        ChannelSpec("shopee", "Shopee", Decimal("0"), _DIRECT),
    )
}

UNIT_FIELDS = ("packaging", "shipping", "inbound_freight", "prep_center", "fixed_fee", "other_value")


def get_channel(key: str) -> ChannelSpec:
    spec = CHANNELS.get((key or "").strip().lower())
    if spec is None:
        raise CalculoInvalido(f"canal desconhecido: {key!r}", "channel")
    return spec


@dataclass(frozen=True)
class ChannelInput:
    price: Decimal = ZERO
    product_cost: Decimal = ZERO

    packaging: Decimal = ZERO
    shipping: Decimal = ZERO
    inbound_freight: Decimal = ZERO
    prep_center: Decimal = ZERO
    fixed_fee: Decimal = ZERO
    other_value: Decimal = ZERO
    special_cost: Decimal = ZERO
    flex_revenue: Decimal = ZERO

    # None => comissão padrão do canal
    commission_pct: Decimal | None = None
    commission_up_to_value: Decimal = ZERO
    commission_up_to_pct: Decimal = ZERO
    commission_above_pct: Decimal = ZERO
    commission_min: Decimal = ZERO
    commission_max: Decimal = ZERO

    tax_pct: Decimal = ZERO
    fixed_cost_pct: Decimal = ZERO
    marketing_pct: Decimal = ZERO
    financial_pct: Decimal = ZERO
    installment_pct: Decimal = ZERO
    other_pct: Decimal = ZERO

    rebate_pct: Decimal = ZERO
    rebate_value: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data: Mapping | None) -> "ChannelInput":
        known = {f.name for f in fields(cls)}
        values = {}
        for k, v in (data or {}).items():
            if k not in known:
                raise CalculoInvalido(f"campo desconhecido: {k!r}", k)
            if v is None:
                continue
            values[k] = D(v, k)
        return cls(**values)

    def merged(self, data: Mapping | None) -> "ChannelInput":
        """Sobrescreve com os campos não-nulos de `data`."""
        if not data:
            return self
        other = ChannelInput.from_mapping(data)
        changes = {k: getattr(other, k) for k, v in data.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {f.name: (None if getattr(self, f.name) is None else str(getattr(self, f.name))) for f in fields(self)}


@dataclass
class ChannelResult:
    channel: str
    label: str
    price: Decimal
    income: Decimal
    unit_costs: Decimal
    percent_costs: Decimal
    total_costs: Decimal
    profit: Decimal
    margin_pct: Decimal
    roi_pct: Decimal
    markup: Decimal
    status: str
    commission_pct_effective: Decimal
    breakdown: dict[str, Decimal] = field(default_factory=dict)
    ignored_fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if isinstance(v, Decimal):
                v = str(v)
            elif isinstance(v, dict):
                v = {k: str(x) for k, x in v.items()}
            elif isinstance(v, list):
                v = list(v)
            out[f.name] = v
        return out


def profitability_status(margin_pct) -> str:
    m = D(margin_pct)
    if m >= 30:
        return "Excelente"
    if m >= 15:
        return "Boa"
    if m >= 0:
        return "Baixa"
    return "Prejuízo"


def _validate(inp: ChannelInput) -> None:
    require_non_negative(inp.price, "price")
    require_non_negative(inp.product_cost, "product_cost")
    for name in UNIT_FIELDS + ("special_cost", "flex_revenue", "rebate_value"):
        require_non_negative(getattr(inp, name), name)
    for name in ("commission_up_to_value", "commission_min", "commission_max"):
        require_non_negative(getattr(inp, name), name)
    if inp.commission_pct is not None:
        require_percent(inp.commission_pct, "commission_pct")
    for name in ("commission_up_to_pct", "commission_above_pct", "rebate_pct", *PERCENT_COSTS.values()):
        require_percent(getattr(inp, name), name)
    if inp.commission_min > ZERO and inp.commission_max > ZERO and inp.commission_min > inp.commission_max:
        raise CalculoInvalido("commission_min maior que commission_max", "commission_min")


def _ignored(spec: ChannelSpec, inp: ChannelInput) -> list[str]:
    out = [n for n in UNIT_FIELDS if n not in spec.unit_fields and getattr(inp, n) != ZERO]
    if not spec.special_cost and inp.special_cost != ZERO:
        out.append("special_cost")
    if not spec.flex_revenue and inp.flex_revenue != ZERO:
        out.append("flex_revenue")
    return out


def _is_linear(inp: ChannelInput) -> bool:
    tiered = inp.commission_up_to_value > ZERO and inp.commission_up_to_pct > ZERO
    return not tiered and inp.commission_min == ZERO and inp.commission_max == ZERO


def commission_value(spec: ChannelSpec, inp: ChannelInput, price: Decimal) -> Decimal:
    if inp.commission_up_to_value > ZERO and inp.commission_up_to_pct > ZERO:
        faixa = min(price, inp.commission_up_to_value)
        acima = max(ZERO, price - inp.commission_up_to_value)
        value = faixa * rate(inp.commission_up_to_pct) + acima * rate(inp.commission_above_pct)
    else:
        p = inp.commission_pct if inp.commission_pct is not None else spec.default_commission_pct
        value = price * rate(p)

    if inp.commission_min > ZERO and value < inp.commission_min:
        value = inp.commission_min
    if inp.commission_max > ZERO and value > inp.commission_max:
        value = inp.commission_max
    return value


def _base_cost(spec: ChannelSpec, inp: ChannelInput) -> Decimal:
    if spec.special_cost and inp.special_cost > ZERO:
        return inp.special_cost
    return inp.product_cost


def _lines(spec: ChannelSpec, inp: ChannelInput, price: Decimal) -> tuple[dict[str, Decimal], dict[str, Decimal], Decimal]:
    """(custos unitários, custos percentuais, receitas extras) sem arredondar."""
    unit = {"product_cost": _base_cost(spec, inp)}
    for name in spec.unit_fields:
        unit[name] = getattr(inp, name)

    percent = {"commission": commission_value(spec, inp, price)}
    for line, attr in PERCENT_COSTS.items():
        percent[line] = price * rate(getattr(inp, attr))

    extra = price * rate(inp.rebate_pct) + inp.rebate_value
    if spec.flex_revenue:
        extra += inp.flex_revenue
    return unit, percent, extra


def _margin_raw(spec: ChannelSpec, inp: ChannelInput, price: Decimal) -> Decimal:
    unit, percent, extra = _lines(spec, inp, price)
    profit = price + extra - sum(unit.values(), ZERO) - sum(percent.values(), ZERO)
    return safe_div(profit, price) * 100


def calculate_channel(channel: str, inp: ChannelInput) -> ChannelResult:
    spec = get_channel(channel)
    _validate(inp)

    price = money(inp.price)
    unit, percent, extra = _lines(spec, inp, price)

    # arredonda linha a linha: o total é a soma das linhas exibidas
    breakdown = {k: money(v) for k, v in {**unit, **percent}.items()}
    unit_costs = sum((breakdown[k] for k in unit), ZERO)
    percent_costs = sum((breakdown[k] for k in percent), ZERO)
    total_costs = unit_costs + percent_costs

    income = price + money(extra)
    profit = income - total_costs
    margin = pct(safe_div(profit, price) * 100)
    base_cost = money(_base_cost(spec, inp))

    return ChannelResult(
        channel=spec.key,
        label=spec.label,
        price=price,
        income=income,
        unit_costs=unit_costs,
        percent_costs=percent_costs,
        total_costs=total_costs,
        profit=profit,
        margin_pct=margin,
        roi_pct=pct(safe_div(profit, total_costs) * 100),
        markup=pct(safe_div(price, base_cost)),
        status=profitability_status(margin),
        commission_pct_effective=pct(safe_div(breakdown["commission"], price) * 100),
        breakdown=breakdown,
        ignored_fields=_ignored(spec, inp),
    )


def target_price(channel: str, inp: ChannelInput, target_margin_pct) -> Decimal:
    """Preço de venda que resulta na margem alvo (% sobre o preço)."""
    spec = get_channel(channel)
    _validate(inp)
    target = D(target_margin_pct, "target_margin_pct")
    if target >= 100:
        raise CalculoInvalido("margem alvo deve ser menor que 100%", "target_margin_pct")

    if _is_linear(inp):
        unit, _, _ = _lines(spec, inp, ZERO)
        fixed = sum(unit.values(), ZERO) - inp.rebate_value
        if spec.flex_revenue:
            fixed -= inp.flex_revenue

        commission = inp.commission_pct if inp.commission_pct is not None else spec.default_commission_pct
        pct_sum = rate(commission) + sum((rate(getattr(inp, a)) for a in PERCENT_COSTS.values()), ZERO)
        denom = 1 - pct_sum + rate(inp.rebate_pct) - rate(target)
        if denom <= ZERO:
            raise CalculoInvalido(
                "margem inatingível: custos percentuais + margem alvo >= 100% do preço",
                "target_margin_pct",
            )
        price = fixed / denom
        return _settle(spec, inp, price, target) if price > ZERO else ZERO

    return _bisect_price(spec, inp, target)


def _bisect_price(spec: ChannelSpec, inp: ChannelInput, target: Decimal) -> Decimal:
    lo = Decimal("0.01")
    hi = max(sum(_lines(spec, inp, ZERO)[0].values(), ZERO) * 2, Decimal("1"))
    limit = Decimal("1000000000")
    while _margin_raw(spec, inp, hi) < target:
        hi *= 2
        if hi > limit:
            raise CalculoInvalido("margem inatingível para este canal", "target_margin_pct")
    if _margin_raw(spec, inp, lo) >= target:
        return lo

    for _ in range(200):
        mid = (lo + hi) / 2
        if _margin_raw(spec, inp, mid) < target:
            lo = mid
        else:
            hi = mid
        if hi - lo < Decimal("0.001"):
            break
    return _settle(spec, inp, lo, target)


def _settle(spec: ChannelSpec, inp: ChannelInput, raw_price: Decimal, target: Decimal) -> Decimal:
    """Menor preço em centavos cujo resultado (linhas já arredondadas) atinge a margem alvo."""
    price = max(raw_price.quantize(CENT, rounding=ROUND_DOWN), CENT)
    for _ in range(10_000):
        r = calculate_channel(spec.key, replace(inp, price=price))
        if safe_div(r.profit, r.price) * 100 >= target:
            return price
        price += CENT
    raise CalculoInvalido("margem inatingível para este canal", "target_margin_pct")


def break_even_price(channel: str, inp: ChannelInput) -> Decimal:
    return target_price(channel, inp, ZERO)


def calculate_all(
    base: ChannelInput,
    overrides_by_channel: Mapping[str, Mapping] | None,
    channels: Iterable[str],
) -> list[ChannelResult]:
    """Mesmo produto em vários canais; resultados na ordem pedida."""
    overrides_by_channel = overrides_by_channel or {}
    return [calculate_channel(ch, base.merged(overrides_by_channel.get(ch))) for ch in channels]


def best_channel(results: Iterable[ChannelResult]) -> str | None:
    best = None
    for r in results:
        if best is None or r.profit > best.profit:
            best = r
    return best.channel if best else None


def channel_catalog() -> list[dict]:
    return [
        {
            "key": s.key,
            "label": s.label,
            "default_commission_pct": str(s.default_commission_pct),
            "fields": s.accepted_fields(),
        }
        for s in CHANNELS.values()
    ]
