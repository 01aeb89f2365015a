"""
Precificação a partir do cadastro: produto + configurações do tenant +
tabelas de comissão/frete + config salva do canal => ChannelInput.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Mapping

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from hub360.calc.channels import ChannelInput, ChannelResult, calculate_channel, get_channel
from hub360.calc.money import CalculoInvalido, D
from hub360.models.pricing import CategoryCommission, FreightRate, PricingSettings
from hub360.models.product import Product, ProductChannel

logger = logging.getLogger(__name__)

# tabela de frete Amazon => campo do motor
FREIGHT_FIELD = {
    "amazon_fba": "fixed_fee",  # taxa de logística FBA
    "amazon_dba": "shipping",   # envio DBA
}


def get_pricing_settings(db: Session, tenant_id: int) -> PricingSettings:
    row = db.scalar(select(PricingSettings).where(PricingSettings.tenant_id == tenant_id))
    if row is None:
        # default transiente (não persiste até o PUT /pricing/settings)
        row = PricingSettings(
            tenant_id=tenant_id,
            tax_pct=Decimal("0"),
            state="SP",
            target_margin_pct=Decimal("20"),
        )
    return row


def resolve_commission(db: Session, tenant_id: int, product: Product, channel: str, price: Decimal) -> Decimal | None:
    if product.department_id is None:
        return None
    row = db.scalar(
        select(CategoryCommission)
        .where(
            CategoryCommission.tenant_id == tenant_id,
            CategoryCommission.department_id == product.department_id,
            CategoryCommission.channel == channel,
            CategoryCommission.price_from <= price,
            or_(CategoryCommission.price_to.is_(None), CategoryCommission.price_to >= price),
        )
        .order_by(CategoryCommission.price_from.desc())
        .limit(1)
    )
    return D(row.commission_pct) if row else None


def resolve_freight(db: Session, tenant_id: int, channel: str, state: str, weight_kg: Decimal) -> Decimal | None:
    if channel not in FREIGHT_FIELD:
        return None
    row = db.scalar(
        select(FreightRate)
        .where(
            FreightRate.tenant_id == tenant_id,
            FreightRate.channel == channel,
            FreightRate.state == (state or "").upper(),
            FreightRate.weight_from_kg <= weight_kg,
            FreightRate.weight_to_kg >= weight_kg,
        )
        .order_by(FreightRate.weight_from_kg.asc())
        .limit(1)
    )
    return D(row.price) if row else None


def build_input(
    db: Session,
    tenant_id: int,
    product: Product,
    channel: str,
    config: Mapping | None,
    prefs: PricingSettings | None = None,
) -> ChannelInput:
    """Ordem de precedência: config do canal > tabelas > produto > settings do tenant."""
    get_channel(channel)
    config = {k: v for k, v in (config or {}).items() if v is not None}
    prefs = prefs or get_pricing_settings(db, tenant_id)

    if config.get("price") is None:
        raise CalculoInvalido(f"canal {channel}: informe o preço de venda (price)", "price")
    price = D(config["price"], "price")

    base = {
        "product_cost": D(product.cost_item),
        "packaging": D(product.pack_cost),
        "tax_pct": D(product.tax_pct) if product.tax_pct is not None else D(prefs.tax_pct),
    }

    commission = resolve_commission(db, tenant_id, product, channel, price)
    if commission is not None:
        base["commission_pct"] = commission

    freight = resolve_freight(db, tenant_id, channel, prefs.state, D(product.weight_kg))
    if freight is not None:
        base[FREIGHT_FIELD[channel]] = freight

    return ChannelInput.from_mapping(base).merged(config)


def _channel_row(db: Session, tenant_id: int, product_id: int, channel: str) -> ProductChannel | None:
    return db.scalar(
        select(ProductChannel).where(
            ProductChannel.tenant_id == tenant_id,
            ProductChannel.product_id == product_id,
            ProductChannel.channel == channel,
        )
    )


def list_channels(db: Session, tenant_id: int, product_id: int, *, only_active: bool = False) -> list[ProductChannel]:
    q = select(ProductChannel).where(
        ProductChannel.tenant_id == tenant_id,
        ProductChannel.product_id == product_id,
    )
    if only_active:
        q = q.where(ProductChannel.active.is_(True))
    return list(db.scalars(q.order_by(ProductChannel.channel)))


def calculate_product(
    db: Session,
    tenant_id: int,
    product: Product,
    channels: list[str] | None = None,
    overrides: Mapping[str, Mapping] | None = None,
) -> list[ChannelResult]:
    """Calcula os canais pedidos (ou todos os ativos), aplicando overrides por canal."""
    overrides = overrides or {}
    prefs = get_pricing_settings(db, tenant_id)

    if channels is None:
        rows = {r.channel: r for r in list_channels(db, tenant_id, product.id, only_active=True)}
        channels = list(rows)
    else:
        rows = {}
        for ch in channels:
            get_channel(ch)
            row = _channel_row(db, tenant_id, product.id, ch)
            if row is not None:
                rows[ch] = row

    results = []
    for ch in channels:
        cfg = dict(rows[ch].config or {}) if ch in rows else {}
        cfg.update({k: v for k, v in (overrides.get(ch) or {}).items() if v is not None})
        inp = build_input(db, tenant_id, product, ch, cfg, prefs)
        results.append(calculate_channel(ch, inp))
    return results


def save_channel(
    db: Session,
    tenant_id: int,
    product: Product,
    channel: str,
    *,
    active: bool,
    config: Mapping,
) -> ProductChannel:
    """Upsert da config do canal; recalcula e guarda last_calculation quando há preço."""
    spec = get_channel(channel)
    clean = {k: str(v) for k, v in config.items() if v is not None}

    row = _channel_row(db, tenant_id, product.id, spec.key)
    if row is None:
        row = ProductChannel(tenant_id=tenant_id, product_id=product.id, channel=spec.key)
        db.add(row)
    row.active = active
    row.config = clean

    if "price" in clean:
        result = calculate_channel(spec.key, build_input(db, tenant_id, product, spec.key, clean))
        row.last_calculation = result.to_dict()
        row.calculated_at = datetime.utcnow()
        logger.info(
            "pricing saved tenant=%s product=%s channel=%s margin=%s",
            tenant_id, product.id, spec.key, result.margin_pct,
        )
    else:
        row.last_calculation = None
        row.calculated_at = None
    return row


def deactivate_channel(db: Session, tenant_id: int, product_id: int, channel: str) -> ProductChannel | None:
    row = _channel_row(db, tenant_id, product_id, channel)
    if row is not None:
        row.active = False
    return row
