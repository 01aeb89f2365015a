from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from hub360.api.department import get_department_or_404
from hub360.calc import ads
from hub360.calc.channels import (
    ChannelInput,
    break_even_price,
    calculate_channel,
    channel_catalog,
    get_channel,
    target_price,
)
from hub360.calc.money import format_brl, parse_brl
from hub360.core.errors import commit_or_raise, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.pricing import CategoryCommission, FreightRate, PricingSettings
from hub360.schemas.pricing import (
    AdsMetricsIn,
    AdsMetricsOut,
    CalculateIn,
    ChannelCatalogItem,
    ChannelResultOut,
    CommissionCreate,
    CommissionOut,
    FreightRateCreate,
    FreightRateOut,
    ParseBrlIn,
    ParseBrlOut,
    PricingSettingsIn,
    PricingSettingsOut,
    TargetPriceIn,
    TargetPriceOut,
)
from hub360.services.pricing import get_pricing_settings

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get("/channels", response_model=list[ChannelCatalogItem])
def list_channels():
    return channel_catalog()


@router.post("/calculate", response_model=ChannelResultOut)
def calculate(payload: CalculateIn):
    inp = ChannelInput.from_mapping(payload.engine_values())
    return calculate_channel(payload.channel, inp).to_dict()


@router.post("/target-price", response_model=TargetPriceOut)
def calculate_target_price(payload: TargetPriceIn):
    values = payload.engine_values()
    values.pop("price", None)
    inp = ChannelInput.from_mapping(values)

    price = target_price(payload.channel, inp, payload.target_margin_pct)
    result = calculate_channel(payload.channel, ChannelInput.from_mapping({**values, "price": price}))
    return TargetPriceOut(
        channel=result.channel,
        target_margin_pct=payload.target_margin_pct,
        target_price=price,
        break_even_price=break_even_price(payload.channel, inp),
        result=result.to_dict(),
    )


@router.post("/parse-brl", response_model=ParseBrlOut)
def parse_brl_value(payload: ParseBrlIn):
    value = parse_brl(payload.value)
    return ParseBrlOut(value=value, formatted=format_brl(value))


@router.post("/ads-metrics", response_model=AdsMetricsOut)
def ads_metrics(payload: AdsMetricsIn):
    out = ads.ads_metrics(payload.impressions, payload.clicks, payload.orders, payload.spend, payload.revenue)
    if payload.total_revenue is not None:
        out["tacos_pct"] = ads.tacos(payload.spend, payload.total_revenue)
    return out


# --- configurações do tenant ------------------------------------------------

@router.get("/settings", response_model=PricingSettingsOut)
def read_settings(db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return get_pricing_settings(db, tenant_id)


@router.put("/settings", response_model=PricingSettingsOut)
def write_settings(payload: PricingSettingsIn, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    row = db.scalar(select(PricingSettings).where(PricingSettings.tenant_id == tenant_id))
    if row is None:
        row = PricingSettings(tenant_id=tenant_id)
        db.add(row)
    row.tax_pct = payload.tax_pct
    row.state = payload.state.upper()
    row.target_margin_pct = payload.target_margin_pct
    commit_or_raise(db, duplicate_message="Configuração já existe", what="pricing_settings")
    db.refresh(row)
    return row


# --- tabela de comissões por departamento -----------------------------------

@router.get("/commissions", response_model=list[CommissionOut])
def list_commissions(
    department_id: int | None = Query(None),
    channel: str | None = Query(None),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(CategoryCommission).where(CategoryCommission.tenant_id == tenant_id)
    if department_id is not None:
        stmt = stmt.where(CategoryCommission.department_id == department_id)
    if channel:
        stmt = stmt.where(CategoryCommission.channel == channel)
    return list(db.scalars(stmt.order_by(
        CategoryCommission.department_id, CategoryCommission.channel, CategoryCommission.price_from,
    )))


@router.post("/commissions", response_model=CommissionOut, status_code=201)
def create_commission(payload: CommissionCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    get_department_or_404(db, tenant_id, payload.department_id)
    spec = get_channel(payload.channel)
    row = CategoryCommission(tenant_id=tenant_id, **{**payload.model_dump(), "channel": spec.key})
    db.add(row)
    commit_or_raise(db, duplicate_message="Faixa de comissão já cadastrada", what="commission")
    db.refresh(row)
    return row


@router.delete("/commissions/{commission_id}", status_code=204)
def delete_commission(commission_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    row = db.scalar(select(CategoryCommission).where(
        CategoryCommission.id == commission_id, CategoryCommission.tenant_id == tenant_id,
    ))
    if not row:
        raise not_found("commission", commission_id)
    db.delete(row)
    commit_or_raise(db, duplicate_message="Comissão em uso", what="commission")
    return Response(status_code=204)


# --- tabela de frete Amazon -------------------------------------------------

@router.get("/freight-rates", response_model=list[FreightRateOut])
def list_freight_rates(
    channel: str | None = Query(None),
    state: str | None = Query(None, min_length=2, max_length=2),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(FreightRate).where(FreightRate.tenant_id == tenant_id)
    if channel:
        stmt = stmt.where(FreightRate.channel == channel)
    if state:
        stmt = stmt.where(FreightRate.state == state.upper())
    return list(db.scalars(stmt.order_by(FreightRate.channel, FreightRate.state, FreightRate.weight_from_kg)))


@router.post("/freight-rates", response_model=FreightRateOut, status_code=201)
def create_freight_rate(payload: FreightRateCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    row = FreightRate(tenant_id=tenant_id, **payload.model_dump())
    db.add(row)
    commit_or_raise(db, duplicate_message="Faixa de frete já cadastrada", what="freight_rate")
    db.refresh(row)
    return row


@router.delete("/freight-rates/{rate_id}", status_code=204)
def delete_freight_rate(rate_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    row = db.scalar(select(FreightRate).where(FreightRate.id == rate_id, FreightRate.tenant_id == tenant_id))
    if not row:
        raise not_found("freight_rate", rate_id)
    db.delete(row)
    commit_or_raise(db, duplicate_message="Frete em uso", what="freight_rate")
    return Response(status_code=204)
