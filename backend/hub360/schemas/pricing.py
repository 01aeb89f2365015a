from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

_money = dict(default=None, ge=0)
_pct = dict(default=None, ge=0, le=100)


class ChannelFields(BaseModel):
    """Entradas do motor de precificação; None = usa o padrão (produto/canal)."""

    model_config = ConfigDict(extra="forbid")

    price: Decimal | None = Field(**_money)
    product_cost: Decimal | None = Field(**_money)
    packaging: Decimal | None = Field(**_money)
    shipping: Decimal | None = Field(**_money)
    inbound_freight: Decimal | None = Field(**_money)
    prep_center: Decimal | None = Field(**_money)
    fixed_fee: Decimal | None = Field(**_money)
    other_value: Decimal | None = Field(**_money)
    special_cost: Decimal | None = Field(**_money)
    flex_revenue: Decimal | None = Field(**_money)

    commission_pct: Decimal | None = Field(**_pct)
    commission_up_to_value: Decimal | None = Field(**_money)
    commission_up_to_pct: Decimal | None = Field(**_pct)
    commission_above_pct: Decimal | None = Field(**_pct)
    commission_min: Decimal | None = Field(**_money)
    commission_max: Decimal | None = Field(**_money)

    tax_pct: Decimal | None = Field(**_pct)
    fixed_cost_pct: Decimal | None = Field(**_pct)
    marketing_pct: Decimal | None = Field(**_pct)
    financial_pct: Decimal | None = Field(**_pct)
    installment_pct: Decimal | None = Field(**_pct)
    other_pct: Decimal | None = Field(**_pct)

    rebate_pct: Decimal | None = Field(**_pct)
    rebate_value: Decimal | None = Field(**_money)

    def engine_values(self) -> dict:
        return self.model_dump(exclude_none=True, exclude={"channel", "target_margin_pct"})


class CalculateIn(ChannelFields):
    channel: str
    price: Decimal = Field(ge=0)


class ChannelResultOut(BaseModel):
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
    breakdown: dict[str, Decimal]
    ignored_fields: list[str] = Field(default_factory=list)


class TargetPriceIn(ChannelFields):
    channel: str
    target_margin_pct: Decimal = Field(lt=100)


class TargetPriceOut(BaseModel):
    channel: str
    target_margin_pct: Decimal
    target_price: Decimal
    break_even_price: Decimal
    result: ChannelResultOut


class ChannelCatalogItem(BaseModel):
    key: str
    label: str
    default_commission_pct: Decimal
    fields: list[str]


class ParseBrlIn(BaseModel):
    value: str


class ParseBrlOut(BaseModel):
    value: Decimal
    formatted: str


class AdsMetricsIn(BaseModel):
    impressions: int = Field(ge=0)
    clicks: int = Field(ge=0)
    orders: int = Field(ge=0)
    spend: Decimal = Field(ge=0)
    revenue: Decimal = Field(ge=0)
    total_revenue: Decimal | None = Field(default=None, ge=0)


class AdsMetricsOut(BaseModel):
    ctr_pct: Decimal
    cvr_pct: Decimal
    cpc: Decimal
    cpa: Decimal
    roas: Decimal
    acos_pct: Decimal
    tacos_pct: Decimal | None = None


class PricingSettingsIn(BaseModel):
    tax_pct: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    state: str = Field(default="SP", min_length=2, max_length=2)
    target_margin_pct: Decimal = Field(default=Decimal("20"), ge=0, lt=100)


class PricingSettingsOut(BaseModel):
    tax_pct: Decimal
    state: str
    target_margin_pct: Decimal

    model_config = ConfigDict(from_attributes=True)


class CommissionCreate(BaseModel):
    department_id: int
    channel: str
    price_from: Decimal = Field(default=Decimal("0"), ge=0)
    price_to: Decimal | None = Field(default=None, ge=0)
    commission_pct: Decimal = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _range(self):
        if self.price_to is not None and self.price_to <= self.price_from:
            raise ValueError("price_to deve ser maior que price_from")
        return self


class CommissionOut(BaseModel):
    id: int
    department_id: int
    channel: str
    price_from: Decimal
    price_to: Decimal | None = None
    commission_pct: Decimal

    model_config = ConfigDict(from_attributes=True)


class FreightRateCreate(BaseModel):
    channel: str = Field(pattern="^(amazon_fba|amazon_dba)$")
    state: str = Field(min_length=2, max_length=2)
    weight_from_kg: Decimal = Field(ge=0)
    weight_to_kg: Decimal = Field(gt=0)
    price: Decimal = Field(ge=0)

    @model_validator(mode="after")
    def _range(self):
        if self.weight_to_kg <= self.weight_from_kg:
            raise ValueError("weight_to_kg deve ser maior que weight_from_kg")
        self.state = self.state.upper()
        return self


class FreightRateOut(BaseModel):
    id: int
    channel: str
    state: str
    weight_from_kg: Decimal
    weight_to_kg: Decimal
    price: Decimal

    model_config = ConfigDict(from_attributes=True)
