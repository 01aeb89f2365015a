from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from hub360.schemas.pricing import ChannelFields, ChannelResultOut


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = Field(default="", max_length=500)


class DepartmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=500)


class DepartmentOut(BaseModel):
    id: int
    name: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class ProductBase(BaseModel):
    ean: str = Field(default="", max_length=14, pattern=r"^\d*$")
    brand: str = Field(default="", max_length=120)
    ncm: str = Field(default="", max_length=10)
    features: str = Field(default="", max_length=2000)
    department_id: int | None = None
    supplier_id: int | None = None
    weight_kg: Decimal = Field(default=Decimal("0"), ge=0)
    length_cm: Decimal = Field(default=Decimal("0"), ge=0)
    width_cm: Decimal = Field(default=Decimal("0"), ge=0)
    height_cm: Decimal = Field(default=Decimal("0"), ge=0)
    cost_item: Decimal = Field(default=Decimal("0"), ge=0)
    pack_cost: Decimal = Field(default=Decimal("0"), ge=0)
    tax_pct: Decimal | None = Field(default=None, ge=0, le=100)
    active: bool = True


class ProductCreate(ProductBase):
    name: str = Field(min_length=1, max_length=255)
    sku: str = Field(min_length=1, max_length=60)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    sku: str | None = Field(default=None, min_length=1, max_length=60)
    ean: str | None = Field(default=None, max_length=14, pattern=r"^\d*$")
    brand: str | None = Field(default=None, max_length=120)
    ncm: str | None = Field(default=None, max_length=10)
    features: str | None = Field(default=None, max_length=2000)
    department_id: int | None = None
    supplier_id: int | None = None
    weight_kg: Decimal | None = Field(default=None, ge=0)
    length_cm: Decimal | None = Field(default=None, ge=0)
    width_cm: Decimal | None = Field(default=None, ge=0)
    height_cm: Decimal | None = Field(default=None, ge=0)
    cost_item: Decimal | None = Field(default=None, ge=0)
    pack_cost: Decimal | None = Field(default=None, ge=0)
    tax_pct: Decimal | None = Field(default=None, ge=0, le=100)
    active: bool | None = None


class ProductOut(BaseModel):
    id: int
    name: str
    sku: str
    ean: str
    brand: str
    ncm: str
    features: str
    department_id: int | None = None
    supplier_id: int | None = None
    weight_kg: Decimal
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    cost_item: Decimal
    pack_cost: Decimal
    tax_pct: Decimal | None = None
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductChannelUpsert(BaseModel):
    active: bool = True
    config: ChannelFields = Field(default_factory=ChannelFields)


class ProductChannelOut(BaseModel):
    id: int
    product_id: int
    channel: str
    active: bool
    config: dict
    last_calculation: dict | None = None
    calculated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductPricingIn(BaseModel):
    # None => todos os canais ativos do produto
    channels: list[str] | None = None
    overrides: dict[str, ChannelFields] = Field(default_factory=dict)


class ProductPricingOut(BaseModel):
    product_id: int
    results: list[ChannelResultOut]
    best_channel: str | None = None
