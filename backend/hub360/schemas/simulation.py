from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

METODO = "^(peso|valor_fob|quantidade|cbm|personalizado)$"


class SimplifiedConfigIn(BaseModel):
    taxa_cambio: Decimal = Field(default=Decimal("5.20"), gt=0)
    aliquota_ii_pct: Decimal = Field(default=Decimal("60"), ge=0, le=100)
    aliquota_icms_pct: Decimal = Field(default=Decimal("17"), ge=0, lt=100)
    frete_total: Decimal = Field(default=Decimal("0"), ge=0)
    moeda_frete: str = Field(default="USD", pattern="^(USD|BRL)$")
    outras_despesas_brl: Decimal = Field(default=Decimal("0"), ge=0)
    metodo_rateio_frete: str = Field(default="peso", pattern=METODO)
    metodo_rateio_despesas: str = Field(default="quantidade", pattern=METODO)


class SimplifiedProductIn(BaseModel):
    nome: str = Field(min_length=1, max_length=200)
    quantidade: int = Field(ge=1)
    valor_unitario_usd: Decimal = Field(ge=0)
    peso_unitario_kg: Decimal = Field(default=Decimal("0"), ge=0)


class ImpostoIn(BaseModel):
    tipo: str = Field(pattern="^(ii|ipi|pis|cofins|icms|outro)$")
    nome: str = ""
    aliquota_pct: Decimal = Field(ge=0, le=100)


class DespesaIn(BaseModel):
    descricao: str = Field(min_length=1, max_length=200)
    valor: Decimal = Field(ge=0)
    moeda: str = Field(default="BRL", pattern="^(USD|BRL)$")
    metodo_rateio: str | None = Field(default=None, pattern=METODO)


class FormalConfigIn(BaseModel):
    taxa_dolar: Decimal = Field(default=Decimal("5.50"), gt=0)
    frete_usd: Decimal = Field(default=Decimal("0"), ge=0)
    seguro_pct: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    metodo_rateio: str = Field(default="cbm", pattern=METODO)
    impostos: list[ImpostoIn] = Field(default_factory=list)
    despesas: list[DespesaIn] = Field(default_factory=list)


class FormalProductIn(BaseModel):
    nome: str = Field(min_length=1, max_length=200)
    ncm: str = Field(default="", max_length=10)
    quantidade: int = Field(ge=1)
    valor_unitario_usd: Decimal = Field(ge=0)
    peso_unitario_kg: Decimal = Field(default=Decimal("0"), ge=0)
    comprimento_cm: Decimal = Field(default=Decimal("0"), ge=0)
    largura_cm: Decimal = Field(default=Decimal("0"), ge=0)
    altura_cm: Decimal = Field(default=Decimal("0"), ge=0)
    percentual_rateio: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    aliquota_ii_pct: Decimal | None = Field(default=None, ge=0, le=100)
    aliquota_ipi_pct: Decimal | None = Field(default=None, ge=0, le=100)


class SimplifiedCalculateIn(BaseModel):
    config: SimplifiedConfigIn = Field(default_factory=SimplifiedConfigIn)
    produtos: list[SimplifiedProductIn] = Field(min_length=1)


class FormalCalculateIn(BaseModel):
    config: FormalConfigIn = Field(default_factory=FormalConfigIn)
    produtos: list[FormalProductIn] = Field(min_length=1)


class ImportResultOut(BaseModel):
    produtos: list[dict]
    totais: dict


class SimulationCreate(BaseModel):
    kind: str = Field(pattern="^(simplificada|formal)$")
    name: str = Field(min_length=1, max_length=200)
    supplier_name: str = Field(default="", max_length=200)
    status: str = Field(default="Em andamento", pattern="^(Em andamento|Concluído|Pausado)$")
    observacoes: str = Field(default="", max_length=2000)
    config: dict = Field(default_factory=dict)
    produtos: list[dict] = Field(default_factory=list)


class SimulationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    supplier_name: str | None = Field(default=None, max_length=200)
    status: str | None = Field(default=None, pattern="^(Em andamento|Concluído|Pausado)$")
    observacoes: str | None = Field(default=None, max_length=2000)
    config: dict | None = None
    produtos: list[dict] | None = None


class SimulationOut(BaseModel):
    id: int
    kind: str
    code: str
    name: str
    supplier_name: str
    status: str
    observacoes: str
    config: dict
    produtos: list[dict] = Field(validation_alias="products")
    result: dict | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class SimulationBrief(BaseModel):
    id: int
    kind: str
    code: str
    name: str
    status: str
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
