import re
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def normalize_chave(v: str | None) -> str | None:
    """Chave de acesso da NF-e: 44 dígitos (espaços e pontuação são ignorados)."""
    if v is None or not v.strip():
        return None
    digits = re.sub(r"[\s.\-]", "", v)
    if len(digits) != 44 or not digits.isdigit():
        raise ValueError("chave de acesso deve ter 44 dígitos")
    return digits


class NotaFiscalCreate(BaseModel):
    empresa_id: int
    supplier_id: int | None = None
    numero: str = Field(min_length=1, max_length=20)
    serie: str = Field(default="1", min_length=1, max_length=10)
    chave_acesso: str | None = None
    tipo: str = Field(pattern="^(entrada|saida)$")
    data_emissao: date
    data_entrada: date | None = None
    valor_produtos_cents: int = Field(ge=0)
    valor_desconto_cents: int = Field(default=0, ge=0)
    valor_frete_cents: int = Field(default=0, ge=0)
    valor_seguro_cents: int = Field(default=0, ge=0)
    outras_despesas_cents: int = Field(default=0, ge=0)
    observacoes: str = Field(default="", max_length=5000)

    @field_validator("chave_acesso")
    @classmethod
    def _chave(cls, v: str | None) -> str | None:
        return normalize_chave(v)

    @model_validator(mode="after")
    def _datas(self):
        if self.data_entrada and self.data_entrada < self.data_emissao:
            raise ValueError("data_entrada não pode ser anterior a data_emissao")
        return self


class NotaFiscalUpdate(BaseModel):
    supplier_id: int | None = None
    numero: str | None = Field(default=None, min_length=1, max_length=20)
    serie: str | None = Field(default=None, min_length=1, max_length=10)
    chave_acesso: str | None = None
    data_emissao: date | None = None
    data_entrada: date | None = None
    valor_produtos_cents: int | None = Field(default=None, ge=0)
    valor_desconto_cents: int | None = Field(default=None, ge=0)
    valor_frete_cents: int | None = Field(default=None, ge=0)
    valor_seguro_cents: int | None = Field(default=None, ge=0)
    outras_despesas_cents: int | None = Field(default=None, ge=0)
    observacoes: str | None = Field(default=None, max_length=5000)

    @field_validator("chave_acesso")
    @classmethod
    def _chave(cls, v: str | None) -> str | None:
        return normalize_chave(v)


class NotaFiscalOut(BaseModel):
    id: int
    empresa_id: int
    supplier_id: int | None = None
    numero: str
    serie: str
    chave_acesso: str | None = None
    tipo: str
    data_emissao: date
    data_entrada: date | None = None
    valor_produtos_cents: int
    valor_desconto_cents: int
    valor_frete_cents: int
    valor_seguro_cents: int
    outras_despesas_cents: int
    valor_total_cents: int
    status: str
    observacoes: str

    model_config = ConfigDict(from_attributes=True)
