from datetime import date

from pydantic import BaseModel, Field, model_validator


class LancamentoCreate(BaseModel):
    empresa_id: int
    supplier_id: int | None = None
    conta_bancaria_id: int | None = None
    tipo: str = Field(pattern="^(receita|despesa)$")
    descricao: str = Field(default="", max_length=200)
    valor_cents: int = Field(ge=1)
    juros_cents: int = Field(default=0, ge=0)
    multa_cents: int = Field(default=0, ge=0)
    desconto_cents: int = Field(default=0, ge=0)
    data_lancamento: date | None = None
    data_vencimento: date | None = None
    observacoes: str = Field(default="", max_length=5000)

    @model_validator(mode="after")
    def _datas(self):
        if self.data_lancamento is None:
            self.data_lancamento = date.today()
        if self.data_vencimento and self.data_vencimento < self.data_lancamento:
            raise ValueError("data_vencimento não pode ser anterior a data_lancamento")
        return self


class LancamentoUpdate(BaseModel):
    supplier_id: int | None = None
    conta_bancaria_id: int | None = None
    descricao: str | None = Field(default=None, max_length=200)
    valor_cents: int | None = Field(default=None, ge=1)
    juros_cents: int | None = Field(default=None, ge=0)
    multa_cents: int | None = Field(default=None, ge=0)
    desconto_cents: int | None = Field(default=None, ge=0)
    data_lancamento: date | None = None
    data_vencimento: date | None = None
    observacoes: str | None = Field(default=None, max_length=5000)


class LancamentoPagar(BaseModel):
    data_pagamento: date | None = None
    conta_bancaria_id: int | None = None
    juros_cents: int | None = Field(default=None, ge=0)
    multa_cents: int | None = Field(default=None, ge=0)
    desconto_cents: int | None = Field(default=None, ge=0)


class LancamentoOut(BaseModel):
    id: int
    empresa_id: int
    supplier_id: int | None = None
    conta_bancaria_id: int | None = None
    tipo: str
    descricao: str
    valor_cents: int
    juros_cents: int
    multa_cents: int
    desconto_cents: int
    valor_pago_cents: int | None = None
    data_lancamento: date
    data_vencimento: date | None = None
    data_pagamento: date | None = None
    status: str
    observacoes: str
