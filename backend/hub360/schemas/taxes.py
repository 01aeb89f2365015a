from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class SimplesIn(BaseModel):
    faturamento_mes: Decimal = Field(ge=0)
    rbt12: Decimal | None = Field(default=None, ge=0)
    # alternativa ao rbt12: receitas mensais em ordem cronológica
    receitas_12m: list[Decimal] | None = Field(default=None, max_length=12)
    anexo: str = Field(default="I", pattern="^I$")

    @model_validator(mode="after")
    def _base(self):
        if self.rbt12 is None and self.receitas_12m is None:
            raise ValueError("informe rbt12 ou receitas_12m")
        return self


class SimplesOut(BaseModel):
    anexo: str
    faixa: int
    rbt12: Decimal
    faturamento_mes: Decimal
    aliquota_nominal_pct: Decimal
    deducao: Decimal
    aliquota_efetiva_pct: Decimal
    valor_das: Decimal
    limite_anual: Decimal
    sublimite_icms: Decimal
    acima_sublimite_icms: bool
    disponivel_no_ano: Decimal
