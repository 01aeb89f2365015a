from pydantic import BaseModel, ConfigDict, Field, field_validator

_TIPO_CONTA = "^(corrente|poupanca|investimento)$"


class _ContaFields(BaseModel):
    @field_validator("agencia", "conta", check_fields=False)
    @classmethod
    def _numerico(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().replace("-", "")
        if not v.isdigit():
            raise ValueError("use apenas dígitos")
        return v

    @field_validator("digito", check_fields=False)
    @classmethod
    def _digito(cls, v: str | None) -> str | None:
        # alguns bancos usam "X" como dígito verificador
        if v is None:
            return None
        v = v.strip().upper()
        if v and not all(c.isdigit() or c == "X" for c in v):
            raise ValueError("dígito inválido")
        return v


class ContaBancariaCreate(_ContaFields):
    empresa_id: int
    banco: str = Field(min_length=1, max_length=100)
    tipo_conta: str = Field(default="corrente", pattern=_TIPO_CONTA)
    agencia: str = Field(min_length=1, max_length=10)
    conta: str = Field(min_length=1, max_length=20)
    digito: str = Field(default="", max_length=2)
    descricao: str = Field(default="", max_length=255)
    saldo_inicial_cents: int = 0
    active: bool = True


class ContaBancariaUpdate(_ContaFields):
    banco: str | None = Field(default=None, min_length=1, max_length=100)
    tipo_conta: str | None = Field(default=None, pattern=_TIPO_CONTA)
    agencia: str | None = Field(default=None, min_length=1, max_length=10)
    conta: str | None = Field(default=None, min_length=1, max_length=20)
    digito: str | None = Field(default=None, max_length=2)
    descricao: str | None = Field(default=None, max_length=255)
    saldo_inicial_cents: int | None = None
    active: bool | None = None


class ContaBancariaOut(BaseModel):
    id: int
    empresa_id: int
    banco: str
    tipo_conta: str
    agencia: str
    conta: str
    digito: str
    descricao: str
    saldo_inicial_cents: int
    saldo_atual_cents: int
    active: bool

    model_config = ConfigDict(from_attributes=True)
