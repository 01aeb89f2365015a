from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hub360.schemas.common import normalize_cnpj


class EmpresaCreate(BaseModel):
    cnpj: str
    razao_social: str = Field(min_length=2, max_length=200)
    nome_fantasia: str = Field(default="", max_length=200)

    @field_validator("cnpj")
    @classmethod
    def _cnpj(cls, v: str) -> str:
        return normalize_cnpj(v)


class EmpresaUpdate(BaseModel):
    razao_social: str | None = Field(default=None, min_length=2, max_length=200)
    nome_fantasia: str | None = Field(default=None, max_length=200)


class EmpresaOut(BaseModel):
    id: int
    cnpj: str
    razao_social: str
    nome_fantasia: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
