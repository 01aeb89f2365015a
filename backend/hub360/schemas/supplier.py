from pydantic import BaseModel, ConfigDict, Field, field_validator

from hub360.schemas.common import normalize_cnpj


class SupplierBase(BaseModel):
    corporate_name: str = Field(default="", max_length=200)
    cnpj: str | None = None
    email: str = Field(default="", max_length=254)
    phone: str = Field(default="", max_length=40)
    notes: str = Field(default="", max_length=5000)

    @field_validator("cnpj")
    @classmethod
    def _cnpj(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return normalize_cnpj(v)


class SupplierCreate(SupplierBase):
    trade_name: str = Field(min_length=1, max_length=200)
    active: bool = True


class SupplierUpdate(SupplierBase):
    trade_name: str | None = Field(default=None, min_length=1, max_length=200)
    corporate_name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=254)
    phone: str | None = Field(default=None, max_length=40)
    notes: str | None = Field(default=None, max_length=5000)
    active: bool | None = None


class SupplierOut(BaseModel):
    id: int
    trade_name: str
    corporate_name: str
    cnpj: str | None = None
    email: str
    phone: str
    notes: str
    active: bool

    model_config = ConfigDict(from_attributes=True)
