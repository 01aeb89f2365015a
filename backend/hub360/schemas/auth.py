from pydantic import BaseModel, Field, field_validator


class RegisterIn(BaseModel):
    tenant_name: str = Field(min_length=2, max_length=200)
    name: str = Field(default="", max_length=200)
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("email inválido")
        return v


class LoginIn(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    tenant_id: int


class MeOut(BaseModel):
    sub: str
    tenant_id: int
    role: str
