from pydantic import BaseModel, Field, model_validator


class ListingContentIn(BaseModel):
    # product_id preenche os campos vazios a partir do cadastro
    product_id: int | None = None
    product_name: str = Field(default="", max_length=255)
    brand: str = Field(default="", max_length=120)
    department: str = Field(default="", max_length=120)
    features: list[str] = Field(default_factory=list, max_length=10)
    target_audience: str = Field(default="", max_length=200)
    tone: str = Field(default="profissional", pattern="^(profissional|casual|tecnico)$")

    @model_validator(mode="after")
    def _need_something(self):
        if self.product_id is None and not self.product_name.strip():
            raise ValueError("informe product_id ou product_name")
        return self


class ListingContentOut(BaseModel):
    provider: str
    fallback: bool = False
    title: str
    bullet_points: list[str]
    description: str


class AIStatusOut(BaseModel):
    enabled: bool
    provider: str
