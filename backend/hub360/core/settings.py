import secrets

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices, model_validator


AI_PROVIDERS = ("null", "noop", "none", "openai")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Hub360 Seller API"
    ENV: str = Field(default="lab", validation_alias=AliasChoices("HUB360_ENV", "ENV"))  # lab|prod
    DATABASE_URL: str = Field(default="sqlite:///./lab.db", validation_alias=AliasChoices("HUB360_DATABASE_URL", "DATABASE_URL"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("HUB360_LOG_LEVEL", "LOG_LEVEL"))

    # Auth (JWT)
    AUTH_PROTECT_DOCS: bool = Field(default=False, validation_alias=AliasChoices("HUB360_AUTH_PROTECT_DOCS", "AUTH_PROTECT_DOCS"))
    AUTH_JWT_SECRET: str = Field(default="", validation_alias=AliasChoices("HUB360_AUTH_JWT_SECRET", "AUTH_JWT_SECRET", "JWT_SECRET"))
    AUTH_JWT_EXPIRE_MINUTES: int = Field(default=60, validation_alias=AliasChoices("HUB360_AUTH_JWT_EXPIRE_MINUTES", "AUTH_JWT_EXPIRE_MINUTES"))

    # IA (conteúdo de anúncios) - desligada por padrão
    AI_ENABLED: bool = Field(default=False, validation_alias=AliasChoices("HUB360_AI_ENABLED", "AI_ENABLED"))
    AI_PROVIDER: str = Field(default="null", validation_alias=AliasChoices("HUB360_AI_PROVIDER", "AI_PROVIDER"))
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TIMEOUT_S: int = 25

    BUILD_SHA: str = Field(default="", validation_alias=AliasChoices("HUB360_BUILD_SHA", "BUILD_SHA", "GITHUB_SHA"))

    @model_validator(mode="after")
    def _security_invariants(self):
        # Fail-fast de segurança (contrato de settings)
        if self.ENV not in ("lab", "prod"):
            raise ValueError(f"ENV inválido: {self.ENV!r} (use lab | prod)")

        sec = (self.AUTH_JWT_SECRET or "").strip()
        if self.ENV == "prod":
            if not sec:
                raise ValueError("SECURITY: AUTH_JWT_SECRET vazio (obrigatório em ENV=prod)")
            if len(sec) < 32:
                raise ValueError("SECURITY: AUTH_JWT_SECRET curto (min 32 chars)")
        elif not sec:
            # lab: segredo efêmero por processo (tokens morrem no restart)
            sec = secrets.token_urlsafe(48)
        self.AUTH_JWT_SECRET = sec

        if self.AUTH_JWT_EXPIRE_MINUTES < 1:
            raise ValueError("AUTH_JWT_EXPIRE_MINUTES deve ser >= 1")

        self.AI_PROVIDER = (self.AI_PROVIDER or "null").strip().lower()
        if self.AI_PROVIDER not in AI_PROVIDERS:
            raise ValueError(f"AI_PROVIDER inválido: {self.AI_PROVIDER!r} (use {' | '.join(AI_PROVIDERS)})")
        return self

    @property
    def docs_protected(self) -> bool:
        return self.ENV == "prod" or bool(self.AUTH_PROTECT_DOCS)


settings = Settings()
