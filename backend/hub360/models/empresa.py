from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hub360.db import Base, TimestampMixin


class Empresa(TimestampMixin, Base):
    __tablename__ = "empresas"
    __table_args__ = (UniqueConstraint("tenant_id", "cnpj", name="uq_empresas_tenant_cnpj"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    cnpj: Mapped[str] = mapped_column(String(14), index=True)
    razao_social: Mapped[str] = mapped_column(String(200))
    nome_fantasia: Mapped[str] = mapped_column(String(200), default="")
