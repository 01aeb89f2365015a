from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from hub360.db import Base, TimestampMixin

KINDS = ("simplificada", "formal")
STATUS = ("Em andamento", "Concluído", "Pausado")


class ImportSimulation(TimestampMixin, Base):
    __tablename__ = "import_simulations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(15), index=True)
    code: Mapped[str] = mapped_column(String(8), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    supplier_name: Mapped[str] = mapped_column(String(200), default="")
    status: Mapped[str] = mapped_column(String(20), default="Em andamento")
    observacoes: Mapped[str] = mapped_column(String(2000), default="")

    config: Mapped[dict] = mapped_column(JSON, default=dict)
    products: Mapped[list] = mapped_column(JSON, default=list)
    result: Mapped[dict | None] = mapped_column(JSON, nullable=True)
