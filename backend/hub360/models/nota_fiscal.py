from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hub360.db import Base, TimestampMixin

TIPOS_NOTA = ("entrada", "saida")
STATUS_NOTA = ("autorizada", "cancelada", "inutilizada")


class NotaFiscal(TimestampMixin, Base):
    __tablename__ = "notas_fiscais"
    __table_args__ = (
        UniqueConstraint("tenant_id", "empresa_id", "tipo", "serie", "numero", name="uq_notas_fiscais_numero"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    empresa_id: Mapped[int] = mapped_column(ForeignKey("empresas.id", ondelete="CASCADE"), index=True)
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)

    numero: Mapped[str] = mapped_column(String(20))
    serie: Mapped[str] = mapped_column(String(10), default="1")
    chave_acesso: Mapped[str | None] = mapped_column(String(44), nullable=True)
    # "entrada" | "saida"
    tipo: Mapped[str] = mapped_column(String(10), index=True)

    data_emissao: Mapped[date] = mapped_column(Date, index=True)
    data_entrada: Mapped[date | None] = mapped_column(Date, nullable=True)

    valor_produtos_cents: Mapped[int] = mapped_column(Integer)
    valor_desconto_cents: Mapped[int] = mapped_column(Integer, default=0)
    valor_frete_cents: Mapped[int] = mapped_column(Integer, default=0)
    valor_seguro_cents: Mapped[int] = mapped_column(Integer, default=0)
    outras_despesas_cents: Mapped[int] = mapped_column(Integer, default=0)
    valor_total_cents: Mapped[int] = mapped_column(Integer)

    status: Mapped[str] = mapped_column(String(12), default="autorizada", index=True)
    observacoes: Mapped[str] = mapped_column(Text, default="")

    def calcular_total(self) -> int:
        return (
            self.valor_produtos_cents
            - (self.valor_desconto_cents or 0)
            + (self.valor_frete_cents or 0)
            + (self.valor_seguro_cents or 0)
            + (self.outras_despesas_cents or 0)
        )
