from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hub360.db import Base, TimestampMixin

TIPOS = ("receita", "despesa")
STATUS = ("pendente", "pago", "cancelado")


class Lancamento(TimestampMixin, Base):
    __tablename__ = "lancamentos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    empresa_id: Mapped[int] = mapped_column(ForeignKey("empresas.id", ondelete="CASCADE"), index=True)
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    conta_bancaria_id: Mapped[int | None] = mapped_column(
        ForeignKey("contas_bancarias.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # "receita" | "despesa"
    tipo: Mapped[str] = mapped_column(String(10), index=True)
    descricao: Mapped[str] = mapped_column(String(200), default="")

    # valores em centavos (evita float)
    valor_cents: Mapped[int] = mapped_column(Integer)
    juros_cents: Mapped[int] = mapped_column(Integer, default=0)
    multa_cents: Mapped[int] = mapped_column(Integer, default=0)
    desconto_cents: Mapped[int] = mapped_column(Integer, default=0)
    valor_pago_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)

    data_lancamento: Mapped[date] = mapped_column(Date, index=True)
    data_vencimento: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    data_pagamento: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)

    # persistido: pendente | pago | cancelado ("vencido" é derivado na leitura)
    status: Mapped[str] = mapped_column(String(12), default="pendente", index=True)
    observacoes: Mapped[str] = mapped_column(Text, default="")

    def status_efetivo(self, hoje: date) -> str:
        if self.status == "pendente" and self.data_vencimento and self.data_vencimento < hoje:
            return "vencido"
        return self.status
