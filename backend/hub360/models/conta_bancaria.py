from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hub360.db import Base, TimestampMixin

TIPOS_CONTA = ("corrente", "poupanca", "investimento")


class ContaBancaria(TimestampMixin, Base):
    __tablename__ = "contas_bancarias"
    __table_args__ = (
        UniqueConstraint("tenant_id", "empresa_id", "banco", "agencia", "conta", name="uq_contas_bancarias_conta"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    empresa_id: Mapped[int] = mapped_column(ForeignKey("empresas.id", ondelete="CASCADE"), index=True)

    banco: Mapped[str] = mapped_column(String(100))
    tipo_conta: Mapped[str] = mapped_column(String(15), default="corrente")
    agencia: Mapped[str] = mapped_column(String(10))
    conta: Mapped[str] = mapped_column(String(20))
    digito: Mapped[str] = mapped_column(String(2), default="")
    descricao: Mapped[str] = mapped_column(String(255), default="")

    # centavos; saldo_atual = saldo_inicial + lançamentos pagos na conta
    saldo_inicial_cents: Mapped[int] = mapped_column(Integer, default=0)
    saldo_atual_cents: Mapped[int] = mapped_column(Integer, default=0)

    active: Mapped[bool] = mapped_column(Boolean, default=True)

    def movimentar(self, tipo: str, valor_cents: int) -> None:
        """Receita entra, despesa sai. Estorno = valor negativo."""
        self.saldo_atual_cents += valor_cents if tipo == "receita" else -valor_cents
