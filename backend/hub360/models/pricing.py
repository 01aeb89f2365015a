from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from hub360.db import Base, TimestampMixin


class CategoryCommission(TimestampMixin, Base):
    """Comissão do marketplace por departamento e faixa de preço."""

    __tablename__ = "category_commissions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id", ondelete="CASCADE"), index=True)
    channel: Mapped[str] = mapped_column(String(30), index=True)
    price_from: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    # None = sem teto
    price_to: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    commission_pct: Mapped[Decimal] = mapped_column(Numeric(6, 2))


class FreightRate(TimestampMixin, Base):
    """Tabela de frete Amazon (FBA/DBA) por UF de origem e faixa de peso."""

    __tablename__ = "freight_rates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    channel: Mapped[str] = mapped_column(String(30), index=True)
    state: Mapped[str] = mapped_column(String(2), index=True)
    weight_from_kg: Mapped[Decimal] = mapped_column(Numeric(10, 3))
    weight_to_kg: Mapped[Decimal] = mapped_column(Numeric(10, 3))
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))


class PricingSettings(TimestampMixin, Base):
    __tablename__ = "pricing_settings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, unique=True, index=True)
    tax_pct: Mapped[Decimal] = mapped_column(Numeric(6, 2), default=Decimal("0"))
    state: Mapped[str] = mapped_column(String(2), default="SP")
    target_margin_pct: Mapped[Decimal] = mapped_column(Numeric(6, 2), default=Decimal("20"))
