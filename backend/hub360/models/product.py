from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hub360.db import Base, TimestampMixin


class Department(TimestampMixin, Base):
    __tablename__ = "departments"
    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_departments_tenant_name"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120))
    description: Mapped[str] = mapped_column(String(500), default="")


class Product(TimestampMixin, Base):
    __tablename__ = "products"
    __table_args__ = (UniqueConstraint("tenant_id", "sku", name="uq_products_tenant_sku"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), index=True)
    sku: Mapped[str] = mapped_column(String(60))
    ean: Mapped[str] = mapped_column(String(14), default="")
    brand: Mapped[str] = mapped_column(String(120), default="")
    ncm: Mapped[str] = mapped_column(String(10), default="")
    features: Mapped[str] = mapped_column(String(2000), default="")

    department_id: Mapped[int | None] = mapped_column(ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)

    # dimensões da embalagem (cm / kg): base para frete e CBM
    weight_kg: Mapped[Decimal] = mapped_column(Numeric(10, 3), default=Decimal("0"))
    length_cm: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    width_cm: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    height_cm: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))

    cost_item: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    pack_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    tax_pct: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    department = relationship("Department", lazy="joined")
    channels = relationship("ProductChannel", back_populates="product", cascade="all, delete-orphan")


class ProductChannel(TimestampMixin, Base):
    __tablename__ = "product_channels"
    __table_args__ = (UniqueConstraint("product_id", "channel", name="uq_product_channels_product_channel"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True)
    channel: Mapped[str] = mapped_column(String(30))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    # campos de ChannelInput salvos pelo usuário (strings decimais)
    config: Mapped[dict] = mapped_column(JSON, default=dict)
    last_calculation: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    calculated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    product = relationship("Product", back_populates="channels")
