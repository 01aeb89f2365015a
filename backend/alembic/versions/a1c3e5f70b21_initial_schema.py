"""initial schema (tenants, catálogo, precificação, lançamentos, simulações)

Revision ID: a1c3e5f70b21
Revises:
Create Date: 2026-10-02 14:05:37.412908

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c3e5f70b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# tabelas com tenant_id (ordem de criação; o drop usa a inversa)
_TENANT_TABLES = [
    "empresas",
    "suppliers",
    "departments",
    "products",
    "product_channels",
    "category_commissions",
    "freight_rates",
    "pricing_settings",
    "lancamentos",
    "import_simulations",
]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _tenant_id(table: str, unique: bool = False) -> None:
    op.create_index(f"ix_{table}_tenant_id", table, ["tenant_id"], unique=unique)


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("plan", sa.String(30), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_tenants_id", "tenants", ["id"])

    op.create_table(
        "tenant_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_tenant_members_id", "tenant_members", ["id"])
    op.create_index("ix_tenant_members_tenant_id", "tenant_members", ["tenant_id"])
    op.create_index("ix_tenant_members_email", "tenant_members", ["email"], unique=True)

    op.create_table(
        "empresas",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("cnpj", sa.String(14), nullable=False),
        sa.Column("razao_social", sa.String(200), nullable=False),
        sa.Column("nome_fantasia", sa.String(200), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "cnpj", name="uq_empresas_tenant_cnpj"),
    )
    _tenant_id("empresas")
    op.create_index("ix_empresas_cnpj", "empresas", ["cnpj"])

    op.create_table(
        "suppliers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("trade_name", sa.String(200), nullable=False),
        sa.Column("corporate_name", sa.String(200), nullable=False),
        sa.Column("cnpj", sa.String(14), nullable=True),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("phone", sa.String(40), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    _tenant_id("suppliers")
    op.create_index("ix_suppliers_trade_name", "suppliers", ["trade_name"])

    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "name", name="uq_departments_tenant_name"),
    )
    _tenant_id("departments")

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sku", sa.String(60), nullable=False),
        sa.Column("ean", sa.String(14), nullable=False),
        sa.Column("brand", sa.String(120), nullable=False),
        sa.Column("ncm", sa.String(10), nullable=False),
        sa.Column("features", sa.String(2000), nullable=False),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("weight_kg", sa.Numeric(10, 3), nullable=False),
        sa.Column("length_cm", sa.Numeric(10, 2), nullable=False),
        sa.Column("width_cm", sa.Numeric(10, 2), nullable=False),
        sa.Column("height_cm", sa.Numeric(10, 2), nullable=False),
        sa.Column("cost_item", sa.Numeric(12, 2), nullable=False),
        sa.Column("pack_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax_pct", sa.Numeric(6, 2), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "sku", name="uq_products_tenant_sku"),
    )
    _tenant_id("products")
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_active", "products", ["active"])

    op.create_table(
        "product_channels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("channel", sa.String(30), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("last_calculation", sa.JSON(), nullable=True),
        sa.Column("calculated_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("product_id", "channel", name="uq_product_channels_product_channel"),
    )
    _tenant_id("product_channels")
    op.create_index("ix_product_channels_product_id", "product_channels", ["product_id"])

    op.create_table(
        "category_commissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("channel", sa.String(30), nullable=False),
        sa.Column("price_from", sa.Numeric(12, 2), nullable=False),
        sa.Column("price_to", sa.Numeric(12, 2), nullable=True),
        sa.Column("commission_pct", sa.Numeric(6, 2), nullable=False),
        *_timestamps(),
    )
    _tenant_id("category_commissions")
    op.create_index("ix_category_commissions_department_id", "category_commissions", ["department_id"])
    op.create_index("ix_category_commissions_channel", "category_commissions", ["channel"])

    op.create_table(
        "freight_rates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("channel", sa.String(30), nullable=False),
        sa.Column("state", sa.String(2), nullable=False),
        sa.Column("weight_from_kg", sa.Numeric(10, 3), nullable=False),
        sa.Column("weight_to_kg", sa.Numeric(10, 3), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    _tenant_id("freight_rates")
    op.create_index("ix_freight_rates_channel", "freight_rates", ["channel"])
    op.create_index("ix_freight_rates_state", "freight_rates", ["state"])

    op.create_table(
        "pricing_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("tax_pct", sa.Numeric(6, 2), nullable=False),
        sa.Column("state", sa.String(2), nullable=False),
        sa.Column("target_margin_pct", sa.Numeric(6, 2), nullable=False),
        *_timestamps(),
    )
    _tenant_id("pricing_settings", unique=True)

    op.create_table(
        "lancamentos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("empresa_id", sa.Integer(), sa.ForeignKey("empresas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("tipo", sa.String(10), nullable=False),
        sa.Column("descricao", sa.String(200), nullable=False),
        sa.Column("valor_cents", sa.Integer(), nullable=False),
        sa.Column("juros_cents", sa.Integer(), nullable=False),
        sa.Column("multa_cents", sa.Integer(), nullable=False),
        sa.Column("desconto_cents", sa.Integer(), nullable=False),
        sa.Column("valor_pago_cents", sa.Integer(), nullable=True),
        sa.Column("data_lancamento", sa.Date(), nullable=False),
        sa.Column("data_vencimento", sa.Date(), nullable=True),
        sa.Column("data_pagamento", sa.Date(), nullable=True),
        sa.Column("status", sa.String(12), nullable=False),
        sa.Column("observacoes", sa.Text(), nullable=False),
        *_timestamps(),
    )
    _tenant_id("lancamentos")
    for col in ("empresa_id", "tipo", "data_lancamento", "data_vencimento", "data_pagamento", "status"):
        op.create_index(f"ix_lancamentos_{col}", "lancamentos", [col])

    op.create_table(
        "import_simulations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(15), nullable=False),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("supplier_name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("observacoes", sa.String(2000), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("products", sa.JSON(), nullable=False),
        sa.Column("result", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    _tenant_id("import_simulations")
    op.create_index("ix_import_simulations_kind", "import_simulations", ["kind"])
    op.create_index("ix_import_simulations_code", "import_simulations", ["code"], unique=True)

    # Postgres: isolamento por tenant via RLS (app.tenant_id vem de set_tenant_on_session)
    if op.get_bind().dialect.name == "postgresql":
        for table in _TENANT_TABLES:
            op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
            op.execute(
                f"CREATE POLICY {table}_tenant_isolation ON {table} "
                f"USING (tenant_id = NULLIF(current_setting('app.tenant_id', true), '')::int)"
            )


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        for table in _TENANT_TABLES:
            op.execute(f"DROP POLICY IF EXISTS {table}_tenant_isolation ON {table}")

    for table in reversed(_TENANT_TABLES):
        op.drop_table(table)
    op.drop_table("tenant_members")
    op.drop_table("tenants")
