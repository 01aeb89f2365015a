"""contas bancárias, notas fiscais e conta do lançamento

Revision ID: c7d2e4a9f013
Revises: a1c3e5f70b21
Create Date: 2026-10-18 09:41:12.905314

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "c7d2e4a9f013"
down_revision: Union[str, Sequence[str], None] = "a1c3e5f70b21"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_TENANT_TABLES = ["contas_bancarias", "notas_fiscais"]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "contas_bancarias",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("empresa_id", sa.Integer(), sa.ForeignKey("empresas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("banco", sa.String(100), nullable=False),
        sa.Column("tipo_conta", sa.String(15), nullable=False),
        sa.Column("agencia", sa.String(10), nullable=False),
        sa.Column("conta", sa.String(20), nullable=False),
        sa.Column("digito", sa.String(2), nullable=False),
        sa.Column("descricao", sa.String(255), nullable=False),
        sa.Column("saldo_inicial_cents", sa.Integer(), nullable=False),
        sa.Column("saldo_atual_cents", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "empresa_id", "banco", "agencia", "conta", name="uq_contas_bancarias_conta"),
    )
    op.create_index("ix_contas_bancarias_tenant_id", "contas_bancarias", ["tenant_id"])
    op.create_index("ix_contas_bancarias_empresa_id", "contas_bancarias", ["empresa_id"])

    op.create_table(
        "notas_fiscais",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("empresa_id", sa.Integer(), sa.ForeignKey("empresas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("numero", sa.String(20), nullable=False),
        sa.Column("serie", sa.String(10), nullable=False),
        sa.Column("chave_acesso", sa.String(44), nullable=True),
        sa.Column("tipo", sa.String(10), nullable=False),
        sa.Column("data_emissao", sa.Date(), nullable=False),
        sa.Column("data_entrada", sa.Date(), nullable=True),
        sa.Column("valor_produtos_cents", sa.Integer(), nullable=False),
        sa.Column("valor_desconto_cents", sa.Integer(), nullable=False),
        sa.Column("valor_frete_cents", sa.Integer(), nullable=False),
        sa.Column("valor_seguro_cents", sa.Integer(), nullable=False),
        sa.Column("outras_despesas_cents", sa.Integer(), nullable=False),
        sa.Column("valor_total_cents", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(12), nullable=False),
        sa.Column("observacoes", sa.Text(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "empresa_id", "tipo", "serie", "numero", name="uq_notas_fiscais_numero"),
    )
    op.create_index("ix_notas_fiscais_tenant_id", "notas_fiscais", ["tenant_id"])
    for col in ("empresa_id", "tipo", "data_emissao", "status"):
        op.create_index(f"ix_notas_fiscais_{col}", "notas_fiscais", [col])

    # batch: SQLite não suporta ADD CONSTRAINT
    with op.batch_alter_table("lancamentos") as batch:
        batch.add_column(sa.Column("conta_bancaria_id", sa.Integer(), nullable=True))
        batch.create_foreign_key(
            "fk_lancamentos_conta_bancaria_id", "contas_bancarias", ["conta_bancaria_id"], ["id"], ondelete="SET NULL"
        )
        batch.create_index("ix_lancamentos_conta_bancaria_id", ["conta_bancaria_id"])

    if op.get_bind().dialect.name == "postgresql":
        for table in _TENANT_TABLES:
            op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
            op.execute(
                f"CREATE POLICY {table}_tenant_isolation ON {table} "
                f"USING (tenant_id = NULLIF(current_setting('app.tenant_id', true), '')::int)"
            )


def downgrade() -> None:
    with op.batch_alter_table("lancamentos") as batch:
        batch.drop_index("ix_lancamentos_conta_bancaria_id")
        batch.drop_constraint("fk_lancamentos_conta_bancaria_id", type_="foreignkey")
        batch.drop_column("conta_bancaria_id")

    if op.get_bind().dialect.name == "postgresql":
        for table in _TENANT_TABLES:
            op.execute(f"DROP POLICY IF EXISTS {table}_tenant_isolation ON {table}")

    for table in reversed(_TENANT_TABLES):
        op.drop_table(table)
