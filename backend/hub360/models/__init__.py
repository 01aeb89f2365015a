# Import explícito dos models para registrar no SQLAlchemy metadata
# (create_all e o autogenerate do alembic dependem disso)
from hub360.models.tenant import Tenant, TenantMember  # noqa: F401
from hub360.models.empresa import Empresa  # noqa: F401
from hub360.models.supplier import Supplier  # noqa: F401
from hub360.models.product import Department, Product, ProductChannel  # noqa: F401
from hub360.models.pricing import CategoryCommission, FreightRate, PricingSettings  # noqa: F401
from hub360.models.lancamento import Lancamento  # noqa: F401
from hub360.models.simulation import ImportSimulation  # noqa: F401
from hub360.models.conta_bancaria import ContaBancaria  # noqa: F401
from hub360.models.nota_fiscal import NotaFiscal  # noqa: F401
