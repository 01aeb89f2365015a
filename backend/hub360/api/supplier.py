from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from hub360.api.common import PageParams, like_term, paginate
from hub360.core.errors import commit_or_raise, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.lancamento import Lancamento
from hub360.models.nota_fiscal import NotaFiscal
from hub360.models.product import Product
from hub360.models.supplier import Supplier
from hub360.schemas.common import Page
from hub360.schemas.supplier import SupplierCreate, SupplierOut, SupplierUpdate

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


def get_supplier_or_404(db: Session, tenant_id: int, supplier_id: int) -> Supplier:
    s = db.scalar(select(Supplier).where(Supplier.id == supplier_id, Supplier.tenant_id == tenant_id))
    if not s:
        raise not_found("supplier", supplier_id, "Fornecedor não encontrado")
    return s


@router.post("", response_model=SupplierOut, status_code=201)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    s = Supplier(tenant_id=tenant_id, **payload.model_dump())
    db.add(s)
    commit_or_raise(db, duplicate_message="Fornecedor já cadastrado", what="supplier")
    db.refresh(s)
    return s


@router.get("", response_model=Page[SupplierOut])
def list_suppliers(
    q: str | None = Query(None),
    active: bool | None = Query(None),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(Supplier).where(Supplier.tenant_id == tenant_id)
    if q and q.strip():
        term = like_term(q)
        stmt = stmt.where(or_(
            Supplier.trade_name.ilike(term, escape="\\"),
            Supplier.corporate_name.ilike(term, escape="\\"),
        ))
    if active is not None:
        stmt = stmt.where(Supplier.active.is_(active))
    return paginate(db, stmt.order_by(Supplier.trade_name, Supplier.id), params)


@router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return get_supplier_or_404(db, tenant_id, supplier_id)


@router.patch("/{supplier_id}", response_model=SupplierOut)
def update_supplier(
    supplier_id: int,
    payload: SupplierUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    s = get_supplier_or_404(db, tenant_id, supplier_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is None and k != "cnpj":
            continue
        setattr(s, k, v)
    commit_or_raise(db, duplicate_message="Fornecedor já cadastrado", what="supplier")
    db.refresh(s)
    return s


@router.delete("/{supplier_id}", status_code=204)
def delete_supplier(supplier_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    s = get_supplier_or_404(db, tenant_id, supplier_id)
    for model in (Product, Lancamento, NotaFiscal):
        db.execute(update(model).where(model.tenant_id == tenant_id, model.supplier_id == s.id).values(supplier_id=None))
    db.delete(s)
    commit_or_raise(db, duplicate_message="Fornecedor em uso", what="supplier")
    return Response(status_code=204)
