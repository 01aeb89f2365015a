from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from hub360.api.common import PageParams, like_term, paginate
from hub360.api.department import get_department_or_404
from hub360.api.supplier import get_supplier_or_404
from hub360.calc.channels import best_channel, get_channel
from hub360.core.errors import commit_or_raise, conflict, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.product import Product
from hub360.schemas.common import Page
from hub360.schemas.product import (
    ProductChannelOut,
    ProductChannelUpsert,
    ProductCreate,
    ProductOut,
    ProductPricingIn,
    ProductPricingOut,
    ProductUpdate,
)
from hub360.services import pricing as pricing_service

router = APIRouter(prefix="/products", tags=["products"])


def get_product_or_404(db: Session, tenant_id: int, product_id: int) -> Product:
    p = db.scalar(select(Product).where(Product.id == product_id, Product.tenant_id == tenant_id))
    if not p:
        raise not_found("product", product_id, "Produto não encontrado")
    return p


def _check_refs(db: Session, tenant_id: int, data: dict) -> None:
    if data.get("department_id") is not None:
        get_department_or_404(db, tenant_id, data["department_id"])
    if data.get("supplier_id") is not None:
        get_supplier_or_404(db, tenant_id, data["supplier_id"])


def _ensure_unique_sku(db: Session, tenant_id: int, sku: str, exclude_id: int | None = None) -> None:
    stmt = select(Product.id).where(Product.tenant_id == tenant_id, Product.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    if db.scalar(stmt):
        raise conflict("DUPLICATE", "SKU já cadastrado", sku=sku)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    data = payload.model_dump()
    data["sku"] = data["sku"].strip()
    _check_refs(db, tenant_id, data)
    _ensure_unique_sku(db, tenant_id, data["sku"])

    p = Product(tenant_id=tenant_id, **data)
    db.add(p)
    commit_or_raise(db, duplicate_message="SKU já cadastrado", what="product")
    db.refresh(p)
    return p


@router.get("", response_model=Page[ProductOut])
def list_products(
    q: str | None = Query(None, description="busca por nome, SKU, EAN ou marca"),
    active: bool | None = Query(None),
    supplier_id: int | None = Query(None),
    department_id: int | None = Query(None),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(Product).where(Product.tenant_id == tenant_id)
    if q and q.strip():
        term = like_term(q)
        stmt = stmt.where(or_(
            Product.name.ilike(term, escape="\\"),
            Product.sku.ilike(term, escape="\\"),
            Product.ean.ilike(term, escape="\\"),
            Product.brand.ilike(term, escape="\\"),
        ))
    if active is not None:
        stmt = stmt.where(Product.active.is_(active))
    if supplier_id is not None:
        stmt = stmt.where(Product.supplier_id == supplier_id)
    if department_id is not None:
        stmt = stmt.where(Product.department_id == department_id)
    return paginate(db, stmt.order_by(Product.name, Product.id), params)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return get_product_or_404(db, tenant_id, product_id)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    p = get_product_or_404(db, tenant_id, product_id)
    data = payload.model_dump(exclude_unset=True)
    _check_refs(db, tenant_id, data)
    if data.get("sku"):
        data["sku"] = data["sku"].strip()
        _ensure_unique_sku(db, tenant_id, data["sku"], exclude_id=p.id)

    nullable = {"department_id", "supplier_id", "tax_pct"}
    for k, v in data.items():
        if v is None and k not in nullable:
            continue
        setattr(p, k, v)
    commit_or_raise(db, duplicate_message="SKU já cadastrado", what="product")
    db.refresh(p)
    return p


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    p = get_product_or_404(db, tenant_id, product_id)
    db.delete(p)
    commit_or_raise(db, duplicate_message="Produto em uso", what="product")
    return Response(status_code=204)


# --- canais de venda do produto ---------------------------------------------

@router.get("/{product_id}/channels", response_model=list[ProductChannelOut])
def list_product_channels(product_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    get_product_or_404(db, tenant_id, product_id)
    return pricing_service.list_channels(db, tenant_id, product_id)


@router.put("/{product_id}/channels/{channel}", response_model=ProductChannelOut)
def upsert_product_channel(
    product_id: int,
    channel: str,
    payload: ProductChannelUpsert,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    p = get_product_or_404(db, tenant_id, product_id)
    row = pricing_service.save_channel(
        db, tenant_id, p, channel,
        active=payload.active,
        config=payload.config.engine_values(),
    )
    commit_or_raise(db, duplicate_message="Canal já configurado", what="product_channel")
    db.refresh(row)
    return row


@router.delete("/{product_id}/channels/{channel}", status_code=204)
def deactivate_product_channel(
    product_id: int,
    channel: str,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    get_product_or_404(db, tenant_id, product_id)
    spec = get_channel(channel)
    row = pricing_service.deactivate_channel(db, tenant_id, product_id, spec.key)
    if row is None:
        raise not_found("product_channel", message=f"Canal {spec.key} não configurado para o produto")
    commit_or_raise(db, duplicate_message="Canal já configurado", what="product_channel")
    return Response(status_code=204)


@router.post("/{product_id}/pricing", response_model=ProductPricingOut)
def calculate_product_pricing(
    product_id: int,
    payload: ProductPricingIn | None = None,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    p = get_product_or_404(db, tenant_id, product_id)
    payload = payload or ProductPricingIn()
    overrides = {ch: f.engine_values() for ch, f in payload.overrides.items()}

    results = pricing_service.calculate_product(db, tenant_id, p, payload.channels, overrides)
    if not results:
        raise HTTPException(status_code=422, detail={
            "error_code": "NO_CHANNELS",
            "message": "Produto sem canais ativos (configure em PUT /products/{id}/channels/{canal})",
        })
    return ProductPricingOut(
        product_id=p.id,
        results=[r.to_dict() for r in results],
        best_channel=best_channel(results),
    )
