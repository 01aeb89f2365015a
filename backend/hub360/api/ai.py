from __future__ import annotations

import logging
import re
from time import perf_counter

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from hub360.ai.provider import ListingInput, generate_listing, get_ai_config
from hub360.api.product import get_product_or_404
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.product import Product
from hub360.schemas.ai import AIStatusOut, ListingContentIn, ListingContentOut

router = APIRouter(prefix="/ai", tags=["ai"])

logger = logging.getLogger(__name__)


def _split_features(raw: str) -> list[str]:
    return [f.strip(" -•\t") for f in re.split(r"[\n;]+", raw or "") if f.strip(" -•\t")]


def _fmt_dim(v) -> str:
    s = f"{v:f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s.replace(".", ",")


def _dimensions(p: Product) -> str:
    parts = []
    if p.length_cm and p.width_cm and p.height_cm:
        parts.append(f"{_fmt_dim(p.length_cm)} x {_fmt_dim(p.width_cm)} x {_fmt_dim(p.height_cm)} cm")
    if p.weight_kg:
        parts.append(f"{_fmt_dim(p.weight_kg)} kg")
    return ", ".join(parts)


def _listing_input(payload: ListingContentIn, product: Product | None) -> ListingInput:
    """Campos do payload têm precedência; vazios vêm do cadastro do produto."""
    name = payload.product_name.strip()
    brand = payload.brand.strip()
    department = payload.department.strip()
    features = [f.strip() for f in payload.features if f and f.strip()]
    dimensions = ""

    if product is not None:
        name = name or product.name
        brand = brand or (product.brand or "")
        department = department or (product.department.name if product.department else "")
        features = features or _split_features(product.features)
        dimensions = _dimensions(product)

    return ListingInput(
        product_name=name,
        brand=brand,
        department=department,
        features=tuple(features),
        target_audience=payload.target_audience.strip(),
        dimensions=dimensions,
        tone=payload.tone,
    )


@router.get("/status", response_model=AIStatusOut)
def ai_status():
    enabled, provider = get_ai_config()
    return AIStatusOut(enabled=enabled, provider=provider if enabled else "null")


@router.post("/listing", response_model=ListingContentOut)
def listing_content(
    payload: ListingContentIn,
    request: Request,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    product = get_product_or_404(db, tenant_id, payload.product_id) if payload.product_id is not None else None
    item = _listing_input(payload, product)

    t0 = perf_counter()
    out, fallback = generate_listing(item)
    elapsed_ms = round((perf_counter() - t0) * 1000.0, 2)
    logger.info(
        "ai_listing rid=%s tenant=%s provider=%s fallback=%s (%sms)",
        getattr(request.state, "request_id", "-"), tenant_id, out.provider, fallback, elapsed_ms,
    )

    return ListingContentOut(
        provider=out.provider,
        fallback=fallback,
        title=out.title,
        bullet_points=list(out.bullet_points),
        description=out.description,
    )
