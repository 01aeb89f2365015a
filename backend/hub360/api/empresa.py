import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hub360.api.common import like_term
from hub360.core.errors import commit_or_raise, conflict, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.conta_bancaria import ContaBancaria
from hub360.models.empresa import Empresa
from hub360.models.lancamento import Lancamento
from hub360.models.nota_fiscal import NotaFiscal
from hub360.schemas.empresa import EmpresaCreate, EmpresaOut, EmpresaUpdate

router = APIRouter(prefix="/empresas", tags=["empresas"])

logger = logging.getLogger(__name__)


def get_empresa_or_404(db: Session, tenant_id: int, empresa_id: int) -> Empresa:
    e = db.scalar(select(Empresa).where(Empresa.id == empresa_id).where(Empresa.tenant_id == tenant_id))
    if not e:
        raise not_found("empresa", empresa_id, "Empresa não encontrada")
    return e


@router.post("", response_model=EmpresaOut, status_code=201)
def create_empresa(payload: EmpresaCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    exists = db.scalar(select(Empresa.id).where(Empresa.cnpj == payload.cnpj).where(Empresa.tenant_id == tenant_id))
    if exists:
        raise conflict("DUPLICATE", "CNPJ já cadastrado", cnpj=payload.cnpj)

    e = Empresa(tenant_id=tenant_id, **payload.model_dump())
    db.add(e)
    commit_or_raise(db, duplicate_message="CNPJ já cadastrado", what="empresa")
    db.refresh(e)
    return e


@router.get("", response_model=list[EmpresaOut])
def list_empresas(
    q: str | None = Query(None, description="busca por razão social, nome fantasia ou CNPJ"),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(Empresa).where(Empresa.tenant_id == tenant_id)
    if q and q.strip():
        term = like_term(q)
        stmt = stmt.where(or_(
            Empresa.razao_social.ilike(term, escape="\\"),
            Empresa.nome_fantasia.ilike(term, escape="\\"),
            Empresa.cnpj.ilike(term, escape="\\"),
        ))
    return list(db.scalars(stmt.order_by(Empresa.id)))


@router.get("/{empresa_id}", response_model=EmpresaOut)
def get_empresa(empresa_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    try:
        return get_empresa_or_404(db, tenant_id, empresa_id)

    except HTTPException:
        raise

    except SQLAlchemyError:
        logger.exception("DB error fetching empresa_id=%s", empresa_id)
        raise HTTPException(status_code=503, detail="Database unavailable")


@router.patch("/{empresa_id}", response_model=EmpresaOut)
def update_empresa(
    empresa_id: int,
    payload: EmpresaUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    e = get_empresa_or_404(db, tenant_id, empresa_id)
    for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(e, k, v)
    commit_or_raise(db, duplicate_message="CNPJ já cadastrado", what="empresa")
    db.refresh(e)
    return e


@router.delete("/{empresa_id}", status_code=204)
def delete_empresa(empresa_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    e = get_empresa_or_404(db, tenant_id, empresa_id)
    for model in (Lancamento, NotaFiscal, ContaBancaria):
        db.execute(delete(model).where(model.empresa_id == e.id, model.tenant_id == tenant_id))
    db.delete(e)
    commit_or_raise(db, duplicate_message="Empresa em uso", what="empresa")
    return Response(status_code=204)
