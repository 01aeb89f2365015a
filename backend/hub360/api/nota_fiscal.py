import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from hub360.api.common import PageParams, like_term, paginate
from hub360.api.empresa import get_empresa_or_404
from hub360.api.lancamento import parse_date
from hub360.api.supplier import get_supplier_or_404
from hub360.core.errors import commit_or_raise, conflict, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.nota_fiscal import NotaFiscal
from hub360.schemas.common import Page
from hub360.schemas.nota_fiscal import NotaFiscalCreate, NotaFiscalOut, NotaFiscalUpdate

router = APIRouter(prefix="/notas-fiscais", tags=["notas-fiscais"])

logger = logging.getLogger(__name__)


def _get_or_404(db: Session, tenant_id: int, nota_id: int) -> NotaFiscal:
    nota = db.scalar(select(NotaFiscal).where(NotaFiscal.id == nota_id, NotaFiscal.tenant_id == tenant_id))
    if not nota:
        raise not_found("nota_fiscal", nota_id, "Nota fiscal não encontrada")
    return nota


def _fechar_total(nota: NotaFiscal) -> None:
    total = nota.calcular_total()
    if total < 0:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_AMOUNT",
            "field": "valor_desconto_cents",
            "message": "desconto maior que o valor da nota",
        })
    nota.valor_total_cents = total


@router.post("", response_model=NotaFiscalOut, status_code=201)
def create_nota(payload: NotaFiscalCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    get_empresa_or_404(db, tenant_id, payload.empresa_id)
    if payload.supplier_id is not None:
        get_supplier_or_404(db, tenant_id, payload.supplier_id)

    nota = NotaFiscal(tenant_id=tenant_id, status="autorizada", **payload.model_dump())
    _fechar_total(nota)
    db.add(nota)
    commit_or_raise(db, duplicate_message="Nota fiscal já cadastrada (tipo/série/número)", what="nota_fiscal")
    db.refresh(nota)
    return nota


@router.get("", response_model=Page[NotaFiscalOut])
def list_notas(
    empresa_id: int | None = Query(None, ge=1),
    tipo: str | None = Query(None, pattern="^(entrada|saida)$"),
    status: str | None = Query(None, pattern="^(autorizada|cancelada|inutilizada)$"),
    start: str | None = Query(None, description="YYYY-MM-DD (data de emissão)"),
    end: str | None = Query(None, description="YYYY-MM-DD"),
    q: str | None = Query(None, description="número ou chave de acesso"),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(NotaFiscal).where(NotaFiscal.tenant_id == tenant_id)
    if empresa_id is not None:
        stmt = stmt.where(NotaFiscal.empresa_id == empresa_id)
    if tipo:
        stmt = stmt.where(NotaFiscal.tipo == tipo)
    if status:
        stmt = stmt.where(NotaFiscal.status == status)
    if q and q.strip():
        term = like_term(q)
        stmt = stmt.where(or_(
            NotaFiscal.numero.ilike(term, escape="\\"),
            NotaFiscal.chave_acesso.ilike(term, escape="\\"),
        ))

    start_d = parse_date(start, "start")
    end_d = parse_date(end, "end")
    if start_d and end_d and start_d > end_d:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_PERIOD",
            "message": "start não pode ser maior que end",
        })
    if start_d:
        stmt = stmt.where(NotaFiscal.data_emissao >= start_d)
    if end_d:
        stmt = stmt.where(NotaFiscal.data_emissao <= end_d)

    return paginate(db, stmt.order_by(NotaFiscal.data_emissao.desc(), NotaFiscal.id.desc()), params)


@router.get("/{nota_id}", response_model=NotaFiscalOut)
def get_nota(nota_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return _get_or_404(db, tenant_id, nota_id)


@router.patch("/{nota_id}", response_model=NotaFiscalOut)
def update_nota(
    nota_id: int,
    payload: NotaFiscalUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    nota = _get_or_404(db, tenant_id, nota_id)
    if nota.status != "autorizada":
        raise conflict("INVALID_STATE", f"Nota {nota.status} não pode ser alterada", status=nota.status)

    data = payload.model_dump(exclude_unset=True)
    if data.get("supplier_id") is not None:
        get_supplier_or_404(db, tenant_id, data["supplier_id"])

    nullable = {"supplier_id", "chave_acesso", "data_entrada"}
    for k, v in data.items():
        if v is None and k not in nullable:
            continue
        setattr(nota, k, v)

    if nota.data_entrada and nota.data_entrada < nota.data_emissao:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_PERIOD",
            "message": "data_entrada não pode ser anterior a data_emissao",
        })
    _fechar_total(nota)

    commit_or_raise(db, duplicate_message="Nota fiscal já cadastrada (tipo/série/número)", what="nota_fiscal")
    db.refresh(nota)
    return nota


@router.post("/{nota_id}/cancelar", response_model=NotaFiscalOut)
def cancelar_nota(nota_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    nota = _get_or_404(db, tenant_id, nota_id)
    if nota.status != "autorizada":
        raise conflict("INVALID_STATE", f"Nota {nota.status} não pode ser cancelada", status=nota.status)
    nota.status = "cancelada"
    commit_or_raise(db, duplicate_message="Nota fiscal já cadastrada", what="nota_fiscal")
    db.refresh(nota)
    logger.info("nota fiscal cancelada id=%s tenant=%s numero=%s", nota.id, tenant_id, nota.numero)
    return nota


@router.delete("/{nota_id}", status_code=204)
def delete_nota(nota_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    nota = _get_or_404(db, tenant_id, nota_id)
    db.delete(nota)
    commit_or_raise(db, duplicate_message="Nota fiscal em uso", what="nota_fiscal")
    return Response(status_code=204)
