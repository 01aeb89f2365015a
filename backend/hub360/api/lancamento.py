import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hub360.api.common import PageParams, paginate
from hub360.api.conta_bancaria import get_conta_or_404
from hub360.api.empresa import get_empresa_or_404
from hub360.api.supplier import get_supplier_or_404
from hub360.core.errors import commit_or_raise, conflict, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.conta_bancaria import ContaBancaria
from hub360.models.lancamento import Lancamento
from hub360.schemas.common import Page
from hub360.schemas.lancamento import LancamentoCreate, LancamentoOut, LancamentoPagar, LancamentoUpdate

router = APIRouter(prefix="/lancamentos", tags=["lancamentos"])

logger = logging.getLogger(__name__)


def _out(lanc: Lancamento, hoje: date | None = None) -> LancamentoOut:
    out = LancamentoOut.model_validate(lanc, from_attributes=True)
    out.status = lanc.status_efetivo(hoje or date.today())
    return out


def _get_or_404(db: Session, tenant_id: int, lancamento_id: int) -> Lancamento:
    lanc = db.scalar(select(Lancamento).where(Lancamento.id == lancamento_id, Lancamento.tenant_id == tenant_id))
    if not lanc:
        raise not_found("lancamento", lancamento_id, "Lançamento não encontrado")
    return lanc


def _conta_da_empresa(db: Session, tenant_id: int, conta_id: int, empresa_id: int) -> ContaBancaria:
    conta = get_conta_or_404(db, tenant_id, conta_id)
    if conta.empresa_id != empresa_id:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_REFERENCE",
            "field": "conta_bancaria_id",
            "message": "Conta bancária pertence a outra empresa",
        })
    return conta


def parse_date(value: str | None, field: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_DATE",
            "field": field,
            "value": value,
            "expected": ["YYYY-MM-DD"],
        })


@router.post("", response_model=LancamentoOut, status_code=201)
def create_lancamento(payload: LancamentoCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    get_empresa_or_404(db, tenant_id, payload.empresa_id)
    if payload.supplier_id is not None:
        get_supplier_or_404(db, tenant_id, payload.supplier_id)
    if payload.conta_bancaria_id is not None:
        _conta_da_empresa(db, tenant_id, payload.conta_bancaria_id, payload.empresa_id)

    lanc = Lancamento(tenant_id=tenant_id, status="pendente", **payload.model_dump())
    db.add(lanc)
    commit_or_raise(db, duplicate_message="Lançamento duplicado", what="lancamento")
    db.refresh(lanc)
    return _out(lanc)


@router.get("", response_model=Page[LancamentoOut])
def list_lancamentos(
    empresa_id: int | None = Query(None, ge=1),
    tipo: str | None = Query(None, pattern="^(receita|despesa)$"),
    status: str | None = Query(None, pattern="^(pendente|pago|cancelado|vencido)$"),
    start: str | None = Query(None, description="YYYY-MM-DD (data de vencimento, ou lançamento se sem vencimento)"),
    end: str | None = Query(None, description="YYYY-MM-DD"),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    hoje = date.today()
    stmt = select(Lancamento).where(Lancamento.tenant_id == tenant_id)
    if empresa_id is not None:
        stmt = stmt.where(Lancamento.empresa_id == empresa_id)
    if tipo:
        stmt = stmt.where(Lancamento.tipo == tipo)
    if status == "vencido":
        stmt = stmt.where(Lancamento.status == "pendente", Lancamento.data_vencimento < hoje)
    elif status == "pendente":
        stmt = stmt.where(
            Lancamento.status == "pendente",
            (Lancamento.data_vencimento.is_(None)) | (Lancamento.data_vencimento >= hoje),
        )
    elif status:
        stmt = stmt.where(Lancamento.status == status)

    start_d = parse_date(start, "start")
    end_d = parse_date(end, "end")
    if start_d and end_d and start_d > end_d:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_PERIOD",
            "message": "start não pode ser maior que end",
        })
    ref = func.coalesce(Lancamento.data_vencimento, Lancamento.data_lancamento)
    if start_d:
        stmt = stmt.where(ref >= start_d)
    if end_d:
        stmt = stmt.where(ref <= end_d)

    page = paginate(db, stmt.order_by(Lancamento.data_lancamento.desc(), Lancamento.id.desc()), params)
    page["items"] = [_out(l, hoje) for l in page["items"]]
    return page


@router.get("/{lancamento_id}", response_model=LancamentoOut)
def get_lancamento(lancamento_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return _out(_get_or_404(db, tenant_id, lancamento_id))


@router.patch("/{lancamento_id}", response_model=LancamentoOut)
def update_lancamento(
    lancamento_id: int,
    payload: LancamentoUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    lanc = _get_or_404(db, tenant_id, lancamento_id)
    if lanc.status != "pendente":
        raise conflict("INVALID_STATE", f"Lançamento {lanc.status} não pode ser alterado", status=lanc.status)

    data = payload.model_dump(exclude_unset=True)
    if data.get("supplier_id") is not None:
        get_supplier_or_404(db, tenant_id, data["supplier_id"])
    if data.get("conta_bancaria_id") is not None:
        _conta_da_empresa(db, tenant_id, data["conta_bancaria_id"], lanc.empresa_id)

    nullable = {"supplier_id", "conta_bancaria_id", "data_vencimento"}
    for k, v in data.items():
        if v is None and k not in nullable:
            continue
        setattr(lanc, k, v)

    if lanc.data_vencimento and lanc.data_vencimento < lanc.data_lancamento:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_PERIOD",
            "message": "data_vencimento não pode ser anterior a data_lancamento",
        })

    commit_or_raise(db, duplicate_message="Lançamento duplicado", what="lancamento")
    db.refresh(lanc)
    return _out(lanc)


@router.post("/{lancamento_id}/pagar", response_model=LancamentoOut)
def pagar_lancamento(
    lancamento_id: int,
    payload: LancamentoPagar | None = None,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    lanc = _get_or_404(db, tenant_id, lancamento_id)
    if lanc.status != "pendente":
        raise conflict("INVALID_STATE", f"Lançamento {lanc.status} não pode ser pago", status=lanc.status)

    payload = payload or LancamentoPagar()
    for k in ("juros_cents", "multa_cents", "desconto_cents"):
        v = getattr(payload, k)
        if v is not None:
            setattr(lanc, k, v)

    pago_em = payload.data_pagamento or date.today()
    if pago_em < lanc.data_lancamento:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_PERIOD",
            "message": "data_pagamento não pode ser anterior a data_lancamento",
        })

    valor_pago = lanc.valor_cents + lanc.juros_cents + lanc.multa_cents - lanc.desconto_cents
    if valor_pago < 0:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_AMOUNT",
            "message": "desconto maior que o valor devido",
        })

    conta_id = payload.conta_bancaria_id if payload.conta_bancaria_id is not None else lanc.conta_bancaria_id
    if conta_id is not None:
        conta = _conta_da_empresa(db, tenant_id, conta_id, lanc.empresa_id)
        conta.movimentar(lanc.tipo, valor_pago)
        lanc.conta_bancaria_id = conta_id

    lanc.valor_pago_cents = valor_pago
    lanc.data_pagamento = pago_em
    lanc.status = "pago"
    commit_or_raise(db, duplicate_message="Lançamento duplicado", what="lancamento")
    db.refresh(lanc)
    logger.info("lancamento pago id=%s tenant=%s valor_pago_cents=%s", lanc.id, tenant_id, valor_pago)
    return _out(lanc)


@router.post("/{lancamento_id}/cancelar", response_model=LancamentoOut)
def cancelar_lancamento(lancamento_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    lanc = _get_or_404(db, tenant_id, lancamento_id)
    if lanc.status != "pendente":
        raise conflict("INVALID_STATE", f"Lançamento {lanc.status} não pode ser cancelado", status=lanc.status)
    lanc.status = "cancelado"
    commit_or_raise(db, duplicate_message="Lançamento duplicado", what="lancamento")
    db.refresh(lanc)
    return _out(lanc)


@router.delete("/{lancamento_id}", status_code=204)
def delete_lancamento(lancamento_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    lanc = _get_or_404(db, tenant_id, lancamento_id)
    # estorna o efeito do pagamento no saldo da conta
    if lanc.status == "pago" and lanc.conta_bancaria_id is not None and lanc.valor_pago_cents:
        conta = get_conta_or_404(db, tenant_id, lanc.conta_bancaria_id)
        conta.movimentar(lanc.tipo, -lanc.valor_pago_cents)
    db.delete(lanc)
    commit_or_raise(db, duplicate_message="Lançamento em uso", what="lancamento")
    return Response(status_code=204)
