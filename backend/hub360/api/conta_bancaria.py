import logging

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hub360.api.empresa import get_empresa_or_404
from hub360.core.errors import commit_or_raise, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.conta_bancaria import ContaBancaria
from hub360.models.lancamento import Lancamento
from hub360.schemas.conta_bancaria import ContaBancariaCreate, ContaBancariaOut, ContaBancariaUpdate

router = APIRouter(prefix="/contas-bancarias", tags=["contas-bancarias"])

logger = logging.getLogger(__name__)


def get_conta_or_404(db: Session, tenant_id: int, conta_id: int) -> ContaBancaria:
    c = db.scalar(select(ContaBancaria).where(ContaBancaria.id == conta_id, ContaBancaria.tenant_id == tenant_id))
    if not c:
        raise not_found("conta_bancaria", conta_id, "Conta bancária não encontrada")
    return c


@router.post("", response_model=ContaBancariaOut, status_code=201)
def create_conta(payload: ContaBancariaCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    get_empresa_or_404(db, tenant_id, payload.empresa_id)
    c = ContaBancaria(tenant_id=tenant_id, saldo_atual_cents=payload.saldo_inicial_cents, **payload.model_dump())
    db.add(c)
    commit_or_raise(db, duplicate_message="Conta bancária já cadastrada", what="conta_bancaria")
    db.refresh(c)
    return c


@router.get("", response_model=list[ContaBancariaOut])
def list_contas(
    empresa_id: int | None = Query(None, ge=1),
    active: bool | None = Query(None),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(ContaBancaria).where(ContaBancaria.tenant_id == tenant_id)
    if empresa_id is not None:
        stmt = stmt.where(ContaBancaria.empresa_id == empresa_id)
    if active is not None:
        stmt = stmt.where(ContaBancaria.active.is_(active))
    return db.scalars(stmt.order_by(ContaBancaria.banco, ContaBancaria.id)).all()


@router.get("/{conta_id}", response_model=ContaBancariaOut)
def get_conta(conta_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return get_conta_or_404(db, tenant_id, conta_id)


@router.patch("/{conta_id}", response_model=ContaBancariaOut)
def update_conta(
    conta_id: int,
    payload: ContaBancariaUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    c = get_conta_or_404(db, tenant_id, conta_id)
    data = payload.model_dump(exclude_unset=True)

    # novo saldo inicial desloca o saldo atual pela diferença
    novo_inicial = data.pop("saldo_inicial_cents", None)
    if novo_inicial is not None:
        c.saldo_atual_cents += novo_inicial - c.saldo_inicial_cents
        c.saldo_inicial_cents = novo_inicial

    for k, v in data.items():
        if v is None:
            continue
        setattr(c, k, v)
    commit_or_raise(db, duplicate_message="Conta bancária já cadastrada", what="conta_bancaria")
    db.refresh(c)
    return c


@router.delete("/{conta_id}", status_code=204)
def delete_conta(conta_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    c = get_conta_or_404(db, tenant_id, conta_id)
    db.execute(
        update(Lancamento)
        .where(Lancamento.tenant_id == tenant_id, Lancamento.conta_bancaria_id == c.id)
        .values(conta_bancaria_id=None)
    )
    db.delete(c)
    commit_or_raise(db, duplicate_message="Conta bancária em uso", what="conta_bancaria")
    logger.info("conta bancaria removida id=%s tenant=%s", conta_id, tenant_id)
    return Response(status_code=204)
