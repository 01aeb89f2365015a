from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from hub360.core.security import require_auth
from hub360.deps import get_db
from hub360.models.tenant import TenantMember
from hub360.tenant_context import set_tenant_on_session


@dataclass(frozen=True)
class CurrentMember:
    id: int
    email: str
    tenant_id: int
    role: str


def get_current_member(
    payload: dict = Depends(require_auth),
    db: Session = Depends(get_db),
) -> CurrentMember:
    """
    Resolve o membro pelo email (sub) do JWT e injeta o tenant na MESMA
    sessão do request.
    """
    email = payload.get("sub")
    if not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="token inválido (sub ausente)",
        )

    member = db.scalar(select(TenantMember).where(TenantMember.email == email))
    if not member:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="usuário não pertence a nenhum tenant",
        )

    # token emitido para outro tenant (membro migrado) não vale mais
    tid = payload.get("tid")
    if tid is not None and int(tid) != member.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="token inválido (tenant divergente)",
        )

    set_tenant_on_session(db, member.tenant_id)
    return CurrentMember(id=member.id, email=member.email, tenant_id=member.tenant_id, role=member.role)


def get_current_tenant_id(member: CurrentMember = Depends(get_current_member)) -> int:
    return member.tenant_id
