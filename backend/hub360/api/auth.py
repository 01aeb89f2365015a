import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hub360.core.security import create_access_token, hash_password, verify_password
from hub360.core.tenant import CurrentMember, get_current_member
from hub360.deps import get_db
from hub360.models.tenant import Tenant, TenantMember
from hub360.schemas.auth import LoginIn, MeOut, RegisterIn, TokenOut

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)

# hash fixo para igualar o custo de login quando o email não existe
_DUMMY_HASH = hash_password("hub360-timing-guard")


@router.post("/register", response_model=TokenOut, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    exists = db.scalar(select(TenantMember.id).where(TenantMember.email == payload.email))
    if exists:
        raise HTTPException(
            status_code=409,
            detail={"error_code": "DUPLICATE", "message": "email já cadastrado"},
        )

    tenant = Tenant(name=payload.tenant_name.strip())
    member = TenantMember(
        email=payload.email,
        name=payload.name.strip(),
        password_hash=hash_password(payload.password),
        role="owner",
        tenant=tenant,
    )
    db.add(tenant)
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=409,
            detail={"error_code": "DUPLICATE", "message": "email já cadastrado"},
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("DB error registering tenant")
        raise HTTPException(status_code=503, detail="Database unavailable")

    logger.info("tenant registrado id=%s", tenant.id)
    return TokenOut(access_token=create_access_token(sub=member.email, tenant_id=tenant.id), tenant_id=tenant.id)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    member = db.scalar(select(TenantMember).where(TenantMember.email == email))

    if member is None:
        verify_password(payload.password, _DUMMY_HASH)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not verify_password(payload.password, member.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_access_token(sub=member.email, tenant_id=member.tenant_id)
    return TokenOut(access_token=token, tenant_id=member.tenant_id)


@router.get("/me", response_model=MeOut)
def me(member: CurrentMember = Depends(get_current_member)):
    return MeOut(sub=member.email, tenant_id=member.tenant_id, role=member.role)
