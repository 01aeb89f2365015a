from fastapi import APIRouter, Depends, Response
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from hub360.core.errors import commit_or_raise, conflict, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.pricing import CategoryCommission
from hub360.models.product import Department, Product
from hub360.schemas.product import DepartmentCreate, DepartmentOut, DepartmentUpdate

router = APIRouter(prefix="/departments", tags=["departments"])


def get_department_or_404(db: Session, tenant_id: int, department_id: int) -> Department:
    d = db.scalar(select(Department).where(Department.id == department_id, Department.tenant_id == tenant_id))
    if not d:
        raise not_found("department", department_id, "Departamento não encontrado")
    return d


def _ensure_unique_name(db: Session, tenant_id: int, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Department.id).where(Department.tenant_id == tenant_id, Department.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Department.id != exclude_id)
    if db.scalar(stmt):
        raise conflict("DUPLICATE", "Departamento já cadastrado", name=name)


@router.post("", response_model=DepartmentOut, status_code=201)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    name = payload.name.strip()
    _ensure_unique_name(db, tenant_id, name)
    d = Department(tenant_id=tenant_id, name=name, description=payload.description)
    db.add(d)
    commit_or_raise(db, duplicate_message="Departamento já cadastrado", what="department")
    db.refresh(d)
    return d


@router.get("", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return list(db.scalars(select(Department).where(Department.tenant_id == tenant_id).order_by(Department.name)))


@router.patch("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    d = get_department_or_404(db, tenant_id, department_id)
    if payload.name is not None:
        name = payload.name.strip()
        _ensure_unique_name(db, tenant_id, name, exclude_id=d.id)
        d.name = name
    if payload.description is not None:
        d.description = payload.description
    commit_or_raise(db, duplicate_message="Departamento já cadastrado", what="department")
    db.refresh(d)
    return d


@router.delete("/{department_id}", status_code=204)
def delete_department(department_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    d = get_department_or_404(db, tenant_id, department_id)
    db.execute(update(Product).where(Product.tenant_id == tenant_id, Product.department_id == d.id).values(department_id=None))
    db.execute(delete(CategoryCommission).where(CategoryCommission.tenant_id == tenant_id, CategoryCommission.department_id == d.id))
    db.delete(d)
    commit_or_raise(db, duplicate_message="Departamento em uso", what="department")
    return Response(status_code=204)
