import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from hub360.api.common import PageParams, like_term, paginate
from hub360.core.errors import commit_or_raise, not_found
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.simulation import ImportSimulation
from hub360.schemas.common import Page
from hub360.schemas.simulation import (
    FormalCalculateIn,
    FormalConfigIn,
    FormalProductIn,
    ImportResultOut,
    SimplifiedCalculateIn,
    SimplifiedConfigIn,
    SimplifiedProductIn,
    SimulationBrief,
    SimulationCreate,
    SimulationOut,
    SimulationUpdate,
)
from hub360.services import simulations as sim_service
from hub360.services.pdf import build_simulation_pdf

router = APIRouter(prefix="/simulations", tags=["simulations"])

logger = logging.getLogger(__name__)

# schemas de entrada por tipo (config, produto)
_INPUTS = {
    "simplificada": (SimplifiedConfigIn, SimplifiedProductIn),
    "formal": (FormalConfigIn, FormalProductIn),
}


def _normalize(kind: str, config: dict, produtos: list[dict]) -> tuple[dict, list[dict]]:
    """Valida o JSON livre contra o schema do tipo e devolve a forma canônica."""
    config_cls, product_cls = _INPUTS[kind]
    try:
        cfg = config_cls.model_validate(config or {})
        items = TypeAdapter(list[product_cls]).validate_python(produtos or [])
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_SIMULATION",
            "message": "config ou produtos inválidos",
            "errors": e.errors(include_url=False, include_context=False, include_input=False),
        })
    return cfg.model_dump(mode="json"), [p.model_dump(mode="json") for p in items]


def _recalculate(sim: ImportSimulation) -> None:
    if sim.products:
        sim.result = sim_service.run_calculation(sim.kind, sim.config, sim.products)
    else:
        sim.result = None


def _get_or_404(db: Session, tenant_id: int, simulation_id: int) -> ImportSimulation:
    sim = db.scalar(select(ImportSimulation).where(
        ImportSimulation.id == simulation_id, ImportSimulation.tenant_id == tenant_id,
    ))
    if not sim:
        raise not_found("simulation", simulation_id, "Simulação não encontrada")
    return sim


# --- cálculo avulso (sem persistir) ------------------------------------------

@router.post("/simplified/calculate", response_model=ImportResultOut)
def calculate_simplified(payload: SimplifiedCalculateIn):
    cfg, produtos = payload.config.model_dump(), [p.model_dump() for p in payload.produtos]
    return sim_service.run_calculation("simplificada", cfg, produtos)


@router.post("/formal/calculate", response_model=ImportResultOut)
def calculate_formal(payload: FormalCalculateIn):
    cfg, produtos = payload.config.model_dump(), [p.model_dump() for p in payload.produtos]
    return sim_service.run_calculation("formal", cfg, produtos)


# --- simulações salvas -------------------------------------------------------

@router.post("", response_model=SimulationOut, status_code=201)
def create_simulation(payload: SimulationCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    config, produtos = _normalize(payload.kind, payload.config, payload.produtos)
    sim = ImportSimulation(
        tenant_id=tenant_id,
        kind=payload.kind,
        code=sim_service.new_code(db),
        name=payload.name.strip(),
        supplier_name=payload.supplier_name.strip(),
        status=payload.status,
        observacoes=payload.observacoes,
        config=config,
        products=produtos,
    )
    _recalculate(sim)
    db.add(sim)
    commit_or_raise(db, duplicate_message="Código de simulação duplicado", what="simulation")
    db.refresh(sim)
    logger.info("simulation created id=%s kind=%s tenant=%s", sim.id, sim.kind, tenant_id)
    return sim


@router.get("", response_model=Page[SimulationBrief])
def list_simulations(
    kind: str | None = Query(None, pattern="^(simplificada|formal)$"),
    status: str | None = Query(None),
    q: str | None = Query(None, description="busca por nome ou código"),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    stmt = select(ImportSimulation).where(ImportSimulation.tenant_id == tenant_id)
    if kind:
        stmt = stmt.where(ImportSimulation.kind == kind)
    if status:
        stmt = stmt.where(ImportSimulation.status == status)
    if q and q.strip():
        term = like_term(q)
        stmt = stmt.where(
            ImportSimulation.name.ilike(term, escape="\\") | ImportSimulation.code.ilike(term, escape="\\")
        )
    return paginate(db, stmt.order_by(ImportSimulation.updated_at.desc(), ImportSimulation.id.desc()), params)


@router.get("/{simulation_id}", response_model=SimulationOut)
def get_simulation(simulation_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return _get_or_404(db, tenant_id, simulation_id)


@router.patch("/{simulation_id}", response_model=SimulationOut)
def update_simulation(
    simulation_id: int,
    payload: SimulationUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    sim = _get_or_404(db, tenant_id, simulation_id)
    data = payload.model_dump(exclude_unset=True)

    for k in ("name", "supplier_name", "status", "observacoes"):
        if data.get(k) is not None:
            setattr(sim, k, data[k].strip() if k in ("name", "supplier_name") else data[k])

    if data.get("config") is not None or data.get("produtos") is not None:
        config = data["config"] if data.get("config") is not None else sim.config
        produtos = data["produtos"] if data.get("produtos") is not None else sim.products
        sim.config, sim.products = _normalize(sim.kind, config, produtos)
        _recalculate(sim)

    commit_or_raise(db, duplicate_message="Código de simulação duplicado", what="simulation")
    db.refresh(sim)
    return sim


@router.delete("/{simulation_id}", status_code=204)
def delete_simulation(simulation_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    sim = _get_or_404(db, tenant_id, simulation_id)
    db.delete(sim)
    commit_or_raise(db, duplicate_message="Simulação em uso", what="simulation")
    return Response(status_code=204)


@router.post("/{simulation_id}/duplicate", response_model=SimulationOut, status_code=201)
def duplicate_simulation(simulation_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    sim = _get_or_404(db, tenant_id, simulation_id)
    copy = sim_service.duplicate(db, sim)
    commit_or_raise(db, duplicate_message="Código de simulação duplicado", what="simulation")
    db.refresh(copy)
    return copy


@router.get("/{simulation_id}/pdf")
def export_simulation_pdf(simulation_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    sim = _get_or_404(db, tenant_id, simulation_id)
    pdf = build_simulation_pdf(sim)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="simulacao-{sim.code}.pdf"'},
    )
