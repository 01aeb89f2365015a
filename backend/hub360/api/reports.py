from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from hub360.api.empresa import get_empresa_or_404
from hub360.core.tenant import get_current_tenant_id
from hub360.deps import get_db
from hub360.models.lancamento import Lancamento
from hub360.schemas.reports import (
    DailyPoint,
    DailyResponse,
    Pendencias,
    Period,
    StatusBreakdown,
    SummaryResponse,
    Totals,
)

router = APIRouter(prefix="/reports", tags=["reports"])

DEFAULT_WINDOW_DAYS = 30


def _parse_iso_date(s: str, *, field: str) -> date:
    """Aceita YYYY-MM-DD ou ISO datetime (usa só a data)."""
    raw = (s or "").strip()
    if not raw:
        raise HTTPException(
            status_code=422,
            detail={"error_code": "INVALID_DATE", "message": "Data vazia", "field": field, "value": s},
        )
    try:
        return date.fromisoformat(raw.replace(" ", "T")[:10])
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail={
                "error_code": "INVALID_DATE",
                "field": field,
                "value": raw,
                "expected": ["YYYY-MM-DD", "YYYY-MM-DDTHH:MM:SS"],
            },
        )


def _resolve_period(start: str | None, end: str | None, today: date | None = None) -> tuple[date, date, Period]:
    today = today or date.today()

    if start is None and end is None:
        end_d = today
        start_d = today - timedelta(days=DEFAULT_WINDOW_DAYS)
    elif start is not None and end is None:
        start_d = _parse_iso_date(start, field="start")
        end_d = today
    elif start is None and end is not None:
        end_d = _parse_iso_date(end, field="end")
        start_d = end_d - timedelta(days=DEFAULT_WINDOW_DAYS)
    else:
        start_d = _parse_iso_date(start, field="start")
        end_d = _parse_iso_date(end, field="end")

    if start_d > end_d:
        raise HTTPException(status_code=422, detail={
            "error_code": "INVALID_PERIOD",
            "message": "start não pode ser maior que end",
            "start": start_d.isoformat(),
            "end": end_d.isoformat(),
        })

    return start_d, end_d, Period(start=start_d.isoformat(), end=end_d.isoformat())


def _sum_tipo(tipo: str, col):
    return func.coalesce(func.sum(case((Lancamento.tipo == tipo, col), else_=0)), 0)


def _totals_row(db: Session, tenant_id: int, empresa_id: int, start_d: date, end_d: date) -> Totals:
    """Realizado: lançamentos pagos com data de pagamento no período."""
    q = select(
        _sum_tipo("receita", Lancamento.valor_pago_cents).label("rec"),
        _sum_tipo("despesa", Lancamento.valor_pago_cents).label("desp"),
        func.count(Lancamento.id).label("cnt"),
    ).where(
        Lancamento.tenant_id == tenant_id,
        Lancamento.empresa_id == empresa_id,
        Lancamento.status == "pago",
        Lancamento.data_pagamento >= start_d,
        Lancamento.data_pagamento <= end_d,
    )
    r = db.execute(q).one()
    receitas = int(r.rec or 0)
    despesas = int(r.desp or 0)
    return Totals(
        receitas_cents=receitas,
        despesas_cents=despesas,
        saldo_cents=receitas - despesas,
        qtd_pagos=int(r.cnt or 0),
    )


def _pendencias(db: Session, tenant_id: int, empresa_id: int, today: date) -> Pendencias:
    """Posição atual (independe do período): tudo que está pendente hoje."""
    vencido = (Lancamento.data_vencimento.is_not(None)) & (Lancamento.data_vencimento < today)
    q = select(
        _sum_tipo("receita", Lancamento.valor_cents).label("a_receber"),
        _sum_tipo("despesa", Lancamento.valor_cents).label("a_pagar"),
        func.coalesce(func.sum(case((vencido, Lancamento.valor_cents), else_=0)), 0).label("venc"),
        func.coalesce(func.sum(case((vencido, 1), else_=0)), 0).label("qtd_venc"),
    ).where(
        Lancamento.tenant_id == tenant_id,
        Lancamento.empresa_id == empresa_id,
        Lancamento.status == "pendente",
    )
    r = db.execute(q).one()
    return Pendencias(
        a_receber_cents=int(r.a_receber or 0),
        a_pagar_cents=int(r.a_pagar or 0),
        vencidos_cents=int(r.venc or 0),
        qtd_vencidos=int(r.qtd_venc or 0),
    )


def _by_status(db: Session, tenant_id: int, empresa_id: int, start_d: date, end_d: date, today: date) -> list[StatusBreakdown]:
    status_efetivo = case(
        (
            (Lancamento.status == "pendente")
            & Lancamento.data_vencimento.is_not(None)
            & (Lancamento.data_vencimento < today),
            "vencido",
        ),
        else_=Lancamento.status,
    ).label("status_efetivo")

    q = (
        select(
            status_efetivo,
            func.count(Lancamento.id).label("cnt"),
            func.coalesce(func.sum(Lancamento.valor_cents), 0).label("total"),
        )
        .where(
            Lancamento.tenant_id == tenant_id,
            Lancamento.empresa_id == empresa_id,
            Lancamento.data_lancamento >= start_d,
            Lancamento.data_lancamento <= end_d,
        )
        .group_by(status_efetivo)
        .order_by(status_efetivo)
    )
    return [
        StatusBreakdown(status=str(r.status_efetivo), qtd=int(r.cnt or 0), valor_cents=int(r.total or 0))
        for r in db.execute(q).all()
    ]


@router.get("/summary", response_model=SummaryResponse)
def summary(
    empresa_id: int = Query(..., ge=1),
    start: str | None = Query(None, description="YYYY-MM-DD ou ISO datetime"),
    end: str | None = Query(None, description="YYYY-MM-DD ou ISO datetime"),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    get_empresa_or_404(db, tenant_id, empresa_id)
    today = date.today()
    start_d, end_d, period = _resolve_period(start, end, today)
    return SummaryResponse(
        empresa_id=empresa_id,
        period=period,
        totals=_totals_row(db, tenant_id, empresa_id, start_d, end_d),
        pendencias=_pendencias(db, tenant_id, empresa_id, today),
        by_status=_by_status(db, tenant_id, empresa_id, start_d, end_d, today),
    )


@router.get("/daily", response_model=DailyResponse)
def daily(
    empresa_id: int = Query(..., ge=1),
    start: str | None = Query(None),
    end: str | None = Query(None),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    get_empresa_or_404(db, tenant_id, empresa_id)
    start_d, end_d, period = _resolve_period(start, end)

    day = Lancamento.data_pagamento.label("day")
    q = (
        select(
            day,
            _sum_tipo("receita", Lancamento.valor_pago_cents).label("rec"),
            _sum_tipo("despesa", Lancamento.valor_pago_cents).label("desp"),
        )
        .where(
            Lancamento.tenant_id == tenant_id,
            Lancamento.empresa_id == empresa_id,
            Lancamento.status == "pago",
            Lancamento.data_pagamento >= start_d,
            Lancamento.data_pagamento <= end_d,
        )
        .group_by(day)
        .order_by(day.asc())
    )

    series: list[DailyPoint] = []
    for r in db.execute(q).all():
        receitas = int(r.rec or 0)
        despesas = int(r.desp or 0)
        series.append(
            DailyPoint(
                date=str(r.day),
                receitas_cents=receitas,
                despesas_cents=despesas,
                saldo_cents=receitas - despesas,
            )
        )

    return DailyResponse(empresa_id=empresa_id, period=period, series=series)
