from pydantic import BaseModel


class Period(BaseModel):
    start: str
    end: str


class Totals(BaseModel):
    receitas_cents: int
    despesas_cents: int
    saldo_cents: int
    qtd_pagos: int


class Pendencias(BaseModel):
    a_receber_cents: int
    a_pagar_cents: int
    vencidos_cents: int
    qtd_vencidos: int


class StatusBreakdown(BaseModel):
    status: str
    qtd: int
    valor_cents: int


class SummaryResponse(BaseModel):
    empresa_id: int
    period: Period
    totals: Totals
    pendencias: Pendencias
    by_status: list[StatusBreakdown]


class DailyPoint(BaseModel):
    date: str
    receitas_cents: int
    despesas_cents: int
    saldo_cents: int


class DailyResponse(BaseModel):
    empresa_id: int
    period: Period
    series: list[DailyPoint]
