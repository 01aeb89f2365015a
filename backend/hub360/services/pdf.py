from __future__ import annotations

import datetime as _dt
import logging
import os
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from hub360.calc.money import format_brl
from hub360.models.simulation import ImportSimulation

logger = logging.getLogger(__name__)

_DEJAVU_TTF = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"

# (chave, rótulo) das colunas por tipo de simulação
_COLS = {
    "simplificada": [
        ("quantidade", "Qtd"),
        ("custo_produto_brl", "Produto"),
        ("frete_brl", "Frete"),
        ("ii", "II"),
        ("icms", "ICMS"),
        ("custo_total", "Total"),
        ("custo_unitario", "Unit."),
    ],
    "formal": [
        ("quantidade", "Qtd"),
        ("valor_aduaneiro", "VA"),
        ("ii", "II"),
        ("ipi", "IPI"),
        ("icms", "ICMS"),
        ("custo_total", "Total"),
        ("custo_unitario", "Unit."),
    ],
}

_MONEY_TOTALS = {
    "custo_total": "Custo total",
    "custo_produto_brl": "Produtos (BRL)",
    "fob_brl": "FOB (BRL)",
    "frete_brl": "Frete",
    "ii": "II",
    "ipi": "IPI",
    "pis": "PIS",
    "cofins": "COFINS",
    "icms": "ICMS",
    "despesas_brl": "Despesas",
}


def _pdf_font_name() -> str:
    if os.path.exists(_DEJAVU_TTF):
        try:
            pdfmetrics.registerFont(TTFont("DejaVu", _DEJAVU_TTF))
            return "DejaVu"
        except Exception:
            logger.warning("falha ao registrar DejaVuSans; usando Helvetica")
    return "Helvetica"


def _cell(key: str, value) -> str:
    if value is None:
        return "-"
    if key == "quantidade":
        return str(value)
    return format_brl(value)


def build_simulation_pdf(sim: ImportSimulation) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    font = _pdf_font_name()
    width, height = A4

    title = f"Simulação de importação {sim.kind} - {sim.code}"
    c.setTitle(title)
    c.setFont(font, 15)
    c.drawString(20 * mm, height - 20 * mm, title)

    c.setFont(font, 10)
    y = height - 30 * mm
    generated_at = _dt.datetime.utcnow().isoformat(timespec="seconds") + "Z"
    for line in (
        f"Nome: {sim.name}",
        f"Fornecedor: {sim.supplier_name or '-'}",
        f"Status: {sim.status}",
        f"Gerado em: {generated_at}",
    ):
        c.drawString(20 * mm, y, line)
        y -= 6 * mm

    result = sim.result or {}
    produtos = result.get("produtos") or []
    totais = result.get("totais") or {}
    cols = _COLS.get(sim.kind, _COLS["simplificada"])

    y -= 4 * mm
    col_w = (width - 40 * mm - 50 * mm) / len(cols)

    def header(y0: float) -> float:
        c.setFont(font, 8)
        c.drawString(20 * mm, y0, "Produto")
        for i, (_, label) in enumerate(cols):
            c.drawRightString(20 * mm + 50 * mm + col_w * (i + 1), y0, label)
        return y0 - 5 * mm

    y = header(y)
    for p in produtos:
        if y < 25 * mm:
            c.showPage()
            y = header(height - 20 * mm)
        c.drawString(20 * mm, y, str(p.get("nome", ""))[:32])
        for i, (key, _) in enumerate(cols):
            c.drawRightString(20 * mm + 50 * mm + col_w * (i + 1), y, _cell(key, p.get(key)))
        y -= 5 * mm

    y -= 6 * mm
    if y < 60 * mm:
        c.showPage()
        y = height - 20 * mm
    c.setFont(font, 11)
    c.drawString(20 * mm, y, "Totais")
    y -= 7 * mm
    c.setFont(font, 10)
    for key, label in _MONEY_TOTALS.items():
        if key in totais:
            c.drawString(20 * mm, y, f"{label}: {format_brl(totais[key])}")
            y -= 6 * mm
    mult = totais.get("multiplicador_importacao") or totais.get("multiplicador")
    if mult:
        c.drawString(20 * mm, y, f"Multiplicador: {mult}x")

    c.showPage()
    c.save()
    return buf.getvalue()
