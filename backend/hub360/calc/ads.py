from __future__ import annotations

from decimal import Decimal

from hub360.calc.money import money, pct, require_non_negative, safe_div


def ads_metrics(impressions, clicks, orders, spend, revenue) -> dict:
    """Métricas de campanha (Amazon Ads / ML Ads). Denominador zero => 0."""
    imp = require_non_negative(impressions, "impressions")
    clk = require_non_negative(clicks, "clicks")
    ords = require_non_negative(orders, "orders")
    sp = require_non_negative(spend, "spend")
    rev = require_non_negative(revenue, "revenue")

    return {
        "ctr_pct": str(pct(safe_div(clk, imp) * 100)),
        "cvr_pct": str(pct(safe_div(ords, clk) * 100)),
        "cpc": str(money(safe_div(sp, clk))),
        "cpa": str(money(safe_div(sp, ords))),
        "roas": str(safe_div(rev, sp).quantize(Decimal("0.01"))),
        "acos_pct": str(pct(safe_div(sp, rev) * 100)),
    }


def tacos(spend, total_revenue) -> Decimal:
    """TACoS: gasto em ads sobre o faturamento total (orgânico + pago)."""
    sp = require_non_negative(spend, "spend")
    tot = require_non_negative(total_revenue, "total_revenue")
    return pct(safe_div(sp, tot) * 100)
