from datetime import date, timedelta

from conftest import create_empresa


def _seed(client, headers, empresa_id):
    hoje = date.today()

    def post(**payload):
        r = client.post("/lancamentos", json={"empresa_id": empresa_id, **payload}, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()

    venda = post(tipo="receita", valor_cents=10000, descricao="Vendas ML")
    compra = post(tipo="despesa", valor_cents=4000, descricao="Embalagens")
    client.post(f"/lancamentos/{venda['id']}/pagar", json={}, headers=headers)
    client.post(f"/lancamentos/{compra['id']}/pagar", json={}, headers=headers)

    post(tipo="receita", valor_cents=5000, descricao="Repasse Amazon")
    post(
        tipo="despesa", valor_cents=2000, descricao="Aluguel",
        data_lancamento=(hoje - timedelta(days=10)).isoformat(),
        data_vencimento=(hoje - timedelta(days=3)).isoformat(),
    )


def test_reports_summary_returns_404_for_invalid_empresa(client, auth_header):
    r = client.get("/reports/summary", params={"empresa_id": 999999}, headers=auth_header)
    assert r.status_code == 404
    assert r.json()["detail"]["error_code"] == "EMPRESA_NOT_FOUND"


def test_reports_summary_is_isolated_per_tenant(client, auth_header, other_tenant_header):
    e = create_empresa(client, auth_header)
    r = client.get("/reports/summary", params={"empresa_id": e["id"]}, headers=other_tenant_header)
    assert r.status_code == 404


def test_reports_summary_totals(client, auth_header):
    e = create_empresa(client, auth_header)
    _seed(client, auth_header, e["id"])

    r = client.get("/reports/summary", params={"empresa_id": e["id"]}, headers=auth_header)
    assert r.status_code == 200
    body = r.json()

    assert body["totals"] == {
        "receitas_cents": 10000,
        "despesas_cents": 4000,
        "saldo_cents": 6000,
        "qtd_pagos": 2,
    }
    assert body["pendencias"] == {
        "a_receber_cents": 5000,
        "a_pagar_cents": 2000,
        "vencidos_cents": 2000,
        "qtd_vencidos": 1,
    }
    assert body["by_status"] == [
        {"status": "pago", "qtd": 2, "valor_cents": 14000},
        {"status": "pendente", "qtd": 1, "valor_cents": 5000},
        {"status": "vencido", "qtd": 1, "valor_cents": 2000},
    ]
    assert body["period"]["end"] == date.today().isoformat()


def test_reports_summary_empty_period(client, auth_header):
    e = create_empresa(client, auth_header)
    _seed(client, auth_header, e["id"])

    r = client.get(
        "/reports/summary",
        params={"empresa_id": e["id"], "start": "2020-01-01", "end": "2020-01-31"},
        headers=auth_header,
    )
    body = r.json()
    assert body["totals"]["qtd_pagos"] == 0
    assert body["by_status"] == []
    # pendências são a posição atual, não dependem do período
    assert body["pendencias"]["qtd_vencidos"] == 1


def test_reports_period_validation(client, auth_header):
    e = create_empresa(client, auth_header)

    r = client.get(
        "/reports/summary",
        params={"empresa_id": e["id"], "start": "2025-02-01", "end": "2025-01-01"},
        headers=auth_header,
    )
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == "INVALID_PERIOD"

    r = client.get("/reports/summary", params={"empresa_id": e["id"], "start": "01/02/2025"}, headers=auth_header)
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == "INVALID_DATE"

    r = client.get(
        "/reports/summary",
        params={"empresa_id": e["id"], "start": "2025-01-01T10:00:00", "end": "2025-01-31"},
        headers=auth_header,
    )
    assert r.status_code == 200
    assert r.json()["period"] == {"start": "2025-01-01", "end": "2025-01-31"}


def test_reports_daily_series(client, auth_header):
    e = create_empresa(client, auth_header)
    _seed(client, auth_header, e["id"])

    r = client.get("/reports/daily", params={"empresa_id": e["id"]}, headers=auth_header)
    assert r.status_code == 200
    series = r.json()["series"]
    assert series == [
        {
            "date": date.today().isoformat(),
            "receitas_cents": 10000,
            "despesas_cents": 4000,
            "saldo_cents": 6000,
        }
    ]
