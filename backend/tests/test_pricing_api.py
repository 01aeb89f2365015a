from decimal import Decimal

from conftest import create_department, create_product


def test_channel_catalog(client, auth_header):
    r = client.get("/pricing/channels", headers=auth_header)
    assert r.status_code == 200
    keys = [c["key"] for c in r.json()]
    assert "amazon_fba" in keys and "ml_full" in keys and "shopee" in keys


def test_calculate_endpoint(client, auth_header):
    r = client.post(
        "/pricing/calculate",
        json={"channel": "ml_me1", "price": "100", "product_cost": "50", "shipping": "10"},
        headers=auth_header,
    )
    assert r.status_code == 200
    body = r.json()
    assert Decimal(body["profit"]) == Decimal("22")
    assert body["status"] == "Boa"
    assert Decimal(body["breakdown"]["commission"]) == Decimal("18")


def test_calculate_rejects_unknown_field_and_channel(client, auth_header):
    r = client.post("/pricing/calculate", json={"channel": "site", "price": 10, "preco": 1}, headers=auth_header)
    assert r.status_code == 422

    r = client.post("/pricing/calculate", json={"channel": "ebay", "price": 10}, headers=auth_header)
    assert r.status_code == 422
    assert r.json()["detail"] == {"error_code": "CALCULO_INVALIDO", "field": "channel", "message": "canal desconhecido: 'ebay'"}


def test_target_price_endpoint(client, auth_header):
    r = client.post(
        "/pricing/target-price",
        json={"channel": "site", "product_cost": "40", "tax_pct": "10", "target_margin_pct": "20"},
        headers=auth_header,
    )
    assert r.status_code == 200
    body = r.json()
    assert Decimal(body["target_price"]) == Decimal("57.14")
    assert Decimal(body["break_even_price"]) == Decimal("44.44")
    assert Decimal(body["result"]["margin_pct"]) == Decimal("20")


def test_target_price_unreachable(client, auth_header):
    r = client.post(
        "/pricing/target-price",
        json={"channel": "site", "product_cost": "40", "commission_pct": "60", "tax_pct": "30", "target_margin_pct": "20"},
        headers=auth_header,
    )
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == "CALCULO_INVALIDO"


def test_parse_brl_endpoint(client, auth_header):
    r = client.post("/pricing/parse-brl", json={"value": "R$ 1.234,56"}, headers=auth_header)
    assert r.status_code == 200
    assert Decimal(r.json()["value"]) == Decimal("1234.56")
    assert r.json()["formatted"] == "R$ 1.234,56"


def test_ads_metrics_endpoint(client, auth_header):
    r = client.post(
        "/pricing/ads-metrics",
        json={"impressions": 1000, "clicks": 50, "orders": 5, "spend": "100", "revenue": "500", "total_revenue": "2000"},
        headers=auth_header,
    )
    assert r.status_code == 200
    body = r.json()
    assert Decimal(body["acos_pct"]) == Decimal("20")
    assert Decimal(body["tacos_pct"]) == Decimal("5")


def test_settings_default_and_update(client, auth_header):
    r = client.get("/pricing/settings", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["state"] == "SP"

    r = client.put("/pricing/settings", json={"tax_pct": "6", "state": "rj", "target_margin_pct": "25"}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["state"] == "RJ"
    assert Decimal(client.get("/pricing/settings", headers=auth_header).json()["tax_pct"]) == Decimal("6")


def test_commission_and_freight_tables(client, auth_header):
    d = create_department(client, auth_header)
    r = client.post(
        "/pricing/commissions",
        json={"department_id": d["id"], "channel": "ml_me1", "price_from": "0", "price_to": "79", "commission_pct": "12"},
        headers=auth_header,
    )
    assert r.status_code == 201
    commission_id = r.json()["id"]

    r = client.post(
        "/pricing/commissions",
        json={"department_id": d["id"], "channel": "ml_me1", "price_from": "50", "price_to": "10", "commission_pct": "12"},
        headers=auth_header,
    )
    assert r.status_code == 422

    r = client.post(
        "/pricing/freight-rates",
        json={"channel": "amazon_fba", "state": "sp", "weight_from_kg": "0", "weight_to_kg": "0.5", "price": "9.90"},
        headers=auth_header,
    )
    assert r.status_code == 201
    assert r.json()["state"] == "SP"
    rate_id = r.json()["id"]

    assert len(client.get("/pricing/commissions", params={"department_id": d["id"]}, headers=auth_header).json()) == 1
    assert len(client.get("/pricing/freight-rates", params={"channel": "amazon_fba"}, headers=auth_header).json()) == 1

    assert client.delete(f"/pricing/commissions/{commission_id}", headers=auth_header).status_code == 204
    assert client.delete(f"/pricing/freight-rates/{rate_id}", headers=auth_header).status_code == 204
    assert client.delete(f"/pricing/freight-rates/{rate_id}", headers=auth_header).status_code == 404


# --- precificação do produto cadastrado --------------------------------------

def test_product_pricing_uses_product_and_tables(client, auth_header):
    d = create_department(client, auth_header)
    p = create_product(client, auth_header, department_id=d["id"], weight_kg="0.300", tax_pct="10")

    client.post(
        "/pricing/commissions",
        json={"department_id": d["id"], "channel": "amazon_fba", "price_from": "0", "commission_pct": "12"},
        headers=auth_header,
    )
    client.post(
        "/pricing/freight-rates",
        json={"channel": "amazon_fba", "state": "SP", "weight_from_kg": "0", "weight_to_kg": "0.5", "price": "8"},
        headers=auth_header,
    )

    r = client.put(f"/products/{p['id']}/channels/amazon_fba", json={"config": {"price": "100"}}, headers=auth_header)
    assert r.status_code == 200
    row = r.json()
    assert row["active"] is True
    assert row["config"] == {"price": "100"}

    calc = row["last_calculation"]
    # custo 40 + embalagem 2 + taxa FBA 8 + comissão 12 + imposto 10
    assert calc["breakdown"]["product_cost"] == "40.00"
    assert calc["breakdown"]["packaging"] == "2.00"
    assert calc["breakdown"]["fixed_fee"] == "8.00"
    assert calc["breakdown"]["commission"] == "12.00"
    assert calc["breakdown"]["tax"] == "10.00"
    assert calc["profit"] == "28.00"
    assert row["calculated_at"] is not None


def test_product_pricing_all_active_channels(client, auth_header):
    p = create_product(client, auth_header)

    r = client.post(f"/products/{p['id']}/pricing", json={}, headers=auth_header)
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == "NO_CHANNELS"

    client.put(f"/products/{p['id']}/channels/site", json={"config": {"price": "100"}}, headers=auth_header)
    client.put(f"/products/{p['id']}/channels/ml_me1", json={"config": {"price": "100"}}, headers=auth_header)

    r = client.post(f"/products/{p['id']}/pricing", json={}, headers=auth_header)
    assert r.status_code == 200
    body = r.json()
    assert [x["channel"] for x in body["results"]] == ["ml_me1", "site"]
    assert body["best_channel"] == "site"

    # override de preço só para o cálculo, sem salvar
    r = client.post(
        f"/products/{p['id']}/pricing",
        json={"channels": ["site"], "overrides": {"site": {"price": "200"}}},
        headers=auth_header,
    )
    assert Decimal(r.json()["results"][0]["price"]) == Decimal("200")
    saved = client.get(f"/products/{p['id']}/channels", headers=auth_header).json()
    assert {c["channel"]: c["config"]["price"] for c in saved}["site"] == "100"


def test_product_channel_deactivate(client, auth_header):
    p = create_product(client, auth_header)
    client.put(f"/products/{p['id']}/channels/shopee", json={"config": {"price": "50"}}, headers=auth_header)

    assert client.delete(f"/products/{p['id']}/channels/shopee", headers=auth_header).status_code == 204
    channels = client.get(f"/products/{p['id']}/channels", headers=auth_header).json()
    assert channels[0]["active"] is False

    r = client.delete(f"/products/{p['id']}/channels/site", headers=auth_header)
    assert r.status_code == 404

    r = client.post(f"/products/{p['id']}/pricing", json={}, headers=auth_header)
    assert r.json()["detail"]["error_code"] == "NO_CHANNELS"


def test_channel_without_price_has_no_calculation(client, auth_header):
    p = create_product(client, auth_header)
    r = client.put(f"/products/{p['id']}/channels/site", json={"config": {"marketing_pct": "5"}}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["last_calculation"] is None

    r = client.post(f"/products/{p['id']}/pricing", json={}, headers=auth_header)
    assert r.status_code == 422
    assert r.json()["detail"]["field"] == "price"
