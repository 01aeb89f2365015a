from datetime import date, timedelta

from conftest import create_conta, create_empresa, create_supplier

CHAVE = "3526 1012 3456 7800 0199 5500 1000 0012 3410 0000 1234"


def _nota(client, headers, empresa_id, **extra):
    payload = {
        "empresa_id": empresa_id,
        "numero": "1001",
        "tipo": "entrada",
        "data_emissao": "2026-10-01",
        "valor_produtos_cents": 100000,
        **extra,
    }
    r = client.post("/notas-fiscais", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _saldo(client, headers, conta_id):
    r = client.get(f"/contas-bancarias/{conta_id}", headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["saldo_atual_cents"]


# --- contas bancárias ---

def test_conta_starts_with_saldo_inicial(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"], saldo_inicial_cents=50000, digito="x")
    assert c["saldo_inicial_cents"] == 50000
    assert c["saldo_atual_cents"] == 50000
    assert c["tipo_conta"] == "corrente"
    assert c["digito"] == "X"


def test_conta_rejects_non_numeric_agencia(client, auth_header):
    e = create_empresa(client, auth_header)
    r = client.post(
        "/contas-bancarias",
        json={"empresa_id": e["id"], "banco": "Itaú", "agencia": "12a4", "conta": "5555"},
        headers=auth_header,
    )
    assert r.status_code == 422


def test_conta_duplicate_is_409(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"])
    r = client.post(
        "/contas-bancarias",
        json={"empresa_id": e["id"], "banco": c["banco"], "agencia": c["agencia"], "conta": c["conta"]},
        headers=auth_header,
    )
    assert r.status_code == 409


def test_patch_saldo_inicial_shifts_saldo_atual(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"], saldo_inicial_cents=10000)

    lanc = client.post(
        "/lancamentos",
        json={"empresa_id": e["id"], "conta_bancaria_id": c["id"], "tipo": "receita", "valor_cents": 2500},
        headers=auth_header,
    ).json()
    assert client.post(f"/lancamentos/{lanc['id']}/pagar", headers=auth_header).status_code == 200

    r = client.patch(f"/contas-bancarias/{c['id']}", json={"saldo_inicial_cents": 15000}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["saldo_inicial_cents"] == 15000
    assert r.json()["saldo_atual_cents"] == 17500


def test_conta_list_filters_by_empresa(client, auth_header):
    a = create_empresa(client, auth_header)
    b = create_empresa(client, auth_header)
    ca = create_conta(client, auth_header, a["id"])
    create_conta(client, auth_header, b["id"])

    r = client.get("/contas-bancarias", params={"empresa_id": a["id"]}, headers=auth_header)
    assert r.status_code == 200
    assert [c["id"] for c in r.json()] == [ca["id"]]


def test_conta_is_tenant_scoped(client, auth_header, other_tenant_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"])

    r = client.get(f"/contas-bancarias/{c['id']}", headers=other_tenant_header)
    assert r.status_code == 404
    assert r.json()["detail"]["error_code"] == "CONTA_BANCARIA_NOT_FOUND"
    assert client.get("/contas-bancarias", headers=other_tenant_header).json() == []


# --- lançamento x conta ---

def test_pagar_moves_saldo_by_tipo(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"], saldo_inicial_cents=100000)

    receita = client.post(
        "/lancamentos",
        json={"empresa_id": e["id"], "conta_bancaria_id": c["id"], "tipo": "receita", "valor_cents": 30000},
        headers=auth_header,
    ).json()
    despesa = client.post(
        "/lancamentos",
        json={"empresa_id": e["id"], "tipo": "despesa", "valor_cents": 10000, "juros_cents": 500},
        headers=auth_header,
    ).json()
    assert receita["conta_bancaria_id"] == c["id"]
    assert despesa["conta_bancaria_id"] is None

    assert client.post(f"/lancamentos/{receita['id']}/pagar", headers=auth_header).status_code == 200
    assert _saldo(client, auth_header, c["id"]) == 130000

    # conta informada no pagamento
    r = client.post(f"/lancamentos/{despesa['id']}/pagar", json={"conta_bancaria_id": c["id"]}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["conta_bancaria_id"] == c["id"]
    assert _saldo(client, auth_header, c["id"]) == 119500


def test_pending_entry_does_not_touch_saldo(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"], saldo_inicial_cents=1000)
    lanc = client.post(
        "/lancamentos",
        json={"empresa_id": e["id"], "conta_bancaria_id": c["id"], "tipo": "despesa", "valor_cents": 700},
        headers=auth_header,
    ).json()
    assert client.post(f"/lancamentos/{lanc['id']}/cancelar", headers=auth_header).status_code == 200
    assert _saldo(client, auth_header, c["id"]) == 1000


def test_delete_paid_entry_reverses_saldo(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"])
    lanc = client.post(
        "/lancamentos",
        json={"empresa_id": e["id"], "conta_bancaria_id": c["id"], "tipo": "despesa", "valor_cents": 4200},
        headers=auth_header,
    ).json()
    client.post(f"/lancamentos/{lanc['id']}/pagar", headers=auth_header)
    assert _saldo(client, auth_header, c["id"]) == -4200

    assert client.delete(f"/lancamentos/{lanc['id']}", headers=auth_header).status_code == 204
    assert _saldo(client, auth_header, c["id"]) == 0


def test_lancamento_rejects_conta_of_other_tenant_or_empresa(client, auth_header, other_tenant_header):
    mine = create_empresa(client, auth_header)
    other = create_empresa(client, auth_header)
    theirs = create_empresa(client, other_tenant_header)
    foreign = create_conta(client, other_tenant_header, theirs["id"])
    sibling = create_conta(client, auth_header, other["id"])

    r = client.post(
        "/lancamentos",
        json={"empresa_id": mine["id"], "conta_bancaria_id": foreign["id"], "tipo": "receita", "valor_cents": 1},
        headers=auth_header,
    )
    assert r.status_code == 404
    assert r.json()["detail"]["error_code"] == "CONTA_BANCARIA_NOT_FOUND"

    r = client.post(
        "/lancamentos",
        json={"empresa_id": mine["id"], "conta_bancaria_id": sibling["id"], "tipo": "receita", "valor_cents": 1},
        headers=auth_header,
    )
    assert r.status_code == 422
    assert r.json()["detail"]["field"] == "conta_bancaria_id"


def test_patch_can_link_and_unlink_conta(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"])
    lanc = client.post(
        "/lancamentos", json={"empresa_id": e["id"], "tipo": "despesa", "valor_cents": 100}, headers=auth_header,
    ).json()

    r = client.patch(f"/lancamentos/{lanc['id']}", json={"conta_bancaria_id": c["id"]}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["conta_bancaria_id"] == c["id"]

    r = client.patch(f"/lancamentos/{lanc['id']}", json={"conta_bancaria_id": None}, headers=auth_header)
    assert r.json()["conta_bancaria_id"] is None


def test_delete_conta_unlinks_lancamentos(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"])
    lanc = client.post(
        "/lancamentos",
        json={"empresa_id": e["id"], "conta_bancaria_id": c["id"], "tipo": "receita", "valor_cents": 100},
        headers=auth_header,
    ).json()

    assert client.delete(f"/contas-bancarias/{c['id']}", headers=auth_header).status_code == 204
    assert client.get(f"/lancamentos/{lanc['id']}", headers=auth_header).json()["conta_bancaria_id"] is None


# --- notas fiscais ---

def test_nota_total_is_products_minus_discount_plus_charges(client, auth_header):
    e = create_empresa(client, auth_header)
    s = create_supplier(client, auth_header)
    nota = _nota(
        client, auth_header, e["id"],
        supplier_id=s["id"],
        chave_acesso=CHAVE,
        valor_desconto_cents=5000,
        valor_frete_cents=2500,
        valor_seguro_cents=700,
        outras_despesas_cents=300,
    )
    assert nota["valor_total_cents"] == 100000 - 5000 + 2500 + 700 + 300
    assert nota["status"] == "autorizada"
    assert nota["serie"] == "1"
    assert nota["chave_acesso"] == CHAVE.replace(" ", "")


def test_nota_patch_recomputes_total(client, auth_header):
    e = create_empresa(client, auth_header)
    nota = _nota(client, auth_header, e["id"], valor_frete_cents=1000)

    r = client.patch(f"/notas-fiscais/{nota['id']}", json={"valor_produtos_cents": 50000}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["valor_total_cents"] == 51000


def test_nota_discount_above_total_is_422(client, auth_header):
    e = create_empresa(client, auth_header)
    r = client.post(
        "/notas-fiscais",
        json={
            "empresa_id": e["id"], "numero": "9", "tipo": "saida", "data_emissao": "2026-10-01",
            "valor_produtos_cents": 1000, "valor_desconto_cents": 1500,
        },
        headers=auth_header,
    )
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == "INVALID_AMOUNT"


def test_nota_validates_chave_and_dates(client, auth_header):
    e = create_empresa(client, auth_header)
    base = {"empresa_id": e["id"], "numero": "77", "tipo": "entrada", "valor_produtos_cents": 1}

    r = client.post("/notas-fiscais", json={**base, "data_emissao": "2026-10-01", "chave_acesso": "123"}, headers=auth_header)
    assert r.status_code == 422

    r = client.post(
        "/notas-fiscais",
        json={**base, "data_emissao": "2026-10-05", "data_entrada": "2026-10-01"},
        headers=auth_header,
    )
    assert r.status_code == 422


def test_nota_number_is_unique_per_tipo_and_serie(client, auth_header):
    e = create_empresa(client, auth_header)
    _nota(client, auth_header, e["id"], numero="500")

    r = client.post(
        "/notas-fiscais",
        json={"empresa_id": e["id"], "numero": "500", "tipo": "entrada", "data_emissao": "2026-10-02", "valor_produtos_cents": 1},
        headers=auth_header,
    )
    assert r.status_code == 409

    # mesma numeração na saída é outra série de documentos
    _nota(client, auth_header, e["id"], numero="500", tipo="saida")


def test_nota_cancel_blocks_changes(client, auth_header):
    e = create_empresa(client, auth_header)
    nota = _nota(client, auth_header, e["id"])

    r = client.post(f"/notas-fiscais/{nota['id']}/cancelar", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelada"

    r = client.post(f"/notas-fiscais/{nota['id']}/cancelar", headers=auth_header)
    assert r.status_code == 409
    assert r.json()["detail"]["error_code"] == "INVALID_STATE"

    r = client.patch(f"/notas-fiscais/{nota['id']}", json={"observacoes": "x"}, headers=auth_header)
    assert r.status_code == 409


def test_nota_list_filters(client, auth_header):
    e = create_empresa(client, auth_header)
    emissao = date(2026, 9, 10)
    a = _nota(client, auth_header, e["id"], numero="A-1", data_emissao=emissao.isoformat())
    b = _nota(client, auth_header, e["id"], numero="B-2", tipo="saida", data_emissao=(emissao + timedelta(days=20)).isoformat())

    r = client.get("/notas-fiscais", params={"empresa_id": e["id"], "tipo": "saida"}, headers=auth_header)
    assert [n["id"] for n in r.json()["items"]] == [b["id"]]

    r = client.get(
        "/notas-fiscais",
        params={"empresa_id": e["id"], "start": "2026-09-01", "end": "2026-09-15"},
        headers=auth_header,
    )
    assert [n["id"] for n in r.json()["items"]] == [a["id"]]

    r = client.get("/notas-fiscais", params={"empresa_id": e["id"], "q": "b-2"}, headers=auth_header)
    assert r.json()["total"] == 1

    r = client.get("/notas-fiscais", params={"start": "2026-10-01", "end": "2026-09-01"}, headers=auth_header)
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == "INVALID_PERIOD"


def test_nota_is_tenant_scoped(client, auth_header, other_tenant_header):
    e = create_empresa(client, auth_header)
    nota = _nota(client, auth_header, e["id"])

    r = client.get(f"/notas-fiscais/{nota['id']}", headers=other_tenant_header)
    assert r.status_code == 404
    assert r.json()["detail"]["error_code"] == "NOTA_FISCAL_NOT_FOUND"
    assert client.delete(f"/notas-fiscais/{nota['id']}", headers=other_tenant_header).status_code == 404
    assert client.delete(f"/notas-fiscais/{nota['id']}", headers=auth_header).status_code == 204


def test_delete_empresa_removes_contas_and_notas(client, auth_header):
    e = create_empresa(client, auth_header)
    c = create_conta(client, auth_header, e["id"])
    nota = _nota(client, auth_header, e["id"])

    assert client.delete(f"/empresas/{e['id']}", headers=auth_header).status_code == 204
    assert client.get(f"/contas-bancarias/{c['id']}", headers=auth_header).status_code == 404
    assert client.get(f"/notas-fiscais/{nota['id']}", headers=auth_header).status_code == 404
