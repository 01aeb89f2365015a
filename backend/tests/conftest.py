import os
import tempfile
import uuid

import pytest

# banco de testes isolado: precisa estar no ambiente ANTES de importar o app
_TMP_DB = os.path.join(tempfile.mkdtemp(prefix="hub360-tests-"), "test.db")
os.environ["HUB360_DATABASE_URL"] = f"sqlite:///{_TMP_DB}"
os.environ["HUB360_ENV"] = "lab"
os.environ["HUB360_AI_ENABLED"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from hub360.schemas.common import cnpj_check_digits  # noqa: E402


def _import_all_models():
    # registra todos os models no metadata (sem isso, create_all() cria 0 tabelas)
    import hub360.models  # noqa: F401


@pytest.fixture(scope="session", autouse=True)
def _ensure_tables_exist():
    from hub360.db import Base, engine

    _import_all_models()
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="session")
def client():
    from hub360.main import app

    return TestClient(app)


def register(client, tenant_name: str = "Loja Teste") -> dict:
    email = f"user-{uuid.uuid4().hex[:10]}@teste.com"
    r = client.post(
        "/auth/register",
        json={"tenant_name": tenant_name, "name": "Dev", "email": email, "password": "segredo123"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    return {
        "email": email,
        "tenant_id": body["tenant_id"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture()
def auth_header(client):
    return register(client)["headers"]


@pytest.fixture()
def other_tenant_header(client):
    return register(client, tenant_name="Outra Loja")["headers"]


def make_cnpj() -> str:
    base = "".join(str(int(c, 16) % 10) for c in uuid.uuid4().hex[:12])
    return base + cnpj_check_digits(base)


def create_empresa(client, headers, **extra) -> dict:
    payload = {"cnpj": make_cnpj(), "razao_social": "Empresa Teste LTDA", **extra}
    r = client.post("/empresas", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_supplier(client, headers, **extra) -> dict:
    r = client.post("/suppliers", json={"trade_name": "Fornecedor Shenzhen", **extra}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_department(client, headers, name: str | None = None) -> dict:
    r = client.post("/departments", json={"name": name or f"Dept {uuid.uuid4().hex[:6]}"}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_product(client, headers, **extra) -> dict:
    payload = {
        "name": "Fone Bluetooth",
        "sku": f"SKU-{uuid.uuid4().hex[:8]}",
        "cost_item": "40.00",
        "pack_cost": "2.00",
        **extra,
    }
    r = client.post("/products", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_conta(client, headers, empresa_id: int, **extra) -> dict:
    payload = {
        "empresa_id": empresa_id,
        "banco": "Banco do Brasil",
        "agencia": "1234",
        "conta": uuid.uuid4().hex[:8].translate(str.maketrans("abcdef", "123456")),
        "digito": "X",
        **extra,
    }
    r = client.post("/contas-bancarias", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()
