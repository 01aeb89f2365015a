import uuid

from hub360.core.security import create_access_token

from conftest import register


def test_health_is_public(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["service"] == "hub360"
    assert body["env"] == "lab"
    assert body["docs_protected"] is False


def test_request_id_is_propagated(client):
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"

    r = client.get("/health")
    assert len(r.headers["X-Request-ID"]) == 32


def test_openapi_available_in_lab(client):
    r = client.get("/openapi.json")
    assert r.status_code == 200
    assert "/pricing/calculate" in r.json()["paths"]


def test_register_login_me(client):
    email = f"dono-{uuid.uuid4().hex[:8]}@Loja.com"
    r = client.post(
        "/auth/register",
        json={"tenant_name": "Minha Loja", "name": "Dona", "email": email, "password": "segredo123"},
    )
    assert r.status_code == 201
    tenant_id = r.json()["tenant_id"]

    r = client.post("/auth/login", json={"email": email.lower(), "password": "segredo123"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert r.json()["token_type"] == "bearer"

    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == {"sub": email.lower(), "tenant_id": tenant_id, "role": "owner"}


def test_register_duplicate_email(client):
    user = register(client)
    r = client.post(
        "/auth/register",
        json={"tenant_name": "Outra", "name": "X", "email": user["email"], "password": "segredo123"},
    )
    assert r.status_code == 409
    assert r.json()["detail"]["error_code"] == "DUPLICATE"


def test_register_short_password(client):
    r = client.post(
        "/auth/register",
        json={"tenant_name": "L", "name": "X", "email": "curta@teste.com", "password": "123"},
    )
    assert r.status_code == 422


def test_login_wrong_password_and_unknown_email(client):
    user = register(client)
    r = client.post("/auth/login", json={"email": user["email"], "password": "errada123"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"

    r = client.post("/auth/login", json={"email": "ninguem@teste.com", "password": "segredo123"})
    assert r.status_code == 401


def test_protected_routes_require_token(client):
    assert client.get("/empresas").status_code == 401
    assert client.get("/empresas", headers={"Authorization": "Bearer lixo"}).status_code == 401


def test_expired_token(client):
    user = register(client)
    token = create_access_token(user["email"], user["tenant_id"], ttl_s=-10)
    r = client.get("/empresas", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "token expirado"


def test_token_for_unknown_member_is_forbidden(client):
    token = create_access_token("fantasma@teste.com", 1)
    r = client.get("/empresas", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


def test_token_with_wrong_tenant_is_rejected(client):
    user = register(client)
    token = create_access_token(user["email"], user["tenant_id"] + 1000)
    r = client.get("/empresas", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
