import json

import httpx
import pytest

from hub360.ai.provider import (
    BULLET_COUNT,
    ListingInput,
    NullContentProvider,
    OpenAIContentProvider,
    get_provider,
)
from hub360.core.settings import Settings, settings

from conftest import create_department, create_product


# --- Simples Nacional --------------------------------------------------------

def test_simples_nacional_with_rbt12(client, auth_header):
    r = client.post("/taxes/simples-nacional", json={"faturamento_mes": "25000", "rbt12": "300000"}, headers=auth_header)
    assert r.status_code == 200
    body = r.json()
    assert body["anexo"] == "I"
    assert body["faixa"] == 2
    assert body["valor_das"] == "1330.00"
    assert body["acima_sublimite_icms"] is False


def test_simples_nacional_with_monthly_revenue(client, auth_header):
    r = client.post(
        "/taxes/simples-nacional",
        json={"faturamento_mes": "10000", "receitas_12m": ["10000"] * 12},
        headers=auth_header,
    )
    assert r.status_code == 200
    assert r.json()["rbt12"] == "120000.00"
    assert r.json()["faixa"] == 1


def test_simples_nacional_validation(client, auth_header):
    r = client.post("/taxes/simples-nacional", json={"faturamento_mes": "1000"}, headers=auth_header)
    assert r.status_code == 422

    r = client.post("/taxes/simples-nacional", json={"faturamento_mes": "1000", "rbt12": "5000000"}, headers=auth_header)
    assert r.status_code == 422
    assert r.json()["detail"]["error_code"] == "CALCULO_INVALIDO"

    r = client.post("/taxes/simples-nacional", json={"faturamento_mes": "1", "rbt12": "1", "anexo": "III"}, headers=auth_header)
    assert r.status_code == 422


# --- IA: conteúdo de anúncio ---------------------------------------------------

def test_ai_status_disabled_by_default(client, auth_header):
    r = client.get("/ai/status", headers=auth_header)
    assert r.status_code == 200
    assert r.json() == {"enabled": False, "provider": "null"}


def test_listing_with_null_provider(client, auth_header):
    r = client.post(
        "/ai/listing",
        json={"product_name": "Garrafa Térmica", "brand": "Inox+", "features": ["Mantém gelado 24h", "Aço inox 304"]},
        headers=auth_header,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["provider"] == "null"
    assert body["fallback"] is False
    assert len(body["bullet_points"]) == BULLET_COUNT
    assert body["title"].startswith("Garrafa Térmica Inox+")
    assert "Aço inox 304" in body["description"]


def test_listing_fills_from_product(client, auth_header):
    d = create_department(client, auth_header, name="Casa e Cozinha")
    p = create_product(
        client, auth_header,
        name="Pote Hermético", brand="Kitch", department_id=d["id"],
        features="Tampa com trava\nLivre de BPA", weight_kg="0.250",
        length_cm="20", width_cm="15", height_cm="10",
    )
    r = client.post("/ai/listing", json={"product_id": p["id"]}, headers=auth_header)
    assert r.status_code == 200
    body = r.json()
    assert body["title"].startswith("Pote Hermético Kitch")
    assert "✅ Tampa com trava" in body["bullet_points"]
    assert "📦 Dimensões e peso: 20 x 15 x 10 cm, 0,25 kg" in body["bullet_points"]


def test_listing_requires_name_or_product(client, auth_header):
    r = client.post("/ai/listing", json={"brand": "X"}, headers=auth_header)
    assert r.status_code == 422

    r = client.post("/ai/listing", json={"product_id": 999999}, headers=auth_header)
    assert r.status_code == 404


def test_listing_falls_back_when_provider_fails(client, auth_header, monkeypatch):
    monkeypatch.setattr(settings, "AI_ENABLED", True)
    monkeypatch.setattr(settings, "AI_PROVIDER", "openai")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")

    r = client.post("/ai/listing", json={"product_name": "Luminária LED"}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["provider"] == "null"
    assert r.json()["fallback"] is True


def test_listing_with_unknown_provider_falls_back(client, auth_header, monkeypatch):
    monkeypatch.setattr(settings, "AI_ENABLED", True)
    monkeypatch.setattr(settings, "AI_PROVIDER", "gemini")

    r = client.post("/ai/listing", json={"product_name": "Garrafa"}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["provider"] == "null"
    assert r.json()["fallback"] is True


def test_settings_reject_unknown_provider():
    with pytest.raises(ValueError):
        Settings(HUB360_ENV="lab", HUB360_AI_PROVIDER="gemini")
    assert Settings(HUB360_ENV="lab", HUB360_AI_PROVIDER=" OpenAI ").AI_PROVIDER == "openai"


def test_null_provider_keeps_department_with_many_features():
    out = NullContentProvider().generate_listing(ListingInput(
        product_name="Organizador",
        department="Casa",
        features=("Empilhável", "Tampa transparente", "Alça lateral", "Livre de BPA"),
        dimensions="30 x 20 x 10 cm",
    ))
    assert len(out.bullet_points) == BULLET_COUNT
    assert "🏷️ Categoria: Casa" in out.bullet_points
    assert "📦 Dimensões e peso: 30 x 20 x 10 cm" in out.bullet_points
    assert out.bullet_points[:3] == ["✅ Empilhável", "✅ Tampa transparente", "✅ Alça lateral"]


# --- provider OpenAI (sem rede) ------------------------------------------------

def _openai(handler) -> OpenAIContentProvider:
    return OpenAIContentProvider(
        api_key="sk-test",
        model="gpt-test",
        base_url="https://api.openai.test/v1",
        timeout_s=5,
        transport=httpx.MockTransport(handler),
    )


def _completion(content: dict) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": json.dumps(content)}}]})


def test_openai_provider_success():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _completion({
            "title": "Luminária LED Articulada",
            "bullet_points": [f"Benefício {i}" for i in range(BULLET_COUNT)],
            "description": "Ilumina sua mesa.",
        })

    out = _openai(handler).generate_listing(ListingInput(product_name="Luminária LED", features=("Articulada",)))

    assert out is not None
    assert out.provider == "openai"
    assert out.title == "Luminária LED Articulada"
    assert seen["url"] == "https://api.openai.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    user_msg = json.loads(seen["body"]["messages"][1]["content"])
    assert user_msg["features"] == ["Articulada"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": "não é json"}}]}),
        _completion({"title": "X", "bullet_points": ["só um"], "description": ""}),
    ],
)
def test_openai_provider_returns_none_outside_contract(response):
    out = _openai(lambda request: response).generate_listing(ListingInput(product_name="X"))
    assert out is None


def test_openai_provider_network_error():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    assert _openai(handler).generate_listing(ListingInput(product_name="X")) is None


def test_get_provider():
    assert isinstance(get_provider(None), NullContentProvider)
    assert isinstance(get_provider("openai"), OpenAIContentProvider)
    with pytest.raises(ValueError):
        get_provider("watson")
