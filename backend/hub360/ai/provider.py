from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import httpx

from hub360.core.settings import settings

logger = logging.getLogger(__name__)

BULLET_COUNT = 5


# -----------------------------
# Contract: AI Provider
# -----------------------------

@dataclass(frozen=True)
class ListingInput:
    """
    Dados mínimos do produto para gerar conteúdo de anúncio.
    Independe do banco/ORM.
    """
    product_name: str
    brand: str = ""
    department: str = ""
    features: tuple[str, ...] = ()
    target_audience: str = ""
    dimensions: str = ""
    tone: str = "profissional"


@dataclass(frozen=True)
class ListingOutput:
    title: str
    bullet_points: list[str] = field(default_factory=list)
    description: str = ""
    provider: str = "null"


class ListingContentProvider(Protocol):
    name: str

    def generate_listing(self, item: ListingInput) -> Optional[ListingOutput]:
        """None => provider indisponível (caller cai no determinístico)."""
        ...


def _load_prompt(name: str) -> str:
    base = Path(__file__).parent / "prompts" / name
    try:
        return base.read_text(encoding="utf-8")
    except OSError:
        return ""


# -----------------------------
# Default provider: NULL (determinístico)
# -----------------------------

class NullContentProvider:
    """Não chama nada externo: monta o conteúdo a partir do cadastro."""

    name = "null"

    def generate_listing(self, item: ListingInput) -> ListingOutput:
        nome = item.product_name.strip()
        marca = item.brand.strip()
        feats = [f.strip() for f in item.features if f and f.strip()]
        publico = item.target_audience.strip() or "o dia a dia"

        title = " ".join(p for p in (nome, marca, feats[0] if feats else "") if p)[:200]

        # departamento e dimensões têm vaga garantida; features preenchem o resto
        fixos = []
        if item.department:
            fixos.append(f"🏷️ Categoria: {item.department}")
        if item.dimensions:
            fixos.append(f"📦 Dimensões e peso: {item.dimensions}")
        bullets = [f"✅ {f}" for f in feats[: BULLET_COUNT - len(fixos)]] + fixos

        extras = [
            f"⭐ Qualidade {marca}" if marca else "⭐ Qualidade garantida",
            f"🎯 Ideal para {publico}",
            "📦 Embalagem segura para envio",
            "💡 Fácil de usar",
            "🚀 Pronta entrega",
        ]
        for e in extras:
            if len(bullets) >= BULLET_COUNT:
                break
            if e.startswith("📦") and item.dimensions:
                continue
            bullets.append(e)

        description = f"Conheça {nome}, a escolha certa para {publico}."
        if feats:
            description += " Destaques: " + "; ".join(feats) + "."

        return ListingOutput(title=title, bullet_points=bullets, description=description, provider=self.name)


class OpenAIContentProvider:
    """
    Provider OpenAI via httpx (chat/completions, JSON mode).
    Guardrails:
    - sem chave / erro HTTP / timeout / JSON fora do contrato => None
    - nunca loga chave nem prompt
    """

    name = "openai"

    def __init__(self, *, api_key: str, model: str, base_url: str, timeout_s: int,
                 transport: httpx.BaseTransport | None = None):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = (base_url or "").rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "OpenAIContentProvider":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout_s=settings.OPENAI_TIMEOUT_S,
        )

    def generate_listing(self, item: ListingInput) -> Optional[ListingOutput]:
        if not self.api_key:
            return None
        prompt = _load_prompt("listing_content_v1.md")
        if not prompt:
            logger.warning("prompt listing_content_v1.md ausente")
            return None

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": prompt},
                {"role": "user", "content": json.dumps(_as_payload(item), ensure_ascii=False)},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.4,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(f"{self.base_url}/chat/completions", headers=headers, json=body)
            if r.status_code >= 400:
                logger.warning("openai respondeu HTTP %s", r.status_code)
                return None
            txt = r.json()["choices"][0]["message"]["content"]
            parsed = json.loads(txt)
        except httpx.HTTPError as e:
            logger.warning("openai indisponível: %s", type(e).__name__)
            return None
        except (KeyError, IndexError, TypeError, ValueError):
            logger.warning("openai: resposta fora do contrato")
            return None

        return _parse_listing(parsed, provider=self.name)


def _as_payload(item: ListingInput) -> dict:
    return {
        "product_name": item.product_name,
        "brand": item.brand,
        "department": item.department,
        "features": list(item.features),
        "target_audience": item.target_audience,
        "dimensions": item.dimensions,
        "tone": item.tone,
        "bullet_count": BULLET_COUNT,
    }


def _parse_listing(parsed, *, provider: str) -> Optional[ListingOutput]:
    if not isinstance(parsed, dict):
        return None
    title = str(parsed.get("title") or "").strip()
    bullets = parsed.get("bullet_points")
    if not title or not isinstance(bullets, list):
        return None
    bullets = [str(b).strip() for b in bullets if str(b).strip()]
    if len(bullets) != BULLET_COUNT:
        return None
    return ListingOutput(
        title=title[:200],
        bullet_points=bullets,
        description=str(parsed.get("description") or "").strip(),
        provider=provider,
    )


def get_provider(name: str | None) -> ListingContentProvider:
    n = (name or "null").strip().lower()
    if n in ("null", "noop", "none", ""):
        return NullContentProvider()
    if n == "openai":
        return OpenAIContentProvider.from_settings()
    raise ValueError(f"Unknown AI provider: {n!r}")


def get_ai_config() -> tuple[bool, str]:
    return bool(settings.AI_ENABLED), settings.AI_PROVIDER


def get_active_provider() -> Optional[ListingContentProvider]:
    enabled, name = get_ai_config()
    if not enabled:
        return None
    return get_provider(name)


def generate_listing(item: ListingInput) -> tuple[ListingOutput, bool]:
    """
    Tenta o provider ativo; sem provider ou falha => NullContentProvider.
    Retorna (conteúdo, fallback).
    """
    try:
        prov = get_active_provider()
    except ValueError:
        logger.error("ai_provider_invalid provider=%r; usando null", settings.AI_PROVIDER)
        return NullContentProvider().generate_listing(item), True

    if prov is not None:
        out = prov.generate_listing(item)
        if out is not None:
            return out, False
        return NullContentProvider().generate_listing(item), True
    return NullContentProvider().generate_listing(item), False
