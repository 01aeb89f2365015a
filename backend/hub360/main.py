from fastapi import Depends, FastAPI
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from hub360.core.errors import install_error_handlers
from hub360.core.logging import configure_logging, request_context_middleware
from hub360.core.security import require_auth
from hub360.core.settings import settings

from hub360.api.auth import router as auth_router
from hub360.api.empresa import router as empresa_router
from hub360.api.supplier import router as supplier_router
from hub360.api.department import router as department_router
from hub360.api.product import router as product_router
from hub360.api.pricing import router as pricing_router
from hub360.api.lancamento import router as lancamento_router
from hub360.api.conta_bancaria import router as conta_bancaria_router
from hub360.api.nota_fiscal import router as nota_fiscal_router
from hub360.api.reports import router as reports_router
from hub360.api.simulation import router as simulation_router
from hub360.api.taxes import router as taxes_router
from hub360.api.ai import router as ai_router

VERSION = "0.4.0"

configure_logging()

DOCS_PROTECTED = settings.docs_protected

DOC_DEPS = [Depends(require_auth)] if DOCS_PROTECTED else []
PROTECTED_DEPS = [Depends(require_auth)]

app = FastAPI(
    title=settings.APP_NAME,
    version=VERSION,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.middleware("http")(request_context_middleware)
install_error_handlers(app)

# Auth router sempre exposto (login/registro precisam existir)
app.include_router(auth_router)

for router in (
    empresa_router,
    supplier_router,
    department_router,
    product_router,
    pricing_router,
    lancamento_router,
    conta_bancaria_router,
    nota_fiscal_router,
    reports_router,
    simulation_router,
    taxes_router,
    ai_router,
):
    app.include_router(router, dependencies=PROTECTED_DEPS)


@app.get("/health")
def health():
    return {
        "ok": True,
        "service": "hub360",
        "env": settings.ENV,
        "version": VERSION,
        "build": settings.BUILD_SHA or None,
        "docs_protected": bool(DOCS_PROTECTED),
    }


# Docs/OpenAPI: sempre existem; quando DOCS_PROTECTED=true exigem JWT
@app.get("/openapi.json", include_in_schema=False, dependencies=DOC_DEPS)
def openapi_json():
    schema = get_openapi(title=app.title, version=app.version, routes=app.routes)
    return JSONResponse(schema)


@app.get("/docs", include_in_schema=False, dependencies=DOC_DEPS)
def swagger_docs():
    return get_swagger_ui_html(openapi_url="/openapi.json", title=f"{app.title} - Docs")


@app.get("/redoc", include_in_schema=False, dependencies=DOC_DEPS)
def redoc_docs():
    return get_redoc_html(openapi_url="/openapi.json", title=f"{app.title} - ReDoc")
