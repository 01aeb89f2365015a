import logging
import time
import uuid

from fastapi import Request

from hub360.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

logger = logging.getLogger("hub360.request")


def configure_logging(level: str | None = None) -> None:
    lvl = (level or settings.LOG_LEVEL or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=lvl, format=LOG_FORMAT)
    root.setLevel(lvl)


async def request_context_middleware(request: Request, call_next):
    """Propaga (ou gera) X-Request-ID e loga método, path, status e duração."""
    req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = req_id
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed rid=%s %s %s (%sms)", req_id, request.method, request.url.path, elapsed_ms)
        raise

    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    response.headers["X-Request-ID"] = req_id
    logger.info(
        "request_done rid=%s %s %s -> %s (%sms)",
        req_id, request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response
