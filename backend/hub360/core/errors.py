import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hub360.calc.money import CalculoInvalido

logger = logging.getLogger(__name__)


def not_found(entity: str, entity_id=None, message: str | None = None) -> HTTPException:
    detail = {
        "error_code": f"{entity.upper()}_NOT_FOUND",
        "message": message or "Não encontrado",
    }
    if entity_id is not None:
        detail["id"] = entity_id
    return HTTPException(status_code=404, detail=detail)


def conflict(error_code: str, message: str, **context) -> HTTPException:
    return HTTPException(status_code=409, detail={"error_code": error_code, "message": message, **context})


def commit_or_raise(db: Session, *, duplicate_message: str, what: str) -> None:
    """Commit com mapeamento padrão: unique violada -> 409, falha de banco -> 503."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise conflict("DUPLICATE", duplicate_message)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("DB error saving %s", what)
        raise HTTPException(status_code=503, detail="Database unavailable")


async def calculo_invalido_handler(request: Request, exc: CalculoInvalido):
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "error_code": "CALCULO_INVALIDO",
                "field": exc.field,
                "message": exc.message,
            }
        },
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CalculoInvalido, calculo_invalido_handler)
