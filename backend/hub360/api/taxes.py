from fastapi import APIRouter

from hub360.calc import simples
from hub360.schemas.taxes import SimplesIn, SimplesOut

router = APIRouter(prefix="/taxes", tags=["taxes"])


@router.post("/simples-nacional", response_model=SimplesOut)
def simples_nacional(payload: SimplesIn):
    rbt = payload.rbt12 if payload.rbt12 is not None else simples.rbt12(payload.receitas_12m)
    return {"anexo": payload.anexo, **simples.calcular_das(payload.faturamento_mes, rbt)}
