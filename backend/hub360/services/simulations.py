from __future__ import annotations

import secrets
import string
from typing import Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from hub360.calc.import_formal import FormalConfig, FormalProduct, calculate_formal
from hub360.calc.import_simplified import SimplifiedConfig, SimplifiedProduct, calculate_simplified
from hub360.models.simulation import ImportSimulation

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8
COPY_SUFFIX = " (Cópia)"


def run_calculation(kind: str, config: Mapping | None, produtos: Sequence[Mapping]) -> dict:
    if kind == "simplificada":
        return calculate_simplified(
            SimplifiedConfig.from_mapping(config),
            [SimplifiedProduct.from_mapping(p) for p in produtos],
        ).to_dict()
    if kind == "formal":
        return calculate_formal(
            FormalConfig.from_mapping(config),
            [FormalProduct.from_mapping(p) for p in produtos],
        ).to_dict()
    raise ValueError(f"tipo de simulação inválido: {kind!r}")


def new_code(db: Session, attempts: int = 10) -> str:
    """Código alfanumérico de 8 chars, único na tabela."""
    for _ in range(attempts):
        code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
        if db.scalar(select(ImportSimulation.id).where(ImportSimulation.code == code)) is None:
            return code
    raise RuntimeError("não foi possível gerar código único de simulação")


def duplicate(db: Session, sim: ImportSimulation) -> ImportSimulation:
    copy = ImportSimulation(
        tenant_id=sim.tenant_id,
        kind=sim.kind,
        code=new_code(db),
        name=(sim.name + COPY_SUFFIX)[:200],
        supplier_name=sim.supplier_name,
        status="Em andamento",
        observacoes=sim.observacoes,
        config=dict(sim.config or {}),
        products=[dict(p) for p in (sim.products or [])],
        result=dict(sim.result) if sim.result else None,
    )
    db.add(copy)
    return copy
