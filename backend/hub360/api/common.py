from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


class PageParams:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
    ):
        self.page = page
        self.page_size = page_size


def paginate(db: Session, stmt: Select, params: PageParams) -> dict:
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
    items = list(db.scalars(stmt.offset((params.page - 1) * params.page_size).limit(params.page_size)))
    return {"items": items, "total": int(total), "page": params.page, "page_size": params.page_size}


def like_term(q: str) -> str:
    # escapa curingas digitados pelo usuário
    term = q.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{term}%"
