from typing import Iterator

from sqlalchemy.orm import Session

from hub360.db import SessionLocal


# dependency padrão FastAPI
def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
