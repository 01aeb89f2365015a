from sqlalchemy import text
from sqlalchemy.orm import Session


def set_tenant_on_session(db: Session, tenant_id: int) -> None:
    """
    Amarra o tenant à sessão do request.

    - Postgres: SET app.tenant_id (policies de RLS leem daqui)
    - SQLite (lab): db.info["tenant_id"], usado só para auditoria/log
    """
    dialect = db.get_bind().dialect.name
    if str(dialect).startswith("postgres"):
        db.execute(text("SELECT set_config('app.tenant_id', :tid, false)"), {"tid": str(tenant_id)})
    db.info["tenant_id"] = tenant_id