from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from batchrec.core.config import DATABASE_URL

logger = logging.getLogger(__name__)


def make_engine(url: str, **kw) -> Engine:
    """Engine for ``url``. SQLite gets cross-thread connections and enforced foreign keys."""
    sqlite = url.startswith("sqlite")
    if sqlite:
        kw.setdefault("connect_args", {"check_same_thread": False})
    else:
        kw.setdefault("pool_pre_ping", True)
    eng = create_engine(url, **kw)
    if sqlite:
        @event.listens_for(eng, "connect")
        def _foreign_keys_on(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()
    logger.debug("engine for %s", eng.url.render_as_string(hide_password=True))
    return eng


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
