from __future__ import annotations

import logging

from fastapi import FastAPI

from batchrec.core.config import LOG_LEVEL
from batchrec.db.base import Base
from batchrec.db.session import engine

# Register models
from batchrec.db import models  # noqa: F401

from batchrec.services.auth.api import router as auth_router
from batchrec.services.bmr.api import router as bmr_router
from batchrec.services.reports.api import router as reports_router
from batchrec.services.suppliers.api import router as suppliers_router
from batchrec.services.fabrics.api import router as fabrics_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Batch Manufacturing Records")

app.include_router(auth_router)
app.include_router(bmr_router)
app.include_router(reports_router)
app.include_router(suppliers_router)
app.include_router(fabrics_router)


@app.on_event("startup")
def _startup():
    # Dev-friendly schema creation; there are no migrations.
    Base.metadata.create_all(bind=engine)
    logger.info("schema ready on %s", engine.url.render_as_string(hide_password=True))


@app.get("/health")
def health():
    return {"ok": True}
