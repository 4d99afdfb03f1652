"""fieldpos API service entrypoint."""

import logging
import os

from fastapi import FastAPI

from services.api.app.db.init_db import init_db
from services.api.app.routers.audit import router as audit_router
from services.api.app.routers.collection import router as collection_router
from services.api.app.routers.order import router as order_router
from services.api.app.routers.session import router as session_router
from services.api.app.routers.storefront import router as storefront_router

logging.basicConfig(
    level=os.getenv("FIELDPOS_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="fieldpos API")

app.include_router(session_router)
app.include_router(order_router)
app.include_router(collection_router)
app.include_router(storefront_router)
app.include_router(audit_router)


@app.on_event("startup")
def _startup() -> None:
    init_db()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
