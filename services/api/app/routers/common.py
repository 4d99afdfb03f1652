from __future__ import annotations

from typing import NoReturn
from uuid import uuid4

from fastapi import HTTPException
from services.api.app.db.models import EventLog
from services.api.app.pos.errors import (
    AmountExceedsBalanceError,
    CreditLimitExceededError,
    LineNotFoundError,
    PosError,
    ProductNotFoundError,
    StockExceededError,
)
from services.api.app.services.backend_base import (
    BackendAdapter,
    BackendAdapterError,
    BackendConfigError,
    BackendRejectedError,
    BackendUnavailableError,
)
from services.api.app.services.backend_factory import get_backend_adapter
from services.api.app.services.store import SaleSession, store
from sqlalchemy.orm import Session


def raise_pos_http_error(e: PosError) -> NoReturn:
    detail = {"code": e.code, "message": str(e)}

    if isinstance(e, (ProductNotFoundError, LineNotFoundError)):
        raise HTTPException(status_code=404, detail=detail) from e

    if isinstance(e, (StockExceededError, CreditLimitExceededError, AmountExceedsBalanceError)):
        raise HTTPException(status_code=409, detail=detail) from e

    raise HTTPException(status_code=422, detail=detail) from e


def raise_backend_http_error(e: Exception) -> NoReturn:
    if isinstance(e, BackendConfigError):
        raise HTTPException(status_code=500, detail=str(e)) from e

    if isinstance(e, BackendUnavailableError):
        raise HTTPException(status_code=503, detail=str(e)) from e

    if isinstance(e, BackendRejectedError):
        raise HTTPException(status_code=502, detail=str(e)) from e

    if isinstance(e, BackendAdapterError):
        raise HTTPException(status_code=502, detail=str(e)) from e

    raise HTTPException(status_code=500, detail="Internal Server Error") from e


def backend() -> BackendAdapter:
    try:
        return get_backend_adapter()
    except (ValueError, BackendAdapterError) as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


def get_sale_session(session_id: str) -> SaleSession:
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def log_event(
    db: Session,
    *,
    session_id: str | None,
    actor_id: str | None,
    entity_type: str,
    entity_id: str,
    event_type: str,
    event_payload: dict,
) -> None:
    db.add(
        EventLog(
            id=uuid4().hex,
            session_id=session_id,
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            event_type=event_type,
            event_payload_json=event_payload,
        )
    )
