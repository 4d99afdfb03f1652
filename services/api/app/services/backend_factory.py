from __future__ import annotations

import os

from services.api.app.services.backend_base import BackendAdapter
from services.api.app.services.backend_mock import MockBackendAdapter

_ADAPTER: BackendAdapter | None = None
_ADAPTER_KEY: tuple[str, ...] | None = None


def get_backend_adapter() -> BackendAdapter:
    """Select the backend adapter based on env vars.

    Defaults to the mock adapter so tests and local dev are deterministic unless explicitly
    configured otherwise. The instance is cached per configuration, like the db engine.
    """

    global _ADAPTER, _ADAPTER_KEY

    mode = os.getenv("FIELDPOS_BACKEND_ADAPTER", "mock").strip().lower()
    key = (
        mode,
        os.getenv("FIELDPOS_BACKEND_URL", ""),
        os.getenv("FIELDPOS_BACKEND_TOKEN", ""),
        os.getenv("FIELDPOS_BACKEND_TIMEOUT", ""),
    )

    if _ADAPTER is not None and _ADAPTER_KEY == key:
        return _ADAPTER

    if mode == "mock":
        adapter: BackendAdapter = MockBackendAdapter()
    elif mode == "http":
        from services.api.app.services.backend_http import HttpBackendAdapter

        adapter = HttpBackendAdapter.from_env()
    else:
        raise ValueError(f"Unknown FIELDPOS_BACKEND_ADAPTER={mode!r}. Expected mock or http.")

    _ADAPTER = adapter
    _ADAPTER_KEY = key
    return adapter


def reset_backend_adapter() -> None:
    global _ADAPTER, _ADAPTER_KEY

    _ADAPTER = None
    _ADAPTER_KEY = None
