from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from services.api.app.services.backend_factory import reset_backend_adapter


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    db_path = tmp_path / "fieldpos_session.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("FIELDPOS_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("FIELDPOS_BACKEND_ADAPTER", "mock")
    reset_backend_adapter()

    from services.api.app.main import app

    with TestClient(app) as c:
        yield c


def _open(client: TestClient) -> str:
    response = client.post("/v1/sessions", json={"driver_id": "drv-1"})
    assert response.status_code == 200
    return response.json()["session_id"]


def _add(client: TestClient, session_id: str, product_id: int, unit_type: str = "piece") -> dict:
    response = client.post(
        f"/v1/sessions/{session_id}/lines",
        json={"product_id": product_id, "unit_type": unit_type},
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_open_session_starts_empty(client: TestClient) -> None:
    response = client.post("/v1/sessions", json={"driver_id": "drv-1"})
    assert response.status_code == 200

    data = response.json()
    assert data["driver_id"] == "drv-1"
    assert data["customer"] is None
    assert data["lines"] == []
    assert data["total_cents"] == 0
    assert data["payment"]["method"] == "cash"


def test_open_session_requires_driver(client: TestClient) -> None:
    assert client.post("/v1/sessions", json={"driver_id": ""}).status_code == 422


def test_unknown_session_is_404(client: TestClient) -> None:
    assert client.get("/v1/sessions/missing").status_code == 404
    assert client.post("/v1/sessions/missing/lines", json={"product_id": 1}).status_code == 404


def test_shared_stock_through_the_api(client: TestClient) -> None:
    session_id = _open(client)

    for _ in range(3):
        data = _add(client, session_id, 1)
    assert data["total_cents"] == 600

    data = _add(client, session_id, 1, "box")
    assert data["total_cents"] == 1500
    assert data["item_count"] == 4

    # The pack line is at its ceiling; another add clamps silently.
    data = _add(client, session_id, 1, "box")
    box = next(line for line in data["lines"] if line["unit_type"] == "box")
    assert box["quantity"] == 1
    assert box["max_quantity"] == 1
    assert data["total_cents"] == 1500


def test_add_errors_map_to_http(client: TestClient) -> None:
    session_id = _open(client)

    out_of_stock = client.post(f"/v1/sessions/{session_id}/lines", json={"product_id": 4})
    assert out_of_stock.status_code == 409
    assert out_of_stock.json()["detail"]["code"] == "STOCK_EXCEEDED"

    no_box = client.post(
        f"/v1/sessions/{session_id}/lines", json={"product_id": 3, "unit_type": "box"}
    )
    assert no_box.status_code == 422
    assert no_box.json()["detail"]["code"] == "UNSUPPORTED_UNIT_TYPE"

    missing = client.post(f"/v1/sessions/{session_id}/lines", json={"product_id": 999})
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "PRODUCT_NOT_FOUND"

    assert client.get(f"/v1/sessions/{session_id}").json()["lines"] == []


def test_scan_selects_unit_from_barcode(client: TestClient) -> None:
    session_id = _open(client)

    data = client.post(
        f"/v1/sessions/{session_id}/scan", json={"code": "6001000000028"}
    ).json()
    assert [(line["product_id"], line["unit_type"]) for line in data["lines"]] == [(1, "box")]

    data = client.post(f"/v1/sessions/{session_id}/scan", json={"code": "chp-50"}).json()
    assert (3, "piece") in [(line["product_id"], line["unit_type"]) for line in data["lines"]]

    unknown = client.post(f"/v1/sessions/{session_id}/scan", json={"code": "nope"})
    assert unknown.status_code == 404


def test_customer_prices_apply_to_new_lines(client: TestClient) -> None:
    session_id = _open(client)

    attached = client.post(f"/v1/sessions/{session_id}/customer", json={"customer_id": 101})
    assert attached.status_code == 200
    assert attached.json()["customer"]["current_balance_cents"] == 12000

    data = _add(client, session_id, 1)
    line = data["lines"][0]
    assert line["unit_price_cents"] == 150
    assert line["is_overridden"] is True

    catalog = client.get(f"/v1/sessions/{session_id}/catalog", params={"search": "water"}).json()
    assert len(catalog) == 1
    units = {u["unit_type"]: u for u in catalog[0]["units"]}
    assert units["piece"]["price_cents"] == 150
    assert units["piece"]["remaining"] == 9
    assert units["box"]["price_cents"] == 900
    assert units["box"]["remaining"] == 1

    detached = client.delete(f"/v1/sessions/{session_id}/customer").json()
    assert detached["customer"] is None
    # Lines keep the price they were added with.
    assert detached["lines"][0]["unit_price_cents"] == 150


def test_attach_unknown_customer(client: TestClient) -> None:
    session_id = _open(client)
    response = client.post(f"/v1/sessions/{session_id}/customer", json={"customer_id": 999})
    assert response.status_code == 404


def test_update_discount_and_remove(client: TestClient) -> None:
    session_id = _open(client)
    _add(client, session_id, 2)

    data = client.patch(f"/v1/sessions/{session_id}/lines/2/piece", json={"delta": 4}).json()
    assert data["lines"][0]["quantity"] == 5

    over = client.patch(f"/v1/sessions/{session_id}/lines/2/piece", json={"delta": 100})
    assert over.status_code == 409
    assert client.get(f"/v1/sessions/{session_id}").json()["lines"][0]["quantity"] == 5

    data = client.put(
        f"/v1/sessions/{session_id}/lines/2/piece/discount",
        json={"per_unit_discount_cents": 50},
    ).json()
    assert data["discount_cents"] == 250
    assert data["total_cents"] == 5 * 350 - 250

    missing = client.put(
        f"/v1/sessions/{session_id}/lines/2/box/discount",
        json={"per_unit_discount_cents": 50},
    )
    assert missing.status_code == 404

    data = client.delete(f"/v1/sessions/{session_id}/lines/2/piece").json()
    assert data["lines"] == []
    assert client.delete(f"/v1/sessions/{session_id}/lines/2/piece").status_code == 200


def test_payment_selection(client: TestClient) -> None:
    session_id = _open(client)
    _add(client, session_id, 2)
    _add(client, session_id, 2)

    data = client.put(
        f"/v1/sessions/{session_id}/payment",
        json={"method": "split", "cash_amount_cents": 200},
    ).json()
    assert data["payment"] == {
        "method": "split",
        "cash_amount_cents": 200,
        "credit_amount_cents": 500,
    }

    data = client.put(f"/v1/sessions/{session_id}/payment", json={"method": "credit"}).json()
    assert data["payment"]["cash_amount_cents"] == 0
    assert data["payment"]["credit_amount_cents"] == 700


def test_clear_and_close_session(client: TestClient) -> None:
    session_id = _open(client)
    _add(client, session_id, 3)

    data = client.delete(f"/v1/sessions/{session_id}/lines").json()
    assert data["lines"] == []
    assert data["item_count"] == 0

    assert client.delete(f"/v1/sessions/{session_id}").status_code == 204
    assert client.get(f"/v1/sessions/{session_id}").status_code == 404


def test_split_cash_over_total_never_shows_negative_credit(client: TestClient) -> None:
    session_id = _open(client)
    _add(client, session_id, 2)

    data = client.put(
        f"/v1/sessions/{session_id}/payment",
        json={"method": "split", "cash_amount_cents": 900},
    ).json()
    assert data["total_cents"] == 350
    assert data["payment"] == {
        "method": "split",
        "cash_amount_cents": 900,
        "credit_amount_cents": 0,
    }


def test_quick_picks_skip_out_of_stock(client: TestClient) -> None:
    session_id = _open(client)

    data = client.get(f"/v1/sessions/{session_id}/catalog/quick").json()
    assert [item["product_id"] for item in data] == [1, 2, 3]

    data = client.get(f"/v1/sessions/{session_id}/catalog/quick", params={"limit": 2}).json()
    assert [item["product_id"] for item in data] == [1, 2]

    assert client.get(f"/v1/sessions/{session_id}/catalog/quick?limit=0").status_code == 422
    assert client.get("/v1/sessions/missing/catalog/quick").status_code == 404


def test_concurrent_adds_stop_at_stock(client: TestClient) -> None:
    session_id = _open(client)

    def add() -> int:
        return client.post(
            f"/v1/sessions/{session_id}/lines", json={"product_id": 1, "unit_type": "piece"}
        ).status_code

    with ThreadPoolExecutor(max_workers=4) as pool:
        statuses = list(pool.map(lambda _: add(), range(12)))

    assert set(statuses) == {200}
    data = client.get(f"/v1/sessions/{session_id}").json()
    assert data["lines"][0]["quantity"] == 10
