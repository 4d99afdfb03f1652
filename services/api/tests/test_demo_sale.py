import pytest
from services.api.app.services.backend_factory import get_backend_adapter, reset_backend_adapter


def test_demo_sale_submits_split_order(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("FIELDPOS_BACKEND_ADAPTER", "mock")
    reset_backend_adapter()
    monkeypatch.setattr(
        "sys.argv",
        [
            "demo_sale",
            "--scan",
            "6001000000011",
            "--scan",
            "JUI-1L",
            "--payment",
            "split",
            "--cash",
            "$1.00",
        ],
    )

    from scripts.demo_sale import main

    assert main() == 0

    out = capsys.readouterr().out
    assert "Order ORD-00001 for Corner Market" in out
    assert "Cash   $1.00" in out
    assert "Credit $4.00" in out

    order = get_backend_adapter().orders[0]
    assert order.payment_type.value == "split"
    assert len(order.items) == 2


def test_demo_sale_unknown_customer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FIELDPOS_BACKEND_ADAPTER", "mock")
    reset_backend_adapter()
    monkeypatch.setattr("sys.argv", ["demo_sale", "--customer-id", "999"])

    from scripts.demo_sale import main

    assert main() == 2
