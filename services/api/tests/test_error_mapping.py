from __future__ import annotations

import pytest
from fastapi import HTTPException
from services.api.app.pos.errors import (
    AmountExceedsBalanceError,
    CreditLimitExceededError,
    EmptyCartError,
    InvalidSplitAmountError,
    LineNotFoundError,
    MissingDeliveryAddressError,
    ProductNotFoundError,
    StockExceededError,
)
from services.api.app.routers.common import raise_pos_http_error


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ProductNotFoundError(42), 404),
        (LineNotFoundError(1, "piece"), 404),
        (StockExceededError(1, requested=3, available=2), 409),
        (CreditLimitExceededError(101, 60000, 50000), 409),
        (AmountExceedsBalanceError(15000, 12000), 409),
        (InvalidSplitAmountError(6000, 5000), 422),
        (EmptyCartError(), 422),
        (MissingDeliveryAddressError(), 422),
    ],
)
def test_pos_errors_map_to_status(exc: Exception, status: int) -> None:
    with pytest.raises(HTTPException) as raised:
        raise_pos_http_error(exc)

    assert raised.value.status_code == status
    assert raised.value.detail["code"] == exc.code
    assert raised.value.detail["message"] == str(exc)
