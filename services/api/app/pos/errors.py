"""Local validation faults raised by the point-of-sale engine.

Every fault is a rejected operation: the cart, allocator and catalog are left exactly as
they were before the call. Callers surface ``code`` / ``str(e)`` to the user; nothing here
is retried.
"""

from __future__ import annotations


class PosError(Exception):
    """Base class for point-of-sale validation errors."""

    code = "POS_ERROR"


class UnsupportedUnitTypeError(PosError):
    code = "UNSUPPORTED_UNIT_TYPE"

    def __init__(self, product_id: int, unit_type: str) -> None:
        super().__init__(f"Product {product_id} is not sold by {unit_type}")
        self.product_id = product_id
        self.unit_type = unit_type


class StockExceededError(PosError):
    code = "STOCK_EXCEEDED"

    def __init__(self, product_id: int, requested: int, available: int) -> None:
        super().__init__(
            f"Not enough stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidSplitAmountError(PosError):
    code = "INVALID_SPLIT_AMOUNT"

    def __init__(self, cash_amount_cents: int, total_cents: int) -> None:
        super().__init__(
            "Split payment needs a cash amount greater than zero and less than the total. "
            f"cash={cash_amount_cents} total={total_cents}"
        )
        self.cash_amount_cents = cash_amount_cents
        self.total_cents = total_cents


class NonPositiveAmountError(PosError):
    code = "NON_POSITIVE_AMOUNT"

    def __init__(self, amount_cents: int) -> None:
        super().__init__(f"Amount must be greater than zero. amount={amount_cents}")
        self.amount_cents = amount_cents


class AmountExceedsBalanceError(PosError):
    code = "AMOUNT_EXCEEDS_BALANCE"

    def __init__(self, amount_cents: int, balance_cents: int) -> None:
        super().__init__(
            f"Amount exceeds outstanding balance. amount={amount_cents} balance={balance_cents}"
        )
        self.amount_cents = amount_cents
        self.balance_cents = balance_cents


class CreditLimitExceededError(PosError):
    code = "CREDIT_LIMIT_EXCEEDED"

    def __init__(self, customer_id: int, projected_balance_cents: int, limit_cents: int) -> None:
        super().__init__(
            f"Customer {customer_id} would exceed the credit limit. "
            f"projected={projected_balance_cents} limit={limit_cents}"
        )
        self.customer_id = customer_id
        self.projected_balance_cents = projected_balance_cents
        self.limit_cents = limit_cents


class EmptyCartError(PosError):
    code = "EMPTY_CART"

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class NoCustomerSelectedError(PosError):
    code = "NO_CUSTOMER_SELECTED"

    def __init__(self) -> None:
        super().__init__("Select a customer before placing the order")


class ProductNotFoundError(PosError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, ref: object) -> None:
        super().__init__(f"Product not found: {ref}")
        self.ref = ref


class LineNotFoundError(PosError):
    code = "LINE_NOT_FOUND"

    def __init__(self, product_id: int, unit_type: str) -> None:
        super().__init__(f"No cart line for product {product_id} ({unit_type})")
        self.product_id = product_id
        self.unit_type = unit_type


class MissingContactInfoError(PosError):
    code = "MISSING_CONTACT_INFO"

    def __init__(self) -> None:
        super().__init__("Enter a name and phone number")


class MissingDeliveryAddressError(PosError):
    code = "MISSING_DELIVERY_ADDRESS"

    def __init__(self) -> None:
        super().__init__("Enter a delivery address")
