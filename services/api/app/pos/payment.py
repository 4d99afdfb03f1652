"""Payment allocation for orders and cash collections.

An order's payment is a closed union of ``CashPayment``, ``CreditPayment`` and
``SplitPayment``; ``allocate`` turns one into concrete cash/credit amounts for a total.
``PaymentAllocator`` is the small state machine behind the payment picker.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from packages.shared.schemas.order_v1 import CollectionPaymentTypeV1, CollectionSubmissionV1
from services.api.app.pos.customers import Customer
from services.api.app.pos.errors import (
    AmountExceedsBalanceError,
    CreditLimitExceededError,
    InvalidSplitAmountError,
    NonPositiveAmountError,
)
from services.api.app.pos.money import parse_amount, to_major


class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT = "credit"
    SPLIT = "split"


@dataclass(frozen=True, slots=True)
class CashPayment:
    method: ClassVar[PaymentMethod] = PaymentMethod.CASH


@dataclass(frozen=True, slots=True)
class CreditPayment:
    method: ClassVar[PaymentMethod] = PaymentMethod.CREDIT


@dataclass(frozen=True, slots=True)
class SplitPayment:
    cash_amount_cents: int
    method: ClassVar[PaymentMethod] = PaymentMethod.SPLIT


Payment = CashPayment | CreditPayment | SplitPayment


@dataclass(frozen=True, slots=True)
class PaymentAllocation:
    method: PaymentMethod
    cash_amount_cents: int
    credit_amount_cents: int

    @property
    def total_cents(self) -> int:
        return self.cash_amount_cents + self.credit_amount_cents


def allocate(payment: Payment, total_cents: int) -> PaymentAllocation:
    if isinstance(payment, CashPayment):
        return PaymentAllocation(PaymentMethod.CASH, total_cents, 0)

    if isinstance(payment, CreditPayment):
        return PaymentAllocation(PaymentMethod.CREDIT, 0, total_cents)

    if isinstance(payment, SplitPayment):
        cash = payment.cash_amount_cents
        if cash <= 0 or cash >= total_cents:
            raise InvalidSplitAmountError(cash, total_cents)
        return PaymentAllocation(PaymentMethod.SPLIT, cash, total_cents - cash)

    raise TypeError(f"Unknown payment: {payment!r}")


def check_credit_limit(customer: Customer, allocation: PaymentAllocation) -> None:
    """Reject allocations that push ``customer`` past a positive credit limit."""

    if customer.credit_limit_cents <= 0 or allocation.credit_amount_cents <= 0:
        return

    projected = customer.current_balance_cents + allocation.credit_amount_cents
    if projected > customer.credit_limit_cents:
        raise CreditLimitExceededError(customer.customer_id, projected, customer.credit_limit_cents)


class PaymentAllocator:
    def __init__(self, enforce_credit_limit: bool = False) -> None:
        self.enforce_credit_limit = enforce_credit_limit
        self._method = PaymentMethod.CASH
        self._cash_amount_cents = 0

    @property
    def method(self) -> PaymentMethod:
        return self._method

    @property
    def cash_amount_cents(self) -> int:
        return self._cash_amount_cents

    def select(self, method: PaymentMethod, total_cents: int = 0) -> None:
        """Switch method. Cash takes the whole total, credit none, split keeps the entry."""

        method = PaymentMethod(method)
        if method == PaymentMethod.CASH:
            self._cash_amount_cents = total_cents
        elif method == PaymentMethod.CREDIT:
            self._cash_amount_cents = 0
        self._method = method

    def set_cash_amount(self, cents: int) -> None:
        self._cash_amount_cents = cents

    def enter_cash_amount(self, text: str | None) -> int:
        self._cash_amount_cents = parse_amount(text)
        return self._cash_amount_cents

    def payment(self) -> Payment:
        if self._method == PaymentMethod.CASH:
            return CashPayment()
        if self._method == PaymentMethod.CREDIT:
            return CreditPayment()
        return SplitPayment(cash_amount_cents=self._cash_amount_cents)

    def validate(self, total_cents: int, customer: Customer | None = None) -> PaymentAllocation:
        allocation = allocate(self.payment(), total_cents)
        if self.enforce_credit_limit and customer is not None:
            check_credit_limit(customer, allocation)
        return allocation

    def reset(self) -> None:
        self._method = PaymentMethod.CASH
        self._cash_amount_cents = 0


class CollectionMethod(str, Enum):
    CASH = "cash"
    CHECK = "check"


@dataclass(frozen=True, slots=True)
class CollectionAllocation:
    customer_id: int
    amount_cents: int
    method: CollectionMethod
    previous_balance_cents: int
    check_number: str | None = None
    notes: str | None = None

    @property
    def remaining_balance_cents(self) -> int:
        return self.previous_balance_cents - self.amount_cents

    def to_submission(self) -> CollectionSubmissionV1:
        return CollectionSubmissionV1(
            customer_id=self.customer_id,
            amount=to_major(self.amount_cents),
            payment_type=CollectionPaymentTypeV1(self.method.value),
            check_number=self.check_number if self.method == CollectionMethod.CHECK else None,
            notes=self.notes,
        )


def validate_collection(
    customer: Customer,
    amount_cents: int,
    method: CollectionMethod = CollectionMethod.CASH,
    check_number: str | None = None,
    notes: str | None = None,
) -> CollectionAllocation:
    if amount_cents <= 0:
        raise NonPositiveAmountError(amount_cents)
    if amount_cents > customer.current_balance_cents:
        raise AmountExceedsBalanceError(amount_cents, customer.current_balance_cents)

    return CollectionAllocation(
        customer_id=customer.customer_id,
        amount_cents=amount_cents,
        method=CollectionMethod(method),
        previous_balance_cents=customer.current_balance_cents,
        check_number=(check_number or "").strip() or None,
        notes=(notes or "").strip() or None,
    )


def validate_collection_entry(
    customer: Customer,
    text: str | None,
    method: CollectionMethod = CollectionMethod.CASH,
    check_number: str | None = None,
    notes: str | None = None,
) -> CollectionAllocation:
    return validate_collection(customer, parse_amount(text), method, check_number, notes)


def quick_collection_amounts(balance_cents: int) -> list[int]:
    """Shortcut buttons: $50, $100, half and the full balance, capped and de-duplicated."""

    candidates = [
        min(5000, balance_cents),
        min(10000, balance_cents),
        balance_cents // 2,
        balance_cents,
    ]
    out: list[int] = []
    for amount in candidates:
        if amount > 0 and amount not in out:
            out.append(amount)
    return out
