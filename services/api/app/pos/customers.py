from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from packages.shared.schemas.catalog_v1 import CustomerV1
from services.api.app.pos.money import to_cents


@dataclass(frozen=True, slots=True)
class Customer:
    """Billed customer snapshot. The backend owns the balance; this copy is read-only."""

    customer_id: int
    name: str
    current_balance_cents: int = 0
    credit_limit_cents: int = 0
    phone: str | None = None
    address: str | None = None

    @classmethod
    def from_wire(cls, row: CustomerV1 | dict) -> Customer:
        if not isinstance(row, CustomerV1):
            row = CustomerV1.model_validate(row)

        return cls(
            customer_id=row.id,
            name=row.name,
            current_balance_cents=to_cents(row.current_balance),
            credit_limit_cents=to_cents(row.credit_limit),
            phone=row.phone,
            address=row.address,
        )

    @property
    def has_debt(self) -> bool:
        return self.current_balance_cents > 0


def search_customers(customers: Iterable[Customer], text: str | None) -> list[Customer]:
    needle = (text or "").strip().lower()
    if not needle:
        return list(customers)

    return [
        c
        for c in customers
        if needle in c.name.lower() or (c.phone is not None and needle in c.phone)
    ]


def customers_with_debt(customers: Iterable[Customer]) -> list[Customer]:
    return [c for c in customers if c.has_debt]
