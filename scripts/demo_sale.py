from __future__ import annotations

import argparse
import logging

from services.api.app.pos.catalog import CatalogSnapshot
from services.api.app.pos.customers import Customer
from services.api.app.pos.draft import build_order_draft, build_receipt
from services.api.app.pos.errors import PosError
from services.api.app.pos.money import format_cents
from services.api.app.pos.payment import PaymentMethod
from services.api.app.pos.pricing import PriceOverrides, resolve_price
from services.api.app.services.backend_base import BackendAdapterError
from services.api.app.services.backend_factory import get_backend_adapter
from services.api.app.services.store import store


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one driver sale end to end")
    parser.add_argument("--driver-id", default="drv-demo")
    parser.add_argument("--customer-id", type=int, default=101)
    parser.add_argument(
        "--scan",
        action="append",
        default=None,
        help="Barcode or SKU to add (repeatable). Defaults to a small mixed basket.",
    )
    parser.add_argument(
        "--payment",
        choices=[m.value for m in PaymentMethod],
        default=PaymentMethod.CASH.value,
    )
    parser.add_argument("--cash", default="", help='Cash part of a split payment, e.g. "$5"')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    adapter = get_backend_adapter()

    try:
        catalog = CatalogSnapshot.from_wire(adapter.load_catalog())
        customers = {c.id: Customer.from_wire(c) for c in adapter.load_customers()}
        customer = customers.get(args.customer_id)
        if customer is None:
            print(f"Unknown customer {args.customer_id}")
            return 2
        overrides = PriceOverrides.from_wire(adapter.load_customer_prices(customer.customer_id))
    except BackendAdapterError as e:
        print(f"Backend error: {e}")
        return 1

    session = store.open_session(args.driver_id, catalog)
    session.attach_customer(customer, overrides)

    for code in args.scan or ["6001000000011", "6001000000011", "6001000000028", "CHP-50"]:
        try:
            product, unit_type = catalog.lookup_code(code)
            session.cart.add_line(product, unit_type, resolve_price(product, unit_type, overrides))
        except PosError as e:
            print(f"skip {code}: {e}")

    session.allocator.select(PaymentMethod(args.payment), session.cart.total_cents)
    if args.payment == PaymentMethod.SPLIT.value:
        session.allocator.enter_cash_amount(args.cash)

    try:
        draft = build_order_draft(session.cart, session.allocator, customer=customer)
    except PosError as e:
        print(f"Order rejected ({e.code}): {e}")
        return 2

    try:
        accepted = adapter.submit_order(draft.to_submission())
    except BackendAdapterError as e:
        print(f"Backend error: {e}")
        return 1

    receipt = build_receipt(draft, accepted.order_number, customer)
    session.reset_after_submit()

    print(f"Order {receipt.order_number} for {receipt.customer_name}")
    for line in receipt.lines:
        print(
            f"  {line.quantity} x {line.name} ({line.unit_label}) "
            f"@ {format_cents(line.unit_price_cents)} = {format_cents(line.line_total_cents)}"
        )
    print(f"Total  {format_cents(receipt.total_cents)}")
    print(f"Cash   {format_cents(receipt.cash_amount_cents)}")
    print(f"Credit {format_cents(receipt.credit_amount_cents)}")
    if receipt.projected_balance_cents is not None:
        print(f"New balance {format_cents(receipt.projected_balance_cents)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
