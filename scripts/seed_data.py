#!/usr/bin/env python3
"""
Seed the store with the cafe's reference data and one demo order.

Recreates the schema, loads the VAT tax, the "Student 10" discount, the
starter menu with recipes and opening stock, then places and pays one
student order through the normal service path.

Usage:
    python3 scripts/seed_data.py                        # settings from env / defaults
    python3 scripts/seed_data.py --url sqlite:///cafe.db
    python3 scripts/seed_data.py --config store.yaml --keep
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

TAXES = [("VAT", Decimal("15.00"))]
DISCOUNTS = [("Student 10", "PERCENT", Decimal("10.00"), "STUDENT")]
INGREDIENTS = [
    # name, unit, min_threshold, opening stock
    ("Coffee Beans", "g", Decimal("500"), Decimal("5000")),
    ("Milk", "ml", Decimal("1000"), Decimal("5000")),
    ("Butter", "g", Decimal("500"), Decimal("2000")),
]
MENU = [
    # name, price, recipe {ingredient: quantity per unit}
    ("Espresso", Decimal("3.50"), {"Coffee Beans": Decimal("18")}),
    ("Latte", Decimal("4.50"), {"Coffee Beans": Decimal("18"), "Milk": Decimal("200")}),
    ("Croissant", Decimal("2.80"), {"Butter": Decimal("15")}),
]


def _seed_reference_data(db):
    from cafe_kernel.models import (
        Discount,
        Ingredient,
        InventoryItem,
        MenuItem,
        RecipeLine,
        Tax,
    )

    with db.transaction("seed_reference_data") as session:
        taxes = [Tax(name=name, rate=rate) for name, rate in TAXES]
        discounts = [
            Discount(name=name, type=kind, value=value, applies_to=applies_to)
            for name, kind, value, applies_to in DISCOUNTS
        ]
        session.add_all(taxes + discounts)

        ingredients = {}
        for name, unit, threshold, stock in INGREDIENTS:
            ingredient = Ingredient(name=name, unit=unit, min_threshold=threshold)
            session.add(ingredient)
            session.flush()
            session.add(InventoryItem(ingredient_id=ingredient.id, quantity=stock))
            ingredients[name] = ingredient

        menu = {}
        for name, price, recipe in MENU:
            item = MenuItem(name=name, price=price, is_active=True)
            item.recipe_lines = [
                RecipeLine(ingredient_id=ingredients[ing].id, quantity_per_unit=qty)
                for ing, qty in recipe.items()
            ]
            session.add(item)
            menu[name] = item
        session.flush()

        return (
            {name: item.id for name, item in menu.items()},
            taxes[0].id,
            discounts[0].id,
        )


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the cafe store")
    parser.add_argument("--url", help="Database URL (overrides config and CAFE_DATABASE_URL)")
    parser.add_argument("--config", type=Path, help="YAML file with a 'store:' mapping")
    parser.add_argument("--keep", action="store_true", help="Do not drop existing tables first")
    args = parser.parse_args()

    from dataclasses import replace

    from cafe_kernel.config import load_store_settings
    from cafe_kernel.db.engine import Database
    from cafe_kernel.domain.clock import SystemClock
    from cafe_kernel.domain.dtos import OrderLineRequest
    from cafe_kernel.domain.values import CustomerCategory
    from cafe_kernel.exceptions import CafeKernelError
    from cafe_kernel.logging_config import configure_logging
    from cafe_kernel.selectors import InventorySelector, OrderSelector
    from cafe_kernel.services import OrderBuilder, PaymentRecorder, TransactionCoordinator

    configure_logging()

    try:
        settings = load_store_settings(args.config)
    except (OSError, ValueError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    if args.url:
        settings = replace(settings, url=args.url)

    print()
    print("  [1/4] Connecting...")
    with Database.from_settings(settings) as db:
        print("  [2/4] Recreating schema...")
        if not args.keep:
            db.drop_tables()
        db.create_tables()

        print("  [3/4] Loading reference data...")
        menu_ids, tax_id, discount_id = _seed_reference_data(db)

        print("  [4/4] Placing and paying a demo order...")
        clock = SystemClock(settings.tzinfo)
        builder = OrderBuilder(db, TransactionCoordinator(db, clock))
        try:
            order_id = builder.build_order(
                "Demo Student",
                CustomerCategory.STUDENT,
                [
                    OrderLineRequest(menu_ids["Latte"], 2),
                    OrderLineRequest(menu_ids["Croissant"], 1),
                ],
                discount_id=discount_id,
                tax_id=tax_id,
            )
            with db.read_session() as session:
                total = OrderSelector(session).get_summary(order_id).total
            receipt = PaymentRecorder(db, clock).record_payment(order_id, total, "CASH")
        except CafeKernelError as exc:
            print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
            return 1

        with db.read_session() as session:
            low = InventorySelector(session).low_stock()

    print()
    print(f"  Done. Order {order_id} paid, invoice {receipt.invoice_number} total {receipt.total}.")
    if low:
        print("  Low stock: " + ", ".join(item.name for item in low))
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
