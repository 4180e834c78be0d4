"""
Module: cafe_engines
Responsibility:
    Pure calculation layer for the order/billing flow: pricing (discount,
    tax, totals) and invoice numbering.

Architecture position:
    Engines -- zero I/O.  May import cafe_kernel.domain.values and
    cafe_kernel.logging_config only.  MUST NOT import services, selectors
    or models.

Invariants enforced:
    - Decimal-only arithmetic; money is quantized to cents half-up.
    - Engines never read the clock; dates are passed in.
    - Identical inputs always produce identical outputs.

Usage:
    from cafe_engines import price_order, format_invoice_number
"""

from cafe_engines.invoicing import format_invoice_number
from cafe_engines.pricing import (
    DiscountTerms,
    PricingResult,
    TaxTerms,
    compute_discount,
    compute_subtotal,
    compute_tax,
    line_total,
    price_order,
)

__all__ = [
    "DiscountTerms",
    "PricingResult",
    "TaxTerms",
    "compute_discount",
    "compute_subtotal",
    "compute_tax",
    "format_invoice_number",
    "line_total",
    "price_order",
]
