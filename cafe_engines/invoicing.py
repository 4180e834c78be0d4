"""
Invoice numbering.

Invoice numbers are derived, never allocated: ``INV-<YYYYMMDD>-<order id>``
with the order id left-padded to six digits.  Because an order carries at
most one invoice and order ids are unique, the number is unique too.

The issue date is always passed in by the caller; this module never reads
the system clock.
"""

from datetime import date, datetime

INVOICE_PREFIX = "INV"
ORDER_ID_WIDTH = 6


def format_invoice_number(order_id: int, issued_on: date | datetime) -> str:
    """
    Build the invoice number for an order.

    Ids wider than six digits are kept whole, not truncated.

    >>> format_invoice_number(7, date(2026, 1, 28))
    'INV-20260128-000007'
    """
    if order_id <= 0:
        raise ValueError(f"Order id must be positive, got {order_id}")
    if isinstance(issued_on, datetime):
        issued_on = issued_on.date()
    return f"{INVOICE_PREFIX}-{issued_on:%Y%m%d}-{order_id:0{ORDER_ID_WIDTH}d}"
