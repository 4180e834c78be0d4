"""
Cafe Kernel

The order/billing transaction engine of the cafe system:
- Priced order creation with atomic stock consumption
- Payment recording with exactly-once invoicing
- Append-only audit log
- Typed errors and explicit, injected connection pooling
"""

__version__ = "0.1.0"
