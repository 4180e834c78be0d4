"""Database infrastructure for the cafe kernel."""

from cafe_kernel.db.base import Base, TimestampedBase
from cafe_kernel.db.engine import Database

__all__ = ["Base", "Database", "TimestampedBase"]
