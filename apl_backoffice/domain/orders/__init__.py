"""Orders domain - read-only order views used by reminders"""

from .provider import OrderDataProvider, OrderSnapshot

__all__ = ["OrderDataProvider", "OrderSnapshot"]
