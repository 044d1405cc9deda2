"""Inventory port: the stock collaborator notified when an order is delivered."""

from abc import ABC, abstractmethod


class InventoryPort(ABC):
    @abstractmethod
    def decrement_stock(self, order_id: str, items: list[dict]) -> bool:
        """Remove delivered items from stock.

        Must be idempotent per ``order_id``; returns False when the order was
        already processed.
        """
        ...
