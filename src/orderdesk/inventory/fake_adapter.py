"""In-memory inventory that records stock movements per order."""

from collections import Counter

from orderdesk.inventory.port import InventoryPort


class FakeInventory(InventoryPort):
    def __init__(self) -> None:
        self.processed: set[str] = set()
        self.decremented: Counter = Counter()
        self.calls: list[dict] = []

    def decrement_stock(self, order_id: str, items: list[dict]) -> bool:
        self.calls.append({"order_id": order_id, "items": items})
        if order_id in self.processed:
            return False
        self.processed.add(order_id)
        for item in items:
            self.decremented[item["item_id"]] += item["quantity"]
        return True
