"""Inventory adapter factory. Only the in-memory adapter ships with OrderDesk."""

import os

from orderdesk.inventory.port import InventoryPort

_inventory_instance: InventoryPort | None = None


def get_inventory() -> InventoryPort:
    global _inventory_instance
    if _inventory_instance is None:
        adapter = os.environ.get("INVENTORY_ADAPTER", "fake")
        if adapter == "fake":
            from orderdesk.inventory.fake_adapter import FakeInventory

            _inventory_instance = FakeInventory()
        else:
            raise ValueError(f"Unknown inventory adapter: {adapter}")
    return _inventory_instance


def set_inventory(inventory: InventoryPort) -> None:
    global _inventory_instance
    _inventory_instance = inventory


def reset_inventory() -> None:
    global _inventory_instance
    _inventory_instance = None
