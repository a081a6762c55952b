"""Static furniture catalog."""
from __future__ import annotations

from typing import List, Tuple

from .models import Furniture

INVENTORY: Tuple[Furniture, ...] = (
    Furniture(id=1, name="Chair", description="Comfortable chair", price=49.99),
    Furniture(id=2, name="Table", description="Sturdy table", price=99.99),
)


def list_furniture() -> List[Furniture]:
    return list(INVENTORY)


__all__ = ["INVENTORY", "list_furniture"]
