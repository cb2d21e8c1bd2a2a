from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Order:
    order_id: str
    total: float = 0.0

    class Line:
        sku: str = ""


class OrderRepository:
    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}

    def add(self, order: Order) -> None:
        self._orders[order.order_id] = order
