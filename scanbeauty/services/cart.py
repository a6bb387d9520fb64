"""
Visitor cart: an explicit context object per browser session.

Persistence goes through a CartStorage adapter so the same Cart works over
process memory or any session store.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from scanbeauty.schemas import CartLine, CartView, Product

MAX_QUANTITY = 20


@dataclass
class Cart:
    session_id: str
    quantities: dict[str, int] = field(default_factory=dict)

    def add(self, product_id: str, quantity: int = 1) -> None:
        current = self.quantities.get(product_id, 0)
        self.quantities[product_id] = min(current + quantity, MAX_QUANTITY)

    def add_many(self, product_ids: list[str]) -> None:
        for product_id in product_ids:
            if product_id not in self.quantities:
                self.add(product_id)

    def remove(self, product_id: str) -> None:
        self.quantities.pop(product_id, None)

    def clear(self) -> None:
        self.quantities.clear()

    @property
    def product_ids(self) -> list[str]:
        return list(self.quantities)

    def view(self, products: list[Product]) -> CartView:
        """Render against catalog rows; ids no longer in the catalog are left out."""
        by_id = {p.id: p for p in products}
        lines = [
            CartLine(product=by_id[pid], quantity=qty)
            for pid, qty in self.quantities.items()
            if pid in by_id
        ]
        total = round(sum(line.product.price * line.quantity for line in lines), 2)
        return CartView(
            session_id=self.session_id,
            items=lines,
            total=total,
            product_ids=[line.product.id for line in lines],
        )


class CartStorage(Protocol):
    async def load(self, session_id: str) -> Optional[Cart]: ...

    async def save(self, cart: Cart) -> None: ...

    async def delete(self, session_id: str) -> None: ...

    async def update(self, session_id: str, mutate: Callable[[Cart], None]) -> Cart: ...


class InMemoryCartStorage:
    def __init__(self) -> None:
        self._carts: dict[str, dict[str, int]] = {}
        self._lock = asyncio.Lock()

    async def load(self, session_id: str) -> Optional[Cart]:
        async with self._lock:
            stored = self._carts.get(session_id)
            if stored is None:
                return None
            return Cart(session_id=session_id, quantities=dict(stored))

    async def save(self, cart: Cart) -> None:
        async with self._lock:
            self._carts[cart.session_id] = dict(cart.quantities)

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            self._carts.pop(session_id, None)

    async def update(self, session_id: str, mutate: Callable[[Cart], None]) -> Cart:
        """Load, mutate and save the cart as one step under the storage lock."""
        async with self._lock:
            cart = Cart(session_id=session_id, quantities=dict(self._carts.get(session_id, {})))
            mutate(cart)
            self._carts[session_id] = dict(cart.quantities)
            return Cart(session_id=session_id, quantities=dict(cart.quantities))


async def load_or_create(storage: CartStorage, session_id: str) -> Cart:
    cart = await storage.load(session_id)
    return cart if cart is not None else Cart(session_id=session_id)
