"""Cart and pricing for one checkout."""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from cantina.domain.entities import LineItem, Product, money
from cantina.domain.errors import InsufficientStock, NotFoundError, ValidationError


@dataclass(frozen=True)
class CartLine:
    """Product line with the unit price captured when it was added."""

    product: Product
    quantity: int
    unit_price: Decimal
    note: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return money(self.unit_price * self.quantity)

    def to_line_item(self) -> LineItem:
        return LineItem(
            product_id=self.product.id,
            name=self.product.name,
            quantity=self.quantity,
            unit_price=self.unit_price,
            note=self.note,
        )


class Cart:
    """Ordered collection of priced product lines.

    Stock is only checked here, never decremented; settlement moves stock.
    """

    def __init__(self, enforce_stock_limit: bool = False):
        self.enforce_stock_limit = enforce_stock_limit
        self._lines: dict[int, CartLine] = {}

    def _check_stock(self, product: Product, quantity: int) -> None:
        if not self.enforce_stock_limit or product.stock is None:
            return
        if quantity > product.stock:
            raise InsufficientStock(product.name, product.stock)

    def _require_line(self, product_id: int) -> CartLine:
        line = self._lines.get(product_id)
        if line is None:
            raise NotFoundError(f"Product {product_id} is not in the cart")
        return line

    def add(self, product: Product, quantity: int = 1) -> CartLine:
        """Add a product, merging with its existing line.

        Raises:
            ValidationError: If quantity is below 1 or the product is inactive
            InsufficientStock: If the line would exceed the known stock while
                the stock limit is enforced
        """
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        if not product.is_active:
            raise ValidationError(f"Product '{product.name}' is not available for sale")

        existing = self._lines.get(product.id)
        current = existing.quantity if existing is not None else 0
        self._check_stock(product, current + quantity)

        if existing is not None:
            line = replace(existing, quantity=current + quantity)
        else:
            line = CartLine(product=product, quantity=quantity, unit_price=product.price)
        self._lines[product.id] = line
        return line

    def remove(self, product_id: int) -> None:
        """Remove a line entirely."""
        self._require_line(product_id)
        del self._lines[product_id]

    def adjust_quantity(self, product_id: int, delta: int) -> CartLine:
        """Change a line quantity by delta, never going below 1."""
        line = self._require_line(product_id)
        new_quantity = max(1, line.quantity + delta)
        if new_quantity > line.quantity:
            self._check_stock(line.product, new_quantity)
        line = replace(line, quantity=new_quantity)
        self._lines[product_id] = line
        return line

    def set_note(self, product_id: int, note: Optional[str]) -> CartLine:
        """Attach a kitchen note to a line (None or empty clears it)."""
        line = replace(self._require_line(product_id), note=note or None)
        self._lines[product_id] = line
        return line

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def total(self) -> Decimal:
        return money(sum((line.subtotal for line in self._lines.values()), Decimal("0")))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def clear(self) -> None:
        self._lines.clear()

    def to_line_items(self) -> tuple[LineItem, ...]:
        return tuple(line.to_line_item() for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)
