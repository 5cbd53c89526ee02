"""Product catalog domain service."""

import logging
from decimal import Decimal
from typing import Optional, Union

from cantina.database.base import Database
from cantina.domain.entities import Product, money
from cantina.domain.errors import (
    ConflictError,
    InvalidAmount,
    NotFoundError,
    ValidationError,
    duplicate_code,
    product_not_found,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for products offered at the counter."""

    def __init__(self, db: Database):
        """Initialize catalog service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_product(
        self,
        name: str,
        price,
        category: Optional[str] = None,
        code: Optional[str] = None,
        stock: Optional[int] = None,
    ) -> int:
        """Create a new product.

        Args:
            name: Product name
            price: Unit price, zero or more
            category: Optional category label
            code: Optional short code, unique when given
            stock: Known stock count, or None when stock is not tracked

        Returns:
            Product ID

        Raises:
            ValidationError: If name is empty or stock is negative
            InvalidAmount: If price is negative
            ConflictError: If the code is already taken
        """
        if not name or not name.strip():
            raise ValidationError("Product name must not be empty")
        unit_price = money(price)
        if unit_price < 0:
            raise InvalidAmount("Price must not be negative")
        if stock is not None and stock < 0:
            raise ValidationError("Stock must not be negative")
        if code and self.db.get_product_by_code(code) is not None:
            raise ConflictError(duplicate_code("Product", code))

        product_id = self.db.create_product(
            name=name.strip(), price=unit_price, category=category, code=code or None, stock=stock
        )
        logger.info("Created product %s (%s)", product_id, name)
        return product_id

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.get_product(product_id)

    def require_product(self, product_id: int) -> Product:
        product = self.db.get_product(product_id)
        if product is None:
            raise NotFoundError(product_not_found(product_id))
        return product

    def find_product(self, ref: Union[int, str]) -> Product:
        """Find a product by ID or code.

        Args:
            ref: Numeric ID or product code

        Returns:
            Product entity

        Raises:
            NotFoundError: If no product matches
        """
        if isinstance(ref, int) or str(ref).isdigit():
            product = self.db.get_product(int(ref))
            if product is not None:
                return product
        product = self.db.get_product_by_code(str(ref))
        if product is None:
            raise NotFoundError(product_not_found(ref))
        return product

    def list_products(
        self, include_inactive: bool = False, search: Optional[str] = None
    ) -> list[Product]:
        """List products ordered by name.

        Args:
            include_inactive: Include products withdrawn from sale
            search: Case-insensitive match on name, code or category
        """
        query = search.strip().lower() if search else None
        result = []
        for product in self.db.list_products():
            if not include_inactive and not product.is_active:
                continue
            if query:
                haystacks = (product.name, product.code or "", product.category or "")
                if not any(query in h.lower() for h in haystacks):
                    continue
            result.append(product)
        return result

    def set_stock(self, product_id: int, stock: Optional[int]) -> None:
        """Set the known stock count (None stops tracking)."""
        if stock is not None and stock < 0:
            raise ValidationError("Stock must not be negative")
        self.require_product(product_id)
        self.db.update_product(product_id, stock=stock)

    def set_active(self, product_id: int, is_active: bool) -> None:
        self.require_product(product_id)
        self.db.update_product(product_id, is_active=is_active)

    def set_price(self, product_id: int, price) -> Decimal:
        unit_price = money(price)
        if unit_price < 0:
            raise InvalidAmount("Price must not be negative")
        self.require_product(product_id)
        self.db.update_product(product_id, price=unit_price)
        return unit_price
