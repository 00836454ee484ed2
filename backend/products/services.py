import logging
from typing import Dict, Iterable, List

from core_backend.errors import ValidationError
from orders.calculators import CartLine
from .models import Product

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    def menu():
        return Product.objects.active().select_related("category")

    @staticmethod
    def resolve_for_order(product_ids: Iterable[int]) -> Dict[int, Product]:
        """
        Fetch the authoritative catalog rows for a cart. Every id must refer
        to an active product; otherwise the cart is rejected as a whole.
        """
        wanted = set(product_ids)
        products = {
            p.id: p
            for p in Product.objects.active()
            .select_related("category")
            .filter(id__in=wanted)
        }
        missing = sorted(wanted - products.keys())
        if missing:
            logger.info(f"Cart references unavailable products: {missing}")
            raise ValidationError(
                "Some items in your cart are no longer available.",
                details={"unavailable_product_ids": missing},
            )
        return products

    @staticmethod
    def price_cart(items) -> List[CartLine]:
        """
        Re-price cart items from the catalog. Client-supplied prices are
        ignored; only product ids, quantities and notes are taken from
        the request.

        Args:
            items: iterable of dicts with ``product_id``, ``quantity`` and
                optional ``notes``
        """
        items = list(items)
        if not items:
            raise ValidationError("Your cart is empty.")

        products = ProductService.resolve_for_order(item["product_id"] for item in items)
        lines = []
        for item in items:
            product = products[item["product_id"]]
            lines.append(
                CartLine(
                    product_id=product.id,
                    name=product.name,
                    unit_price_cents=product.price_cents,
                    quantity=item["quantity"],
                    category_id=product.category_id,
                    notes=item.get("notes") or "",
                )
            )
        return lines
