"""Server-side cart pricing."""

from typing import List, Sequence, Tuple

from errors import NotFoundError, ValidationError
from schemas import CartItem, OrderItem
from stores import ProductCatalog


async def price_cart(items: Sequence[CartItem], catalog: ProductCatalog) -> Tuple[List[OrderItem], int]:
    """Build trusted order items from the catalog and return them with the subtotal.

    Only product ids and quantities are taken from the cart. Lookup stops at
    the first product that does not exist.
    """
    if not items:
        raise ValidationError("No cart items provided")

    order_items: List[OrderItem] = []
    subtotal = 0

    for item in items:
        product = await catalog.find_by_id(item.product_id)
        if product is None:
            raise NotFoundError(f"No product with id: {item.product_id}")

        order_items.append(OrderItem(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=item.quantity,
            image=product.image,
        ))
        subtotal += product.price * item.quantity

    return order_items, subtotal
