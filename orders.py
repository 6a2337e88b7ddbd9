"""Order workflow: checkout, lookup and payment confirmation.

Every operation receives its collaborators and the requesting identity
explicitly; nothing here keeps state between calls.
"""

import os
from typing import List, Optional, Tuple

import structlog

from errors import AuthorizationError, NotFoundError, ValidationError
from identity import Identity
from payments import PaymentIntentService
from pricing import price_cart
from schemas import CreateOrderRequest, Order, OrderStatus
from stores import OrderStore, ProductCatalog

logger = structlog.get_logger(__name__)

CURRENCY = os.getenv("PAYMENT_CURRENCY", "usd")


def check_permissions(requester: Identity, owner_id: str) -> None:
    if requester.is_elevated:
        return
    if requester.user_id == owner_id:
        return
    raise AuthorizationError("Not authorized to access this route")


async def create_order(
    request: CreateOrderRequest,
    requester: Identity,
    *,
    catalog: ProductCatalog,
    orders: OrderStore,
    payments: PaymentIntentService,
) -> Order:
    if not request.items:
        raise ValidationError("No cart items provided")
    if request.tax is None or request.shipping_fee is None:
        raise ValidationError("Please provide tax and shipping fee")

    order_items, subtotal = await price_cart(request.items, catalog)
    total = subtotal + request.tax + request.shipping_fee

    intent = await payments.create_intent(total, CURRENCY)

    order = Order(
        user=requester.user_id,
        items=order_items,
        subtotal=subtotal,
        tax=request.tax,
        shipping_fee=request.shipping_fee,
        total=total,
        currency=CURRENCY,
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
        status=OrderStatus.PENDING,
    )

    try:
        saved = await orders.insert(order)
    except Exception:
        # The intent must not outlive a checkout that left no order behind
        try:
            await payments.cancel_intent(intent.id)
            logger.warning("payment_intent_cancelled", payment_intent_id=intent.id, user=requester.user_id)
        except Exception:
            logger.exception("payment_intent_cancel_failed", payment_intent_id=intent.id)
        raise

    logger.info(
        "order_created",
        order_id=saved.id,
        user=saved.user,
        items=len(saved.items),
        total=saved.total,
    )
    return saved


async def get_all_orders(*, orders: OrderStore) -> Tuple[List[Order], int]:
    found = await orders.find_all()
    return found, len(found)


async def _find_order(order_id: str, orders: OrderStore) -> Order:
    order = await orders.find_by_id(order_id)
    if order is None:
        raise NotFoundError(f"No order with id: {order_id}")
    return order


async def get_single_order(order_id: str, requester: Identity, *, orders: OrderStore) -> Order:
    order = await _find_order(order_id, orders)
    check_permissions(requester, order.user)
    return order


async def get_current_user_orders(requester: Identity, *, orders: OrderStore) -> Tuple[List[Order], int]:
    found = await orders.find_by_owner(requester.user_id)
    return found, len(found)


async def update_order(
    order_id: str,
    payment_intent_id: Optional[str],
    requester: Identity,
    *,
    orders: OrderStore,
) -> Order:
    order = await _find_order(order_id, orders)
    check_permissions(requester, order.user)

    if not payment_intent_id:
        raise ValidationError("Please provide payment intent id")

    order.payment_intent_id = payment_intent_id
    order.status = OrderStatus.PAID.value
    saved = await orders.save(order)

    logger.info("order_paid", order_id=saved.id, payment_intent_id=payment_intent_id)
    return saved
