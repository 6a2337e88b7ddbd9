import os
import time
from typing import List
from uuid import uuid4

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

import database
import orders as workflow
from errors import NotFoundError, register_exception_handlers, server_error_response
from identity import ADMIN_ROLE, Identity, authorize_roles, get_current_identity
from logging_config import add_context, clear_context, configure_logging
from payments import FakePaymentIntentService, PaymentIntentService
from schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    OrderListResponse,
    OrderResponse,
    Product,
    ProductOut,
    UpdateOrderRequest,
    UpdateOrderResponse,
)
from stores import MongoOrderStore, MongoProductCatalog, OrderStore, ProductCatalog

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(title="Checkout Orders API")

register_exception_handlers(app)


# Registered before CORS so CORS wraps it, including the 500s built here
@app.middleware("http")
async def log_requests(request: Request, call_next):
    clear_context()
    add_context(request_id=uuid4().hex, method=request.method, path=request.url.path)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("unhandled_error")
        response = server_error_response()
    logger.info(
        "request",
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----- Collaborators -----

def get_catalog() -> ProductCatalog:
    return MongoProductCatalog(database.require_db())


def get_order_store() -> OrderStore:
    return MongoOrderStore(database.require_db())


def get_payments() -> PaymentIntentService:
    return FakePaymentIntentService()


# ----- Health -----
@app.get("/")
def read_root():
    return {"message": "Checkout Orders API running"}


@app.get("/health")
async def health():
    response = {
        "backend": "running",
        "database": "not configured",
        "database_name": None,
        "collections": [],
    }
    if database.db is not None:
        response["database_name"] = database.db.name
        try:
            response["collections"] = (await database.db.list_collection_names())[:10]
            response["database"] = "connected"
        except Exception as e:
            logger.warning("database_unreachable", error=str(e))
            response["database"] = "unreachable"
    return response


# ----- Products -----
@app.get("/api/v1/products", response_model=List[ProductOut])
async def list_products(catalog: ProductCatalog = Depends(get_catalog)):
    return await catalog.find_all()


@app.post("/api/v1/products", status_code=201, response_model=ProductOut)
async def create_product(
    product: Product,
    _: Identity = Depends(authorize_roles(ADMIN_ROLE)),
    catalog: ProductCatalog = Depends(get_catalog),
):
    return await catalog.insert(product)


@app.get("/api/v1/products/{product_id}", response_model=ProductOut)
async def get_product(product_id: str, catalog: ProductCatalog = Depends(get_catalog)):
    product = await catalog.find_by_id(product_id)
    if product is None:
        raise NotFoundError(f"No product with id: {product_id}")
    return product


# ----- Orders -----
@app.post("/api/v1/orders", status_code=201, response_model=CreateOrderResponse)
async def create_order(
    body: CreateOrderRequest,
    identity: Identity = Depends(get_current_identity),
    catalog: ProductCatalog = Depends(get_catalog),
    orders: OrderStore = Depends(get_order_store),
    payments: PaymentIntentService = Depends(get_payments),
):
    order = await workflow.create_order(
        body, identity, catalog=catalog, orders=orders, payments=payments
    )
    return CreateOrderResponse(order=order, client_secret=order.client_secret)


@app.get("/api/v1/orders", response_model=OrderListResponse)
async def get_all_orders(
    _: Identity = Depends(authorize_roles(ADMIN_ROLE)),
    orders: OrderStore = Depends(get_order_store),
):
    found, count = await workflow.get_all_orders(orders=orders)
    return OrderListResponse(orders=found, count=count)


@app.get("/api/v1/orders/showAllMyOrders", response_model=OrderListResponse)
async def get_current_user_orders(
    identity: Identity = Depends(get_current_identity),
    orders: OrderStore = Depends(get_order_store),
):
    found, count = await workflow.get_current_user_orders(identity, orders=orders)
    return OrderListResponse(orders=found, count=count)


@app.get("/api/v1/orders/{order_id}", response_model=OrderResponse)
async def get_single_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    orders: OrderStore = Depends(get_order_store),
):
    order = await workflow.get_single_order(order_id, identity, orders=orders)
    return OrderResponse(order=order)


@app.patch("/api/v1/orders/{order_id}", response_model=UpdateOrderResponse)
async def update_order(
    order_id: str,
    body: UpdateOrderRequest,
    identity: Identity = Depends(get_current_identity),
    orders: OrderStore = Depends(get_order_store),
):
    order = await workflow.update_order(
        order_id, body.payment_intent_id, identity, orders=orders
    )
    return UpdateOrderResponse(order=order, payment_intent=order.payment_intent_id)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
