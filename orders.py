"""
Checkout and order history.

An order is a snapshot: line items carry their own name/price/quantity so
later product edits or deletions never change past orders. The total is the
one declared by the client; nothing is re-priced server side.
"""

import logging
from typing import Any, Dict, List

from pymongo import DESCENDING
from pymongo.database import Database

from catalog import resolve_products
from database import create_document, serialize_doc, to_object_id
from models import CheckoutRequest, OrderItemOut, OrderOut
from schemas import Order, OrderItem

logger = logging.getLogger(__name__)


def _serialize_order(doc: Dict[str, Any], products: Dict[Any, Any]) -> OrderOut:
    data = serialize_doc(doc)
    data["items"] = [
        OrderItemOut(
            product_id=str(raw["product_id"]),
            name=raw.get("name", ""),
            price=raw["price"],
            quantity=raw["quantity"],
            product=products.get(raw["product_id"]),
        )
        for raw in doc.get("items", [])
    ]
    return OrderOut.model_validate(data)


def checkout(db: Database, user_id: str, payload: CheckoutRequest) -> OrderOut:
    items = [
        OrderItem(
            # Soft reference: ids that are not ObjectIds are kept as given
            product_id=to_object_id(p.id) or p.id,
            name=p.name,
            price=p.price,
            quantity=p.quantity,
        )
        for p in payload.products
    ]
    order = Order(
        user_id=to_object_id(user_id) or user_id,
        items=items,
        total=payload.total,
        address=payload.user.model_dump(),
    )
    order_id = create_document(db, "order", order)
    logger.info("Order %s created for user %s (%d items, total %s)", order_id, user_id, len(items), payload.total)
    created = db["order"].find_one({"_id": to_object_id(order_id)})
    return _serialize_order(created, resolve_products(db, [i["product_id"] for i in created["items"]]))


def list_orders(db: Database, user_id: str) -> List[OrderOut]:
    owner = to_object_id(user_id) or user_id
    docs = list(db["order"].find({"user_id": owner}).sort([("created_at", DESCENDING), ("_id", DESCENDING)]))
    products = resolve_products(db, [item["product_id"] for doc in docs for item in doc.get("items", [])])
    return [_serialize_order(doc, products) for doc in docs]
