"""Product listing, filtering and admin management."""

import logging
import math
import random
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException
from pymongo.database import Database

from database import create_document, get_documents, serialize_doc, to_object_id
from models import ProductIn, ProductOut, ProductPage, ProductUpdate

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 200


def serialize_product(doc: Dict[str, Any]) -> ProductOut:
    return ProductOut.model_validate(serialize_doc(doc))


def _page_of(db: Database, query: Dict[str, Any], page: int, limit: int) -> ProductPage:
    collection = db["product"]
    skip = (page - 1) * limit
    items = [serialize_product(d) for d in collection.find(query).skip(skip).limit(limit)]
    total = collection.count_documents(query)
    return ProductPage(products=items, total=total, page=page, pages=math.ceil(total / limit))


def _is_set(value: Optional[str]) -> bool:
    # The storefront sends the literal "undefined" for an unselected filter
    return bool(value) and value != "undefined"


def build_filter(category: Optional[str] = None, brand: Optional[str] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if _is_set(category):
        query["category"] = {"$regex": re.escape(category), "$options": "i"}
    if _is_set(brand):
        query["brand"] = {"$regex": re.escape(brand), "$options": "i"}
    return query


def list_products(db: Database, page: int = 1, limit: int = DEFAULT_LIMIT) -> ProductPage:
    return _page_of(db, {}, page, limit)


def filter_products(db: Database, category: Optional[str] = None, brand: Optional[str] = None, page: int = 1, limit: int = DEFAULT_LIMIT) -> ProductPage:
    return _page_of(db, build_filter(category, brand), page, limit)


def random_product(db: Database) -> Optional[ProductOut]:
    """Pick a product at a random offset.

    The count and the skip are two separate queries, so the pick is only
    uniform while the collection size does not change in between.
    """
    count = db["product"].count_documents({})
    if count == 0:
        return None
    offset = random.randrange(count)
    doc = next(iter(db["product"].find({}).skip(offset).limit(1)), None)
    return serialize_product(doc) if doc else None


def _product_oid(product_id: str):
    oid = to_object_id(product_id)
    if oid is None:
        raise HTTPException(status_code=400, detail="Invalid product id")
    return oid


def get_product(db: Database, product_id: str) -> ProductOut:
    product = db["product"].find_one({"_id": _product_oid(product_id)})
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_product(product)


def create_product(db: Database, data: ProductIn) -> ProductOut:
    new_id = create_document(db, "product", data)
    logger.info("Product %s created", new_id)
    return serialize_product(db["product"].find_one({"_id": to_object_id(new_id)}))


def update_product(db: Database, product_id: str, data: ProductUpdate) -> ProductOut:
    obj_id = _product_oid(product_id)
    update_dict = data.model_dump(exclude_unset=True, exclude_none=True)
    if not update_dict:
        raise HTTPException(status_code=400, detail="No fields to update")
    update_dict["updated_at"] = datetime.now(timezone.utc)
    res = db["product"].update_one({"_id": obj_id}, {"$set": update_dict})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Product %s updated: %s", product_id, sorted(update_dict))
    return serialize_product(db["product"].find_one({"_id": obj_id}))


def delete_product(db: Database, product_id: str) -> str:
    res = db["product"].delete_one({"_id": _product_oid(product_id)})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Product %s deleted", product_id)
    return product_id


def resolve_products(db: Database, ids) -> Dict[Any, ProductOut]:
    """Fetch products by id in one query, keyed by ObjectId. Missing ids are absent."""
    oids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
    if not oids:
        return {}
    return {doc["_id"]: serialize_product(doc) for doc in get_documents(db, "product", {"_id": {"$in": oids}})}
