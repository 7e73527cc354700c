"""
Replace the product catalog.

    python seed.py [products.json]

Without a file the built-in sample products are imported.
"""

import json
import logging
import sys
from typing import Any, Dict, List

from pymongo.database import Database

from database import get_db
from schemas import Product

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS: List[Dict[str, Any]] = [
    {"name": "Galaxy S24", "brand": "Samsung", "category": "Smartphones", "price": 32999, "discount": 10, "image": "https://placehold.co/400x400?text=Galaxy+S24", "description": "6.2\" AMOLED, 256 GB"},
    {"name": "iPhone 15", "brand": "Apple", "category": "Smartphones", "price": 38999, "discount": 5, "image": "https://placehold.co/400x400?text=iPhone+15", "description": "6.1\" Super Retina XDR, 128 GB"},
    {"name": "Redmi Note 13", "brand": "Xiaomi", "category": "Smartphones", "price": 8999, "discount": 15, "image": "https://placehold.co/400x400?text=Redmi+Note+13", "description": "6.67\" AMOLED, 256 GB"},
    {"name": "MacBook Air M3", "brand": "Apple", "category": "Laptops", "price": 54999, "discount": 0, "image": "https://placehold.co/400x400?text=MacBook+Air", "description": "13.6\", 8 GB, 256 GB SSD"},
    {"name": "WH-1000XM5", "brand": "Sony", "category": "Headphones", "price": 14999, "discount": 20, "image": "https://placehold.co/400x400?text=WH-1000XM5", "description": "Wireless noise-cancelling headphones"},
    {"name": "Galaxy Watch 6", "brand": "Samsung", "category": "Watches", "price": 11999, "discount": 12, "image": "https://placehold.co/400x400?text=Galaxy+Watch+6", "description": "44 mm, Bluetooth"},
]


def import_products(db: Database, products: List[Dict[str, Any]]) -> int:
    docs = [Product.model_validate(p).model_dump() for p in products]
    removed = db["product"].delete_many({}).deleted_count
    logger.info("Existing products removed: %d", removed)
    if not docs:
        return 0
    inserted = len(db["product"].insert_many(docs).inserted_ids)
    logger.info("Products imported: %d", inserted)
    return inserted


def load_products(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of products")
    return data


def main(argv: List[str]) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        products = load_products(argv[0]) if argv else SAMPLE_PRODUCTS
        import_products(get_db(), products)
    except Exception as e:
        logger.error("Error importing products: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
