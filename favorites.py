import logging
from typing import List

from fastapi import HTTPException
from pymongo.database import Database

from catalog import resolve_products
from database import to_object_id
from models import ProductOut

logger = logging.getLogger(__name__)


def _load_user(db: Database, user_id: str) -> dict:
    oid = to_object_id(user_id)
    user = db["user"].find_one({"_id": oid}) if oid is not None else None
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def resolve_favorites(db: Database, favorites: list) -> List[ProductOut]:
    # Keep the user's order; products deleted since they were bookmarked are dropped
    found = resolve_products(db, favorites)
    return [found[fid] for fid in favorites if fid in found]


def get_favorites(db: Database, user_id: str) -> List[ProductOut]:
    user = _load_user(db, user_id)
    return resolve_favorites(db, user.get("favorites", []))


def toggle_favorite(db: Database, user_id: str, product_id: str) -> List[ProductOut]:
    user = _load_user(db, user_id)
    oid = to_object_id(product_id)
    if oid is None:
        raise HTTPException(status_code=400, detail="Invalid product ID")

    favorites = list(user.get("favorites", []))
    if oid in favorites:
        favorites.remove(oid)
        logger.debug("User %s unfavorited %s", user_id, product_id)
    else:
        favorites.append(oid)
        logger.debug("User %s favorited %s", user_id, product_id)

    # Plain overwrite: concurrent toggles from several tabs resolve as last write wins
    db["user"].update_one({"_id": user["_id"]}, {"$set": {"favorites": favorites}})
    return resolve_favorites(db, favorites)
