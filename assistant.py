"""Scripted replies for the storefront chat.

Each rule is a list of keywords or phrases and a canned answer. Rules are
checked in order and the first one with a whole-word match wins.
"""

import re
from typing import List, Optional, Tuple

GREETING = "👋 Hi! I'm the MegaMart assistant. How can I help you today?"

RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("hello", "hi", "hey", "good morning", "good evening"),
     "Hello! Ask me about delivery, payment, returns or our catalog."),
    (("delivery", "shipping", "ship", "courier"),
     "We deliver nationwide in 1-3 business days. Shipping is free on orders over ₴2000."),
    (("payment", "pay", "card", "cash"),
     "You can pay by card online or in cash on delivery."),
    (("return", "refund", "exchange"),
     "Items can be returned within 14 days of delivery in their original packaging."),
    (("order status", "my order", "my orders", "track"),
     "Your past orders are listed on the Account page once you are signed in."),
    (("discount", "sale", "promo", "coupon"),
     "Discounted products show their percentage off right on the product card."),
    (("favorite", "favorites", "wishlist"),
     "Tap the heart on any product to keep it in your favorites."),
    (("contact", "phone", "address", "support"),
     "You can reach us through the Contact page or at support@megamart.com."),
    (("hours", "open", "working hours"),
     "Our online store is open 24/7; support answers 9:00-21:00 daily."),
    (("thanks", "thank you", "thx"),
     "You're welcome! Anything else I can help with?"),
]

_COMPILED = [
    (re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keys) + r")\b", re.IGNORECASE), answer)
    for keys, answer in RULES
]


def scripted_reply(text: str) -> Optional[str]:
    if not text or not text.strip():
        return None
    for pattern, answer in _COMPILED:
        if pattern.search(text):
            return answer
    return None
