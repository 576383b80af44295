from __future__ import annotations
from typing import Dict, List, Tuple

# Declaration order matters: the first category with a matching keyword wins.
CATEGORIES: Dict[str, List[str]] = {
    "dairy": ["milk", "cheese", "yogurt", "butter", "cream", "almond milk", "soy milk"],
    "produce": ["apple", "banana", "orange", "tomato", "lettuce", "carrot", "potato", "onion"],
    "meat": ["chicken", "beef", "pork", "fish", "turkey", "lamb"],
    "bakery": ["bread", "bagel", "croissant", "muffin", "cake"],
    "snacks": ["chips", "cookies", "candy", "crackers", "popcorn"],
    "beverages": ["water", "juice", "soda", "tea", "coffee"],
    "household": ["toothpaste", "soap", "shampoo", "detergent", "paper towels"],
}
OTHER_CATEGORY = "other"

SUBSTITUTES: Dict[str, List[str]] = {
    "milk": ["almond milk", "soy milk", "oat milk"],
    "butter": ["margarine", "coconut oil"],
    "sugar": ["honey", "stevia", "maple syrup"],
    "bread": ["tortillas", "pita bread", "bagels"],
}

SEASONAL_ITEMS: List[str] = ["pumpkin", "squash", "cranberries", "apples", "sweet potato"]
SEASONAL_LIMIT = 3

# (present, absent, suggest, message)
CO_OCCURRENCE: List[Tuple[str, str, List[str], str]] = [
    ("milk", "cereal", ["cereal"], "Often bought together"),
]
COMMONLY_NEEDED: List[str] = ["bread", "eggs", "butter"]

PRODUCT_DETAILS: Dict[str, Dict[str, str]] = {
    "oppo a9": {"battery": "5000mAh", "memory": "4GB/64GB", "processor": "Snapdragon 665"},
    "iphone 12": {"battery": "2815mAh", "memory": "4GB/64GB", "processor": "A14 Bionic"},
    "samsung s21": {"battery": "4000mAh", "memory": "8GB/128GB", "processor": "Exynos 2100"},
}

NUMBER_WORDS: Dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
}

FILLER_WORDS: List[str] = ["please", "hey", "ok", "could you", "would you"]
