"""
planning/place_types.py
-----------------------
Place-type tag groups (Google Places "types") shared by the theme
classifier and preference inference. All tags are lower-case.
"""

from __future__ import annotations

FOOD_TYPES: frozenset[str] = frozenset({
    "restaurant", "cafe", "coffee_shop", "bakery", "meal_takeaway",
    "meal_delivery", "food", "food_court", "ice_cream_shop", "dessert_shop",
    "brunch_restaurant", "breakfast_restaurant", "fast_food_restaurant",
    "pizza_restaurant", "seafood_restaurant", "steak_house", "sushi_restaurant",
    "ramen_restaurant", "vegetarian_restaurant", "vegan_restaurant",
    "italian_restaurant", "french_restaurant", "japanese_restaurant",
    "chinese_restaurant", "indian_restaurant", "mexican_restaurant",
    "tea_house", "wine_bar",
})

SHOPPING_TYPES: frozenset[str] = frozenset({
    "shopping_mall", "store", "clothing_store", "department_store",
    "shoe_store", "jewelry_store", "book_store", "gift_shop", "market",
    "supermarket", "electronics_store", "furniture_store", "home_goods_store",
    "convenience_store", "sporting_goods_store",
})

HISTORICAL_TYPES: frozenset[str] = frozenset({
    "tourist_attraction", "historical_landmark", "historical_place",
    "cultural_landmark", "monument", "museum", "art_gallery", "church",
    "hindu_temple", "mosque", "synagogue", "place_of_worship", "castle",
    "palace", "fort", "memorial", "plaza", "national_park", "park",
})
