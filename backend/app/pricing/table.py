"""Price lookup for Sri Lankan attractions.

Prices are LOCAL citizen prices in LKR, not foreigner ticket prices. An item
gets an exact price when one is known, otherwise an estimated range.
"""

from typing import Any

from backend.app.models.budget import PriceDisplay, PriceInfo, PriceRange
from backend.app.models.trip import SavedItem
from backend.app.utils.money import round_half_up

# Matched as case-insensitive substrings of the item name, in insertion order.
KNOWN_PRICES: dict[str, dict[str, Any]] = {
    # Cultural sites
    "sigiriya": {"exact": 50, "name": "Sigiriya Rock Fortress"},
    "sigiriya rock": {"exact": 50, "name": "Sigiriya Rock Fortress"},
    "sigiriya rock fortress": {"exact": 50, "name": "Sigiriya Rock Fortress"},
    "temple of the tooth": {"exact": 500, "name": "Temple of the Sacred Tooth Relic"},
    "temple of the sacred tooth": {"exact": 500, "name": "Temple of the Sacred Tooth Relic"},
    "dalada maligawa": {"exact": 500, "name": "Temple of the Sacred Tooth Relic"},
    "dambulla cave temple": {"exact": 50, "name": "Dambulla Cave Temple"},
    "dambulla": {"exact": 50, "name": "Dambulla Cave Temple"},
    "polonnaruwa": {"exact": 50, "name": "Ancient City of Polonnaruwa"},
    "anuradhapura": {"exact": 50, "name": "Sacred City of Anuradhapura"},
    "galle fort": {"exact": 0, "name": "Galle Fort"},
    "nine arches bridge": {"exact": 0, "name": "Nine Arches Bridge"},
    # Gardens & parks
    "peradeniya botanical garden": {"exact": 100, "name": "Royal Botanical Gardens Peradeniya"},
    "royal botanical gardens": {"exact": 100, "name": "Royal Botanical Gardens Peradeniya"},
    "peradeniya": {"exact": 100, "name": "Royal Botanical Gardens Peradeniya"},
    "hakgala botanical garden": {"exact": 100, "name": "Hakgala Botanical Gardens"},
    "victoria park": {"exact": 50, "name": "Victoria Park Nuwara Eliya"},
    "horton plains": {"exact": 100, "name": "Horton Plains National Park"},
    # Wildlife
    "pinnawala elephant orphanage": {"exact": 500, "name": "Pinnawala Elephant Orphanage"},
    "pinnawala": {"exact": 500, "name": "Pinnawala Elephant Orphanage"},
    "yala national park": {"exact": 500, "name": "Yala National Park"},
    "yala": {"exact": 500, "name": "Yala National Park"},
    "udawalawe national park": {"exact": 500, "name": "Udawalawe National Park"},
    "udawalawe": {"exact": 500, "name": "Udawalawe National Park"},
    "minneriya national park": {"exact": 500, "name": "Minneriya National Park"},
    "minneriya": {"exact": 500, "name": "Minneriya National Park"},
    "wilpattu national park": {"exact": 500, "name": "Wilpattu National Park"},
    "wilpattu": {"exact": 500, "name": "Wilpattu National Park"},
    "sinharaja": {"exact": 800, "name": "Sinharaja Forest Reserve"},
    "sinharaja forest": {"exact": 800, "name": "Sinharaja Forest Reserve"},
    # Tea & factories
    "tea factory": {"range": {"min": 100, "max": 300}, "is_estimate": True},
    "tea plantation": {"range": {"min": 0, "max": 200}, "is_estimate": True},
    # Beaches
    "beach": {"exact": 0, "name": "Beach"},
    "mirissa beach": {"exact": 0},
    "unawatuna beach": {"exact": 0},
    "arugam bay": {"exact": 0},
    "nilaveli beach": {"exact": 0},
}

CATEGORY_PRICE_RANGES: dict[str, dict[str, int]] = {
    "attraction": {"min": 50, "max": 500},
    "temple": {"min": 0, "max": 500},
    "museum": {"min": 100, "max": 500},
    "park": {"min": 50, "max": 500},
    "wildlife": {"min": 300, "max": 800},
    "beach": {"min": 0, "max": 0},
    "waterfall": {"min": 0, "max": 100},
    "viewpoint": {"min": 0, "max": 200},
    "garden": {"min": 50, "max": 200},
    "restaurant": {"min": 500, "max": 3000},
    "cafe": {"min": 200, "max": 1000},
    "hotel": {"min": 3000, "max": 15000},
    "activity": {"min": 500, "max": 5000},
    "tour": {"min": 2000, "max": 10000},
    "transport": {"min": 500, "max": 3000},
}

ESTIMATE_VARIANCE = 0.2


def _exact(value: int | float) -> PriceInfo:
    amount = round_half_up(value)
    return PriceInfo(exact=amount, is_estimate=False, is_free=amount == 0)


def get_item_price(item: SavedItem) -> PriceInfo:
    """Get the price of an item as an exact value or an estimated range.

    Resolution order: explicit cost, explicit entry fee, known-price table,
    AI estimated cost (+/-20%), category default range. Always returns a result.

    Args:
        item: Recommendation or saved item

    Returns:
        PriceInfo with either ``exact`` or ``range`` set
    """
    if item.cost is not None:
        return _exact(item.cost)

    if item.entry_fee is not None:
        return _exact(item.entry_fee)

    name_lower = item.name.lower().strip()
    for key, known in KNOWN_PRICES.items():
        if key in name_lower:
            if "exact" in known:
                return _exact(known["exact"])
            if "range" in known:
                return PriceInfo(range=PriceRange(**known["range"]), is_estimate=True, is_free=False)

    if item.estimated_cost:
        estimate = round_half_up(item.estimated_cost)
        variance = round_half_up(estimate * ESTIMATE_VARIANCE)
        return PriceInfo(
            range=PriceRange(
                min=max(0, estimate - variance),
                max=estimate + variance,
            ),
            is_estimate=True,
            is_free=False,
        )

    item_category = (item.category or item.type or "attraction").lower()
    category_range = CATEGORY_PRICE_RANGES.get(item_category, CATEGORY_PRICE_RANGES["attraction"])

    return PriceInfo(
        range=PriceRange(**category_range),
        is_estimate=True,
        is_free=category_range["max"] == 0,
    )


def format_price(price_info: PriceInfo, currency: str = "LKR") -> str:
    """Format a price for display, e.g. ``"LKR 1,500"`` or ``"Free"``."""
    if price_info.is_free:
        return "Free"

    if price_info.exact is not None:
        return f"{currency} {price_info.exact:,}"

    if price_info.range is not None:
        low, high = price_info.range.min, price_info.range.max
        if low == high:
            return f"{currency} {low:,}"
        return f"{currency} {low:,} - {high:,}"

    return "Price varies"


def get_price_display(item: SavedItem, currency: str = "LKR") -> PriceDisplay:
    """Price info for an item plus its display text."""
    price_info = get_item_price(item)
    return PriceDisplay(
        text=format_price(price_info, currency),
        is_estimate=price_info.is_estimate,
        is_free=price_info.is_free,
        price_info=price_info,
    )
