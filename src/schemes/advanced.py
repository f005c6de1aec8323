"""
Advanced allocation schemes with tiered and windowed buyer groups.

Overlapping tiers are intentional: a buyer inside ``first100`` is also
inside ``first1000`` and collects from both rules.
"""

SLIDING_WINDOW = {
    "author": {"percentage": 10},
    "platform": {"percentage": 7},
    "first500": {"count": 500, "percentage": 5},
    "last5000": {"count": 5000, "percentage": 70, "fromEnd": True},
    "allBuyers": {"percentage": 8},
}

EARLY_ADOPTER_TIERS = {
    "author": {"percentage": 20},
    "platform": {"percentage": 15},
    "first100": {"count": 100, "percentage": 25},
    "first1000": {"count": 1000, "percentage": 20},
    "first10000": {"count": 10000, "percentage": 15},
    "allBuyers": {"percentage": 5},
}

CREATOR_ECONOMY = {
    "author": {"percentage": 60},
    "platform": {"percentage": 10},
    "first1000": {"count": 1000, "percentage": 20},
    "allBuyers": {"percentage": 10},
}

COMMUNITY_DRIVEN = {
    "author": {"percentage": 15},
    "platform": {"percentage": 10},
    "first5000": {"count": 5000, "percentage": 15},
    "allBuyers": {"percentage": 60},
}

ICO_MODEL = {
    "author": {"percentage": 15},
    "platform": {"percentage": 10},
    "first100": {"count": 100, "percentage": 30},
    "first1000": {"count": 1000, "percentage": 25},
    "first10000": {"count": 10000, "percentage": 15},
    "allBuyers": {"percentage": 5},
}

CROWDFUNDING_MODEL = {
    "author": {"percentage": 75},
    "platform": {"percentage": 15},
    "first1000": {"count": 1000, "percentage": 7},
    "allBuyers": {"percentage": 3},
}

DYNAMIC_TIERED = {
    "author": {"percentage": 30},
    "platform": {"percentage": 10},
    "first1000": {"count": 1000, "percentage": 10},
    "last1000": {"count": 1000, "percentage": 40, "fromEnd": True},
    "allBuyers": {"percentage": 10},
}

PLATFORM_GROWTH = {
    "author": {"percentage": 25},
    "platform": {"percentage": 45},
    "first500": {"count": 500, "percentage": 20},
    "allBuyers": {"percentage": 10},
}

SCHEMES = {
    "SLIDING_WINDOW": SLIDING_WINDOW,
    "EARLY_ADOPTER_TIERS": EARLY_ADOPTER_TIERS,
    "CREATOR_ECONOMY": CREATOR_ECONOMY,
    "COMMUNITY_DRIVEN": COMMUNITY_DRIVEN,
    "ICO_MODEL": ICO_MODEL,
    "CROWDFUNDING_MODEL": CROWDFUNDING_MODEL,
    "DYNAMIC_TIERED": DYNAMIC_TIERED,
    "PLATFORM_GROWTH": PLATFORM_GROWTH,
}
