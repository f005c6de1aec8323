"""
Basic allocation schemes for common author/platform/buyer splits.
"""

AUTHOR_CENTRIC = {
    "author": {"percentage": 80},
    "platform": {"percentage": 20},
}

EQUAL_SPLIT = {
    "author": {"percentage": 50},
    "platform": {"percentage": 50},
}

PLATFORM_FRIENDLY = {
    "author": {"percentage": 40},
    "platform": {"percentage": 60},
}

COMMUNITY_EQUAL = {
    "author": {"percentage": 30},
    "platform": {"percentage": 20},
    "allBuyers": {"percentage": 50},
}

EARLY_SUPPORTERS = {
    "author": {"percentage": 40},
    "platform": {"percentage": 20},
    "first1000": {"count": 1000, "percentage": 30},
    "allBuyers": {"percentage": 10},
}

LATE_SUPPORTERS = {
    "author": {"percentage": 40},
    "platform": {"percentage": 20},
    "last1000": {"count": 1000, "percentage": 30, "fromEnd": True},
    "allBuyers": {"percentage": 10},
}

MINIMAL_AUTHOR = {
    "author": {"percentage": 5},
    "platform": {"percentage": 95},
}

# Early buyers get a fixed share; everything left goes to all buyers
COMMUNITY_GROWTH = {
    "author": {"percentage": 30},
    "platform": {"percentage": 20},
    "first500": {"count": 500, "percentage": 20},
    "allBuyers": {"remainder": True},
}

SCHEMES = {
    "AUTHOR_CENTRIC": AUTHOR_CENTRIC,
    "EQUAL_SPLIT": EQUAL_SPLIT,
    "PLATFORM_FRIENDLY": PLATFORM_FRIENDLY,
    "COMMUNITY_EQUAL": COMMUNITY_EQUAL,
    "EARLY_SUPPORTERS": EARLY_SUPPORTERS,
    "LATE_SUPPORTERS": LATE_SUPPORTERS,
    "MINIMAL_AUTHOR": MINIMAL_AUTHOR,
    "COMMUNITY_GROWTH": COMMUNITY_GROWTH,
}
