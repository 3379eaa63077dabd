"""
Quote Limits and Defaults

Request limits and caller-side caching defaults for shipping quotes.
"""

# Heaviest single shipment accepted for a quote request
MAX_WEIGHT_KG = 1000

# Interactive quote cache (keyed by weight, warehouse, destination)
CACHE_TTL_SECONDS = 300       # 5 minutes
CACHE_MAX_ENTRIES = 256
