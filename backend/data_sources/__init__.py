"""
Data Sources Package
Provides pool snapshots from DefiLlama yields
"""

from .defillama import DataSourceUnavailable, YIELDS_ENDPOINT, extract_pools, fetch_snapshot

__all__ = [
    "DataSourceUnavailable",
    "YIELDS_ENDPOINT",
    "extract_pools",
    "fetch_snapshot",
]
