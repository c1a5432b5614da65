"""
Shared fixtures: DefiLlama-shaped pool rows
"""

import pytest


def make_pool(**overrides):
    """Raw DefiLlama row with sane Base/Aerodrome defaults"""
    pool = {
        "chain": "Base",
        "project": "aerodrome-v1",
        "symbol": "USDC-WETH",
        "tvlUsd": 25_000_000,
        "apy": 12.0,
        "pool": "pool-default",
        "count": 180,
        "ilRisk": "yes",
    }
    pool.update(overrides)
    return pool


@pytest.fixture
def pool_factory():
    return make_pool


@pytest.fixture
def base_snapshot():
    """
    Mixed snapshot used by the pipeline tests.

    With scope=all / USDC:
        chain  -> 7 (ethereum row dropped)
        scope  -> 6 (uniswap row dropped)
        token  -> 5 (WETH-only row dropped)
        safety -> 3 (APY outlier + zero APY dropped)
    """
    return [
        make_pool(pool="aero-usdc-weth", project="aerodrome-slipstream", symbol="USDC-WETH",
                  apy=20.0, tvlUsd=30_000_000, count=200, ilRisk="yes"),
        make_pool(pool="aave-usdc", project="aave-v3", symbol="USDC",
                  apy=5.0, tvlUsd=100_000_000, count=400, ilRisk="no"),
        make_pool(pool="moonwell-usdc-outlier", project="moonwell", symbol="USDC",
                  apy=150.0, tvlUsd=500_000, count=20, ilRisk="no"),
        make_pool(pool="morpho-weth", project="morpho-blue", symbol="WETH",
                  apy=4.0, tvlUsd=50_000_000, count=300, ilRisk="no"),
        make_pool(pool="eth-aave-usdc", chain="Ethereum", project="aave-v3", symbol="USDC",
                  apy=4.5, tvlUsd=900_000_000, count=900, ilRisk="no"),
        make_pool(pool="uni-usdc", project="uniswap-v3", symbol="USDC-WETH",
                  apy=18.0, tvlUsd=40_000_000, count=500, ilRisk="yes"),
        make_pool(pool="aero-usdc-aero-zero", project="aerodrome-slipstream", symbol="USDC-AERO",
                  apy=0, tvlUsd=5_000_000, count=50, ilRisk="yes"),
        {"chain": "base", "project": "aerodrome-v1", "symbol": "usdc-dai",
         "tvlUsd": 2_000_000, "apy": 8.0, "pool": "aero-usdc-dai-young"},
    ]
