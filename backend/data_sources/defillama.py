"""
DefiLlama Yields Data Source
Single snapshot fetch of https://yields.llama.fi/pools

Returns the raw `data` array untouched. No caching, no retries,
failures surface as DataSourceUnavailable.
"""

import os
import time
import logging
from typing import Any, List, Optional

import httpx
from dotenv import load_dotenv
load_dotenv()

logger = logging.getLogger(__name__)

YIELDS_ENDPOINT = os.getenv("DEFILLAMA_YIELDS_URL", "https://yields.llama.fi/pools")
DEFAULT_TIMEOUT_S = float(os.getenv("DEFILLAMA_TIMEOUT_S", "20"))


class DataSourceUnavailable(Exception):
    """Pool snapshot could not be fetched or parsed"""
    def __init__(self, endpoint: str, reason: str):
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"Pool data source unavailable ({endpoint}): {reason}")


def extract_pools(payload: Any) -> List[Any]:
    """Pull the `data` array out of a yields payload, [] if it isn't one"""
    if not isinstance(payload, dict):
        return []
    pools = payload.get("data")
    return pools if isinstance(pools, list) else []


async def fetch_snapshot(
    client: Optional[httpx.AsyncClient] = None,
    url: str = YIELDS_ENDPOINT,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> List[Any]:
    """
    Fetch one pool snapshot from DefiLlama.

    Args:
        client: optional shared AsyncClient (its own timeout applies)
        url: yields endpoint
        timeout: seconds, used when no client is given

    Raises:
        DataSourceUnavailable: network error, timeout, HTTP error or non-JSON body
    """
    start_time = time.time()
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
        payload = response.json()
    except httpx.TimeoutException as e:
        logger.error(f"[DefiLlama] Timeout after {time.time() - start_time:.1f}s: {url}")
        raise DataSourceUnavailable(url, "timeout") from e
    except httpx.HTTPStatusError as e:
        logger.error(f"[DefiLlama] HTTP {e.response.status_code} from {url}")
        raise DataSourceUnavailable(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error(f"[DefiLlama] Request failed: {e}")
        raise DataSourceUnavailable(url, str(e)[:200] or type(e).__name__) from e
    except ValueError as e:
        logger.error(f"[DefiLlama] Malformed JSON body from {url}")
        raise DataSourceUnavailable(url, "malformed JSON") from e

    pools = extract_pools(payload)
    if not pools:
        logger.warning(f"[DefiLlama] No pool array in response from {url}")
    logger.info(f"[DefiLlama] Fetched {len(pools)} pools in {time.time() - start_time:.2f}s")
    return pools
