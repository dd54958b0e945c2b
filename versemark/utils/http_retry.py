# versemark/utils/http_retry.py
"""
HTTP GET with retry for rate limits and transient errors.

Usage:
    from versemark.utils.http_retry import get_with_retry

    response = get_with_retry(
        url="https://bible.example.org/api/Ephesians/1/1",
        timeout=10,
        allow_status={404},
    )
"""

import logging
import time
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class HttpTimeout(RuntimeError):
    """The request timed out."""
    pass


def get_with_retry(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: float = 10,
    max_retries: int = 3,
    allow_status: Optional[set] = None,
) -> requests.Response:
    """
    GET with automatic retry for rate limits and transient server errors.

    Retry behavior:
    - 429 (rate limit): Respects Retry-After header, falls back to exponential backoff
    - 5xx (server error): Exponential backoff
    - Connection errors: Exponential backoff
    - Statuses in allow_status: returned to the caller as-is
    - Other 4xx: No retry
    - Timeout: No retry (raises HttpTimeout immediately)

    Raises:
        HttpTimeout: On timeout
        RuntimeError: On client errors or exhausted retries
    """
    allow_status = allow_status or set()
    last_response = None

    for attempt in range(max_retries):
        try:
            response = requests.get(url, params=params, headers=headers, timeout=timeout)

            if response.status_code in allow_status:
                return response

            if response.status_code == 429:
                retry_after = response.headers.get("retry-after")
                try:
                    wait = int(retry_after) if retry_after else min(2 ** attempt * 2, 30)
                except ValueError:
                    wait = min(2 ** attempt * 2, 30)
                logger.info(
                    f"Rate limited by {url}, waiting {wait}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(wait)
                last_response = response
                continue

            if response.status_code >= 500:
                wait = 2 ** attempt
                logger.warning(
                    f"Server error {response.status_code} from {url}, "
                    f"retrying in {wait}s (attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(wait)
                last_response = response
                continue

            response.raise_for_status()
            return response

        except requests.ConnectionError as e:
            if attempt < max_retries - 1:
                wait = 2 ** attempt
                logger.warning(f"Connection error to {url}, retrying in {wait}s: {e}")
                time.sleep(wait)
                continue
            raise RuntimeError(f"Connection to {url} failed after {max_retries} attempts: {e}")

        except requests.Timeout:
            raise HttpTimeout(f"Request to {url} timed out after {timeout}s")

        except requests.HTTPError as e:
            raise RuntimeError(f"HTTP error from {url}: {e}")

    status = last_response.status_code if last_response is not None else "unknown"
    raise RuntimeError(
        f"Request to {url} failed after {max_retries} retries "
        f"(last status: {status})"
    )
