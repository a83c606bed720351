# legaldoc/fetchers/http_fetcher.py
from __future__ import annotations

import time
from typing import Optional, Tuple

import requests

from .. import config
from ..log import debug, warn


def fetch_html(url: str, max_retries: Optional[int] = None) -> Tuple[Optional[str], Optional[int], Optional[str]]:
    """
    Fetch a page for analysis with retry/backoff on 403/429 and transport errors.
    Returns (html, status_code, error).
    """
    retries = 0
    max_r = max_retries if max_retries is not None else config.MAX_RETRIES
    delay = 1.0

    while retries <= max_r:
        try:
            resp = requests.get(url, headers={"User-Agent": config.USER_AGENT},
                                timeout=config.HTTP_TIMEOUT)
            sc = resp.status_code
            debug(f"GET {url} -> {sc}")

            if sc == 200 and resp.text.strip():
                return resp.text, 200, None

            # polite backoff for 403/429
            if sc in (403, 429):
                retries += 1
                if retries > max_r:
                    return None, sc, f"HTTP {sc}"
                time.sleep(delay)
                delay *= config.BACKOFF_BASE
                continue

            # other non-200s: return error without retry storm
            return None, sc, f"HTTP {sc}" if sc != 200 else "empty body"
        except requests.RequestException as e:
            retries += 1
            warn(f"GET {url} failed ({retries}/{max_r + 1}): {e}")
            if retries > max_r:
                return None, None, str(e)
            time.sleep(delay)
            delay *= config.BACKOFF_BASE

    return None, None, "max_retries"
