# recipebox/core/urls.py
from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError

log = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """Add https:// when no scheme is given and make sure the result parses."""
    url = (url or "").strip()
    if not url.lower().startswith(("http://", "https://")):
        url = "https://" + url

    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as e:
        raise ExtractionError("Invalid URL format", ErrorCode.VALIDATION_ERROR, url, e) from e

    if not host:
        raise ExtractionError("Invalid URL format", ErrorCode.VALIDATION_ERROR, url)
    return url


def extract_domain(url: str) -> str:
    try:
        return urlparse(url).hostname or "unknown"
    except ValueError:
        return "unknown"


async def is_url_accessible(url: str, client: httpx.AsyncClient) -> bool:
    # HEAD request; any failure just means "no"
    try:
        r = await client.head(url, timeout=config.TIMEOUT_HEAD_S, follow_redirects=True)
        return r.is_success
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        log.debug("HEAD check failed for %s: %s", extract_domain(url), e)
        return False
