"""
Page Fetcher - Fetch the audited page so its manifest link can be found.

Architecture:
1. URL normalization
2. SSRF protection check
3. HTTP fetch with retries
"""

import asyncio
from typing import Optional
from urllib.parse import urlparse, urlunparse
from dataclasses import dataclass

import httpx

from app.config import settings
from app.logger import logger
from app.services.ssrf_protection import SSRFProtection


@dataclass
class PageData:
    """Fetched page data container."""
    url: str
    final_url: str
    status_code: Optional[int] = None
    html: str = ""
    error: Optional[str] = None


class PageFetcher:
    """Fetches HTML pages over HTTP."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, check_ssrf: bool = True):
        self.http_timeout = settings.HTTP_TIMEOUT
        self.max_redirects = settings.HTTP_MAX_REDIRECTS
        self.max_retries = settings.HTTP_MAX_RETRIES
        self.transport = transport
        self.check_ssrf = check_ssrf

    def normalize_url(self, url: str) -> str:
        """Add a scheme if missing, lowercase scheme/host and drop the fragment.

        Query and path are kept as-is: the manifest's start_url is compared
        against the real document URL.
        """
        if not url.startswith(('http://', 'https://')):
            url = 'https://' + url

        parsed = urlparse(url)
        path = parsed.path or '/'

        return urlunparse((
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            path,
            parsed.params,
            parsed.query,
            ''
        ))

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=self.max_redirects,
            timeout=self.http_timeout,
            transport=self.transport
        )

    async def fetch(self, url: str) -> PageData:
        """Fetch a page.

        Args:
            url: URL to fetch

        Returns:
            PageData with HTML content, or with `error` set
        """
        normalized_url = self.normalize_url(url)

        if self.check_ssrf:
            is_safe, ssrf_reason = SSRFProtection.validate_url(normalized_url)
            if not is_safe:
                logger.warning(f"SSRF protection blocked {normalized_url}: {ssrf_reason}")
                return PageData(
                    url=url,
                    final_url=normalized_url,
                    error=f"URL blocked by SSRF protection: {ssrf_reason}"
                )

        logger.info(f"Fetching {normalized_url}")
        return await self._fetch_http(url, normalized_url)

    async def _fetch_http(self, original_url: str, normalized_url: str) -> PageData:
        """Fetch page using direct HTTP with retries."""
        for attempt in range(self.max_retries + 1):
            try:
                async with self._client() as client:
                    response = await client.get(
                        normalized_url,
                        headers={
                            "User-Agent": settings.USER_AGENT,
                            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                        }
                    )

                    final_url = str(response.url)

                    # Handle rate limiting (429)
                    if response.status_code == 429:
                        if attempt < self.max_retries:
                            retry_after = int(response.headers.get("Retry-After", 5))
                            logger.warning(f"Rate limited, waiting {retry_after}s")
                            await asyncio.sleep(retry_after)
                            continue
                        return PageData(
                            url=original_url, final_url=final_url,
                            status_code=429,
                            error="Rate limited (429)"
                        )

                    if response.status_code == 200:
                        return PageData(
                            url=original_url, final_url=final_url,
                            status_code=200,
                            html=response.text
                        )

                    # 4xx/5xx errors
                    return PageData(
                        url=original_url, final_url=final_url,
                        status_code=response.status_code,
                        error=f"HTTP {response.status_code}"
                    )

            except httpx.TimeoutException:
                if attempt < self.max_retries:
                    logger.warning(f"HTTP timeout, retrying (attempt {attempt + 1})")
                    await asyncio.sleep(2 ** attempt)
                    continue
                return PageData(
                    url=original_url, final_url=normalized_url,
                    error="HTTP timeout"
                )
            except httpx.HTTPError as e:
                logger.warning(f"HTTP error: {e}")
                return PageData(
                    url=original_url, final_url=normalized_url,
                    error=str(e)
                )

        return PageData(
            url=original_url, final_url=normalized_url,
            error="HTTP fetch failed after retries"
        )
