"""
Manifest Collector - Locate and fetch the page's web app manifest.
"""
from typing import Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from app.config import settings
from app.logger import logger
from app.services.manifest.parser import ParsedManifest, parse_manifest
from app.services.ssrf_protection import SSRFProtection


class ManifestCollector:
    """Finds the manifest link in HTML and fetches the manifest."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, check_ssrf: bool = True):
        self.transport = transport
        self.check_ssrf = check_ssrf

    def collect(self, html: str, page_url: str) -> Optional[str]:
        """Absolute URL of the first `<link rel="manifest">`, if any."""
        soup = BeautifulSoup(html, 'html.parser')
        link = soup.find('link', rel='manifest', href=True)
        if not link:
            return None

        href = link['href'].strip()
        if not href:
            return None
        return urljoin(page_url, href)

    async def fetch(self, manifest_url: str, document_url: str) -> Optional[ParsedManifest]:
        """Fetch and parse a manifest. None when it cannot be retrieved."""
        if self.check_ssrf:
            is_safe, reason = SSRFProtection.validate_url(manifest_url)
            if not is_safe:
                logger.warning(f"SSRF protection blocked manifest {manifest_url}: {reason}")
                return None

        try:
            async with httpx.AsyncClient(
                timeout=settings.MANIFEST_TIMEOUT,
                follow_redirects=True,
                transport=self.transport
            ) as client:
                response = await client.get(
                    manifest_url,
                    headers={"User-Agent": settings.USER_AGENT}
                )
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch manifest {manifest_url}: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"Manifest {manifest_url} returned HTTP {response.status_code}")
            return None

        manifest = parse_manifest(response.text, str(response.url), document_url)
        if manifest.warning:
            logger.info(f"Manifest {manifest_url}: {manifest.warning}")
        return manifest

