"""
Audit Runner - Main orchestrator for installability audits.

Coordinates page fetching, manifest collection and the installable-manifest audit.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from app.logger import logger
from app.services.page_fetcher import PageFetcher
from app.services.collectors.manifest_collector import ManifestCollector
from app.services.audits.base import AuditContext
from app.services.audits.installable_manifest import InstallableManifest
from app.services.manifest.parser import parse_manifest
from app.schemas.audit_result import AuditResult


class AuditRunner:
    """Orchestrates the complete audit process."""

    def __init__(self, page_fetcher: Optional[PageFetcher] = None,
                 manifest_collector: Optional[ManifestCollector] = None):
        self.page_fetcher = page_fetcher or PageFetcher()
        self.manifest_collector = manifest_collector or ManifestCollector()

    async def run(self, url: str, job_id: str = "") -> AuditResult:
        """
        Run the installability audit on a URL.

        Args:
            url: The page to audit
            job_id: The unique ID of the audit job

        Returns:
            AuditResult with the audit product
        """
        started_at = datetime.utcnow()

        try:
            logger.info(f"Starting audit for {url} (job_id={job_id})")
            page = await self.page_fetcher.fetch(url)

            if page.error:
                return self._error_result(url, started_at, page.error, job_id)

            final_url = page.final_url or url
            manifest_url = self.manifest_collector.collect(page.html, final_url)
            manifest = None
            if manifest_url:
                manifest = await self.manifest_collector.fetch(manifest_url, final_url)
            else:
                logger.info(f"No manifest link found on {final_url}")

            return await self._audit(
                {"URL": {"requested_url": url, "final_url": final_url}, "Manifest": manifest},
                url=url, final_url=final_url, manifest_url=manifest_url,
                started_at=started_at, job_id=job_id
            )

        except Exception as e:
            logger.exception(f"Audit failed: {e}")
            return self._error_result(url, started_at, str(e), job_id)

    async def run_manifest(self, manifest_json: str, manifest_url: str, document_url: str,
                           job_id: str = "") -> AuditResult:
        """Audit a manifest body supplied directly, without any network access."""
        started_at = datetime.utcnow()

        try:
            manifest = parse_manifest(manifest_json, manifest_url, document_url)
            return await self._audit(
                {"URL": {"requested_url": document_url, "final_url": document_url}, "Manifest": manifest},
                url=document_url, final_url=document_url, manifest_url=manifest_url,
                started_at=started_at, job_id=job_id
            )

        except Exception as e:
            logger.exception(f"Manifest audit failed: {e}")
            return self._error_result(document_url, started_at, str(e), job_id)

    async def _audit(self, artifacts: Dict[str, Any], url: str, final_url: str,
                     manifest_url: Optional[str], started_at: datetime, job_id: str) -> AuditResult:
        context = AuditContext(url=final_url)
        product = await InstallableManifest.audit(artifacts, context)

        completed_at = datetime.utcnow()
        meta = InstallableManifest.meta
        logger.info(f"Audit {meta.id} for {final_url}: {'pass' if product.raw_value else 'fail'}")

        return AuditResult(
            job_id=job_id,
            audit_id=meta.id,
            url=url,
            final_url=final_url,
            manifest_url=manifest_url,
            status="completed",
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=round((completed_at - started_at).total_seconds(), 2),
            product=product,
            title=meta.title if product.raw_value else meta.failure_title,
        )

    def _error_result(self, url: str, started_at: datetime, error: str, job_id: str) -> AuditResult:
        """Create error result."""
        completed_at = datetime.utcnow()
        return AuditResult(
            job_id=job_id,
            url=url,
            final_url=url,
            status="failed",
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=round((completed_at - started_at).total_seconds(), 2),
            error=str(error)
        )
