"""
Audit API endpoints.
"""
from dataclasses import dataclass
from typing import Dict, Optional
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from app.logger import logger
from app.schemas.audit_request import AuditRequest, AuditResponse, ManifestAuditRequest
from app.schemas.audit_result import AuditResult
from app.services.audit_runner import AuditRunner

router = APIRouter(tags=["Audit"])


@dataclass
class AuditJob:
    """In-memory state of a queued audit."""
    job_id: str
    url: str
    status: str = "pending"
    result: Optional[AuditResult] = None
    error: Optional[str] = None


# In-memory audit storage
_audits: Dict[str, AuditJob] = {}


def get_audit_runner() -> AuditRunner:
    return AuditRunner()


@router.post("", response_model=AuditResponse)
async def start_audit(
    request: AuditRequest,
    background_tasks: BackgroundTasks,
    runner: AuditRunner = Depends(get_audit_runner),
):
    """Start a new installability audit."""
    job_id = str(uuid.uuid4())
    url = request.url
    
    _audits[job_id] = AuditJob(job_id=job_id, url=url)
    
    # Run audit in background
    background_tasks.add_task(_run_audit, runner, job_id, url)
    
    logger.info(f"Started audit {job_id} for {url}")
    return AuditResponse(job_id=job_id, status="pending", url=url)


async def _run_audit(runner: AuditRunner, job_id: str, url: str):
    """Background task to run the audit."""
    job = _audits[job_id]
    job.status = "running"
    
    try:
        result = await runner.run(url, job_id=job_id)
    except Exception as e:
        logger.exception(f"Audit {job_id} failed: {e}")
        job.status = "failed"
        job.error = str(e)
        return
    
    job.result = result
    job.status = result.status
    job.error = result.error
    logger.info(f"Finished audit {job_id} ({result.status})")


@router.post("/manifest")
async def audit_manifest(
    request: ManifestAuditRequest,
    runner: AuditRunner = Depends(get_audit_runner),
):
    """Audit a manifest body synchronously."""
    result = await runner.run_manifest(
        request.manifest,
        manifest_url=request.manifest_url,
        document_url=request.document_url,
        job_id=str(uuid.uuid4()),
    )
    return result.to_response()


@router.get("/{job_id}")
async def get_audit(job_id: str):
    """Get audit status and results."""
    if job_id not in _audits:
        raise HTTPException(status_code=404, detail="Audit not found")
    
    job = _audits[job_id]
    
    if job.result is not None:
        return job.result.to_response()
    
    response = {
        "job_id": job_id,
        "status": job.status,
        "url": job.url,
    }
    if job.error:
        response["error"] = job.error
    return response
