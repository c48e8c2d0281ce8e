"""
Pydantic schemas for audit requests.
"""

from pydantic import BaseModel, Field


class AuditRequest(BaseModel):
    """Request to start an installability audit of a page."""
    url: str = Field(..., description="URL of the page to audit")
    
    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://example.com"
            }
        }


class ManifestAuditRequest(BaseModel):
    """Request to audit a manifest body directly."""
    manifest: str = Field(..., description="Raw manifest JSON")
    manifest_url: str = Field(..., description="URL the manifest is served from")
    document_url: str = Field(..., description="URL of the page linking the manifest")
    
    class Config:
        json_schema_extra = {
            "example": {
                "manifest": "{\"name\": \"Example App\", \"short_name\": \"Example\"}",
                "manifest_url": "https://example.com/manifest.json",
                "document_url": "https://example.com/"
            }
        }


class AuditResponse(BaseModel):
    """Response for a queued audit."""
    job_id: str
    status: str
    url: str
