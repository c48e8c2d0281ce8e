"""
Pydantic schemas for audit responses.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Literal
from pydantic import BaseModel, Field


class InstallableDetailsItem(BaseModel):
    """Details row of the installable-manifest audit."""
    failures: List[str] = Field(default_factory=list)
    checks: Dict[str, bool] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into the report shape: `failures` plus one key per check id."""
        item: Dict[str, Any] = {"failures": list(self.failures)}
        item.update(self.checks)
        return item


class AuditDetails(BaseModel):
    """Audit details table."""
    items: List[InstallableDetailsItem] = Field(default_factory=list)


class AuditProduct(BaseModel):
    """What an audit rule returns."""
    raw_value: bool
    explanation: Optional[str] = None
    details: AuditDetails = Field(default_factory=AuditDetails)

    def to_report(self) -> Dict[str, Any]:
        """Serialize to the report record consumed by renderers."""
        report: Dict[str, Any] = {"rawValue": self.raw_value}
        if self.explanation is not None:
            report["explanation"] = self.explanation
        report["details"] = {"items": [item.to_dict() for item in self.details.items]}
        return report


class AuditResult(BaseModel):
    """Complete audit response."""
    # Identification
    job_id: str
    audit_id: str = "installable-manifest"

    # Request info
    url: str
    final_url: str
    manifest_url: Optional[str] = None

    # Status
    status: Literal["pending", "running", "completed", "failed"]

    # Timestamps
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0

    # Audit outcome (only if completed)
    product: Optional[AuditProduct] = None
    title: Optional[str] = None

    # Error (if failed)
    error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready dict with the audit product flattened to its report shape."""
        response = self.model_dump(mode="json", exclude={"product"})
        response["report"] = self.product.to_report() if self.product else None
        return response

    class Config:
        json_schema_extra = {
            "example": {
                "job_id": "5f1c2e",
                "audit_id": "installable-manifest",
                "url": "https://example.com",
                "final_url": "https://example.com/",
                "manifest_url": "https://example.com/manifest.json",
                "status": "completed",
                "started_at": "2024-01-01T12:00:00Z",
                "completed_at": "2024-01-01T12:00:02Z",
                "duration_seconds": 1.7,
                "title": "Web app manifest does not meet the installability requirements",
            }
        }
