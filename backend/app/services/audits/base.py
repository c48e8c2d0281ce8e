"""
Audit primitives shared by every audit rule.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class AuditMeta:
    """Static description of an audit."""
    id: str
    title: str
    failure_title: str
    description: str
    required_artifacts: List[str] = field(default_factory=list)


@dataclass
class AuditContext:
    """Per-run state handed to audits.

    `computed_cache` holds memoized computed artifacts so that audits asking
    for the same derived data within one run share a single computation.
    """
    url: str = ""
    computed_cache: Dict[str, Dict[int, Any]] = field(default_factory=dict)


class MissingArtifactError(Exception):
    """Raised when an audit is run without one of its required artifacts."""


class Audit:
    """Base class for audit rules."""
    
    meta: AuditMeta
    
    @classmethod
    def check_artifacts(cls, artifacts: Dict[str, Any]) -> None:
        missing = [name for name in cls.meta.required_artifacts if name not in artifacts]
        if missing:
            raise MissingArtifactError(
                f"{cls.meta.id} requires artifacts: {', '.join(missing)}"
            )
