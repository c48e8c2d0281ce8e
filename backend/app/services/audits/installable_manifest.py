"""
Installable Manifest Audit - Does the web app manifest qualify for an install prompt?

Requirements:
- manifest is fetched and parses
- manifest has a valid start_url
- manifest has a name
- manifest has a short_name
- manifest display is standalone, minimal-ui or fullscreen
- manifest contains a PNG icon of at least 192px
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from app.services.audits.base import Audit, AuditContext, AuditMeta
from app.services.manifest.values import ManifestValues, ManifestValuesResult
from app.schemas.audit_result import AuditDetails, AuditProduct, InstallableDetailsItem


# Checks that gate installability. Other checks are informational only.
# short_name is not strictly required by browsers when name is set, but it is
# the string used under the homescreen icon, so it is required here too.
REQUIRED_CHECK_IDS = (
    "hasName",
    "hasShortName",
    "hasStartUrl",
    "hasPWADisplayValue",
    "hasIconsAtLeast192px",
)


@dataclass
class Verdict:
    """Outcome of evaluating a manifest checklist."""
    passed: bool
    failure_messages: List[str] = field(default_factory=list)
    check_results: Dict[str, bool] = field(default_factory=dict)


class InstallableManifest(Audit):
    """Checks the manifest against the install prompt requirements."""

    meta = AuditMeta(
        id="installable-manifest",
        title="Web app manifest meets the installability requirements",
        failure_title="Web app manifest does not meet the installability requirements",
        description=(
            "Browsers can proactively prompt users to add your app to their homescreen, "
            "which can lead to higher engagement. "
            "[Learn more](https://developers.google.com/web/tools/lighthouse/audits/install-prompt)."
        ),
        required_artifacts=["URL", "Manifest"],
    )

    @staticmethod
    def select_failures(manifest_values: ManifestValuesResult) -> List[str]:
        """Failure texts of the required checks that did not pass, in checklist order."""
        return [
            check.failure_text
            for check in manifest_values.all_checks
            if check.id in REQUIRED_CHECK_IDS and not check.passing
        ]

    @staticmethod
    def summarize_checks(manifest_values: ManifestValuesResult) -> Dict[str, bool]:
        """Map every check id to its outcome. A repeated id keeps its last value."""
        checks: Dict[str, bool] = {}
        for check in manifest_values.all_checks:
            checks[check.id] = check.passing
        return checks

    @classmethod
    async def evaluate(cls, manifest: Any, context: AuditContext) -> Verdict:
        """Compute the verdict for a manifest artifact."""
        manifest_values = await ManifestValues.request(manifest, context)
        failures = cls.select_failures(manifest_values)

        if manifest_values.is_parse_failure:
            failures.append(manifest_values.parse_failure_reason)

        return Verdict(
            passed=not failures,
            failure_messages=failures,
            check_results=cls.summarize_checks(manifest_values),
        )

    @classmethod
    async def audit(cls, artifacts: Dict[str, Any], context: AuditContext) -> AuditProduct:
        """Run the audit against the gathered artifacts."""
        cls.check_artifacts(artifacts)
        verdict = await cls.evaluate(artifacts["Manifest"], context)

        details = AuditDetails(items=[
            InstallableDetailsItem(
                failures=verdict.failure_messages,
                checks=verdict.check_results,
            )
        ])

        if not verdict.passed:
            failure_list = ",\n".join(verdict.failure_messages)
            return AuditProduct(
                raw_value=False,
                explanation=f"Failures: {failure_list}.",
                details=details,
            )

        return AuditProduct(raw_value=True, details=details)
