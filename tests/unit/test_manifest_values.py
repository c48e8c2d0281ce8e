"""Tests for the manifest checklist."""
import asyncio
import json

import pytest

from app.services.audits.base import AuditContext
from app.services.manifest.parser import parse_manifest
from app.services.manifest.values import ManifestValues, ManifestValuesError, ManifestValuesResult

MANIFEST_URL = "https://example.com/manifest.json"
DOCUMENT_URL = "https://example.com/"


def _checks(manifest_dict):
    manifest = parse_manifest(json.dumps(manifest_dict), MANIFEST_URL, DOCUMENT_URL)
    result = ManifestValues.compute(manifest)
    return {check.id: check.passing for check in result.all_checks}


class TestManifestValues:
    def test_no_manifest(self):
        result = ManifestValues.compute(None)
        assert result.is_parse_failure is True
        assert result.parse_failure_reason == "No manifest was fetched"
        assert result.all_checks == []

    def test_invalid_json(self):
        result = ManifestValues.compute(parse_manifest("{not json", MANIFEST_URL, DOCUMENT_URL))
        assert result.is_parse_failure is True
        assert result.parse_failure_reason == "Manifest failed to parse as valid JSON"

    def test_wrong_artifact_type(self):
        with pytest.raises(ManifestValuesError):
            ManifestValues.compute({"name": "dict is not an artifact"})

    def test_check_order(self, valid_manifest_json):
        result = ManifestValues.compute(parse_manifest(valid_manifest_json, MANIFEST_URL, DOCUMENT_URL))
        assert [c.id for c in result.all_checks] == [
            "hasStartUrl",
            "hasIconsAtLeast192px",
            "hasIconsAtLeast512px",
            "hasPWADisplayValue",
            "hasBackgroundColor",
            "hasThemeColor",
            "hasShortName",
            "shortNameLength",
            "hasName",
        ]
        assert all(c.passing for c in result.all_checks)
        assert result.is_parse_failure is False

    def test_empty_manifest(self):
        checks = _checks({})
        assert not any(checks.values())

    def test_failure_texts(self):
        result = ManifestValues.compute(parse_manifest("{}", MANIFEST_URL, DOCUMENT_URL))
        texts = {c.id: c.failure_text for c in result.all_checks}
        assert texts["hasName"] == "Manifest does not have `name`"
        assert texts["hasStartUrl"] == "Manifest does not contain a `start_url`"
        assert texts["hasPWADisplayValue"] == (
            "Manifest's `display` value is not one of: minimal-ui | fullscreen | standalone"
        )

    def test_browser_display_fails(self):
        assert _checks({"display": "browser"})["hasPWADisplayValue"] is False
        assert _checks({"display": "Minimal-UI"})["hasPWADisplayValue"] is True

    def test_short_name_length(self):
        assert _checks({"short_name": "Twelve chars"})["shortNameLength"] is True
        assert _checks({"short_name": "Thirteen char"})["shortNameLength"] is False

    def test_icon_must_be_png(self):
        icons = [{"src": "/icon.webp", "sizes": "512x512", "type": "image/webp"}]
        assert _checks({"icons": icons})["hasIconsAtLeast192px"] is False

    def test_png_detected_from_extension(self):
        icons = [{"src": "/icon.png?v=2", "sizes": "256x256"}]
        checks = _checks({"icons": icons})
        assert checks["hasIconsAtLeast192px"] is True
        assert checks["hasIconsAtLeast512px"] is False

    def test_icon_size_both_dimensions(self):
        icons = [{"src": "/icon.png", "sizes": "512x100 48x48", "type": "image/png"}]
        assert _checks({"icons": icons})["hasIconsAtLeast192px"] is False

    def test_icon_any_of_several_sizes(self):
        icons = [{"src": "/icon.png", "sizes": "48x48 192X192", "type": "image/png"}]
        assert _checks({"icons": icons})["hasIconsAtLeast192px"] is True

    def test_invalid_colors(self):
        checks = _checks({"theme_color": "not-a-color", "background_color": "#12345"})
        assert checks["hasThemeColor"] is False
        assert checks["hasBackgroundColor"] is False


class TestManifestValuesRequest:
    @pytest.mark.asyncio
    async def test_memoized_per_context(self, monkeypatch, valid_manifest_json):
        manifest = parse_manifest(valid_manifest_json, MANIFEST_URL, DOCUMENT_URL)
        context = AuditContext()
        calls = []
        original = ManifestValues.compute

        def counting_compute(artifact):
            calls.append(artifact)
            return original(artifact)

        monkeypatch.setattr(ManifestValues, "compute", staticmethod(counting_compute))

        first = await ManifestValues.request(manifest, context)
        second = await ManifestValues.request(manifest, context)

        assert first is second
        assert len(calls) == 1

        await ManifestValues.request(manifest, AuditContext())
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_error_propagates(self):
        with pytest.raises(ManifestValuesError):
            await ManifestValues.request(42, AuditContext())

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_task(self, monkeypatch, valid_manifest_json):
        manifest = parse_manifest(valid_manifest_json, MANIFEST_URL, DOCUMENT_URL)
        context = AuditContext()
        calls = []
        original = ManifestValues.compute

        def counting_compute(artifact):
            calls.append(artifact)
            return original(artifact)

        monkeypatch.setattr(ManifestValues, "compute", staticmethod(counting_compute))

        first, second = await asyncio.gather(
            ManifestValues.request(manifest, context),
            ManifestValues.request(manifest, context),
        )

        assert first is second
        assert len(calls) == 1


class TestManifestValuesResult:
    def test_parse_failure_requires_reason(self):
        with pytest.raises(ValueError):
            ManifestValuesResult(is_parse_failure=True)
        with pytest.raises(ValueError):
            ManifestValuesResult(is_parse_failure=True, parse_failure_reason="")

    def test_reason_requires_parse_failure(self):
        with pytest.raises(ValueError):
            ManifestValuesResult(parse_failure_reason="stray reason")

    def test_valid_pairs(self):
        assert ManifestValuesResult().parse_failure_reason is None
        assert ManifestValuesResult(is_parse_failure=True, parse_failure_reason="x").is_parse_failure
