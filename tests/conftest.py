import json

import pytest

from app.services.audits.base import AuditContext
from app.services.manifest.values import ManifestCheck, ManifestValuesResult


REQUIRED_IDS = ["hasName", "hasShortName", "hasStartUrl", "hasPWADisplayValue", "hasIconsAtLeast192px"]


def make_checklist(*checks, is_parse_failure=False, parse_failure_reason=None):
    """Build a checklist from (id, passing) or (id, passing, failure_text) tuples."""
    all_checks = []
    for check in checks:
        check_id, passing = check[0], check[1]
        failure_text = check[2] if len(check) > 2 else f"{check_id} failed"
        all_checks.append(ManifestCheck(id=check_id, passing=passing, failure_text=failure_text))
    return ManifestValuesResult(
        all_checks=all_checks,
        is_parse_failure=is_parse_failure,
        parse_failure_reason=parse_failure_reason,
    )


@pytest.fixture
def context():
    return AuditContext(url="https://example.com/")


@pytest.fixture
def passing_checklist():
    return make_checklist(*[(check_id, True) for check_id in REQUIRED_IDS])


@pytest.fixture
def valid_manifest_json():
    return json.dumps({
        "name": "Example Progressive App",
        "short_name": "Example",
        "start_url": "/?source=homescreen",
        "display": "standalone",
        "theme_color": "#3367D6",
        "background_color": "white",
        "icons": [
            {"src": "/icons/icon-192.png", "sizes": "192x192", "type": "image/png"},
            {"src": "/icons/icon-512.png", "sizes": "512x512", "type": "image/png"},
        ],
    })


@pytest.fixture
def sample_html():
    return """<!doctype html>
<html lang="en">
<head>
<title>Example</title>
<link rel="manifest" href="/manifest.json">
</head>
<body><h1>Example</h1></body>
</html>
"""


@pytest.fixture
def checklist():
    return make_checklist
