"""
Manifest Values - Derive the pass/fail checklist from a parsed manifest.

Computed once per manifest artifact per audit run; audits that need the
checklist go through `ManifestValues.request`.
"""
import asyncio
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional
from urllib.parse import urlparse

from app.services.audits.base import AuditContext
from app.services.manifest.parser import ManifestValue, ParsedManifest


PWA_DISPLAY_VALUES = ("minimal-ui", "fullscreen", "standalone")

# Shortest short_name length Chrome truncates on the homescreen
SUGGESTED_SHORTNAME_LENGTH = 12

SIZE_RE = re.compile(r"^(\d+)x(\d+)$", re.IGNORECASE)


class ManifestCheckId(str, Enum):
    """Identifiers of the manifest checks."""
    HAS_START_URL = "hasStartUrl"
    HAS_ICONS_AT_LEAST_192PX = "hasIconsAtLeast192px"
    HAS_ICONS_AT_LEAST_512PX = "hasIconsAtLeast512px"
    HAS_PWA_DISPLAY_VALUE = "hasPWADisplayValue"
    HAS_BACKGROUND_COLOR = "hasBackgroundColor"
    HAS_THEME_COLOR = "hasThemeColor"
    HAS_SHORT_NAME = "hasShortName"
    SHORT_NAME_LENGTH = "shortNameLength"
    HAS_NAME = "hasName"


@dataclass
class ManifestCheck:
    """A single manifest check."""
    id: str
    passing: bool
    failure_text: str = ""


@dataclass
class ManifestValuesResult:
    """The checklist consumed by manifest audits."""
    all_checks: List[ManifestCheck] = field(default_factory=list)
    is_parse_failure: bool = False
    parse_failure_reason: Optional[str] = None

    def __post_init__(self):
        if self.is_parse_failure != bool(self.parse_failure_reason):
            raise ValueError("parse_failure_reason must be set exactly when is_parse_failure is true")


class ManifestValuesError(Exception):
    """Raised when the checklist cannot be derived from the given artifact."""


def _is_png(src: str, icon_type: Optional[str]) -> bool:
    if icon_type:
        return icon_type.lower() == "image/png"
    return urlparse(src).path.lower().endswith(".png")


def icons_at_least(size: int, manifest: ManifestValue) -> bool:
    """True when a PNG icon declares a size of at least `size` x `size`."""
    for icon in manifest.icons.value or []:
        if not _is_png(icon.src, icon.type):
            continue
        for declared in icon.sizes:
            match = SIZE_RE.match(declared)
            if match and int(match.group(1)) >= size and int(match.group(2)) >= size:
                return True
    return False


@dataclass
class _CheckDefinition:
    id: ManifestCheckId
    failure_text: str
    validate: Callable[[ManifestValue], bool]


CHECK_DEFINITIONS: List[_CheckDefinition] = [
    _CheckDefinition(
        ManifestCheckId.HAS_START_URL,
        "Manifest does not contain a `start_url`",
        lambda m: bool(m.start_url.value),
    ),
    _CheckDefinition(
        ManifestCheckId.HAS_ICONS_AT_LEAST_192PX,
        "Manifest does not have a PNG icon of at least 192px",
        lambda m: icons_at_least(192, m),
    ),
    _CheckDefinition(
        ManifestCheckId.HAS_ICONS_AT_LEAST_512PX,
        "Manifest does not have a PNG icon of at least 512px",
        lambda m: icons_at_least(512, m),
    ),
    _CheckDefinition(
        ManifestCheckId.HAS_PWA_DISPLAY_VALUE,
        "Manifest's `display` value is not one of: " + " | ".join(PWA_DISPLAY_VALUES),
        lambda m: m.display.value in PWA_DISPLAY_VALUES,
    ),
    _CheckDefinition(
        ManifestCheckId.HAS_BACKGROUND_COLOR,
        "Manifest does not have `background_color`",
        lambda m: bool(m.background_color.value),
    ),
    _CheckDefinition(
        ManifestCheckId.HAS_THEME_COLOR,
        "Manifest does not have `theme_color`",
        lambda m: bool(m.theme_color.value),
    ),
    _CheckDefinition(
        ManifestCheckId.HAS_SHORT_NAME,
        "Manifest does not have `short_name`",
        lambda m: bool(m.short_name.value),
    ),
    _CheckDefinition(
        ManifestCheckId.SHORT_NAME_LENGTH,
        f"Manifest's `short_name` is too long (>{SUGGESTED_SHORTNAME_LENGTH} characters) "
        "to be displayed on a homescreen without truncation",
        lambda m: bool(m.short_name.value) and len(m.short_name.value) <= SUGGESTED_SHORTNAME_LENGTH,
    ),
    _CheckDefinition(
        ManifestCheckId.HAS_NAME,
        "Manifest does not have `name`",
        lambda m: bool(m.name.value),
    ),
]


class ManifestValues:
    """Computed artifact: manifest -> checklist."""

    @staticmethod
    def compute(manifest: Optional[ParsedManifest]) -> ManifestValuesResult:
        """Build the checklist for a manifest artifact."""
        if manifest is None:
            return ManifestValuesResult(
                is_parse_failure=True,
                parse_failure_reason="No manifest was fetched",
            )

        if not isinstance(manifest, ParsedManifest):
            raise ManifestValuesError(
                f"Expected a parsed manifest artifact, got {type(manifest).__name__}"
            )

        if manifest.value is None:
            return ManifestValuesResult(
                is_parse_failure=True,
                parse_failure_reason="Manifest failed to parse as valid JSON",
            )

        checks = [
            ManifestCheck(
                id=definition.id.value,
                passing=definition.validate(manifest.value),
                failure_text=definition.failure_text,
            )
            for definition in CHECK_DEFINITIONS
        ]
        return ManifestValuesResult(all_checks=checks)

    @classmethod
    async def request(cls, manifest: Optional[ParsedManifest], context: AuditContext) -> ManifestValuesResult:
        """
        Get the checklist for `manifest`, computing it at most once per context.

        Concurrent requests for the same artifact await the same task.
        """
        cache = context.computed_cache.setdefault(cls.__name__, {})
        key = id(manifest)

        entry = cache.get(key)
        if entry is None:
            task = asyncio.ensure_future(cls._compute_async(manifest))
            # Hold the artifact so its id stays unique for the cache's lifetime
            cache[key] = (manifest, task)
        else:
            task = entry[1]

        return await task

    @classmethod
    async def _compute_async(cls, manifest: Optional[ParsedManifest]) -> ManifestValuesResult:
        return cls.compute(manifest)
