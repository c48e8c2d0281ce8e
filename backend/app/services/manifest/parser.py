"""
Manifest Parser - Turn raw web app manifest JSON into structured fields.

Every member keeps its raw value, the value the browser would use and a
warning when the raw value had to be rejected or defaulted.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import urljoin, urlparse


ALLOWED_DISPLAY_VALUES = ("fullscreen", "standalone", "minimal-ui", "browser")
DEFAULT_DISPLAY_MODE = "browser"

# CSS named colors accepted for theme_color/background_color
CSS_COLOR_KEYWORDS = {
    "aliceblue", "antiquewhite", "aqua", "aquamarine", "azure", "beige", "bisque", "black",
    "blanchedalmond", "blue", "blueviolet", "brown", "burlywood", "cadetblue", "chartreuse",
    "chocolate", "coral", "cornflowerblue", "cornsilk", "crimson", "cyan", "darkblue",
    "darkcyan", "darkgoldenrod", "darkgray", "darkgreen", "darkgrey", "darkkhaki",
    "darkmagenta", "darkolivegreen", "darkorange", "darkorchid", "darkred", "darksalmon",
    "darkseagreen", "darkslateblue", "darkslategray", "darkslategrey", "darkturquoise",
    "darkviolet", "deeppink", "deepskyblue", "dimgray", "dimgrey", "dodgerblue", "firebrick",
    "floralwhite", "forestgreen", "fuchsia", "gainsboro", "ghostwhite", "gold", "goldenrod",
    "gray", "green", "greenyellow", "grey", "honeydew", "hotpink", "indianred", "indigo",
    "ivory", "khaki", "lavender", "lavenderblush", "lawngreen", "lemonchiffon", "lightblue",
    "lightcoral", "lightcyan", "lightgoldenrodyellow", "lightgray", "lightgreen", "lightgrey",
    "lightpink", "lightsalmon", "lightseagreen", "lightskyblue", "lightslategray",
    "lightslategrey", "lightsteelblue", "lightyellow", "lime", "limegreen", "linen", "magenta",
    "maroon", "mediumaquamarine", "mediumblue", "mediumorchid", "mediumpurple",
    "mediumseagreen", "mediumslateblue", "mediumspringgreen", "mediumturquoise",
    "mediumvioletred", "midnightblue", "mintcream", "mistyrose", "moccasin", "navajowhite",
    "navy", "oldlace", "olive", "olivedrab", "orange", "orangered", "orchid", "palegoldenrod",
    "palegreen", "paleturquoise", "palevioletred", "papayawhip", "peachpuff", "peru", "pink",
    "plum", "powderblue", "purple", "rebeccapurple", "red", "rosybrown", "royalblue",
    "saddlebrown", "salmon", "sandybrown", "seagreen", "seashell", "sienna", "silver",
    "skyblue", "slateblue", "slategray", "slategrey", "snow", "springgreen", "steelblue",
    "tan", "teal", "thistle", "tomato", "transparent", "turquoise", "violet", "wheat", "white",
    "whitesmoke", "yellow", "yellowgreen",
}

HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-f]{3}|[0-9a-f]{4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
FUNCTIONAL_COLOR_RE = re.compile(r"^(?:rgb|rgba|hsl|hsla)\([^()]*\)$", re.IGNORECASE)


@dataclass
class ManifestField:
    """A single parsed manifest member."""
    raw: Any = None
    value: Any = None
    warning: Optional[str] = None


@dataclass
class ManifestIcon:
    """A parsed entry of the `icons` member."""
    src: str
    sizes: List[str] = field(default_factory=list)
    type: Optional[str] = None


@dataclass
class ManifestValue:
    """Structured manifest members."""
    name: ManifestField = field(default_factory=ManifestField)
    short_name: ManifestField = field(default_factory=ManifestField)
    start_url: ManifestField = field(default_factory=ManifestField)
    display: ManifestField = field(default_factory=lambda: ManifestField(value=DEFAULT_DISPLAY_MODE))
    icons: ManifestField = field(default_factory=lambda: ManifestField(value=[]))
    theme_color: ManifestField = field(default_factory=ManifestField)
    background_color: ManifestField = field(default_factory=ManifestField)


@dataclass
class ParsedManifest:
    """The `Manifest` artifact: where it came from and what it parsed to."""
    raw: str
    url: str
    document_url: str
    value: Optional[ManifestValue] = None
    warning: Optional[str] = None


def _parse_string(raw: Any, member: str, trim: bool = True) -> ManifestField:
    if raw is None:
        return ManifestField()
    if not isinstance(raw, str):
        return ManifestField(raw=raw, warning=f"ERROR: expected a string for '{member}'.")
    return ManifestField(raw=raw, value=raw.strip() if trim else raw)


def _same_origin(a: str, b: str) -> bool:
    pa, pb = urlparse(a), urlparse(b)
    return (pa.scheme, pa.netloc) == (pb.scheme, pb.netloc)


def _parse_start_url(raw: Any, manifest_url: str, document_url: str) -> ManifestField:
    if raw is None:
        return ManifestField()
    if not isinstance(raw, str):
        return ManifestField(raw=raw, warning="ERROR: start_url type expected to be string.")
    if raw == "":
        return ManifestField(raw=raw, warning="ERROR: start_url string empty")

    try:
        resolved = urljoin(manifest_url, raw)
    except ValueError:
        return ManifestField(raw=raw, warning="ERROR: invalid start_url relative to manifest URL")

    if not _same_origin(resolved, document_url):
        return ManifestField(raw=raw, warning="ERROR: start_url must be same-origin as document")

    return ManifestField(raw=raw, value=resolved)


def _parse_display(raw: Any) -> ManifestField:
    if raw is None:
        return ManifestField(value=DEFAULT_DISPLAY_MODE)
    if not isinstance(raw, str):
        return ManifestField(
            raw=raw, value=DEFAULT_DISPLAY_MODE,
            warning="ERROR: expected a string."
        )

    display = raw.strip().lower()
    if display not in ALLOWED_DISPLAY_VALUES:
        return ManifestField(
            raw=raw, value=DEFAULT_DISPLAY_MODE,
            warning="ERROR: 'display' has invalid value " + display +
                    f". will fall back to {DEFAULT_DISPLAY_MODE}."
        )
    return ManifestField(raw=raw, value=display)


def _parse_icon(raw: Any, manifest_url: str) -> Optional[ManifestIcon]:
    if not isinstance(raw, dict):
        return None

    src = raw.get("src")
    if not isinstance(src, str) or not src.strip():
        return None

    sizes = raw.get("sizes")
    size_list = sizes.split() if isinstance(sizes, str) else []

    icon_type = raw.get("type")
    icon_type = icon_type.strip() if isinstance(icon_type, str) else None

    # Raises ValueError on a malformed src
    resolved = urljoin(manifest_url, src.strip())
    return ManifestIcon(src=resolved, sizes=size_list, type=icon_type)


def _parse_icons(raw: Any, manifest_url: str) -> ManifestField:
    if raw is None:
        return ManifestField(value=[])
    if not isinstance(raw, list):
        return ManifestField(raw=raw, value=[], warning="ERROR: 'icons' expected to be an array.")

    icons = []
    warning = None
    for item in raw:
        try:
            icon = _parse_icon(item, manifest_url)
        except ValueError:
            warning = "ERROR: invalid icon src relative to manifest URL. Icon dropped."
            continue
        if icon:
            icons.append(icon)
    return ManifestField(raw=raw, value=icons, warning=warning)


def is_valid_color(color: str) -> bool:
    """Check a string against the CSS color forms browsers accept in manifests."""
    color = color.strip()
    if not color:
        return False
    return (
        color.lower() in CSS_COLOR_KEYWORDS
        or bool(HEX_COLOR_RE.match(color))
        or bool(FUNCTIONAL_COLOR_RE.match(color))
    )


def _parse_color(raw: Any, member: str) -> ManifestField:
    parsed = _parse_string(raw, member)
    if parsed.value is None:
        return parsed
    if not is_valid_color(parsed.value):
        return ManifestField(raw=raw, warning=f"ERROR: color parsing failed for '{member}'.")
    return parsed


def parse_manifest(raw: str, manifest_url: str, document_url: str) -> ParsedManifest:
    """
    Parse a manifest document.

    Args:
        raw: Manifest body as fetched
        manifest_url: URL the manifest was fetched from (base for relative URLs)
        document_url: URL of the page that linked the manifest

    Returns:
        ParsedManifest whose `value` is None when the body is not a JSON object
    """
    # A UTF-8 BOM survives decoding and is not valid JSON
    body = raw[1:] if raw.startswith("\ufeff") else raw

    try:
        data = json.loads(body)
    except ValueError as e:
        return ParsedManifest(
            raw=raw, url=manifest_url, document_url=document_url,
            warning=f"ERROR: file isn't valid JSON: {e}"
        )

    if not isinstance(data, dict):
        return ParsedManifest(
            raw=raw, url=manifest_url, document_url=document_url,
            warning="ERROR: manifest is not an object"
        )

    value = ManifestValue(
        name=_parse_string(data.get("name"), "name"),
        short_name=_parse_string(data.get("short_name"), "short_name"),
        start_url=_parse_start_url(data.get("start_url"), manifest_url, document_url),
        display=_parse_display(data.get("display")),
        icons=_parse_icons(data.get("icons"), manifest_url),
        theme_color=_parse_color(data.get("theme_color"), "theme_color"),
        background_color=_parse_color(data.get("background_color"), "background_color"),
    )

    return ParsedManifest(raw=raw, url=manifest_url, document_url=document_url, value=value)
