"""
Metrics snapshot types and the resource-timeline breakdown.

The in-page readout returns plain JSON; this module turns it into frozen
dataclasses and partitions resource entries by type. `MetricsSnapshot.to_dict()`
restores the camelCase field names the readout uses.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Iterable
from urllib.parse import urlparse


FONT_URL_RE = re.compile(r"\.(woff2?|ttf|otf|eot)(\?|#|$)", re.IGNORECASE)

CSS_INITIATORS = ("link", "style")


def _non_negative_int(value: Any) -> int:
    try:
        n = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(0, n)


def _non_negative_float(value: Any) -> float:
    try:
        n = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, n)


def _optional_float(value: Any) -> float | None:
    # Timing 0 means "never observed" in the readout.
    if not value:
        return None
    return float(value)


@dataclasses.dataclass(frozen=True)
class ResourceEntry:
    name: str
    transfer_size: int
    initiator_type: str
    duration: float

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "ResourceEntry":
        return cls(
            name=str(raw.get("name") or ""),
            transfer_size=_non_negative_int(raw.get("transferSize")),
            initiator_type=str(raw.get("initiatorType") or ""),
            duration=_non_negative_float(raw.get("duration")),
        )

    @property
    def host(self) -> str:
        return urlparse(self.name).netloc

    def is_font(self) -> bool:
        return bool(FONT_URL_RE.search(self.name))


@dataclasses.dataclass(frozen=True)
class ThirdPartyScript:
    url: str
    size: int
    duration: float


@dataclasses.dataclass(frozen=True)
class ResourceBreakdown:
    resource_count: int = 0
    transfer_size: int = 0
    js_bytes: int = 0
    css_bytes: int = 0
    image_bytes: int = 0
    font_bytes: int = 0
    third_party_scripts: tuple[ThirdPartyScript, ...] = ()

    @classmethod
    def from_entries(cls, entries: Iterable[ResourceEntry], page_url: str) -> "ResourceBreakdown":
        entries = list(entries)
        page_host = urlparse(page_url).netloc

        def total(selected: Iterable[ResourceEntry]) -> int:
            return sum(r.transfer_size for r in selected)

        scripts = [r for r in entries if r.initiator_type == "script"]
        return cls(
            resource_count=len(entries),
            transfer_size=total(entries),
            js_bytes=total(scripts),
            css_bytes=total(r for r in entries if r.initiator_type in CSS_INITIATORS),
            image_bytes=total(r for r in entries if r.initiator_type == "img"),
            font_bytes=total(r for r in entries if r.is_font()),
            third_party_scripts=tuple(
                ThirdPartyScript(url=r.name, size=r.transfer_size, duration=r.duration)
                for r in scripts
                if r.host != page_host
            ),
        )


@dataclasses.dataclass(frozen=True)
class ClsShift:
    value: float
    sources: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class ImageInfo:
    src: str
    loading: str
    width: int
    height: int
    has_explicit_dimensions: bool
    decoding: str


@dataclasses.dataclass(frozen=True)
class FontInfo:
    family: str
    status: str
    display: str


@dataclasses.dataclass(frozen=True)
class MetricsSnapshot:
    url: str
    ttfb: float | None
    fcp: float | None
    lcp: float | None
    lcp_element: str | None
    cls: float
    cls_shifts: tuple[ClsShift, ...]
    dom_count: int
    script_count: int
    stylesheet_count: int
    resources: ResourceBreakdown
    images: tuple[ImageInfo, ...]
    fonts: tuple[FontInfo, ...]

    @classmethod
    def from_readout(cls, raw: dict[str, Any]) -> "MetricsSnapshot":
        url = str(raw.get("url") or "")
        ttfb = raw.get("ttfb")
        entries = [ResourceEntry.from_raw(r) for r in raw.get("resources") or []]
        return cls(
            url=url,
            ttfb=None if ttfb is None else _non_negative_float(ttfb),
            fcp=_optional_float(raw.get("fcp")),
            lcp=_optional_float(raw.get("lcp")),
            lcp_element=raw.get("lcpElement") or None,
            cls=_non_negative_float(raw.get("cls")),
            cls_shifts=tuple(
                ClsShift(
                    value=_non_negative_float(s.get("value")),
                    sources=tuple(str(t) for t in s.get("sources") or []),
                )
                for s in raw.get("clsShifts") or []
            ),
            dom_count=_non_negative_int(raw.get("domCount")),
            script_count=_non_negative_int(raw.get("scriptCount")),
            stylesheet_count=_non_negative_int(raw.get("styleSheetCount")),
            resources=ResourceBreakdown.from_entries(entries, url),
            images=tuple(
                ImageInfo(
                    src=str(img.get("src") or "")[:100],
                    loading=img.get("loading") or "eager",
                    width=_non_negative_int(img.get("width")),
                    height=_non_negative_int(img.get("height")),
                    has_explicit_dimensions=bool(img.get("hasExplicitDimensions")),
                    decoding=img.get("decodingAttr") or "auto",
                )
                for img in raw.get("images") or []
            ),
            fonts=tuple(
                FontInfo(
                    family=str(f.get("family") or ""),
                    status=str(f.get("status") or ""),
                    display=f.get("display") or "unknown",
                )
                for f in raw.get("fonts") or []
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        r = self.resources
        return {
            "url": self.url,
            "ttfb": self.ttfb,
            "fcp": self.fcp,
            "lcp": self.lcp,
            "lcpElement": self.lcp_element,
            "cls": self.cls,
            "clsShifts": [{"value": s.value, "sources": list(s.sources)} for s in self.cls_shifts],
            "domCount": self.dom_count,
            "scriptCount": self.script_count,
            "styleSheetCount": self.stylesheet_count,
            "resourceCount": r.resource_count,
            "transferSize": r.transfer_size,
            "jsBytes": r.js_bytes,
            "cssBytes": r.css_bytes,
            "imageBytes": r.image_bytes,
            "fontBytes": r.font_bytes,
            "thirdPartyScripts": [dataclasses.asdict(s) for s in r.third_party_scripts],
            "images": [
                {
                    "src": img.src,
                    "loading": img.loading,
                    "width": img.width,
                    "height": img.height,
                    "hasExplicitDimensions": img.has_explicit_dimensions,
                    "decodingAttr": img.decoding,
                }
                for img in self.images
            ],
            "fonts": [dataclasses.asdict(f) for f in self.fonts],
        }
