"""Resize or extend SVG without rasterizing it."""

from __future__ import annotations

import logging
import re

from PIL import ImageColor

from ..config import Config
from ..constants import SVG_NAMESPACE
from ..models import Dimensions, EdgeColor
from .markup import (
    SvgDocument,
    ViewBox,
    format_number,
    parse_attributes,
    parse_svg,
    render_attributes,
)
from .optimizer import ScourOptimizer, VectorOptimizer

logger = logging.getLogger("canvasforge.vector.native")

_RECT_RE = re.compile(r"<rect\b((?:[^>\"']|\"[^\"]*\"|'[^']*')*)/?>", re.DOTALL)
_FILL_RE = re.compile(
    r"""(?:\bfill\s*=\s*(?:"([^"]*)"|'([^']*)'))|(?:[\s;"']fill\s*:\s*([^;"']+))""",
    re.IGNORECASE,
)
_STYLE_FILL_RE = re.compile(r"(?:^|;)\s*fill\s*:\s*([^;]+)", re.IGNORECASE)
_BACKGROUND_NAME_RE = re.compile(r"(?:^|[\s_-])(?:background|backdrop|bg)(?:$|[\s_-])", re.IGNORECASE)

# Root attributes that stay on the new root instead of moving to the group
_ROOT_ONLY = {"id", "version", "baseProfile"}
_DROPPED = {"width", "height", "viewBox", "x", "y", "preserveAspectRatio"}


class VectorNativeProcessor:
    """Change an SVG's canvas by rewriting its coordinate system.

    Targets within the original size are a pure rescale of the root element.
    Larger targets wrap the original content in a translated group over a
    background rectangle, then run the result through the optimizer.
    """

    def __init__(self, optimizer: VectorOptimizer | None = None) -> None:
        self.optimizer = optimizer or ScourOptimizer()

    def process(self, markup: bytes | str, target: Dimensions) -> str:
        """Resize or extend ``markup`` to ``target``.

        Raises:
            VectorMarkupInvalidError: If the markup cannot be parsed.
        """
        doc = parse_svg(markup)
        size = doc.intrinsic_size() or (float(target.width), float(target.height))

        if target.width <= size[0] and target.height <= size[1]:
            logger.info("Vector resize %sx%s -> %dx%d", *map(format_number, size), *target.to_tuple())
            return resize_vector(doc, target)

        logger.info("Vector extend %sx%s -> %dx%d", *map(format_number, size), *target.to_tuple())
        return self.optimizer.optimize(extend_vector(doc, target))


def resize_vector(doc: SvgDocument, target: Dimensions) -> str:
    """Rewrite the root's width, height and viewBox; children stay byte-identical."""
    viewbox = doc.viewbox
    if viewbox is None:
        size = (doc.width, doc.height)
        if size[0] and size[1]:
            viewbox = ViewBox(0, 0, size[0], size[1])
        else:
            viewbox = ViewBox(0, 0, target.width, target.height)

    attributes = dict(doc.attributes)
    attributes["width"] = str(target.width)
    attributes["height"] = str(target.height)
    attributes["viewBox"] = str(viewbox)
    return doc.with_root_attributes(attributes)


def extend_vector(doc: SvgDocument, target: Dimensions) -> str:
    """Center the original content on a larger canvas with a background rect."""
    original_w, original_h = doc.intrinsic_size() or (float(target.width), float(target.height))
    background = detect_vector_background(doc)

    dx = (target.width - original_w) / 2
    dy = (target.height - original_h) / 2
    transform = f"translate({format_number(dx)},{format_number(dy)})"

    viewbox = doc.viewbox
    if viewbox is not None:
        sx = original_w / viewbox.width
        sy = original_h / viewbox.height
        if abs(sx - 1) > 1e-9 or abs(sy - 1) > 1e-9:
            transform += f" scale({format_number(sx)},{format_number(sy)})"
        if viewbox.min_x or viewbox.min_y:
            transform += f" translate({format_number(-viewbox.min_x)},{format_number(-viewbox.min_y)})"

    root_attrs: dict[str, str] = {"xmlns": SVG_NAMESPACE}
    group_attrs: dict[str, str] = {}
    for name, value in doc.attributes.items():
        if name.startswith("xmlns") or name in _ROOT_ONLY:
            root_attrs[name] = value
        elif name not in _DROPPED:
            group_attrs[name] = value

    root_attrs["width"] = str(target.width)
    root_attrs["height"] = str(target.height)
    root_attrs["viewBox"] = f"0 0 {target.width} {target.height}"
    group_attrs["transform"] = transform

    root = render_attributes(root_attrs)
    group = render_attributes(group_attrs)
    rect = f'<rect x="0" y="0" width="{target.width}" height="{target.height}" fill="{background.to_hex()}"/>'

    return (
        f"{doc.prolog}<svg {root}>{rect}"
        f"<g {group}>{doc.inner}</g></svg>{doc.epilog}"
    )


def detect_vector_background(doc: SvgDocument) -> EdgeColor:
    """Pick a background color from the markup's own fills.

    Prefers a rectangle that is plainly a background (named so, or covering
    the whole canvas), then the first fill in document order, then white.
    """
    size = doc.intrinsic_size()

    for match in _RECT_RE.finditer(doc.inner):
        attrs = parse_attributes(match.group(1))
        if not _is_background_rect(attrs, size):
            continue
        color = _parse_color(_fill_of(attrs))
        if color is not None:
            return color

    root_fill = _parse_color(_fill_of(doc.attributes))
    if root_fill is not None:
        return root_fill

    for match in _FILL_RE.finditer(doc.inner):
        raw = next((group for group in match.groups() if group), None)
        color = _parse_color(raw)
        if color is not None:
            return color

    return EdgeColor(*Config.FALLBACK_COLOR)


def _is_background_rect(attrs: dict[str, str], size: tuple[float, float] | None) -> bool:
    label = f"{attrs.get('id', '')} {attrs.get('class', '')}"
    if _BACKGROUND_NAME_RE.search(label):
        return True

    width, height = attrs.get("width", ""), attrs.get("height", "")
    if width.strip() == "100%" and height.strip() == "100%":
        return True

    if size is None:
        return False
    try:
        x = float(attrs.get("x", 0) or 0)
        y = float(attrs.get("y", 0) or 0)
        w = float(width)
        h = float(height)
    except ValueError:
        return False
    return x <= 0 and y <= 0 and w >= size[0] and h >= size[1]


def _fill_of(attrs: dict[str, str]) -> str | None:
    style = attrs.get("style")
    if style:
        match = _STYLE_FILL_RE.search(style)
        if match:
            return match.group(1)
    return attrs.get("fill")


def _parse_color(value: str | None) -> EdgeColor | None:
    if not value:
        return None
    value = value.strip()
    if value.lower() in ("none", "transparent", "currentcolor", "inherit") or value.startswith("url("):
        return None
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        return None
    return EdgeColor(*rgb[:3])
