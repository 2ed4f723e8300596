"""SVG markup parsing that leaves the original text untouched.

Only the root ``<svg>`` open tag is ever rewritten. Everything between the
root's open and close tags is kept as the exact original substring so that a
pure coordinate-system change never touches child geometry.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from ..constants import SVG_SNIFF_BYTES
from ..exceptions import VectorMarkupInvalidError

logger = logging.getLogger("canvasforge.vector.markup")

_PROLOG_ITEM_RE = re.compile(
    r"\s+|<\?.*?\?>|<!--.*?-->|<!DOCTYPE(?:[^\[>]|\[.*?\])*>",
    re.DOTALL | re.IGNORECASE,
)
_ROOT_OPEN_RE = re.compile(
    r"<svg\b(?P<attrs>(?:[^>\"']|\"[^\"]*\"|'[^']*')*?)(?P<selfclose>/?)>",
    re.DOTALL,
)
_ROOT_CLOSE_RE = re.compile(r"</svg\s*>")
_ATTR_RE = re.compile(r"([\w:.-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-z%]*)\s*$")

# CSS absolute units expressed in user units (px)
_UNIT_SCALE = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
}


@dataclass(frozen=True)
class ViewBox:
    """Parsed ``viewBox`` attribute."""
    min_x: float
    min_y: float
    width: float
    height: float

    def __str__(self) -> str:
        return " ".join(
            format_number(v) for v in (self.min_x, self.min_y, self.width, self.height)
        )


@dataclass
class SvgDocument:
    """An SVG document split around its root element."""
    prolog: str
    attributes: dict[str, str]
    inner: str
    close_tag: str
    epilog: str
    self_closing: bool = False
    _raw_open_tag: str = field(default="", repr=False)

    @property
    def width(self) -> float | None:
        return parse_length(self.attributes.get("width"))

    @property
    def height(self) -> float | None:
        return parse_length(self.attributes.get("height"))

    @property
    def viewbox(self) -> ViewBox | None:
        return parse_viewbox(self.attributes.get("viewBox"))

    def intrinsic_size(self) -> tuple[float, float] | None:
        """Canvas size in user units, from width/height then the viewBox."""
        width, height = self.width, self.height
        viewbox = self.viewbox

        if width and height:
            return (width, height)
        if viewbox is None:
            return None
        if width:
            return (width, width * viewbox.height / viewbox.width)
        if height:
            return (height * viewbox.width / viewbox.height, height)
        return (viewbox.width, viewbox.height)

    def with_root_attributes(self, attributes: dict[str, str]) -> str:
        """Serialize the document with only the root open tag replaced."""
        open_tag = render_open_tag(attributes, self_closing=self.self_closing)
        return f"{self.prolog}{open_tag}{self.inner}{self.close_tag}{self.epilog}"

    def to_markup(self) -> str:
        return f"{self.prolog}{self._raw_open_tag}{self.inner}{self.close_tag}{self.epilog}"


def is_svg(data: bytes | str) -> bool:
    """Sniff whether ``data`` carries an SVG root tag near its start."""
    head = data[:SVG_SNIFF_BYTES]
    if isinstance(head, bytes):
        head = head.decode("utf-8", errors="ignore")
    return "<svg" in head.lower()


def decode_markup(data: bytes | str) -> str:
    """Decode markup bytes as UTF-8 text."""
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise VectorMarkupInvalidError(f"parse_svg: markup is not valid UTF-8: {e}") from e


def parse_svg(data: bytes | str) -> SvgDocument:
    """Validate markup and split it around the root ``<svg>`` element.

    Raises:
        VectorMarkupInvalidError: If the markup is not well-formed SVG.
    """
    text = decode_markup(data)

    try:
        root = ET.fromstring(text.encode("utf-8"))
    except ET.ParseError as e:
        raise VectorMarkupInvalidError(f"parse_svg: markup is not well-formed: {e}") from e

    if root.tag.rsplit("}", 1)[-1] != "svg":
        raise VectorMarkupInvalidError(f"parse_svg: root element is <{root.tag}>, not <svg>")

    start = _skip_prolog(text)
    match = _ROOT_OPEN_RE.match(text, start)
    if match is None:
        raise VectorMarkupInvalidError("parse_svg: could not locate the root <svg> tag")

    attributes = parse_attributes(match.group("attrs"))
    self_closing = bool(match.group("selfclose"))

    if self_closing:
        inner, close_tag, epilog = "", "", text[match.end():]
    else:
        closes = list(_ROOT_CLOSE_RE.finditer(text, match.end()))
        if not closes:
            raise VectorMarkupInvalidError("parse_svg: missing closing </svg> tag")
        last = closes[-1]
        inner = text[match.end():last.start()]
        close_tag = last.group(0)
        epilog = text[last.end():]

    return SvgDocument(
        prolog=text[:start],
        attributes=attributes,
        inner=inner,
        close_tag=close_tag,
        epilog=epilog,
        self_closing=self_closing,
        _raw_open_tag=match.group(0),
    )


def _skip_prolog(text: str) -> int:
    """Index of the first character after the XML declaration, comments and doctype."""
    pos = 0
    while True:
        match = _PROLOG_ITEM_RE.match(text, pos)
        if match is None or match.end() == pos:
            return pos
        pos = match.end()


def parse_attributes(raw: str) -> dict[str, str]:
    """Parse an attribute string into an ordered dict (values stay escaped)."""
    attributes: dict[str, str] = {}
    for name, double_quoted, single_quoted in _ATTR_RE.findall(raw):
        attributes[name] = double_quoted if double_quoted or not single_quoted else single_quoted
    return attributes


def render_attributes(attributes: dict[str, str]) -> str:
    """Serialize attributes, single-quoting values that contain a double quote."""
    return " ".join(
        f"{name}='{value}'" if '"' in value else f'{name}="{value}"'
        for name, value in attributes.items()
    )


def render_open_tag(attributes: dict[str, str], self_closing: bool = False) -> str:
    parts = render_attributes(attributes)
    tail = "/>" if self_closing else ">"
    return f"<svg {parts}{tail}" if parts else f"<svg{tail}"


def parse_length(value: str | None) -> float | None:
    """Parse an SVG length into user units; percentages and unknown units give None."""
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    if match is None:
        return None
    number, unit = match.groups()
    scale = _UNIT_SCALE.get(unit.lower())
    if scale is None:
        return None
    result = float(number) * scale
    return result if result > 0 else None


def parse_viewbox(value: str | None) -> ViewBox | None:
    if not value:
        return None
    try:
        numbers = [float(v) for v in re.split(r"[\s,]+", value.strip()) if v]
    except ValueError:
        logger.debug("Ignoring malformed viewBox %r", value)
        return None
    if len(numbers) != 4 or numbers[2] <= 0 or numbers[3] <= 0:
        return None
    return ViewBox(*numbers)


def format_number(value: float) -> str:
    """Compact decimal: integers without a fraction, others to 4 places."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")
