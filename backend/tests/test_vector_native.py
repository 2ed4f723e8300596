"""Tests for the vector-native resize and extend paths."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from backend.canvasforge.exceptions import VectorMarkupInvalidError
from backend.canvasforge.models import Dimensions, EdgeColor
from backend.canvasforge.vector import (
    PassthroughOptimizer,
    ScourOptimizer,
    VectorNativeProcessor,
    detect_vector_background,
    parse_svg,
)

SVG_NS = "{http://www.w3.org/2000/svg}"


def _svg(body: str, root: str = 'width="100" height="100"') -> str:
    return f'<svg xmlns="http://www.w3.org/2000/svg" {root}>{body}</svg>'


class TestResize:
    def setup_method(self) -> None:
        self.processor = VectorNativeProcessor(PassthroughOptimizer())

    def test_inner_content_byte_identical(self, simple_svg: str) -> None:
        result = self.processor.process(simple_svg, Dimensions(200, 100))
        before, after = parse_svg(simple_svg), parse_svg(result)
        assert after.inner == before.inner
        assert after.prolog == before.prolog
        assert after.epilog == before.epilog

    def test_root_rewritten(self, simple_svg: str) -> None:
        doc = parse_svg(self.processor.process(simple_svg, Dimensions(200, 100)))
        assert doc.attributes["width"] == "200"
        assert doc.attributes["height"] == "100"
        assert doc.attributes["viewBox"] == "0 0 400 200"
        assert doc.attributes["fill"] == "none"

    def test_equal_size_is_resize(self, simple_svg: str) -> None:
        doc = parse_svg(self.processor.process(simple_svg, Dimensions(400, 200)))
        assert doc.inner == parse_svg(simple_svg).inner

    def test_viewbox_synthesized_from_size(self) -> None:
        markup = _svg('<rect width="300" height="150"/>', 'width="300" height="150"')
        doc = parse_svg(self.processor.process(markup, Dimensions(150, 75)))
        assert doc.attributes["viewBox"] == "0 0 300 150"
        assert doc.inner == '<rect width="300" height="150"/>'

    def test_viewbox_synthesized_from_target(self, unsized_svg: str) -> None:
        doc = parse_svg(self.processor.process(unsized_svg, Dimensions(64, 32)))
        assert doc.attributes["viewBox"] == "0 0 64 32"
        assert doc.attributes["width"] == "64"

    def test_invalid_markup(self) -> None:
        with pytest.raises(VectorMarkupInvalidError):
            self.processor.process("<svg><rect></svg>", Dimensions(10, 10))


class TestExtend:
    def setup_method(self) -> None:
        self.processor = VectorNativeProcessor(PassthroughOptimizer())

    def test_structure(self, simple_svg: str) -> None:
        result = self.processor.process(simple_svg, Dimensions(800, 400))
        root = ET.fromstring(result.encode())

        assert root.get("width") == "800"
        assert root.get("height") == "400"
        assert root.get("viewBox") == "0 0 800 400"

        background, group = list(root)
        assert background.tag == f"{SVG_NS}rect"
        assert background.get("fill") == "#336699"
        assert background.get("width") == "800"
        assert group.tag == f"{SVG_NS}g"
        assert group.get("transform") == "translate(200,100)"
        assert group.get("fill") == "none"

    def test_original_content_wrapped(self, simple_svg: str) -> None:
        result = self.processor.process(simple_svg, Dimensions(800, 400))
        assert parse_svg(simple_svg).inner in result

    def test_one_axis_larger_extends(self, simple_svg: str) -> None:
        root = ET.fromstring(self.processor.process(simple_svg, Dimensions(400, 300)).encode())
        group = list(root)[1]
        assert group.get("transform") == "translate(0,50)"

    def test_viewbox_offset_and_scale(self) -> None:
        markup = _svg('<circle cx="35" cy="35" r="5"/>', 'width="100" height="100" viewBox="10 10 50 50"')
        root = ET.fromstring(self.processor.process(markup, Dimensions(200, 200)).encode())
        group = list(root)[1]
        assert group.get("transform") == "translate(50,50) scale(2,2) translate(-10,-10)"

    def test_namespaces_carried_to_root(self) -> None:
        markup = (
            '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
            'id="art" width="10" height="10"><use xlink:href="#a"/></svg>'
        )
        doc = parse_svg(self.processor.process(markup, Dimensions(20, 20)))
        assert doc.attributes["xmlns:xlink"] == "http://www.w3.org/1999/xlink"
        assert doc.attributes["id"] == "art"

    def test_optimizer_is_applied(self, simple_svg: str) -> None:
        class MarkingOptimizer(PassthroughOptimizer):
            def optimize(self, markup: str) -> str:
                return markup.replace("</svg>", "<!--optimized--></svg>")

        result = VectorNativeProcessor(MarkingOptimizer()).process(simple_svg, Dimensions(800, 400))
        assert "<!--optimized-->" in result

    def test_resize_skips_optimizer(self, simple_svg: str) -> None:
        class FailingOptimizer(PassthroughOptimizer):
            def optimize(self, markup: str) -> str:
                raise AssertionError("optimizer must not run for a resize")

        VectorNativeProcessor(FailingOptimizer()).process(simple_svg, Dimensions(100, 50))


class TestScourOptimizer:
    def test_keeps_viewbox_and_ids(self, simple_svg: str) -> None:
        pytest.importorskip("scour")
        extended = VectorNativeProcessor(PassthroughOptimizer()).process(simple_svg, Dimensions(800, 400))

        optimized = ScourOptimizer().optimize(extended)

        root = ET.fromstring(optimized.encode())
        assert root.get("viewBox") == "0 0 800 400"
        assert 'id="logo"' in optimized
        assert 'id="background"' in optimized

    def test_unreferenced_defs_survive(self) -> None:
        pytest.importorskip("scour")
        markup = _svg(
            "<defs>"
            '<linearGradient id="brandGradient"><stop offset="0" stop-color="#fff"/></linearGradient>'
            '<symbol id="icon" viewBox="0 0 10 10"><circle cx="5" cy="5" r="4"/></symbol>'
            "</defs>"
            '<rect width="100" height="100" fill="#224466"/>',
        )

        optimized = VectorNativeProcessor(ScourOptimizer()).process(markup, Dimensions(200, 150))

        assert 'id="brandGradient"' in optimized
        assert 'id="icon"' in optimized
        assert ET.fromstring(optimized.encode()).get("viewBox") == "0 0 200 150"


class TestDetectVectorBackground:
    def test_named_background_rect(self, simple_svg: str) -> None:
        assert detect_vector_background(parse_svg(simple_svg)) == EdgeColor(0x33, 0x66, 0x99)

    def test_full_canvas_rect_beats_first_fill(self) -> None:
        doc = parse_svg(_svg('<circle fill="red"/><rect width="100" height="100" fill="blue"/>'))
        assert detect_vector_background(doc) == EdgeColor(0, 0, 255)

    def test_percentage_rect(self) -> None:
        doc = parse_svg(_svg('<circle fill="red"/><rect width="100%" height="100%" style="fill:#00ff00"/>'))
        assert detect_vector_background(doc) == EdgeColor(0, 255, 0)

    def test_first_fill_attribute(self) -> None:
        doc = parse_svg(_svg('<rect width="10" height="10" fill="#ff0000"/><circle fill="blue"/>'))
        assert detect_vector_background(doc) == EdgeColor(255, 0, 0)

    def test_first_fill_in_style(self, unsized_svg: str) -> None:
        assert detect_vector_background(parse_svg(unsized_svg)) == EdgeColor(10, 20, 30)

    def test_unusable_fills_skipped(self) -> None:
        doc = parse_svg(_svg('<rect fill="url(#g)"/><circle fill="none"/><path fill="green"/>'))
        assert detect_vector_background(doc) == EdgeColor(0, 128, 0)

    def test_root_fill(self) -> None:
        doc = parse_svg(_svg("<circle/>", 'width="10" height="10" fill="#123456"'))
        assert detect_vector_background(doc) == EdgeColor(0x12, 0x34, 0x56)

    def test_defaults_to_white(self) -> None:
        assert detect_vector_background(parse_svg(_svg("<circle/>"))) == EdgeColor(255, 255, 255)
