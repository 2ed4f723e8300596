"""Tests for SVG markup parsing."""

from __future__ import annotations

import pytest

from backend.canvasforge.exceptions import VectorMarkupInvalidError
from backend.canvasforge.vector.markup import (
    ViewBox,
    format_number,
    is_svg,
    parse_length,
    parse_svg,
    parse_viewbox,
    render_attributes,
)
from backend.tests.fakes import encode_image, gradient_image


class TestIsSvg:
    def test_markup_bytes(self, simple_svg: str) -> None:
        assert is_svg(simple_svg.encode())

    def test_markup_text(self, simple_svg: str) -> None:
        assert is_svg(simple_svg)

    def test_raster_is_not_svg(self, small_png: bytes) -> None:
        assert not is_svg(small_png)

    def test_uppercase_root(self) -> None:
        assert is_svg(b"<SVG></SVG>")


class TestParseSvg:
    def test_splits_around_root(self, simple_svg: str) -> None:
        doc = parse_svg(simple_svg)
        assert doc.prolog.startswith("<?xml")
        assert doc.attributes["width"] == "400"
        assert doc.attributes["fill"] == "none"
        assert doc.inner.strip().startswith('<rect id="background"')
        assert doc.close_tag == "</svg>"
        assert doc.epilog == "\n"

    def test_round_trip_is_exact(self, simple_svg: str) -> None:
        assert parse_svg(simple_svg).to_markup() == simple_svg

    def test_prolog_with_comment_and_doctype(self) -> None:
        markup = (
            '<?xml version="1.0"?>\n<!-- exported -->\n'
            '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" '
            '"http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">\n'
            '<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"><g/></svg>'
        )
        doc = parse_svg(markup)
        assert doc.prolog.endswith("\n")
        assert doc.inner == "<g/>"

    def test_nested_svg_stays_inside(self) -> None:
        markup = (
            '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20">'
            '<svg x="5" width="10" height="10"><rect width="10" height="10"/></svg>'
            "</svg>"
        )
        doc = parse_svg(markup)
        assert doc.attributes["width"] == "20"
        assert doc.inner.endswith("</svg>")

    def test_self_closing_root(self) -> None:
        doc = parse_svg('<svg xmlns="http://www.w3.org/2000/svg" width="10" height="5"/>')
        assert doc.self_closing
        assert doc.inner == ""
        assert doc.intrinsic_size() == (10.0, 5.0)

    def test_single_quoted_attributes(self) -> None:
        doc = parse_svg("<svg xmlns='http://www.w3.org/2000/svg' width='30' height='15'></svg>")
        assert doc.attributes == {
            "xmlns": "http://www.w3.org/2000/svg",
            "width": "30",
            "height": "15",
        }

    def test_malformed_rejected(self) -> None:
        with pytest.raises(VectorMarkupInvalidError, match="well-formed"):
            parse_svg("<svg><g></svg>")

    def test_wrong_root_rejected(self) -> None:
        with pytest.raises(VectorMarkupInvalidError, match="not <svg>"):
            parse_svg("<html><svg/></html>")

    def test_raster_bytes_rejected(self) -> None:
        with pytest.raises(VectorMarkupInvalidError):
            parse_svg(encode_image(gradient_image(4, 4)))


class TestIntrinsicSize:
    def test_width_height_win(self, simple_svg: str) -> None:
        assert parse_svg(simple_svg).intrinsic_size() == (400.0, 200.0)

    def test_viewbox_only(self) -> None:
        doc = parse_svg('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 150"></svg>')
        assert doc.intrinsic_size() == (300.0, 150.0)

    def test_width_with_viewbox_ratio(self) -> None:
        doc = parse_svg('<svg xmlns="http://www.w3.org/2000/svg" width="600" viewBox="0 0 300 150"></svg>')
        assert doc.intrinsic_size() == (600.0, 300.0)

    def test_no_size_information(self, unsized_svg: str) -> None:
        assert parse_svg(unsized_svg).intrinsic_size() is None


class TestLengthsAndNumbers:
    @pytest.mark.parametrize(
        "value,expected",
        [("100", 100.0), ("100px", 100.0), ("1in", 96.0), ("72pt", 96.0), ("2.54cm", 96.0)],
    )
    def test_parse_length(self, value: str, expected: float) -> None:
        assert parse_length(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "100%", "auto", "10em", "-5"])
    def test_parse_length_rejects(self, value) -> None:
        assert parse_length(value) is None

    def test_parse_viewbox_commas(self) -> None:
        assert parse_viewbox("0,0, 10 20") == ViewBox(0, 0, 10, 20)

    def test_parse_viewbox_invalid(self) -> None:
        assert parse_viewbox("0 0 0 10") is None
        assert parse_viewbox("a b c d") is None

    def test_format_number(self) -> None:
        assert format_number(200.0) == "200"
        assert format_number(12.5) == "12.5"
        assert format_number(1 / 3) == "0.3333"

    def test_render_attributes_quotes(self) -> None:
        rendered = render_attributes({"id": "a", "style": 'font-family:"Inter"'})
        assert rendered == "id=\"a\" style='font-family:\"Inter\"'"
