import math

import pytest

from shieldqr.config import ConfigError
from shieldqr.sticker import (
    ContainerKind, StickerConfig, border_radius, compute_geometry, generate_frame_svg,
    shield_transform, text_arc_path,
)


class TestConfig:
    def test_defaults(self):
        config = StickerConfig.from_options(None)
        assert config.outer_shape is ContainerKind.CIRCLE
        assert config.size == 400

    def test_camel_and_snake(self):
        camel = StickerConfig.from_options({"outerShape": "portrait", "qrZoom": 1.2, "topText": "Hi"})
        snake = StickerConfig.from_options({"outer_shape": "portrait", "qr_zoom": 1.2, "top_text": "Hi"})
        assert camel == snake
        assert camel.outer_shape is ContainerKind.PORTRAIT

    def test_unknown_kind_is_circle(self):
        assert StickerConfig.from_options({"innerShape": "star"}).inner_shape is ContainerKind.CIRCLE

    def test_non_numeric_rejected(self):
        with pytest.raises(ConfigError):
            StickerConfig.from_options({"size": "huge"})

    @pytest.mark.parametrize("options", [
        {"size": 0}, {"innerSizeRatio": 0}, {"qrZoom": -1}, {"marginRatio": 0.5}, {"qrPadding": 0.6},
    ])
    def test_degenerate_sizes_rejected(self, options):
        with pytest.raises(ConfigError):
            StickerConfig.from_options(options)

    def test_direct_construction_validated(self):
        with pytest.raises(ConfigError):
            StickerConfig(size=0)


class TestCanvas:
    @pytest.mark.parametrize("kind, width, height", [
        ("square", 400, 400),
        ("circle", 400, 400),
        ("portrait", 300, 400),
        ("landscape", 400, 300),
    ])
    def test_aspect(self, kind, width, height):
        g = compute_geometry({"outerShape": kind})
        assert g.canvas_width == pytest.approx(width)
        assert g.canvas_height == pytest.approx(height)

    def test_shield_aspect(self):
        g = compute_geometry({"outerShape": "shield", "outerShieldVariant": "classic"})
        assert g.canvas_height == 400
        assert g.canvas_width == pytest.approx(400 * 300 / 340)

    def test_margin(self):
        g = compute_geometry({"outerShape": "square"})
        assert g.outer_half_width == pytest.approx(184)
        assert g.outer_half_height == pytest.approx(184)

    def test_inner_keeps_own_aspect(self):
        g = compute_geometry({"outerShape": "landscape", "innerShape": "square"})
        assert g.inner_half_width == pytest.approx(g.inner_half_height)
        assert g.inner_half_height == pytest.approx(0.72 * 0.92 * 300 / 2)


class TestQRPlacement:
    def test_circle_inscribed_square(self):
        g = compute_geometry({"innerShape": "circle"})
        diameter = 2 * g.inner_half_width
        assert g.qr_size == pytest.approx(diameter / math.sqrt(2) * 0.92)
        assert g.qr_x + g.qr_size / 2 == pytest.approx(g.center_x)

    def test_square_region(self):
        g = compute_geometry({"innerShape": "square", "qrPadding": 0})
        assert g.qr_size == pytest.approx(2 * g.inner_half_width)

    def test_zoom(self):
        base = compute_geometry({"innerShape": "square"})
        zoomed = compute_geometry({"innerShape": "square", "qrZoom": 1.5})
        assert zoomed.qr_size == pytest.approx(base.qr_size * 1.5)
        assert zoomed.qr_x + zoomed.qr_size / 2 == pytest.approx(base.qr_x + base.qr_size / 2)

    def test_shield_inner_uses_qr_area(self):
        g = compute_geometry({"innerShape": "shield", "innerShieldVariant": "classic"})
        scale = 2 * g.inner_half_height / 340
        assert g.qr_size == pytest.approx(208 * scale * 0.92)
        assert g.qr_x >= g.center_x - g.inner_half_width
        assert g.qr_x + g.qr_size <= g.center_x + g.inner_half_width
        assert g.qr_x + g.qr_size / 2 == pytest.approx(g.center_x)

    def test_zoom_scales_about_container_center(self):
        options = {"outerShape": "square", "innerShape": "shield", "innerShieldVariant": "classic"}
        base = compute_geometry(options)
        zoomed = compute_geometry(dict(options, qrZoom=2))
        base_cy = base.qr_y + base.qr_size / 2
        zoomed_cy = zoomed.qr_y + zoomed.qr_size / 2
        assert base_cy < base.center_y
        assert zoomed_cy - zoomed.center_y == pytest.approx(2 * (base_cy - base.center_y))
        assert zoomed.qr_size == pytest.approx(2 * base.qr_size)

    def test_percentages(self):
        g = compute_geometry({"outerShape": "portrait", "innerShape": "square"})
        assert g.qr_left_pct == pytest.approx(g.qr_x / g.canvas_width * 100)
        assert g.qr_top_pct == pytest.approx(g.qr_y / g.canvas_height * 100)
        assert g.qr_width_pct == pytest.approx(g.qr_size / 300 * 100)
        assert g.qr_height_pct == pytest.approx(g.qr_size / 400 * 100)

    def test_to_dict(self):
        assert set(compute_geometry().to_dict()) >= {"canvas_width", "qr_left_pct", "text_curvature"}


class TestText:
    @pytest.mark.parametrize("offset, curvature", [(0, "flat"), (12, "outward"), (-12, "inverted")])
    def test_curvature(self, offset, curvature):
        g = compute_geometry({"textOffset": offset})
        assert g.text_curvature == curvature
        assert g.text_radius == pytest.approx(184 + offset)

    def test_flat_path(self):
        assert text_arc_path(100, 20, 50, 0, True) == "M 50 20 L 150 20"

    def test_arc_path_apex(self):
        d = text_arc_path(100, 20, 30, 50, True)
        # chord endpoints sit below the apex when the arc bulges upward
        assert d == "M 70 30 A 50 50 0 0 1 130 30"


class TestFrame:
    def test_circle_frame(self):
        svg = generate_frame_svg()
        assert svg.count("<ellipse") == 2
        assert "<textPath" not in svg

    def test_captions(self):
        svg = generate_frame_svg({"topText": "Scan & Go", "bottomText": "Thanks", "textOffset": 10})
        assert 'href="#stickerTopArc"' in svg
        assert 'href="#stickerBottomArc"' in svg
        assert "Scan &amp; Go" in svg

    def test_colors_escaped(self):
        svg = generate_frame_svg({"outerColor": '#000" x="1', "textColor": "a<b", "topText": "Hi"})
        assert 'fill="#000&quot; x=&quot;1"' in svg
        assert '<text fill="a&lt;b"' in svg

    def test_rect_corners(self):
        svg = generate_frame_svg({"outerShape": "square", "innerShape": "portrait"})
        assert svg.count("<rect") == 2

    def test_shield_container(self):
        svg = generate_frame_svg({"outerShape": "shield", "outerShieldVariant": "badge"})
        assert 'vector-effect="non-scaling-stroke"' in svg


class TestHelpers:
    @pytest.mark.parametrize("kind, radius", [
        ("circle", "50%"), ("square", "8%"), ("portrait", "8%"),
        ("landscape", "8%"), ("shield", "0"), ("blob", "50%"),
    ])
    def test_border_radius(self, kind, radius):
        assert border_radius(kind) == radius

    def test_shield_transform_identity(self):
        placement = shield_transform("classic", 150, 170, 150, 170)
        assert placement.scale == pytest.approx(1)
        assert placement.transform == "translate(0,0) scale(1.0000)"

    def test_shield_transform_fits_and_centers(self, registry):
        placement = shield_transform("modern", 100, 100, 100, 50, registry)
        assert placement.scale == pytest.approx(100 / 310)
        assert placement.translate_y == pytest.approx(50)
        assert placement.translate_x == pytest.approx(100 - 150 * 100 / 310)

    def test_unknown_variant(self):
        assert shield_transform("nope", 0, 0, 10, 10).variant == "classic"
