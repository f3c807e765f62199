"""Sticker container geometry.

A sticker is an outer container, an inner container and optional curved
caption text. This module works out the canvas, the two containers, the text
arc and where a QR image should sit, as percentages of the canvas. The caller
composites the QR document and the frame document; nothing here renders QR.
"""

import html
import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum

from shieldqr.config import ConfigError, ParseMixin, as_number, camel_case
from shieldqr.logging import audit, get_logger, trace
from shieldqr.shapes import ShapeRegistry, create_registry, resolve_shield
from shieldqr.svgfmt import attr, fixed, fmt, num

log = get_logger("sticker")

CORNER_RATIO = 0.08
TEXT_SPAN = 0.9
TOP_ARC_ID = "stickerTopArc"
BOTTOM_ARC_ID = "stickerBottomArc"


class ContainerKind(ParseMixin, str, Enum):
    SQUARE = "square"
    CIRCLE = "circle"
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    SHIELD = "shield"


_ASPECTS = {
    ContainerKind.SQUARE: 1.0,
    ContainerKind.CIRCLE: 1.0,
    ContainerKind.PORTRAIT: 3 / 4,
    ContainerKind.LANDSCAPE: 4 / 3,
}


@dataclass(frozen=True)
class StickerConfig:
    outer_shape: ContainerKind = ContainerKind.CIRCLE
    outer_shield_variant: str = "classic"
    inner_shape: ContainerKind = ContainerKind.CIRCLE
    inner_shield_variant: str = "classic"

    size: float = 400  # longest canvas side, px
    margin_ratio: float = 0.04
    inner_size_ratio: float = 0.72

    outer_color: str = "#0a0e27"
    outer_border_color: str = "#00d4ff"
    outer_border_width: float = 4
    inner_color: str = "#ffffff"
    inner_border_color: str = "#00d4ff"
    inner_border_width: float = 2

    top_text: str = ""
    bottom_text: str = ""
    text_color: str = "#ffffff"
    font_size: float = 22
    font_family: str = "sans-serif"
    text_offset: float = 0  # 0 flat, > 0 outward arc, < 0 inverted arc

    qr_padding: float = 0.04
    qr_zoom: float = 1.0

    def __post_init__(self):
        for name in ("size", "inner_size_ratio", "qr_zoom"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"sticker {name} must be positive, got {getattr(self, name)!r}")
        if not 0 <= self.margin_ratio < 0.5:
            raise ConfigError(f"sticker margin_ratio must be in [0, 0.5), got {self.margin_ratio!r}")
        if not 0 <= self.qr_padding < 0.5:
            raise ConfigError(f"sticker qr_padding must be in [0, 0.5), got {self.qr_padding!r}")

    @classmethod
    def from_options(cls, options: Mapping | None = None) -> "StickerConfig":
        """Build from a flat mapping; camelCase or snake_case, unknown keys ignored."""
        base = cls()
        if not options:
            return base
        if isinstance(options, StickerConfig):
            return options

        updates = {}
        for key, raw in options.items():
            name = _STICKER_ALIASES.get(key)
            if name is None:
                log.debug("ignoring unknown sticker option %r", key)
                continue
            if raw is None:
                continue
            if name in ("outer_shape", "inner_shape"):
                updates[name] = ContainerKind.parse(raw, ContainerKind.CIRCLE)
            elif name in _STICKER_NUMBERS:
                updates[name] = as_number(key, raw)
            else:
                updates[name] = str(raw)
        return replace(base, **updates)


_STICKER_FIELDS = [f.name for f in fields(StickerConfig)]
_STICKER_ALIASES = {name: name for name in _STICKER_FIELDS}
_STICKER_ALIASES.update({camel_case(name): name for name in _STICKER_FIELDS})
_STICKER_NUMBERS = {
    "size", "margin_ratio", "inner_size_ratio", "outer_border_width",
    "inner_border_width", "font_size", "text_offset", "qr_padding", "qr_zoom",
}


@dataclass(frozen=True)
class ShieldPlacement:
    """Uniform fit of a shield variation's canvas into a target box."""

    variant: str
    scale: float
    translate_x: float
    translate_y: float

    @property
    def transform(self) -> str:
        return f"translate({fmt(self.translate_x)},{fmt(self.translate_y)}) scale({fixed(self.scale, 4)})"


@dataclass(frozen=True)
class StickerGeometry:
    canvas_width: float
    canvas_height: float
    center_x: float
    center_y: float
    outer_half_width: float
    outer_half_height: float
    inner_half_width: float
    inner_half_height: float
    text_radius: float
    text_curvature: str  # "flat" | "outward" | "inverted"
    qr_x: float
    qr_y: float
    qr_size: float
    qr_left_pct: float
    qr_top_pct: float
    qr_width_pct: float
    qr_height_pct: float

    def to_dict(self) -> dict:
        return asdict(self)


def shield_transform(variant: str, center_x: float, center_y: float,
                     half_width: float, half_height: float,
                     registry: ShapeRegistry | None = None) -> ShieldPlacement:
    """Scale + translate that centres a shield variation in the given box."""
    registry = registry or create_registry()
    name, shape = resolve_shield(registry, variant)
    scale = min(2 * half_width / shape.width, 2 * half_height / shape.height)
    return ShieldPlacement(
        variant=name,
        scale=scale,
        translate_x=center_x - shape.width * scale / 2,
        translate_y=center_y - shape.height * scale / 2,
    )


def _aspect(kind: ContainerKind, variant: str, registry: ShapeRegistry) -> float:
    if kind is ContainerKind.SHIELD:
        _, shape = resolve_shield(registry, variant)
        return shape.width / shape.height
    return _ASPECTS[kind]


def _fit(box_w: float, box_h: float, aspect: float) -> tuple[float, float]:
    """Largest (w, h) with the given aspect inside the box."""
    if box_w / box_h > aspect:
        return box_h * aspect, box_h
    return box_w, box_w / aspect


def _curvature(offset: float) -> str:
    if offset > 0:
        return "outward"
    if offset < 0:
        return "inverted"
    return "flat"


@trace
def compute_geometry(config: StickerConfig | Mapping | None = None,
                     registry: ShapeRegistry | None = None) -> StickerGeometry:
    """Canvas, container, text-arc and QR placement for a sticker.

    Recomputed from scratch on every call.
    """
    config = StickerConfig.from_options(config)
    registry = registry or create_registry()

    aspect = _aspect(config.outer_shape, config.outer_shield_variant, registry)
    if aspect >= 1:
        canvas_w, canvas_h = config.size, config.size / aspect
    else:
        canvas_w, canvas_h = config.size * aspect, config.size
    cx, cy = canvas_w / 2, canvas_h / 2

    shrink = 1 - 2 * config.margin_ratio
    outer_w, outer_h = canvas_w * shrink, canvas_h * shrink

    inner_aspect = _aspect(config.inner_shape, config.inner_shield_variant, registry)
    inner_w, inner_h = _fit(outer_w * config.inner_size_ratio, outer_h * config.inner_size_ratio, inner_aspect)

    # square region the QR may occupy inside the inner container
    if config.inner_shape is ContainerKind.SHIELD:
        placement = shield_transform(config.inner_shield_variant, cx, cy, inner_w / 2, inner_h / 2, registry)
        _, shield = resolve_shield(registry, config.inner_shield_variant)
        area = shield.qr_area
        region = area.size * placement.scale
        qcx = placement.translate_x + (area.x + area.size / 2) * placement.scale
        qcy = placement.translate_y + (area.y + area.size / 2) * placement.scale
    elif config.inner_shape is ContainerKind.CIRCLE:
        region = min(inner_w, inner_h) / math.sqrt(2)
        qcx, qcy = cx, cy
    else:
        region = min(inner_w, inner_h)
        qcx, qcy = cx, cy

    # zoom scales about the inner container's center
    zoom = config.qr_zoom
    qcx, qcy = cx + zoom * (qcx - cx), cy + zoom * (qcy - cy)
    qr_size = region * (1 - 2 * config.qr_padding) * zoom
    qr_x = qcx - qr_size / 2
    qr_y = qcy - qr_size / 2

    geometry = StickerGeometry(
        canvas_width=canvas_w,
        canvas_height=canvas_h,
        center_x=cx,
        center_y=cy,
        outer_half_width=outer_w / 2,
        outer_half_height=outer_h / 2,
        inner_half_width=inner_w / 2,
        inner_half_height=inner_h / 2,
        text_radius=outer_h / 2 + config.text_offset,
        text_curvature=_curvature(config.text_offset),
        qr_x=qr_x,
        qr_y=qr_y,
        qr_size=qr_size,
        qr_left_pct=qr_x / canvas_w * 100,
        qr_top_pct=qr_y / canvas_h * 100,
        qr_width_pct=qr_size / canvas_w * 100,
        qr_height_pct=qr_size / canvas_h * 100,
    )
    audit("sticker.geometry", logger=log,
          outer=config.outer_shape.value, inner=config.inner_shape.value,
          canvas=f"{fmt(canvas_w)}x{fmt(canvas_h)}",
          qr_pct=f"{fmt(geometry.qr_width_pct)}%", curvature=geometry.text_curvature)
    return geometry


def border_radius(kind: ContainerKind | str) -> str:
    """CSS corner radius approximating a container on a rectangular surface.

    Shields cannot be approximated by a radius and report no rounding.
    """
    kind = ContainerKind.parse(kind, ContainerKind.CIRCLE)
    if kind is ContainerKind.CIRCLE:
        return "50%"
    if kind is ContainerKind.SHIELD:
        return "0"
    return f"{fmt(CORNER_RATIO * 100)}%"


# ---------------------------------------------------------------------------
# Frame markup
# ---------------------------------------------------------------------------

def _container(kind: ContainerKind, variant: str, cx: float, cy: float, hw: float, hh: float,
               fill: str, stroke: str, stroke_width: float, registry: ShapeRegistry) -> str:
    paint = f'fill="{attr(fill)}" stroke="{attr(stroke)}" stroke-width="{num(stroke_width)}"'
    if kind is ContainerKind.CIRCLE:
        return f'<ellipse cx="{fmt(cx)}" cy="{fmt(cy)}" rx="{fmt(hw)}" ry="{fmt(hh)}" {paint}/>'
    if kind is ContainerKind.SHIELD:
        placement = shield_transform(variant, cx, cy, hw, hh, registry)
        _, shape = resolve_shield(registry, variant)
        return (f'<path d="{shape.path}" transform="{placement.transform}" '
                f'vector-effect="non-scaling-stroke" {paint}/>')
    rr = fmt(CORNER_RATIO * min(hw, hh) * 2)
    return (f'<rect x="{fmt(cx - hw)}" y="{fmt(cy - hh)}" width="{fmt(hw * 2)}" height="{fmt(hh * 2)}" '
            f'rx="{rr}" ry="{rr}" {paint}/>')


def text_arc_path(cx: float, apex_y: float, span: float, radius: float, bulge_up: bool) -> str:
    """Path for caption text whose midpoint sits at (cx, apex_y).

    A zero radius gives a straight baseline.
    """
    radius = abs(radius)
    if radius == 0:
        return f"M {fmt(cx - span)} {fmt(apex_y)} L {fmt(cx + span)} {fmt(apex_y)}"
    s = min(span, radius)
    dy = math.sqrt(radius * radius - s * s)
    if bulge_up:
        end_y, sweep = apex_y + radius - dy, 1
    else:
        end_y, sweep = apex_y - radius + dy, 0
    return (f"M {fmt(cx - s)} {fmt(end_y)} "
            f"A {fmt(radius)} {fmt(radius)} 0 0 {sweep} {fmt(cx + s)} {fmt(end_y)}")


@trace
def generate_frame_svg(config: StickerConfig | Mapping | None = None,
                       registry: ShapeRegistry | None = None) -> str:
    """Outer/inner container and caption markup, without the QR code."""
    config = StickerConfig.from_options(config)
    registry = registry or create_registry()
    g = compute_geometry(config, registry)

    band = (g.outer_half_height + g.inner_half_height) / 2
    span = g.outer_half_width * TEXT_SPAN
    radius = 0 if g.text_curvature == "flat" else g.text_radius
    outward = g.text_curvature != "inverted"

    captions = []
    if config.top_text:
        captions.append((TOP_ARC_ID, text_arc_path(g.center_x, g.center_y - band, span, radius, outward),
                         config.top_text))
    if config.bottom_text:
        captions.append((BOTTOM_ARC_ID, text_arc_path(g.center_x, g.center_y + band, span, radius, not outward),
                         config.bottom_text))

    svg = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {fmt(g.canvas_width)} {fmt(g.canvas_height)}" '
        f'width="{fmt(g.canvas_width)}" height="{fmt(g.canvas_height)}" role="img" aria-label="Sticker frame">'
    ]
    if captions:
        svg.append("  <defs>")
        svg.extend(f'    <path id="{arc_id}" d="{d}" fill="none"/>' for arc_id, d, _ in captions)
        svg.append("  </defs>")

    svg.append("  " + _container(config.outer_shape, config.outer_shield_variant,
                                 g.center_x, g.center_y, g.outer_half_width, g.outer_half_height,
                                 config.outer_color, config.outer_border_color,
                                 config.outer_border_width, registry))
    svg.append("  " + _container(config.inner_shape, config.inner_shield_variant,
                                 g.center_x, g.center_y, g.inner_half_width, g.inner_half_height,
                                 config.inner_color, config.inner_border_color,
                                 config.inner_border_width, registry))

    for arc_id, _, text in captions:
        svg.append(
            f'  <text fill="{attr(config.text_color)}" font-size="{num(config.font_size)}" '
            f'font-family="{attr(config.font_family)}" text-anchor="middle" dominant-baseline="middle">'
            f'<textPath href="#{arc_id}" startOffset="50%">{html.escape(text)}</textPath></text>'
        )
    svg.append("</svg>")
    return "\n".join(svg)
