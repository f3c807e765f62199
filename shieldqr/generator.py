"""Shaped QR generation: encode with ``qrcode`` and assemble the SVG document.

Layer order, back to front:
    defs (clip paths, gradient, glow) -> background silhouette -> quiet-zone
    panel -> finder + data modules -> decorative fill -> inner border -> outline.
"""

import base64
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

import numpy as np
import qrcode
import qrcode.constants

from shieldqr.colors import build_gradient_def, contrast_ratio, foreground_paint, resolve_colors
from shieldqr.config import ConfigError, DesignConfig
from shieldqr.decorative import INSET_CLIP_ID, inset_transform, render_decorative, sample_grid
from shieldqr.finders import finder_mask, render_finders
from shieldqr.logging import audit, get_logger, trace
from shieldqr.modules import center_clear_mask, render_cells
from shieldqr.shapes import ShapeRegistry, ShapeVariation, create_registry, resolve_shape
from shieldqr.svgfmt import attr, fixed, fmt, num

log = get_logger("generator")

SVG_NS = "http://www.w3.org/2000/svg"
DATA_URI_PREFIX = "data:image/svg+xml;base64,"
CLIP_ID = "shapeClip"
GLOW_ID = "glow"

QUIET_MODULES = 1.5
QUIET_RADIUS = 1.5
INNER_BORDER_OPACITY = 0.35
MIN_CONTRAST = 4.5


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

@trace
def encode_grid(data: str, ecc: str = "H", version: int | None = None) -> np.ndarray:
    """Encode ``data`` and return the module matrix (True = dark), no quiet zone.

    Encoder failures (e.g. data too long for any version) propagate unchanged.
    """
    ecc_level = ECC_NAMES.get(ecc.upper())
    if ecc_level is None:
        raise ValueError(f"unknown error correction level {ecc!r}")
    qr = qrcode.QRCode(
        version=version,
        error_correction=ecc_level.value,
        box_size=1,
        border=0,
    )
    qr.add_data(data)
    qr.make(fit=(version is None))

    grid = np.array(qr.modules, dtype=bool)
    audit("qr.encoded", logger=log, data=data[:80], version=qr.version,
          size=f"{grid.shape[0]}x{grid.shape[1]}", ecc=ecc.upper())
    return grid


def as_grid(grid) -> np.ndarray:
    """Normalise a row-major boolean matrix to a square numpy bool array."""
    arr = np.asarray(grid, dtype=bool)
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise ConfigError(f"QR grid must be square, got shape {arr.shape}")
    if arr.shape[0] < 7:
        raise ConfigError(f"QR grid of side {arr.shape[0]} cannot hold the 7x7 finder patterns")
    return arr


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DataLayout:
    """Where the module grid lands inside a shape's qr_area."""

    n: int
    module_size: float
    quiet: float
    origin_x: float
    origin_y: float
    data_size: float
    cell: float

    @property
    def center(self) -> tuple[float, float]:
        return self.origin_x + self.data_size / 2, self.origin_y + self.data_size / 2

    @classmethod
    def for_shape(cls, shape: ShapeVariation, n: int) -> "DataLayout":
        area = shape.qr_area
        module_size = area.size / n
        quiet = QUIET_MODULES * module_size
        data_size = area.size - quiet * 2
        return cls(
            n=n,
            module_size=module_size,
            quiet=quiet,
            origin_x=area.x + quiet,
            origin_y=area.y + quiet,
            data_size=data_size,
            cell=data_size / n,
        )


# ---------------------------------------------------------------------------
# SVG assembly
# ---------------------------------------------------------------------------

def _glow_filter(color: str, intensity: float) -> list[str]:
    return [
        f'    <filter id="{GLOW_ID}" x="-50%" y="-50%" width="200%" height="200%">',
        f'      <feGaussianBlur stdDeviation="{num(intensity)}" result="blur"/>',
        f'      <feFlood flood-color="{color}" flood-opacity="0.5" result="color"/>',
        '      <feComposite in="color" in2="blur" operator="in" result="shadow"/>',
        '      <feMerge><feMergeNode in="shadow"/><feMergeNode in="SourceGraphic"/></feMerge>',
        "    </filter>",
    ]


@trace
def render_svg(grid, config: DesignConfig | Mapping | None = None,
               registry: ShapeRegistry | None = None) -> str:
    """Render an already-encoded module grid as a shaped SVG document.

    Args:
        grid: Square row-major boolean matrix, finders at the three corners.
        config: ``DesignConfig`` or a flat option mapping.
        registry: Shape registry to resolve against (fresh built-ins if None).

    Returns:
        Complete SVG markup. Identical inputs give byte-identical output.
    """
    config = DesignConfig.from_options(config)
    registry = registry or create_registry()
    grid = as_grid(grid)

    resolved = resolve_shape(config, registry)
    shape = resolved.shape
    colors = resolve_colors(config)
    layout = DataLayout.for_shape(shape, grid.shape[0])
    fill = foreground_paint(colors, config.gradient)

    bare = shape.bare
    transparent = colors.transparent
    glow = not bare and config.glow_effect
    decorate = not bare and config.decorative_fill

    if not transparent and config.gradient is None:
        ratio = contrast_ratio(colors.foreground, colors.background)
        if ratio is not None and ratio < MIN_CONTRAST:
            log.warning("Contrast ratio %.1f:1 is below %.1f:1, scannability at risk", ratio, MIN_CONTRAST)

    w, h, path = shape.width, shape.height, shape.path
    svg = [
        f'<svg xmlns="{SVG_NS}" viewBox="{shape.view_box}" width="{num(w)}" height="{num(h)}" '
        f'role="img" aria-label="QR Code">'
    ]

    # -- defs ------------------------------------------------------------------
    svg.append("  <defs>")
    svg.append(f'    <clipPath id="{CLIP_ID}"><path d="{path}"/></clipPath>')
    if decorate:
        svg.append(
            f'    <clipPath id="{INSET_CLIP_ID}"><path d="{path}" '
            f'transform="{inset_transform(w, h, config.decorative_shield_inset)}"/></clipPath>'
        )
    if config.gradient is not None:
        svg.append(build_gradient_def(config.gradient, "    "))
    if glow:
        svg.extend(_glow_filter(attr(config.glow_color) if config.glow_color else colors.outline,
                                config.glow_intensity))
    svg.append("  </defs>")

    # -- background ------------------------------------------------------------
    glow_attr = f' filter="url(#{GLOW_ID})"' if glow else ""
    if bare:
        panel = "none" if transparent else colors.background
        svg.append(f'  <rect x="0" y="0" width="{num(w)}" height="{num(h)}" fill="{panel}"/>')
    elif not transparent:
        svg.append(f'  <path d="{path}" fill="{colors.background}"{glow_attr}/>')

    area = shape.qr_area
    if not transparent:
        qz = fmt(layout.cell * QUIET_RADIUS)
        svg.append(
            f'  <rect x="{fmt(area.x)}" y="{fmt(area.y)}" width="{fmt(area.size)}" height="{fmt(area.size)}" '
            f'rx="{qz}" ry="{qz}" fill="{colors.background}" clip-path="url(#{CLIP_ID})"/>'
        )

    # -- modules ---------------------------------------------------------------
    svg.append("  <g>" if bare else f'  <g clip-path="url(#{CLIP_ID})">')
    for element in render_finders(
        grid, layout.origin_x, layout.origin_y, layout.cell,
        config.finder_pattern, config.finder_outer_style, config.finder_inner_style,
        config.finder_scale, colors,
    ):
        svg.append("    " + element)

    eligible = grid & ~finder_mask(layout.n)
    if config.center_clear:
        eligible &= ~center_clear_mask(layout.n, layout.origin_x, layout.origin_y, layout.cell,
                                       layout.center, layout.data_size * config.center_size)
    data_elements = render_cells(eligible, layout.origin_x, layout.origin_y, layout.cell,
                                 config.module_style, config.module_scale, fill)
    svg.extend("    " + element for element in data_elements)
    svg.append("  </g>")

    # -- decorative fill -------------------------------------------------------
    deco_count = 0
    if decorate:
        deco = sample_grid(
            w, h, layout.cell, area,
            density=config.decorative_density or 0.35,
            safe_margin=config.decorative_safe_margin,
        )
        deco_fill = colors.foreground if config.gradient is not None else fill
        deco_elements = render_decorative(deco, config.module_style, config.decorative_scale, deco_fill)
        deco_count = int(deco.mask.sum())
        svg.append(f'  <g clip-path="url(#{INSET_CLIP_ID})" opacity="{num(config.decorative_opacity)}">')
        svg.extend("    " + element for element in deco_elements)
        svg.append("  </g>")

    # -- borders ---------------------------------------------------------------
    if not bare:
        if config.inner_border:
            off = config.inner_border_offset
            sx = fixed((w - off * 2) / w, 4)
            sy = fixed((h - off * 2) / h, 4)
            stroke = attr(config.inner_border_color) if config.inner_border_color else colors.outline
            svg.append(
                f'  <path d="{path}" fill="none" stroke="{stroke}" '
                f'stroke-width="{num(config.inner_border_width)}" opacity="{num(INNER_BORDER_OPACITY)}" '
                f'transform="translate({num(off)},{num(off)}) scale({sx},{sy})"/>'
            )
        outline_glow = glow_attr if transparent else ""
        svg.append(
            f'  <path d="{path}" fill="none" stroke="{colors.outline}" '
            f'stroke-width="{num(colors.outline_width)}" stroke-linejoin="round"{outline_glow}/>'
        )

    svg.append("</svg>")
    document = "\n".join(svg)

    audit("svg.rendered", logger=log,
          shape=f"{resolved.category}/{resolved.variation}",
          grid=f"{layout.n}x{layout.n}",
          module_style=config.module_style.value,
          finder=config.finder_pattern.value,
          transparent=transparent,
          data_elements=len(data_elements),
          decorative_cells=deco_count,
          bytes=len(document))
    return document


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

@trace
def generate_shape_qr(data: str, options: DesignConfig | Mapping | None = None,
                      *, registry: ShapeRegistry | None = None) -> str:
    """Encode ``data`` and return the shaped QR code as SVG markup.

    Example:
        svg = generate_shape_qr("https://example.com",
                                {"shapeCategory": "heart", "preset": "fire"})
    """
    config = DesignConfig.from_options(options)
    grid = encode_grid(data, ecc=config.error_correction)
    return render_svg(grid, config, registry)


def generate_shape_qr_buffer(data: str, options: DesignConfig | Mapping | None = None,
                             *, registry: ShapeRegistry | None = None) -> bytes:
    """The SVG document as UTF-8 bytes."""
    return generate_shape_qr(data, options, registry=registry).encode("utf-8")


def svg_data_uri(svg: str) -> str:
    return DATA_URI_PREFIX + base64.b64encode(svg.encode("utf-8")).decode("ascii")


def generate_shape_qr_data_uri(data: str, options: DesignConfig | Mapping | None = None,
                               *, registry: ShapeRegistry | None = None) -> str:
    """The SVG document as a base64 ``data:image/svg+xml`` URI."""
    return svg_data_uri(generate_shape_qr(data, options, registry=registry))
