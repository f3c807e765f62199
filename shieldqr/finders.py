"""Finder pattern compositor.

The three 7x7 finder blocks sit at (0, 0), (0, n-7) and (n-7, 0). Within a
block the border ring is "outer", the central 3x3 is "inner" and the ring in
between is "space". Finders render either per module ("pattern") or as three
concentric shapes ("solid").
"""

import numpy as np

from shieldqr.config import ColorSet, FinderMode, FinderStyle
from shieldqr.modules import diamond_points, render_module
from shieldqr.svgfmt import fixed, fmt

FINDER_SIZE = 7
OUTER, SPACE, INNER = "outer", "space", "inner"
CORNER_RADIUS = 0.15


def finder_origins(n: int) -> list[tuple[int, int]]:
    """(row, col) of the top-left cell of each finder block."""
    return [(0, 0), (0, n - FINDER_SIZE), (n - FINDER_SIZE, 0)]


def classify_finder_cell(row: int, col: int, n: int) -> str | None:
    for r0, c0 in finder_origins(n):
        if r0 <= row < r0 + FINDER_SIZE and c0 <= col < c0 + FINDER_SIZE:
            lr, lc = row - r0, col - c0
            if lr in (0, 6) or lc in (0, 6):
                return OUTER
            if 2 <= lr <= 4 and 2 <= lc <= 4:
                return INNER
            return SPACE
    return None


def finder_mask(n: int) -> np.ndarray:
    """Bool mask of every cell that belongs to a finder block."""
    mask = np.zeros((n, n), dtype=bool)
    for r0, c0 in finder_origins(n):
        mask[r0:r0 + FINDER_SIZE, c0:c0 + FINDER_SIZE] = True
    return mask


# ---------------------------------------------------------------------------
# Pattern mode
# ---------------------------------------------------------------------------

def render_pattern_finders(grid: np.ndarray, origin_x: float, origin_y: float, cell: float,
                           outer_style: FinderStyle, inner_style: FinderStyle,
                           scale: float, colors: ColorSet) -> list[str]:
    n = grid.shape[0]
    elements = []
    for r in range(n):
        for c in range(n):
            if not grid[r, c]:
                continue
            kind = classify_finder_cell(r, c, n)
            if kind is None or kind == SPACE:
                continue
            if kind == OUTER:
                style, fill = outer_style, colors.outer
            else:
                style, fill = inner_style, colors.inner
            elements.append(render_module(
                origin_x + c * cell, origin_y + r * cell, cell, style.module_style, scale, fill,
            ))
    return elements


# ---------------------------------------------------------------------------
# Solid mode
# ---------------------------------------------------------------------------

def solid_shape(x: float, y: float, size: float, style: FinderStyle, fill: str, radius: float) -> str:
    """A filled finder ring layer as a standalone element."""
    cx, cy, r = x + size / 2, y + size / 2, size / 2
    if style is FinderStyle.CIRCLE:
        return f'<circle cx="{fmt(cx)}" cy="{fmt(cy)}" r="{fmt(r)}" fill="{fill}"/>'
    if style is FinderStyle.ROUNDED:
        rr = fixed(max(radius, 0), 2)
        return (f'<rect x="{fmt(x)}" y="{fmt(y)}" width="{fmt(size)}" height="{fmt(size)}" '
                f'rx="{rr}" ry="{rr}" fill="{fill}"/>')
    if style is FinderStyle.DIAMOND:
        return f'<polygon points="{diamond_points(cx, cy, r)}" fill="{fill}"/>'
    return f'<rect x="{fmt(x)}" y="{fmt(y)}" width="{fmt(size)}" height="{fmt(size)}" fill="{fill}"/>'


def solid_shape_path(x: float, y: float, size: float, style: FinderStyle, radius: float) -> str:
    """The same outline as ``solid_shape`` expressed as path data."""
    cx, cy, r = x + size / 2, y + size / 2, size / 2
    x2, y2 = x + size, y + size
    if style is FinderStyle.CIRCLE:
        return (f"M {fmt(cx - r)} {fmt(cy)} "
                f"A {fmt(r)} {fmt(r)} 0 1 0 {fmt(cx + r)} {fmt(cy)} "
                f"A {fmt(r)} {fmt(r)} 0 1 0 {fmt(cx - r)} {fmt(cy)} Z")
    if style is FinderStyle.DIAMOND:
        return (f"M {fmt(cx)} {fmt(cy - r)} L {fmt(cx + r)} {fmt(cy)} "
                f"L {fmt(cx)} {fmt(cy + r)} L {fmt(cx - r)} {fmt(cy)} Z")
    rr = min(max(radius, 0), r) if style is FinderStyle.ROUNDED else 0
    if rr <= 0:
        return f"M {fmt(x)} {fmt(y)} H {fmt(x2)} V {fmt(y2)} H {fmt(x)} Z"
    a = f"A {fmt(rr)} {fmt(rr)} 0 0 1"
    return (f"M {fmt(x + rr)} {fmt(y)} H {fmt(x2 - rr)} {a} {fmt(x2)} {fmt(y + rr)} "
            f"V {fmt(y2 - rr)} {a} {fmt(x2 - rr)} {fmt(y2)} "
            f"H {fmt(x + rr)} {a} {fmt(x)} {fmt(y2 - rr)} "
            f"V {fmt(y + rr)} {a} {fmt(x + rr)} {fmt(y)} Z")


def render_solid_finders(n: int, origin_x: float, origin_y: float, cell: float,
                         outer_style: FinderStyle, inner_style: FinderStyle,
                         scale: float, colors: ColorSet) -> list[str]:
    """Concentric 7/5/3-cell shapes per finder.

    On a transparent background the space layer cannot be painted, so the
    outer and space outlines become a single even-odd ring.
    """
    elements = []
    for r0, c0 in finder_origins(n):
        cx = origin_x + c0 * cell + 3.5 * cell
        cy = origin_y + r0 * cell + 3.5 * cell

        outer_sz = 7 * cell * scale
        space_sz = 5 * cell * scale
        inner_sz = 3 * cell * scale

        outer_rr = outer_sz * CORNER_RADIUS
        space_rr = max(outer_rr - (outer_sz - space_sz) / 2, 0)
        inner_rr = max(space_rr - (space_sz - inner_sz) / 2, 0)

        if colors.transparent:
            ring = " ".join([
                solid_shape_path(cx - outer_sz / 2, cy - outer_sz / 2, outer_sz, outer_style, outer_rr),
                solid_shape_path(cx - space_sz / 2, cy - space_sz / 2, space_sz, outer_style, space_rr),
            ])
            elements.append(f'<path d="{ring}" fill="{colors.outer}" fill-rule="evenodd"/>')
        else:
            elements.append(solid_shape(cx - outer_sz / 2, cy - outer_sz / 2, outer_sz,
                                        outer_style, colors.outer, outer_rr))
            elements.append(solid_shape(cx - space_sz / 2, cy - space_sz / 2, space_sz,
                                        outer_style, colors.background, space_rr))
        elements.append(solid_shape(cx - inner_sz / 2, cy - inner_sz / 2, inner_sz,
                                    inner_style, colors.inner, inner_rr))
    return elements


def render_finders(grid: np.ndarray, origin_x: float, origin_y: float, cell: float,
                   mode: FinderMode, outer_style: FinderStyle, inner_style: FinderStyle,
                   scale: float, colors: ColorSet) -> list[str]:
    if mode is FinderMode.SOLID:
        return render_solid_finders(grid.shape[0], origin_x, origin_y, cell,
                                    outer_style, inner_style, scale, colors)
    return render_pattern_finders(grid, origin_x, origin_y, cell,
                                  outer_style, inner_style, scale, colors)
