"""Module renderer: per-cell shapes and the cross-cell compositors.

Single-cell primitives (circle, rounded square, diamond, square) are pure
functions of position, cell size and scale. Bar styles merge contiguous runs
into one rounded rect; pond merges 4-connected cells into organic blobs.
All of them work on a boolean mask of eligible cells, so the data layer and
the decorative layer share the same code.
"""

import numpy as np
from scipy import ndimage

from shieldqr.config import ModuleStyle
from shieldqr.svgfmt import fixed, fmt

BAR_RADIUS = 0.45
ROUNDED_RADIUS = 0.35
POND_RADIUS = 0.85
POND_MIN_RADIUS = 0.3


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def circle_module(x: float, y: float, size: float, scale: float, fill: str) -> str:
    r = size * scale / 2
    return f'<circle cx="{fmt(x + size / 2)}" cy="{fmt(y + size / 2)}" r="{fmt(r)}" fill="{fill}"/>'


def rounded_square_module(x: float, y: float, size: float, scale: float, fill: str) -> str:
    s = size * scale
    offset = (size - s) / 2
    rr = fixed(s * ROUNDED_RADIUS, 2)
    return (f'<rect x="{fmt(x + offset)}" y="{fmt(y + offset)}" width="{fmt(s)}" height="{fmt(s)}" '
            f'rx="{rr}" ry="{rr}" fill="{fill}"/>')


def diamond_module(x: float, y: float, size: float, scale: float, fill: str) -> str:
    cx, cy = x + size / 2, y + size / 2
    r = size * scale / 2
    return f'<polygon points="{diamond_points(cx, cy, r)}" fill="{fill}"/>'


def square_module(x: float, y: float, size: float, scale: float, fill: str) -> str:
    s = size * scale
    offset = (size - s) / 2
    return f'<rect x="{fmt(x + offset)}" y="{fmt(y + offset)}" width="{fmt(s)}" height="{fmt(s)}" fill="{fill}"/>'


def diamond_points(cx: float, cy: float, r: float) -> str:
    return " ".join([
        f"{fmt(cx)},{fmt(cy - r)}",
        f"{fmt(cx + r)},{fmt(cy)}",
        f"{fmt(cx)},{fmt(cy + r)}",
        f"{fmt(cx - r)},{fmt(cy)}",
    ])


PRIMITIVES = {
    ModuleStyle.CIRCLE: circle_module,
    ModuleStyle.DOT: circle_module,
    ModuleStyle.ROUNDED_SQUARE: rounded_square_module,
    ModuleStyle.DIAMOND: diamond_module,
    ModuleStyle.SQUARE: square_module,
}

COMPOSITE_STYLES = (ModuleStyle.BAR_H, ModuleStyle.BAR_V, ModuleStyle.POND)


def render_module(x: float, y: float, size: float, style: ModuleStyle, scale: float, fill: str) -> str:
    """One cell drawn with a single-cell primitive."""
    try:
        primitive = PRIMITIVES[style]
    except KeyError:
        raise ValueError(f"{style.value} is not a single-cell style") from None
    return primitive(x, y, size, scale, fill)


# ---------------------------------------------------------------------------
# Compositors
# ---------------------------------------------------------------------------

def find_runs(line: np.ndarray) -> list[tuple[int, int]]:
    """Maximal runs of True in a 1-D bool array as (start, length)."""
    padded = np.concatenate(([0], np.asarray(line, dtype=np.int8), [0]))
    edges = np.diff(padded)
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    return [(int(s), int(e - s)) for s, e in zip(starts, ends)]


def render_bars(mask: np.ndarray, origin_x: float, origin_y: float, cell: float,
                scale: float, fill: str, horizontal: bool = True) -> list[str]:
    """One rounded rect per maximal run along rows (or columns)."""
    s = cell * scale
    half_gap = (cell - s) / 2
    rr = fmt(s * BAR_RADIUS)
    elements = []

    lines = mask if horizontal else mask.T
    for index, line in enumerate(lines):
        for start, length in find_runs(line):
            along = start * cell + half_gap
            across = index * cell + half_gap
            extent = fmt(length * cell - 2 * half_gap)
            if horizontal:
                x, y, w, h = fmt(origin_x + along), fmt(origin_y + across), extent, fmt(s)
            else:
                x, y, w, h = fmt(origin_x + across), fmt(origin_y + along), fmt(s), extent
            elements.append(
                f'<rect x="{x}" y="{y}" width="{w}" height="{h}" rx="{rr}" ry="{rr}" fill="{fill}"/>'
            )
    return elements


def pond_cell_path(x0: float, y0: float, cell: float, inset: float, rr: float,
                   top: bool, right: bool, bottom: bool, left: bool) -> str:
    """Outline of one pond cell; flags say which neighbours are active.

    Edges facing an active neighbour stay flush with the cell boundary, so two
    touching cells share that edge exactly. A corner is rounded only when both
    edges meeting at it are exposed.
    """
    t = y0 if top else y0 + inset
    r = x0 + cell if right else x0 + cell - inset
    b = y0 + cell if bottom else y0 + cell - inset
    l = x0 if left else x0 + inset

    tl = not top and not left
    tr = not top and not right
    br = not bottom and not right
    bl = not bottom and not left

    d = f"M {fmt(l + (rr if tl else 0))} {fmt(t)}"
    d += f" H {fmt(r - (rr if tr else 0))}"
    if tr:
        d += f" Q {fmt(r)} {fmt(t)} {fmt(r)} {fmt(t + rr)}"
    d += f" V {fmt(b - (rr if br else 0))}"
    if br:
        d += f" Q {fmt(r)} {fmt(b)} {fmt(r - rr)} {fmt(b)}"
    d += f" H {fmt(l + (rr if bl else 0))}"
    if bl:
        d += f" Q {fmt(l)} {fmt(b)} {fmt(l)} {fmt(b - rr)}"
    d += f" V {fmt(t + (rr if tl else 0))}"
    if tl:
        d += f" Q {fmt(l)} {fmt(t)} {fmt(l + rr)} {fmt(t)}"
    return d + " Z"


def render_pond(mask: np.ndarray, origin_x: float, origin_y: float, cell: float,
                scale: float, fill: str) -> list[str]:
    """One compound path per 4-connected component of active cells."""
    inset = cell * (1 - scale) / 2
    rr = max(inset * POND_RADIUS, POND_MIN_RADIUS)

    mask = np.asarray(mask, dtype=bool)
    padded = np.pad(mask, 1, constant_values=False)
    labels, count = ndimage.label(mask)
    parts: dict[int, list[str]] = {k: [] for k in range(1, count + 1)}

    for r, c in np.argwhere(mask):
        pr, pc = r + 1, c + 1
        parts[labels[r, c]].append(pond_cell_path(
            origin_x + c * cell, origin_y + r * cell, cell, inset, rr,
            top=padded[pr - 1, pc], right=padded[pr, pc + 1],
            bottom=padded[pr + 1, pc], left=padded[pr, pc - 1],
        ))

    return [f'<path d="{" ".join(cells)}" fill="{fill}"/>' for cells in parts.values()]


def render_cells(mask: np.ndarray, origin_x: float, origin_y: float, cell: float,
                 style: ModuleStyle, scale: float, fill: str) -> list[str]:
    """Draw every True cell of ``mask`` in ``style``."""
    if style is ModuleStyle.POND:
        return render_pond(mask, origin_x, origin_y, cell, scale, fill)
    if style.is_bar:
        return render_bars(mask, origin_x, origin_y, cell, scale, fill,
                           horizontal=style is ModuleStyle.BAR_H)

    primitive = PRIMITIVES[style]
    return [
        primitive(origin_x + c * cell, origin_y + r * cell, cell, scale, fill)
        for r, c in np.argwhere(mask)
    ]


def center_clear_mask(n: int, origin_x: float, origin_y: float, cell: float,
                      center: tuple[float, float], radius: float) -> np.ndarray:
    """Cells whose center lies strictly inside the clear circle."""
    idx = np.arange(n)
    xs = origin_x + idx * cell + cell / 2 - center[0]
    ys = origin_y + idx * cell + cell / 2 - center[1]
    dist = np.sqrt(ys[:, None] ** 2 + xs[None, :] ** 2)
    return dist < radius
