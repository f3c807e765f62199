"""Decorative fill: a deterministic sprinkle of modules around the QR area.

Whether a background cell is filled depends only on its pixel coordinates,
through a fixed integer hash. The hash must stay bit-for-bit identical so a
saved design renders the same pattern everywhere.
"""

import math
from dataclasses import dataclass

import numpy as np

from shieldqr.config import ModuleStyle
from shieldqr.modules import render_cells
from shieldqr.shapes import QRArea
from shieldqr.svgfmt import fixed, num

HASH_X = 2654435761
HASH_Y = 2246822519
_U32 = 0xFFFFFFFF
_TWO_32 = 4294967296.0

INSET_CLIP_ID = "shapeClipInset"


def _int32(value: float) -> int:
    """Truncate toward zero, then wrap to a signed 32-bit int."""
    if not math.isfinite(value):
        return 0
    v = int(value) & _U32
    return v - 0x100000000 if v & 0x80000000 else v


def cell_hash(gx: float, gy: float) -> float:
    """Hash of a cell's pixel origin, in [0, 1)."""
    a = _int32(gx * HASH_X)
    b = _int32(gy * HASH_Y)
    return ((a * b) & _U32) / _TWO_32


@dataclass(frozen=True)
class DecorativeGrid:
    mask: np.ndarray
    cell: float

    @property
    def rows(self) -> int:
        return self.mask.shape[0]

    @property
    def cols(self) -> int:
        return self.mask.shape[1]


def sample_grid(width: float, height: float, cell: float, qr_area: QRArea,
                density: float, safe_margin: float) -> DecorativeGrid:
    """Pick decorative cells over the whole canvas, skipping the QR area.

    A cell is skipped when its center falls inside the QR area grown by
    ``safe_margin``; otherwise it is kept when its hash is <= ``density``.
    """
    cols = math.ceil(width / cell)
    rows = math.ceil(height / cell)

    excl_left = qr_area.x - safe_margin
    excl_top = qr_area.y - safe_margin
    excl_right = qr_area.x + qr_area.size + safe_margin
    excl_bottom = qr_area.y + qr_area.size + safe_margin

    mask = np.zeros((rows, cols), dtype=bool)
    for dr in range(rows):
        gy = dr * cell
        cy = gy + cell / 2
        in_band = excl_top <= cy <= excl_bottom
        for dc in range(cols):
            gx = dc * cell
            cx = gx + cell / 2
            if in_band and excl_left <= cx <= excl_right:
                continue
            mask[dr, dc] = cell_hash(gx, gy) <= density
    return DecorativeGrid(mask, cell)


def inset_transform(width: float, height: float, inset: float) -> str:
    sx = fixed((width - inset * 2) / width, 4)
    sy = fixed((height - inset * 2) / height, 4)
    return f"translate({num(inset)},{num(inset)}) scale({sx},{sy})"


def render_decorative(grid: DecorativeGrid, style: ModuleStyle, scale: float, fill: str) -> list[str]:
    """Selected cells drawn in the data-module style at ``scale``."""
    return render_cells(grid.mask, 0, 0, grid.cell, style, scale, fill)
