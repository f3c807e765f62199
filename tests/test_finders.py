import numpy as np
import pytest

from shieldqr.config import ColorSet, FinderMode, FinderStyle
from shieldqr.finders import (
    INNER, OUTER, SPACE, classify_finder_cell, finder_mask, finder_origins, render_finders,
    render_solid_finders, solid_shape_path,
)


def kinds(n):
    return [classify_finder_cell(r, c, n) for r in range(n) for c in range(n)]


class TestClassification:
    def test_origins(self):
        assert finder_origins(25) == [(0, 0), (0, 18), (18, 0)]

    @pytest.mark.parametrize("n", [21, 25, 33])
    def test_counts_per_finder(self, n):
        found = kinds(n)
        assert found.count(OUTER) == 3 * 24
        assert found.count(SPACE) == 3 * 16
        assert found.count(INNER) == 3 * 9

    def test_outside_finders(self):
        assert classify_finder_cell(10, 10, 21) is None
        assert classify_finder_cell(20, 20, 21) is None

    def test_mask_matches_classification(self):
        mask = finder_mask(21)
        assert mask.sum() == 3 * 49
        assert not mask[20, 20]
        assert mask[14, 6]


class TestPatternMode:
    def test_one_element_per_dark_finder_cell(self, grid, opaque_colors):
        elements = render_finders(grid, 0, 0, 10, FinderMode.PATTERN,
                                  FinderStyle.SQUARE, FinderStyle.CIRCLE, 1.0, opaque_colors)
        assert len(elements) == 3 * (24 + 9)
        assert sum(e.startswith("<circle") for e in elements) == 3 * 9

    def test_space_cells_never_drawn(self, opaque_colors):
        full = np.ones((21, 21), dtype=bool)
        elements = render_finders(full, 0, 0, 10, FinderMode.PATTERN,
                                  FinderStyle.SQUARE, FinderStyle.SQUARE, 1.0, opaque_colors)
        assert len(elements) == 3 * (24 + 9)

    def test_finder_accent_colors(self, grid, transparent_colors):
        elements = render_finders(grid, 0, 0, 10, FinderMode.PATTERN,
                                  FinderStyle.ROUNDED, FinderStyle.ROUNDED, 1.0, transparent_colors)
        assert sum('fill="#aa0000"' in e for e in elements) == 3 * 24
        assert sum('fill="#112233"' in e for e in elements) == 3 * 9


class TestSolidMode:
    def test_opaque_paints_space_with_background(self, opaque_colors):
        elements = render_solid_finders(21, 0, 0, 10, FinderStyle.ROUNDED, FinderStyle.ROUNDED,
                                        1.0, opaque_colors)
        assert len(elements) == 9
        assert sum('fill="#ffffff"' in e for e in elements) == 3

    def test_transparent_uses_evenodd_ring(self, transparent_colors):
        elements = render_solid_finders(21, 0, 0, 10, FinderStyle.CIRCLE, FinderStyle.DIAMOND,
                                        1.0, transparent_colors)
        assert len(elements) == 6
        rings = [e for e in elements if 'fill-rule="evenodd"' in e]
        assert len(rings) == 3
        assert all('fill="#aa0000"' in e for e in rings)
        assert not any("transparent" in e for e in elements)
        assert sum(e.startswith("<polygon") for e in elements) == 3

    def test_ring_has_two_subpaths(self, transparent_colors):
        (ring, _inner) = render_solid_finders(21, 0, 0, 10, FinderStyle.SQUARE, FinderStyle.SQUARE,
                                              1.0, transparent_colors)[:2]
        assert ring.count("M ") == 2

    def test_first_finder_geometry(self, opaque_colors):
        outer = render_solid_finders(21, 0, 0, 10, FinderStyle.SQUARE, FinderStyle.SQUARE,
                                     1.0, opaque_colors)[0]
        assert outer == '<rect x="0" y="0" width="70" height="70" fill="#000000"/>'

    def test_rounded_path_arcs(self):
        d = solid_shape_path(0, 0, 70, FinderStyle.ROUNDED, 10.5)
        assert d.startswith("M 10.5 0 H 59.5 A 10.5 10.5 0 0 1 70 10.5")
        assert d.count(" A ") == 4

    def test_square_path(self):
        assert solid_shape_path(10, 10, 50, FinderStyle.SQUARE, 7) == "M 10 10 H 60 V 60 H 10 Z"

    def test_transparent_colorset(self):
        assert ColorSet(background="none", foreground="#000", outline="#000").transparent
