"""Shared fixtures: small handmade module grids, so most tests need no encoder."""

import numpy as np
import pytest

from shieldqr.config import ColorSet
from shieldqr.shapes import create_registry


def finder_block() -> np.ndarray:
    block = np.ones((7, 7), dtype=bool)
    block[1:6, 1:6] = False
    block[2:5, 2:5] = True
    return block


def make_grid(n: int = 21) -> np.ndarray:
    """An n x n grid with the three finder blocks and a few data cells."""
    grid = np.zeros((n, n), dtype=bool)
    for r0, c0 in [(0, 0), (0, n - 7), (n - 7, 0)]:
        grid[r0:r0 + 7, c0:c0 + 7] = finder_block()
    grid[10, 8:13] = True   # horizontal run of 5
    grid[8:11, 16] = True   # vertical run of 3
    grid[14, 14] = True
    grid[16, 9] = True
    grid[16, 11] = True
    return grid


@pytest.fixture
def grid():
    return make_grid()


@pytest.fixture
def registry():
    return create_registry()


@pytest.fixture
def opaque_colors():
    return ColorSet(background="#ffffff", foreground="#000000", outline="#000000")


@pytest.fixture
def transparent_colors():
    return ColorSet(background="transparent", foreground="#112233", outline="#112233",
                    finder_outer="#aa0000")
