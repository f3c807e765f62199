import pytest

from shieldqr.config import ModuleStyle
from shieldqr.decorative import _int32, cell_hash, inset_transform, render_decorative, sample_grid
from shieldqr.shapes import QRArea

AREA = QRArea(46, 36, 208)


@pytest.fixture
def deco():
    return sample_grid(300, 340, 7.5, AREA, density=0.35, safe_margin=6)


class TestHash:
    def test_int32_truncates_and_wraps(self):
        assert _int32(2 ** 31) == -(2 ** 31)
        assert _int32(2 ** 32 + 5) == 5
        assert _int32(-7.9) == -7
        assert _int32(float("nan")) == 0

    def test_origin_row_and_column_hash_to_zero(self):
        assert cell_hash(0, 123.5) == 0
        assert cell_hash(42, 0) == 0

    def test_range(self):
        values = [cell_hash(x * 3.7, y * 5.1) for x in range(1, 40) for y in range(1, 40)]
        assert all(0 <= v < 1 for v in values)
        assert len(set(values)) > 100

    def test_stable(self):
        assert cell_hash(17.25, 99.5) == cell_hash(17.25, 99.5)


class TestSampling:
    def test_dimensions(self, deco):
        assert (deco.rows, deco.cols) == (46, 40)

    def test_exclusion_zone_is_empty(self, deco):
        for r in range(deco.rows):
            for c in range(deco.cols):
                cx = c * deco.cell + deco.cell / 2
                cy = r * deco.cell + deco.cell / 2
                inside = (AREA.x - 6 <= cx <= AREA.x + AREA.size + 6
                          and AREA.y - 6 <= cy <= AREA.y + AREA.size + 6)
                if inside:
                    assert not deco.mask[r, c]

    def test_deterministic(self, deco):
        again = sample_grid(300, 340, 7.5, AREA, density=0.35, safe_margin=6)
        assert (again.mask == deco.mask).all()

    def test_density_bounds(self):
        none = sample_grid(300, 340, 10, AREA, density=0, safe_margin=6)
        full = sample_grid(300, 340, 10, AREA, density=1, safe_margin=6)
        # hash is exactly 0 only along the origin row and column
        assert none.mask[0, :].all()
        assert none.mask[:, 0].all()
        assert none.mask[1:, 1:].sum() == 0
        assert full.mask.sum() > none.mask.sum()

    def test_density_monotonic(self):
        low = sample_grid(300, 340, 7.5, AREA, density=0.2, safe_margin=6)
        high = sample_grid(300, 340, 7.5, AREA, density=0.6, safe_margin=6)
        assert not (low.mask & ~high.mask).any()

    def test_render(self, deco):
        elements = render_decorative(deco, ModuleStyle.CIRCLE, 0.65, "#fff")
        assert len(elements) == int(deco.mask.sum())


def test_inset_transform():
    assert inset_transform(300, 340, 8) == "translate(8,8) scale(0.9467,0.9529)"
