import numpy as np

from shieldqr.svgfmt import attr, fixed, fmt, js_round, num


class TestNumbers:
    def test_fmt_drops_trailing_zeros(self):
        assert fmt(3.10) == "3.1"
        assert fmt(2.0) == "2"
        assert fmt(-0.001) == "0"

    def test_fixed_keeps_places(self):
        assert fixed(1.5, 2) == "1.50"
        assert fixed(-0.00001, 4) == "0.0000"

    def test_numpy_scalars(self):
        assert fmt(np.int64(10)) == "10"
        assert fmt(np.float32(2.5)) == "2.5"
        assert fixed(np.int64(3), 2) == "3.00"

    def test_num(self):
        assert num(3.0) == "3"
        assert num(2.5) == "2.5"
        assert num(True) == "1"

    def test_js_round_half_up(self):
        assert js_round(2.5) == 3
        assert js_round(-2.5) == -2


def test_attr_escapes_quotes():
    assert attr('#fff" onload="x') == "#fff&quot; onload=&quot;x"
    assert attr("#00d4ff") == "#00d4ff"
