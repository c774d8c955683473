"""Tests for margin units and paper geometry."""

import math

import pytest

from pagefit.modules.render.options import Orientation
from pagefit.modules.render.paper import PAPER_SIZES, backend_format, resolve_paper
from pagefit.modules.render.units import PX_PER_MM, mm_to_px, parse_margin_mm


class TestParseMargin:
    """Margin spec strings to millimetres."""

    @pytest.mark.parametrize(
        "spec, expected",
        [
            ("10mm", 10.0),
            ("1.5cm", 15.0),
            ("1in", 25.4),
            ("0.5in", 12.7),
            ("12", 12.0),
            ("12px", 12.0),
            (" 8 mm ", 8.0),
            ("2CM", 20.0),
            (7, 7.0),
            (2.5, 2.5),
        ],
    )
    def test_known_forms(self, spec, expected) -> None:
        assert parse_margin_mm(spec) == pytest.approx(expected)

    @pytest.mark.parametrize("spec", ["", "abc", "mm", None, True, float("nan"), {"top": 1}])
    def test_unparsable_is_zero(self, spec) -> None:
        assert parse_margin_mm(spec) == 0.0

    def test_ten_mm_in_pixels(self) -> None:
        """10mm at the 96 DPI reference is ~37.795px."""
        assert mm_to_px(parse_margin_mm("10mm")) == pytest.approx(37.7952755, rel=1e-6)

    def test_px_per_mm_constant(self) -> None:
        assert PX_PER_MM == pytest.approx(96 / 25.4)


class TestPaperGeometry:

    @pytest.mark.parametrize(
        "name, width, height",
        [("A4", 210, 297), ("A5", 148, 210), ("Letter", 216, 279), ("legal", 216, 356)],
    )
    def test_table_case_insensitive(self, name, width, height) -> None:
        paper = resolve_paper(name, Orientation.PORTRAIT)
        assert (paper.width_mm, paper.height_mm) == (width, height)

    @pytest.mark.parametrize("name", list(PAPER_SIZES))
    def test_landscape_swaps(self, name) -> None:
        portrait = resolve_paper(name, Orientation.PORTRAIT)
        landscape = resolve_paper(name, Orientation.LANDSCAPE)
        assert landscape.width_mm == portrait.height_mm
        assert landscape.height_mm == portrait.width_mm
        assert landscape.orientation == Orientation.LANDSCAPE

    @pytest.mark.parametrize("name", list(PAPER_SIZES))
    def test_swap_is_involutive(self, name) -> None:
        portrait = resolve_paper(name, Orientation.PORTRAIT)
        assert resolve_paper(name, Orientation.LANDSCAPE).swapped() == portrait

    @pytest.mark.parametrize("name", ["B5", "tabloid", "", None])
    def test_unknown_resolves_to_a4_everywhere(self, name) -> None:
        assert resolve_paper(name, Orientation.PORTRAIT) == resolve_paper("A4", Orientation.PORTRAIT)
        assert backend_format(name) == backend_format("A4") == "A4"

    def test_backend_formats(self) -> None:
        assert backend_format("letter") == "Letter"
        assert backend_format("LEGAL") == "Legal"
        assert backend_format("a5") == "A5"

    def test_table_dimensions_are_positive(self) -> None:
        for width, height, _ in PAPER_SIZES.values():
            assert width > 0 and height > 0 and math.isfinite(width * height)
