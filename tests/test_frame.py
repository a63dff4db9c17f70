"""Tests for Frame and Axis."""

from __future__ import annotations

import math

import numpy as np
import pytest

from astkit.common.errors import (
    AstError,
    InvalidAttributeValueError,
    MalformedInputError,
    UnknownAttributeError,
)
from astkit.objects import Axis, Frame, NReadValue, Object
from astkit.objects.axis import read_value
from astkit.objects.frame import besselian_to_julian, parse_epoch


class TestFrameConstruction:
    """Tests for Frame construction and frame attributes."""

    def test_defaults(self):
        frame = Frame(2)

        assert frame.n_axes == 2
        assert frame.get("Naxes") == 2
        assert frame.nin == frame.nout == 2
        assert frame.title == "2-d coordinate system"
        assert frame.domain == ""
        assert frame.epoch == 2000.0
        assert frame.system == "Cartesian"
        assert frame.max_axes == 2
        assert frame.min_axes == 2
        assert frame.obs_lat == "N0:00:00.00"
        assert frame.permute is True
        assert frame.preserve_axes is False

    def test_needs_an_axis(self):
        with pytest.raises(ValueError):
            Frame(0)

    def test_options(self, sample_frame: Frame):
        assert sample_frame.title == "Focal plane"
        assert sample_frame.domain == "PIXEL"
        assert sample_frame.get_label(1) == "X position"
        assert sample_frame.get_unit(2) == "mm"
        assert sample_frame.epoch == 2010.5

    def test_naxes_is_read_only(self):
        with pytest.raises(UnknownAttributeError):
            Frame(2).set("Naxes=3")

    def test_system_must_be_cartesian(self):
        frame = Frame(1)

        frame.system = "cartesian"
        with pytest.raises(InvalidAttributeValueError):
            frame.system = "FK5"
        with pytest.raises(InvalidAttributeValueError):
            frame.set("AlignSystem=ICRS")

    def test_frame_attributes_settable(self):
        frame = Frame(1, "ObsAlt=120.5, Dut1=0.3, ActiveUnit=1, MaxAxes=4, MinAxes=1")

        assert frame.obs_alt == 120.5
        assert frame.dut1 == 0.3
        assert frame.active_unit is True
        assert frame.max_axes == 4
        assert frame.min_axes == 1

    def test_huge_axis_count_rejected(self):
        text = " Begin Frame\n    Nin = 300000\n    Naxes = 300000\n End Frame\n"

        with pytest.raises(MalformedInputError, match="missing axis fields"):
            Object.from_string(text)

    def test_missing_axis_field_rejected(self):
        text = Frame(2).show(False).replace(" Ax2 =", " Ax3 =")

        with pytest.raises(MalformedInputError, match="missing axis fields"):
            Object.from_string(text)

    def test_identity_mapping(self):
        points = np.arange(6.0).reshape(3, 2)

        np.testing.assert_array_equal(Frame(3).apply_forward(points), points)


class TestAxisAttributes:
    """Tests for indexed per-axis attributes."""

    def test_axis_defaults(self):
        frame = Frame(2)

        assert frame.get_label(1) == "Axis 1"
        assert frame.get_label(2) == "Axis 2"
        assert frame.get_symbol(2) == "x2"
        assert frame.get_unit(1) == ""
        assert frame.get_direction(1) is True
        assert frame.get_top(1) == math.inf
        assert frame.get_bottom(1) == -math.inf

    def test_indexed_get_set(self):
        frame = Frame(2)

        frame.set("Label(2)=Declination, Symbol(2)=Dec")

        assert frame.get("Label(2)") == "Declination"
        assert frame.get("symbol(2)") == "Dec"
        assert frame.test("Label(2)")
        assert not frame.test("Label(1)")

        frame.clear("Label(2)")
        assert frame.get_label(2) == "Axis 2"

    def test_accessor_pairs(self):
        frame = Frame(2)

        frame.set_label(1, "RA")
        frame.set_symbol(1, "ra")
        frame.set_unit(1, "deg")
        frame.set_format(1, "%.3f")
        frame.set_direction(False, 1)
        frame.set_top(1, 360.0)
        frame.set_bottom(1, 0.0)

        assert frame.get_label(1) == "RA"
        assert frame.get_symbol(1) == "ra"
        assert frame.get_unit(1) == "deg"
        assert frame.get_format(1) == "%.3f"
        assert frame.get_direction(1) is False
        assert frame.get_top(1) == 360.0
        assert frame.get_bottom(1) == 0.0
        assert frame.get_axis(1).label == "RA"

    def test_units_are_reported_read_only(self):
        frame = Frame(1, "Unit(1)=mm")

        assert frame.get_internal_unit(1) == "mm"
        assert frame.get_norm_unit(1) == "mm"
        assert frame.get("InternalUnit(1)") == "mm"
        with pytest.raises(UnknownAttributeError):
            frame.set("NormUnit(1)=m")

    def test_index_required(self):
        frame = Frame(2)

        with pytest.raises(UnknownAttributeError):
            frame.get("Label")
        with pytest.raises(UnknownAttributeError):
            frame.get("Title(1)")

    def test_index_out_of_range(self):
        frame = Frame(2)

        with pytest.raises(IndexError):
            frame.get("Label(3)")
        with pytest.raises(IndexError):
            frame.get_axis(0)
        with pytest.raises(IndexError):
            frame.set_unit(5, "m")

    def test_digits(self):
        frame = Frame(2)

        assert frame.get_digits() == 7
        assert frame.get_digits(1) == 7
        assert frame.get_format(1) == "%1.7G"

        frame.set_digits(4)
        assert frame.get_digits(1) == 4
        assert frame.get_format(2) == "%1.4G"

        frame.set_digits(2, 9)
        assert frame.get_digits(2) == 9
        assert frame.get_digits(1) == 4
        assert frame.get("Digits(2)") == 9
        assert frame.get_digits() == 4

    def test_set_digits_argument_count(self):
        frame = Frame(2)

        frame.set_digits(1, 5)
        assert frame.get_digits(1) == 5
        assert frame.get_digits(2) == 7
        assert frame.get_digits() == 7
        with pytest.raises(TypeError):
            frame.set_digits()
        with pytest.raises(TypeError):
            frame.set_digits(1, 2, 3)

    def test_nested_axis_defaults_follow_frame(self):
        frame = Frame(2, "Digits=5")

        text = frame.show()

        assert '#      Label = "Axis 2"' in text
        assert '#      Symbol = "x1"' in text
        assert "#      Digits = 5" in text
        assert '#      Format = "%1.5G"' in text
        assert frame.get_axis(2).label == "Axis 2"
        assert frame.get_axis(1).digits == 5

    def test_standalone_axis_defaults(self):
        axis = Axis()

        assert axis.label == "Coordinate axis"
        assert axis.symbol == ""
        assert axis.digits == 7

    def test_axis_defaults_survive_round_trip(self):
        rebuilt = Object.from_string(Frame(3, "Digits=3").show())

        assert rebuilt.get_axis(3).label == "Axis 3"
        assert rebuilt.get_axis(1).format(3.14159) == "3.14"

    def test_use_defs_off_applies_to_axes(self):
        frame = Frame(1, "UseDefs=0, Unit(1)=mm")

        assert frame.get("Unit(1)") == "mm"
        with pytest.raises(AstError):
            frame.get("Label(1)")
        with pytest.raises(AstError):
            frame.get_symbol(1)
        assert frame.has_attribute("Label(1)")
        assert frame.format(1, 1.5) == "1.5"

    def test_axis_changes_survive_round_trip(self, sample_frame: Frame):
        rebuilt = Object.from_string(sample_frame.show())

        assert rebuilt.get_label(1) == "X position"
        assert rebuilt.get_digits(2) == 4
        assert rebuilt.get_unit(2) == "mm"


class TestFormatting:
    """Tests for format and unformat."""

    def test_format(self):
        frame = Frame(1, "Digits=4")

        assert frame.format(1, 3.14159265) == "3.142"
        assert frame.format(1, math.nan) == "<bad>"

    def test_explicit_format(self):
        frame = Frame(1)
        frame.set_format(1, "%08.2f")

        assert frame.format(1, 3.14159) == "00003.14"

    def test_bad_format(self):
        frame = Frame(1)
        frame.set_format(1, "%d %d")

        with pytest.raises(InvalidAttributeValueError):
            frame.format(1, 1.0)

    def test_unformat(self):
        frame = Frame(2)

        assert frame.unformat(1, " 12.5 deg") == NReadValue(6, 12.5)
        assert frame.unformat(2, "-3e2") == NReadValue(4, -300.0)

    def test_unformat_nothing_read(self):
        result = Frame(1).unformat(1, "abc")

        assert result.nread == 0
        assert math.isnan(result.value)

    def test_unformat_bad_marker(self):
        result = read_value(" <bad> ")

        assert result.nread == 7
        assert math.isnan(result.value)

    def test_unformat_checks_axis(self):
        with pytest.raises(IndexError):
            Frame(1).unformat(2, "1.0")

    def test_axis_format(self):
        axis = Axis("Digits=3")

        assert axis.format(2.71828) == "2.72"
        assert axis.unformat("2.72") == NReadValue(4, 2.72)


class TestEpoch:
    """Tests for epoch parsing."""

    def test_julian_prefix(self):
        assert parse_epoch("J2010.5") == 2010.5
        assert parse_epoch(" j1990 ") == 1990.0

    def test_besselian_prefix(self):
        assert parse_epoch("B1950") == pytest.approx(1949.9997904, abs=1e-6)

    def test_unprefixed_years(self):
        assert parse_epoch("1950") == besselian_to_julian(1950.0)
        assert parse_epoch("2015") == 2015.0

    def test_invalid_epoch(self):
        with pytest.raises(InvalidAttributeValueError):
            parse_epoch("yesterday")

    def test_set_epoch(self):
        frame = Frame(1)

        frame.set_epoch("B1950")
        assert frame.epoch == pytest.approx(1949.9997904, abs=1e-6)

        frame.set_epoch(1975.0)
        assert frame.epoch == 1975.0

    def test_stored_epoch_not_reinterpreted(self):
        frame = Frame(1, "Epoch=B1950")

        rebuilt = Object.from_string(frame.show())

        assert rebuilt.epoch == frame.epoch
        assert rebuilt == frame
