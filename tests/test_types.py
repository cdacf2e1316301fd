"""
Unit tests for types.py -- bounded and domain value types.
"""

import dataclasses
import logging

import pytest

from cowboy_ble.errors import InvalidRangeError, ValidationError
from cowboy_ble.types import (
    MAX_FIELD_WEAKENING,
    MAX_HALL_INTERPOLATION,
    FieldWeakening,
    HallInterpolation,
    Speed,
    SpeedUnit,
    TorqueGain,
    TorqueGainUnit,
    TorqueMode,
)


class TestFieldWeakening:
    def test_valid_value(self):
        assert FieldWeakening(50).percentage == 50

    def test_bounds_inclusive(self):
        assert FieldWeakening(0).percentage == 0
        assert FieldWeakening(100).percentage == 100

    @pytest.mark.parametrize("value", [101, 255, 1000, -1])
    def test_out_of_range(self, value):
        with pytest.raises(InvalidRangeError) as excinfo:
            FieldWeakening(value)
        assert (excinfo.value.min, excinfo.value.max) == (0, MAX_FIELD_WEAKENING)
        assert excinfo.value.value == value

    def test_range_error_is_value_error(self):
        with pytest.raises(ValueError, match=r"\[0, 100\]"):
            FieldWeakening(101)
        assert issubclass(InvalidRangeError, ValidationError)

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            FieldWeakening(True)
        with pytest.raises(TypeError):
            FieldWeakening(12.5)

    def test_immutable(self):
        fw = FieldWeakening(10)
        with pytest.raises(dataclasses.FrozenInstanceError):
            fw.percentage = 20

    def test_to_device_raw(self):
        assert FieldWeakening(0).to_device_raw() == 0
        assert FieldWeakening(1).to_device_raw() == 41  # 40.96
        assert FieldWeakening(25).to_device_raw() == 1024
        assert FieldWeakening(33).to_device_raw() == 1352  # 1351.68
        assert FieldWeakening(100).to_device_raw() == 4096

    def test_from_device_raw_rounds_up(self):
        assert FieldWeakening.from_device_raw(0).percentage == 0
        assert FieldWeakening.from_device_raw(1).percentage == 1
        assert FieldWeakening.from_device_raw(2048).percentage == 50
        assert FieldWeakening.from_device_raw(2049).percentage == 51
        assert FieldWeakening.from_device_raw(4096).percentage == 100

    def test_from_device_raw_clamps_above_maximum(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cowboy_ble.types"):
            fw = FieldWeakening.from_device_raw(5000)
        assert fw.percentage == 100
        assert "clamping" in caplog.text

    def test_from_device_raw_rejects_more_than_16_bits(self):
        with pytest.raises(InvalidRangeError):
            FieldWeakening.from_device_raw(0x10000)

    def test_round_trip_within_one_percent(self):
        # Quantisation is lossy; the read-back never undershoots and never
        # overshoots by more than one percent.
        for p in range(0, 101):
            back = FieldWeakening.from_device_raw(FieldWeakening(p).to_device_raw())
            assert 0 <= back.percentage - p <= 1, p

    def test_round_trip_not_always_exact(self):
        back = FieldWeakening.from_device_raw(FieldWeakening(1).to_device_raw())
        assert back.percentage == 2


class TestHallInterpolation:
    def test_valid_value(self):
        assert HallInterpolation(12).interpolation == 12

    def test_max(self):
        assert HallInterpolation(0x19).interpolation == 25

    def test_out_of_range(self):
        with pytest.raises(InvalidRangeError) as excinfo:
            HallInterpolation(26)
        assert (excinfo.value.min, excinfo.value.max) == (0, MAX_HALL_INTERPOLATION)

    def test_negative(self):
        with pytest.raises(InvalidRangeError):
            HallInterpolation(-1)


class TestDomainValues:
    def test_speed_defaults(self):
        speed = Speed()
        assert speed.value == 25
        assert speed.unit is SpeedUnit.KMH

    def test_speed_byte_domain(self):
        assert Speed(255).value == 255
        with pytest.raises(InvalidRangeError):
            Speed(256)

    def test_torque_gain(self):
        gain = TorqueGain(12)
        assert gain.gain == 12
        assert gain.unit is TorqueGainUnit.NM
        with pytest.raises(InvalidRangeError):
            TorqueGain(-1)

    def test_torque_mode(self):
        assert TorqueMode().speed_limit is False
        assert TorqueMode(True).speed_limit is True

    def test_values_are_hashable_and_comparable(self):
        assert Speed(30) == Speed(30)
        assert len({FieldWeakening(1), FieldWeakening(1), FieldWeakening(2)}) == 2
