"""
Value types carried by Cowboy commands.

Bounded values (field weakening, hall interpolation) validate their range
when constructed and are immutable afterwards, so a command holding one can
always be encoded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidRangeError

logger = logging.getLogger(__name__)

MAX_FIELD_WEAKENING = 100  # percent
MAX_HALL_INTERPOLATION = 0x19
MAX_BYTE = 0xFF
MAX_DEVICE_RAW = 0xFFFF

# The controller stores field weakening on a 0..4096 scale, i.e. 40.96 per
# percent. Kept as a fraction so conversions stay exact.
_WEAKENING_SCALE_NUM = 4096
_WEAKENING_SCALE_DEN = 100


def check_range(value: int, lo: int, hi: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected int, got {type(value).__name__}")
    if not lo <= value <= hi:
        raise InvalidRangeError(value, lo, hi)
    return value


# ---------------------------------------------------------------------------
# Bounded values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldWeakening:
    """
    Motor field weakening, in percent (0-100).

    Lets the motor spin above its rated speed by reducing the strength of
    its magnetic field. Required to assist beyond ~29 km/h.

    The device works with a raw value on a 40.96-per-percent scale. The
    conversion is lossy: :meth:`to_device_raw` rounds to the nearest raw
    step and :meth:`from_device_raw` rounds up to the next whole percent,
    so a round trip may come back one percent higher than it started.
    """

    percentage: int = 0

    def __post_init__(self) -> None:
        check_range(self.percentage, 0, MAX_FIELD_WEAKENING)

    def to_device_raw(self) -> int:
        """Raw register value, ``round(percentage * 40.96)``."""
        return (
            self.percentage * _WEAKENING_SCALE_NUM + _WEAKENING_SCALE_DEN // 2
        ) // _WEAKENING_SCALE_DEN

    @classmethod
    def from_device_raw(cls, raw: int) -> FieldWeakening:
        """Build from a raw register value, ``ceil(raw / 40.96)``."""
        check_range(raw, 0, MAX_DEVICE_RAW)
        percentage = -(-raw * _WEAKENING_SCALE_DEN // _WEAKENING_SCALE_NUM)
        if percentage > MAX_FIELD_WEAKENING:
            logger.warning(
                "Device field weakening raw=%d (%d%%) above maximum, clamping to %d%%",
                raw,
                percentage,
                MAX_FIELD_WEAKENING,
            )
            percentage = MAX_FIELD_WEAKENING
        return cls(percentage)


@dataclass(frozen=True, slots=True)
class HallInterpolation:
    """
    Hall interpolation (0-25).

    Adjusts how quickly the motor gives boost when you just start pedalling.
    """

    interpolation: int = 0

    def __post_init__(self) -> None:
        check_range(self.interpolation, 0, MAX_HALL_INTERPOLATION)


# ---------------------------------------------------------------------------
# Domain values
# ---------------------------------------------------------------------------


class SpeedUnit(Enum):
    KMH = "km/h"


class TorqueGainUnit(Enum):
    NM = "Nm"  # Newton meters


@dataclass(frozen=True, slots=True)
class Speed:
    value: int = 25
    unit: SpeedUnit = SpeedUnit.KMH

    def __post_init__(self) -> None:
        check_range(self.value, 0, MAX_BYTE)


@dataclass(frozen=True, slots=True)
class TorqueGain:
    """Torque gain of the motor."""

    gain: int = 0
    unit: TorqueGainUnit = TorqueGainUnit.NM

    def __post_init__(self) -> None:
        check_range(self.gain, 0, MAX_BYTE)


@dataclass(frozen=True, slots=True)
class TorqueMode:
    """
    Motor torque mode.

    Set ``speed_limit`` to False to be assisted beyond the default maximum
    assisted speed.
    """

    speed_limit: bool = False
