"""
Cowboy e-bike BLE command protocol.

UUIDs, command variants, the 9-byte payload table, checksum, and write
modes. Every outgoing frame is 11 bytes::

    [group] [func] [addr hi] [addr lo] [0x00] [0x01] [count] [val hi] [val lo] [crc lo] [crc hi]

``func`` is 0x03 to read a register and 0x10 to write one. Nothing in this
module does I/O; ``connection`` puts the frames on the air.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Union

from .errors import StrictlyReadError
from .types import (
    FieldWeakening,
    HallInterpolation,
    Speed,
    TorqueGain,
    TorqueMode,
    check_range,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# UUID definitions
# ---------------------------------------------------------------------------

# Nordic UART service, repurposed for controller settings
SERVICE_SETTINGS = "6e400001-b5a3-f393-e0a9-e50e24dcca9e"
SERVICE_COWBOY = "c0b0a000-18eb-499d-b266-2f2910744274"

CHAR_SETTINGS_WRITE = "6e400002-b5a3-f393-e0a9-e50e24dcca9e"  # WRITE
# READ, NOTIFY. Lock, dashboard, trip and fitness data, and the replies to
# settings reads all come back here.
CHAR_COWBOY = "c0b0a001-18eb-499d-b266-2f2910744274"
CHAR_SETTINGS_READ = CHAR_COWBOY

PAYLOAD_SIZE = 9
CHECKSUM_SIZE = 2
PACKET_SIZE = PAYLOAD_SIZE + CHECKSUM_SIZE

FUNC_READ = 0x03
FUNC_WRITE = 0x10

_CRC_INIT = 0xFFFF
_CRC_POLY = 0xA001  # 0x8005 bit-reversed

# ---------------------------------------------------------------------------
# Checksum
# ---------------------------------------------------------------------------


def checksum(payload: bytes | bytearray) -> bytes:
    """
    Compute the 2-byte checksum of a 9-byte payload, low byte first.

    Reflected CRC-16 with polynomial 0xA001 and initial value 0xFFFF, as
    found in the Cowboy app. Despite being called CRC-16-CCITT there, it is
    not CCITT-FALSE; library "CRC-16" defaults will not match the device.

    Raises ValueError if *payload* is not exactly 9 bytes.
    """
    if len(payload) != PAYLOAD_SIZE:
        raise ValueError(
            f"Payload must be {PAYLOAD_SIZE} bytes, got {len(payload)}"
        )

    crc = _CRC_INIT
    for byte in payload:
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ _CRC_POLY
            else:
                crc >>= 1
    return crc.to_bytes(CHECKSUM_SIZE, byteorder="little")


def packetize(payload: bytes | bytearray) -> bytes:
    """Append the checksum to a 9-byte payload, giving the 11-byte frame."""
    return bytes(payload) + checksum(payload)


# ---------------------------------------------------------------------------
# Write modes
# ---------------------------------------------------------------------------


class WriteMode(Enum):
    """How a command frame has to be written to its characteristic."""

    # Reads: the reply arrives later as a notification
    WRITE_WITHOUT_RESPONSE = "write"
    # Configuration changes the device has to acknowledge
    WRITE_WITH_RESPONSE = "write_with_response"

    @property
    def response(self) -> bool:
        """Value for bleak's ``write_gatt_char(..., response=)``."""
        return self is WriteMode.WRITE_WITH_RESPONSE


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SetLight:
    """Turn the light on or off."""

    on: bool


@dataclass(frozen=True, slots=True)
class SetAutoLock:
    """Configure if the bike should lock automatically."""

    enabled: bool


@dataclass(frozen=True, slots=True)
class ReadAutoLock:
    pass


@dataclass(frozen=True, slots=True)
class SetMaxAssistedSpeed:
    speed: Speed = Speed()


@dataclass(frozen=True, slots=True)
class ReadMaxAssistedSpeed:
    pass


@dataclass(frozen=True, slots=True)
class SetFieldWeakening:
    weakening: FieldWeakening = FieldWeakening()


@dataclass(frozen=True, slots=True)
class ReadFieldWeakening:
    pass


@dataclass(frozen=True, slots=True)
class SetHallInterpolation:
    interpolation: HallInterpolation = HallInterpolation()


@dataclass(frozen=True, slots=True)
class ReadHallInterpolation:
    pass


@dataclass(frozen=True, slots=True)
class SetTorqueGain:
    gain: TorqueGain = TorqueGain()


@dataclass(frozen=True, slots=True)
class ReadTorqueGain:
    pass


@dataclass(frozen=True, slots=True)
class ReadRegister:
    """Read the content of an arbitrary 16-bit register."""

    register: int

    def __post_init__(self) -> None:
        check_range(self.register, 0, 0xFFFF)


@dataclass(frozen=True, slots=True)
class SetMotorTorqueMode:
    """Configure how the motor behaves when you pedal."""

    mode: TorqueMode = TorqueMode()


@dataclass(frozen=True, slots=True)
class ReadMotorTorqueMode:
    pass


@dataclass(frozen=True, slots=True)
class WriteFlash:
    """
    Persist all modified settings to the controller's flash.

    Without this, settings are lost when the bike locks or the battery is
    removed.
    """


@dataclass(frozen=True, slots=True)
class CloseFlash:
    pass


@dataclass(frozen=True, slots=True)
class SetLock:
    """Lock (True) or unlock (False) the bike."""

    locked: bool


@dataclass(frozen=True, slots=True)
class ReadLock:
    pass


@dataclass(frozen=True, slots=True)
class ReadDashboard:
    pass


@dataclass(frozen=True, slots=True)
class ReadTrip:
    pass


@dataclass(frozen=True, slots=True)
class ReadFitness:
    pass


Command = Union[
    SetLight,
    SetAutoLock,
    ReadAutoLock,
    SetMaxAssistedSpeed,
    ReadMaxAssistedSpeed,
    SetFieldWeakening,
    ReadFieldWeakening,
    SetHallInterpolation,
    ReadHallInterpolation,
    SetTorqueGain,
    ReadTorqueGain,
    ReadRegister,
    SetMotorTorqueMode,
    ReadMotorTorqueMode,
    WriteFlash,
    CloseFlash,
    SetLock,
    ReadLock,
    ReadDashboard,
    ReadTrip,
    ReadFitness,
]

# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------

_COMMAND_DEFS: dict[type, CommandDefinition] = {}


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    """Wire layout and routing of a single command variant."""

    command_type: type
    name: str
    service: str
    characteristic: str
    # None for strictly-read commands, which have no instruction
    template: bytes | None
    mode: WriteMode | None
    value: Callable[[Any], int] | None = None
    value_size: int = 0
    value_offset: int = PAYLOAD_SIZE

    @property
    def strictly_read(self) -> bool:
        return self.template is None


def _reg(
    command_type: type,
    name: str,
    template: list[int] | None,
    mode: WriteMode | None,
    value: Callable[[Any], int] | None = None,
    size: int = 0,
    *,
    offset: int | None = None,
    service: str = SERVICE_SETTINGS,
    characteristic: str = CHAR_SETTINGS_WRITE,
) -> CommandDefinition:
    cd = CommandDefinition(
        command_type=command_type,
        name=name,
        service=service,
        characteristic=characteristic,
        template=bytes(template) if template is not None else None,
        mode=mode,
        value=value,
        value_size=size,
        # Values are right-aligned in bytes 7-8 unless placed explicitly
        value_offset=PAYLOAD_SIZE - size if offset is None else offset,
    )
    _COMMAND_DEFS[command_type] = cd
    return cd


_W = WriteMode.WRITE_WITHOUT_RESPONSE
_WR = WriteMode.WRITE_WITH_RESPONSE

# --- Bike settings (0x0A) ---
_reg(SetLight, "set_light",
     [0x0A, 0x10, 0x00, 0x01, 0x00, 0x01, 0x02, 0x00, 0x00], _W,
     lambda c: int(c.on), 1)
_reg(SetAutoLock, "set_auto_lock",
     [0x0A, 0x10, 0x00, 0x00, 0x00, 0x01, 0x02, 0x00, 0x00], _WR,
     lambda c: int(c.enabled), 2)
_reg(ReadAutoLock, "read_auto_lock",
     [0x0A, 0x03, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00], _W)
_reg(SetMaxAssistedSpeed, "set_max_assisted_speed",
     [0x0A, 0x10, 0x00, 0x04, 0x00, 0x01, 0x02, 0x00, 0x1E], _WR,
     lambda c: c.speed.value, 2)
_reg(ReadMaxAssistedSpeed, "read_max_assisted_speed",
     [0x0A, 0x03, 0x00, 0x04, 0x00, 0x01, 0x00, 0x00, 0x00], _W)

# --- Motor controller (0x01) ---
_reg(SetFieldWeakening, "set_field_weakening",
     [0x01, 0x10, 0x00, 0x81, 0x00, 0x01, 0x02, 0x00, 0x00], _WR,
     lambda c: c.weakening.to_device_raw(), 2)
_reg(ReadFieldWeakening, "read_field_weakening",
     [0x01, 0x03, 0x00, 0x81, 0x00, 0x01, 0x00, 0x00, 0x00], _W)
_reg(SetHallInterpolation, "set_hall_interpolation",
     [0x01, 0x10, 0x00, 0x80, 0x00, 0x01, 0x02, 0x00, 0x00], _WR,
     lambda c: c.interpolation.interpolation, 2)
_reg(ReadHallInterpolation, "read_hall_interpolation",
     [0x01, 0x03, 0x00, 0x80, 0x00, 0x01, 0x00, 0x00, 0x00], _W)
_reg(SetTorqueGain, "set_torque_gain",
     [0x01, 0x10, 0x00, 0xB3, 0x00, 0x01, 0x02, 0x00, 0x00], _WR,
     lambda c: c.gain.gain, 2)
_reg(ReadTorqueGain, "read_torque_gain",
     [0x01, 0x03, 0x00, 0xB3, 0x00, 0x01, 0x00, 0x00, 0x00], _W)
# The register number goes in the value field, not in bytes 2-3
_reg(ReadRegister, "read_register",
     [0x01, 0x03, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00], _W,
     lambda c: c.register, 2)
# 1 = speed limited, 2 = unlimited
_reg(SetMotorTorqueMode, "set_motor_torque_mode",
     [0x01, 0x10, 0x00, 0x0B, 0x00, 0x01, 0x02, 0x00, 0x00], _WR,
     lambda c: int(c.mode.speed_limit) + 1, 1)
_reg(ReadMotorTorqueMode, "read_motor_torque_mode",
     [0x01, 0x03, 0x00, 0x0B, 0x00, 0x01, 0x00, 0x00, 0x00], _W)
_reg(WriteFlash, "write_flash",
     [0x01, 0x10, 0x01, 0xFF, 0x00, 0x01, 0x02, 0x7F, 0xFF], _W)
_reg(CloseFlash, "close_flash",
     [0x01, 0x10, 0x01, 0xFF, 0x00, 0x01, 0x02, 0x00, 0x00], _W)

# --- Cowboy service ---
_reg(SetLock, "set_lock",
     [0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00], _WR,
     lambda c: int(c.locked), 1, offset=0,
     service=SERVICE_COWBOY, characteristic=CHAR_COWBOY)
for _cls, _name in (
    (ReadLock, "read_lock"),
    (ReadDashboard, "read_dashboard"),
    (ReadTrip, "read_trip"),
    (ReadFitness, "read_fitness"),
):
    _reg(_cls, _name, None, None,
         service=SERVICE_COWBOY, characteristic=CHAR_COWBOY)


def get_command_def(command_type: type) -> CommandDefinition | None:
    """Return the definition for a command class, or None."""
    return _COMMAND_DEFS.get(command_type)


def all_command_defs() -> dict[type, CommandDefinition]:
    """Return a copy of all registered command definitions."""
    return dict(_COMMAND_DEFS)


def _definition_for(command: Command) -> CommandDefinition:
    cd = _COMMAND_DEFS.get(type(command))
    if cd is None:
        raise TypeError(f"Not a Cowboy command: {command!r}")
    return cd


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_payload(command: Command) -> bytes:
    """
    Build the 9-byte payload (without checksum) for *command*.

    Raises StrictlyReadError for commands that are only read via GATT read.
    """
    cd = _definition_for(command)
    if cd.template is None:
        raise StrictlyReadError(command)

    payload = bytearray(cd.template)
    if cd.value is not None:
        value = cd.value(command)
        start = cd.value_offset
        payload[start : start + cd.value_size] = value.to_bytes(
            cd.value_size, byteorder="big"
        )
    return bytes(payload)


def encode(command: Command) -> bytes:
    """
    Build the 11-byte frame for *command*, checksum included.

    Raises StrictlyReadError for strictly-read commands; there is never a
    partial result.
    """
    packet = packetize(encode_payload(command))
    logger.debug("Encoded %r: %s", command, packet.hex())
    return packet


def write_mode(command: Command) -> WriteMode:
    """
    Return how the frame for *command* must be written.

    Depends only on the command's type, never on its value. Strictly-read
    commands are not written at all and raise StrictlyReadError.
    """
    cd = _definition_for(command)
    if cd.mode is None:
        raise StrictlyReadError(command)
    return cd.mode


def is_strictly_read(command: Command) -> bool:
    return _definition_for(command).strictly_read


def service_for(command: Command) -> str:
    """Service UUID the command belongs to."""
    return _definition_for(command).service


def characteristic_for(command: Command) -> str:
    """Characteristic UUID the command is written to (or read from)."""
    return _definition_for(command).characteristic
