"""
cowboy_ble -- encode commands for Cowboy e-bikes and send them over BLE.

Quick start::

    import asyncio
    from cowboy_ble import CowboyConnection, SetMaxAssistedSpeed, Speed, WriteFlash

    async def main():
        async with CowboyConnection("E4:2F:9A:10:33:B1") as conn:
            await conn.send(SetMaxAssistedSpeed(Speed(32)))
            await conn.send(WriteFlash())

    asyncio.run(main())

Encoding alone needs no Bluetooth at all::

    from cowboy_ble import SetLight, encode, write_mode

    encode(SetLight(True))      # 11-byte frame, checksum included
    write_mode(SetLight(True))  # WriteMode.WRITE_WITHOUT_RESPONSE
"""

from .errors import (
    CowboyError as CowboyError,
    ValidationError as ValidationError,
    InvalidRangeError as InvalidRangeError,
    EncodeError as EncodeError,
    StrictlyReadError as StrictlyReadError,
)
from .types import (
    FieldWeakening as FieldWeakening,
    HallInterpolation as HallInterpolation,
    Speed as Speed,
    SpeedUnit as SpeedUnit,
    TorqueGain as TorqueGain,
    TorqueGainUnit as TorqueGainUnit,
    TorqueMode as TorqueMode,
)
from .protocol import (
    # UUIDs
    SERVICE_SETTINGS as SERVICE_SETTINGS,
    SERVICE_COWBOY as SERVICE_COWBOY,
    CHAR_SETTINGS_WRITE as CHAR_SETTINGS_WRITE,
    CHAR_SETTINGS_READ as CHAR_SETTINGS_READ,
    CHAR_COWBOY as CHAR_COWBOY,
    # Commands
    Command as Command,
    SetLight as SetLight,
    SetAutoLock as SetAutoLock,
    ReadAutoLock as ReadAutoLock,
    SetMaxAssistedSpeed as SetMaxAssistedSpeed,
    ReadMaxAssistedSpeed as ReadMaxAssistedSpeed,
    SetFieldWeakening as SetFieldWeakening,
    ReadFieldWeakening as ReadFieldWeakening,
    SetHallInterpolation as SetHallInterpolation,
    ReadHallInterpolation as ReadHallInterpolation,
    SetTorqueGain as SetTorqueGain,
    ReadTorqueGain as ReadTorqueGain,
    ReadRegister as ReadRegister,
    SetMotorTorqueMode as SetMotorTorqueMode,
    ReadMotorTorqueMode as ReadMotorTorqueMode,
    WriteFlash as WriteFlash,
    CloseFlash as CloseFlash,
    SetLock as SetLock,
    ReadLock as ReadLock,
    ReadDashboard as ReadDashboard,
    ReadTrip as ReadTrip,
    ReadFitness as ReadFitness,
    # Encoding
    WriteMode as WriteMode,
    CommandDefinition as CommandDefinition,
    checksum as checksum,
    packetize as packetize,
    encode_payload as encode_payload,
    encode as encode,
    write_mode as write_mode,
    is_strictly_read as is_strictly_read,
    service_for as service_for,
    characteristic_for as characteristic_for,
    get_command_def as get_command_def,
    all_command_defs as all_command_defs,
)
from .connection import (
    CowboyConnection as CowboyConnection,
    scan_for_bikes as scan_for_bikes,
    find_bike_by_address as find_bike_by_address,
)

__all__ = [
    # Errors
    "CowboyError",
    "ValidationError",
    "InvalidRangeError",
    "EncodeError",
    "StrictlyReadError",
    # Types
    "FieldWeakening",
    "HallInterpolation",
    "Speed",
    "SpeedUnit",
    "TorqueGain",
    "TorqueGainUnit",
    "TorqueMode",
    # Protocol
    "SERVICE_SETTINGS",
    "SERVICE_COWBOY",
    "CHAR_SETTINGS_WRITE",
    "CHAR_SETTINGS_READ",
    "CHAR_COWBOY",
    "Command",
    "SetLight",
    "SetAutoLock",
    "ReadAutoLock",
    "SetMaxAssistedSpeed",
    "ReadMaxAssistedSpeed",
    "SetFieldWeakening",
    "ReadFieldWeakening",
    "SetHallInterpolation",
    "ReadHallInterpolation",
    "SetTorqueGain",
    "ReadTorqueGain",
    "ReadRegister",
    "SetMotorTorqueMode",
    "ReadMotorTorqueMode",
    "WriteFlash",
    "CloseFlash",
    "SetLock",
    "ReadLock",
    "ReadDashboard",
    "ReadTrip",
    "ReadFitness",
    "WriteMode",
    "CommandDefinition",
    "checksum",
    "packetize",
    "encode_payload",
    "encode",
    "write_mode",
    "is_strictly_read",
    "service_for",
    "characteristic_for",
    "get_command_def",
    "all_command_defs",
    # Connection
    "CowboyConnection",
    "scan_for_bikes",
    "find_bike_by_address",
]

__version__ = "0.1.0"
