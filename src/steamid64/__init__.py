"""Packed 64-bit SteamIDs with Steam2, Steam3, SteamID64 and invite code renderings."""

from __future__ import annotations

from steamid64.steamid import (
    AccountType,
    Instance,
    InstanceFlag,
    InvalidFormatError,
    NotNumericError,
    OutOfRangeError,
    SteamID,
    SteamIDError,
    SteamIDType,
    Universe,
    UnknownTypeCharacterError,
    UnsupportedForTypeError,
)


__all__ = [
    "AccountType",
    "Instance",
    "InstanceFlag",
    "InvalidFormatError",
    "NotNumericError",
    "OutOfRangeError",
    "SteamID",
    "SteamIDError",
    "SteamIDType",
    "UnknownTypeCharacterError",
    "UnsupportedForTypeError",
    "Universe",
]
