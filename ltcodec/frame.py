"""Raw 80-bit LTC frame, TV standards, operation flags and SMPTE time."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import IntEnum, IntFlag

FRAME_BIT_COUNT = 80
FRAME_BYTE_COUNT = FRAME_BIT_COUNT // 8
SYNC_WORD = 0xBFFC
"""Sync word 0x3FFD as stored in the frame's last two bytes (bit-mirrored)."""


class TVStandard(IntEnum):
    """TV standard; decides the Binary Group Flag and parity bit positions."""

    TV_525_60 = 0
    TV_625_50 = 1
    TV_1125_60 = 2
    FILM_24 = 3


class Flags(IntFlag):
    """Encoder and frame/timecode conversion flags."""

    NONE = 0
    USE_DATE = 1
    TC_CLOCK = 2
    BGF_DONT_TOUCH = 4
    NO_PARITY = 8


@dataclass
class SMPTETimecode:
    """Human readable time with SMPTE date and timezone."""

    timezone: str = "+0000"
    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    mins: int = 0
    secs: int = 0
    frame: int = 0


# field name -> (bit offset within the 80-bit frame, width in bits)
_LAYOUT: dict[str, tuple[int, int]] = {
    "frame_units": (0, 4),
    "user1": (4, 4),
    "frame_tens": (8, 2),
    "dfbit": (10, 1),
    "col_frame": (11, 1),
    "user2": (12, 4),
    "secs_units": (16, 4),
    "user3": (20, 4),
    "secs_tens": (24, 3),
    "biphase_mark_phase_correction": (27, 1),
    "user4": (28, 4),
    "mins_units": (32, 4),
    "user5": (36, 4),
    "mins_tens": (40, 3),
    "binary_group_flag_bit0": (43, 1),
    "user6": (44, 4),
    "hours_units": (48, 4),
    "user7": (52, 4),
    "hours_tens": (56, 2),
    "binary_group_flag_bit1": (58, 1),
    "binary_group_flag_bit2": (59, 1),
    "user8": (60, 4),
    "sync_word": (64, 16),
}

_USER_FIELDS = tuple(f"user{i}" for i in range(1, 9))


@dataclass
class LTCFrame:
    """An 80-bit LTC frame; every field is truncated to its bit width on assignment."""

    frame_units: int = 0
    user1: int = 0
    frame_tens: int = 0
    dfbit: int = 0
    col_frame: int = 0
    user2: int = 0
    secs_units: int = 0
    user3: int = 0
    secs_tens: int = 0
    biphase_mark_phase_correction: int = 0
    user4: int = 0
    mins_units: int = 0
    user5: int = 0
    mins_tens: int = 0
    binary_group_flag_bit0: int = 0
    user6: int = 0
    hours_units: int = 0
    user7: int = 0
    hours_tens: int = 0
    binary_group_flag_bit1: int = 0
    binary_group_flag_bit2: int = 0
    user8: int = 0
    sync_word: int = SYNC_WORD

    def __setattr__(self, name: str, value) -> None:
        layout = _LAYOUT.get(name)
        if layout is not None:
            value = int(value) & ((1 << layout[1]) - 1)
        object.__setattr__(self, name, value)

    def to_bytes(self) -> bytes:
        """Return the 10 bytes of the frame in transmission order."""
        value = 0
        for name, (offset, _width) in _LAYOUT.items():
            value |= getattr(self, name) << offset
        return value.to_bytes(FRAME_BYTE_COUNT, "little")

    @classmethod
    def from_bytes(cls, data) -> LTCFrame:
        """Build a frame from its 10 raw bytes."""
        data = bytes(data)
        if len(data) != FRAME_BYTE_COUNT:
            raise ValueError(
                f"an LTC frame is {FRAME_BYTE_COUNT} bytes, got {len(data)}"
            )
        value = int.from_bytes(data, "little")
        return cls(
            **{
                name: (value >> offset) & ((1 << width) - 1)
                for name, (offset, width) in _LAYOUT.items()
            }
        )

    def reset(self) -> None:
        """Clear every field except the sync word, which is set to 0x3FFD."""
        for name in _LAYOUT:
            setattr(self, name, 0)
        self.sync_word = SYNC_WORD

    def copy(self) -> LTCFrame:
        """Return an independent copy of the frame."""
        return dataclasses.replace(self)

    def set_parity(self, standard) -> None:
        """Set the parity bit so the frame holds an even number of ones."""
        if standard != TVStandard.TV_625_50:
            self.biphase_mark_phase_correction = 0
        else:
            self.binary_group_flag_bit2 = 0

        p = 0
        for byte in self.to_bytes():
            p ^= byte
        parity = p.bit_count() & 1

        if standard != TVStandard.TV_625_50:
            self.biphase_mark_phase_correction = parity
        else:
            self.binary_group_flag_bit2 = parity

    def get_user_bits(self) -> int:
        """Return the eight user-bit nibbles as a 32-bit integer, user1 lowest."""
        data = 0
        for name in reversed(_USER_FIELDS):
            data = (data << 4) + getattr(self, name)
        return data

    def set_user_bits(self, data: int) -> None:
        """Store a 32-bit integer in the user bits, lowest nibble in user1."""
        for name in _USER_FIELDS:
            setattr(self, name, data & 0xF)
            data >>= 4

    def bgf_flags(self, standard) -> int:
        """Binary Group Flags in standard-independent form: bit n is BGFn."""
        if standard == TVStandard.TV_625_50:
            return (
                (4 if self.binary_group_flag_bit0 else 0)
                | (2 if self.binary_group_flag_bit1 else 0)
                | (1 if self.biphase_mark_phase_correction else 0)
            )
        return (
            (4 if self.binary_group_flag_bit2 else 0)
            | (2 if self.binary_group_flag_bit1 else 0)
            | (1 if self.binary_group_flag_bit0 else 0)
        )


def frame_alignment(samples_per_frame: float, standard) -> int:
    """Sample offset between the LTC frame start and the TV frame start."""
    if standard == TVStandard.TV_525_60:
        return round(samples_per_frame * 4.0 / 525.0)
    if standard == TVStandard.TV_625_50:
        return round(samples_per_frame * 1.0 / 625.0)
    return 0