"""Conversion between LTC frames and SMPTE time, including date and timezone."""

from __future__ import annotations

from .frame import Flags, LTCFrame, SMPTETimecode

_DEFAULT_TIMEZONE = "+0000"

# SMPTE 309M timezone codes, searched in this order.
_TIME_ZONES: tuple[tuple[int, str], ...] = (
    (0x00, "+0000"),
    (0x00, "-0000"),
    (0x01, "-0100"),
    (0x02, "-0200"),
    (0x03, "-0300"),
    (0x04, "-0400"),
    (0x05, "-0500"),
    (0x06, "-0600"),
    (0x07, "-0700"),
    (0x08, "-0800"),
    (0x09, "-0900"),
    (0x10, "-1000"),
    (0x11, "-1100"),
    (0x12, "-1200"),
    (0x13, "+1300"),
    (0x14, "+1200"),
    (0x15, "+1100"),
    (0x16, "+1000"),
    (0x17, "+0900"),
    (0x18, "+0800"),
    (0x19, "+0700"),
    (0x20, "+0600"),
    (0x21, "+0500"),
    (0x22, "+0400"),
    (0x23, "+0300"),
    (0x24, "+0200"),
    (0x25, "+0100"),
    (0x28, "TP-03"),
    (0x29, "TP-02"),
    (0x30, "TP-01"),
    (0x31, "TP-00"),
    (0x0A, "-0030"),
    (0x0B, "-0130"),
    (0x0C, "-0230"),
    (0x0D, "-0330"),
    (0x0E, "-0430"),
    (0x0F, "-0530"),
    (0x1A, "-0630"),
    (0x1B, "-0730"),
    (0x1C, "-0830"),
    (0x1D, "-0930"),
    (0x1E, "-1030"),
    (0x1F, "-1130"),
    (0x2A, "+1130"),
    (0x2B, "+1030"),
    (0x2C, "+0930"),
    (0x2D, "+0830"),
    (0x2E, "+0730"),
    (0x2F, "+0630"),
    (0x3A, "+0530"),
    (0x3B, "+0430"),
    (0x3C, "+0330"),
    (0x3D, "+0230"),
    (0x3E, "+0130"),
    (0x3F, "+0030"),
    (0x32, "+1245"),
    (0x38, "+XXXX"),
)


def timezone_string(code: int) -> str:
    """Timezone text for a SMPTE timezone code; unknown codes give "+0000"."""
    return next((tz for c, tz in _TIME_ZONES if c == code), _DEFAULT_TIMEZONE)


def timezone_code(timezone: str) -> int:
    """SMPTE timezone code for a timezone text; unknown text gives 0."""
    return next((c for c, tz in _TIME_ZONES if tz == timezone), 0x00)


def _skip_drop_frames(frame: LTCFrame) -> None:
    """Skip frame numbers 0 and 1 at the start of minutes not divisible by ten."""
    if (
        frame.mins_units != 0
        and frame.secs_units == 0
        and frame.secs_tens == 0
        and frame.frame_units == 0
        and frame.frame_tens == 0
    ):
        frame.frame_units += 2


def frame_to_time(frame: LTCFrame, flags=0) -> SMPTETimecode:
    """Read the time (and, with USE_DATE, the date and timezone) from a frame."""
    stime = SMPTETimecode()
    if flags & Flags.USE_DATE:
        stime.timezone = timezone_string(frame.user7 + (frame.user8 << 4))
        stime.years = frame.user5 + frame.user6 * 10
        stime.months = frame.user3 + frame.user4 * 10
        stime.days = frame.user1 + frame.user2 * 10
    stime.hours = frame.hours_units + frame.hours_tens * 10
    stime.mins = frame.mins_units + frame.mins_tens * 10
    stime.secs = frame.secs_units + frame.secs_tens * 10
    stime.frame = frame.frame_units + frame.frame_tens * 10
    return stime


def time_to_frame(frame: LTCFrame, stime: SMPTETimecode, standard, flags=0) -> None:
    """Write a SMPTE time into the frame in place and update its parity bit."""
    if flags & Flags.USE_DATE:
        code = timezone_code(stime.timezone)
        frame.user7 = code & 0x0F
        frame.user8 = (code & 0xF0) >> 4
        frame.user6 = stime.years // 10
        frame.user5 = stime.years - frame.user6 * 10
        frame.user4 = stime.months // 10
        frame.user3 = stime.months - frame.user4 * 10
        frame.user2 = stime.days // 10
        frame.user1 = stime.days - frame.user2 * 10

    frame.hours_tens = stime.hours // 10
    frame.hours_units = stime.hours - frame.hours_tens * 10
    frame.mins_tens = stime.mins // 10
    frame.mins_units = stime.mins - frame.mins_tens * 10
    frame.secs_tens = stime.secs // 10
    frame.secs_units = stime.secs - frame.secs_tens * 10
    frame.frame_tens = stime.frame // 10
    frame.frame_units = stime.frame - frame.frame_tens * 10

    if frame.dfbit:
        _skip_drop_frames(frame)

    if not flags & Flags.NO_PARITY:
        frame.set_parity(standard)