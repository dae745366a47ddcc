"""Stepping an LTC frame forward and backward by one video frame."""

from __future__ import annotations

from .frame import Flags, LTCFrame

_DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def _days_per_month(years: int) -> tuple[int, ...]:
    """Month lengths for a two-digit year; every fourth year (00 included) is leap."""
    if years % 4 == 0:
        return (31, 29, *_DAYS_PER_MONTH[2:])
    return _DAYS_PER_MONTH


def _read_date(frame: LTCFrame) -> tuple[int, int, int]:
    years = frame.user5 + frame.user6 * 10
    months = frame.user3 + frame.user4 * 10
    days = frame.user1 + frame.user2 * 10
    return years, months, days


def _write_date(frame: LTCFrame, years: int, months: int, days: int) -> None:
    frame.user6 = years // 10
    frame.user5 = years % 10
    frame.user4 = months // 10
    frame.user3 = months % 10
    frame.user2 = days // 10
    frame.user1 = days % 10


def skip_drop_frames(frame: LTCFrame) -> None:
    """Skip frame numbers 0 and 1 at the start of minutes not divisible by ten."""
    if (
        frame.mins_units != 0
        and frame.secs_units == 0
        and frame.secs_tens == 0
        and frame.frame_units == 0
        and frame.frame_tens == 0
    ):
        frame.frame_units += 2


def _increment_date(frame: LTCFrame) -> int:
    years, months, days = _read_date(frame)
    if not 0 < months < 13:
        return -1
    days += 1
    if days > _days_per_month(years)[months - 1]:
        days = 1
        months += 1
        if months > 12:
            months = 1
            years = (years + 1) % 100
    _write_date(frame, years, months, days)
    return 1


def _decrement_date(frame: LTCFrame) -> int:
    years, months, days = _read_date(frame)
    if not 0 < months < 13:
        return -1
    dpm = _days_per_month(years)
    if days > 1:
        days -= 1
    else:
        months = 1 + (months + 10) % 12
        days = dpm[months - 1]
        if months == 12:
            years = (years + 99) % 100
    _write_date(frame, years, months, days)
    return 1


def frame_increment(frame: LTCFrame, fps: int, standard, flags=0) -> int:
    """Advance the frame by one video frame in place.

    Returns 1 if the time wrapped after 23:59:59, -1 if it wrapped but the
    date could not be advanced (invalid month), and 0 otherwise.
    """
    rv = 0

    frame.frame_units += 1
    if frame.frame_units == 10:
        frame.frame_units = 0
        frame.frame_tens += 1

    if fps == frame.frame_units + frame.frame_tens * 10:
        frame.frame_units = 0
        frame.frame_tens = 0
        frame.secs_units += 1
        if frame.secs_units == 10:
            frame.secs_units = 0
            frame.secs_tens += 1
            if frame.secs_tens == 6:
                frame.secs_tens = 0
                frame.mins_units += 1
                if frame.mins_units == 10:
                    frame.mins_units = 0
                    frame.mins_tens += 1
                    if frame.mins_tens == 6:
                        frame.mins_tens = 0
                        frame.hours_units += 1
                        if frame.hours_units == 10:
                            frame.hours_units = 0
                            frame.hours_tens += 1
                        if frame.hours_units == 4 and frame.hours_tens == 2:
                            rv = 1
                            frame.hours_tens = 0
                            frame.hours_units = 0
                            if flags & Flags.USE_DATE:
                                rv = _increment_date(frame)

    if frame.dfbit:
        skip_drop_frames(frame)

    if not flags & Flags.NO_PARITY:
        frame.set_parity(standard)

    return rv


def frame_decrement(frame: LTCFrame, fps: int, standard, flags=0) -> int:
    """Move the frame back by one video frame in place.

    Returns 1 if the time wrapped before 00:00:00, -1 if it wrapped but the
    date could not be moved back (invalid month), and 0 otherwise.
    """
    rv = 0

    frames = frame.frame_units + frame.frame_tens * 10
    frames = frames - 1 if frames > 0 else fps - 1
    frame.frame_units = frames % 10
    frame.frame_tens = frames // 10

    if frames == fps - 1:
        secs = frame.secs_units + frame.secs_tens * 10
        secs = secs - 1 if secs > 0 else 59
        frame.secs_units = secs % 10
        frame.secs_tens = secs // 10

        if secs == 59:
            mins = frame.mins_units + frame.mins_tens * 10
            mins = mins - 1 if mins > 0 else 59
            frame.mins_units = mins % 10
            frame.mins_tens = mins // 10

            if mins == 59:
                hours = frame.hours_units + frame.hours_tens * 10
                hours = hours - 1 if hours > 0 else 23
                frame.hours_units = hours % 10
                frame.hours_tens = hours // 10

                if hours == 23:
                    rv = 1
                    if flags & Flags.USE_DATE:
                        rv = _decrement_date(frame)

    if frame.dfbit and fps > 2:
        if (
            frame.mins_units != 0
            and frame.secs_units == 0
            and frame.secs_tens == 0
            and frame.frame_units == 1
            and frame.frame_tens == 0
        ):
            frame_decrement(frame, fps, standard, flags & Flags.USE_DATE)
            frame_decrement(frame, fps, standard, flags & Flags.USE_DATE)

    if not flags & Flags.NO_PARITY:
        frame.set_parity(standard)

    return rv