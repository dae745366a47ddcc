import pytest

from ltcodec.frame import Flags, LTCFrame, SMPTETimecode, TVStandard
from ltcodec.smpte import frame_to_time, time_to_frame
from ltcodec.timecode import frame_decrement, frame_increment, skip_drop_frames

STD = TVStandard.TV_525_60


def make_frame(hours=0, mins=0, secs=0, frame=0, years=0, months=0, days=0, dfbit=0):
    f = LTCFrame()
    f.dfbit = dfbit
    stime = SMPTETimecode(
        timezone="+0900",
        years=years,
        months=months,
        days=days,
        hours=hours,
        mins=mins,
        secs=secs,
        frame=frame,
    )
    time_to_frame(f, stime, STD, Flags.USE_DATE)
    return f


def hmsf(f):
    t = frame_to_time(f, Flags.NONE)
    return (t.hours, t.mins, t.secs, t.frame)


def ymd(f):
    t = frame_to_time(f, Flags.USE_DATE)
    return (t.years, t.months, t.days)


def ones_count(data):
    return sum(b.bit_count() for b in data)


def test_increment_simple_frame():
    f = make_frame(1, 2, 3, 4)
    assert frame_increment(f, 30, STD, Flags.NONE) == 0
    assert hmsf(f) == (1, 2, 3, 5)


def test_increment_carries_to_seconds():
    f = make_frame(0, 0, 0, 29)
    assert frame_increment(f, 30, STD, Flags.NONE) == 0
    assert hmsf(f) == (0, 0, 1, 0)


def test_increment_carries_to_hours():
    f = make_frame(9, 59, 59, 24)
    frame_increment(f, 25, TVStandard.TV_625_50, Flags.NONE)
    assert hmsf(f) == (10, 0, 0, 0)


def test_increment_wraps_day():
    f = make_frame(23, 59, 59, 29)
    assert frame_increment(f, 30, STD, Flags.NONE) == 1
    assert hmsf(f) == (0, 0, 0, 0)


def test_increment_wraps_date_at_year_end():
    f = make_frame(23, 59, 59, 29, years=99, months=12, days=31)
    assert frame_increment(f, 30, STD, Flags.USE_DATE) == 1
    assert ymd(f) == (0, 1, 1)
    assert frame_to_time(f, Flags.USE_DATE).timezone == "+0900"


@pytest.mark.parametrize(
    "start,end",
    [
        ((4, 2, 28), (4, 2, 29)),
        ((3, 2, 28), (3, 3, 1)),
        ((0, 2, 28), (0, 2, 29)),
        ((20, 4, 30), (20, 5, 1)),
    ],
)
def test_increment_date_month_lengths(start, end):
    y, m, d = start
    f = make_frame(23, 59, 59, 29, years=y, months=m, days=d)
    frame_increment(f, 30, STD, Flags.USE_DATE)
    assert ymd(f) == end


def test_increment_invalid_month_reports_error():
    f = make_frame(23, 59, 59, 29, years=20, months=0, days=5)
    assert frame_increment(f, 30, STD, Flags.USE_DATE) == -1
    assert hmsf(f) == (0, 0, 0, 0)
    assert ymd(f) == (20, 0, 5)


def test_increment_without_date_flag_keeps_date():
    f = make_frame(23, 59, 59, 29, years=99, months=12, days=31)
    frame_increment(f, 30, STD, Flags.NONE)
    assert ymd(f) == (99, 12, 31)


def test_decrement_simple():
    f = make_frame(1, 2, 3, 4)
    assert frame_decrement(f, 30, STD, Flags.NONE) == 0
    assert hmsf(f) == (1, 2, 3, 3)


def test_decrement_borrows():
    f = make_frame(10, 0, 0, 0)
    assert frame_decrement(f, 30, STD, Flags.NONE) == 0
    assert hmsf(f) == (9, 59, 59, 29)


def test_decrement_wraps_day():
    f = make_frame(0, 0, 0, 0)
    assert frame_decrement(f, 25, TVStandard.TV_625_50, Flags.NONE) == 1
    assert hmsf(f) == (23, 59, 59, 24)


def test_decrement_wraps_date_at_year_start():
    f = make_frame(0, 0, 0, 0, years=0, months=1, days=1)
    assert frame_decrement(f, 30, STD, Flags.USE_DATE) == 1
    assert ymd(f) == (99, 12, 31)


def test_decrement_into_leap_february():
    f = make_frame(0, 0, 0, 0, years=4, months=3, days=1)
    frame_decrement(f, 30, STD, Flags.USE_DATE)
    assert ymd(f) == (4, 2, 29)


def test_decrement_invalid_month_reports_error():
    f = make_frame(0, 0, 0, 0, years=10, months=13, days=1)
    assert frame_decrement(f, 30, STD, Flags.USE_DATE) == -1


def test_drop_frame_increment_skips_frames():
    f = make_frame(0, 0, 59, 29, dfbit=1)
    frame_increment(f, 30, STD, Flags.NONE)
    assert hmsf(f) == (0, 1, 0, 2)


def test_drop_frame_tenth_minute_not_skipped():
    f = make_frame(0, 9, 59, 29, dfbit=1)
    frame_increment(f, 30, STD, Flags.NONE)
    assert hmsf(f) == (0, 10, 0, 0)


def test_drop_frame_decrement_skips_frames():
    f = make_frame(0, 1, 0, 2, dfbit=1)
    frame_decrement(f, 30, STD, Flags.NONE)
    assert hmsf(f) == (0, 0, 59, 29)


def test_drop_frame_ten_minutes_frame_count():
    f = make_frame(0, 0, 0, 0, dfbit=1)
    for _ in range(17982):
        frame_increment(f, 30, STD, Flags.NONE)
    assert hmsf(f) == (0, 10, 0, 0)


@pytest.mark.parametrize("dfbit", [0, 1])
def test_increment_decrement_round_trip(dfbit):
    start = make_frame(23, 58, 58, 10, years=99, months=12, days=31, dfbit=dfbit)
    f = start.copy()
    steps = 3 * 60 * 30
    for _ in range(steps):
        frame_increment(f, 30, STD, Flags.USE_DATE)
    assert f != start
    for _ in range(steps):
        frame_decrement(f, 30, STD, Flags.USE_DATE)
    assert f == start


@pytest.mark.parametrize("standard", list(TVStandard))
def test_parity_kept_even(standard):
    f = make_frame(12, 34, 56, 7, years=21, months=6, days=15)
    for _ in range(50):
        assert frame_increment(f, 30, standard, Flags.USE_DATE) == 0
        data = f.to_bytes()
        assert len(data) == 10
        assert ones_count(data) % 2 == 0
    for _ in range(80):
        assert frame_decrement(f, 30, standard, Flags.USE_DATE) == 0
        data = f.to_bytes()
        assert ones_count(data) % 2 == 0
    assert hmsf(f) == (12, 34, 55, 7)
    assert ymd(f) == (21, 6, 15)


def test_no_parity_leaves_parity_bit():
    f = make_frame(0, 0, 0, 0)
    f.biphase_mark_phase_correction = 1
    for _ in range(5):
        frame_increment(f, 30, STD, Flags.NO_PARITY)
        assert f.biphase_mark_phase_correction == 1


def test_sync_word_untouched():
    f = make_frame(0, 0, 0, 0)
    sync = f.sync_word
    frame_increment(f, 30, STD, Flags.NONE)
    frame_decrement(f, 30, STD, Flags.NONE)
    frame_decrement(f, 30, STD, Flags.NONE)
    assert f.sync_word == sync
    assert f.to_bytes()[8:] == bytes([0xFC, 0xBF])


def test_skip_drop_frames_applies_only_at_minute_start():
    f = make_frame(0, 3, 0, 0)
    skip_drop_frames(f)
    assert hmsf(f) == (0, 3, 0, 2)

    g = make_frame(0, 10, 0, 0)
    skip_drop_frames(g)
    assert hmsf(g) == (0, 10, 0, 0)

    h = make_frame(0, 3, 1, 0)
    skip_drop_frames(h)
    assert hmsf(h) == (0, 3, 1, 0)