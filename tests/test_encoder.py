import itertools

import pytest

from ltcodec.encoder import Encoder, EncoderError
from ltcodec.frame import Flags, SMPTETimecode, TVStandard


def _runs(samples):
    return [len(list(group)) for _, group in itertools.groupby(samples)]


def _square(sample_rate=48000, fps=25, standard=TVStandard.TV_625_50, flags=Flags.NONE):
    enc = Encoder(sample_rate, fps, standard, flags)
    enc.set_filter(0)
    return enc


def test_default_levels():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    assert (enc.enc_lo, enc.enc_hi) == (38, 218)


def test_invalid_sample_rate():
    with pytest.raises(EncoderError):
        Encoder(0, 25, TVStandard.TV_625_50, Flags.NONE)


def test_full_frame_sample_count_and_levels():
    enc = _square()
    enc.encode_frame()
    samples = enc.get_buffer()
    assert len(samples) == 1920
    assert set(samples) <= {38, 218}
    assert enc.get_buffer() == b""


def test_buffer_size_fits_one_frame():
    enc = _square()
    enc.encode_frame()
    assert len(enc.get_buffer(flush=False)) < enc.buffer_size()
    assert len(enc.get_buffer(flush=False)) == len(enc.get_buffer())


def test_filtered_samples_stay_in_range():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    enc.encode_frame()
    samples = enc.get_buffer()
    assert samples
    assert min(samples) >= enc.enc_lo
    assert max(samples) <= enc.enc_hi


def test_reverse_byte_reverses_runs():
    forward = _square()
    forward.set_user_bits(0x5A3C96E1)
    forward.encode_byte(2, 1.0)
    backward = _square()
    backward.set_user_bits(0x5A3C96E1)
    backward.encode_byte(2, -1.0)
    f_runs = _runs(forward.get_buffer())
    b_runs = _runs(backward.get_buffer())
    assert b_runs == list(reversed(f_runs))


def test_encode_byte_errors():
    enc = _square()
    with pytest.raises(EncoderError):
        enc.encode_byte(10, 1.0)
    with pytest.raises(EncoderError):
        enc.encode_byte(-1, 1.0)
    with pytest.raises(EncoderError):
        enc.encode_byte(0, 0)


def test_overflow_raises():
    enc = _square()
    enc.encode_frame()
    with pytest.raises(EncoderError):
        enc.encode_byte(0, 1.0)


def test_set_volume_full_scale():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    enc.set_volume(0.0)
    assert (enc.enc_lo, enc.enc_hi) == (1, 255)


@pytest.mark.parametrize("dbfs", [1.0, -60.0])
def test_set_volume_out_of_range(dbfs):
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    with pytest.raises(EncoderError):
        enc.set_volume(dbfs)
    assert (enc.enc_lo, enc.enc_hi) == (38, 218)


def test_volume_symmetric_around_center():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    enc.set_volume(-18.0)
    assert enc.enc_lo + enc.enc_hi == 256
    assert enc.enc_hi - enc.enc_lo < 180


def test_set_filter_zero_and_positive():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    assert 0 < enc.filter_const < 1
    enc.set_filter(0)
    assert enc.filter_const == 0


def test_reinit_requires_larger_buffer():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    with pytest.raises(EncoderError):
        enc.reinit(96000, 25, TVStandard.TV_625_50, Flags.NONE)
    enc.set_bufsize(96000, 25)
    enc.reinit(96000, 25, TVStandard.TV_625_50, Flags.NONE)
    enc.set_filter(0)
    enc.encode_frame()
    assert len(enc.get_buffer()) == 2 * 1920


def test_drop_frame_bit_for_2997():
    assert Encoder(48000, 29.97, TVStandard.TV_525_60, Flags.NONE).get_frame().dfbit == 1
    assert Encoder(48000, 30, TVStandard.TV_525_60, Flags.NONE).get_frame().dfbit == 0


def test_bgf_flags_with_date_and_clock():
    flags = Flags.USE_DATE | Flags.TC_CLOCK | Flags.BGF_DONT_TOUCH
    enc = Encoder(48000, 25, TVStandard.TV_625_50, flags)
    frame = enc.get_frame()
    assert frame.binary_group_flag_bit0 == 1
    assert frame.binary_group_flag_bit1 == 1
    assert frame.bgf_flags(TVStandard.TV_625_50) & 6 == 6


def test_frame_has_even_parity_after_set_timecode():
    enc = Encoder(48000, 30, TVStandard.TV_525_60, Flags.USE_DATE)
    enc.set_timecode(SMPTETimecode("+0900", 24, 5, 17, 13, 37, 42, 11))
    ones = sum(b.bit_count() for b in enc.get_frame().to_bytes())
    assert ones % 2 == 0


def test_timecode_round_trip():
    enc = Encoder(48000, 30, TVStandard.TV_525_60, Flags.USE_DATE)
    stime = SMPTETimecode("+0900", 24, 5, 17, 13, 37, 42, 11)
    enc.set_timecode(stime)
    assert enc.get_timecode() == stime


def test_user_bits_round_trip():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    enc.set_user_bits(0x12345678)
    assert enc.get_frame().get_user_bits() == 0x12345678


def test_get_frame_returns_copy():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.NONE)
    frame = enc.get_frame()
    frame.hours_units = 5
    assert enc.get_frame().hours_units == 0
    enc.set_frame(frame)
    assert enc.get_frame().hours_units == 5


def test_inc_and_dec_wrap_date():
    enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.USE_DATE)
    start = SMPTETimecode("+0000", 99, 12, 31, 23, 59, 59, 24)
    enc.set_timecode(start)
    assert enc.inc_timecode() == 1
    assert enc.get_timecode() == SMPTETimecode("+0000", 0, 1, 1, 0, 0, 0, 0)
    assert enc.dec_timecode() == 1
    assert enc.get_timecode() == start


def test_reset_restarts_waveform():
    enc = _square()
    enc.encode_byte(0, 1.0)
    first = enc.get_buffer()
    enc.encode_byte(1, 1.0)
    enc.reset()
    assert enc.get_buffer() == b""
    enc.encode_byte(0, 1.0)
    assert enc.get_buffer() == first


def test_flush_buffer():
    enc = _square()
    enc.encode_byte(3, 1.0)
    enc.flush_buffer()
    assert enc.get_buffer() == b""