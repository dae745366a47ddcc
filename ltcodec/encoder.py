"""Encoding LTC frames into 8-bit unsigned mono audio samples."""

from __future__ import annotations

import math

from .frame import FRAME_BYTE_COUNT, Flags, LTCFrame, SMPTETimecode, TVStandard
from .smpte import frame_to_time, time_to_frame
from .timecode import frame_decrement, frame_increment

SAMPLE_CENTER = 128


class EncoderError(ValueError):
    """Raised for invalid encoder settings, arguments or buffer overflow."""


def _buffer_length(sample_rate: float, fps: float) -> int:
    return 1 + math.ceil(sample_rate / fps)


class Encoder:
    """Generates biphase-mark LTC audio for the frame it holds.

    The internal buffer holds exactly one LTC frame at normal speed unless
    resized with :meth:`set_bufsize`. The default level is -3 dBFS
    (samples 38..218).
    """

    def __init__(
        self,
        sample_rate: float,
        fps: float,
        standard=TVStandard.TV_525_60,
        flags=Flags.NONE,
    ) -> None:
        if sample_rate < 1:
            raise EncoderError(f"sample rate must be at least 1, got {sample_rate}")
        self.enc_lo = 38
        self.enc_hi = 218
        self._bufsize = _buffer_length(sample_rate, fps)
        self._buf = bytearray(self._bufsize)
        self._offset = 0
        self._frame = LTCFrame()
        self._frame.reset()
        self.sample_rate = float(sample_rate)
        self.filter_const = 0.0
        self.reinit(sample_rate, fps, standard, flags)

    def reinit(self, sample_rate: float, fps: float, standard, flags) -> None:
        """Change rate, fps, standard and flags without reallocating the buffer.

        Flushes the buffer, resets the biphase state and the filter, and
        updates the frame's flag bits and parity.
        """
        if sample_rate < 1:
            raise EncoderError(f"sample rate must be at least 1, got {sample_rate}")
        if _buffer_length(sample_rate, fps) > self._bufsize:
            raise EncoderError("buffer too small for this sample rate and fps")

        self._state = False
        self._offset = 0
        self.sample_rate = float(sample_rate)
        self.set_filter(40.0)
        self.fps = float(fps)
        self.flags = flags
        self.standard = standard
        self.samples_per_clock = sample_rate / (fps * 80.0)
        self.samples_per_clock_2 = self.samples_per_clock / 2.0
        self._remainder = 0.5

        f = self._frame
        if flags & Flags.BGF_DONT_TOUCH:
            f.col_frame = 0
            f.binary_group_flag_bit1 = 1 if flags & Flags.TC_CLOCK else 0
            use_date = 1 if flags & Flags.USE_DATE else 0
            if standard == TVStandard.TV_625_50:
                f.biphase_mark_phase_correction = 0
                f.binary_group_flag_bit0 = use_date
            else:
                f.binary_group_flag_bit0 = 0
                f.binary_group_flag_bit2 = use_date
        if not flags & Flags.NO_PARITY:
            f.set_parity(standard)

        f.dfbit = 1 if round(fps * 100.0) == 2997 else 0

    def reset(self) -> None:
        """Flush the buffer and reset the biphase state."""
        self._state = False
        self._remainder = 0.5
        self._offset = 0

    def set_volume(self, dbfs: float) -> None:
        """Set the output level in dB full-scale (at most 0, at least about -42)."""
        if dbfs > 0:
            raise EncoderError(f"volume must not exceed 0 dBFS, got {dbfs}")
        pp = round(127.0 * 10 ** (dbfs / 20.0))
        if pp < 1 or pp > 127:
            raise EncoderError(f"volume {dbfs} dBFS is out of range")
        diff = int(pp) & 0x7F
        self.enc_lo = SAMPLE_CENTER - diff
        self.enc_hi = SAMPLE_CENTER + diff

    def set_filter(self, rise_time: float) -> None:
        """Set the signal rise time in microseconds; 0 gives a square wave."""
        if rise_time <= 0:
            self.filter_const = 0.0
        else:
            self.filter_const = 1.0 - math.exp(
                -1.0 / (self.sample_rate * rise_time / 2000000.0 / math.e)
            )

    def set_bufsize(self, sample_rate: float, fps: float) -> None:
        """Resize the internal buffer for the given rate and fps; flushes it."""
        self._offset = 0
        self._bufsize = _buffer_length(sample_rate, fps)
        self._buf = bytearray(self._bufsize)

    def _add_values(self, n: int) -> bool:
        """Append n samples of the current level; return True on overflow."""
        target = self.enc_hi if self._state else self.enc_lo
        if self._offset + n >= self._bufsize:
            return True
        start = self._offset
        tcf = self.filter_const
        if tcf > 0:
            val = SAMPLE_CENTER
            for i in range((n + 1) >> 1):
                val = int(val + tcf * (target - val)) & 0xFF
                self._buf[start + i] = val
                self._buf[start + n - i - 1] = val
        else:
            self._buf[start:start + n] = bytes([target]) * n
        self._offset += n
        return False

    def _emit(self, length: float) -> bool:
        n = int(length + self._remainder)
        self._remainder = length + self._remainder - n
        self._state = not self._state
        return self._add_values(n)

    def _encode_byte(self, byte: int, speed: float) -> bool:
        if not 0 <= byte < FRAME_BYTE_COUNT:
            raise EncoderError(f"byte index must be 0..9, got {byte}")
        if speed == 0:
            raise EncoderError("speed must not be zero")

        value = self._frame.to_bytes()[byte]
        spc = self.samples_per_clock * abs(speed)
        sph = self.samples_per_clock_2 * abs(speed)
        bits = range(7, -1, -1) if speed < 0 else range(8)

        overflow = False
        for bit in bits:
            if value & (1 << bit):
                overflow |= self._emit(sph)
                overflow |= self._emit(sph)
            else:
                overflow |= self._emit(spc)
        return overflow

    def encode_byte(self, byte: int, speed: float = 1.0) -> None:
        """Encode byte 0..9 of the frame into the buffer.

        A negative speed encodes the bits in reverse order. Raises
        EncoderError for an invalid byte, zero speed or buffer overflow.
        """
        if self._encode_byte(byte, speed):
            raise EncoderError("encoder buffer overflow")

    def encode_frame(self) -> None:
        """Encode all ten bytes of the frame at normal speed.

        Samples that do not fit into the buffer are silently dropped.
        """
        for byte in range(FRAME_BYTE_COUNT):
            self._encode_byte(byte, 1.0)

    def get_timecode(self) -> SMPTETimecode:
        """Return the frame's time (with date when USE_DATE is set)."""
        return frame_to_time(self._frame, self.flags)

    def set_timecode(self, stime: SMPTETimecode) -> None:
        """Set the frame that the next encode call turns into audio."""
        time_to_frame(self._frame, stime, self.standard, self.flags)

    def set_user_bits(self, data: int) -> None:
        """Store a 32-bit value in the frame's user bits, LSB first."""
        self._frame.set_user_bits(data)

    def get_frame(self) -> LTCFrame:
        """Return a copy of the frame being encoded."""
        return self._frame.copy()

    def set_frame(self, frame: LTCFrame) -> None:
        """Replace the frame being encoded with a copy of the given one."""
        self._frame = frame.copy()

    def inc_timecode(self) -> int:
        """Advance the frame by one video frame; 1 on 24-hour wrap."""
        return frame_increment(self._frame, round(self.fps), self.standard, self.flags)

    def dec_timecode(self) -> int:
        """Move the frame back by one video frame; 1 on 24-hour wrap."""
        return frame_decrement(self._frame, round(self.fps), self.standard, self.flags)

    def buffer_size(self) -> int:
        """Total size of the internal buffer in samples."""
        return self._bufsize

    def flush_buffer(self) -> None:
        """Discard the encoded samples."""
        self._offset = 0

    def get_buffer(self, flush: bool = True) -> bytes:
        """Return the encoded samples, emptying the buffer when flush is true."""
        data = bytes(self._buf[:self._offset])
        if flush:
            self._offset = 0
        return data