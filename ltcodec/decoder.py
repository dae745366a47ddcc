"""Decoding LTC frames from audio samples."""

from __future__ import annotations

import math
from array import array
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .frame import FRAME_BIT_COUNT, FRAME_BYTE_COUNT, LTCFrame

SAMPLE_CENTER = 128

_SYNC_FORWARD = 0x3FFD
_SYNC_REVERSE = 0xBFFC
_REVERSED_BITS = bytes(int(f"{b:08b}"[::-1], 2) for b in range(256))


def _empty_tics() -> list[float]:
    return [0.0] * FRAME_BIT_COUNT


@dataclass
class LTCFrameExt:
    """A decoded LTC frame with its position, timing and level in the stream.

    ``off_start`` and ``off_end`` are sample offsets of the frame's first and
    last sample. ``reverse`` is non-zero for a frame played backwards. The 80
    ``biphase_tics`` give the length of each bit in samples.
    """

    ltc: LTCFrame = field(default_factory=LTCFrame)
    off_start: int = 0
    off_end: int = 0
    reverse: int = 0
    biphase_tics: list[float] = field(default_factory=_empty_tics)
    sample_min: int = 0
    sample_max: int = 0
    volume: float = 0.0


class Decoder:
    """Parses 8-bit unsigned mono audio for LTC and queues decoded frames.

    ``apv`` (audio samples per video frame) only seeds the speed tracking;
    the speed is followed dynamically. The queue is a ring of ``queue_size``
    slots, so at most ``queue_size - 1`` frames can be waiting; older frames
    are lost when it overruns.
    """

    def __init__(self, apv: int = 1920, queue_size: int = 32) -> None:
        if queue_size < 1:
            raise ValueError(f"queue size must be at least 1, got {queue_size}")
        self._queue: list[LTCFrameExt | None] = [None] * queue_size
        self._read_off = 0
        self._write_off = 0

        self._biphase_state = 1
        self._biphase_prev = 0
        self._snd_state = 0
        self._snd_cnt = 0
        self._period = float(int(apv / 80))
        self._lmt = int((self._period * 3) / 4)
        self._snd_min = SAMPLE_CENTER
        self._snd_max = SAMPLE_CENTER

        self._sync_word = 0
        self._frame = 0
        self._bit_cnt = 0

        self._frame_start_off = 0
        self._frame_start_prev = -1

        self._tics = array("f", [0.0] * FRAME_BIT_COUNT)
        self._tic = 0

    # -- queue -----------------------------------------------------------

    def _push(self, ext: LTCFrameExt) -> None:
        self._queue[self._write_off] = ext
        self._write_off = (self._write_off + 1) % len(self._queue)

    def read(self) -> LTCFrameExt | None:
        """Take the oldest decoded frame from the queue, or None if it is empty."""
        if self._read_off == self._write_off:
            return None
        ext = self._queue[self._read_off]
        self._read_off = (self._read_off + 1) % len(self._queue)
        return ext

    def frames(self) -> Iterator[LTCFrameExt]:
        """Yield queued frames, oldest first, until the queue is empty."""
        while (ext := self.read()) is not None:
            yield ext

    def flush(self) -> None:
        """Discard every queued frame."""
        self._read_off = self._write_off

    def __len__(self) -> int:
        size = len(self._queue)
        return (self._write_off - self._read_off + size) % size

    # -- input -----------------------------------------------------------

    def write(self, samples: Iterable[int], posinfo: int = 0) -> None:
        """Feed unsigned 8-bit samples; posinfo is the stream offset of the first."""
        self._decode(bytes(samples), posinfo)

    def write_float(self, samples: Iterable[float], posinfo: int = 0) -> None:
        """Feed floating point samples in the range -1.0..1.0."""
        self._decode(
            bytes(min(255, max(0, int(SAMPLE_CENTER + s * 127.0))) for s in samples),
            posinfo,
        )

    def write_s16(self, samples: Iterable[int], posinfo: int = 0) -> None:
        """Feed signed 16-bit samples."""
        self._decode(
            bytes((SAMPLE_CENTER + (int(s) >> 8)) & 0xFF for s in samples), posinfo
        )

    def write_u16(self, samples: Iterable[int], posinfo: int = 0) -> None:
        """Feed unsigned 16-bit samples."""
        self._decode(bytes((int(s) >> 8) & 0xFF for s in samples), posinfo)

    # -- signal processing -----------------------------------------------

    def _volume_db(self) -> float:
        if self._snd_max <= self._snd_min:
            return -math.inf
        return 20.0 * math.log10((self._snd_max - self._snd_min) / 255.0)

    def _rotated_tics(self) -> list[float]:
        return list(self._tics[self._tic:]) + list(self._tics[:self._tic])

    def _parse(self, bit: int, offset: int, posinfo: int) -> None:
        if self._bit_cnt == 0:
            self._frame = 0
            if self._frame_start_prev < 0:
                self._frame_start_off = int(posinfo - self._period)
            else:
                self._frame_start_off = self._frame_start_prev
        self._frame_start_prev = offset + posinfo

        if self._bit_cnt >= FRAME_BIT_COUNT:
            self._frame >>= 1
            self._frame_start_off += math.ceil(self._period)
            self._bit_cnt -= 1

        self._sync_word = (self._sync_word << 1) & 0xFFFF
        if bit:
            self._sync_word |= 1
            if self._bit_cnt < FRAME_BIT_COUNT:
                self._frame |= 1 << self._bit_cnt
        self._bit_cnt += 1

        if self._sync_word == _SYNC_FORWARD:
            if self._bit_cnt == FRAME_BIT_COUNT:
                self._push(
                    LTCFrameExt(
                        ltc=LTCFrame.from_bytes(
                            self._frame.to_bytes(FRAME_BYTE_COUNT, "little")
                        ),
                        off_start=self._frame_start_off,
                        off_end=posinfo + offset - 1,
                        reverse=0,
                        biphase_tics=self._rotated_tics(),
                        sample_min=self._snd_min,
                        sample_max=self._snd_max,
                        volume=self._volume_db(),
                    )
                )
            self._bit_cnt = 0

        if self._sync_word == _SYNC_REVERSE:
            if self._bit_cnt == FRAME_BIT_COUNT:
                raw = bytearray(
                    _REVERSED_BITS[b]
                    for b in self._frame.to_bytes(FRAME_BYTE_COUNT, "little")
                )
                data_len = FRAME_BYTE_COUNT - 2  # the sync word stays in place
                raw[:data_len] = raw[data_len - 1::-1]
                self._frame = int.from_bytes(raw, "little")
                shift = 16 * self._period
                self._push(
                    LTCFrameExt(
                        ltc=LTCFrame.from_bytes(raw),
                        off_start=int(self._frame_start_off - shift),
                        off_end=int(posinfo + offset - 1 - shift),
                        reverse=int(FRAME_BYTE_COUNT * 8 * self._period),
                        biphase_tics=self._rotated_tics(),
                        sample_min=self._snd_min,
                        sample_max=self._snd_max,
                        volume=self._volume_db(),
                    )
                )
            self._bit_cnt = 0

    def _biphase_decode(self, offset: int, pos: int) -> None:
        self._tics[self._tic] = self._period
        self._tic = (self._tic + 1) % FRAME_BIT_COUNT
        if self._snd_cnt <= 2 * self._period:
            pos = int(pos - (self._period - self._snd_cnt))

        if self._snd_state == self._biphase_prev:
            self._biphase_state = 1
            self._parse(0, offset, pos)
        else:
            self._biphase_state = 1 - self._biphase_state
            if self._biphase_state == 1:
                self._parse(1, offset, pos)
        self._biphase_prev = self._snd_state

    def _decode(self, sound: bytes, posinfo: int) -> None:
        for i, sample in enumerate(sound):
            # let the tracked extremes decay towards the centre
            self._snd_min = SAMPLE_CENTER - ((SAMPLE_CENTER - self._snd_min) * 15) // 16
            self._snd_max = SAMPLE_CENTER + ((self._snd_max - SAMPLE_CENTER) * 15) // 16
            if sample < self._snd_min:
                self._snd_min = sample
            if sample > self._snd_max:
                self._snd_max = sample

            min_threshold = SAMPLE_CENTER - ((SAMPLE_CENTER - self._snd_min) * 8) // 16
            max_threshold = SAMPLE_CENTER + ((self._snd_max - SAMPLE_CENTER) * 8) // 16

            if (self._snd_state and sample > max_threshold) or (
                not self._snd_state and sample < min_threshold
            ):
                if self._snd_cnt > self._lmt:
                    # a single state change within a whole period is a 0
                    self._biphase_decode(i, posinfo)
                    self._biphase_decode(i, posinfo)
                else:
                    # a half-period change; two of them make a 1
                    self._snd_cnt *= 2
                    self._biphase_decode(i, posinfo)

                if self._snd_cnt > self._period * 4:
                    # long silence: restart the parser, skip speed tracking
                    self._bit_cnt = 0
                else:
                    self._period = (self._period * 3.0 + self._snd_cnt) / 4.0
                    self._lmt = int((self._period * 3) / 4)

                self._snd_cnt = 0
                self._snd_state = 0 if self._snd_state else 1
            self._snd_cnt += 1