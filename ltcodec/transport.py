"""LTC transport: receive timecode from audio and send timecode as audio."""

from __future__ import annotations

import copy
import datetime
import logging
import math
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .decoder import Decoder, LTCFrameExt
from .encoder import SAMPLE_CENTER, Encoder
from .frame import Flags, SMPTETimecode, TVStandard
from .smpte import frame_to_time

log = logging.getLogger(__name__)

_DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    """Gregorian leap-year rule."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    """Number of days in the month; an invalid month gives 30."""
    if month == 2:
        return 29 if is_leap_year(year) else 28
    if 1 <= month <= 12:
        return _DAYS_PER_MONTH[month - 1]
    return 30


@dataclass
class Timecode:
    """A full date and time code together with the raw frame it came from."""

    raw_data: LTCFrameExt = field(default_factory=LTCFrameExt)
    timezone: str = "+0000"
    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0
    frame: int = 0
    reverse: bool = False
    received_time: float = 0.0

    @property
    def drop_frame(self) -> bool:
        return bool(self.raw_data.ltc.dfbit)

    def __str__(self) -> str:
        separator = "." if self.raw_data.ltc.dfbit else ":"
        return (
            f"{self.year:04d}/{self.month:02d}/{self.day:02d}[{self.timezone}] "
            f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
            f"{separator}{self.frame:02d}"
        )


def _to_u8(value: float) -> int:
    return min(255, max(0, int(value)))


class Receiver:
    """Decodes LTC from one channel of interleaved floating point audio."""

    def __init__(self, channel_offset: int = 0) -> None:
        self.channel_offset = channel_offset
        self._decoder = Decoder(1920, 32)
        self._total = 0
        self._callback: Callable[[Timecode], None] = lambda _tc: None
        self._started = time.monotonic()

    def on_receive(self, callback: Callable[[Timecode], None]) -> None:
        """Set the function called with every decoded timecode."""
        self._callback = callback

    def audio_in(self, samples: Sequence[float], num_channels: int) -> list[Timecode]:
        """Feed interleaved samples in -1.0..1.0; return the timecodes decoded."""
        if num_channels < 1:
            raise ValueError(f"channel count must be at least 1, got {num_channels}")
        count = len(samples) // num_channels
        pcm = bytes(
            _to_u8((samples[num_channels * i + self.channel_offset] + 1.0) * 127.5)
            for i in range(count)
        )
        self._decoder.write(pcm, self._total)

        received = []
        for ext in self._decoder.frames():
            stime = frame_to_time(ext.ltc, Flags.USE_DATE)
            timecode = Timecode(
                raw_data=ext,
                timezone=stime.timezone,
                year=2000 + stime.years if stime.years < 67 else 1900 + stime.years,
                month=stime.months,
                day=stime.days,
                hour=stime.hours,
                minute=stime.mins,
                second=stime.secs,
                frame=stime.frame,
                reverse=bool(ext.reverse),
                received_time=time.monotonic() - self._started,
            )
            self._callback(timecode)
            received.append(timecode)
        self._total += len(pcm)
        return received


def _default_clock_ms() -> int:
    return int(time.monotonic() * 1000)


class Sender:
    """Plays a running timecode and renders it as LTC audio.

    A background thread started by :meth:`setup` advances the timecode in
    step with ``clock`` (a callable returning milliseconds) while playing.
    """

    def __init__(self) -> None:
        self.clock: Callable[[], int] = _default_clock_ms
        self.encoder: Encoder | None = None
        self.fps = 30.0
        self.sample_rate = 48000
        self.samples_per_frame = 0
        self.channel_offset = 0
        self._playing = False
        self._frames_advanced = 0
        self._playback_start = 0
        self._pause_time = 0
        self._frame_buffer = b""
        self._samples_left = 0
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._current = Timecode()
        self._start_timecode = Timecode()
        self.set_timecode(0, 0, 0, 0)

    def __enter__(self) -> Sender:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def setup(
        self,
        sample_rate: int,
        fps: float,
        drop_frame: bool = False,
        channel_offset: int = 0,
        standard=TVStandard.TV_525_60,
        flags=Flags.USE_DATE,
    ) -> None:
        """Create the encoder and start the timing thread."""
        with self._lock:
            self.fps = float(fps)
            self._current.raw_data.ltc.dfbit = int(drop_frame)
            self.channel_offset = channel_offset
            self.sample_rate = sample_rate
            self.samples_per_frame = math.ceil(sample_rate / fps)
            self.encoder = Encoder(float(sample_rate), float(fps), standard, flags)
            self._samples_left = 0
        if self._thread is None or not self._thread.is_alive():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    def close(self) -> None:
        """Stop the timing thread and release the encoder."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        with self._lock:
            self.encoder = None
            self._playing = False

    def start(self) -> None:
        """Start playback, or resume it after :meth:`stop`."""
        with self._lock:
            if self.encoder is None:
                return
            if not self._playing and self._pause_time > 0:
                self._playback_start += self.clock() - self._pause_time
                self._pause_time = 0
                self._playing = True
                log.info("[LTC] Resumed playback.")
                return
            self._playback_start = self.clock()
            self._start_timecode = copy.deepcopy(self._current)
            self._frames_advanced = 0
            self._playing = True
            log.info("[LTC] Starting playback.")

    def stop(self) -> None:
        """Pause playback."""
        with self._lock:
            if self._playing:
                self._pause_time = self.clock()
                self._playing = False

    def is_playing(self) -> bool:
        return self._playing

    def set_timecode(
        self,
        hour: int,
        minute: int,
        second: int,
        frame: int,
        year: int = 0,
        month: int = 0,
        day: int = 0,
        timezone: str = "+0900",
        drop_frame: bool = False,
        reverse: bool = False,
    ) -> None:
        """Set the current timecode; missing or invalid date parts use today's."""
        today = datetime.date.today()
        if year <= 0:
            year = today.year
        if month <= 0 or month > 12:
            month = today.month
        if day <= 0 or day > days_in_month(year, month):
            day = today.day
        with self._lock:
            tc = self._current
            tc.year = year
            tc.month = month
            tc.day = day
            tc.hour = hour
            tc.minute = minute
            tc.second = second
            tc.frame = frame
            tc.timezone = timezone
            tc.raw_data.ltc.dfbit = int(drop_frame)
            tc.reverse = reverse

    def set_timecode_from(self, timecode: Timecode) -> None:
        """Replace the current timecode with a copy of the given one."""
        with self._lock:
            self._current = copy.deepcopy(timecode)

    def get_timecode(self) -> Timecode:
        """Return a copy of the current timecode."""
        with self._lock:
            return copy.deepcopy(self._current)

    def update_timecode(self) -> None:
        """Advance the current timecode by one frame, rolling over the date."""
        with self._lock:
            tc = self._current
            tc.frame += 1
            if tc.frame < self.fps:
                return
            tc.frame = 0
            tc.second += 1
            if tc.second < 60:
                return
            tc.second = 0
            tc.minute += 1
            if tc.minute < 60:
                return
            tc.minute = 0
            tc.hour += 1
            if tc.hour < 24:
                return
            tc.hour = 0
            tc.day += 1
            if tc.day > days_in_month(tc.year, tc.month):
                tc.day = 1
                tc.month += 1
                if tc.month > 12:
                    tc.month = 1
                    tc.year += 1

    def advance(self, now_ms: int) -> int:
        """Catch the timecode up with the playback clock; return frames advanced."""
        with self._lock:
            if not self._playing:
                return 0
            ms_per_frame = 1000.0 / self.fps
            elapsed = max(0, now_ms - self._playback_start)
            should_have = int(elapsed / ms_per_frame)
            to_advance = should_have - self._frames_advanced
            if to_advance <= 0:
                return 0
            for _ in range(to_advance):
                self.update_timecode()
            self._frames_advanced += to_advance
            return to_advance

    def _require_encoder(self) -> Encoder:
        if self.encoder is None:
            raise RuntimeError("sender is not set up")
        return self.encoder

    def generate_next_frame(self) -> bytes:
        """Encode the current timecode into one LTC frame of samples."""
        with self._lock:
            encoder = self._require_encoder()
            tc = self._current
            smpte = SMPTETimecode(
                hours=tc.hour, mins=tc.minute, secs=tc.second, frame=tc.frame
            )
            if encoder.flags & Flags.USE_DATE:
                smpte.timezone = tc.timezone[:6]
                smpte.years = tc.year % 100
                smpte.months = tc.month
                smpte.days = tc.day
            encoder.set_timecode(smpte)
            frame = encoder.get_frame()
            frame.dfbit = tc.raw_data.ltc.dfbit
            encoder.set_frame(frame)
            encoder.encode_frame()
            self._frame_buffer = encoder.get_buffer(flush=True)
            return self._frame_buffer

    def audio_out(self, num_frames: int, num_channels: int) -> list[float]:
        """Render interleaved audio: LTC on channel 0, silence on channel 1."""
        with self._lock:
            encoder = self._require_encoder()
            samples_per_frame = int(encoder.sample_rate / self.fps)
            out = [0.0] * (num_frames * num_channels)
            for i in range(num_frames):
                if self._samples_left <= 0:
                    self.generate_next_frame()
                    self._samples_left = samples_per_frame
                offset = samples_per_frame - self._samples_left
                sample = (
                    self._frame_buffer[offset]
                    if offset < len(self._frame_buffer)
                    else SAMPLE_CENTER
                )
                out[i * num_channels] = (float(sample) - 128.0) / 127.0
                if num_channels > 1:
                    out[i * num_channels + 1] = 0.0
                self._samples_left -= 1
            return out

    def _run(self) -> None:
        while not self._stop_event.is_set():
            ms_per_frame = 1000.0 / self.fps
            if not self._playing:
                self._stop_event.wait(0.001)
                continue
            self.advance(self.clock())
            self._stop_event.wait(max(0, int(ms_per_frame - 1.0)) / 1000.0)