# ltcodec

Encode and decode SMPTE Linear Timecode (LTC) as audio.

LTC carries hours, minutes, seconds and frames, with an optional SMPTE 309M
date and timezone, in an 80-bit biphase-mark audio signal. `ltcodec` builds
and parses those frames, turns them into 8-bit unsigned audio samples and
reads them back from a sample stream. It also has a small transport layer
that keeps a running clock and fills or consumes interleaved audio buffers.

The package has no dependencies outside the standard library.

## Installation

```
pip install ltcodec
```

## Modules

- `ltcodec.frame` – `LTCFrame` (the 80-bit frame, every field masked to its
  bit width), `SMPTETimecode`, `TVStandard`, `Flags` and `frame_alignment()`.
- `ltcodec.smpte` – `frame_to_time()`, `time_to_frame()`, and the SMPTE
  timezone lookups `timezone_string()` and `timezone_code()`.
- `ltcodec.timecode` – `frame_increment()`, `frame_decrement()` and
  `skip_drop_frames()`.
- `ltcodec.encoder` – `Encoder` and `EncoderError`.
- `ltcodec.decoder` – `Decoder` and `LTCFrameExt`.
- `ltcodec.transport` – `Sender`, `Receiver`, `Timecode`, `is_leap_year()`
  and `days_in_month()`.

## Working with frames

```python
from ltcodec.frame import LTCFrame, TVStandard, Flags, SMPTETimecode
from ltcodec.smpte import frame_to_time, time_to_frame
from ltcodec.timecode import frame_increment

frame = LTCFrame()
stime = SMPTETimecode(timezone="+0900", years=24, months=12, days=31,
                      hours=23, mins=59, secs=59, frame=29)
time_to_frame(frame, stime, TVStandard.TV_525_60, Flags.USE_DATE)

wrapped = frame_increment(frame, 30, TVStandard.TV_525_60, Flags.USE_DATE)
print(wrapped)                                # 1: the day rolled over
print(frame_to_time(frame, Flags.USE_DATE))
# SMPTETimecode(timezone='+0900', years=25, months=1, days=1,
#               hours=0, mins=0, secs=0, frame=0)
```

`frame_increment()` and `frame_decrement()` return 1 when the time wraps
around midnight, -1 when it wraps but the stored month is invalid, and 0
otherwise. With the frame's `dfbit` set, drop-frame numbering is applied.
Unless `Flags.NO_PARITY` is given, the parity bit is recomputed.

`LTCFrame.to_bytes()` and `LTCFrame.from_bytes()` convert to and from the
ten-byte wire layout; `get_user_bits()` and `set_user_bits()` treat the eight
user-bit nibbles as one 32-bit value, and `bgf_flags()` reads the Binary
Group Flags for a given TV standard.

## Encoding audio

```python
from ltcodec.encoder import Encoder
from ltcodec.frame import TVStandard, Flags

enc = Encoder(48000, 25, TVStandard.TV_625_50, Flags.USE_DATE)
enc.set_timecode(stime)
enc.encode_frame()
samples = enc.get_buffer(True)   # one frame of 8-bit unsigned audio, as bytes
enc.inc_timecode()
```

The default level is -3 dBFS (samples 38..218); change it with
`set_volume()`. `set_filter(0)` produces a perfect square wave instead of the
default 40 µs rise time. `encode_byte(byte, speed)` encodes a single byte of
the frame, in reverse bit order for a negative speed. Invalid settings,
arguments and buffer overflow in `encode_byte()` raise `EncoderError`; the
buffer holds one frame at normal speed unless enlarged with `set_bufsize()`.

## Decoding audio

```python
from ltcodec.decoder import Decoder

dec = Decoder(1920, 32)          # audio samples per video frame, queue size
dec.write(samples, 0)
for ext in dec.frames():
    print(ext.ltc, ext.off_start, ext.off_end, ext.reverse, ext.volume)
```

`write_float`, `write_s16` and `write_u16` accept other sample formats.
`read()` returns the oldest queued `LTCFrameExt` or `None`, `len(dec)` gives
the number waiting and `flush()` empties the queue. The queue is a ring, so at
most `queue_size - 1` frames can wait; older ones are overwritten.

## Transport

`ltcodec.transport.Sender` keeps a `Timecode` that advances with a clock once
`start()` is called; `stop()` pauses and a later `start()` resumes. `setup()`
creates the encoder and starts a background thread that keeps the timecode
in step; `close()` (or leaving a `with` block) stops it. `advance(now_ms)`
catches the timecode up by hand, and `audio_out(num_frames, num_channels)`
returns interleaved floats with LTC on the first channel and silence on the
second.

`ltcodec.transport.Receiver` takes interleaved float samples through
`audio_in(samples, num_channels)`, decodes the channel at `channel_offset`,
passes every decoded `Timecode` to the callback set with `on_receive()` and
returns them as a list. `str(timecode)` gives a form such as
`2024/05/01[+0900] 12:34:56:10`, with `.` before the frame for drop-frame.

## What it does not do

`ltcodec` does not open sound devices or play and record audio itself: it only
turns timecode into sample buffers and sample buffers into timecode. Moving
those buffers to and from an audio interface is left to the caller. There is
no command-line tool.