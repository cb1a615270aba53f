"""FFTT — minimal RIFF/WAVE container: mono 16-bit PCM in, 16-bit PCM out.

Writer layout (canonical 44-byte header, all integers little-endian):
  [0:4]   "RIFF"
  [4:8]   uint32  36 + data_len
  [8:12]  "WAVE"
  [12:16] "fmt "
  [16:20] uint32  16
  [20:22] uint16  1        PCM
  [22:24] uint16  1        mono
  [24:28] uint32  sample_rate
  [28:32] uint32  sample_rate × 2
  [32:34] uint16  2        block align
  [34:36] uint16  16       bits per sample
  [36:40] "data"
  [40:44] uint32  data_len
  [44:]   int16 LE samples

The reader scans chunks by id + length, keeps the first "data" payload and
ignores everything after it.  Payload bytes are always read as int16,
whatever bit depth the "fmt " chunk declares.
"""

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from .profiles import SAMPLE_RATE

log = logging.getLogger(__name__)

HEADER_LEN = 44

_RIFF_HEAD = struct.Struct("<4sI4s")
_CHUNK_HEAD = struct.Struct("<4sI")
# audio_format, channels, sample_rate, byte_rate, block_align, bits_per_sample
_FMT_BODY = struct.Struct("<HHIIHH")
assert _FMT_BODY.size == 16


class FormatError(ValueError):
    """The byte stream is not a WAV container this reader understands."""


@dataclass
class WavInfo:
    """Everything the reader extracts from a container."""

    samples:         NDArray[np.int16] = field(
        default_factory=lambda: np.zeros(0, dtype=np.int16))
    channels:        int = 1
    sample_rate:     int = SAMPLE_RATE
    bits_per_sample: int = 16

    @property
    def duration_s(self) -> float:
        return len(self.samples) / self.sample_rate if self.sample_rate else 0.0


# ── write ─────────────────────────────────────────────────────────────────────

def pack_wav(samples: NDArray[np.int16], sample_rate: int = SAMPLE_RATE) -> bytes:
    """Serialise *samples* as a canonical mono 16-bit PCM WAV."""
    pcm_bytes = np.asarray(samples, dtype="<i2").tobytes()

    fmt_chunk = (b"fmt "
                 + struct.pack("<I", 16)
                 + _FMT_BODY.pack(1, 1, sample_rate, sample_rate * 2, 2, 16))

    data_chunk = b"data" + struct.pack("<I", len(pcm_bytes)) + pcm_bytes

    riff_data = b"WAVE" + fmt_chunk + data_chunk
    return b"RIFF" + struct.pack("<I", len(riff_data)) + riff_data


def write_wav(path, samples: NDArray[np.int16], sample_rate: int = SAMPLE_RATE) -> None:
    with open(path, "wb") as f:
        f.write(pack_wav(samples, sample_rate))


# ── read ──────────────────────────────────────────────────────────────────────

def unpack_wav(data: bytes) -> WavInfo:
    """Parse a WAV byte string.

    Raises:
        FormatError: bad RIFF/WAVE tags, short "fmt " chunk, or no "data"
                     chunk before the end of the stream.
    """
    if len(data) < _RIFF_HEAD.size:
        raise FormatError(f"Data too short for RIFF header: {len(data)} bytes")

    riff, _riff_size, wave = _RIFF_HEAD.unpack_from(data, 0)
    if riff != b"RIFF" or wave != b"WAVE":
        raise FormatError(f"Not a RIFF/WAVE stream: {riff!r}/{wave!r}")

    info = WavInfo()
    idx  = _RIFF_HEAD.size
    payload: bytes | None = None

    while idx + _CHUNK_HEAD.size <= len(data):
        chunk_id, chunk_size = _CHUNK_HEAD.unpack_from(data, idx)
        body = idx + _CHUNK_HEAD.size

        if chunk_id == b"fmt ":
            if chunk_size < _FMT_BODY.size or body + _FMT_BODY.size > len(data):
                raise FormatError(f"'fmt ' chunk too short: {chunk_size} bytes")
            (_audio_format, info.channels, info.sample_rate,
             _byte_rate, _block_align, info.bits_per_sample) = _FMT_BODY.unpack_from(data, body)
        elif chunk_id == b"data":
            payload = data[body:body + chunk_size]
            break
        else:
            log.debug("skipping %r chunk (%d bytes)", chunk_id, chunk_size)

        # chunks are skipped by their declared length, no pad byte
        idx = body + chunk_size

    if payload is None:
        raise FormatError("No 'data' chunk found in WAV stream")

    if info.bits_per_sample != 16:
        log.warning("container declares %d-bit samples; reading payload as 16-bit",
                    info.bits_per_sample)

    n_samples    = len(payload) // 2
    info.samples = np.frombuffer(payload[:n_samples * 2], dtype="<i2").astype(np.int16)
    return info


def read_wav_info(path) -> WavInfo:
    return unpack_wav(Path(path).read_bytes())


def read_wav(path) -> tuple[NDArray[np.int16], int, int]:
    """Read a WAV file.  Returns ``(samples int16, channels, sample_rate)``."""
    info = read_wav_info(path)
    return info.samples, info.channels, info.sample_rate
