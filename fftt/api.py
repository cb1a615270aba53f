"""FFTT — high-level encode / decode API.

encode_bytes(data, *, profile, freq_step)            -> np.ndarray  (int16 @ 44.1 kHz)
decode_samples(samples, *, profile, freq_step)       -> DecodeResult
encode_file(input_path, output_path, *, ..., config) -> np.ndarray
decode_file(audio_path, output_path, *, ..., config) -> DecodeResult

Full pipeline
=============

Encode
------
  bytes
    → 4-byte blocks, last one zero-padded          (framing.split_blocks)
    → per block: additive tones + silence          (modem.tones.modulate_block)
    → concatenate → int16 samples
    → canonical 44-byte-header WAV                 (wavio.write_wav)

Decode
------
  WAV file
    → int16 payload + fmt fields                   (wavio.read_wav_info)
    → tone windows at fixed stride, / 32768        (framing.iter_tone_windows)
    → per window: FFT + threshold → 4 bytes        (modem.detect.demodulate_block)
    → concatenate → bytes (padding kept)
"""

import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from .diagnostics import DecodeResult, FailureCode
from .framing import count_blocks, iter_tone_windows, split_blocks, trailing_samples
from .logconfig import LogConfig, configure_logging
from .modem.detect import demodulate_block
from .modem.tones import modulate_block
from .profiles import (
    DECODED_NAME, DEFAULT_PROFILE, ENCODED_NAME, SAMPLE_RATE,
    resolve_freq_step,
)
from .wavio import FormatError, read_wav_info, write_wav

log = logging.getLogger(__name__)


# ── in-memory ─────────────────────────────────────────────────────────────────

def encode_bytes(
    data: bytes,
    *,
    profile: str = DEFAULT_PROFILE,
    freq_step: float | None = None,
) -> NDArray[np.int16]:
    """Encode *data* to int16 44.1 kHz mono samples.

    Args:
        data:      Arbitrary bytes.  An empty input yields an empty array.
        profile:   "v1" (default, 20 Hz spacing) or "v2" (75 Hz spacing).
        freq_step: Explicit tone spacing in Hz; overrides *profile*.

    Returns:
        int16 ndarray of length n_blocks × BLOCK_STRIDE.
    """
    step   = resolve_freq_step(profile, freq_step)
    blocks = split_blocks(data)
    log.debug("encoding %d bytes as %d blocks  freq_step=%.1f Hz",
              len(data), len(blocks), step)

    if not blocks:
        return np.zeros(0, dtype=np.int16)
    return np.concatenate([modulate_block(b, step) for b in blocks])


def decode_samples(
    samples: NDArray,
    *,
    profile: str = DEFAULT_PROFILE,
    freq_step: float | None = None,
    sample_rate: int = SAMPLE_RATE,
    channels: int = 1,
) -> DecodeResult:
    """Decode raw int16-valued samples back to bytes.

    *sample_rate* and *channels* are informational only: framing always uses
    the protocol constants.

    Returns:
        :class:`DecodeResult` — always ``success=True``; any samples shorter
        than one full block stride at the end are reported in
        ``trailing_samples`` and ignored.
    """
    step    = resolve_freq_step(profile, freq_step)
    samples = np.asarray(samples)

    if sample_rate != SAMPLE_RATE:
        log.warning("container sample rate %d Hz != %d Hz; decoding with protocol rate",
                    sample_rate, SAMPLE_RATE)
    if channels != 1:
        log.warning("container declares %d channels; treating samples as mono", channels)

    out = bytearray()
    for window in iter_tone_windows(samples):
        out += demodulate_block(window, step)

    n_blocks = count_blocks(len(samples))
    dropped  = trailing_samples(len(samples))
    if dropped:
        log.debug("discarding %d trailing samples", dropped)

    return DecodeResult(
        success=True,
        data=bytes(out),
        failure=FailureCode.OK,
        blocks_decoded=n_blocks,
        trailing_samples=dropped,
        sample_rate=sample_rate,
        channels=channels,
    )


# ── file-level ────────────────────────────────────────────────────────────────

def encode_file(
    input_path,
    output_path=ENCODED_NAME,
    *,
    profile: str = DEFAULT_PROFILE,
    freq_step: float | None = None,
    config: LogConfig | None = None,
) -> NDArray[np.int16]:
    """Read *input_path*, encode it and write a WAV to *output_path*.

    Raises:
        FileNotFoundError: *input_path* does not exist.
    """
    logger = configure_logging(config)
    data   = Path(input_path).read_bytes()
    logger.info("→ encode  %s  (%d bytes, profile=%s%s)", input_path, len(data), profile,
                f", freq_step={freq_step}" if freq_step is not None else "")

    samples = encode_bytes(data, profile=profile, freq_step=freq_step)
    write_wav(output_path, samples)
    logger.info("✓ wrote %s  (%d samples, %.2fs)",
                output_path, len(samples), len(samples) / SAMPLE_RATE)
    return samples


def decode_file(
    audio_path,
    output_path=DECODED_NAME,
    *,
    profile: str = DEFAULT_PROFILE,
    freq_step: float | None = None,
    config: LogConfig | None = None,
) -> DecodeResult:
    """Read the WAV at *audio_path*, decode it and write bytes to *output_path*.

    Nothing is written when the container is malformed.

    Raises:
        FileNotFoundError: *audio_path* does not exist.
    """
    logger = configure_logging(config)
    logger.info("→ decode  %s  (profile=%s%s)", audio_path, profile,
                f", freq_step={freq_step}" if freq_step is not None else "")

    try:
        info = read_wav_info(audio_path)
    except FormatError as exc:
        logger.error("✗ %s: %s", audio_path, exc)
        return DecodeResult(success=False, failure=FailureCode.MALFORMED_CONTAINER)

    result = decode_samples(
        info.samples,
        profile=profile,
        freq_step=freq_step,
        sample_rate=info.sample_rate,
        channels=info.channels,
    )
    Path(output_path).write_bytes(result.data)
    logger.info("✓ wrote %s  %s", output_path, result.summary())
    return result
