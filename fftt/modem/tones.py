"""FFTT — block modulator.

One 4-byte block becomes one fixed-length segment:

    [ tone : TONE_LEN samples ][ silence : SILENCE_LEN samples ]

The tone is the sum of one unit sine per set bit, peak-normalised to
FULL_SCALE and truncated to int16.  An all-zero block yields a silent tone.
"""

import numpy as np
from numpy.typing import NDArray

from ..profiles import (
    BLOCK_BYTES, DEFAULT_FREQ_STEP, FULL_SCALE,
    SAMPLE_RATE, SILENCE_LEN, TONE_LEN,
)
from .dsp import bit_frequencies, block_to_bits

# Sample index as float64, computed once; every tone evaluates sin() over it.
_SAMPLE_INDEX = np.arange(TONE_LEN, dtype=np.float64)

SEGMENT_LEN = TONE_LEN + SILENCE_LEN


def synthesize_tone(block: bytes, freq_step: float = DEFAULT_FREQ_STEP) -> NDArray[np.float64]:
    """Unnormalised additive tone for *block* (float64, TONE_LEN samples)."""
    if len(block) != BLOCK_BYTES:
        raise ValueError(f"block must be {BLOCK_BYTES} bytes, got {len(block)}")

    buffer = np.zeros(TONE_LEN, dtype=np.float64)
    bits   = block_to_bits(block)
    freqs  = bit_frequencies(freq_step)

    # Accumulate in bit order so the float sum is reproducible.
    for bit in np.flatnonzero(bits):
        buffer += np.sin(2 * np.pi * freqs[bit] * _SAMPLE_INDEX / SAMPLE_RATE)
    return buffer


def modulate_block(block: bytes, freq_step: float = DEFAULT_FREQ_STEP) -> NDArray[np.int16]:
    """Encode one 4-byte block to a tone + silence segment.

    Returns:
        int16 array of length SEGMENT_LEN.
    """
    buffer = synthesize_tone(block, freq_step)

    peak = np.max(np.abs(buffer))
    if peak > 0:
        # divide first, then scale; the order affects the truncated int16 values
        buffer = buffer / peak * FULL_SCALE

    # astype truncates toward zero
    tone = buffer.astype(np.int16)
    return np.concatenate([tone, np.zeros(SILENCE_LEN, dtype=np.int16)])
