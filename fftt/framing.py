"""FFTT — stream framing.

Encode side: bytes → consecutive 4-byte blocks, last one zero-padded right.
Decode side: samples → tone windows at fixed offsets 0, S, 2S, … where
S = BLOCK_STRIDE.  No delimiters are transmitted; the constant stride is the
only synchronisation.  A window is taken only while a full stride fits, so
trailing samples shorter than one stride are dropped.
"""

import math
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

from .profiles import BLOCK_BYTES, BLOCK_STRIDE, PCM_DIVISOR, SAMPLE_RATE, TONE_LEN


# ── encode side ───────────────────────────────────────────────────────────────

def split_blocks(data: bytes) -> list[bytes]:
    """Split *data* into 4-byte blocks, zero-padding the last partial block."""
    blocks = []
    for i in range(0, len(data), BLOCK_BYTES):
        block = bytes(data[i:i + BLOCK_BYTES])
        if len(block) < BLOCK_BYTES:
            block += bytes(BLOCK_BYTES - len(block))
        blocks.append(block)
    return blocks


def n_blocks_for_bytes(n_bytes: int) -> int:
    return math.ceil(n_bytes / BLOCK_BYTES)


def audio_duration_s(n_bytes: int) -> float:
    """Encoded audio duration (seconds) for an *n_bytes* input."""
    return n_blocks_for_bytes(n_bytes) * BLOCK_STRIDE / SAMPLE_RATE


# ── decode side ───────────────────────────────────────────────────────────────

def count_blocks(n_samples: int) -> int:
    """Number of complete block strides in *n_samples*."""
    return n_samples // BLOCK_STRIDE


def trailing_samples(n_samples: int) -> int:
    """Samples left over after the last complete stride (discarded)."""
    return n_samples - count_blocks(n_samples) * BLOCK_STRIDE


def iter_tone_windows(samples: NDArray) -> Iterator[NDArray[np.float64]]:
    """Yield each block's tone window scaled to [-1, 1)."""
    samples = np.asarray(samples)
    pos = 0
    while pos + BLOCK_STRIDE <= len(samples):
        yield samples[pos:pos + TONE_LEN].astype(np.float64) / PCM_DIVISOR
        pos += BLOCK_STRIDE
