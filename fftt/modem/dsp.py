"""FFTT — shared tone-grid helpers used by both modulator and demodulator.

Index arithmetic truncates toward zero (``int()``); both ends of the link
must agree on every bin, so never ``round()``.
"""

import numpy as np
from numpy.typing import NDArray

from ..profiles import BASE_FREQ, BITS_PER_BLOCK, DEFAULT_FREQ_STEP, SAMPLE_RATE


def bit_frequencies(freq_step: float = DEFAULT_FREQ_STEP) -> NDArray[np.float64]:
    """Tone frequency (Hz) for every bit index 0..31."""
    return np.array(
        [BASE_FREQ + bit * freq_step for bit in range(BITS_PER_BLOCK)],
        dtype=np.float64,
    )


def fft_size_for(n_samples: int) -> int:
    """Smallest power of two ≥ *n_samples* (1 for an empty window)."""
    size = 1
    while size < n_samples:
        size *= 2
    return size


def bin_index(freq: float, fft_size: int, sr: int = SAMPLE_RATE) -> int:
    """FFT bin holding *freq* for an *fft_size*-point transform."""
    return int(freq / sr * fft_size)


def block_to_bits(block: bytes) -> NDArray[np.uint8]:
    """Unpack a 4-byte block to 32 bits, byte-major, LSB first within a byte.

    bit k  =  (block[k // 8] >> (k % 8)) & 1
    """
    return np.unpackbits(np.frombuffer(block, dtype=np.uint8), bitorder="little")


def bits_to_block(bits: NDArray[np.uint8]) -> bytes:
    """Inverse of :func:`block_to_bits`."""
    return np.packbits(np.asarray(bits, dtype=np.uint8), bitorder="little").tobytes()
