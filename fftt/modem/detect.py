"""FFTT — spectral demodulator.

Decoding pipeline for one tone window
-------------------------------------
  float64 window in [-1, 1)   (TONE_LEN samples, silence already excluded)
    → zero-pad to next power of two       (4410 → 8192)
    → forward FFT, unnormalised           (numpy.fft.fft)
    → |X[k]| for the first fft_size/2 bins
    → for each bit: |X[bin(freq)]| > threshold → set bit

There is no margin or hysteresis; a magnitude near the threshold can flip a
bit.  Closely spaced tone grids also leak rectangular-window side lobes into
neighbouring bins, so dense multi-bit blocks may decode extra bits.
"""

import numpy as np
from numpy.typing import NDArray

from ..profiles import DEFAULT_FREQ_STEP, DETECTION_THRESHOLD, SAMPLE_RATE
from .dsp import bin_index, bit_frequencies, bits_to_block, fft_size_for


def bin_magnitudes(
    window: NDArray[np.floating],
    freq_step: float = DEFAULT_FREQ_STEP,
) -> NDArray[np.float64]:
    """Raw FFT magnitude at every bit's expected bin.

    Args:
        window:    tone-length samples, pre-scaled to [-1, 1).
        freq_step: tone spacing; must match the encoder.

    Returns:
        float64 array of shape (32,).

    Raises:
        ValueError: a tone bin falls outside the non-negative half-spectrum
                    (tone at or above Nyquist, or an empty window).
    """
    window   = np.asarray(window, dtype=np.float64)
    fft_size = fft_size_for(len(window))
    half     = fft_size // 2
    freqs    = bit_frequencies(freq_step)

    idx = np.array([bin_index(f, fft_size, SAMPLE_RATE) for f in freqs], dtype=np.intp)
    if idx.max() >= half:
        raise ValueError(
            f"{freqs[-1]:.1f} Hz tone has no bin in a {len(window)}-sample window "
            f"(fft_size={fft_size}, Nyquist={SAMPLE_RATE / 2:.0f} Hz)"
        )

    spectrum   = np.fft.fft(window, n=fft_size)
    magnitudes = np.abs(spectrum[:half])
    return magnitudes[idx]


def demodulate_block(
    window: NDArray[np.floating],
    freq_step: float = DEFAULT_FREQ_STEP,
    threshold: float = DETECTION_THRESHOLD,
) -> bytes:
    """Recover one 4-byte block from a tone window."""
    bits = (bin_magnitudes(window, freq_step) > threshold).astype(np.uint8)
    return bits_to_block(bits)
