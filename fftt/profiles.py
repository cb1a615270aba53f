"""FFTT — all protocol constants, keyed in one place.

Nothing here is computed at runtime except the derived sample counts at the
bottom.  These values form the wire protocol: an encoder and a decoder must
agree on every one of them or decoding silently recovers the wrong bits.
"""

# ── Sampling / framing ────────────────────────────────────────────────────────
SAMPLE_RATE      = 44_100    # Hz, mono
TONE_DURATION    = 0.1       # seconds of tone per block
SILENCE_DURATION = 0.05      # seconds of silence after every tone

BLOCK_BYTES    = 4
BITS_PER_BLOCK = BLOCK_BYTES * 8   # 32

# ── Tone grid ─────────────────────────────────────────────────────────────────
# bit k  →  BASE_FREQ + k × freq_step
BASE_FREQ = 500.0

# FreqStep is the only constant that differs between protocol versions.
# v1 and v2 are NOT interchangeable; both ends must pick the same one.
PROFILES: dict[str, dict] = {
    "v1": {
        "freq_step": 20.0,   # 500 … 1120 Hz
    },
    "v2": {
        "freq_step": 75.0,   # 500 … 2825 Hz
    },
}
DEFAULT_PROFILE   = "v1"
DEFAULT_FREQ_STEP = PROFILES[DEFAULT_PROFILE]["freq_step"]

# ── Amplitude ─────────────────────────────────────────────────────────────────
FULL_SCALE  = 32767      # int16 max; tone segments are peak-normalised to this
PCM_DIVISOR = 32768.0    # decode-side int16 → [-1, 1) scaling

# Raw (unnormalised) FFT magnitude above which a bit is considered set.
DETECTION_THRESHOLD = 50.0

# ── Derived sample counts (truncated, never rounded) ──────────────────────────
TONE_LEN     = int(SAMPLE_RATE * TONE_DURATION)                       # 4410
SILENCE_LEN  = int(SAMPLE_RATE * SILENCE_DURATION)                    # 2205
BLOCK_STRIDE = int(SAMPLE_RATE * (TONE_DURATION + SILENCE_DURATION))  # 6615

# ── Default output file names (written to the working directory) ──────────────
ENCODED_NAME = "encoded.wav"
DECODED_NAME = "decoded.bin"


def resolve_freq_step(profile: str = DEFAULT_PROFILE,
                      freq_step: float | None = None) -> float:
    """Return the tone spacing for *profile*, or *freq_step* when given.

    An explicit *freq_step* must be positive and keep the highest tone below
    Nyquist; otherwise the encoder would emit aliased tones no decoder can read.
    """
    if freq_step is not None:
        if freq_step <= 0:
            raise ValueError(f"freq_step must be positive, got {freq_step}")
        top = BASE_FREQ + (BITS_PER_BLOCK - 1) * freq_step
        if top >= SAMPLE_RATE / 2:
            raise ValueError(
                f"freq_step {freq_step:g} Hz puts bit {BITS_PER_BLOCK - 1} at {top:g} Hz, "
                f"at or above Nyquist ({SAMPLE_RATE / 2:g} Hz)"
            )
        return float(freq_step)
    if profile not in PROFILES:
        raise ValueError(
            f"Unknown profile '{profile}': choose from {list(PROFILES)}"
        )
    return PROFILES[profile]["freq_step"]
