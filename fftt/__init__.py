"""FFTT — FFT tone transmission: arbitrary bytes over multi-tone audio.

Public API:
    encode_bytes(data, *, profile="v1", freq_step=None)     -> np.ndarray (int16)
    decode_samples(samples, *, profile="v1", freq_step=None) -> DecodeResult
    encode_file(input_path, output_path="encoded.wav", ...)  -> np.ndarray
    decode_file(audio_path, output_path="decoded.bin", ...)  -> DecodeResult
"""

from .api import decode_file, decode_samples, encode_bytes, encode_file
from .diagnostics import DecodeResult, FailureCode
from .logconfig import LogConfig, configure_logging
from .wavio import FormatError

__version__ = "1.0.0"
__all__ = [
    "encode_bytes", "decode_samples", "encode_file", "decode_file",
    "DecodeResult", "FailureCode", "LogConfig", "configure_logging", "FormatError",
]
