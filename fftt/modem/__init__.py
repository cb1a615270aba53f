from .detect import bin_magnitudes, demodulate_block
from .tones import SEGMENT_LEN, modulate_block

__all__ = ["modulate_block", "demodulate_block", "bin_magnitudes", "SEGMENT_LEN"]
