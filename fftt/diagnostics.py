"""FFTT — decode result type and failure codes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureCode(str, Enum):
    """Reason an invocation did not produce output."""

    OK                  = "ok"
    MISSING_INPUT       = "missing_input"        # input path does not exist
    MALFORMED_CONTAINER = "malformed_container"  # no RIFF/WAVE or no 'data' chunk
    INVALID_ARGUMENTS   = "invalid_arguments"    # unknown sub-command / arg count


@dataclass
class DecodeResult:
    """Full decode outcome returned by :func:`fftt.decode_samples`.

    On success  : ``success=True``,  ``data`` holds the recovered bytes
                  (a multiple of 4 long; padding is not stripped).
    On failure  : ``success=False``, ``failure`` explains why, ``data`` is None.
    """

    success:          bool
    data:             Optional[bytes]       = None
    failure:          Optional[FailureCode] = None

    # Diagnostics — populated whenever the container was readable
    blocks_decoded:   int                   = 0
    trailing_samples: int                   = 0   # dropped after the last full stride
    sample_rate:      Optional[int]         = None
    channels:         Optional[int]         = None

    def summary(self) -> str:
        if self.success:
            tail = f" dropped={self.trailing_samples} samples" if self.trailing_samples else ""
            return f"[OK] {len(self.data)} bytes  blocks={self.blocks_decoded}{tail}"
        return f"[FAIL:{self.failure.value}]  blocks={self.blocks_decoded}"

    def __repr__(self) -> str:
        return f"DecodeResult({self.summary()})"
