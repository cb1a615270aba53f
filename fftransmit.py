#!/usr/bin/env python3
"""
fftransmit.py — FFTT command-line entry point.

Commands:
  encode  <input-file>   Encode any file to tone audio   → encoded.wav
  decode  <audio-file>   Decode tone audio back to bytes → decoded.bin
  info    <audio-file>   Show container fields and block count (no decode)

Output files land in the current working directory unless --output is given.
Run `python3 fftransmit.py --help` for full usage.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from fftt import LogConfig, decode_file, encode_file
from fftt.diagnostics import FailureCode
from fftt.framing import audio_duration_s, count_blocks, trailing_samples
from fftt.profiles import (
    DECODED_NAME, DEFAULT_PROFILE, ENCODED_NAME, PROFILES,
    resolve_freq_step,
)
from fftt.wavio import read_wav_info


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _log_config(args: argparse.Namespace) -> LogConfig:
    return LogConfig(
        log_to_file=args.log_file,
        log_to_terminal=not args.quiet,
        file_prefix=args.log_prefix,
        color_levels=not args.no_color,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )


def _require_input(path: str) -> None:
    """Exit before touching the codec when *path* is missing."""
    if not Path(path).is_file():
        print(f'✗ Input file not found: {path}  [{FailureCode.MISSING_INPUT.value}]',
              file=sys.stderr)
        sys.exit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Sub-command handlers
# ─────────────────────────────────────────────────────────────────────────────

def cmd_encode(args: argparse.Namespace):
    _require_input(args.input)

    encode_file(
        args.input,
        args.output,
        profile=args.profile,
        freq_step=args.freq_step,
        config=_log_config(args),
    )
    dur     = audio_duration_s(os.path.getsize(args.input))
    size_kb = os.path.getsize(args.output) / 1024
    print(f'✓ Encoded to {args.output}  ({dur:.2f}s  {size_kb:.1f} KB, '
          f'freq_step={resolve_freq_step(args.profile, args.freq_step):g} Hz)')


def cmd_decode(args: argparse.Namespace):
    _require_input(args.audio)

    result = decode_file(
        args.audio,
        args.output,
        profile=args.profile,
        freq_step=args.freq_step,
        config=_log_config(args),
    )
    if not result.success:
        print(f'✗ Decode failed: {result.summary()}', file=sys.stderr)
        sys.exit(1)
    print(f'✓ Decoded to {args.output}  {result.summary()}')


def cmd_info(args: argparse.Namespace):
    _require_input(args.audio)

    info = read_wav_info(args.audio)
    n    = len(info.samples)
    print(f'file            : {args.audio}')
    print(f'sample rate     : {info.sample_rate} Hz')
    print(f'channels        : {info.channels}')
    print(f'bits per sample : {info.bits_per_sample}')
    print(f'samples         : {n}  ({info.duration_s:.2f}s)')
    print(f'blocks          : {count_blocks(n)}  ({count_blocks(n) * 4} bytes)')
    print(f'trailing        : {trailing_samples(n)} samples')


# ─────────────────────────────────────────────────────────────────────────────
# Argument parser
# ─────────────────────────────────────────────────────────────────────────────

class _Parser(argparse.ArgumentParser):
    """Prints usage and a tagged message on bad arguments; exits 2, no I/O."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f'✗ {message}  [{FailureCode.INVALID_ARGUMENTS.value}]', file=sys.stderr)
        sys.exit(2)


def _add_common(sp: argparse.ArgumentParser) -> None:
    sp.add_argument('--profile', default=DEFAULT_PROFILE, choices=list(PROFILES),
                    help=f'Protocol version / tone spacing (default: {DEFAULT_PROFILE})')
    sp.add_argument('--freq-step', type=float, default=None, metavar='HZ',
                    help='Explicit tone spacing in Hz (overrides --profile)')
    sp.add_argument('--log-file', action='store_true',
                    help='Also write log records to <prefix>-YYYYMMDD.log')
    sp.add_argument('--log-prefix', default='fftt', metavar='NAME',
                    help='Log file name prefix (default: fftt)')
    sp.add_argument('--no-color', action='store_true',
                    help='Disable coloured log levels')
    sp.add_argument('--quiet', action='store_true',
                    help='Do not log to the terminal')
    sp.add_argument('-V', '--verbose', action='store_true',
                    help='Enable debug logging')


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog='fftt',
        description='FFTT — transmit arbitrary files as multi-tone audio.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 fftransmit.py encode photo.jpg                  # → encoded.wav
  python3 fftransmit.py decode encoded.wav                # → decoded.bin
  python3 fftransmit.py encode notes.txt --profile v2     # 75 Hz tone spacing
  python3 fftransmit.py decode rx.wav --freq-step 75 -o notes.txt
  python3 fftransmit.py info encoded.wav
""",
    )
    sub = p.add_subparsers(dest='command', required=True)

    # ── encode ────────────────────────────────────────────────────────────────
    enc = sub.add_parser('encode', help='Encode a file to tone audio (WAV).')
    enc.add_argument('input', help='File to encode')
    enc.add_argument('-o', '--output', default=ENCODED_NAME,
                     help=f'Output WAV path (default: {ENCODED_NAME})')
    _add_common(enc)
    enc.set_defaults(func=cmd_encode)

    # ── decode ────────────────────────────────────────────────────────────────
    dec = sub.add_parser('decode', help='Decode tone audio (WAV) back to bytes.')
    dec.add_argument('audio', help='WAV file to decode')
    dec.add_argument('-o', '--output', default=DECODED_NAME,
                     help=f'Output path (default: {DECODED_NAME})')
    _add_common(dec)
    dec.set_defaults(func=cmd_decode)

    # ── info ──────────────────────────────────────────────────────────────────
    inf = sub.add_parser('info', help='Show WAV container fields and block count.')
    inf.add_argument('audio', help='WAV file to inspect')
    inf.set_defaults(func=cmd_info)

    return p


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None):
    parser = build_parser()
    args   = parser.parse_args(argv)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print('\n⚠ Interrupted.', file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f'✗ Error: {e}', file=sys.stderr)
        if os.environ.get('FFTT_DEBUG'):
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
