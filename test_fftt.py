#!/usr/bin/env python3
"""
test_fftt.py — FFTT modem / framing / API / CLI test suite.

Tests:
  1. Segment length and zero-block invariants
  2. Bit-0 pure tone scenario
  3. Per-bit detection (own bin above threshold, isolation on a wide grid)
  4. Framing: round-trips, padding, block independence, trailing samples
  5. File-level API and logging configuration
  6. CLI contract

Round-trips that must decode exactly use single-bit blocks on a 200 Hz grid:
tones closer than ~150 Hz leak rectangular-window side lobes above the
detection threshold, so dense blocks on v1/v2 can pick up extra bits.
"""
from __future__ import annotations
import logging, os, sys
sys.path.insert(0, os.path.dirname(__file__))

import numpy as np
import pytest
from colorama import Fore

import fftransmit
from fftt import (
    DecodeResult, FailureCode, LogConfig, configure_logging,
    decode_file, decode_samples, encode_bytes, encode_file,
)
from fftt.framing import audio_duration_s, iter_tone_windows, split_blocks
from fftt.logconfig import ROOT_LOGGER
from fftt.modem import SEGMENT_LEN, bin_magnitudes, demodulate_block, modulate_block
from fftt.modem.dsp import bin_index, bit_frequencies, block_to_bits, fft_size_for
from fftt.profiles import (
    BLOCK_STRIDE, DEFAULT_FREQ_STEP, DEFAULT_PROFILE, DETECTION_THRESHOLD,
    PCM_DIVISOR, SILENCE_LEN, TONE_LEN,
    resolve_freq_step,
)
from fftt.wavio import write_wav

WIDE_STEP = 200.0


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def single_bit_block(bit: int) -> bytes:
    block = bytearray(4)
    block[bit // 8] = 1 << (bit % 8)
    return bytes(block)


def tone_window(block: bytes, freq_step: float) -> np.ndarray:
    return modulate_block(block, freq_step)[:TONE_LEN] / PCM_DIVISOR


def roundtrip(data: bytes, **kwargs) -> bytes:
    return decode_samples(encode_bytes(data, **kwargs), **kwargs).data


@pytest.fixture(autouse=True)
def _quiet_logging():
    configure_logging(LogConfig(log_to_terminal=False))
    yield
    configure_logging(LogConfig(log_to_terminal=False))


# ─────────────────────────────────────────────────────────────────────────────
# 1. Invariants
# ─────────────────────────────────────────────────────────────────────────────

def test_derived_sample_counts():
    assert (TONE_LEN, SILENCE_LEN, BLOCK_STRIDE) == (4410, 2205, 6615)
    assert SEGMENT_LEN == BLOCK_STRIDE


@pytest.mark.parametrize('block', [bytes(4), b'\xff' * 4, b'\x01\x00\x00\x00', b'\xde\xad\xbe\xef'])
@pytest.mark.parametrize('step', [20.0, 75.0])
def test_segment_length_is_constant(block, step):
    seg = modulate_block(block, step)
    assert seg.dtype == np.int16
    assert len(seg) == TONE_LEN + SILENCE_LEN
    assert not seg[TONE_LEN:].any()


def test_zero_block_is_silent():
    assert not modulate_block(bytes(4)).any()
    assert demodulate_block(np.zeros(TONE_LEN)) == bytes(4)


def test_full_block_peaks_at_full_scale():
    tone = modulate_block(b'\xff' * 4)[:TONE_LEN]
    assert np.abs(tone).max() == 32767


def test_block_must_be_four_bytes():
    with pytest.raises(ValueError):
        modulate_block(b'\x01\x02\x03')


def test_bit_order_is_byte_major_lsb_first():
    bits = block_to_bits(b'\x01\x80\x00\x02')
    assert np.flatnonzero(bits).tolist() == [0, 15, 25]


def test_tone_grid():
    freqs = bit_frequencies(75.0)
    assert freqs[0] == 500.0 and freqs[31] == 500.0 + 31 * 75.0
    assert fft_size_for(TONE_LEN) == 8192
    assert bin_index(500.0, 8192) == 92          # 92.88 truncated


# ─────────────────────────────────────────────────────────────────────────────
# 2. Bit-0 scenario
# ─────────────────────────────────────────────────────────────────────────────

def test_bit0_is_pure_500hz_full_scale():
    tone = modulate_block(b'\x01\x00\x00\x00', 20.0)[:TONE_LEN]

    s        = np.arange(TONE_LEN, dtype=np.float64)
    sine     = np.sin(2 * np.pi * 500.0 * s / 44100)
    expected = (sine / np.max(np.abs(sine)) * 32767).astype(np.int16)
    assert np.array_equal(tone, expected)
    assert np.abs(tone).max() == 32767

    # 10 Hz rfft resolution over 4410 samples puts 500 Hz exactly on a bin
    freqs = np.fft.rfftfreq(TONE_LEN, 1.0 / 44100)
    assert freqs[np.argmax(np.abs(np.fft.rfft(tone)))] == pytest.approx(500.0)


def test_bit0_roundtrip_default_profile():
    assert demodulate_block(tone_window(b'\x01\x00\x00\x00', 75.0), 75.0) == b'\x01\x00\x00\x00'


def test_narrow_grid_leaks_into_neighbour_bit():
    # 20 Hz spacing: bit 1's bin sits on bit 0's first side lobe
    window = tone_window(b'\x01\x00\x00\x00', 20.0)
    mags   = bin_magnitudes(window, 20.0)
    assert mags[1] > DETECTION_THRESHOLD
    assert demodulate_block(window, 20.0)[0] & 0x03 == 0x03


# ─────────────────────────────────────────────────────────────────────────────
# 3. Per-bit detection
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize('step', [20.0, 75.0, WIDE_STEP])
def test_own_bin_exceeds_threshold_for_every_bit(step):
    for bit in range(32):
        mags = bin_magnitudes(tone_window(single_bit_block(bit), step), step)
        assert mags[bit] > DETECTION_THRESHOLD, f'bit {bit}: {mags[bit]:.1f}'


def test_single_bit_isolation_on_wide_grid():
    for bit in range(32):
        block = single_bit_block(bit)
        assert demodulate_block(tone_window(block, WIDE_STEP), WIDE_STEP) == block


def test_threshold_is_strict():
    window = tone_window(single_bit_block(5), WIDE_STEP)
    level  = bin_magnitudes(window, WIDE_STEP)[5]
    assert demodulate_block(window, WIDE_STEP, threshold=level) == bytes(4)


def test_tone_above_nyquist_rejected():
    with pytest.raises(ValueError):
        bin_magnitudes(np.zeros(TONE_LEN), freq_step=1000.0)
    with pytest.raises(ValueError):
        bin_magnitudes(np.zeros(0))


# ─────────────────────────────────────────────────────────────────────────────
# 4. Framing
# ─────────────────────────────────────────────────────────────────────────────

def test_split_blocks_pads_last_block():
    assert split_blocks(b'') == []
    assert split_blocks(b'abcdefg') == [b'abcd', b'efg\x00']
    assert audio_duration_s(5) == pytest.approx(2 * 6615 / 44100)


def test_empty_input_roundtrip():
    samples = encode_bytes(b'')
    assert len(samples) == 0
    result = decode_samples(samples)
    assert result.success and result.data == b'' and result.blocks_decoded == 0


def test_roundtrip_multiple_of_four():
    data = b''.join(single_bit_block(b) for b in range(32)) + bytes(4)
    assert roundtrip(data, freq_step=WIDE_STEP) == data


def test_roundtrip_pads_partial_block():
    data = bytes([0x01, 0, 0, 0,  0, 0x10, 0, 0,  0, 0, 0, 0x80,  0x04])
    assert roundtrip(data, freq_step=WIDE_STEP) == data + bytes(3)


def test_encoded_length():
    assert len(encode_bytes(b'\x00' * 9)) == 3 * BLOCK_STRIDE


def test_block_independence():
    a, b = single_bit_block(3), single_bit_block(20)
    seg_a, seg_b = encode_bytes(a), encode_bytes(b)
    assert np.array_equal(encode_bytes(a + b), np.concatenate([seg_a, seg_b]))
    assert np.array_equal(encode_bytes(b + a), np.concatenate([seg_b, seg_a]))

    both = encode_bytes(b + a, freq_step=WIDE_STEP)
    assert decode_samples(both, freq_step=WIDE_STEP).data == b + a


def test_trailing_samples_discarded():
    data    = single_bit_block(9) + single_bit_block(30)
    samples = encode_bytes(data, freq_step=WIDE_STEP)

    padded = decode_samples(np.concatenate([samples, np.zeros(100, dtype=np.int16)]),
                            freq_step=WIDE_STEP)
    assert padded.data == data
    assert (padded.blocks_decoded, padded.trailing_samples) == (2, 100)

    short = decode_samples(samples[:-1], freq_step=WIDE_STEP)
    assert short.data == data[:4]
    assert short.trailing_samples == BLOCK_STRIDE - 1


def test_windows_exclude_silence():
    samples = encode_bytes(b'\xff' * 8)
    windows = list(iter_tone_windows(samples))
    assert len(windows) == 2
    assert all(len(w) == TONE_LEN for w in windows)
    assert np.abs(windows[0]).max() == pytest.approx(32767 / 32768)


def test_profiles():
    assert resolve_freq_step('v1') == 20.0
    assert resolve_freq_step('v2') == 75.0
    assert resolve_freq_step('v1', 33.0) == 33.0
    with pytest.raises(ValueError):
        resolve_freq_step('v9')
    with pytest.raises(ValueError):
        resolve_freq_step('v2', 0)
    with pytest.raises(ValueError):
        resolve_freq_step('v1', 1400.0)      # bit 31 at 43 900 Hz
    assert resolve_freq_step('v1', 600.0) == 600.0   # bit 31 at 19 100 Hz


def test_default_profile_is_20hz_grid():
    assert DEFAULT_PROFILE == 'v1'
    assert DEFAULT_FREQ_STEP == 20.0
    block = single_bit_block(0)
    assert np.array_equal(encode_bytes(block), encode_bytes(block, freq_step=20.0))


def test_encode_rejects_step_above_nyquist():
    with pytest.raises(ValueError, match='Nyquist'):
        encode_bytes(b'\xff' * 4, freq_step=1400.0)
    with pytest.raises(ValueError, match='Nyquist'):
        decode_samples(np.zeros(BLOCK_STRIDE, dtype=np.int16), freq_step=1400.0)


def test_profile_changes_waveform():
    block = single_bit_block(4)
    assert not np.array_equal(encode_bytes(block, profile='v1'), encode_bytes(block, profile='v2'))


# ─────────────────────────────────────────────────────────────────────────────
# 5. File-level API and logging
# ─────────────────────────────────────────────────────────────────────────────

QUIET = LogConfig(log_to_terminal=False)


def test_file_roundtrip(tmp_path):
    data = bytes([0x02, 0, 0, 0,  0, 0, 0x40, 0])
    src, wav, out = tmp_path / 'in.bin', tmp_path / 'tx.wav', tmp_path / 'out.bin'
    src.write_bytes(data)

    samples = encode_file(src, wav, freq_step=WIDE_STEP, config=QUIET)
    assert wav.stat().st_size == 44 + 2 * len(samples)

    result = decode_file(wav, out, freq_step=WIDE_STEP, config=QUIET)
    assert isinstance(result, DecodeResult)
    assert result.success and result.failure is FailureCode.OK
    assert out.read_bytes() == data
    assert '[OK] 8 bytes' in result.summary()


def test_malformed_container_writes_nothing(tmp_path):
    bad, out = tmp_path / 'bad.wav', tmp_path / 'out.bin'
    bad.write_bytes(b'RIFF\x04\x00\x00\x00WAVE')

    result = decode_file(bad, out, config=QUIET)
    assert not result.success
    assert result.failure is FailureCode.MALFORMED_CONTAINER
    assert not out.exists()


def test_missing_input_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        encode_file(tmp_path / 'nope.bin', tmp_path / 'x.wav', config=QUIET)


def test_foreign_sample_rate_warns_but_decodes(tmp_path, capsys):
    data = single_bit_block(0)
    wav  = tmp_path / 'rate.wav'
    write_wav(wav, encode_bytes(data, freq_step=WIDE_STEP), sample_rate=48000)

    result = decode_file(wav, tmp_path / 'o.bin', freq_step=WIDE_STEP,
                         config=LogConfig(color_levels=False))
    assert result.data == data
    assert result.sample_rate == 48000
    assert '[WARNING]' in capsys.readouterr().err


def test_log_file_written(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = LogConfig(log_to_file=True, log_to_terminal=False, file_prefix='unit')
    logger = configure_logging(config)
    logging.getLogger(f'{ROOT_LOGGER}.api').info('hello from the api')
    for h in logger.handlers:
        h.flush()

    text = config.log_path(tmp_path).read_text(encoding='utf-8')
    assert 'hello from the api' in text
    assert 'INFO' in text


def test_colored_levels(capsys):
    configure_logging(LogConfig(color_levels=True))
    logging.getLogger(f'{ROOT_LOGGER}.wavio').warning('odd bit depth')
    err = capsys.readouterr().err
    assert Fore.YELLOW in err
    assert '[WARNING]' in err and 'odd bit depth' in err


def test_reconfigure_replaces_handlers():
    configure_logging(LogConfig())
    logger = configure_logging(LogConfig())
    # pytest may attach its own capture handlers; count only ours
    assert sum(getattr(h, '_fftt_owned', False) for h in logger.handlers) == 1
    assert logger.propagate is False


# ─────────────────────────────────────────────────────────────────────────────
# 6. CLI
# ─────────────────────────────────────────────────────────────────────────────

def test_cli_encode_decode_default_names(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    data = single_bit_block(7) + b'\x00\x01'
    (tmp_path / 'payload.bin').write_bytes(data)

    fftransmit.main(['encode', 'payload.bin', '--freq-step', '200', '--quiet'])
    assert (tmp_path / 'encoded.wav').exists()
    out = capsys.readouterr().out
    assert '✓ Encoded to encoded.wav' in out
    assert '(0.30s' in out          # two blocks of 6615 samples

    fftransmit.main(['decode', 'encoded.wav', '--freq-step', '200', '--quiet'])
    assert (tmp_path / 'decoded.bin').read_bytes() == data + bytes(2)


def test_cli_info(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    write_wav(tmp_path / 'x.wav', encode_bytes(b'\x00' * 12))
    fftransmit.main(['info', 'x.wav'])
    out = capsys.readouterr().out
    assert 'blocks          : 3' in out
    assert 'sample rate     : 44100 Hz' in out


def test_cli_missing_input(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        fftransmit.main(['encode', 'ghost.bin'])
    assert exc.value.code == 1
    assert 'missing_input' in capsys.readouterr().err
    assert not (tmp_path / 'encoded.wav').exists()


@pytest.mark.parametrize('argv', [[], ['frobnicate', 'x'], ['encode'], ['decode', 'a', 'b']])
def test_cli_invalid_arguments(tmp_path, monkeypatch, capsys, argv):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        fftransmit.main(argv)
    assert exc.value.code == 2
    assert 'usage:' in capsys.readouterr().err
    assert list(tmp_path.iterdir()) == []


def test_cli_encode_step_above_nyquist_writes_nothing(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'payload.bin').write_bytes(b'\xff' * 4)
    with pytest.raises(SystemExit) as exc:
        fftransmit.main(['encode', 'payload.bin', '--freq-step', '1400', '--quiet'])
    assert exc.value.code == 1
    assert 'Nyquist' in capsys.readouterr().err
    assert not (tmp_path / 'encoded.wav').exists()


def test_cli_malformed_container(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'bad.wav').write_bytes(b'not a wav at all')
    with pytest.raises(SystemExit) as exc:
        fftransmit.main(['decode', 'bad.wav', '--quiet'])
    assert exc.value.code == 1
    assert not (tmp_path / 'decoded.bin').exists()


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-q']))
