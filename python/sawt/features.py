"""
Byte-level heuristics for synthetic audio detection.

Everything in this module is a pure function of the input bytes: no I/O, no
shared state, and identical output for identical input.  The heuristics are
cheap enough to run on every request before any external classifier is
consulted:

  1. Byte entropy: Shannon entropy of the byte histogram
  2. Zero-byte ratio: share of 0x00 bytes
  3. Digital silence: runs of perfectly flat samples
  4. Dynamic range: spread of sampled byte values
  5. Container fingerprint: magic numbers (WAV / MP3 / FLAC)
  6. Encoder fingerprint: software muxer traces left by transcoders
  7. WAV header structure: channels, rates, duration
"""

import logging
import struct
from typing import Any, Dict, Optional

import numpy as np
from scipy.stats import entropy as shannon_entropy

from .types import FeatureSet, FormatGuess

logger = logging.getLogger(__name__)

# Textual traces left by generic transcoding tools, in priority order
ENCODER_SIGNATURES = (
    b"Lavf",        # ffmpeg libavformat muxer
    b"Lavc",        # ffmpeg libavcodec encoder
    b"LAME",
    b"libsndfile",
    b"SoX",
    b"GStreamer",
    b"Audacity",
)

_SIGNATURE_MAX_LEN = 40


# ---------------------------------------------------------------------------
# Container helpers
# ---------------------------------------------------------------------------

def guess_format(data: bytes) -> FormatGuess:
    """Classify the container from its leading bytes."""
    if data[0:4] == b'RIFF' and data[8:12] == b'WAVE':
        return FormatGuess.WAV

    if data[0:3] == b'ID3':
        return FormatGuess.MP3

    # MPEG audio frame sync: 11 set bits, layer bits must not be 00 (ADTS/AAC)
    if len(data) >= 2 and data[0] == 0xFF and (data[1] & 0xE0) == 0xE0 and (data[1] & 0x06):
        return FormatGuess.MP3

    if data[0:4] == b'fLaC':
        return FormatGuess.FLAC

    return FormatGuess.UNKNOWN


def find_encoder_signature(data: bytes, scan_bytes: int = 4096) -> Optional[str]:
    """Return the first software-encoder trace found in the file head.

    The token is returned together with any version string glued to it,
    e.g. ``Lavf58.76.100``.
    """
    head = data[:scan_bytes]
    for token in ENCODER_SIGNATURES:
        start = head.find(token)
        if start < 0:
            continue
        end = start + len(token)
        while end < len(head) and end - start < _SIGNATURE_MAX_LEN and 0x21 <= head[end] <= 0x7E:
            end += 1
        return head[start:end].decode("ascii")
    return None


def parse_wav_header(data: bytes) -> Optional[Dict[str, Any]]:
    """Decode the ``fmt `` and ``data`` chunks of a RIFF/WAVE file.

    Returns None for anything malformed or truncated.  The data size is
    clipped to the bytes actually present, so streamed WAVs with a
    placeholder size still yield a sensible duration.  Chunks may appear in
    any order.
    """
    if len(data) < 12 or data[0:4] != b'RIFF' or data[8:12] != b'WAVE':
        return None

    fmt = None
    data_size = None
    offset = 12
    while offset + 8 <= len(data):
        chunk_id = data[offset:offset + 4]
        (chunk_size,) = struct.unpack_from('<I', data, offset + 4)
        body = offset + 8

        if chunk_id == b'fmt ':
            if chunk_size < 16 or body + 16 > len(data):
                return None
            _, channels, sample_rate, byte_rate, _, bits = struct.unpack_from('<HHIIHH', data, body)
            fmt = (channels, sample_rate, byte_rate, bits)
        elif chunk_id == b'data' and data_size is None:
            data_size = min(chunk_size, len(data) - body)

        if fmt is not None and data_size is not None:
            break

        # Chunks are word-aligned
        offset = body + chunk_size + (chunk_size & 1)

    if fmt is None or data_size is None:
        return None

    channels, sample_rate, byte_rate, bits = fmt
    if channels == 0 or sample_rate == 0 or byte_rate == 0:
        return None

    return {
        'channels': channels,
        'sample_rate': sample_rate,
        'byte_rate': byte_rate,
        'bits_per_sample': bits,
        'data_size': data_size,
        'duration_seconds': round(data_size / byte_rate, 3),
    }


# ---------------------------------------------------------------------------
# FeatureExtractor
# ---------------------------------------------------------------------------

class FeatureExtractor:
    """Compute the FeatureSet for an artifact.

    Silence detection samples every ``silence_stride``-th byte and looks for
    runs of flat values (0x00 for signed PCM, 0x80 for unsigned).  Synthetic
    speech often contains perfectly flat gaps that a real microphone noise
    floor never produces.
    """

    THRESHOLDS = {
        'silence_stride': 10,          # Sample every 10th byte
        'silence_run': 50,             # Flat run longer than this → one segment
        'silence_segments': 3,         # More segments than this → detected
        'low_dynamic_range': 30,       # max-min below this → over-compressed
        'encoder_scan_bytes': 4096,
    }

    FLAT_VALUES = (0, 128)

    PRECISION = 3

    def __init__(self, thresholds: Optional[Dict[str, int]] = None):
        self._thresholds = dict(self.THRESHOLDS)
        if thresholds:
            self._thresholds.update(thresholds)

    def extract(self, data: bytes) -> FeatureSet:
        """Derive all heuristics from raw artifact bytes."""
        arr = np.frombuffer(data, dtype=np.uint8)
        sampled = arr[::self._thresholds['silence_stride']]

        segments = self._count_silence_segments(sampled)
        dynamic_range = int(sampled.max()) - int(sampled.min()) if sampled.size else 0

        fmt = guess_format(data)
        wav = parse_wav_header(data) if fmt is FormatGuess.WAV else None
        if fmt is FormatGuess.WAV and wav is None:
            logger.debug("WAV header could not be parsed; structured fields omitted")
        wav = wav or {}

        return FeatureSet(
            entropy=self._entropy(arr),
            zero_byte_ratio=self._zero_byte_ratio(arr),
            digital_silence_detected=segments > self._thresholds['silence_segments'],
            silence_segments=segments,
            dynamic_range=dynamic_range,
            low_dynamic_range=dynamic_range < self._thresholds['low_dynamic_range'],
            format_guess=fmt,
            size_bytes=len(data),
            encoder_signature=find_encoder_signature(data, self._thresholds['encoder_scan_bytes']),
            channels=wav.get('channels'),
            sample_rate=wav.get('sample_rate'),
            byte_rate=wav.get('byte_rate'),
            bits_per_sample=wav.get('bits_per_sample'),
            duration_seconds=wav.get('duration_seconds'),
        )

    def _entropy(self, arr: np.ndarray) -> float:
        """Shannon entropy over 256 buckets, normalised to [0, 1]."""
        if arr.size == 0:
            return 0.0
        counts = np.bincount(arr, minlength=256)
        value = float(shannon_entropy(counts, base=2)) / 8.0
        return round(min(max(value, 0.0), 1.0), self.PRECISION)

    def _zero_byte_ratio(self, arr: np.ndarray) -> float:
        if arr.size == 0:
            return 0.0
        return round(float(np.count_nonzero(arr == 0)) / arr.size, self.PRECISION)

    def _count_silence_segments(self, sampled: np.ndarray) -> int:
        """Count flat-run segments.

        Equivalent to a run counter that records a segment and resets each
        time the run exceeds the threshold, so a run of length L yields
        ``L // (threshold + 1)`` segments.
        """
        if sampled.size == 0:
            return 0
        flat = np.isin(sampled, self.FLAT_VALUES)
        edges = np.diff(np.concatenate(([0], flat.astype(np.int8), [0])))
        starts = np.flatnonzero(edges == 1)
        ends = np.flatnonzero(edges == -1)
        run_lengths = ends - starts
        return int(np.sum(run_lengths // (self._thresholds['silence_run'] + 1)))
