"""Type definitions for Sawt."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, Tuple


class FormatGuess(Enum):
    """Container formats recognised from leading bytes."""
    WAV = "wav"
    MP3 = "mp3"
    FLAC = "flac"
    UNKNOWN = "unknown"


class TransportMode(Enum):
    """How the artifact reached the pipeline."""
    BLOB = "blob"
    URL = "url"
    STREAM = "stream"
    UNRECOGNIZED = "unrecognized"


class ScoringMethod(Enum):
    """Signal source that dominated the composite score."""
    EXTERNAL_CLASSIFIER = "external-classifier"
    SIGNAL_HEURISTICS = "signal-heuristics"
    ENCODER_FINGERPRINT = "encoder-fingerprint"


@dataclass(frozen=True)
class RawArtifact:
    """Audio bytes as received, plus declared metadata."""
    data: bytes = field(repr=False)
    mime_type: str
    size: int
    filename: Optional[str] = None
    source: TransportMode = TransportMode.STREAM


@dataclass(frozen=True)
class FeatureSet:
    """Deterministic heuristics derived from the artifact bytes."""
    entropy: float
    zero_byte_ratio: float
    digital_silence_detected: bool
    silence_segments: int
    dynamic_range: int
    low_dynamic_range: bool
    format_guess: FormatGuess
    size_bytes: int
    encoder_signature: Optional[str] = None
    channels: Optional[int] = None
    sample_rate: Optional[int] = None
    byte_rate: Optional[int] = None
    bits_per_sample: Optional[int] = None
    duration_seconds: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "entropy": self.entropy,
            "zeroByteRatio": self.zero_byte_ratio,
            "digitalSilenceDetected": self.digital_silence_detected,
            "silenceSegments": self.silence_segments,
            "dynamicRange": self.dynamic_range,
            "lowDynamicRange": self.low_dynamic_range,
            "formatGuess": self.format_guess.value,
            "sizeBytes": self.size_bytes,
            "encoderSignature": self.encoder_signature,
        }
        # WAV structure is only reported when the header parsed cleanly
        wav_fields = {
            "channels": self.channels,
            "sampleRate": self.sample_rate,
            "byteRate": self.byte_rate,
            "bitsPerSample": self.bits_per_sample,
            "durationSeconds": self.duration_seconds,
        }
        data.update({k: v for k, v in wav_fields.items() if v is not None})
        return data


@dataclass(frozen=True)
class ExternalSignal:
    """Outcome of one call to an external classifier."""
    source_name: str
    succeeded: bool
    score: Optional[float] = None
    raw_payload: Optional[Any] = None
    latency_ms: float = 0.0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceName": self.source_name,
            "succeeded": self.succeeded,
            "score": self.score,
            "rawPayload": self.raw_payload,
            "latencyMs": self.latency_ms,
            "error": self.error,
        }


@dataclass(frozen=True)
class TrustScore:
    """Composite score and its per-signal breakdown."""
    composite: float
    breakdown: Dict[str, float]
    method: ScoringMethod
    likely_synthetic: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "composite": self.composite,
            "breakdown": dict(self.breakdown),
            "method": self.method.value,
            "likelySynthetic": self.likely_synthetic,
        }


@dataclass(frozen=True)
class ArtifactMetadata:
    """Identity of the analysed artifact."""
    size: int
    sha256: str
    mime_type: str
    filename: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "sha256": self.sha256,
            "mimeType": self.mime_type,
            "filename": self.filename,
        }


@dataclass(frozen=True)
class TrustReport:
    """Complete analysis result."""
    metadata: ArtifactMetadata
    features: FeatureSet
    trust_score: TrustScore
    processed_at: str
    external_signals: Tuple[ExternalSignal, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "metadata": self.metadata.to_dict(),
            "featureSet": self.features.to_dict(),
            "externalSignals": [s.to_dict() for s in self.external_signals],
            "trustScore": self.trust_score.to_dict(),
            "processedAt": self.processed_at,
        }
