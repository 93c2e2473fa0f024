"""
Sawt - Python Implementation

Sawt (صوت) means "Voice" in Arabic.
Audio Trust Analysis Pipeline
"""

from .pipeline import AudioTrustAnalyzer, error_response
from .types import (
    RawArtifact,
    FeatureSet,
    ExternalSignal,
    TrustScore,
    TrustReport,
    ArtifactMetadata,
    FormatGuess,
    ScoringMethod,
    TransportMode,
)
from .errors import (
    SawtError,
    InputError,
    PayloadTooLargeError,
    UpstreamError,
    InternalError,
    ConfigError,
)
from .config import Settings, ScoringWeights, UpstreamConfig, SinkConfig, load_settings
from .crypto import CryptoUtils
from .normalize import TransportNormalizer
from .features import FeatureExtractor
from .aggregator import ExternalSignalAggregator
from .scoring import CompositeScorer
from .report import ReportAssembler, ResultSink

__version__ = "0.0.1"
__all__ = [
    "AudioTrustAnalyzer",
    "error_response",
    "RawArtifact",
    "FeatureSet",
    "ExternalSignal",
    "TrustScore",
    "TrustReport",
    "ArtifactMetadata",
    "FormatGuess",
    "ScoringMethod",
    "TransportMode",
    "SawtError",
    "InputError",
    "PayloadTooLargeError",
    "UpstreamError",
    "InternalError",
    "ConfigError",
    "Settings",
    "ScoringWeights",
    "UpstreamConfig",
    "SinkConfig",
    "load_settings",
    "CryptoUtils",
    "TransportNormalizer",
    "FeatureExtractor",
    "ExternalSignalAggregator",
    "CompositeScorer",
    "ReportAssembler",
    "ResultSink",
]
