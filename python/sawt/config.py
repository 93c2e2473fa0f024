"""Runtime configuration for Sawt.

Everything here is loaded once at startup and never mutated afterwards.
"""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from .errors import ConfigError

DEFAULT_MAX_BYTES = 20 * 1024 * 1024
DEFAULT_HF_MODEL_URL = (
    "https://api-inference.huggingface.co/models/"
    "MelodyMachine/Deepfake-audio-detection-V2"
)

ENCODINGS = ("binary", "base64_json")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer", detail=value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number", detail=value)


@dataclass(frozen=True)
class ScoringWeights:
    """Tunable weights for the composite scorer."""
    external: float = 0.65
    heuristic: float = 0.15
    entropy: float = 0.10
    fingerprint: float = 0.10
    size: float = 0.05
    size_reference_bytes: int = 100_000
    synthetic_threshold: float = 0.6

    def __post_init__(self):
        for name in ("external", "heuristic", "entropy", "fingerprint", "size"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigError(f"weight '{name}' must be a finite non-negative number")
        if self.size_reference_bytes <= 0:
            raise ConfigError("size_reference_bytes must be positive")
        if not 0.0 <= self.synthetic_threshold <= 1.0:
            raise ConfigError("synthetic_threshold must be within [0, 1]")


@dataclass(frozen=True)
class UpstreamConfig:
    """One external classification or transcription service."""
    name: str
    url: str
    adapter: str = "score"
    encoding: str = "binary"
    timeout: float = 15.0
    api_key: Optional[str] = field(default=None, repr=False)
    payload_field: str = "audio"
    score_label: Optional[str] = None

    def __post_init__(self):
        # Imported lazily so adapters can depend on config types
        from .adapters import ADAPTERS

        if not self.name:
            raise ConfigError("upstream name is required")
        if not self.url.startswith(("http://", "https://")):
            raise ConfigError(f"upstream '{self.name}' has an invalid url", detail=self.url)
        if self.adapter not in ADAPTERS:
            raise ConfigError(
                f"upstream '{self.name}' uses unknown adapter '{self.adapter}'",
                detail=", ".join(sorted(ADAPTERS)),
            )
        if self.encoding not in ENCODINGS:
            raise ConfigError(f"upstream '{self.name}' uses unknown encoding '{self.encoding}'")
        if not self.timeout > 0:
            raise ConfigError(f"upstream '{self.name}' timeout must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UpstreamConfig":
        """Build from a JSON object, resolving ``api_key_env`` if present."""
        if not isinstance(data, Mapping):
            raise ConfigError("upstream entries must be objects")
        known = {
            "name", "url", "adapter", "encoding", "timeout",
            "api_key", "payload_field", "score_label",
        }
        kwargs = {k: v for k, v in data.items() if k in known}
        key_env = data.get("api_key_env")
        if key_env and not kwargs.get("api_key"):
            kwargs["api_key"] = os.getenv(key_env)
        if "timeout" in kwargs:
            kwargs["timeout"] = float(kwargs["timeout"])
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigError("upstream entry is missing required fields", detail=str(e))


@dataclass(frozen=True)
class SinkConfig:
    """Optional destination that receives a copy of every report."""
    url: Optional[str] = None
    secret: Optional[str] = field(default=None, repr=False)
    timeout: float = 5.0

    @property
    def enabled(self) -> bool:
        return bool(self.url)


@dataclass(frozen=True)
class Settings:
    max_bytes: int = DEFAULT_MAX_BYTES
    fetch_timeout: float = 15.0
    upstreams: Tuple[UpstreamConfig, ...] = ()
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    sink: SinkConfig = field(default_factory=SinkConfig)

    def __post_init__(self):
        if self.max_bytes <= 0:
            raise ConfigError("max_bytes must be positive")
        if not self.fetch_timeout > 0:
            raise ConfigError("fetch_timeout must be positive")
        names = [u.name for u in self.upstreams]
        if len(names) != len(set(names)):
            raise ConfigError("upstream names must be unique")


def _load_upstreams() -> Tuple[UpstreamConfig, ...]:
    upstreams = []
    raw = os.getenv("SAWT_UPSTREAMS")
    if raw:
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError("SAWT_UPSTREAMS is not valid JSON", detail=str(e))
        if not isinstance(entries, list):
            raise ConfigError("SAWT_UPSTREAMS must be a JSON list")
        upstreams.extend(UpstreamConfig.from_mapping(entry) for entry in entries)

    hf_key = os.getenv("HF_API_KEY")
    if hf_key and not any(u.name == "huggingface" for u in upstreams):
        upstreams.append(UpstreamConfig(
            name="huggingface",
            url=os.getenv("SAWT_HF_MODEL_URL", DEFAULT_HF_MODEL_URL),
            adapter="label_scores",
            encoding="binary",
            timeout=_env_float("SAWT_HF_TIMEOUT", 30.0),
            api_key=hf_key,
        ))
    return tuple(upstreams)


def load_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    defaults = ScoringWeights()
    weights = ScoringWeights(
        external=_env_float("SAWT_WEIGHT_EXTERNAL", defaults.external),
        heuristic=_env_float("SAWT_WEIGHT_HEURISTIC", defaults.heuristic),
        entropy=_env_float("SAWT_WEIGHT_ENTROPY", defaults.entropy),
        fingerprint=_env_float("SAWT_WEIGHT_FINGERPRINT", defaults.fingerprint),
        size=_env_float("SAWT_WEIGHT_SIZE", defaults.size),
        size_reference_bytes=_env_int("SAWT_SIZE_REFERENCE_BYTES", defaults.size_reference_bytes),
        synthetic_threshold=_env_float("SAWT_SYNTHETIC_THRESHOLD", defaults.synthetic_threshold),
    )

    sink = SinkConfig(
        url=os.getenv("SAWT_SINK_URL") or None,
        secret=os.getenv("SAWT_SINK_SECRET") or None,
        timeout=_env_float("SAWT_SINK_TIMEOUT", 5.0),
    )

    return Settings(
        max_bytes=_env_int("SAWT_MAX_BYTES", DEFAULT_MAX_BYTES),
        fetch_timeout=_env_float("SAWT_FETCH_TIMEOUT", 15.0),
        upstreams=_load_upstreams(),
        weights=weights,
        sink=sink,
    )


__all__ = [
    "ScoringWeights",
    "UpstreamConfig",
    "SinkConfig",
    "Settings",
    "load_settings",
]
