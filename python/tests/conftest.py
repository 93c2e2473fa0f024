"""Shared pytest fixtures for Sawt tests."""

import asyncio
import io
import wave

import httpx
import numpy as np
import pytest

from sawt import AudioTrustAnalyzer, FeatureExtractor
from sawt.config import ScoringWeights, Settings, SinkConfig, UpstreamConfig


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


def make_transport(routes):
    """Build an httpx MockTransport from ``{url: handler}``.

    Handlers may be sync or async and receive the httpx.Request.  A handler
    can also be a tuple ``(delay_seconds, response)`` to simulate latency.
    """

    async def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        route = routes.get(url)
        if route is None:
            return httpx.Response(404, json={"error": "no route"})
        if isinstance(route, tuple):
            delay, response = route
            await asyncio.sleep(delay)
            return response
        result = route(request)
        if asyncio.iscoroutine(result):
            result = await result
        return result

    return httpx.MockTransport(handler)


def upstream(name, adapter="score", timeout=1.0, **kwargs):
    return UpstreamConfig(
        name=name,
        url=f"https://{name}.example.com/classify",
        adapter=adapter,
        timeout=timeout,
        **kwargs,
    )


@pytest.fixture()
def settings():
    """Settings with no upstreams and no sink."""
    return Settings(max_bytes=1024 * 1024, fetch_timeout=2.0)


@pytest.fixture()
def analyzer(settings):
    return AudioTrustAnalyzer(settings)


@pytest.fixture()
def extractor():
    return FeatureExtractor()


@pytest.fixture()
def weights():
    return ScoringWeights()


@pytest.fixture()
def sink_config():
    return SinkConfig(url="https://sink.example.com/reports", secret="s3cret", timeout=1.0)


# ---------------------------------------------------------------------------
# Sample content fixtures
# ---------------------------------------------------------------------------


def _make_wav(samples: np.ndarray, sr: int = 16000, channels: int = 1) -> bytes:
    """Encode float samples in [-1, 1] to 16-bit PCM WAV."""
    pcm = (np.clip(samples, -1, 1) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sr)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


@pytest.fixture()
def random_bytes():
    """20,000 uniformly random bytes (fixed seed)."""
    return np.random.default_rng(1234).integers(0, 256, 20000, dtype=np.uint8).tobytes()


@pytest.fixture()
def silence_then_noise_bytes():
    """10,000 zero bytes followed by 10,000 uniformly random bytes."""
    noise = np.random.default_rng(99).integers(0, 256, 10000, dtype=np.uint8).tobytes()
    return b"\x00" * 10000 + noise


@pytest.fixture()
def sample_wav_bytes():
    """Generate a 0.5 s mono 16-bit PCM WAV at 16 kHz (440 Hz sine)."""
    sr = 16000
    t = np.arange(int(sr * 0.5)) / sr
    return _make_wav(0.5 * np.sin(2 * np.pi * 440 * t), sr)


@pytest.fixture()
def natural_wav_bytes():
    """A 2 s WAV with harmonic content, jitter and a noise floor."""
    rng = np.random.default_rng(7)
    sr = 16000
    n_samples = sr * 2
    f0 = 120.0 * (1 + 0.01 * np.cumsum(rng.standard_normal(n_samples) * 0.005))
    phase = 2 * np.pi * np.cumsum(f0 / sr)

    signal = np.zeros(n_samples)
    for h in range(1, 6):
        signal += (1.0 / h) * np.sin(h * phase)
    signal += rng.standard_normal(n_samples) * 0.02
    signal = signal / (np.max(np.abs(signal)) + 1e-10) * 0.7
    return _make_wav(signal, sr)


@pytest.fixture()
def gapped_wav_bytes():
    """Speech-like tone bursts separated by perfectly silent gaps, TTS style."""
    sr = 16000
    t = np.arange(int(sr * 0.3)) / sr
    burst = 0.6 * np.sin(2 * np.pi * 220 * t)
    gap = np.zeros(int(sr * 0.2))
    return _make_wav(np.concatenate([burst, gap] * 5), sr)
