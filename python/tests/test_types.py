"""Tests for Sawt type definitions."""

import pytest

from sawt.types import (
    ArtifactMetadata,
    ExternalSignal,
    FeatureSet,
    FormatGuess,
    RawArtifact,
    ScoringMethod,
    TransportMode,
    TrustScore,
)


class TestFormatGuess:
    def test_values(self):
        assert FormatGuess.WAV.value == "wav"
        assert FormatGuess.MP3.value == "mp3"
        assert FormatGuess.FLAC.value == "flac"
        assert FormatGuess.UNKNOWN.value == "unknown"

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            FormatGuess("ogg")


class TestScoringMethod:
    def test_values(self):
        assert ScoringMethod.EXTERNAL_CLASSIFIER.value == "external-classifier"
        assert ScoringMethod.SIGNAL_HEURISTICS.value == "signal-heuristics"
        assert ScoringMethod.ENCODER_FINGERPRINT.value == "encoder-fingerprint"


class TestRawArtifact:
    def test_defaults(self):
        a = RawArtifact(data=b"abc", mime_type="audio/wav", size=3)
        assert a.filename is None
        assert a.source is TransportMode.STREAM

    def test_repr_hides_bytes(self):
        a = RawArtifact(data=b"secret-audio", mime_type="audio/wav", size=12)
        assert "secret-audio" not in repr(a)


class TestFeatureSet:
    def test_wav_fields_omitted_when_absent(self):
        f = FeatureSet(
            entropy=0.5,
            zero_byte_ratio=0.1,
            digital_silence_detected=False,
            silence_segments=0,
            dynamic_range=200,
            low_dynamic_range=False,
            format_guess=FormatGuess.MP3,
            size_bytes=100,
        )
        data = f.to_dict()
        assert data["formatGuess"] == "mp3"
        assert "sampleRate" not in data
        assert data["encoderSignature"] is None


class TestExternalSignal:
    def test_failed_defaults(self):
        s = ExternalSignal(source_name="x", succeeded=False)
        assert s.score is None
        assert s.raw_payload is None
        assert s.to_dict()["succeeded"] is False


class TestTrustScore:
    def test_to_dict(self):
        t = TrustScore(
            composite=0.7,
            breakdown={"external": 0.5},
            method=ScoringMethod.EXTERNAL_CLASSIFIER,
            likely_synthetic=True,
        )
        assert t.to_dict() == {
            "composite": 0.7,
            "breakdown": {"external": 0.5},
            "method": "external-classifier",
            "likelySynthetic": True,
        }


class TestArtifactMetadata:
    def test_to_dict(self):
        m = ArtifactMetadata(size=3, sha256="abc", mime_type="audio/wav")
        assert m.to_dict() == {"size": 3, "sha256": "abc", "mimeType": "audio/wav", "filename": None}
