"""Tests for upstream response adapters."""

import math

import pytest

from sawt.adapters import ADAPTERS, extract_score, normalize_score


class TestNormalizeScore:
    @pytest.mark.parametrize("raw, expected", [
        (0, 0.0),
        (0.42, 0.42),
        (1, 1.0),
        (87, 0.87),
        (100, 1.0),
        ("0.3", 0.3),
    ])
    def test_accepted(self, raw, expected):
        assert normalize_score(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, True, False, -0.1, 101, math.nan, math.inf, "high", [0.5]])
    def test_rejected(self, raw):
        assert normalize_score(raw) is None


class TestScoreAdapter:
    def test_score_field(self):
        assert extract_score("score", {"score": 0.9}) == 0.9

    def test_missing_field(self):
        assert extract_score("score", {"result": 0.9}) is None

    def test_non_object(self):
        assert extract_score("score", [0.9]) is None


class TestProbabilityAdapter:
    def test_probability(self):
        assert extract_score("probability", {"probability": 0.25}) == 0.25

    def test_alternate_field(self):
        assert extract_score("probability", {"fake_probability": 64}) == pytest.approx(0.64)

    def test_missing(self):
        assert extract_score("probability", {"confidence": 0.5}) is None


class TestLabelScoresAdapter:
    def test_synthetic_label(self):
        payload = [{"label": "real", "score": 0.2}, {"label": "fake", "score": 0.8}]
        assert extract_score("label_scores", payload) == 0.8

    def test_nested_batch(self):
        payload = [[{"label": "spoof", "score": 0.7}, {"label": "bonafide", "score": 0.3}]]
        assert extract_score("label_scores", payload) == 0.7

    def test_only_genuine_label_is_inverted(self):
        payload = [{"label": "human", "score": 0.9}]
        assert extract_score("label_scores", payload) == pytest.approx(0.1)

    def test_compound_label(self):
        payload = [{"label": "AI-generated", "score": 0.55}]
        assert extract_score("label_scores", payload) == 0.55

    def test_configured_label(self):
        payload = [{"label": "LABEL_0", "score": 0.1}, {"label": "LABEL_1", "score": 0.9}]
        assert extract_score("label_scores", payload, "LABEL_1") == 0.9

    def test_dict_wrapper(self):
        payload = {"predictions": [{"label": "deepfake", "score": 0.66}]}
        assert extract_score("label_scores", payload) == 0.66

    def test_unknown_labels(self):
        payload = [{"label": "speech", "score": 0.99}, {"label": "music", "score": 0.01}]
        assert extract_score("label_scores", payload) is None

    def test_embedding_vector_has_no_score(self):
        assert extract_score("label_scores", [[0.1, 0.2, 0.3]]) is None


class TestTextAdapter:
    def test_percentage(self):
        assert extract_score("text", "Likelihood of synthesis: 87%") == pytest.approx(0.87)

    def test_fraction(self):
        assert extract_score("text", "score=0.35 (voice clone suspected)") == pytest.approx(0.35)

    def test_text_field(self):
        assert extract_score("text", {"text": "Confidence 12 %"}) == pytest.approx(0.12)

    def test_no_number(self):
        assert extract_score("text", "The speaker sounds natural.") is None

    def test_ignores_digits_inside_words(self):
        assert extract_score("text", "model v2 found nothing") is None


def test_registry_names():
    assert set(ADAPTERS) == {"score", "probability", "label_scores", "text"}
