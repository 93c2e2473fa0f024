"""Per-upstream response adapters.

External classifiers answer in different shapes: a bare score, a probability
field, a list of labelled scores, or free text.  Each adapter turns one shape
into a single score in [0, 1], or None when no score can be extracted.  The
aggregator treats None exactly like a failed call.
"""
from __future__ import annotations

import math
import re
from typing import Any, Callable, Dict, Iterable, Optional

SYNTHETIC_LABELS = ("fake", "spoof", "synthetic", "ai", "generated", "deepfake", "clone")
GENUINE_LABELS = ("real", "bonafide", "bona-fide", "human", "genuine", "authentic")

PROBABILITY_FIELDS = ("probability", "fake_probability", "ai_probability", "synthetic_probability")

_NUMBER = re.compile(r"(?<![\w.])(\d+(?:\.\d+)?)\s*(%)?")

Adapter = Callable[[Any, Optional[str]], Optional[float]]


def normalize_score(value: Any) -> Optional[float]:
    """Coerce a raw value into [0, 1].

    Values in (1, 100] are read as percentages.  Booleans, non-numbers,
    NaN/inf and anything out of range yield None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None

    value = float(value)
    if not math.isfinite(value) or value < 0:
        return None
    if value <= 1.0:
        return value
    if value <= 100.0:
        return value / 100.0
    return None


def _score_field(payload: Any, label: Optional[str] = None) -> Optional[float]:
    if isinstance(payload, dict):
        return normalize_score(payload.get("score"))
    return None


def _probability_field(payload: Any, label: Optional[str] = None) -> Optional[float]:
    if not isinstance(payload, dict):
        return None
    for name in PROBABILITY_FIELDS:
        if name in payload:
            return normalize_score(payload[name])
    return None


def _iter_labelled(payload: Any) -> Iterable[Dict[str, Any]]:
    # Hugging Face wraps batch results one level deeper: [[{label, score}, ...]]
    if isinstance(payload, dict):
        payload = payload.get("labels") or payload.get("predictions") or []
    if isinstance(payload, list) and payload and isinstance(payload[0], list):
        payload = payload[0]
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict) and "label" in item]


def _label_matches(label: str, candidates: Iterable[str]) -> bool:
    words = re.split(r"[^a-z]+", label.lower())
    return any(c in words or label.lower() == c for c in candidates)


def _label_scores(payload: Any, score_label: Optional[str] = None) -> Optional[float]:
    items = list(_iter_labelled(payload))
    synthetic = (score_label.lower(),) if score_label else SYNTHETIC_LABELS

    for item in items:
        if _label_matches(str(item["label"]), synthetic):
            return normalize_score(item.get("score"))

    for item in items:
        if _label_matches(str(item["label"]), GENUINE_LABELS):
            genuine = normalize_score(item.get("score"))
            return None if genuine is None else 1.0 - genuine

    return None


def _free_text(payload: Any, label: Optional[str] = None) -> Optional[float]:
    if isinstance(payload, dict):
        payload = payload.get("text") or payload.get("result") or payload.get("output")
    if not isinstance(payload, str):
        return None
    match = _NUMBER.search(payload)
    if match is None:
        return None
    number = float(match.group(1))
    if match.group(2):
        return normalize_score(number) if number > 1 else normalize_score(number / 100.0)
    return normalize_score(number)


ADAPTERS: Dict[str, Adapter] = {
    "score": _score_field,
    "probability": _probability_field,
    "label_scores": _label_scores,
    "text": _free_text,
}

# Adapters whose upstream may answer with a non-JSON body
TEXT_ADAPTERS = frozenset({"text"})


def extract_score(adapter: str, payload: Any, score_label: Optional[str] = None) -> Optional[float]:
    """Run the named adapter over a decoded response payload."""
    return ADAPTERS[adapter](payload, score_label)


__all__ = ["ADAPTERS", "TEXT_ADAPTERS", "extract_score", "normalize_score"]
