"""Composite trust scoring."""
import math
from typing import Dict, Optional, Sequence

from .config import ScoringWeights
from .types import ExternalSignal, FeatureSet, ScoringMethod, TrustScore

# Heuristic risk contributions, summed then clamped to 1
SILENCE_RISK = 0.6
LOW_DYNAMIC_RANGE_RISK = 0.4

# Tie-break order when two groups contribute equally
METHOD_PRECEDENCE = (
    ScoringMethod.EXTERNAL_CLASSIFIER,
    ScoringMethod.SIGNAL_HEURISTICS,
    ScoringMethod.ENCODER_FINGERPRINT,
)


def clamp01(value: float) -> float:
    """Clamp to [0, 1]. Non-finite values become 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


class CompositeScorer:
    """Merge heuristic and external signals into one bounded score.

    The scorer is a pure function of its inputs; all weights come from the
    ScoringWeights it was built with.
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def score(self, features: FeatureSet, signals: Sequence[ExternalSignal] = ()) -> TrustScore:
        """Compute the composite score.

        Args:
            features: Heuristics for the artifact.
            signals: External signals, successful or not.

        Returns:
            TrustScore with composite in [0, 1], per-signal breakdown and
            the dominating method.
        """
        w = self.weights
        succeeded = [s.score for s in signals if s.succeeded and s.score is not None]
        external = max((clamp01(s) for s in succeeded), default=0.0)

        components = {
            'external': external,
            'heuristic': self.heuristic_risk(features),
            'entropy': clamp01(features.entropy),
            'fingerprint': 1.0 if features.encoder_signature else 0.0,
            'size': self.size_risk(features.size_bytes),
        }
        breakdown: Dict[str, float] = {
            name: round(clamp01(getattr(w, name) * value), 4)
            for name, value in components.items()
        }

        composite = round(clamp01(sum(breakdown.values())), 4)
        method = self._dominant_method(breakdown, has_external=bool(succeeded))

        return TrustScore(
            composite=composite,
            breakdown=breakdown,
            method=method,
            likely_synthetic=composite >= w.synthetic_threshold,
        )

    @staticmethod
    def heuristic_risk(features: FeatureSet) -> float:
        risk = 0.0
        if features.digital_silence_detected:
            risk += SILENCE_RISK
        if features.low_dynamic_range:
            risk += LOW_DYNAMIC_RANGE_RISK
        return clamp01(risk)

    def size_risk(self, size_bytes: int) -> float:
        """Small files are typical of low-bitrate TTS output."""
        if size_bytes <= 0:
            return 0.0
        return clamp01(1.0 - size_bytes / self.weights.size_reference_bytes)

    @staticmethod
    def _dominant_method(breakdown: Dict[str, float], has_external: bool) -> ScoringMethod:
        groups = {
            ScoringMethod.EXTERNAL_CLASSIFIER: breakdown['external'] if has_external else None,
            ScoringMethod.SIGNAL_HEURISTICS: (
                breakdown['heuristic'] + breakdown['entropy'] + breakdown['size']
            ),
            ScoringMethod.ENCODER_FINGERPRINT: breakdown['fingerprint'],
        }
        best = ScoringMethod.SIGNAL_HEURISTICS
        best_value = -1.0
        for method in METHOD_PRECEDENCE:
            value = groups[method]
            if value is not None and value > best_value:
                best, best_value = method, value
        return best
