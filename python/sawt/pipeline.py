"""Main Sawt implementation.

Sawt (صوت) means "Voice" in Arabic.
Audio Trust Analysis Pipeline
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from .aggregator import ExternalSignalAggregator
from .config import Settings, load_settings
from .errors import InternalError, SawtError
from .features import FeatureExtractor
from .normalize import Body, TransportNormalizer
from .report import ReportAssembler, ResultSink
from .scoring import CompositeScorer
from .types import FeatureSet, TrustReport

logger = logging.getLogger(__name__)


class AudioTrustAnalyzer:
    """Run the full pipeline for one request at a time.

    Instances only hold immutable configuration and may be shared between
    concurrent requests.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the analyzer.

        Args:
            settings: Startup configuration. Loaded from the environment
                when omitted.
            transport: Optional httpx transport shared by every outbound
                call (remote fetch, upstreams, sink). Used by tests.
        """
        self.settings = settings or load_settings()
        self.normalizer = TransportNormalizer(
            max_bytes=self.settings.max_bytes,
            fetch_timeout=self.settings.fetch_timeout,
            transport=transport,
        )
        self.extractor = FeatureExtractor()
        self.aggregator = ExternalSignalAggregator(self.settings.upstreams, transport=transport)
        self.scorer = CompositeScorer(self.settings.weights)
        self.assembler = ReportAssembler()
        self.sink = ResultSink(self.settings.sink, transport=transport)

    async def analyze(self, body: Body, content_type: Optional[str] = None) -> TrustReport:
        """Analyze one artifact.

        Args:
            body: ``{"blob": ...}`` / ``{"url": ...}`` mapping or raw bytes.
            content_type: Declared content type of a raw byte body.

        Returns:
            The assembled TrustReport.

        Raises:
            InputError: Malformed or missing input.
            PayloadTooLargeError: Artifact exceeds the size limit.
            InternalError: Any unexpected fault.
        """
        try:
            artifact = await self.normalizer.normalize(body, content_type)
            features = await asyncio.to_thread(self.extractor.extract, artifact.data)
            signals = await self.aggregator.collect(artifact)
            score = self.scorer.score(features, signals)
            report = self.assembler.assemble(artifact, features, signals, score)
        except SawtError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure during analysis")
            raise InternalError(detail=f"{type(e).__name__}: {e}") from e

        logger.info(
            f"Analyzed {report.metadata.sha256[:12]} ({report.metadata.size} bytes): "
            f"composite={score.composite:.3f} method={score.method.value}"
        )
        self.sink.forward(report)
        return report

    def extract_features(self, content: bytes) -> FeatureSet:
        """Offline heuristics only, no network."""
        return self.extractor.extract(content)

    async def close(self) -> None:
        """Wait for pending sink deliveries."""
        await self.sink.drain()


def error_response(exc: Exception) -> Tuple[int, Dict[str, Any]]:
    """Map an exception to an HTTP-equivalent status and error body."""
    if not isinstance(exc, SawtError):
        exc = InternalError()

    body: Dict[str, Any] = {"ok": False, "error": exc.message}
    # Internal details are logged, never returned
    if exc.detail and not isinstance(exc, InternalError):
        body["detail"] = exc.detail
    return exc.status, body
