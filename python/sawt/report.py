"""Report assembly and best-effort forwarding to an external sink."""
from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Set

import httpx

from .config import SinkConfig
from .crypto import CryptoUtils
from .types import (
    ArtifactMetadata,
    ExternalSignal,
    FeatureSet,
    RawArtifact,
    TrustReport,
    TrustScore,
)

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Sawt-Signature"


class ReportAssembler:
    """Combine artifact identity, features, signals and score."""

    def assemble(
        self,
        artifact: RawArtifact,
        features: FeatureSet,
        signals: Sequence[ExternalSignal],
        score: TrustScore,
    ) -> TrustReport:
        metadata = ArtifactMetadata(
            size=artifact.size,
            sha256=CryptoUtils.hash_content(artifact.data),
            mime_type=artifact.mime_type,
            filename=artifact.filename,
        )
        return TrustReport(
            metadata=metadata,
            features=features,
            trust_score=score,
            processed_at=datetime.now(timezone.utc).isoformat(),
            external_signals=tuple(signals),
        )


class ResultSink:
    """Fire-and-forget delivery of reports to a configured URL.

    :meth:`forward` returns immediately.  Delivery runs in a detached task
    whose failures are logged and never reach the caller.
    """

    def __init__(
        self,
        config: SinkConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        # Strong references so pending tasks are not garbage collected
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def forward(self, report: TrustReport) -> Optional[asyncio.Task]:
        """Schedule delivery of ``report`` without waiting for it."""
        if not self.enabled:
            return None

        task = asyncio.get_running_loop().create_task(self._deliver(report))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for outstanding deliveries. Used before shutdown."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _deliver(self, report: TrustReport) -> bool:
        body = CryptoUtils.canonical_json(report.to_dict()).encode()
        headers = {"Content-Type": "application/json"}
        if self._config.secret:
            headers[SIGNATURE_HEADER] = CryptoUtils.sign_payload(body, self._config.secret)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = await asyncio.wait_for(
                    client.post(self._config.url, content=body, headers=headers),
                    timeout=self._config.timeout,
                )
                response.raise_for_status()
        except asyncio.TimeoutError:
            logger.warning(f"Sink delivery timed out for {report.metadata.sha256}")
            return False
        except Exception as e:
            logger.warning(f"Sink delivery failed for {report.metadata.sha256}: {e}")
            return False

        logger.debug(f"Report {report.metadata.sha256} delivered to sink")
        return True


def dumps_report(report: TrustReport, indent: Optional[int] = 2) -> str:
    """Serialize a report for display."""
    return json.dumps(report.to_dict(), indent=indent, default=str)
