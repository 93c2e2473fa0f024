"""Bounded fan-out to external classifiers."""
from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Any, List, Optional, Sequence

import httpx

from .adapters import TEXT_ADAPTERS, extract_score
from .config import UpstreamConfig
from .errors import UpstreamError
from .types import ExternalSignal, RawArtifact

logger = logging.getLogger(__name__)


class ExternalSignalAggregator:
    """Call every configured upstream concurrently and collect their scores.

    Each call gets its own timeout.  A slow or broken upstream only ever
    produces a failed signal for itself; siblings and the request carry on.
    """

    def __init__(
        self,
        upstreams: Sequence[UpstreamConfig],
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._upstreams = tuple(upstreams)
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self._upstreams)

    async def collect(self, artifact: RawArtifact) -> List[ExternalSignal]:
        """Return one signal per upstream, in configuration order."""
        if not self._upstreams:
            return []

        async with httpx.AsyncClient(transport=self._transport) as client:
            tasks = [self._call(client, upstream, artifact) for upstream in self._upstreams]
            return list(await asyncio.gather(*tasks))

    async def _call(
        self,
        client: httpx.AsyncClient,
        upstream: UpstreamConfig,
        artifact: RawArtifact,
    ) -> ExternalSignal:
        started = time.perf_counter()
        payload: Any = None
        try:
            payload = await asyncio.wait_for(
                self._request(client, upstream, artifact), timeout=upstream.timeout
            )
            score = extract_score(upstream.adapter, payload, upstream.score_label)
            if score is None:
                raise UpstreamError(upstream.name, "no score in response")
        except asyncio.TimeoutError:
            return self._failed(upstream, started, "timeout", payload)
        except UpstreamError as e:
            return self._failed(upstream, started, e.message, payload)
        except httpx.HTTPError as e:
            return self._failed(upstream, started, f"{type(e).__name__}: {e}", payload)
        except Exception as e:
            logger.exception(f"Unexpected error calling upstream '{upstream.name}'")
            return self._failed(upstream, started, f"unexpected error: {e}", payload)

        latency = _elapsed_ms(started)
        logger.debug(f"Upstream '{upstream.name}' scored {score:.3f} in {latency:.0f}ms")
        return ExternalSignal(
            source_name=upstream.name,
            succeeded=True,
            score=score,
            raw_payload=payload,
            latency_ms=latency,
        )

    async def _request(
        self,
        client: httpx.AsyncClient,
        upstream: UpstreamConfig,
        artifact: RawArtifact,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if upstream.api_key:
            headers["Authorization"] = f"Bearer {upstream.api_key}"

        if upstream.encoding == "base64_json":
            body = {
                upstream.payload_field: base64.b64encode(artifact.data).decode("ascii"),
                "filename": artifact.filename,
                "mimetype": artifact.mime_type,
            }
            response = await client.post(
                upstream.url, json=body, headers=headers, timeout=upstream.timeout
            )
        else:
            headers["Content-Type"] = artifact.mime_type
            response = await client.post(
                upstream.url, content=artifact.data, headers=headers, timeout=upstream.timeout
            )

        if response.is_error:
            raise UpstreamError(upstream.name, f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError:
            if upstream.adapter in TEXT_ADAPTERS:
                return response.text
            raise UpstreamError(upstream.name, "response is not JSON")

    def _failed(
        self,
        upstream: UpstreamConfig,
        started: float,
        reason: str,
        payload: Any = None,
    ) -> ExternalSignal:
        latency = _elapsed_ms(started)
        logger.warning(f"Upstream '{upstream.name}' failed after {latency:.0f}ms: {reason}")
        return ExternalSignal(
            source_name=upstream.name,
            succeeded=False,
            score=None,
            raw_payload=payload,
            latency_ms=latency,
            error=reason,
        )


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000.0, 1)
