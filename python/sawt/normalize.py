"""Transport normalization: turn any supported request body into a RawArtifact."""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlparse

import httpx

from .errors import InputError, PayloadTooLargeError
from .features import guess_format
from .types import FormatGuess, RawArtifact, TransportMode

logger = logging.getLogger(__name__)

_FORMAT_MIME = {
    FormatGuess.WAV: "audio/wav",
    FormatGuess.MP3: "audio/mpeg",
    FormatGuess.FLAC: "audio/flac",
}

_AUDIO_LIKE = ("audio/", "application/ogg", "application/octet-stream")

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,", re.IGNORECASE)

FALLBACK_MIME = "application/octet-stream"

Body = Union[Mapping[str, Any], bytes, bytearray, memoryview]


def sniff_mime(data: bytes) -> Optional[str]:
    """Infer an audio mime type from magic numbers."""
    fmt = guess_format(data)
    if fmt in _FORMAT_MIME:
        return _FORMAT_MIME[fmt]
    if data[0:4] == b'OggS':
        return "audio/ogg"
    if data[4:8] == b'ftyp':
        return "audio/mp4"
    return None


def _clean_mime(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    mime = value.split(";", 1)[0].strip().lower()
    return mime or None


def is_audio_like(content_type: Optional[str]) -> bool:
    mime = _clean_mime(content_type)
    return bool(mime) and mime.startswith(_AUDIO_LIKE)


class TransportNormalizer:
    """Decode blobs, fetch URLs and accept raw streams.

    Every path ends in :meth:`_materialize`, which is the only place the
    size limit is checked.
    """

    def __init__(
        self,
        *,
        max_bytes: int,
        fetch_timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the normalizer.

        Args:
            max_bytes: Inclusive upper bound on artifact size.
            fetch_timeout: Total time allowed for a remote fetch, in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._max_bytes = max_bytes
        self._fetch_timeout = fetch_timeout
        self._transport = transport

    async def normalize(self, body: Body, content_type: Optional[str] = None) -> RawArtifact:
        """Normalize a request body into a RawArtifact.

        Args:
            body: Parsed JSON object (blob or url form) or raw bytes.
            content_type: Declared content type of a raw byte body.

        Raises:
            InputError: Malformed or missing data.
            PayloadTooLargeError: Artifact exceeds the configured limit.
        """
        if isinstance(body, Mapping):
            filename = body.get("filename") or None
            mimetype = body.get("mimetype") or None
            if body.get("blob") is not None:
                return self.from_blob(body["blob"], filename=filename, mimetype=mimetype)
            url = body.get("url") or body.get("mediaUrl")
            if url:
                return await self.from_url(url, filename=filename, mimetype=mimetype)
            raise InputError("no data source", detail="neither blob nor url supplied")

        if isinstance(body, (bytes, bytearray, memoryview)):
            return self.from_stream(bytes(body), content_type)

        raise InputError("no data source", detail=f"unsupported body type {type(body).__name__}")

    def from_blob(
        self,
        blob: Any,
        filename: Optional[str] = None,
        mimetype: Optional[str] = None,
    ) -> RawArtifact:
        """Decode a base64 blob, optionally wrapped in a data URL."""
        if not isinstance(blob, str):
            raise InputError("invalid encoding", detail="blob must be a string")

        text = blob.strip()
        match = _DATA_URL.match(text)
        if match:
            mimetype = mimetype or match.group("mime")
            text = text[match.end():]
        text = "".join(text.split())

        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InputError("invalid encoding", detail=str(e))

        return self._materialize(data, _clean_mime(mimetype), filename, TransportMode.BLOB)

    async def from_url(
        self,
        url: str,
        filename: Optional[str] = None,
        mimetype: Optional[str] = None,
    ) -> RawArtifact:
        """Fetch a remote artifact with a total timeout and a streaming size ceiling."""
        try:
            parsed = urlparse(url) if isinstance(url, str) else None
        except ValueError as e:
            raise InputError("remote fetch failed", detail=str(e))
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InputError("remote fetch failed", detail="url must be http or https")

        try:
            data, header_type = await asyncio.wait_for(
                self._download(url), timeout=self._fetch_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Remote fetch timed out after {self._fetch_timeout}s: {url}")
            raise InputError("remote fetch failed", detail="timeout")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Remote fetch failed for {url}: {e}")
            raise InputError("remote fetch failed", detail=str(e))

        if filename is None:
            filename = parsed.path.rsplit("/", 1)[-1] or None

        mime = _clean_mime(mimetype) or sniff_mime(data) or _clean_mime(header_type)
        return self._materialize(data, mime, filename, TransportMode.URL)

    async def _download(self, url: str):
        async with httpx.AsyncClient(
            timeout=self._fetch_timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > self._max_bytes:
                    raise InputError("remote payload too large", detail=f"content-length {declared}")

                buf = bytearray()
                async for chunk in response.aiter_bytes():
                    buf.extend(chunk)
                    if len(buf) > self._max_bytes:
                        raise InputError(
                            "remote payload too large",
                            detail=f"exceeded {self._max_bytes} bytes",
                        )
                return bytes(buf), response.headers.get("content-type")

    def from_stream(self, data: bytes, content_type: Optional[str] = None) -> RawArtifact:
        """Accept a raw byte body.

        Audio-like content types are kept as declared. Anything else is
        treated as an unrecognized stream and the type is sniffed.
        """
        if is_audio_like(content_type):
            mime = _clean_mime(content_type)
            if mime == FALLBACK_MIME:
                mime = sniff_mime(data) or mime
            return self._materialize(data, mime, None, TransportMode.STREAM)

        return self._materialize(data, None, None, TransportMode.UNRECOGNIZED)

    def _materialize(
        self,
        data: bytes,
        mime: Optional[str],
        filename: Optional[str],
        source: TransportMode,
    ) -> RawArtifact:
        if not data:
            raise InputError("empty payload")
        size = len(data)
        if size > self._max_bytes:
            raise PayloadTooLargeError(
                "payload too large",
                detail=f"{size} bytes exceeds limit of {self._max_bytes}",
            )
        return RawArtifact(
            data=data,
            mime_type=mime or sniff_mime(data) or FALLBACK_MIME,
            size=size,
            filename=filename,
            source=source,
        )
