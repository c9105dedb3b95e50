"""
Decompression steps for the pipeline.

Handles content-encoding decoding:
- gzip, deflate: standard library codecs
- br: brotli
- zstd: zstandard

Each step looks at the first content-encoding token. On a match the body is
decompressed, a new Content carrying copies of the original content headers
is installed, and the old Content is closed. Anything else is a no-op.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from typing import Callable
from typing import TYPE_CHECKING

import brotli
import zstandard

from httpreader.config import config
from httpreader.message import Content
from httpreader.message import make_headers
from httpreader.pipeline.step import Step

if TYPE_CHECKING:
    from httpreader.pipeline.context import StepContext

logger = logging.getLogger(__name__)


class DecompressionError(Exception):
    """A codec failed to decompress a response body."""

    def __init__(self, encoding: str, message: str):
        super().__init__(f"{encoding}: {message}")
        self.encoding = encoding


def _decompress_gzip(data: bytes) -> bytes:
    return gzip.decompress(data)


def _decompress_deflate(data: bytes) -> bytes:
    # Try raw deflate first, then zlib-wrapped
    try:
        return zlib.decompress(data, -zlib.MAX_WBITS)
    except zlib.error:
        return zlib.decompress(data)


def _decompress_brotli(data: bytes) -> bytes:
    return brotli.decompress(data)


def _decompress_zstd(data: bytes) -> bytes:
    # Frames written in streaming mode carry no content size
    with zstandard.ZstdDecompressor().stream_reader(data, read_across_frames=True) as reader:
        return reader.read()


CODECS: dict[str, Callable[[bytes], bytes]] = {
    "gzip": _decompress_gzip,
    "deflate": _decompress_deflate,
    "br": _decompress_brotli,
    "zstd": _decompress_zstd,
}

# Exceptions the codecs raise on malformed input
CODEC_ERRORS = (OSError, EOFError, zlib.error, brotli.error, zstandard.ZstdError)


def content_encodings(context: StepContext) -> list[str]:
    """The content-encoding tokens of the current content, lower-cased."""
    tokens = []
    for value in context.message.content.headers.get_all("content-encoding"):
        tokens.extend(t.strip().lower() for t in value.split(",") if t.strip())
    return tokens


def decompress(encoding: str, strip_encoding: bool | None = None) -> Step:
    """
    Decompress the body if its first content-encoding token is `encoding`.

    Args:
        encoding: One of gzip, deflate, br, zstd
        strip_encoding: Remove the consumed token from content-encoding and
            rewrite content-length on the new content. By default the original
            headers are copied unchanged (see Config.strip_consumed_encoding).

    Raises:
        ValueError: If the encoding is not supported
    """
    codec = CODECS.get(encoding)
    if codec is None:
        raise ValueError(f"Unsupported content-encoding: {encoding}")

    def run(context: StepContext) -> None:
        tokens = content_encodings(context)
        if not tokens or tokens[0] != encoding:
            logger.debug(f"decompress: content-encoding {tokens} is not {encoding}")
            return

        old = context.message.content
        raw = old.read()
        try:
            decompressed = codec(raw)
        except CODEC_ERRORS as e:
            logger.error(f"Failed to decompress {len(raw)} bytes with {encoding}: {e}")
            raise DecompressionError(encoding, str(e)) from e

        headers = make_headers(old.headers)
        strip = config.strip_consumed_encoding if strip_encoding is None else strip_encoding
        if strip:
            remaining = tokens[1:]
            if remaining:
                headers.set_all("content-encoding", [", ".join(remaining)])
            else:
                del headers["content-encoding"]
            if "content-length" in headers:
                headers["content-length"] = str(len(decompressed))

        context.message.content = Content(decompressed, headers)
        old.close()
        logger.debug(f"decompress: {encoding} {len(raw)} -> {len(decompressed)} bytes")

    return Step.transform(f"decompress:{encoding}", run)


def use_gzip_decompression(strip_encoding: bool | None = None) -> Step:
    return decompress("gzip", strip_encoding)


def use_deflate_decompression(strip_encoding: bool | None = None) -> Step:
    return decompress("deflate", strip_encoding)


def use_brotli_decompression(strip_encoding: bool | None = None) -> Step:
    return decompress("br", strip_encoding)


def use_zstd_decompression(strip_encoding: bool | None = None) -> Step:
    return decompress("zstd", strip_encoding)
