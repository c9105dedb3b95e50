"""
Received response messages.

A ResponseMessage carries message-level headers, a status line and a
replaceable Content. Content holds the body bytes together with the
content-level (entity) headers, so decompression can swap the whole
representation in one move.
"""

from __future__ import annotations

import codecs
import io
import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Iterable
from typing import Mapping
from typing import TYPE_CHECKING
from typing import Union

from mitmproxy.http import Headers

from httpreader.media_type import MediaType

if TYPE_CHECKING:
    from mitmproxy import http

logger = logging.getLogger(__name__)

# Headers that describe the body rather than the message
CONTENT_HEADERS = frozenset(
    {
        "allow",
        "content-disposition",
        "content-encoding",
        "content-language",
        "content-length",
        "content-location",
        "content-md5",
        "content-range",
        "content-type",
        "expires",
        "last-modified",
    }
)

HeadersLike = Union[Headers, Mapping[str, Union[str, Iterable[str]]], None]


def make_headers(headers: HeadersLike = None) -> Headers:
    """Build a Headers multimap from a Headers or a name -> value(s) mapping."""
    if headers is None:
        return Headers()
    if isinstance(headers, Headers):
        return Headers(list(headers.fields))

    header_fields = []
    for name, values in headers.items():
        if isinstance(values, str):
            values = [values]
        for value in values:
            header_fields.append((name.encode("utf-8"), value.encode("utf-8")))
    return Headers(header_fields)


class Content:
    """
    A response body and its content-level headers.

    Once closed the body can no longer be read.
    """

    def __init__(self, data: bytes = b"", headers: HeadersLike = None):
        self._data = bytes(data)
        self.headers = make_headers(headers)
        self.closed = False

    def read(self) -> bytes:
        """Materialize the full body."""
        self._check_open()
        return self._data

    def stream(self) -> io.BytesIO:
        """Return a readable binary stream over the body."""
        self._check_open()
        return io.BytesIO(self._data)

    def text(self, charset: str = "utf-8") -> str:
        """
        Decode the body, falling back to latin-1 when the charset does not fit.

        A leading byte order mark is dropped; a UTF-8 BOM wins over `charset`.
        """
        data = self.read()
        if data.startswith(codecs.BOM_UTF8):
            charset = "utf-8-sig"
        try:
            text = data.decode(charset)
        except (UnicodeDecodeError, LookupError):
            logger.debug(f"Body is not valid {charset}, decoding as latin-1")
            return data.decode("latin-1")
        return text.removeprefix("\ufeff")

    def close(self) -> None:
        self.closed = True
        self._data = b""

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("content has been closed")

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"{len(self._data)} bytes"
        return f"Content({state})"


@dataclass
class ResponseMessage:
    """A received response: status line, message headers and content."""

    status_code: int = 200
    reason: str = ""
    headers: Headers = field(default_factory=Headers)
    content: Content = field(default_factory=Content)

    @property
    def content_type(self) -> MediaType | None:
        """The parsed content-type, or None if absent or malformed."""
        return MediaType.from_headers(self.content.headers)

    def get_header(self, name: str) -> list[str] | None:
        """
        Look a header up in the message headers, then the content headers.

        Returns:
            All values of the header, or None if neither collection has it
        """
        if name in self.headers:
            return self.headers.get_all(name)
        if name in self.content.headers:
            return self.content.headers.get_all(name)
        return None

    @classmethod
    def make(
        cls,
        status_code: int = 200,
        reason: str = "",
        content: bytes = b"",
        headers: HeadersLike = None,
        content_headers: HeadersLike = None,
    ) -> ResponseMessage:
        """
        Build a message from plain values.

        Entity headers passed in `headers` are moved to the content so that
        both calling styles end up with the same layout.
        """
        message_headers, entity_headers = split_headers(make_headers(headers))
        for name, value in make_headers(content_headers).fields:
            entity_headers.append((name, value))

        return cls(
            status_code=status_code,
            reason=reason,
            headers=Headers(message_headers),
            content=Content(content, Headers(entity_headers)),
        )

    @classmethod
    def from_response(cls, response: http.Response) -> ResponseMessage:
        """
        Adapt a mitmproxy response.

        The body is taken still-encoded so that decompression steps see the
        bytes that went over the wire.
        """
        message_headers, entity_headers = split_headers(response.headers)
        return cls(
            status_code=response.status_code,
            reason=response.reason,
            headers=Headers(message_headers),
            content=Content(response.raw_content or b"", Headers(entity_headers)),
        )


def split_headers(
    headers: Headers,
) -> tuple[list[tuple[bytes, bytes]], list[tuple[bytes, bytes]]]:
    """Split header fields into (message-level, content-level) lists."""
    message_fields: list[tuple[bytes, bytes]] = []
    content_fields: list[tuple[bytes, bytes]] = []
    for name, value in headers.fields:
        if name.decode("latin-1").lower() in CONTENT_HEADERS:
            content_fields.append((name, value))
        else:
            message_fields.append((name, value))
    return message_fields, content_fields
