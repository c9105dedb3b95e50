"""
Structured media types (RFC 6838 style descriptors).

A MediaType has the shape:

    type/[tree.]subtype[+suffix][; key=value]*

Values are immutable and lower-cased. Equality, hashing and ordering are
defined on the canonical string form. The partial order used to gate
content handling is `is_more_specific`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType
from typing import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mitmproxy.http import Headers

logger = logging.getLogger(__name__)


class MediaTypeFormatError(ValueError):
    """Raised when a media type string or component is malformed."""


def _is_token(value: str) -> bool:
    """Check that value only holds letters, digits, '_' and '-'."""
    return bool(value) and all(
        ch.isalpha() or ch.isdecimal() or ch in "_-" for ch in value
    )


@dataclass(frozen=True, eq=False)
class MediaType:
    """
    An immutable media type value.

    Components are normalized to lower case. `tree` and `suffix` are empty
    strings when absent.
    """

    type: str
    sub_type: str
    tree: str = ""
    suffix: str = ""
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if any(
            part is None
            for part in (self.type, self.sub_type, self.tree, self.suffix, self.parameters)
        ):
            raise MediaTypeFormatError("media type components must not be None")

        object.__setattr__(self, "type", self.type.lower())
        object.__setattr__(self, "sub_type", self.sub_type.lower())
        object.__setattr__(self, "tree", self.tree.lower())
        object.__setattr__(self, "suffix", self.suffix.lower())
        object.__setattr__(
            self,
            "parameters",
            MappingProxyType(
                {k.lower(): v.lower() for k, v in self.parameters.items()}
            ),
        )

        for name in ("type", "sub_type"):
            if not _is_token(getattr(self, name)):
                raise MediaTypeFormatError(
                    f"invalid {name} {getattr(self, name)!r}"
                )
        for name in ("tree", "suffix"):
            value = getattr(self, name)
            if value and not _is_token(value):
                raise MediaTypeFormatError(f"invalid {name} {value!r}")
        for key, value in self.parameters.items():
            if not _is_token(key) or not _is_token(value):
                raise MediaTypeFormatError(f"invalid parameter {key}={value}")

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    @classmethod
    def try_parse(cls, text: str) -> MediaType | None:
        """
        Parse a media type string.

        Spaces are removed and the text is lower-cased before parsing.
        A repeated parameter key is treated as malformed.

        Returns:
            The parsed MediaType, or None if the text is malformed
        """
        if text is None:
            raise TypeError("media type text must not be None")

        text = text.replace(" ", "").lower()

        parts = text.split("/")
        if len(parts) != 2:
            return None
        main_type, rest = parts
        if not _is_token(main_type):
            return None

        parts = rest.split(".")
        if len(parts) > 2:
            return None
        tree = ""
        if len(parts) == 2:
            tree, rest = parts
            if not _is_token(tree):
                return None

        pieces = rest.split(";")
        parameters: dict[str, str] = {}
        for piece in pieces[1:]:
            pair = piece.split("=")
            if len(pair) != 2:
                return None
            key, value = pair
            if not _is_token(key) or not _is_token(value):
                return None
            if key in parameters:
                logger.debug(f"Duplicate media type parameter {key!r} in {text!r}")
                return None
            parameters[key] = value

        parts = pieces[0].split("+")
        if len(parts) > 2:
            return None
        sub_type = parts[0]
        if not _is_token(sub_type):
            return None
        suffix = ""
        if len(parts) == 2:
            suffix = parts[1]
            if not _is_token(suffix):
                return None

        return cls(main_type, sub_type, tree, suffix, parameters)

    @classmethod
    def parse(cls, text: str) -> MediaType:
        """Parse a media type string, raising MediaTypeFormatError on failure."""
        result = cls.try_parse(text)
        if result is None:
            raise MediaTypeFormatError(f"malformed media type: {text!r}")
        return result

    @classmethod
    def from_headers(cls, headers: Headers) -> MediaType | None:
        """Read the content-type header, returning None if absent or malformed."""
        value = headers.get("content-type")
        if not value:
            return None
        return cls.try_parse(value)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def is_more_specific(self, other: MediaType) -> bool:
        """
        Check whether this type satisfies `other` at least as specifically.

        type and sub_type must match; a non-empty tree or suffix on `other`
        must match exactly; shared parameters must agree, and every
        parameter of `other` must be present here with the same value.
        """
        if self.type != other.type or self.sub_type != other.sub_type:
            return False

        if other.tree and self.tree != other.tree:
            return False

        if other.suffix and self.suffix != other.suffix:
            return False

        for key, value in self.parameters.items():
            if key in other.parameters and other.parameters[key] != value:
                return False

        for key, value in other.parameters.items():
            if self.parameters.get(key) != value:
                return False

        return True

    def __str__(self) -> str:
        result = f"{self.type}/"
        if self.tree:
            result += f"{self.tree}."
        result += self.sub_type
        if self.suffix:
            result += f"+{self.suffix}"
        for key, value in self.parameters.items():
            result += f"; {key}={value}"
        return result

    def __repr__(self) -> str:
        return f"MediaType({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MediaType):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __lt__(self, other: MediaType) -> bool:
        if not isinstance(other, MediaType):
            return NotImplemented
        return str(self) < str(other)

    def __le__(self, other: MediaType) -> bool:
        if not isinstance(other, MediaType):
            return NotImplemented
        return str(self) <= str(other)

    def __gt__(self, other: MediaType) -> bool:
        if not isinstance(other, MediaType):
            return NotImplemented
        return str(self) > str(other)

    def __ge__(self, other: MediaType) -> bool:
        if not isinstance(other, MediaType):
            return NotImplemented
        return str(self) >= str(other)


# =============================================================================
# Well-known media types
# =============================================================================

JAVASCRIPT = MediaType("application", "javascript")
JSON = MediaType("application", "json")
XML = MediaType("application", "xml")
ZIP = MediaType("application", "zip")
PDF = MediaType("application", "pdf")
BINARY = MediaType("application", "octet-stream")
MPEG = MediaType("audio", "mpeg")
VORBIS = MediaType("audio", "vorbis")
CSS = MediaType("text", "css")
HTML = MediaType("text", "html")
TEXT = MediaType("text", "plain")
TEXT_XML = MediaType("text", "xml")
PNG = MediaType("image", "png")
JPEG = MediaType("image", "jpeg")
GIF = MediaType("image", "gif")

WELL_KNOWN: Mapping[str, MediaType] = MappingProxyType(
    {
        "javascript": JAVASCRIPT,
        "json": JSON,
        "xml": XML,
        "zip": ZIP,
        "pdf": PDF,
        "binary": BINARY,
        "mpeg": MPEG,
        "vorbis": VORBIS,
        "css": CSS,
        "html": HTML,
        "text": TEXT,
        "text_xml": TEXT_XML,
        "png": PNG,
        "jpeg": JPEG,
        "gif": GIF,
    }
)
