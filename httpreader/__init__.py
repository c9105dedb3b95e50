"""
httpreader: declarative processing of received HTTP responses.

Build a ResponsePipeline of checks and transformations, then execute it
against a ResponseMessage.
"""

from httpreader.media_type import MediaType
from httpreader.media_type import MediaTypeFormatError
from httpreader.message import Content
from httpreader.message import ResponseMessage
from httpreader.pipeline import ResponsePipeline
from httpreader.pipeline import Step
from httpreader.pipeline.steps import DecompressionError

__all__ = [
    "Content",
    "DecompressionError",
    "MediaType",
    "MediaTypeFormatError",
    "ResponseMessage",
    "ResponsePipeline",
    "Step",
]
