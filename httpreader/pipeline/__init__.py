"""
Pipeline package for processing received responses.

A pipeline is built from steps (see httpreader.pipeline.steps):
- headers: require, check or observe header values
- content: gate on the content type, deliver html/text/json/xml bodies
- decode: gzip, deflate, br, zstd decompression
- general: observe or check the status line
"""

from httpreader.pipeline.context import StepContext
from httpreader.pipeline.executor import ResponsePipeline
from httpreader.pipeline.step import Step

__all__ = ["ResponsePipeline", "Step", "StepContext"]
