"""
Built-in pipeline steps.

Each factory returns a Step descriptor that the pipeline runs against a
StepContext.
"""

from httpreader.pipeline.steps.content import ensure_content_type
from httpreader.pipeline.steps.content import ensure_html_content
from httpreader.pipeline.steps.content import ensure_json_content
from httpreader.pipeline.steps.content import ensure_text_content
from httpreader.pipeline.steps.content import ensure_xml_content
from httpreader.pipeline.steps.content import use_content
from httpreader.pipeline.steps.content import use_content_type
from httpreader.pipeline.steps.decode import DecompressionError
from httpreader.pipeline.steps.decode import decompress
from httpreader.pipeline.steps.decode import use_brotli_decompression
from httpreader.pipeline.steps.decode import use_deflate_decompression
from httpreader.pipeline.steps.decode import use_gzip_decompression
from httpreader.pipeline.steps.decode import use_zstd_decompression
from httpreader.pipeline.steps.general import ensure_status_code
from httpreader.pipeline.steps.general import use_reason_phrase
from httpreader.pipeline.steps.general import use_status_code
from httpreader.pipeline.steps.headers import ensure_header
from httpreader.pipeline.steps.headers import header_equals
from httpreader.pipeline.steps.headers import require_header
from httpreader.pipeline.steps.headers import use_header

__all__ = [
    "DecompressionError",
    "decompress",
    "ensure_content_type",
    "ensure_header",
    "ensure_html_content",
    "ensure_json_content",
    "ensure_status_code",
    "ensure_text_content",
    "ensure_xml_content",
    "header_equals",
    "require_header",
    "use_brotli_decompression",
    "use_content",
    "use_content_type",
    "use_deflate_decompression",
    "use_gzip_decompression",
    "use_header",
    "use_reason_phrase",
    "use_status_code",
    "use_zstd_decompression",
]
