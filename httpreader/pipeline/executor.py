"""
Pipeline executor that runs a series of steps against a response.

The ResponsePipeline class:
1. Collects step descriptors through its builder methods (or add())
2. Runs them in the order they were added
3. Passes a StepContext through each step
4. Returns whether every step that ran succeeded

A pipeline is single-use: executing it drains its steps.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any
from typing import Callable
from typing import TYPE_CHECKING

from httpreader.config import config
from httpreader.media_type import MediaType
from httpreader.pipeline import steps
from httpreader.pipeline.context import StepContext
from httpreader.pipeline.step import Step

if TYPE_CHECKING:
    from httpreader.message import ResponseMessage

logger = logging.getLogger(__name__)


class ResponsePipeline:
    """
    An ordered, single-use sequence of steps over a response.

    With accumulate=False callbacks receive only the extracted value(s).
    With accumulate=True the accumulator given to execute() is passed as
    the final argument of every callback, e.g.:

        pipeline = ResponsePipeline(accumulate=True)
        pipeline.use_gzip_decompression().ensure_json_content(
            lambda value, record: record.update(value)
        )
        ok = pipeline.execute(message, accumulator=record)
    """

    def __init__(self, accumulate: bool = False):
        self.accumulate = accumulate
        self._steps: deque[Step] = deque()

    def add(self, step: Step) -> ResponsePipeline:
        """Append a step descriptor."""
        self._steps.append(step)
        return self

    @property
    def steps(self) -> tuple[Step, ...]:
        """The steps still waiting to run."""
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def execute(
        self,
        message: ResponseMessage,
        accumulator: Any = None,
        halt_on_failure: bool | None = None,
    ) -> bool:
        """
        Run all pending steps against the message.

        Args:
            message: The response to process. Its content may be replaced.
            accumulator: Caller-owned object handed to callbacks when the
                pipeline was built with accumulate=True
            halt_on_failure: Stop at the first failing step. Defaults to
                Config.halt_on_failure.

        Returns:
            True if every step that ran succeeded

        Raises:
            DecompressionError: If a codec fails on the body
        """
        if halt_on_failure is None:
            halt_on_failure = config.halt_on_failure

        context = StepContext(
            message=message,
            accumulator=accumulator,
            accumulate=self.accumulate,
            default_charset=config.default_charset,
        )

        success = True
        try:
            while self._steps:
                step = self._steps.popleft()
                ok = step.run(context)
                logger.debug(f"Step {step.name}: {'ok' if ok else 'failed'}")
                success = success and ok

                if not success and halt_on_failure:
                    if self._steps:
                        logger.debug(
                            f"Pipeline halted at {step.name}, discarding {len(self._steps)} steps"
                        )
                    break
        finally:
            # Single-use: steps left after a halt or a raised error are discarded
            self._steps.clear()

        return success

    # -------------------------------------------------------------------------
    # Headers
    # -------------------------------------------------------------------------

    def ensure_header(self, name: str, predicate: Callable[..., bool]) -> ResponsePipeline:
        return self.add(steps.ensure_header(name, predicate))

    def require_header(self, name: str, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.require_header(name, action))

    def use_header(self, name: str, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.use_header(name, action))

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def ensure_content_type(self, required: MediaType | str) -> ResponsePipeline:
        return self.add(steps.ensure_content_type(required))

    def use_content_type(self, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.use_content_type(action))

    def ensure_html_content(self, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.ensure_html_content(action))

    def ensure_text_content(self, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.ensure_text_content(action))

    def ensure_json_content(
        self,
        action: Callable[..., Any],
        factory: Callable[[Any], Any] | None = None,
    ) -> ResponsePipeline:
        return self.add(steps.ensure_json_content(action, factory))

    def ensure_xml_content(self, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.ensure_xml_content(action))

    def use_content(self, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.use_content(action))

    # -------------------------------------------------------------------------
    # Compression
    # -------------------------------------------------------------------------

    def use_gzip_decompression(self, strip_encoding: bool | None = None) -> ResponsePipeline:
        return self.add(steps.use_gzip_decompression(strip_encoding))

    def use_deflate_decompression(self, strip_encoding: bool | None = None) -> ResponsePipeline:
        return self.add(steps.use_deflate_decompression(strip_encoding))

    def use_brotli_decompression(self, strip_encoding: bool | None = None) -> ResponsePipeline:
        return self.add(steps.use_brotli_decompression(strip_encoding))

    def use_zstd_decompression(self, strip_encoding: bool | None = None) -> ResponsePipeline:
        return self.add(steps.use_zstd_decompression(strip_encoding))

    # -------------------------------------------------------------------------
    # Status line
    # -------------------------------------------------------------------------

    def use_status_code(self, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.use_status_code(action))

    def ensure_status_code(self, predicate: Callable[..., bool]) -> ResponsePipeline:
        return self.add(steps.ensure_status_code(predicate))

    def use_reason_phrase(self, action: Callable[..., Any]) -> ResponsePipeline:
        return self.add(steps.use_reason_phrase(action))

    # -------------------------------------------------------------------------
    # Declarative construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_operations(
        cls,
        operations: list[dict],
        accumulate: bool = False,
    ) -> ResponsePipeline:
        """
        Build a pipeline from operation dicts, e.g.:

            [
                {"op": "decompress", "encoding": "gzip"},
                {"op": "ensure_content_type", "media_type": "application/json"},
                {"op": "ensure_header", "name": "x-request-id"},
                {"op": "ensure_status_code", "codes": [200, 201]},
            ]

        Operations missing an 'op' field or naming an unknown op are skipped.
        """
        pipeline = cls(accumulate=accumulate)
        for op_config in operations:
            op_name = op_config.get("op")
            if not op_name:
                logger.warning("Pipeline operation missing 'op' field")
                continue

            handler = OPERATIONS.get(op_name)
            if not handler:
                logger.warning(f"Unknown pipeline operation: {op_name}")
                continue

            pipeline.add(handler(op_config))

        return pipeline


def _decompress_op(op_config: dict) -> Step:
    encoding = op_config.get("encoding")
    if not encoding:
        raise ValueError("decompress: missing 'encoding' field")
    return steps.decompress(encoding, op_config.get("strip_encoding"))


def _ensure_content_type_op(op_config: dict) -> Step:
    media_type = op_config.get("media_type")
    if not media_type:
        raise ValueError("ensure_content_type: missing 'media_type' field")
    return steps.ensure_content_type(media_type)


def _ensure_header_op(op_config: dict) -> Step:
    name = op_config.get("name")
    if not name:
        raise ValueError("ensure_header: missing 'name' field")
    if "value" in op_config:
        return steps.header_equals(name, op_config["value"])
    return steps.ensure_header(name, lambda *args: True)


def _ensure_status_code_op(op_config: dict) -> Step:
    codes = set(op_config.get("codes", []))
    if not codes:
        raise ValueError("ensure_status_code: missing 'codes' field")
    return steps.ensure_status_code(lambda code, *args: code in codes)


# Operation registry: op_name -> step factory
OPERATIONS: dict[str, Callable[[dict], Step]] = {
    "decompress": _decompress_op,
    "ensure_content_type": _ensure_content_type_op,
    "ensure_header": _ensure_header_op,
    "ensure_status_code": _ensure_status_code_op,
}


def execute_pipeline(
    message: ResponseMessage,
    operations: list[dict],
    halt_on_failure: bool | None = None,
) -> bool:
    """
    Convenience function to build and run a declarative pipeline.

    Returns:
        True if every step that ran succeeded
    """
    pipeline = ResponsePipeline.from_operations(operations)
    return pipeline.execute(message, halt_on_failure=halt_on_failure)
