"""
Step context for a single pipeline execution.

StepContext holds:
- The message being processed (its content may be replaced by steps)
- The caller's accumulator, for pipelines built with accumulate=True
- The charset used when a text body declares none
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import TYPE_CHECKING

from httpreader.config import config

if TYPE_CHECKING:
    from httpreader.message import ResponseMessage


@dataclass
class StepContext:
    """
    Context passed to every step of one execution.

    Steps must not keep a reference to the context or its message after
    they return.
    """

    message: ResponseMessage
    accumulator: Any = None
    accumulate: bool = False
    default_charset: str = config.default_charset

    def deliver(self, callback: Callable[..., Any], *values: Any) -> Any:
        """
        Hand extracted values to a caller callback.

        The accumulator is appended as the final argument when the pipeline
        threads one.
        """
        if self.accumulate:
            return callback(*values, self.accumulator)
        return callback(*values)

    def charset(self) -> str:
        """Charset of the current content, from its content-type parameters."""
        media_type = self.message.content_type
        if media_type is not None and "charset" in media_type.parameters:
            return media_type.parameters["charset"]
        return self.default_charset

    def read_text(self) -> str:
        """Materialize the current content as text."""
        return self.message.content.text(self.charset())
