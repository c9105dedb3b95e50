"""
Header steps for the pipeline.

Headers are looked up in the message headers first, then in the content
headers. Values are passed to callbacks as a list of strings.
"""

from __future__ import annotations

import logging
from typing import Any
from typing import Callable
from typing import TYPE_CHECKING

from httpreader.pipeline.step import Step

if TYPE_CHECKING:
    from httpreader.pipeline.context import StepContext

logger = logging.getLogger(__name__)


def ensure_header(name: str, predicate: Callable[..., bool]) -> Step:
    """
    Require a header and check its values.

    Fails if the header is missing, otherwise reports `predicate(values)`.
    """

    def run(context: StepContext) -> bool:
        values = context.message.get_header(name)
        if values is None:
            logger.debug(f"ensure_header: {name} missing")
            return False
        return bool(context.deliver(predicate, values))

    return Step.predicate(f"ensure_header:{name}", run)


def require_header(name: str, action: Callable[..., Any]) -> Step:
    """Require a header and hand its values to `action`."""

    def run(context: StepContext) -> bool:
        values = context.message.get_header(name)
        if values is None:
            logger.debug(f"require_header: {name} missing")
            return False
        context.deliver(action, values)
        return True

    return Step.predicate(f"require_header:{name}", run)


def use_header(name: str, action: Callable[..., Any]) -> Step:
    """Hand a header's values to `action` if present. Never fails."""

    def run(context: StepContext) -> None:
        values = context.message.get_header(name)
        if values is not None:
            context.deliver(action, values)

    return Step.action(f"use_header:{name}", run)


def header_equals(name: str, expected: str) -> Step:
    """Require a header with at least one value equal to `expected`."""

    def run(context: StepContext) -> bool:
        values = context.message.get_header(name)
        if values is None:
            return False
        return any(value.strip() == expected for value in values)

    return Step.predicate(f"header_equals:{name}", run)
